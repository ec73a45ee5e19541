"""Great-circle distances between (latitude, longitude) points in degrees."""

from __future__ import annotations

import math
from typing import Sequence, Tuple

LatLng = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: LatLng, destination: LatLng) -> float:
    lat1, lng1 = (math.radians(v) for v in origin)
    lat2, lng2 = (math.radians(v) for v in destination)
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
    )
    # Rounding can push h a hair past 1 for antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def centroid(points: Sequence[LatLng]) -> LatLng:
    """Arithmetic mean position; adequate for clusters a few km across."""
    if not points:
        raise ValueError("centroid of an empty point set")
    return (
        sum(lat for lat, _ in points) / len(points),
        sum(lng for _, lng in points) / len(points),
    )
