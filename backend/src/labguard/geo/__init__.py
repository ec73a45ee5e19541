from labguard.geo.haversine import EARTH_RADIUS_KM, LatLng, centroid, haversine_km

__all__ = ["EARTH_RADIUS_KM", "LatLng", "centroid", "haversine_km"]
