"""Geographic grouping of positive pools."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from labguard.config import SurveillancePolicy, load_surveillance_policy
from labguard.geo import centroid, haversine_km
from labguard.surveillance.models import Cluster, ClusterReport, RiskTier, SurveillanceSample

logger = logging.getLogger(__name__)


def detect_geographic_clusters(
    samples: Sequence[SurveillanceSample],
    policy: Optional[SurveillancePolicy] = None,
) -> ClusterReport:
    """
    Group located positive samples by single-linkage proximity.

    Two samples are linked when they lie within ``cluster_radius_km`` of each
    other; a cluster is every sample reachable through such links. Groups
    smaller than ``min_cluster_size`` are not reported.
    """
    policy = policy or load_surveillance_policy()
    positives = [s for s in samples if s.result == "positive"]
    located = [s for s in positives if s.located]
    report = ClusterReport(
        total_positive_samples=len(positives),
        unlocated_positive_samples=len(positives) - len(located),
    )
    if len(positives) < 2:
        return report

    clusters: List[Cluster] = []
    for members in _linked_groups(located, policy.cluster_radius_km):
        if len(members) < policy.min_cluster_size:
            continue
        clusters.append(_describe(len(clusters) + 1, members, policy))

    report.clusters = clusters
    report.cluster_count = len(clusters)
    logger.info(
        "Clustering: %s positives (%s located) -> %s clusters",
        len(positives),
        len(located),
        len(clusters),
    )
    return report


def density_tier(density_per_km2: float, policy: SurveillancePolicy) -> RiskTier:
    if density_per_km2 >= policy.high_density_per_km2:
        return "high"
    if density_per_km2 >= policy.medium_density_per_km2:
        return "medium"
    return "low"


def _linked_groups(
    located: Sequence[SurveillanceSample], radius_km: float
) -> List[List[SurveillanceSample]]:
    seen = [False] * len(located)
    groups: List[List[SurveillanceSample]] = []
    for start in range(len(located)):
        if seen[start]:
            continue
        seen[start] = True
        frontier = [start]
        indices = [start]
        while frontier:
            current = frontier.pop()
            for other in range(len(located)):
                if seen[other]:
                    continue
                distance = haversine_km(located[current].position, located[other].position)
                if distance <= radius_km:
                    seen[other] = True
                    frontier.append(other)
                    indices.append(other)
        groups.append([located[i] for i in sorted(indices)])
    return groups


def _describe(
    cluster_id: int, members: List[SurveillanceSample], policy: SurveillancePolicy
) -> Cluster:
    center = centroid([m.position for m in members])
    radius = max(haversine_km(center, m.position) for m in members)
    effective_radius = max(radius, policy.min_radius_km)
    density = len(members) / (math.pi * effective_radius ** 2)
    return Cluster(
        cluster_id=cluster_id,
        pool_ids=[m.pool_id for m in members],
        sample_count=len(members),
        center_lat=round(center[0], 6),
        center_lng=round(center[1], 6),
        radius_km=round(radius, 3),
        density_per_km2=round(density, 4),
        risk_level=density_tier(density, policy),
    )
