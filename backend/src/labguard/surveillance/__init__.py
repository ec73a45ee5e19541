"""Disease-surveillance analytics: clustering, temporal anomalies, risk."""

from labguard.surveillance.aggregator import analyze_payload, analyze_surveillance
from labguard.surveillance.anomalies import analyze_temporal_patterns, weekly_counts
from labguard.surveillance.clustering import detect_geographic_clusters
from labguard.surveillance.risk import assess_risk, compute_metrics

__all__ = [
    "analyze_payload",
    "analyze_surveillance",
    "analyze_temporal_patterns",
    "assess_risk",
    "compute_metrics",
    "detect_geographic_clusters",
    "weekly_counts",
]
