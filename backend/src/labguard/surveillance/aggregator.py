"""Batch surveillance analysis: clustering + anomalies -> risk."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Sequence, Union

from pydantic import ValidationError

from labguard.compliance.models import InvalidSubmission
from labguard.compliance.submissions import format_validation_errors
from labguard.config import SurveillancePolicy, load_surveillance_policy
from labguard.surveillance.anomalies import analyze_temporal_patterns
from labguard.surveillance.clustering import detect_geographic_clusters
from labguard.surveillance.models import (
    SurveillanceAnalysis,
    SurveillanceBatch,
    SurveillanceMetrics,
    SurveillanceSample,
)
from labguard.surveillance.risk import (
    assess_risk,
    build_action_items,
    build_narrative,
    compute_metrics,
)

logger = logging.getLogger(__name__)


def analyze_surveillance(
    samples: Sequence[SurveillanceSample],
    metrics: Optional[SurveillanceMetrics] = None,
    policy: Optional[SurveillancePolicy] = None,
    parallel: bool = True,
) -> SurveillanceAnalysis:
    """
    Run clustering and temporal analysis over one batch and compose the risk.

    The two detectors share nothing, so they run side by side when
    ``parallel`` is set; risk composition waits for both.
    """
    policy = policy or load_surveillance_policy()
    metrics = metrics or compute_metrics(samples)

    if parallel:
        with ThreadPoolExecutor(max_workers=2) as executor:
            clusters_future = executor.submit(detect_geographic_clusters, samples, policy)
            temporal_future = executor.submit(analyze_temporal_patterns, samples, policy)
            clusters = clusters_future.result()
            temporal = temporal_future.result()
    else:
        clusters = detect_geographic_clusters(samples, policy)
        temporal = analyze_temporal_patterns(samples, policy)

    risk = assess_risk(metrics, clusters, temporal)
    analysis = SurveillanceAnalysis(
        metrics=metrics,
        geographic_clusters=clusters,
        temporal_patterns=temporal,
        report_narrative=build_narrative(metrics),
        risk_assessment=risk,
        recommendations=build_action_items(metrics, clusters, temporal),
    )
    logger.info(
        "Surveillance batch: %s pools, %.1f%% positive, risk %s",
        metrics.total_pools,
        metrics.positivity_rate,
        risk.risk_level,
    )
    return analysis


def analyze_payload(
    payload: Dict[str, Any],
    policy: Optional[SurveillancePolicy] = None,
) -> Union[SurveillanceAnalysis, InvalidSubmission]:
    try:
        batch = SurveillanceBatch.model_validate(payload)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        logger.info("Rejected surveillance batch: %s field errors", len(errors))
        return InvalidSubmission(kind="surveillance", errors=errors)
    return analyze_surveillance(batch.samples, metrics=batch.metrics, policy=policy)


if __name__ == "__main__":
    sample_batch = [
        SurveillanceSample(pool_id="P-001", result="positive", latitude=32.7767, longitude=-96.7970, collection_week=28),
        SurveillanceSample(pool_id="P-002", result="positive", latitude=32.7790, longitude=-96.8001, collection_week=29),
        SurveillanceSample(pool_id="P-003", result="negative", latitude=32.9000, longitude=-97.1000, collection_week=29),
        SurveillanceSample(pool_id="P-004", result="negative", collection_week=30),
        SurveillanceSample(pool_id="P-005", result="positive", latitude=32.7755, longitude=-96.7990, collection_week=31),
        SurveillanceSample(pool_id="P-006", result="negative", collection_week=31),
    ]
    result = analyze_surveillance(sample_batch)
    # P-001, P-002 and P-005 sit within a few hundred metres of each other and
    # form one cluster; four sampled weeks is just enough for a trend.
    print(json.dumps(result.model_dump(), indent=2))
