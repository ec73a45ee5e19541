"""Week-over-week anomaly detection on positive pool counts."""

from __future__ import annotations

import logging
import statistics
from collections import Counter
from typing import List, Optional, Sequence

from labguard.config import SurveillancePolicy, load_surveillance_policy
from labguard.surveillance.models import (
    SurveillanceSample,
    TemporalAnomaly,
    TemporalPatterns,
    Trend,
    WeeklyCount,
)

logger = logging.getLogger(__name__)


def weekly_counts(samples: Sequence[SurveillanceSample]) -> List[WeeklyCount]:
    """Positive and total counts for every week from the first to the last sampled week."""
    if not samples:
        return []
    totals = Counter(s.collection_week for s in samples)
    positives = Counter(s.collection_week for s in samples if s.result == "positive")
    first, last = min(totals), max(totals)
    return [
        WeeklyCount(week=week, positive_count=positives[week], total_count=totals[week])
        for week in range(first, last + 1)
    ]


def analyze_temporal_patterns(
    samples: Sequence[SurveillanceSample],
    policy: Optional[SurveillancePolicy] = None,
) -> TemporalPatterns:
    policy = policy or load_surveillance_policy()
    counts = weekly_counts(samples)
    sampled_weeks = {s.collection_week for s in samples}
    if len(sampled_weeks) < policy.min_weeks:
        return TemporalPatterns(trend="insufficient_data", weekly_counts=counts)

    series = [c.positive_count for c in counts]
    anomalies: List[TemporalAnomaly] = []
    for index, count in enumerate(counts):
        baseline = series[max(0, index - policy.baseline_window_weeks):index]
        if len(baseline) < policy.min_baseline_weeks:
            continue
        expected = statistics.fmean(baseline)
        spread = max(statistics.pstdev(baseline), policy.std_floor)
        z_score = (count.positive_count - expected) / spread
        if abs(z_score) <= policy.z_threshold:
            continue
        anomalies.append(
            TemporalAnomaly(
                week=count.week,
                positive_count=count.positive_count,
                expected_count=round(expected, 2),
                z_score=round(z_score, 2),
                type="spike" if z_score > 0 else "dip",
            )
        )

    slope = _least_squares_slope(series)
    patterns = TemporalPatterns(
        anomalies=anomalies,
        trend=_classify_trend(slope, policy.trend_slope_tolerance),
        weekly_average=round(statistics.fmean(series), 2),
        slope_per_week=round(slope, 4),
        weekly_counts=counts,
    )
    logger.info(
        "Temporal analysis: %s weeks, %s anomalies, trend %s",
        len(series),
        len(anomalies),
        patterns.trend,
    )
    return patterns


def _least_squares_slope(series: Sequence[int]) -> float:
    n = len(series)
    if n < 2:
        return 0.0
    x_mean = (n - 1) / 2
    y_mean = statistics.fmean(series)
    numerator = sum((x - x_mean) * (y - y_mean) for x, y in enumerate(series))
    denominator = sum((x - x_mean) ** 2 for x in range(n))
    return numerator / denominator


def _classify_trend(slope: float, tolerance: float) -> Trend:
    if slope > tolerance:
        return "increasing"
    if slope < -tolerance:
        return "decreasing"
    return "stable"
