"""Composite outbreak risk from positivity, clustering and temporal signals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from labguard.rules import Findings, Rule, ScoreAccumulator, apply_rules
from labguard.surveillance.models import (
    ActionItem,
    ClusterReport,
    RiskAssessment,
    RiskTier,
    SurveillanceMetrics,
    SurveillanceSample,
    TemporalPatterns,
)

HIGH_POSITIVITY_RATE = 15.0
MODERATE_POSITIVITY_RATE = 5.0
HIGH_RISK_SCORE = 70
MEDIUM_RISK_SCORE = 40

TIER_RECOMMENDATIONS: Dict[str, List[str]] = {
    "high": [
        "Implement immediate vector control measures",
        "Increase surveillance frequency to daily",
        "Consider public health advisories",
        "Deploy additional mosquito traps in cluster areas",
    ],
    "medium": [
        "Enhance vector control in affected areas",
        "Increase surveillance to 3x per week",
        "Monitor for increasing trends",
    ],
    "low": [
        "Maintain routine surveillance protocols",
        "Continue baseline monitoring",
    ],
}


@dataclass(frozen=True)
class RiskSignals:
    metrics: SurveillanceMetrics
    clusters: ClusterReport
    temporal: TemporalPatterns

    @property
    def positivity_rate(self) -> float:
        return self.metrics.positivity_rate


RISK_FACTORS: List[Rule[RiskSignals]] = [
    Rule(
        code="HIGH_POSITIVITY",
        bucket="warning",
        applies=lambda s: s.positivity_rate > HIGH_POSITIVITY_RATE,
        message=lambda s: "High positivity rate",
    ),
    Rule(
        code="MODERATE_POSITIVITY",
        bucket="warning",
        applies=lambda s: MODERATE_POSITIVITY_RATE < s.positivity_rate <= HIGH_POSITIVITY_RATE,
        message=lambda s: "Moderate positivity rate",
    ),
    Rule(
        code="GEOGRAPHIC_CLUSTERING",
        bucket="warning",
        applies=lambda s: s.clusters.cluster_count > 0,
        message=lambda s: "Geographic clustering detected",
    ),
    Rule(
        code="TEMPORAL_ANOMALIES",
        bucket="warning",
        applies=lambda s: bool(s.temporal.anomalies),
        message=lambda s: "Temporal anomalies detected",
    ),
    Rule(
        code="INCREASING_TREND",
        bucket="warning",
        applies=lambda s: s.temporal.trend == "increasing",
        message=lambda s: "Upward trend in cases",
    ),
]

# Weights only ever add, so the score is non-decreasing in each signal.
FACTOR_WEIGHTS: Dict[str, int] = {
    "HIGH_POSITIVITY": 40,
    "MODERATE_POSITIVITY": 20,
    "GEOGRAPHIC_CLUSTERING": 30,
    "TEMPORAL_ANOMALIES": 25,
    "INCREASING_TREND": 15,
}


def compute_metrics(samples: Sequence[SurveillanceSample]) -> SurveillanceMetrics:
    total = len(samples)
    positive = sum(1 for s in samples if s.result == "positive")
    rate = (positive / total * 100.0) if total else 0.0
    return SurveillanceMetrics(
        total_pools=total,
        positive_pools=positive,
        positivity_rate=round(rate, 2),
    )


def risk_tier(score: int) -> RiskTier:
    if score >= HIGH_RISK_SCORE:
        return "high"
    if score >= MEDIUM_RISK_SCORE:
        return "medium"
    return "low"


def assess_risk(
    metrics: SurveillanceMetrics,
    clusters: ClusterReport,
    temporal: TemporalPatterns,
) -> RiskAssessment:
    signals = RiskSignals(metrics, clusters, temporal)
    findings = Findings()
    score = ScoreAccumulator(start=0, floor=0, ceiling=100)
    apply_rules(RISK_FACTORS, signals, findings)
    for code in findings.fired:
        score.credit(FACTOR_WEIGHTS[code])

    tier = risk_tier(score.value)
    return RiskAssessment(
        risk_score=score.value,
        risk_level=tier,
        contributing_factors=findings.warnings,
        recommendations=list(TIER_RECOMMENDATIONS[tier]),
    )


def build_narrative(metrics: SurveillanceMetrics) -> str:
    narrative = (
        f"During the reporting period, {metrics.total_pools} mosquito pools were "
        "tested for West Nile Virus. "
        f"Of these, {metrics.positive_pools} pools tested positive, resulting in a "
        f"positivity rate of {metrics.positivity_rate:.1f}%. "
    )
    if metrics.positivity_rate > HIGH_POSITIVITY_RATE:
        narrative += (
            "The elevated positivity rate suggests increased viral circulation. "
            "Enhanced surveillance and vector control measures are recommended."
        )
    elif metrics.positivity_rate > MODERATE_POSITIVITY_RATE:
        narrative += "Moderate viral activity detected. Continue routine surveillance protocols."
    else:
        narrative += "Low viral activity observed. Maintain standard surveillance practices."
    return narrative


def build_action_items(
    metrics: SurveillanceMetrics,
    clusters: ClusterReport,
    temporal: TemporalPatterns,
) -> List[ActionItem]:
    items: List[ActionItem] = []
    if clusters.cluster_count > 0:
        items.append(
            ActionItem(
                type="geographic",
                priority="high",
                action="Target vector control in cluster areas",
                details=(
                    f"{clusters.cluster_count} geographic clusters detected requiring "
                    "focused intervention"
                ),
            )
        )
    if temporal.anomalies:
        items.append(
            ActionItem(
                type="temporal",
                priority="medium",
                action="Investigate temporal anomalies",
                details=(
                    f"{len(temporal.anomalies)} temporal anomalies detected requiring "
                    "investigation"
                ),
            )
        )
    if metrics.positivity_rate > HIGH_POSITIVITY_RATE:
        items.append(
            ActionItem(
                type="surveillance",
                priority="critical",
                action="Implement enhanced surveillance",
                details="High positivity rate requires immediate response measures",
            )
        )
    return items
