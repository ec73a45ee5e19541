"""Surveillance sample, cluster, anomaly and risk records."""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Literal

RiskTier = Literal["low", "medium", "high"]
Trend = Literal["increasing", "stable", "decreasing", "insufficient_data"]


class SurveillanceSample(BaseModel):
    model_config = ConfigDict(frozen=True)

    pool_id: str
    result: Literal["positive", "negative"]
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    # Running week index; continues past 52/53 across a year boundary.
    collection_week: int = Field(ge=1)

    @property
    def located(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def position(self) -> Optional[Tuple[float, float]]:
        if not self.located:
            return None
        return (self.latitude, self.longitude)


class SurveillanceMetrics(BaseModel):
    total_pools: int = Field(default=0, ge=0)
    positive_pools: int = Field(default=0, ge=0)
    positivity_rate: float = Field(default=0.0, ge=0, le=100)


class Cluster(BaseModel):
    cluster_id: int
    pool_ids: List[str]
    sample_count: int
    center_lat: float
    center_lng: float
    radius_km: float
    density_per_km2: float
    risk_level: RiskTier


class ClusterReport(BaseModel):
    clusters: List[Cluster] = Field(default_factory=list)
    cluster_count: int = 0
    total_positive_samples: int = 0
    unlocated_positive_samples: int = 0


class TemporalAnomaly(BaseModel):
    week: int
    positive_count: int
    expected_count: float
    z_score: float
    type: Literal["spike", "dip"]


class WeeklyCount(BaseModel):
    week: int
    positive_count: int
    total_count: int


class TemporalPatterns(BaseModel):
    anomalies: List[TemporalAnomaly] = Field(default_factory=list)
    trend: Trend
    weekly_average: Optional[float] = None
    slope_per_week: Optional[float] = None
    weekly_counts: List[WeeklyCount] = Field(default_factory=list)


class RiskAssessment(BaseModel):
    risk_score: int = Field(ge=0, le=100)
    risk_level: RiskTier
    contributing_factors: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ActionItem(BaseModel):
    type: Literal["geographic", "temporal", "surveillance"]
    priority: Literal["critical", "high", "medium", "low"]
    action: str
    details: str


class SurveillanceAnalysis(BaseModel):
    metrics: SurveillanceMetrics
    geographic_clusters: ClusterReport
    temporal_patterns: TemporalPatterns
    report_narrative: str
    risk_assessment: RiskAssessment
    recommendations: List[ActionItem] = Field(default_factory=list)


class SurveillanceBatch(BaseModel):
    """Wire shape accepted by the payload entry point."""

    samples: List[SurveillanceSample] = Field(default_factory=list)
    metrics: Optional[SurveillanceMetrics] = None
