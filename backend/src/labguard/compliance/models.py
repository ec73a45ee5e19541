"""Submission and verdict records for the compliance validators."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Literal


class Submission(BaseModel):
    model_config = ConfigDict(frozen=True)


class Verdict(BaseModel):
    """Common shape every validator output can be rendered as."""

    is_valid: bool
    violations: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    score: Optional[int] = None


class InvalidSubmission(BaseModel):
    kind: str
    errors: List[str] = Field(default_factory=list)
    is_valid: Literal[False] = False


# PCR protocols


class Reagent(Submission):
    name: Optional[str] = None
    lot_id: Optional[str] = None
    expiry_date: Optional[date] = None
    concentration: Optional[str] = None


class ThermalProfile(Submission):
    denaturation_c: float
    annealing_c: float
    extension_c: float


class PCRControls(Submission):
    positive_control_id: Optional[str] = None
    negative_control_id: Optional[str] = None
    internal_control_id: Optional[str] = None


class PCRProtocolSubmission(Submission):
    name: str
    reagents: List[Reagent] = Field(default_factory=list)
    thermal_profile: ThermalProfile
    cycle_count: int
    quality_control: PCRControls = Field(default_factory=PCRControls)


class PCRVerdict(BaseModel):
    is_valid: bool
    violations: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    compliance_score: int = Field(ge=0, le=100)

    def to_verdict(self) -> Verdict:
        return Verdict(
            is_valid=self.is_valid,
            violations=list(self.violations),
            recommendations=list(self.recommendations),
            score=self.compliance_score,
        )


# Culture media lots


class StorageConditions(Submission):
    temperature_c: float
    humidity_percent: float


class MediaQualityControl(Submission):
    sterility_test_passed: bool
    performance_test_passed: bool
    ph: float


class MediaLotSubmission(Submission):
    media_type: str
    lot_id: str
    expiry_date: date
    storage: StorageConditions
    quality_control: MediaQualityControl
    storage_requirement: Literal["2-8c", "room-temp", "frozen", "ultra-cold"] = "2-8c"
    visual_inspection_notes: Optional[str] = None


class MediaVerdict(BaseModel):
    is_valid: bool
    status: Literal["ACCEPT", "CONDITIONAL", "REJECT"]
    reasoning: str
    safety_alerts: List[str] = Field(default_factory=list)
    expiration_warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    days_until_expiration: int

    def to_verdict(self) -> Verdict:
        return Verdict(
            is_valid=self.is_valid,
            violations=list(self.safety_alerts),
            warnings=list(self.expiration_warnings),
            recommendations=list(self.recommendations),
        )


# Test results


class ValueRange(Submission):
    low: float
    high: float


class QualityControlOutcome(Submission):
    passed: bool
    details: str = ""


class ResultSubmission(Submission):
    test_type: str
    result: str
    reference_range: ValueRange
    critical_range: Optional[ValueRange] = None
    quality_control: QualityControlOutcome

    @field_validator("result", mode="before")
    @classmethod
    def _numeric_to_text(cls, value: Any) -> Any:
        # JSON numbers are kept as their text form for lenient parsing.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ResultVerdict(BaseModel):
    is_valid: bool
    numeric_value: Optional[float] = None
    critical_alerts: List[str] = Field(default_factory=list)
    qc_evaluation: str
    recommendations: List[str] = Field(default_factory=list)

    def to_verdict(self) -> Verdict:
        return Verdict(
            is_valid=self.is_valid,
            violations=list(self.critical_alerts),
            recommendations=list(self.recommendations),
        )


# Audit preparation


class AuditKind(str, Enum):
    CAP = "CAP"
    CLIA = "CLIA"
    QMS = "QMS"


class AuditContext(Submission):
    audit_kind: AuditKind
    laboratory_id: str
    test_menu: List[str] = Field(default_factory=list)
    last_inspection_date: Optional[date] = None
    current_procedures: List[str] = Field(default_factory=list)

    @field_validator("test_menu", "current_procedures")
    @classmethod
    def _dedupe(cls, values: List[str]) -> List[str]:
        seen: List[str] = []
        for value in values:
            if value not in seen:
                seen.append(value)
        return seen


class AuditPreparation(BaseModel):
    audit_kind: AuditKind
    checklist: List[str] = Field(default_factory=list)
    required_documents: List[str] = Field(default_factory=list)
    risk_areas: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    estimated_score: int = Field(ge=60, le=100)
    days_since_inspection: Optional[int] = None

    def to_verdict(self) -> Verdict:
        return Verdict(
            is_valid=True,
            warnings=list(self.risk_areas),
            recommendations=list(self.recommendations),
            score=self.estimated_score,
        )


# Safety incidents


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class IncidentReport(Submission):
    incident_kind: str
    description: str
    severity: Severity
    location: str = ""
    involved_personnel: List[str] = Field(default_factory=list)
    immediate_actions: List[str] = Field(default_factory=list)
    timestamp: datetime


class IncidentAssessment(BaseModel):
    is_compliant: bool
    severity: Severity
    risk_level: str
    estimated_resolution_time: str
    resolution_due: datetime
    required_actions: List[str] = Field(default_factory=list)
    reporting_requirements: List[str] = Field(default_factory=list)
    follow_up_steps: List[str] = Field(default_factory=list)
    compliance_issues: List[str] = Field(default_factory=list)

    def to_verdict(self) -> Verdict:
        return Verdict(
            is_valid=self.is_compliant,
            violations=list(self.compliance_issues),
            warnings=list(self.required_actions),
            recommendations=list(self.follow_up_steps),
        )
