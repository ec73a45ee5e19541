"""PCR protocol verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from labguard.compliance.models import PCRProtocolSubmission, PCRVerdict, Reagent
from labguard.rules import (
    ExpiryStatus,
    Findings,
    Rule,
    ScoreAccumulator,
    apply_rules,
    expiry_status,
    in_range,
    is_blank,
)

logger = logging.getLogger(__name__)

DENATURATION_RANGE_C = (90.0, 98.0)
ANNEALING_RANGE_C = (50.0, 65.0)
EXTENSION_RANGE_C = (68.0, 75.0)
CYCLE_COUNT_RANGE = (25, 45)
REAGENT_EXPIRY_NOTICE_DAYS = 30

GENERAL_RECOMMENDATIONS = [
    "Protocol meets basic compliance requirements",
    "Consider documenting temperature calibration records",
    "Ensure proper staff training on protocol execution",
]


@dataclass(frozen=True)
class ReagentCheck:
    position: int
    reagent: Reagent
    expiry: Optional[ExpiryStatus]

    @property
    def label(self) -> str:
        return self.reagent.name or f"#{self.position}"


def _missing_information(check: ReagentCheck) -> bool:
    reagent = check.reagent
    return is_blank(reagent.name) or is_blank(reagent.lot_id) or reagent.expiry_date is None


REAGENT_RULES: List[Rule[ReagentCheck]] = [
    Rule(
        code="REAGENT_MISSING_INFORMATION",
        bucket="violation",
        applies=_missing_information,
        message=lambda c: f"Reagent {c.position}: Missing required information",
        deduction=10,
    ),
    Rule(
        code="REAGENT_EXPIRED",
        bucket="violation",
        applies=lambda c: c.expiry is not None and c.expiry.expired,
        message=lambda c: f"Reagent {c.label}: Expired ({c.reagent.expiry_date.isoformat()})",
        deduction=15,
    ),
    Rule(
        code="REAGENT_EXPIRING_SOON",
        bucket="recommendation",
        applies=lambda c: (
            c.expiry is not None
            and not c.expiry.expired
            and c.expiry.days_remaining <= REAGENT_EXPIRY_NOTICE_DAYS
        ),
        message=lambda c: (
            f"Reagent {c.label}: Expires within {REAGENT_EXPIRY_NOTICE_DAYS} days"
        ),
        deduction=5,
    ),
]

PROTOCOL_RULES: List[Rule[PCRProtocolSubmission]] = [
    Rule(
        code="DENATURATION_OUT_OF_RANGE",
        bucket="violation",
        applies=lambda s: not in_range(s.thermal_profile.denaturation_c, *DENATURATION_RANGE_C),
        message=lambda s: "Denaturation temperature should be between 90-98°C",
        deduction=10,
    ),
    Rule(
        code="ANNEALING_OUT_OF_RANGE",
        bucket="recommendation",
        applies=lambda s: not in_range(s.thermal_profile.annealing_c, *ANNEALING_RANGE_C),
        message=lambda s: "Consider optimizing annealing temperature (50-65°C range)",
        deduction=5,
    ),
    Rule(
        code="EXTENSION_OUT_OF_RANGE",
        bucket="violation",
        applies=lambda s: not in_range(s.thermal_profile.extension_c, *EXTENSION_RANGE_C),
        message=lambda s: "Extension temperature should be between 68-75°C",
        deduction=10,
    ),
    Rule(
        code="CYCLE_COUNT_ATYPICAL",
        bucket="recommendation",
        applies=lambda s: not in_range(s.cycle_count, *CYCLE_COUNT_RANGE),
        message=lambda s: "Cycle count outside typical range (25-45 cycles)",
        deduction=5,
    ),
    Rule(
        code="POSITIVE_CONTROL_MISSING",
        bucket="violation",
        applies=lambda s: is_blank(s.quality_control.positive_control_id),
        message=lambda s: "Positive control is required",
        deduction=15,
    ),
    Rule(
        code="NEGATIVE_CONTROL_MISSING",
        bucket="violation",
        applies=lambda s: is_blank(s.quality_control.negative_control_id),
        message=lambda s: "Negative control is required",
        deduction=15,
    ),
    Rule(
        code="INTERNAL_CONTROL_MISSING",
        bucket="recommendation",
        applies=lambda s: is_blank(s.quality_control.internal_control_id),
        message=lambda s: "Consider adding internal control for better validation",
        deduction=5,
    ),
]


def verify_pcr_protocol(submission: PCRProtocolSubmission, today: date) -> PCRVerdict:
    findings = Findings()
    score = ScoreAccumulator(start=100, floor=0, ceiling=100)

    for position, reagent in enumerate(submission.reagents, start=1):
        expiry = (
            expiry_status(reagent.expiry_date, today)
            if reagent.expiry_date is not None
            else None
        )
        check = ReagentCheck(position=position, reagent=reagent, expiry=expiry)
        apply_rules(REAGENT_RULES, check, findings, score)

    apply_rules(PROTOCOL_RULES, submission, findings, score)

    if not findings.violations:
        findings.extend("recommendation", GENERAL_RECOMMENDATIONS)

    verdict = PCRVerdict(
        is_valid=not findings.violations,
        violations=findings.violations,
        recommendations=findings.recommendations,
        compliance_score=score.value,
    )
    logger.info(
        "PCR protocol %r: %s violations, score %s",
        submission.name,
        len(verdict.violations),
        verdict.compliance_score,
    )
    return verdict
