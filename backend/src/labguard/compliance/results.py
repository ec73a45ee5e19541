"""Test result validation: critical values, QC and reference ranges."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from labguard.compliance.models import ResultSubmission, ResultVerdict
from labguard.ontology import AnalyteClass, classify_test_type
from labguard.rules import Findings, Rule, apply_rules, parse_numeric

logger = logging.getLogger(__name__)

PHYSICIAN_NOTIFICATION = "Immediate physician notification required"


@dataclass(frozen=True)
class AnalyteLimits:
    low: float
    high: float
    low_alert: str
    high_alert: str


ANALYTE_LIMITS: Dict[AnalyteClass, AnalyteLimits] = {
    AnalyteClass.GLUCOSE: AnalyteLimits(
        low=70.0,
        high=400.0,
        low_alert="Hypoglycemia alert - consider immediate treatment",
        high_alert="Severe hyperglycemia alert - critical intervention needed",
    ),
    AnalyteClass.POTASSIUM: AnalyteLimits(
        low=3.0,
        high=5.5,
        low_alert="Severe hypokalemia - cardiac monitoring recommended",
        high_alert="Severe hyperkalemia - immediate intervention required",
    ),
    AnalyteClass.HEMOGLOBIN: AnalyteLimits(
        low=7.0,
        high=18.0,
        low_alert="Severe anemia - consider transfusion",
        high_alert="Polycythemia alert - further evaluation needed",
    ),
}

ANALYTE_RECOMMENDATIONS: Dict[AnalyteClass, List[str]] = {
    AnalyteClass.GLUCOSE: ["Verify patient fasting status if applicable"],
    AnalyteClass.POTASSIUM: ["Check for hemolysis if elevated"],
}

GENERAL_RECOMMENDATIONS = [
    "Verify patient identification before reporting",
    "Document any technical comments or observations",
]

CRITICAL_PROTOCOL_RECOMMENDATIONS = [
    "Follow critical value notification protocol",
    "Document notification time and recipient",
]


@dataclass(frozen=True)
class ResultCheck:
    submission: ResultSubmission
    value: Optional[float]
    analyte: AnalyteClass

    @property
    def numeric(self) -> bool:
        return self.value is not None

    @property
    def reference(self) -> Tuple[float, float]:
        ref = self.submission.reference_range
        return ref.low, ref.high

    @property
    def limits(self) -> Optional[AnalyteLimits]:
        return ANALYTE_LIMITS.get(self.analyte)


def _critical_low(c: ResultCheck) -> bool:
    crit = c.submission.critical_range
    return c.numeric and crit is not None and c.value <= crit.low


def _critical_high(c: ResultCheck) -> bool:
    crit = c.submission.critical_range
    return c.numeric and crit is not None and not _critical_low(c) and c.value >= crit.high


CRITICAL_RULES: List[Rule[ResultCheck]] = [
    Rule(
        code="CRITICAL_LOW",
        bucket="alert",
        applies=_critical_low,
        message=lambda c: (
            f"CRITICAL LOW: {c.submission.result} is at or below critical low value "
            f"({c.submission.critical_range.low:g})"
        ),
    ),
    Rule(
        code="CRITICAL_LOW_NOTIFY",
        bucket="alert",
        applies=_critical_low,
        message=lambda c: PHYSICIAN_NOTIFICATION,
    ),
    Rule(
        code="CRITICAL_HIGH",
        bucket="alert",
        applies=_critical_high,
        message=lambda c: (
            f"CRITICAL HIGH: {c.submission.result} is at or above critical high value "
            f"({c.submission.critical_range.high:g})"
        ),
    ),
    Rule(
        code="CRITICAL_HIGH_NOTIFY",
        bucket="alert",
        applies=_critical_high,
        message=lambda c: PHYSICIAN_NOTIFICATION,
    ),
    Rule(
        code="QC_FAILED",
        bucket="alert",
        applies=lambda c: not c.submission.quality_control.passed,
        message=lambda c: (
            f"QC FAILED: {c.submission.quality_control.details or 'no details recorded'}"
            " - results should not be reported"
        ),
    ),
]

REFERENCE_RULES: List[Rule[ResultCheck]] = [
    Rule(
        code="BELOW_REFERENCE",
        bucket="recommendation",
        applies=lambda c: c.numeric and c.value < c.reference[0],
        message=lambda c: "Result below reference range (%g-%g)" % c.reference,
    ),
    Rule(
        code="ABOVE_REFERENCE",
        bucket="recommendation",
        applies=lambda c: c.numeric and c.value > c.reference[1],
        message=lambda c: "Result above reference range (%g-%g)" % c.reference,
    ),
    Rule(
        code="WITHIN_REFERENCE",
        bucket="recommendation",
        applies=lambda c: c.numeric and c.reference[0] <= c.value <= c.reference[1],
        message=lambda c: "Result within normal reference range",
    ),
    Rule(
        code="NON_NUMERIC_RESULT",
        bucket="recommendation",
        applies=lambda c: not c.numeric,
        message=lambda c: (
            f"Result '{c.submission.result}' is not numeric - range checks were skipped"
        ),
    ),
]

ANALYTE_RULES: List[Rule[ResultCheck]] = [
    Rule(
        code="ANALYTE_LOW",
        bucket="alert",
        applies=lambda c: c.numeric and c.limits is not None and c.value < c.limits.low,
        message=lambda c: c.limits.low_alert,
    ),
    Rule(
        code="ANALYTE_HIGH",
        bucket="alert",
        applies=lambda c: c.numeric and c.limits is not None and c.value > c.limits.high,
        message=lambda c: c.limits.high_alert,
    ),
]


def validate_result(submission: ResultSubmission) -> ResultVerdict:
    check = ResultCheck(
        submission=submission,
        value=parse_numeric(submission.result),
        analyte=classify_test_type(submission.test_type),
    )
    findings = Findings()

    apply_rules(CRITICAL_RULES, check, findings)
    apply_rules(REFERENCE_RULES, check, findings)
    apply_rules(ANALYTE_RULES, check, findings)
    findings.extend("recommendation", ANALYTE_RECOMMENDATIONS.get(check.analyte, []))

    findings.extend("recommendation", GENERAL_RECOMMENDATIONS)
    if findings.alerts:
        findings.extend("recommendation", CRITICAL_PROTOCOL_RECOMMENDATIONS)

    qc = submission.quality_control
    if qc.passed:
        qc_evaluation = f"QC PASSED: {qc.details}"
    else:
        qc_evaluation = f"QC FAILED: {qc.details}. Results may not be reliable."

    verdict = ResultVerdict(
        is_valid=qc.passed and not findings.alerts,
        numeric_value=check.value,
        critical_alerts=findings.alerts,
        qc_evaluation=qc_evaluation,
        recommendations=findings.recommendations,
    )
    logger.info(
        "Result %r (%s): %s critical alerts, valid=%s",
        submission.test_type,
        check.analyte.value,
        len(verdict.critical_alerts),
        verdict.is_valid,
    )
    return verdict
