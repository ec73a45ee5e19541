"""Audit readiness estimation for CAP, CLIA and QMS inspections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from labguard.compliance.models import AuditContext, AuditPreparation
from labguard.ontology import audit_requirements, matching_keywords
from labguard.rules import Findings, Rule, ScoreAccumulator, apply_rules, days_between

logger = logging.getLogger(__name__)

BASE_SCORE = 95
MIN_SCORE = 60
MAX_SCORE = 100
CLEAN_RECORD_BONUS = 5
OVERDUE_INSPECTION_DAYS = 730
ANNUAL_INSPECTION_DAYS = 365
LARGE_TEST_MENU = 50
PROCEDURE_COVERAGE_RATIO = 0.8

GENERAL_RECOMMENDATIONS = [
    "Schedule pre-audit internal review 30 days before inspection",
    "Ensure all staff are aware of their roles during the audit",
    "Prepare a dedicated space for auditor document review",
    "Assign a liaison to accompany auditors throughout the process",
    "Review and practice responses to common audit questions",
]


@dataclass(frozen=True)
class AuditCheck:
    context: AuditContext
    days_since_inspection: Optional[int]
    high_risk_tests: List[str]

    @property
    def menu_size(self) -> int:
        return len(self.context.test_menu)

    @property
    def procedure_count(self) -> int:
        return len(self.context.current_procedures)


def _inspection_age_over(days: int):
    def applies(check: AuditCheck) -> bool:
        return check.days_since_inspection is not None and check.days_since_inspection > days

    return applies


# Each risk area is paired with an optional follow-up recommendation rule
# sharing the same predicate.
RISK_RULES: List[Rule[AuditCheck]] = [
    Rule(
        code="NO_INSPECTION_ON_RECORD",
        bucket="warning",
        applies=lambda c: c.days_since_inspection is None,
        message=lambda c: "No prior inspection on record - full review expected",
        deduction=10,
    ),
    Rule(
        code="INSPECTION_OVERDUE",
        bucket="warning",
        applies=_inspection_age_over(OVERDUE_INSPECTION_DAYS),
        message=lambda c: "Extended time since last inspection - increased scrutiny expected",
        deduction=10,
    ),
    Rule(
        code="ANNUAL_INSPECTION_CYCLE",
        bucket="warning",
        applies=lambda c: (
            _inspection_age_over(ANNUAL_INSPECTION_DAYS)(c)
            and not _inspection_age_over(OVERDUE_INSPECTION_DAYS)(c)
        ),
        message=lambda c: "Annual inspection cycle - standard review expected",
        deduction=5,
    ),
    Rule(
        code="LARGE_TEST_MENU",
        bucket="warning",
        applies=lambda c: c.menu_size > LARGE_TEST_MENU,
        message=lambda c: "Large test menu - comprehensive validation required",
        deduction=5,
    ),
    Rule(
        code="HIGH_COMPLEXITY_TESTING",
        bucket="warning",
        applies=lambda c: bool(c.high_risk_tests),
        message=lambda c: (
            "High-complexity testing - enhanced documentation required "
            f"({', '.join(c.high_risk_tests)})"
        ),
        deduction=5,
    ),
    Rule(
        code="HIGH_COMPLEXITY_TESTING_FOLLOW_UP",
        bucket="recommendation",
        applies=lambda c: bool(c.high_risk_tests),
        message=lambda c: "Review specialized test validation documentation",
    ),
    Rule(
        code="PROCEDURES_INSUFFICIENT",
        bucket="warning",
        applies=lambda c: c.procedure_count < c.menu_size * PROCEDURE_COVERAGE_RATIO,
        message=lambda c: "Insufficient procedure documentation for test menu",
        deduction=10,
    ),
    Rule(
        code="PROCEDURES_INSUFFICIENT_FOLLOW_UP",
        bucket="recommendation",
        applies=lambda c: c.procedure_count < c.menu_size * PROCEDURE_COVERAGE_RATIO,
        message=lambda c: "Update and standardize all procedure documents",
    ),
]


def prepare_audit(context: AuditContext, today: date) -> AuditPreparation:
    requirements = audit_requirements(context.audit_kind.value)
    high_risk: List[str] = []
    for test in context.test_menu:
        for keyword in matching_keywords("high_risk_test", test):
            if keyword not in high_risk:
                high_risk.append(keyword)

    check = AuditCheck(
        context=context,
        days_since_inspection=(
            days_between(context.last_inspection_date, today)
            if context.last_inspection_date is not None
            else None
        ),
        high_risk_tests=high_risk,
    )

    findings = Findings()
    score = ScoreAccumulator(start=BASE_SCORE, floor=MIN_SCORE, ceiling=MAX_SCORE)
    apply_rules(RISK_RULES, check, findings, score)

    findings.extend("recommendation", GENERAL_RECOMMENDATIONS)
    findings.extend("recommendation", requirements.recommendations)

    if not findings.warnings:
        score.credit(CLEAN_RECORD_BONUS, cap=MAX_SCORE)

    preparation = AuditPreparation(
        audit_kind=context.audit_kind,
        checklist=list(requirements.checklist),
        required_documents=list(requirements.required_documents),
        risk_areas=findings.warnings,
        recommendations=findings.recommendations,
        estimated_score=score.value,
        days_since_inspection=check.days_since_inspection,
    )
    logger.info(
        "Audit preparation %s for %s: %s risk areas, score %s",
        context.audit_kind.value,
        context.laboratory_id,
        len(preparation.risk_areas),
        preparation.estimated_score,
    )
    return preparation
