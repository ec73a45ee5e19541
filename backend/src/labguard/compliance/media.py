"""Culture media lot validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from labguard.compliance.models import MediaLotSubmission, MediaVerdict
from labguard.ontology import MediaClass, classify_media_type, matching_keywords
from labguard.rules import (
    ExpiryStatus,
    Findings,
    Rule,
    apply_rules,
    expiry_status,
    first_match,
    in_range,
)

logger = logging.getLogger(__name__)

STORAGE_RANGES_C: Dict[str, Tuple[float, float]] = {
    "2-8c": (2.0, 8.0),
    "room-temp": (20.0, 25.0),
    "frozen": (-25.0, -15.0),
    "ultra-cold": (-85.0, -75.0),
}
MAX_HUMIDITY_PERCENT = 70.0
PH_RANGE = (6.8, 7.4)
URGENT_EXPIRY_DAYS = 7
NOTICE_EXPIRY_DAYS = 30

MEDIA_TYPE_RECOMMENDATIONS: Dict[MediaClass, List[str]] = {
    MediaClass.BLOOD_AGAR: [
        "Blood agar: verify hemolysis patterns with S. pyogenes and S. pneumoniae QC strains",
        "Blood agar: inspect for hemolysis or darkening of the medium before use",
    ],
    MediaClass.CHOCOLATE_AGAR: [
        "Chocolate agar: confirm growth of H. influenzae and N. gonorrhoeae QC strains",
        "Chocolate agar: incubate in 5% CO2 and protect plates from light",
    ],
    MediaClass.MACCONKEY_AGAR: [
        "MacConkey agar: confirm lactose fermentation with E. coli and P. mirabilis QC strains",
        "MacConkey agar: verify inhibition of gram-positive organisms",
    ],
}

REJECT_REASONS: Dict[str, str] = {
    "MEDIA_EXPIRED": "Media is expired",
    "STORAGE_TEMPERATURE": "Storage temperature out of range",
    "STORAGE_HUMIDITY": "Storage humidity too high",
    "STERILITY_FAILED": "Sterility test failed",
    "PH_OUT_OF_RANGE": "pH out of range",
    "VISUAL_CONTAMINATION": "Visual contamination detected",
    "LOT_RECALLED": "Media is on recall list",
}

CONDITIONAL_REASONS: Dict[str, str] = {
    "EXPIRES_WITHIN_URGENT": "Media expires soon",
    "EXPIRES_WITHIN_NOTICE": "Media expires within 30 days",
    "PERFORMANCE_NOT_PASSED": "Performance testing not passed",
}


@dataclass(frozen=True)
class MediaCheck:
    submission: MediaLotSubmission
    expiry: ExpiryStatus
    recalled: bool = False
    contamination: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def lot(self) -> str:
        return self.submission.lot_id

    @property
    def storage_range(self) -> Tuple[float, float]:
        return STORAGE_RANGES_C[self.submission.storage_requirement]


EXPIRY_RULES: List[Rule[MediaCheck]] = [
    Rule(
        code="MEDIA_EXPIRED",
        bucket="alert",
        applies=lambda c: c.expiry.expired,
        message=lambda c: (
            f"EXPIRED MEDIA: Lot {c.lot} expired on "
            f"{c.submission.expiry_date.isoformat()} - remove from use immediately"
        ),
    ),
    Rule(
        code="EXPIRES_WITHIN_URGENT",
        bucket="warning",
        applies=lambda c: c.expiry.days_remaining <= URGENT_EXPIRY_DAYS,
        message=lambda c: (
            f"Lot {c.lot} expires in {c.expiry.days_remaining} day(s) - "
            "use first or arrange replacement"
        ),
    ),
    Rule(
        code="EXPIRES_WITHIN_NOTICE",
        bucket="warning",
        applies=lambda c: c.expiry.days_remaining <= NOTICE_EXPIRY_DAYS,
        message=lambda c: (
            f"Lot {c.lot} expires in {c.expiry.days_remaining} days - plan reorder"
        ),
    ),
]

LOT_RULES: List[Rule[MediaCheck]] = [
    Rule(
        code="STORAGE_TEMPERATURE",
        bucket="alert",
        applies=lambda c: not in_range(c.submission.storage.temperature_c, *c.storage_range),
        message=lambda c: (
            f"Storage temperature {c.submission.storage.temperature_c:g}°C outside "
            f"required range ({c.storage_range[0]:g}°C to {c.storage_range[1]:g}°C)"
        ),
    ),
    Rule(
        code="STORAGE_HUMIDITY",
        bucket="alert",
        applies=lambda c: c.submission.storage.humidity_percent > MAX_HUMIDITY_PERCENT,
        message=lambda c: (
            f"Storage humidity {c.submission.storage.humidity_percent:g}% exceeds "
            f"{MAX_HUMIDITY_PERCENT:g}% limit"
        ),
    ),
    Rule(
        code="STERILITY_FAILED",
        bucket="alert",
        applies=lambda c: not c.submission.quality_control.sterility_test_passed,
        message=lambda c: f"STERILITY TEST FAILED: Lot {c.lot} must not be used",
    ),
    Rule(
        code="PERFORMANCE_NOT_PASSED",
        bucket="recommendation",
        applies=lambda c: not c.submission.quality_control.performance_test_passed,
        message=lambda c: "Repeat performance testing with reference QC strains before release",
    ),
    Rule(
        code="PH_OUT_OF_RANGE",
        bucket="alert",
        applies=lambda c: not in_range(c.submission.quality_control.ph, *PH_RANGE),
        message=lambda c: (
            f"pH {c.submission.quality_control.ph:g} outside acceptable range "
            f"({PH_RANGE[0]:g}-{PH_RANGE[1]:g})"
        ),
    ),
    Rule(
        code="VISUAL_CONTAMINATION",
        bucket="alert",
        applies=lambda c: bool(c.contamination),
        message=lambda c: f"Visual contamination noted: {', '.join(c.contamination)}",
    ),
    Rule(
        code="LOT_RECALLED",
        bucket="alert",
        applies=lambda c: c.recalled,
        message=lambda c: f"RECALLED LOT: {c.lot} is on the manufacturer recall list",
    ),
]


def validate_media_lot(
    submission: MediaLotSubmission,
    today: date,
    recalled_lots: Optional[Iterable[str]] = None,
) -> MediaVerdict:
    recall_list: FrozenSet[str] = frozenset(recalled_lots or ())
    check = MediaCheck(
        submission=submission,
        expiry=expiry_status(submission.expiry_date, today),
        recalled=submission.lot_id in recall_list,
        contamination=tuple(
            matching_keywords("contamination", submission.visual_inspection_notes)
        ),
    )

    findings = Findings()
    expiry_rule = first_match(EXPIRY_RULES, check)
    if expiry_rule is not None:
        apply_rules([expiry_rule], check, findings)
    apply_rules(LOT_RULES, check, findings)

    media_class = classify_media_type(submission.media_type)
    findings.extend("recommendation", MEDIA_TYPE_RECOMMENDATIONS.get(media_class, []))

    status, reasoning = _disposition(findings)
    verdict = MediaVerdict(
        is_valid=not findings.alerts,
        status=status,
        reasoning=reasoning,
        safety_alerts=findings.alerts,
        expiration_warnings=findings.warnings,
        recommendations=findings.recommendations,
        days_until_expiration=check.expiry.days_remaining,
    )
    logger.info(
        "Media lot %s (%s): %s alerts, %s warnings, status %s",
        submission.lot_id,
        media_class.value,
        len(verdict.safety_alerts),
        len(verdict.expiration_warnings),
        verdict.status,
    )
    return verdict


def _disposition(findings: Findings) -> Tuple[str, str]:
    rejected = [REJECT_REASONS[code] for code in findings.fired if code in REJECT_REASONS]
    if findings.alerts:
        return "REJECT", f"Media rejected: {', '.join(rejected)}"
    conditions = [
        CONDITIONAL_REASONS[code] for code in findings.fired if code in CONDITIONAL_REASONS
    ]
    if conditions:
        return "CONDITIONAL", f"Media approved with conditions: {', '.join(conditions)}"
    return "ACCEPT", "Media meets all safety and quality requirements for use"
