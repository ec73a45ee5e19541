from labguard.rules.engine import Bucket, Findings, Rule, apply_rules, first_match
from labguard.rules.primitives import (
    ExpiryStatus,
    days_between,
    expiry_status,
    in_range,
    is_blank,
    parse_numeric,
)
from labguard.rules.scoring import ScoreAccumulator

__all__ = [
    "Bucket",
    "ExpiryStatus",
    "Findings",
    "Rule",
    "ScoreAccumulator",
    "apply_rules",
    "days_between",
    "expiry_status",
    "first_match",
    "in_range",
    "is_blank",
    "parse_numeric",
]
