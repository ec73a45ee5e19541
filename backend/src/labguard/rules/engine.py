"""Ordered rule descriptors folded over a submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from typing_extensions import Literal

from labguard.rules.scoring import ScoreAccumulator

logger = logging.getLogger(__name__)

T = TypeVar("T")

Bucket = Literal["violation", "alert", "warning", "recommendation"]


@dataclass(frozen=True)
class Rule(Generic[T]):
    code: str
    bucket: Bucket
    applies: Callable[[T], bool]
    message: Callable[[T], str]
    deduction: int = 0


@dataclass
class Findings:
    violations: List[str] = field(default_factory=list)
    alerts: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    fired: List[str] = field(default_factory=list)

    def add(self, bucket: Bucket, message: str) -> None:
        self._bucket(bucket).append(message)

    def extend(self, bucket: Bucket, messages: Sequence[str]) -> None:
        self._bucket(bucket).extend(messages)

    def _bucket(self, bucket: Bucket) -> List[str]:
        if bucket == "violation":
            return self.violations
        if bucket == "alert":
            return self.alerts
        if bucket == "warning":
            return self.warnings
        if bucket == "recommendation":
            return self.recommendations
        raise ValueError(f"unknown bucket: {bucket}")


def apply_rules(
    rules: Sequence[Rule[T]],
    subject: T,
    findings: Findings,
    score: Optional[ScoreAccumulator] = None,
) -> Findings:
    for rule in rules:
        if not rule.applies(subject):
            continue
        findings.add(rule.bucket, rule.message(subject))
        findings.fired.append(rule.code)
        if score is not None and rule.deduction:
            score.deduct(rule.deduction)
        logger.debug("Rule fired: %s (-%s)", rule.code, rule.deduction)
    return findings


def first_match(rules: Sequence[Rule[T]], subject: T) -> Optional[Rule[T]]:
    for rule in rules:
        if rule.applies(subject):
            return rule
    return None
