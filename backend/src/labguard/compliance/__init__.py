"""Compliance validators for laboratory submissions."""

from labguard.compliance.audit import prepare_audit
from labguard.compliance.incidents import assess_incident
from labguard.compliance.media import validate_media_lot
from labguard.compliance.pcr import verify_pcr_protocol
from labguard.compliance.results import validate_result
from labguard.compliance.submissions import evaluate_payload

__all__ = [
    "assess_incident",
    "evaluate_payload",
    "prepare_audit",
    "validate_media_lot",
    "validate_result",
    "verify_pcr_protocol",
]
