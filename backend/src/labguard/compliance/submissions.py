"""Entry point for raw payloads handed over by the request layer."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Tuple, Type, Union

from pydantic import BaseModel, ValidationError

from labguard.compliance.audit import prepare_audit
from labguard.compliance.incidents import assess_incident
from labguard.compliance.media import validate_media_lot
from labguard.compliance.models import (
    AuditContext,
    AuditPreparation,
    IncidentAssessment,
    IncidentReport,
    InvalidSubmission,
    MediaLotSubmission,
    MediaVerdict,
    PCRProtocolSubmission,
    PCRVerdict,
    ResultSubmission,
    ResultVerdict,
)
from labguard.compliance.pcr import verify_pcr_protocol
from labguard.compliance.results import validate_result

logger = logging.getLogger(__name__)

Outcome = Union[
    PCRVerdict,
    MediaVerdict,
    ResultVerdict,
    AuditPreparation,
    IncidentAssessment,
    InvalidSubmission,
]

# kind -> (submission model, evaluator(submission, today))
EVALUATORS: Dict[str, Tuple[Type[BaseModel], Callable[[Any, date], BaseModel]]] = {
    "pcr": (PCRProtocolSubmission, verify_pcr_protocol),
    "media": (MediaLotSubmission, validate_media_lot),
    "result": (ResultSubmission, lambda submission, today: validate_result(submission)),
    "audit": (AuditContext, prepare_audit),
    "incident": (IncidentReport, lambda submission, today: assess_incident(submission)),
}


def evaluate_payload(kind: str, payload: Dict[str, Any], today: date) -> Outcome:
    entry = EVALUATORS.get(kind)
    if entry is None:
        logger.warning("Unknown submission kind: %s", kind)
        return InvalidSubmission(kind=kind, errors=[f"unknown submission kind: {kind}"])

    model, evaluator = entry
    try:
        submission = model.model_validate(payload)
    except ValidationError as exc:
        errors = format_validation_errors(exc)
        logger.info("Rejected %s submission: %s field errors", kind, len(errors))
        return InvalidSubmission(kind=kind, errors=errors)
    return evaluator(submission, today)


def format_validation_errors(exc: ValidationError) -> List[str]:
    errors: List[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        errors.append(f"{path}: {error.get('msg', 'invalid value')}")
    return errors
