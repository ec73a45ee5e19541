"""CAP safety incident triage."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List

from labguard.compliance.models import IncidentAssessment, IncidentReport, Severity
from labguard.ontology import IncidentClass, classify_incident_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeverityProfile:
    risk_level: str
    resolution_time: str
    resolution_window: timedelta
    required_actions: List[str]
    reporting_requirements: List[str]


@dataclass(frozen=True)
class IncidentKindProfile:
    required_actions: List[str]
    follow_up_steps: List[str]


SEVERITY_PROFILES: Dict[Severity, SeverityProfile] = {
    Severity.CRITICAL: SeverityProfile(
        risk_level="IMMEDIATE ACTION REQUIRED",
        resolution_time="24 hours",
        resolution_window=timedelta(hours=24),
        required_actions=[
            "Immediately notify laboratory director",
            "Implement emergency containment measures",
            "Document all immediate actions taken",
            "Notify regulatory agencies within 24 hours if required",
        ],
        reporting_requirements=[
            "Complete incident report within 2 hours",
            "Notify CAP within 24 hours for patient safety events",
            "Report to OSHA if workplace injury involved",
            "Notify institutional risk management immediately",
        ],
    ),
    Severity.HIGH: SeverityProfile(
        risk_level="HIGH PRIORITY",
        resolution_time="72 hours",
        resolution_window=timedelta(hours=72),
        required_actions=[
            "Notify laboratory supervisor immediately",
            "Secure the incident area",
            "Begin preliminary investigation",
            "Implement temporary corrective measures",
        ],
        reporting_requirements=[
            "Complete incident report within 8 hours",
            "Report to CAP within 72 hours if applicable",
            "Notify safety officer within 24 hours",
        ],
    ),
    Severity.MEDIUM: SeverityProfile(
        risk_level="MODERATE PRIORITY",
        resolution_time="1 week",
        resolution_window=timedelta(weeks=1),
        required_actions=[
            "Notify section supervisor",
            "Document incident details",
            "Begin risk assessment",
            "Implement initial preventive measures",
        ],
        reporting_requirements=[
            "Complete incident report within 24 hours",
            "Review with quality assurance team",
        ],
    ),
    Severity.LOW: SeverityProfile(
        risk_level="ROUTINE FOLLOW-UP",
        resolution_time="2 weeks",
        resolution_window=timedelta(weeks=2),
        required_actions=[
            "Document incident in log",
            "Assess for trends or patterns",
            "Consider process improvements",
        ],
        reporting_requirements=[
            "Include in monthly safety report",
            "Document lessons learned",
        ],
    ),
}

INCIDENT_KIND_PROFILES: Dict[IncidentClass, IncidentKindProfile] = {
    IncidentClass.EXPOSURE: IncidentKindProfile(
        required_actions=[
            "Assess exposure risk to personnel",
            "Provide immediate medical evaluation if needed",
            "Review biosafety protocols",
            "Check PPE usage and effectiveness",
        ],
        follow_up_steps=[
            "Conduct exposure assessment",
            "Review and update biosafety procedures",
            "Provide additional safety training if needed",
            "Monitor exposed personnel for symptoms",
        ],
    ),
    IncidentClass.CHEMICAL: IncidentKindProfile(
        required_actions=[
            "Secure chemical spill area",
            "Check ventilation systems",
            "Review SDS (Safety Data Sheets)",
            "Assess environmental impact",
        ],
        follow_up_steps=[
            "Review chemical storage procedures",
            "Update spill response protocols",
            "Conduct environmental monitoring if needed",
            "Review chemical inventory management",
        ],
    ),
    IncidentClass.EQUIPMENT: IncidentKindProfile(
        required_actions=[
            "Take equipment out of service if unsafe",
            'Tag equipment as "Do Not Use"',
            "Review maintenance records",
            "Assess impact on test results",
        ],
        follow_up_steps=[
            "Conduct equipment investigation",
            "Review preventive maintenance schedule",
            "Update equipment procedures if needed",
            "Consider equipment replacement if warranted",
        ],
    ),
    IncidentClass.SPECIMEN: IncidentKindProfile(
        required_actions=[
            "Assess patient safety impact",
            "Review specimen handling procedures",
            "Check patient identification protocols",
            "Evaluate need for repeat testing",
        ],
        follow_up_steps=[
            "Review pre-analytical procedures",
            "Update specimen handling protocols",
            "Provide additional staff training",
            "Implement additional quality checks",
        ],
    ),
}

UNIVERSAL_FOLLOW_UP = [
    "Conduct root cause analysis",
    "Develop corrective action plan",
    "Monitor effectiveness of implemented changes",
    "Update relevant procedures and training materials",
    "Schedule follow-up review meeting",
    "Document lessons learned and share with team",
]

CAP_REPORTING = [
    "Ensure compliance with CAP Patient Safety Standards",
    "Document in laboratory's safety management system",
    "Include in annual safety program review",
]


def assess_incident(report: IncidentReport) -> IncidentAssessment:
    """
    Map an incident onto its severity profile and incident-kind playbook.

    Critical incidents are never compliant on intake: they always go to
    further review, whatever immediate actions were already recorded.
    """
    severity_profile = SEVERITY_PROFILES[report.severity]
    incident_class = classify_incident_type(report.incident_kind)
    kind_profile = INCIDENT_KIND_PROFILES.get(incident_class)

    required_actions = list(severity_profile.required_actions)
    follow_up_steps: List[str] = []
    if kind_profile is not None:
        required_actions.extend(kind_profile.required_actions)
        follow_up_steps.extend(kind_profile.follow_up_steps)
    follow_up_steps.extend(UNIVERSAL_FOLLOW_UP)

    reporting_requirements = list(severity_profile.reporting_requirements)
    reporting_requirements.extend(CAP_REPORTING)

    issues: List[str] = []
    if not report.immediate_actions:
        issues.append("No immediate actions documented")
    if report.severity == Severity.CRITICAL:
        issues.append("Critical incidents require director review before closure")

    assessment = IncidentAssessment(
        is_compliant=not issues,
        severity=report.severity,
        risk_level=severity_profile.risk_level,
        estimated_resolution_time=severity_profile.resolution_time,
        resolution_due=report.timestamp + severity_profile.resolution_window,
        required_actions=required_actions,
        reporting_requirements=reporting_requirements,
        follow_up_steps=follow_up_steps,
        compliance_issues=issues,
    )
    logger.info(
        "Incident %s (%s, %s): compliant=%s",
        report.incident_kind,
        incident_class.value,
        report.severity.value,
        assessment.is_compliant,
    )
    return assessment
