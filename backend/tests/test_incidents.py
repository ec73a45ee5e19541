from datetime import datetime, timedelta

from labguard.compliance import assess_incident
from labguard.compliance.incidents import CAP_REPORTING, UNIVERSAL_FOLLOW_UP
from labguard.compliance.models import IncidentReport, Severity

OCCURRED = datetime(2024, 6, 14, 9, 30)


def _report(kind="Equipment malfunction", severity=Severity.LOW, actions=("Logged",)):
    return IncidentReport(
        incident_kind=kind,
        description="Centrifuge lid latch failed during run",
        severity=severity,
        location="Core lab",
        involved_personnel=["Tech A"],
        immediate_actions=list(actions),
        timestamp=OCCURRED,
    )


def test_low_severity_routine_follow_up():
    assessment = assess_incident(_report())
    assert assessment.is_compliant is True
    assert assessment.risk_level == "ROUTINE FOLLOW-UP"
    assert assessment.estimated_resolution_time == "2 weeks"
    assert assessment.resolution_due == OCCURRED + timedelta(weeks=2)
    assert assessment.compliance_issues == []


def test_critical_is_never_compliant():
    assessment = assess_incident(
        _report(severity=Severity.CRITICAL, actions=["Area evacuated", "Director called"])
    )
    assert assessment.is_compliant is False
    assert assessment.risk_level == "IMMEDIATE ACTION REQUIRED"
    assert assessment.resolution_due == OCCURRED + timedelta(hours=24)
    assert assessment.required_actions[0] == "Immediately notify laboratory director"
    assert assessment.compliance_issues == [
        "Critical incidents require director review before closure"
    ]


def test_missing_immediate_actions():
    assessment = assess_incident(_report(severity=Severity.MEDIUM, actions=()))
    assert assessment.is_compliant is False
    assert assessment.compliance_issues == ["No immediate actions documented"]
    assert assessment.estimated_resolution_time == "1 week"


def test_equipment_playbook():
    assessment = assess_incident(_report(severity=Severity.HIGH))
    assert assessment.risk_level == "HIGH PRIORITY"
    assert 'Tag equipment as "Do Not Use"' in assessment.required_actions
    assert assessment.follow_up_steps[0] == "Conduct equipment investigation"


def test_exposure_and_chemical_playbooks():
    exposure = assess_incident(_report(kind="Biohazard exposure"))
    chemical = assess_incident(_report(kind="Formalin spill"))
    assert "Assess exposure risk to personnel" in exposure.required_actions
    assert "Secure chemical spill area" in chemical.required_actions


def test_specimen_playbook():
    assessment = assess_incident(_report(kind="Patient specimen mislabeled"))
    assert "Check patient identification protocols" in assessment.required_actions


def test_unrecognized_kind_gets_universal_steps_only():
    assessment = assess_incident(_report(kind="Power outage"))
    assert assessment.follow_up_steps == UNIVERSAL_FOLLOW_UP
    assert assessment.required_actions == [
        "Document incident in log",
        "Assess for trends or patterns",
        "Consider process improvements",
    ]


def test_reporting_always_ends_with_cap_tail():
    for severity in Severity:
        assessment = assess_incident(_report(severity=severity))
        assert assessment.reporting_requirements[-len(CAP_REPORTING):] == CAP_REPORTING
        assert assessment.follow_up_steps[-len(UNIVERSAL_FOLLOW_UP):] == UNIVERSAL_FOLLOW_UP


def test_to_verdict():
    verdict = assess_incident(_report(severity=Severity.CRITICAL)).to_verdict()
    assert verdict.is_valid is False
    assert verdict.violations == ["Critical incidents require director review before closure"]


def test_repeat_evaluation_is_identical():
    report = _report(kind="Biohazard exposure", severity=Severity.CRITICAL)
    assert assess_incident(report).model_dump_json() == assess_incident(report).model_dump_json()
