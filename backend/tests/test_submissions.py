from labguard.compliance import evaluate_payload
from labguard.compliance.models import InvalidSubmission, PCRVerdict, ResultVerdict


def test_unknown_kind(today):
    outcome = evaluate_payload("blood_gas", {}, today)
    assert isinstance(outcome, InvalidSubmission)
    assert outcome.errors == ["unknown submission kind: blood_gas"]


def test_missing_fields_are_reported(today):
    outcome = evaluate_payload("result", {"test_type": "Glucose"}, today)
    assert isinstance(outcome, InvalidSubmission)
    assert outcome.kind == "result"
    fields = {error.split(":")[0] for error in outcome.errors}
    assert {"result", "reference_range", "quality_control"} <= fields


def test_bad_nested_value(today):
    outcome = evaluate_payload(
        "incident",
        {
            "incident_kind": "Spill",
            "description": "Small spill",
            "severity": "Catastrophic",
            "timestamp": "2024-06-14T09:30:00",
        },
        today,
    )
    assert isinstance(outcome, InvalidSubmission)
    assert any(error.startswith("severity:") for error in outcome.errors)


def test_result_payload(today):
    outcome = evaluate_payload(
        "result",
        {
            "test_type": "Glucose",
            "result": "450",
            "reference_range": {"low": 70, "high": 99},
            "critical_range": {"low": 40, "high": 500},
            "quality_control": {"passed": True, "details": "in range"},
        },
        today,
    )
    assert isinstance(outcome, ResultVerdict)
    assert outcome.critical_alerts == ["Severe hyperglycemia alert - critical intervention needed"]


def test_pcr_payload_uses_injected_date(today):
    outcome = evaluate_payload(
        "pcr",
        {
            "name": "SARS-CoV-2 RT-PCR",
            "reagents": [
                {"name": "Master mix", "lot_id": "MM-1", "expiry_date": "2024-06-10"},
            ],
            "thermal_profile": {"denaturation_c": 95, "annealing_c": 60, "extension_c": 72},
            "cycle_count": 40,
            "quality_control": {
                "positive_control_id": "PC-1",
                "negative_control_id": "NC-1",
                "internal_control_id": "IC-1",
            },
        },
        today,
    )
    assert isinstance(outcome, PCRVerdict)
    assert outcome.is_valid is False
    assert outcome.compliance_score == 85


def test_numeric_result_payload(today):
    outcome = evaluate_payload(
        "result",
        {
            "test_type": "Glucose",
            "result": 450,
            "reference_range": {"low": 70, "high": 99},
            "critical_range": {"low": 40, "high": 500},
            "quality_control": {"passed": True, "details": "in range"},
        },
        today,
    )
    assert isinstance(outcome, ResultVerdict)
    assert outcome.numeric_value == 450.0
    assert outcome.critical_alerts == ["Severe hyperglycemia alert - critical intervention needed"]


def test_float_result_payload(today):
    outcome = evaluate_payload(
        "result",
        {
            "test_type": "Potassium",
            "result": 4.2,
            "reference_range": {"low": 3.5, "high": 5.1},
            "quality_control": {"passed": True},
        },
        today,
    )
    assert isinstance(outcome, ResultVerdict)
    assert outcome.is_valid is True
    assert outcome.numeric_value == 4.2
