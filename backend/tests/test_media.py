from datetime import timedelta

from labguard.compliance import validate_media_lot
from labguard.compliance.models import (
    MediaLotSubmission,
    MediaQualityControl,
    StorageConditions,
)


def _lot(today, **changes):
    fields = {
        "media_type": "Tryptic soy agar",
        "lot_id": "TSA-2024-17",
        "expiry_date": today + timedelta(days=90),
        "storage": StorageConditions(temperature_c=4, humidity_percent=45),
        "quality_control": MediaQualityControl(
            sterility_test_passed=True, performance_test_passed=True, ph=7.2
        ),
    }
    fields.update(changes)
    return MediaLotSubmission(**fields)


def test_acceptable_lot(today):
    verdict = validate_media_lot(_lot(today), today)
    assert verdict.is_valid is True
    assert verdict.status == "ACCEPT"
    assert verdict.safety_alerts == []
    assert verdict.expiration_warnings == []
    assert verdict.days_until_expiration == 90


def test_expired_lot_always_alerts(today):
    for days in (0, -1, -400):
        verdict = validate_media_lot(_lot(today, expiry_date=today + timedelta(days=days)), today)
        assert verdict.is_valid is False
        assert any("EXPIRED" in alert for alert in verdict.safety_alerts)
        assert verdict.status == "REJECT"
        assert verdict.expiration_warnings == []


def test_expiry_within_seven_days_single_warning(today):
    verdict = validate_media_lot(_lot(today, expiry_date=today + timedelta(days=5)), today)
    assert verdict.is_valid is True
    assert len(verdict.expiration_warnings) == 1
    assert "5 day(s)" in verdict.expiration_warnings[0]
    assert verdict.status == "CONDITIONAL"


def test_expiry_within_thirty_days(today):
    verdict = validate_media_lot(_lot(today, expiry_date=today + timedelta(days=20)), today)
    assert verdict.is_valid is True
    assert verdict.expiration_warnings == ["Lot TSA-2024-17 expires in 20 days - plan reorder"]


def test_storage_and_qc_alerts(today):
    lot = _lot(
        today,
        storage=StorageConditions(temperature_c=12, humidity_percent=80),
        quality_control=MediaQualityControl(
            sterility_test_passed=False, performance_test_passed=True, ph=7.8
        ),
    )
    verdict = validate_media_lot(lot, today)
    assert verdict.is_valid is False
    assert len(verdict.safety_alerts) == 4
    assert verdict.safety_alerts[0].startswith("Storage temperature 12°C")
    assert verdict.reasoning == (
        "Media rejected: Storage temperature out of range, Storage humidity too high, "
        "Sterility test failed, pH out of range"
    )


def test_storage_requirement_selects_range(today):
    frozen = _lot(
        today,
        storage_requirement="frozen",
        storage=StorageConditions(temperature_c=-20, humidity_percent=30),
    )
    assert validate_media_lot(frozen, today).is_valid is True
    assert validate_media_lot(_lot(today, storage_requirement="frozen"), today).is_valid is False


def test_failed_performance_test_is_not_blocking(today):
    lot = _lot(
        today,
        quality_control=MediaQualityControl(
            sterility_test_passed=True, performance_test_passed=False, ph=7.0
        ),
    )
    verdict = validate_media_lot(lot, today)
    assert verdict.is_valid is True
    assert verdict.status == "CONDITIONAL"
    assert verdict.recommendations


def test_media_type_recommendations(today):
    blood = validate_media_lot(_lot(today, media_type="Sheep Blood Agar"), today)
    assert all(r.startswith("Blood agar") for r in blood.recommendations)
    chocolate = validate_media_lot(_lot(today, media_type="Chocolate agar"), today)
    assert chocolate.recommendations[0].startswith("Chocolate agar")
    mac = validate_media_lot(_lot(today, media_type="MacConkey"), today)
    assert mac.recommendations[0].startswith("MacConkey agar")
    general = validate_media_lot(_lot(today), today)
    assert general.recommendations == []


def test_contamination_and_recall(today):
    lot = _lot(today, visual_inspection_notes="Plates look cloudy with some particles")
    verdict = validate_media_lot(lot, today, recalled_lots=["TSA-2024-17"])
    assert verdict.is_valid is False
    assert "Visual contamination noted: cloudy, particles" in verdict.safety_alerts
    assert any(alert.startswith("RECALLED LOT") for alert in verdict.safety_alerts)


def test_to_verdict_maps_alerts_to_violations(today):
    verdict = validate_media_lot(_lot(today, expiry_date=today), today).to_verdict()
    assert verdict.is_valid is False
    assert verdict.violations


def test_repeat_evaluation_is_identical(today):
    lot = _lot(today, visual_inspection_notes="slightly cloudy")
    first = validate_media_lot(lot, today, recalled_lots=["TSA-2024-17"])
    second = validate_media_lot(lot, today, recalled_lots=["TSA-2024-17"])
    assert first.model_dump_json() == second.model_dump_json()
