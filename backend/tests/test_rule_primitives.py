from datetime import date

from labguard.rules import days_between, expiry_status, in_range, is_blank, parse_numeric


def test_expiry_status_future():
    status = expiry_status(date(2024, 7, 15), date(2024, 6, 15))
    assert status.expired is False
    assert status.days_remaining == 30


def test_expiry_status_today_counts_as_expired():
    status = expiry_status(date(2024, 6, 15), date(2024, 6, 15))
    assert status.expired is True
    assert status.days_remaining == 0


def test_expiry_status_past():
    status = expiry_status(date(2024, 6, 1), date(2024, 6, 15))
    assert status.expired is True
    assert status.days_remaining == -14


def test_days_between_is_signed():
    assert days_between(date(2024, 1, 1), date(2024, 1, 31)) == 30
    assert days_between(date(2024, 1, 31), date(2024, 1, 1)) == -30


def test_in_range_is_inclusive():
    assert in_range(90, 90, 98)
    assert in_range(98, 90, 98)
    assert not in_range(98.5, 90, 98)
    assert not in_range(89.9, 90, 98)


class TestParseNumeric:
    def test_plain_number(self):
        assert parse_numeric("5.2") == 5.2

    def test_trailing_units(self):
        assert parse_numeric(" 5.2 mmol/L") == 5.2

    def test_signed_and_exponent(self):
        assert parse_numeric("-3") == -3.0
        assert parse_numeric("1e2") == 100.0

    def test_leading_dot(self):
        assert parse_numeric(".5") == 0.5

    def test_non_numeric(self):
        assert parse_numeric("Positive") is None
        assert parse_numeric("") is None
        assert parse_numeric(None) is None

    def test_nan_rejected(self):
        assert parse_numeric("nan") is None


def test_is_blank():
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank("PC-1")
