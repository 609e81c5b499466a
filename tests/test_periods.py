from datetime import date, datetime
from decimal import Decimal

import pytest

from fintrack.errors import InvalidAmountError, InvalidDateError
from fintrack.money import round_cents, to_decimal, total, truncate_tenths
from fintrack.periods import (
    calendar_date,
    current_month,
    is_month,
    month_key,
    month_label,
    parse_month,
    shift_month,
    trailing_months,
)


def test_month_key_from_iso_timestamp():
    assert month_key("2024-03-02T10:00:00.000Z") == "2024-03"
    assert month_key("2024-03-31T23:30:00+05:00") == "2024-03"
    assert month_key("2024-12-01") == "2024-12"


def test_month_key_from_date_objects():
    assert month_key(date(2024, 7, 4)) == "2024-07"
    assert month_key(datetime(2023, 1, 31, 23, 59)) == "2023-01"


@pytest.mark.parametrize("bad", ["", "yesterday", "2024-13-01", None, 20240301])
def test_month_key_rejects_garbage(bad):
    with pytest.raises(InvalidDateError):
        month_key(bad)


def test_invalid_date_error_is_value_error():
    with pytest.raises(ValueError):
        month_key("nope")


def test_calendar_date():
    assert calendar_date("2024-03-02T10:00:00.000Z") == "2024-03-02"


def test_is_month():
    assert is_month("2024-03")
    assert not is_month("2024-3")
    assert not is_month("2024-00")
    assert not is_month("2024-13")
    assert not is_month(None)


def test_parse_month():
    assert parse_month("2024-03") == (2024, 3)
    assert parse_month(date(2025, 11, 30)) == (2025, 11)
    with pytest.raises(InvalidDateError):
        parse_month("03/2024")


def test_shift_month():
    assert shift_month(2024, 3, -2) == (2024, 1)
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 6, -18) == (2022, 12)


def test_trailing_months():
    assert trailing_months("2024-03", 3) == ["2024-01", "2024-02", "2024-03"]
    assert trailing_months("2024-01", 2) == ["2023-12", "2024-01"]
    assert trailing_months(date(2024, 5, 20), 1) == ["2024-05"]


def test_trailing_months_needs_positive_count():
    with pytest.raises(ValueError):
        trailing_months("2024-03", 0)


def test_month_label():
    assert month_label("2024-01") == "Jan"
    assert month_label("2023-12") == "Dec"


def test_current_month_uses_given_day():
    assert current_month(date(2024, 3, 15)) == "2024-03"


def test_current_month_reads_clock():
    assert current_month() == date.today().strftime("%Y-%m")


def test_round_cents_half_up():
    assert round_cents(2.675) == 2.68
    assert round_cents(1.005) == 1.01
    assert round_cents(-1.005) == -1.01
    assert round_cents(10) == 10.0


def test_truncate_tenths():
    assert truncate_tenths(99.96) == 99.9
    assert truncate_tenths(100) == 100.0
    assert truncate_tenths(22.75) == 22.7


def test_total_is_exact():
    assert total([0.1, 0.2]) == 0.3
    assert total([]) == 0.0


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "abc", None])
def test_to_decimal_rejects_non_finite(bad):
    with pytest.raises(InvalidAmountError):
        to_decimal(bad)


def test_to_decimal_keeps_typed_value():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(Decimal("2.50")) == Decimal("2.50")
