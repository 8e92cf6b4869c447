from datetime import date

import pytest

from utils.currency import currency_symbol, format_currency, format_signed
from utils.date_helpers import (
    friendly_month, month_range, next_month, parse_date, parse_month,
    prev_month, rolling_date, short_day_label, week_monday,
)


def test_parse_date_accepts_iso_timestamps():
    assert parse_date("2025-03-10T08:00:00.000Z") == date(2025, 3, 10)
    assert parse_date("10/03/2025") is None
    assert parse_date("") is None


def test_parse_month():
    assert parse_month("2025-03") == date(2025, 3, 1)
    assert parse_month("2025-13") is None


def test_month_range_and_neighbours():
    assert month_range("2024-02") == ("2024-02-01", "2024-02-29")
    assert prev_month("2025-01") == "2024-12"
    assert next_month("2025-12") == "2026-01"
    with pytest.raises(ValueError):
        month_range("bad")


def test_rolling_date_rolls_month_and_day():
    assert rolling_date(2025, 13, 15) == date(2026, 1, 15)
    assert rolling_date(2025, 2, 30) == date(2025, 3, 2)
    assert rolling_date(2025, 6, 1) == date(2025, 6, 1)


def test_week_monday():
    assert week_monday(date(2025, 3, 12)) == date(2025, 3, 10)  # Wednesday
    assert week_monday(date(2025, 3, 10)) == date(2025, 3, 10)  # Monday
    assert week_monday(date(2025, 3, 15)) == date(2025, 3, 10)  # Saturday
    assert week_monday(date(2025, 3, 16)) == date(2025, 3, 17)  # Sunday


def test_labels():
    assert short_day_label(date(2025, 3, 5)) == "Mar 5"
    assert friendly_month("2025-03") == "March 2025"
    assert friendly_month("2025-03", long=False) == "Mar 2025"
    assert friendly_month("oops") == "oops"


def test_currency_helpers():
    assert currency_symbol("USD") == "$"
    assert currency_symbol(None) == "Rs. "
    assert format_currency(1234.5) == "Rs. 1,234.50"
    assert format_signed(-50, "$") == "-$50.00"
    assert format_signed(10, "$") == "+$10.00"
