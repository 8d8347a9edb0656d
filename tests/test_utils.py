"""Tests for date, amount and period parsing."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from parkledger.utils.amount_parser import parse_amount
from parkledger.utils.date_parser import parse_date
from parkledger.utils.period import (
    iter_periods,
    next_period,
    parse_period,
    period_end,
    period_of,
    period_start,
)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)


def test_parse_relative_dates():
    """Test parsing 'today' and 'yesterday'."""
    assert parse_date("today") == date.today()
    assert parse_date("Yesterday") == date.today() - timedelta(days=1)
    assert parse_date("this month") == date.today().replace(day=1)


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError):
        parse_date("not a date")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("$1,234.50", Decimal("1234.50")),
        ("MXN 500", Decimal("500.00")),
        ("(20.00)", Decimal("-20.00")),
        ("-7.1", Decimal("-7.10")),
    ],
)
def test_parse_amount(text, expected):
    """Test amount formats."""
    assert parse_amount(text) == expected


def test_parse_amount_rejects_sub_cent():
    """Test that more than two decimals is rejected."""
    with pytest.raises(ValueError):
        parse_amount("1.005")
    with pytest.raises(ValueError):
        parse_amount("")
    with pytest.raises(ValueError):
        parse_amount("abc")


def test_periods():
    """Test period helpers."""
    assert period_of(date(2024, 2, 29)) == "2024-02"
    assert parse_period(" 2024-03 ") == "2024-03"
    assert period_start("2024-02") == date(2024, 2, 1)
    assert period_end("2024-02") == date(2024, 2, 29)
    assert next_period("2024-12") == "2025-01"
    assert list(iter_periods("2024-11", "2025-02")) == ["2024-11", "2024-12", "2025-01", "2025-02"]
    assert list(iter_periods("2025-02", "2024-11")) == []


def test_invalid_periods():
    """Test malformed periods."""
    for value in ["2024-13", "2024-3", "24-03", "march"]:
        with pytest.raises(ValueError):
            parse_period(value)
