"""Mini README: Tests for one-decimal truncation and amount parsing.

Structure:
    * test_truncate_floors_to_one_decimal - positive, negative and exact values.
    * test_truncate_ignores_float_noise - binary float artefacts never cross a floor boundary.
    * test_parse_amount_* - blanks, negatives and garbage at the boundary.
    * test_safe_divide_refuses_empty_roster - zero head count is a consistency error.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from fleetledger.exceptions import ConsistencyError, ValidationError
from fleetledger.finance import parse_amount, safe_divide, sum_amounts, truncate


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1.26", Decimal("1.2")),
        ("1.29", Decimal("1.2")),
        ("-1.26", Decimal("-1.3")),
        ("-1.2", Decimal("-1.2")),
        (6.491, Decimal("6.4")),
        (100, Decimal("100.0")),
    ],
)
def test_truncate_floors_to_one_decimal(raw: object, expected: Decimal) -> None:
    """Truncation floors toward negative infinity at one decimal digit."""

    assert truncate(raw) == expected


def test_truncate_is_idempotent() -> None:
    """Applying truncate twice changes nothing."""

    for raw in ["0.0", "12.34", "-7.77", "999999.99"]:
        once = truncate(raw)
        assert truncate(once) == once


def test_truncate_ignores_float_noise() -> None:
    """Floats are read through their repr so 0.1 + 0.2 still lands on 0.3."""

    assert truncate(0.1 + 0.2) == Decimal("0.3")
    assert sum_amounts([truncate(0.1), truncate(0.2)]) == Decimal("0.3")


def test_parse_amount_treats_blank_as_absent() -> None:
    """Absent and blank values parse to None rather than zero."""

    assert parse_amount(None, field_name="turn1") is None
    assert parse_amount("   ", field_name="turn1") is None
    assert parse_amount("12.37", field_name="turn1") == Decimal("12.3")


def test_parse_amount_rejects_negative_unless_allowed() -> None:
    """Only signed fields such as reward/penalty accept negatives."""

    with pytest.raises(ValidationError):
        parse_amount("-5", field_name="turn1")
    assert parse_amount("-5", field_name="reward_penalty", allow_negative=True) == Decimal("-5.0")


@pytest.mark.parametrize("raw", ["abc", "nan", "inf", True])
def test_parse_amount_rejects_garbage(raw: object) -> None:
    """Non-numeric and non-finite input is a validation error naming the field."""

    with pytest.raises(ValidationError) as excinfo:
        parse_amount(raw, field_name="wechat_amount")
    assert "wechat_amount" in str(excinfo.value)


def test_safe_divide_refuses_empty_roster() -> None:
    """Dividing by zero active vehicles must never silently produce a number."""

    assert safe_divide(Decimal("155.8"), 24, context="test") == Decimal("6.4")
    with pytest.raises(ConsistencyError):
        safe_divide(Decimal("10.0"), 0, context="test")


@pytest.mark.parametrize("raw", ["1e30", 1e30, "1e20", "-1000000000000"])
def test_parse_amount_rejects_oversized_values(raw: object) -> None:
    """Magnitudes past the storage bound are validation errors, not arithmetic faults."""

    with pytest.raises(ValidationError) as excinfo:
        parse_amount(raw, field_name="turn1", allow_negative=True)
    assert "turn1" in str(excinfo.value)


def test_truncate_reports_overflow_as_validation_error() -> None:
    """Values too wide for the decimal context fail with the engine's own error."""

    with pytest.raises(ValidationError):
        truncate(Decimal("1e40"))
    assert parse_amount("999999999999.9", field_name="turn1") == Decimal("999999999999.9")
