"""Mini README: One-decimal fixed-point arithmetic.

Structure:
    * truncate - floor a value to one decimal digit (``floor(x * 10) / 10``).
    * parse_amount - coerce boundary input into a truncated ``Decimal``.
    * sum_amounts / safe_divide - aggregate helpers that re-truncate results.
    * amount_to_number - export helper used by ``as_dict`` methods.

Truncation floors toward negative infinity, so ``-1.26`` becomes ``-1.3``
rather than ``-1.2``. The ledger has always behaved this way and stored
history depends on it; confirm with the fleet owner before changing it.

All arithmetic runs on ``decimal.Decimal``. Floats are converted through
``str`` first so binary representation noise (``0.1 + 0.2``) never moves a
value across a floor boundary. Boundary amounts must stay below
``AMOUNT_LIMIT`` in magnitude; larger inputs are validation errors.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from ..exceptions import ConsistencyError, ValidationError

AmountLike = Union[Decimal, int, float, str]

ONE_DECIMAL = Decimal("0.1")
ZERO = Decimal("0.0")
# Largest magnitude accepted at the boundary; keeps every aggregate well
# inside the default 28-digit decimal context.
AMOUNT_LIMIT = Decimal("1000000000000")


def _to_decimal(value: AmountLike) -> Decimal:
    if isinstance(value, Decimal):
        candidate = value
    elif isinstance(value, bool):
        raise ValidationError(f"Amount must be numeric, got {value!r}")
    elif isinstance(value, (int, float)):
        candidate = Decimal(str(value))
    elif isinstance(value, str):
        try:
            candidate = Decimal(value.strip())
        except InvalidOperation as error:
            raise ValidationError(f"Amount '{value}' is not a number") from error
    else:
        raise ValidationError(f"Amount must be numeric, got {type(value).__name__}")
    if not candidate.is_finite():
        raise ValidationError(f"Amount {value!r} is not finite")
    return candidate


def truncate(value: AmountLike) -> Decimal:
    """Floor ``value`` to one decimal digit."""

    candidate = _to_decimal(value)
    try:
        return candidate.quantize(ONE_DECIMAL, rounding=ROUND_FLOOR)
    except InvalidOperation as error:
        raise ValidationError(f"Amount {value!r} is too large to store") from error


def parse_amount(
    value: Optional[AmountLike],
    *,
    field_name: str,
    allow_negative: bool = False,
) -> Optional[Decimal]:
    """Canonicalise an optional boundary amount; blanks become ``None``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        amount = truncate(value)
    except ValidationError as error:
        raise ValidationError(f"{field_name}: {error}") from error
    if abs(amount) >= AMOUNT_LIMIT:
        raise ValidationError(f"{field_name} must be below {AMOUNT_LIMIT}, got {amount}")
    if not allow_negative and amount < 0:
        raise ValidationError(f"{field_name} must not be negative, got {amount}")
    return amount


def sum_amounts(values: Iterable[Optional[Decimal]]) -> Decimal:
    """Add amounts treating ``None`` as zero, then truncate."""

    total = ZERO
    for value in values:
        if value is not None:
            total += value
    return truncate(total)


def safe_divide(numerator: Decimal, denominator: int, *, context: str) -> Decimal:
    """Divide an amount by a head count, refusing an empty denominator."""

    if denominator <= 0:
        raise ConsistencyError(f"Cannot average {context}: no active vehicles registered")
    return truncate(numerator / Decimal(denominator))


def amount_to_number(value: Optional[Decimal]) -> Optional[float]:
    """Export a one-decimal amount as a JSON number."""

    if value is None:
        return None
    return float(value)
