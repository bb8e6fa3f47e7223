"""Mini README: Date helpers for daily and monthly aggregation.

Keeping the parsing rules here means every entry point rejects malformed
dates and months the same way, before any computation starts.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Tuple

from ..exceptions import ValidationError


def parse_date(value: object) -> date:
    """Parse ISO formatted strings or date objects safely."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as error:
            raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from error
    raise ValidationError("Dates must be provided as ISO strings or date/datetime instances.")


def month_bounds(year: object, month: object) -> Tuple[date, date]:
    """Return the first and last day of a calendar month."""

    try:
        year_number = int(year)  # type: ignore[arg-type]
        month_number = int(month)  # type: ignore[arg-type]
    except (TypeError, ValueError) as error:
        raise ValidationError(f"Invalid period {year!r}-{month!r}") from error
    if not 1 <= month_number <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month_number}")
    try:
        first = date(year_number, month_number, 1)
    except ValueError as error:
        raise ValidationError(f"Invalid year {year_number}") from error
    last_day = calendar.monthrange(year_number, month_number)[1]
    return first, first.replace(day=last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each date from ``start`` to ``end`` inclusive."""

    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
