"""Mini README: Generic helpers shared across Fleet Ledger packages.

Structure:
    * dates - ISO date parsing and calendar-month boundaries.
"""

from .dates import iter_days, month_bounds, parse_date

__all__ = ["iter_days", "month_bounds", "parse_date"]
