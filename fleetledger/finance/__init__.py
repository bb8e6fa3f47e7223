"""Mini README: Fixed-point money helpers for Fleet Ledger.

Every monetary value in the engine carries exactly one decimal digit. The
``amounts`` module canonicalises inputs, performs the floor-style truncation
and converts values back to JSON friendly numbers for the HTTP layer.
"""

from .amounts import AMOUNT_LIMIT, ZERO, amount_to_number, parse_amount, safe_divide, sum_amounts, truncate

__all__ = [
    "AMOUNT_LIMIT",
    "ZERO",
    "amount_to_number",
    "parse_amount",
    "safe_divide",
    "sum_amounts",
    "truncate",
]
