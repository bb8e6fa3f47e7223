"""Mini README: Error taxonomy shared by every Fleet Ledger component.

Structure:
    * FleetLedgerError - common base so callers can catch engine failures.
    * ValidationError - malformed input rejected before any computation.
    * NotFoundError - a referenced record or snapshot does not exist.
    * ConsistencyError - an aggregate cannot be defined for the current roster.

Zero income is a valid aggregate and never raises; ``NotFoundError`` is only
used when a specific record was asked for by key.
"""

from __future__ import annotations


class FleetLedgerError(Exception):
    """Base class for all errors raised by the engine."""


class ValidationError(FleetLedgerError, ValueError):
    """Input was malformed or violated a business rule."""


class NotFoundError(FleetLedgerError, KeyError):
    """A record addressed by its natural key is absent."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message for API payloads.
        return str(self.args[0]) if self.args else ""


class ConsistencyError(FleetLedgerError):
    """An aggregate is undefined, e.g. averaging over an empty roster."""
