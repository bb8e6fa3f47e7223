"""Mini README: Core package initializer for the Fleet Ledger engine.

This module exposes convenience imports that allow other parts of the
application to reach the logging helpers and error taxonomy without knowing
the exact module structure. Heavier services (rollups, settlement) live in
their own sub-packages and are imported explicitly by callers.
"""

from .exceptions import ConsistencyError, FleetLedgerError, NotFoundError, ValidationError
from .logging_utils import get_logger

__all__ = [
    "ConsistencyError",
    "FleetLedgerError",
    "NotFoundError",
    "ValidationError",
    "get_logger",
]
