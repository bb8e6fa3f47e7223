"""Mini README: Persistence boundary for Fleet Ledger.

The package is divided into ``base`` for the abstract store interfaces,
``memory`` for the in-process implementation, and ``locks`` for key-scoped
mutual exclusion used by write paths.
"""

from .base import FleetStore, SettingStore
from .locks import KeyedLocks
from .memory import InMemoryFleetStore, InMemorySettingStore

__all__ = [
    "FleetStore",
    "InMemoryFleetStore",
    "InMemorySettingStore",
    "KeyedLocks",
    "SettingStore",
]
