"""Mini README: Abstract persistence boundary consumed by the engine.

Structure:
    * FleetStore - roster, schedules, income records, daily rollups and
      settlement snapshots, plus a transactional boundary for batches.
    * SettingStore - process-wide mutable settings (manager salary).

The engine never talks to a database directly. Vendors implement these
interfaces; ``storage.memory`` ships the in-process implementation used by the
service and the test-suite.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, ContextManager, Dict, List, Optional

from ..roster.models import ConductorSchedule, ScheduleStatus, Vehicle, VehicleSchedule

if TYPE_CHECKING:
    from ..income.records import IncomeRecord
    from ..settlement.balance import PaymentBalanceSnapshot
    from ..statistics.daily import DailyStatistics


class FleetStore(ABC):
    """Storage interface for everything the engine reads or writes."""

    # Roster -----------------------------------------------------------------

    @abstractmethod
    def list_vehicles(self) -> List[Vehicle]:
        """Return every registered vehicle in roster order."""

    def active_vehicles(self) -> List[Vehicle]:
        """Return active vehicles in roster order."""

        return [vehicle for vehicle in self.list_vehicles() if vehicle.is_active]

    @abstractmethod
    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        """Look up a vehicle by identifier."""

    @abstractmethod
    def vehicle_schedule_status(self, day: date, vehicle_id: str) -> ScheduleStatus:
        """Return the planned status for a vehicle-day (operate when unplanned)."""

    @abstractmethod
    def vehicle_schedules_between(self, start: date, end: date) -> List[VehicleSchedule]:
        """Return schedule rows dated within ``[start, end]``."""

    @abstractmethod
    def conductor_schedules(self, year: int, month: int) -> Dict[str, Optional[str]]:
        """Map vehicle id to conductor id for a month."""

    @abstractmethod
    def put_conductor_schedule(self, schedule: ConductorSchedule) -> ConductorSchedule:
        """Insert or replace the assignment keyed by (year, month, vehicle)."""

    # Income records ---------------------------------------------------------

    @abstractmethod
    def get_income(self, day: date, vehicle_id: str) -> Optional["IncomeRecord"]:
        """Return the record for a vehicle-day if present."""

    @abstractmethod
    def put_income(self, record: "IncomeRecord") -> "IncomeRecord":
        """Insert or replace the record keyed by (date, vehicle_id)."""

    @abstractmethod
    def delete_income(self, day: date, vehicle_id: str) -> bool:
        """Remove a record, returning whether one existed."""

    @abstractmethod
    def incomes_on(self, day: date) -> List["IncomeRecord"]:
        """Return all records for one date."""

    @abstractmethod
    def incomes_between(self, start: date, end: date) -> List["IncomeRecord"]:
        """Return records dated within ``[start, end]`` ordered by date."""

    # Daily rollups ----------------------------------------------------------

    @abstractmethod
    def get_daily_statistics(self, day: date) -> Optional["DailyStatistics"]:
        """Return the stored rollup for a date."""

    @abstractmethod
    def put_daily_statistics(self, statistics: "DailyStatistics") -> "DailyStatistics":
        """Upsert the rollup keyed by date."""

    @abstractmethod
    def daily_statistics_between(self, start: date, end: date) -> List["DailyStatistics"]:
        """Return stored rollups dated within ``[start, end]``."""

    # Settlement snapshots ---------------------------------------------------

    @abstractmethod
    def get_snapshot(self, year: int, month: int) -> Optional["PaymentBalanceSnapshot"]:
        """Return the saved settlement for a month."""

    @abstractmethod
    def put_snapshot(self, snapshot: "PaymentBalanceSnapshot") -> "PaymentBalanceSnapshot":
        """Upsert the settlement keyed by (year, month)."""

    # Transactions -----------------------------------------------------------

    @abstractmethod
    def transaction(self) -> ContextManager["FleetStore"]:
        """Group writes so that either all persist or none do."""


class SettingStore(ABC):
    """Process-wide settings shared by every month."""

    @abstractmethod
    def get_manager_salary(self) -> Decimal:
        """Return the current manager salary."""

    @abstractmethod
    def set_manager_salary(self, value: Decimal) -> Decimal:
        """Replace the manager salary atomically, returning the previous value."""
