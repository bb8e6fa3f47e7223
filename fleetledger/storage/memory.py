"""Mini README: In-memory implementations of the storage interfaces.

Structure:
    * InMemoryFleetStore - dictionaries keyed by natural keys, guarded by one
      re-entrant lock, with snapshot/restore transactions.
    * InMemorySettingStore - lock-protected manager salary.

Values are deep-copied on the way in and out so callers can never mutate
stored state behind the store's back. This keeps saved settlement snapshots
frozen exactly as they were written. Swap in a database-backed ``FleetStore``
for production persistence without touching the services.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..exceptions import NotFoundError
from ..finance.amounts import ZERO, truncate
from ..logging_utils import get_logger
from ..roster.models import (
    ConductorSchedule,
    ScheduleStatus,
    Vehicle,
    VehicleSchedule,
    VehicleStatus,
    validate_vehicle_id,
)
from .base import FleetStore, SettingStore

if TYPE_CHECKING:
    from ..income.records import IncomeRecord
    from ..settlement.balance import PaymentBalanceSnapshot
    from ..statistics.daily import DailyStatistics

LOGGER = get_logger(__name__)


class InMemoryFleetStore(FleetStore):
    """Thread-safe dictionary-backed store."""

    def __init__(self, vehicles: Optional[Iterable[Vehicle]] = None) -> None:
        self._lock = threading.RLock()
        self._vehicles: Dict[str, Vehicle] = {}
        self._vehicle_schedules: Dict[Tuple[date, str], VehicleSchedule] = {}
        self._conductor_schedules: Dict[Tuple[int, int, str], ConductorSchedule] = {}
        self._incomes: Dict[Tuple[date, str], "IncomeRecord"] = {}
        self._daily_statistics: Dict[date, "DailyStatistics"] = {}
        self._snapshots: Dict[Tuple[int, int], "PaymentBalanceSnapshot"] = {}
        self._sequence = 0
        for vehicle in vehicles or []:
            self.register_vehicle(vehicle)
        LOGGER.debug("In-memory fleet store initialised with %s vehicles", len(self._vehicles))

    @classmethod
    def with_roster(cls, vehicle_ids: Iterable[str]) -> "InMemoryFleetStore":
        """Build a store whose roster holds ``vehicle_ids`` as active vehicles."""

        return cls(
            Vehicle(vehicle_id=vehicle_id, sort_order=index)
            for index, vehicle_id in enumerate(vehicle_ids)
        )

    # Collaborator-side writes -------------------------------------------------

    def register_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Insert or replace a roster entry."""

        validate_vehicle_id(vehicle.vehicle_id)
        with self._lock:
            self._vehicles[vehicle.vehicle_id] = copy.deepcopy(vehicle)
        return vehicle

    def set_vehicle_status(self, vehicle_id: str, status: Union[VehicleStatus, str]) -> Vehicle:
        """Activate or retire a vehicle."""

        status = VehicleStatus.from_str(status)
        with self._lock:
            if vehicle_id not in self._vehicles:
                raise NotFoundError(f"Vehicle {vehicle_id} not registered")
            updated = replace(self._vehicles[vehicle_id], status=status)
            self._vehicles[vehicle_id] = updated
            return copy.deepcopy(updated)

    def set_vehicle_schedule(self, schedule: VehicleSchedule) -> VehicleSchedule:
        """Record a vehicle's rest/operate plan for one date."""

        with self._lock:
            self._vehicle_schedules[(schedule.date, schedule.vehicle_id)] = copy.deepcopy(schedule)
        return schedule

    # Roster -----------------------------------------------------------------

    def list_vehicles(self) -> List[Vehicle]:
        with self._lock:
            vehicles = sorted(
                self._vehicles.values(),
                key=lambda vehicle: (vehicle.sort_order, vehicle.vehicle_id),
            )
            return copy.deepcopy(vehicles)

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._lock:
            return copy.deepcopy(self._vehicles.get(vehicle_id))

    def vehicle_schedule_status(self, day: date, vehicle_id: str) -> ScheduleStatus:
        with self._lock:
            schedule = self._vehicle_schedules.get((day, vehicle_id))
        return schedule.status if schedule else ScheduleStatus.OPERATE

    def vehicle_schedules_between(self, start: date, end: date) -> List[VehicleSchedule]:
        with self._lock:
            rows = [
                schedule
                for (day, _vehicle_id), schedule in self._vehicle_schedules.items()
                if start <= day <= end
            ]
            rows.sort(key=lambda schedule: (schedule.date, schedule.vehicle_id))
            return copy.deepcopy(rows)

    def conductor_schedules(self, year: int, month: int) -> Dict[str, Optional[str]]:
        with self._lock:
            return {
                vehicle_id: schedule.conductor_id
                for (schedule_year, schedule_month, vehicle_id), schedule in self._conductor_schedules.items()
                if schedule_year == year and schedule_month == month
            }

    def put_conductor_schedule(self, schedule: ConductorSchedule) -> ConductorSchedule:
        with self._lock:
            key = (schedule.year, schedule.month, schedule.vehicle_id)
            self._conductor_schedules[key] = copy.deepcopy(schedule)
        return schedule

    # Income records ---------------------------------------------------------

    def get_income(self, day: date, vehicle_id: str) -> Optional["IncomeRecord"]:
        with self._lock:
            return copy.deepcopy(self._incomes.get((day, vehicle_id)))

    def put_income(self, record: "IncomeRecord") -> "IncomeRecord":
        with self._lock:
            existing = self._incomes.get(record.key)
            now = datetime.now()
            if existing is not None:
                stored = replace(
                    record,
                    record_id=existing.record_id,
                    created_at=existing.created_at,
                    updated_at=now,
                )
            else:
                self._sequence += 1
                stored = replace(record, record_id=self._sequence, created_at=now, updated_at=now)
            self._incomes[record.key] = copy.deepcopy(stored)
            return stored

    def delete_income(self, day: date, vehicle_id: str) -> bool:
        with self._lock:
            return self._incomes.pop((day, vehicle_id), None) is not None

    def incomes_on(self, day: date) -> List["IncomeRecord"]:
        return self.incomes_between(day, day)

    def incomes_between(self, start: date, end: date) -> List["IncomeRecord"]:
        with self._lock:
            rows = [record for (day, _), record in self._incomes.items() if start <= day <= end]
            rows.sort(key=lambda record: (record.date, record.record_id or 0))
            return copy.deepcopy(rows)

    # Daily rollups ----------------------------------------------------------

    def get_daily_statistics(self, day: date) -> Optional["DailyStatistics"]:
        with self._lock:
            return copy.deepcopy(self._daily_statistics.get(day))

    def put_daily_statistics(self, statistics: "DailyStatistics") -> "DailyStatistics":
        with self._lock:
            self._daily_statistics[statistics.date] = copy.deepcopy(statistics)
        return statistics

    def daily_statistics_between(self, start: date, end: date) -> List["DailyStatistics"]:
        with self._lock:
            rows = [row for day, row in self._daily_statistics.items() if start <= day <= end]
            rows.sort(key=lambda row: row.date)
            return copy.deepcopy(rows)

    # Settlement snapshots ---------------------------------------------------

    def get_snapshot(self, year: int, month: int) -> Optional["PaymentBalanceSnapshot"]:
        with self._lock:
            return copy.deepcopy(self._snapshots.get((year, month)))

    def put_snapshot(self, snapshot: "PaymentBalanceSnapshot") -> "PaymentBalanceSnapshot":
        with self._lock:
            key = (snapshot.year, snapshot.month)
            existing = self._snapshots.get(key)
            now = datetime.now()
            stored = replace(
                snapshot,
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
            self._snapshots[key] = copy.deepcopy(stored)
            return copy.deepcopy(stored)

    # Transactions -----------------------------------------------------------

    def _capture(self) -> Dict[str, object]:
        return {
            "_vehicles": copy.deepcopy(self._vehicles),
            "_vehicle_schedules": copy.deepcopy(self._vehicle_schedules),
            "_conductor_schedules": copy.deepcopy(self._conductor_schedules),
            "_incomes": copy.deepcopy(self._incomes),
            "_daily_statistics": copy.deepcopy(self._daily_statistics),
            "_snapshots": copy.deepcopy(self._snapshots),
            "_sequence": self._sequence,
        }

    @contextmanager
    def transaction(self) -> Iterator["InMemoryFleetStore"]:
        """Hold the store lock and restore the prior state if the block raises."""

        with self._lock:
            backup = self._capture()
            try:
                yield self
            except BaseException:
                for attribute, value in backup.items():
                    setattr(self, attribute, value)
                LOGGER.warning("Store transaction rolled back")
                raise


class InMemorySettingStore(SettingStore):
    """Manager salary held in process memory."""

    def __init__(self, manager_salary: Decimal = ZERO) -> None:
        self._lock = threading.Lock()
        self._manager_salary = truncate(manager_salary)

    def get_manager_salary(self) -> Decimal:
        with self._lock:
            return self._manager_salary

    def set_manager_salary(self, value: Decimal) -> Decimal:
        with self._lock:
            previous = self._manager_salary
            self._manager_salary = truncate(value)
            current = self._manager_salary
        LOGGER.info("Manager salary changed from %s to %s", previous, current)
        return previous
