"""Mini README: Write path for income records.

Structure:
    * IncomeRecordService - derive-and-save, batch save, delete and lookup.

Every write recomputes the affected day's rollup before returning, so a
caller can read the daily statistics immediately after a save or delete.
Single writes serialise per (date, vehicle) key; batch writes run inside one
store transaction and recompute each affected date once at the end.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, List, Optional

from ..exceptions import NotFoundError, ValidationError
from ..logging_utils import get_logger
from ..roster.models import ScheduleStatus, validate_vehicle_id
from ..statistics import daily as daily_rollup
from ..storage.base import FleetStore
from ..storage.locks import KeyedLocks
from ..utils.dates import parse_date
from .records import IncomeInput, IncomeRecord, derive_income_record

if TYPE_CHECKING:
    from ..statistics.daily import DailyRollup, DailyStatistics

LOGGER = get_logger(__name__)


class IncomeRecordService:
    """Create, update and delete vehicle-day income records."""

    def __init__(self, store: FleetStore, rollup: Optional[DailyRollup] = None) -> None:
        self._store = store
        self._rollup = rollup or daily_rollup.DailyRollup(store)
        self._locks = KeyedLocks()

    @property
    def rollup(self) -> DailyRollup:
        return self._rollup

    def _check_roster(self, record: IncomeRecord) -> None:
        vehicle = self._store.get_vehicle(record.vehicle_id)
        if vehicle is None or not vehicle.is_active:
            LOGGER.warning("Rejected income for unknown or inactive vehicle %s", record.vehicle_id)
            raise ValidationError(f"Vehicle {record.vehicle_id} is not on the active roster")
        if record.conductor_id and self._store.get_vehicle(record.conductor_id) is None:
            LOGGER.warning("Rejected income with unknown conductor %s", record.conductor_id)
            raise ValidationError(f"Conductor {record.conductor_id} is not a registered vehicle")

    def _derive(self, raw: IncomeInput) -> IncomeRecord:
        day = parse_date(raw.date)
        vehicle_id = validate_vehicle_id(raw.vehicle_id)
        is_rest = self._store.vehicle_schedule_status(day, vehicle_id) is ScheduleStatus.REST
        record = derive_income_record(raw, default_overtime=is_rest)
        self._check_roster(record)
        return record

    def derive_and_save(self, raw: IncomeInput) -> IncomeRecord:
        """Canonicalise, derive, upsert, then recompute the record's day."""

        record = self._derive(raw)
        with self._locks.hold(record.key):
            stored = self._store.put_income(record)
        LOGGER.info(
            "Saved income %s/%s revenue=%s net=%s turns=%s",
            stored.date.isoformat(),
            stored.vehicle_id,
            stored.revenue,
            stored.net_income,
            stored.turn_count,
        )
        self._rollup.recompute_day(stored.date)
        return stored

    def batch_save(
        self,
        day: object,
        inputs: Iterable[IncomeInput],
        *,
        operator_name: Optional[str] = None,
    ) -> List[IncomeRecord]:
        """Upsert many records for one date atomically, then recompute the date once."""

        target = parse_date(day)
        prepared = [
            replace(raw, date=target, operator_name=operator_name or raw.operator_name)
            for raw in inputs
        ]
        if not prepared:
            raise ValidationError("A batch needs at least one income entry")
        seen = set()
        for raw in prepared:
            if raw.vehicle_id in seen:
                raise ValidationError(f"Vehicle {raw.vehicle_id} appears twice in the batch")
            seen.add(raw.vehicle_id)

        records = [self._derive(raw) for raw in prepared]
        with self._store.transaction() as store:
            saved = [store.put_income(record) for record in records]
        LOGGER.info("Batch saved %s income records for %s", len(saved), target.isoformat())
        self._rollup.recompute_day(target)
        return saved

    def get(self, day: object, vehicle_id: str) -> IncomeRecord:
        """Return one record or raise ``NotFoundError``."""

        target = parse_date(day)
        record = self._store.get_income(target, vehicle_id)
        if record is None:
            raise NotFoundError(f"No income recorded for vehicle {vehicle_id} on {target.isoformat()}")
        return record

    def delete(self, day: object, vehicle_id: str) -> DailyStatistics:
        """Remove a record and return the day's recomputed statistics."""

        target = parse_date(day)
        with self._locks.hold((target, vehicle_id)):
            removed = self._store.delete_income(target, vehicle_id)
        if not removed:
            raise NotFoundError(f"No income recorded for vehicle {vehicle_id} on {target.isoformat()}")
        LOGGER.info("Deleted income %s/%s", target.isoformat(), vehicle_id)
        return self._rollup.recompute_day(target)

    def records_on(self, day: object) -> List[IncomeRecord]:
        return self._store.incomes_on(parse_date(day))

