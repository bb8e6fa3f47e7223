"""Mini README: Daily rollup of income records.

Structure:
    * DailyStatistics - persisted totals and averages for one date.
    * DailyVehicleLine / DailyReport - per-vehicle view of one day.
    * DailyRollup - recomputes, stores and reports daily aggregates.

A day's rollup is always rebuilt from every income record on that date and
written over the previous row; it is never patched incrementally. Averages
divide by the number of currently active vehicles, not by the number of
vehicles that reported income, so an idle vehicle pulls the average down.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from ..exceptions import NotFoundError, ValidationError
from ..finance.amounts import ZERO, amount_to_number, safe_divide, sum_amounts, truncate
from ..income.records import TURN_SLOTS, IncomeRecord
from ..logging_utils import get_logger
from ..roster.models import ScheduleStatus
from ..storage.base import FleetStore
from ..storage.locks import KeyedLocks
from ..utils.dates import iter_days, parse_date

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class DailyStatistics:
    """Aggregates for one calendar date."""

    date: date
    total_revenue: Decimal = ZERO
    total_net_income: Decimal = ZERO
    vehicle_count: int = 0
    average_revenue: Decimal = ZERO
    average_net_income: Decimal = ZERO

    def as_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "total_revenue": amount_to_number(self.total_revenue),
            "total_net_income": amount_to_number(self.total_net_income),
            "vehicle_count": self.vehicle_count,
            "average_revenue": amount_to_number(self.average_revenue),
            "average_net_income": amount_to_number(self.average_net_income),
        }


@dataclass(slots=True)
class DailyVehicleLine:
    """One active vehicle's figures for the day, zero-filled when absent."""

    vehicle_id: str
    conductor_id: Optional[str]
    revenue: Decimal
    net_income: Decimal
    turn_count: int
    turn_total: Decimal
    turns: List[Decimal]
    wechat_amount: Decimal
    fuel_subsidy: Decimal
    reward_penalty: Decimal
    payment_amount: Decimal
    remark: str
    has_income: bool
    is_rest: bool
    is_overtime: bool

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
            "revenue": amount_to_number(self.revenue),
            "net_income": amount_to_number(self.net_income),
            "turn_count": self.turn_count,
            "turn_total": amount_to_number(self.turn_total),
        }
        for slot, amount in zip(TURN_SLOTS, self.turns):
            payload[f"turn{slot}_amount"] = amount_to_number(amount)
        payload.update(
            {
                "wechat_amount": amount_to_number(self.wechat_amount),
                "fuel_subsidy": amount_to_number(self.fuel_subsidy),
                "reward_penalty": amount_to_number(self.reward_penalty),
                "payment_amount": amount_to_number(self.payment_amount),
                "remark": self.remark,
                "has_income": self.has_income,
                "is_rest": self.is_rest,
                "is_overtime": self.is_overtime,
            }
        )
        return payload


@dataclass(slots=True)
class DailyReport:
    """Statistics for a date together with every active vehicle's line."""

    statistics: DailyStatistics
    total_vehicle_count: int
    rest_vehicle_count: int
    vehicles: List[DailyVehicleLine] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        statistics = self.statistics.as_dict()
        statistics["total_vehicle_count"] = self.total_vehicle_count
        statistics["rest_vehicle_count"] = self.rest_vehicle_count
        return {
            "statistics": statistics,
            "vehicles": [line.as_dict() for line in self.vehicles],
        }


class DailyRollup:
    """Recompute and serve per-date aggregates."""

    def __init__(self, store: FleetStore) -> None:
        self._store = store
        self._locks = KeyedLocks()

    def recompute_day(self, day: object) -> DailyStatistics:
        """Rebuild the rollup for ``day`` from scratch and store it."""

        target = parse_date(day)
        with self._locks.hold(target):
            records = self._store.incomes_on(target)
            active_count = len(self._store.active_vehicles())
            total_revenue = sum_amounts(record.revenue for record in records)
            total_net_income = sum_amounts(record.net_income for record in records)
            context = f"income for {target.isoformat()}"
            statistics = DailyStatistics(
                date=target,
                total_revenue=total_revenue,
                total_net_income=total_net_income,
                vehicle_count=len(records),
                average_revenue=safe_divide(total_revenue, active_count, context=context),
                average_net_income=safe_divide(total_net_income, active_count, context=context),
            )
            self._store.put_daily_statistics(statistics)
        LOGGER.info(
            "Recomputed daily statistics for %s: records=%s revenue=%s net=%s",
            target.isoformat(),
            statistics.vehicle_count,
            statistics.total_revenue,
            statistics.total_net_income,
        )
        return statistics

    def get(self, day: object) -> DailyStatistics:
        """Return the stored rollup for ``day`` without computing it."""

        target = parse_date(day)
        statistics = self._store.get_daily_statistics(target)
        if statistics is None:
            raise NotFoundError(f"No daily statistics stored for {target.isoformat()}")
        return statistics

    def get_or_recompute(self, day: object) -> DailyStatistics:
        """Return the stored rollup, computing it first when the date has none."""

        target = parse_date(day)
        statistics = self._store.get_daily_statistics(target)
        if statistics is None:
            LOGGER.debug("No stored statistics for %s, computing", target.isoformat())
            statistics = self.recompute_day(target)
        return statistics

    def recompute_range(self, start: object, end: object) -> int:
        """Recompute every date in ``[start, end]``; returns the number of days."""

        first, last = parse_date(start), parse_date(end)
        if first > last:
            raise ValidationError("start date must not be after end date")
        count = 0
        for day in iter_days(first, last):
            self.recompute_day(day)
            count += 1
        LOGGER.info("Recomputed %s days between %s and %s", count, first, last)
        return count

    def statistics_between(self, start: object, end: object) -> List[DailyStatistics]:
        """Stored rollups for a range, newest first."""

        rows = self._store.daily_statistics_between(parse_date(start), parse_date(end))
        return sorted(rows, key=lambda row: row.date, reverse=True)

    def day_report(self, day: object) -> DailyReport:
        """Per-vehicle view of a date including rest and payment figures."""

        target = parse_date(day)
        statistics = self.get_or_recompute(target)
        incomes: Dict[str, IncomeRecord] = {
            record.vehicle_id: record for record in self._store.incomes_on(target)
        }
        conductors = self._store.conductor_schedules(target.year, target.month)
        vehicles = self._store.active_vehicles()

        lines: List[DailyVehicleLine] = []
        rest_count = 0
        for vehicle in vehicles:
            income = incomes.get(vehicle.vehicle_id)
            is_rest = (
                self._store.vehicle_schedule_status(target, vehicle.vehicle_id) is ScheduleStatus.REST
            )
            if is_rest:
                rest_count += 1
            net_income = income.net_income if income else ZERO
            lines.append(
                DailyVehicleLine(
                    vehicle_id=vehicle.vehicle_id,
                    conductor_id=income.conductor_id if income else conductors.get(vehicle.vehicle_id),
                    revenue=income.revenue if income else ZERO,
                    net_income=net_income,
                    turn_count=income.turn_count if income else 0,
                    turn_total=income.turn_total if income else ZERO,
                    turns=[
                        (income.turn(slot) or ZERO) if income else ZERO for slot in TURN_SLOTS
                    ],
                    wechat_amount=income.wechat_amount if income else ZERO,
                    fuel_subsidy=income.fuel_subsidy if income else ZERO,
                    reward_penalty=income.reward_penalty if income else ZERO,
                    payment_amount=truncate(statistics.average_net_income - net_income),
                    remark=income.remark if income else "",
                    has_income=income is not None,
                    is_rest=is_rest,
                    is_overtime=income.is_overtime if income else False,
                )
            )
        LOGGER.debug("Built day report for %s with %s vehicles", target.isoformat(), len(lines))
        return DailyReport(
            statistics=statistics,
            total_vehicle_count=len(vehicles),
            rest_vehicle_count=rest_count,
            vehicles=lines,
        )
