"""Mini README: Monthly rollup, an on-demand view over income records.

Structure:
    * VehicleMonthlySummary - one active vehicle's month (sums plus per-turn maxima).
    * TurnObservation / AverageTurnEntry / RewardPenaltyEntry - leaderboard entries.
    * MonthlyStatistics - totals, counters, vehicle summaries and four rankings.
    * VehicleMonthDetail / RevenueMatrix - drill-down views for one month.
    * MonthlyRollup - builds the views above from the store.

Nothing here is persisted or cached. Every call re-reads the month's income
records so the view can never lag behind a write. Per-vehicle turn columns
hold the month's highest single value for each turn slot, not a total; the
remaining amounts are summed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..exceptions import NotFoundError
from ..finance.amounts import ZERO, amount_to_number, safe_divide, sum_amounts, truncate
from ..income.records import TURN_SLOTS, IncomeRecord
from ..logging_utils import get_logger
from ..roster.models import validate_vehicle_id
from ..storage.base import FleetStore
from ..utils.dates import iter_days, month_bounds
from .daily import DailyStatistics
from .ranking import (
    REWARD_PENALTY_WINDOW_THRESHOLD,
    SINGLE_TURN_WINDOW_THRESHOLD,
    RankingRow,
    rank_with_tail,
    sort_descending,
    window,
)

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class VehicleMonthlySummary:
    """Aggregated month for one active vehicle."""

    vehicle_id: str
    conductor_id: Optional[str] = None
    revenue: Decimal = ZERO
    net_income: Decimal = ZERO
    turn_count: int = 0
    turn_maxima: List[Decimal] = field(default_factory=lambda: [ZERO] * len(TURN_SLOTS))
    wechat_amount: Decimal = ZERO
    fuel_subsidy: Decimal = ZERO
    reward_penalty: Decimal = ZERO
    payment_amount: Decimal = ZERO
    has_income: bool = False
    is_overtime: bool = False
    dates: List[date] = field(default_factory=list)

    @property
    def turn_total(self) -> Decimal:
        return sum_amounts(self.turn_maxima)

    def absorb(self, record: IncomeRecord) -> None:
        """Fold one income record into the running month."""

        self.revenue += record.revenue
        self.net_income += record.net_income
        self.turn_count += record.turn_count
        for index, slot in enumerate(TURN_SLOTS):
            amount = record.turn(slot)
            if amount is not None and amount > self.turn_maxima[index]:
                self.turn_maxima[index] = amount
        self.wechat_amount += record.wechat_amount
        self.fuel_subsidy += record.fuel_subsidy
        self.reward_penalty += record.reward_penalty
        self.has_income = True
        self.is_overtime = self.is_overtime or record.is_overtime
        if record.conductor_id:
            self.conductor_id = record.conductor_id
        self.dates.append(record.date)

    def finalise(self, average_net_income: Decimal) -> None:
        """Truncate the sums and derive the payment against the fleet average."""

        self.revenue = truncate(self.revenue)
        self.net_income = truncate(self.net_income)
        self.wechat_amount = truncate(self.wechat_amount)
        self.fuel_subsidy = truncate(self.fuel_subsidy)
        self.reward_penalty = truncate(self.reward_penalty)
        self.payment_amount = truncate(average_net_income - self.net_income)

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
            "revenue": amount_to_number(self.revenue),
            "net_income": amount_to_number(self.net_income),
            "turn_count": self.turn_count,
            "turn_total": amount_to_number(self.turn_total),
        }
        for slot, amount in zip(TURN_SLOTS, self.turn_maxima):
            payload[f"turn{slot}_amount"] = amount_to_number(amount)
        payload.update(
            {
                "wechat_amount": amount_to_number(self.wechat_amount),
                "fuel_subsidy": amount_to_number(self.fuel_subsidy),
                "reward_penalty": amount_to_number(self.reward_penalty),
                "payment_amount": amount_to_number(self.payment_amount),
                "has_income": self.has_income,
                "is_overtime": self.is_overtime,
            }
        )
        return payload


@dataclass(slots=True)
class TurnObservation:
    """A vehicle's best amount for one turn slot in the month."""

    vehicle_id: str
    conductor_id: Optional[str]
    is_overtime: bool
    turn_number: int
    amount: Decimal

    def as_dict(self) -> Dict[str, object]:
        return {
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
            "is_overtime": self.is_overtime,
            "turn_number": self.turn_number,
            "turn_amount": amount_to_number(self.amount),
        }


@dataclass(slots=True)
class AverageTurnEntry:
    """Revenue per counted turn for one vehicle."""

    vehicle_id: str
    conductor_id: Optional[str]
    revenue: Decimal
    turn_count: int
    average_turn_revenue: Decimal
    has_income: bool

    def as_dict(self) -> Dict[str, object]:
        return {
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
            "revenue": amount_to_number(self.revenue),
            "turn_count": self.turn_count,
            "average_turn_revenue": amount_to_number(self.average_turn_revenue),
            "has_income": self.has_income,
        }


@dataclass(slots=True)
class RewardPenaltyEntry:
    """A single day's nonzero reward or penalty."""

    date: date
    vehicle_id: str
    conductor_id: Optional[str]
    reward_penalty: Decimal
    is_overtime: bool

    def as_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
            "reward_penalty": amount_to_number(self.reward_penalty),
            "is_overtime": self.is_overtime,
        }


@dataclass(slots=True)
class OvertimeVehicle:
    vehicle_id: str
    dates: List[date]

    def as_dict(self) -> Dict[str, object]:
        return {"vehicle_id": self.vehicle_id, "dates": [day.isoformat() for day in self.dates]}


@dataclass(slots=True)
class MonthlyStatistics:
    """Everything the monthly dashboard shows for one calendar month."""

    year: int
    month: int
    total_revenue: Decimal
    total_net_income: Decimal
    vehicle_count: int
    total_vehicle_count: int
    income_record_count: int
    total_rest_count: int
    total_overtime_count: int
    average_revenue: Decimal
    average_net_income: Decimal
    overtime_vehicles: List[OvertimeVehicle] = field(default_factory=list)
    vehicles: List[VehicleMonthlySummary] = field(default_factory=list)
    daily_statistics: List[DailyStatistics] = field(default_factory=list)
    revenue_ranking: List[RankingRow] = field(default_factory=list)
    single_turn_ranking: List[RankingRow] = field(default_factory=list)
    average_turn_ranking: List[RankingRow] = field(default_factory=list)
    reward_penalty_ranking: List[RankingRow] = field(default_factory=list)

    def vehicle(self, vehicle_id: str) -> VehicleMonthlySummary:
        for summary in self.vehicles:
            if summary.vehicle_id == vehicle_id:
                return summary
        raise NotFoundError(f"Vehicle {vehicle_id} is not on the active roster")

    def as_dict(self) -> Dict[str, object]:
        return {
            "statistics": {
                "year": self.year,
                "month": self.month,
                "total_revenue": amount_to_number(self.total_revenue),
                "total_net_income": amount_to_number(self.total_net_income),
                "vehicle_count": self.vehicle_count,
                "total_vehicle_count": self.total_vehicle_count,
                "income_record_count": self.income_record_count,
                "total_rest_count": self.total_rest_count,
                "total_overtime_count": self.total_overtime_count,
                "average_revenue": amount_to_number(self.average_revenue),
                "average_net_income": amount_to_number(self.average_net_income),
            },
            "overtime_vehicles": [entry.as_dict() for entry in self.overtime_vehicles],
            "vehicles": [summary.as_dict() for summary in self.vehicles],
            "daily_statistics": [row.as_dict() for row in self.daily_statistics],
            "revenue_ranking": [row.as_dict() for row in self.revenue_ranking],
            "single_turn_ranking": [row.as_dict() for row in self.single_turn_ranking],
            "average_turn_ranking": [row.as_dict() for row in self.average_turn_ranking],
            "reward_penalty_ranking": [row.as_dict() for row in self.reward_penalty_ranking],
        }


@dataclass(slots=True)
class VehicleMonthDetail:
    vehicle_id: str
    year: int
    month: int
    records: List[IncomeRecord] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "vehicle_id": self.vehicle_id,
            "year": self.year,
            "month": self.month,
            "records": [record.as_dict() for record in self.records],
        }


@dataclass(slots=True)
class RevenueMatrixRow:
    vehicle_id: str
    daily_revenues: List[Decimal]
    monthly_total: Decimal

    def as_dict(self) -> Dict[str, object]:
        return {
            "vehicle_id": self.vehicle_id,
            "daily_revenues": {
                str(day): amount_to_number(amount)
                for day, amount in enumerate(self.daily_revenues, start=1)
            },
            "monthly_total": amount_to_number(self.monthly_total),
        }


@dataclass(slots=True)
class RevenueMatrix:
    """Revenue per active vehicle per day of a month."""

    year: int
    month: int
    days_in_month: int
    rows: List[RevenueMatrixRow]
    daily_totals: List[Decimal]
    grand_total: Decimal

    def as_dict(self) -> Dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "days_in_month": self.days_in_month,
            "vehicles": [row.as_dict() for row in self.rows],
            "daily_totals": {
                str(day): amount_to_number(amount)
                for day, amount in enumerate(self.daily_totals, start=1)
            },
            "grand_total": amount_to_number(self.grand_total),
        }


def build_revenue_ranking(vehicles: List[VehicleMonthlySummary]) -> List[RankingRow]:
    """Vehicles with revenue by revenue; everyone else after, in roster order."""

    earning = [summary for summary in vehicles if summary.has_income and summary.revenue > 0]
    ranked = sort_descending(earning, lambda summary: summary.revenue, lambda summary: summary.vehicle_id)
    ranked_ids = {summary.vehicle_id for summary in ranked}
    tail = [summary for summary in vehicles if summary.vehicle_id not in ranked_ids]
    return rank_with_tail(ranked, tail)


def build_single_turn_ranking(vehicles: List[VehicleMonthlySummary]) -> List[RankingRow]:
    """Every positive (vehicle, turn slot) maximum as an independent entry."""

    observations = [
        TurnObservation(
            vehicle_id=summary.vehicle_id,
            conductor_id=summary.conductor_id,
            is_overtime=summary.is_overtime,
            turn_number=slot,
            amount=amount,
        )
        for summary in vehicles
        if summary.has_income
        for slot, amount in zip(TURN_SLOTS, summary.turn_maxima)
        if amount > 0
    ]
    ordered = sort_descending(
        observations,
        lambda entry: entry.amount,
        lambda entry: (entry.vehicle_id, entry.turn_number),
    )
    return window(ordered, threshold=SINGLE_TURN_WINDOW_THRESHOLD)


def build_average_turn_ranking(vehicles: List[VehicleMonthlySummary]) -> List[RankingRow]:
    """Revenue per counted turn; vehicles without turns trail with zero.

    Ordering uses the exact quotient; only the exported average is truncated.
    """

    with_turns: List[Tuple[Decimal, AverageTurnEntry]] = []
    without_turns: List[AverageTurnEntry] = []
    for summary in vehicles:
        counted = summary.has_income and summary.turn_count > 0
        exact = summary.revenue / Decimal(summary.turn_count) if counted else ZERO
        entry = AverageTurnEntry(
            vehicle_id=summary.vehicle_id,
            conductor_id=summary.conductor_id,
            revenue=summary.revenue,
            turn_count=summary.turn_count,
            average_turn_revenue=truncate(exact),
            has_income=summary.has_income,
        )
        if counted:
            with_turns.append((exact, entry))
        else:
            without_turns.append(entry)
    ranked = sort_descending(with_turns, lambda pair: pair[0], lambda pair: pair[1].vehicle_id)
    return rank_with_tail([entry for _, entry in ranked], without_turns)


def build_reward_penalty_ranking(records: List[IncomeRecord]) -> List[RankingRow]:
    """Rewards first, then penalties, each by descending magnitude."""

    entries = [
        RewardPenaltyEntry(
            date=record.date,
            vehicle_id=record.vehicle_id,
            conductor_id=record.conductor_id,
            reward_penalty=record.reward_penalty,
            is_overtime=record.is_overtime,
        )
        for record in records
        if record.reward_penalty != 0
    ]
    entries.sort(
        key=lambda entry: (
            0 if entry.reward_penalty > 0 else 1,
            -abs(entry.reward_penalty),
            entry.date,
            entry.vehicle_id,
        )
    )
    return window(entries, threshold=REWARD_PENALTY_WINDOW_THRESHOLD)


class MonthlyRollup:
    """Compute monthly views on demand."""

    def __init__(self, store: FleetStore) -> None:
        self._store = store

    def compute_month(self, year: object, month: object) -> MonthlyStatistics:
        """Aggregate every income record of a calendar month."""

        first, last = month_bounds(year, month)
        records = self._store.incomes_between(first, last)
        vehicles = self._store.active_vehicles()
        active_count = len(vehicles)
        conductors = self._store.conductor_schedules(first.year, first.month)
        LOGGER.debug(
            "Computing month %s-%02d from %s records and %s active vehicles",
            first.year,
            first.month,
            len(records),
            active_count,
        )

        total_revenue = sum_amounts(record.revenue for record in records)
        total_net_income = sum_amounts(record.net_income for record in records)
        context = f"income for {first.year}-{first.month:02d}"
        average_revenue = safe_divide(total_revenue, active_count, context=context)
        average_net_income = safe_divide(total_net_income, active_count, context=context)

        summaries: Dict[str, VehicleMonthlySummary] = {
            vehicle.vehicle_id: VehicleMonthlySummary(vehicle_id=vehicle.vehicle_id)
            for vehicle in vehicles
        }
        overtime_dates: Dict[str, List[date]] = {}
        for record in records:
            summary = summaries.get(record.vehicle_id)
            if summary is not None:
                summary.absorb(record)
            if record.is_overtime:
                overtime_dates.setdefault(record.vehicle_id, []).append(record.date)

        ordered: List[VehicleMonthlySummary] = []
        for vehicle in vehicles:
            summary = summaries[vehicle.vehicle_id]
            if not summary.has_income:
                summary.conductor_id = conductors.get(vehicle.vehicle_id)
            summary.finalise(average_net_income)
            ordered.append(summary)

        rest_count = sum(
            1 for schedule in self._store.vehicle_schedules_between(first, last) if schedule.is_rest
        )

        statistics = MonthlyStatistics(
            year=first.year,
            month=first.month,
            total_revenue=total_revenue,
            total_net_income=total_net_income,
            vehicle_count=sum(1 for summary in ordered if summary.has_income),
            total_vehicle_count=active_count,
            income_record_count=len(records),
            total_rest_count=rest_count,
            total_overtime_count=sum(1 for record in records if record.is_overtime),
            average_revenue=average_revenue,
            average_net_income=average_net_income,
            overtime_vehicles=[
                OvertimeVehicle(vehicle_id=vehicle_id, dates=sorted(set(days)))
                for vehicle_id, days in sorted(overtime_dates.items())
            ],
            vehicles=ordered,
            daily_statistics=self._store.daily_statistics_between(first, last),
            revenue_ranking=build_revenue_ranking(ordered),
            single_turn_ranking=build_single_turn_ranking(ordered),
            average_turn_ranking=build_average_turn_ranking(ordered),
            reward_penalty_ranking=build_reward_penalty_ranking(records),
        )
        LOGGER.info(
            "Monthly statistics %s-%02d: records=%s revenue=%s net=%s",
            first.year,
            first.month,
            statistics.income_record_count,
            statistics.total_revenue,
            statistics.total_net_income,
        )
        return statistics

    def vehicle_detail(self, vehicle_id: str, year: object, month: object) -> VehicleMonthDetail:
        """Every record of one vehicle in a month, oldest first."""

        validate_vehicle_id(vehicle_id)
        first, last = month_bounds(year, month)
        if self._store.get_vehicle(vehicle_id) is None:
            raise NotFoundError(f"Vehicle {vehicle_id} is not registered")
        records = [
            record for record in self._store.incomes_between(first, last) if record.vehicle_id == vehicle_id
        ]
        records.sort(key=lambda record: record.date)
        return VehicleMonthDetail(vehicle_id=vehicle_id, year=first.year, month=first.month, records=records)

    def revenue_matrix(self, year: object, month: object) -> RevenueMatrix:
        """Daily revenue grid for every active vehicle."""

        first, last = month_bounds(year, month)
        days_in_month = last.day
        vehicles = self._store.active_vehicles()
        grid: Dict[str, List[Decimal]] = {
            vehicle.vehicle_id: [ZERO] * days_in_month for vehicle in vehicles
        }
        for record in self._store.incomes_between(first, last):
            row = grid.get(record.vehicle_id)
            if row is not None:
                row[record.date.day - 1] = record.revenue

        rows = [
            RevenueMatrixRow(
                vehicle_id=vehicle.vehicle_id,
                daily_revenues=grid[vehicle.vehicle_id],
                monthly_total=sum_amounts(grid[vehicle.vehicle_id]),
            )
            for vehicle in vehicles
        ]
        daily_totals = [
            sum_amounts(grid[vehicle.vehicle_id][day.day - 1] for vehicle in vehicles)
            for day in iter_days(first, last)
        ]
        return RevenueMatrix(
            year=first.year,
            month=first.month,
            days_in_month=days_in_month,
            rows=rows,
            daily_totals=daily_totals,
            grand_total=sum_amounts(row.monthly_total for row in rows),
        )
