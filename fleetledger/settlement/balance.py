"""Mini README: Month-end payment balancing between vehicles.

Structure:
    * VehiclePaymentDetail - what one vehicle owes or receives, on both tracks.
    * PaymentBalanceSnapshot - the persisted, frozen settlement of a month.
    * PaymentBalance - the view returned to callers (saved or live).
    * PaymentBalanceService - ``get_or_compute``, ``preview`` and ``save``.

The fleet pools its net income. The automatic average is

    auto_average_income = truncate((month net income - manager salary) / active vehicles)

and an operator may override it with a manual average. Each vehicle's
payment is ``average - vehicle net income``: a negative result means the
vehicle pays the difference in (``payment_due``), a positive one means it is
paid out (``payment_receivable``). Details keep an "auto" pair computed from
the automatic average and a "corrected" pair computed from the effective one.

A month is either live (recomputed on every read with the current global
salary) or saved (the stored snapshot is returned verbatim, including the
salary it was saved with). Saving again recomputes every figure, the
automatic average included, from current data and replaces the snapshot.
Re-saving is how past months are corrected retroactively, so an old
settlement can change when it is saved with a different salary.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..exceptions import ValidationError
from ..finance.amounts import ZERO, AmountLike, amount_to_number, parse_amount, safe_divide, truncate
from ..logging_utils import get_logger
from ..statistics.monthly import MonthlyRollup
from ..storage.base import FleetStore, SettingStore
from ..storage.locks import KeyedLocks
from ..utils.dates import month_bounds

LOGGER = get_logger(__name__)


def split_payment(average_income: Decimal, net_income: Decimal) -> Tuple[Decimal, Decimal]:
    """Return ``(payment_due, payment_receivable)`` for one vehicle."""

    payment_amount = average_income - net_income
    if payment_amount < 0:
        return truncate(-payment_amount), ZERO
    if payment_amount > 0:
        return ZERO, truncate(payment_amount)
    return ZERO, ZERO


@dataclass(slots=True)
class VehiclePaymentDetail:
    """Settlement line for one active vehicle."""

    vehicle_id: str
    revenue: Decimal
    net_income: Decimal
    turn_count: int
    fuel_subsidy: Decimal
    reward_penalty: Decimal
    conductor_id: Optional[str]
    payment_due_auto: Decimal
    payment_receivable_auto: Decimal
    payment_due_corrected: Decimal
    payment_receivable_corrected: Decimal

    def as_dict(self) -> Dict[str, object]:
        return {
            "vehicle_id": self.vehicle_id,
            "revenue": amount_to_number(self.revenue),
            "net_income": amount_to_number(self.net_income),
            "turn_count": self.turn_count,
            "fuel_subsidy": amount_to_number(self.fuel_subsidy),
            "reward_penalty": amount_to_number(self.reward_penalty),
            "conductor_id": self.conductor_id,
            "payment_due_auto": amount_to_number(self.payment_due_auto),
            "payment_receivable_auto": amount_to_number(self.payment_receivable_auto),
            "payment_due_corrected": amount_to_number(self.payment_due_corrected),
            "payment_receivable_corrected": amount_to_number(self.payment_receivable_corrected),
        }


@dataclass(slots=True)
class PaymentBalanceSnapshot:
    """Persisted settlement for one (year, month)."""

    year: int
    month: int
    auto_average_income: Decimal
    manual_average_income: Optional[Decimal]
    manager_salary: Decimal
    vehicle_details: List[VehiclePaymentDetail] = field(default_factory=list)
    operator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class PaymentBalance:
    """Settlement view handed to callers."""

    year: int
    month: int
    auto_average_income: Decimal
    manual_average_income: Optional[Decimal]
    manager_salary: Decimal
    vehicle_details: List[VehiclePaymentDetail]
    is_saved: bool
    operator_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def effective_average_income(self) -> Decimal:
        if self.manual_average_income is not None:
            return self.manual_average_income
        return self.auto_average_income

    @classmethod
    def from_snapshot(cls, snapshot: PaymentBalanceSnapshot) -> "PaymentBalance":
        return cls(
            year=snapshot.year,
            month=snapshot.month,
            auto_average_income=snapshot.auto_average_income,
            manual_average_income=snapshot.manual_average_income,
            manager_salary=snapshot.manager_salary,
            vehicle_details=list(snapshot.vehicle_details),
            is_saved=True,
            operator_name=snapshot.operator_name,
            created_at=snapshot.created_at,
            updated_at=snapshot.updated_at,
        )

    def as_dict(self) -> Dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "auto_average_income": amount_to_number(self.auto_average_income),
            "manual_average_income": amount_to_number(self.manual_average_income),
            "effective_average_income": amount_to_number(self.effective_average_income),
            "manager_salary": amount_to_number(self.manager_salary),
            "vehicle_details": [detail.as_dict() for detail in self.vehicle_details],
            "operator_name": self.operator_name,
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M:%S") if self.created_at else None,
            "updated_at": self.updated_at.strftime("%Y-%m-%d %H:%M:%S") if self.updated_at else None,
            "is_saved": self.is_saved,
        }


class PaymentBalanceService:
    """Compute, preview and persist monthly settlements."""

    def __init__(
        self,
        store: FleetStore,
        settings: SettingStore,
        monthly: Optional[MonthlyRollup] = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._monthly = monthly or MonthlyRollup(store)
        self._locks = KeyedLocks()
        self._salary_guard = threading.Lock()

    def _calculate(
        self,
        year: int,
        month: int,
        manager_salary: Decimal,
        manual_average_income: Optional[Decimal],
    ) -> Tuple[Decimal, List[VehiclePaymentDetail]]:
        statistics = self._monthly.compute_month(year, month)
        auto_average = safe_divide(
            statistics.total_net_income - manager_salary,
            statistics.total_vehicle_count,
            context=f"settlement for {year}-{month:02d}",
        )
        effective_average = auto_average if manual_average_income is None else manual_average_income

        details: List[VehiclePaymentDetail] = []
        for summary in statistics.vehicles:
            due_auto, receivable_auto = split_payment(auto_average, summary.net_income)
            due_corrected, receivable_corrected = split_payment(effective_average, summary.net_income)
            details.append(
                VehiclePaymentDetail(
                    vehicle_id=summary.vehicle_id,
                    revenue=summary.revenue,
                    net_income=summary.net_income,
                    turn_count=summary.turn_count,
                    fuel_subsidy=summary.fuel_subsidy,
                    reward_penalty=summary.reward_penalty,
                    conductor_id=summary.conductor_id if summary.has_income else None,
                    payment_due_auto=due_auto,
                    payment_receivable_auto=receivable_auto,
                    payment_due_corrected=due_corrected,
                    payment_receivable_corrected=receivable_corrected,
                )
            )
        return auto_average, details

    @staticmethod
    def _parse_inputs(
        manager_salary: Optional[AmountLike],
        manual_average_income: Optional[AmountLike],
    ) -> Tuple[Decimal, Optional[Decimal]]:
        salary = parse_amount(manager_salary, field_name="manager_salary")
        if salary is None:
            raise ValidationError("manager_salary is required")
        manual = parse_amount(manual_average_income, field_name="manual_average_income")
        return salary, manual

    def get_or_compute(self, year: object, month: object) -> PaymentBalance:
        """Return the saved snapshot, or a live settlement at the current salary."""

        first, _ = month_bounds(year, month)
        snapshot = self._store.get_snapshot(first.year, first.month)
        if snapshot is not None:
            LOGGER.debug("Returning saved settlement for %s-%02d", first.year, first.month)
            return PaymentBalance.from_snapshot(snapshot)

        salary = self._settings.get_manager_salary()
        auto_average, details = self._calculate(first.year, first.month, salary, None)
        return PaymentBalance(
            year=first.year,
            month=first.month,
            auto_average_income=auto_average,
            manual_average_income=None,
            manager_salary=salary,
            vehicle_details=details,
            is_saved=False,
        )

    def preview(
        self,
        year: object,
        month: object,
        manager_salary: Optional[AmountLike],
        manual_average_income: Optional[AmountLike] = None,
    ) -> PaymentBalance:
        """Recompute with the supplied salary and override without persisting anything."""

        first, _ = month_bounds(year, month)
        salary, manual = self._parse_inputs(manager_salary, manual_average_income)
        auto_average, details = self._calculate(first.year, first.month, salary, manual)
        LOGGER.debug(
            "Previewed settlement %s-%02d salary=%s manual=%s auto=%s",
            first.year,
            first.month,
            salary,
            manual,
            auto_average,
        )
        return PaymentBalance(
            year=first.year,
            month=first.month,
            auto_average_income=auto_average,
            manual_average_income=manual,
            manager_salary=salary,
            vehicle_details=details,
            is_saved=False,
        )

    def save(
        self,
        year: object,
        month: object,
        manager_salary: Optional[AmountLike],
        manual_average_income: Optional[AmountLike] = None,
        *,
        operator_name: Optional[str] = None,
    ) -> PaymentBalance:
        """Persist the month's settlement and adopt ``manager_salary`` globally.

        Every figure is recomputed from current income data, so saving a month
        again replaces its previous numbers.
        """

        first, _ = month_bounds(year, month)
        salary, manual = self._parse_inputs(manager_salary, manual_average_income)
        with self._locks.hold((first.year, first.month)), self._salary_guard:
            auto_average, details = self._calculate(first.year, first.month, salary, manual)
            stored = self._store.put_snapshot(
                PaymentBalanceSnapshot(
                    year=first.year,
                    month=first.month,
                    auto_average_income=auto_average,
                    manual_average_income=manual,
                    manager_salary=salary,
                    vehicle_details=details,
                    operator_name=operator_name,
                )
            )
            self._settings.set_manager_salary(salary)
        LOGGER.info(
            "Saved settlement %s-%02d salary=%s auto=%s manual=%s operator=%s",
            first.year,
            first.month,
            salary,
            auto_average,
            manual,
            operator_name,
        )
        return PaymentBalance.from_snapshot(stored)
