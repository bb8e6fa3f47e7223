"""Mini README: Income record value objects and derived-field computation.

Structure:
    * TURN_SLOTS / COUNTED_TURN_SLOTS - turn numbering (turn 5 is not counted).
    * IncomeInput - raw entry as typed by an operator for one vehicle-day.
    * IncomeRecord - persisted vehicle-day with derived revenue fields.
    * derive_income_record - pure function turning input into a record.

Derived fields follow three rules:

    revenue    = truncate(turn1 + ... + turn5 + wechat_amount)   (absent turn -> 0)
    net_income = truncate(revenue - fuel_subsidy + reward_penalty)
    turn_count = number of turns 1..4 present and greater than zero

They are recomputed from the canonical inputs on every write, never patched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, Tuple

from ..exceptions import ValidationError
from ..finance.amounts import ZERO, AmountLike, amount_to_number, parse_amount, sum_amounts, truncate
from ..roster.models import validate_vehicle_id
from ..utils.dates import parse_date

TURN_SLOTS: Tuple[int, ...] = (1, 2, 3, 4, 5)
COUNTED_TURN_SLOTS: Tuple[int, ...] = (1, 2, 3, 4)
REMARK_MAX_LENGTH = 1000


@dataclass(slots=True)
class IncomeInput:
    """Unvalidated entry for one vehicle on one date."""

    date: object
    vehicle_id: str
    conductor_id: Optional[str] = None
    turn1: Optional[AmountLike] = None
    turn2: Optional[AmountLike] = None
    turn3: Optional[AmountLike] = None
    turn4: Optional[AmountLike] = None
    turn5: Optional[AmountLike] = None
    wechat_amount: Optional[AmountLike] = None
    fuel_subsidy: Optional[AmountLike] = None
    reward_penalty: Optional[AmountLike] = None
    is_overtime: Optional[bool] = None
    remark: Optional[str] = None
    operator_name: Optional[str] = None


@dataclass(slots=True)
class IncomeRecord:
    """One vehicle's income for one calendar date."""

    date: date
    vehicle_id: str
    conductor_id: Optional[str] = None
    turn1: Optional[Decimal] = None
    turn2: Optional[Decimal] = None
    turn3: Optional[Decimal] = None
    turn4: Optional[Decimal] = None
    turn5: Optional[Decimal] = None
    wechat_amount: Decimal = ZERO
    fuel_subsidy: Decimal = ZERO
    reward_penalty: Decimal = ZERO
    is_overtime: bool = False
    operator_name: Optional[str] = None
    remark: str = ""
    revenue: Decimal = ZERO
    net_income: Decimal = ZERO
    turn_count: int = 0
    record_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> Tuple[date, str]:
        return (self.date, self.vehicle_id)

    def turn(self, slot: int) -> Optional[Decimal]:
        """Return the amount recorded for turn ``slot`` (1-5)."""

        if slot not in TURN_SLOTS:
            raise IndexError(f"Turn slot {slot} does not exist")
        return getattr(self, f"turn{slot}")

    @property
    def turn_total(self) -> Decimal:
        """Cash collected across the five turns."""

        return sum_amounts(self.turn(slot) for slot in TURN_SLOTS)

    def as_dict(self) -> Dict[str, object]:
        """Export the record with serialisable values."""

        payload: Dict[str, object] = {
            "id": self.record_id,
            "date": self.date.isoformat(),
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
        }
        for slot in TURN_SLOTS:
            payload[f"turn{slot}_amount"] = amount_to_number(self.turn(slot))
        payload.update(
            {
                "turn_total": amount_to_number(self.turn_total),
                "wechat_amount": amount_to_number(self.wechat_amount),
                "fuel_subsidy": amount_to_number(self.fuel_subsidy),
                "reward_penalty": amount_to_number(self.reward_penalty),
                "revenue": amount_to_number(self.revenue),
                "net_income": amount_to_number(self.net_income),
                "turn_count": self.turn_count,
                "is_overtime": self.is_overtime,
                "operator_name": self.operator_name,
                "remark": self.remark,
                "created_at": self.created_at.isoformat() if self.created_at else None,
                "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            }
        )
        return payload


def compute_revenue(turns: Tuple[Optional[Decimal], ...], wechat_amount: Decimal) -> Decimal:
    return sum_amounts((*turns, wechat_amount))


def compute_net_income(revenue: Decimal, fuel_subsidy: Decimal, reward_penalty: Decimal) -> Decimal:
    return truncate(revenue - fuel_subsidy + reward_penalty)


def compute_turn_count(turns: Tuple[Optional[Decimal], ...]) -> int:
    counted = turns[: len(COUNTED_TURN_SLOTS)]
    return sum(1 for amount in counted if amount is not None and amount > 0)


def derive_income_record(raw: IncomeInput, *, default_overtime: bool = False) -> IncomeRecord:
    """Canonicalise ``raw`` and compute revenue, net income and turn count.

    ``default_overtime`` is used when the input leaves ``is_overtime`` unset;
    the caller derives it from the vehicle schedule.
    """

    record_date = parse_date(raw.date)
    vehicle_id = validate_vehicle_id(raw.vehicle_id)
    conductor_id = (
        validate_vehicle_id(raw.conductor_id, field_name="conductor_id")
        if raw.conductor_id
        else None
    )

    turns = tuple(
        parse_amount(getattr(raw, f"turn{slot}"), field_name=f"turn{slot}")
        for slot in TURN_SLOTS
    )
    wechat_amount = parse_amount(raw.wechat_amount, field_name="wechat_amount") or ZERO
    fuel_subsidy = parse_amount(raw.fuel_subsidy, field_name="fuel_subsidy") or ZERO
    reward_penalty = (
        parse_amount(raw.reward_penalty, field_name="reward_penalty", allow_negative=True) or ZERO
    )

    remark = (raw.remark or "").strip()
    if len(remark) > REMARK_MAX_LENGTH:
        raise ValidationError(f"remark exceeds {REMARK_MAX_LENGTH} characters")

    revenue = compute_revenue(turns, wechat_amount)
    return IncomeRecord(
        date=record_date,
        vehicle_id=vehicle_id,
        conductor_id=conductor_id,
        turn1=turns[0],
        turn2=turns[1],
        turn3=turns[2],
        turn4=turns[3],
        turn5=turns[4],
        wechat_amount=wechat_amount,
        fuel_subsidy=fuel_subsidy,
        reward_penalty=reward_penalty,
        is_overtime=default_overtime if raw.is_overtime is None else bool(raw.is_overtime),
        operator_name=raw.operator_name,
        remark=remark,
        revenue=revenue,
        net_income=compute_net_income(revenue, fuel_subsidy, reward_penalty),
        turn_count=compute_turn_count(turns),
    )
