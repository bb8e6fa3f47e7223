"""Mini README: Tests for income derivation and the income write path.

Structure:
    * derive_income_record tests - revenue, net income and turn counting rules.
    * IncomeRecordService tests - roster checks, overtime defaults, upserts,
      batches and deletes keeping the daily rollup current.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fleetledger.exceptions import NotFoundError, ValidationError
from fleetledger.income import IncomeInput, IncomeRecordService, derive_income_record
from fleetledger.roster import ScheduleStatus, VehicleSchedule, VehicleStatus
from fleetledger.storage import InMemoryFleetStore


def _fleet_of(count: int) -> InMemoryFleetStore:
    return InMemoryFleetStore.with_roster(str(540 + index) for index in range(count))


def test_derive_matches_worked_example() -> None:
    """Two turns plus WeChat, less fuel, plus a penalty gives the expected net."""

    record = derive_income_record(
        IncomeInput(
            date="2025-02-11",
            vehicle_id="562",
            turn1=100.0,
            turn2=50.5,
            wechat_amount=20.3,
            fuel_subsidy=10.0,
            reward_penalty=-5.0,
        )
    )

    assert record.revenue == Decimal("170.8")
    assert record.net_income == Decimal("155.8")
    assert record.turn_count == 2
    assert record.turn3 is None
    assert record.date == date(2025, 2, 11)


def test_turn_five_adds_revenue_but_not_turns() -> None:
    """Turn 5 cash is revenue, but only turns 1-4 with a positive amount count."""

    record = derive_income_record(
        IncomeInput(date="2025-02-11", vehicle_id="540", turn1="10", turn2="0", turn5="20")
    )

    assert record.revenue == Decimal("30.0")
    assert record.turn_count == 1


def test_absent_amounts_count_as_zero() -> None:
    """A record with no amounts at all derives to zero everywhere."""

    record = derive_income_record(IncomeInput(date="2025-02-11", vehicle_id="540"))

    assert record.revenue == Decimal("0.0")
    assert record.net_income == Decimal("0.0")
    assert record.turn_count == 0
    assert record.turn_total == Decimal("0.0")


def test_negative_reward_is_floored() -> None:
    """Signed adjustments truncate toward negative infinity."""

    record = derive_income_record(
        IncomeInput(date="2025-02-11", vehicle_id="540", turn1="50", reward_penalty="-1.26")
    )

    assert record.reward_penalty == Decimal("-1.3")
    assert record.net_income == Decimal("48.7")


@pytest.mark.parametrize(
    "raw",
    [
        IncomeInput(date="2025-02-11", vehicle_id="540", turn2="-1"),
        IncomeInput(date="2025-02-11", vehicle_id="540", fuel_subsidy="-0.1"),
        IncomeInput(date="2025-02-30", vehicle_id="540"),
        IncomeInput(date="2025-02-11", vehicle_id="54"),
        IncomeInput(date="2025-02-11", vehicle_id="540", remark="x" * 1001),
    ],
)
def test_derive_rejects_invalid_input(raw: IncomeInput) -> None:
    """Bad amounts, dates, identifiers and remarks are validation errors."""

    with pytest.raises(ValidationError):
        derive_income_record(raw)


def test_save_updates_daily_rollup() -> None:
    """Saving a record recomputes its day before returning."""

    store = _fleet_of(24)
    service = IncomeRecordService(store)

    saved = service.derive_and_save(
        IncomeInput(
            date="2025-02-11",
            vehicle_id="562",
            turn1=100.0,
            turn2=50.5,
            wechat_amount=20.3,
            fuel_subsidy=10.0,
            reward_penalty=-5.0,
            operator_name="clerk",
        )
    )

    statistics = store.get_daily_statistics(date(2025, 2, 11))
    assert saved.record_id is not None
    assert saved.operator_name == "clerk"
    assert statistics is not None
    assert statistics.vehicle_count == 1
    assert statistics.total_net_income == Decimal("155.8")
    assert statistics.average_net_income == Decimal("6.4")


def test_save_rejects_vehicle_outside_active_roster() -> None:
    """Unknown and inactive vehicles cannot receive income."""

    store = _fleet_of(3)
    store.set_vehicle_status("541", VehicleStatus.INACTIVE)
    service = IncomeRecordService(store)

    with pytest.raises(ValidationError):
        service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="541", turn1="10"))
    with pytest.raises(ValidationError):
        service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="999", turn1="10"))
    with pytest.raises(ValidationError):
        service.derive_and_save(
            IncomeInput(date="2025-02-11", vehicle_id="540", conductor_id="777", turn1="10")
        )


def test_overtime_defaults_from_rest_schedule() -> None:
    """Income on a planned rest day is overtime unless the operator says otherwise."""

    store = _fleet_of(3)
    store.set_vehicle_schedule(VehicleSchedule(date(2025, 2, 11), "540", ScheduleStatus.REST))
    service = IncomeRecordService(store)

    rested = service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="540", turn1="10"))
    working = service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="541", turn1="10"))
    overridden = service.derive_and_save(
        IncomeInput(date="2025-02-11", vehicle_id="540", turn1="10", is_overtime=False)
    )

    assert rested.is_overtime is True
    assert working.is_overtime is False
    assert overridden.is_overtime is False


def test_resave_replaces_record_in_place() -> None:
    """A second save for the same vehicle-day is an update, not a duplicate."""

    store = _fleet_of(2)
    service = IncomeRecordService(store)

    first = service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="540", turn1="10"))
    second = service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="540", turn1="30"))

    assert second.record_id == first.record_id
    assert second.created_at == first.created_at
    assert len(service.records_on("2025-02-11")) == 1
    assert service.rollup.get_or_recompute("2025-02-11").total_revenue == Decimal("30.0")


def test_batch_save_is_all_or_nothing() -> None:
    """One invalid entry rejects the whole batch before anything is written."""

    store = _fleet_of(3)
    service = IncomeRecordService(store)

    with pytest.raises(ValidationError):
        service.batch_save(
            "2025-02-11",
            [
                IncomeInput(date=None, vehicle_id="540", turn1="10"),
                IncomeInput(date=None, vehicle_id="541", turn1="-3"),
            ],
        )
    assert store.incomes_on(date(2025, 2, 11)) == []

    with pytest.raises(ValidationError):
        service.batch_save(
            "2025-02-11",
            [
                IncomeInput(date=None, vehicle_id="540", turn1="10"),
                IncomeInput(date=None, vehicle_id="540", turn1="20"),
            ],
        )

    saved = service.batch_save(
        "2025-02-11",
        [
            IncomeInput(date=None, vehicle_id="540", turn1="10"),
            IncomeInput(date=None, vehicle_id="541", turn1="20"),
        ],
        operator_name="clerk",
    )
    assert [record.vehicle_id for record in saved] == ["540", "541"]
    assert all(record.operator_name == "clerk" for record in saved)
    assert store.get_daily_statistics(date(2025, 2, 11)).total_revenue == Decimal("30.0")


def test_delete_recomputes_and_reports_missing_records() -> None:
    """Deleting returns the refreshed day; deleting twice is a not-found error."""

    store = _fleet_of(2)
    service = IncomeRecordService(store)
    service.derive_and_save(IncomeInput(date="2025-02-11", vehicle_id="540", turn1="10"))

    statistics = service.delete("2025-02-11", "540")

    assert statistics.vehicle_count == 0
    assert statistics.total_revenue == Decimal("0.0")
    with pytest.raises(NotFoundError):
        service.delete("2025-02-11", "540")
    with pytest.raises(NotFoundError):
        service.get("2025-02-11", "540")
