"""Mini README: Tests for the per-date rollup and the day report.

The rollup must be a pure function of the day's records and the active
roster: recomputing twice yields identical rows, and inserting then deleting
a record restores the earlier figures.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fleetledger.exceptions import ConsistencyError, NotFoundError, ValidationError
from fleetledger.income import IncomeInput, IncomeRecordService
from fleetledger.roster import ConductorSchedule, ScheduleStatus, VehicleSchedule, VehicleStatus
from fleetledger.statistics import DailyRollup
from fleetledger.storage import InMemoryFleetStore


def test_recompute_twice_is_identical() -> None:
    """Recomputing without intervening writes changes nothing."""

    store = InMemoryFleetStore.with_roster(["101", "102", "103"])
    service = IncomeRecordService(store)
    service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="101", turn1="45.5"))
    service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="102", turn1="12.2"))

    first = service.rollup.recompute_day("2025-03-04")
    second = service.rollup.recompute_day("2025-03-04")

    assert first == second
    assert first.total_revenue == Decimal("57.7")
    assert first.average_revenue == Decimal("19.2")


def test_insert_then_delete_restores_rollup() -> None:
    """A deleted record leaves no trace in the day's statistics."""

    store = InMemoryFleetStore.with_roster(["101", "102"])
    service = IncomeRecordService(store)
    service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="101", turn1="80"))
    before = service.rollup.recompute_day("2025-03-04")

    service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="102", turn1="33.3"))
    after = service.delete("2025-03-04", "102")

    assert after == before


def test_averages_divide_by_active_roster() -> None:
    """Vehicles without income still count toward the average; inactive ones do not."""

    store = InMemoryFleetStore.with_roster(["101", "102", "103", "104"])
    store.set_vehicle_status("104", VehicleStatus.INACTIVE)
    service = IncomeRecordService(store)

    saved = service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="101", turn1="100"))
    rollup = service.rollup.get_or_recompute(saved.date)

    assert rollup.vehicle_count == 1
    assert rollup.average_revenue == Decimal("33.3")


def test_empty_roster_is_a_consistency_error() -> None:
    """An average over zero active vehicles is refused rather than reported as zero."""

    rollup = DailyRollup(InMemoryFleetStore())

    with pytest.raises(ConsistencyError):
        rollup.recompute_day("2025-03-04")


def test_day_report_fills_idle_vehicles() -> None:
    """Every active vehicle gets a line, with rest flags and conductor fallback."""

    store = InMemoryFleetStore.with_roster(["101", "102", "103"])
    store.set_vehicle_schedule(VehicleSchedule(date(2025, 3, 4), "102", ScheduleStatus.REST))
    store.put_conductor_schedule(ConductorSchedule(2025, 3, "103", "102"))
    service = IncomeRecordService(store)
    service.derive_and_save(IncomeInput(date="2025-03-04", vehicle_id="101", turn1="90"))

    report = service.rollup.day_report("2025-03-04")
    lines = {line.vehicle_id: line for line in report.vehicles}

    assert report.total_vehicle_count == 3
    assert report.rest_vehicle_count == 1
    assert report.statistics.average_net_income == Decimal("30.0")
    assert lines["101"].payment_amount == Decimal("-60.0")
    assert lines["103"].payment_amount == Decimal("30.0")
    assert lines["103"].conductor_id == "102"
    assert lines["103"].has_income is False
    assert lines["102"].is_rest is True
    payload = report.as_dict()
    assert payload["statistics"]["rest_vehicle_count"] == 1
    assert payload["vehicles"][0]["turn1_amount"] == pytest.approx(90.0)


def test_recompute_range_and_listing() -> None:
    """Ranges are recomputed day by day and listed newest first."""

    store = InMemoryFleetStore.with_roster(["101"])
    rollup = DailyRollup(store)

    assert rollup.recompute_range("2025-03-01", "2025-03-03") == 3
    listed = rollup.statistics_between("2025-03-01", "2025-03-31")
    assert [row.date.day for row in listed] == [3, 2, 1]
    with pytest.raises(ValidationError):
        rollup.recompute_range("2025-03-05", "2025-03-01")
    assert rollup.get("2025-03-02").vehicle_count == 0
    with pytest.raises(NotFoundError):
        rollup.get("2025-04-01")
