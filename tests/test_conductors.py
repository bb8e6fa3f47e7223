"""Mini README: Tests for monthly conductor assignments."""

from __future__ import annotations

import pytest

from fleetledger.exceptions import ValidationError
from fleetledger.roster import ConductorScheduleService
from fleetledger.storage import InMemoryFleetStore


def test_batch_assign_writes_and_clears() -> None:
    """Assignments are stored per month and ``None`` clears a conductor."""

    store = InMemoryFleetStore.with_roster(["101", "102", "103"])
    service = ConductorScheduleService(store)

    schedules = service.batch_assign(2025, 5, {"101": "102", "103": "101"})
    assert schedules == {"101": "102", "103": "101"}

    schedules = service.batch_assign(2025, 5, {"101": None})
    assert schedules == {"101": None, "103": "101"}
    assert service.assignments_for(2025, 6) == {}


@pytest.mark.parametrize(
    "assignments",
    [
        {"101": "101"},
        {"101": "999"},
        {"999": "101"},
        {"101": "12"},
        {},
    ],
)
def test_batch_assign_rejects_invalid_assignments(assignments: dict) -> None:
    """Self-assignment, unknown vehicles, malformed ids and empty batches fail."""

    service = ConductorScheduleService(InMemoryFleetStore.with_roster(["101", "102"]))

    with pytest.raises(ValidationError):
        service.batch_assign(2025, 5, assignments)


def test_batch_assign_is_atomic() -> None:
    """One bad pair leaves the month untouched."""

    store = InMemoryFleetStore.with_roster(["101", "102", "103"])
    service = ConductorScheduleService(store)

    with pytest.raises(ValidationError):
        service.batch_assign(2025, 5, {"101": "102", "103": "103"})

    assert store.conductor_schedules(2025, 5) == {}
