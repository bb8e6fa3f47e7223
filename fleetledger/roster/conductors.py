"""Mini README: Monthly conductor assignments.

Structure:
    * ConductorScheduleService - validate and batch-write a month's
      vehicle-to-conductor map.

A conductor is identified by another vehicle's id and can never be assigned
to its own vehicle. A batch is validated in full before anything is written,
and the writes run in one store transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Mapping, Optional

from ..exceptions import ValidationError
from ..logging_utils import get_logger
from ..utils.dates import month_bounds
from .models import ConductorSchedule, validate_vehicle_id

if TYPE_CHECKING:
    from ..storage.base import FleetStore

LOGGER = get_logger(__name__)


class ConductorScheduleService:
    """Maintain who assists which vehicle each month."""

    def __init__(self, store: FleetStore) -> None:
        self._store = store

    def _validate(self, vehicle_id: str, conductor_id: Optional[str]) -> None:
        validate_vehicle_id(vehicle_id)
        if self._store.get_vehicle(vehicle_id) is None:
            raise ValidationError(f"Vehicle {vehicle_id} is not registered")
        if conductor_id is None:
            return
        validate_vehicle_id(conductor_id, field_name="conductor_id")
        if conductor_id == vehicle_id:
            raise ValidationError(f"Vehicle {vehicle_id} cannot be its own conductor")
        if self._store.get_vehicle(conductor_id) is None:
            raise ValidationError(f"Conductor {conductor_id} is not a registered vehicle")

    def batch_assign(
        self,
        year: object,
        month: object,
        assignments: Mapping[str, Optional[str]],
    ) -> Dict[str, Optional[str]]:
        """Write every assignment or none; returns the month's full map."""

        first, _ = month_bounds(year, month)
        if not assignments:
            raise ValidationError("At least one conductor assignment is required")
        for vehicle_id, conductor_id in assignments.items():
            try:
                self._validate(vehicle_id, conductor_id)
            except ValidationError:
                LOGGER.warning("Rejected conductor assignment %s -> %s", vehicle_id, conductor_id)
                raise

        with self._store.transaction() as store:
            for vehicle_id, conductor_id in assignments.items():
                store.put_conductor_schedule(
                    ConductorSchedule(
                        year=first.year,
                        month=first.month,
                        vehicle_id=vehicle_id,
                        conductor_id=conductor_id,
                    )
                )
        LOGGER.info(
            "Saved %s conductor assignments for %s-%02d", len(assignments), first.year, first.month
        )
        return self.assignments_for(first.year, first.month)

    def assignments_for(self, year: object, month: object) -> Dict[str, Optional[str]]:
        first, _ = month_bounds(year, month)
        return self._store.conductor_schedules(first.year, first.month)
