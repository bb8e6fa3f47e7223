"""Mini README: Roster types and conductor scheduling.

Vehicles and daily schedules are owned by the roster collaborator; this
package models what the engine reads from it and validates monthly
conductor assignments.
"""

from .conductors import ConductorScheduleService
from .models import (
    ConductorSchedule,
    ScheduleStatus,
    Vehicle,
    VehicleSchedule,
    VehicleStatus,
    validate_vehicle_id,
)

__all__ = [
    "ConductorSchedule",
    "ConductorScheduleService",
    "ScheduleStatus",
    "Vehicle",
    "VehicleSchedule",
    "VehicleStatus",
    "validate_vehicle_id",
]
