"""Mini README: Roster value objects consumed from the fleet collaborators.

Structure:
    * VehicleStatus - active/inactive flag for a registered vehicle.
    * Vehicle - one registered vehicle identified by its plate suffix.
    * ScheduleStatus / VehicleSchedule - daily rest or operate plan.
    * ConductorSchedule - monthly conductor assignment for a vehicle.

Vehicle CRUD belongs to the roster collaborator; the engine only reads these
records to know who is active, who rested, and who assisted whom.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional

from ..exceptions import ValidationError


class VehicleStatus(str, Enum):
    """Registration state of a vehicle."""

    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def from_str(cls, value: str) -> "VehicleStatus":
        """Coerce arbitrary casing into a valid status."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Unsupported vehicle status: {value}") from error


class ScheduleStatus(str, Enum):
    """Planned state of a vehicle for one day."""

    REST = "rest"
    OPERATE = "operate"

    @classmethod
    def from_str(cls, value: str) -> "ScheduleStatus":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Unsupported schedule status: {value}") from error


def validate_vehicle_id(value: object, *, field_name: str = "vehicle_id") -> str:
    """Vehicle identifiers are exactly three digits."""

    if not isinstance(value, str) or len(value) != 3 or not value.isdigit():
        raise ValidationError(f"{field_name} must be a three digit string, got {value!r}")
    return value


@dataclass(slots=True)
class Vehicle:
    """A registered vehicle."""

    vehicle_id: str
    sort_order: int = 0
    status: VehicleStatus = VehicleStatus.ACTIVE
    remark: str = ""

    def __post_init__(self) -> None:
        self.status = VehicleStatus.from_str(self.status)

    @property
    def is_active(self) -> bool:
        return self.status is VehicleStatus.ACTIVE

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.vehicle_id,
            "sort_order": self.sort_order,
            "status": self.status.value,
            "remark": self.remark,
        }


@dataclass(slots=True)
class VehicleSchedule:
    """Rest/operate plan of one vehicle on one date."""

    date: date
    vehicle_id: str
    status: ScheduleStatus = ScheduleStatus.OPERATE

    def __post_init__(self) -> None:
        self.status = ScheduleStatus.from_str(self.status)

    @property
    def is_rest(self) -> bool:
        return self.status is ScheduleStatus.REST


@dataclass(slots=True)
class ConductorSchedule:
    """Conductor (identified by another vehicle id) assigned for a month."""

    year: int
    month: int
    vehicle_id: str
    conductor_id: Optional[str]

    def as_dict(self) -> Dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "vehicle_id": self.vehicle_id,
            "conductor_id": self.conductor_id,
        }
