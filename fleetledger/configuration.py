"""Mini README: Centralised configuration models and helpers for Fleet Ledger.

Structure:
    * FleetLedgerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables (prefixed with
    ``FLEETLEDGER_``), pick the service port, and seed the demo roster. The
    configuration is cached so validation runs once per process.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import List

from pydantic import Field, validator
from pydantic_settings import BaseSettings

from .finance.amounts import truncate


def _default_vehicle_ids() -> List[str]:
    return [str(number) for number in range(540, 564)]


class FleetLedgerSettings(BaseSettings):
    """Runtime configuration for the Fleet Ledger service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the HTTP service exposes.",
        ge=1,
        le=65535,
    )
    log_level: str = Field("INFO", description="Root logging level.")
    default_manager_salary: Decimal = Field(
        Decimal("0.0"),
        description="Manager salary used until an operator saves a settlement.",
        ge=0,
    )
    seed_demo_roster: bool = Field(
        True,
        description="Populate the in-memory roster on start-up when no store is supplied.",
    )
    demo_vehicle_ids: List[str] = Field(
        default_factory=_default_vehicle_ids,
        description="Three-digit vehicle identifiers registered as active in the demo roster.",
    )

    class Config:
        env_prefix = "FLEETLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("default_manager_salary")
    def _truncate_salary(cls, value: Decimal) -> Decimal:
        """Keep the configured salary at one decimal digit like every amount."""

        return truncate(value)

    @validator("demo_vehicle_ids", each_item=True)
    def _check_vehicle_id(cls, value: str) -> str:
        """Vehicle identifiers are the last three digits of the plate."""

        value = value.strip()
        if len(value) != 3 or not value.isdigit():
            raise ValueError(f"Vehicle id '{value}' must be three digits")
        return value


@lru_cache()
def get_settings() -> FleetLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FleetLedgerSettings()
