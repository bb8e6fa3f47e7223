"""Mini README: Tests for environment-driven settings."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fleetledger.configuration import FleetLedgerSettings


def test_environment_overrides_are_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    """Prefixed variables override defaults and the salary is truncated."""

    monkeypatch.setenv("FLEETLEDGER_DEFAULT_MANAGER_SALARY", "123.45")
    monkeypatch.setenv("FLEETLEDGER_DEMO_VEHICLE_IDS", '["101", "102"]')

    settings = FleetLedgerSettings()

    assert settings.default_manager_salary == Decimal("123.4")
    assert settings.demo_vehicle_ids == ["101", "102"]
    assert settings.interface_port == 8000


def test_malformed_vehicle_ids_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    """Demo roster identifiers must be three digits."""

    monkeypatch.setenv("FLEETLEDGER_DEMO_VEHICLE_IDS", '["101", "12"]')

    with pytest.raises(ValueError):
        FleetLedgerSettings()
