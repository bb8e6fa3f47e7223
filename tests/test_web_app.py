"""Mini README: HTTP tests for the FastAPI surface.

These tests drive the application through ``TestClient`` to confirm routes are
wired to the services, the ``X-Operator`` header is recorded, and engine
errors map to 422, 404 and 409 responses.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fleetledger.interface import create_application
from fleetledger.storage import InMemoryFleetStore, InMemorySettingStore


def _client(vehicle_ids: list[str]) -> TestClient:
    store = InMemoryFleetStore.with_roster(vehicle_ids)
    return TestClient(create_application(store=store, settings_store=InMemorySettingStore()))


def _fleet() -> list[str]:
    return [str(number) for number in range(540, 564)]


def test_income_round_trip_updates_daily_report() -> None:
    """Posting an income returns derived fields and refreshes the day."""

    client = _client(_fleet())

    response = client.post(
        "/incomes",
        json={
            "date": "2025-02-11",
            "vehicle_id": "562",
            "turn1_amount": 100.0,
            "turn2_amount": 50.5,
            "wechat_amount": 20.3,
            "fuel_subsidy": 10.0,
            "reward_penalty": -5.0,
        },
        headers={"X-Operator": "clerk"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["revenue"] == pytest.approx(170.8)
    assert body["net_income"] == pytest.approx(155.8)
    assert body["turn_count"] == 2
    assert body["operator_name"] == "clerk"

    report = client.get("/daily-statistics/2025-02-11").json()
    assert report["statistics"]["average_net_income"] == pytest.approx(6.4)
    assert len(report["vehicles"]) == 24

    detail = client.get("/incomes/2025-02-11/562")
    assert detail.status_code == 200
    assert detail.json()["turn2_amount"] == pytest.approx(50.5)


def test_error_taxonomy_maps_to_status_codes() -> None:
    """Validation, missing records and empty rosters have distinct statuses."""

    client = _client(_fleet())

    negative = client.post(
        "/incomes",
        json={"date": "2025-02-11", "vehicle_id": "540", "turn1_amount": -1},
    )
    assert negative.status_code == 422
    assert "turn1" in negative.json()["detail"]

    oversized = client.post(
        "/incomes",
        json={"date": "2025-02-11", "vehicle_id": "540", "turn1_amount": 1e30},
    )
    assert oversized.status_code == 422

    assert client.delete("/incomes/2025-02-11/540").status_code == 404
    assert client.get("/monthly-statistics/2025/13").status_code == 422

    empty = _client([])
    assert empty.get("/monthly-statistics/2025/1").status_code == 409


def test_batch_and_monthly_endpoints() -> None:
    """A batch save feeds the monthly view and its revenue matrix."""

    client = _client(["101", "102", "103"])

    response = client.post(
        "/incomes/batch",
        json={
            "date": "2025-04-01",
            "incomes": [
                {"vehicle_id": "101", "turn1_amount": 120},
                {"vehicle_id": "102", "turn1_amount": "80.55"},
            ],
        },
    )
    assert response.status_code == 201
    assert [record["vehicle_id"] for record in response.json()["records"]] == ["101", "102"]

    monthly = client.get("/monthly-statistics/2025/4").json()
    assert monthly["statistics"]["total_revenue"] == pytest.approx(200.5)
    assert monthly["revenue_ranking"][0]["vehicle_id"] == "101"
    assert monthly["revenue_ranking"][2]["rank"] == 3

    matrix = client.get("/monthly-statistics/2025/4/revenue-matrix").json()
    assert matrix["days_in_month"] == 30
    assert matrix["daily_totals"]["1"] == pytest.approx(200.5)

    detail = client.get("/monthly-statistics/2025/4/vehicles/102").json()
    assert detail["records"][0]["revenue"] == pytest.approx(80.5)


def test_payment_balance_save_and_read_back() -> None:
    """Saving a settlement freezes it and records the operator."""

    client = _client(["101", "102"])
    client.post("/incomes", json={"date": "2025-03-03", "vehicle_id": "101", "turn1_amount": 300})

    live = client.get("/payment-balance/2025/3").json()
    assert live["is_saved"] is False
    assert live["auto_average_income"] == pytest.approx(150.0)

    preview = client.post(
        "/payment-balance/preview",
        json={"year": 2025, "month": 3, "manager_salary": 100, "manual_average_income": 120},
    ).json()
    assert preview["auto_average_income"] == pytest.approx(100.0)
    assert preview["effective_average_income"] == pytest.approx(120.0)
    assert client.get("/payment-balance/2025/3").json()["is_saved"] is False

    saved = client.post(
        "/payment-balance",
        json={"year": 2025, "month": 3, "manager_salary": 100},
        headers={"X-Operator": "treasurer"},
    )
    assert saved.status_code == 200
    frozen = client.get("/payment-balance/2025/3").json()
    assert frozen["is_saved"] is True
    assert frozen["manager_salary"] == pytest.approx(100.0)
    assert frozen["operator_name"] == "treasurer"


def test_conductor_schedule_endpoints() -> None:
    """Batch assignments are stored and self-assignment is refused."""

    client = _client(["101", "102"])

    created = client.post(
        "/conductor-schedules/batch",
        json={"year": 2025, "month": 5, "schedules": [{"vehicle_id": "101", "conductor_id": "102"}]},
    )
    assert created.status_code == 201
    assert created.json()["schedules"] == {"101": "102"}

    rejected = client.post(
        "/conductor-schedules/batch",
        json={"year": 2025, "month": 5, "schedules": [{"vehicle_id": "102", "conductor_id": "102"}]},
    )
    assert rejected.status_code == 422
    assert client.get("/conductor-schedules/2025/5").json()["schedules"] == {"101": "102"}
