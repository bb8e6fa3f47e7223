"""Mini README: FastAPI JSON surface over the Fleet Ledger engine.

Structure:
    * create_application - application factory wiring services and routes.
    * Request models - Pydantic payloads for income, settlement and schedules.

The HTTP layer is deliberately thin: it converts payloads into engine calls,
reads the acting operator from the ``X-Operator`` header, and maps the
engine's error taxonomy to status codes (422 validation, 404 not found,
409 consistency). Business rules live in the services.
"""

from __future__ import annotations

from typing import List, Optional, Union

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..configuration import get_settings
from ..exceptions import ConsistencyError, NotFoundError, ValidationError
from ..income import IncomeInput, IncomeRecordService
from ..logging_utils import get_logger
from ..roster import ConductorScheduleService
from ..settlement import PaymentBalanceService
from ..statistics import DailyRollup, MonthlyRollup
from ..storage import FleetStore, InMemoryFleetStore, InMemorySettingStore, SettingStore

LOGGER = get_logger(__name__)

# JSON numbers arrive as floats; they are canonicalised through their shortest
# repr by the amount parser, and decimal strings are accepted as-is.
Amount = Optional[Union[float, str]]


class IncomeItem(BaseModel):
    """One vehicle's entry inside a batch."""

    vehicle_id: str
    conductor_id: Optional[str] = None
    turn1_amount: Amount = None
    turn2_amount: Amount = None
    turn3_amount: Amount = None
    turn4_amount: Amount = None
    turn5_amount: Amount = None
    wechat_amount: Amount = None
    fuel_subsidy: Amount = None
    reward_penalty: Amount = None
    is_overtime: Optional[bool] = None
    remark: Optional[str] = Field(None, max_length=1000)

    def to_input(self, day: str, operator_name: Optional[str]) -> IncomeInput:
        return IncomeInput(
            date=day,
            vehicle_id=self.vehicle_id,
            conductor_id=self.conductor_id,
            turn1=self.turn1_amount,
            turn2=self.turn2_amount,
            turn3=self.turn3_amount,
            turn4=self.turn4_amount,
            turn5=self.turn5_amount,
            wechat_amount=self.wechat_amount,
            fuel_subsidy=self.fuel_subsidy,
            reward_penalty=self.reward_penalty,
            is_overtime=self.is_overtime,
            remark=self.remark,
            operator_name=operator_name,
        )


class IncomePayload(IncomeItem):
    date: str


class IncomeBatchPayload(BaseModel):
    date: str
    incomes: List[IncomeItem] = Field(..., min_length=1)


class SettlementPayload(BaseModel):
    year: int
    month: int
    manager_salary: Union[float, str]
    manual_average_income: Amount = None


class ConductorAssignment(BaseModel):
    vehicle_id: str
    conductor_id: Optional[str] = None


class ConductorBatchPayload(BaseModel):
    year: int
    month: int
    schedules: List[ConductorAssignment] = Field(..., min_length=1)


def create_application(
    store: Optional[FleetStore] = None,
    settings_store: Optional[SettingStore] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = get_settings()
    app = FastAPI(title="Fleet Ledger", version="0.1.0")

    if store is None:
        vehicle_ids = settings.demo_vehicle_ids if settings.seed_demo_roster else []
        store = InMemoryFleetStore.with_roster(vehicle_ids)
        LOGGER.info("Using in-memory store with %s demo vehicles", len(vehicle_ids))
    if settings_store is None:
        settings_store = InMemorySettingStore(settings.default_manager_salary)

    daily = DailyRollup(store)
    monthly = MonthlyRollup(store)
    incomes = IncomeRecordService(store, daily)
    settlement = PaymentBalanceService(store, settings_store, monthly)
    conductors = ConductorScheduleService(store)

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, error: ValidationError) -> JSONResponse:
        LOGGER.warning("Validation failed on %s: %s", request.url.path, error)
        return JSONResponse(status_code=422, content={"detail": str(error)})

    @app.exception_handler(NotFoundError)
    async def not_found_error(request: Request, error: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(error)})

    @app.exception_handler(ConsistencyError)
    async def consistency_error(request: Request, error: ConsistencyError) -> JSONResponse:
        LOGGER.error("Consistency error on %s: %s", request.url.path, error)
        return JSONResponse(status_code=409, content={"detail": str(error)})

    @app.get("/vehicles")
    async def list_vehicles() -> JSONResponse:
        """Return the roster in display order."""

        return JSONResponse({"vehicles": [vehicle.as_dict() for vehicle in store.list_vehicles()]})

    @app.post("/incomes", status_code=201)
    async def save_income(
        payload: IncomePayload,
        operator: Optional[str] = Header(None, alias="X-Operator"),
    ) -> JSONResponse:
        """Create or replace one vehicle-day record."""

        record = incomes.derive_and_save(payload.to_input(payload.date, operator))
        return JSONResponse(record.as_dict(), status_code=201)

    @app.post("/incomes/batch", status_code=201)
    async def save_income_batch(
        payload: IncomeBatchPayload,
        operator: Optional[str] = Header(None, alias="X-Operator"),
    ) -> JSONResponse:
        """Save every entry for a date or none of them."""

        saved = incomes.batch_save(
            payload.date,
            [item.to_input(payload.date, operator) for item in payload.incomes],
            operator_name=operator,
        )
        return JSONResponse({"records": [record.as_dict() for record in saved]}, status_code=201)

    @app.get("/incomes/{day}")
    async def incomes_on(day: str) -> JSONResponse:
        return JSONResponse({"records": [record.as_dict() for record in incomes.records_on(day)]})

    @app.get("/incomes/{day}/{vehicle_id}")
    async def income_detail(day: str, vehicle_id: str) -> JSONResponse:
        return JSONResponse(incomes.get(day, vehicle_id).as_dict())

    @app.delete("/incomes/{day}/{vehicle_id}")
    async def delete_income(day: str, vehicle_id: str) -> JSONResponse:
        """Remove a record; the response carries the recomputed day."""

        statistics = incomes.delete(day, vehicle_id)
        return JSONResponse({"statistics": statistics.as_dict()})

    @app.get("/daily-statistics")
    async def daily_statistics_range(start: str, end: str) -> JSONResponse:
        rows = daily.statistics_between(start, end)
        return JSONResponse({"statistics": [row.as_dict() for row in rows]})

    @app.get("/daily-statistics/{day}")
    async def daily_report(day: str) -> JSONResponse:
        return JSONResponse(daily.day_report(day).as_dict())

    @app.post("/daily-statistics/{day}/recalculate")
    async def recalculate_day(day: str) -> JSONResponse:
        return JSONResponse({"statistics": daily.recompute_day(day).as_dict()})

    @app.get("/monthly-statistics/{year}/{month}")
    async def monthly_statistics(year: int, month: int) -> JSONResponse:
        return JSONResponse(monthly.compute_month(year, month).as_dict())

    @app.get("/monthly-statistics/{year}/{month}/vehicles/{vehicle_id}")
    async def vehicle_month_detail(year: int, month: int, vehicle_id: str) -> JSONResponse:
        return JSONResponse(monthly.vehicle_detail(vehicle_id, year, month).as_dict())

    @app.get("/monthly-statistics/{year}/{month}/revenue-matrix")
    async def revenue_matrix(year: int, month: int) -> JSONResponse:
        return JSONResponse(monthly.revenue_matrix(year, month).as_dict())

    @app.get("/payment-balance/{year}/{month}")
    async def payment_balance(year: int, month: int) -> JSONResponse:
        """Saved snapshot when one exists, otherwise a live computation."""

        return JSONResponse(settlement.get_or_compute(year, month).as_dict())

    @app.post("/payment-balance/preview")
    async def preview_payment_balance(payload: SettlementPayload) -> JSONResponse:
        balance = settlement.preview(
            payload.year,
            payload.month,
            payload.manager_salary,
            payload.manual_average_income,
        )
        return JSONResponse(balance.as_dict())

    @app.post("/payment-balance")
    async def save_payment_balance(
        payload: SettlementPayload,
        operator: Optional[str] = Header(None, alias="X-Operator"),
    ) -> JSONResponse:
        balance = settlement.save(
            payload.year,
            payload.month,
            payload.manager_salary,
            payload.manual_average_income,
            operator_name=operator,
        )
        return JSONResponse(balance.as_dict())

    @app.get("/conductor-schedules/{year}/{month}")
    async def conductor_schedules(year: int, month: int) -> JSONResponse:
        return JSONResponse({"year": year, "month": month, "schedules": conductors.assignments_for(year, month)})

    @app.post("/conductor-schedules/batch", status_code=201)
    async def save_conductor_schedules(payload: ConductorBatchPayload) -> JSONResponse:
        schedules = conductors.batch_assign(
            payload.year,
            payload.month,
            {item.vehicle_id: item.conductor_id for item in payload.schedules},
        )
        return JSONResponse(
            {"year": payload.year, "month": payload.month, "schedules": schedules},
            status_code=201,
        )

    return app
