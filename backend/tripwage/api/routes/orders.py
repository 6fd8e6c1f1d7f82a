from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from tripwage.api.deps import get_current_user, get_order_service, get_work_time_service
from tripwage.core.errors import PermissionDeniedError
from tripwage.schemas.orders import OrderCreateIn, OrderDeleteOut, OrderOut, OrderUpdateIn
from tripwage.schemas.records import OrderRecord, UserRecord
from tripwage.schemas.stats import DailyStatsOut, HistoricalStatsOut
from tripwage.schemas.work_times import WorkTimeIn, WorkTimeOut
from tripwage.services.orders import OrderService
from tripwage.services.wages import WAGE_MODES, WageMode
from tripwage.services.work_times import WorkTimeService


router = APIRouter(prefix="/orders")


def _mode(name: str) -> WageMode:
    mode = WAGE_MODES.get(name)
    if mode is None:
        raise HTTPException(status_code=400, detail=f"Unknown mode {name!r}; use one of {sorted(WAGE_MODES)}")
    return mode


def _get_own_order(service: OrderService, order_id: str, current: UserRecord) -> OrderRecord:
    order = service.get(order_id)
    if order.user_id != current.id:
        raise PermissionDeniedError("Not authorized")
    return order


@router.get("", response_model=list[OrderOut])
def list_orders(current: UserRecord = Depends(get_current_user), service: OrderService = Depends(get_order_service)):
    return [OrderOut.model_validate(o) for o in service.list(current.id)]


@router.post("", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreateIn,
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    order = service.create(current.id, payload.model_dump(exclude_none=True))
    return OrderOut.model_validate(order)


@router.get("/date/{day}", response_model=list[OrderOut])
def list_orders_by_date(
    day: date,
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return [OrderOut.model_validate(o) for o in service.list_by_date(current.id, day)]


@router.get("/range", response_model=list[OrderOut])
def list_orders_by_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return [OrderOut.model_validate(o) for o in service.list_by_date_range(current.id, start_date, end_date)]


@router.get("/stats/{day}", response_model=DailyStatsOut)
def daily_stats(
    day: date,
    mode: str = Query("live"),
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return DailyStatsOut.model_validate(service.daily_stats(current.id, day, _mode(mode)))


@router.get("/historical-stats", response_model=HistoricalStatsOut)
def historical_stats(
    start_date: date = Query(...),
    end_date: date = Query(...),
    mode: str = Query("historical"),
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    summary = service.historical_stats(current.id, start_date, end_date, _mode(mode))
    return HistoricalStatsOut.model_validate(summary)


@router.post("/worktime", response_model=WorkTimeOut)
def save_work_time(
    payload: WorkTimeIn,
    current: UserRecord = Depends(get_current_user),
    service: WorkTimeService = Depends(get_work_time_service),
):
    work_time = service.save(current.id, payload.date, payload.start_time, payload.end_time)
    return WorkTimeOut.model_validate(work_time)


@router.get("/worktime/{day}", response_model=WorkTimeOut)
def get_work_time(
    day: date,
    current: UserRecord = Depends(get_current_user),
    service: WorkTimeService = Depends(get_work_time_service),
):
    work_time = service.get(current.id, day)
    if work_time is None:
        return WorkTimeOut(date=day.isoformat())
    return WorkTimeOut.model_validate(work_time)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return OrderOut.model_validate(_get_own_order(service, order_id, current))


@router.put("/{order_id}", response_model=OrderOut)
def update_order(
    order_id: str,
    payload: OrderUpdateIn,
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    _get_own_order(service, order_id, current)
    order = service.update(order_id, payload.model_dump(exclude_none=True))
    return OrderOut.model_validate(order)


@router.delete("/{order_id}", response_model=OrderDeleteOut)
def delete_order(
    order_id: str,
    current: UserRecord = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    _get_own_order(service, order_id, current)
    return OrderDeleteOut(deleted=service.delete(order_id))
