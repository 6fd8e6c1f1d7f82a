from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from tripwage.core.errors import InvalidInputError, NotFoundError
from tripwage.schemas.records import ORDER_MUTABLE_FIELDS, OrderDraft, OrderRecord
from tripwage.services.wages import (
    HISTORICAL,
    LIVE_ENTRY,
    DailySummary,
    RangeSummary,
    WageConstants,
    WageMode,
    calculate_daily_summary,
    summarize_range,
)
from tripwage.storage.base import OrderStore, WorkTimeStore


logger = logging.getLogger(__name__)

MAX_RANGE_DAYS = 366


def parse_iso_date(value: str | date, field: str = "date") -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise InvalidInputError(f"Invalid {field}: expected YYYY-MM-DD") from None


def invalid_input(exc: ValidationError) -> InvalidInputError:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ())) or "value"
    return InvalidInputError(f"Invalid {field}: {error.get('msg', 'invalid value')}")


class OrderService:
    """Order bookkeeping for one caller at a time.

    Ownership is checked by the caller; every method trusts the ``user_id``
    it is given.
    """

    def __init__(self, orders: OrderStore, work_times: WorkTimeStore, constants: WageConstants):
        self.orders = orders
        self.work_times = work_times
        self.constants = constants

    def list(self, user_id: str) -> list[OrderRecord]:
        return self.orders.find_by_owner(user_id)

    def list_by_date(self, user_id: str, day: str | date) -> list[OrderRecord]:
        return self.orders.find_by_owner_and_date(user_id, parse_iso_date(day))

    def list_by_date_range(self, user_id: str, start: str | date, end: str | date) -> list[OrderRecord]:
        start, end = self._range(start, end)
        return self.orders.find_by_owner_and_date_range(user_id, start, end)

    def get(self, order_id: str) -> OrderRecord:
        order = self.orders.get(order_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def create(self, user_id: str, payload: Mapping[str, Any]) -> OrderRecord:
        data = {k: v for k, v in payload.items() if k in ORDER_MUTABLE_FIELDS or k == "date"}
        data["user_id"] = user_id
        if data.get("date") is not None:
            data["date"] = parse_iso_date(data["date"])
        else:
            data.pop("date", None)
        try:
            draft = OrderDraft.model_validate(data)
        except ValidationError as exc:
            raise invalid_input(exc) from exc
        if not draft.order_number.strip():
            logger.info("order for user=%s on %s saved without an order number", user_id, draft.date)
        return self.orders.create(draft)

    def update(self, order_id: str, payload: Mapping[str, Any]) -> OrderRecord:
        changes = {k: v for k, v in payload.items() if k in ORDER_MUTABLE_FIELDS and v is not None}
        try:
            order = self.orders.update(order_id, changes)
        except ValidationError as exc:
            raise invalid_input(exc) from exc
        if order is None:
            raise NotFoundError("Order not found")
        return order

    def delete(self, order_id: str) -> bool:
        if not self.orders.delete(order_id):
            raise NotFoundError("Order not found")
        return True

    def daily_stats(self, user_id: str, day: str | date, mode: WageMode = LIVE_ENTRY) -> DailySummary:
        day = parse_iso_date(day)
        orders = self.orders.find_by_owner_and_date(user_id, day)
        work_time = self.work_times.find_by_owner_and_date(user_id, day)
        work_hours = work_time.work_hours if work_time is not None else 0.0
        return calculate_daily_summary(day, orders, work_hours, mode, self.constants)

    def historical_stats(
        self,
        user_id: str,
        start: str | date,
        end: str | date,
        mode: WageMode = HISTORICAL,
    ) -> RangeSummary:
        start, end = self._range(start, end, max_days=MAX_RANGE_DAYS)
        orders = self.orders.find_by_owner_and_date_range(user_id, start, end)
        work_hours = {
            wt.date: wt.work_hours for wt in self.work_times.find_by_owner_and_date_range(user_id, start, end)
        }
        return summarize_range(start, end, orders, work_hours, mode, self.constants)

    @staticmethod
    def _range(start: str | date, end: str | date, max_days: int | None = None) -> tuple[str, str]:
        if not start or not end:
            raise InvalidInputError("Start date and end date are required")
        start = parse_iso_date(start, "start date")
        end = parse_iso_date(end, "end date")
        if start > end:
            raise InvalidInputError("Start date must not be after end date")
        if max_days is not None:
            span = (date.fromisoformat(end) - date.fromisoformat(start)).days + 1
            if span > max_days:
                raise InvalidInputError(f"Date range is limited to {max_days} days")
        return start, end
