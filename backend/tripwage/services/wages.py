from __future__ import annotations

import enum
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any


class TipMode(str, enum.Enum):
    # One clamp over the whole expression (live-entry screen).
    simple = "simple"
    # Clamp the channel tip, then add the extra cash tip (history reports).
    channel_split = "channel_split"


class LongTripRule(str, enum.Enum):
    inclusive = "inclusive"
    strict = "strict"


@dataclass(frozen=True)
class WageMode:
    tips: TipMode
    long_trip: LongTripRule


LIVE_ENTRY = WageMode(tips=TipMode.simple, long_trip=LongTripRule.inclusive)
HISTORICAL = WageMode(tips=TipMode.channel_split, long_trip=LongTripRule.strict)

WAGE_MODES: dict[str, WageMode] = {
    "live": LIVE_ENTRY,
    "historical": HISTORICAL,
}


@dataclass(frozen=True)
class WageConstants:
    base_hourly_rate: float = 8.5
    fuel_per_order: float = 3.5
    long_trip_threshold_km: float = 10.0
    long_trip_extra_fuel: float = 3.5


DEFAULT_CONSTANTS = WageConstants()


@dataclass
class OrderFigures:
    tips_total: float
    fuel_fee: float
    total_income: float
    is_long_trip: bool


@dataclass
class DailySummary:
    date: str
    actual_trips: int = 0
    effective_trips: int = 0
    long_trips_count: int = 0
    total_distance: float = 0.0
    total_tips: float = 0.0
    fuel_fee_total: float = 0.0
    work_hours: float = 0.0
    base_payment: float = 0.0
    total_wage: float = 0.0
    hourly_wage: float = 0.0
    cash_order_value: float = 0.0
    non_cash_tips: float = 0.0
    restaurant_settlement: float = 0.0


@dataclass
class RangeSummary:
    start_date: str
    end_date: str
    days: list[DailySummary] = field(default_factory=list)
    total_work_hours: float = 0.0
    actual_trips: int = 0
    effective_trips: int = 0
    long_trips_count: int = 0
    total_distance: float = 0.0
    total_tips: float = 0.0
    fuel_fee_total: float = 0.0
    base_payment: float = 0.0
    total_wage: float = 0.0
    restaurant_settlement: float = 0.0
    average_hourly_wage: float = 0.0


def _num(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def _get(order: Any, name: str) -> Any:
    if isinstance(order, Mapping):
        return order.get(name)
    return getattr(order, name, None)


def _payment_type(order: Any) -> str:
    value = _get(order, "payment_type")
    if isinstance(value, enum.Enum):
        value = value.value
    return str(value or "online").strip().lower()


def _order_date(order: Any) -> str:
    value = _get(order, "date")
    if isinstance(value, date):
        return value.isoformat()
    return str(value or "")


def compute_work_hours(start_time: str | None, end_time: str | None) -> float:
    """Hours between two ``HH:MM`` wall-clock times.

    An end earlier than the start is read as an overnight shift. Missing or
    unparseable times give 0.
    """
    if not start_time or not end_time:
        return 0.0
    try:
        start_hour, start_min = (int(part) for part in start_time.strip().split(":")[:2])
        end_hour, end_min = (int(part) for part in end_time.strip().split(":")[:2])
    except (AttributeError, ValueError):
        return 0.0

    hours = end_hour - start_hour
    minutes = end_min - start_min
    if hours < 0:
        hours += 24
    return hours + minutes / 60


def is_long_trip(distance_km: Any, constants: WageConstants, rule: LongTripRule) -> bool:
    distance = _num(distance_km)
    if rule == LongTripRule.strict:
        return distance > constants.long_trip_threshold_km
    return distance >= constants.long_trip_threshold_km


def compute_tips(order: Any, mode: TipMode) -> float:
    order_value = _num(_get(order, "order_value"))
    payment_amount = _num(_get(order, "payment_amount"))
    change_returned = _num(_get(order, "change_returned"))
    extra_cash_tip = _num(_get(order, "extra_cash_tip"))

    if mode == TipMode.simple:
        return max(0.0, payment_amount - order_value - change_returned + extra_cash_tip)

    if _payment_type(order) in ("online", "card"):
        channel_tip = max(0.0, payment_amount - order_value)
    else:
        channel_tip = max(0.0, payment_amount - order_value - change_returned)
    return channel_tip + extra_cash_tip


def calculate_order(order: Any, mode: WageMode, constants: WageConstants = DEFAULT_CONSTANTS) -> OrderFigures:
    long_trip = is_long_trip(_get(order, "distance_km"), constants, mode.long_trip)
    fuel_fee = constants.fuel_per_order
    if long_trip:
        fuel_fee += constants.long_trip_extra_fuel
    tips_total = compute_tips(order, mode.tips)
    return OrderFigures(
        tips_total=tips_total,
        fuel_fee=fuel_fee,
        total_income=fuel_fee + tips_total,
        is_long_trip=long_trip,
    )


def calculate_daily_summary(
    day: str,
    orders: Iterable[Any],
    work_hours: Any,
    mode: WageMode,
    constants: WageConstants = DEFAULT_CONSTANTS,
) -> DailySummary:
    summary = DailySummary(date=day, work_hours=_num(work_hours))

    for order in orders:
        figures = calculate_order(order, mode, constants)
        summary.actual_trips += 1
        if figures.is_long_trip:
            summary.effective_trips += 2
            summary.long_trips_count += 1
        else:
            summary.effective_trips += 1
        summary.total_distance += _num(_get(order, "distance_km")) * 2
        summary.total_tips += figures.tips_total
        summary.fuel_fee_total += figures.fuel_fee

        # Settlement is cash flow with the restaurant, kept apart from the wage.
        payment_type = _payment_type(order)
        if payment_type == "cash":
            summary.cash_order_value += _num(_get(order, "order_value"))
        elif payment_type in ("online", "card"):
            owed_to_driver = _num(_get(order, "payment_amount")) - _num(_get(order, "order_value"))
            if owed_to_driver > 0:
                summary.non_cash_tips += owed_to_driver

    summary.base_payment = summary.work_hours * constants.base_hourly_rate
    summary.total_wage = summary.base_payment + summary.fuel_fee_total + summary.total_tips
    summary.hourly_wage = summary.total_wage / summary.work_hours if summary.work_hours > 0 else 0.0
    summary.restaurant_settlement = summary.cash_order_value - summary.non_cash_tips
    return summary


def date_range(start: str | date, end: str | date) -> Iterator[str]:
    first = start if isinstance(start, date) else date.fromisoformat(start)
    last = end if isinstance(end, date) else date.fromisoformat(end)
    for offset in range((last - first).days + 1):
        yield (first + timedelta(days=offset)).isoformat()


def summarize_range(
    start: str | date,
    end: str | date,
    orders: Iterable[Any],
    work_hours_by_date: Mapping[str, Any],
    mode: WageMode,
    constants: WageConstants = DEFAULT_CONSTANTS,
) -> RangeSummary:
    """One summary per calendar day in ``[start, end]``, zero-filled where idle."""
    orders_by_date: dict[str, list[Any]] = {}
    for order in orders:
        orders_by_date.setdefault(_order_date(order), []).append(order)

    days = [
        calculate_daily_summary(
            day,
            orders_by_date.get(day, []),
            work_hours_by_date.get(day, 0),
            mode,
            constants,
        )
        for day in date_range(start, end)
    ]

    result = RangeSummary(
        start_date=start.isoformat() if isinstance(start, date) else start,
        end_date=end.isoformat() if isinstance(end, date) else end,
        days=days,
    )
    for day in days:
        result.total_work_hours += day.work_hours
        result.actual_trips += day.actual_trips
        result.effective_trips += day.effective_trips
        result.long_trips_count += day.long_trips_count
        result.total_distance += day.total_distance
        result.total_tips += day.total_tips
        result.fuel_fee_total += day.fuel_fee_total
        result.base_payment += day.base_payment
        result.total_wage += day.total_wage
        result.restaurant_settlement += day.restaurant_settlement

    # Ratio of range sums, not a mean of the daily rates.
    if result.total_work_hours > 0:
        result.average_hourly_wage = result.total_wage / result.total_work_hours
    return result
