from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DailyStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    actual_trips: int
    effective_trips: int
    long_trips_count: int
    total_distance: float
    total_tips: float
    fuel_fee_total: float
    work_hours: float
    base_payment: float
    total_wage: float
    hourly_wage: float
    cash_order_value: float
    non_cash_tips: float
    restaurant_settlement: float


class HistoricalStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_date: str
    end_date: str
    days: list[DailyStatsOut]

    total_work_hours: float
    actual_trips: int
    effective_trips: int
    long_trips_count: int
    total_distance: float
    total_tips: float
    fuel_fee_total: float
    base_payment: float
    total_wage: float
    restaurant_settlement: float
    average_hourly_wage: float
