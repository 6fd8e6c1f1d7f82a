from __future__ import annotations

from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field

from tripwage.schemas.records import PaymentType


class OrderCreateIn(BaseModel):
    date: date_type | None = None
    order_number: str = Field(default="", max_length=100)
    payment_type: PaymentType = PaymentType.online

    order_value: float = Field(default=0.0, ge=0)
    payment_amount: float = Field(default=0.0, ge=0)
    change_returned: float = Field(default=0.0, ge=0)
    extra_cash_tip: float = Field(default=0.0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    notes: str = Field(default="", max_length=1000)


class OrderUpdateIn(BaseModel):
    order_number: str | None = Field(default=None, max_length=100)
    payment_type: PaymentType | None = None

    order_value: float | None = Field(default=None, ge=0)
    payment_amount: float | None = Field(default=None, ge=0)
    change_returned: float | None = Field(default=None, ge=0)
    extra_cash_tip: float | None = Field(default=None, ge=0)
    distance_km: float | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=1000)


class OrderDeleteOut(BaseModel):
    deleted: bool


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    date: str
    order_number: str
    payment_type: PaymentType

    order_value: float
    payment_amount: float
    change_returned: float
    extra_cash_tip: float
    distance_km: float
    notes: str

    created_at: str
    updated_at: str
