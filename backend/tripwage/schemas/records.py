from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def today_iso() -> str:
    return date_type.today().isoformat()


def _check_iso_date(value: str) -> str:
    value = str(value).strip()
    date_type.fromisoformat(value)
    return value


class PaymentType(str, enum.Enum):
    online = "online"
    card = "card"
    cash = "cash"
    mixed = "mixed"


class UserRole(str, enum.Enum):
    user = "user"
    admin = "admin"


@dataclass(frozen=True)
class NaturalKey:
    """Identity of a record that holds across backends with unrelated ids."""

    owner: str
    date: str = ""
    discriminator: str = ""

    def __post_init__(self):
        object.__setattr__(self, "owner", str(self.owner or "").strip())
        object.__setattr__(self, "date", str(self.date or "").strip())
        object.__setattr__(self, "discriminator", str(self.discriminator or "").strip())


class OrderDraft(BaseModel):
    user_id: str
    date: str = Field(default_factory=today_iso)
    order_number: str = ""
    payment_type: PaymentType = PaymentType.online
    order_value: float = 0.0
    payment_amount: float = 0.0
    change_returned: float = 0.0
    extra_cash_tip: float = 0.0
    distance_km: float = 0.0
    notes: str = ""

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return _check_iso_date(value)

    @field_validator(
        "order_value", "payment_amount", "change_returned", "extra_cash_tip", "distance_km", mode="before"
    )
    @classmethod
    def _zero_when_absent(cls, value):
        return 0.0 if value in (None, "") else value

    @field_validator("order_number", "notes", mode="before")
    @classmethod
    def _blank_when_absent(cls, value):
        return "" if value is None else str(value)


class OrderRecord(OrderDraft):
    id: str
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    @property
    def natural_key(self) -> NaturalKey:
        return NaturalKey(self.user_id, self.date, self.order_number)

    def to_draft(self) -> OrderDraft:
        return OrderDraft(**self.model_dump(exclude={"id", "created_at", "updated_at"}))


# Fields a caller may change on an existing order; owner and date are fixed.
ORDER_MUTABLE_FIELDS = frozenset(
    {
        "order_number",
        "payment_type",
        "order_value",
        "payment_amount",
        "change_returned",
        "extra_cash_tip",
        "distance_km",
        "notes",
    }
)


class WorkTimeDraft(BaseModel):
    user_id: str
    date: str
    start_time: str = ""
    end_time: str = ""
    work_hours: float = 0.0

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return _check_iso_date(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _blank_when_absent(cls, value):
        return "" if value is None else str(value)


class WorkTimeRecord(WorkTimeDraft):
    id: str
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    @property
    def natural_key(self) -> NaturalKey:
        return NaturalKey(self.user_id, self.date)

    def to_draft(self) -> WorkTimeDraft:
        return WorkTimeDraft(**self.model_dump(exclude={"id", "created_at", "updated_at"}))


class UserDraft(BaseModel):
    username: str
    email: str
    password_hash: str = Field(repr=False)
    role: UserRole = UserRole.user

    @field_validator("username", mode="before")
    @classmethod
    def _strip(cls, value):
        return str(value or "").strip()

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value):
        return str(value or "").strip().lower()


class UserRecord(UserDraft):
    id: str
    created_at: str = Field(default_factory=utcnow_iso)
    updated_at: str = Field(default_factory=utcnow_iso)

    @property
    def natural_key(self) -> NaturalKey:
        return NaturalKey(self.email)

    def to_draft(self) -> UserDraft:
        return UserDraft(**self.model_dump(exclude={"id", "created_at", "updated_at"}))


USER_MUTABLE_FIELDS = frozenset({"username", "email", "password_hash", "role"})
