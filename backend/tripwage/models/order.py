from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tripwage.models.base import Base, utcnow


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_user_date", "user_id", "date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Owner id as issued by whichever backend holds the user; not a foreign key.
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    date: Mapped[str] = mapped_column(String(10), index=True)
    order_number: Mapped[str] = mapped_column(String(100), default="")
    payment_type: Mapped[str] = mapped_column(String(16), default="online")

    order_value: Mapped[float] = mapped_column(Float, default=0.0)
    payment_amount: Mapped[float] = mapped_column(Float, default=0.0)
    change_returned: Mapped[float] = mapped_column(Float, default=0.0)
    extra_cash_tip: Mapped[float] = mapped_column(Float, default=0.0)
    distance_km: Mapped[float] = mapped_column(Float, default=0.0)
    notes: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
