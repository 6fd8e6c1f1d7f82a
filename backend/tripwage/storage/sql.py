from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from tripwage.core.errors import InvalidInputError
from tripwage.db.session import SqlDatabase
from tripwage.models.base import utcnow
from tripwage.models.order import Order
from tripwage.models.user import User
from tripwage.models.work_time import WorkTime
from tripwage.schemas.records import (
    OrderDraft,
    OrderRecord,
    UserDraft,
    UserRecord,
    WorkTimeDraft,
    WorkTimeRecord,
)
from tripwage.storage.base import OrderStore, UserStore, WorkTimeStore


def _native_id(record_id: str) -> int | None:
    # Ids issued by the document backend are not integers and can never match here.
    try:
        return int(record_id)
    except (TypeError, ValueError):
        return None


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""


def _parse_ts(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except (TypeError, ValueError):
        return utcnow()


def _order_out(row: Order) -> OrderRecord:
    return OrderRecord(
        id=str(row.id),
        user_id=row.user_id,
        date=row.date,
        order_number=row.order_number or "",
        payment_type=row.payment_type or "online",
        order_value=row.order_value or 0.0,
        payment_amount=row.payment_amount or 0.0,
        change_returned=row.change_returned or 0.0,
        extra_cash_tip=row.extra_cash_tip or 0.0,
        distance_km=row.distance_km or 0.0,
        notes=row.notes or "",
        created_at=_iso(row.created_at),
        updated_at=_iso(row.updated_at),
    )


def _work_time_out(row: WorkTime) -> WorkTimeRecord:
    return WorkTimeRecord(
        id=str(row.id),
        user_id=row.user_id,
        date=row.date,
        start_time=row.start_time or "",
        end_time=row.end_time or "",
        work_hours=row.work_hours or 0.0,
        created_at=_iso(row.created_at),
        updated_at=_iso(row.updated_at),
    )


def _user_out(row: User) -> UserRecord:
    return UserRecord(
        id=str(row.id),
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        role=row.role or "user",
        created_at=_iso(row.created_at),
        updated_at=_iso(row.updated_at),
    )


class _SqlStore:
    model: type
    to_record: Any
    conflict_message = "Record already exists"

    def __init__(self, db: SqlDatabase):
        self.db = db

    def _commit(self, session) -> None:
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise InvalidInputError(self.conflict_message) from exc

    def _get(self, record_id: str):
        native_id = _native_id(record_id)
        if native_id is None:
            return None
        with self.db.session() as session:
            row = session.get(self.model, native_id)
            return self.to_record(row) if row is not None else None

    def _insert(self, values: dict):
        with self.db.session() as session:
            row = self.model(**values)
            session.add(row)
            self._commit(session)
            session.refresh(row)
            return self.to_record(row)

    def _write(self, record_id: str, changes: Mapping[str, Any]):
        native_id = _native_id(record_id)
        if native_id is None:
            return None
        with self.db.session() as session:
            row = session.get(self.model, native_id)
            if row is None:
                return None
            updated = self.apply_changes(self.to_record(row), changes)
            for name in self.mutable_fields:
                value = getattr(updated, name)
                setattr(row, name, getattr(value, "value", value))
            row.updated_at = _parse_ts(updated.updated_at)
            self._commit(session)
            session.refresh(row)
            return self.to_record(row)

    def _remove(self, record_id: str) -> bool:
        native_id = _native_id(record_id)
        if native_id is None:
            return False
        with self.db.session() as session:
            row = session.get(self.model, native_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def _all(self, stmt) -> list:
        with self.db.session() as session:
            return [self.to_record(row) for row in session.scalars(stmt).all()]


class SqlOrderStore(_SqlStore, OrderStore):
    model = Order
    to_record = staticmethod(_order_out)

    def create(self, draft: OrderDraft) -> OrderRecord:
        values = draft.model_dump()
        values["payment_type"] = draft.payment_type.value
        return self._insert(values)

    def get(self, record_id: str) -> OrderRecord | None:
        return self._get(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> OrderRecord | None:
        return self._write(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self._remove(record_id)

    def find_by_owner(self, user_id: str) -> list[OrderRecord]:
        return self._all(select(Order).where(Order.user_id == user_id).order_by(Order.date.desc(), Order.id.desc()))

    def find_by_owner_and_date(self, user_id: str, date: str) -> list[OrderRecord]:
        return self._all(select(Order).where(Order.user_id == user_id, Order.date == date).order_by(Order.id.asc()))

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[OrderRecord]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id, Order.date >= start, Order.date <= end)
            .order_by(Order.date.desc(), Order.id.desc())
        )
        return self._all(stmt)


class SqlWorkTimeStore(_SqlStore, WorkTimeStore):
    model = WorkTime
    to_record = staticmethod(_work_time_out)
    conflict_message = "Work time already recorded for this date"

    def create(self, draft: WorkTimeDraft) -> WorkTimeRecord:
        return self._insert(draft.model_dump())

    def get(self, record_id: str) -> WorkTimeRecord | None:
        return self._get(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> WorkTimeRecord | None:
        return self._write(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self._remove(record_id)

    def find_by_owner_and_date(self, user_id: str, date: str) -> WorkTimeRecord | None:
        with self.db.session() as session:
            row = session.scalars(
                select(WorkTime).where(WorkTime.user_id == user_id, WorkTime.date == date)
            ).first()
            return _work_time_out(row) if row is not None else None

    def find_by_owner(self, user_id: str) -> list[WorkTimeRecord]:
        return self._all(select(WorkTime).where(WorkTime.user_id == user_id).order_by(WorkTime.date.desc()))

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[WorkTimeRecord]:
        stmt = (
            select(WorkTime)
            .where(WorkTime.user_id == user_id, WorkTime.date >= start, WorkTime.date <= end)
            .order_by(WorkTime.date.desc())
        )
        return self._all(stmt)


class SqlUserStore(_SqlStore, UserStore):
    model = User
    to_record = staticmethod(_user_out)
    conflict_message = "Username or email already in use"

    def create(self, draft: UserDraft) -> UserRecord:
        values = draft.model_dump()
        values["role"] = draft.role.value
        return self._insert(values)

    def get(self, record_id: str) -> UserRecord | None:
        return self._get(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> UserRecord | None:
        return self._write(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self._remove(record_id)

    def find_by_email(self, email: str) -> UserRecord | None:
        with self.db.session() as session:
            row = session.scalars(select(User).where(User.email == (email or "").strip().lower())).first()
            return _user_out(row) if row is not None else None

    def find_by_username(self, username: str) -> UserRecord | None:
        with self.db.session() as session:
            row = session.scalars(select(User).where(User.username == (username or "").strip())).first()
            return _user_out(row) if row is not None else None
