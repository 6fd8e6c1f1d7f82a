"""
Backend A: JSON documents in Redis.

Each record is one JSON string under ``<prefix>:<collection>:doc:<id>``; ids are
random URL-safe tokens, except work times, which are keyed ``<user>_<date>``.
Owner lookups go through id sets. There is no compound range index, so date
range queries load the owner's whole collection and filter in memory.
"""

from __future__ import annotations

import json
import secrets
from collections.abc import Iterable, Mapping
from typing import Any

from tripwage.core.errors import InvalidInputError
from tripwage.db.redis_client import RedisDatabase
from tripwage.schemas.records import (
    OrderDraft,
    OrderRecord,
    UserDraft,
    UserRecord,
    WorkTimeDraft,
    WorkTimeRecord,
    utcnow_iso,
)
from tripwage.storage.base import OrderStore, UserStore, WorkTimeStore


def new_document_id() -> str:
    return secrets.token_urlsafe(15)


class _DocumentStore:
    collection: str
    record_type: Any

    def __init__(self, db: RedisDatabase):
        self.db = db
        self.r = db.client

    def _doc_key(self, record_id: str) -> str:
        return self.db.key(self.collection, "doc", record_id)

    def _owner_key(self, user_id: str) -> str:
        return self.db.key(self.collection, "by_user", user_id)

    def _to_record(self, record_id: str, raw: str | None):
        if raw is None:
            return None
        return self.record_type(id=record_id, **json.loads(raw))

    def _read(self, record_id: str):
        if not record_id:
            return None
        return self._to_record(record_id, self.r.get(self._doc_key(record_id)))

    def _read_many(self, ids: Iterable[str]) -> list:
        ids = list(ids)
        if not ids:
            return []
        raws = self.r.mget([self._doc_key(i) for i in ids])
        # Index entries can outlive a document deleted by another writer.
        return [record for record in (self._to_record(i, raw) for i, raw in zip(ids, raws)) if record is not None]

    def _dump(self, record) -> str:
        return json.dumps(record.model_dump(mode="json", exclude={"id"}))

    def _owner_records(self, user_id: str) -> list:
        return self._read_many(self.r.smembers(self._owner_key(user_id)))

    def _between(self, user_id: str, start: str, end: str) -> list:
        records = [r for r in self._owner_records(user_id) if start <= r.date <= end]
        return sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)


class RedisOrderStore(_DocumentStore, OrderStore):
    collection = "orders"
    record_type = OrderRecord

    def _day_key(self, user_id: str, date: str) -> str:
        return self.db.key(self.collection, "by_user_date", user_id, date)

    def create(self, draft: OrderDraft) -> OrderRecord:
        now = utcnow_iso()
        record = OrderRecord(id=new_document_id(), created_at=now, updated_at=now, **draft.model_dump())
        pipe = self.r.pipeline()
        pipe.set(self._doc_key(record.id), self._dump(record))
        pipe.sadd(self._owner_key(record.user_id), record.id)
        pipe.sadd(self._day_key(record.user_id, record.date), record.id)
        pipe.execute()
        return record

    def get(self, record_id: str) -> OrderRecord | None:
        return self._read(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> OrderRecord | None:
        record = self._read(record_id)
        if record is None:
            return None
        updated = self.apply_changes(record, changes)
        self.r.set(self._doc_key(record_id), self._dump(updated))
        return updated

    def delete(self, record_id: str) -> bool:
        record = self._read(record_id)
        if record is None:
            return False
        pipe = self.r.pipeline()
        pipe.delete(self._doc_key(record_id))
        pipe.srem(self._owner_key(record.user_id), record_id)
        pipe.srem(self._day_key(record.user_id, record.date), record_id)
        pipe.execute()
        return True

    def find_by_owner(self, user_id: str) -> list[OrderRecord]:
        return sorted(self._owner_records(user_id), key=lambda r: (r.date, r.created_at), reverse=True)

    def find_by_owner_and_date(self, user_id: str, date: str) -> list[OrderRecord]:
        records = self._read_many(self.r.smembers(self._day_key(user_id, date)))
        return sorted(records, key=lambda r: r.created_at)

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[OrderRecord]:
        return self._between(user_id, start, end)


class RedisWorkTimeStore(_DocumentStore, WorkTimeStore):
    collection = "work_times"
    record_type = WorkTimeRecord

    @staticmethod
    def document_id(user_id: str, date: str) -> str:
        return f"{user_id}_{date}"

    def create(self, draft: WorkTimeDraft) -> WorkTimeRecord:
        now = utcnow_iso()
        record = WorkTimeRecord(
            id=self.document_id(draft.user_id, draft.date),
            created_at=now,
            updated_at=now,
            **draft.model_dump(),
        )
        pipe = self.r.pipeline()
        pipe.set(self._doc_key(record.id), self._dump(record))
        pipe.sadd(self._owner_key(record.user_id), record.id)
        pipe.execute()
        return record

    def get(self, record_id: str) -> WorkTimeRecord | None:
        return self._read(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> WorkTimeRecord | None:
        record = self._read(record_id)
        if record is None:
            return None
        updated = self.apply_changes(record, changes)
        self.r.set(self._doc_key(record_id), self._dump(updated))
        return updated

    def delete(self, record_id: str) -> bool:
        record = self._read(record_id)
        if record is None:
            return False
        pipe = self.r.pipeline()
        pipe.delete(self._doc_key(record_id))
        pipe.srem(self._owner_key(record.user_id), record_id)
        pipe.execute()
        return True

    def find_by_owner_and_date(self, user_id: str, date: str) -> WorkTimeRecord | None:
        return self._read(self.document_id(user_id, date))

    def find_by_owner(self, user_id: str) -> list[WorkTimeRecord]:
        return sorted(self._owner_records(user_id), key=lambda r: r.date, reverse=True)

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[WorkTimeRecord]:
        return self._between(user_id, start, end)


class RedisUserStore(_DocumentStore, UserStore):
    collection = "users"
    record_type = UserRecord

    def _email_key(self, email: str) -> str:
        return self.db.key(self.collection, "email", (email or "").strip().lower())

    def _username_key(self, username: str) -> str:
        return self.db.key(self.collection, "username", (username or "").strip())

    def _claim(self, key: str, record_id: str) -> None:
        if not self.r.set(key, record_id, nx=True):
            raise InvalidInputError("Username or email already in use")

    def create(self, draft: UserDraft) -> UserRecord:
        now = utcnow_iso()
        record = UserRecord(id=new_document_id(), created_at=now, updated_at=now, **draft.model_dump())
        self._claim(self._email_key(record.email), record.id)
        try:
            self._claim(self._username_key(record.username), record.id)
        except InvalidInputError:
            self.r.delete(self._email_key(record.email))
            raise
        self.r.set(self._doc_key(record.id), self._dump(record))
        return record

    def get(self, record_id: str) -> UserRecord | None:
        return self._read(record_id)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> UserRecord | None:
        record = self._read(record_id)
        if record is None:
            return None
        updated = self.apply_changes(record, changes)

        if updated.email != record.email:
            self._claim(self._email_key(updated.email), record_id)
        if updated.username != record.username:
            try:
                self._claim(self._username_key(updated.username), record_id)
            except InvalidInputError:
                if updated.email != record.email:
                    self.r.delete(self._email_key(updated.email))
                raise

        pipe = self.r.pipeline()
        pipe.set(self._doc_key(record_id), self._dump(updated))
        if updated.email != record.email:
            pipe.delete(self._email_key(record.email))
        if updated.username != record.username:
            pipe.delete(self._username_key(record.username))
        pipe.execute()
        return updated

    def delete(self, record_id: str) -> bool:
        record = self._read(record_id)
        if record is None:
            return False
        pipe = self.r.pipeline()
        pipe.delete(self._doc_key(record_id))
        pipe.delete(self._email_key(record.email))
        pipe.delete(self._username_key(record.username))
        pipe.execute()
        return True

    def _by_index(self, key: str) -> UserRecord | None:
        record_id = self.r.get(key)
        return self._read(record_id) if record_id else None

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._by_index(self._email_key(email))

    def find_by_username(self, username: str) -> UserRecord | None:
        return self._by_index(self._username_key(username))
