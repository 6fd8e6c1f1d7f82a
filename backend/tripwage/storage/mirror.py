"""
Dual-write support.

A :class:`Mirror` writes to the primary store and then repeats the write on
the secondary store as a best effort. The primary result is what the caller
gets; a secondary failure is logged and dropped, and nothing is rolled back.
The secondary is never read to answer a query.

Ids from the two stores are unrelated, so the secondary copy of a record is
found by its natural key. Updates and deletes whose copy cannot be found are
skipped rather than turned into new records.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic

from tripwage.schemas.records import (
    NaturalKey,
    OrderDraft,
    OrderRecord,
    UserDraft,
    UserRecord,
    WorkTimeDraft,
    WorkTimeRecord,
)
from tripwage.storage.base import DraftT, OrderStore, Recordable, RecordT, UserStore, WorkTimeStore


logger = logging.getLogger(__name__)


class Mirror(Generic[RecordT, DraftT]):
    def __init__(
        self,
        primary: Recordable[RecordT, DraftT],
        secondary: Recordable[RecordT, DraftT],
        *,
        primary_name: str = "primary",
        secondary_name: str = "secondary",
    ):
        self.primary = primary
        self.secondary = secondary
        self.primary_name = primary_name
        self.secondary_name = secondary_name

    @property
    def entity(self) -> str:
        return self.primary.entity

    def create(self, draft: DraftT) -> RecordT:
        record = self.primary.create(draft)
        # Rebuilt from the primary's fields; the primary id means nothing on the secondary.
        self._best_effort("create", record.natural_key, lambda: self.secondary.create(record.to_draft()))
        return record

    def upsert(self, record: RecordT) -> None:
        """Bring the secondary copy of ``record`` in line, creating it if absent."""

        def write() -> None:
            match = self.secondary.locate(record.natural_key)
            if match is None:
                self.secondary.create(record.to_draft())
                return
            fields = record.model_dump(include=set(self.secondary.mutable_fields))
            self.secondary.update(match.id, fields)

        self._best_effort("upsert", record.natural_key, write)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> RecordT | None:
        before = self.primary.get(record_id)
        if before is None:
            return None
        updated = self.primary.update(record_id, changes)
        if updated is None:
            return None
        self._mirror_to_match("update", before.natural_key, lambda match: self.secondary.update(match.id, changes))
        return updated

    def delete(self, record_id: str) -> bool:
        existing = self.primary.get(record_id)
        deleted = self.primary.delete(record_id)
        if deleted and existing is not None:
            self._mirror_to_match("delete", existing.natural_key, lambda match: self.secondary.delete(match.id))
        return deleted

    def _mirror_to_match(self, operation: str, key: NaturalKey, action: Callable[[RecordT], Any]) -> None:
        def write() -> None:
            match = self.secondary.locate(key)
            if match is None:
                logger.info(
                    "dual-write %s %s skipped: no %s record for %s",
                    self.entity,
                    operation,
                    self.secondary_name,
                    key,
                )
                return
            action(match)

        self._best_effort(operation, key, write)

    def _best_effort(self, operation: str, key: NaturalKey, write: Callable[[], Any]) -> None:
        try:
            write()
        except Exception as exc:
            logger.warning(
                "dual-write %s %s on %s failed for %s: %s",
                self.entity,
                operation,
                self.secondary_name,
                key,
                exc,
            )


class DualOrderStore(OrderStore):
    def __init__(self, mirror: Mirror[OrderRecord, OrderDraft]):
        self.mirror = mirror
        self.primary: OrderStore = mirror.primary

    def create(self, draft: OrderDraft) -> OrderRecord:
        return self.mirror.create(draft)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> OrderRecord | None:
        return self.mirror.update(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self.mirror.delete(record_id)

    def get(self, record_id: str) -> OrderRecord | None:
        return self.primary.get(record_id)

    def find_by_owner(self, user_id: str) -> list[OrderRecord]:
        return self.primary.find_by_owner(user_id)

    def find_by_owner_and_date(self, user_id: str, date: str) -> list[OrderRecord]:
        return self.primary.find_by_owner_and_date(user_id, date)

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[OrderRecord]:
        return self.primary.find_by_owner_and_date_range(user_id, start, end)


class DualWorkTimeStore(WorkTimeStore):
    def __init__(self, mirror: Mirror[WorkTimeRecord, WorkTimeDraft]):
        self.mirror = mirror
        self.primary: WorkTimeStore = mirror.primary

    def save(self, draft: WorkTimeDraft) -> WorkTimeRecord:
        record = self.primary.save(draft)
        self.mirror.upsert(record)
        return record

    def create(self, draft: WorkTimeDraft) -> WorkTimeRecord:
        return self.mirror.create(draft)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> WorkTimeRecord | None:
        return self.mirror.update(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self.mirror.delete(record_id)

    def get(self, record_id: str) -> WorkTimeRecord | None:
        return self.primary.get(record_id)

    def find_by_owner_and_date(self, user_id: str, date: str) -> WorkTimeRecord | None:
        return self.primary.find_by_owner_and_date(user_id, date)

    def find_by_owner(self, user_id: str) -> list[WorkTimeRecord]:
        return self.primary.find_by_owner(user_id)

    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[WorkTimeRecord]:
        return self.primary.find_by_owner_and_date_range(user_id, start, end)


class DualUserStore(UserStore):
    def __init__(self, mirror: Mirror[UserRecord, UserDraft]):
        self.mirror = mirror
        self.primary: UserStore = mirror.primary

    def create(self, draft: UserDraft) -> UserRecord:
        return self.mirror.create(draft)

    def update(self, record_id: str, changes: Mapping[str, Any]) -> UserRecord | None:
        return self.mirror.update(record_id, changes)

    def delete(self, record_id: str) -> bool:
        return self.mirror.delete(record_id)

    def get(self, record_id: str) -> UserRecord | None:
        return self.primary.get(record_id)

    def find_by_email(self, email: str) -> UserRecord | None:
        return self.primary.find_by_email(email)

    def find_by_username(self, username: str) -> UserRecord | None:
        return self.primary.find_by_username(username)
