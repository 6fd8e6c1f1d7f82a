from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from tripwage.core.security import verify_password
from tripwage.schemas.records import (
    ORDER_MUTABLE_FIELDS,
    USER_MUTABLE_FIELDS,
    NaturalKey,
    OrderDraft,
    OrderRecord,
    UserDraft,
    UserRecord,
    WorkTimeDraft,
    WorkTimeRecord,
    utcnow_iso,
)


RecordT = TypeVar("RecordT", OrderRecord, WorkTimeRecord, UserRecord)
DraftT = TypeVar("DraftT", OrderDraft, WorkTimeDraft, UserDraft)


class Recordable(ABC, Generic[RecordT, DraftT]):
    """Persistence contract every backend implements for one entity.

    Ids are backend-native strings. Two backends never share ids, so anything
    that correlates records across backends goes through :meth:`locate`.
    """

    entity: ClassVar[str]
    mutable_fields: ClassVar[frozenset[str]]

    @abstractmethod
    def create(self, draft: DraftT) -> RecordT: ...

    @abstractmethod
    def get(self, record_id: str) -> RecordT | None: ...

    @abstractmethod
    def update(self, record_id: str, changes: Mapping[str, Any]) -> RecordT | None: ...

    @abstractmethod
    def delete(self, record_id: str) -> bool: ...

    @abstractmethod
    def candidates(self, key: NaturalKey) -> list[RecordT]:
        """Records that may share ``key``; narrowed by :meth:`locate`."""

    def locate(self, key: NaturalKey) -> RecordT | None:
        for record in self.candidates(key):
            if record.natural_key == key:
                return record
        return None

    def apply_changes(self, record: RecordT, changes: Mapping[str, Any]) -> RecordT:
        data = record.model_dump()
        data.update({k: v for k, v in changes.items() if k in self.mutable_fields})
        data["updated_at"] = utcnow_iso()
        return type(record).model_validate(data)


class OrderStore(Recordable[OrderRecord, OrderDraft]):
    entity = "order"
    mutable_fields = ORDER_MUTABLE_FIELDS

    @abstractmethod
    def find_by_owner(self, user_id: str) -> list[OrderRecord]:
        """All of the owner's orders, newest date first."""

    @abstractmethod
    def find_by_owner_and_date(self, user_id: str, date: str) -> list[OrderRecord]: ...

    @abstractmethod
    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[OrderRecord]:
        """Orders dated within ``[start, end]``, newest date first."""

    def candidates(self, key: NaturalKey) -> list[OrderRecord]:
        return self.find_by_owner_and_date(key.owner, key.date)


class WorkTimeStore(Recordable[WorkTimeRecord, WorkTimeDraft]):
    entity = "work_time"
    mutable_fields = frozenset({"start_time", "end_time", "work_hours"})

    @abstractmethod
    def find_by_owner_and_date(self, user_id: str, date: str) -> WorkTimeRecord | None: ...

    @abstractmethod
    def find_by_owner(self, user_id: str) -> list[WorkTimeRecord]: ...

    @abstractmethod
    def find_by_owner_and_date_range(self, user_id: str, start: str, end: str) -> list[WorkTimeRecord]: ...

    def save(self, draft: WorkTimeDraft) -> WorkTimeRecord:
        """Upsert on ``(user_id, date)``.

        The lookup and the write are separate calls, so two concurrent saves
        for the same day may race.
        """
        existing = self.find_by_owner_and_date(draft.user_id, draft.date)
        if existing is None:
            return self.create(draft)
        updated = self.update(
            existing.id,
            {"start_time": draft.start_time, "end_time": draft.end_time, "work_hours": draft.work_hours},
        )
        return updated if updated is not None else self.create(draft)

    def candidates(self, key: NaturalKey) -> list[WorkTimeRecord]:
        record = self.find_by_owner_and_date(key.owner, key.date)
        return [record] if record is not None else []


class UserStore(Recordable[UserRecord, UserDraft]):
    entity = "user"
    mutable_fields = USER_MUTABLE_FIELDS

    @abstractmethod
    def find_by_email(self, email: str) -> UserRecord | None: ...

    @abstractmethod
    def find_by_username(self, username: str) -> UserRecord | None: ...

    def find_by_email_or_username(self, email: str, username: str) -> UserRecord | None:
        user = self.find_by_email(email)
        if user is not None:
            return user
        return self.find_by_username(username)

    def check_password(self, user: UserRecord, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def candidates(self, key: NaturalKey) -> list[UserRecord]:
        user = self.find_by_email(key.owner)
        return [user] if user is not None else []
