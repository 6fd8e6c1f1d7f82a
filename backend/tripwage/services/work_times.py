from __future__ import annotations

from datetime import date

from pydantic import ValidationError

from tripwage.schemas.records import WorkTimeDraft, WorkTimeRecord
from tripwage.services.orders import invalid_input, parse_iso_date
from tripwage.services.wages import compute_work_hours
from tripwage.storage.base import WorkTimeStore


class WorkTimeService:
    def __init__(self, work_times: WorkTimeStore):
        self.work_times = work_times

    def save(self, user_id: str, day: str | date, start_time: str | None, end_time: str | None) -> WorkTimeRecord:
        """Record the day's interval, replacing any earlier one for the same day."""
        try:
            draft = WorkTimeDraft(
                user_id=user_id,
                date=parse_iso_date(day),
                start_time=start_time or "",
                end_time=end_time or "",
                work_hours=compute_work_hours(start_time, end_time),
            )
        except ValidationError as exc:
            raise invalid_input(exc) from exc
        return self.work_times.save(draft)

    def get(self, user_id: str, day: str | date) -> WorkTimeRecord | None:
        return self.work_times.find_by_owner_and_date(user_id, parse_iso_date(day))
