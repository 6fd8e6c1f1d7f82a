from __future__ import annotations

from datetime import date as date_type

from pydantic import BaseModel, ConfigDict, Field


class WorkTimeIn(BaseModel):
    date: date_type
    start_time: str | None = Field(default=None, pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")
    end_time: str | None = Field(default=None, pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")


class WorkTimeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str | None = None
    user_id: str | None = None
    date: str
    start_time: str = ""
    end_time: str = ""
    work_hours: float = 0.0
