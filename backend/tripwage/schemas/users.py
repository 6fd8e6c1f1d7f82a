from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tripwage.schemas.records import UserRole


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    role: UserRole
    created_at: str
    updated_at: str


class ProfileUpdateIn(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255)


class PasswordChangeIn(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=6, max_length=128)
    confirm_password: str | None = Field(default=None, max_length=128)


class MessageOut(BaseModel):
    message: str
