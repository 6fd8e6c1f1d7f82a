from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tripwage.core.errors import InvalidInputError, NotFoundError
from tripwage.core.security import hash_password
from tripwage.schemas.records import UserDraft, UserRecord
from tripwage.storage.base import UserStore


logger = logging.getLogger(__name__)


def _normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


class UserService:
    def __init__(self, users: UserStore):
        self.users = users

    def register(self, username: str, email: str, password: str, confirm_password: str | None = None) -> UserRecord:
        username = (username or "").strip()
        email = _normalize_email(email)
        if not username or not email or not password:
            raise InvalidInputError("Username, email and password are required")
        if confirm_password is not None and confirm_password != password:
            raise InvalidInputError("Passwords do not match")

        existing = self.users.find_by_email_or_username(email, username)
        if existing is not None:
            if existing.email == email:
                raise InvalidInputError("Email already in use")
            raise InvalidInputError("Username already in use")

        user = self.users.create(UserDraft(username=username, email=email, password_hash=hash_password(password)))
        logger.info("registered user id=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        user = self.users.find_by_email(_normalize_email(email))
        if user is None or not self.users.check_password(user, password or ""):
            return None
        return user

    def get_profile(self, user_id: str) -> UserRecord:
        user = self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord:
        user = self.get_profile(user_id)
        changes: dict[str, str] = {}

        if fields.get("username") is not None:
            username = str(fields["username"]).strip()
            if not username:
                raise InvalidInputError("Username cannot be empty")
            if username != user.username:
                other = self.users.find_by_username(username)
                if other is not None and other.id != user.id:
                    raise InvalidInputError("Username already in use")
                changes["username"] = username

        if fields.get("email") is not None:
            email = _normalize_email(fields["email"])
            if not email:
                raise InvalidInputError("Email cannot be empty")
            if email != user.email:
                other = self.users.find_by_email(email)
                if other is not None and other.id != user.id:
                    raise InvalidInputError("Email already in use")
                changes["email"] = email

        if not changes:
            return user
        updated = self.users.update(user_id, changes)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
        confirm_password: str | None = None,
    ) -> UserRecord:
        user = self.get_profile(user_id)
        if not self.users.check_password(user, current_password or ""):
            raise InvalidInputError("Current password is incorrect")
        if not new_password:
            raise InvalidInputError("New password is required")
        if confirm_password is not None and confirm_password != new_password:
            raise InvalidInputError("Passwords do not match")

        updated = self.users.update(user_id, {"password_hash": hash_password(new_password)})
        if updated is None:
            raise NotFoundError("User not found")
        logger.info("password changed for user id=%s", user_id)
        return updated
