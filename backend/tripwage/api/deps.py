from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer

from tripwage.core.config import Settings, get_settings
from tripwage.core.security import decode_token
from tripwage.schemas.records import UserRecord
from tripwage.services.orders import OrderService
from tripwage.services.users import UserService
from tripwage.services.work_times import WorkTimeService
from tripwage.storage.selector import Storage


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def get_storage(request: Request) -> Storage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise HTTPException(status_code=503, detail="Storage is not ready")
    return storage


def get_order_service(
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(storage.orders, storage.work_times, settings.wage_constants)


def get_work_time_service(storage: Storage = Depends(get_storage)) -> WorkTimeService:
    return WorkTimeService(storage.work_times)


def get_user_service(storage: Storage = Depends(get_storage)) -> UserService:
    return UserService(storage.users)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    storage: Storage = Depends(get_storage),
) -> UserRecord:
    try:
        payload = decode_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = storage.users.get(str(sub))
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")

    return user
