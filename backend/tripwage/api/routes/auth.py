from __future__ import annotations

from fastapi import APIRouter, Depends

from tripwage.api.deps import get_user_service
from tripwage.core.errors import AuthenticationError
from tripwage.core.security import create_access_token
from tripwage.schemas.auth import LoginIn, RegisterIn, TokenOut
from tripwage.schemas.records import UserRecord
from tripwage.schemas.users import UserOut
from tripwage.services.users import UserService


router = APIRouter(prefix="/auth")


def _token_for(user: UserRecord) -> TokenOut:
    token = create_access_token(subject=user.id, role=user.role.value)
    return TokenOut(access_token=token, user=UserOut.model_validate(user))


@router.post("/register", response_model=TokenOut, status_code=201)
def register(payload: RegisterIn, service: UserService = Depends(get_user_service)):
    user = service.register(payload.username, payload.email, payload.password, payload.confirm_password)
    return _token_for(user)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, service: UserService = Depends(get_user_service)):
    user = service.authenticate(payload.email, payload.password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    return _token_for(user)
