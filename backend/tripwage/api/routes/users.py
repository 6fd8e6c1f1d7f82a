from __future__ import annotations

from fastapi import APIRouter, Depends

from tripwage.api.deps import get_current_user, get_user_service
from tripwage.schemas.records import UserRecord
from tripwage.schemas.users import MessageOut, PasswordChangeIn, ProfileUpdateIn, UserOut
from tripwage.services.users import UserService


router = APIRouter(prefix="/users")


@router.get("/profile", response_model=UserOut)
def get_profile(current: UserRecord = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return UserOut.model_validate(service.get_profile(current.id))


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: ProfileUpdateIn,
    current: UserRecord = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(current.id, payload.model_dump(exclude_none=True))
    return UserOut.model_validate(user)


@router.put("/change-password", response_model=MessageOut)
def change_password(
    payload: PasswordChangeIn,
    current: UserRecord = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.change_password(current.id, payload.current_password, payload.new_password, payload.confirm_password)
    return MessageOut(message="Password updated")
