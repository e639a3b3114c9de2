from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.dependencies import get_current_user
from marketplace.models.user import User
from marketplace.schemas.user import AvatarUpdate, UserResponse, UserSummary, UserUpdate
from marketplace.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.put("/me", response_model=UserResponse)
async def update_me(
    req: UserUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(user_service.update_profile(db, user, req))


@router.put("/me/avatar", response_model=UserResponse)
async def set_avatar(
    req: AvatarUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return UserResponse.model_validate(user_service.set_avatar(db, user, req.file_id))


@router.get("/{user_id}", response_model=UserSummary)
async def get_user(
    user_id: int,
    _user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.find_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserSummary.model_validate(user)
