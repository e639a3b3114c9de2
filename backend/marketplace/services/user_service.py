import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from marketplace.config import settings
from marketplace.database import utcnow
from marketplace.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from marketplace.models.file import FileItem
from marketplace.models.user import User
from marketplace.schemas.user import UserRegister, UserUpdate
from marketplace.utils.security import hash_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def find_by_id(db: Session, user_id: int) -> User | None:
    return (
        db.query(User)
        .options(joinedload(User.avatar_file))
        .filter(User.id == user_id)
        .first()
    )


def register(db: Session, req: UserRegister) -> User:
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequest(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    existing = db.query(User).filter(
        or_(User.username == req.username, User.email == req.email)
    ).first()
    if existing:
        field = "Username" if existing.username == req.username else "Email"
        raise Conflict(f"{field} already registered")

    data = req.model_dump(exclude={"password"})
    user = User(
        **data,
        hashed_password=hash_password(req.password),
        is_admin=req.username in settings.admin_usernames,
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return user


def update_profile(db: Session, user: User, req: UserUpdate) -> User:
    update_data = req.model_dump(exclude_unset=True)
    if "email" in update_data and update_data["email"] != user.email:
        taken = db.query(User).filter(User.email == update_data["email"]).first()
        if taken:
            raise Conflict("Email already registered")
    for key, value in update_data.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def set_avatar(db: Session, user: User, file_id: int | None) -> User:
    if file_id is not None:
        file_item = db.query(FileItem).filter(FileItem.id == file_id).first()
        if not file_item:
            raise NotFound("File not found")
        if file_item.owner_id != user.id:
            raise Unauthorized("Avatar must be one of your own files")
    user.avatar_file_id = file_id
    db.commit()
    db.refresh(user)
    return user
