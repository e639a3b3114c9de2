from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.models.user import User
from marketplace.services.session_service import session_service
from marketplace.services import user_service


async def require_session_token(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[7:]


async def get_current_user(
    token: str = Depends(require_session_token),
    db: Session = Depends(get_db),
) -> User:
    user_id = session_service.resolve(token)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid token")
    user = user_service.find_by_id(db, user_id)
    if not user:
        session_service.logout(token)
        raise HTTPException(status_code=401, detail="Session user no longer exists")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
