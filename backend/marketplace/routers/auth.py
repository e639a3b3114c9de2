from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.dependencies import get_current_user, require_session_token
from marketplace.models.user import User
from marketplace.schemas.user import (
    LoginRequest,
    LoginResponse,
    ThrottleResponse,
    UserRegister,
    UserResponse,
)
from marketplace.services import user_service
from marketplace.services.session_service import session_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(req: UserRegister, db: Session = Depends(get_db)):
    return UserResponse.model_validate(user_service.register(db, req))


@router.post("/login", response_model=LoginResponse | ThrottleResponse)
async def login(req: LoginRequest, request: Request, db: Session = Depends(get_db)):
    client_host = request.client.host if request.client else "unknown"
    result = session_service.login(db, req.username, req.password, throttle_key=f"login:{client_host}")
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    if "error" in result:
        raise HTTPException(status_code=429, detail=result)
    return LoginResponse(**result)


@router.post("/logout")
async def logout(token: str = Depends(require_session_token)):
    session_service.logout(token)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)
