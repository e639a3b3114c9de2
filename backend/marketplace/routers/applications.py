from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.database import get_db
from marketplace.dependencies import get_current_user
from marketplace.models.application import JobApplication
from marketplace.models.user import User
from marketplace.schemas.application import ApplicationCreate, ApplicationResponse
from marketplace.services import application_service

router = APIRouter(tags=["applications"])


def _application_to_response(application: JobApplication) -> ApplicationResponse:
    return ApplicationResponse.model_validate(application)


@router.post(
    "/job-announcements/{announcement_id}/applications",
    response_model=ApplicationResponse,
    status_code=201,
)
async def apply(
    announcement_id: int,
    req: ApplicationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = application_service.apply(db, user, announcement_id, req)
    return _application_to_response(application)


@router.get(
    "/job-announcements/{announcement_id}/applications",
    response_model=list[ApplicationResponse],
)
async def list_applications(
    announcement_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    applications = application_service.list_for_announcement(db, user, announcement_id)
    return [_application_to_response(a) for a in applications]


@router.get("/applications/me", response_model=list[ApplicationResponse])
async def my_applications(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_application_to_response(a) for a in application_service.list_mine(db, user)]


@router.delete("/applications/{application_id}")
async def withdraw_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application_service.withdraw(db, user, application_id)
    return {"message": "Application withdrawn"}
