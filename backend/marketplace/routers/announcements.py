from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import get_db
from marketplace.dependencies import get_current_user
from marketplace.models.announcement import JobAnnouncement
from marketplace.models.user import User
from marketplace.pagination import Page, paginate
from marketplace.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from marketplace.services import announcement_service

router = APIRouter(
    prefix="/job-announcements",
    tags=["job-announcements"],
    dependencies=[Depends(get_current_user)],
)


def _announcement_to_response(announcement: JobAnnouncement) -> AnnouncementResponse:
    return AnnouncementResponse.model_validate(announcement)


@router.post("", response_model=AnnouncementResponse, status_code=201)
async def create_announcement(
    req: AnnouncementCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    announcement = announcement_service.create_announcement(db, user, req)
    return _announcement_to_response(announcement)


@router.get("", response_model=Page[AnnouncementResponse])
async def list_announcements(
    request: Request,
    owner_id: int | None = None,
    q: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    db: Session = Depends(get_db),
):
    query = announcement_service.announcements_query(db, owner_id=owner_id, q=q)
    route = str(request.url.remove_query_params(["page", "limit"]))
    return paginate(query, page, limit, route).map(_announcement_to_response)


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(announcement_id: int, db: Session = Depends(get_db)):
    return _announcement_to_response(announcement_service.get_announcement(db, announcement_id))


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    req: AnnouncementUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    announcement = announcement_service.update_announcement(db, user, announcement_id, req)
    return _announcement_to_response(announcement)


@router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    announcement_service.delete_announcement(db, user, announcement_id)
    return {"message": "Job announcement deleted"}
