import logging

from sqlalchemy.orm import Query, Session, joinedload

from marketplace.database import utcnow
from marketplace.errors import NotFound, Unauthorized
from marketplace.models.announcement import JobAnnouncement
from marketplace.models.user import User
from marketplace.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from marketplace.services import file_service

logger = logging.getLogger(__name__)


def _base_query(db: Session) -> Query:
    return db.query(JobAnnouncement).options(
        joinedload(JobAnnouncement.owner).joinedload(User.avatar_file),
        joinedload(JobAnnouncement.picture),
    )


def find_by_id_with_owner(db: Session, announcement_id: int) -> JobAnnouncement | None:
    return _base_query(db).filter(JobAnnouncement.id == announcement_id).first()


def get_announcement(db: Session, announcement_id: int) -> JobAnnouncement:
    announcement = find_by_id_with_owner(db, announcement_id)
    if not announcement:
        raise NotFound("Job announcement not found")
    return announcement


def announcements_query(db: Session, owner_id: int | None = None, q: str | None = None) -> Query:
    query = _base_query(db)
    if owner_id is not None:
        query = query.filter(JobAnnouncement.owner_id == owner_id)
    if q:
        query = query.filter(
            JobAnnouncement.role.ilike(f"%{q}%")
            | JobAnnouncement.company_name.ilike(f"%{q}%")
            | JobAnnouncement.location.ilike(f"%{q}%")
        )
    return query.order_by(JobAnnouncement.created_at.desc(), JobAnnouncement.id.desc())


def create_announcement(db: Session, owner: User, req: AnnouncementCreate) -> JobAnnouncement:
    file_service.require_owned(db, owner, req.picture_file_id)
    now = utcnow()
    announcement = JobAnnouncement(
        **req.model_dump(),
        owner_id=owner.id,
        created_at=now,
        updated_at=now,
    )
    db.add(announcement)
    db.commit()
    logger.info("User %s posted job announcement %s", owner.id, announcement.id)
    return get_announcement(db, announcement.id)


def _require_owner(announcement: JobAnnouncement, user: User, action: str):
    if announcement.owner_id != user.id:
        raise Unauthorized(f"Only the owner can {action} this job announcement")


def update_announcement(
    db: Session, acting_user: User, announcement_id: int, req: AnnouncementUpdate
) -> JobAnnouncement:
    announcement = get_announcement(db, announcement_id)
    _require_owner(announcement, acting_user, "update")

    update_data = req.model_dump(exclude_unset=True)
    if "picture_file_id" in update_data:
        file_service.require_owned(db, acting_user, update_data["picture_file_id"])
    for key, value in update_data.items():
        setattr(announcement, key, value)
    announcement.updated_at = utcnow()
    db.commit()
    return get_announcement(db, announcement_id)


def delete_announcement(db: Session, acting_user: User, announcement_id: int):
    announcement = get_announcement(db, announcement_id)
    _require_owner(announcement, acting_user, "delete")
    db.delete(announcement)
    db.commit()
    logger.info("User %s deleted job announcement %s", acting_user.id, announcement_id)
