import logging

from sqlalchemy.orm import Query, Session, joinedload

from marketplace.database import utcnow
from marketplace.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from marketplace.models.application import JobApplication
from marketplace.models.user import User
from marketplace.schemas.application import ApplicationCreate
from marketplace.services import announcement_service, file_service

logger = logging.getLogger(__name__)


def _base_query(db: Session) -> Query:
    return db.query(JobApplication).options(
        joinedload(JobApplication.announcement),
        joinedload(JobApplication.applicant).joinedload(User.avatar_file),
        joinedload(JobApplication.resume),
        joinedload(JobApplication.cover_letter),
        joinedload(JobApplication.transcript),
    )


def get_application(db: Session, application_id: int) -> JobApplication:
    application = _base_query(db).filter(JobApplication.id == application_id).first()
    if not application:
        raise NotFound("Application not found")
    return application


def apply(db: Session, applicant: User, announcement_id: int, req: ApplicationCreate) -> JobApplication:
    announcement = announcement_service.get_announcement(db, announcement_id)
    if announcement.owner_id == applicant.id:
        raise InvalidRequest("Can't apply to your own job announcement")

    existing = db.query(JobApplication).filter(
        JobApplication.announcement_id == announcement_id,
        JobApplication.applicant_id == applicant.id,
    ).first()
    if existing:
        raise Conflict("Already applied to this job announcement")

    for file_id in (req.resume_file_id, req.cover_letter_file_id, req.transcript_file_id):
        file_service.require_owned(db, applicant, file_id)

    application = JobApplication(
        **req.model_dump(),
        announcement_id=announcement_id,
        applicant_id=applicant.id,
        created_at=utcnow(),
    )
    db.add(application)
    db.commit()
    logger.info("User %s applied to job announcement %s", applicant.id, announcement_id)
    return get_application(db, application.id)


def list_for_announcement(db: Session, acting_user: User, announcement_id: int) -> list[JobApplication]:
    announcement = announcement_service.get_announcement(db, announcement_id)
    if announcement.owner_id != acting_user.id:
        raise Unauthorized("Only the owner can see applications to this job announcement")
    return (
        _base_query(db)
        .filter(JobApplication.announcement_id == announcement_id)
        .order_by(JobApplication.created_at.asc(), JobApplication.id.asc())
        .all()
    )


def list_mine(db: Session, applicant: User) -> list[JobApplication]:
    return (
        _base_query(db)
        .filter(JobApplication.applicant_id == applicant.id)
        .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        .all()
    )


def withdraw(db: Session, acting_user: User, application_id: int) -> JobApplication:
    application = get_application(db, application_id)
    if application.applicant_id != acting_user.id:
        raise Unauthorized("Only the applicant can withdraw this application")
    db.delete(application)
    db.commit()
    return application
