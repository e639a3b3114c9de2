"""Chat rooms between a recruiter and an applicant, and the messages in them.

Every operation takes the acting user explicitly and re-reads the room or
message it guards before acting. A room is opened by the owner of a job
announcement for one applicant; either participant may read, post to and
delete it, while a message can only be deleted by whoever sent it.
"""

import enum
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload

from marketplace.database import utcnow
from marketplace.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from marketplace.models.announcement import JobAnnouncement
from marketplace.models.chat import ChatRoom, Message
from marketplace.models.user import User
from marketplace.pagination import Page, paginate
from marketplace.services import announcement_service, user_service

logger = logging.getLogger(__name__)


class RoomFilter(str, enum.Enum):
    ALL = "all"
    RECRUITER = "recruiter"
    APPLICANT = "applicant"
    MEMBER = "member"
    ANNOUNCEMENT = "announcement"


# ------------------------------------------------------------------
# Queries
# ------------------------------------------------------------------

def _room_query(db: Session) -> Query:
    return db.query(ChatRoom).options(
        joinedload(ChatRoom.recruiter).joinedload(User.avatar_file),
        joinedload(ChatRoom.applicant).joinedload(User.avatar_file),
        joinedload(ChatRoom.job_announcement).joinedload(JobAnnouncement.picture),
    )


def _message_query(db: Session) -> Query:
    return db.query(Message).options(
        joinedload(Message.chat_room).joinedload(ChatRoom.recruiter).joinedload(User.avatar_file),
        joinedload(Message.chat_room).joinedload(ChatRoom.applicant).joinedload(User.avatar_file),
        joinedload(Message.sender).joinedload(User.avatar_file),
    )


def rooms_query(db: Session, room_filter: RoomFilter = RoomFilter.ALL, target_id: int | None = None) -> Query:
    """Rooms matching ``room_filter``; ``target_id`` is the user or announcement id it applies to."""
    query = _room_query(db)
    if room_filter is not RoomFilter.ALL and target_id is None:
        raise ValueError(f"{room_filter.value} filter needs a target id")

    if room_filter is RoomFilter.RECRUITER:
        query = query.filter(ChatRoom.recruiter_id == target_id)
    elif room_filter is RoomFilter.APPLICANT:
        query = query.filter(ChatRoom.applicant_id == target_id)
    elif room_filter is RoomFilter.MEMBER:
        query = query.filter(
            or_(ChatRoom.recruiter_id == target_id, ChatRoom.applicant_id == target_id)
        )
    elif room_filter is RoomFilter.ANNOUNCEMENT:
        query = query.filter(ChatRoom.job_announcement_id == target_id)
    return query.order_by(ChatRoom.id.asc())


def _room_messages_query(db: Session, room_id: int) -> Query:
    return (
        _message_query(db)
        .filter(Message.chat_room_id == room_id)
        .order_by(Message.created_at.asc(), Message.id.asc())
    )


def _require_participant(room: ChatRoom, user: User):
    if not room.has_participant(user.id):
        raise Unauthorized("User can't access this chat room")


def _participant_room(db: Session, acting_user: User, room_id: int) -> ChatRoom:
    room = db.query(ChatRoom).filter(ChatRoom.id == room_id).first()
    if not room:
        raise NotFound("Chat room not found")
    _require_participant(room, acting_user)
    return room


# ------------------------------------------------------------------
# Chat rooms
# ------------------------------------------------------------------

def get_room(db: Session, room_id: int) -> ChatRoom | None:
    return _room_query(db).filter(ChatRoom.id == room_id).first()


def list_rooms(db: Session, room_filter: RoomFilter = RoomFilter.ALL, target_id: int | None = None) -> list[ChatRoom]:
    return rooms_query(db, room_filter, target_id).all()


def paginate_rooms(
    db: Session,
    page: int,
    limit: int,
    route: str,
    room_filter: RoomFilter = RoomFilter.ALL,
    target_id: int | None = None,
) -> Page:
    return paginate(rooms_query(db, room_filter, target_id), page, limit, route)


def create_room(db: Session, creator: User, applicant_id: int, job_announcement_id: int) -> ChatRoom:
    if creator.id == applicant_id:
        raise InvalidRequest("Can't create chat with yourself")
    applicant = user_service.find_by_id(db, applicant_id)
    if not applicant:
        raise NotFound("Applicant not found")
    announcement = announcement_service.find_by_id_with_owner(db, job_announcement_id)
    if not announcement:
        raise NotFound("Job announcement not found")
    if announcement.owner_id != creator.id:
        raise Unauthorized("Must be owner of the job announcement for creating chat room")

    existing = db.query(ChatRoom).filter(
        ChatRoom.recruiter_id == creator.id,
        ChatRoom.applicant_id == applicant_id,
        ChatRoom.job_announcement_id == job_announcement_id,
    ).first()
    if existing:
        raise Conflict("Chat room already exists for this applicant and job announcement")

    room = ChatRoom(
        recruiter_id=creator.id,
        applicant_id=applicant_id,
        job_announcement_id=job_announcement_id,
        created_at=utcnow(),
    )
    db.add(room)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Chat room already exists for this applicant and job announcement")

    logger.info(
        "Chat room %s opened by recruiter %s with applicant %s on announcement %s",
        room.id, creator.id, applicant_id, job_announcement_id,
    )
    return get_room(db, room.id)


def delete_room(db: Session, acting_user: User, room_id: int) -> ChatRoom:
    room = get_room(db, room_id)
    if not room:
        raise NotFound("Chat room not found")
    _require_participant(room, acting_user)

    message_count = len(room.messages)
    # messages go with the room through the delete-orphan cascade
    db.delete(room)
    db.commit()
    logger.info(
        "Chat room %s deleted by user %s (%d messages removed)",
        room_id, acting_user.id, message_count,
    )
    return room


# ------------------------------------------------------------------
# Messages
# ------------------------------------------------------------------

def create_message(db: Session, acting_user: User, room_id: int, content: str) -> Message:
    _participant_room(db, acting_user, room_id)
    message = Message(
        chat_room_id=room_id,
        sender_id=acting_user.id,
        content=content,
        created_at=utcnow(),
    )
    db.add(message)
    db.commit()
    return _message_query(db).filter(Message.id == message.id).one()


def list_messages(db: Session, acting_user: User, room_id: int) -> list[Message]:
    _participant_room(db, acting_user, room_id)
    return _room_messages_query(db, room_id).all()


def paginate_messages(db: Session, acting_user: User, room_id: int, page: int, limit: int, route: str) -> Page:
    _participant_room(db, acting_user, room_id)
    return paginate(_room_messages_query(db, room_id), page, limit, route)


def get_message(db: Session, acting_user: User, message_id: int) -> Message:
    message = _message_query(db).filter(Message.id == message_id).first()
    if not message:
        raise NotFound("Message not found")
    _require_participant(message.chat_room, acting_user)
    return message


def delete_message(db: Session, acting_user: User, message_id: int) -> Message:
    message = _message_query(db).filter(Message.id == message_id).first()
    if not message:
        raise NotFound("Message doesn't exist")
    if message.sender_id != acting_user.id:
        raise Unauthorized("Only sender can delete message")
    db.delete(message)
    db.commit()
    logger.info("Message %s deleted by its sender %s", message_id, acting_user.id)
    return message
