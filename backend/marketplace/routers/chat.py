from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import get_db
from marketplace.dependencies import get_current_user, require_admin
from marketplace.errors import NotFound, Unauthorized
from marketplace.models.chat import ChatRoom, Message
from marketplace.models.user import User
from marketplace.pagination import Page
from marketplace.schemas.chat import (
    ChatRoomCreate,
    ChatRoomCreatedResponse,
    ChatRoomResponse,
    MessageCreate,
    MessageDetailResponse,
    MessageResponse,
)
from marketplace.services import announcement_service, chat_service
from marketplace.services.chat_service import RoomFilter

router = APIRouter(prefix="/chat", tags=["chat"])


def _room_to_response(room: ChatRoom) -> ChatRoomResponse:
    return ChatRoomResponse.model_validate(room)


def _message_to_response(message: Message) -> MessageResponse:
    return MessageResponse.model_validate(message)


def _route(request: Request) -> str:
    return str(request.url.remove_query_params(["page", "limit"]))


def _require_announcement_access(db: Session, user: User, announcement_id: int):
    announcement = announcement_service.get_announcement(db, announcement_id)
    if announcement.owner_id != user.id and not user.is_admin:
        raise Unauthorized("Only the owner can list chat rooms of this job announcement")


# ------------------------------------------------------------------
# Chat room listings
# ------------------------------------------------------------------

@router.get("/index", response_model=list[ChatRoomResponse])
async def index_rooms(_admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [_room_to_response(r) for r in chat_service.list_rooms(db)]


@router.get("/index/recruiter/chat-room", response_model=list[ChatRoomResponse])
async def index_rooms_as_recruiter(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_room_to_response(r) for r in chat_service.list_rooms(db, RoomFilter.RECRUITER, user.id)]


@router.get("/index/applicant/chat-room", response_model=list[ChatRoomResponse])
async def index_rooms_as_applicant(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_room_to_response(r) for r in chat_service.list_rooms(db, RoomFilter.APPLICANT, user.id)]


@router.get("/index/member/chat-room", response_model=list[ChatRoomResponse])
async def index_rooms_as_member(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_room_to_response(r) for r in chat_service.list_rooms(db, RoomFilter.MEMBER, user.id)]


@router.get("/index/job-announcement/{announcement_id}/chat-room", response_model=list[ChatRoomResponse])
async def index_rooms_by_announcement(
    announcement_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _require_announcement_access(db, user, announcement_id)
    rooms = chat_service.list_rooms(db, RoomFilter.ANNOUNCEMENT, announcement_id)
    return [_room_to_response(r) for r in rooms]


@router.get("/paginate/index", response_model=Page[ChatRoomResponse])
async def paginate_rooms(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return chat_service.paginate_rooms(db, page, limit, _route(request)).map(_room_to_response)


@router.get("/paginate/index/recruiter/chat-room", response_model=Page[ChatRoomResponse])
async def paginate_rooms_as_recruiter(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = chat_service.paginate_rooms(db, page, limit, _route(request), RoomFilter.RECRUITER, user.id)
    return result.map(_room_to_response)


@router.get("/paginate/index/applicant/chat-room", response_model=Page[ChatRoomResponse])
async def paginate_rooms_as_applicant(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = chat_service.paginate_rooms(db, page, limit, _route(request), RoomFilter.APPLICANT, user.id)
    return result.map(_room_to_response)


@router.get("/paginate/index/member/chat-room", response_model=Page[ChatRoomResponse])
async def paginate_rooms_as_member(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = chat_service.paginate_rooms(db, page, limit, _route(request), RoomFilter.MEMBER, user.id)
    return result.map(_room_to_response)


@router.get(
    "/paginate/index/job-announcement/{announcement_id}/chat-room",
    response_model=Page[ChatRoomResponse],
)
async def paginate_rooms_by_announcement(
    announcement_id: int,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _require_announcement_access(db, user, announcement_id)
    result = chat_service.paginate_rooms(
        db, page, limit, _route(request), RoomFilter.ANNOUNCEMENT, announcement_id
    )
    return result.map(_room_to_response)


# ------------------------------------------------------------------
# Message listings
# ------------------------------------------------------------------

@router.get("/index/message/chat-room/{room_id}", response_model=list[MessageResponse])
async def index_messages(room_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_message_to_response(m) for m in chat_service.list_messages(db, user, room_id)]


@router.get("/paginate/index/message/chat-room/{room_id}", response_model=Page[MessageResponse])
async def paginate_messages(
    room_id: int,
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_limit, ge=1, le=settings.max_page_limit),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = chat_service.paginate_messages(db, user, room_id, page, limit, _route(request))
    return result.map(_message_to_response)


# ------------------------------------------------------------------
# Single resources
# ------------------------------------------------------------------

@router.get("/chat-room/{room_id}", response_model=ChatRoomResponse)
async def get_room(room_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room = chat_service.get_room(db, room_id)
    if not room:
        raise NotFound("Chat room not found")
    if not room.has_participant(user.id) and not user.is_admin:
        raise Unauthorized("User can't access this chat room")
    return _room_to_response(room)


@router.get("/message/{message_id}", response_model=MessageDetailResponse)
async def get_message(message_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return MessageDetailResponse.model_validate(chat_service.get_message(db, user, message_id))


@router.post("/chat-room", response_model=ChatRoomCreatedResponse, status_code=201)
async def create_room(req: ChatRoomCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room = chat_service.create_room(db, user, req.applicant_id, req.job_announcement_id)
    return ChatRoomCreatedResponse.model_validate(room)


@router.post("/message", response_model=MessageResponse, status_code=201)
async def create_message(req: MessageCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _message_to_response(chat_service.create_message(db, user, req.chat_room_id, req.content))


@router.delete("/chat-room/{room_id}", response_model=ChatRoomResponse)
async def delete_room(room_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _room_to_response(chat_service.delete_room(db, user, room_id))


@router.delete("/message/{message_id}", response_model=MessageResponse)
async def delete_message(message_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _message_to_response(chat_service.delete_message(db, user, message_id))
