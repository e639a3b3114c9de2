from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.config import settings
from marketplace.schemas.announcement import AnnouncementSummary
from marketplace.schemas.user import UserSummary


class ChatRoomCreate(BaseModel):
    applicant_id: int
    job_announcement_id: int


class MessageCreate(BaseModel):
    chat_room_id: int
    content: str = Field(min_length=1, max_length=settings.max_message_chars)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message content must not be blank")
        return v


class ChatRoomCreatedResponse(BaseModel):
    """A freshly created room; the announcement payload is left out."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recruiter: UserSummary
    applicant: UserSummary
    created_at: str


class ChatRoomResponse(ChatRoomCreatedResponse):
    job_announcement: AnnouncementSummary


class ChatRoomParticipants(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_announcement_id: int
    recruiter: UserSummary
    applicant: UserSummary


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    chat_room_id: int
    sender: UserSummary
    content: str
    created_at: str


class MessageDetailResponse(MessageResponse):
    chat_room: ChatRoomParticipants
