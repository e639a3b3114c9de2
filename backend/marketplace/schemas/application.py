from pydantic import BaseModel, ConfigDict

from marketplace.schemas.announcement import AnnouncementSummary
from marketplace.schemas.user import FileSummary, UserSummary


class ApplicationCreate(BaseModel):
    resume_file_id: int | None = None
    cover_letter_file_id: int | None = None
    transcript_file_id: int | None = None
    note: str | None = None


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    announcement: AnnouncementSummary
    applicant: UserSummary
    resume: FileSummary | None
    cover_letter: FileSummary | None
    transcript: FileSummary | None
    note: str | None
    created_at: str
