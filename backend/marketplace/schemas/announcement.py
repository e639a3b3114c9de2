from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.schemas.user import FileSummary, UserSummary


class AnnouncementCreate(BaseModel):
    role: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    location: str | None = None
    description: str | None = None
    salary_range: str | None = None
    picture_file_id: int | None = None


class AnnouncementUpdate(BaseModel):
    role: str | None = Field(default=None, min_length=1)
    company_name: str | None = Field(default=None, min_length=1)
    location: str | None = None
    description: str | None = None
    salary_range: str | None = None
    picture_file_id: int | None = None

    @field_validator("role", "company_name")
    @classmethod
    def required_fields_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Field may be omitted but not set to null")
        return v


class AnnouncementSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    role: str
    company_name: str
    location: str | None
    picture: FileSummary | None = None


class AnnouncementResponse(AnnouncementSummary):
    description: str | None
    salary_range: str | None
    owner: UserSummary
    created_at: str
    updated_at: str
