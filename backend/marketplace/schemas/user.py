from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserRegister(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str
    prefix: str | None = None
    firstname: str = Field(min_length=1)
    lastname: str = Field(min_length=1)
    birth_date: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    tel_number: str | None = None


class UserUpdate(BaseModel):
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    prefix: str | None = None
    firstname: str | None = Field(default=None, min_length=1)
    lastname: str | None = Field(default=None, min_length=1)
    birth_date: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    tel_number: str | None = None

    @field_validator("email", "firstname", "lastname")
    @classmethod
    def required_fields_not_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Field may be omitted but not set to null")
        return v


class AvatarUpdate(BaseModel):
    file_id: int | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    token: str
    expires_in_seconds: int
    user_id: int


class ThrottleResponse(BaseModel):
    error: str
    retry_after_seconds: float


class FileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    file_type: str
    mime_type: str | None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    firstname: str
    lastname: str
    avatar_file: FileSummary | None = None


class UserResponse(UserSummary):
    email: str
    prefix: str | None
    birth_date: str | None
    address: str | None
    latitude: float | None
    longitude: float | None
    tel_number: str | None
    verified_at: str | None
    is_admin: bool
    created_at: str
