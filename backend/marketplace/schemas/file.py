from pydantic import BaseModel, ConfigDict


class FileItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    file_type: str
    original_filename: str
    file_hash: str
    file_size_bytes: int
    mime_type: str | None
    created_at: str
