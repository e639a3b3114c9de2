from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import get_db
from marketplace.dependencies import get_current_user
from marketplace.models.file import FileItem
from marketplace.models.user import User
from marketplace.schemas.file import FileItemResponse
from marketplace.services import file_service

router = APIRouter(prefix="/files", tags=["files"])


def _file_to_response(item: FileItem) -> FileItemResponse:
    return FileItemResponse.model_validate(item)


@router.post("", response_model=FileItemResponse, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    file_type: str = Form(...),
    title: str | None = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    max_bytes = settings.max_upload_bytes
    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await file.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise HTTPException(status_code=413, detail=f"File too large (max {max_bytes} bytes)")
        chunks.append(chunk)

    item = file_service.create_file(
        db,
        user,
        filename=file.filename or "upload",
        content=b"".join(chunks),
        file_type=file_type,
        title=title,
        mime_type=file.content_type,
    )
    return _file_to_response(item)


@router.get("", response_model=list[FileItemResponse])
async def list_files(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_file_to_response(f) for f in file_service.list_files(db, user)]


@router.get("/{file_id}", response_model=FileItemResponse)
async def get_file(
    file_id: int,
    _user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _file_to_response(file_service.get_file(db, file_id))


@router.get("/{file_id}/verify")
async def verify_file(
    file_id: int,
    _user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Re-hash the stored file and compare against the recorded SHA-256."""
    item = file_service.get_file(db, file_id)
    full_path = file_service.get_full_path(item.stored_path)
    if not full_path.exists():
        raise HTTPException(status_code=404, detail="File missing from storage")

    actual_hash = file_service.sha256_file(full_path)
    return {
        "verified": actual_hash == item.file_hash,
        "filename": item.original_filename,
        "stored_hash": item.file_hash,
        "actual_hash": actual_hash,
    }


@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    _user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = file_service.get_file(db, file_id)
    full_path = file_service.get_full_path(item.stored_path)
    if not full_path.exists():
        raise HTTPException(status_code=404, detail="File missing from storage")

    return FileResponse(
        path=str(full_path),
        filename=item.original_filename,
        media_type=item.mime_type or "application/octet-stream",
    )


@router.delete("/{file_id}")
async def delete_file(
    file_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    file_service.delete_file(db, user, file_id)
    return {"message": "File deleted"}
