import hashlib
import logging
import os
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import utcnow
from marketplace.errors import Conflict, InvalidRequest, NotFound, Unauthorized
from marketplace.models.file import FileItem
from marketplace.models.user import User
from marketplace.utils.filesystem import ensure_owner_dir, sanitize_filename

logger = logging.getLogger(__name__)

VALID_FILE_TYPES = {"avatar", "picture", "resume", "cover_letter",
                    "transcript", "qr_code", "other"}

DUPLICATE_CONTENT = "A file with identical content is already uploaded"


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(file_path: Path, chunk_size: int = 1024 * 1024) -> str:
    """Hash a stored file without loading it whole."""
    digest = hashlib.sha256()
    with file_path.open("rb") as fh:
        while chunk := fh.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def store_file(owner_id: int, filename: str, content: bytes) -> tuple[str, str, int]:
    """Write content read-only under the owner's directory. Returns (relative_path, file_hash, file_size)."""
    file_hash = sha256_bytes(content)
    safe_name = sanitize_filename(filename)
    stored_name = f"{file_hash[:8]}_{safe_name}"

    owner_dir = ensure_owner_dir(owner_id)
    file_path = owner_dir / stored_name
    # Same owner and content always map to the same path.
    if file_path.exists():
        raise Conflict(DUPLICATE_CONTENT)
    file_path.write_bytes(content)
    os.chmod(file_path, 0o444)

    return f"files/{owner_id}/{stored_name}", file_hash, len(content)


def get_full_path(stored_path: str, data_path: Path | None = None) -> Path:
    return (data_path or settings.data_path) / stored_path


def create_file(
    db: Session,
    owner: User,
    filename: str,
    content: bytes,
    file_type: str,
    title: str | None = None,
    mime_type: str | None = None,
) -> FileItem:
    if file_type not in VALID_FILE_TYPES:
        raise InvalidRequest(f"Invalid file_type. Must be one of: {sorted(VALID_FILE_TYPES)}")
    if not content:
        raise InvalidRequest("Empty file")

    file_hash = sha256_bytes(content)
    existing = db.query(FileItem).filter(
        FileItem.owner_id == owner.id,
        FileItem.file_hash == file_hash,
    ).first()
    if existing:
        raise Conflict(DUPLICATE_CONTENT)

    stored_path, file_hash, file_size = store_file(owner.id, filename, content)
    item = FileItem(
        owner_id=owner.id,
        title=title or filename,
        file_type=file_type,
        original_filename=filename,
        stored_path=stored_path,
        file_hash=file_hash,
        file_size_bytes=file_size,
        mime_type=mime_type,
        created_at=utcnow(),
    )
    db.add(item)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        get_full_path(stored_path).unlink(missing_ok=True)
        logger.warning("Removed %s after failed insert", stored_path)
        raise
    db.refresh(item)
    return item


def get_file(db: Session, file_id: int) -> FileItem:
    item = db.query(FileItem).filter(FileItem.id == file_id).first()
    if not item:
        raise NotFound("File not found")
    return item


def list_files(db: Session, owner: User) -> list[FileItem]:
    return (
        db.query(FileItem)
        .filter(FileItem.owner_id == owner.id)
        .order_by(FileItem.created_at.desc(), FileItem.id.desc())
        .all()
    )


def require_owned(db: Session, owner: User, file_id: int | None) -> int | None:
    """Check that an optional file reference points at one of ``owner``'s files."""
    if file_id is None:
        return None
    item = get_file(db, file_id)
    if item.owner_id != owner.id:
        raise Unauthorized("File belongs to another user")
    return item.id


def delete_file(db: Session, acting_user: User, file_id: int) -> FileItem:
    item = get_file(db, file_id)
    if item.owner_id != acting_user.id:
        raise Unauthorized("Only the owner can delete this file")

    full_path = get_full_path(item.stored_path)
    db.delete(item)
    db.commit()
    full_path.unlink(missing_ok=True)
    logger.info("Deleted file %s owned by user %s", item.id, acting_user.id)
    return item
