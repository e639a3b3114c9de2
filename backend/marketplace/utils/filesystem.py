from pathlib import Path
from marketplace.config import settings


def ensure_data_dirs(data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "files").mkdir(exist_ok=True)
    return path


def ensure_owner_dir(owner_id: int, data_path: Path | None = None) -> Path:
    files_dir = data_path / "files" if data_path else settings.files_dir
    owner_dir = files_dir / str(owner_id)
    owner_dir.mkdir(parents=True, exist_ok=True)
    return owner_dir


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
