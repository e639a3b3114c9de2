from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_path: Path = Path.home() / "JobMarketplace"
    session_ttl_seconds: int = 8 * 3600
    # Uploads are buffered in memory before hashing, so cap them.
    max_upload_bytes: int = 10 * 1024 * 1024  # 10 MiB
    max_message_chars: int = 5000
    default_page_limit: int = 10
    max_page_limit: int = 100
    admin_usernames: list[str] = []
    cors_origins: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]
    api_prefix: str = "/api"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_path / "db.sqlite"

    @property
    def files_dir(self) -> Path:
        return self.data_path / "files"

    model_config = {"env_prefix": "MARKETPLACE_"}


settings = Settings()
