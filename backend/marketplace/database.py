import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from marketplace.config import settings


class Base(DeclarativeBase):
    pass


def utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    username        TEXT NOT NULL UNIQUE,
    email           TEXT NOT NULL UNIQUE,
    hashed_password TEXT NOT NULL,
    prefix          TEXT,
    firstname       TEXT NOT NULL,
    lastname        TEXT NOT NULL,
    birth_date      TEXT,
    address         TEXT,
    latitude        REAL,
    longitude       REAL,
    tel_number      TEXT,
    verified_at     TEXT,
    is_admin        INTEGER NOT NULL DEFAULT 0,
    avatar_file_id  INTEGER REFERENCES files(id) ON DELETE SET NULL,
    created_at      TEXT NOT NULL
);

-- ============================================================
-- FILES
-- ============================================================
CREATE TABLE IF NOT EXISTS files (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id          INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title             TEXT NOT NULL,
    file_type         TEXT NOT NULL
                      CHECK(file_type IN ('avatar','picture','resume','cover_letter',
                                          'transcript','qr_code','other')),
    original_filename TEXT NOT NULL,
    stored_path       TEXT NOT NULL,
    file_hash         TEXT NOT NULL,
    file_size_bytes   INTEGER NOT NULL,
    mime_type         TEXT,
    created_at        TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_files_owner ON files(owner_id);
CREATE INDEX IF NOT EXISTS idx_files_hash ON files(file_hash);
CREATE UNIQUE INDEX IF NOT EXISTS idx_files_path ON files(stored_path);

-- ============================================================
-- JOB ANNOUNCEMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS job_announcements (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id        INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    role            TEXT NOT NULL,
    company_name    TEXT NOT NULL,
    location        TEXT,
    description     TEXT,
    salary_range    TEXT,
    picture_file_id INTEGER REFERENCES files(id) ON DELETE SET NULL,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_announcements_owner ON job_announcements(owner_id);

-- ============================================================
-- JOB APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS job_applications (
    id                   INTEGER PRIMARY KEY AUTOINCREMENT,
    announcement_id      INTEGER NOT NULL REFERENCES job_announcements(id) ON DELETE CASCADE,
    applicant_id         INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    resume_file_id       INTEGER REFERENCES files(id) ON DELETE SET NULL,
    cover_letter_file_id INTEGER REFERENCES files(id) ON DELETE SET NULL,
    transcript_file_id   INTEGER REFERENCES files(id) ON DELETE SET NULL,
    note                 TEXT,
    created_at           TEXT NOT NULL,
    UNIQUE (announcement_id, applicant_id)
);

CREATE INDEX IF NOT EXISTS idx_applications_applicant ON job_applications(applicant_id);

-- ============================================================
-- CHAT
-- ============================================================
CREATE TABLE IF NOT EXISTS chat_rooms (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    recruiter_id        INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    applicant_id        INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    job_announcement_id INTEGER NOT NULL REFERENCES job_announcements(id) ON DELETE CASCADE,
    created_at          TEXT NOT NULL,
    CHECK (recruiter_id <> applicant_id),
    UNIQUE (recruiter_id, applicant_id, job_announcement_id)
);

CREATE INDEX IF NOT EXISTS idx_chat_rooms_recruiter ON chat_rooms(recruiter_id);
CREATE INDEX IF NOT EXISTS idx_chat_rooms_applicant ON chat_rooms(applicant_id);
CREATE INDEX IF NOT EXISTS idx_chat_rooms_announcement ON chat_rooms(job_announcement_id);

CREATE TABLE IF NOT EXISTS messages (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    chat_room_id INTEGER NOT NULL REFERENCES chat_rooms(id) ON DELETE CASCADE,
    sender_id    INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    content      TEXT NOT NULL,
    created_at   TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_messages_room ON messages(chat_room_id, created_at, id);

-- ============================================================
-- AUTH THROTTLE
-- ============================================================
CREATE TABLE IF NOT EXISTS auth_throttle (
    key             TEXT PRIMARY KEY,
    failed_attempts INTEGER NOT NULL,
    last_failed_at  REAL NOT NULL
);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()


def check_integrity(db_path: Path | None = None) -> str | None:
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    try:
        row = conn.execute("PRAGMA integrity_check").fetchone()
    finally:
        conn.close()
    return row[0] if row else None
