import logging
import time

from sqlalchemy import text
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.models.user import User
from marketplace.utils.security import generate_token, verify_password

logger = logging.getLogger(__name__)


class SessionService:
    def __init__(self):
        self._active_tokens: dict[str, tuple[int, float]] = {}  # token -> (user_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_tokens = {
            t: entry for t, entry in self._active_tokens.items() if entry[1] > now
        }

    def login(self, db: Session, username: str, password: str, throttle_key: str = "login") -> dict | None:
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            return {"error": "too_many_attempts", "retry_after_seconds": delay}

        user = db.query(User).filter(User.username == username).first()
        if not user or not verify_password(user.hashed_password, password):
            logger.warning("Failed login for %r (%s)", username, throttle_key)
            self._record_failed_attempt(db, throttle_key)
            return None

        self._reset_failed_attempts(db, throttle_key)
        token = generate_token()
        timeout = settings.session_ttl_seconds
        self._active_tokens[token] = (user.id, time.time() + timeout)
        return {"token": token, "expires_in_seconds": timeout, "user_id": user.id}

    def logout(self, token: str):
        self._active_tokens.pop(token, None)

    def resolve(self, token: str) -> int | None:
        """Return the user id behind a live token and slide its expiry."""
        self._cleanup_expired()
        entry = self._active_tokens.get(token)
        if entry is None:
            return None
        user_id = entry[0]
        self._active_tokens[token] = (user_id, time.time() + settings.session_ttl_seconds)
        return user_id

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        elapsed = time.time() - last_failed_at
        remaining = delay - elapsed
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        now = time.time()
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": now},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(text("DELETE FROM auth_throttle WHERE key = :key"), {"key": key})
        db.commit()


session_service = SessionService()
