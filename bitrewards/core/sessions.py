"""Server-side session storage.

A session maps an opaque token held by the client (inside the signed session
cookie) to a user id. Handlers only see the ``SessionStore`` interface, so the
deployment can pick an in-process, database or redis backend without any
change to route logic.
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Tuple

from redis import Redis
from sqlalchemy.orm import Session

from bitrewards.core import config
from bitrewards.core.database import SessionLocal
from bitrewards.models.session import UserSession

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return uuid.uuid4().hex


class SessionStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> Optional[int]:
        """Return the user id for a live session, or None."""

    @abstractmethod
    def set(self, session_id: str, user_id: int) -> None:
        ...

    @abstractmethod
    def destroy(self, session_id: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    """In-process store. Sessions are lost on restart and not shared between workers."""

    def __init__(self, max_age: int = config.SESSION_MAX_AGE):
        self.max_age = max_age
        self._sessions: Dict[str, Tuple[int, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[int]:
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            user_id, expires_at = entry
            if expires_at <= datetime.now(timezone.utc):
                del self._sessions[session_id]
                return None
            return user_id

    def set(self, session_id: str, user_id: int) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.max_age)
        with self._lock:
            self._sessions[session_id] = (user_id, expires_at)

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)


class DatabaseSessionStore(SessionStore):
    """Durable store backed by the ``Sessions`` table of the application database."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_age: int = config.SESSION_MAX_AGE,
    ):
        self.session_factory = session_factory
        self.max_age = max_age

    def get(self, session_id: str) -> Optional[int]:
        db = self.session_factory()
        try:
            record = db.get(UserSession, session_id)
            if record is None:
                return None
            expires_at = record.ExpiresAt
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            if expires_at <= datetime.now(timezone.utc):
                db.delete(record)
                db.commit()
                return None
            return record.UserID
        finally:
            db.close()

    def set(self, session_id: str, user_id: int) -> None:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.max_age)
        db = self.session_factory()
        try:
            db.merge(
                UserSession(SessionID=session_id, UserID=user_id, ExpiresAt=expires_at)
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def destroy(self, session_id: str) -> None:
        db = self.session_factory()
        try:
            db.query(UserSession).filter(UserSession.SessionID == session_id).delete()
            db.commit()
        finally:
            db.close()


class RedisSessionStore(SessionStore):
    """Shared store for multi-instance deployments; expiry is left to redis TTLs."""

    key_prefix = "session:"

    def __init__(self, client: Redis, max_age: int = config.SESSION_MAX_AGE):
        self.client = client
        self.max_age = max_age

    def get(self, session_id: str) -> Optional[int]:
        value = self.client.get(f"{self.key_prefix}{session_id}")
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Discarding malformed session %s", session_id)
            return None

    def set(self, session_id: str, user_id: int) -> None:
        self.client.setex(f"{self.key_prefix}{session_id}", self.max_age, str(user_id))

    def destroy(self, session_id: str) -> None:
        self.client.delete(f"{self.key_prefix}{session_id}")


def build_session_store(backend: str = config.SESSION_BACKEND) -> SessionStore:
    if backend == "memory":
        return MemorySessionStore()
    if backend == "redis":
        return RedisSessionStore(Redis.from_url(config.REDIS_URL, decode_responses=True))
    if backend == "database":
        return DatabaseSessionStore(SessionLocal)
    raise ValueError(f"Unknown SESSION_BACKEND '{backend}'")
