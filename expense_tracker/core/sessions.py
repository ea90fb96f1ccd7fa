# expense_tracker/core/sessions.py
"""
Server-side sessions bound to a signed cookie.

The cookie only carries a random session id signed with itsdangerous; the
subject (user id and username) lives in a SessionStore. Destroying the
session removes it from the store, so a copied cookie stops working too.
"""
import logging
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

from fastapi import Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import delete, select

from .database import Database
from .db_utils import DEFAULT_DB_TIMEOUT, run_with_timeout
from .errors import AppError, InternalError
from expense_tracker.models.session import UserSession

logger = logging.getLogger(__name__)

SESSION_SALT = "expense-tracker.session.v1"


@dataclass(frozen=True)
class SessionSubject:
    user_id: int
    username: str


@dataclass(frozen=True)
class Session:
    session_id: Optional[str]
    subject: Optional[SessionSubject]

    @property
    def is_authenticated(self) -> bool:
        return self.subject is not None

    @classmethod
    def anonymous(cls) -> "Session":
        return cls(session_id=None, subject=None)


class SessionStore(ABC):
    """Where session subjects live between requests."""

    @abstractmethod
    async def save(self, session_id: str, subject: SessionSubject, expires_at: datetime) -> None:
        ...

    @abstractmethod
    async def load(self, session_id: str) -> Optional[SessionSubject]:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def close(self) -> None:
        return None


class MemorySessionStore(SessionStore):
    """Process-local store; sessions are lost on restart."""

    def __init__(self):
        self._sessions: Dict[str, Tuple[SessionSubject, datetime]] = {}

    async def save(self, session_id: str, subject: SessionSubject, expires_at: datetime) -> None:
        now = datetime.utcnow()
        for stale_id in [key for key, (_, expiry) in self._sessions.items() if expiry <= now]:
            del self._sessions[stale_id]
        self._sessions[session_id] = (subject, expires_at)

    async def load(self, session_id: str) -> Optional[SessionSubject]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        subject, expires_at = entry
        if expires_at <= datetime.utcnow():
            self._sessions.pop(session_id, None)
            return None
        return subject

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def close(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


class DatabaseSessionStore(SessionStore):
    """Sessions kept in the user_sessions table, shared by every process using the database."""

    def __init__(self, database: Database):
        self.database = database

    async def save(self, session_id: str, subject: SessionSubject, expires_at: datetime) -> None:
        async with self.database.sessionmaker() as db:
            await db.execute(delete(UserSession).where(UserSession.expires_at <= datetime.utcnow()))
            db.add(UserSession(
                id=session_id,
                user_id=subject.user_id,
                username=subject.username,
                expires_at=expires_at,
            ))
            await db.commit()

    async def load(self, session_id: str) -> Optional[SessionSubject]:
        async with self.database.sessionmaker() as db:
            result = await db.execute(select(UserSession).where(UserSession.id == session_id))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            if row.expires_at <= datetime.utcnow():
                await db.delete(row)
                await db.commit()
                return None
            return SessionSubject(user_id=row.user_id, username=row.username)

    async def delete(self, session_id: str) -> None:
        async with self.database.sessionmaker() as db:
            await db.execute(delete(UserSession).where(UserSession.id == session_id))
            await db.commit()


class SessionManager:
    """Issues, resolves and destroys sessions; the only component touching the cookie."""

    def __init__(
        self,
        store: SessionStore,
        secret_key: str,
        *,
        cookie_name: str = "expense_session",
        max_age: int = 86400,
        secure: bool = False,
        timeout: float = DEFAULT_DB_TIMEOUT,
    ):
        self.store = store
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.secure = secure
        self.timeout = timeout
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=SESSION_SALT)

    async def create(self, user_id: int, username: str) -> str:
        """Bind a new session to the user and return the opaque cookie value."""
        session_id = secrets.token_urlsafe(32)
        subject = SessionSubject(user_id=user_id, username=username)
        expires_at = datetime.utcnow() + timedelta(seconds=self.max_age)
        await run_with_timeout(self.store.save(session_id, subject, expires_at), self.timeout, "session.save")
        logger.info(f"Session created for user {username} (id={user_id})")
        return self._serializer.dumps(session_id)

    async def resolve(self, handle: Optional[str]) -> Session:
        """Map a cookie value to its session; anything absent, forged or expired is anonymous."""
        if not handle:
            return Session.anonymous()
        try:
            session_id = self._serializer.loads(handle, max_age=self.max_age)
        except SignatureExpired:
            logger.debug("Session handle expired")
            return Session.anonymous()
        except BadSignature:
            logger.debug("Session handle has a bad signature")
            return Session.anonymous()
        if not isinstance(session_id, str) or not session_id:
            return Session.anonymous()

        subject = await run_with_timeout(self.store.load(session_id), self.timeout, "session.load")
        if subject is None:
            return Session.anonymous()
        return Session(session_id=session_id, subject=subject)

    async def destroy(self, session: Session) -> None:
        """Remove the session from the store; failures surface as InternalError."""
        if session.session_id is None:
            return
        try:
            await run_with_timeout(self.store.delete(session.session_id), self.timeout, "session.delete")
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error destroying session: {str(e)}")
            raise InternalError("Could not log out") from e
        username = session.subject.username if session.subject else "anonymous"
        logger.info(f"Session destroyed for user {username}")

    def set_cookie(self, response: Response, handle: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=handle,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
            secure=self.secure,
            path="/",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.cookie_name, path="/", httponly=True, samesite="lax", secure=self.secure)

    async def close(self) -> None:
        await self.store.close()


def build_session_store(backend: str, database: Database) -> SessionStore:
    if backend == "database":
        return DatabaseSessionStore(database)
    return MemorySessionStore()
