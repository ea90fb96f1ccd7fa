# expense_tracker/api/deps.py
from dataclasses import dataclass

from fastapi import Depends, Request

from expense_tracker.core.config import Settings
from expense_tracker.core.context import AppContext
from expense_tracker.core.errors import Unauthorized
from expense_tracker.core.sessions import Session, SessionManager


@dataclass(frozen=True)
class AuthenticatedContext:
    user_id: int
    username: str
    session: Session


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


def get_settings_dep(context: AppContext = Depends(get_app_context)) -> Settings:
    return context.settings


def get_session_manager(context: AppContext = Depends(get_app_context)) -> SessionManager:
    return context.sessions


async def get_current_session(
    request: Request,
    sessions: SessionManager = Depends(get_session_manager),
) -> Session:
    """The caller's session, anonymous when the cookie is missing, forged or expired."""
    return await sessions.resolve(request.cookies.get(sessions.cookie_name))


async def authorize(session: Session = Depends(get_current_session)) -> AuthenticatedContext:
    """
    Access-control gate for protected routes.

    Resolves the session cookie to its subject or raises Unauthorized.
    Reads the session store only.
    """
    if not session.is_authenticated:
        raise Unauthorized()
    return AuthenticatedContext(
        user_id=session.subject.user_id,
        username=session.subject.username,
        session=session,
    )


# Route-level name used by the protected routers
get_current_user = authorize
