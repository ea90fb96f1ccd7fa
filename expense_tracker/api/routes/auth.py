# expense_tracker/api/routes/auth.py
import logging
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.api.deps import AuthenticatedContext, get_current_user, get_session_manager, get_settings_dep
from expense_tracker.core.config import Settings
from expense_tracker.core.database import get_async_session
from expense_tracker.core.errors import InternalError, Unauthorized, ValidationError
from expense_tracker.core.security import dummy_verify_async, hash_password_async, verify_password_async
from expense_tracker.core.sessions import SessionManager
from expense_tracker.crud.user import create_user, get_user_by_username
from expense_tracker.schemas.user import LoginResponse, Message, SessionUser, UserCreate, UserLogin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=Message, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings_dep),
):
    """Create an account; duplicate username or email is rejected with 400."""
    hashed_password = await hash_password_async(user_in.password, rounds=settings.BCRYPT_ROUNDS)
    user_id = await create_user(user_in.username, user_in.email, hashed_password, db)
    logger.info(f"User {user_in.username} registered (id={user_id})")
    return {"message": "User registered successfully."}


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_async_session),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Check the password and issue the session cookie."""
    user = await get_user_by_username(credentials.username, db)
    if user is None:
        await dummy_verify_async()
        logger.info(f"Login failed for unknown user {credentials.username}")
        raise Unauthorized("Invalid Username or Password!")

    try:
        matched = await verify_password_async(credentials.password, user.hashed_password)
    except ValidationError as e:
        logger.error(f"Stored password hash for user {user.id} is malformed")
        raise InternalError() from e
    if not matched:
        logger.info(f"Login failed for user {credentials.username}")
        raise Unauthorized("Invalid Username or Password!")

    handle = await sessions.create(user.id, user.username)
    sessions.set_cookie(response, handle)
    return LoginResponse(
        message="Logged in successfully",
        user=SessionUser(id=user.id, username=user.username),
    )


@router.post("/logout", response_model=Message)
async def logout(
    response: Response,
    current: AuthenticatedContext = Depends(get_current_user),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Destroy the caller's session; a store failure is reported as 500."""
    await sessions.destroy(current.session)
    sessions.clear_cookie(response)
    return {"message": "Logged out successfully"}
