# expense_tracker/api/routes/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from expense_tracker.api.deps import AuthenticatedContext, get_current_user
from expense_tracker.core.database import get_async_session
from expense_tracker.core.errors import NotFound
from expense_tracker.crud.user import get_user_by_id, list_users
from expense_tracker.schemas.user import UserRead

router = APIRouter(prefix="/users", tags=["User Management"])


@router.get("", response_model=List[UserRead])
async def read_users(
    db: AsyncSession = Depends(get_async_session),
    current: AuthenticatedContext = Depends(get_current_user),
):
    """
    List registered users (no password hashes).
    Note: open to any signed-in user; there is no admin role.
    """
    return await list_users(db)


@router.get("/{user_id}", response_model=UserRead)
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_async_session),
    current: AuthenticatedContext = Depends(get_current_user),
):
    user = await get_user_by_id(user_id, db)
    if not user:
        raise NotFound("User not found")
    return user
