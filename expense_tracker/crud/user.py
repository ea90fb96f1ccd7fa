# expense_tracker/crud/user.py
import logging
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from expense_tracker.core.db_utils import row_id_in_range, with_db_timeout
from expense_tracker.core.errors import ConflictError, ValidationError
from expense_tracker.models.user import User

logger = logging.getLogger(__name__)


@with_db_timeout()
async def get_user_by_username(username: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


@with_db_timeout()
async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[User]:
    if not row_id_in_range(user_id):
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


@with_db_timeout()
async def get_users_by_username_or_email(username: str, email: str, db: AsyncSession) -> List[User]:
    """Every user clashing with either identifier (duplicate check before insert)."""
    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email))
    )
    return list(result.scalars().all())


@with_db_timeout()
async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


@with_db_timeout()
async def create_user(username: str, email: str, hashed_password: str, db: AsyncSession) -> int:
    """
    Insert a user and return its id.

    The pre-check gives the usual error for an existing username/email; the
    unique constraints catch the registration that slips in between the
    check and the insert.
    """
    if not username or not email or not hashed_password:
        raise ValidationError("All fields are required.")

    existing = await get_users_by_username_or_email(username, email, db)
    if existing:
        raise ConflictError("Email or username already exists.")

    new_user = User(username=username, email=email, hashed_password=hashed_password)
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Concurrent registration for {username} rejected by unique constraint")
        raise ConflictError("Email or username already exists.") from e
    await db.refresh(new_user)
    return new_user.id
