# expense_tracker/api/routes/categories.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from expense_tracker.core.database import get_async_session
from expense_tracker.crud.category import list_categories
from expense_tracker.schemas.category import CategoryRead

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryRead])
async def read_categories(db: AsyncSession = Depends(get_async_session)):
    return await list_categories(db)
