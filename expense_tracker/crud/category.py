# expense_tracker/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from expense_tracker.core.db_utils import with_db_timeout
from expense_tracker.models.category import Category

# Reference categories, inserted in this order so ids 1..6 match on a fresh store
DEFAULT_CATEGORIES: List[str] = [
    "Food",
    "Utilities",
    "Healthcare",
    "Personal Care",
    "Travel",
    "Other",
]


@with_db_timeout()
async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.id))
    return list(result.scalars().all())


@with_db_timeout()
async def get_category_by_id(category_id: int, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.id == category_id))
    return result.scalar_one_or_none()


async def seed_default_categories(db: AsyncSession) -> List[Category]:
    """Create the missing default categories.

    Returns the list of categories that were created (empty if none were needed).
    """
    result = await db.execute(select(Category.name))
    existing_names_lower = {row[0].lower() for row in result.all()}

    categories_to_create = [
        Category(name=name) for name in DEFAULT_CATEGORIES
        if name.lower() not in existing_names_lower
    ]
    if categories_to_create:
        db.add_all(categories_to_create)
        await db.commit()
        for c in categories_to_create:
            await db.refresh(c)

    return categories_to_create
