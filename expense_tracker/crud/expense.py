# expense_tracker/crud/expense.py
"""
Expense persistence, always scoped to the owning user.

Every public function takes a mandatory ``owner_id`` and is wrapped by
``owner_scoped``; every query goes through ``_owned``. A row owned by
someone else behaves exactly like a row that does not exist.
"""
import functools
import inspect
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from expense_tracker.core.db_utils import row_id_in_range, with_db_timeout
from expense_tracker.core.errors import Unauthorized, ValidationError
from expense_tracker.crud.category import get_category_by_id
from expense_tracker.models.category import Category
from expense_tracker.models.expense import Expense

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("10000000000")  # NUMERIC(12, 2) upper bound (exclusive)


def owner_scoped(func):
    """Reject calls without an owner before any query runs."""
    signature = inspect.signature(func)
    if "owner_id" not in signature.parameters:
        raise TypeError(f"{func.__name__} must take an owner_id argument")

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any):
        owner_id = signature.bind(*args, **kwargs).arguments.get("owner_id")
        if owner_id is None or isinstance(owner_id, bool) or not isinstance(owner_id, int):
            raise Unauthorized()
        return await func(*args, **kwargs)

    return wrapper


def _owned(stmt, owner_id: int):
    return stmt.where(Expense.user_id == owner_id)


def _coerce_category(category: Any) -> int:
    if category is None or category == "":
        raise ValidationError("Category and amount are required")
    if isinstance(category, bool):
        raise ValidationError("Category must be a numeric id")
    if isinstance(category, int):
        return category
    if isinstance(category, str) and category.strip().isdigit():
        return int(category.strip())
    raise ValidationError("Category must be a numeric id")


def _coerce_amount(amount: Any) -> Decimal:
    if amount is None or amount == "":
        raise ValidationError("Category and amount are required")
    if isinstance(amount, bool):
        raise ValidationError("Amount must be numeric")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError("Amount must be numeric")
    if not value.is_finite():
        raise ValidationError("Amount must be numeric")
    if value != value.quantize(CENT):
        raise ValidationError("Amount must have at most 2 decimal places")
    if abs(value) >= MAX_AMOUNT:
        raise ValidationError("Amount is too large")
    return value.quantize(CENT)


async def _require_category(category_id: int, db: AsyncSession) -> None:
    if await get_category_by_id(category_id, db) is None:
        raise ValidationError("Unknown category")


@owner_scoped
@with_db_timeout()
async def list_expenses_for_owner(owner_id: int, db: AsyncSession) -> List[Expense]:
    result = await db.execute(_owned(select(Expense), owner_id).order_by(Expense.id))
    return list(result.scalars().all())


@owner_scoped
@with_db_timeout()
async def get_expense_by_id(expense_id: int, owner_id: int, db: AsyncSession) -> Optional[Expense]:
    if not row_id_in_range(expense_id):
        return None
    result = await db.execute(_owned(select(Expense).where(Expense.id == expense_id), owner_id))
    return result.scalar_one_or_none()


@owner_scoped
@with_db_timeout()
async def create_expense(
    owner_id: int,
    category: Any,
    amount: Any,
    db: AsyncSession,
    expense_date: Optional[date] = None,
) -> int:
    category_id = _coerce_category(category)
    value = _coerce_amount(amount)
    await _require_category(category_id, db)

    now = datetime.utcnow()
    new_ex = Expense(
        user_id=owner_id,
        category_id=category_id,
        amount=value,
        date=expense_date or now.date(),
        created_at=now,
    )
    db.add(new_ex)
    await db.commit()
    await db.refresh(new_ex)
    logger.info(f"Expense {new_ex.id} created for user {owner_id}")
    return new_ex.id


@owner_scoped
@with_db_timeout()
async def update_expense(
    expense_id: int,
    owner_id: int,
    category: Any,
    amount: Any,
    db: AsyncSession,
    expense_date: Optional[date] = None,
) -> bool:
    """Single UPDATE filtered by id and owner; False when no row matched."""
    if not row_id_in_range(expense_id):
        return False
    category_id = _coerce_category(category)
    value = _coerce_amount(amount)
    await _require_category(category_id, db)

    values = {"category_id": category_id, "amount": value, "updated_at": datetime.utcnow()}
    if expense_date is not None:
        values["date"] = expense_date
    stmt = _owned(update(Expense).where(Expense.id == expense_id), owner_id).values(**values)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    await db.commit()
    updated = result.rowcount > 0
    if updated:
        logger.info(f"Expense {expense_id} updated for user {owner_id}")
    return updated


@owner_scoped
@with_db_timeout()
async def delete_expense(expense_id: int, owner_id: int, db: AsyncSession) -> bool:
    if not row_id_in_range(expense_id):
        return False
    stmt = _owned(delete(Expense).where(Expense.id == expense_id), owner_id)
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    await db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Expense {expense_id} deleted for user {owner_id}")
    return deleted


@owner_scoped
@with_db_timeout()
async def summarize_expenses_for_owner(owner_id: int, db: AsyncSession) -> List[Dict[str, Any]]:
    """Count and total per category, only for categories the owner has used."""
    stmt = _owned(
        select(
            Category.id,
            Category.name,
            func.count(Expense.id),
            func.sum(Expense.amount),
        ).join(Expense, Expense.category_id == Category.id),
        owner_id,
    ).group_by(Category.id, Category.name).order_by(Category.id)
    result = await db.execute(stmt)
    return [
        {
            "category_id": category_id,
            "category": name,
            "count": count,
            "total": Decimal(str(total or 0)).quantize(CENT),
        }
        for category_id, name, count, total in result.all()
    ]
