# expense_tracker/api/routes/expenses.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from expense_tracker.api.deps import AuthenticatedContext, get_current_user
from expense_tracker.core.database import get_async_session
from expense_tracker.core.errors import NotFound
from expense_tracker.crud.expense import (
    create_expense,
    delete_expense,
    get_expense_by_id,
    list_expenses_for_owner,
    summarize_expenses_for_owner,
    update_expense,
)
from expense_tracker.schemas.expense import CategoryTotal, ExpenseCreate, ExpenseCreated, ExpenseRead, ExpenseUpdate
from expense_tracker.schemas.user import Message

router = APIRouter(prefix="/expenses", tags=["expenses"])

EXPENSE_NOT_FOUND = "Expense not found"


@router.get("", response_model=List[ExpenseRead])
async def read_expenses(
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    return await list_expenses_for_owner(user.user_id, db)


@router.get("/summary", response_model=List[CategoryTotal])
async def read_expense_summary(
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    """Per-category count and total of the caller's expenses (feeds the dashboard chart)."""
    return await summarize_expenses_for_owner(user.user_id, db)


@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    expense = await get_expense_by_id(expense_id, user.user_id, db)
    if not expense:
        raise NotFound(EXPENSE_NOT_FOUND)
    return expense


@router.post("", response_model=ExpenseCreated, status_code=status.HTTP_201_CREATED)
async def add_expense(
    ex_in: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    expense_id = await create_expense(user.user_id, ex_in.category, ex_in.amount, db, expense_date=ex_in.date)
    return {"message": "Expense added successfully", "id": expense_id}


@router.put("/{expense_id}", response_model=Message)
async def edit_expense(
    expense_id: int,
    ex_in: ExpenseUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    # Someone else's expense and a missing one both end up here
    if not await update_expense(expense_id, user.user_id, ex_in.category, ex_in.amount, db, expense_date=ex_in.date):
        raise NotFound(EXPENSE_NOT_FOUND)
    return {"message": "Expense updated successfully"}


@router.delete("/{expense_id}", response_model=Message)
async def remove_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_async_session),
    user: AuthenticatedContext = Depends(get_current_user),
):
    if not await delete_expense(expense_id, user.user_id, db):
        raise NotFound(EXPENSE_NOT_FOUND)
    return {"message": "Expense deleted successfully"}
