# expense_tracker/schemas/expense.py
import datetime as dt
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ExpenseBase(BaseModel):
    category: int = Field(..., gt=0, description="Category id, see GET /api/categories")
    # NUMERIC(12, 2): ten integral digits, two fractional
    amount: Decimal = Field(..., max_digits=12, decimal_places=2, description="Signed amount")
    date: Optional[dt.date] = Field(None, description="Day of the expense; defaults to today (UTC)")


class ExpenseCreate(ExpenseBase):
    pass


class ExpenseUpdate(ExpenseBase):
    pass


class ExpenseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category: int = Field(validation_alias="category_id")
    amount: Decimal
    date: dt.date
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None


class ExpenseCreated(BaseModel):
    message: str
    id: int


class CategoryTotal(BaseModel):
    category_id: int
    category: str
    count: int
    total: Decimal
