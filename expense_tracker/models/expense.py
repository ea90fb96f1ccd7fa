# expense_tracker/models/expense.py
from datetime import datetime
from sqlalchemy import Column, ForeignKey, Integer, Numeric, Date, DateTime
from sqlalchemy.orm import relationship
from expense_tracker.core.database import Base
from .category import Category  # noqa: F401  registers the relationship target


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    # Fixed-point currency amount, signed
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, default=None)

    category = relationship("Category", lazy="joined")    # see category.py

    def __repr__(self):
        return f"<Expense id={self.id} amount={self.amount} user_id={self.user_id}>"
