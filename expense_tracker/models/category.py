# expense_tracker/models/category.py
from sqlalchemy import Column, Integer, String
from expense_tracker.core.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(length=100), unique=True, nullable=False)

    def __repr__(self):
        return f"<Category id={self.id} name={self.name}>"
