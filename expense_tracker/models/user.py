# expense_tracker/models/user.py
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from expense_tracker.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(length=50), unique=True, index=True, nullable=False)
    email = Column(String(length=255), unique=True, index=True, nullable=False)
    # bcrypt hash, never the plaintext password
    hashed_password = Column(String(length=255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"
