# expense_tracker/models/session.py
from datetime import datetime
from sqlalchemy import Column, ForeignKey, Integer, String, DateTime
from expense_tracker.core.database import Base


class UserSession(Base):
    """Row backing a server-side session when SESSION_BACKEND=database."""
    __tablename__ = "user_sessions"

    id = Column(String(length=64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Snapshot taken at login, not a live join
    username = Column(String(length=50), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<UserSession user_id={self.user_id} expires_at={self.expires_at}>"
