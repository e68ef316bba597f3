from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from app.core.database import Base


class SavedSession(Base):
    __tablename__ = "saved_sessions"

    session_key = Column(String(64), primary_key=True)
    data = Column(Text, nullable=False)  # JSON settings blob
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
