from sqlalchemy import Column, String, Boolean, DateTime, Text, Index
from datetime import datetime

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class Note(Base):
    """Personal sticky note, visible to its owner only"""
    __tablename__ = "notes"

    __table_args__ = (
        Index('ix_notes_user_id', 'user_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, nullable=False)
    user_role = Column(String(20), nullable=False)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(50), default="General")
    color = Column(String(50), default="bg-white")
    is_pinned = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
