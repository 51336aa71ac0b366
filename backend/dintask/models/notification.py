from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Text, Index
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class NotificationType(str, enum.Enum):
    LEAD_ASSIGNED = "lead_assigned"
    PROJECT_APPROVED = "project_approved"
    TASK_ASSIGNED = "task_assigned"
    GENERAL = "general"


class Notification(Base):
    """In-app notification; recipient may live in any account table"""
    __tablename__ = "notifications"

    __table_args__ = (
        Index('ix_notifications_recipient_created', 'recipient_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    recipient_id = Column(GUID, nullable=False)
    sender_id = Column(GUID, nullable=False)
    type = Column(SQLEnum(NotificationType), default=NotificationType.GENERAL, nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(512), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
