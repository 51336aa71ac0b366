from sqlalchemy import Column, String, Date, DateTime, Enum as SQLEnum, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class ScheduleType(str, enum.Enum):
    MEETING = "meeting"
    CALL = "call"
    REVIEW = "review"
    OTHER = "other"
    TASK = "task"
    DEADLINE = "deadline"


class ScheduleStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Schedule(Base):
    """Calendar event; time/end_time are "HH:MM" strings on a single date"""
    __tablename__ = "schedules"

    __table_args__ = (
        Index('ix_schedules_admin_id_date', 'admin_id', 'date'),
        Index('ix_schedules_created_by_id', 'created_by_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    agenda = Column(Text, nullable=True)
    meeting_link = Column(String(512), nullable=True)
    type = Column(SQLEnum(ScheduleType), default=ScheduleType.MEETING, nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=True)
    location = Column(String(255), default="Remote")
    status = Column(SQLEnum(ScheduleStatus), default=ScheduleStatus.SCHEDULED, nullable=False)

    created_by_id = Column(GUID, nullable=False)
    created_by_model = Column(String(50), nullable=False)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    participants = relationship(
        "ScheduleParticipant", cascade="all, delete-orphan", lazy="selectin"
    )


class ScheduleParticipant(Base):
    __tablename__ = "schedule_participants"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    schedule_id = Column(GUID, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, nullable=False, index=True)
    user_type = Column(String(50), nullable=False)  # Admin, Manager, Employee, SalesExecutive
    # Denormalized for display
    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
