"""Sales pipeline: leads and their follow-ups"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class LeadStatus(str, enum.Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    MEETING_DONE = "Meeting Done"
    PROPOSAL_SENT = "Proposal Sent"
    WON = "Won"
    LOST = "Lost"


class Priority(str, enum.Enum):
    """Shared by leads, projects and tasks"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ApprovalStatus(str, enum.Enum):
    """Lead -> Project conversion state"""
    NONE = "none"
    PENDING_PROJECT = "pending_project"
    APPROVED_PROJECT = "approved_project"
    REJECTED = "rejected"


class FollowUpType(str, enum.Enum):
    CALL = "Call"
    MEETING = "Meeting"
    EMAIL = "Email"
    WHATSAPP = "WhatsApp"


class FollowUpStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    MISSED = "Missed"
    CANCELLED = "Cancelled"


class Lead(Base):
    __tablename__ = "leads"

    __table_args__ = (
        Index('ix_leads_admin_id', 'admin_id'),
        Index('ix_leads_owner_id', 'owner_id'),
        Index('ix_leads_status', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    mobile = Column(String(20), nullable=False)
    company = Column(String(255), nullable=True)
    source = Column(String(50), default="Manual")  # Website, Call, Referral, Manual
    status = Column(SQLEnum(LeadStatus), default=LeadStatus.NEW, nullable=False)
    priority = Column(SQLEnum(Priority), default=Priority.MEDIUM, nullable=False)
    amount = Column(Float, default=0)
    deadline = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    owner_id = Column(GUID, ForeignKey("sales_executives.id", ondelete="SET NULL"), nullable=True)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    approval_status = Column(SQLEnum(ApprovalStatus), default=ApprovalStatus.NONE, nullable=False)
    # Project created from this lead; plain id to avoid a leads<->projects FK cycle
    project_ref = Column(GUID, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = relationship("SalesExecutive", lazy="joined")


class FollowUp(Base):
    __tablename__ = "follow_ups"

    __table_args__ = (
        Index('ix_follow_ups_admin_id', 'admin_id'),
        Index('ix_follow_ups_lead_id', 'lead_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    lead_id = Column(GUID, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    # Creator; an admin may log follow-ups too
    sales_rep_id = Column(GUID, nullable=False)
    type = Column(SQLEnum(FollowUpType), default=FollowUpType.CALL, nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(SQLEnum(FollowUpStatus), default=FollowUpStatus.SCHEDULED, nullable=False)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    lead = relationship("Lead", lazy="joined")
