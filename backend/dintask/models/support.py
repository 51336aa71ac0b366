"""Support tickets (tenant -> admin -> platform escalation) and public inquiries"""
from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class TicketType(str, enum.Enum):
    TECHNICAL = "Technical"
    SUBSCRIPTION = "Subscription"
    BILLING = "Billing"
    FEATURE_REQUEST = "Feature Request"
    OTHER = "Other"


class TicketPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class TicketStatus(str, enum.Enum):
    OPEN = "Open"
    PENDING = "Pending"
    ESCALATED = "Escalated"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class SupportLeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    CLOSED = "closed"


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    __table_args__ = (
        Index('ix_support_tickets_company_id', 'company_id'),
        Index('ix_support_tickets_creator_id', 'creator_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    ticket_id = Column(String(20), unique=True, nullable=False)  # "#TKT-123456"
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    type = Column(SQLEnum(TicketType), nullable=False)
    priority = Column(SQLEnum(TicketPriority), default=TicketPriority.MEDIUM, nullable=False)
    status = Column(SQLEnum(TicketStatus), default=TicketStatus.PENDING, nullable=False)

    creator_id = Column(GUID, nullable=False)
    creator_model = Column(String(50), nullable=False)
    company_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)
    is_escalated_to_super_admin = Column(Boolean, default=False, nullable=False)

    attachments = Column(JSON, default=list)
    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    responses = relationship(
        "TicketResponse", cascade="all, delete-orphan", lazy="selectin",
        order_by="TicketResponse.created_at"
    )


class TicketResponse(Base):
    __tablename__ = "ticket_responses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    ticket_id = Column(GUID, ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    responder_id = Column(GUID, nullable=False)
    responder_model = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class SupportLead(Base):
    """Business inquiry from the public support form"""
    __tablename__ = "support_leads"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    business_email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    company_name = Column(String(255), nullable=False)
    job_title = Column(String(255), nullable=False)
    company_size = Column(String(50), nullable=False)
    industry = Column(String(50), nullable=False)
    requirements = Column(Text, nullable=True)
    status = Column(SQLEnum(SupportLeadStatus), default=SupportLeadStatus.NEW, nullable=False)
    source = Column(String(50), default="support_form")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
