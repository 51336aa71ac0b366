from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Float, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"


class Project(Base):
    """Client project, normally created by approving a Won lead"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_admin_id', 'admin_id'),
        Index('ix_projects_manager_id', 'manager_id'),
        Index('ix_projects_status', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    client_id = Column(GUID, ForeignKey("leads.id", ondelete="SET NULL"), nullable=True)
    client_company = Column(String(255), nullable=True)
    manager_id = Column(GUID, ForeignKey("managers.id", ondelete="SET NULL"), nullable=True)
    sales_rep_id = Column(GUID, ForeignKey("sales_executives.id", ondelete="SET NULL"), nullable=True)
    assigned_by = Column(GUID, nullable=False)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False)
    start_date = Column(DateTime, default=datetime.utcnow)
    deadline = Column(DateTime, nullable=True)
    budget = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Lead", foreign_keys=[client_id], lazy="joined")
    manager = relationship("Manager", lazy="joined")
    sales_rep = relationship("SalesExecutive", lazy="joined")
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
