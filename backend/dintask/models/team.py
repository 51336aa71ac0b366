"""Manager-owned employee teams"""
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Table, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


team_members = Table(
    "team_members",
    Base.metadata,
    Column("team_id", GUID, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("employee_id", GUID, ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
)


class Team(Base):
    __tablename__ = "teams"

    __table_args__ = (
        Index('ix_teams_admin_id', 'admin_id'),
        Index('ix_teams_manager_id', 'manager_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    manager_id = Column(GUID, ForeignKey("managers.id", ondelete="CASCADE"), nullable=False)
    admin_id = Column(GUID, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    manager = relationship("Manager", lazy="joined")
    members = relationship("Employee", secondary=team_members, lazy="selectin")
