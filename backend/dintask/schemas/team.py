"""Pydantic schemas for manager teams"""
from pydantic import Field
from typing import Optional, List
from datetime import datetime

from dintask.schemas.base import CamelModel, PartialUpdate
from dintask.schemas.crm import OwnerOut


class TeamOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    manager_id: str
    manager: Optional[OwnerOut] = None
    admin_id: str
    members: List[OwnerOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TeamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    members: List[str] = []
    # Required when an admin creates the team on a manager's behalf
    manager_id: Optional[str] = None


class TeamUpdate(PartialUpdate):
    clearable = frozenset({"description", "members"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    members: Optional[List[str]] = None
