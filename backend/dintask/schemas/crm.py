from pydantic import Field, EmailStr
from typing import Optional
from datetime import datetime

from dintask.models.crm import LeadStatus, Priority, ApprovalStatus, FollowUpType, FollowUpStatus
from dintask.schemas.base import CamelModel, PartialUpdate


class OwnerOut(CamelModel):
    id: str
    name: str
    email: str


class LeadOut(CamelModel):
    id: str
    name: str
    email: Optional[str] = None
    mobile: str
    company: Optional[str] = None
    source: Optional[str] = None
    status: LeadStatus
    priority: Priority
    amount: Optional[float] = 0
    deadline: Optional[datetime] = None
    notes: Optional[str] = None
    owner_id: Optional[str] = None
    owner: Optional[OwnerOut] = None
    admin_id: str
    approval_status: ApprovalStatus
    project_ref: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LeadCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    mobile: str = Field(..., min_length=1, max_length=20)
    company: Optional[str] = None
    source: str = "Manual"
    status: LeadStatus = LeadStatus.NEW
    priority: Priority = Priority.MEDIUM
    amount: float = Field(default=0, ge=0)
    deadline: Optional[datetime] = None
    notes: Optional[str] = None
    owner: Optional[str] = None


class LeadUpdate(PartialUpdate):
    clearable = frozenset({"email", "company", "deadline", "notes"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    mobile: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    priority: Optional[Priority] = None
    amount: Optional[float] = Field(None, ge=0)
    deadline: Optional[datetime] = None
    notes: Optional[str] = None


class AssignLeadRequest(CamelModel):
    owner: str


class ApproveProjectRequest(CamelModel):
    manager_id: Optional[str] = None


class FollowUpOut(CamelModel):
    id: str
    lead_id: str
    sales_rep_id: str
    type: FollowUpType
    scheduled_at: datetime
    notes: Optional[str] = None
    status: FollowUpStatus
    admin_id: str
    created_at: Optional[datetime] = None


class FollowUpCreate(CamelModel):
    lead_id: str
    type: FollowUpType = FollowUpType.CALL
    scheduled_at: datetime
    notes: Optional[str] = None
    status: FollowUpStatus = FollowUpStatus.SCHEDULED


class FollowUpUpdate(PartialUpdate):
    clearable = frozenset({"notes"})

    type: Optional[FollowUpType] = None
    scheduled_at: Optional[datetime] = None
    notes: Optional[str] = None
    status: Optional[FollowUpStatus] = None
