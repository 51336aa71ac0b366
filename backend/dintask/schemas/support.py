from pydantic import Field, EmailStr
from typing import Optional, List, Literal
from datetime import datetime

from dintask.models.support import TicketType, TicketPriority, TicketStatus, SupportLeadStatus
from dintask.schemas.base import CamelModel


class TicketResponseOut(CamelModel):
    responder_id: str
    responder_model: str
    message: str
    created_at: Optional[datetime] = None


class TicketOut(CamelModel):
    id: str
    ticket_id: str
    title: str
    description: str
    type: TicketType
    priority: TicketPriority
    status: TicketStatus
    creator_id: str
    creator_model: str
    company_id: str
    is_escalated_to_super_admin: bool
    attachments: List[str] = []
    responses: List[TicketResponseOut] = []
    rating: Optional[int] = None
    feedback: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TicketCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    type: TicketType
    priority: TicketPriority = TicketPriority.MEDIUM
    attachments: List[str] = []


class TicketUpdate(CamelModel):
    response: Optional[str] = None
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    is_escalated_to_super_admin: Optional[bool] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    feedback: Optional[str] = None


CompanySize = Literal[
    "1-10 Employees",
    "11-50 Employees",
    "51-200 Employees",
    "201-500 Employees",
    "500+ Employees",
]

Industry = Literal["Technology", "Finance", "Healthcare", "Education", "Manufacturing", "Others"]


class SupportLeadCreate(CamelModel):
    name: str = Field(..., min_length=1)
    business_email: EmailStr
    phone: str = Field(..., min_length=1)
    company_name: str = Field(..., min_length=1)
    job_title: str = Field(..., min_length=1)
    company_size: CompanySize
    industry: Industry
    requirements: Optional[str] = None


class SupportLeadOut(CamelModel):
    id: str
    name: str
    business_email: str
    phone: str
    company_name: str
    job_title: str
    company_size: str
    industry: str
    requirements: Optional[str] = None
    status: SupportLeadStatus
    source: Optional[str] = None
    created_at: Optional[datetime] = None
