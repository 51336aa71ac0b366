from pydantic import Field
from typing import Optional
from datetime import datetime

from dintask.models.project import ProjectStatus
from dintask.schemas.base import CamelModel, PartialUpdate
from dintask.schemas.crm import OwnerOut


class ClientOut(CamelModel):
    id: str
    name: str
    company: Optional[str] = None
    email: Optional[str] = None


class ProjectOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    client_id: Optional[str] = None
    client: Optional[ClientOut] = None
    client_company: Optional[str] = None
    manager_id: Optional[str] = None
    manager: Optional[OwnerOut] = None
    sales_rep_id: Optional[str] = None
    sales_rep: Optional[OwnerOut] = None
    assigned_by: str
    admin_id: str
    status: ProjectStatus
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    client_id: Optional[str] = Field(None, alias="client")
    client_company: Optional[str] = None
    manager_id: Optional[str] = Field(None, alias="manager")
    sales_rep_id: Optional[str] = Field(None, alias="salesRep")
    status: ProjectStatus = ProjectStatus.ACTIVE
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)


class ProjectUpdate(PartialUpdate):
    clearable = frozenset({"description", "client_company", "deadline", "budget"})

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    client_company: Optional[str] = None
    manager_id: Optional[str] = Field(None, alias="manager")
    status: Optional[ProjectStatus] = None
    deadline: Optional[datetime] = None
    budget: Optional[float] = Field(None, ge=0)
