from pydantic import Field
from typing import Optional, List
from datetime import datetime

from dintask.models.crm import Priority
from dintask.models.task import TaskStatus
from dintask.schemas.base import CamelModel, PartialUpdate


class SubTaskOut(CamelModel):
    id: str
    assignee_id: str
    assignee_model: str
    status: TaskStatus
    progress: int
    updated_at: Optional[datetime] = None


class TaskActivityOut(CamelModel):
    actor_id: Optional[str] = None
    actor_model: Optional[str] = None
    actor_name: Optional[str] = None
    action: str
    details: Optional[str] = None
    created_at: Optional[datetime] = None


class TaskOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    project_id: str
    assigned_to: List[str] = []
    assigned_by_id: str
    assigned_by_model: str
    admin_id: str
    status: TaskStatus
    priority: Priority
    deadline: Optional[datetime] = None
    progress: int
    labels: List[str] = []
    sub_tasks: List[SubTaskOut] = Field(default_factory=list, validation_alias="subtasks")
    activity_log: List[TaskActivityOut] = Field(default_factory=list, validation_alias="activities")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    project: str
    assigned_to: List[str] = []
    priority: Priority = Priority.MEDIUM
    deadline: Optional[datetime] = None
    labels: List[str] = []


class TaskUpdate(PartialUpdate):
    """Full update for the assigner/admin; assignees may only send status/progress"""
    clearable = frozenset({"description", "deadline"})

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    deadline: Optional[datetime] = None
    assigned_to: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
