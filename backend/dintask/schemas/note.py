from pydantic import Field
from typing import Optional
from datetime import datetime

from dintask.schemas.base import CamelModel, PartialUpdate


class NoteOut(CamelModel):
    id: str
    title: str
    content: str
    category: Optional[str] = None
    color: Optional[str] = None
    is_pinned: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NoteCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)
    category: str = "General"
    color: str = "bg-white"
    is_pinned: bool = False


class NoteUpdate(PartialUpdate):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    color: Optional[str] = None
    is_pinned: Optional[bool] = None
