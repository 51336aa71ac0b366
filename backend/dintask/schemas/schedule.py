from pydantic import Field, field_validator
from typing import Optional, List
from datetime import date as date_type, datetime
import re

from dintask.models.schedule import ScheduleType, ScheduleStatus
from dintask.schemas.base import CamelModel, PartialUpdate

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not _TIME_RE.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


class ParticipantIn(CamelModel):
    user_id: str
    user_type: str


class ParticipantOut(CamelModel):
    user_id: str
    user_type: str
    name: Optional[str] = None
    email: Optional[str] = None


class ScheduleOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    agenda: Optional[str] = None
    meeting_link: Optional[str] = None
    type: ScheduleType
    date: date_type
    time: str
    end_time: Optional[str] = None
    location: Optional[str] = None
    status: ScheduleStatus
    created_by_id: str
    created_by_model: str
    admin_id: str
    participants: List[ParticipantOut] = []
    created_at: Optional[datetime] = None


class ScheduleCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    agenda: Optional[str] = None
    meeting_link: Optional[str] = None
    type: ScheduleType = ScheduleType.MEETING
    date: date_type
    time: str
    end_time: Optional[str] = None
    location: str = "Remote"
    participants: List[ParticipantIn] = []

    @field_validator("time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return _check_time(v)


class ScheduleUpdate(PartialUpdate):
    clearable = frozenset({"description", "agenda", "meeting_link", "end_time"})

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    agenda: Optional[str] = None
    meeting_link: Optional[str] = None
    type: Optional[ScheduleType] = None
    date: Optional[date_type] = None
    time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    status: Optional[ScheduleStatus] = None
    participants: Optional[List[ParticipantIn]] = None

    @field_validator("time", "end_time")
    @classmethod
    def validate_times(cls, v):
        return _check_time(v)
