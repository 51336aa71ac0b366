from pydantic import Field
from typing import Optional, List
from datetime import datetime

from dintask.schemas.base import CamelModel


class ParticipantRef(CamelModel):
    user_id: str
    on_model: str


class MessageOut(CamelModel):
    id: str
    conversation_id: str
    sender_id: str
    sender_model: str
    text: str
    attachments: List[str] = []
    is_deleted: bool = False
    created_at: Optional[datetime] = None


class ConversationOut(CamelModel):
    id: str
    is_group: bool
    group_name: Optional[str] = None
    group_avatar: Optional[str] = None
    workspace_id: str
    last_message_id: Optional[str] = None
    last_message: Optional[MessageOut] = None
    participants: List[ParticipantRef] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccessChatRequest(CamelModel):
    user_id: Optional[str] = None
    user_model: Optional[str] = None


class GroupParticipant(CamelModel):
    id: str
    model: str


class CreateGroupRequest(CamelModel):
    name: Optional[str] = None
    participants: Optional[List[GroupParticipant]] = None


class SendMessageRequest(CamelModel):
    content: str = Field(..., min_length=1)
    conversation_id: str
    attachments: List[str] = []
