from typing import Optional, List
from datetime import datetime

from dintask.models.notification import NotificationType
from dintask.schemas.base import CamelModel


class NotificationOut(CamelModel):
    id: str
    recipient_id: str
    sender_id: str
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None


class FcmTokenRequest(CamelModel):
    token: str


class BulkDeleteRequest(CamelModel):
    ids: List[str]
