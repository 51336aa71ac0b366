"""
In-app notifications.

notify() stores the Notification in the request session, then pushes it
to the recipient's device and open chat sockets once flushed. Push and
socket delivery never fail the request.
"""

from typing import Optional
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.logging_config import logger
from dintask.models.notification import Notification, NotificationType
from dintask.schemas.notification import NotificationOut
from dintask.services.chat_websocket import chat_websocket_manager
from dintask.services.push_service import push_service


async def notify(
    db: AsyncSession,
    recipient,
    sender,
    type: NotificationType,
    title: str,
    message: str,
    link: Optional[str] = None,
) -> Notification:
    notification = Notification(
        recipient_id=recipient.id,
        sender_id=sender.id,
        type=type,
        title=title,
        message=message,
        link=link,
    )
    db.add(notification)
    await db.flush()
    await db.refresh(notification)

    payload = jsonable_encoder(NotificationOut.model_validate(notification), by_alias=True)
    try:
        await chat_websocket_manager.notify_user(str(recipient.id), payload)
    except Exception as e:
        logger.warning(f"[Notify] Socket delivery failed for {recipient.id}: {e}")

    if getattr(recipient, "fcm_token", None):
        push_service.send(
            [recipient.fcm_token],
            title,
            message,
            {"type": type.value, "link": link, "notificationId": notification.id},
        )

    return notification
