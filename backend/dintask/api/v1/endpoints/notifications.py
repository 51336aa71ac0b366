from fastapi import APIRouter, Depends
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from dintask.core.types import is_valid_uuid
from dintask.models.notification import Notification
from dintask.modules.auth.dependencies import get_current_user
from dintask.schemas.notification import BulkDeleteRequest, FcmTokenRequest, NotificationOut

router = APIRouter()

LATEST_LIMIT = 50


async def _own_notification(db: AsyncSession, user, notification_id: str) -> Notification:
    notification = await db.get(Notification, notification_id) if is_valid_uuid(notification_id) else None
    if notification is None:
        raise ResourceNotFoundError("Notification")
    if notification.recipient_id != user.id:
        raise AuthorizationError("Not authorized to access this notification")
    return notification


@router.get("/")
async def list_notifications(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    stmt = (
        select(Notification)
        .where(Notification.recipient_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(LATEST_LIMIT)
    )
    notifications = (await db.execute(stmt)).scalars().all()
    unread = sum(1 for n in notifications if not n.is_read)
    return {
        "success": True,
        "count": len(notifications),
        "unreadCount": unread,
        "data": [NotificationOut.model_validate(n) for n in notifications],
    }


@router.put("/fcm-token")
async def save_fcm_token(
    data: FcmTokenRequest,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register the device token used for push delivery"""
    current_user.fcm_token = data.token
    await db.commit()
    return {"success": True, "message": "FCM token updated"}


@router.put("/read-all")
async def mark_all_read(
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await db.execute(
        update(Notification)
        .where(Notification.recipient_id == current_user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    return {"success": True, "data": {}}


@router.post("/bulk-delete")
async def bulk_delete(
    data: BulkDeleteRequest,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    if not data.ids:
        raise ValidationError("Please provide notification ids", field="ids")
    result = await db.execute(
        delete(Notification).where(
            Notification.id.in_(data.ids),
            Notification.recipient_id == current_user.id,
        )
    )
    await db.commit()
    return {"success": True, "deleted": result.rowcount, "data": {}}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    notification = await _own_notification(db, current_user, notification_id)
    await db.delete(notification)
    await db.commit()
    return {"success": True, "data": {}}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    current_user=Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    notification = await _own_notification(db, current_user, notification_id)
    notification.is_read = True
    await db.commit()
    return {"success": True, "data": NotificationOut.model_validate(notification)}
