from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.config import settings
from dintask.core.database import get_db
from dintask.core.exceptions import EmailDeliveryError, ValidationError
from dintask.core.logging_config import logger
from dintask.modules.auth.dependencies import authorize
from dintask.modules.auth.roles import ADMIN, TEAM_ROLES, normalize_role
from dintask.modules.auth.usage_limits import require_user_slot
from dintask.schemas.auth import InviteRequest
from dintask.services.email_service import email_service

router = APIRouter()


@router.post("/")
async def send_invite(
    data: InviteRequest,
    current_user=Depends(authorize(ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    """
    Email a registration link for a team role.

    The link carries the admin id so the new member lands in this workspace.
    """
    if not data.email or not data.role:
        raise ValidationError("Please provide email and role")
    role = normalize_role(data.role)
    if role not in TEAM_ROLES:
        raise ValidationError(f"Cannot invite users with role {data.role}", field="role")

    await require_user_slot(db, current_user.id)

    invite_url = settings.get_invite_url(data.role, current_user.id, data.email)
    sent = await email_service.send_invitation(
        data.email,
        current_user.company_name or "Our Company",
        role,
        invite_url,
    )
    if not sent:
        logger.error(f"[Invite] Delivery failed for {data.email}")
        raise EmailDeliveryError()

    logger.log_tenant_event("invite_sent", current_user.id, email=data.email, role=role)
    return {"success": True, "data": "Email sent"}
