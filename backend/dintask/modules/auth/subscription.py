"""Plan activation and the subscription state shown to tenants"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.config import settings
from dintask.core.logging_config import logger
from dintask.models.accounts import Admin, SubscriptionStatus
from dintask.models.billing import Plan
from dintask.modules.auth.usage_limits import get_admin_plan


def activate_plan(admin: Admin, plan: Plan, now: Optional[datetime] = None) -> None:
    """Point the admin at plan and restart the subscription clock"""
    now = now or datetime.utcnow()
    admin.subscription_plan = plan.name
    admin.subscription_plan_id = plan.id
    admin.subscription_status = SubscriptionStatus.ACTIVE
    admin.subscription_expiry = now + timedelta(days=plan.duration or settings.DEFAULT_PLAN_DURATION_DAYS)
    logger.log_tenant_event(
        "plan_activated", admin.id, plan=plan.name, expiry=admin.subscription_expiry.isoformat()
    )


async def get_free_plan(db: AsyncSession) -> Optional[Plan]:
    result = await db.execute(
        select(Plan).where(Plan.price == 0).order_by(Plan.created_at)
    )
    return result.scalars().first()


def subscription_state(admin: Optional[Admin], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    if admin is None:
        return {
            "is_expired": True,
            "subscription_status": None,
            "subscription_expiry": None,
            "subscription_plan": None,
            "days_remaining": 0,
        }

    expiry = admin.subscription_expiry
    days_remaining = None
    if expiry is not None:
        days_remaining = max((expiry - now).days, 0)
    status = admin.subscription_status
    return {
        "is_expired": admin.subscription_expired(now),
        "subscription_status": getattr(status, "value", status),
        "subscription_expiry": expiry,
        "subscription_plan": admin.subscription_plan,
        "days_remaining": days_remaining,
    }


async def plan_details(db: AsyncSession, admin: Admin) -> Optional[Dict[str, Any]]:
    plan = await get_admin_plan(db, admin)
    if not plan:
        return None
    return {
        "id": plan.id,
        "name": plan.name,
        "price": plan.price,
        "userLimit": plan.user_limit,
        "duration": plan.duration,
        "features": plan.features or [],
    }
