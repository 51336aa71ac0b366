"""
Usage Limits Module
===================
Counts tenant members against the admin's plan user limit.

Called before join-request approval, direct member addition, invitations
and team-member registration. Pending members count: a seat is taken as
soon as somebody asks to join. Rejected join requests free their seat.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from dintask.core.exceptions import UserLimitExceededError
from dintask.models.accounts import Admin, Employee, Manager, MemberStatus, SalesExecutive
from dintask.models.billing import Plan


@dataclass
class UserLimitCheck:
    """Result of a user limit check"""
    allowed: bool
    error: Optional[str] = None
    limit: int = 0
    current: int = 0
    remaining: int = 0
    breakdown: Dict[str, int] = field(
        default_factory=lambda: {"managers": 0, "salesExecutives": 0, "employees": 0}
    )

    def to_dict(self) -> Dict:
        return {
            "allowed": self.allowed,
            "error": self.error,
            "limit": self.limit,
            "current": self.current,
            "remaining": self.remaining,
            "breakdown": self.breakdown,
        }


async def get_admin_plan(db: AsyncSession, admin: Admin) -> Optional[Plan]:
    """Plan by id, falling back to the plan name stored on the admin"""
    if admin.subscription_plan_id:
        plan = await db.get(Plan, admin.subscription_plan_id)
        if plan:
            return plan
    if admin.subscription_plan:
        result = await db.execute(select(Plan).where(Plan.name == admin.subscription_plan))
        return result.scalars().first()
    return None


async def count_members(db: AsyncSession, admin_id: str, exclude_id: Optional[str] = None) -> Dict[str, int]:
    counts = {}
    for key, model in (("managers", Manager), ("salesExecutives", SalesExecutive), ("employees", Employee)):
        stmt = select(func.count(model.id)).where(
            model.admin_id == admin_id,
            model.status != MemberStatus.REJECTED,
        )
        if exclude_id:
            stmt = stmt.where(model.id != exclude_id)
        result = await db.execute(stmt)
        counts[key] = result.scalar() or 0
    return counts


async def check_user_limit(
    db: AsyncSession, admin_id: Optional[str], exclude_id: Optional[str] = None
) -> UserLimitCheck:
    """
    Allow one more member while the tenant is below plan.user_limit.

    exclude_id leaves one member out of the count: approving a join request
    fills the seat its pending row already holds.

    Denies when the admin or its plan cannot be found.
    """
    admin = await db.get(Admin, admin_id) if admin_id else None
    if not admin:
        return UserLimitCheck(allowed=False, error="Admin not found")

    plan = await get_admin_plan(db, admin)
    if not plan:
        return UserLimitCheck(
            allowed=False,
            error="No subscription plan found. Please contact support."
        )

    breakdown = await count_members(db, admin.id, exclude_id)
    managers = breakdown["managers"]
    sales = breakdown["salesExecutives"]
    employees = breakdown["employees"]
    total = managers + sales + employees

    if total >= plan.user_limit:
        return UserLimitCheck(
            allowed=False,
            error=(
                f"Subscription limit reached! Your {plan.name} plan allows {plan.user_limit} members. "
                f"You currently have {total} members ({managers} managers, {sales} sales executives, "
                f"{employees} employees). Please upgrade your plan to add more members."
            ),
            limit=plan.user_limit,
            current=total,
            remaining=0,
            breakdown=breakdown,
        )

    return UserLimitCheck(
        allowed=True,
        limit=plan.user_limit,
        current=total,
        remaining=plan.user_limit - total,
        breakdown=breakdown,
    )


async def require_user_slot(
    db: AsyncSession, admin_id: Optional[str], exclude_id: Optional[str] = None
) -> UserLimitCheck:
    """check_user_limit that raises 403 when denied"""
    check = await check_user_limit(db, admin_id, exclude_id)
    if not check.allowed:
        raise UserLimitExceededError(check.error, limit=check.limit, current=check.current)
    return check
