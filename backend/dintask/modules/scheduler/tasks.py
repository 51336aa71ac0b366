"""
Periodic jobs run by Celery beat.

Each job is an async function taking a session and the current time, so
it can be driven from tests directly; the Celery tasks below only open a
session, run it on a fresh event loop and commit.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.celery_app import celery_app
from dintask.core.database import AsyncSessionLocal, close_db
from dintask.core.logging_config import logger
from dintask.models.accounts import Admin, SubscriptionStatus
from dintask.models.task import Task, TaskActivity, TaskStatus, CLOSED_TASK_STATUSES
from dintask.services.email_service import email_service


def _day_window(start: datetime, days: int):
    lower = start + timedelta(days=days)
    return lower, lower + timedelta(days=1)


async def run_subscription_expiry_check(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Remind active admins 3 days and 1 day before expiry, and expire the
    ones whose expiry date is today or already behind us.
    """
    now = now or datetime.utcnow()
    today = datetime(now.year, now.month, now.day)
    counts = {"expiringSoon": 0, "expiringTomorrow": 0, "expired": 0}

    active = Admin.subscription_status == SubscriptionStatus.ACTIVE

    for key, days in (("expiringSoon", 3), ("expiringTomorrow", 1)):
        lower, upper = _day_window(today, days)
        result = await db.execute(
            select(Admin).where(
                active,
                Admin.subscription_expiry >= lower,
                Admin.subscription_expiry < upper,
            )
        )
        for admin in result.scalars().all():
            await email_service.send_subscription_expiring(
                admin.email, admin.name, admin.company_name, days
            )
            counts[key] += 1

    _, end_of_today = _day_window(today, 0)
    result = await db.execute(
        select(Admin).where(active, Admin.subscription_expiry < end_of_today)
    )
    for admin in result.scalars().all():
        admin.subscription_status = SubscriptionStatus.EXPIRED
        await email_service.send_subscription_expired(admin.email, admin.name, admin.company_name)
        logger.log_tenant_event("subscription_expired", admin.id, expiry=str(admin.subscription_expiry))
        counts["expired"] += 1

    await db.flush()
    logger.info(f"[Scheduler] Subscription expiry check: {counts}")
    return counts


async def run_mark_overdue_tasks(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """Flip open tasks past their deadline to overdue"""
    now = now or datetime.utcnow()
    result = await db.execute(
        select(Task).where(
            Task.deadline.is_not(None),
            Task.deadline < now,
            Task.status.not_in(CLOSED_TASK_STATUSES),
        )
    )
    tasks = result.scalars().all()
    for task in tasks:
        previous = task.status.value
        task.status = TaskStatus.OVERDUE
        task.activities.append(TaskActivity(
            actor_name="System",
            action="status_changed",
            details=f"Status changed from {previous} to overdue (deadline passed)",
        ))

    await db.flush()
    if tasks:
        logger.info(f"[Scheduler] Marked {len(tasks)} task(s) overdue")
    return len(tasks)


async def _run_job(job):
    try:
        async with AsyncSessionLocal() as db:
            try:
                outcome = await job(db)
                await db.commit()
                return outcome
            except Exception:
                await db.rollback()
                raise
    finally:
        # Pooled connections are bound to this loop
        await close_db()


def _run_in_new_loop(job):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(_run_job(job))
    finally:
        loop.close()


@celery_app.task(name="dintask.modules.scheduler.tasks.check_subscription_expiry")
def check_subscription_expiry():
    logger.info("[Scheduler] Running subscription expiry check")
    return _run_in_new_loop(run_subscription_expiry_check)


@celery_app.task(name="dintask.modules.scheduler.tasks.mark_overdue_tasks")
def mark_overdue_tasks():
    return _run_in_new_loop(run_mark_overdue_tasks)
