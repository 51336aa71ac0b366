from celery import Celery
from celery.schedules import crontab

from dintask.core.config import settings

celery_app = Celery(
    "dintask",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "dintask.modules.scheduler.tasks",
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    task_soft_time_limit=settings.CELERY_TASK_SOFT_TIME_LIMIT,
    result_expires=settings.CELERY_RESULT_EXPIRES,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    broker_connection_retry_on_startup=True,
)

celery_app.conf.beat_schedule = {
    # Expiry reminders and status flip, once a day at midnight UTC
    "check-subscription-expiry": {
        "task": "dintask.modules.scheduler.tasks.check_subscription_expiry",
        "schedule": crontab(hour=0, minute=0),
    },
    "mark-overdue-tasks": {
        "task": "dintask.modules.scheduler.tasks.mark_overdue_tasks",
        "schedule": crontab(minute=settings.OVERDUE_CHECK_MINUTE),
    },
}
