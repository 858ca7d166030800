"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging as celery_setup_logging

from assetwatch.core.config import settings
from assetwatch.core.logging import setup_logging

celery_app = Celery(
    "assetwatch",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "assetwatch.tasks.notifications",
    ],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # 30 minutes, a cycle walks every user sequentially
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's log format instead of Celery's."""
    setup_logging()


# Scheduled tasks (Celery Beat)
celery_app.conf.beat_schedule = {
    "update-assets-and-notify": {
        "task": "tasks.update_assets_and_notify",
        "schedule": crontab(minute=0, hour="*/4"),  # Every 4 hours on the hour
    },
    # === Periodic reports ===
    "send-weekly-reports": {
        "task": "tasks.send_periodic_reports",
        "schedule": crontab(minute=0, hour=9, day_of_week=1),  # Monday at 09:00 UTC
        "args": ("weekly",),
    },
    "send-monthly-reports": {
        "task": "tasks.send_periodic_reports",
        "schedule": crontab(minute=0, hour=9, day_of_month=1),  # 1st of month at 09:00 UTC
        "args": ("monthly",),
    },
    "send-quarterly-reports": {
        "task": "tasks.send_periodic_reports",
        "schedule": crontab(minute=0, hour=9, day_of_month=1, month_of_year="1,4,7,10"),
        "args": ("quarterly",),
    },
    "send-yearly-reports": {
        "task": "tasks.send_periodic_reports",
        "schedule": crontab(minute=0, hour=9, day_of_month=1, month_of_year=1),  # Jan 1st
        "args": ("yearly",),
    },
}
