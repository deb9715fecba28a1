"""Celery worker configuration.

This module sets up Celery for background task processing:
- Best-effort notification emails
- Day-before event reminders
"""

from celery import Celery
from celery.schedules import crontab

from hallbook.config import settings

# Create Celery app
celery_app = Celery(
    "hallbook_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["hallbook.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.timezone,
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=120,  # 2 minutes max
    task_soft_time_limit=90,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        # Remind faculty of approved events happening tomorrow
        "send-event-reminders": {
            "task": "hallbook.tasks.send_event_reminders",
            "schedule": crontab(hour=settings.reminder_hour, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
