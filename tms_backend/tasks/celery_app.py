"""Celery app and scheduled academic status task."""

from datetime import datetime
from zoneinfo import ZoneInfo

from celery import Celery
from celery.schedules import crontab

from tms_backend.core.config import settings

celery_app = Celery(
    "tms",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_soft_time_limit=600,  # 10 min soft limit
    task_time_limit=900,  # 15 min hard limit
    beat_schedule={
        "update-academic-statuses": {
            "task": "update_academic_statuses",
            "schedule": crontab(hour=0, minute=0),
        },
    },
)


@celery_app.task(name="update_academic_statuses")
def update_academic_statuses() -> dict:
    """Daily run: start and complete courses/subjects by their dates."""
    from tms_backend.db.session import SessionLocal
    from tms_backend.services.course_service import update_academic_statuses as run_update

    today = datetime.now(ZoneInfo(settings.TIMEZONE)).date()
    db = SessionLocal()
    try:
        return run_update(db, today)
    finally:
        db.close()
