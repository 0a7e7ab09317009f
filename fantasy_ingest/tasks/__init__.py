from celery import Celery
from celery.schedules import crontab

from fantasy_ingest.config import get_settings

settings = get_settings()

celery_app = Celery(
    "fantasy_ingest_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["fantasy_ingest.tasks.poll_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Poller state (watermark, in-flight flag) lives in the worker process
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
)

if settings.poll_enabled:
    celery_app.conf.beat_schedule = {
        "poll-completed-matches-every-10min": {
            "task": "fantasy_ingest.tasks.poll_tasks.poll_once",
            "schedule": crontab(minute="*/10"),
        },
    }
else:
    celery_app.conf.beat_schedule = {}
