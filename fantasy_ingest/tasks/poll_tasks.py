import logging
from datetime import datetime

from celery.signals import worker_ready, worker_shutdown

from fantasy_ingest.tasks import celery_app
from fantasy_ingest.database import AsyncSessionLocal
from fantasy_ingest.services.ingestion import IngestionPipeline, Poller
from fantasy_ingest.services.leaguepedia_client import get_leaguepedia_client
from fantasy_ingest.utils.async_celery import run_async, cleanup_event_loop
from fantasy_ingest.utils.timestamps import as_utc
from fantasy_ingest.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_poller: Poller | None = None


def get_poller() -> Poller:
    """Process-wide poller; its watermark and in-flight flag persist across ticks."""
    global _poller
    if _poller is None:
        _poller = Poller(AsyncSessionLocal, settings=settings)
    return _poller


async def _poll_once():
    summary = await get_poller().poll_once()
    if summary is None:
        return {"skipped": True}
    return summary.model_dump(mode="json")


async def _process_match(external_id: str):
    async with AsyncSessionLocal() as db:
        pipeline = IngestionPipeline(db, settings=settings)
        result = await pipeline.process_external_id(external_id)
        return result.model_dump(mode="json")


async def _backfill_region(region: str, since: str | None):
    since_dt = as_utc(datetime.fromisoformat(since)) if since else None
    summary = await get_poller().backfill_region(region, since_dt)
    return summary.model_dump(mode="json")


@celery_app.task(name="fantasy_ingest.tasks.poll_tasks.poll_once")
def poll_once():
    """Celery task: Poll every region for newly completed games."""
    return run_async(_poll_once())


@celery_app.task(name="fantasy_ingest.tasks.poll_tasks.process_match")
def process_match(external_id: str):
    """Celery task: Ingest a single game by its Leaguepedia GameId."""
    return run_async(_process_match(external_id))


@celery_app.task(name="fantasy_ingest.tasks.poll_tasks.backfill_region")
def backfill_region(region: str, since: str | None = None):
    """Celery task: Ingest a region's completed games, optionally since an ISO timestamp."""
    return run_async(_backfill_region(region, since))


@worker_ready.connect
def poll_on_startup(sender=None, **kwargs):
    if not settings.poll_enabled:
        return
    logger.info("Worker ready, queueing initial poll")
    poll_once.delay()


@worker_shutdown.connect
def close_provider_client(sender=None, **kwargs):
    run_async(get_leaguepedia_client().aclose())
    cleanup_event_loop()
