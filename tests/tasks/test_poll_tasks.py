from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from celery.schedules import crontab

from fantasy_ingest.schemas.ingestion import PollSummary, RegionSummary
from fantasy_ingest.tasks import celery_app
from fantasy_ingest.tasks import poll_tasks
from fantasy_ingest.utils.async_celery import get_event_loop, run_async


class TestCeleryConfig:
    def test_beat_polls_every_ten_minutes_utc(self):
        entry = celery_app.conf.beat_schedule["poll-completed-matches-every-10min"]

        assert entry["task"] == "fantasy_ingest.tasks.poll_tasks.poll_once"
        assert entry["schedule"] == crontab(minute="*/10")
        assert celery_app.conf.timezone == "UTC"

    def test_single_worker_process(self):
        assert celery_app.conf.worker_concurrency == 1

    def test_tasks_registered(self):
        assert {
            "fantasy_ingest.tasks.poll_tasks.poll_once",
            "fantasy_ingest.tasks.poll_tasks.process_match",
            "fantasy_ingest.tasks.poll_tasks.backfill_region",
        } <= set(celery_app.tasks.keys())


class TestPollTasks:
    def test_poll_once_returns_summary(self):
        now = datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)
        summary = PollSummary(
            started_at=now,
            finished_at=now,
            watermark=now,
            regions=[RegionSummary(region="LPL", matches_found=2, matches_processed=2)],
        )
        poller = AsyncMock()
        poller.poll_once.return_value = summary

        with patch.object(poll_tasks, "get_poller", return_value=poller):
            result = poll_tasks.poll_once()

        assert result["regions"][0]["matches_processed"] == 2
        assert result["watermark"].startswith("2026-01-20T12:00:00")

    def test_poll_once_skipped_when_in_flight(self):
        poller = AsyncMock()
        poller.poll_once.return_value = None

        with patch.object(poll_tasks, "get_poller", return_value=poller):
            assert poll_tasks.poll_once() == {"skipped": True}

    def test_backfill_parses_since(self):
        poller = AsyncMock()
        poller.backfill_region.return_value = RegionSummary(region="LCK", matches_found=1)

        with patch.object(poll_tasks, "get_poller", return_value=poller):
            result = poll_tasks.backfill_region("LCK", "2026-01-20T00:00:00")

        poller.backfill_region.assert_awaited_once_with(
            "LCK", datetime(2026, 1, 20, tzinfo=timezone.utc)
        )
        assert result["matches_found"] == 1


class TestSharedEventLoop:
    def test_loop_is_reused(self):
        async def answer():
            return 42

        assert run_async(answer()) == 42
        assert get_event_loop() is get_event_loop()
