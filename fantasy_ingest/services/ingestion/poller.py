"""
Completed-game poller.

Each cycle walks the configured regions in order, lists the games completed
since the watermark and runs every one of them through the ingestion
pipeline. Cycles never overlap: a tick that arrives while a cycle is still
running is skipped without touching the provider.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fantasy_ingest.config import Settings, get_settings
from fantasy_ingest.schemas.ingestion import PollSummary, RegionSummary
from fantasy_ingest.services.ingestion.game_catalog import GameCatalogFetcher
from fantasy_ingest.services.ingestion.pipeline import IngestionPipeline
from fantasy_ingest.services.ingestion.repository import IngestionRepository
from fantasy_ingest.utils.timestamps import as_utc, utcnow

logger = logging.getLogger(__name__)


class Poller:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher: GameCatalogFetcher | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.fetcher = fetcher or GameCatalogFetcher(settings=self.settings)
        self.clock = clock
        self.watermark: datetime | None = None
        self.in_flight = False

    async def init(self) -> datetime:
        """
        Load the watermark: newest pending_validation match, else now minus
        the initial lookback.
        """
        async with self.session_factory() as db:
            repository = IngestionRepository(db, video_game_id=self.settings.video_game_id)
            latest = await repository.latest_pending_match_created_at()

        if latest is not None:
            self.watermark = as_utc(latest)
        else:
            self.watermark = self.clock() - timedelta(hours=self.settings.initial_lookback_hours)
        logger.info(f"Initialized poll watermark: {self.watermark.isoformat()}")
        return self.watermark

    def reset(self) -> None:
        self.watermark = None
        self.in_flight = False

    async def poll_once(self) -> PollSummary | None:
        """Run one cycle. Returns None when a previous cycle is still running."""
        if self.in_flight:
            logger.info("Previous poll still in progress, skipping")
            return None

        self.in_flight = True
        try:
            return await self._poll()
        finally:
            self.in_flight = False

    async def _poll(self) -> PollSummary:
        summary = PollSummary(started_at=self.clock())
        logger.info("Starting completed game poll")

        if self.watermark is None:
            await self.init()
        since = self.watermark

        regions = self.settings.poll_regions
        async with self.session_factory() as db:
            pipeline = IngestionPipeline(db, fetcher=self.fetcher, settings=self.settings)
            for index, region in enumerate(regions):
                summary.regions.append(await self._poll_region(pipeline, region, since))

                if index < len(regions) - 1:
                    await self._pause(self.settings.inter_region_delay_seconds, "next region")

        self.watermark = self.clock()
        summary.finished_at = self.watermark
        summary.watermark = self.watermark

        logger.info(
            f"Poll complete: {summary.matches_processed}/{summary.matches_found} games processed, "
            f"{summary.matches_failed} failed, watermark={self.watermark.isoformat()}"
        )
        return summary

    async def backfill_region(self, region: str, since: datetime | None = None) -> RegionSummary:
        """
        Ingest a region's completed games outside the schedule.

        Without ``since`` the whole overview page is listed (up to the page
        size). The watermark is left alone.
        """
        async with self.session_factory() as db:
            pipeline = IngestionPipeline(db, fetcher=self.fetcher, settings=self.settings)
            summary = await self._poll_region(pipeline, region, since)

        logger.info(
            f"Backfill {region} complete: {summary.matches_processed}/{summary.matches_found} "
            f"games processed, {summary.matches_failed} failed"
        )
        return summary

    async def _poll_region(
        self, pipeline: IngestionPipeline, region: str, since: datetime | None
    ) -> RegionSummary:
        region_summary = RegionSummary(region=region)
        logger.info(
            f"Checking {region} for games completed since "
            f"{since.isoformat() if since else 'the start of the split'}"
        )

        try:
            matches = await self.fetcher.fetch_completed_matches(region, since)
        except Exception as e:
            logger.error(f"Error polling {region}: {e}", exc_info=True)
            return region_summary

        region_summary.matches_found = len(matches)
        if not matches:
            logger.debug(f"No new {region} games found")
            return region_summary

        logger.info(f"Found {len(matches)} new {region} games")
        for index, raw_match in enumerate(matches):
            result = await pipeline.process_match(raw_match)
            if result.success:
                region_summary.matches_processed += 1
            else:
                region_summary.matches_failed += 1
                logger.error(
                    f"Failed to process {region} game {result.external_id}: "
                    f"{result.reason.value if result.reason else 'unknown'} {result.error or ''}"
                )

            if index < len(matches) - 1:
                await self._pause(self.settings.inter_match_delay_seconds, "next game")

        return region_summary

    async def _pause(self, seconds: float, before: str) -> None:
        if seconds <= 0:
            return
        logger.debug(f"Waiting {seconds}s before {before}")
        await asyncio.sleep(seconds)
