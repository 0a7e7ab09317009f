"""
Ingest every completed game of a region outside the poll schedule.

Lists the region's overview page (optionally only games since a timestamp)
and runs each game through the ingestion pipeline with the usual pacing.
The poller watermark is not changed.

Usage:
    python3 backfill_region.py --region LPL
    python3 backfill_region.py --region LCK --since 2026-01-20T00:00:00
    python3 backfill_region.py --game-id "LPL/2026 Season/Split 1_Week 1_1_1"
"""
import argparse
import asyncio
import logging
from datetime import datetime

from fantasy_ingest.database import AsyncSessionLocal
from fantasy_ingest.services.ingestion import IngestionPipeline, Poller
from fantasy_ingest.services.leaguepedia_client import get_leaguepedia_client
from fantasy_ingest.utils.timestamps import as_utc


async def main(region: str | None, since: datetime | None, game_id: str | None):
    client = get_leaguepedia_client()
    try:
        if game_id:
            async with AsyncSessionLocal() as db:
                result = await IngestionPipeline(db).process_external_id(game_id)
            status = "OK" if result.success else f"FAILED ({result.reason.value}: {result.error})"
            print(f"{game_id}: {status}")
            return

        summary = await Poller(AsyncSessionLocal).backfill_region(region, since)
        print(f"\n{'=' * 60}")
        print(f"Region:    {summary.region}")
        print(f"Found:     {summary.matches_found}")
        print(f"Processed: {summary.matches_processed}")
        print(f"Failed:    {summary.matches_failed}")
    finally:
        await client.aclose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Backfill completed games from Leaguepedia")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--region", help="Region code, e.g. LPL")
    target.add_argument("--game-id", help="Single Leaguepedia GameId")
    parser.add_argument("--since", help="ISO timestamp (UTC when no offset is given)")
    args = parser.parse_args()

    since = as_utc(datetime.fromisoformat(args.since)) if args.since else None
    asyncio.run(main(args.region, since, args.game_id))
