"""
Recompute fantasy_points for stored player and team rows.

Points are a pure function of the stored counters, the game duration and the
current scoring weights, so this is safe to run after changing weights.
Kill participation uses the sum of stored player kills per team and game.

Usage:
    python3 recalculate_fantasy_points.py --dry-run            # preview
    python3 recalculate_fantasy_points.py --apply              # apply
    python3 recalculate_fantasy_points.py --region LPL --apply
"""
import argparse
import asyncio
import logging
from collections import defaultdict
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from fantasy_ingest.database import AsyncSessionLocal
from fantasy_ingest.models import Match
from fantasy_ingest.services.scoring import score_player, score_team


async def main(region: str | None, apply: bool):
    async with AsyncSessionLocal() as session:
        query = select(Match).options(
            selectinload(Match.player_stats),
            selectinload(Match.team_stats),
        )
        if region:
            query = query.where(Match.region == region)
        matches = (await session.execute(query.order_by(Match.id))).scalars().all()
        print(f"Matches: {len(matches)}")

        changed = 0
        total = 0
        for match in matches:
            duration = match.duration_seconds / 60 if match.duration_seconds and match.duration_seconds > 0 else None

            kills_by_team: dict[int | None, int] = defaultdict(int)
            for row in match.player_stats:
                kills_by_team[row.team_id] += row.kills or 0

            for row in match.player_stats:
                points = score_player(row, kills_by_team[row.team_id], duration)
                total += 1
                if Decimal(str(points)) != Decimal(row.fantasy_points or 0):
                    changed += 1
                    print(f"  {match.external_id} player={row.player_id}: {row.fantasy_points} -> {points}")
                    row.fantasy_points = points

            for row in match.team_stats:
                points = score_team(row, duration)
                total += 1
                if Decimal(str(points)) != Decimal(row.fantasy_points or 0):
                    changed += 1
                    print(f"  {match.external_id} team={row.team_id}: {row.fantasy_points} -> {points}")
                    row.fantasy_points = points

        print(f"\nRows: {total}, changed: {changed}")

        if apply:
            await session.commit()
            print("Applied.")
        else:
            await session.rollback()
            print("Dry run, nothing written. Use --apply to save.")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Recalculate stored fantasy points")
    parser.add_argument("--region", help="Only matches of this region")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--dry-run", action="store_true")
    mode.add_argument("--apply", action="store_true")
    args = parser.parse_args()

    asyncio.run(main(args.region, args.apply))
