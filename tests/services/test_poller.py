from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, call, patch

import pytest

from fantasy_ingest.exceptions import ProviderTransient
from fantasy_ingest.models import Match, MatchStatus
from fantasy_ingest.services.ingestion.poller import Poller

from leaguepedia_rows import game_row, player_rows, team_rows

NOW = datetime(2026, 1, 20, 12, 0, tzinfo=timezone.utc)


def _fetcher(matches_by_region: dict[str, list[dict]] | None = None) -> SimpleNamespace:
    matches_by_region = matches_by_region or {}

    async def fetch_completed_matches(region, since=None):
        return matches_by_region.get(region, [])

    async def fetch_player_stats(external_id):
        return player_rows(external_id)

    async def fetch_team_stats(external_id):
        return team_rows(external_id)

    return SimpleNamespace(
        fetch_completed_matches=AsyncMock(side_effect=fetch_completed_matches),
        fetch_player_stats=AsyncMock(side_effect=fetch_player_stats),
        fetch_team_stats=AsyncMock(side_effect=fetch_team_stats),
    )


def _poller(session_factory, test_settings, fetcher) -> Poller:
    return Poller(session_factory, fetcher=fetcher, settings=test_settings, clock=lambda: NOW)


@pytest.mark.asyncio
class TestPollerWatermark:
    async def test_init_defaults_to_lookback(self, session_factory, test_settings):
        poller = _poller(session_factory, test_settings, _fetcher())

        watermark = await poller.init()

        assert watermark == NOW - timedelta(hours=24)

    async def test_init_uses_latest_pending_match(self, session_factory, test_session, test_settings):
        created = datetime(2026, 1, 19, 8, 30, tzinfo=timezone.utc)
        test_session.add_all([
            Match(external_id="old", status=MatchStatus.pending_validation,
                  created_at=created - timedelta(days=2)),
            Match(external_id="new", status=MatchStatus.pending_validation, created_at=created),
            Match(external_id="done", status=MatchStatus.validated,
                  created_at=created + timedelta(hours=5)),
        ])
        await test_session.commit()

        poller = _poller(session_factory, test_settings, _fetcher())

        assert await poller.init() == created

    async def test_cycle_advances_watermark_to_now(self, session_factory, test_settings, roles):
        fetcher = _fetcher()
        poller = _poller(session_factory, test_settings, fetcher)

        summary = await poller.poll_once()

        assert poller.watermark == NOW
        assert summary.watermark == NOW
        first_since = fetcher.fetch_completed_matches.await_args_list[0].args[1]
        assert first_since == NOW - timedelta(hours=24)

    async def test_next_cycle_uses_previous_watermark(self, session_factory, test_settings, roles):
        fetcher = _fetcher()
        times = iter([NOW, NOW + timedelta(minutes=1), NOW + timedelta(minutes=10),
                      NOW + timedelta(minutes=11)])
        poller = Poller(session_factory, fetcher=fetcher, settings=test_settings, clock=lambda: next(times))
        poller.watermark = NOW - timedelta(hours=1)

        await poller.poll_once()
        await poller.poll_once()

        sinces = [c.args[1] for c in fetcher.fetch_completed_matches.await_args_list]
        assert sinces == [
            NOW - timedelta(hours=1),
            NOW - timedelta(hours=1),
            NOW + timedelta(minutes=1),
            NOW + timedelta(minutes=1),
        ]

    async def test_reset(self, session_factory, test_settings):
        poller = _poller(session_factory, test_settings, _fetcher())
        poller.watermark = NOW
        poller.in_flight = True

        poller.reset()

        assert poller.watermark is None
        assert poller.in_flight is False


@pytest.mark.asyncio
class TestPollOnce:
    async def test_in_flight_cycle_is_skipped(self, session_factory, test_settings):
        fetcher = _fetcher()
        poller = _poller(session_factory, test_settings, fetcher)
        poller.in_flight = True

        assert await poller.poll_once() is None
        fetcher.fetch_completed_matches.assert_not_awaited()

    async def test_in_flight_flag_cleared_after_cycle(self, session_factory, test_settings, roles):
        poller = _poller(session_factory, test_settings, _fetcher())

        await poller.poll_once()

        assert poller.in_flight is False

    async def test_regions_polled_in_order(self, session_factory, test_settings, roles):
        fetcher = _fetcher()
        poller = _poller(session_factory, test_settings, fetcher)

        summary = await poller.poll_once()

        regions = [c.args[0] for c in fetcher.fetch_completed_matches.await_args_list]
        assert regions == ["LPL", "LCK"]
        assert [r.region for r in summary.regions] == ["LPL", "LCK"]

    async def test_counts_processed_and_failed(self, session_factory, test_settings, roles):
        bad = game_row("LPL/2026 Season/Split 1_Week 3_11_1")
        fetcher = _fetcher({
            "LPL": [game_row("LPL/2026 Season/Split 1_Week 3_10_1"), bad],
            "LCK": [game_row("LCK/2026 Season/Split 1_Week 3_1_1")],
        })
        original = fetcher.fetch_player_stats.side_effect

        async def flaky_player_stats(external_id):
            if external_id == bad["GameId"]:
                raise ProviderTransient("timeout")
            return await original(external_id)

        fetcher.fetch_player_stats.side_effect = flaky_player_stats
        poller = _poller(session_factory, test_settings, fetcher)

        summary = await poller.poll_once()

        assert summary.matches_found == 3
        assert summary.matches_processed == 2
        assert summary.matches_failed == 1
        lpl, lck = summary.regions
        assert (lpl.matches_found, lpl.matches_processed, lpl.matches_failed) == (2, 1, 1)
        assert (lck.matches_found, lck.matches_processed, lck.matches_failed) == (1, 1, 0)

    async def test_region_error_does_not_stop_cycle(self, session_factory, test_settings, roles):
        fetcher = _fetcher({"LCK": [game_row("LCK/2026 Season/Split 1_Week 1_1_1")]})
        original = fetcher.fetch_completed_matches.side_effect

        async def broken_lpl(region, since=None):
            if region == "LPL":
                raise RuntimeError("unexpected payload")
            return await original(region, since)

        fetcher.fetch_completed_matches.side_effect = broken_lpl
        poller = _poller(session_factory, test_settings, fetcher)

        summary = await poller.poll_once()

        assert summary.matches_processed == 1
        assert poller.watermark == NOW

    async def test_pacing_between_matches_and_regions(self, session_factory, test_settings, roles):
        test_settings.inter_match_delay_seconds = 3.0
        test_settings.inter_region_delay_seconds = 5.0
        fetcher = _fetcher({
            "LPL": [game_row("LPL_a"), game_row("LPL_b"), game_row("LPL_c")],
        })
        poller = _poller(session_factory, test_settings, fetcher)

        with patch.object(Poller, "_pause", new=AsyncMock()) as pause_mock:
            await poller.poll_once()

        assert pause_mock.await_args_list == [
            call(3.0, "next game"),
            call(3.0, "next game"),
            call(5.0, "next region"),
        ]

    async def test_pause_sleeps_for_positive_delay(self, session_factory, test_settings, monkeypatch):
        sleep_mock = AsyncMock()
        monkeypatch.setattr("fantasy_ingest.services.ingestion.poller.asyncio.sleep", sleep_mock)
        poller = _poller(session_factory, test_settings, _fetcher())

        await poller._pause(3.0, "next game")
        await poller._pause(0, "next game")

        sleep_mock.assert_awaited_once_with(3.0)


@pytest.mark.asyncio
class TestBackfillRegion:
    async def test_processes_region_without_moving_watermark(self, session_factory, test_settings, roles):
        fetcher = _fetcher({"LEC": [game_row("LEC/2026 Season/Split 1_Week 1_1_1")]})
        poller = _poller(session_factory, test_settings, fetcher)

        summary = await poller.backfill_region("LEC")

        assert summary.region == "LEC"
        assert summary.matches_processed == 1
        assert poller.watermark is None
        fetcher.fetch_completed_matches.assert_awaited_once_with("LEC", None)
