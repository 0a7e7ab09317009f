from datetime import datetime, timedelta, timezone

import pytest

from fantasy_ingest.services.ingestion.normalizer import (
    derive_region_code,
    extract_week_label,
    normalize_match,
    normalize_player_stat,
    normalize_team_stat,
    parse_counter,
    parse_duration,
    parse_timestamp,
)

from leaguepedia_rows import BLG, GAME_ID, TES, game_row, player_rows, team_rows


class TestFieldParsing:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("32:15", 1935),
            ("5:07", 307),
            (" 28:00 ", 1680),
            ("", 0),
            (None, 0),
            ("32m 15s", 0),
            ("1:2:3", 0),
            (1935, 0),
        ],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected

    def test_parse_timestamp_naive_is_utc(self):
        assert parse_timestamp("2026-01-20 09:05:00") == datetime(2026, 1, 20, 9, 5, tzinfo=timezone.utc)

    def test_parse_timestamp_keeps_offset(self):
        parsed = parse_timestamp("2026-01-20T17:05:00+08:00")
        assert parsed.utcoffset() == timedelta(hours=8)
        assert parsed == datetime(2026, 1, 20, 9, 5, tzinfo=timezone.utc)

    def test_parse_timestamp_zulu_suffix(self):
        assert parse_timestamp("2026-01-20T09:05:00Z") == datetime(2026, 1, 20, 9, 5, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2026-13-45 99:00:00"])
    def test_parse_timestamp_unparseable(self, value):
        assert parse_timestamp(value) is None

    def test_extract_week_label(self):
        assert extract_week_label(GAME_ID) == "Week 3"
        assert extract_week_label("LPL/2026 Season/Split 1_Week 03_1_1") == "Week 3"
        assert extract_week_label("LPL/2026 Season/Playoffs_Round 1_1_1") is None
        assert extract_week_label(None) is None

    def test_derive_region_code(self):
        assert derive_region_code("LPL/2026 Season/Split 1") == "LPL"
        assert derive_region_code("LCK") == "LCK"
        assert derive_region_code("") is None
        assert derive_region_code(None) is None

    @pytest.mark.parametrize(
        "value,expected",
        [("7", 7), ("12 (3)", 12), ("-2", -2), ("", 0), (None, 0), ("n/a", 0), (4, 4), (3.9, 3)],
    )
    def test_parse_counter(self, value, expected):
        assert parse_counter(value) == expected


class TestNormalizeMatch:
    def test_full_row(self):
        record = normalize_match(game_row())

        assert record.external_id == GAME_ID
        assert record.region == "LPL"
        assert record.week == "Week 3"
        assert record.duration_seconds == 1935
        assert record.duration_minutes == pytest.approx(32.25)
        assert record.occurred_at == datetime(2026, 1, 20, 9, 5, tzinfo=timezone.utc)
        assert record.patch_version == "26.01"
        assert record.winning_team == BLG

    def test_underscore_datetime_key(self):
        row = game_row()
        row["DateTime_UTC"] = row.pop("DateTime UTC")
        assert normalize_match(row).occurred_at is not None

    def test_bad_duration_means_unknown(self):
        record = normalize_match(game_row(gamelength="??"))
        assert record.duration_seconds == 0
        assert record.duration_minutes is None

    def test_missing_game_id_is_dropped(self):
        row = game_row()
        del row["GameId"]
        assert normalize_match(row) is None

    def test_winner_as_team_name(self):
        assert normalize_match(game_row(winner=TES)).winning_team == TES


class TestNormalizeStats:
    def test_player_row(self):
        record = normalize_player_stat(player_rows()[0])

        assert record.player_name == "blg_top"
        assert record.team == BLG
        assert record.role == "Top"
        assert (record.kills, record.deaths, record.assists) == (3, 2, 5)
        assert record.cs == 220
        assert record.vision_score == 30
        assert record.damage == 18000

    @pytest.mark.parametrize("missing", ["GameId", "Link", "Team"])
    def test_player_row_missing_required_field(self, missing):
        row = player_rows()[0]
        row[missing] = ""
        assert normalize_player_stat(row) is None

    def test_team_row_win_flag_from_side_index(self):
        match = normalize_match(game_row(winner="1"))
        blg, tes = (normalize_team_stat(row, match) for row in team_rows())

        assert blg.won is True
        assert tes.won is False
        assert blg.turrets == 9
        assert blg.total_kills == 15

    def test_team_row_win_flag_from_team_name(self):
        match = normalize_match(game_row(winner=TES))
        blg, tes = (normalize_team_stat(row, match) for row in team_rows())

        assert blg.won is False
        assert tes.won is True

    def test_team_row_without_winner(self):
        match = normalize_match(game_row(winner=""))
        assert all(not normalize_team_stat(row, match).won for row in team_rows())

    def test_team_row_missing_team_is_dropped(self):
        match = normalize_match(game_row())
        row = team_rows()[0]
        del row["Team"]
        assert normalize_team_stat(row, match) is None
