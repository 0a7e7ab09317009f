"""Cargo rows shaped like the Leaguepedia Scoreboard tables."""

GAME_ID = "LPL/2026 Season/Split 1_Week 3_10_2"

BLG = "Bilibili Gaming"
TES = "Top Esports"

_ROLES = ["Top", "Jungle", "Mid", "Bot", "Support"]


def game_row(game_id: str = GAME_ID, winner: str = "1", gamelength: str = "32:15") -> dict:
    return {
        "GameId": game_id,
        "Tournament": "LPL 2026 Split 1",
        "DateTime UTC": "2026-01-20 09:05:00",
        "Team1": BLG,
        "Team2": TES,
        "Winner": winner,
        "Gamelength": gamelength,
        "OverviewPage": "LPL/2026 Season/Split 1",
        "Team1Score": "1",
        "Team2Score": "0",
        "Patch": "26.01",
    }


def player_rows(game_id: str = GAME_ID, kills: int = 3) -> list[dict]:
    rows = []
    for prefix, team in (("blg", BLG), ("tes", TES)):
        for role in _ROLES:
            rows.append({
                "GameId": game_id,
                "Link": f"{prefix}_{role.lower()}",
                "Team": team,
                "Role": role,
                "Champion": "Ahri",
                "Kills": str(kills),
                "Deaths": "2",
                "Assists": "5",
                "Gold": "11000",
                "CS": "220",
                "DamageToChampions": "18000",
                "VisionScore": "30",
            })
    return rows


def team_rows(game_id: str = GAME_ID) -> list[dict]:
    return [
        {
            "GameId": game_id, "Team": BLG, "Dragons": "4", "RiftHeralds": "1",
            "VoidGrubs": "3", "Atakhans": "1", "Barons": "1", "Towers": "9",
            "Inhibitors": "2", "Kills": "15",
        },
        {
            "GameId": game_id, "Team": TES, "Dragons": "1", "RiftHeralds": "0",
            "VoidGrubs": "3", "Atakhans": "0", "Barons": "0", "Towers": "3",
            "Inhibitors": "0", "Kills": "15",
        },
    ]
