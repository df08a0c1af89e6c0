# tests/conftest.py
from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

KICKERS = [
    ("J.Tucker", "BAL"),
    ("H.Butker", "KC"),
    ("E.McPherson", "CIN"),
    ("B.Aubrey", "DAL"),
    ("Y.Koo", "ATL"),
]
OPPONENTS = ["PIT", "CLE", "LV", "DEN", "NYG", "NO", "SEA", "MIA"]
OUTDOOR_WEATHER = ["Sunny", "Cloudy, chance of rain 30%", "Partly cloudy", "Clear", ""]


def build_attempts(n: int = 100, seed: int = 42, season: int = 2023) -> pd.DataFrame:
    """Synthetic nflverse-style field goal attempts for ``len(KICKERS)`` kickers."""
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n):
        kicker, team = KICKERS[i % len(KICKERS)]
        opp = OPPONENTS[int(rng.integers(len(OPPONENTS)))]
        home = team if rng.random() < 0.5 else opp
        away = opp if home == team else team
        roof = str(rng.choice(["outdoors", "dome", "closed", "open"], p=[0.6, 0.2, 0.1, 0.1]))

        # every fourth attempt is kicked outdoors in the rain
        if i % 4 == 1:
            roof, weather = "outdoors", "Light Rain, Temp: 48° F, Wind: 12 mph"
        elif roof in ("dome", "closed"):
            weather = str(rng.choice(["Controlled Climate", "Indoors", ""]))
        else:
            weather = OUTDOOR_WEATHER[int(rng.integers(len(OUTDOOR_WEATHER)))]

        indoor = roof in ("dome", "closed")
        temp = np.nan if indoor or rng.random() < 0.15 else float(rng.integers(20, 90))
        wind = np.nan if indoor or rng.random() < 0.15 else float(rng.integers(0, 20))

        # every fifth attempt is a late, close, go-ahead situation
        if i % 5 == 0:
            qtr, clock, diff = 4, "01:10", int(rng.integers(-2, 1))
        else:
            qtr = int(rng.integers(1, 5))
            clock = f"{int(rng.integers(0, 15)):02d}:{int(rng.integers(0, 60)):02d}"
            diff = int(rng.integers(-10, 11))

        distance = int(rng.integers(20, 58))
        wet = 0.4 if i % 4 == 1 else 0.0
        p_make = 1 / (1 + np.exp(-(6.0 - 0.11 * distance - 0.03 * np.nan_to_num(wind) - wet)))
        made = rng.random() < p_make
        if i % 20 == 0 or i % 16 == 1:
            made = False

        rows.append({
            "game_id": f"{season}_{1 + i // 7:02d}_{away}_{home}",
            "play_type": "field_goal",
            "home_team": home,
            "posteam": team,
            "defteam": opp,
            "kicker_player_name": kicker,
            "kick_distance": distance,
            "qtr": qtr,
            "time": clock,
            "score_differential": diff,
            "field_goal_result": "made" if made else "missed",
            "roof": roof,
            "surface": str(rng.choice(["grass", "fieldturf", "sportturf"])),
            "weather": weather,
            "temp": temp,
            "wind": wind,
            "stadium": "Empower Field at Mile High" if home == "DEN" else f"{home} Stadium",
        })
    return pd.DataFrame(rows)


def play(**overrides) -> dict:
    """One outdoor attempt with every required column; override what a test needs."""
    row = {
        "game_id": "2022_05_PIT_BAL",
        "play_type": "field_goal",
        "home_team": "BAL",
        "posteam": "BAL",
        "defteam": "PIT",
        "kicker_player_name": "J.Tucker",
        "kick_distance": 40,
        "qtr": 2,
        "time": "08:00",
        "score_differential": 7,
        "field_goal_result": "made",
        "roof": "outdoors",
        "surface": "grass",
        "weather": "Sunny",
        "temp": 60.0,
        "wind": 5.0,
        "stadium": "M&T Bank Stadium",
    }
    row.update(overrides)
    return row


@pytest.fixture
def attempts() -> pd.DataFrame:
    return build_attempts()


@pytest.fixture
def engineered(attempts):
    from nfl_kicker_fgoe.data.feature_engineering import FeatureEngineer
    return FeatureEngineer().create_all_features(attempts)
