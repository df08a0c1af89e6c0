"""
Configuration module for the NFL expected-field-goal package.
Contains all constants, paths, and configuration parameters.
"""
from pathlib import Path
from typing import Dict, List


class Config:
    """Main configuration class for the xFG / FGOE package."""

    # Base paths - resolved relative to the project root so they work from any cwd
    _CONFIG_DIR = Path(__file__).parent.parent.parent  # Go up to project root
    PROJECT_ROOT = _CONFIG_DIR.resolve()

    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    PROCESSED_DATA_DIR = DATA_DIR / "processed"
    OUTPUT_DIR = PROJECT_ROOT / "output"
    FIGURES_DIR = OUTPUT_DIR / "figures"

    # Processed data / report files
    ENGINEERED_DATA_FILE = PROCESSED_DATA_DIR / "field_goal_engineered.csv"
    SCORED_DATA_FILE = PROCESSED_DATA_DIR / "field_goal_scored.csv"
    LEADERBOARD_FILE = OUTPUT_DIR / "fgoe_leaderboard.csv"
    LEADERBOARD_HTML_FILE = OUTPUT_DIR / "fgoe_leaderboard.html"

    # Seasons pulled from nflverse play-by-play
    SEASONS: List[int] = list(range(2013, 2025))
    REPORT_SEASON = 2024

    # Play-by-play columns the pipeline needs
    PBP_COLUMNS: List[str] = [
        "game_id", "play_type", "home_team", "posteam", "defteam",
        "kicker_player_name", "kick_distance", "qtr", "time",
        "score_differential", "field_goal_result",
        "roof", "surface", "weather", "temp", "wind", "stadium",
    ]

    # Field goal outcomes
    RESULT_MADE = "made"
    RESULT_MISSED = "missed"
    RESULT_BLOCKED = "blocked"
    FIELD_GOAL_PLAY = "field_goal"

    # Imputation defaults for enclosed venues
    INDOOR_TEMP = 70.0
    INDOOR_WIND = 0.0

    # Venue lookups
    INDOOR_ROOFS = ("dome", "closed")
    NATURAL_SURFACES = ("grass", "dessograss")
    ALTITUDE_TEAMS = ("DEN",)
    ALTITUDE_STADIUMS = ("azteca",)

    # Situational thresholds
    LATE_GAME_QUARTER = 4
    LATE_GAME_SECONDS = 120
    TIE_OR_LEAD_MARGIN = (-3, 0)
    GAME_WINNER_MARGIN = (-2, 0)

    # Model parameters
    XFG_COVARIATES: List[str] = ["distance", "game_winner", "wind", "precip"]
    FULL_COVARIATES: List[str] = [
        "distance", "div_game", "tie_or_lead", "game_winner", "road",
        "indoor", "altitude", "grass", "precip", "temp", "wind",
    ]
    TRAIN_FRAC = 0.8
    RANDOM_SEED = 2023
    DECISION_THRESHOLD = 0.5

    # Report settings
    TOP_N = 10
    DISPLAY_DECIMALS = 1
    FIGURE_SIZE = (12, 8)
    DPI = 150

    # Distance ranges for exploration
    DISTANCE_RANGES = [
        (18, 29, "Short (18-29 yards)"),
        (30, 39, "Medium-Short (30-39 yards)"),
        (40, 49, "Medium (40-49 yards)"),
        (50, 59, "Long (50-59 yards)"),
        (60, 75, "Extreme (60+ yards)"),
    ]

    @classmethod
    def ensure_directories(cls):
        """Create all required directories if they don't exist."""
        for dir_path in [cls.RAW_DATA_DIR, cls.PROCESSED_DATA_DIR,
                         cls.OUTPUT_DIR, cls.FIGURES_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Create global config instance
config = Config()

# ───────────────────────── Division alignment ─────────────────────────
# Relocated franchises keep their division under every historical code.
DIVISIONS: Dict[str, List[str]] = {
    "AFC East":  ["BUF", "MIA", "NE", "NYJ"],
    "AFC North": ["BAL", "CIN", "CLE", "PIT"],
    "AFC South": ["HOU", "IND", "JAX", "TEN"],
    "AFC West":  ["DEN", "KC", "LV", "OAK", "LAC", "SD"],
    "NFC East":  ["DAL", "NYG", "PHI", "WAS"],
    "NFC North": ["CHI", "DET", "GB", "MIN"],
    "NFC South": ["ATL", "CAR", "NO", "TB"],
    "NFC West":  ["ARI", "LA", "LAR", "STL", "SF", "SEA"],
}

TEAM_DIVISION: Dict[str, str] = {
    team: division for division, teams in DIVISIONS.items() for team in teams
}

# ───────────────────────── Feature catalogue ─────────────────────────
# Single source of truth for column roles
FEATURE_LISTS: Dict[str, List[str]] = {
    "numerical": ["distance", "temp", "wind"],
    "binary": [
        "div_game", "tie_or_lead", "game_winner", "road",
        "indoor", "altitude", "grass", "precip",
    ],
    "identifiers": ["game_id", "season", "kicker_player_name", "posteam"],
    "y_variable": ["made"],
}

# Attach lookups onto the config instance for ease of use
config.DIVISIONS = DIVISIONS
config.TEAM_DIVISION = TEAM_DIVISION
config.FEATURE_LISTS = FEATURE_LISTS

if __name__ == "__main__":
    print("NFL xFG Configuration")
    print("=" * 40)
    print(f"Data directory: {config.DATA_DIR}")
    print(f"Seasons: {config.SEASONS[0]}-{config.SEASONS[-1]}")
    print(f"xFG covariates: {config.XFG_COVARIATES}")
    print(f"Train fraction: {config.TRAIN_FRAC} (seed={config.RANDOM_SEED})")

    config.ensure_directories()
    print("******* Configuration loaded and directories created!")
