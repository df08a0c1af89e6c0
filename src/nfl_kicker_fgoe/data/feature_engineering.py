"""
Feature engineering module for the expected-field-goal model.

Builds the situational and environmental covariates for every field goal
attempt. Weather readings are imputed in two phases: an ``ImputationContext`` is
computed once over the whole dataset, then applied row by row.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np
import pandas as pd

from nfl_kicker_fgoe.config import config
from nfl_kicker_fgoe.data.feature_schema import NO, YES, to_flag
from nfl_kicker_fgoe.errors import DataPreconditionError, ImputationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "game_id", "posteam", "defteam", "home_team", "kicker_player_name",
    "kick_distance", "qtr", "score_differential", "field_goal_result",
]

# ───────────────────────── precipitation rules ─────────────────────────
# Evaluated top-down against (weather text, roof); the first match wins.
Predicate = Callable[[str, str], bool]


def _roof_is(*roofs: str) -> Predicate:
    return lambda weather, roof: roof in roofs


def _weather_has(*phrases: str) -> Predicate:
    return lambda weather, roof: any(p in weather for p in phrases)


def _weather_matches(pattern: str) -> Predicate:
    regex = re.compile(pattern)
    return lambda weather, roof: regex.search(weather) is not None


# "40% chance of rain", "rain chance 40%"; the percentage is optional
_FORECAST = re.compile(
    r"(?:\d+\s*%\s*)?(?:chance of (?:rain|showers|snow|precip\w*)|(?:rain|snow) chance)(?:\s*\d+\s*%)?"
)
_PRECIP_WORDS = re.compile(r"rain|snow|flurries|sleet|hail|wintry mix|showers|drizzle|thunder|storm")


def _forecast_only(weather: str, roof: str) -> bool:
    """A chance-of forecast with no precipitation reported outside it."""
    if _FORECAST.search(weather) is None:
        return False
    return _PRECIP_WORDS.search(_FORECAST.sub(" ", weather)) is None


PRECIP_RULES: List[Tuple[Predicate, str]] = [
    (_roof_is(*config.INDOOR_ROOFS), NO),
    (_weather_has("no rain", "no precip", "no snow"), NO),
    (_weather_matches(r"(?<![\d.])0\s*% chance"), NO),
    (_forecast_only, NO),
    (_weather_has("snow", "flurries", "sleet", "hail", "wintry mix"), YES),
    (_weather_has("showers", "drizzle", "thunder", "storm"), YES),
    (_weather_has("rain"), YES),
]


def _normalize_text(value) -> str:
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return ""
    return str(value).strip().lower()


def classify_precipitation(weather, roof) -> str:
    """Resolve the Yes/No precipitation flag for one weather string and roof."""
    weather, roof = _normalize_text(weather), _normalize_text(roof)
    for predicate, result in PRECIP_RULES:
        if predicate(weather, roof):
            return result
    return NO


# ───────────────────────── parsing helpers ─────────────────────────
def parse_reading(values: pd.Series) -> pd.Series:
    """Numeric parse of a temperature/wind column; blanks and junk become NaN."""
    return pd.to_numeric(values.astype(str).str.strip(), errors="coerce").astype(float)


def clock_to_seconds(clock: pd.Series) -> pd.Series:
    """Convert ``MM:SS`` game-clock strings to seconds left in the period."""
    parts = clock.astype(str).str.strip().str.split(":", n=1, expand=True)
    if parts.shape[1] < 2:
        return pd.Series(np.nan, index=clock.index)
    minutes = pd.to_numeric(parts[0], errors="coerce")
    seconds = pd.to_numeric(parts[1], errors="coerce")
    return (minutes * 60 + seconds).astype(float)


def indoor_mask(df: pd.DataFrame) -> pd.Series:
    """True where the roof is enclosed; any other roof (or none) is open-air."""
    if "roof" not in df.columns:
        return pd.Series(False, index=df.index)
    return df["roof"].map(_normalize_text).isin(config.INDOOR_ROOFS)


# ───────────────────────── imputation context ─────────────────────────
@dataclass(frozen=True)
class ImputationContext:
    """Dataset-wide means of open-air weather readings."""
    temp_mean: float
    wind_mean: float
    temp_count: int = 0
    wind_count: int = 0

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "ImputationContext":
        """Pass 1: average every non-missing open-air reading."""
        open_air = ~indoor_mask(df)
        stats = {}
        for col in ("temp", "wind"):
            if col in df.columns:
                readings = parse_reading(df.loc[open_air, col]).dropna()
            else:
                readings = pd.Series(dtype=float)
            stats[col] = (float(readings.mean()) if len(readings) else float("nan"), len(readings))
        ctx = cls(temp_mean=stats["temp"][0], wind_mean=stats["wind"][0],
                  temp_count=stats["temp"][1], wind_count=stats["wind"][1])
        logger.info("Open-air means: temp=%.1f (n=%d), wind=%.1f (n=%d)",
                    ctx.temp_mean, ctx.temp_count, ctx.wind_mean, ctx.wind_count)
        return ctx

    def mean_for(self, col: str) -> float:
        return {"temp": self.temp_mean, "wind": self.wind_mean}[col]


# ───────────────────────── feature engineer ─────────────────────────
class FeatureEngineer:
    """Handles all feature engineering operations."""

    def __init__(self, *, indoor_temp: float = config.INDOOR_TEMP,
                 indoor_wind: float = config.INDOOR_WIND):
        self.indoor_defaults = {"temp": float(indoor_temp), "wind": float(indoor_wind)}
        self.context: ImputationContext | None = None

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    def validate_preconditions(self, df: pd.DataFrame) -> pd.DataFrame:
        """Reject frames the loader should never have produced."""
        missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing_cols:
            raise DataPreconditionError(f"Missing required columns: {missing_cols}")

        if "play_type" in df.columns:
            other = (df["play_type"] != config.FIELD_GOAL_PLAY).sum()
            if other:
                raise DataPreconditionError(f"{other} rows are not field goal attempts")

        result = df["field_goal_result"]
        if result.isna().any():
            raise DataPreconditionError(
                f"{int(result.isna().sum())} attempts have no field_goal_result")
        blocked = (result == config.RESULT_BLOCKED).sum()
        if blocked:
            raise DataPreconditionError(f"{blocked} blocked attempts were not filtered out")
        unknown = sorted(set(result) - {config.RESULT_MADE, config.RESULT_MISSED})
        if unknown:
            raise DataPreconditionError(f"Unexpected field_goal_result values: {unknown}")

        if df["kick_distance"].isna().any():
            raise DataPreconditionError(
                f"{int(df['kick_distance'].isna().sum())} attempts have no kick_distance")
        return df

    # ------------------------------------------------------------------
    # Target / identifiers
    # ------------------------------------------------------------------
    def create_target_variable(self, df: pd.DataFrame) -> pd.DataFrame:
        """Create binary made target variable."""
        df = df.copy()
        df["made"] = (df["field_goal_result"] == config.RESULT_MADE).astype(int)
        logger.info("Created target variable: %.1f%% make rate", 100 * df["made"].mean())
        return df

    def create_season(self, df: pd.DataFrame) -> pd.DataFrame:
        """Season is the leading four characters of the nflverse game_id."""
        df = df.copy()
        df["season"] = df["game_id"].astype(str).str[:4].astype(int)
        return df

    def create_distance(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["distance"] = df["kick_distance"].astype(float)
        return df

    # ------------------------------------------------------------------
    # Situational features
    # ------------------------------------------------------------------
    def create_situational_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Adds game-state flags.

        • div_game     – kicking and opposing teams share a division
        • tie_or_lead  – a make ties the game or takes the lead
        • game_winner  – late in the 4th/OT and a make puts the team ahead
        • road         – kicking team is the visitor
        """
        df = df.copy()
        pos_div = df["posteam"].map(config.TEAM_DIVISION)
        def_div = df["defteam"].map(config.TEAM_DIVISION)
        df["div_game"] = to_flag(pos_div.notna() & (pos_div == def_div))

        diff = pd.to_numeric(df["score_differential"], errors="coerce")
        lo, hi = config.TIE_OR_LEAD_MARGIN
        df["tie_or_lead"] = to_flag(diff.between(lo, hi))

        if "time" in df.columns:
            clock = clock_to_seconds(df["time"])
        elif "quarter_seconds_remaining" in df.columns:
            clock = pd.to_numeric(df["quarter_seconds_remaining"], errors="coerce")
        else:
            clock = pd.Series(np.nan, index=df.index)
        lo, hi = config.GAME_WINNER_MARGIN
        late = (pd.to_numeric(df["qtr"], errors="coerce") >= config.LATE_GAME_QUARTER) & \
               (clock <= config.LATE_GAME_SECONDS)
        df["game_winner"] = to_flag(late & diff.between(lo, hi))

        df["road"] = to_flag(df["posteam"] != df["home_team"])
        logger.info("Created situational features: %d game-winning attempts, %d division games",
                    (df["game_winner"] == YES).sum(), (df["div_game"] == YES).sum())
        return df

    # ------------------------------------------------------------------
    # Venue / weather features
    # ------------------------------------------------------------------
    def create_venue_features(self, df: pd.DataFrame) -> pd.DataFrame:
        """Indoor, altitude and natural-grass flags."""
        df = df.copy()
        df["indoor"] = to_flag(indoor_mask(df))

        altitude = df["home_team"].isin(config.ALTITUDE_TEAMS)
        if "stadium" in df.columns:
            stadium = df["stadium"].map(_normalize_text)
            for name in config.ALTITUDE_STADIUMS:
                altitude |= stadium.str.contains(name, regex=False)
        df["altitude"] = to_flag(altitude)

        if "surface" in df.columns:
            grass = df["surface"].map(_normalize_text).isin(config.NATURAL_SURFACES)
        else:
            grass = pd.Series(False, index=df.index)
        df["grass"] = to_flag(grass)
        return df

    def create_precipitation_feature(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the ordered precipitation rules to every attempt."""
        df = df.copy()
        weather = df["weather"] if "weather" in df.columns else pd.Series("", index=df.index)
        roof = df["roof"] if "roof" in df.columns else pd.Series("", index=df.index)
        flags = [classify_precipitation(w, r) for w, r in zip(weather, roof)]
        df["precip"] = to_flag(pd.Series(flags, index=df.index) == YES)
        logger.info("Created precipitation flag: %d attempts in precipitation",
                    (df["precip"] == YES).sum())
        return df

    def impute_weather_readings(self, df: pd.DataFrame,
                                context: ImputationContext) -> pd.DataFrame:
        """
        Pass 2: resolve every temp/wind reading.

        Indoor and missing → fixed default; open-air and missing → dataset mean;
        present → the parsed reading.
        """
        df = df.copy()
        indoor = indoor_mask(df)
        for col in ("temp", "wind"):
            if col in df.columns:
                values = parse_reading(df[col])
            else:
                values = pd.Series(np.nan, index=df.index)
            missing = values.isna()
            open_missing = missing & ~indoor
            mean = context.mean_for(col)
            if open_missing.any() and np.isnan(mean):
                raise ImputationError(
                    f"{int(open_missing.sum())} open-air attempts lack a {col} reading "
                    f"and no open-air {col} readings exist to average")
            values = values.mask(missing & indoor, self.indoor_defaults[col])
            values = values.mask(open_missing, mean)
            df[col] = values
            logger.info("Imputed %s: %d indoor defaults, %d open-air means",
                        col, int((missing & indoor).sum()), int(open_missing.sum()))
        return df

    # ------------------------------------------------------------------
    # Orchestration: build *all* features
    # ------------------------------------------------------------------
    def create_all_features(self, df: pd.DataFrame,
                            context: ImputationContext | None = None) -> pd.DataFrame:
        """Return one engineered row per attempt, in input order."""
        self.validate_preconditions(df)
        self.context = context if context is not None else ImputationContext.from_frame(df)
        out = (
            df.pipe(self.create_target_variable)
              .pipe(self.create_season)
              .pipe(self.create_distance)
              .pipe(self.create_situational_features)
              .pipe(self.create_venue_features)
              .pipe(self.create_precipitation_feature)
              .pipe(self.impute_weather_readings, self.context)
        )
        logger.info("All features created! Dataset shape: %s", out.shape)
        return out


def build_features(df: pd.DataFrame,
                   context: ImputationContext | None = None) -> pd.DataFrame:
    """Module-level convenience wrapper around ``FeatureEngineer.create_all_features``."""
    return FeatureEngineer().create_all_features(df, context)
