"""
Data loading module for the expected-field-goal pipeline.
Fetches nflverse play-by-play, caches field goal plays, and applies the
attempt filters every downstream stage relies on.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import pandas as pd

from nfl_kicker_fgoe.config import config

logger = logging.getLogger(__name__)

PbpFetcher = Callable[..., pd.DataFrame]


def _nfl_data_py_fetcher() -> PbpFetcher:
    try:
        from nfl_data_py import import_pbp_data
    except ImportError as exc:
        raise ImportError(
            "nfl_data_py is required to download play-by-play data. "
            "Install it with `pip install nfl-kicker-fgoe[remote]` or load a cached CSV."
        ) from exc
    return import_pbp_data


class DataLoader:
    """Handles fetching, caching and filtering of field goal attempts."""

    def __init__(self, *, cache_dir: Optional[Path] = None,
                 fetcher: Optional[PbpFetcher] = None):
        """
        Args:
            cache_dir: Where downloaded field goal plays are cached as CSV
            fetcher: Callable with the ``nfl_data_py.import_pbp_data`` signature
        """
        self.cache_dir = Path(cache_dir) if cache_dir is not None else config.RAW_DATA_DIR
        self._fetcher = fetcher
        self.raw_df: pd.DataFrame | None = None
        self.attempts_df: pd.DataFrame | None = None

    def cache_path(self, seasons: Iterable[int]) -> Path:
        """
        One cache file per distinct season set.

        A contiguous run is named by its bounds (``2013-2024``); anything else
        lists every season (``2013_2020``).
        """
        seasons = sorted({int(s) for s in seasons})
        if seasons == list(range(seasons[0], seasons[-1] + 1)):
            label = f"{seasons[0]}-{seasons[-1]}"
        else:
            label = "_".join(str(s) for s in seasons)
        return self.cache_dir / f"pbp_field_goals_{label}.csv"

    def load_pbp(self, seasons: Optional[List[int]] = None, *,
                 use_cache: bool = True) -> pd.DataFrame:
        """
        Load field goal plays for *seasons*, downloading on a cache miss.

        Args:
            seasons: Seasons to load (defaults to ``config.SEASONS``)
            use_cache: Reuse and refresh the CSV cache

        Returns:
            DataFrame of field goal plays restricted to ``config.PBP_COLUMNS``
        """
        seasons = list(seasons) if seasons is not None else list(config.SEASONS)
        if not seasons:
            raise ValueError("At least one season is required")
        path = self.cache_path(seasons)

        if use_cache and path.exists():
            logger.info("Loading cached field goal plays from %s", path)
            return self.load_csv(path)

        fetch = self._fetcher or _nfl_data_py_fetcher()
        logger.info("Downloading nflverse play-by-play for seasons %s", sorted(seasons))
        pbp = fetch(seasons, columns=config.PBP_COLUMNS, downcast=True)
        missing = [c for c in config.PBP_COLUMNS if c not in pbp.columns]
        if missing:
            logger.warning("Play-by-play is missing columns %s", missing)
        keep = [c for c in config.PBP_COLUMNS if c in pbp.columns]
        fg = pbp.loc[pbp["play_type"] == config.FIELD_GOAL_PLAY, keep].reset_index(drop=True)

        if use_cache:
            path.parent.mkdir(parents=True, exist_ok=True)
            fg.to_csv(path, index=False)
            logger.info("Cached %d field goal plays → %s", len(fg), path)
        self.raw_df = fg
        return fg

    def load_csv(self, filepath: Path | str) -> pd.DataFrame:
        """
        Load play-by-play rows from a CSV file.

        Args:
            filepath: Path to a play-by-play CSV

        Returns:
            DataFrame with the file's rows
        """
        try:
            self.raw_df = pd.read_csv(filepath, dtype={"time": str, "weather": str})
        except FileNotFoundError:
            raise FileNotFoundError(f"Play-by-play file not found: {filepath}")
        logger.info("Loaded %d plays from %s", len(self.raw_df), filepath)
        return self.raw_df

    def filter_field_goals(self, df: pd.DataFrame | None = None) -> pd.DataFrame:
        """Keep non-blocked field goal attempts with a recorded result."""
        if df is None:
            df = self.raw_df
        if df is None:
            raise ValueError("No data loaded. Call load_pbp() or load_csv() first.")

        fg = df[df["play_type"] == config.FIELD_GOAL_PLAY]
        other = len(df) - len(fg)
        no_result = fg["field_goal_result"].isna()
        if no_result.any():
            logger.warning("Dropping %d field goal plays with no result", int(no_result.sum()))
        fg = fg[~no_result]
        blocked = fg["field_goal_result"] == config.RESULT_BLOCKED
        fg = fg[~blocked].reset_index(drop=True)
        logger.info("Filtered to %d field goal attempts (removed %d blocked, %d non-field-goal plays)",
                    len(fg), int(blocked.sum()), other)
        self.attempts_df = fg
        return fg

    def load_complete_dataset(self, seasons: Optional[List[int]] = None, *,
                              use_cache: bool = True) -> pd.DataFrame:
        """Load and filter the complete dataset in one call."""
        self.load_pbp(seasons, use_cache=use_cache)
        return self.filter_field_goals()

    def get_data_summary(self) -> dict:
        """
        Get summary statistics of the filtered attempts.

        Returns:
            Dictionary with data summary information
        """
        if self.attempts_df is None:
            raise ValueError("No data loaded. Call load_complete_dataset() first.")

        df = self.attempts_df
        seasons = df["game_id"].astype(str).str[:4].astype(int)
        return {
            "total_attempts": len(df),
            "unique_kickers": df["kicker_player_name"].nunique(),
            "unique_seasons": sorted(seasons.unique().tolist()),
            "outcome_counts": df["field_goal_result"].value_counts().to_dict(),
            "distance_range": (df["kick_distance"].min(), df["kick_distance"].max()),
        }


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s │ %(levelname)s │ %(message)s")
    loader = DataLoader()
    attempts = loader.load_complete_dataset()
    summary = loader.get_data_summary()
    print(f"Total attempts: {summary['total_attempts']:,}")
    print(f"Unique kickers: {summary['unique_kickers']}")
    print(f"Seasons: {summary['unique_seasons']}")
    print(f"Outcomes: {summary['outcome_counts']}")
