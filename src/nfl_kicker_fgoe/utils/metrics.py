"""
Metrics utilities for the expected-field-goal pipeline.
"""
from __future__ import annotations

import logging
from typing import Dict

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    brier_score_loss,
    confusion_matrix,
    log_loss,
    roc_auc_score,
)

from nfl_kicker_fgoe.config import config

logger = logging.getLogger(__name__)

OUTCOME_LABELS = ["Missed", "Made"]


class FGOECalculator:
    """Aggregates scored attempts into Field Goals Over Expected per kicker."""

    def __init__(self, *, kicker_col: str = "kicker_player_name",
                 team_col: str = "posteam", xfg_col: str = "xfg"):
        self.kicker_col = kicker_col
        self.team_col = team_col
        self.xfg_col = xfg_col

    @staticmethod
    def season_from_game_id(game_id: pd.Series) -> pd.Series:
        """nflverse game ids start with the four-digit season (``2019_01_ARI_DET``)."""
        return game_id.astype(str).str[:4].astype(int)

    def _aggregate(self, scored: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
        missing = [c for c in [self.xfg_col, "made", self.kicker_col, self.team_col]
                   if c not in scored.columns]
        if missing:
            raise KeyError(f"Scored data is missing columns: {missing}")
        unkeyed = scored[keys].isna().any(axis=1)
        if unkeyed.any():
            logger.warning("Dropping %d scored attempts with no %s from the FGOE summary",
                           int(unkeyed.sum()), " / ".join(keys))
        summary = (
            scored.groupby(keys, sort=False, observed=True)
            .agg(attempts=("made", "size"),
                 makes=("made", "sum"),
                 xfg=(self.xfg_col, "sum"))
            .reset_index()
        )
        summary["fgoe"] = summary["makes"] - summary["xfg"]
        return summary

    def summarize_kicker_seasons(self, scored: pd.DataFrame) -> pd.DataFrame:
        """
        One row per (kicker, team, season).

        Args:
            scored: Engineered attempts with an ``xfg`` column

        Returns:
            DataFrame with attempts, makes, summed xFG and FGOE
        """
        scored = scored.assign(season=self.season_from_game_id(scored["game_id"]))
        return self._aggregate(scored, [self.kicker_col, self.team_col, "season"])

    def rank_kickers(self, scored: pd.DataFrame, season: int,
                     top_n: int = config.TOP_N) -> pd.DataFrame:
        """
        Top-*top_n* kickers by FGOE for one season.

        Kickers are grouped by (kicker, team); ties on FGOE are broken by
        kicker name ascending. ``rank`` is the 1-based row position after that
        sort, so kickers tied on FGOE still get distinct ranks.
        """
        if top_n < 1:
            raise ValueError(f"top_n must be positive, got {top_n}")
        in_season = scored[self.season_from_game_id(scored["game_id"]) == int(season)]
        if in_season.empty:
            raise ValueError(f"No scored attempts for season {season}")

        summary = self._aggregate(in_season, [self.kicker_col, self.team_col])
        summary.insert(2, "season", int(season))
        ranked = (
            summary.sort_values(["fgoe", self.kicker_col], ascending=[False, True],
                                kind="mergesort")
            .head(top_n)
            .reset_index(drop=True)
        )
        ranked.insert(0, "rank", np.arange(1, len(ranked) + 1))
        logger.info("Ranked %d of %d kickers for %d (top FGOE %+.2f)",
                    len(ranked), len(summary), int(season), ranked["fgoe"].iat[0])
        return ranked


class ModelEvaluator:
    """Compute discrimination, calibration and thresholded accuracy metrics."""

    # ---------- single-metric helpers ----------
    @staticmethod
    def calculate_auc(y, p) -> float:
        if len(np.unique(y)) < 2:
            return float("nan")
        return float(roc_auc_score(y, p))

    @staticmethod
    def calculate_log_loss(y, p) -> float:
        return float(log_loss(y, p, labels=[0, 1]))

    @staticmethod
    def calculate_brier_score(y, p) -> float:
        return float(brier_score_loss(y, p))

    @staticmethod
    def confusion_frame(y, pred) -> pd.DataFrame:
        """Confusion matrix with actual outcomes as rows and predictions as columns."""
        cm = confusion_matrix(y, pred, labels=[0, 1])
        return pd.DataFrame(
            cm,
            index=pd.Index(OUTCOME_LABELS, name="actual"),
            columns=pd.Index(OUTCOME_LABELS, name="predicted"),
        )

    def calculate_threshold_metrics(self, y, p,
                                    thresh: float = config.DECISION_THRESHOLD) -> Dict[str, float]:
        """Overall accuracy plus accuracy conditioned on each true outcome."""
        y = np.asarray(y).astype(int)
        pred = (np.asarray(p) >= thresh).astype(int)
        cm = self.confusion_frame(y, pred)
        made_total = cm.loc["Made"].sum()
        missed_total = cm.loc["Missed"].sum()
        return {
            "accuracy": float(accuracy_score(y, pred)),
            "made_accuracy": float(cm.loc["Made", "Made"] / made_total) if made_total else float("nan"),
            "missed_accuracy": float(cm.loc["Missed", "Missed"] / missed_total) if missed_total else float("nan"),
        }

    # ---------- public aggregator ----------
    def calculate_classification_metrics(self, y_true, y_pred_proba,
                                         thresh: float = config.DECISION_THRESHOLD) -> Dict[str, float]:
        """Return a full metric dictionary."""
        metrics: Dict[str, float] = {
            "auc_roc":  self.calculate_auc(y_true, y_pred_proba),
            "log_loss": self.calculate_log_loss(y_true, y_pred_proba),
            "brier":    self.calculate_brier_score(y_true, y_pred_proba),
        }
        metrics.update(self.calculate_threshold_metrics(y_true, y_pred_proba, thresh))
        return metrics
