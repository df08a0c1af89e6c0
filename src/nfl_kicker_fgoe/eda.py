"""
NFL Field-Goal EDA Utilities

Exploratory views of the engineered attempts: outcomes, distance, the Yes/No
situational flags, weather readings, and a full-covariate model summary.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from nfl_kicker_fgoe.config import FEATURE_LISTS, config
from nfl_kicker_fgoe.data.feature_schema import YES
from nfl_kicker_fgoe.models.xfg_model import ExpectedFieldGoalModel, split_train_test

logger = logging.getLogger(__name__)

plt.rcParams.update({
    "figure.figsize": (12, 7),
    "axes.spines.top": False,
    "axes.spines.right": False,
})
sns.set_palette("husl")


def _save(fig: plt.Figure, savefig: Path | None) -> None:
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")


# ─────────────────────── analytical helpers ────────────────────
def outcome_summary(
    df: pd.DataFrame,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Made/missed counts overall and by season."""
    by_season = (
        df.groupby("season")
        .agg(attempts=("made", "size"), makes=("made", "sum"), make_rate=("made", "mean"),
             avg_distance=("distance", "mean"))
        .reset_index()
    )

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    counts = df["field_goal_result"].value_counts()
    counts.plot.pie(ax=ax1, autopct="%1.1f%%", startangle=90)
    ax1.set_ylabel("")
    ax1.set_title("Field-Goal Outcomes")

    ax2.plot(by_season["season"], by_season["make_rate"], marker="o", linewidth=2)
    ax2.set_title("Make Rate by Season")
    ax2.set_ylabel("Make Rate")
    plt.tight_layout()
    _save(fig, savefig)

    logger.info("Outcomes: %d made / %d missed (%.1f%% make rate)",
                int(df["made"].sum()), int((1 - df["made"]).sum()), 100 * df["made"].mean())
    return by_season, fig


def distance_analysis(
    df: pd.DataFrame,
    *,
    min_attempts: int = 3,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Histogram + make-rate-by-yardage scatter, with bucketed rates logged."""
    summary = (
        df.groupby("distance")["made"]
        .agg(make_rate="mean", attempts="size")
        .query("attempts >= @min_attempts")
        .reset_index()
    )

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10))
    sns.histplot(df["distance"], bins=30, edgecolor="black", color="skyblue", ax=ax1)
    ax1.set_title("Distribution of Field-Goal Attempt Distances")
    ax1.set_xlabel("Distance (yards)")

    ax2.scatter(summary["distance"], summary["make_rate"],
                s=summary["attempts"] / 2, alpha=0.6, color="darkblue")
    ax2.set_title("Make Rate vs Distance (bubble = attempts)")
    ax2.set_xlabel("Distance (yards)")
    ax2.set_ylabel("Make Rate")
    ax2.set_ylim(0, 1.05)
    plt.tight_layout()
    _save(fig, savefig)

    for lo, hi, label in config.DISTANCE_RANGES:
        mask = df["distance"].between(lo, hi)
        if mask.any():
            logger.info("%s: %.1f%% (%d attempts)", label, 100 * df.loc[mask, "made"].mean(), mask.sum())
    return summary, fig


def flag_analysis(
    df: pd.DataFrame,
    flags: Sequence[str] | None = None,
    *,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Make rate and average distance for each level of every Yes/No flag."""
    flags = list(flags) if flags is not None else FEATURE_LISTS["binary"]
    rows = []
    for flag in flags:
        grouped = df.groupby(flag, observed=True).agg(
            attempts=("made", "size"), make_rate=("made", "mean"),
            avg_distance=("distance", "mean"))
        for level, stats in grouped.iterrows():
            rows.append({"flag": flag, "level": str(level), **stats.to_dict()})
    table = pd.DataFrame(rows, columns=["flag", "level", "attempts", "make_rate", "avg_distance"])

    fig, ax = plt.subplots(figsize=(12, 6))
    sns.barplot(data=table, x="flag", y="make_rate", hue="level", ax=ax)
    ax.set_title("Make Rate by Situational Flag")
    ax.set_ylabel("Make Rate")
    ax.set_xlabel("")
    ax.set_ylim(0, 1.05)
    plt.tight_layout()
    _save(fig, savefig)
    return table, fig


def weather_analysis(
    df: pd.DataFrame,
    *,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Make rate by wind and temperature band for open-air attempts."""
    outdoor = df[df["indoor"] != YES]
    wind_band = pd.cut(outdoor["wind"], bins=[-np.inf, 5, 10, 15, 20, np.inf],
                       labels=["0-5", "6-10", "11-15", "16-20", "21+"])
    temp_band = pd.cut(outdoor["temp"], bins=[-np.inf, 32, 50, 70, np.inf],
                       labels=["≤32", "33-50", "51-70", "71+"])
    table = pd.concat([
        outdoor.groupby(wind_band, observed=True)["made"].agg(make_rate="mean", attempts="size")
               .rename_axis("band").reset_index().assign(reading="wind"),
        outdoor.groupby(temp_band, observed=True)["made"].agg(make_rate="mean", attempts="size")
               .rename_axis("band").reset_index().assign(reading="temp"),
    ], ignore_index=True)
    table["band"] = table["band"].astype(str)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 5))
    for ax, reading, title in ((ax1, "wind", "Wind (mph)"), (ax2, "temp", "Temperature (°F)")):
        sub = table[table["reading"] == reading]
        ax.bar(sub["band"], sub["make_rate"], color="steelblue", edgecolor="black")
        ax.set_title(f"Open-Air Make Rate by {title}")
        ax.set_ylim(0, 1.05)
    plt.tight_layout()
    _save(fig, savefig)
    return table, fig


def full_model_summary(
    df: pd.DataFrame,
    covariates: List[str] | None = None,
    *,
    seed: int = config.RANDOM_SEED,
    frac: float = config.TRAIN_FRAC,
) -> pd.DataFrame:
    """
    Coefficient table for a model over every engineered covariate.

    Exploration only: the xFG model uses ``config.XFG_COVARIATES`` regardless of
    what this table shows. Covariates that are constant in the training
    partition are dropped with a warning.
    """
    covariates = list(covariates) if covariates is not None else list(config.FULL_COVARIATES)
    train, _ = split_train_test(df, frac=frac, seed=seed)
    constant = [c for c in covariates if train[c].nunique() < 2]
    if constant:
        logger.warning("Dropping constant covariates from full model: %s", constant)
    usable = [c for c in covariates if c not in constant]
    model = ExpectedFieldGoalModel(usable).fit(train)
    table = model.coefficient_table()
    logger.info("Full model coefficients:\n%s", table.round(4).to_string())
    return table


# ───────────────────── orchestrator API ─────────────────────
def run_full_eda(
    df: pd.DataFrame,
    *,
    output_dir: Path | str | None = None,
    seed: int = config.RANDOM_SEED,
) -> dict:
    """Run every EDA view; figures are saved when *output_dir* is given."""
    out = Path(output_dir) if output_dir is not None else None
    if out is not None:
        out.mkdir(parents=True, exist_ok=True)

    def path(name: str) -> Path | None:
        return out / name if out is not None else None

    tables = {}
    for name, fn in (("outcomes", outcome_summary), ("distance", distance_analysis),
                     ("flags", flag_analysis), ("weather", weather_analysis)):
        tables[name], fig = fn(df, savefig=path(f"{name}.png"))
        plt.close(fig)
    tables["full_model"] = full_model_summary(df, seed=seed)

    if out is not None:
        logger.info("All EDA figures saved in %s", out.resolve())
    return tables
