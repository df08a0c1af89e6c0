"""
Leaderboard rendering: display table, HTML export and charts.
"""
from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from nfl_kicker_fgoe.config import config
from nfl_kicker_fgoe.data.feature_schema import NO, YES
from nfl_kicker_fgoe.models.xfg_model import ExpectedFieldGoalModel

logger = logging.getLogger(__name__)

DISPLAY_COLUMNS = {
    "rank": "Rank",
    "kicker_player_name": "Kicker",
    "posteam": "Team",
    "season": "Season",
    "attempts": "FGA",
    "makes": "FGM",
    "xfg": "xFG",
    "fgoe": "FGOE",
}


def format_leaderboard(ranked: pd.DataFrame,
                       decimals: int = config.DISPLAY_DECIMALS) -> pd.DataFrame:
    """Rename columns for display and round xFG / FGOE."""
    display = ranked[list(DISPLAY_COLUMNS)].rename(columns=DISPLAY_COLUMNS)
    display[["xFG", "FGOE"]] = display[["xFG", "FGOE"]].round(decimals)
    return display


def render_leaderboard_html(ranked: pd.DataFrame,
                            *,
                            title: str | None = None,
                            path: Path | str | None = None,
                            decimals: int = config.DISPLAY_DECIMALS) -> str:
    """Styled HTML table of the leaderboard, optionally written to *path*."""
    display = format_leaderboard(ranked, decimals)
    if title is None:
        season = int(ranked["season"].iat[0]) if len(ranked) else ""
        title = f"{season} Field Goals Over Expected"
    styler = (
        display.style
        .format(precision=decimals, subset=["xFG", "FGOE"])
        .background_gradient(subset=["FGOE"], cmap="RdYlGn")
        .hide(axis="index")
        .set_caption(title)
    )
    html = styler.to_html()
    if path is not None:
        Path(path).write_text(html, encoding="utf-8")
        logger.info("Leaderboard HTML written → %s", path)
    return html


def plot_fgoe_leaderboard(ranked: pd.DataFrame,
                          savefig: Path | None = None) -> plt.Figure:
    """Horizontal bar chart of FGOE, best kicker on top."""
    labels = ranked["kicker_player_name"] + " (" + ranked["posteam"] + ")"
    colors = np.where(ranked["fgoe"] >= 0, "seagreen", "indianred")

    fig, ax = plt.subplots(figsize=config.FIGURE_SIZE)
    ax.barh(labels[::-1], ranked["fgoe"][::-1], color=colors[::-1], edgecolor="black")
    ax.axvline(0, color="black", linewidth=1)
    ax.set_xlabel("Field Goals Over Expected")
    if len(ranked):
        ax.set_title(f"{int(ranked['season'].iat[0])} FGOE Leaders")
    plt.tight_layout()
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")
    return fig


def plot_xfg_curve(model: ExpectedFieldGoalModel,
                   scored: pd.DataFrame,
                   savefig: Path | None = None) -> plt.Figure:
    """Model xFG by distance (dry vs precipitation) over the empirical make rate."""
    distances = np.arange(int(scored["distance"].min()), int(scored["distance"].max()) + 1)
    grid = pd.DataFrame({"distance": distances.astype(float)})
    for col in model.covariates:
        if col == "distance":
            continue
        if col in config.FEATURE_LISTS["binary"]:
            grid[col] = pd.Categorical([NO] * len(grid), categories=[NO, YES])
        else:
            grid[col] = float(scored[col].mean())

    fig, ax = plt.subplots(figsize=config.FIGURE_SIZE)
    ax.plot(distances, model.predict_proba(grid), linewidth=2, label="xFG (dry)")
    if "precip" in model.covariates:
        wet = grid.assign(precip=pd.Categorical([YES] * len(grid), categories=[NO, YES]))
        ax.plot(distances, model.predict_proba(wet), linestyle="--", linewidth=2,
                label="xFG (precipitation)")

    empirical = scored.groupby("distance")["made"].agg(["mean", "size"]).reset_index()
    ax.scatter(empirical["distance"], empirical["mean"], s=empirical["size"],
               alpha=0.4, color="gray", label="Observed make rate")
    ax.set_xlabel("Distance (yards)")
    ax.set_ylabel("P(make)")
    ax.set_ylim(0, 1.05)
    ax.set_title("Expected Field Goal Probability by Distance")
    ax.legend()
    plt.tight_layout()
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")
    return fig
