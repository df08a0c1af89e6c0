"""
End-to-end xFG / FGOE run: load → engineer → explore → fit → score → rank → render.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import pandas as pd

from nfl_kicker_fgoe.config import config
from nfl_kicker_fgoe.data.feature_engineering import FeatureEngineer
from nfl_kicker_fgoe.data.loader import DataLoader
from nfl_kicker_fgoe.eda import run_full_eda
from nfl_kicker_fgoe.errors import DataPreconditionError, ImputationError, ModelFitError
from nfl_kicker_fgoe.models.xfg_model import EvaluationReport, ExpectedFieldGoalModel, fit_and_evaluate
from nfl_kicker_fgoe.report import (
    format_leaderboard,
    plot_fgoe_leaderboard,
    plot_xfg_curve,
    render_leaderboard_html,
)
from nfl_kicker_fgoe.utils.metrics import FGOECalculator

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    engineered: pd.DataFrame
    model: ExpectedFieldGoalModel
    evaluation: EvaluationReport
    scored: pd.DataFrame
    kicker_seasons: pd.DataFrame
    leaderboard: pd.DataFrame
    season: int


def run_pipeline(
    attempts: Optional[pd.DataFrame] = None,
    *,
    seasons: Optional[List[int]] = None,
    report_season: Optional[int] = None,
    seed: int = config.RANDOM_SEED,
    frac: float = config.TRAIN_FRAC,
    top_n: int = config.TOP_N,
    output_dir: Path | str | None = None,
    explore: bool = False,
    loader: Optional[DataLoader] = None,
) -> PipelineResult:
    """
    Run every stage once and return the intermediate frames.

    Args:
        attempts: Filtered field goal attempts; loaded through ``DataLoader`` when omitted
        seasons: Seasons to load when *attempts* is omitted
        report_season: Season to rank (defaults to the latest season in the data)
        seed: Random seed for the train/test split
        frac: Training share of the split
        top_n: Leaderboard length
        output_dir: Where tables and figures are written; nothing is written when None
        explore: Also run the EDA views
        loader: Loader to use instead of a default ``DataLoader``
    """
    if attempts is None:
        attempts = (loader or DataLoader()).load_complete_dataset(seasons)

    engineered = FeatureEngineer().create_all_features(attempts)
    out = Path(output_dir) if output_dir is not None else None
    if explore:
        run_full_eda(engineered, output_dir=out / "eda" if out is not None else None, seed=seed)

    model, evaluation = fit_and_evaluate(engineered, seed=seed, frac=frac)
    scored = model.score(engineered)

    calculator = FGOECalculator()
    season = int(report_season) if report_season is not None else int(engineered["season"].max())
    kicker_seasons = calculator.summarize_kicker_seasons(scored)
    leaderboard = calculator.rank_kickers(scored, season, top_n=top_n)

    if out is not None:
        _write_outputs(out, model, scored, leaderboard)

    return PipelineResult(
        engineered=engineered,
        model=model,
        evaluation=evaluation,
        scored=scored,
        kicker_seasons=kicker_seasons,
        leaderboard=leaderboard,
        season=season,
    )


def _write_outputs(out: Path, model: ExpectedFieldGoalModel,
                   scored: pd.DataFrame, leaderboard: pd.DataFrame) -> None:
    figures = out / "figures"
    figures.mkdir(parents=True, exist_ok=True)
    scored.to_csv(out / config.SCORED_DATA_FILE.name, index=False)
    leaderboard.to_csv(out / config.LEADERBOARD_FILE.name, index=False)
    render_leaderboard_html(leaderboard, path=out / config.LEADERBOARD_HTML_FILE.name)
    plt.close(plot_fgoe_leaderboard(leaderboard, savefig=figures / "fgoe_leaderboard.png"))
    plt.close(plot_xfg_curve(model, scored, savefig=figures / "xfg_by_distance.png"))
    logger.info("Outputs written to %s", out.resolve())


def main() -> PipelineResult:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    config.ensure_directories()
    try:
        result = run_pipeline(report_season=config.REPORT_SEASON,
                              output_dir=config.OUTPUT_DIR, explore=True)
    except (DataPreconditionError, ImputationError, ModelFitError) as exc:
        logger.error("xFG run aborted: %s", exc)
        raise

    print("=" * 60)
    print(f"Model test accuracy: {result.evaluation.accuracy:.1%} "
          f"(made {result.evaluation.made_accuracy:.1%}, "
          f"missed {result.evaluation.missed_accuracy:.1%})")
    print(result.evaluation.confusion.to_string())
    print("=" * 60)
    print(format_leaderboard(result.leaderboard).to_string(index=False))
    return result


if __name__ == "__main__":
    main()
