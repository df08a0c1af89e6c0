"""
Expected field goal (xFG) model.

A binomial GLM (logit link) over a fixed covariate set, fit on a seeded random
training partition and evaluated on the held-out remainder. Once fit, the model
scores every attempt, including the training rows.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from nfl_kicker_fgoe.config import config
from nfl_kicker_fgoe.data.feature_schema import FeatureSchema
from nfl_kicker_fgoe.errors import ModelFitError
from nfl_kicker_fgoe.utils.metrics import ModelEvaluator

logger = logging.getLogger(__name__)

__all__ = [
    "EvaluationReport",
    "ExpectedFieldGoalModel",
    "fit_and_evaluate",
    "split_train_test",
]


def split_train_test(
    df: pd.DataFrame,
    *,
    frac: float = config.TRAIN_FRAC,
    seed: int = config.RANDOM_SEED,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Seeded random split; the test set is every row not sampled into train.

    Parameters
    ----------
    frac : share of rows drawn (without replacement) into the training set
    seed : random_state for the draw, so the same seed gives the same split
    """
    if not 0 < frac < 1:
        raise ValueError(f"frac must be in (0, 1), got {frac}")
    if not df.index.is_unique:
        raise ValueError("Row index must be unique to split by set difference")
    train = df.sample(frac=frac, random_state=seed)
    test = df.drop(index=train.index)
    logger.info("Split %d attempts → %d train / %d test (seed=%d)",
                len(df), len(train), len(test), seed)
    return train, test


@dataclass(frozen=True)
class EvaluationReport:
    """Held-out performance of a fitted xFG model."""
    accuracy: float
    made_accuracy: float
    missed_accuracy: float
    confusion: pd.DataFrame = field(repr=False)
    n_test: int = 0
    auc_roc: float = float("nan")
    brier: float = float("nan")
    log_loss: float = float("nan")

    def as_dict(self) -> Dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "made_accuracy": self.made_accuracy,
            "missed_accuracy": self.missed_accuracy,
            "auc_roc": self.auc_roc,
            "brier": self.brier,
            "log_loss": self.log_loss,
            "n_test": self.n_test,
        }


class ExpectedFieldGoalModel:
    """Binomial logistic regression estimating P(make) for a field goal attempt."""

    def __init__(
        self,
        covariates: Optional[List[str]] = None,
        *,
        threshold: float = config.DECISION_THRESHOLD,
    ) -> None:
        self.schema = FeatureSchema.from_feature_lists(
            list(covariates) if covariates is not None else config.XFG_COVARIATES
        )
        self.threshold = threshold
        self.evaluator = ModelEvaluator()
        self._result = None  # statsmodels GLMResults, set during fit()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def covariates(self) -> List[str]:
        return self.schema.model_features

    @property
    def is_fitted(self) -> bool:
        return self._result is not None

    @property
    def params(self) -> pd.Series:
        """Fitted coefficients (a copy; the model is immutable once fit)."""
        return self._require_fit().params.copy()

    def _require_fit(self):
        if self._result is None:
            raise RuntimeError("Model has not been fit yet")
        return self._result

    # ------------------------------------------------------------------
    # Fitting
    # ------------------------------------------------------------------
    def _check_trainable(self, train: pd.DataFrame) -> None:
        """Surface every degenerate training partition as a ModelFitError."""
        self.schema.assert_in_dataframe(train)
        target = self.schema.target

        classes = train[target].dropna().unique()
        if len(classes) < 2:
            present = ", ".join("made" if c == 1 else "missed" for c in classes) or "none"
            raise ModelFitError(
                f"Training partition has a single outcome class ({present}); "
                "both made and missed attempts are required")

        for col in self.covariates:
            if train[col].isna().any():
                raise ModelFitError(f"Covariate '{col}' has missing values in the training partition")
            if train[col].nunique() < 2:
                raise ModelFitError(
                    f"Covariate '{col}' is constant ({train[col].iloc[0]!r}) "
                    "across the training partition")

    def fit(self, train: pd.DataFrame) -> "ExpectedFieldGoalModel":
        """Fit the GLM on *train* only."""
        if self._result is not None:
            raise RuntimeError("Model is already fit; create a new instance to refit")
        self._check_trainable(train)

        glm = smf.glm(self.schema.formula, data=train, family=sm.families.Binomial())
        rank = np.linalg.matrix_rank(glm.exog)
        if rank < glm.exog.shape[1]:
            raise ModelFitError(
                f"Singular design matrix: rank {rank} < {glm.exog.shape[1]} "
                f"columns {glm.exog_names}")

        with warnings.catch_warnings():
            warnings.simplefilter("error", PerfectSeparationWarning)
            try:
                result = glm.fit()
            except (PerfectSeparationError, PerfectSeparationWarning) as exc:
                raise ModelFitError(f"Perfect separation in training partition: {exc}") from exc
            except np.linalg.LinAlgError as exc:
                raise ModelFitError(f"Singular design matrix: {exc}") from exc

        if not np.all(np.isfinite(result.params)):
            raise ModelFitError(f"Non-finite coefficients: {result.params.to_dict()}")

        self._result = result
        logger.info("Fit xFG GLM on %d attempts: %s", int(result.nobs),
                    ", ".join(f"{k}={v:+.4f}" for k, v in result.params.items()))
        return self

    # ------------------------------------------------------------------
    # Scoring & evaluation
    # ------------------------------------------------------------------
    def predict_proba(self, df: pd.DataFrame) -> pd.Series:
        """P(make) for every row of *df*, aligned to its index."""
        result = self._require_fit()
        features = df[self.covariates]
        if features.isna().any().any():
            bad = features.columns[features.isna().any()].tolist()
            raise ValueError(f"Cannot score rows with missing covariates: {bad}")
        pred = result.predict(features)
        return pd.Series(np.asarray(pred, dtype=float), index=df.index, name="xfg")

    def score(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return *df* with an ``xfg`` column."""
        scored = df.copy()
        scored["xfg"] = self.predict_proba(df)
        return scored

    def evaluate(self, test: pd.DataFrame) -> EvaluationReport:
        """Threshold the test-partition probabilities and compare to outcomes."""
        if test.empty:
            raise ValueError("Test partition is empty")
        y = test[self.schema.target].astype(int).to_numpy()
        p = self.predict_proba(test).to_numpy()
        metrics = self.evaluator.calculate_classification_metrics(y, p, self.threshold)
        pred = (p >= self.threshold).astype(int)
        report = EvaluationReport(
            accuracy=metrics["accuracy"],
            made_accuracy=metrics["made_accuracy"],
            missed_accuracy=metrics["missed_accuracy"],
            confusion=self.evaluator.confusion_frame(y, pred),
            n_test=len(test),
            auc_roc=metrics["auc_roc"],
            brier=metrics["brier"],
            log_loss=metrics["log_loss"],
        )
        logger.info("Test accuracy %.3f (made %.3f, missed %.3f) on %d attempts",
                    report.accuracy, report.made_accuracy, report.missed_accuracy, report.n_test)
        return report

    def coefficient_table(self) -> pd.DataFrame:
        """Coefficients with standard errors, z statistics, p-values and 95% CIs."""
        result = self._require_fit()
        ci = result.conf_int()
        return pd.DataFrame({
            "coef": result.params,
            "std_err": result.bse,
            "z": result.tvalues,
            "p_value": result.pvalues,
            "ci_lower": ci[0],
            "ci_upper": ci[1],
        })


def fit_and_evaluate(
    engineered: pd.DataFrame,
    *,
    seed: int = config.RANDOM_SEED,
    frac: float = config.TRAIN_FRAC,
    covariates: Optional[List[str]] = None,
) -> Tuple[ExpectedFieldGoalModel, EvaluationReport]:
    """Split, fit on train, evaluate on test."""
    train, test = split_train_test(engineered, frac=frac, seed=seed)
    model = ExpectedFieldGoalModel(covariates).fit(train)
    return model, model.evaluate(test)
