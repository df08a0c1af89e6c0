"""
FeatureSchema – canonical column lists for the xFG model.
"""
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from nfl_kicker_fgoe.config import FEATURE_LISTS

YES, NO = "Yes", "No"
FLAG_LEVELS = [NO, YES]   # "No" first so it is the reference level in the fit


@dataclass
class FeatureSchema:
    """Container class listing every column by semantic type."""
    numerical: List[str] = field(default_factory=list)
    binary:    List[str] = field(default_factory=list)      # Yes/No categoricals
    target:    str        = "made"

    @classmethod
    def from_feature_lists(cls, covariates: List[str] | None = None) -> "FeatureSchema":
        """Build a schema from ``FEATURE_LISTS``, optionally restricted to *covariates*."""
        numerical = FEATURE_LISTS["numerical"]
        binary = FEATURE_LISTS["binary"]
        if covariates is not None:
            unknown = [c for c in covariates if c not in numerical + binary]
            if unknown:
                raise ValueError(f"Unknown covariates: {unknown}")
            numerical = [c for c in covariates if c in numerical]
            binary = [c for c in covariates if c in binary]
        return cls(numerical=list(numerical), binary=list(binary),
                   target=FEATURE_LISTS["y_variable"][0])

    # ───── convenience helpers ────────────────────────────────────
    @property
    def model_features(self) -> List[str]:
        """All predictors in modelling order."""
        return self.numerical + self.binary

    @property
    def formula(self) -> str:
        """Patsy formula for the binomial GLM."""
        return f"{self.target} ~ " + " + ".join(self.model_features)

    def assert_in_dataframe(self, df: pd.DataFrame) -> None:
        """Raise if any declared column is missing from df.columns."""
        missing = [c for c in self.model_features + [self.target]
                   if c not in df.columns]
        if missing:
            raise ValueError(f"FeatureSchema mismatch – missing cols: {missing}")


def to_flag(mask: pd.Series) -> pd.Series:
    """Turn a boolean mask into a Yes/No categorical with a fixed level order."""
    values = mask.fillna(False).astype(bool).map({True: YES, False: NO})
    return pd.Series(pd.Categorical(values, categories=FLAG_LEVELS),
                     index=mask.index, name=mask.name)
