"""
NFL Kicker xFG Package
Expected field goal probabilities and Field Goals Over Expected for NFL kickers.
"""

__version__ = "1.0.0"
__author__ = "NFL Analytics Team"

# Import main classes for easy access
from .config import config
from .data.loader import DataLoader
from .data.feature_engineering import FeatureEngineer, ImputationContext
from .models.xfg_model import ExpectedFieldGoalModel, fit_and_evaluate, split_train_test
from .utils.metrics import FGOECalculator

__all__ = [
    'config',
    'DataLoader',
    'FeatureEngineer',
    'ImputationContext',
    'ExpectedFieldGoalModel',
    'fit_and_evaluate',
    'split_train_test',
    'FGOECalculator',
]
