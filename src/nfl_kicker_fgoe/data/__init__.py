"""
Data module for the expected-field-goal pipeline.
"""

from .loader import DataLoader
from .feature_engineering import FeatureEngineer, ImputationContext, build_features

__all__ = ['DataLoader', 'FeatureEngineer', 'ImputationContext', 'build_features']
