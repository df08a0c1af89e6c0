"""Utils module for the expected-field-goal pipeline."""

from .metrics import FGOECalculator, ModelEvaluator

__all__ = ['FGOECalculator', 'ModelEvaluator']
