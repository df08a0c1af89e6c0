"""Models module for the expected-field-goal pipeline."""

from .xfg_model import EvaluationReport, ExpectedFieldGoalModel, fit_and_evaluate, split_train_test

__all__ = ['EvaluationReport', 'ExpectedFieldGoalModel', 'fit_and_evaluate', 'split_train_test']
