"""
Exceptions raised by the xFG pipeline stages.

Each subclasses the builtin already used elsewhere in the package for the same
kind of failure, so callers catching ``ValueError`` / ``RuntimeError`` keep working.
"""


class DataPreconditionError(ValueError):
    """Input rows violate a loader precondition (missing result, blocked kick, ...)."""


class ImputationError(ValueError):
    """An open-air reading is missing and there is nothing to average it from."""


class ModelFitError(RuntimeError):
    """The logistic regression cannot be fit on the training partition."""
