"""
Error taxonomy shared by all classifiers.

Every error carries the identifier of the classifier that raised it so
the comparison and session layers can report failures per variant.
"""

from typing import Optional


class ClassifierError(Exception):
    """Base class for all classifier failures."""

    def __init__(self, message: str, classifier: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.classifier = classifier

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        if self.classifier:
            return f"[{self.classifier}] {self.message}"
        return self.message


class DegenerateDatasetError(ClassifierError, ValueError):
    """Training set is empty or contains fewer than two classes."""


class ConvergenceError(ClassifierError, ArithmeticError):
    """Optimization produced non-finite weights, coefficients or loss."""


class NotFittedError(ClassifierError, ValueError):
    """Prediction requested before a successful fit()."""


class InvalidHyperparameterError(ClassifierError, ValueError):
    """Hyperparameter outside its valid domain (rejected before training)."""
