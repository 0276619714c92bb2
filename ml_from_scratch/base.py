"""
Shared train/predict contract for the binary 2-D classifiers.

Subclasses implement:
- _validate_params(): reject bad hyperparameters (called from __init__)
- _fit(X, y): build and return an immutable model state
- _predict_proba(X): class-1 probabilities from self.model_
"""

import numpy as np
from typing import Any, Optional

from config import PROBABILITY_THRESHOLD, SIGMOID_CLIP
from .exceptions import (
    ClassifierError,
    DegenerateDatasetError,
    InvalidHyperparameterError,
    NotFittedError,
)
from .samples import SampleSet


def sigmoid(z: np.ndarray) -> np.ndarray:
    """Logistic function with clipped input to prevent overflow."""
    z = np.clip(z, -SIGMOID_CLIP, SIGMOID_CLIP)
    return 1 / (1 + np.exp(-z))


def as_points(points) -> np.ndarray:
    """
    Coerce query points to a (n, 2) float array.

    A single (x, y) pair is treated as one point.
    """
    X = np.asarray(points, dtype=np.float64)
    if X.size == 0:
        return X.reshape(0, 2)
    if X.ndim == 1 and X.shape[0] == 2:
        X = X.reshape(1, 2)
    if X.ndim != 2 or X.shape[1] != 2:
        raise ValueError(f"points must have shape (n, 2), got {X.shape}")
    return X


def freeze(array: np.ndarray) -> np.ndarray:
    """Return a read-only copy of an array (model state is immutable)."""
    array = np.array(array, dtype=np.float64, copy=True)
    array.setflags(write=False)
    return array


class BinaryClassifier:
    """
    Base class for all six classifiers.

    fit() discards any previous model before training, so a failed fit
    leaves the classifier unfitted rather than holding a stale model.
    """

    name: str = 'classifier'
    requires_both_classes: bool = True

    def __init__(self):
        self.model_: Optional[Any] = None
        try:
            self._validate_params()
        except InvalidHyperparameterError:
            raise
        except (TypeError, ValueError, OverflowError) as e:
            # Non-numeric, NaN or infinite values fail inside int() / np.isfinite()
            raise self._invalid(f"Invalid hyperparameter value: {e}") from e

    def _validate_params(self) -> None:
        pass

    def _invalid(self, message: str) -> InvalidHyperparameterError:
        return InvalidHyperparameterError(message, classifier=self.name)

    def _check_training_set(self, samples: SampleSet):
        if not isinstance(samples, SampleSet):
            raise TypeError(f"Expected SampleSet, got {type(samples).__name__}")
        if samples.is_empty:
            raise DegenerateDatasetError("Training set is empty", classifier=self.name)
        if self.requires_both_classes and not samples.has_both_classes:
            raise DegenerateDatasetError(
                "Training set must contain samples of both classes",
                classifier=self.name)
        # Arrays are read-only views; algorithms work on copies where needed
        return samples.points, samples.labels

    def fit(self, samples: SampleSet) -> 'BinaryClassifier':
        """
        Train on a SampleSet.

        Args:
            samples: Labeled training points (never modified)

        Returns:
            self
        """
        self.model_ = None
        X, y = self._check_training_set(samples)
        try:
            model = self._fit(X, y)
        except ClassifierError as e:
            if e.classifier is None:
                e.classifier = self.name
            raise
        self.model_ = model
        return self

    def _fit(self, X: np.ndarray, y: np.ndarray) -> Any:
        raise NotImplementedError

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @property
    def is_fitted(self) -> bool:
        return self.model_ is not None

    def _check_is_fitted(self) -> None:
        if self.model_ is None:
            raise NotFittedError("Model not fitted. Call fit() first.",
                                 classifier=self.name)

    def predict_proba(self, points) -> np.ndarray:
        """
        Predict class-1 probabilities.

        Args:
            points: (n, 2) array-like of query coordinates

        Returns:
            (n,) array of probabilities in [0, 1]
        """
        self._check_is_fitted()
        X = as_points(points)
        if len(X) == 0:
            return np.zeros(0)
        proba = np.asarray(self._predict_proba(X), dtype=np.float64).ravel()
        return np.clip(proba, 0.0, 1.0)

    def predict(self, points) -> np.ndarray:
        """Predict labels; a probability of exactly 0.5 maps to class 1."""
        proba = self.predict_proba(points)
        return (proba >= PROBABILITY_THRESHOLD).astype(np.int64)

    def score(self, samples: SampleSet) -> float:
        """Calculate accuracy."""
        y_pred = self.predict(samples.points)
        return float(np.mean(y_pred == samples.labels))

    def get_params(self) -> dict:
        raise NotImplementedError

    def __repr__(self) -> str:
        params = ', '.join(f"{k}={v!r}" for k, v in self.get_params().items())
        return f"{type(self).__name__}({params})"
