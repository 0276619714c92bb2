"""
Logistic Regression (linear classifier) from scratch.

Implements:
- Batch gradient descent on the logistic (cross-entropy) loss
- Zero initialization, fixed iteration count, no early stopping
- Divergence detection (weights or logits overflowing float64)

The decision boundary w.x + b = 0 is always a straight line, which is
exactly what the comparison is meant to show on non-linear patterns.
"""

import numpy as np
from dataclasses import dataclass
from typing import List

from config import LINEAR_ITERATIONS, LINEAR_LEARNING_RATE
from .base import BinaryClassifier, as_points, freeze, sigmoid
from .exceptions import ConvergenceError


@dataclass(frozen=True, eq=False)
class LinearModel:
    """Trained weights (2,) and bias."""
    weights: np.ndarray
    bias: float


class LinearClassifier(BinaryClassifier):
    """
    Logistic regression trained by batch gradient descent.

    Each iteration:
        p = sigmoid(X.w + b)
        error = y - p
        w += lr * X^T . error
        b += lr * mean(error)

    The loss is computed on clipped probabilities and stays finite, so
    divergence is detected on the raw logits X.w + b and on the weights:
    an overflow to inf or nan raises ConvergenceError.
    """

    name = 'linear'

    def __init__(self,
                 learning_rate: float = LINEAR_LEARNING_RATE,
                 iterations: int = LINEAR_ITERATIONS):
        """
        Initialize Logistic Regression.

        Args:
            learning_rate: Step size for gradient ascent on the log-likelihood
            iterations: Number of full-batch updates
        """
        self.learning_rate = learning_rate
        self.iterations = iterations
        self.loss_history_: List[float] = []
        super().__init__()

    def _validate_params(self) -> None:
        if not np.isfinite(self.learning_rate) or self.learning_rate <= 0:
            raise self._invalid(f"learning_rate must be positive, got {self.learning_rate}")
        if int(self.iterations) != self.iterations or self.iterations < 1:
            raise self._invalid(f"iterations must be a positive integer, got {self.iterations}")

    def get_params(self) -> dict:
        return {'learning_rate': self.learning_rate, 'iterations': self.iterations}

    def _diverged(self, iteration: int) -> ConvergenceError:
        return ConvergenceError(
            f"Gradient descent diverged at iteration {iteration + 1} "
            f"(learning_rate={self.learning_rate})")

    @staticmethod
    def _log_loss(y: np.ndarray, p: np.ndarray) -> float:
        eps = 1e-15
        p = np.clip(p, eps, 1 - eps)
        return float(-np.mean(y * np.log(p) + (1 - y) * np.log(1 - p)))

    def _fit(self, X: np.ndarray, y: np.ndarray) -> LinearModel:
        y = y.astype(np.float64)
        w = np.zeros(X.shape[1])
        b = 0.0
        history = []

        # Large learning rates overflow; detected below instead of warned
        with np.errstate(over='ignore', invalid='ignore'):
            for iteration in range(int(self.iterations)):
                z = X @ w + b
                if not np.all(np.isfinite(z)):
                    raise self._diverged(iteration)
                p = sigmoid(z)
                error = y - p

                w = w + self.learning_rate * (X.T @ error)
                b = b + self.learning_rate * np.mean(error)

                if not (np.all(np.isfinite(w)) and np.isfinite(b)):
                    raise self._diverged(iteration)
                history.append(self._log_loss(y, p))

        self.loss_history_ = history
        return LinearModel(weights=freeze(w), bias=float(b))

    def decision_function(self, points) -> np.ndarray:
        """Signed distance-like score x.w + b."""
        self._check_is_fitted()
        X = as_points(points)
        return X @ self.model_.weights + self.model_.bias

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        return sigmoid(X @ self.model_.weights + self.model_.bias)
