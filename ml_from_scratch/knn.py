"""
K-Nearest Neighbors (KNN) Classifier from scratch.

Implements:
- Euclidean distance computation (vectorized)
- Uniform k-nearest neighbor voting
- Deterministic tie-breaking (earlier stored sample wins)

KNN is a non-parametric, instance-based (lazy) learning algorithm:
fit() only stores the training set, all the work happens at prediction.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from config import KNN_K
from .base import BinaryClassifier, as_points
from .samples import SampleSet


@dataclass(frozen=True, eq=False)
class NeighborModel:
    """Reference to the stored SampleSet and the effective k."""
    samples: SampleSet
    k: int


class KNearestNeighbors(BinaryClassifier):
    """
    K-Nearest Neighbors Classifier.

    P(class 1 | x) = fraction of the k nearest stored samples labeled 1.

    Distance metric: Euclidean distance
    d(x, y) = sqrt(sum((x_i - y_i)^2))
    """

    name = 'knn'
    # A single-class set still yields a (constant) probability
    requires_both_classes = False

    def __init__(self, k: int = KNN_K):
        """
        Initialize KNN Classifier.

        Args:
            k: Number of neighbors; clamped to the training set size at fit()
        """
        self.k = k
        super().__init__()

    def _validate_params(self) -> None:
        if int(self.k) != self.k or self.k < 1:
            raise self._invalid(f"k must be a positive integer, got {self.k}")

    def get_params(self) -> dict:
        return {'k': self.k}

    def fit(self, samples: SampleSet) -> 'KNearestNeighbors':
        self.model_ = None
        self._check_training_set(samples)
        self.model_ = NeighborModel(samples=samples, k=min(int(self.k), len(samples)))
        return self

    @property
    def k_(self) -> Optional[int]:
        """Effective k after clamping."""
        return None if self.model_ is None else self.model_.k

    def _euclidean_distances(self, X: np.ndarray) -> np.ndarray:
        """
        Calculate Euclidean distances between X and all training samples.

        Broadcasts explicit differences instead of the expanded
        ||a||^2 + ||b||^2 - 2*a.b form: equal distances stay exactly equal
        (needed for deterministic ties) and a stored point is at distance 0
        from itself.

        Returns:
            Distance matrix (n_test, n_train)
        """
        X_train = self.model_.samples.points
        diff = X[:, np.newaxis, :] - X_train[np.newaxis, :, :]
        return np.sqrt(np.sum(diff ** 2, axis=2))

    def _get_k_nearest(self, distances: np.ndarray) -> np.ndarray:
        """
        Indices of the k nearest neighbors for each row.

        A stable sort keeps insertion order among equal distances, so the
        first-seen sample wins a tie at the k-th position.
        """
        order = np.argsort(distances, axis=1, kind='stable')
        return order[:, :self.model_.k]

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        distances = self._euclidean_distances(X)
        indices = self._get_k_nearest(distances)
        neighbor_labels = self.model_.samples.labels[indices]
        return neighbor_labels.mean(axis=1)

    def kneighbors(self, points) -> Tuple[np.ndarray, np.ndarray]:
        """
        Find the k neighbors for each query point.

        Returns:
            (distances, indices), each of shape (n_queries, k)
        """
        self._check_is_fitted()
        X = as_points(points)
        distances = self._euclidean_distances(X)
        indices = self._get_k_nearest(distances)
        return np.take_along_axis(distances, indices, axis=1), indices
