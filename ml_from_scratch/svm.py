"""
Kernel Support Vector Machines from scratch.

Implements:
- Polynomial kernel K(u, v) = (u.v + 1)^degree
- RBF (Gaussian) kernel K(u, v) = exp(-gamma * ||u - v||^2)
- Simplified Sequential Minimal Optimization (SMO) on the dual
- Soft margin: dual coefficients boxed to [0, C]
- Probability output by logistic squashing of the decision function

SVM finds the hyperplane (in kernel feature space) that maximizes the
margin between the classes. Only points with non-zero dual coefficient
(support vectors) influence the decision function.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from config import (
    RANDOM_STATE,
    SUPPORT_VECTOR_EPS,
    SVM_MAX_ITER,
    SVM_MAX_PASSES,
    SVM_POLY_DEGREE,
    SVM_RBF_GAMMA,
    SVM_REGULARIZATION,
    SVM_TOLERANCE,
)
from .base import BinaryClassifier, as_points, freeze, sigmoid
from .exceptions import ConvergenceError


@dataclass(frozen=True, eq=False)
class KernelModel:
    """Support vectors with labels in {-1, +1}, dual coefficients and bias."""
    support_vectors: np.ndarray
    support_labels: np.ndarray
    dual_coef: np.ndarray
    bias: float


class KernelSVM(BinaryClassifier):
    """
    Soft-margin kernel classifier trained with simplified SMO.

    Dual problem:
        max sum(alpha) - 1/2 * sum(alpha_i * alpha_j * y_i * y_j * K(x_i, x_j))
        s.t. 0 <= alpha_i <= C, sum(alpha_i * y_i) = 0

    Subclasses provide the kernel.
    """

    def __init__(self,
                 regularization: float = SVM_REGULARIZATION,
                 tol: float = SVM_TOLERANCE,
                 max_passes: int = SVM_MAX_PASSES,
                 max_iter: int = SVM_MAX_ITER,
                 random_state: int = RANDOM_STATE):
        """
        Args:
            regularization: C, upper bound of every dual coefficient
            tol: KKT violation tolerance
            max_passes: Sweeps without any update before stopping
            max_iter: Hard limit on the total number of sweeps
            random_state: Seed for second-index selection
        """
        self.regularization = regularization
        self.tol = tol
        self.max_passes = max_passes
        self.max_iter = max_iter
        self.random_state = random_state
        super().__init__()

    def _validate_params(self) -> None:
        if not np.isfinite(self.regularization) or self.regularization <= 0:
            raise self._invalid(f"regularization must be positive, got {self.regularization}")
        if self.tol < 0:
            raise self._invalid(f"tol must be non-negative, got {self.tol}")
        if self.max_passes < 1 or self.max_iter < 1:
            raise self._invalid("max_passes and max_iter must be at least 1")

    def _kernel(self, X1: np.ndarray, X2: np.ndarray) -> np.ndarray:
        """Compute kernel matrix K(X1, X2)."""
        raise NotImplementedError

    @staticmethod
    def _smo_step(i: int, j: int, K: np.ndarray, y: np.ndarray, alpha: np.ndarray,
                  E_i: float, E_j: float, b: float, C: float) -> Tuple[bool, float]:
        """
        Jointly optimize alpha[i] and alpha[j].

        Updates alpha in place and returns (changed, new_bias).
        """
        alpha_i, alpha_j = alpha[i], alpha[j]
        y_i, y_j = y[i], y[j]

        # Bounds for alpha[j] keeping sum(alpha * y) fixed inside the box
        if y_i != y_j:
            L = max(0.0, alpha_j - alpha_i)
            H = min(C, C + alpha_j - alpha_i)
        else:
            L = max(0.0, alpha_i + alpha_j - C)
            H = min(C, alpha_i + alpha_j)

        if L >= H:
            return False, b

        # Second derivative of the objective along the constraint line
        eta = 2 * K[i, j] - K[i, i] - K[j, j]
        if eta >= 0:
            return False, b

        alpha_j_new = alpha_j - y_j * (E_i - E_j) / eta
        alpha_j_new = float(np.clip(alpha_j_new, L, H))

        if abs(alpha_j_new - alpha_j) < 1e-8:
            return False, b

        alpha_i_new = alpha_i + y_i * y_j * (alpha_j - alpha_j_new)

        b1 = b - E_i - y_i * (alpha_i_new - alpha_i) * K[i, i] \
             - y_j * (alpha_j_new - alpha_j) * K[i, j]
        b2 = b - E_j - y_i * (alpha_i_new - alpha_i) * K[i, j] \
             - y_j * (alpha_j_new - alpha_j) * K[j, j]

        if 0 < alpha_i_new < C:
            b = b1
        elif 0 < alpha_j_new < C:
            b = b2
        else:
            b = (b1 + b2) / 2

        alpha[i] = alpha_i_new
        alpha[j] = alpha_j_new
        return True, b

    def _fit(self, X: np.ndarray, y: np.ndarray) -> KernelModel:
        y_signed = np.where(y == 1, 1.0, -1.0)
        n_samples = len(X)
        C = float(self.regularization)

        K = self._kernel(X, X)
        alpha = np.zeros(n_samples)
        b = 0.0

        rng = np.random.default_rng(self.random_state)
        passes = 0
        sweeps = 0

        with np.errstate(over='ignore', invalid='ignore'):
            while passes < self.max_passes and sweeps < self.max_iter:
                num_changed = 0

                for i in range(n_samples):
                    E_i = (alpha * y_signed) @ K[:, i] + b - y_signed[i]

                    # KKT conditions
                    if (y_signed[i] * E_i < -self.tol and alpha[i] < C) or \
                       (y_signed[i] * E_i > self.tol and alpha[i] > 0):

                        # Random j != i
                        j = int(rng.integers(n_samples - 1))
                        if j >= i:
                            j += 1

                        E_j = (alpha * y_signed) @ K[:, j] + b - y_signed[j]
                        changed, b = self._smo_step(i, j, K, y_signed, alpha,
                                                    E_i, E_j, b, C)
                        if changed:
                            num_changed += 1

                if not (np.all(np.isfinite(alpha)) and np.isfinite(b)):
                    raise ConvergenceError(
                        f"Dual coefficients became non-finite after {sweeps + 1} sweeps")

                sweeps += 1
                passes = passes + 1 if num_changed == 0 else 0

        sv_mask = alpha > SUPPORT_VECTOR_EPS
        return KernelModel(
            support_vectors=freeze(X[sv_mask]).reshape(-1, 2),
            support_labels=freeze(y_signed[sv_mask]),
            dual_coef=freeze(alpha[sv_mask]),
            bias=float(b),
        )

    @property
    def support_vectors_(self) -> Optional[np.ndarray]:
        return None if self.model_ is None else self.model_.support_vectors

    @property
    def dual_coef_(self) -> Optional[np.ndarray]:
        return None if self.model_ is None else self.model_.dual_coef

    def _decision(self, X: np.ndarray) -> np.ndarray:
        model = self.model_
        if len(model.support_vectors) == 0:
            # All coefficients collapsed: the bias alone decides
            return np.full(len(X), model.bias)
        K = self._kernel(X, model.support_vectors)
        return K @ (model.dual_coef * model.support_labels) + model.bias

    def decision_function(self, points) -> np.ndarray:
        """Signed margin sum(alpha_i * y_i * K(x_i, x)) + b."""
        self._check_is_fitted()
        return self._decision(as_points(points))

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        return sigmoid(self._decision(X))


class PolynomialKernelSVM(KernelSVM):
    """SVM with polynomial kernel (u.v + 1)^degree."""

    name = 'poly_svm'

    def __init__(self,
                 degree: int = SVM_POLY_DEGREE,
                 regularization: float = SVM_REGULARIZATION,
                 **kwargs):
        self.degree = degree
        super().__init__(regularization=regularization, **kwargs)

    def _validate_params(self) -> None:
        super()._validate_params()
        if int(self.degree) != self.degree or self.degree < 1:
            raise self._invalid(f"degree must be a positive integer, got {self.degree}")

    def get_params(self) -> dict:
        return {'degree': self.degree, 'regularization': self.regularization}

    def _kernel(self, X1: np.ndarray, X2: np.ndarray) -> np.ndarray:
        return (X1 @ X2.T + 1) ** int(self.degree)


class RBFKernelSVM(KernelSVM):
    """SVM with Gaussian kernel exp(-gamma * ||u - v||^2)."""

    name = 'rbf_svm'

    def __init__(self,
                 gamma: float = SVM_RBF_GAMMA,
                 regularization: float = SVM_REGULARIZATION,
                 **kwargs):
        self.gamma = gamma
        super().__init__(regularization=regularization, **kwargs)

    def _validate_params(self) -> None:
        super()._validate_params()
        if not np.isfinite(self.gamma) or self.gamma <= 0:
            raise self._invalid(f"gamma must be positive, got {self.gamma}")

    def get_params(self) -> dict:
        return {'gamma': self.gamma, 'regularization': self.regularization}

    def _kernel(self, X1: np.ndarray, X2: np.ndarray) -> np.ndarray:
        # ||x - y||^2 = ||x||^2 + ||y||^2 - 2*x.y
        X1_sq = np.sum(X1 ** 2, axis=1, keepdims=True)
        X2_sq = np.sum(X2 ** 2, axis=1)
        distances_sq = X1_sq + X2_sq - 2 * X1 @ X2.T
        distances_sq = np.maximum(distances_sq, 0)
        return np.exp(-self.gamma * distances_sq)
