"""
Neural Network (Multi-Layer Perceptron) from scratch.

Implements:
- Feedforward network with configurable hidden layer widths
- Sigmoid activation on every layer, single sigmoid output unit
- Full-batch gradient descent with backpropagation
- Seeded, bounded weight initialization (Xavier uniform)

Architecture for the 2-D playground:
    Input(2) -> Dense(h1, Sigmoid) -> ... -> Output(1, Sigmoid)
"""

import numpy as np
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from config import MLP_HIDDEN_LAYERS, MLP_ITERATIONS, MLP_LEARNING_RATE, RANDOM_STATE
from .base import BinaryClassifier, freeze, sigmoid
from .exceptions import ConvergenceError


@dataclass(frozen=True, eq=False)
class NetworkModel:
    """One (weights, biases) pair per layer, input to output."""
    layers: Tuple[Tuple[np.ndarray, np.ndarray], ...]

    @property
    def layer_sizes(self) -> List[int]:
        sizes = [self.layers[0][0].shape[0]]
        sizes.extend(W.shape[1] for W, _ in self.layers)
        return sizes


class MultilayerPerceptron(BinaryClassifier):
    """
    Multi-Layer Perceptron (MLP) binary classifier.

    Forward:   A[l] = sigmoid(A[l-1] @ W[l] + b[l])
    Output error (sigmoid + cross-entropy): dZ = y_hat - y
    Hidden:    dZ[l-1] = (dZ[l] @ W[l].T) * A[l-1] * (1 - A[l-1])
    """

    name = 'mlp'

    def __init__(self,
                 hidden_layer_sizes: Sequence[int] = MLP_HIDDEN_LAYERS,
                 learning_rate: float = MLP_LEARNING_RATE,
                 iterations: int = MLP_ITERATIONS,
                 random_state: int = RANDOM_STATE):
        """
        Initialize Neural Network.

        Args:
            hidden_layer_sizes: Widths of the hidden layers, e.g. (8,) or (16, 8)
            learning_rate: Learning rate for gradient descent
            iterations: Number of full-batch updates
            random_state: Seed for weight initialization
        """
        if isinstance(hidden_layer_sizes, int):
            hidden_layer_sizes = (hidden_layer_sizes,)
        self.hidden_layer_sizes = hidden_layer_sizes
        self.learning_rate = learning_rate
        self.iterations = iterations
        self.random_state = random_state
        self.loss_history_: List[float] = []
        super().__init__()

    def _validate_params(self) -> None:
        self.hidden_layer_sizes = tuple(self.hidden_layer_sizes)
        if len(self.hidden_layer_sizes) == 0:
            raise self._invalid("hidden_layer_sizes must contain at least one layer")
        for width in self.hidden_layer_sizes:
            if int(width) != width or width < 1:
                raise self._invalid(f"hidden layer widths must be positive integers, "
                                    f"got {self.hidden_layer_sizes}")
        if not np.isfinite(self.learning_rate) or self.learning_rate <= 0:
            raise self._invalid(f"learning_rate must be positive, got {self.learning_rate}")
        if int(self.iterations) != self.iterations or self.iterations < 1:
            raise self._invalid(f"iterations must be a positive integer, got {self.iterations}")

    def get_params(self) -> dict:
        return {
            'hidden_layer_sizes': self.hidden_layer_sizes,
            'learning_rate': self.learning_rate,
            'iterations': self.iterations,
            'random_state': self.random_state,
        }

    @property
    def layer_sizes(self) -> List[int]:
        return [2] + [int(w) for w in self.hidden_layer_sizes] + [1]

    def _init_weights(self) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """Xavier uniform: W ~ U(-limit, limit), limit = sqrt(6 / (n_in + n_out))."""
        rng = np.random.default_rng(self.random_state)
        sizes = self.layer_sizes

        weights, biases = [], []
        for n_in, n_out in zip(sizes[:-1], sizes[1:]):
            limit = np.sqrt(6.0 / (n_in + n_out))
            weights.append(rng.uniform(-limit, limit, size=(n_in, n_out)))
            biases.append(np.zeros((1, n_out)))
        return weights, biases

    # =========================================================================
    # Forward / backward propagation
    # =========================================================================

    @staticmethod
    def _forward(X: np.ndarray, weights: List[np.ndarray],
                 biases: List[np.ndarray]) -> List[np.ndarray]:
        """Forward pass; returns activations for every layer, A[0] = X."""
        activations = [X]
        A = X
        for W, b in zip(weights, biases):
            A = sigmoid(A @ W + b)
            activations.append(A)
        return activations

    @staticmethod
    def _backward(y: np.ndarray, activations: List[np.ndarray],
                  weights: List[np.ndarray]) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """
        Backward propagation to compute gradients averaged over the batch.

        Returns:
            Tuple of (weight_gradients, bias_gradients)
        """
        m = y.shape[0]
        n_layers = len(weights)
        dW = [None] * n_layers
        db = [None] * n_layers

        dZ = activations[-1] - y
        for i in range(n_layers - 1, -1, -1):
            A_prev = activations[i]
            dW[i] = (A_prev.T @ dZ) / m
            db[i] = np.sum(dZ, axis=0, keepdims=True) / m

            if i > 0:
                dZ = (dZ @ weights[i].T) * A_prev * (1 - A_prev)

        return dW, db

    @staticmethod
    def _cross_entropy(y: np.ndarray, y_hat: np.ndarray) -> float:
        eps = 1e-15
        y_hat = np.clip(y_hat, eps, 1 - eps)
        return float(-np.mean(y * np.log(y_hat) + (1 - y) * np.log(1 - y_hat)))

    # =========================================================================
    # Training
    # =========================================================================

    def _fit(self, X: np.ndarray, y: np.ndarray) -> NetworkModel:
        y = y.astype(np.float64).reshape(-1, 1)
        weights, biases = self._init_weights()
        history = []

        with np.errstate(over='ignore', invalid='ignore'):
            for iteration in range(int(self.iterations)):
                activations = self._forward(X, weights, biases)
                history.append(self._cross_entropy(y, activations[-1]))

                dW, db = self._backward(y, activations, weights)
                for i in range(len(weights)):
                    weights[i] = weights[i] - self.learning_rate * dW[i]
                    biases[i] = biases[i] - self.learning_rate * db[i]

                if not all(np.all(np.isfinite(W)) and np.all(np.isfinite(b))
                           for W, b in zip(weights, biases)):
                    raise ConvergenceError(
                        f"Weights became non-finite at iteration {iteration + 1} "
                        f"(learning_rate={self.learning_rate})")

        self.loss_history_ = history
        return NetworkModel(layers=tuple((freeze(W), freeze(b))
                                         for W, b in zip(weights, biases)))

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        weights = [W for W, _ in self.model_.layers]
        biases = [b for _, b in self.model_.layers]
        return self._forward(X, weights, biases)[-1].ravel()
