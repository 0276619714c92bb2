"""
Synthetic 2-D datasets for the decision boundary playground.

Six named patterns, each with a different separability structure:
- blobs: two Gaussian clusters (linearly separable)
- xor: opposite quadrants share a class (not linearly separable)
- circles: a disc inside a ring (radial boundary)
- moons: two interleaving half circles
- spirals: two interleaved spiral arms
- checkerboard: alternating squares (axis-aligned boundary)

All generators are seeded, return balanced classes and fit roughly in
the default [-3, 3] mesh.
"""

import numpy as np
from typing import Callable, Dict, List, Tuple

from config import DATASET_NOISE, DATASET_SIZE, RANDOM_STATE, DatasetConfig
from ml_from_scratch import SampleSet


def _blobs(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    X0 = rng.normal(loc=(-1.5, -1.5), scale=0.6, size=(n0, 2))
    X1 = rng.normal(loc=(1.5, 1.5), scale=0.6, size=(n1, 2))
    return X0, X1


def _xor(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    def _quadrants(n, signs):
        magnitude = rng.uniform(0.2, 2.5, size=(n, 2))
        chosen = np.array(signs)[rng.integers(len(signs), size=n)]
        return magnitude * chosen

    # Class 0: quadrants I and III, class 1: quadrants II and IV
    X0 = _quadrants(n0, [(1, 1), (-1, -1)])
    X1 = _quadrants(n1, [(-1, 1), (1, -1)])
    return X0, X1


def _circles(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    def _ring(n, radius):
        angle = rng.uniform(0, 2 * np.pi, size=n)
        return np.column_stack([radius * np.cos(angle), radius * np.sin(angle)])

    return _ring(n0, 1.0), _ring(n1, 2.4)


def _moons(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    t0 = rng.uniform(0, np.pi, size=n0)
    t1 = rng.uniform(0, np.pi, size=n1)
    X0 = np.column_stack([np.cos(t0), np.sin(t0)])
    X1 = np.column_stack([1 - np.cos(t1), 0.5 - np.sin(t1)])

    # Center on the origin and stretch to the mesh
    offset = np.array([0.5, 0.25])
    return (X0 - offset) * 1.6, (X1 - offset) * 1.6


def _spirals(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    def _arm(n, phase):
        t = np.sqrt(rng.uniform(0.02, 1, size=n)) * 3 * np.pi
        radius = t / (3 * np.pi) * 2.8
        return np.column_stack([radius * np.cos(t + phase), radius * np.sin(t + phase)])

    return _arm(n0, 0.0), _arm(n1, np.pi)


def _checkerboard(rng: np.random.Generator, n0: int, n1: int) -> Tuple[np.ndarray, np.ndarray]:
    cell = 1.5
    cells = [(i, j) for i in range(-2, 2) for j in range(-2, 2)]

    def _squares(n, parity):
        own = np.array([c for c in cells if (c[0] + c[1]) % 2 == parity])
        chosen = own[rng.integers(len(own), size=n)]
        return (chosen + rng.uniform(0, 1, size=(n, 2))) * cell

    return _squares(n0, 0), _squares(n1, 1)


PATTERNS: Dict[str, Callable] = {
    'blobs': _blobs,
    'xor': _xor,
    'circles': _circles,
    'moons': _moons,
    'spirals': _spirals,
    'checkerboard': _checkerboard,
}


def list_patterns() -> List[str]:
    """Names accepted by generate_dataset()."""
    return list(PATTERNS)


def generate_dataset(pattern: str,
                     noise: float = DATASET_NOISE,
                     n_samples: int = DATASET_SIZE,
                     seed: int = RANDOM_STATE) -> SampleSet:
    """
    Generate a labeled 2-D point set.

    Args:
        pattern: One of list_patterns()
        noise: Standard deviation of the Gaussian jitter added to every point
        n_samples: Total number of points (split evenly between classes)
        seed: Random seed

    Returns:
        SampleSet in shuffled order
    """
    if pattern not in PATTERNS:
        raise ValueError(f"Unknown pattern '{pattern}'. Choose from: {', '.join(PATTERNS)}")
    if n_samples < 2:
        raise ValueError(f"n_samples must be at least 2, got {n_samples}")
    if noise < 0:
        raise ValueError(f"noise must be non-negative, got {noise}")

    rng = np.random.default_rng(seed)
    n0 = n_samples // 2
    n1 = n_samples - n0

    X0, X1 = PATTERNS[pattern](rng, n0, n1)
    X = np.vstack([X0, X1])
    y = np.concatenate([np.zeros(n0, dtype=np.int64), np.ones(n1, dtype=np.int64)])

    if noise > 0:
        X = X + rng.normal(scale=noise, size=X.shape)

    order = rng.permutation(n_samples)
    return SampleSet.from_arrays(X[order], y[order])


def dataset_from_config(config: DatasetConfig = None) -> SampleSet:
    """Generate the dataset described by a DatasetConfig (defaults if None)."""
    if config is None:
        config = DatasetConfig()
    return generate_dataset(config.pattern, noise=config.noise,
                            n_samples=config.n_samples, seed=config.seed)
