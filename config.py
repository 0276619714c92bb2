"""
Decision Boundary Lab - Global Configuration

This module contains all configuration constants for the classifier
engine, the mesh evaluator and the synthetic dataset provider.
"""

from dataclasses import dataclass
from typing import Tuple

# =============================================================================
# MESH / GRID SETTINGS
# =============================================================================
GRID_MIN = -3.0
GRID_MAX = 3.0
GRID_STEP = 0.1  # 61 x 61 cells over [-3, 3]

# =============================================================================
# PREDICTION
# =============================================================================
PROBABILITY_THRESHOLD = 0.5  # predict() = predict_proba() >= threshold
SIGMOID_CLIP = 500  # Clip logits to prevent overflow in exp()

# =============================================================================
# CLASSIFIER DEFAULTS
# =============================================================================
# Logistic regression
LINEAR_LEARNING_RATE = 0.01
LINEAR_ITERATIONS = 1000

# Kernel SVMs
SVM_REGULARIZATION = 1.0  # C, upper bound of the dual box
SVM_POLY_DEGREE = 3
SVM_RBF_GAMMA = 1.0
SVM_TOLERANCE = 1e-3
SVM_MAX_PASSES = 5  # Sweeps without change before stopping
SVM_MAX_ITER = 200  # Hard limit on total sweeps
SUPPORT_VECTOR_EPS = 1e-7

# K-nearest neighbors
KNN_K = 5

# Decision tree
TREE_MAX_DEPTH = 5

# Multilayer perceptron
MLP_HIDDEN_LAYERS: Tuple[int, ...] = (8,)
MLP_LEARNING_RATE = 1.0
MLP_ITERATIONS = 5000

RANDOM_STATE = 42

# =============================================================================
# SYNTHETIC DATASETS
# =============================================================================
DATASET_PATTERN = 'blobs'
DATASET_NOISE = 0.2
DATASET_SIZE = 200

# =============================================================================
# RENDERING
# =============================================================================
FIGURE_SIZE = (6, 6)
COMPARISON_FIGURE_SIZE = (15, 10)
HEATMAP_CMAP = 'RdBu_r'

# =============================================================================
# DATACLASSES FOR CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class MeshConfig:
    """Coordinate range and step of the evaluation grid."""
    x_min: float = GRID_MIN
    x_max: float = GRID_MAX
    y_min: float = GRID_MIN
    y_max: float = GRID_MAX
    step: float = GRID_STEP


@dataclass(frozen=True)
class DatasetConfig:
    """Synthetic dataset request."""
    pattern: str = DATASET_PATTERN
    noise: float = DATASET_NOISE
    n_samples: int = DATASET_SIZE
    seed: int = RANDOM_STATE


def get_default_config():
    """Get default configuration objects."""
    return {
        'mesh': MeshConfig(),
        'dataset': DatasetConfig(),
    }
