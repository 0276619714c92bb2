"""
Decision Tree Classifier from scratch.

Implements:
- CART algorithm with binary axis-aligned splits
- Gini impurity for split selection
- Pre-pruning with max_depth
- One-level lookahead when no single split reduces impurity (XOR)

Routing convention: x[feature] < threshold goes left, otherwise right,
so a point lying exactly on a threshold always goes to the right child.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from config import TREE_MAX_DEPTH
from .base import BinaryClassifier

# Minimum impurity decrease that counts as a strict reduction
_GAIN_EPS = 1e-12


@dataclass(frozen=True, eq=False)
class Node:
    """Decision tree node."""
    feature_index: Optional[int] = None  # Split feature index
    threshold: Optional[float] = None    # Split threshold
    left: Optional['Node'] = None        # Left child (feature < threshold)
    right: Optional['Node'] = None       # Right child (feature >= threshold)
    probability: Optional[float] = None  # Class-1 fraction (leaf node)
    depth: int = 0
    n_samples: int = 0

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def gini(y: np.ndarray) -> float:
    """
    Calculate Gini impurity of binary labels.

    G(S) = 1 - p0^2 - p1^2
    """
    if len(y) == 0:
        return 0.0
    p1 = np.mean(y)
    return float(1 - p1 ** 2 - (1 - p1) ** 2)


def _split_impurities(values: np.ndarray, labels: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Weighted child Gini for every midpoint threshold of one feature.

    Args:
        values: Feature values sorted ascending
        labels: Labels in the same order

    Returns:
        (thresholds, weighted_impurities), one entry per pair of
        consecutive distinct values
    """
    n = len(values)
    n_left = np.arange(1, n, dtype=np.float64)
    n_right = n - n_left

    pos_left = np.cumsum(labels)[:-1].astype(np.float64)
    pos_right = labels.sum() - pos_left

    p_left = pos_left / n_left
    p_right = pos_right / n_right
    gini_left = 1 - p_left ** 2 - (1 - p_left) ** 2
    gini_right = 1 - p_right ** 2 - (1 - p_right) ** 2
    weighted = (n_left * gini_left + n_right * gini_right) / n

    distinct = values[:-1] < values[1:]
    thresholds = (values[:-1] + values[1:]) / 2
    return thresholds[distinct], weighted[distinct]


def _candidate_splits(X: np.ndarray, y: np.ndarray) -> Iterator[Tuple[int, float, float]]:
    """Yield (feature_index, threshold, weighted_impurity) in search order."""
    for feature_index in range(X.shape[1]):
        order = np.argsort(X[:, feature_index], kind='stable')
        thresholds, impurities = _split_impurities(X[order, feature_index], y[order])
        for threshold, impurity in zip(thresholds, impurities):
            yield feature_index, float(threshold), float(impurity)


def find_best_split(X: np.ndarray, y: np.ndarray) -> Tuple[Optional[int], Optional[float], float]:
    """
    Find the split minimizing weighted Gini impurity.

    Ties keep the first candidate found (feature 0 before feature 1,
    ascending thresholds).

    Returns:
        Tuple of (best_feature_idx, best_threshold, best_impurity);
        feature is None when no split exists
    """
    best_feature, best_threshold, best_impurity = None, None, np.inf

    for feature_index in range(X.shape[1]):
        order = np.argsort(X[:, feature_index], kind='stable')
        thresholds, impurities = _split_impurities(X[order, feature_index], y[order])
        if len(thresholds) == 0:
            continue
        i = int(np.argmin(impurities))
        if impurities[i] < best_impurity:
            best_feature = feature_index
            best_threshold = float(thresholds[i])
            best_impurity = float(impurities[i])

    return best_feature, best_threshold, best_impurity


def _lookahead_split(X: np.ndarray, y: np.ndarray) -> Tuple[Optional[int], Optional[float], float]:
    """
    Pick the split whose children, each split once more, are purest.

    Used only when no single split reduces impurity, which is the case
    for XOR-like layouts where every axis-aligned cut leaves both halves
    as mixed as the parent.
    """
    best_feature, best_threshold, best_impurity = None, None, np.inf
    n = len(y)

    for feature_index, threshold, _ in _candidate_splits(X, y):
        left_mask = X[:, feature_index] < threshold
        two_level = 0.0
        for mask in (left_mask, ~left_mask):
            X_child, y_child = X[mask], y[mask]
            _, _, child_impurity = find_best_split(X_child, y_child)
            child_impurity = min(child_impurity, gini(y_child))
            two_level += len(y_child) / n * child_impurity

        if two_level < best_impurity:
            best_feature, best_threshold, best_impurity = feature_index, threshold, two_level

    return best_feature, best_threshold, best_impurity


def _leaf(y: np.ndarray, depth: int) -> Node:
    """Create a leaf node storing the class-1 proportion."""
    probability = float(np.mean(y)) if len(y) else 0.0
    return Node(probability=probability, depth=depth, n_samples=len(y))


def grow_tree(X: np.ndarray, y: np.ndarray, max_depth: int, depth: int = 0) -> Node:
    """
    Recursively build a decision tree.

    A node becomes a leaf when depth reaches max_depth, all labels agree,
    or no split (even with one level of lookahead) strictly reduces Gini
    impurity.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y)

    if depth >= max_depth or len(y) < 2 or np.all(y == y[0]):
        return _leaf(y, depth)

    parent_impurity = gini(y)
    feature_index, threshold, impurity = find_best_split(X, y)

    if feature_index is None or parent_impurity - impurity <= _GAIN_EPS:
        if depth + 2 > max_depth:
            return _leaf(y, depth)
        feature_index, threshold, impurity = _lookahead_split(X, y)
        if feature_index is None or parent_impurity - impurity <= _GAIN_EPS:
            return _leaf(y, depth)

    left_mask = X[:, feature_index] < threshold
    right_mask = ~left_mask
    if not left_mask.any() or not right_mask.any():
        return _leaf(y, depth)

    return Node(
        feature_index=feature_index,
        threshold=threshold,
        left=grow_tree(X[left_mask], y[left_mask], max_depth, depth + 1),
        right=grow_tree(X[right_mask], y[right_mask], max_depth, depth + 1),
        depth=depth,
        n_samples=len(y),
    )


class DecisionTree(BinaryClassifier):
    """
    Decision Tree Classifier using CART with Gini impurity.

    Gini: G(S) = 1 - sum(p_i^2)
    Split score: sum(n_child / n_parent * G(child))
    """

    name = 'decision_tree'

    def __init__(self, max_depth: int = TREE_MAX_DEPTH):
        """
        Initialize Decision Tree.

        Args:
            max_depth: Maximum depth of tree (0 = a single leaf)
        """
        self.max_depth = max_depth
        super().__init__()

    def _validate_params(self) -> None:
        if int(self.max_depth) != self.max_depth or self.max_depth < 0:
            raise self._invalid(f"max_depth must be a non-negative integer, got {self.max_depth}")

    def get_params(self) -> dict:
        return {'max_depth': self.max_depth}

    def _fit(self, X: np.ndarray, y: np.ndarray) -> Node:
        return grow_tree(X, y, int(self.max_depth))

    @property
    def root(self) -> Optional[Node]:
        return self.model_

    def _route(self, node: Node, X: np.ndarray, indices: np.ndarray, out: np.ndarray) -> None:
        """Send the rows in `indices` down the subtree rooted at `node`."""
        if node.is_leaf:
            out[indices] = node.probability
            return
        goes_left = X[indices, node.feature_index] < node.threshold
        self._route(node.left, X, indices[goes_left], out)
        self._route(node.right, X, indices[~goes_left], out)

    def _predict_proba(self, X: np.ndarray) -> np.ndarray:
        out = np.empty(len(X))
        self._route(self.model_, X, np.arange(len(X)), out)
        return out

    def get_depth(self) -> int:
        """Get the actual depth of the tree."""
        self._check_is_fitted()

        def _depth(node: Node) -> int:
            if node.is_leaf:
                return node.depth
            return max(_depth(node.left), _depth(node.right))
        return _depth(self.model_)

    def get_n_leaves(self) -> int:
        """Get the number of leaf nodes."""
        return len(self.leaves())

    def leaves(self) -> List[Node]:
        """All leaf nodes, left to right."""
        self._check_is_fitted()
        found = []

        def _collect(node: Node):
            if node.is_leaf:
                found.append(node)
            else:
                _collect(node.left)
                _collect(node.right)
        _collect(self.model_)
        return found

    def leaf_regions(self) -> List[Tuple[Tuple[float, float, float, float], float]]:
        """
        Axis-aligned region of every leaf.

        Returns:
            List of ((x_min, x_max, y_min, y_max), probability); open
            sides are +/- inf
        """
        self._check_is_fitted()
        regions = []

        def _walk(node: Node, bounds: List[float]):
            if node.is_leaf:
                regions.append((tuple(bounds), node.probability))
                return
            lo, hi = 2 * node.feature_index, 2 * node.feature_index + 1
            left_bounds = list(bounds)
            left_bounds[hi] = min(bounds[hi], node.threshold)
            right_bounds = list(bounds)
            right_bounds[lo] = max(bounds[lo], node.threshold)
            _walk(node.left, left_bounds)
            _walk(node.right, right_bounds)

        _walk(self.model_, [-np.inf, np.inf, -np.inf, np.inf])
        return regions
