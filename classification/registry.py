"""
Classifier identifiers, hyperparameters and factory.

Each variant is selected through an explicit ClassifierId rather than by
inspecting types; its hyperparameters live in a frozen dataclass that
build_classifier() turns into a fresh, unfitted classifier.
"""

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, Tuple, Union

from config import (
    KNN_K,
    LINEAR_ITERATIONS,
    LINEAR_LEARNING_RATE,
    MLP_HIDDEN_LAYERS,
    MLP_ITERATIONS,
    MLP_LEARNING_RATE,
    RANDOM_STATE,
    SVM_POLY_DEGREE,
    SVM_RBF_GAMMA,
    SVM_REGULARIZATION,
    TREE_MAX_DEPTH,
)
from ml_from_scratch import (
    BinaryClassifier,
    DecisionTree,
    InvalidHyperparameterError,
    KNearestNeighbors,
    LinearClassifier,
    MultilayerPerceptron,
    PolynomialKernelSVM,
    RBFKernelSVM,
)


class ClassifierId(Enum):
    """Supported classifier variants (comparison panel order)."""
    LINEAR = 'linear'
    POLY_SVM = 'poly_svm'
    RBF_SVM = 'rbf_svm'
    KNN = 'knn'
    DECISION_TREE = 'decision_tree'
    MLP = 'mlp'

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES = {
    ClassifierId.LINEAR: 'Logistic Regression',
    ClassifierId.POLY_SVM: 'SVM (Polynomial)',
    ClassifierId.RBF_SVM: 'SVM (RBF)',
    ClassifierId.KNN: 'KNN',
    ClassifierId.DECISION_TREE: 'Decision Tree',
    ClassifierId.MLP: 'Neural Network',
}


# =============================================================================
# Hyperparameters
# =============================================================================

@dataclass(frozen=True)
class LinearParams:
    learning_rate: float = LINEAR_LEARNING_RATE
    iterations: int = LINEAR_ITERATIONS


@dataclass(frozen=True)
class PolynomialSVMParams:
    degree: int = SVM_POLY_DEGREE
    regularization: float = SVM_REGULARIZATION


@dataclass(frozen=True)
class RBFSVMParams:
    gamma: float = SVM_RBF_GAMMA
    regularization: float = SVM_REGULARIZATION


@dataclass(frozen=True)
class KNNParams:
    k: int = KNN_K


@dataclass(frozen=True)
class DecisionTreeParams:
    max_depth: int = TREE_MAX_DEPTH


@dataclass(frozen=True)
class MLPParams:
    hidden_layer_sizes: Tuple[int, ...] = MLP_HIDDEN_LAYERS
    learning_rate: float = MLP_LEARNING_RATE
    iterations: int = MLP_ITERATIONS
    random_state: int = RANDOM_STATE


Hyperparameters = Union[LinearParams, PolynomialSVMParams, RBFSVMParams,
                        KNNParams, DecisionTreeParams, MLPParams]

_REGISTRY = {
    ClassifierId.LINEAR: (LinearParams, LinearClassifier),
    ClassifierId.POLY_SVM: (PolynomialSVMParams, PolynomialKernelSVM),
    ClassifierId.RBF_SVM: (RBFSVMParams, RBFKernelSVM),
    ClassifierId.KNN: (KNNParams, KNearestNeighbors),
    ClassifierId.DECISION_TREE: (DecisionTreeParams, DecisionTree),
    ClassifierId.MLP: (MLPParams, MultilayerPerceptron),
}


def parse_classifier_id(value: Union[str, ClassifierId]) -> ClassifierId:
    """Accept a ClassifierId or its string value."""
    if isinstance(value, ClassifierId):
        return value
    try:
        return ClassifierId(value)
    except ValueError:
        valid = ', '.join(c.value for c in ClassifierId)
        raise ValueError(f"Unknown classifier '{value}'. Choose from: {valid}") from None


def default_hyperparameters(classifier_id: Union[str, ClassifierId]) -> Hyperparameters:
    params_cls, _ = _REGISTRY[parse_classifier_id(classifier_id)]
    return params_cls()


def default_hyperparameter_table() -> Dict[ClassifierId, Hyperparameters]:
    """Default hyperparameters for every variant."""
    return {cid: default_hyperparameters(cid) for cid in ClassifierId}


def update_hyperparameters(classifier_id: Union[str, ClassifierId],
                           params: Hyperparameters, **changes) -> Hyperparameters:
    """
    Return a copy of `params` with `changes` applied, validated eagerly.

    Raises:
        InvalidHyperparameterError: unknown field or invalid value
    """
    cid = parse_classifier_id(classifier_id)
    known = {f.name for f in fields(params)}
    unknown = set(changes) - known
    if unknown:
        raise InvalidHyperparameterError(
            f"Unknown hyperparameter(s) {sorted(unknown)}; expected {sorted(known)}",
            classifier=cid.value)
    if 'hidden_layer_sizes' in changes:
        sizes = changes['hidden_layer_sizes']
        if isinstance(sizes, int):
            changes['hidden_layer_sizes'] = (sizes,)
        elif isinstance(sizes, (list, tuple)):
            changes['hidden_layer_sizes'] = tuple(sizes)
    updated = replace(params, **changes)
    build_classifier(cid, updated)
    return updated


def build_classifier(classifier_id: Union[str, ClassifierId],
                     params: Hyperparameters = None) -> BinaryClassifier:
    """
    Create a fresh, unfitted classifier.

    Raises:
        InvalidHyperparameterError: a value is outside its domain
    """
    cid = parse_classifier_id(classifier_id)
    params_cls, classifier_cls = _REGISTRY[cid]
    if params is None:
        params = params_cls()
    if not isinstance(params, params_cls):
        raise TypeError(f"{cid.value} expects {params_cls.__name__}, "
                        f"got {type(params).__name__}")
    kwargs = {f.name: getattr(params, f.name) for f in fields(params)}
    return classifier_cls(**kwargs)
