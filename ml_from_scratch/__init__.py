"""
ML From Scratch - Binary 2-D classifiers implemented from scratch.

All six classifiers share one contract (fit / predict_proba / predict)
and are built on NumPy only, without sklearn or similar libraries.

Data:
- SampleSet: immutable labeled 2-D point set

Classifiers:
- LinearClassifier: Logistic regression (batch gradient descent)
- PolynomialKernelSVM: Soft-margin SVM, polynomial kernel (SMO)
- RBFKernelSVM: Soft-margin SVM, Gaussian kernel (SMO)
- KNearestNeighbors: Lazy k-nearest-neighbor voting
- DecisionTree: CART with Gini impurity
- MultilayerPerceptron: Sigmoid MLP trained with backpropagation

Errors:
- DegenerateDatasetError, ConvergenceError, NotFittedError,
  InvalidHyperparameterError (all subclasses of ClassifierError)
"""

# Data
from .samples import Sample, SampleSet

# Contract
from .base import BinaryClassifier, sigmoid

# Classifiers
from .logistic_regression import LinearClassifier
from .svm import KernelSVM, PolynomialKernelSVM, RBFKernelSVM
from .knn import KNearestNeighbors
from .decision_tree import DecisionTree, Node, grow_tree
from .neural_network import MultilayerPerceptron

# Errors
from .exceptions import (
    ClassifierError,
    DegenerateDatasetError,
    ConvergenceError,
    NotFittedError,
    InvalidHyperparameterError,
)

__all__ = [
    # Data
    'Sample',
    'SampleSet',

    # Contract
    'BinaryClassifier',
    'sigmoid',

    # Classifiers
    'LinearClassifier',
    'KernelSVM',
    'PolynomialKernelSVM',
    'RBFKernelSVM',
    'KNearestNeighbors',
    'DecisionTree',
    'Node',
    'grow_tree',
    'MultilayerPerceptron',

    # Errors
    'ClassifierError',
    'DegenerateDatasetError',
    'ConvergenceError',
    'NotFittedError',
    'InvalidHyperparameterError',
]
