"""
Classification module: mesh evaluation, comparison and training session.

Drives the from-scratch classifiers in ml_from_scratch over a 2-D
dataset and produces probability grids for rendering.

Modules:
- registry: Classifier identifiers, hyperparameters and factory
- mesh: Probability grid evaluation of a trained classifier
- classifier_comparison: All six classifiers side by side
- session: Training session state machine (latest request wins)
"""

from .registry import (
    ClassifierId,
    LinearParams,
    PolynomialSVMParams,
    RBFSVMParams,
    KNNParams,
    DecisionTreeParams,
    MLPParams,
    build_classifier,
    default_hyperparameters,
    default_hyperparameter_table,
    parse_classifier_id,
    update_hyperparameters,
)

from .mesh import (
    ProbabilityGrid,
    evaluate_mesh,
    make_axis,
)

from .classifier_comparison import (
    ClassifierComparison,
    ComparisonResult,
    compare_classifiers,
    fit_and_evaluate,
)

from .session import (
    TrainingSession,
    SessionState,
    Mode,
    EvaluationRequest,
    EvaluationOutcome,
    DisplayState,
    execute_request,
)

__all__ = [
    # Registry
    'ClassifierId',
    'LinearParams',
    'PolynomialSVMParams',
    'RBFSVMParams',
    'KNNParams',
    'DecisionTreeParams',
    'MLPParams',
    'build_classifier',
    'default_hyperparameters',
    'default_hyperparameter_table',
    'parse_classifier_id',
    'update_hyperparameters',

    # Mesh evaluation
    'ProbabilityGrid',
    'evaluate_mesh',
    'make_axis',

    # Comparison
    'ClassifierComparison',
    'ComparisonResult',
    'compare_classifiers',
    'fit_and_evaluate',

    # Session
    'TrainingSession',
    'SessionState',
    'Mode',
    'EvaluationRequest',
    'EvaluationOutcome',
    'DisplayState',
    'execute_request',
]
