"""
Training Session Tests.

Tests for:
- State machine transitions of a synchronous refresh
- Latest request wins (stale outcomes discarded, in-flight work cancelled)
- Invalid hyperparameter updates leave the session untouched
- Last-known-good fallback after a failed fit
- Executor dispatch and comparison mode
"""

import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import MeshConfig
from classification import (
    ClassifierId,
    Mode,
    SessionState,
    TrainingSession,
    execute_request,
)
from datasets_2d import generate_dataset
from ml_from_scratch import DegenerateDatasetError, InvalidHyperparameterError, SampleSet

COARSE_MESH = MeshConfig(step=0.5)


def make_session(**kwargs):
    samples = generate_dataset('blobs', noise=0.1, n_samples=40, seed=5)
    return TrainingSession(samples, mesh=COARSE_MESH, **kwargs)


def single_class_samples():
    return SampleSet.from_samples([(0.0, 0.0, 0), (1.0, 1.0, 0), (2.0, -1.0, 0)])


def test_refresh_walks_the_state_machine():
    session = make_session()
    assert session.state == SessionState.PARAMETERS_CHANGED

    outcome = session.refresh()

    assert outcome.ok
    assert session.state == SessionState.RENDERED
    assert list(session.transitions) == [
        SessionState.IDLE,
        SessionState.PARAMETERS_CHANGED,
        SessionState.FITTING,
        SessionState.EVALUATING,
        SessionState.RENDERED,
    ]
    print(f"  Transitions: {[s.value for s in session.transitions]}")


def test_empty_session_cannot_refresh():
    session = TrainingSession()
    assert session.state == SessionState.IDLE
    with pytest.raises(ValueError):
        session.refresh()


def test_set_samples_requires_sample_set():
    session = TrainingSession()
    with pytest.raises(TypeError):
        session.set_samples([(0.0, 0.0, 1)])


def test_stale_outcome_is_discarded():
    session = make_session()
    first = session.request_evaluation()
    first_outcome = execute_request(first)

    # A change while the first request is in flight cancels it
    session.update_hyperparameters('linear', iterations=50)
    assert session.cancelled_requests == 1
    assert session.state == SessionState.PARAMETERS_CHANGED

    second = session.request_evaluation()
    assert not session.complete(first, first_outcome)
    assert session.discarded_outcomes == 1
    assert session.last_outcome is None
    assert session.state == SessionState.FITTING

    assert session.complete(second, execute_request(second))
    assert session.last_outcome.request is second
    assert session.state == SessionState.RENDERED


def test_new_request_supersedes_in_flight_request():
    session = make_session()
    first = session.request_evaluation()
    second = session.request_evaluation()

    assert second.generation > first.generation
    assert session.cancelled_requests == 1
    assert not session.is_current(first)
    assert session.is_current(second)


def test_request_snapshots_inputs():
    session = make_session()
    request = session.request_evaluation()
    session.update_hyperparameters('knn', k=9)
    session.select_classifier('knn')

    assert request.classifier_id == ClassifierId.LINEAR
    assert request.hyperparameters[ClassifierId.KNN].k == 5
    assert session.hyperparameters[ClassifierId.KNN].k == 9


def test_invalid_update_leaves_session_untouched():
    session = make_session()
    session.refresh()
    generation = session.generation
    state = session.state

    with pytest.raises(InvalidHyperparameterError):
        session.update_hyperparameters('knn', k=0)
    with pytest.raises(InvalidHyperparameterError):
        session.update_hyperparameters('decision_tree', max_depth=-2)

    assert session.generation == generation
    assert session.state == state
    assert session.hyperparameters[ClassifierId.KNN].k == 5
    assert session.hyperparameters[ClassifierId.DECISION_TREE].max_depth == 5


@pytest.mark.parametrize('classifier, changes', [
    ('decision_tree', {'max_depth': float('inf')}),
    ('linear', {'iterations': float('inf')}),
    ('linear', {'learning_rate': 'fast'}),
    ('knn', {'k': float('nan')}),
    ('mlp', {'hidden_layer_sizes': 4.5}),
])
def test_non_numeric_update_raises_invalid_hyperparameter(classifier, changes):
    """Overflow and type errors surface as InvalidHyperparameterError."""
    session = make_session()
    session.refresh()
    generation = session.generation
    before = session.hyperparameters[ClassifierId(classifier)]

    with pytest.raises(InvalidHyperparameterError) as excinfo:
        session.update_hyperparameters(classifier, **changes)

    assert excinfo.value.classifier == classifier
    assert session.generation == generation
    assert session.hyperparameters[ClassifierId(classifier)] == before


def test_last_known_good_after_degenerate_dataset():
    session = make_session()
    session.refresh()
    good = session.display()
    assert good.result is not None and not good.stale

    session.set_samples(single_class_samples())
    outcome = session.refresh()

    assert not outcome.ok
    display = session.display()
    assert display.stale
    assert display.result is good.result
    assert isinstance(display.error, DegenerateDatasetError)
    assert not display.could_not_train


def test_could_not_train_without_previous_result():
    session = TrainingSession(single_class_samples(), classifier_id='mlp', mesh=COARSE_MESH)
    session.refresh()

    display = session.display()
    assert display.could_not_train
    assert display.error.classifier == 'mlp'
    # Failed fits skip mesh evaluation
    assert SessionState.EVALUATING not in session.transitions


def test_dispatch_on_executor():
    session = make_session(classifier_id='rbf_svm')
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = session.dispatch(executor)
        outcome = future.result()

    assert outcome.single.ok
    assert session.state == SessionState.RENDERED
    assert session.last_outcome is outcome
    assert session.display().result.grid.shape == (13, 13)


def test_dispatch_latest_request_wins():
    session = make_session()
    release = threading.Event()
    with ThreadPoolExecutor(max_workers=1) as executor:
        # Hold the only worker so both requests queue up
        executor.submit(release.wait, 5)
        first = session.dispatch(executor)
        session.select_classifier('knn')
        second = session.dispatch(executor)
        release.set()
        second_outcome = second.result()

    assert first.cancelled()
    assert session.cancelled_requests == 1
    assert session.last_outcome is second_outcome
    assert session.last_outcome.request.classifier_id == ClassifierId.KNN
    assert session.state == SessionState.RENDERED


def test_comparison_mode():
    session = make_session(mode=Mode.COMPARISON, max_workers=2)
    outcome = session.refresh()

    assert set(outcome.results) == set(ClassifierId)
    assert outcome.ok
    for cid in ClassifierId:
        display = session.display(cid)
        assert display.result is not None
        assert display.result.classifier_id == cid


def test_mode_and_mesh_changes_bump_generation():
    session = make_session()
    generation = session.generation
    session.set_mode('comparison')
    session.set_mesh(MeshConfig(step=1.0))
    assert session.mode == Mode.COMPARISON
    assert session.generation == generation + 2
    assert session.state == SessionState.PARAMETERS_CHANGED


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, '-q']))
