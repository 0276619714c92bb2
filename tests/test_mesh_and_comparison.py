"""
Mesh Evaluation and Classifier Comparison Tests.

Tests for:
- Grid layout (61 x 61 default, row-major alignment, read-only output)
- Determinism of repeated evaluations
- Six-way comparison with per-classifier failures
- Sequential and thread-pool runs producing the same grids
"""

import numpy as np
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import MeshConfig
from classification import (
    ClassifierComparison,
    ClassifierId,
    KNNParams,
    LinearParams,
    build_classifier,
    compare_classifiers,
    default_hyperparameters,
    evaluate_mesh,
    make_axis,
    parse_classifier_id,
    update_hyperparameters,
)
from datasets_2d import generate_dataset
from ml_from_scratch import DegenerateDatasetError, InvalidHyperparameterError, SampleSet

COARSE_MESH = MeshConfig(step=0.5)


def small_moons():
    return generate_dataset('moons', noise=0.1, n_samples=40, seed=11)


# =============================================================================
# Mesh
# =============================================================================

def test_default_mesh_is_61_by_61():
    model = build_classifier('linear').fit(small_moons())
    grid = evaluate_mesh(model)

    assert grid.shape == (61, 61)
    assert grid.xs[0] == pytest.approx(-3.0)
    assert grid.xs[-1] == pytest.approx(3.0)
    assert grid.ys[30] == pytest.approx(0.0)
    assert np.all((grid.values >= 0) & (grid.values <= 1))
    print(f"  Grid shape: {grid.shape}")


def test_make_axis():
    assert len(make_axis(-3.0, 3.0, 0.1)) == 61
    assert len(make_axis(0.0, 1.0, 0.25)) == 5
    assert len(make_axis(2.0, 2.0, 0.1)) == 1

    with pytest.raises(ValueError):
        make_axis(0.0, 1.0, 0.0)
    with pytest.raises(ValueError):
        make_axis(0.0, 1.0, -0.1)
    with pytest.raises(ValueError):
        make_axis(1.0, 0.0, 0.1)


def test_grid_is_row_major():
    """values[i, j] is the probability at (xs[j], ys[i])."""
    model = build_classifier('knn', KNNParams(k=3)).fit(small_moons())
    mesh = MeshConfig(x_min=-2.0, x_max=2.0, y_min=-1.0, y_max=1.0, step=0.25)
    grid = evaluate_mesh(model, mesh)

    assert grid.shape == (9, 17)
    for i, j in [(0, 0), (3, 11), (8, 16), (5, 2)]:
        expected = model.predict_proba([[grid.xs[j], grid.ys[i]]])[0]
        assert grid.values[i, j] == pytest.approx(expected)


def test_mesh_evaluation_is_deterministic():
    samples = small_moons()
    model = build_classifier('rbf_svm').fit(samples)

    first = evaluate_mesh(model, COARSE_MESH)
    second = evaluate_mesh(model, COARSE_MESH)
    assert np.array_equal(first.values, second.values)

    # Refitting from scratch gives the same grid too
    refit = build_classifier('rbf_svm').fit(samples)
    assert np.array_equal(first.values, evaluate_mesh(refit, COARSE_MESH).values)


def test_grid_is_read_only():
    model = build_classifier('decision_tree').fit(small_moons())
    grid = evaluate_mesh(model, COARSE_MESH)
    with pytest.raises(ValueError):
        grid.values[0, 0] = 0.5


def test_boundary_mask_follows_threshold():
    samples = SampleSet.from_samples([(-1, 0, 0), (1, 0, 1)])
    model = build_classifier('decision_tree').fit(samples)
    mesh = MeshConfig(x_min=-2.0, x_max=2.0, y_min=-1.0, y_max=1.0, step=0.5)
    grid = evaluate_mesh(model, mesh)

    mask = grid.boundary_mask()
    # The split sits at x = 0: columns at x = -0.5 and x = 0 touch it
    touched = np.where(mask.any(axis=0))[0]
    assert grid.xs[touched].tolist() == [-0.5, 0.0]


# =============================================================================
# Registry
# =============================================================================

def test_parse_classifier_id():
    assert parse_classifier_id('rbf_svm') is ClassifierId.RBF_SVM
    assert parse_classifier_id(ClassifierId.MLP) is ClassifierId.MLP
    with pytest.raises(ValueError):
        parse_classifier_id('random_forest')


def test_update_hyperparameters_validates_eagerly():
    params = default_hyperparameters('knn')
    assert update_hyperparameters('knn', params, k=9).k == 9
    assert params.k == 5

    with pytest.raises(InvalidHyperparameterError):
        update_hyperparameters('knn', params, k=0)
    with pytest.raises(InvalidHyperparameterError):
        update_hyperparameters('knn', params, neighbors=3)
    with pytest.raises(InvalidHyperparameterError):
        update_hyperparameters('linear', default_hyperparameters('linear'), learning_rate='fast')

    mlp = update_hyperparameters('mlp', default_hyperparameters('mlp'), hidden_layer_sizes=4)
    assert mlp.hidden_layer_sizes == (4,)


def test_build_classifier_checks_params_type():
    with pytest.raises(TypeError):
        build_classifier('knn', LinearParams())


# =============================================================================
# Comparison
# =============================================================================

def test_comparison_runs_all_six():
    comparison = ClassifierComparison(small_moons(), mesh=COARSE_MESH)
    results = comparison.run()

    assert list(results) == list(ClassifierId)
    for cid, result in results.items():
        assert result.ok, f"{cid.value}: {result.error}"
        assert result.grid.shape == (13, 13)
        assert 0.0 <= result.train_accuracy <= 1.0

    assert results[ClassifierId.RBF_SVM].support_vectors is not None
    assert results[ClassifierId.KNN].support_vectors is None
    assert not comparison.failures()


def test_comparison_isolates_failures():
    """Single-class data: only KNN trains, the other five report errors."""
    samples = SampleSet.from_samples([(0.0, 0.0, 1), (1.0, 1.0, 1), (-1.0, 0.5, 1)])
    comparison = ClassifierComparison(samples, mesh=COARSE_MESH)
    results = comparison.run()

    knn = results[ClassifierId.KNN]
    assert knn.ok
    assert np.all(knn.grid.values == 1.0)

    failures = comparison.failures()
    assert set(failures) == set(ClassifierId) - {ClassifierId.KNN}
    for cid, error in failures.items():
        assert isinstance(error, DegenerateDatasetError)
        assert error.classifier == cid.value
        assert results[cid].grid is None


def test_parallel_comparison_matches_sequential():
    samples = small_moons()
    sequential = compare_classifiers(samples, mesh=COARSE_MESH)
    parallel = compare_classifiers(samples, mesh=COARSE_MESH, max_workers=3)

    for cid in ClassifierId:
        assert np.array_equal(sequential[cid].grid.values, parallel[cid].grid.values), cid.value


def test_comparison_uses_custom_hyperparameters():
    samples = small_moons()
    comparison = ClassifierComparison(samples, {'knn': KNNParams(k=1)}, mesh=COARSE_MESH)
    results = comparison.run()
    assert results[ClassifierId.KNN].train_accuracy == 1.0
    assert results[ClassifierId.KNN].model.k_ == 1


def test_comparison_reporting(capsys):
    samples = SampleSet.from_samples([(0.0, 0.0, 0), (1.0, 1.0, 0)])
    comparison = ClassifierComparison(samples, mesh=COARSE_MESH)
    comparison.print_results()
    assert "No results" in capsys.readouterr().out

    comparison.run(verbose=True)
    comparison.print_results()
    output = capsys.readouterr().out
    assert "CLASSIFIER COMPARISON" in output
    assert "DegenerateDatasetError" in output
    assert "Best Model: KNN" in output

    exported = comparison.to_dict()
    assert len(exported) == 6
    linear = exported[0]
    assert linear['classifier'] == 'linear'
    assert linear['ok'] is False
    assert linear['error']['kind'] == 'DegenerateDatasetError'


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, '-q']))
