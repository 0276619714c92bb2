"""
Dataset, Rendering and CLI Tests.

Tests for:
- The six synthetic patterns (balanced, seeded, inside the mesh)
- Boundary plots rendered off-screen with the Agg backend
- main.py end to end
"""

import numpy as np
import os
import sys

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import DatasetConfig, MeshConfig, get_default_config
from classification import ClassifierComparison, build_classifier, evaluate_mesh
from datasets_2d import PATTERNS, dataset_from_config, generate_dataset, list_patterns
from ml_from_scratch import SampleSet
from visualization import plot_comparison, plot_decision_boundary


# =============================================================================
# Datasets
# =============================================================================

def test_all_six_patterns_available():
    assert list_patterns() == ['blobs', 'xor', 'circles', 'moons', 'spirals', 'checkerboard']
    assert set(PATTERNS) == set(list_patterns())


@pytest.mark.parametrize('pattern', list(PATTERNS))
def test_pattern_is_balanced_and_bounded(pattern):
    samples = generate_dataset(pattern, noise=0.0, n_samples=101, seed=0)

    assert isinstance(samples, SampleSet)
    assert len(samples) == 101
    assert samples.class_counts() == (50, 51)
    # Noise-free points stay inside the default mesh (blobs are Gaussian)
    if pattern != 'blobs':
        assert np.all(np.abs(samples.points) <= 3.0), pattern
    print(f"  {pattern}: OK")


def test_generation_is_seeded():
    first = generate_dataset('spirals', seed=3)
    second = generate_dataset('spirals', seed=3)
    other = generate_dataset('spirals', seed=4)

    assert np.array_equal(first.points, second.points)
    assert np.array_equal(first.labels, second.labels)
    assert not np.array_equal(first.points, other.points)


def test_noise_moves_points():
    clean = generate_dataset('circles', noise=0.0, seed=1)
    noisy = generate_dataset('circles', noise=0.3, seed=1)
    radii = np.linalg.norm(clean.points, axis=1)
    assert np.allclose(np.sort(np.unique(np.round(radii, 6))), [1.0, 2.4])
    assert not np.allclose(np.linalg.norm(noisy.points, axis=1), radii)


def test_dataset_from_config():
    defaults = get_default_config()['dataset']
    samples = dataset_from_config()
    assert len(samples) == defaults.n_samples

    config = DatasetConfig(pattern='xor', noise=0.05, n_samples=30, seed=9)
    expected = generate_dataset('xor', noise=0.05, n_samples=30, seed=9)
    assert np.array_equal(dataset_from_config(config).points, expected.points)


def test_generate_dataset_rejects_bad_arguments():
    with pytest.raises(ValueError):
        generate_dataset('swiss_roll')
    with pytest.raises(ValueError):
        generate_dataset('blobs', n_samples=1)
    with pytest.raises(ValueError):
        generate_dataset('blobs', noise=-0.1)


# =============================================================================
# Rendering
# =============================================================================

def test_plot_decision_boundary(tmp_path):
    samples = generate_dataset('moons', n_samples=40, seed=2)
    model = build_classifier('rbf_svm').fit(samples)
    grid = evaluate_mesh(model, MeshConfig(step=0.25))

    save_path = tmp_path / "boundary.png"
    fig = plot_decision_boundary(grid, samples, model.support_vectors_,
                                 title="SVM (RBF)", save_path=str(save_path))

    assert save_path.exists() and save_path.stat().st_size > 0
    assert fig.axes[0].get_title() == "SVM (RBF)"
    plt.close(fig)


def test_plot_decision_boundary_into_existing_axes():
    samples = SampleSet.from_samples([(-1, 0, 0), (1, 0, 1)])
    model = build_classifier('decision_tree').fit(samples)
    grid = evaluate_mesh(model, MeshConfig(step=0.5))

    fig, ax = plt.subplots()
    returned = plot_decision_boundary(grid, samples, ax=ax, title="Tree")

    assert returned is fig
    assert ax.get_title() == "Tree"
    # The 0.5 contour is drawn because the grid crosses the threshold
    assert len(ax.collections) >= 2
    plt.close(fig)


def test_plot_comparison_marks_failed_panels(tmp_path):
    samples = SampleSet.from_samples([(0.0, 0.0, 1), (1.0, 1.0, 1), (-1.0, 0.5, 1)])
    results = ClassifierComparison(samples, mesh=MeshConfig(step=0.5)).run()

    save_path = tmp_path / "comparison.png"
    fig = plot_comparison(results, samples, save_path=str(save_path))

    assert save_path.exists()
    panel_texts = [text.get_text() for ax in fig.axes for text in ax.texts]
    assert panel_texts.count("Could not train\nDegenerateDatasetError") == 5
    plt.close(fig)


# =============================================================================
# CLI
# =============================================================================

def test_main_single_classifier(monkeypatch, capsys, tmp_path):
    import main

    save_path = tmp_path / "tree.png"
    monkeypatch.setattr(sys, 'argv', [
        'main.py', '--dataset', 'xor', '--samples', '40',
        '--classifier', 'decision_tree', '--save', str(save_path),
    ])
    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 0
    assert save_path.exists()
    output = capsys.readouterr().out
    assert "Decision Tree" in output
    assert "Train accuracy" in output
    plt.close('all')


def test_main_compare(monkeypatch, capsys):
    import main

    # Two points per class is enough for every classifier to train
    monkeypatch.setattr(sys, 'argv', ['main.py', '--dataset', 'blobs', '--samples', '4', '--compare'])
    with pytest.raises(SystemExit) as excinfo:
        main.main()

    output = capsys.readouterr().out
    assert "CLASSIFIER COMPARISON (4 samples)" in output
    assert excinfo.value.code == 0
    assert "Best Model" in output


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, '-q']))
