"""
Decision boundary rendering with matplotlib.

Turns a ProbabilityGrid into a probability heatmap, a 0.5 contour line
(the decision boundary) and a scatter overlay of the training points.
"""

import numpy as np
from typing import Any, Mapping, Optional, Tuple

from config import COMPARISON_FIGURE_SIZE, FIGURE_SIZE, HEATMAP_CMAP, PROBABILITY_THRESHOLD
from classification.classifier_comparison import ComparisonResult
from classification.mesh import ProbabilityGrid
from ml_from_scratch import SampleSet

CLASS_COLORS = ('#1f4e99', '#b2182b')  # class 0, class 1


def draw_boundary(ax: Any,
                  grid: ProbabilityGrid,
                  samples: Optional[SampleSet] = None,
                  support_vectors: Optional[np.ndarray] = None,
                  title: Optional[str] = None) -> Any:
    """
    Draw one decision boundary panel onto an existing axes.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Target axes.
    grid : ProbabilityGrid
        Class-1 probabilities over the mesh.
    samples : SampleSet, optional
        Training points drawn on top, colored by label.
    support_vectors : np.ndarray, optional
        (n, 2) points circled as support vectors.
    title : str, optional
        Panel title.

    Returns
    -------
    matplotlib.contour.QuadContourSet
        The filled heatmap (usable for a colorbar).
    """
    xx, yy = np.meshgrid(grid.xs, grid.ys)
    levels = np.linspace(0.0, 1.0, 21)
    heatmap = ax.contourf(xx, yy, grid.values, levels=levels,
                          cmap=HEATMAP_CMAP, vmin=0.0, vmax=1.0, alpha=0.75)

    # Decision boundary only exists if the grid crosses the threshold
    if grid.values.min() < PROBABILITY_THRESHOLD <= grid.values.max():
        ax.contour(xx, yy, grid.values, levels=[PROBABILITY_THRESHOLD],
                   colors='black', linewidths=1.5)

    if samples is not None and not samples.is_empty:
        for label, color in enumerate(CLASS_COLORS):
            mask = samples.labels == label
            ax.scatter(samples.points[mask, 0], samples.points[mask, 1],
                       c=color, s=18, edgecolors='white', linewidths=0.5,
                       label=f"Class {label}")

    if support_vectors is not None and len(support_vectors):
        ax.scatter(support_vectors[:, 0], support_vectors[:, 1],
                   s=80, facecolors='none', edgecolors='black', linewidths=1.0,
                   label='Support vectors')

    ax.set_xlim(grid.xs[0], grid.xs[-1])
    ax.set_ylim(grid.ys[0], grid.ys[-1])
    ax.set_aspect('equal')
    if title:
        ax.set_title(title)
    return heatmap


def plot_decision_boundary(grid: ProbabilityGrid,
                           samples: Optional[SampleSet] = None,
                           support_vectors: Optional[np.ndarray] = None,
                           title: str = "Decision Boundary",
                           ax: Any = None,
                           figsize: Tuple[int, int] = FIGURE_SIZE,
                           save_path: Optional[str] = None) -> Any:
    """
    Plot a single classifier's decision boundary.

    Parameters
    ----------
    grid : ProbabilityGrid
        Class-1 probabilities over the mesh.
    samples : SampleSet, optional
        Training points.
    support_vectors : np.ndarray, optional
        Support vectors of a kernel SVM.
    title : str
        Plot title.
    ax : matplotlib.axes.Axes, optional
        Draw into this axes instead of a new figure.
    figsize : tuple
        Figure size (ignored when ax is given).
    save_path : str, optional
        Path to save the figure.

    Returns
    -------
    matplotlib.figure.Figure
    """
    import matplotlib.pyplot as plt

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    heatmap = draw_boundary(ax, grid, samples, support_vectors, title)
    fig.colorbar(heatmap, ax=ax, label='P(class 1)')
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    if samples is not None and not samples.is_empty:
        ax.legend(loc='upper right', fontsize=8)

    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_comparison(results: Mapping[Any, ComparisonResult],
                    samples: Optional[SampleSet] = None,
                    title: str = "Classifier Comparison",
                    figsize: Tuple[int, int] = COMPARISON_FIGURE_SIZE,
                    save_path: Optional[str] = None) -> Any:
    """
    Plot every classifier's boundary in a 2x3 panel grid.

    Failed classifiers get an empty panel with a "could not train" note.

    Returns
    -------
    matplotlib.figure.Figure
    """
    import matplotlib.pyplot as plt

    n_panels = max(len(results), 1)
    n_cols = 3
    n_rows = int(np.ceil(n_panels / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=figsize, squeeze=False)

    for ax, result in zip(axes.ravel(), results.values()):
        if result.ok:
            subtitle = f"{result.name} (acc {result.train_accuracy:.2f})"
            draw_boundary(ax, result.grid, samples, result.support_vectors, subtitle)
        else:
            ax.set_title(result.name)
            ax.text(0.5, 0.5, f"Could not train\n{result.error.kind}",
                    ha='center', va='center', transform=ax.transAxes, fontsize=11)
            ax.set_xticks([])
            ax.set_yticks([])

    # Hide unused panels
    for ax in axes.ravel()[len(results):]:
        ax.axis('off')

    fig.suptitle(title)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
