"""
Mesh evaluation of a trained classifier.

Samples predict_proba over a regular 2-D lattice so the renderer can
draw a heatmap and extract the 0.5 contour (the decision boundary).
"""

import numpy as np
from dataclasses import dataclass
from typing import Tuple

from config import MeshConfig, PROBABILITY_THRESHOLD


@dataclass(frozen=True, eq=False)
class ProbabilityGrid:
    """
    Class-1 probabilities on a lattice.

    values[i, j] is the probability at (xs[j], ys[i]); rows follow the
    y axis, columns the x axis.
    """
    xs: np.ndarray
    ys: np.ndarray
    values: np.ndarray

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def boundary_mask(self, threshold: float = PROBABILITY_THRESHOLD) -> np.ndarray:
        """
        Cells with a 4-neighbor on the other side of the threshold, i.e.
        cells touching the decision boundary.
        """
        above = self.values >= threshold
        mask = np.zeros_like(above)
        horizontal = above[:, :-1] != above[:, 1:]
        vertical = above[:-1, :] != above[1:, :]
        mask[:, :-1] |= horizontal
        mask[:, 1:] |= horizontal
        mask[:-1, :] |= vertical
        mask[1:, :] |= vertical
        return mask


def make_axis(start: float, stop: float, step: float) -> np.ndarray:
    """
    Evenly spaced coordinates from start to stop inclusive.

    The number of points is round((stop - start) / step) + 1, so the grid
    size does not depend on floating point accumulation.
    """
    if not np.isfinite(step) or step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if not (np.isfinite(start) and np.isfinite(stop)) or stop < start:
        raise ValueError(f"Invalid range [{start}, {stop}]")
    n_points = int(round((stop - start) / step)) + 1
    return start + step * np.arange(n_points)


def evaluate_mesh(model, mesh: MeshConfig = None) -> ProbabilityGrid:
    """
    Evaluate a trained classifier over the grid defined by `mesh`.

    Rows are evaluated top to bottom in row-major order with one batched
    predict_proba call per row. No state is kept between calls.

    Args:
        model: Fitted classifier exposing predict_proba
        mesh: Coordinate ranges and step (defaults to [-3, 3]^2, step 0.1)

    Returns:
        ProbabilityGrid of shape (len(ys), len(xs))
    """
    if mesh is None:
        mesh = MeshConfig()

    xs = make_axis(mesh.x_min, mesh.x_max, mesh.step)
    ys = make_axis(mesh.y_min, mesh.y_max, mesh.step)

    values = np.empty((len(ys), len(xs)))
    for row, y in enumerate(ys):
        row_points = np.column_stack([xs, np.full(len(xs), y)])
        values[row] = model.predict_proba(row_points)

    for array in (xs, ys, values):
        array.setflags(write=False)
    return ProbabilityGrid(xs=xs, ys=ys, values=values)
