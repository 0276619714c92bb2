"""
Labeled 2-D point sets.

A SampleSet is the only training input the classifiers accept. Its
arrays are read-only so a classifier can keep a reference (KNN does)
without copying and without risking mutation.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, Iterator, NamedTuple, Tuple


class Sample(NamedTuple):
    """One labeled point."""
    x: float
    y: float
    label: int


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, copy=True)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class SampleSet:
    """
    Ordered, immutable collection of labeled 2-D points.

    Attributes:
        points: (n_samples, 2) float array
        labels: (n_samples,) int array with values in {0, 1}
    """
    points: np.ndarray
    labels: np.ndarray

    def __post_init__(self):
        points = np.asarray(self.points, dtype=np.float64)
        labels = np.asarray(self.labels)

        if points.size == 0:
            points = points.reshape(0, 2)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {points.shape}")
        if labels.ndim != 1 or len(labels) != len(points):
            raise ValueError(
                f"labels must have shape ({len(points)},), got {labels.shape}")
        if not np.all(np.isfinite(points)):
            raise ValueError("points must be finite")
        if len(labels) and not np.all(np.isin(labels, (0, 1))):
            raise ValueError("labels must be 0 or 1")

        # Frozen dataclass: bypass __setattr__ to store normalized arrays
        object.__setattr__(self, 'points', _readonly(points))
        object.__setattr__(self, 'labels', _readonly(labels.astype(np.int64)))

    @classmethod
    def from_arrays(cls, points, labels) -> 'SampleSet':
        return cls(np.asarray(points, dtype=np.float64), np.asarray(labels))

    @classmethod
    def from_samples(cls, samples: Iterable[Tuple[float, float, int]]) -> 'SampleSet':
        """Build from an iterable of (x, y, label) triples."""
        rows = list(samples)
        points = [(float(x), float(y)) for x, y, _ in rows]
        labels = [int(label) for _, _, label in rows]
        return cls(np.array(points, dtype=np.float64).reshape(-1, 2),
                   np.array(labels, dtype=np.int64))

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self) -> Iterator[Sample]:
        for (x, y), label in zip(self.points, self.labels):
            yield Sample(float(x), float(y), int(label))

    @property
    def is_empty(self) -> bool:
        return len(self.labels) == 0

    def class_counts(self) -> Tuple[int, int]:
        """Number of samples labeled 0 and 1."""
        n_pos = int(np.sum(self.labels == 1))
        return len(self.labels) - n_pos, n_pos

    @property
    def has_both_classes(self) -> bool:
        n_neg, n_pos = self.class_counts()
        return n_neg > 0 and n_pos > 0
