"""
Classifier Comparison over one 2-D dataset.

Fits all six classifiers on the same SampleSet and evaluates each one on
the same mesh, producing six independent (grid | error) panels:
- Logistic Regression
- SVM (Polynomial)
- SVM (RBF)
- KNN
- Decision Tree
- Neural Network (MLP)

A failure in one classifier is recorded in its own result and never
stops the others.
"""

import numpy as np
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional

from config import MeshConfig
from ml_from_scratch import ClassifierError, SampleSet
from .mesh import ProbabilityGrid, evaluate_mesh
from .registry import (
    ClassifierId,
    Hyperparameters,
    build_classifier,
    default_hyperparameter_table,
    parse_classifier_id,
)


@dataclass
class ComparisonResult:
    """Outcome of fitting and evaluating one classifier."""
    classifier_id: ClassifierId
    grid: Optional[ProbabilityGrid] = None
    error: Optional[ClassifierError] = None
    train_accuracy: Optional[float] = None
    train_time: float = 0.0
    support_vectors: Optional[np.ndarray] = None
    model: object = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def name(self) -> str:
        return self.classifier_id.display_name


def fit_and_evaluate(classifier_id: ClassifierId,
                     samples: SampleSet,
                     params: Hyperparameters,
                     mesh: MeshConfig,
                     on_fitted: Optional[Callable[[ClassifierId], None]] = None) -> ComparisonResult:
    """
    Fit one classifier and evaluate its mesh.

    Pure function of its inputs: a new classifier is built for every
    call, so concurrent calls share no model state. Classifier failures
    are returned in the result; anything else propagates. `on_fitted` is
    called between fitting and mesh evaluation.
    """
    start = time.perf_counter()
    try:
        model = build_classifier(classifier_id, params)
        model.fit(samples)
        if on_fitted is not None:
            on_fitted(classifier_id)
        grid = evaluate_mesh(model, mesh)
    except ClassifierError as e:
        if e.classifier is None:
            e.classifier = classifier_id.value
        return ComparisonResult(classifier_id=classifier_id, error=e,
                                train_time=time.perf_counter() - start)

    return ComparisonResult(
        classifier_id=classifier_id,
        grid=grid,
        train_accuracy=model.score(samples),
        train_time=time.perf_counter() - start,
        support_vectors=getattr(model, 'support_vectors_', None),
        model=model,
    )


class ClassifierComparison:
    """
    Compare all classifiers on one dataset.

    Usage:
        comparison = ClassifierComparison(samples)
        results = comparison.run()
        comparison.print_results()
    """

    def __init__(self,
                 samples: SampleSet,
                 hyperparameters: Optional[Mapping[ClassifierId, Hyperparameters]] = None,
                 mesh: Optional[MeshConfig] = None):
        """
        Initialize comparison.

        Args:
            samples: Training set shared by every classifier
            hyperparameters: Per-classifier settings; missing entries use defaults
            mesh: Evaluation grid (defaults to [-3, 3]^2, step 0.1)
        """
        self.samples = samples
        self.hyperparameters = default_hyperparameter_table()
        if hyperparameters:
            self.hyperparameters.update(
                {parse_classifier_id(k): v for k, v in hyperparameters.items()})
        self.mesh = mesh if mesh is not None else MeshConfig()
        self.results: Dict[ClassifierId, ComparisonResult] = {}

    def run(self, max_workers: Optional[int] = None,
            verbose: bool = False,
            on_fitted: Optional[Callable[[ClassifierId], None]] = None) -> Dict[ClassifierId, ComparisonResult]:
        """
        Run every classifier.

        Args:
            max_workers: If > 1, fit the classifiers on a thread pool
            verbose: Print progress
            on_fitted: Called with each id once that classifier is fitted

        Returns:
            Mapping from ClassifierId to ComparisonResult, in panel order
        """
        ids = list(ClassifierId)

        if max_workers is not None and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {
                    cid: executor.submit(fit_and_evaluate, cid, self.samples,
                                         self.hyperparameters[cid], self.mesh, on_fitted)
                    for cid in ids
                }
                results = {cid: futures[cid].result() for cid in ids}
        else:
            results = {}
            for cid in ids:
                if verbose:
                    print(f"Training {cid.display_name}...")
                results[cid] = fit_and_evaluate(cid, self.samples,
                                                self.hyperparameters[cid], self.mesh,
                                                on_fitted)

        self.results = results
        if verbose:
            print("Comparison complete!")
        return results

    def failures(self) -> Dict[ClassifierId, ClassifierError]:
        return {cid: r.error for cid, r in self.results.items() if not r.ok}

    def print_results(self):
        """Print comparison results as a formatted table."""
        if not self.results:
            print("No results. Run run() first.")
            return

        print("\n" + "=" * 72)
        print(f"CLASSIFIER COMPARISON ({len(self.samples)} samples)")
        print("=" * 72)
        print(f"{'Model':<22} {'Train Acc':<10} {'Time (s)':<10} {'Status':<28}")
        print("-" * 72)

        for r in self.results.values():
            if r.ok:
                status = 'ok'
                if r.support_vectors is not None:
                    status = f"ok ({len(r.support_vectors)} support vectors)"
                print(f"{r.name:<22} {r.train_accuracy:<10.4f} {r.train_time:<10.3f} {status:<28}")
            else:
                print(f"{r.name:<22} {'-':<10} {r.train_time:<10.3f} {r.error.kind:<28}")

        print("-" * 72)

        succeeded = [r for r in self.results.values() if r.ok]
        if succeeded:
            best = max(succeeded, key=lambda x: x.train_accuracy)
            print(f"\nBest Model: {best.name} (Train Acc: {best.train_accuracy:.4f})")

    def to_dict(self) -> List[Dict]:
        """Export results as list of dictionaries."""
        return [
            {
                'classifier': cid.value,
                'name': r.name,
                'ok': r.ok,
                'train_accuracy': r.train_accuracy,
                'train_time': r.train_time,
                'error': None if r.ok else {'kind': r.error.kind, 'message': r.error.message},
            }
            for cid, r in self.results.items()
        ]


def compare_classifiers(samples: SampleSet,
                        hyperparameters: Optional[Mapping[ClassifierId, Hyperparameters]] = None,
                        mesh: Optional[MeshConfig] = None,
                        max_workers: Optional[int] = None) -> Dict[ClassifierId, ComparisonResult]:
    """
    Convenience function: run all six classifiers and return their results.
    """
    return ClassifierComparison(samples, hyperparameters, mesh).run(max_workers=max_workers)
