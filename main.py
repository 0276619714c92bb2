#!/usr/bin/env python3
"""
Decision Boundary Lab - Main Entry Point

Trains from-scratch classifiers on a synthetic 2-D dataset and shows how
each one partitions the plane.

Usage:
    python main.py                                  # Logistic regression on blobs
    python main.py --dataset moons --classifier rbf_svm
    python main.py --dataset xor --compare          # All six classifiers
    python main.py --compare --save comparison.png  # Save the figure
"""

import argparse
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import DatasetConfig, get_default_config
from classification import ClassifierComparison, ClassifierId, Mode, TrainingSession
from datasets_2d import dataset_from_config, list_patterns


def run_single(samples, classifier: str, save_path: str = None) -> bool:
    """Train one classifier through a session and report the result."""
    session = TrainingSession(samples, classifier_id=classifier, mode=Mode.SINGLE)
    session.refresh()
    display = session.display()

    if display.could_not_train:
        print(f"Could not train {session.classifier_id.display_name}: {display.error}")
        return False

    result = display.result
    print(f"Classifier:     {result.name}")
    print(f"Train accuracy: {result.train_accuracy:.4f}")
    print(f"Train time:     {result.train_time:.3f} s")
    print(f"Grid:           {result.grid.shape[0]} x {result.grid.shape[1]}")
    if result.support_vectors is not None:
        print(f"Support vectors: {len(result.support_vectors)}")

    if save_path:
        from visualization import plot_decision_boundary
        plot_decision_boundary(result.grid, samples, result.support_vectors,
                               title=result.name, save_path=save_path)
        print(f"Figure saved to {save_path}")
    return True


def run_comparison(samples, save_path: str = None, workers: int = None) -> bool:
    """Train all six classifiers and print the comparison table."""
    comparison = ClassifierComparison(samples)
    results = comparison.run(max_workers=workers, verbose=True)
    comparison.print_results()

    if save_path:
        from visualization import plot_comparison
        plot_comparison(results, samples, save_path=save_path)
        print(f"Figure saved to {save_path}")
    return not comparison.failures()


def main():
    """Main entry point."""
    defaults = get_default_config()['dataset']

    parser = argparse.ArgumentParser(
        description="Decision Boundary Lab - from-scratch classifiers on 2-D data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py --dataset moons --classifier rbf_svm
    python main.py --dataset xor --compare
    python main.py --compare --save comparison.png
        """
    )

    parser.add_argument('--dataset', choices=list_patterns(), default=defaults.pattern,
                        help='Dataset pattern')
    parser.add_argument('--noise', type=float, default=defaults.noise,
                        help='Gaussian jitter added to every point')
    parser.add_argument('--samples', type=int, default=defaults.n_samples,
                        help='Number of points')
    parser.add_argument('--seed', type=int, default=defaults.seed,
                        help='Random seed')
    parser.add_argument('--classifier', choices=[c.value for c in ClassifierId],
                        default=ClassifierId.LINEAR.value,
                        help='Classifier for single mode')
    parser.add_argument('--compare', action='store_true',
                        help='Run all six classifiers')
    parser.add_argument('--workers', type=int, default=None,
                        help='Thread pool size for --compare')
    parser.add_argument('--save', default=None,
                        help='Save the figure to this path')

    args = parser.parse_args()

    print("=" * 50)
    print("Decision Boundary Lab")
    print("=" * 50)
    print(f"Dataset: {args.dataset} (n={args.samples}, noise={args.noise}, seed={args.seed})")
    print()

    samples = dataset_from_config(DatasetConfig(pattern=args.dataset, noise=args.noise,
                                                n_samples=args.samples, seed=args.seed))

    if args.compare:
        ok = run_comparison(samples, args.save, args.workers)
    else:
        ok = run_single(samples, args.classifier, args.save)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
