"""
Synthetic 2-D datasets (six named patterns).
"""

from .patterns import PATTERNS, dataset_from_config, generate_dataset, list_patterns

__all__ = [
    'PATTERNS',
    'dataset_from_config',
    'generate_dataset',
    'list_patterns',
]
