"""
Visualization: decision boundary heatmaps and comparison panels.
"""

from .boundary_plot import draw_boundary, plot_comparison, plot_decision_boundary

__all__ = [
    'draw_boundary',
    'plot_comparison',
    'plot_decision_boundary',
]
