"""Utility functions for visualization."""

from .visualization import plot_smoothed_spline, plot_basis

__all__ = [
    "plot_smoothed_spline",
    "plot_basis",
]
