"""Visualization utilities for smoothed splines and their basis."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from ..splines.basis import SplineBasis
    from ..splines.smoothed import SmoothedSpline


def plot_smoothed_spline(
    spline: SmoothedSpline,
    x: np.ndarray | None = None,
    y: np.ndarray | None = None,
    ax: plt.Axes | None = None,
    n_points: int = 500,
    show_nodes: bool = True,
    **kwargs
) -> plt.Axes:
    """Plot a smoothed curve over its grid, with optional samples.

    Args:
        spline: Fitted spline to plot.
        x: Optional sample positions to scatter.
        y: Optional observed values at ``x``.
        ax: Matplotlib axes (creates new if None).
        n_points: Number of evaluation points along the curve.
        show_nodes: Mark the curve values at the grid nodes.
        **kwargs: Additional arguments to ax.plot for the curve.

    Returns:
        The matplotlib axes.
    """
    if ax is None:
        fig, ax = plt.subplots()

    if x is not None and y is not None:
        ax.scatter(x, y, s=8, c='gray', alpha=0.5, label='Samples')

    if spline.valid:
        nodes = spline.nodes()
        x_grid = np.linspace(nodes[0], nodes[-1], n_points)
        kwargs.setdefault('color', 'tab:blue')
        kwargs.setdefault('label', 'Smoothed')
        ax.plot(x_grid, spline.evaluate_batch(x_grid), **kwargs)

        if show_nodes:
            ax.plot(nodes, spline.curve(), 'o', color='tab:red',
                    markersize=3, label=f'Nodes (M={spline.n_intervals})')

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.legend()

    return ax


def plot_basis(
    basis: SplineBasis,
    ax: plt.Axes | None = None,
    nodes: list[int] | None = None,
    n_points: int = 400
) -> plt.Axes:
    """Plot boundary-corrected basis functions over the node domain.

    Args:
        basis: Grid whose basis functions are drawn.
        ax: Matplotlib axes.
        nodes: Node indices to draw (default: all).
        n_points: Number of evaluation points.

    Returns:
        The matplotlib axes.
    """
    if ax is None:
        fig, ax = plt.subplots()

    if nodes is None:
        nodes = list(range(basis.n_nodes))

    x_grid = np.linspace(basis.xmin, basis.xmax, n_points)
    for m in nodes:
        ax.plot(x_grid, basis.evaluate(m, x_grid), label=f'b_{m}')

    for position in basis.nodes:
        ax.axvline(position, color='gray', alpha=0.2, linewidth=0.5)

    ax.set_xlabel('x')
    ax.set_ylabel('basis value')
    ax.set_title(f'Basis ({basis.boundary.name}, M={basis.n_intervals})')
    if len(nodes) <= 12:
        ax.legend(fontsize='small')

    return ax
