"""Tests for plotting helpers."""

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from bspline_filter.splines.basis import BoundaryCondition, SplineBasis
from bspline_filter.splines.domain import SplineDomain
from bspline_filter.splines.smoothed import SmoothedSpline
from bspline_filter.utils import plot_basis, plot_smoothed_spline


class TestVisualization:
    """Smoke tests for the plotting helpers."""

    def test_plot_smoothed_spline(self):
        """Test plotting a fit with its samples."""
        x = np.linspace(0, 10, 100)
        y = np.sin(x)
        spline = SplineDomain(x, wavelength=2.0).fit(y)

        fig, ax = plt.subplots()
        result = plot_smoothed_spline(spline, x, y, ax=ax)

        assert result is ax
        assert len(ax.lines) == 2
        plt.close(fig)

    def test_plot_invalid_spline(self):
        """Test that an invalid fit draws only the samples."""
        ax = plot_smoothed_spline(SmoothedSpline.invalid(), [0, 1], [1, 2])
        assert len(ax.lines) == 0
        plt.close(ax.figure)

    def test_plot_basis(self):
        """Test plotting selected basis functions."""
        basis = SplineBasis(xmin=0.0, dx=1.0, n_intervals=6,
                            boundary=BoundaryCondition.ZERO_CURVATURE)
        ax = plot_basis(basis, nodes=[0, 1, 2])
        assert "ZERO_CURVATURE" in ax.get_title()
        # Three curves plus one marker line per node
        assert len(ax.lines) == 3 + basis.n_nodes
        plt.close(ax.figure)
