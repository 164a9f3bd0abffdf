"""Tests for evaluating fitted curves."""

import numpy as np
import pytest

from bspline_filter.splines.basis import BoundaryCondition, SplineBasis
from bspline_filter.splines.domain import SplineDomain
from bspline_filter.splines.smoothed import SmoothedSpline


@pytest.fixture
def fitted():
    np.random.seed(42)
    x = np.linspace(0, 10, 200)
    y = np.cos(x) + np.random.normal(0, 0.05, len(x))
    return x, y, SplineDomain(x, wavelength=1.0).fit(y)


class TestSmoothedSpline:
    """Tests for SmoothedSpline."""

    def test_evaluate_types(self, fitted):
        """Test scalar and array evaluation."""
        x, _, spline = fitted
        assert isinstance(spline.evaluate(2.5), float)
        assert spline.evaluate(x).shape == x.shape
        assert spline(2.5) == spline.evaluate(2.5)
        assert spline.evaluate_batch(2.5).shape == (1,)

    def test_evaluate_matches_coefficients(self, fitted):
        """Test evaluation against the explicit basis expansion."""
        x, _, spline = fitted
        design = spline.basis.design_matrix(x)
        np.testing.assert_allclose(
            spline.evaluate(x), design @ spline.coefficients + spline.mean, atol=1e-12
        )

    def test_curve_is_cached(self, fitted):
        """Test that node values are computed once and agree with evaluate."""
        _, _, spline = fitted
        curve = spline.curve()
        assert spline.curve() is curve
        assert len(curve) == spline.n_intervals + 1
        np.testing.assert_allclose(curve, spline.evaluate(spline.nodes()))
        with pytest.raises(ValueError):
            curve[0] = 1.0

    def test_nodes(self, fitted):
        """Test that nodes span the sample range."""
        x, _, spline = fitted
        nodes = spline.nodes()
        assert nodes[0] == x.min()
        assert nodes[-1] == pytest.approx(x.max())
        np.testing.assert_array_equal(spline.nodes(), nodes)

    def test_coefficient_access(self, fitted):
        """Test single coefficients and the returned copy."""
        _, _, spline = fitted
        coefficients = spline.coefficients
        assert spline.coefficient(3) == coefficients[3]
        assert spline.coefficient(-1) == 0.0
        assert spline.coefficient(spline.n_intervals + 1) == 0.0

        coefficients[3] = 100.0
        assert spline.coefficient(3) != 100.0

    def test_residuals(self, fitted):
        """Test observed-minus-smoothed residuals."""
        x, y, spline = fitted
        residuals = spline.residuals(x, y)
        np.testing.assert_allclose(residuals, y - spline.evaluate(x))
        assert np.std(residuals) < 0.1

    def test_invalid(self):
        """Test the neutral result."""
        spline = SmoothedSpline.invalid()
        assert not spline.valid
        assert spline.n_intervals == 0
        assert spline.evaluate(1.0) == 0.0
        np.testing.assert_array_equal(spline.evaluate(np.arange(3.0)), np.zeros(3))
        assert len(spline.coefficients) == 0
        assert "invalid" in repr(spline)

    def test_coefficient_count_checked(self):
        """Test that coefficients must match the grid."""
        basis = SplineBasis(xmin=0.0, dx=1.0, n_intervals=4)
        with pytest.raises(ValueError):
            SmoothedSpline(basis, np.zeros(3))
        spline = SmoothedSpline(basis, np.zeros(5), 2.0)
        assert spline.evaluate(1.7) == 2.0

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    @pytest.mark.parametrize("n_intervals", [1, 2, 3, 12])
    def test_local_evaluation_matches_full_sum(self, boundary, n_intervals):
        """Test windowed evaluation against summing every basis function."""
        rng = np.random.default_rng(11)
        basis = SplineBasis(xmin=-1.0, dx=0.5, n_intervals=n_intervals, boundary=boundary)
        spline = SmoothedSpline(basis, rng.normal(size=basis.n_nodes), 0.25)

        # Includes points up to three intervals beyond either end
        x = np.linspace(basis.xmin - 1.5, basis.xmax + 1.5, 301)
        full = basis.design_matrix(x) @ spline.coefficients + spline.mean

        np.testing.assert_allclose(spline.evaluate(x), full, atol=1e-12)
        at_end = basis.design_matrix([basis.xmax])[0] @ spline.coefficients + 0.25
        assert spline.evaluate(basis.xmax) == pytest.approx(at_end)

    def test_evaluate_keeps_shape(self, fitted):
        """Test 2D input and empty input."""
        _, _, spline = fitted
        grid = np.linspace(1, 9, 12).reshape(3, 4)
        values = spline.evaluate(grid)
        assert values.shape == (3, 4)
        np.testing.assert_allclose(values.ravel(), spline.evaluate(grid.ravel()))
        assert spline.evaluate(np.empty(0)).shape == (0,)
