"""Tests for the smoothness penalty and the data-fit terms."""

import numpy as np
import pytest

from bspline_filter.linalg import BandedMatrix
from bspline_filter.splines.basis import BoundaryCondition, SplineBasis
from bspline_filter.splines.datafit import accumulate_data_fit, data_rhs
from bspline_filter.splines.penalty import (
    BANDWIDTH,
    SmoothnessPenalty,
    smoothing_weight,
)


class TestSmoothingWeight:
    """Tests for the penalty weight."""

    def test_first_order(self):
        """Test alpha for the first derivative."""
        assert smoothing_weight(2 * np.pi) == pytest.approx(1.0)
        assert smoothing_weight(4 * np.pi, 1) == pytest.approx(4.0)

    def test_higher_orders(self):
        """Test alpha for the second and third derivatives."""
        assert smoothing_weight(4 * np.pi, 2) == pytest.approx(16.0)
        assert smoothing_weight(4 * np.pi, 3) == pytest.approx(64.0)

    def test_disabled(self):
        """Test that wavelength 0 turns the penalty off."""
        assert smoothing_weight(0.0) == 0.0


class TestSmoothnessPenalty:
    """Tests for SmoothnessPenalty."""

    def make_penalty(self, boundary=BoundaryCondition.ZERO_DERIVATIVE, n_intervals=20,
                     dx=0.5, alpha=2.0):
        basis = SplineBasis(xmin=0.0, dx=dx, n_intervals=n_intervals, boundary=boundary)
        return SmoothnessPenalty(basis, alpha)

    def test_interior_entries(self):
        """Test tabulated integrals away from the ends."""
        penalty = self.make_penalty()
        scale = 0.5 * 2.0
        assert penalty.q_delta(10, 10) == pytest.approx(1.5 * scale)
        assert penalty.q_delta(10, 11) == pytest.approx(-0.28125 * scale)
        assert penalty.q_delta(10, 12) == pytest.approx(-0.45 * scale)
        assert penalty.q_delta(10, 13) == pytest.approx(-0.01875 * scale)

    def test_interior_row_sums_to_zero(self):
        """Test that a constant shift has no derivative energy in the interior."""
        penalty = self.make_penalty()
        row = sum(penalty.q_delta(10, j) for j in range(7, 14))
        assert row == pytest.approx(0.0, abs=1e-12)

    def test_symmetric_and_banded(self):
        """Test symmetry and the zero entries beyond three nodes."""
        penalty = self.make_penalty(n_intervals=8)
        for m1 in range(-1, 10):
            for m2 in range(-1, 10):
                assert penalty.q_delta(m1, m2) == penalty.q_delta(m2, m1)
                if abs(m1 - m2) > BANDWIDTH:
                    assert penalty.q_delta(m1, m2) == 0.0

    def test_integral_restricted_to_domain(self):
        """Test that end nodes only see the intervals inside the grid."""
        penalty = self.make_penalty(dx=1.0, alpha=1.0)
        assert penalty.q_delta(0, 0) == pytest.approx(0.6375 + 0.1125)
        assert penalty.q_delta(20, 20) == pytest.approx(0.1125 + 0.6375)

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    def test_assembled_matrix_symmetric(self, boundary):
        """Test exact symmetry for every boundary condition."""
        matrix = self.make_penalty(boundary=boundary).assemble()
        assert matrix.n == 21
        assert matrix.bandwidth == BANDWIDTH
        assert matrix.is_symmetric()
        assert np.any(matrix.to_dense() != 0)

    def test_zero_alpha_gives_zero_matrix(self):
        """Test that a disabled penalty clears the target matrix."""
        penalty = self.make_penalty(alpha=0.0)
        matrix = BandedMatrix(21, BANDWIDTH)
        matrix[3, 3] = 7.0
        penalty.assemble(matrix)
        assert np.all(matrix.to_dense() == 0)

    def test_boundary_changes_end_rows_only(self):
        """Test that boundary patches touch only the first and last rows."""
        plain = self.make_penalty(boundary=BoundaryCondition.ZERO_DERIVATIVE).assemble()
        other = self.make_penalty(boundary=BoundaryCondition.ZERO_ENDPOINTS).assemble()
        diff = plain.to_dense() - other.to_dense()
        assert np.any(diff[:2] != 0)
        np.testing.assert_array_equal(diff[5:16, 5:16], 0.0)

    def test_wrong_matrix_shape(self):
        """Test rejection of a mismatched target matrix."""
        penalty = self.make_penalty()
        with pytest.raises(ValueError):
            penalty.assemble(BandedMatrix(5, BANDWIDTH))

    # Q[0..1][0..4] on a long grid with dx * alpha == 1
    LEFT_CORNERS = {
        BoundaryCondition.ZERO_ENDPOINTS: [
            [1.5, 0.80625, -0.375, -0.01875, 0.0],
            [0.80625, 1.95, -0.2625, -0.45, -0.01875],
        ],
        BoundaryCondition.ZERO_DERIVATIVE: [
            [0.75, -0.28125, -0.45, -0.01875, 0.0],
            [-0.28125, 1.05, -0.3, -0.45, -0.01875],
        ],
        BoundaryCondition.ZERO_CURVATURE: [
            [1.725, -1.21875, -0.4875, -0.01875, 0.0],
            [-1.21875, 1.95, -0.2625, -0.45, -0.01875],
        ],
    }

    # Whole matrix for a single interval, where both end patches overlap
    SINGLE_INTERVAL = {
        BoundaryCondition.ZERO_ENDPOINTS: [[1.05, 0.825], [0.825, 4.9875]],
        BoundaryCondition.ZERO_DERIVATIVE: [[0.675, -0.6375], [-0.6375, 0.6375]],
        BoundaryCondition.ZERO_CURVATURE: [[1.05, -1.0875], [-1.0875, 1.1625]],
    }

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    def test_corner_values(self, boundary):
        """Test both corner blocks against hand-computed values."""
        penalty = self.make_penalty(boundary=boundary, n_intervals=12, dx=0.5, alpha=4.0)
        dense = penalty.assemble().to_dense()
        expected = 2.0 * np.array(self.LEFT_CORNERS[boundary])

        np.testing.assert_allclose(dense[:2, :5], expected, atol=1e-12)
        # The right corner mirrors the left one
        np.testing.assert_allclose(dense[12:10:-1, 12:7:-1], expected, atol=1e-12)

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    def test_single_interval(self, boundary):
        """Test the clamped patches on a one-interval grid."""
        dense = self.make_penalty(boundary=boundary, n_intervals=1, dx=1.0,
                                  alpha=1.0).assemble().to_dense()
        np.testing.assert_allclose(dense, self.SINGLE_INTERVAL[boundary], atol=1e-12)

    def test_three_intervals(self):
        """Test a grid where end nodes get patches from both sides."""
        dense = self.make_penalty(n_intervals=3, dx=1.0, alpha=1.0).assemble().to_dense()
        expected = np.array([
            [0.75, -0.28125, -0.31875, -0.01875],
            [-0.28125, 1.05, -0.54375, -0.31875],
            [-0.31875, -0.54375, 1.05, -0.28125],
            [-0.01875, -0.31875, -0.28125, 0.75],
        ])
        np.testing.assert_allclose(dense, expected, atol=1e-12)

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    def test_matches_derivative_gram(self, boundary):
        """Test Q against integrated products of basis derivatives."""
        basis = SplineBasis(xmin=0.0, dx=1.0, n_intervals=10, boundary=boundary)
        dense = SmoothnessPenalty(basis, 1.0).assemble().to_dense()

        # Derivative products are quartic per interval; 3-point Gauss is exact
        t, w = np.polynomial.legendre.leggauss(3)
        x = (np.arange(10)[:, None] + 0.5 * (t[None, :] + 1)).ravel()
        weights = np.tile(0.5 * w, 10)
        h = 1e-6
        slopes = (basis.design_matrix(x + h) - basis.design_matrix(x - h)) / (2 * h)
        gram = slopes.T @ (weights[:, None] * slopes)

        np.testing.assert_allclose(dense, gram, atol=1e-6)


class TestDataFit:
    """Tests for the normal-equations terms."""

    def setup_samples(self, boundary=BoundaryCondition.ZERO_DERIVATIVE):
        rng = np.random.default_rng(7)
        basis = SplineBasis(xmin=0.0, dx=1.0, n_intervals=10, boundary=boundary)
        x = np.concatenate([[0.0, 10.0], rng.uniform(0, 10, 50)])
        y = np.sin(x) + 0.1 * rng.normal(size=len(x))
        return basis, x, y

    @pytest.mark.parametrize("boundary", list(BoundaryCondition))
    def test_matrix_matches_design(self, boundary):
        """Test P against the dense product of the design matrix."""
        basis, x, _ = self.setup_samples(boundary)
        design = basis.design_matrix(x)

        matrix = accumulate_data_fit(BandedMatrix(basis.n_nodes, BANDWIDTH), basis, x)

        np.testing.assert_allclose(matrix.to_dense(), design.T @ design, atol=1e-12)
        assert matrix.is_symmetric()

    def test_adds_to_existing_entries(self):
        """Test that P is accumulated on top of the penalty."""
        basis, x, _ = self.setup_samples()
        penalty = SmoothnessPenalty(basis, 0.3).assemble()
        q = penalty.to_dense()

        accumulate_data_fit(penalty, basis, x)

        design = basis.design_matrix(x)
        np.testing.assert_allclose(penalty.to_dense(), q + design.T @ design, atol=1e-12)
        assert penalty.is_symmetric()

    def test_rhs_matches_design(self):
        """Test B against the dense product with centered values."""
        basis, x, y = self.setup_samples()
        mean = float(np.mean(y))
        rhs = data_rhs(basis, x, y, mean)
        np.testing.assert_allclose(rhs, basis.design_matrix(x).T @ (y - mean), atol=1e-12)

    def test_rhs_of_constant_values(self):
        """Test that values equal to their mean give a zero right-hand side."""
        basis, x, _ = self.setup_samples()
        rhs = data_rhs(basis, x, np.full(len(x), 5.0), 5.0)
        np.testing.assert_array_equal(rhs, np.zeros(basis.n_nodes))
