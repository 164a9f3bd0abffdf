"""Smoothness penalty: the quadratic form of first-derivative energy.

The penalty of a coefficient vector ``a`` is ``a^T Q a`` where ``Q[m1][m2]``
integrates the product of the derivatives of basis functions m1 and m2 over
the node domain [0, M]. For the uniform cubic kernel those integrals are
closed-form per unit interval and are tabulated below; only separations of up
to three nodes overlap.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..linalg import BandedMatrix
from .basis import SplineBasis

BANDWIDTH = 3

#: QUADRATURE[s][k]: derivative product of two kernels s nodes apart,
#: integrated over the k-th unit interval of the left kernel's support.
QUADRATURE: tuple[tuple[float, ...], ...] = (
    (0.11250, 0.63750, 0.63750, 0.11250),
    (0.00000, 0.13125, -0.54375, 0.13125),
    (0.00000, 0.00000, -0.22500, -0.22500),
    (0.00000, 0.00000, 0.00000, -0.01875),
)


def smoothing_weight(wavelength: float, derivative_order: int = 1) -> float:
    """Penalty weight alpha for a cutoff wavelength.

    ``alpha = (wavelength / 2pi)^(2K)`` for derivative order K.

    Args:
        wavelength: Cutoff wavelength, 0 disables the penalty.
        derivative_order: Order K of the constrained derivative (1, 2 or 3).

    Returns:
        Non-negative weight alpha.
    """
    a = wavelength / (2 * np.pi)
    a *= a
    if derivative_order == 2:
        a *= a
    elif derivative_order == 3:
        a *= a * a
    return float(a)


@dataclass(frozen=True)
class SmoothnessPenalty:
    """Builder for the banded penalty matrix on one grid.

    Attributes:
        basis: Grid and boundary condition.
        alpha: Penalty weight from :func:`smoothing_weight`.
    """
    basis: SplineBasis
    alpha: float

    def q_delta(self, m1: int, m2: int) -> float:
        """Weighted derivative-product integral for nodes ``m1`` and ``m2``.

        Virtual nodes (-1, M+1) are allowed; the integral is restricted to
        the unit intervals of the node domain covered by ``min(m1, m2)``.
        """
        if m1 > m2:
            m1, m2 = m2, m1
        separation = m2 - m1
        if separation > BANDWIDTH:
            return 0.0

        parts = QUADRATURE[separation]
        q = 0.0
        for m in range(max(m1 - 2, 0), min(m1 + 2, self.basis.n_intervals)):
            q += parts[m - m1 + 2]
        return q * self.basis.dx * self.alpha

    def assemble(self, matrix: BandedMatrix | None = None) -> BandedMatrix:
        """Write the penalty into ``matrix``, replacing its contents.

        Args:
            matrix: (M+1)x(M+1) banded matrix to fill; a new one is
                allocated if omitted.

        Returns:
            The filled matrix. All zeros when alpha is 0.
        """
        basis = self.basis
        M = basis.n_intervals
        if matrix is None:
            matrix = BandedMatrix(basis.n_nodes, BANDWIDTH)
        elif matrix.n != basis.n_nodes or matrix.bandwidth < BANDWIDTH:
            raise ValueError(
                f"Penalty needs a {basis.n_nodes}x{basis.n_nodes} matrix with "
                f"bandwidth >= {BANDWIDTH}, got {matrix!r}"
            )
        matrix.zero()
        if self.alpha == 0:
            return matrix

        for i in range(M + 1):
            matrix[i, i] = self.q_delta(i, i)
            for j in range(i + 1, min(i + BANDWIDTH, M) + 1):
                q = self.q_delta(i, j)
                matrix[i, j] = q
                matrix[j, i] = q

        self._patch_left(matrix)
        self._patch_right(matrix)
        return matrix

    def _patch_left(self, matrix: BandedMatrix) -> None:
        # Contribution of the reflected kernel on virtual node -1
        beta = self.basis.beta
        M = self.basis.n_intervals
        for i in range(0, min(1, M) + 1):
            b1 = beta(i)
            for j in range(i, min(i + BANDWIDTH, M) + 1):
                b2 = beta(j)
                q = b2 * self.q_delta(-1, i)
                if j + 1 <= BANDWIDTH:
                    q += b1 * self.q_delta(-1, j)
                q += b1 * b2 * self.q_delta(-1, -1)
                matrix.add_symmetric(i, j, q)

    def _patch_right(self, matrix: BandedMatrix) -> None:
        # Contribution of the reflected kernel on virtual node M+1
        beta = self.basis.beta
        M = self.basis.n_intervals
        for i in range(max(M - 1, 0), M + 1):
            b1 = beta(i)
            for j in range(max(i - BANDWIDTH, 0), i + 1):
                b2 = beta(j)
                q = b2 * self.q_delta(i, M + 1)
                if M + 1 - j <= BANDWIDTH:
                    q += b1 * self.q_delta(j, M + 1)
                q += b1 * b2 * self.q_delta(M + 1, M + 1)
                matrix.add_symmetric(i, j, q)
