"""Least-squares data term of the smoothing problem.

For samples ``x_j`` with values ``y_j`` the data term is
``sum_j (y_j - mean - sum_m a_m b_m(x_j))^2``. Its normal equations are
``P a = B`` with ``P[m][n] = sum_j b_m(x_j) b_n(x_j)`` and
``B[m] = sum_j (y_j - mean) b_m(x_j)``. Every sample touches only the few
nodes around the interval containing it, so both sums run over a small
window of nodes per sample.
"""

from __future__ import annotations

import numpy as np

from ..linalg import BandedMatrix
from .basis import SplineBasis

# Nodes m0-2 .. m0+2 can be nonzero at a sample in interval m0
WINDOW_BELOW = 2
WINDOW_ABOVE = 2
PAIR_REACH = 3


def accumulate_data_fit(
    matrix: BandedMatrix,
    basis: SplineBasis,
    samples: np.ndarray
) -> BandedMatrix:
    """Add the normal-equations matrix P of the samples into ``matrix``.

    Both triangles receive identical additions in identical order, so a
    symmetric input stays exactly symmetric.

    Args:
        matrix: (M+1)x(M+1) banded matrix with bandwidth >= 3, usually
            already holding the smoothness penalty.
        basis: Grid the samples are fitted on.
        samples: Sample positions, shape (NX,).

    Returns:
        The same matrix, for chaining.
    """
    M = basis.n_intervals
    nodes, values = basis.local_values(
        samples, WINDOW_BELOW, WINDOW_ABOVE + PAIR_REACH
    )

    for dm in range(WINDOW_BELOW + WINDOW_ABOVE + 1):
        m = nodes[:, dm]
        pm = values[:, dm]
        rows = (m >= 0) & (m <= M)

        matrix.accumulate(m[rows], m[rows], pm[rows] * pm[rows])

        for dn in range(1, PAIR_REACH + 1):
            n = nodes[:, dm + dn]
            pair = rows & (n <= M)
            products = pm[pair] * values[pair, dm + dn]
            matrix.accumulate(m[pair], n[pair], products)
            matrix.accumulate(n[pair], m[pair], products)

    return matrix


def data_rhs(
    basis: SplineBasis,
    samples: np.ndarray,
    values: np.ndarray,
    mean: float
) -> np.ndarray:
    """Right-hand side ``B[m] = sum_j (values[j] - mean) b_m(samples[j])``.

    Args:
        basis: Grid the samples are fitted on.
        samples: Sample positions, shape (NX,).
        values: Observed values aligned with ``samples``.
        mean: Value subtracted from every observation.

    Returns:
        Vector of length M+1.
    """
    M = basis.n_intervals
    nodes, weights = basis.local_values(samples, WINDOW_BELOW, WINDOW_ABOVE)
    centered = np.asarray(values, dtype=np.float64) - mean

    rhs = np.zeros(basis.n_nodes)
    for dm in range(WINDOW_BELOW + WINDOW_ABOVE + 1):
        m = nodes[:, dm]
        rows = (m >= 0) & (m <= M)
        np.add.at(rhs, m[rows], centered[rows] * weights[rows, dm])
    return rhs
