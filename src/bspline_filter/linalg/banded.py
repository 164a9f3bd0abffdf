"""Banded matrix storage and LU factorization backed by LAPACK.

Matrices are kept in the diagonal-ordered form used by
:func:`scipy.linalg.solve_banded`: element ``a[i, j]`` lives at
``data[bandwidth + i - j, j]``. Factorization and solution go through the
LAPACK routines ``?gbtrf`` and ``?gbtrs`` so one factorization can be reused
for any number of right-hand sides.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.linalg import get_lapack_funcs

from ..errors import FactorizationFailedError, SolveFailedError


class BandedMatrix:
    """Square matrix whose nonzeros lie within ``bandwidth`` of the diagonal.

    Entries outside the band are structural zeros: they read as 0.0 and
    cannot be written.
    """

    def __init__(self, n: int, bandwidth: int, dtype=np.float64):
        if n < 1:
            raise ValueError(f"Matrix dimension must be positive, got {n}")
        if bandwidth < 0:
            raise ValueError(f"Bandwidth must be non-negative, got {bandwidth}")
        self.n = n
        self.bandwidth = bandwidth
        self.data = np.zeros((2 * bandwidth + 1, n), dtype=dtype)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n, self.n)

    def _row(self, i: int, j: int) -> int | None:
        if not (0 <= i < self.n and 0 <= j < self.n):
            raise IndexError(f"Index ({i}, {j}) out of range for {self.n}x{self.n} matrix")
        if abs(i - j) > self.bandwidth:
            return None
        return self.bandwidth + i - j

    def __getitem__(self, index: tuple[int, int]) -> float:
        i, j = index
        row = self._row(i, j)
        if row is None:
            return 0.0
        return float(self.data[row, j])

    def __setitem__(self, index: tuple[int, int], value: float) -> None:
        i, j = index
        row = self._row(i, j)
        if row is None:
            raise IndexError(
                f"Index ({i}, {j}) lies outside the band of half-width {self.bandwidth}"
            )
        self.data[row, j] = value

    def add_symmetric(self, i: int, j: int, value: float) -> float:
        """Add ``value`` to ``a[i, j]`` and mirror the sum into ``a[j, i]``.

        Returns:
            The new value of both entries.
        """
        total = self[i, j] + value
        self[i, j] = total
        self[j, i] = total
        return total

    def accumulate(self, rows: np.ndarray, cols: np.ndarray, values: np.ndarray) -> None:
        """Unbuffered ``a[rows[k], cols[k]] += values[k]`` for every k, in order.

        Raises:
            IndexError: If any index pair lies outside the matrix or the band.
        """
        rows = np.asarray(rows, dtype=np.int64)
        cols = np.asarray(cols, dtype=np.int64)
        if rows.size == 0:
            return
        if (rows.min() < 0 or cols.min() < 0
                or rows.max() >= self.n or cols.max() >= self.n):
            raise IndexError(f"Index out of range for {self.n}x{self.n} matrix")
        offsets = self.bandwidth + rows - cols
        if offsets.min() < 0 or offsets.max() > 2 * self.bandwidth:
            raise IndexError(
                f"Index lies outside the band of half-width {self.bandwidth}"
            )
        np.add.at(self.data, (offsets, cols), values)

    def zero(self) -> None:
        """Set every entry to zero."""
        self.data.fill(0.0)

    def copy(self) -> BandedMatrix:
        other = BandedMatrix(self.n, self.bandwidth, dtype=self.data.dtype)
        other.data[...] = self.data
        return other

    def row(self, i: int) -> np.ndarray:
        """Dense copy of row ``i``."""
        return np.array([self[i, j] for j in range(self.n)])

    def column(self, j: int) -> np.ndarray:
        """Dense copy of column ``j``."""
        return np.array([self[i, j] for i in range(self.n)])

    def to_dense(self) -> np.ndarray:
        dense = np.zeros((self.n, self.n), dtype=self.data.dtype)
        for j in range(self.n):
            lo = max(0, j - self.bandwidth)
            hi = min(self.n, j + self.bandwidth + 1)
            for i in range(lo, hi):
                dense[i, j] = self.data[self.bandwidth + i - j, j]
        return dense

    def is_symmetric(self) -> bool:
        dense = self.to_dense()
        return bool(np.array_equal(dense, dense.T))

    def dot(self, x: np.ndarray) -> np.ndarray:
        """Matrix-vector product, used to check residuals of a solve."""
        return self.to_dense() @ np.asarray(x, dtype=self.data.dtype)

    def __repr__(self) -> str:
        return f"BandedMatrix(n={self.n}, bandwidth={self.bandwidth})"


@dataclass(eq=False)
class BandedLU:
    """LU decomposition of a :class:`BandedMatrix` as produced by ``?gbtrf``.

    Attributes:
        lu_banded: LAPACK band storage holding L and U, shape
            ``(3 * bandwidth + 1, n)``.
        pivot_indices: Row interchanges, length ``n``.
        bandwidth: Number of sub- and super-diagonals of the original matrix.
    """
    lu_banded: np.ndarray
    pivot_indices: np.ndarray
    bandwidth: int

    @property
    def n(self) -> int:
        return self.lu_banded.shape[1]

    @staticmethod
    def factor(matrix: BandedMatrix) -> BandedLU:
        """LU-factorize a banded matrix with partial pivoting.

        The input matrix is not modified.

        Args:
            matrix: Matrix to factorize.

        Returns:
            The factorization.

        Raises:
            FactorizationFailedError: If LAPACK reports a zero pivot or an
                invalid argument, or the factors are not finite.
        """
        k = matrix.bandwidth
        # ?gbtrf needs k extra rows on top for fill-in from pivoting
        ab = np.zeros((3 * k + 1, matrix.n), dtype=matrix.data.dtype)
        ab[k:, :] = matrix.data

        factorizer = get_lapack_funcs("gbtrf", (ab,))
        lu_banded, pivot_indices, info = factorizer(ab, k, k)

        if info != 0:
            raise FactorizationFailedError(
                f"Could not LU-factorize banded matrix! Got {info = }."
            )
        if not np.all(np.isfinite(lu_banded)):
            raise FactorizationFailedError("LU factors of banded matrix are not finite.")

        # Diagonal of U; pivots at rounding-noise level mean a singular matrix
        pivots = np.abs(lu_banded[2 * k])
        tolerance = pivots.max() * matrix.n * np.finfo(lu_banded.dtype).eps
        if pivots.min() <= tolerance:
            raise FactorizationFailedError(
                f"Banded matrix is numerically singular (smallest pivot "
                f"{pivots.min():.3e}, tolerance {tolerance:.3e})."
            )

        return BandedLU(
            lu_banded=lu_banded,
            pivot_indices=pivot_indices,
            bandwidth=k,
        )

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        """Solve ``A @ x = rhs`` for the factored matrix ``A``.

        Args:
            rhs: Right-hand side, shape ``(n,)`` or ``(n, k)``.

        Returns:
            Solution with the same shape as ``rhs``.

        Raises:
            SolveFailedError: If the shapes disagree, LAPACK reports an error,
                or the solution is not finite.
        """
        rhs = np.asarray(rhs, dtype=self.lu_banded.dtype)
        if rhs.shape[0] != self.n:
            raise SolveFailedError(
                f"Right-hand side has {rhs.shape[0]} rows, expected {self.n}."
            )

        solver = get_lapack_funcs("gbtrs", (self.lu_banded,))

        x, info = solver(
            self.lu_banded,
            self.bandwidth,
            self.bandwidth,
            rhs.reshape(self.n, -1),
            self.pivot_indices,
        )
        x = np.reshape(x, rhs.shape)

        if info != 0:
            raise SolveFailedError(
                f"Could not solve LU-factorization of banded matrix! Got {info = }."
            )
        if not np.all(np.isfinite(x)):
            raise SolveFailedError("Solution of banded system is not finite.")
        return x

    def copy(self) -> BandedLU:
        return BandedLU(
            lu_banded=self.lu_banded.copy(),
            pivot_indices=self.pivot_indices.copy(),
            bandwidth=self.bandwidth,
        )
