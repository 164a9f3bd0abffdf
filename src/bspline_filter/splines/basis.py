"""Closed-support cubic B-spline basis on a uniform node grid.

Each node m carries the kernel

    phi(z) = 0.25 (2 - z)^3 - max(1 - z, 0)^3,   z = |x - x_m| / dx < 2

which is 1 at its own node, 1/4 at the neighbours and 0 two intervals away.
The two nodes at each end also pick up a multiple of the kernel centred on a
virtual node just outside the grid (-1 on the left, M+1 on the right). The
multiples come from a fixed table keyed by the boundary condition type and
fold the end constraint into the basis itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from functools import cached_property

import numpy as np


class BoundaryCondition(IntEnum):
    """Constraint imposed at both ends of the node grid."""
    ZERO_ENDPOINTS = 0    # curve value vanishes
    ZERO_DERIVATIVE = 1   # first derivative vanishes
    ZERO_CURVATURE = 2    # second derivative vanishes


#: Reflection weights per boundary type at nodes 0, 1, M-1, M.
BOUNDARY_COEFFICIENTS: tuple[tuple[float, ...], ...] = (
    (-4.0, -1.0, -1.0, -4.0),
    (0.0, 1.0, 1.0, 0.0),
    (2.0, -1.0, -1.0, 2.0),
)


def cubic_kernel(z: np.ndarray | float) -> np.ndarray:
    """Evaluate the normalized cubic kernel at signed distance ``z`` (in dx)."""
    z = np.abs(np.asarray(z, dtype=np.float64))
    t = 2.0 - z
    y = 0.25 * t**3
    inner = t - 1.0
    y = y - np.where(inner > 0, inner**3, 0.0)
    return np.where(z < 2.0, y, 0.0)


@dataclass(frozen=True)
class SplineBasis:
    """Uniform grid of M+1 nodes and the boundary-corrected basis over it.

    Attributes:
        xmin: Position of node 0.
        dx: Node spacing.
        n_intervals: Number of node intervals M.
        boundary: Boundary condition type.
    """
    xmin: float
    dx: float
    n_intervals: int
    boundary: BoundaryCondition = BoundaryCondition.ZERO_DERIVATIVE

    @property
    def n_nodes(self) -> int:
        return self.n_intervals + 1

    @property
    def xmax(self) -> float:
        return self.node(self.n_intervals)

    def node(self, m: int) -> float:
        """Position of node ``m`` (virtual nodes -1 and M+1 included)."""
        return self.xmin + m * self.dx

    @cached_property
    def nodes(self) -> np.ndarray:
        """Positions of nodes 0..M, computed once."""
        positions = np.array([self.node(i) for i in range(self.n_nodes)])
        positions.flags.writeable = False
        return positions

    def beta(self, m: int) -> float:
        """Reflection weight of node ``m``; zero away from the ends."""
        M = self.n_intervals
        if 1 < m < M - 1:
            return 0.0
        if m >= M - 1:
            m -= M - 3
        return BOUNDARY_COEFFICIENTS[int(self.boundary)][m]

    @cached_property
    def betas(self) -> np.ndarray:
        """Reflection weights of nodes 0..M."""
        weights = np.array([self.beta(m) for m in range(self.n_nodes)])
        weights.flags.writeable = False
        return weights

    def _kernel_at(self, m: np.ndarray | int, x: np.ndarray) -> np.ndarray:
        return cubic_kernel(np.abs(x - (self.xmin + m * self.dx)) / self.dx)

    def evaluate_at(self, m: np.ndarray, x: np.ndarray) -> np.ndarray:
        """Elementwise basis values for broadcast node indices and points.

        Args:
            m: Integer node indices; indices outside 0..M give the bare
                kernel of that (virtual) node.
            x: Points, broadcastable against ``m``.

        Returns:
            Array of basis values with the broadcast shape.
        """
        m = np.asarray(m, dtype=np.int64)
        x = np.asarray(x, dtype=np.float64)
        M = self.n_intervals

        y = self._kernel_at(m, x)
        inside = (m >= 0) & (m <= M)
        weight = np.where(inside, self.betas[np.clip(m, 0, M)], 0.0)
        left = (m == 0) | (m == 1)
        right = ~left & ((m == M - 1) | (m == M))
        y = y + np.where(left, weight * self._kernel_at(-1, x), 0.0)
        y = y + np.where(right, weight * self._kernel_at(M + 1, x), 0.0)
        return y

    def evaluate(self, m: int, x: np.ndarray | float) -> np.ndarray | float:
        """Evaluate basis function ``m`` at point(s) ``x``.

        Args:
            m: Node index, 0 <= m <= M (virtual nodes give the bare kernel).
            x: Point(s) at which to evaluate.

        Returns:
            Basis value(s), a float for scalar input.
        """
        x = np.asarray(x, dtype=np.float64)
        scalar_input = x.ndim == 0

        y = self.evaluate_at(np.full(x.shape, m, dtype=np.int64), x)

        if scalar_input:
            return float(y)
        return y

    def __call__(self, m: int, x: np.ndarray | float) -> np.ndarray | float:
        return self.evaluate(m, x)

    def containing_node(self, x: float) -> int:
        """Index of the node interval that starts at or below ``x``."""
        return int(np.floor((x - self.xmin) / self.dx))

    def local_values(
        self,
        x: np.ndarray,
        below: int = 2,
        above: int = 2
    ) -> tuple[np.ndarray, np.ndarray]:
        """Node indices and basis values in a window around each point.

        The window starts ``below`` nodes before the interval containing the
        point and ends ``above`` nodes after it. Points outside the grid use
        the first or last interval, so the window still holds every basis
        function that is nonzero there.

        Args:
            x: Points, shape (N,).
            below: Nodes before the containing interval.
            above: Nodes after the containing interval.

        Returns:
            (nodes, values), both shape (N, below + above + 1). Values of
            nodes outside 0..M are zero.
        """
        x = np.asarray(x, dtype=np.float64)
        M = self.n_intervals
        containing = np.floor((x - self.xmin) / self.dx)
        containing = np.clip(containing, 0, max(M - 1, 0)).astype(np.int64)
        offsets = np.arange(-below, above + 1)
        nodes = containing[:, None] + offsets[None, :]
        values = self.evaluate_at(nodes, x[:, None])
        inside = (nodes >= 0) & (nodes <= M)
        return nodes, np.where(inside, values, 0.0)

    def design_matrix(self, x: np.ndarray) -> np.ndarray:
        """Basis values at every point, shape (len(x), M+1)."""
        x = np.atleast_1d(np.asarray(x, dtype=np.float64))
        return np.column_stack([self.evaluate(m, x) for m in range(self.n_nodes)])

    def __repr__(self) -> str:
        return (
            f"SplineBasis(xmin={self.xmin:g}, dx={self.dx:g}, "
            f"n_intervals={self.n_intervals}, boundary={self.boundary.name})"
        )
