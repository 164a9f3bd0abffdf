"""Smoothed curve produced by fitting one value array on a SplineDomain."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .basis import SplineBasis


@dataclass(eq=False)
class SmoothedSpline:
    """Coefficients of one fit plus the grid they live on.

    The grid is shared with the domain that produced the fit and is never
    modified, so several SmoothedSpline objects from one domain can be
    evaluated independently. A spline without a basis is invalid: it
    evaluates to zero everywhere and has no coefficients, nodes or curve.

    Attributes:
        basis: Grid and boundary condition, or None if the fit is invalid.
        mean: Mean of the fitted values, added back on evaluation.
    """
    basis: SplineBasis | None = None
    _coefficients: np.ndarray = field(default_factory=lambda: np.empty(0), repr=False)
    mean: float = 0.0
    _curve: np.ndarray | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._coefficients = np.array(self._coefficients, dtype=np.float64)
        self._coefficients.flags.writeable = False
        if self.basis is not None and len(self._coefficients) != self.basis.n_nodes:
            raise ValueError(
                f"Expected {self.basis.n_nodes} coefficients, got {len(self._coefficients)}"
            )

    @classmethod
    def invalid(cls) -> SmoothedSpline:
        """The neutral result returned by fits on an invalid domain."""
        return cls()

    @property
    def valid(self) -> bool:
        return self.basis is not None

    @property
    def n_intervals(self) -> int:
        return self.basis.n_intervals if self.valid else 0

    @property
    def coefficients(self) -> np.ndarray:
        """Copy of the coefficient vector A (empty if invalid)."""
        return self._coefficients.copy()

    def coefficient(self, n: int) -> float:
        """Coefficient A[n], or 0 for an invalid fit or out-of-range n."""
        if self.valid and 0 <= n <= self.basis.n_intervals:
            return float(self._coefficients[n])
        return 0.0

    def evaluate(self, x: np.ndarray | float) -> np.ndarray | float:
        """Evaluate the smoothed curve at point(s) ``x``.

        Args:
            x: Point(s) at which to evaluate.

        Returns:
            Curve value(s), a float for scalar input. Zero if invalid.
        """
        x = np.asarray(x, dtype=np.float64)
        scalar_input = x.ndim == 0

        y = np.zeros(x.shape)
        if self.valid and x.size > 0:
            # Only the five nodes around each point contribute
            nodes, values = self.basis.local_values(x.ravel())
            a = self._coefficients[np.clip(nodes, 0, self.basis.n_intervals)]
            y = np.sum(a * values, axis=1).reshape(x.shape) + self.mean

        if scalar_input:
            return float(y)
        return y

    def evaluate_batch(self, x: np.ndarray) -> np.ndarray:
        """Evaluate at multiple points.

        Args:
            x: Points, any shape.

        Returns:
            Values, shape (n_points,) for scalar or 1D input.
        """
        return np.atleast_1d(self.evaluate(np.asarray(x, dtype=np.float64)))

    def curve(self) -> np.ndarray:
        """Curve values at the nodes, computed on first call only."""
        if not self.valid:
            return np.empty(0)
        if self._curve is None:
            curve = np.array([
                self.evaluate(self.basis.node(n)) for n in range(self.basis.n_nodes)
            ])
            curve.flags.writeable = False
            self._curve = curve
        return self._curve

    def nodes(self) -> np.ndarray:
        """Node positions of the grid (empty if invalid)."""
        if not self.valid:
            return np.empty(0)
        return self.basis.nodes

    def residuals(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Observed minus smoothed values at points ``x``."""
        return np.asarray(y, dtype=np.float64) - self.evaluate_batch(x)

    def __call__(self, x: np.ndarray | float) -> np.ndarray | float:
        """Allow calling the spline directly."""
        return self.evaluate(x)

    def __repr__(self) -> str:
        if self.valid:
            return (
                f"SmoothedSpline(n_intervals={self.basis.n_intervals}, "
                f"dx={self.basis.dx:g}, mean={self.mean:g})"
            )
        return "SmoothedSpline(invalid)"
