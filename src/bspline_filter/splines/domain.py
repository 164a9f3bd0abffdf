"""Sample domain of a smoothing spline: grid, system matrix and its LU factors.

A SplineDomain is set up once for a set of sample positions. Setup chooses
the node grid, assembles the smoothness penalty Q and the data-fit matrix P
into one banded matrix and LU-factorizes P+Q. Every later fit of a value
array over the same positions only builds a right-hand side and reuses the
factorization.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import InitVar, dataclass, field

import numpy as np

from ..errors import InvalidArgumentError, SolveFailedError
from ..grid.planner import GridPlan, plan_grid
from ..linalg import BandedLU, BandedMatrix
from .basis import BoundaryCondition, SplineBasis
from .datafit import accumulate_data_fit, data_rhs
from .penalty import SmoothnessPenalty, smoothing_weight
from .smoothed import SmoothedSpline

logger = logging.getLogger(__name__)

# Matrices larger than this are summarized rather than dumped in trace output
TRACE_MATRIX_LIMIT = 30


@dataclass(eq=False)
class SplineDomain:
    """Factorized smoothing system over fixed sample positions.

    The domain is invalid until :meth:`set_domain` completes. Once valid it
    is not modified by fitting and can be shared by any number of fits;
    calling :meth:`set_domain` again rebuilds everything and must not race
    with fits on the same object.

    Attributes:
        wavelength: Cutoff wavelength; 0 disables the smoothness penalty.
        boundary: Boundary condition applied at both ends of the grid.
        derivative_order: Order of the penalized derivative. Only 1 is
            implemented.
        trace: Log intermediate results at DEBUG level on this module's
            logger. Does not change any numeric result.
    """
    samples: InitVar[np.ndarray | None] = None
    wavelength: float = 0.0
    boundary: BoundaryCondition = BoundaryCondition.ZERO_DERIVATIVE
    derivative_order: int = 1
    trace: bool = False

    # Private attributes
    _samples: np.ndarray | None = field(default=None, init=False, repr=False)
    _plan: GridPlan | None = field(default=None, init=False, repr=False)
    _basis: SplineBasis | None = field(default=None, init=False, repr=False)
    _alpha: float = field(default=0.0, init=False, repr=False)
    _matrix: BandedMatrix | None = field(default=None, init=False, repr=False)
    _lu: BandedLU | None = field(default=None, init=False, repr=False)
    _valid: bool = field(default=False, init=False, repr=False)

    def __post_init__(self, samples: np.ndarray | None) -> None:
        try:
            self.boundary = BoundaryCondition(self.boundary)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Boundary condition must be one of 0, 1, 2, got {self.boundary!r}"
            ) from e
        if samples is not None:
            self.set_domain(samples)

    @property
    def valid(self) -> bool:
        return self._valid

    @property
    def sample_positions(self) -> np.ndarray:
        """Read-only view of the sample positions (empty before setup)."""
        if self._samples is None:
            return np.empty(0)
        view = self._samples.view()
        view.flags.writeable = False
        return view

    @property
    def n_samples(self) -> int:
        return 0 if self._samples is None else len(self._samples)

    @property
    def xmin(self) -> float:
        return float(self._samples.min()) if self._valid else 0.0

    @property
    def xmax(self) -> float:
        return float(self._samples.max()) if self._valid else 0.0

    @property
    def alpha(self) -> float:
        """Weight of the smoothness penalty."""
        return self._alpha

    @property
    def n_intervals(self) -> int:
        """Number of node intervals M (0 before setup)."""
        return self._basis.n_intervals if self._basis is not None else 0

    @property
    def dx(self) -> float:
        return self._basis.dx if self._basis is not None else 0.0

    @property
    def plan(self) -> GridPlan | None:
        return self._plan

    @property
    def basis(self) -> SplineBasis | None:
        return self._basis

    @property
    def matrix(self) -> BandedMatrix | None:
        """The assembled P+Q system matrix."""
        return self._matrix

    @property
    def lu(self) -> BandedLU | None:
        return self._lu

    def _reset(self) -> None:
        self._samples = None
        self._plan = None
        self._basis = None
        self._alpha = 0.0
        self._matrix = None
        self._lu = None
        self._valid = False

    def set_domain(
        self,
        samples: np.ndarray,
        wavelength: float | None = None,
        boundary: BoundaryCondition | int | None = None
    ) -> SplineDomain:
        """Set up the grid and factorized system for new sample positions.

        The domain is invalid while this runs and stays invalid if any step
        fails.

        Args:
            samples: Sample positions, shape (NX,), any order.
            wavelength: Cutoff wavelength (>= 0). Defaults to
                ``self.wavelength``.
            boundary: Boundary condition type 0, 1 or 2. Defaults to
                ``self.boundary``.

        Returns:
            self for method chaining.

        Raises:
            InvalidArgumentError: For missing, empty or non-finite samples, a
                negative wavelength or an unknown boundary type.
            NotImplementedError: For derivative orders 2 and 3.
            DomainTooSmallError: If the wavelength exceeds the sample range.
            GridSearchFailedError: If no node count fits the samples.
            FactorizationFailedError: If P+Q cannot be factorized.
        """
        self._reset()

        if samples is None:
            raise InvalidArgumentError("Sample positions must not be None")
        try:
            x = np.array(samples, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Sample positions are not numeric: {e}") from e
        if x.ndim != 1:
            raise InvalidArgumentError(f"Sample positions must be 1D, got shape {x.shape}")
        if x.size == 0:
            raise InvalidArgumentError("Need at least one sample position")
        if not np.all(np.isfinite(x)):
            raise InvalidArgumentError("Sample positions must be finite")

        wl = self.wavelength if wavelength is None else wavelength
        try:
            wl = float(wl)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Wavelength is not a number: {wl!r}") from e
        if not np.isfinite(wl) or wl < 0:
            raise InvalidArgumentError(f"Wavelength must be finite and >= 0, got {wl}")

        bc = self.boundary if boundary is None else boundary
        try:
            bc = BoundaryCondition(bc)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Boundary condition must be one of 0, 1, 2, got {bc!r}"
            ) from e

        if self.derivative_order not in (1, 2, 3):
            raise InvalidArgumentError(
                f"Derivative order must be 1, 2 or 3, got {self.derivative_order}"
            )
        if self.derivative_order != 1:
            raise NotImplementedError(
                f"Penalty tables exist only for derivative order 1, "
                f"got {self.derivative_order}"
            )

        self.wavelength = wl
        self.boundary = bc

        xmin, xmax = float(x.min()), float(x.max())
        plan = plan_grid(xmin, xmax, len(x), wl)
        basis = SplineBasis(xmin=xmin, dx=plan.dx, n_intervals=plan.n_intervals, boundary=bc)
        if self.trace:
            logger.debug(
                "Using %d node intervals of length %g (%.3g nodes per wavelength, "
                "%.3g points per interval)",
                plan.n_intervals, plan.dx, plan.nodes_per_wavelength,
                plan.points_per_interval,
            )

        alpha = smoothing_weight(wl, self.derivative_order)
        if self.trace:
            logger.debug("Alpha: %g", alpha)

        matrix = SmoothnessPenalty(basis, alpha).assemble()
        self._trace_matrix("Q", matrix)

        accumulate_data_fit(matrix, basis, x)
        self._trace_matrix("P+Q", matrix)

        lu = BandedLU.factor(matrix)
        if self.trace:
            logger.debug("LU factorization of P+Q done")
            if matrix.n < TRACE_MATRIX_LIMIT:
                logger.debug("LU band storage:\n%s", lu.lu_banded)

        self._samples = x
        self._plan = plan
        self._basis = basis
        self._alpha = alpha
        self._matrix = matrix
        self._lu = lu
        self._valid = True
        return self

    def _trace_matrix(self, name: str, matrix: BandedMatrix) -> None:
        if not self.trace:
            return
        if matrix.n < TRACE_MATRIX_LIMIT:
            with np.printoptions(precision=3, linewidth=160):
                logger.debug("%s:\n%s", name, matrix.to_dense())
        else:
            logger.debug("%s: %dx%d, bandwidth %d", name, matrix.n, matrix.n, matrix.bandwidth)

    def fit(self, values: np.ndarray) -> SmoothedSpline:
        """Smooth one array of values observed at the domain's samples.

        Args:
            values: Observed values, shape (NX,), aligned with the samples.

        Returns:
            The fitted SmoothedSpline. If the domain is invalid, an invalid
            SmoothedSpline that evaluates to zero.

        Raises:
            InvalidArgumentError: If values has the wrong length or is not
                finite.
            SolveFailedError: If the factored system cannot be solved.
        """
        if not self._valid:
            return SmoothedSpline.invalid()

        try:
            y = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Values are not numeric: {e}") from e
        if y.shape != self._samples.shape:
            raise InvalidArgumentError(
                f"Expected {len(self._samples)} values, got shape {y.shape}"
            )
        if not np.all(np.isfinite(y)):
            raise InvalidArgumentError("Values must be finite")

        mean = float(np.mean(y))
        rhs = data_rhs(self._basis, self._samples, y, mean)
        if self.trace:
            logger.debug("Mean of values: %g", mean)

        try:
            coefficients = self._lu.solve(rhs)
        except SolveFailedError:
            if self.trace:
                logger.debug("Banded solve failed for rhs %s", rhs)
            raise

        if self.trace and self._basis.n_nodes < TRACE_MATRIX_LIMIT:
            logger.debug("Solution a for (P+Q)a = b\n b: %s\n a: %s", rhs, coefficients)
            logger.debug("(P+Q)a = %s", self._matrix.dot(coefficients))

        return SmoothedSpline(self._basis, coefficients, mean)

    def apply(self, values: np.ndarray) -> SmoothedSpline:
        """Alias of :meth:`fit`."""
        return self.fit(values)

    def nodes(self) -> np.ndarray:
        """Node positions ``xmin + i*dx`` for i in 0..M (empty if invalid)."""
        if not self._valid:
            return np.empty(0)
        return self._basis.nodes

    def copy(self) -> SplineDomain:
        """Fully independent copy, including samples, matrix and LU factors."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        if self._valid:
            return (
                f"SplineDomain(n_samples={self.n_samples}, wavelength={self.wavelength:g}, "
                f"boundary={self.boundary.name}, n_intervals={self.n_intervals})"
            )
        return (
            f"SplineDomain(wavelength={self.wavelength:g}, "
            f"boundary={self.boundary.name}, not valid)"
        )
