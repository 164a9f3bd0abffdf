"""Smoothing cubic B-splines with a cutoff wavelength.

Typical use sets up a domain once for the sample positions and fits any
number of value arrays against it:

    domain = SplineDomain(x, wavelength=2.0)
    spline = domain.fit(y)
    spline.evaluate(1.5)
"""

from __future__ import annotations

import numpy as np

from .errors import (
    BSplineError,
    InvalidArgumentError,
    DomainTooSmallError,
    GridSearchFailedError,
    FactorizationFailedError,
    SolveFailedError,
)
from .grid import GridPlan, plan_grid
from .linalg import BandedMatrix, BandedLU
from .splines import BoundaryCondition, SplineBasis, SplineDomain, SmoothedSpline

__version__ = "0.1.0"


def smooth(
    x: np.ndarray,
    y: np.ndarray,
    wavelength: float = 0.0,
    boundary: BoundaryCondition | int = BoundaryCondition.ZERO_DERIVATIVE,
    **kwargs
) -> SmoothedSpline:
    """Set up a domain over ``x`` and fit ``y`` in one call.

    Args:
        x: Sample positions, shape (n,).
        y: Observed values, shape (n,).
        wavelength: Cutoff wavelength; 0 disables smoothing.
        boundary: Boundary condition type.
        **kwargs: Additional SplineDomain fields (derivative_order, trace).

    Returns:
        Fitted SmoothedSpline.
    """
    domain = SplineDomain(wavelength=wavelength, boundary=boundary, **kwargs)
    domain.set_domain(x)
    return domain.fit(y)


__all__ = [
    # Errors
    "BSplineError",
    "InvalidArgumentError",
    "DomainTooSmallError",
    "GridSearchFailedError",
    "FactorizationFailedError",
    "SolveFailedError",
    # Grid and linear algebra
    "GridPlan",
    "plan_grid",
    "BandedMatrix",
    "BandedLU",
    # Splines
    "BoundaryCondition",
    "SplineBasis",
    "SplineDomain",
    "SmoothedSpline",
    "smooth",
]
