"""Splines module: basis, penalty, data fit, setup and evaluation."""

from .basis import BoundaryCondition, SplineBasis, cubic_kernel, BOUNDARY_COEFFICIENTS
from .penalty import SmoothnessPenalty, smoothing_weight, QUADRATURE
from .datafit import accumulate_data_fit, data_rhs
from .domain import SplineDomain
from .smoothed import SmoothedSpline

__all__ = [
    # Basis
    "BoundaryCondition",
    "SplineBasis",
    "cubic_kernel",
    "BOUNDARY_COEFFICIENTS",
    # System assembly
    "SmoothnessPenalty",
    "smoothing_weight",
    "QUADRATURE",
    "accumulate_data_fit",
    "data_rhs",
    # Setup and fitting
    "SplineDomain",
    "SmoothedSpline",
]
