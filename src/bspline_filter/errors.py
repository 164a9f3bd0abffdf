"""Exceptions raised while setting up and solving smoothing splines."""

from __future__ import annotations

import numpy as np


class BSplineError(Exception):
    """Base class for all errors raised by bspline_filter."""


class InvalidArgumentError(BSplineError, ValueError):
    """Empty or malformed samples, negative wavelength, bad boundary selector."""


class DomainTooSmallError(BSplineError, ValueError):
    """The cutoff wavelength exceeds the range of the sample domain."""


class GridSearchFailedError(BSplineError, RuntimeError):
    """No node count satisfies both the wavelength and data-density limits."""


class FactorizationFailedError(BSplineError, np.linalg.LinAlgError):
    """The banded system P+Q could not be LU-factorized."""


class SolveFailedError(BSplineError, np.linalg.LinAlgError):
    """The factored system could not be solved for a value array."""
