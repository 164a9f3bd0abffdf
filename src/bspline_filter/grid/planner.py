"""Adaptive selection of the uniform node grid.

The number of node intervals trades smoothing resolution (nodes per cutoff
wavelength) against the number of samples available to pin down each local
basis coefficient (points per interval).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ..errors import DomainTooSmallError, GridSearchFailedError, InvalidArgumentError

FIRST_CANDIDATE = 9
MIN_NODES_PER_WAVELENGTH = 2.0
TARGET_NODES_PER_WAVELENGTH = 4.0
MAX_NODES_PER_WAVELENGTH = 15.0
MIN_POINTS_PER_INTERVAL = 1.0
MAX_POINTS_PER_INTERVAL = 2.0


@dataclass(frozen=True)
class GridPlan:
    """Outcome of the node-grid search.

    Attributes:
        n_intervals: Number of node intervals M (the grid has M+1 nodes).
        dx: Uniform node spacing.
        nodes_per_wavelength: Cutoff wavelength divided by dx (0 when
            smoothing is disabled).
        points_per_interval: NX / (M+1).
    """
    n_intervals: int
    dx: float
    nodes_per_wavelength: float
    points_per_interval: float

    @property
    def n_nodes(self) -> int:
        return self.n_intervals + 1


def _ratios(
    n_intervals: int,
    span: float,
    n_samples: int,
    wavelength: float
) -> tuple[float, float, float]:
    dx = span / n_intervals
    nodes_per_wavelength = wavelength / dx
    points_per_interval = n_samples / (n_intervals + 1)
    return dx, nodes_per_wavelength, points_per_interval


def plan_grid(
    xmin: float,
    xmax: float,
    n_samples: int,
    wavelength: float
) -> GridPlan:
    """Choose the number and spacing of node intervals.

    With ``wavelength == 0`` the grid carries one node per sample. Otherwise
    the interval count grows from 9 until there are at least 2 nodes per
    wavelength, then keeps growing while there are fewer than 4 nodes per
    wavelength or more than 2 points per interval. Growth stops at the last
    count that keeps at least one point per interval and at most 15 nodes
    per wavelength.

    Args:
        xmin: Lower bound of the sample domain.
        xmax: Upper bound of the sample domain.
        n_samples: Number of samples NX.
        wavelength: Cutoff wavelength, >= 0.

    Returns:
        The selected GridPlan.

    Raises:
        InvalidArgumentError: If n_samples < 1 or wavelength < 0.
        DomainTooSmallError: If the domain is empty or shorter than the
            wavelength.
        GridSearchFailedError: If there are too few samples to reach 2
            nodes per wavelength.
    """
    if n_samples < 1:
        raise InvalidArgumentError(f"Need at least one sample, got {n_samples}")
    if not np.isfinite(wavelength) or wavelength < 0:
        raise InvalidArgumentError(f"Wavelength must be finite and >= 0, got {wavelength}")

    span = xmax - xmin
    if not span > 0:
        raise DomainTooSmallError(
            f"Sample domain [{xmin}, {xmax}] has zero width; no node grid fits it"
        )
    if wavelength > span:
        raise DomainTooSmallError(
            f"Wavelength {wavelength} exceeds the sample domain width {span}"
        )

    if wavelength == 0:
        # Smoothing disabled: one node per sample
        n_intervals = n_samples - 1
        return GridPlan(
            n_intervals=n_intervals,
            dx=span / n_intervals,
            nodes_per_wavelength=0.0,
            points_per_interval=n_samples / (n_intervals + 1),
        )

    # Coarse phase: reach the minimum number of nodes per wavelength
    n_intervals = FIRST_CANDIDATE
    while True:
        dx, per_wave, per_interval = _ratios(n_intervals, span, n_samples, wavelength)
        if per_interval < MIN_POINTS_PER_INTERVAL:
            raise GridSearchFailedError(
                f"{n_samples} samples are too few for {MIN_NODES_PER_WAVELENGTH:g} "
                f"nodes per wavelength {wavelength} over width {span} "
                f"(stopped at {n_intervals} intervals)"
            )
        if per_wave >= MIN_NODES_PER_WAVELENGTH:
            break
        n_intervals += 1

    # Refinement: keep the last count that satisfies both limits
    while (per_wave < TARGET_NODES_PER_WAVELENGTH
           or per_interval > MAX_POINTS_PER_INTERVAL):
        trial = _ratios(n_intervals + 1, span, n_samples, wavelength)
        if trial[2] < MIN_POINTS_PER_INTERVAL or trial[1] > MAX_NODES_PER_WAVELENGTH:
            break
        n_intervals += 1
        dx, per_wave, per_interval = trial

    return GridPlan(
        n_intervals=n_intervals,
        dx=dx,
        nodes_per_wavelength=per_wave,
        points_per_interval=per_interval,
    )
