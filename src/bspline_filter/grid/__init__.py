"""Grid module: node count and spacing selection."""

from .planner import GridPlan, plan_grid

__all__ = [
    "GridPlan",
    "plan_grid",
]
