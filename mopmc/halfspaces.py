"""Feasibility and membership tests for intersections of halfspaces.

Each halfspace is ``{x : w . x <= w . r}`` for a direction ``w`` and a boundary point ``r``.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

import numpy as np
from scipy import optimize

from mopmc.printer import format_vector


class NumericalFailure(RuntimeError):
    """The linear program neither solved nor proved infeasible."""


def find_non_exterior_point(boundary_points: Sequence, directions: Sequence) -> np.ndarray | None:
    """Return a point in the intersection of the halfspaces, or ``None`` if it is empty."""
    if len(boundary_points) == 0:
        raise ValueError("at least one halfspace is required")
    a_ub = np.array([np.asarray(w, dtype=float) for w in directions])
    b_ub = np.array([float(np.dot(w, r)) for w, r in zip(a_ub, boundary_points)])
    n_vars = np.asarray(boundary_points[0]).size
    outcome = optimize.linprog(np.zeros(n_vars), A_ub=a_ub, b_ub=b_ub,
                               bounds=[(None, None)] * n_vars, method="highs")
    if outcome.status == 0:
        return np.asarray(outcome.x, dtype=float)
    if outcome.status == 2:
        return None
    raise NumericalFailure("Numerical Failure")


def verify_point_in_halfspaces(point, boundary_points: Sequence, directions: Sequence,
                               epsilon: float = 1e-8) -> bool:
    """Check that ``point`` lies in every halfspace up to ``epsilon``."""
    if len(boundary_points) != len(directions):
        raise ValueError("boundary points and directions must have the same length")
    point = np.asarray(point, dtype=float)
    if point.size == 0 or len(boundary_points) == 0 or np.asarray(boundary_points[0]).size == 0:
        return True
    for i, (r, w) in enumerate(zip(boundary_points, directions)):
        dot_wx = float(np.dot(w, point))
        dot_wr = float(np.dot(w, r))
        if dot_wx > dot_wr + epsilon:
            print(f"Verification failed for half-space {i}:", file=sys.stderr)
            print(format_vector(w, "  Direction "), file=sys.stderr)
            print(format_vector(r, "  Boundary Point "), file=sys.stderr)
            print(format_vector(point, "  Test Point  "), file=sys.stderr)
            print(f"  Violation: w.x ({dot_wx}) > w.r ({dot_wr}) + epsilon ({epsilon})",
                  file=sys.stderr)
            return False
    return True


def check_non_exterior_point(point, boundary_points: Sequence, directions: Sequence) -> bool:
    """Check halfspace membership with a fixed rounding allowance of 1e-12."""
    rounding_error = 1e-12
    point = np.asarray(point, dtype=float)
    for w, r in zip(directions, boundary_points):
        excess = float(np.dot(w, point)) - float(np.dot(w, r))
        if excess > rounding_error:
            print(f"[Check Non Exterior Point] Directions.size(): {len(directions)}")
            print("[Check Non Exterior Point] exterior point - "
                  f"Directions[i].dot(point) - Directions[i].dot(BoundaryPoints[i]): {excess}")
            return False
    return True