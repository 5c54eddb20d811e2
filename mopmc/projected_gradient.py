"""Projected-gradient minimisation of a convex function over an intersection of halfspaces.

Each halfspace is ``{x : w . x <= w . r}`` for a direction ``w`` and a boundary point ``r``.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np

from mopmc.base_optimizer import BaseOptimizer, ConvexFunction, LineSearcher
from mopmc.printer import format_vector

_INTERIOR_MAX_ITERATIONS = 100
_INTERIOR_TOLERANCE = 1e-12
_BOUNDARY_TOLERANCE = 1e-30
_INITIAL_STEP_RANGE = 1000.0
_DESCENT_PROBE_STEP = 0.01

_EXTERIOR_STEP = 10.0
_EXTERIOR_MAX_ITERATIONS = 100
_EXTERIOR_TOLERANCE = 1e-6

_DYKSTRA_MAX_ITERATIONS = 50
_DYKSTRA_TOLERANCE = 1e-15
_DYKSTRA_EPSILON = 1e-16


def halfspace_projection(point, boundary_point, direction) -> np.ndarray:
    """Project ``point`` onto the halfspace ``{x : w . x <= w . r}``."""
    point = np.asarray(point, dtype=float)
    boundary_point = np.asarray(boundary_point, dtype=float)
    direction = np.asarray(direction, dtype=float)
    excess = float(np.dot(direction, point - boundary_point))
    if excess <= 0:
        return point.copy()
    distance = excess / float(np.dot(direction, direction))
    return point - distance * direction


def dykstras_projection(point, boundary_points: Sequence, directions: Sequence,
                        indices: Iterable[int] | None = None) -> np.ndarray:
    """Project ``point`` onto the intersection of the selected halfspaces with Dykstra's method.

    ``indices`` selects halfspaces; all of them are used when it is ``None``.
    The result is then moved along the projection ray so that it reaches the
    violated halfspaces; when that is not possible the input point is returned.
    """
    point = np.asarray(point, dtype=float)
    chosen = sorted(set(range(len(directions)) if indices is None else indices))
    if not chosen:
        return point.copy()
    if len(chosen) == 1:
        idx = chosen[0]
        return halfspace_projection(point, boundary_points[idx], directions[idx])

    d = len(chosen)
    dimension = np.asarray(boundary_points[0]).size
    u: list[np.ndarray | None] = [None] * (d + 1)
    u[d] = point.copy()
    z = [np.zeros(dimension) for _ in range(d)]
    iteration = 1
    while iteration < _DYKSTRA_MAX_ITERATIONS:
        if u[0] is not None and float(np.abs(u[0] - u[d]).sum()) < _DYKSTRA_TOLERANCE:
            break
        u[0] = u[d]
        for i, idx in enumerate(chosen):
            shifted = u[i] + z[i]
            u[i + 1] = halfspace_projection(shifted, boundary_points[idx], directions[idx])
            z[i] = shifted - u[i + 1]
        iteration += 1

    projected = u[d]
    scale = 0.0
    for idx in chosen:
        r = np.asarray(boundary_points[idx], dtype=float)
        w = np.asarray(directions[idx], dtype=float)
        if float(np.dot(w, point - r)) > 0:
            movement = float(np.dot(w, projected - point))
            if movement < _DYKSTRA_EPSILON:
                return point.copy()
            scale = max(scale, float(np.dot(w, r - point)) / movement)
    return point + scale * (projected - point)


class ProjectedGradient(BaseOptimizer):
    """Minimises ``fn`` over an intersection of halfspaces by projected gradient steps."""

    def __init__(self, fn: ConvexFunction | None = None, line_searcher: LineSearcher | None = None):
        super().__init__(fn)
        self.line_searcher = line_searcher if line_searcher is not None else LineSearcher(fn)

    def minimize_halfspaces(self, point, boundary_points: Sequence, directions: Sequence) -> np.ndarray:
        if self.fn is None:
            raise ValueError("optimizer has no function")
        if len(boundary_points) != len(directions):
            raise ValueError("boundary points and directions must have the same length")
        return self._interior_projection_phase(point, boundary_points, directions)

    def check_non_exterior_point(self, point, boundary_points: Sequence, directions: Sequence) -> bool:
        """Check halfspace membership with a fixed rounding allowance of 1e-12."""
        rounding_error = 1e-12
        point = np.asarray(point, dtype=float)
        for w, r in zip(directions, boundary_points):
            excess = float(np.dot(w, point)) - float(np.dot(w, r))
            if excess > rounding_error:
                print(f"Directions.size(): {len(directions)}")
                print("[Project gradient] exterior point - "
                      f"Directions[i].dot(point) - Directions[i].dot(BoundaryPoints[i]): {excess}")
                return False
        return True

    def _interior_projection_phase(self, point, boundary_points: Sequence,
                                   directions: Sequence) -> np.ndarray:
        rs = [np.asarray(r, dtype=float) for r in boundary_points]
        ws = [np.asarray(w, dtype=float) for w in directions]
        x_new = np.asarray(point, dtype=float).copy()
        # Halfspaces found binding stay recorded for the rest of the search.
        boundary_indices: set[int] = set()
        t = 0
        while t < _INTERIOR_MAX_ITERATIONS:
            x_current = x_new
            slope = -np.asarray(self.fn.subgradient(x_current), dtype=float)
            for i, (w, r) in enumerate(zip(ws, rs)):
                if float(np.dot(w, slope)) > 0 and float(np.dot(w, r - x_current)) < _BOUNDARY_TOLERANCE:
                    boundary_indices.add(i)
            if not boundary_indices:
                descent = slope
            elif len(boundary_indices) == 1:
                (only,) = boundary_indices
                descent = halfspace_projection(slope, rs[only], ws[only])
            else:
                descent = self._projected_descent_direction(x_current, slope, rs, ws, boundary_indices)

            step = _INITIAL_STEP_RANGE
            for w, r in zip(ws, rs):
                rate = float(np.dot(w, descent))
                if rate > 0:
                    step = min(step, float(np.dot(w, r - x_current)) / rate)
            x_tmp = x_current + step * descent
            gamma = self.line_searcher.find_optimal_relative_distance(x_current, x_tmp)
            x_new = (1.0 - gamma) * x_current + gamma * x_tmp
            t += 1
            if float(np.abs(x_current - x_new).sum()) < _INTERIOR_TOLERANCE:
                break
        print("[Project gradient - interior phase] finds minimum point at iteration: "
              f"{t} (distance: {self.fn.value(x_new)})")
        return x_new

    def _exterior_projection_phase(self, point, boundary_points: Sequence,
                                   directions: Sequence) -> np.ndarray:
        start = np.asarray(point, dtype=float)
        x_current = start.copy()
        x_new = x_current
        t = 0
        while t < _EXTERIOR_MAX_ITERATIONS:
            slope = -np.asarray(self.fn.subgradient(x_current), dtype=float)
            x_tmp = x_current + _EXTERIOR_STEP * slope
            gamma = self.line_searcher.find_optimal_relative_distance(x_current, x_tmp)
            x_tmp = (1.0 - gamma) * x_current + gamma * x_tmp
            x_new = dykstras_projection(x_tmp, boundary_points, directions)
            if np.isnan(x_new).any():
                print(format_vector(x_tmp, " before dykstrasProjection - xNewTmp "))
                print(format_vector(x_new, " after dykstrasProjection - xNew "))
                t += 1
                break
            x_current = x_new
            t += 1
            if float(np.max(np.abs(x_current - x_new), initial=0.0)) < _EXTERIOR_TOLERANCE:
                break
        print("[Project gradient - exterior phase] finds minimum point at iteration: "
              f"{t} (distance: {self.fn.value(x_new)})")
        if self.fn.value(x_current) < self.fn.value(start):
            return x_current
        return start

    @staticmethod
    def _projected_descent_direction(current, slope, boundary_points, directions,
                                     indices: set[int]) -> np.ndarray:
        probe = current + _DESCENT_PROBE_STEP * slope
        projected = dykstras_projection(probe, boundary_points, directions, indices)
        projected_slope = projected - current
        if float(np.dot(projected_slope, slope)) > 0:
            return projected_slope
        return np.zeros(current.size)