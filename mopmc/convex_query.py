"""Convex query: minimise a convex function over the achievable objective values."""

from __future__ import annotations

import numpy as np

from mopmc.base_optimizer import BaseOptimizer, ConvexFunction
from mopmc.base_query import BaseQuery
from mopmc.halfspaces import find_non_exterior_point
from mopmc.printer import print_vector
from mopmc.query_data import QueryData
from mopmc.value_iteration import BaseVIHandler

_MAX_ITERATIONS = 200
_TOLERANCE_INNER_OUTER = 1e-18
_TOLERANCE_UPDATE = 1e-30
_CONSTRAINT_EPSILON = 1e-8
_FLIP_ITERATIONS = 10


def _l1(vector: np.ndarray) -> float:
    return float(np.abs(vector).sum())


class ConvexQuery(BaseQuery):
    """Narrows an inner point (in the achievable hull) and an outer point (in the
    intersection of supporting halfspaces, and of the threshold halfspaces when
    constrained) towards the minimum of ``fn``."""

    def __init__(self, data: QueryData, fn: ConvexFunction | None = None,
                 inner_optimizer: BaseOptimizer | None = None,
                 outer_optimizer: BaseOptimizer | None = None,
                 vi_handler: BaseVIHandler | None = None,
                 with_constraint: bool = True):
        super().__init__(data, vi_handler, fn, inner_optimizer, outer_optimizer)
        n_objs = int(self.data.objective_count)
        self.has_constraint = with_constraint
        self._iterations = 0
        self._inner_point = np.zeros(n_objs)
        self._outer_point = np.zeros(n_objs)
        self.vertices: list[np.ndarray] = []
        self.boundary_points: list[np.ndarray] = []
        self.directions: list[np.ndarray] = []
        if with_constraint:
            self._constraints_to_halfspaces()

    def _constraints_to_halfspaces(self) -> None:
        n_objs = int(self.data.objective_count)
        thresholds = np.asarray(self.data.thresholds[:n_objs], dtype=float)
        for i in range(n_objs):
            r = np.zeros(n_objs)
            w = np.zeros(n_objs)
            r[i] = thresholds[i]
            w[i] = 1.0 if self.data.is_threshold_upper_bound[i] else -1.0
            self.boundary_points.append(r)
            self.directions.append(w)

    def query(self) -> None:
        if self.vi_handler is None or self.inner_optimizer is None or self.outer_optimizer is None:
            raise ValueError("query needs a value-iteration handler and both optimizers")
        n_objs = int(self.data.objective_count)
        self.vi_handler.initialize()
        direction = np.full(n_objs, 1.0 / n_objs)
        inner_prev = np.zeros(n_objs)
        outer_prev = np.zeros(n_objs)
        self._iterations = 0

        while self._iterations < _MAX_ITERATIONS:
            print(f"[Main loop] Iteration: {self._iterations}")

            self.vi_handler.value_iteration([float(d) for d in direction])
            vertex = np.asarray(self.vi_handler.results[:n_objs], dtype=float)
            self.vertices.append(vertex)
            self.boundary_points.append(vertex.copy())
            self.directions.append(direction.copy())
            self.data.collection_of_schedulers.append(list(self.vi_handler.scheduler))

            if len(self.vertices) == 1:
                self._inner_point = vertex.copy()

            # The opposite direction in early iterations speeds up the search.
            if self._iterations % 2 == 1 and self._iterations < _FLIP_ITERATIONS:
                direction = -direction
                self._iterations += 1
                continue

            if self.has_constraint:
                feasible = find_non_exterior_point(self.boundary_points, self.directions)
                if feasible is None:
                    self._iterations += 1
                    print("[Main loop] exits as constraints are not satisfiable")
                    break
                self._outer_point = feasible
            else:
                self._outer_point = self._inner_point.copy()

            self._outer_point = np.asarray(
                self.outer_optimizer.minimize_halfspaces(
                    self._outer_point, self.boundary_points, self.directions),
                dtype=float).copy()

            outcome = self.inner_optimizer.optimize_separation_direction(
                self.vertices, self._outer_point)
            direction = np.asarray(outcome.direction, dtype=float).copy()
            self._inner_point = np.asarray(outcome.optimum, dtype=float).copy()
            if not outcome.separated:
                self._iterations += 1
                print("[Main loop] exits as no separation hyperplane is found")
                break

            gap = _l1(self._inner_point - self._outer_point)
            if self._iterations > 1 and gap < _TOLERANCE_INNER_OUTER:
                self._iterations += 1
                print("[Main loop] exits due to small inner & outer value difference (<="
                      f"{_TOLERANCE_INNER_OUTER})")
                break

            update = _l1(self._outer_point - outer_prev) + _l1(self._inner_point - inner_prev)
            if self._iterations > 1 and update < _TOLERANCE_UPDATE:
                self._iterations += 1
                print("[Main loop] exits due to small inner/outer points update (l1 norm <= "
                      f"{_TOLERANCE_UPDATE})")
                break
            outer_prev = self._outer_point.copy()
            inner_prev = self._inner_point.copy()

            with np.errstate(divide="ignore", invalid="ignore"):
                direction = direction / _l1(direction)
            self._iterations += 1

        weights = np.asarray(self.inner_optimizer.vertex_weights(), dtype=float)
        self._vertex_weights = weights.copy()
        self.data.scheduler_distribution = [float(w) for w in weights]
        self.vi_handler.exit()

    def main_loop_iteration_count(self) -> int:
        return self._iterations

    def inner_optimal_point(self) -> np.ndarray:
        """The point of the achievable hull found last."""
        return self._inner_point.copy()

    def outer_optimal_point(self) -> np.ndarray:
        """The point of the halfspace intersection found last."""
        return self._outer_point.copy()

    def inner_optimal_value(self) -> float:
        if self.fn is None:
            raise ValueError("query has no function")
        return float(self.fn.value(self._inner_point))

    def outer_optimal_value(self) -> float:
        if self.fn is None:
            raise ValueError("query has no function")
        return float(self.fn.value(self._outer_point))

    def check_constraint_satisfaction(self, point) -> bool:
        """Check ``point`` against the thresholds, allowing an error of 1e-8."""
        point = np.asarray(point, dtype=float)
        n_objs = int(self.data.objective_count)
        thresholds = np.asarray(self.data.thresholds[:n_objs], dtype=float)
        for value, bound, upper in zip(point, thresholds, self.data.is_threshold_upper_bound):
            if upper and value > bound + _CONSTRAINT_EPSILON:
                return False
            if not upper and value < bound - _CONSTRAINT_EPSILON:
                return False
        return True

    def print_result(self) -> None:
        print("--Convex Query Result--")
        print(f"with constraint? {str(self.has_constraint).lower()}")
        print(f"terminates after {self.main_loop_iteration_count()} iteration(s)")
        print_vector(self._inner_point, "Estimated optimal inner point")
        print_vector(self._outer_point, "Estimated optimal outer point")
        print(f"Approximate distance (at inner point): {self.inner_optimal_value()}")
        print(f"Approximate distance (at outer point): {self.outer_optimal_value()}")
        if self.has_constraint:
            inner_ok = self.check_constraint_satisfaction(self._inner_point)
            outer_ok = self.check_constraint_satisfaction(self._outer_point)
            print()
            print(f"Inner point satisfying constraints? {str(inner_ok).lower()}")
            print(f"Outer point satisfying constraints? {str(outer_ok).lower()}")
        print("----------------------------------------------")