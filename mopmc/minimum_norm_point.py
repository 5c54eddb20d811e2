"""Minimum-norm-point search over a vertex hull, yielding a separating direction."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy import optimize

from mopmc.base_optimizer import BaseOptimizer, ConvexFunction, LineSearcher
from mopmc.printer import format_vector

_MAX_DESCENT_ITERATIONS = 1000
_MAX_MARGIN_ITERATIONS = 500
_EPSILON = 1e-12


@dataclass(frozen=True)
class SeparationOutcome:
    """Result of a separation search.

    ``direction`` points from ``optimum`` (the point of the hull found) towards the
    pivot; ``separated`` tells whether a maximum-margin hyperplane was reached.
    """

    direction: np.ndarray
    optimum: np.ndarray
    separated: bool


class MinimumNormPoint(BaseOptimizer):
    """Finds the point of a vertex hull nearest to a pivot, under a pivot-dependent function.

    ``function_factory(pivot)`` builds the convex function measuring distance to
    the pivot; ``line_searcher_factory(fn)`` builds the line searcher used with it.
    Vertex weights persist between calls, so a later call with more vertices
    continues from the previous combination.
    """

    def __init__(self, function_factory: Callable[[np.ndarray], ConvexFunction],
                 line_searcher_factory: Callable[[ConvexFunction], LineSearcher] = LineSearcher):
        super().__init__(None)
        self.function_factory = function_factory
        self.line_searcher_factory = line_searcher_factory
        self.line_searcher: LineSearcher | None = None
        self.alpha = np.zeros(0)
        self.active_vertices: set[int] = set()
        self._size = 0
        self._x_current = np.zeros(0)
        self._x_new = np.zeros(0)
        self._gradient = np.zeros(0)

    def optimize_separation_direction(self, vertices: Sequence, pivot) -> SeparationOutcome:
        pivot = np.asarray(pivot, dtype=float)
        self.fn = self.function_factory(pivot)
        self.line_searcher = self.line_searcher_factory(self.fn)
        points = self._initialize(vertices)
        if pivot.size != points.shape[1]:
            raise ValueError("pivot must match the vertex dimension")

        if len(points) == 1:
            difference = pivot - points[0]
            with np.errstate(divide="ignore", invalid="ignore"):
                direction = difference / np.abs(difference).sum()
            print("[Minimum norm point optimization] exits for one vertex")
            return SeparationOutcome(direction=direction, optimum=points[0].copy(), separated=True)

        t = 0
        while t < _MAX_DESCENT_ITERATIONS:
            self._x_current = self._x_new.copy()
            self._gradient = np.asarray(self.fn.subgradient(self._x_current), dtype=float)
            self._simplex_gradient_descent(points)
            if self.fn.value(self._x_current) - self.fn.value(self._x_new) < _EPSILON:
                break
            t += 1

        self._x_current = self._x_new.copy()
        separated = False
        t1 = 0
        while t1 < _MAX_MARGIN_ITERATIONS:
            index, margin = self._maximum_margin_point(points, pivot - self._x_current, pivot)
            if margin > _EPSILON:
                target = points[index]
                gamma = self.line_searcher.find_optimal_relative_distance(self._x_current, target, 1.0)
                self._x_new = (1.0 - gamma) * self._x_current + gamma * target
                self.alpha = (1.0 - gamma) * self.alpha
                self.alpha[index] += gamma
            else:
                separated = True
                break
            self._x_current = self._x_new.copy()
            t1 += 1

        optimum = self._x_new.copy()
        direction = pivot - optimum
        if separated:
            print("[Minimum norm point optimization] max margin separation hyperplane computed, "
                  f"terminates at iteration: {t + t1} (distance: {self.fn.value(optimum)})")
        else:
            print("[Minimum norm point optimization] no separation hyperplane found after "
                  f"{_MAX_DESCENT_ITERATIONS + _MAX_MARGIN_ITERATIONS} iterations")
        return SeparationOutcome(direction=direction, optimum=optimum, separated=separated)

    def vertex_weights(self) -> np.ndarray:
        return self.alpha / np.abs(self.alpha).sum()

    def find_nearest_point_by_direction(self, vertices: Sequence, direction, point) -> np.ndarray:
        """Return convex weights of the hull point ``point - t * direction`` with least ``t >= 0``."""
        if len(vertices) == 0:
            raise ValueError("The set of vertices cannot be empty")
        points = np.array([np.asarray(v, dtype=float) for v in vertices])
        direction = np.asarray(direction, dtype=float)
        point = np.asarray(point, dtype=float)
        n_vertices = len(points)

        # Variables: weights w_0 .. w_{n-1} and the step t, all non-negative.
        cost = np.zeros(n_vertices + 1)
        cost[-1] = 1.0
        simplex_row = np.append(np.ones(n_vertices), 0.0)
        hull_rows = np.hstack([points.T, direction.reshape(-1, 1)])
        a_eq = np.vstack([simplex_row, hull_rows])
        b_eq = np.concatenate([[1.0], point])
        outcome = optimize.linprog(cost, A_eq=a_eq, b_eq=b_eq,
                                   bounds=[(0.0, None)] * (n_vertices + 1), method="highs")
        if outcome.status != 0:
            print(f"error in optimization (Ret = {outcome.status})")
            raise RuntimeError(f"nearest point along direction not found: {outcome.message}")
        return np.asarray(outcome.x[:-1], dtype=float)

    def _initialize(self, vertices: Sequence) -> np.ndarray:
        if len(vertices) == 0:
            raise ValueError("The set of vertices cannot be empty")
        points = np.array([np.asarray(v, dtype=float) for v in vertices])
        previous = self._size
        self._size = len(points)
        alpha = np.zeros(self._size)
        kept = min(previous, self._size)
        alpha[:kept] = self.alpha[:kept]
        self.alpha = alpha
        if previous == 0:
            self.alpha[0] = 1.0
            self.active_vertices.add(0)
        self._x_new = self.alpha @ points
        return points

    @staticmethod
    def _check_separation(points: np.ndarray, direction: np.ndarray, point: np.ndarray) -> bool:
        delta = 1e-6
        bound = float(np.dot(point, direction)) - delta
        return all(float(np.dot(v, direction)) < bound for v in points)

    @staticmethod
    def _maximum_margin_point(points: np.ndarray, direction: np.ndarray,
                              point: np.ndarray) -> tuple[int, float]:
        index, margin = -1, 0.0
        reference = float(np.dot(point, direction))
        for i, v in enumerate(points):
            gap = float(np.dot(v, direction)) - reference
            if gap > margin:
                index, margin = i, gap
        return index, margin

    @staticmethod
    def _separation_margin(points: np.ndarray, direction: np.ndarray, point: np.ndarray) -> float:
        return max([sys.float_info.min] + [float(np.dot(point - v, direction)) for v in points])

    def _simplex_gradient_descent(self, points: np.ndarray) -> None:
        size = self._size
        active = self.active_vertices
        d_alpha = points @ self._gradient
        order = np.argsort(d_alpha, kind="stable")
        d_tmp = np.zeros(size)
        null_count = size - len(active)
        offset_index = 0
        while offset_index < size:
            pivot_value = d_alpha[order[offset_index]]
            for rank, idx in enumerate(order):
                if rank < offset_index or int(idx) in active:
                    d_tmp[idx] = d_alpha[idx] - pivot_value
                else:
                    d_tmp[idx] = 0.0
            if d_tmp.sum() <= 0:
                break
            if int(order[offset_index]) not in active:
                null_count -= 1
            offset_index += 1
        if offset_index == 0:
            return
        offset = d_tmp.sum() / (size - null_count)
        for rank, idx in enumerate(order):
            if rank < offset_index or int(idx) in active:
                d_tmp[idx] -= offset
        norm = float(np.abs(d_tmp).sum())
        if norm < _EPSILON:
            return
        d_alpha = d_tmp / norm

        step = sys.float_info.max
        reset_index = None
        for i in np.flatnonzero(d_alpha > 0.0):
            ratio = self.alpha[i] / d_alpha[i]
            if ratio < step:
                step = ratio
                reset_index = int(i)
        if reset_index is None:
            print(format_vector(d_alpha, " dAlpha "))
            print(format_vector(self._gradient, " dXCurrent "))
            raise RuntimeError("no vertex weight can decrease along the descent direction")

        x_tmp = self._x_current - (step * d_alpha) @ points
        gamma = 1.0
        if self.fn.value(self._x_current) >= self.fn.value(x_tmp):
            self._x_new = x_tmp
            active.discard(reset_index)
        else:
            gamma = self.line_searcher.find_optimal_relative_distance(self._x_current, x_tmp, 1.0)
            self._x_new = (1.0 - gamma) * self._x_current + gamma * x_tmp
        self.alpha = self.alpha - (gamma * step) * d_alpha
        active.update(int(i) for i in np.flatnonzero(d_alpha < 0.0))
        total = self.alpha.sum()
        if total < 1.0:
            self.alpha = self.alpha / total