"""Frank-Wolfe style minimisation of a convex function over the hull of a vertex set."""

from __future__ import annotations

import enum
import math
import sys
from collections.abc import Sequence

import numpy as np

from mopmc.base_optimizer import BaseOptimizer, ConvexFunction, LineSearcher

_MAX_ITERATIONS = 1000
_COS_TOLERANCE = math.cos(90.0001 / 180.0 * math.pi)


class FWOption(enum.Enum):
    SIMPLEX_GD = enum.auto()
    AWAY_STEP = enum.auto()


def _cosine(a: np.ndarray, b: np.ndarray) -> float:
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b)) / norm


class FrankWolfeMethod(BaseOptimizer):
    """Minimises ``fn`` over the convex hull of vertices, tracking convex weights.

    The weights persist between calls, so a later call with more vertices
    continues from the previous combination.
    """

    def __init__(self, fn: ConvexFunction | None = None, line_searcher: LineSearcher | None = None,
                 option: FWOption = FWOption.SIMPLEX_GD):
        super().__init__(fn)
        self.line_searcher = line_searcher if line_searcher is not None else LineSearcher(fn)
        self.option = option
        self.alpha = np.zeros(0)
        self.active_vertices: set[int] = set()
        self._size = 0
        self._x_current = np.zeros(0)
        self._x_new = np.zeros(0)
        self._gradient = np.zeros(0)

    def minimize_vertices(self, vertices: Sequence) -> np.ndarray:
        if self.fn is None:
            raise ValueError("optimizer has no function")
        points = self._initialize(vertices)
        steps = {
            FWOption.SIMPLEX_GD: self._simplex_gradient_descent,
            FWOption.AWAY_STEP: self._forward_or_away_step,
        }
        if self.option not in steps:
            raise NotImplementedError("Selected FW option not implemented in this version")
        step = steps[self.option]
        t = 0
        while t < _MAX_ITERATIONS:
            self._x_current = self._x_new.copy()
            self._gradient = np.asarray(self.fn.subgradient(self._x_current), dtype=float)
            if self._should_exit(points):
                break
            step(points)
            t += 1
        print(f"[Inner optimization] FW stops at iteration: {t} "
              f"(distance: {self.fn.value(self._x_new)})")
        return self._x_new.copy()

    def vertex_weights(self) -> np.ndarray:
        return self.alpha.copy()

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

    def _should_exit(self, points: np.ndarray) -> bool:
        cos_min = min(1.0, min(_cosine(p - self._x_current, self._gradient) for p in points))
        if cos_min > _COS_TOLERANCE:
            print(f"[Inner optimization] FW loop exits due to small cosine ({cos_min})")
            return True
        return False

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
        if np.all(np.abs(d_tmp) <= 1e-12):
            return
        d_alpha = d_tmp / np.abs(d_tmp).sum()

        step = sys.float_info.max
        reset_index = None
        for i in np.flatnonzero(d_alpha > 0.0):
            ratio = self.alpha[i] / d_alpha[i]
            if ratio < step:
                step = ratio
                reset_index = int(i)
        if reset_index is None:
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

    def _forward_or_away_step(self, points: np.ndarray) -> None:
        scores = points @ self._gradient
        forward_index = int(np.argmin(scores))
        forward_vector = points[forward_index] - self._x_current

        away_index = 0
        best = sys.float_info.min
        for j in sorted(self.active_vertices):
            if scores[j] > best:
                best = scores[j]
                away_index = j
        away_vector = self._x_current - points[away_index]

        if -float(np.dot(self._gradient, forward_vector - away_vector)) >= 0.0:
            is_forward = True
            x_tmp = self._x_current + forward_vector
            gamma_max = 1.0
        else:
            is_forward = False
            x_tmp = self._x_current + away_vector
            a = self.alpha[away_index]
            gamma_max = a / (1.0 - a) if a < 1.0 else math.inf

        if math.isfinite(gamma_max):
            gamma = self.line_searcher.find_optimal_relative_distance(self._x_current, x_tmp, gamma_max)
        else:
            gamma = 0.0

        if is_forward:
            if gamma == gamma_max:
                self.active_vertices.clear()
            self.active_vertices.add(forward_index)
            self.alpha = (1.0 - gamma) * self.alpha
            self.alpha[forward_index] += gamma
        else:
            if gamma == gamma_max:
                self.active_vertices.discard(away_index)
            self.alpha = (1.0 + gamma) * self.alpha
            self.alpha[away_index] -= gamma
        self._x_new = (1.0 - gamma) * self._x_current + gamma * x_tmp