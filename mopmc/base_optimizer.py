"""Convex function interface, line search and the optimizer base class."""

from __future__ import annotations

import abc
from collections.abc import Sequence

import numpy as np
from scipy import optimize


class ConvexFunction(abc.ABC):
    """A convex function on real vectors."""

    @abc.abstractmethod
    def value(self, x) -> float:
        """Return the function value at ``x``."""

    @abc.abstractmethod
    def subgradient(self, x) -> np.ndarray:
        """Return a subgradient at ``x``."""


class LineSearcher:
    """Finds the best relative step along a segment for a convex function."""

    def __init__(self, fn: ConvexFunction | None = None):
        self.fn = fn

    def find_optimal_relative_distance(self, x_current, x_new, upper: float = 1.0) -> float:
        """Return ``g`` in ``[0, upper]`` minimising ``fn((1-g)*x_current + g*x_new)``."""
        if self.fn is None:
            raise ValueError("line searcher has no function")
        x_current = np.asarray(x_current, dtype=float)
        x_new = np.asarray(x_new, dtype=float)
        if upper <= 0:
            return 0.0

        def along(gamma: float) -> float:
            return float(self.fn.value((1.0 - gamma) * x_current + gamma * x_new))

        found = optimize.minimize_scalar(along, bounds=(0.0, upper), method="bounded",
                                         options={"xatol": 1e-12})
        candidates = [(along(upper), float(upper)), (along(0.0), 0.0),
                      (along(float(found.x)), float(found.x))]
        return min(candidates, key=lambda pair: pair[0])[1]


class BaseOptimizer:
    """Common base for optimizers over vertex sets or halfspace intersections."""

    def __init__(self, fn: ConvexFunction | None = None):
        self.fn = fn

    def minimize_vertices(self, vertices: Sequence) -> np.ndarray:
        """Minimise ``fn`` over the convex hull of ``vertices``."""
        raise TypeError(f"{type(self).__name__} cannot minimize over a vertex set")

    def minimize_halfspaces(self, point, boundary_points: Sequence, directions: Sequence) -> np.ndarray:
        """Minimise ``fn`` over an intersection of halfspaces, starting at ``point``."""
        raise TypeError(f"{type(self).__name__} cannot minimize over halfspaces")

    def optimize_separation_direction(self, vertices: Sequence, pivot):
        """Find a direction separating ``pivot`` from the hull of ``vertices``."""
        raise TypeError(f"{type(self).__name__} cannot optimize a separation direction")

    def vertex_weights(self) -> np.ndarray:
        """Weights of the vertices in the last result; empty unless overridden."""
        return np.zeros(0)