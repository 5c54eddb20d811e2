"""Maximum-margin separation of a threshold point from a set of vertices.

The weight vector ``w`` lies on the probability simplex, and the margin ``d`` is
the largest value with ``sum_j sign_j * (threshold_j - v_j) * w_j >= d`` for
every vertex ``v``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import optimize


class SeparationError(RuntimeError):
    """The separating-direction linear program could not be solved."""


@dataclass(frozen=True)
class SeparationResult:
    """A separating direction on the simplex and the margin it achieves."""

    direction: np.ndarray
    distance: float


def find_maximum_separating_direction(vertices: Sequence, threshold, sign) -> SeparationResult:
    """Return the simplex direction that maximises the margin of ``threshold`` over ``vertices``."""
    if len(vertices) == 0:
        raise ValueError("the set of vertices cannot be empty")
    points = np.array([np.asarray(v, dtype=float) for v in vertices])
    threshold = np.asarray(threshold, dtype=float)
    sign = np.asarray(sign, dtype=float)
    n_dims = points.shape[1]
    if threshold.size != n_dims or sign.size != n_dims:
        raise ValueError("threshold and sign must match the vertex dimension")

    # Variables: w_0 .. w_{n-1}, d. Minimise -d.
    cost = np.zeros(n_dims + 1)
    cost[-1] = -1.0
    coefficients = sign * (threshold - points)
    a_ub = np.hstack([-coefficients, np.ones((len(points), 1))])
    b_ub = np.zeros(len(points))
    a_eq = np.append(np.ones(n_dims), 0.0).reshape(1, -1)
    b_eq = np.array([1.0])
    bounds = [(0.0, None)] * n_dims + [(None, None)]

    outcome = optimize.linprog(cost, A_ub=a_ub, b_ub=b_ub, A_eq=a_eq, b_eq=b_eq,
                               bounds=bounds, method="highs")
    if outcome.status != 0:
        print(f"error in optimization (Ret = {outcome.status})")
        raise SeparationError(f"separating direction not found: {outcome.message}")
    solution = np.asarray(outcome.x, dtype=float)
    return SeparationResult(direction=solution[:-1], distance=float(solution[-1]))