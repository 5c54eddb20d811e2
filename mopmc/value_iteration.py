"""Value iteration for weighted multi-objective total rewards on MDPs."""

from __future__ import annotations

import abc
from collections.abc import Sequence

import numpy as np
from scipy import sparse

from mopmc.query_data import QueryData

_TOLERANCE = 1e-6
_MAX_ITERATIONS = 10000


class BaseVIHandler(abc.ABC):
    """Interface of a value-iteration solver used by the queries."""

    _active: bool = False

    @property
    def active(self) -> bool:
        """Whether the solver has been initialized and not yet exited."""
        return self._active

    def initialize(self) -> None:
        """Prepare the solver and mark it as active."""
        self._active = True

    def exit(self) -> None:
        """Release the solver and mark it as no longer active."""
        self._active = False

    def value_iteration(self, weights: Sequence[float]) -> None:
        """Solve for the given objective weights; the default does nothing."""

    @property
    @abc.abstractmethod
    def results(self) -> list[float]:
        """Objective values of the last solution, followed by the weighted value."""

    @property
    @abc.abstractmethod
    def scheduler(self) -> list[int]:
        """Chosen row offset for every row group."""


class ValueIterationHandler(BaseVIHandler):
    """Value iteration on the host, with scheduler extraction then evaluation."""

    def __init__(self, query_data: QueryData):
        self.data = query_data
        self._transition = sparse.csr_matrix(query_data.transition_matrix, dtype=float)
        self._reward_vectors = [list(v) for v in query_data.reward_vectors]
        self._scheduler = [int(s) for s in query_data.scheduler]
        self._row_group_indices = [int(i) for i in query_data.row_group_indices]
        self._n_rows = int(query_data.row_count)
        self._n_cols = int(query_data.col_count)
        self._n_objs = int(query_data.objective_count)
        self._initial_row = int(query_data.initial_row)
        self._results = [0.0] * (self._n_objs + 1)
        self._rewards: list[np.ndarray] | None = None
        self._policy_matrix = sparse.csr_matrix((self._n_cols, self._n_cols))

    def initialize(self) -> None:
        rewards = []
        for vector in self._reward_vectors[: self._n_objs]:
            if len(vector) < self._n_rows:
                raise ValueError("reward vector is shorter than the row count")
            rewards.append(np.asarray(vector[: self._n_rows], dtype=float))
        if len(rewards) < self._n_objs:
            raise ValueError("fewer reward vectors than objectives")
        self._rewards = rewards
        super().initialize()

    def value_iteration(self, weights: Sequence[float]) -> None:
        self.phase_one(weights)
        self.phase_two()

    def _require_initialized(self) -> list[np.ndarray]:
        if self._rewards is None:
            raise RuntimeError("initialize() must be called before value iteration")
        return self._rewards

    def phase_one(self, weights: Sequence[float]) -> None:
        """Iterate the weighted reward to choose a scheduler; store the weighted value."""
        rewards = self._require_initialized()
        w = np.asarray(list(weights)[: self._n_objs], dtype=float)
        combined = sum((wk * rk for wk, rk in zip(w, rewards)), np.zeros(self._n_rows))
        groups = list(zip(self._row_group_indices, self._row_group_indices[1:]))
        sched = self._scheduler
        x = np.zeros(self._n_cols)
        y = combined.copy()
        for _ in range(_MAX_ITERATIONS):
            x1 = np.empty(self._n_cols)
            for state, (start, stop) in enumerate(groups):
                best = y[start + sched[state]]
                for choice in range(stop - start):
                    if choice != sched[state] and x[state] < y[start + choice]:
                        best = y[start + choice]
                        sched[state] = choice
                x1[state] = best
            y = self._transition @ x1 + combined
            converged = np.max(np.abs(x1 - x), initial=0.0) < _TOLERANCE
            x = x1
            if converged:
                break
        self._results[self._n_objs] = float(x[self._initial_row])

    def phase_two(self) -> None:
        """Evaluate every objective under the scheduler chosen in phase one."""
        rewards = self._require_initialized()
        selected = np.asarray(self._row_group_indices[: self._n_cols], dtype=int) + np.asarray(
            self._scheduler, dtype=int)
        self._policy_matrix = self._transition[selected]
        for k, reward in enumerate(rewards):
            r = reward[selected]
            z = r.copy()
            for _ in range(_MAX_ITERATIONS):
                z1 = self._policy_matrix @ z + r
                converged = np.max(np.abs(z1 - z), initial=0.0) < _TOLERANCE
                z = z1
                if converged:
                    break
            self._results[k] = float(z[self._initial_row])

    @property
    def results(self) -> list[float]:
        return list(self._results)

    @property
    def scheduler(self) -> list[int]:
        return list(self._scheduler)