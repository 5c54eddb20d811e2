"""Achievability query: decide whether thresholds on all objectives can be met at once."""

from __future__ import annotations

import numpy as np

from mopmc.base_query import BaseQuery
from mopmc.query_data import QueryData
from mopmc.separation import find_maximum_separating_direction
from mopmc.value_iteration import BaseVIHandler

_MAX_ITERATIONS = 20


class AchievabilityQuery(BaseQuery):
    """Alternates value iteration with maximum-margin separation of the threshold point.

    The thresholds are achievable unless some weight vector yields an optimal
    vertex that falls short of the thresholds in that weighted direction.
    """

    def __init__(self, data: QueryData, vi_handler: BaseVIHandler | None = None):
        super().__init__(data, vi_handler)
        self.vertex_vectors: list[np.ndarray] = []
        self.weight_vectors: list[np.ndarray] = []
        self._iterations = 0
        self._achievable = False

    def query(self) -> None:
        data = self.data
        if len(data.row_group_indices) != data.col_count + 1:
            raise ValueError("row group indices must hold one more entry than the column count")
        if self.vi_handler is None:
            raise ValueError("query has no value-iteration handler")
        self.vi_handler.initialize()
        n_objs = int(data.objective_count)
        threshold = np.asarray(data.thresholds, dtype=float)
        sign = np.array([-1.0 if upper else 1.0
                         for upper in data.is_threshold_upper_bound[:n_objs]])
        weights = np.full(n_objs, 1.0 / n_objs)
        self._iterations = 0
        self._achievable = True

        while self._iterations < _MAX_ITERATIONS:
            if self.vertex_vectors:
                separation = find_maximum_separating_direction(self.vertex_vectors, threshold, sign)
                weights = separation.direction
                if separation.distance <= 0:
                    break
            signed_weights = sign * weights
            self.vi_handler.value_iteration([float(w) for w in signed_weights])
            vertex = np.asarray(self.vi_handler.results[:n_objs], dtype=float)
            self.vertex_vectors.append(vertex)
            self.weight_vectors.append(np.asarray(weights, dtype=float).copy())
            self._iterations += 1
            if float(np.dot(signed_weights, threshold - vertex)) > 0:
                self._achievable = False
                break
        self.vi_handler.exit()

    def result(self) -> bool:
        """Whether the thresholds were found achievable."""
        return self._achievable

    def main_loop_iteration_count(self) -> int:
        return self._iterations

    def print_result(self) -> None:
        print("----------------------------------------------")
        print(f"Achievability Query terminates after {self.main_loop_iteration_count()} iteration(s) ")
        print(f"OUTPUT: {str(self.result()).lower()}")
        print("----------------------------------------------")