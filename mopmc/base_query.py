"""Common base for queries that combine value iteration with convex optimisation."""

from __future__ import annotations

import abc
import copy

import numpy as np

from mopmc.base_optimizer import BaseOptimizer, ConvexFunction
from mopmc.query_data import QueryData
from mopmc.value_iteration import BaseVIHandler


class BaseQuery(abc.ABC):
    """A query over a copy of the given data, with its solver and optimizers."""

    def __init__(self, data: QueryData, vi_handler: BaseVIHandler | None = None,
                 fn: ConvexFunction | None = None,
                 inner_optimizer: BaseOptimizer | None = None,
                 outer_optimizer: BaseOptimizer | None = None):
        self.data = copy.deepcopy(data)
        self.vi_handler = vi_handler
        self.fn = fn
        self.inner_optimizer = inner_optimizer
        self.outer_optimizer = outer_optimizer
        self._vertex_weights = np.zeros(0)

    @abc.abstractmethod
    def query(self) -> None:
        """Run the query."""

    def print_result(self) -> None:
        """Print the outcome of the query; the default prints nothing."""

    def main_loop_iteration_count(self) -> int:
        """Number of main-loop iterations the query ran."""
        return 0

    def vertex_weights(self) -> np.ndarray:
        """Weights of the vertices found by the query."""
        return self._vertex_weights.copy()