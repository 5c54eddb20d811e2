"""Data describing a multi-objective query over an MDP, and the options for running it."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from scipy import sparse


def _empty_matrix() -> sparse.csr_matrix:
    return sparse.csr_matrix((0, 0))


@dataclass
class QueryData:
    """Model and objective data handed to the value-iteration solvers and queries.

    ``transition_matrix`` has one row per choice (row) and one column per state
    (row group). ``row_group_indices`` holds ``col_count + 1`` offsets into the
    rows; a scheduler selects, for every row group, the offset of one row.
    """

    transition_matrix: sparse.csr_matrix = field(default_factory=_empty_matrix)
    reward_vectors: list[list[float]] = field(default_factory=list)
    flatten_reward_vector: list[float] = field(default_factory=list)
    thresholds: list[float] = field(default_factory=list)
    results: list[float] = field(default_factory=list)

    row_count: int = 0
    col_count: int = 0
    objective_count: int = 0
    initial_row: int = 0

    row_group_indices: list[int] = field(default_factory=list)
    row_to_row_group: list[int] = field(default_factory=list)
    # Row groups that contain more than one row.
    plural_row_group_indices: list[int] = field(default_factory=list)
    # A scheduler is a row selection for each row group.
    scheduler: list[int] = field(default_factory=list)

    scheduler_distribution: list[float] = field(default_factory=list)
    collection_of_schedulers: list[list[int]] = field(default_factory=list)

    is_probabilistic_objective: list[bool] = field(default_factory=list)
    is_threshold_upper_bound: list[bool] = field(default_factory=list)


class QueryType(enum.Enum):
    ACHIEVABILITY = enum.auto()
    CONVEX = enum.auto()


class ConvexFunctionKind(enum.Enum):
    MSE = enum.auto()
    VAR = enum.auto()


class ValueIterationKind(enum.Enum):
    CUDA_VI = enum.auto()
    STANDARD_VI = enum.auto()


class ConstraintMode(enum.Enum):
    CONSTRAINED = enum.auto()
    UNCONSTRAINED = enum.auto()


@dataclass
class QueryOptions:
    """Selection of query kind, convex function, solver and constraint handling."""

    query_type: QueryType = QueryType.ACHIEVABILITY
    convex_fun: ConvexFunctionKind = ConvexFunctionKind.MSE
    vi: ValueIterationKind = ValueIterationKind.STANDARD_VI
    constrained_opt: ConstraintMode = ConstraintMode.CONSTRAINED