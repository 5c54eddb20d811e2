import numpy as np
import pytest
from scipy import sparse

from mopmc.query_data import QueryData
from mopmc.value_iteration import BaseVIHandler, ValueIterationHandler


def make_data():
    # State 0 has two choices, each moving to the absorbing state 1.
    matrix = sparse.csr_matrix(np.array([[0.0, 1.0], [0.0, 1.0], [0.0, 1.0]]))
    return QueryData(
        transition_matrix=matrix,
        reward_vectors=[[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
        row_count=3,
        col_count=2,
        objective_count=2,
        initial_row=0,
        row_group_indices=[0, 2, 3],
        scheduler=[0, 0],
    )


@pytest.fixture
def handler():
    h = ValueIterationHandler(make_data())
    h.initialize()
    return h


def test_base_handler_is_abstract():
    with pytest.raises(TypeError):
        BaseVIHandler()


def test_results_start_zeroed():
    h = ValueIterationHandler(make_data())
    assert h.results == [0.0, 0.0, 0.0]


def test_requires_initialize():
    h = ValueIterationHandler(make_data())
    with pytest.raises(RuntimeError):
        h.value_iteration([1.0, 0.0])


def test_first_objective_weight(handler):
    handler.value_iteration([1.0, 0.0])
    assert handler.results == pytest.approx([1.0, 0.0, 1.0])


def test_second_objective_switches_scheduler(handler):
    handler.value_iteration([0.0, 1.0])
    assert handler.scheduler == [1, 0]


@pytest.mark.parametrize("weights", [[1.0, 0.0], [0.0, 1.0], [0.3, 0.7]])
def test_weighted_value_matches_objectives(handler, weights):
    handler.value_iteration(weights)
    results = handler.results
    assert results[-1] == pytest.approx(float(np.dot(weights, results[:-1])))


def test_query_data_scheduler_untouched():
    data = make_data()
    h = ValueIterationHandler(data)
    h.initialize()
    h.value_iteration([0.0, 1.0])
    assert data.scheduler == [0, 0]


def test_short_reward_vector_rejected():
    data = make_data()
    data.reward_vectors = [[1.0], [0.0, 1.0, 0.0]]
    with pytest.raises(ValueError):
        ValueIterationHandler(data).initialize()