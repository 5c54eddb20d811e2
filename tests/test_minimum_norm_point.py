import numpy as np
import pytest

from mopmc.base_optimizer import ConvexFunction
from mopmc.minimum_norm_point import MinimumNormPoint, SeparationOutcome


class SquaredDistance(ConvexFunction):
    def __init__(self, pivot):
        self.pivot = np.asarray(pivot, dtype=float)

    def value(self, x):
        diff = np.asarray(x, dtype=float) - self.pivot
        return float(diff @ diff)

    def subgradient(self, x):
        return 2.0 * (np.asarray(x, dtype=float) - self.pivot)


SQUARE = [np.array([0.0, 0.0]), np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([1.0, 1.0])]
TRIANGLE = [np.array([0.0, 0.0]), np.array([1.0, 0.0]), np.array([0.0, 1.0])]


def make_optimizer():
    return MinimumNormPoint(SquaredDistance)


def test_single_vertex_returns_vertex_and_normalised_direction():
    opt = make_optimizer()
    vertex = np.array([1.0, 0.0])
    pivot = np.array([3.0, 4.0])
    outcome = opt.optimize_separation_direction([vertex], pivot)
    assert isinstance(outcome, SeparationOutcome)
    assert outcome.separated is True
    np.testing.assert_allclose(outcome.optimum, vertex)
    assert np.abs(outcome.direction).sum() == pytest.approx(1.0)
    # direction is parallel to pivot - vertex
    diff = pivot - vertex
    assert diff[0] * outcome.direction[1] - diff[1] * outcome.direction[0] == pytest.approx(0.0)


def test_pivot_outside_hull_finds_nearest_vertex():
    opt = make_optimizer()
    pivot = np.array([2.0, 2.0])
    outcome = opt.optimize_separation_direction(SQUARE, pivot)
    assert outcome.separated is True
    np.testing.assert_allclose(outcome.optimum, SQUARE[3], atol=1e-9)
    np.testing.assert_allclose(outcome.direction, pivot - outcome.optimum)


def test_vertex_weights_reconstruct_optimum():
    opt = make_optimizer()
    outcome = opt.optimize_separation_direction(SQUARE, np.array([2.0, 2.0]))
    weights = opt.vertex_weights()
    assert weights.shape == (4,)
    assert weights.sum() == pytest.approx(1.0)
    assert np.all(weights >= -1e-12)
    np.testing.assert_allclose(weights @ np.array(SQUARE), outcome.optimum, atol=1e-9)


def test_pivot_inside_hull_reaches_pivot():
    opt = make_optimizer()
    pivot = np.array([0.5, 0.5])
    outcome = opt.optimize_separation_direction(SQUARE, pivot)
    np.testing.assert_allclose(outcome.optimum, pivot, atol=1e-5)
    weights = opt.vertex_weights()
    np.testing.assert_allclose(weights @ np.array(SQUARE), outcome.optimum, atol=1e-9)


def test_empty_vertices_rejected():
    opt = make_optimizer()
    with pytest.raises(ValueError):
        opt.optimize_separation_direction([], np.array([1.0, 1.0]))


def test_nearest_point_by_direction_hits_hull_boundary():
    opt = make_optimizer()
    weights = opt.find_nearest_point_by_direction(
        TRIANGLE, np.array([1.0, 1.0]), np.array([2.0, 2.0]))
    assert weights.sum() == pytest.approx(1.0)
    assert np.all(weights >= -1e-9)
    np.testing.assert_allclose(weights @ np.array(TRIANGLE), [0.5, 0.5], atol=1e-7)


def test_nearest_point_by_direction_for_point_inside_hull():
    opt = make_optimizer()
    point = np.array([0.2, 0.2])
    weights = opt.find_nearest_point_by_direction(TRIANGLE, np.array([1.0, 1.0]), point)
    np.testing.assert_allclose(weights @ np.array(TRIANGLE), point, atol=1e-7)
    assert weights.sum() == pytest.approx(1.0)


def test_nearest_point_by_direction_infeasible_raises():
    opt = make_optimizer()
    with pytest.raises(RuntimeError):
        opt.find_nearest_point_by_direction(
            TRIANGLE, np.array([1.0, -1.0]), np.array([2.0, 2.0]))


def test_nearest_point_by_direction_rejects_empty_vertices():
    opt = make_optimizer()
    with pytest.raises(ValueError):
        opt.find_nearest_point_by_direction([], np.array([1.0]), np.array([1.0]))