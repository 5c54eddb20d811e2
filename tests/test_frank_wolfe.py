import numpy as np
import pytest

from mopmc.base_optimizer import ConvexFunction
from mopmc.frank_wolfe import FrankWolfeMethod, FWOption


class SquaredDistance(ConvexFunction):
    def __init__(self, pivot):
        self.pivot = np.asarray(pivot, dtype=float)

    def value(self, x):
        diff = np.asarray(x, dtype=float) - self.pivot
        return float(diff @ diff)

    def subgradient(self, x):
        return 2.0 * (np.asarray(x, dtype=float) - self.pivot)


SQUARE = [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]]


@pytest.mark.parametrize("option", [FWOption.SIMPLEX_GD, FWOption.AWAY_STEP])
def test_interior_pivot_is_reached(option):
    pivot = [0.3, 0.6]
    optimizer = FrankWolfeMethod(SquaredDistance(pivot), option=option)
    point = optimizer.minimize_vertices(SQUARE)
    assert np.allclose(point, pivot, atol=1e-3)


@pytest.mark.parametrize("option", [FWOption.SIMPLEX_GD, FWOption.AWAY_STEP])
def test_exterior_pivot_projects_onto_hull(option):
    fn = SquaredDistance([2.0, 0.5])
    optimizer = FrankWolfeMethod(fn, option=option)
    point = optimizer.minimize_vertices(SQUARE)
    assert np.allclose(point, [1.0, 0.5], atol=1e-3)
    assert all(fn.value(point) <= fn.value(v) + 1e-9 for v in SQUARE)


def test_weights_are_convex_and_reproduce_point():
    optimizer = FrankWolfeMethod(SquaredDistance([0.4, 0.4]))
    point = optimizer.minimize_vertices(SQUARE)
    weights = optimizer.vertex_weights()
    assert weights.shape == (4,)
    assert weights.sum() == pytest.approx(1.0, abs=1e-6)
    assert np.all(weights >= -1e-9)
    assert np.allclose(weights @ np.array(SQUARE), point, atol=1e-6)


def test_single_vertex_returns_it():
    optimizer = FrankWolfeMethod(SquaredDistance([5.0, 5.0]))
    point = optimizer.minimize_vertices([[1.0, 2.0]])
    assert np.allclose(point, [1.0, 2.0])
    assert np.allclose(optimizer.vertex_weights(), [1.0])


def test_weights_grow_with_more_vertices():
    fn = SquaredDistance([0.5, 0.5])
    optimizer = FrankWolfeMethod(fn)
    optimizer.minimize_vertices(SQUARE[:2])
    point = optimizer.minimize_vertices(SQUARE)
    assert optimizer.vertex_weights().shape == (4,)
    assert fn.value(point) < fn.value([0.5, 0.0])


def test_empty_vertices_rejected():
    optimizer = FrankWolfeMethod(SquaredDistance([0.0]))
    with pytest.raises(ValueError):
        optimizer.minimize_vertices([])


def test_missing_function_rejected():
    optimizer = FrankWolfeMethod()
    with pytest.raises(ValueError):
        optimizer.minimize_vertices(SQUARE)