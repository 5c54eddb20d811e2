import numpy as np
import pytest

from mopmc.separation import (
    SeparationResult,
    find_maximum_separating_direction,
)


def _margins(result, vertices, threshold, sign):
    sign = np.asarray(sign, dtype=float)
    threshold = np.asarray(threshold, dtype=float)
    return [float(np.dot(sign * (threshold - np.asarray(v, dtype=float)), result.direction))
            for v in vertices]


def test_single_vertex_below_threshold():
    result = find_maximum_separating_direction([[0.0, 0.0]], [1.0, 1.0], [1.0, 1.0])
    assert isinstance(result, SeparationResult)
    assert result.distance == pytest.approx(1.0)
    assert result.direction.sum() == pytest.approx(1.0)


def test_direction_lies_on_simplex_and_margin_holds():
    vertices = [[0.2, 0.9], [0.8, 0.1], [0.5, 0.5]]
    threshold = [1.0, 1.0]
    sign = [1.0, 1.0]
    result = find_maximum_separating_direction(vertices, threshold, sign)
    assert result.direction.sum() == pytest.approx(1.0)
    assert np.all(result.direction >= -1e-9)
    for margin in _margins(result, vertices, threshold, sign):
        assert margin >= result.distance - 1e-9
    assert min(_margins(result, vertices, threshold, sign)) == pytest.approx(result.distance)


def test_threshold_dominated_gives_nonpositive_margin():
    result = find_maximum_separating_direction([[2.0, 2.0]], [1.0, 1.0], [1.0, 1.0])
    assert result.distance <= 0.0
    assert result.distance == pytest.approx(-1.0)


def test_sign_flips_orientation():
    vertices = [[2.0, 2.0]]
    threshold = [1.0, 1.0]
    positive = find_maximum_separating_direction(vertices, threshold, [1.0, 1.0])
    negative = find_maximum_separating_direction(vertices, threshold, [-1.0, -1.0])
    assert negative.distance == pytest.approx(-positive.distance)


def test_empty_vertices_rejected():
    with pytest.raises(ValueError):
        find_maximum_separating_direction([], [1.0], [1.0])


def test_dimension_mismatch_rejected():
    with pytest.raises(ValueError):
        find_maximum_separating_direction([[0.0, 0.0]], [1.0, 1.0, 1.0], [1.0, 1.0])