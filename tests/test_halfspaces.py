import numpy as np
import pytest

from mopmc.halfspaces import (
    check_non_exterior_point,
    find_non_exterior_point,
    verify_point_in_halfspaces,
)


def unit_box():
    boundary = [np.array([1.0, 0.0]), np.array([0.0, 0.0]),
                np.array([0.0, 1.0]), np.array([0.0, 0.0])]
    directions = [np.array([1.0, 0.0]), np.array([-1.0, 0.0]),
                  np.array([0.0, 1.0]), np.array([0.0, -1.0])]
    return boundary, directions


def test_feasible_point_is_inside():
    boundary, directions = unit_box()
    point = find_non_exterior_point(boundary, directions)
    assert point.shape == (2,)
    assert verify_point_in_halfspaces(point, boundary, directions)


def test_infeasible_returns_none():
    boundary = [np.array([0.0]), np.array([1.0])]
    directions = [np.array([1.0]), np.array([-1.0])]
    assert find_non_exterior_point(boundary, directions) is None


def test_find_requires_halfspaces():
    with pytest.raises(ValueError):
        find_non_exterior_point([], [])


def test_verify_detects_violation(capsys):
    boundary, directions = unit_box()
    assert verify_point_in_halfspaces(np.array([2.0, 0.5]), boundary, directions) is False
    assert "half-space 0" in capsys.readouterr().err


def test_verify_size_mismatch_raises():
    boundary, directions = unit_box()
    with pytest.raises(ValueError):
        verify_point_in_halfspaces(np.zeros(2), boundary, directions[:2])


def test_verify_without_halfspaces_is_true():
    assert verify_point_in_halfspaces(np.zeros(2), [], []) is True


def test_verify_epsilon_allows_small_excess():
    boundary, directions = unit_box()
    point = np.array([1.0 + 1e-10, 0.5])
    assert verify_point_in_halfspaces(point, boundary, directions, 1e-8) is True
    assert verify_point_in_halfspaces(point, boundary, directions, 1e-12) is False


def test_check_non_exterior_on_boundary():
    boundary, directions = unit_box()
    assert check_non_exterior_point(np.array([1.0, 1.0]), boundary, directions) is True


def test_check_non_exterior_outside():
    boundary, directions = unit_box()
    assert check_non_exterior_point(np.array([0.5, -0.1]), boundary, directions) is False