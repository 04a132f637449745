import numpy as np
import pytest

from generalqp.feasibility import find_feasible_point


def test_feasible_point_satisfies_constraints(rng):
    n, m = 6, 20
    A = rng.standard_normal((m, n))
    b = A @ rng.standard_normal(n) + rng.random(m)
    x = find_feasible_point(A, b)
    assert x.shape == (n,)
    assert np.max(A @ x - b) <= 1e-9


def test_objective_selects_vertex(rng):
    n = 3
    A = np.vstack([rng.standard_normal((5, n)), np.eye(n), -np.eye(n)])
    b = np.concatenate([rng.random(5) + 0.5, np.ones(n), np.ones(n)])
    c = rng.standard_normal(n)
    x = find_feasible_point(A, b, c=c, margin=0.0)
    assert np.max(A @ x - b) <= 1e-9
    active = np.abs(A @ x - b) <= 1e-7
    assert np.count_nonzero(active) >= n


def test_infeasible_system_raises():
    A = np.array([[1.0], [-1.0]])
    b = np.array([-1.0, -1.0])
    with pytest.raises(ValueError):
        find_feasible_point(A, b)


def test_shape_mismatch_raises():
    with pytest.raises(ValueError):
        find_feasible_point(np.eye(2), np.ones(3))
    with pytest.raises(ValueError):
        find_feasible_point(np.eye(2), np.ones(2), c=np.ones(3))
