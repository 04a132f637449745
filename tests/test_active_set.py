import numpy as np
import pytest

from generalqp.active_set import ActiveSetData, radius_step_roots
from generalqp.core import PreconditionViolation, Tolerances

P_TEXTBOOK = 2.0 * np.eye(2)
Q_TEXTBOOK = np.array([-2.0, -5.0])
A_TEXTBOOK = np.array([[-1.0, 2.0], [1.0, 2.0], [1.0, -2.0], [-1.0, 0.0], [0.0, -1.0]])
B_TEXTBOOK = np.array([2.0, 6.0, 2.0, 0.0, 0.0])


def _textbook(x0=(2.0, 0.0)) -> ActiveSetData:
    return ActiveSetData(P_TEXTBOOK, Q_TEXTBOOK, A_TEXTBOOK, B_TEXTBOOK, np.array(x0))


def test_radius_step_roots():
    roots = np.sort(radius_step_roots(np.array([1.0, 0.0]), np.array([1.0, 0.0]), 3.0))
    assert np.allclose(roots, [-4.0, 2.0])
    assert radius_step_roots(np.array([0.0, 0.0]), np.array([1.0, 1.0]), 0.0).size >= 1


def test_radius_step_roots_without_real_solution():
    roots = radius_step_roots(np.array([5.0, 0.0]), np.array([0.0, 1.0]), 1.0)
    assert roots.size == 0


def test_initial_state():
    data = _textbook()
    assert data.F.m == 2
    assert data.F.artificial_constraints == 0
    assert data.working.working == []
    assert data.iteration == 0
    assert not data.done
    assert np.isnan(data.residual)
    assert data.r_min == -1.0


def test_initial_point_is_copied():
    x0 = np.array([2.0, 0.0])
    data = ActiveSetData(P_TEXTBOOK, Q_TEXTBOOK, A_TEXTBOOK, B_TEXTBOOK, x0)
    data.x += 1.0
    assert np.array_equal(x0, [2.0, 0.0])


def test_first_step_hits_first_constraint():
    data = _textbook()
    direction, stepsize, blocking = data.calculate_step()
    assert np.allclose(direction, [-1.0, 2.5])
    assert stepsize == pytest.approx(2.0 / 3.0)
    assert data.working.ignored[blocking] == 0


def test_iterations_reach_textbook_optimum():
    data = _textbook()
    data.iterate()
    assert data.working.working == [0]
    assert np.allclose(data.x, [4.0 / 3.0, 5.0 / 3.0])
    data.iterate()
    assert data.done
    assert np.allclose(data.x, [1.4, 1.7])
    assert data.lam == pytest.approx([0.8, 0.0, 0.0, 0.0, 0.0])
    assert data.residual < 1e-10


def test_ties_go_to_the_last_candidate():
    # Rows 0 and 2 describe the same halfspace x1 <= 1.
    P = np.eye(2)
    q = np.array([-3.0, 0.0])
    A = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]])
    b = np.array([1.0, 1.0, 1.0])
    data = ActiveSetData(P, q, A, b, np.zeros(2))
    _, stepsize, blocking = data.calculate_step()
    assert stepsize == pytest.approx(1.0 / 3.0)
    assert data.working.ignored[blocking] == 2


def test_zero_step_releases_then_checks_kkt():
    # x0 already minimizes over the whole space.
    data = ActiveSetData(np.eye(2), np.zeros(2), np.array([[1.0, 1.0]]), np.array([1.0]), np.zeros(2))
    direction, stepsize, blocking = data.calculate_step()
    assert np.array_equal(direction, np.zeros(2))
    assert blocking is None
    data.iterate()
    assert data.done


def test_negative_curvature_direction_points_downhill():
    P = np.diag([-1.0, 1.0])
    q = np.array([-0.1, 0.0])
    A = np.array([[1.0, 0.0]])
    b = np.array([0.5])
    data = ActiveSetData(P, q, A, b, np.zeros(2), r_max=2.0)
    assert data.F.artificial_constraints == 1
    data.iterate()
    assert data.F.artificial_constraints == 0
    assert data.F.D[-1] < 0
    direction, stepsize, blocking = data.calculate_step()
    assert direction @ data.gradient() < 0
    assert stepsize == pytest.approx(0.5)
    assert data.working.ignored[blocking] == 0


def test_unbounded_ray_is_recorded():
    data = ActiveSetData(
        np.diag([1.0, 0.0]), np.array([0.0, -1.0]), np.array([[-1.0, 0.0]]), np.array([1.0]), np.zeros(2)
    )
    while not data.unbounded and data.iteration < 10:
        data.iterate()
    assert data.unbounded
    assert np.allclose(np.abs(data.ray), [0.0, 1.0])
    assert data.ray @ data.gradient() < 0


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(P=np.eye(3)),
        dict(P=np.array([[1.0, 2.0], [0.0, 1.0]])),
        dict(q=np.zeros(3)),
        dict(A=np.ones((2, 3))),
        dict(b=np.zeros(3)),
        dict(x=np.array([5.0, 5.0])),
        dict(r_max=1.0),
        dict(r_min=3.0, r_max=4.0),
        dict(r_min=2.0, r_max=1.0),
    ],
)
def test_preconditions(kwargs):
    args = dict(P=P_TEXTBOOK, q=Q_TEXTBOOK, A=A_TEXTBOOK, b=B_TEXTBOOK, x=np.array([2.0, 0.0]))
    args.update(kwargs)
    with pytest.raises(PreconditionViolation):
        ActiveSetData(**args)


def test_invalid_tolerances_rejected():
    with pytest.raises(ValueError):
        ActiveSetData(
            P_TEXTBOOK, Q_TEXTBOOK, A_TEXTBOOK, B_TEXTBOOK, np.array([2.0, 0.0]), tolerances=Tolerances(blocking=-1.0)
        )
