import numpy as np

from generalqp.kkt import is_kkt_optimal, kkt_residuals


def test_kkt_residuals_at_optimum():
    P = np.eye(2)
    q = np.array([-1.0, -1.0])
    A = np.array([[1.0, 1.0]])
    b = np.array([1.0])
    x = np.array([0.5, 0.5])
    lam = np.array([0.5])
    residuals = kkt_residuals(P, q, A, b, x, lam=lam)
    assert residuals["stationarity"] <= 1e-12
    assert residuals["primal"] == 0.0
    assert residuals["dual"] == 0.0
    assert residuals["complementary"] <= 1e-12
    assert is_kkt_optimal(P, q, A, b, x, lam=lam)


def test_kkt_detects_infeasibility():
    P = np.eye(1)
    q = np.array([0.0])
    A = np.array([[1.0]])
    b = np.array([0.0])
    x = np.array([1.0])
    residuals = kkt_residuals(P, q, A, b, x)
    assert residuals["primal"] > 0.5
    assert not is_kkt_optimal(P, q, A, b, x)


def test_kkt_detects_negative_multiplier_and_slack():
    P = np.eye(1)
    q = np.array([1.0])
    A = np.array([[-1.0]])
    b = np.array([1.0])
    residuals = kkt_residuals(P, q, A, b, np.array([0.0]), lam=np.array([-1.0]))
    assert residuals["dual"] == 1.0
    assert residuals["complementary"] == 1.0
    assert residuals["stationarity"] == 2.0


def test_kkt_without_constraints():
    P = np.diag([2.0, 4.0])
    q = np.array([-2.0, -4.0])
    residuals = kkt_residuals(P, q, np.zeros((0, 2)), np.zeros(0), np.ones(2))
    assert residuals == {"stationarity": 0.0, "primal": 0.0, "dual": 0.0, "complementary": 0.0}
