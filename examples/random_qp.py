"""
Example: convex and indefinite quadratic programs with generalqp

Builds random problems ``min 1/2 x'Px + q'x  s.t.  A x <= b``, finds a
starting point with the phase-I LP helper and solves them with the
active-set method, printing the progress table and a KKT check.
"""

import logging

import numpy as np

from generalqp import (
    Status,
    active_set_qp,
    configure_logging,
    find_feasible_point,
    kkt_residuals,
)


def random_problem(rng, n, m, convex):
    M = rng.standard_normal((n, n))
    P = M @ M.T + np.eye(n) if convex else 0.5 * (M + M.T)
    q = rng.standard_normal(n)
    A = rng.standard_normal((m, n))
    b = A @ rng.standard_normal(n) + rng.random(m) + 0.1
    return P, q, A, b


def example_textbook():
    """Example: the two-variable problem from Nocedal & Wright (16.49)."""
    print("=" * 60)
    print("Example 1: Textbook convex QP")
    print("=" * 60)

    P = 2.0 * np.eye(2)
    q = np.array([-2.0, -5.0])
    A = np.array([[-1.0, 2.0], [1.0, 2.0], [1.0, -2.0], [-1.0, 0.0], [0.0, -1.0]])
    b = np.array([2.0, 6.0, 2.0, 0.0, 0.0])

    result = active_set_qp(P, q, A, b, np.array([2.0, 0.0]))
    print(f"Status: {result.status}")
    print(f"Solution: x = {result.x}")
    print(f"Objective: {result.fun:.6f}")
    print(f"Active constraints: {result.working_set}")
    print()


def example_random(convex):
    """Example: random problem, convex or indefinite."""
    kind = "convex" if convex else "indefinite"
    print("=" * 60)
    print(f"Example: random {kind} QP (n=30, m=120)")
    print("=" * 60)

    rng = np.random.default_rng(1)
    P, q, A, b = random_problem(rng, 30, 120, convex)
    x0 = find_feasible_point(A, b)

    result = active_set_qp(P, q, A, b, x0, r_max=1e3, verbosity=1, printing_interval=10)
    print(f"Status: {result.status} after {result.nit} iterations")
    if result.status is Status.OPTIMAL:
        residuals = kkt_residuals(P, q, A, b, result.x, result.multipliers)
        for name, value in residuals.items():
            print(f"  {name:>14}: {value:.2e}")
    print()


if __name__ == "__main__":
    configure_logging(level=logging.INFO)
    example_textbook()
    example_random(convex=True)
    example_random(convex=False)
    print("Examples finished")
