"""Benchmark factorization updates and full active-set solves."""

import time
from typing import Dict

import numpy as np

from generalqp import NullspaceHessianLDL, active_set_qp, find_feasible_point


def benchmark_ldl_updates(n: int, n_updates: int = 50, seed: int = 0) -> Dict[str, float]:
    """Benchmark add/remove pairs on a positive definite projected Hessian.

    Args:
        n: Problem dimension.
        n_updates: Number of add/remove pairs.
        seed: RNG seed.

    Returns:
        Dictionary with timing results.
    """
    rng = np.random.default_rng(seed)
    M = rng.standard_normal((n, n))
    P = M @ M.T + np.eye(n)
    F = NullspaceHessianLDL(P, rng.standard_normal((n, n // 2)))
    normals = rng.standard_normal((n_updates, n))

    start = time.perf_counter()
    for a in normals:
        F.add_constraint(a)
        F.remove_constraint(F.QR.m - 1)
    end = time.perf_counter()

    total_time = end - start
    return {
        "n": n,
        "total_time_sec": total_time,
        "time_per_update_sec": total_time / (2 * n_updates),
    }


def benchmark_solve(n: int, m: int, convex: bool = True, seed: int = 0) -> Dict[str, float]:
    """Benchmark a full solve from a phase-I starting point.

    Args:
        n: Number of variables.
        m: Number of inequality constraints.
        convex: Use a positive definite instead of an indefinite Hessian.
        seed: RNG seed.

    Returns:
        Dictionary with timing results.
    """
    rng = np.random.default_rng(seed)
    M = rng.standard_normal((n, n))
    P = M @ M.T + np.eye(n) if convex else 0.5 * (M + M.T)
    q = rng.standard_normal(n)
    A = rng.standard_normal((m, n))
    b = A @ rng.standard_normal(n) + rng.random(m) + 0.1
    x0 = find_feasible_point(A, b)

    start = time.perf_counter()
    result = active_set_qp(P, q, A, b, x0, r_max=1e3)
    end = time.perf_counter()

    total_time = end - start
    return {
        "n": n,
        "m": m,
        "status": result.status.value,
        "iterations": result.nit,
        "total_time_sec": total_time,
        "time_per_iteration_sec": total_time / max(result.nit, 1),
    }


if __name__ == "__main__":
    print("Benchmarking factorization updates...")
    for n in (50, 200):
        results = benchmark_ldl_updates(n)
        print(f"LDL updates (n={n}): {results['time_per_update_sec']*1e3:.3f} ms per update")

    print("Benchmarking solves...")
    for convex in (True, False):
        results = benchmark_solve(100, 400, convex=convex)
        kind = "convex" if convex else "indefinite"
        print(
            f"{kind} (n=100, m=400): {results['status']} in {results['iterations']} iterations, "
            f"{results['time_per_iteration_sec']*1e3:.2f} ms per iteration"
        )
