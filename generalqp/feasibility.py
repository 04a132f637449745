"""
Phase-I helper: a feasible starting point for ``A x <= b`` via SciPy's HiGHS.

The active-set solver needs a feasible initial iterate; any LP solver can
provide one. This wrapper solves

```
    minimize    c^T x
    subject to  A x <= b - margin
```

with the dual simplex so that the returned point is a vertex (when ``c`` is
given) and satisfies the constraints despite the LP feasibility tolerance.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.optimize import linprog

from .logging import get_logger

logger = get_logger(__name__)


def find_feasible_point(
    A: np.ndarray,
    b: np.ndarray,
    c: Optional[np.ndarray] = None,
    margin: float = 1e-7,
    maxiter: int = 10000,
) -> np.ndarray:
    """
    Return a point with ``A x <= b``.

    Args:
        A: ``(m, n)`` constraint matrix.
        b: ``(m,)`` right-hand side.
        c: Optional LP objective selecting which vertex is returned. With
            ``None`` any feasible point is accepted.
        margin: Amount by which ``b`` is tightened before solving; it should
            not be smaller than the LP primal feasibility tolerance.
        maxiter: Simplex iteration limit.

    Raises:
        ValueError: If the shapes do not match or the LP solver does not
            return a point (infeasible or unbounded ``c``).
    """

    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float).reshape(-1)
    if A.ndim != 2 or A.shape[0] != b.shape[0]:
        raise ValueError("A and b dimension mismatch")
    n = A.shape[1]
    c_arr = np.zeros(n) if c is None else np.asarray(c, dtype=float).reshape(-1)
    if c_arr.shape[0] != n:
        raise ValueError("c must match the number of columns of A")

    res = linprog(
        c=c_arr,
        A_ub=A,
        b_ub=b - margin,
        bounds=[(None, None)] * n,
        method="highs-ds",
        options={"maxiter": maxiter},
    )
    if not res.success:
        raise ValueError(f"No feasible point found: {res.message}")
    logger.debug("phase-I LP finished after %d iterations", res.nit)
    return np.asarray(res.x, dtype=float)


__all__ = ["find_feasible_point"]
