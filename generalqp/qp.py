"""
Active-set solver for (possibly indefinite) quadratic programs.

Solves

```
    minimize    1/2 x^T P x + q^T x
    subject to  A x <= b
                r_min <= ||x|| <= r_max
```

from a feasible starting point with the nullspace active-set method of
Gill & Murray (1978). The projected Hessian is kept as an updatable LDL
factorization, so for convex problems the result is a global minimizer and
for indefinite ones a local minimizer (or an unbounded ray when no radius
bound is given).

Example:
    >>> import numpy as np
    >>> from generalqp import solve
    >>> P = 2.0 * np.eye(2)
    >>> q = np.array([-2.0, -5.0])
    >>> A = np.array([[-1.0, 2.0], [1.0, 2.0], [1.0, -2.0], [-1.0, 0.0], [0.0, -1.0]])
    >>> b = np.array([2.0, 6.0, 2.0, 0.0, 0.0])
    >>> solve(P, q, A, b, np.array([2.0, 0.0])).round(6)
    array([1.4, 1.7])
"""

from __future__ import annotations

from typing import Callable, List, Optional

import numpy as np

from .active_set import ActiveSetData
from .core import OptimizeResult, Status, Tolerances
from .logging import get_logger
from .trace import IterationInfo, format_header, format_row, snapshot

logger = get_logger(__name__)

Callback = Callable[[IterationInfo], None]

_MESSAGES = {
    Status.OPTIMAL: "KKT conditions satisfied",
    Status.UNBOUNDED: "Unbounded ray found; set r_max to a finite value to get bounded solutions",
    Status.MAX_ITER: "Maximum iterations reached",
    Status.RADIUS_BOUND: "Iterate reached the radius bound",
    Status.NUMERICAL_ERROR: "Triangular solve failed",
}


def _report(
    data: ActiveSetData,
    history: List[IterationInfo],
    verbosity: int,
    callback: Optional[Callback],
    header: bool = False,
) -> None:
    info = snapshot(data, diagnostics=verbosity >= 2)
    history.append(info)
    if callback is not None:
        callback(info)
    if verbosity > 0:
        if header:
            logger.info(format_header(diagnostics=verbosity >= 2))
        logger.info(format_row(info))


def active_set_qp(
    P: np.ndarray,
    q: np.ndarray,
    A: np.ndarray,
    b: np.ndarray,
    x_init: np.ndarray,
    r_min: float = 0.0,
    r_max: float = np.inf,
    max_iter: int = 5000,
    verbosity: int = 0,
    printing_interval: int = 50,
    tolerances: Optional[Tolerances] = None,
    callback: Optional[Callback] = None,
) -> OptimizeResult:
    """
    Solve a quadratic program with the nullspace active-set method.

    Args:
        P: ``(n, n)`` symmetric Hessian, possibly indefinite.
        q: ``(n,)`` linear term.
        A: ``(m, n)`` inequality matrix.
        b: ``(m,)`` inequality right-hand side.
        x_init: Feasible starting point, e.g. from a phase-I LP
            (:func:`generalqp.feasibility.find_feasible_point`).
        r_min: Lower bound on ``||x||`` (``0`` disables it).
        r_max: Upper bound on ``||x||``.
        max_iter: Iteration cap; hitting it is not an error.
        verbosity: ``0`` silent, ``1`` progress table at INFO level, ``2``
            adds factorization residuals to every row.
        printing_interval: Iterations between two progress snapshots.
        tolerances: Numerical thresholds; defaults to :class:`Tolerances`.
        callback: Called with every :class:`IterationInfo` snapshot.

    Returns:
        :class:`OptimizeResult` with the final iterate.

    Raises:
        PreconditionViolation: If the data are malformed or ``x_init`` is
            infeasible.
    """

    if max_iter < 0:
        raise ValueError("max_iter must be nonnegative")
    if printing_interval <= 0:
        raise ValueError("printing_interval must be positive")

    data = ActiveSetData(P, q, A, b, x_init, r_min=r_min, r_max=r_max, tolerances=tolerances)
    history: List[IterationInfo] = []
    _report(data, history, verbosity, callback, header=True)

    status = None
    try:
        while not data.done and not data.unbounded and data.iteration <= max_iter and data.within_radius():
            data.iterate()
            if data.iteration % printing_interval == 0:
                header = data.iteration % (10 * printing_interval) == 0
                _report(data, history, verbosity, callback, header=header)
    except np.linalg.LinAlgError as exc:
        logger.warning("iteration %d: %s", data.iteration, exc)
        status = Status.NUMERICAL_ERROR

    if status is None:
        if data.unbounded:
            status = Status.UNBOUNDED
        elif not data.within_radius():
            status = Status.RADIUS_BOUND
        elif data.done:
            status = Status.OPTIMAL
        else:
            status = Status.MAX_ITER
    _report(data, history, verbosity, callback)

    return OptimizeResult(
        x=data.x,
        fun=data.objective(),
        status=status,
        message=_MESSAGES[status],
        nit=data.iteration,
        multipliers=data.lam.copy(),
        working_set=list(data.working.working),
        primal_residual=data.infeasibility(),
        dual_residual=data.residual,
        history=history,
    )


def solve(
    P: np.ndarray,
    q: np.ndarray,
    A: np.ndarray,
    b: np.ndarray,
    x_init: np.ndarray,
    r_min: float = 0.0,
    r_max: float = np.inf,
    max_iter: int = 5000,
    verbosity: int = 0,
    printing_interval: int = 50,
    tolerances: Optional[Tolerances] = None,
    callback: Optional[Callback] = None,
) -> np.ndarray:
    """
    Return the final iterate of :func:`active_set_qp`.

    Unbounded problems and exhausted iteration budgets are not errors: the
    last feasible iterate is returned and the outcome is logged.
    """

    result = active_set_qp(
        P,
        q,
        A,
        b,
        x_init,
        r_min=r_min,
        r_max=r_max,
        max_iter=max_iter,
        verbosity=verbosity,
        printing_interval=printing_interval,
        tolerances=tolerances,
        callback=callback,
    )
    if result.status is Status.MAX_ITER:
        logger.warning("Maximum iterations (%d) reached", max_iter)
    elif result.status is Status.UNBOUNDED:
        logger.warning("Problem is unbounded; returning the last feasible iterate")
    return result.x


__all__ = ["active_set_qp", "solve"]
