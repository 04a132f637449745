"""
State and single-iteration logic of the active-set method.

:class:`ActiveSetData` owns everything a solve mutates: the iterate, the
multipliers, the working/ignored partition and the
:class:`~generalqp.ldl.NullspaceHessianLDL` factorization (which in turn owns
the :class:`~generalqp.qr.UpdatableQR` of the working constraints). Each call
to :meth:`ActiveSetData.iterate` computes a direction in the current
nullspace, takes the longest feasible step along it and then either adds the
blocking constraint, releases an artificial constraint, or runs the KKT test
and drops the constraint with the most negative multiplier.

The solve always starts from an empty working set; constraints that are
active at the initial point enter through zero-length steps of the ratio
test.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
from scipy.linalg import solve_triangular

from .core import DEFAULT_TOLERANCES, PreconditionViolation, Tolerances
from .ldl import NullspaceHessianLDL
from .logging import get_logger
from .working_set import WorkingSet

logger = get_logger(__name__)


def _as_matrix(value: np.ndarray, name: str) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.ndim != 2:
        raise PreconditionViolation(f"{name} must be a 2D array, got shape {arr.shape}")
    return arr


def _as_vector(value: np.ndarray, name: str, size: int) -> np.ndarray:
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.shape[0] != size:
        raise PreconditionViolation(f"{name} must have length {size}, got {arr.shape[0]}")
    return arr


def radius_step_roots(x: np.ndarray, direction: np.ndarray, radius: float) -> np.ndarray:
    """Real roots ``alpha`` of ``||x + alpha * direction||^2 = radius^2``."""

    coeffs = [direction @ direction, 2.0 * (direction @ x), x @ x - radius**2]
    roots = np.roots(coeffs)
    return roots[np.isreal(roots)].real


class ActiveSetData:
    """
    Iterate and factorizations of an active-set solve of

    ```
        minimize    1/2 x^T P x + q^T x
        subject to  A x <= b,   r_min <= ||x|| <= r_max
    ```

    Args:
        P: ``(n, n)`` symmetric Hessian.
        q: ``(n,)`` linear term.
        A: ``(m, n)`` constraint matrix.
        b: ``(m,)`` right-hand side.
        x: Feasible initial point; copied.
        r_min: Lower bound on ``||x||``; values below ``tolerances.feasibility``
            disable the bound.
        r_max: Upper bound on ``||x||``.
        tolerances: Numerical thresholds.

    Raises:
        PreconditionViolation: On shape mismatches, a non-symmetric ``P`` or
            an infeasible initial point.
    """

    def __init__(
        self,
        P: np.ndarray,
        q: np.ndarray,
        A: np.ndarray,
        b: np.ndarray,
        x: np.ndarray,
        r_min: float = 0.0,
        r_max: float = np.inf,
        tolerances: Optional[Tolerances] = None,
    ) -> None:
        self.tolerances = tolerances or DEFAULT_TOLERANCES
        self.tolerances.validate()
        tol = self.tolerances

        P = _as_matrix(P, "P")
        n = P.shape[0]
        if P.shape != (n, n):
            raise PreconditionViolation("P must be square")
        if not np.allclose(P, P.T, rtol=1e-10, atol=1e-12):
            raise PreconditionViolation("P must be symmetric")
        A = _as_matrix(A, "A")
        if A.shape[1] != n:
            raise PreconditionViolation(f"A must have {n} columns, got {A.shape[1]}")
        m = A.shape[0]
        self.q = _as_vector(q, "q", n)
        self.b = _as_vector(b, "b", m)
        self.x = _as_vector(x, "x_init", n).copy()
        self.A = A

        r_min = float(r_min)
        r_max = float(r_max)
        if r_min > r_max:
            raise PreconditionViolation("r_min must not exceed r_max")
        if r_min < tol.feasibility:
            r_min = -1.0
        self.r_min = r_min
        self.r_max = r_max

        if m and np.max(A @ self.x - self.b) >= tol.feasibility:
            raise PreconditionViolation("The initial point is infeasible!")
        radius = np.linalg.norm(self.x)
        if radius - r_min <= -tol.feasibility or radius - r_max >= tol.feasibility:
            raise PreconditionViolation("The initial point is infeasible!")

        self.n = n
        self.m = m
        self.working = WorkingSet(A, self.b)
        self.F = NullspaceHessianLDL(P, np.zeros((n, 0)), tolerances=tol)
        if self.F.m == 0 and self.F.artificial_constraints > 0:
            self.F.remove_constraint()

        self.lam = np.zeros(m)
        self.residual = np.nan
        self.iteration = 0
        self.done = False
        self.unbounded = False
        self.ray: Optional[np.ndarray] = None

    @property
    def P(self) -> np.ndarray:
        return self.F.P

    def gradient(self) -> np.ndarray:
        return self.P @ self.x + self.q

    def objective(self) -> float:
        return float(0.5 * self.x @ (self.P @ self.x) + self.q @ self.x)

    def infeasibility(self) -> float:
        if self.m == 0:
            return 0.0
        return float(max(np.max(self.A @ self.x - self.b), 0.0))

    def within_radius(self) -> bool:
        radius = np.linalg.norm(self.x)
        margin = self.tolerances.radius_margin
        return self.r_min + margin <= radius <= self.r_max - margin

    def calculate_step(self) -> Tuple[np.ndarray, float, Optional[int]]:
        """
        Compute the next direction, its step length and the blocking constraint.

        Returns:
            ``(direction, stepsize, blocking)`` where ``blocking`` is the
            position in the ignored set of the constraint that limits the
            step, or ``None`` if the step was limited by the subproblem or by
            the radius bounds. An infinite ``stepsize`` means ``direction`` is
            an unbounded ray.
        """

        F = self.F
        tol = self.tolerances
        gradient = self.gradient()

        if F.m == 0 or F.D[-1] >= F.indefinite_tolerance:
            qw = F.Z.T @ gradient
            if np.linalg.norm(qw) <= tol.projected_gradient:
                return np.zeros(self.n), 0.0, None
            # Newton step on the nullspace: Zr (U^T D U)^-1 Zr^T g with Zr = Z[:, ::-1].
            w = solve_triangular(F.U, qw[::-1], trans="T")
            w = solve_triangular(F.U, w / F.D)
            direction = -F.Z @ w[::-1]
            alpha_min = 1.0
        else:
            e = np.zeros(F.m)
            e[-1] = 1.0
            direction = F.Z @ solve_triangular(F.U, e)[::-1]
            if direction @ gradient >= 0:
                direction = -direction
            alpha_min = np.inf

        alpha_constraint = np.inf
        blocking = None
        A_ignored = self.working.A_ignored
        if A_ignored.shape[0]:
            Ad = A_ignored @ direction
            slack = np.abs(self.working.b_ignored - A_ignored @ self.x)
            ratios = np.full(Ad.shape[0], np.inf)
            mask = Ad > tol.blocking
            ratios[mask] = slack[mask] / Ad[mask]
            alpha_constraint = float(ratios.min())
            if np.isfinite(alpha_constraint):
                # Ties go to the last candidate.
                blocking = int(np.flatnonzero(ratios == alpha_constraint)[-1])

        alpha = min(alpha_min, alpha_constraint)

        alpha_max = np.inf
        roots = []
        if np.isfinite(self.r_max):
            roots.append(radius_step_roots(self.x, direction, self.r_max))
        if self.r_min > 0:
            roots.append(radius_step_roots(self.x, direction, self.r_min))
        if roots:
            candidates = np.concatenate(roots)
            candidates = candidates[candidates >= 0]
            if candidates.size:
                alpha_max = float(candidates.min())

        stepsize = min(alpha, alpha_max)
        if not np.isfinite(stepsize):
            return direction, stepsize, None
        if alpha_constraint == stepsize:
            return direction, stepsize, blocking
        return direction, stepsize, None

    def iterate(self) -> None:
        direction, stepsize, blocking = self.calculate_step()
        if not np.isfinite(stepsize):
            self.unbounded = True
            self.ray = direction
            logger.info("The problem is unbounded (unbounded ray found).")
            return

        self.x += stepsize * direction
        if blocking is not None:
            self.add_constraint(blocking)

        if (blocking is None or self.F.m == 0) and self.within_radius():
            if self.F.artificial_constraints > 0:
                self.F.remove_constraint()
            else:
                idx = self.check_kkt()
                if idx is not None:
                    self.remove_constraint(idx)
        self.iteration += 1

    def check_kkt(self) -> Optional[int]:
        """
        Compute the multipliers of the working constraints.

        Returns:
            ``None`` (and sets ``done``) when the projected gradient is within
            ``tolerances.projected_gradient`` and every multiplier is at least
            ``-tolerances.multiplier``. ``None`` with ``done`` unset when the
            projected gradient is still too large. Otherwise the working-set
            position of the most negative multiplier.
        """

        grad = self.gradient()
        QR = self.F.QR
        if QR.m:
            lam = -solve_triangular(QR.R1, QR.Q1.T @ grad)
        else:
            lam = np.zeros(0)
        self.lam[:] = 0.0
        self.lam[self.working.working] = lam
        self.residual = float(np.linalg.norm(self.F.Z.T @ grad))

        if self.residual > self.tolerances.projected_gradient:
            self.done = False
            logger.debug(
                "iteration %d: projected gradient %.3e, refining the step", self.iteration, self.residual
            )
            return None
        if np.all(lam >= -self.tolerances.multiplier):
            self.done = True
            return None
        self.done = False
        return int(np.argmin(lam))

    def add_constraint(self, idx: int) -> None:
        """Activate entry ``idx`` of the ignored set."""

        row = self.working.ignored[idx]
        self.F.add_constraint(self.A[row])
        self.working.activate(idx)
        logger.debug("iteration %d: added constraint %d", self.iteration, row)

    def remove_constraint(self, idx: int) -> None:
        """Release entry ``idx`` of the working set."""

        row = self.working.release(idx)
        self.F.remove_constraint(idx)
        logger.debug("iteration %d: removed constraint %d", self.iteration, row)


__all__ = ["ActiveSetData", "radius_step_roots"]
