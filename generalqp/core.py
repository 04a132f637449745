"""
Core enums, configuration and result containers for the active-set solver.

Problems are always stated as

```
    minimize    1/2 x^T P x + q^T x
    subject to  A x <= b
                r_min <= ||x|| <= r_max   (optional)
```

with a dense symmetric ``P`` that may be indefinite. All numerical
thresholds used by the factorizations and the outer loop are collected in
:class:`Tolerances` so that a single object controls the behaviour of a
solve.

References:
    - Gill & Murray, *Numerically stable methods for quadratic programming*,
      Mathematical Programming 14 (1978).
    - Nocedal & Wright, *Numerical Optimization*, 2nd edition, 2006.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

import numpy as np

if TYPE_CHECKING:
    from .trace import IterationInfo


class Status(Enum):
    """Exit status of :func:`generalqp.qp.active_set_qp`."""

    OPTIMAL = "optimal"
    UNBOUNDED = "unbounded"
    MAX_ITER = "max_iter"
    RADIUS_BOUND = "radius_bound"
    NUMERICAL_ERROR = "numerical_error"


class PreconditionViolation(ValueError):
    """Raised when the problem data or the initial point are unusable."""


class InvalidRemoval(RuntimeError):
    """Raised when a constraint is released while the reduced Hessian is not PSD."""


@dataclass(frozen=True)
class Tolerances:
    """
    Numerical thresholds shared by every component of a solve.

    Attributes:
        feasibility: Slack allowed on the initial point, both for ``A x <= b``
            and for the radius bounds. ``r_min`` below this value is ignored.
        radius_margin: The outer loop stops once ``||x||`` is this close to
            ``r_max`` or ``r_min``.
        projected_gradient: Norm of ``Z^T g`` under which the current
            subproblem is considered solved.
        blocking: Minimum ``a^T d`` for an inactive row to block a step.
        indefinite: Pivot floor of the projected Hessian factorization; also
            the positive-definiteness threshold.
        multiplier: Multipliers above ``-multiplier`` count as nonnegative.
        curvature_recompute: When a constraint is added while the dropped
            curvature is at or below this value, the last column of ``U`` is
            rebuilt directly from ``P``.
        relative_curvature: Curvatures of the projected Hessian at or below
            ``relative_curvature * max|P|`` are treated as zero.
    """

    feasibility: float = 1e-9
    radius_margin: float = 1e-10
    projected_gradient: float = 1e-10
    blocking: float = 1e-11
    indefinite: float = 1e-12
    multiplier: float = 1e-8
    curvature_recompute: float = -10.0
    relative_curvature: float = 1e-12

    def validate(self) -> None:
        for name in (
            "feasibility",
            "radius_margin",
            "projected_gradient",
            "blocking",
            "indefinite",
            "multiplier",
            "relative_curvature",
        ):
            value = getattr(self, name)
            if not (np.isfinite(value) and value >= 0.0):
                raise ValueError(f"{name} must be a finite nonnegative number.")
        if not self.curvature_recompute < 0.0:
            raise ValueError("curvature_recompute must be negative.")


DEFAULT_TOLERANCES = Tolerances()


@dataclass
class OptimizeResult:
    """
    Outcome of an active-set solve.

    Attributes:
        x: Final iterate (always feasible).
        fun: Objective value at ``x``.
        status: Reason the outer loop stopped.
        message: Human-readable description of ``status``.
        nit: Number of outer iterations performed.
        multipliers: Lagrange multipliers from the last KKT check, one per
            constraint row, zero for rows outside the working set.
        working_set: Row indices of ``A`` that are active at ``x``, in the
            order they entered the working set.
        primal_residual: ``max(A x - b, 0)``.
        dual_residual: Norm of the projected gradient at the last KKT check.
        history: Snapshots taken every ``printing_interval`` iterations.
    """

    x: np.ndarray
    fun: float
    status: Status
    message: str
    nit: int
    multipliers: np.ndarray
    working_set: List[int]
    primal_residual: Optional[float] = None
    dual_residual: Optional[float] = None
    history: List["IterationInfo"] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is Status.OPTIMAL


__all__ = [
    "Status",
    "PreconditionViolation",
    "InvalidRemoval",
    "Tolerances",
    "DEFAULT_TOLERANCES",
    "OptimizeResult",
]
