"""Iteration snapshots and the progress table printed by the solver."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from .active_set import ActiveSetData

_HEADER = "Iter \t  Objective  \t Inf Linear \t Radius \t Gradient res \t D[end, end] \t AC"
_HEADER_FACTORIZATION = "\t\t ||LDL'-Z'PZ||   ||Q*Q'-I|| \t ||Q1*R1-A1||"


@dataclass(frozen=True)
class IterationInfo:
    """
    State of a solve at one iteration.

    ``ldl_residual``, ``orthogonality_residual`` and ``qr_residual`` are only
    filled in when factorization diagnostics were requested (verbosity 2).
    """

    iteration: int
    objective: float
    infeasibility: float
    radius: float
    residual: float
    curvature: float
    working_set_size: int
    artificial_constraints: int
    ldl_residual: Optional[float] = None
    orthogonality_residual: Optional[float] = None
    qr_residual: Optional[float] = None


def snapshot(data: "ActiveSetData", diagnostics: bool = False) -> IterationInfo:
    F = data.F
    info = dict(
        iteration=data.iteration,
        objective=data.objective(),
        infeasibility=data.infeasibility(),
        radius=float(np.linalg.norm(data.x)),
        residual=float(data.residual),
        curvature=float(F.D[-1]) if F.m > 0 else math.nan,
        working_set_size=len(data.working.working),
        artificial_constraints=F.artificial_constraints,
    )
    if diagnostics:
        Zr = F.Z[:, ::-1]
        QR = F.QR
        info.update(
            ldl_residual=float(np.linalg.norm(F.U.T @ (F.D[:, None] * F.U) - Zr.T @ F.P @ Zr)),
            orthogonality_residual=float(np.linalg.norm(QR.Q.T @ QR.Q - np.eye(QR.n))),
            qr_residual=float(np.linalg.norm(QR.Q1 @ np.triu(QR.R1) - data.working.A_working.T)),
        )
    return IterationInfo(**info)


def format_header(diagnostics: bool = False) -> str:
    return _HEADER + _HEADER_FACTORIZATION if diagnostics else _HEADER


def format_row(info: IterationInfo) -> str:
    residual = f"{info.residual:.5e}"
    if math.isnan(info.residual):
        residual += "   "
    row = (
        f"{info.iteration:d} \t  {info.objective:.5e} \t {info.infeasibility:.5e} \t "
        f"{info.radius:.5e} \t {residual} \t {info.curvature:.5e} \t "
        f"{info.working_set_size:d}/{info.artificial_constraints:d}"
    )
    if info.ldl_residual is not None:
        row += (
            f"    \t {info.ldl_residual:.5e} \t {info.orthogonality_residual:.5e} \t "
            f"{info.qr_residual:.5e}"
        )
    return row


__all__ = ["IterationInfo", "snapshot", "format_header", "format_row"]
