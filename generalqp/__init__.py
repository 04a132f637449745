"""
generalqp - active-set solver for dense, possibly indefinite, quadratic programs.

The solver keeps an updatable QR factorization of the working constraints and
an updatable LDL factorization of the Hessian projected onto their nullspace,
so that adding or dropping a constraint costs ``O(n^2)``.
"""

__version__ = "0.1.0"

from . import active_set, core, feasibility, hessian, kkt, ldl, qp, qr, trace, utils, working_set
from .active_set import ActiveSetData
from .core import InvalidRemoval, OptimizeResult, PreconditionViolation, Status, Tolerances
from .feasibility import find_feasible_point
from .hessian import NullspaceHessian
from .kkt import is_kkt_optimal, kkt_residuals
from .ldl import NullspaceHessianLDL
from .logging import configure_logging, get_logger, set_log_level
from .qp import active_set_qp, solve
from .qr import UpdatableQR
from .trace import IterationInfo

__all__ = [
    "__version__",
    "active_set",
    "core",
    "feasibility",
    "hessian",
    "kkt",
    "ldl",
    "qp",
    "qr",
    "trace",
    "utils",
    "working_set",
    # Core types
    "Status",
    "Tolerances",
    "OptimizeResult",
    "IterationInfo",
    "PreconditionViolation",
    "InvalidRemoval",
    # Factorizations
    "UpdatableQR",
    "NullspaceHessianLDL",
    "NullspaceHessian",
    # Solver
    "ActiveSetData",
    "solve",
    "active_set_qp",
    "find_feasible_point",
    "kkt_residuals",
    "is_kkt_optimal",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
