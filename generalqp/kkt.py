"""
Karush-Kuhn-Tucker diagnostics for ``min 1/2 x'Px + q'x  s.t.  A x <= b``.

These checks are independent of the factorizations kept by the solver and
are meant for validating its output.
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from .utils import symmetrize


def kkt_residuals(
    P: np.ndarray,
    q: np.ndarray,
    A: np.ndarray,
    b: np.ndarray,
    x: np.ndarray,
    lam: Optional[np.ndarray] = None,
) -> Dict[str, float]:
    """
    Infinity norms of the KKT residuals at ``(x, lam)``.

    Returns a dictionary with

    * ``stationarity``: ``||P x + q + A^T lam||``
    * ``primal``: largest violation of ``A x <= b``
    * ``dual``: largest violation of ``lam >= 0``
    * ``complementary``: ``||lam * (b - A x)||``
    """

    x = np.asarray(x, dtype=float).reshape(-1)
    hess = symmetrize(np.asarray(P, dtype=float))
    A = np.asarray(A, dtype=float).reshape(-1, x.shape[0])
    b = np.asarray(b, dtype=float).reshape(-1)
    lam_vec = np.zeros(A.shape[0]) if lam is None else np.asarray(lam, dtype=float).reshape(-1)

    stationarity = hess @ x + np.asarray(q, dtype=float).reshape(-1) + A.T @ lam_vec
    slack = b - A @ x
    if A.shape[0]:
        primal = float(max(np.max(-slack), 0.0))
        dual = float(max(np.max(-lam_vec), 0.0))
        complementary = float(np.linalg.norm(slack * lam_vec, ord=np.inf))
    else:
        primal = dual = complementary = 0.0

    return {
        "stationarity": float(np.linalg.norm(stationarity, ord=np.inf)),
        "primal": primal,
        "dual": dual,
        "complementary": complementary,
    }


def is_kkt_optimal(
    P: np.ndarray,
    q: np.ndarray,
    A: np.ndarray,
    b: np.ndarray,
    x: np.ndarray,
    lam: Optional[np.ndarray] = None,
    tol: float = 1e-6,
) -> bool:
    """
    Return True if all KKT residuals are below ``tol``.
    """

    residuals = kkt_residuals(P, q, A, b, x, lam)
    return all(value <= tol for value in residuals.values())


__all__ = ["kkt_residuals", "is_kkt_optimal"]
