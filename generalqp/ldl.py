"""
LDL factorization of the Hessian projected onto the working nullspace.

With ``Z`` the nullspace basis held by an :class:`~generalqp.qr.UpdatableQR`
and ``Zr = Z[:, ::-1]`` the same basis in reversed column order,
:class:`NullspaceHessianLDL` maintains

```
    U^T diag(D) U = Zr^T P Zr
```

with ``U`` upper triangular. Reversing the columns puts the direction that
enters or leaves the nullspace at the *end* of ``Zr``, so every update only
touches the last row/column of ``U``.

The reduced Hessian may have at most one negative eigenvalue, tracked by the
sign of ``D[-1]``. When the initial nullspace is not positive definite, the
directions past the first failing Cholesky pivot are parked in front of ``Z``
as *artificial constraints*: they stay in ``Q2`` but are excluded from
``Z`` until the outer loop releases them one at a time.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.linalg import solve_triangular

from .core import DEFAULT_TOLERANCES, InvalidRemoval, Tolerances
from .logging import get_logger
from .qr import UpdatableQR
from .utils import apply_givens_cols, apply_givens_rows, givens, hessenberg_to_triangular, pivoted_cholesky, symmetrize

logger = get_logger(__name__)


class NullspaceHessianLDL:
    """
    Updatable ``U^T D U`` factorization of ``Z^T P Z`` (reversed columns).

    Args:
        P: ``(n, n)`` symmetric Hessian, possibly indefinite.
        A: ``(n, k)`` matrix whose columns are the initial working constraints.
        tolerances: Thresholds; only ``indefinite``, ``curvature_recompute``
            and ``relative_curvature`` are used here.

    Attributes:
        n: Dimension of the original space.
        m: Dimension of the factored nullspace (artificial directions excluded).
        artificial_constraints: Number of nullspace directions currently
            masked because the reduced Hessian is not positive definite on them.
        indefinite_tolerance: Pivot floor; ``D[-1]`` above it means PSD.
        curvature_tolerance: Curvatures at or below it in magnitude are
            treated as zero (``relative_curvature * max|P|``).
    """

    def __init__(self, P: np.ndarray, A: np.ndarray, tolerances: Optional[Tolerances] = None) -> None:
        self.tolerances = tolerances or DEFAULT_TOLERANCES
        P = np.asarray(P, dtype=float)
        A = np.asarray(A, dtype=float)
        if A.ndim != 2 or P.ndim != 2 or not (A.shape[0] == P.shape[0] == P.shape[1]):
            raise ValueError("Matrix dimensions do not match.")

        self.P = P
        self.QR = UpdatableQR(A)
        self.n = self.QR.n
        self.indefinite_tolerance = float(self.tolerances.indefinite)
        scale = float(np.max(np.abs(P))) if P.size else 0.0
        self.curvature_tolerance = self.tolerances.relative_curvature * scale

        Q2 = self.QR.Q2
        m = Q2.shape[1]
        Q2[:] = Q2[:, ::-1].copy()
        WPW = symmetrize(Q2.T @ P @ Q2)

        U, piv, rank = pivoted_cholesky(WPW, self.indefinite_tolerance, self.curvature_tolerance)
        self.artificial_constraints = m - rank
        # Artificial directions first, then the factored ones in reverse pivot order.
        order = np.concatenate([piv[rank:], piv[:rank][::-1]])
        Q2[:] = Q2[:, order].copy()

        self.m = rank
        self._data = np.zeros((self.n, self.n))
        self._d = np.ones(self.n)
        self._data[:rank, :rank] = U
        if self.artificial_constraints:
            logger.debug(
                "reduced Hessian not positive definite: %d artificial constraints",
                self.artificial_constraints,
            )

    @property
    def U(self) -> np.ndarray:
        return self._data[: self.m, : self.m]

    @property
    def D(self) -> np.ndarray:
        return self._d[: self.m]

    @property
    def Z(self) -> np.ndarray:
        return self.QR.Q2[:, self.artificial_constraints :]

    def _shrink(self) -> None:
        self.m -= 1
        self._data[self.m, :] = 0.0
        self._data[:, self.m] = 0.0

    def add_constraint(self, a: np.ndarray) -> None:
        """
        Add constraint normal ``a`` to the working set.

        The Givens cascade that :meth:`UpdatableQR.add_column` applied to
        ``Q2`` is replayed on the columns of ``U`` (which turns it upper
        Hessenberg), the dropped direction is cut off, and the triangle is
        restored. The last diagonal entry is recomputed from ``P`` and floored
        at ``indefinite_tolerance``; ``D`` is renormalized to ``+-1``, or to
        ``0`` in its last entry when the new curvature is below
        ``curvature_tolerance``.
        """

        a2 = self.QR.add_column(a)
        if self.m == 0:
            # Only masked directions were left; one of them is consumed.
            self.artificial_constraints = max(self.artificial_constraints - 1, 0)
            return
        if self.m == 1:
            self._shrink()
            return

        l = a2.shape[0]
        U = self.U
        for i in range(l - 1, 0, -1):
            # Q2 columns (i - 1, i) are columns (l - 1 - i, l - i) of the reversed Z.
            c, s, _ = givens(a2[i - 1], a2[i])
            if l - i < self.m:
                apply_givens_cols(U, l - 1 - i, l - i, c, -s)
            apply_givens_rows(a2, i - 1, i, c, s)

        dropped = self._d[self.m - 1]
        self._shrink()
        U = self.U
        D = self.D
        U *= np.sqrt(D)[:, None]
        hessenberg_to_triangular(U)

        z = self.Z[:, 0]
        Pz = self.P @ z
        if dropped <= self.tolerances.curvature_recompute and self.m > 1:
            rhs = (self.Z.T @ Pz)[::-1]
            U[:-1, -1] = solve_triangular(U[:-1, :-1], rhs[:-1], trans="T")

        u1 = U[:-1, -1]
        d_new = float(z @ Pz - u1 @ u1)
        D[:] = 1.0
        if abs(d_new) <= self.curvature_tolerance:
            # Flat direction: U^T D U keeps u1^T u1 in the corner.
            U[-1, -1] = 1.0
            D[-1] = 0.0
        else:
            U[-1, -1] = max(np.sqrt(abs(d_new)), self.indefinite_tolerance)
            D[-1] = np.sign(d_new)

    def remove_constraint(self, idx: Optional[int] = None) -> None:
        """
        Release one direction into the nullspace.

        If artificial constraints remain, one of them is released and ``idx``
        is ignored. Otherwise working column ``idx`` (0-based) is removed from
        the QR factorization. The new last column of ``U`` is obtained by a
        triangular solve against the old factor.

        Raises:
            InvalidRemoval: If the reduced Hessian currently has a
                non-positive trailing curvature.
        """

        if not (self.m == 0 or self.D[-1] > self.indefinite_tolerance):
            raise InvalidRemoval(
                "Constraints can be removed only when the reduced Hessian was already Positive Semidefinite."
            )

        Z = self.Z
        if self.artificial_constraints == 0:
            if idx is None:
                raise ValueError("A working constraint index is required.")
            self.QR.remove_column(idx)
        else:
            if idx is not None:
                logger.warning("Ignoring index %d: removing an artificial constraint.", idx)
            self.artificial_constraints -= 1

        z = self.QR.Q2[:, self.artificial_constraints]
        Pz = self.P @ z
        if self.m > 0:
            rhs = (Z.T @ Pz)[::-1]
            u = solve_triangular(self.U, rhs, trans="T") / self.D
            d_new = float(z @ Pz - u @ (self.D * u))
        else:
            u = np.zeros(0)
            d_new = float(z @ Pz)
        if abs(d_new) <= self.curvature_tolerance:
            d_new = 0.0

        self.m += 1
        U = self.U
        U[:-1, -1] = u
        U[-1, -1] = 1.0
        self.D[-1] = d_new


__all__ = ["NullspaceHessianLDL"]
