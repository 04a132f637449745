"""
Updatable QR factorization of the working-constraint matrix.

``UpdatableQR`` factors the ``n x m`` matrix whose columns are the working
constraint normals as ``Q1 R1``. ``Q = [Q1 Q2]`` is kept square and
orthogonal so that ``Q2`` is an orthonormal basis of the nullspace of the
working constraints. Columns are appended or deleted in ``O(n^2)`` with
Givens rotations instead of refactoring.

``Q`` and ``R`` are allocated once with shape ``(n, n)``; ``Q1``, ``Q2`` and
``R1`` are basic-slice views selected by the live column count ``m``.
"""

from __future__ import annotations

import numpy as np
import scipy.linalg

from .logging import get_logger
from .utils import apply_givens_cols, apply_givens_rows, givens

logger = get_logger(__name__)


class UpdatableQR:
    """
    QR factorization ``A = Q1 R1`` supporting column insertion and deletion.

    Args:
        A: ``(n, m)`` matrix with ``m <= n``.

    Raises:
        ValueError: If ``A`` has more columns than rows.
    """

    def __init__(self, A: np.ndarray) -> None:
        A = np.asarray(A, dtype=float)
        if A.ndim != 2:
            raise ValueError("A must be a 2D array")
        n, m = A.shape
        if m > n:
            raise ValueError("Too many columns in the matrix.")

        self.n = n
        self.m = m
        self.R = np.zeros((n, n))
        if m == 0:
            self.Q = np.eye(n)
        else:
            Q, R = scipy.linalg.qr(A, mode="full")
            self.Q = np.ascontiguousarray(Q)
            self.R[:m, :m] = R[:m, :m]

    @property
    def Q1(self) -> np.ndarray:
        """Orthonormal basis of the range of the working constraints."""
        return self.Q[:, : self.m]

    @property
    def Q2(self) -> np.ndarray:
        """Orthonormal basis of the nullspace of the working constraints."""
        return self.Q[:, self.m :]

    @property
    def R1(self) -> np.ndarray:
        """Upper triangular factor of the working constraints."""
        return self.R[: self.m, : self.m]

    def add_column(self, a: np.ndarray) -> np.ndarray:
        """
        Append column ``a`` to the factored matrix.

        ``Q2^T a`` is reduced to a multiple of the first unit vector by a
        cascade of Givens rotations running from the last pair of ``Q2``
        columns to the first; the rotated leading column of ``Q2`` becomes
        the new last column of ``Q1``.

        Returns:
            ``Q2^T a`` computed before the rotations. The nullspace Hessian
            factorization replays the same cascade from it.
        """

        if self.m >= self.n:
            raise ValueError("Cannot add a column to a full-rank factorization.")
        a = np.asarray(a, dtype=float).reshape(-1)
        Q2 = self.Q2
        a1 = self.Q1.T @ a
        a2 = Q2.T @ a

        x = a2.copy()
        for i in range(x.shape[0] - 1, 0, -1):
            c, s, _ = givens(x[i - 1], x[i])
            apply_givens_rows(x, i - 1, i, c, s)
            apply_givens_cols(Q2, i - 1, i, c, s)

        self.R[: self.m, self.m] = a1
        self.R[self.m, self.m] = x[0]
        self.m += 1

        return a2

    def add_column_householder(self, a: np.ndarray) -> np.ndarray:
        """
        Append column ``a`` using one Householder reflection of ``Q2``.

        Returns:
            The ``(n - m, n - m)`` orthogonal matrix ``H`` with
            ``Q2 <- Q2 H`` (shapes taken before the update).
        """

        if self.m >= self.n:
            raise ValueError("Cannot add a column to a full-rank factorization.")
        a = np.asarray(a, dtype=float).reshape(-1)
        Q2 = self.Q2
        a1 = self.Q1.T @ a
        a2 = Q2.T @ a

        H, r = scipy.linalg.qr(a2.reshape(-1, 1), mode="full")
        Q2[:] = Q2 @ H
        self.R[: self.m, self.m] = a1
        self.R[self.m, self.m] = r[0, 0]
        self.m += 1

        return H

    def remove_column(self, idx: int) -> None:
        """
        Delete column ``idx`` (0-based position among the working columns).

        The columns of ``R1`` to the right of ``idx`` form an upper Hessenberg
        block once ``idx`` is gone; a forward Givens cascade restores the
        triangle and the same rotations are applied to ``Q[:, idx:m]``.
        """

        m = self.m
        if not 0 <= idx < m:
            raise IndexError(f"column index {idx} out of range for {m} columns")

        Q12 = self.Q[:, idx:m]
        R12 = self.R[idx:m, idx + 1 : m]
        for i in range(R12.shape[0] - 1):
            c, s, _ = givens(R12[i, i], R12[i + 1, i])
            apply_givens_rows(R12, i, i + 1, c, s)
            apply_givens_cols(Q12, i, i + 1, c, s)
            R12[i + 1, i] = 0.0

        self.R[:m, idx : m - 1] = self.R[:m, idx + 1 : m].copy()
        self.R[:, m - 1] = 0.0
        self.R[m - 1, :] = 0.0
        self.m -= 1
        logger.debug("removed QR column %d, %d columns left", idx, self.m)


__all__ = ["UpdatableQR"]
