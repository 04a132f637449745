"""
Explicit projected Hessian ``Z^T P Z`` kept in step with an updatable QR.

This is the unfactored counterpart of :class:`generalqp.ldl.NullspaceHessianLDL`:
instead of an LDL factor it stores the dense reduced Hessian and rotates it
with the same orthogonal transformations applied to the nullspace basis.
It is cheaper to reason about and is used to cross-check the LDL updates.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .qr import UpdatableQR
from .utils import symmetrize


class NullspaceHessian:
    """
    Dense ``ZPZ = Z^T P Z`` for the nullspace ``Z = QR.Q2``.

    ``ZPZ`` lives in the trailing ``m x m`` block of an ``(n, n)`` buffer so
    that shrinking drops the leading row/column and growing exposes one.

    Args:
        P: ``(n, n)`` symmetric Hessian.
        A: ``(n, k)`` working constraints. Ignored when ``qr`` is given.
        qr: Existing factorization to share instead of building one from ``A``.
    """

    def __init__(self, P: np.ndarray, A: Optional[np.ndarray] = None, qr: Optional[UpdatableQR] = None) -> None:
        P = np.asarray(P, dtype=float)
        if qr is None:
            if A is None:
                raise ValueError("Either A or qr must be provided.")
            A = np.asarray(A, dtype=float)
            if A.ndim != 2 or not (A.shape[0] == P.shape[0] == P.shape[1]):
                raise ValueError("Matrix dimensions do not match.")
            qr = UpdatableQR(A)
        elif not (qr.n == P.shape[0] == P.shape[1]):
            raise ValueError("Dimensions do not match.")

        self.P = P
        self.QR = qr
        self.n = qr.n
        self.m = qr.n - qr.m
        self._data = np.zeros((self.n, self.n))
        Q2 = qr.Q2
        self.ZPZ[:] = symmetrize(Q2.T @ P @ Q2)

    @property
    def Z(self) -> np.ndarray:
        return self.QR.Q2

    @property
    def ZPZ(self) -> np.ndarray:
        start = self.n - self.m
        return self._data[start:, start:]

    def add_constraint(self, a: np.ndarray) -> None:
        H = self.QR.add_column_householder(a)
        ZPZ = self.ZPZ
        ZPZ[:] = H.T @ ZPZ @ H
        self.m -= 1

    def remove_constraint(self, idx: int) -> None:
        self.QR.remove_column(idx)
        self.m += 1

        Z = self.Z
        Pz = self.P @ Z[:, 0]
        ZPZ = self.ZPZ
        ZPZ[0, :] = Z.T @ Pz
        ZPZ[1:, 0] = ZPZ[0, 1:]


__all__ = ["NullspaceHessian"]
