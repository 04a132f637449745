"""
Dense linear algebra kernels used by the updatable factorizations.

Rotations are applied in place to NumPy views, so updates made through a
slice such as ``Q[:, m:]`` land directly in the owning buffer.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.linalg import lapack


def symmetrize(matrix: np.ndarray) -> np.ndarray:
    """
    Return the symmetric part of ``matrix``.

    Projected Hessians such as ``Z^T P Z`` pick up small asymmetries from
    floating-point error; ``0.5 * (M + M^T)`` removes them before factoring.
    """

    return 0.5 * (matrix + matrix.T)


def givens(f: float, g: float) -> tuple[float, float, float]:
    """
    Compute a Givens rotation that annihilates ``g``.

    Returns ``(c, s, r)`` such that

    ```
        [ c  s] [f]   [r]
        [-s  c] [g] = [0]
    ```

    with ``r = hypot(f, g) >= 0``. For ``f = g = 0`` the identity is returned.
    """

    r = math.hypot(f, g)
    if r == 0.0:
        return 1.0, 0.0, 0.0
    return f / r, g / r, r


def apply_givens_rows(mat: np.ndarray, i: int, j: int, c: float, s: float) -> None:
    """Left-multiply rows ``i`` and ``j`` of ``mat`` by the rotation ``(c, s)``."""

    row_i = mat[i].copy()
    row_j = mat[j]
    mat[i] = c * row_i + s * row_j
    mat[j] = -s * row_i + c * row_j


def apply_givens_cols(mat: np.ndarray, i: int, j: int, c: float, s: float) -> None:
    """
    Right-multiply columns ``i`` and ``j`` of ``mat`` by the transposed rotation.

    This is ``mat <- mat G^T`` so that ``(mat G^T)^T = G mat^T``; passing ``-s``
    instead gives ``mat <- mat G``.
    """

    col_i = mat[:, i].copy()
    col_j = mat[:, j]
    mat[:, i] = c * col_i + s * col_j
    mat[:, j] = -s * col_i + c * col_j


def hessenberg_to_triangular(mat: np.ndarray) -> np.ndarray:
    """Reduce an upper Hessenberg ``mat`` to upper triangular form in place."""

    n = mat.shape[0]
    for i in range(n - 1):
        c, s, _ = givens(mat[i, i], mat[i + 1, i])
        apply_givens_rows(mat, i, i + 1, c, s)
        mat[i + 1, i] = 0.0
    return mat


def pivoted_cholesky(
    matrix: np.ndarray, tol: float, curvature: float = 0.0
) -> tuple[np.ndarray, np.ndarray, int]:
    """
    Diagonally pivoted Cholesky ``matrix[p][:, p] = U^T U`` truncated at ``tol``.

    LAPACK ``?pstrf`` runs until a pivot is no longer positive; the returned
    rank is then cut at the first diagonal entry of ``U`` that does not exceed
    ``tol`` or whose square (the pivot itself) does not exceed ``curvature``.

    Returns:
        ``(U, piv, rank)`` where ``U`` is the ``rank x rank`` upper triangular
        factor and ``piv`` the 0-based permutation of all rows.
    """

    n = matrix.shape[0]
    if n == 0:
        return np.zeros((0, 0)), np.zeros(0, dtype=int), 0

    work = np.array(matrix, dtype=float, order="F", copy=True)
    factor, piv, rank, info = lapack.dpstrf(work, tol=0.0, lower=0)
    if info < 0:
        raise ValueError(f"dpstrf: illegal value in argument {-info}")
    piv = np.asarray(piv, dtype=int)
    # Some LAPACK wrappers hand back Fortran (1-based) pivots.
    if piv.min() == 1:
        piv = piv - 1

    diag = np.diag(factor)[:rank]
    failing = np.flatnonzero(~((diag > tol) & (diag**2 > curvature)))
    rank = int(failing[0]) if failing.size else int(rank)
    return np.triu(factor[:rank, :rank]), piv, rank


__all__ = [
    "symmetrize",
    "givens",
    "apply_givens_rows",
    "apply_givens_cols",
    "hessenberg_to_triangular",
    "pivoted_cholesky",
]
