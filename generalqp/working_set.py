"""
Bookkeeping of working (active) and ignored (inactive) constraint rows.

The rows of the ignored constraints are kept contiguous at the bottom of
shuffled copies of ``A`` and ``b`` so that the ratio test of every iteration
is one matrix-vector product over ``A_ignored``. The shuffled buffers are
allocated once; moving a row in or out of the working set shifts rows inside
them instead of reallocating.
"""

from __future__ import annotations

from typing import List

import numpy as np


class WorkingSet:
    """
    Partition of the rows of ``A x <= b`` into working and ignored sets.

    Args:
        A: ``(m, n)`` constraint matrix.
        b: ``(m,)`` right-hand side.
    """

    def __init__(self, A: np.ndarray, b: np.ndarray) -> None:
        self.A = A
        self.b = b
        self.m, self.n = A.shape
        self.working: List[int] = []
        self.ignored: List[int] = list(range(self.m))

        self.A_shuffled = np.array(A, dtype=float, copy=True)
        self.b_shuffled = np.array(b, dtype=float, copy=True)

    @property
    def A_ignored(self) -> np.ndarray:
        return self.A_shuffled[self.m - len(self.ignored) :]

    @property
    def b_ignored(self) -> np.ndarray:
        return self.b_shuffled[self.m - len(self.ignored) :]

    @property
    def A_working(self) -> np.ndarray:
        return self.A[self.working]

    def activate(self, idx: int) -> int:
        """
        Move entry ``idx`` of the ignored set into the working set.

        Returns:
            The constraint row index that became active.
        """

        row = self.ignored[idx]
        start = self.m - len(self.ignored)
        self.A_shuffled[start + 1 : start + idx + 1] = self.A_shuffled[start : start + idx].copy()
        self.b_shuffled[start + 1 : start + idx + 1] = self.b_shuffled[start : start + idx].copy()
        del self.ignored[idx]
        self.working.append(row)
        return row

    def release(self, idx: int) -> int:
        """
        Move entry ``idx`` of the working set back to the front of the ignored set.

        Returns:
            The constraint row index that became inactive.
        """

        row = self.working[idx]
        slot = self.m - len(self.ignored) - 1
        self.A_shuffled[slot] = self.A[row]
        self.b_shuffled[slot] = self.b[row]
        self.ignored.insert(0, row)
        del self.working[idx]
        return row


__all__ = ["WorkingSet"]
