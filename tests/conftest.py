"""Pytest configuration and shared fixtures for generalqp tests.

This module provides:
- A deterministic numpy RNG fixture
- Random problem builders shared by the factorization and solver tests
"""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture to set the global numpy seed for reproducibility."""
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


def random_symmetric(rng: np.random.Generator, n: int) -> np.ndarray:
    """Symmetric, generally indefinite ``n x n`` matrix."""
    M = rng.standard_normal((n, n))
    return 0.5 * (M + M.T)


def random_spd(rng: np.random.Generator, n: int, shift: float = 1.0) -> np.ndarray:
    """Symmetric positive definite ``n x n`` matrix."""
    M = rng.standard_normal((n, n))
    return M @ M.T + shift * np.eye(n)


def reduced_hessian_error(F) -> float:
    """``||U' D U - Zr' P Zr||`` for a NullspaceHessianLDL ``F``."""
    Zr = F.Z[:, ::-1]
    return float(np.linalg.norm(F.U.T @ (F.D[:, None] * F.U) - Zr.T @ F.P @ Zr))


def rotated_singular_psd(rng: np.random.Generator, eigenvalues) -> tuple:
    """``Q diag(eigenvalues) Q^T`` with a random orthogonal ``Q``; returns ``(P, Q)``."""
    n = len(eigenvalues)
    Q, _ = np.linalg.qr(rng.standard_normal((n, n)))
    return Q @ np.diag(eigenvalues) @ Q.T, Q
