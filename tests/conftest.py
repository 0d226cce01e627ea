"""Reference implementations shared by the eigensolver tests.

These are deliberately slow, unblocked, float64 versions of the fast paths in
the package, used as cross-checks.
"""

import numpy as np
import pytest


def _reference_gemm(a, b, c=None, alpha=1.0, beta=0.0,
                    trans_a=False, trans_b=False):
    """Triple-loop C = alpha * op(A) op(B) + beta * C in float64."""
    op_a = np.asarray(a, dtype=np.float64)
    op_b = np.asarray(b, dtype=np.float64)
    if trans_a:
        op_a = op_a.T
    if trans_b:
        op_b = op_b.T
    m, k = op_a.shape
    n = op_b.shape[1]

    out = np.zeros((m, n))
    for row in range(m):
        for col in range(n):
            dot = 0.0
            for inner in range(k):
                dot += op_a[row, inner] * op_b[inner, col]
            out[row, col] = alpha * dot
    if c is not None and beta != 0.0:
        out += beta * np.asarray(c, dtype=np.float64)
    return out


def _reference_tridiagonalize(matrix):
    """Unblocked Householder tridiagonalization, one full-matrix reflector per column.

    Returns the tridiagonal matrix only; use it as a reference for eigenvalues.
    """
    a = np.array(matrix, dtype=np.float64)
    n = a.shape[0]
    for k in range(n - 2):
        x = a[k + 1:, k]
        norm = np.linalg.norm(x)
        if norm == 0.0:
            continue
        beta = -norm if x[0] >= 0 else norm
        u = x.copy()
        u[0] -= beta
        u_norm_sq = u @ u
        if u_norm_sq == 0.0:
            continue
        h = np.eye(n)
        h[k + 1:, k + 1:] -= 2.0 * np.outer(u, u) / u_norm_sq
        a = h @ a @ h
    return a


def _modified_gram_schmidt(matrix):
    """Orthonormalize the columns of a square matrix, left to right."""
    q = np.array(matrix, dtype=np.float64)
    n = q.shape[1]
    for i in range(n):
        q[:, i] /= np.linalg.norm(q[:, i])
    for i in range(n):
        for j in range(i):
            q[:, i] -= (q[:, j] @ q[:, i]) * q[:, j]
        q[:, i] /= np.linalg.norm(q[:, i])
    return q


def _random_symmetric(n, seed=0, dtype=np.float32):
    rng = np.random.default_rng(seed)
    a = rng.standard_normal((n, n))
    return (0.5 * (a + a.T)).astype(dtype)


@pytest.fixture
def reference_gemm():
    return _reference_gemm


@pytest.fixture
def reference_tridiagonalize():
    return _reference_tridiagonalize


@pytest.fixture
def modified_gram_schmidt():
    return _modified_gram_schmidt


@pytest.fixture
def random_symmetric():
    return _random_symmetric
