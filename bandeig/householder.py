"""Householder reflectors and their compact WY aggregation.

A reflector is stored LAPACK-style as a vector v with v[0] = 1 and a scalar
tau, representing

    H = I - tau * v v^T,    H x = [beta, 0, ..., 0]^T.

A block of b reflectors (the columns of V) is aggregated into a b x b upper
triangular matrix T such that

    H_0 H_1 ... H_{b-1} = I - V T V^T,

so a whole panel can be applied with three matrix products instead of b
rank-one updates.
"""

import numpy as np

from bandeig.constants import DTYPE, REFLECTOR_EPSILON
from bandeig.gemm import gemm


def generate_reflector(x: np.ndarray) -> tuple[np.ndarray, float]:
    """Create the reflector mapping x onto a multiple of the first unit vector.

    The new leading entry is beta = -sign(x[0]) * ||x||, the choice that
    avoids cancellation in x[0] - beta. When ||x|| or x[0] - beta is zero or
    subnormal the reflector degrades to the zero vector with tau = 0, i.e. the
    identity, so an all-zero column never produces NaN.

    The norm and the scaling of v are computed in double precision, so any
    finite float32 vector works without underflow or overflow.

    Args:
        x: (m,) vector.

    Returns:
        v: (m,) reflector with v[0] = 1 (or all zeros if degenerate).
        tau: Scalar with H = I - tau v v^T.
    """
    x = np.asarray(x, dtype=DTYPE)
    v = np.zeros_like(x)
    if x.size == 0:
        return v, 0.0

    x64 = x.astype(np.float64)
    norm = float(np.linalg.norm(x64))
    old_leading = float(x64[0])
    new_leading = -norm if old_leading >= 0 else norm

    if not (REFLECTOR_EPSILON < abs(new_leading)
            and REFLECTOR_EPSILON < abs(new_leading - old_leading)):
        return v, 0.0

    tau = (new_leading - old_leading) / new_leading
    v[:] = x64 / (old_leading - new_leading)
    v[0] = 1
    return v, tau


def apply_reflector(v: np.ndarray, tau: float, c: np.ndarray) -> None:
    """In-place C <- (I - tau v v^T) C.

    Args:
        v: (m,) reflector.
        tau: Reflector scale.
        c: (m,) vector or (m, k) matrix.
    """
    if tau == 0.0:
        return
    if c.ndim == 1:
        c -= (tau * np.dot(v, c)) * v
    else:
        c -= np.outer(tau * v, v @ c)


def apply_reflector_right(c: np.ndarray, v: np.ndarray, tau: float) -> None:
    """In-place C <- C (I - tau v v^T) for a (k, m) matrix C."""
    if tau == 0.0:
        return
    c -= np.outer(c @ v, tau * v)


def wy_transform(reflectors: np.ndarray, gemm=gemm) -> np.ndarray:
    """Aggregate a block of reflectors into the compact WY coefficient matrix.

    The diagonal holds T[i, i] = 2 / (v_i^T v_i), which equals tau for every
    non-degenerate reflector, and column i above the diagonal is

        T[:i, i] = -T[i, i] * T[:i, :i] @ (V[:, :i]^T v_i).

    Zero (identity) reflectors get an all-zero row and column.

    Args:
        reflectors: (m, b) matrix V whose columns are reflectors.
        gemm: Matrix-multiply primitive used for the overlap matrix V^T V.

    Returns:
        (b, b) upper triangular T.
    """
    block_size = reflectors.shape[1]
    overlap = gemm(reflectors, reflectors, trans_a=True)

    t = np.zeros((block_size, block_size), dtype=reflectors.dtype)
    for i in range(block_size):
        norm_sq = float(overlap[i, i])
        if norm_sq <= REFLECTOR_EPSILON:
            continue
        t[i, i] = 2.0 / norm_sq
        if i > 0:
            t[:i, i] = -t[i, i] * (t[:i, :i] @ overlap[:i, i])
    return t


def apply_wy_left(reflectors: np.ndarray, t: np.ndarray, c: np.ndarray,
                  transpose: bool = False, gemm=gemm) -> None:
    """In-place C <- (I - V op(T) V^T) C as three matrix products.

    W = V^T C, W <- op(T) W, C <- C - V W. The m x m projector is never
    formed. With transpose=True this applies Q^T for Q = I - V T V^T.
    """
    w = gemm(reflectors, c, trans_a=True)
    w = gemm(t, w, trans_a=transpose)
    gemm(reflectors, w, c, alpha=-1.0, beta=1.0)


def apply_wy_right(c: np.ndarray, reflectors: np.ndarray, t: np.ndarray,
                   gemm=gemm) -> None:
    """In-place C <- C (I - V T V^T) as three matrix products."""
    x = gemm(c, reflectors)
    x = gemm(x, t)
    gemm(x, reflectors, c, alpha=-1.0, beta=1.0, trans_b=True)
