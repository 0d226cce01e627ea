"""Dense matrix-matrix multiplication.

Computes C = alpha * op(A) @ op(B) + beta * C, where op() optionally
transposes its argument. Every O(n^3) product in the reduction and
back-transformation goes through this function so the heavy lifting lands in
an optimized library:

- "numpy": the BLAS linked into NumPy (sgemm for float32 operands).
- "jax": XLA through jax.numpy, at full float32 precision.
"""

import jax
import jax.numpy as jnp
import numpy as np

GEMM_BACKENDS = ("numpy", "jax")


def _product(op_a: np.ndarray, op_b: np.ndarray, backend: str) -> np.ndarray:
    if backend == "numpy":
        return np.matmul(op_a, op_b)
    else:
        product = jnp.matmul(
            jnp.asarray(op_a), jnp.asarray(op_b),
            precision=jax.lax.Precision.HIGHEST,
        )
        return np.asarray(product)


def gemm(
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray | None = None,
    alpha: float = 1.0,
    beta: float = 0.0,
    trans_a: bool = False,
    trans_b: bool = False,
    backend: str = "numpy",
) -> np.ndarray:
    """General matrix multiply, C = alpha * op(A) @ op(B) + beta * C.

    Follows BLAS semantics: when beta is zero the previous contents of C are
    never read, so an uninitialized (or NaN-filled) accumulator is safe.

    Args:
        a: (m, k) matrix, or (k, m) if trans_a.
        b: (k, n) matrix, or (n, k) if trans_b.
        c: Optional (m, n) accumulator, updated in place. A new array is
            allocated when omitted.
        alpha: Scale applied to the product.
        beta: Scale applied to the previous contents of c.
        trans_a: Use A^T instead of A.
        trans_b: Use B^T instead of B.
        backend: "numpy" or "jax".

    Returns:
        The accumulator c.
    """
    if backend not in GEMM_BACKENDS:
        raise ValueError(f"Unknown GEMM backend '{backend}'. "
                         f"Available: {', '.join(GEMM_BACKENDS)}")

    op_a = a.T if trans_a else a
    op_b = b.T if trans_b else b
    if op_a.ndim != 2 or op_b.ndim != 2:
        raise ValueError("GEMM operands must be 2-D matrices")
    if op_a.shape[1] != op_b.shape[0]:
        raise ValueError(f"Inner dimensions do not match: "
                         f"{op_a.shape} x {op_b.shape}")

    shape = (op_a.shape[0], op_b.shape[1])
    if c is None:
        c = np.empty(shape, dtype=np.result_type(op_a, op_b))
        beta = 0.0
    elif c.shape != shape:
        raise ValueError(f"Accumulator has shape {c.shape}, expected {shape}")

    # Empty inner dimension: the product is zero.
    if op_a.shape[1] == 0:
        if beta == 0.0:
            c[...] = 0
        else:
            c *= beta
        return c

    product = _product(op_a, op_b, backend)
    if beta == 0.0:
        c[...] = alpha * product
    else:
        c *= beta
        c += alpha * product
    return c
