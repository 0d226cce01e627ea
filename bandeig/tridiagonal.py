"""Symmetric tridiagonal eigensolvers.

The reduced problem is handed to an external solver:

1. "lapack": scipy.linalg.eigh_tridiagonal with LAPACK ?stev (implicit QL/QR)
2. "divide_and_conquer": scipy.linalg.eigh with LAPACK ?syevd on the
   expanded tridiagonal
3. "dense": the tridiagonal is expanded and diagonalized with
   jax.numpy.linalg.eigh (reference for small systems)
"""

import jax.numpy as jnp
import numpy as np
import scipy.linalg

TRIDIAGONAL_SOLVERS = ("lapack", "divide_and_conquer", "dense")


def tridiagonal_matrix(d: np.ndarray, e: np.ndarray) -> np.ndarray:
    """Dense symmetric matrix with diagonal d and off-diagonal e."""
    return np.diag(d) + np.diag(e, 1) + np.diag(e, -1)


def solve_tridiagonal(
    d: np.ndarray,
    e: np.ndarray,
    method: str = "lapack",
) -> tuple[np.ndarray, np.ndarray]:
    """Solve the symmetric tridiagonal eigenproblem.

    Args:
        d: (n,) diagonal.
        e: (n-1,) off-diagonal.
        method: "lapack", "divide_and_conquer" or "dense".

    Returns:
        eigenvalues: (n,) in ascending order.
        eigenvectors: (n, n) with eigenvector i in column i.

    Raises:
        ValueError: If the method is unknown or the array sizes disagree.
        numpy.linalg.LinAlgError: If d or e holds non-finite values, or the
            solver fails to converge or returns non-finite values.
    """
    d = np.asarray(d)
    e = np.asarray(e)
    if e.shape[0] != d.shape[0] - 1:
        raise ValueError(f"Off-diagonal has {e.shape[0]} entries, "
                         f"expected {d.shape[0] - 1}")
    if method not in TRIDIAGONAL_SOLVERS:
        raise ValueError(f"Unknown tridiagonal solver '{method}'. "
                         f"Available: {', '.join(TRIDIAGONAL_SOLVERS)}")

    # Non-finite input means the reduction itself broke down.
    if not (np.all(np.isfinite(d)) and np.all(np.isfinite(e))):
        raise np.linalg.LinAlgError(
            "Tridiagonal matrix contains non-finite entries")

    if method == "lapack":
        eigenvalues, eigenvectors = scipy.linalg.eigh_tridiagonal(
            d, e, lapack_driver="stev")
    elif method == "divide_and_conquer":
        eigenvalues, eigenvectors = scipy.linalg.eigh(
            tridiagonal_matrix(d, e), driver="evd")
    else:
        t = tridiagonal_matrix(d, e)
        eigenvalues, eigenvectors = jnp.linalg.eigh(jnp.asarray(t))

    if not (np.all(np.isfinite(eigenvalues)) and np.all(np.isfinite(eigenvectors))):
        raise np.linalg.LinAlgError(
            f"Tridiagonal solver '{method}' returned non-finite values")

    return (np.asarray(eigenvalues, dtype=d.dtype),
            np.array(eigenvectors, dtype=d.dtype))
