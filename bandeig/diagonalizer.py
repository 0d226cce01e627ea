"""High-level eigensolver interface.

The two-stage pipeline:
1. Reduce the dense matrix to band form with blocked Householder panels
2. Chase bulges to reach tridiagonal form
3. Solve the tridiagonal eigenproblem
4. Undo stage 2, then stage 1, on the eigenvectors
"""

import math
import time
from dataclasses import dataclass
from functools import partial
from typing import NamedTuple

import numpy as np

from bandeig.back_transform import back_transform_band, back_transform_bulges
from bandeig.band_form import reduce_to_band_form
from bandeig.bulge_chasing import chase_bulges, extract_tridiagonal
from bandeig.descriptor import DiagonalizationDescriptor
from bandeig.gemm import gemm, GEMM_BACKENDS
from bandeig.tridiagonal import solve_tridiagonal, TRIDIAGONAL_SOLVERS


class DiagonalizationResult(NamedTuple):
    """Results of an eigendecomposition."""
    eigenvalues: np.ndarray  # (n,) ascending
    eigenvectors: np.ndarray  # (n, n), eigenvector i in column i
    block_size: int
    small_block_size: int
    n_band_blocks: int
    n_bulge_reflectors: int


def _freeze(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass
class Diagonalizer:
    """Dense symmetric eigensolver with two-stage tridiagonalization.

    Example usage:
        desc = DiagonalizationDescriptor(matrix=fock.ravel(), problem_size=n)
        solver = Diagonalizer(gemm_backend="numpy", verbose=True)
        result = solver.run(desc)
        print(f"Lowest eigenvalue: {result.eigenvalues[0]}")

    Each call to run() owns its working memory, so one instance can be
    reused, and independent instances can diagonalize different matrices
    concurrently.
    """
    gemm_backend: str = "numpy"        # Matrix multiply: "numpy" or "jax"
    tridiagonal_solver: str = "lapack"  # "lapack", "divide_and_conquer" or "dense"
    verbose: bool = False              # Print progress

    def _check_config(self):
        if self.gemm_backend not in GEMM_BACKENDS:
            raise ValueError(f"Unknown GEMM backend '{self.gemm_backend}'. "
                             f"Available: {', '.join(GEMM_BACKENDS)}")
        if self.tridiagonal_solver not in TRIDIAGONAL_SOLVERS:
            raise ValueError(
                f"Unknown tridiagonal solver '{self.tridiagonal_solver}'. "
                f"Available: {', '.join(TRIDIAGONAL_SOLVERS)}")

    def run(self, descriptor: DiagonalizationDescriptor) -> DiagonalizationResult:
        """Compute all eigenvalues and eigenvectors of the described matrix.

        Args:
            descriptor: Matrix and block sizes.

        Returns:
            DiagonalizationResult with read-only arrays.

        Raises:
            ValueError: If the descriptor or the configuration is invalid.
            numpy.linalg.LinAlgError: If the tridiagonal solver fails.
        """
        self._check_config()
        matrix = descriptor.working_matrix()
        block_size, small_block_size = descriptor.resolve_block_sizes()
        n = descriptor.problem_size

        if self.verbose:
            print("=" * 60)
            print("  Two-Stage Symmetric Eigensolver")
            print("=" * 60)
            print(f"  Problem size: {n}")
            print(f"  Block size: {block_size} (small block size: {small_block_size})")
            print(f"  GEMM backend: {self.gemm_backend}")
            print(f"  Tridiagonal solver: {self.tridiagonal_solver}")

        # Tridiagonalization needs at least two unknowns.
        if n == 1:
            if self.verbose:
                print("  Single unknown: no reduction needed")
            return DiagonalizationResult(
                eigenvalues=_freeze(matrix.reshape(1).copy()),
                eigenvectors=_freeze(np.ones((1, 1), dtype=matrix.dtype)),
                block_size=block_size,
                small_block_size=small_block_size,
                n_band_blocks=0,
                n_bulge_reflectors=0,
            )

        matmul = partial(gemm, backend=self.gemm_backend)
        timings = {}

        start = time.perf_counter()
        band_blocks = reduce_to_band_form(matrix, block_size, gemm=matmul)
        timings["band"] = time.perf_counter() - start

        start = time.perf_counter()
        bulge_reflectors = chase_bulges(matrix, block_size)
        d, e = extract_tridiagonal(matrix)
        del matrix
        timings["bulge"] = time.perf_counter() - start

        start = time.perf_counter()
        eigenvalues, eigenvectors = solve_tridiagonal(
            d, e, method=self.tridiagonal_solver)
        timings["tridiagonal"] = time.perf_counter() - start

        start = time.perf_counter()
        back_transform_bulges(eigenvectors, bulge_reflectors)
        back_transform_band(eigenvectors, band_blocks, gemm=matmul)
        timings["back"] = time.perf_counter() - start

        if self.verbose:
            print()
            print(f"  {'Stage':<24s}  {'Items':>8s}  {'Time (ms)':>10s}")
            print("  " + "-" * 46)
            print(f"  {'Band reduction':<24s}  {len(band_blocks):8d}  "
                  f"{timings['band'] * 1e3:10.3f}")
            print(f"  {'Bulge chasing':<24s}  {len(bulge_reflectors):8d}  "
                  f"{timings['bulge'] * 1e3:10.3f}")
            print(f"  {'Tridiagonal solve':<24s}  {n:8d}  "
                  f"{timings['tridiagonal'] * 1e3:10.3f}")
            print(f"  {'Back-transformation':<24s}  "
                  f"{len(band_blocks) + len(bulge_reflectors):8d}  "
                  f"{timings['back'] * 1e3:10.3f}")

        return DiagonalizationResult(
            eigenvalues=_freeze(eigenvalues),
            eigenvectors=_freeze(eigenvectors),
            block_size=block_size,
            small_block_size=small_block_size,
            n_band_blocks=len(band_blocks),
            n_bulge_reflectors=len(bulge_reflectors),
        )

    @staticmethod
    def print_summary(result: DiagonalizationResult):
        """Print a summary of the eigendecomposition."""
        n = len(result.eigenvalues)
        overlap = result.eigenvectors.T.astype(np.float64) @ result.eigenvectors
        orthogonality = float(np.max(np.abs(overlap - np.eye(n))))

        print("\n" + "=" * 50)
        print("  Eigendecomposition Summary")
        print("=" * 50)
        print(f"  Problem size: {n}")
        print(f"  Block size: {result.block_size}")
        print(f"  Band panels: {result.n_band_blocks}")
        print(f"  Bulge reflectors: {result.n_bulge_reflectors}")
        print(f"  Max |V^T V - I|: {orthogonality:.2e}")
        print()
        for i, value in enumerate(result.eigenvalues):
            print(f"    State {i + 1:3d}: {value:14.6f}")
        print("=" * 50)


def diagonalize(
    matrix: np.ndarray,
    problem_size: int | None = None,
    block_size: int | None = None,
    small_block_size: int | None = None,
    gemm_backend: str = "numpy",
    tridiagonal_solver: str = "lapack",
    verbose: bool = False,
) -> DiagonalizationResult:
    """Diagonalize a symmetric matrix.

    Args:
        matrix: (n, n) symmetric matrix, or its n*n entries in row-major order.
        problem_size: Number of unknowns. Inferred from the matrix if None.
        block_size: Half-bandwidth of the intermediate band form.
        small_block_size: Recursive panel block size (reserved).
        gemm_backend: "numpy" or "jax".
        tridiagonal_solver: "lapack", "divide_and_conquer" or "dense".
        verbose: Print progress.

    Returns:
        DiagonalizationResult with ascending eigenvalues and column
        eigenvectors.
    """
    if problem_size is None:
        shape = np.shape(matrix)
        if len(shape) == 2 and shape[0] == shape[1]:
            problem_size = shape[0]
        else:
            size = int(np.size(matrix))
            problem_size = math.isqrt(size)
            if problem_size * problem_size != size:
                raise ValueError(
                    f"Cannot infer problem size from a matrix of shape {shape}.")

    descriptor = DiagonalizationDescriptor(
        matrix=matrix,
        problem_size=problem_size,
        block_size=block_size,
        small_block_size=small_block_size,
    )
    solver = Diagonalizer(
        gemm_backend=gemm_backend,
        tridiagonal_solver=tridiagonal_solver,
        verbose=verbose,
    )
    return solver.run(descriptor)
