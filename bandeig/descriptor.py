"""Input descriptor for an eigendecomposition."""

from dataclasses import dataclass

import numpy as np

from bandeig.constants import (
    DTYPE, DEFAULT_BLOCK_SIZE, DEFAULT_SMALL_BLOCK_SIZE, SYMMETRY_RTOL,
)


def default_small_block_size(block_size: int) -> int:
    """Largest divisor of block_size not exceeding ceil(block_size / 4)."""
    limit = max(1, -(-block_size // 4))
    return max(d for d in range(1, limit + 1) if block_size % d == 0)


@dataclass(frozen=True, eq=False)
class DiagonalizationDescriptor:
    """Configuration for an eigendecomposition.

    Example usage:
        desc = DiagonalizationDescriptor(matrix=fock.ravel(), problem_size=n,
                                         block_size=8)
        result = Diagonalizer().run(desc)

    Attributes:
        matrix: Symmetric matrix, flattened row-major (n*n entries) or (n, n).
        problem_size: Number of unknowns n.
        block_size: Half-bandwidth nb of the intermediate band form, in
            [1, n]. Chosen heuristically if None.
        small_block_size: Block size for recursive panel factorization. It
            must divide block_size. Validated but currently unused.
    """
    matrix: np.ndarray
    problem_size: int
    block_size: int | None = None
    small_block_size: int | None = None

    def resolve_block_sizes(self) -> tuple[int, int]:
        """Return (block_size, small_block_size), filling in defaults.

        Raises:
            ValueError: If the block sizes are inconsistent with each other
                or with the problem size.
        """
        n = self.problem_size
        block_size = self.block_size
        small_block_size = self.small_block_size

        if block_size is None:
            if small_block_size is not None:
                raise ValueError(
                    f"The small block size was specified ({small_block_size}), "
                    "but the large block size was not.")
            block_size = min(DEFAULT_BLOCK_SIZE, n)
            if block_size % DEFAULT_SMALL_BLOCK_SIZE == 0:
                small_block_size = DEFAULT_SMALL_BLOCK_SIZE
            else:
                small_block_size = 1

        if block_size < 1:
            raise ValueError(f"Block size must be at least one, got {block_size}.")
        if block_size > n:
            raise ValueError(
                f"Block size ({block_size}) cannot exceed problem size ({n}).")

        if small_block_size is None:
            small_block_size = default_small_block_size(block_size)
        if small_block_size < 1:
            raise ValueError(
                f"Small block size must be at least one, got {small_block_size}.")
        if block_size % small_block_size != 0:
            raise ValueError(
                f"Block size ({block_size}) must be divisible by small block "
                f"size ({small_block_size}).")

        return int(block_size), int(small_block_size)

    def validate(self) -> None:
        """Check the descriptor, raising ValueError on the first problem found."""
        self.working_matrix()
        self.resolve_block_sizes()

    def working_matrix(self) -> np.ndarray:
        """Validate the matrix and return a fresh (n, n) float32 copy of it.

        The copy is owned by the caller and shares no memory with the
        descriptor.
        """
        n = self.problem_size
        if n is None or n < 1:
            raise ValueError("Cannot solve a problem with less than one unknown.")

        size = np.size(self.matrix)
        if size != n * n:
            raise ValueError(
                f"Invalid matrix size: expected '{n * n}' but got '{size}'.")

        a = np.array(self.matrix, dtype=DTYPE).reshape(n, n)
        if not np.all(np.isfinite(a)):
            raise ValueError("Matrix contains non-finite entries.")

        scale = float(np.max(np.abs(a)))
        asymmetry = float(np.max(np.abs(a - a.T)))
        if asymmetry > SYMMETRY_RTOL * scale:
            raise ValueError(
                f"Matrix is not symmetric (max |A - A^T| = {asymmetry:.3e}).")
        return a
