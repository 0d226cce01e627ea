"""Stage 2: reduction of a band matrix to tridiagonal form by bulge chasing.

Sweep s annihilates the entries of column s below the first subdiagonal with
a short reflector over rows s+1..s+nb. Applying it from both sides creates a
bulge nb rows further down, whose first column is annihilated by the next
reflector of the same sweep, and so on until the window runs off the end of
the matrix. The rest of each bulge is left in place and removed by later
sweeps, so the matrix never carries entries more than 2*nb off the diagonal.

Every step is recorded as a BulgeReflector; back-transformation replays the
list in reverse.
"""

from typing import NamedTuple

import numpy as np

from bandeig.householder import (
    generate_reflector, apply_reflector, apply_reflector_right,
)


class BulgeReflector(NamedTuple):
    """A reflector from one bulge-chasing step.

    The reflector acts on rows and columns start..end-1 and was generated
    from row `column` of the matrix.
    """
    sweep: int
    column: int
    start: int
    end: int
    vector: np.ndarray  # (end - start,), vector[0] = 1 or all zeros
    tau: float


def chase_schedule(problem_size: int, block_size: int) -> list[tuple[int, int, int, int]]:
    """Bulge-chasing steps as (sweep, column, start, end) tuples, in order.

    Sweep s starts with the window [s+1, min(s+nb+1, n)) pivoting on column
    s. Step k >= 1 of the sweep moves everything down by k*nb:

        column = s - nb + 1 + k*nb
        start  = s + 1 + k*nb
        end    = min(s + nb + 1 + k*nb, n)

    and the sweep ends once a window holds one row or less.
    """
    n = problem_size
    nb = block_size
    if nb <= 1:
        return []

    schedule = []
    for sweep in range(max(0, n - 2)):
        start = sweep + 1
        end = min(sweep + nb + 1, n)
        if end - start <= 1:
            raise RuntimeError(
                f"Sweep {sweep} generated an empty Householder transform.")
        schedule.append((sweep, sweep, start, end))

        step = 1
        while True:
            offset = step * nb
            column = sweep - nb + 1 + offset
            start = sweep + 1 + offset
            end = min(sweep + nb + 1 + offset, n)
            if end - start <= 1:
                break
            schedule.append((sweep, column, start, end))
            step += 1

    return schedule


def chase_bulges(matrix: np.ndarray, block_size: int) -> list[BulgeReflector]:
    """Reduce a band matrix of half-bandwidth block_size to tridiagonal form.

    Args:
        matrix: (n, n) symmetric band matrix, overwritten in place.
        block_size: Half-bandwidth nb of the input.

    Returns:
        The reflectors in creation order. Empty when nb = 1, since the
        matrix is then already tridiagonal.
    """
    n = matrix.shape[0]
    # Band plus the bulge remainder left behind for later sweeps.
    margin = 2 * block_size

    reflectors = []
    for sweep, column, start, end in chase_schedule(n, block_size):
        v, tau = generate_reflector(matrix[column, start:end])

        lo = max(0, start - margin)
        hi = min(n, end + margin)
        apply_reflector(v, tau, matrix[start:end, lo:hi])
        apply_reflector_right(matrix[lo:hi, start:end], v, tau)

        matrix[column, start + 1:end] = 0
        matrix[start + 1:end, column] = 0

        v.setflags(write=False)
        reflectors.append(BulgeReflector(
            sweep=sweep, column=column, start=start, end=end,
            vector=v, tau=tau,
        ))

    return reflectors


def extract_tridiagonal(matrix: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Compact tridiagonal storage of a (numerically) tridiagonal matrix.

    Returns:
        d: (n,) diagonal.
        e: (n-1,) off-diagonal, averaged over both triangles.
    """
    d = np.diagonal(matrix).copy()
    e = 0.5 * (np.diagonal(matrix, -1) + np.diagonal(matrix, 1))
    return d, e.astype(matrix.dtype)
