"""Stage 1: reduction of a dense symmetric matrix to band form.

The matrix is processed in panels of nb columns. Column j of a panel gets a
Householder reflector acting on rows j+nb..n-1, which annihilates every entry
more than nb below the diagonal. Offsetting the reflectors by nb (instead of
by one) is what leaves a band matrix rather than a tridiagonal one.

The reflectors of a panel are aggregated into compact WY form and applied to
the trailing matrix from both sides,

    A <- Q^T A Q,    Q = H_0 H_1 ... H_{b-1} = I - V T V^T,

using matrix products only.
"""

from dataclasses import dataclass

import numpy as np

from bandeig.gemm import gemm
from bandeig.householder import (
    generate_reflector, apply_reflector, wy_transform,
    apply_wy_left, apply_wy_right,
)


@dataclass(frozen=True, eq=False)
class BandReflectorBlock:
    """Reflectors of one band-reduction panel, in compact WY form.

    Attributes:
        panel_start: First column of the panel.
        row_start: First row touched by the reflectors (panel_start + nb).
        reflectors: (n, b) matrix V. Column k has its unit entry at row
            panel_start + k + nb and zeros above it.
        t: (b, b) upper triangular WY coefficients.
    """
    panel_start: int
    row_start: int
    reflectors: np.ndarray
    t: np.ndarray

    @property
    def width(self) -> int:
        return self.reflectors.shape[1]


def band_panels(problem_size: int, block_size: int) -> list[tuple[int, int]]:
    """Column ranges [start, end) of the band-reduction panels.

    Panels start every nb columns while start < n - nb. The last panel is
    truncated at n - nb, since columns beyond it are already inside the band.
    """
    return [
        (start, min(start + block_size, problem_size - block_size))
        for start in range(0, problem_size - block_size, block_size)
    ]


def reduce_to_band_form(matrix: np.ndarray, block_size: int,
                        gemm=gemm) -> list[BandReflectorBlock]:
    """Reduce a symmetric matrix to half-bandwidth block_size, in place.

    Args:
        matrix: (n, n) symmetric working matrix. Overwritten with the band
            matrix Q^T A Q.
        block_size: Target half-bandwidth nb, 1 <= nb <= n.
        gemm: Matrix-multiply primitive.

    Returns:
        One BandReflectorBlock per panel, in creation order. Empty when
        nb = n.
    """
    n = matrix.shape[0]
    blocks = []

    for panel_start, panel_end in band_panels(n, block_size):
        width = panel_end - panel_start
        row_start = panel_start + block_size

        # Rows equal columns by symmetry. Work on a cached copy so the
        # panel's own reflectors never touch the matrix before the update.
        panel = matrix[panel_start:panel_end, :].copy()
        reflectors = np.zeros((n, width), dtype=matrix.dtype)
        taus = np.zeros(width)

        for k in range(width):
            column = panel[k, row_start:]

            # Bring the column up to date with the reflectors already
            # generated for this panel.
            for i in range(k):
                apply_reflector(reflectors[row_start:, i], taus[i], column)

            offset = panel_start + k + block_size
            v, tau = generate_reflector(panel[k, offset:])
            reflectors[offset:, k] = v
            taus[k] = tau

        trailing = reflectors[row_start:]
        t = wy_transform(trailing, gemm=gemm)

        # Rows above panel_start are already banded, so they carry no
        # entries in columns >= row_start.
        apply_wy_left(trailing, t, matrix[row_start:, panel_start:],
                      transpose=True, gemm=gemm)
        apply_wy_right(matrix[panel_start:, row_start:], trailing, t, gemm=gemm)

        for j in range(panel_start, panel_end):
            matrix[j + block_size + 1:, j] = 0
            matrix[j, j + block_size + 1:] = 0

        reflectors.setflags(write=False)
        t.setflags(write=False)
        blocks.append(BandReflectorBlock(
            panel_start=panel_start,
            row_start=row_start,
            reflectors=reflectors,
            t=t,
        ))

    return blocks
