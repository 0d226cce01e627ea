"""Back-transformation of tridiagonal eigenvectors to the original matrix.

If the forward reduction produced T = Q2^T Q1^T A Q1 Q2 and T z = lambda z,
then x = Q1 Q2 z is an eigenvector of A. The bulge-chasing reflectors (Q2)
are applied first, then the band reflector blocks (Q1), each list in reverse
creation order. Only the left-hand transform is undone; eigenvectors carry
no right-hand factor.
"""

import numpy as np

from bandeig.band_form import BandReflectorBlock
from bandeig.bulge_chasing import BulgeReflector
from bandeig.gemm import gemm
from bandeig.householder import apply_reflector, apply_wy_left


def back_transform_bulges(eigenvectors: np.ndarray,
                          reflectors: list[BulgeReflector]) -> None:
    """In-place Z <- H_1 H_2 ... H_m Z for the bulge-chasing reflectors.

    Args:
        eigenvectors: (n, k) matrix with eigenvectors as columns.
        reflectors: Reflectors in creation order, as returned by
            chase_bulges.
    """
    for reflector in reversed(reflectors):
        apply_reflector(reflector.vector, reflector.tau,
                        eigenvectors[reflector.start:reflector.end])


def back_transform_band(eigenvectors: np.ndarray,
                        blocks: list[BandReflectorBlock],
                        gemm=gemm) -> None:
    """In-place Z <- Q_0 Q_1 ... Q_{m-1} Z for the band reflector blocks.

    Each block is applied as Z <- Z - V (T (V^T Z)) on the rows it touches.

    Args:
        eigenvectors: (n, k) matrix with eigenvectors as columns.
        blocks: Blocks in creation order, as returned by reduce_to_band_form.
        gemm: Matrix-multiply primitive.
    """
    for block in reversed(blocks):
        apply_wy_left(block.reflectors[block.row_start:], block.t,
                      eigenvectors[block.row_start:], gemm=gemm)
