"""
Blocked two-stage eigensolver for dense symmetric matrices.

This package computes all eigenvalues and eigenvectors of a real symmetric
matrix in single precision using:
- Blocked Householder reduction to band form (compact WY panels)
- Bulge chasing from band to tridiagonal form
- LAPACK (via SciPy) or JAX for the tridiagonal eigenproblem
- Two-stage back-transformation of the eigenvectors
"""

from bandeig.descriptor import DiagonalizationDescriptor
from bandeig.diagonalizer import Diagonalizer, DiagonalizationResult, diagonalize

__version__ = "0.1.0"
__all__ = [
    "DiagonalizationDescriptor", "Diagonalizer", "DiagonalizationResult",
    "diagonalize",
]
