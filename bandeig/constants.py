"""Numerical constants shared by the eigensolver stages."""

import numpy as np

# All stages work in single precision.
DTYPE = np.float32

# Reflectors whose norm (or pivot difference) falls below this are treated
# as the identity transform.
REFLECTOR_EPSILON = 2.0 * float(np.finfo(DTYPE).tiny)

# Block sizes used when the descriptor leaves them unspecified.
DEFAULT_BLOCK_SIZE = 4
DEFAULT_SMALL_BLOCK_SIZE = 2

# Relative tolerance for the input symmetry check.
SYMMETRY_RTOL = 1e-5
