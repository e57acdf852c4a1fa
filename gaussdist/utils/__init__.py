"""
gaussdist Utilities

Linear-algebra helpers wrapping LAPACK through ``scipy.linalg.lapack``.
"""

from .matrix_ops import (
    cholesky_factor,
    cholesky_inverse,
    ensure_symmetric,
    from_column_major,
    is_positive_definite,
    singular_value_decomposition,
    symmetric_from_upper,
    to_column_major
)

__all__ = [
    'cholesky_factor',
    'cholesky_inverse',
    'ensure_symmetric',
    'from_column_major',
    'is_positive_definite',
    'singular_value_decomposition',
    'symmetric_from_upper',
    'to_column_major',
]
