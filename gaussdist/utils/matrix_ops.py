# gaussdist/utils/matrix_ops.py
"""
Matrix Operations Module

Dense linear-algebra kernels used by the Gaussian models. Factorizations go
straight to LAPACK through ``scipy.linalg.lapack`` rather than through the
higher level ``scipy.linalg`` wrappers, because the models need LAPACK's
``info`` status code to tell a non-positive-definite matrix apart from a
rejected argument or a non-convergent decomposition. Every function returns
that code to the caller instead of raising.

The storage layout expected by LAPACK (column-major) is kept behind
``to_column_major`` and ``from_column_major``; the rest of the package works
with ordinary 2D arrays indexed by ``(row, column)``.

Functions:
    to_column_major: Flatten a square matrix in column-major order
    from_column_major: Rebuild a square matrix from column-major storage
    ensure_symmetric: Average a matrix with its transpose
    is_positive_definite: Check positive definiteness with a Cholesky attempt
    cholesky_factor: Upper Cholesky factor and LAPACK status
    cholesky_inverse: Inverse from an upper Cholesky factor and LAPACK status
    symmetric_from_upper: Mirror the upper triangle into the lower triangle
    singular_value_decomposition: Full SVD and LAPACK status
"""

import logging
from typing import Tuple

import numpy as np
from scipy.linalg import lapack

from gaussdist.core.exceptions import raise_dimension_error
from gaussdist.core.types import (
    ColumnMajorArray, CovarianceMatrix, Matrix, SVDDriver, TriangularMatrix, Vector
)

# Set up module-level logger
logger = logging.getLogger("gaussdist.utils.matrix_ops")

# info value reported when an argument is rejected before reaching LAPACK
INVALID_ARGUMENT_INFO = -1


def _check_square(matrix: np.ndarray, name: str = "matrix") -> None:
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name=name,
            expected_shape="(n, n)",
            actual_shape=matrix.shape
        )


def to_column_major(matrix: Matrix) -> ColumnMajorArray:
    """
    Flatten a square matrix into column-major (Fortran) order.

    Examples:
        >>> to_column_major(np.array([[1.0, 2.0], [3.0, 4.0]]))
        array([1., 3., 2., 4.])
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    _check_square(matrix)
    return matrix.ravel(order="F")


def from_column_major(values: ColumnMajorArray, n: int) -> Matrix:
    """
    Rebuild an ``n`` x ``n`` matrix from column-major storage.

    Raises:
        DimensionError: If ``values`` does not hold exactly ``n * n`` entries
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size != n * n:
        raise_dimension_error(
            f"Column-major storage for a {n}x{n} matrix needs {n * n} entries, got {values.size}",
            array_name="values",
            expected_shape=(n * n,),
            actual_shape=values.shape
        )
    return np.reshape(values, (n, n), order="F").copy()


def ensure_symmetric(matrix: Matrix, tol: float = 1e-8) -> Matrix:
    """
    Ensure a matrix is symmetric by averaging it with its transpose.

    If the matrix is already symmetric within ``tol`` it is returned unchanged.

    Raises:
        DimensionError: If the input matrix is not square
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    _check_square(matrix)

    if np.allclose(matrix, matrix.T, rtol=0.0, atol=tol):
        return matrix

    return (matrix + matrix.T) / 2


def is_positive_definite(matrix: Matrix) -> bool:
    """
    Check if a symmetric matrix is positive definite.

    Examples:
        >>> is_positive_definite(np.array([[2.0, 1.0], [1.0, 2.0]]))
        True
        >>> is_positive_definite(np.array([[1.0, 2.0], [2.0, 1.0]]))
        False
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    if not np.all(np.isfinite(matrix)):
        return False
    _, info = cholesky_factor(matrix)
    return info == 0


def cholesky_factor(matrix: CovarianceMatrix) -> Tuple[TriangularMatrix, int]:
    """
    Compute the upper Cholesky factor ``U`` with ``U.T @ U == matrix``.

    Only the upper triangle of ``matrix`` is read. The input is not modified.

    Returns:
        Tuple of the upper triangular factor (lower triangle zeroed) and the
        LAPACK ``info`` code: 0 on success, ``k > 0`` if the leading minor of
        order ``k`` is not positive definite
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    _check_square(matrix)
    factor, info = lapack.dpotrf(matrix, lower=0, clean=1, overwrite_a=0)
    return factor, int(info)


def symmetric_from_upper(matrix: Matrix) -> Matrix:
    """
    Build a full symmetric matrix from the upper triangle of ``matrix``.
    """
    upper = np.triu(matrix)
    return upper + np.triu(matrix, 1).T


def cholesky_inverse(factor: TriangularMatrix) -> Tuple[Matrix, int]:
    """
    Invert a matrix from its upper Cholesky factor.

    LAPACK only fills the upper triangle of the result; it is expanded into a
    full symmetric matrix here.

    Returns:
        Tuple of the symmetric inverse and the LAPACK ``info`` code: 0 on
        success, ``k > 0`` if the factor has a zero on its diagonal
    """
    factor = np.asarray(factor, dtype=np.float64)
    _check_square(factor)
    inverse, info = lapack.dpotri(factor, lower=0, overwrite_c=0)
    return symmetric_from_upper(inverse), int(info)


def singular_value_decomposition(
    matrix: Matrix,
    driver: SVDDriver = "gesdd"
) -> Tuple[Matrix, Vector, Matrix, int]:
    """
    Compute the full singular value decomposition ``matrix = u @ diag(s) @ vt``.

    Singular values are returned in descending order. For a symmetric positive
    semi-definite matrix they are its eigenvalues and the columns of ``u``
    (equivalently the rows of ``vt``) are the matching eigenvectors.

    Args:
        matrix: Square matrix to decompose
        driver: LAPACK driver, "gesdd" (divide and conquer) or "gesvd"

    Returns:
        Tuple ``(u, s, vt, info)``. ``info < 0`` means an argument was
        rejected (non-finite input is reported as ``INVALID_ARGUMENT_INFO``),
        ``info > 0`` means the decomposition did not converge.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    _check_square(matrix)
    n = matrix.shape[0]

    if driver not in ("gesdd", "gesvd") or not np.all(np.isfinite(matrix)):
        logger.debug(f"Rejecting SVD input (driver={driver}, finite={np.all(np.isfinite(matrix))})")
        empty = np.zeros((n, n))
        return empty, np.zeros(n), empty, INVALID_ARGUMENT_INFO

    routine = lapack.dgesdd if driver == "gesdd" else lapack.dgesvd
    u, s, vt, info = routine(matrix, compute_uv=1, full_matrices=1, overwrite_a=0)
    return u, s, vt, int(info)
