# gaussdist/models/distributions/covariance.py
"""
Covariance representations for the multivariate Gaussian.

A covariance is either a vector of per-axis variances (``DiagonalCovariance``)
or a full symmetric matrix (``FullCovariance``). Both expose the same
operations, and the multivariate model dispatches to whichever one it holds
instead of branching on a mode flag:

- ``derive`` computes the inverse covariance and the density normalizer
- ``quadratic_forms`` evaluates ``r' inv(S) r`` for a batch of offsets ``r``
- ``sampling_transform`` and ``apply_transform`` map standard normal vectors
  onto vectors with this covariance

The values derived for density evaluation are bundled in one immutable
``DerivedState``, so the inverse and the normalizer are always replaced or
discarded together.
"""

import abc
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numba import jit

from gaussdist.core.config import get_config
from gaussdist.core.exceptions import (
    DiagonalCovarianceOnlyError, InverseError, SVDConvergenceError,
    SVDParameterError, ZeroInVarianceError, raise_dimension_error, warn_numeric
)
from gaussdist.core.types import CovarianceMatrix, Matrix, MatrixLike, VarianceVector, Vector
from gaussdist.core.validation import ensure_array, validate_variances
from gaussdist.utils.matrix_ops import (
    cholesky_factor, cholesky_inverse, ensure_symmetric, from_column_major,
    singular_value_decomposition
)

# Set up module-level logger
logger = logging.getLogger("gaussdist.models.distributions.covariance")

LOG_2PI = math.log(2.0 * math.pi)


@dataclass(frozen=True)
class DerivedState:
    """Quantities derived from a covariance for density evaluation.

    Attributes:
        inverse: Inverse covariance, shaped like the covariance storage
            (reciprocal variances for a diagonal covariance)
        sqrt_determinant: Square root of the covariance determinant
        normalizer: ``1 / ((2*pi)**(d/2) * sqrt_determinant)``, or None when
            ``sqrt_determinant`` underflowed to zero for a non-singular
            covariance
        log_normalizer: Logarithm of the normalizer, summed from the logs of
            the variances or Cholesky diagonal so it stays finite when the
            determinant underflows
    """
    inverse: np.ndarray
    sqrt_determinant: float
    normalizer: Optional[float]
    log_normalizer: float

    def density_normalizer(self) -> float:
        """Linear-space normalizer.

        Raises:
            ZeroInVarianceError: If the normalizing denominator underflowed to zero
        """
        if self.normalizer is None:
            raise ZeroInVarianceError(
                "Covariance determinant underflows to zero; use log_density instead",
                operation="normalizer",
                values=self.sqrt_determinant,
                error_type="underflow"
            )
        return self.normalizer


@jit(nopython=True, cache=True)
def _diagonal_quadratic_forms(relative: np.ndarray, inverse_variances: np.ndarray) -> np.ndarray:
    """Numba-accelerated ``sum_k r[k]**2 / var[k]`` for each row of ``relative``."""
    n_points, n_dim = relative.shape
    result = np.zeros(n_points)
    for i in range(n_points):
        total = 0.0
        for k in range(n_dim):
            total += relative[i, k] * relative[i, k] * inverse_variances[k]
        result[i] = total
    return result


@jit(nopython=True, cache=True)
def _full_quadratic_forms(relative: np.ndarray, inverse_covariance: np.ndarray) -> np.ndarray:
    """Numba-accelerated ``r' inv(S) r`` for each row of ``relative``."""
    n_points, n_dim = relative.shape
    result = np.zeros(n_points)
    partial = np.zeros(n_dim)
    for i in range(n_points):
        # partial = inv(S) @ r
        for j in range(n_dim):
            temp = 0.0
            for k in range(n_dim):
                temp += inverse_covariance[j, k] * relative[i, k]
            partial[j] = temp

        total = 0.0
        for j in range(n_dim):
            total += partial[j] * relative[i, j]
        result[i] = total
    return result


def _normalizers(dimension: int,
                 sqrt_determinant: float,
                 log_sqrt_determinant: float) -> Tuple[Optional[float], float]:
    # A zero variance makes the log determinant -inf; underflow alone does not
    if log_sqrt_determinant == -math.inf:
        raise ZeroInVarianceError(
            "Covariance determinant is zero; the density normalizer is undefined",
            operation="normalizer",
            values=sqrt_determinant,
            error_type="division by zero"
        )
    log_normalizer = -0.5 * dimension * LOG_2PI - log_sqrt_determinant
    try:
        denominator = (2.0 * math.pi) ** (dimension * 0.5) * sqrt_determinant
    except OverflowError:
        denominator = math.inf
    normalizer = 1.0 / denominator if denominator > 0.0 else None
    return normalizer, log_normalizer


class CovarianceModel(abc.ABC):
    """Common interface of the covariance representations."""

    def __init__(self, dimension: int) -> None:
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    @classmethod
    @abc.abstractmethod
    def identity(cls, dimension: int) -> "CovarianceModel":
        """Unit variance on every axis, no cross terms."""

    @abc.abstractmethod
    def entry(self, row: int, column: int) -> float:
        """Covariance between axes ``row`` and ``column``."""

    @abc.abstractmethod
    def set_entry(self, row: int, column: int, value: float) -> None:
        """Write ``value`` at ``(row, column)`` and ``(column, row)``."""

    @abc.abstractmethod
    def replace(self, values: MatrixLike) -> None:
        """Replace the whole covariance."""

    @abc.abstractmethod
    def to_matrix(self) -> CovarianceMatrix:
        """Dense ``d`` x ``d`` copy of the covariance."""

    @abc.abstractmethod
    def derive(self) -> DerivedState:
        """Compute the inverse covariance and density normalizer."""

    @abc.abstractmethod
    def quadratic_forms(self, relative: Matrix, derived: DerivedState) -> Vector:
        """Mahalanobis quadratic form of each row of ``relative``."""

    @abc.abstractmethod
    def sampling_transform(self) -> np.ndarray:
        """Transform mapping standard normal vectors onto this covariance."""

    @abc.abstractmethod
    def apply_transform(self, standard: Matrix, transform: np.ndarray) -> Matrix:
        """Apply ``transform`` to each row of ``standard``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dimension={self._dimension})"


class DiagonalCovariance(CovarianceModel):
    """Covariance with independent axes, stored as a vector of variances.

    Off-diagonal entries are zero by construction and cannot be written.
    """

    def __init__(self, variances: VarianceVector) -> None:
        super().__init__(variances.shape[0])
        self._variances = variances

    @classmethod
    def identity(cls, dimension: int) -> "DiagonalCovariance":
        return cls(np.ones(dimension))

    @property
    def variances(self) -> VarianceVector:
        return self._variances.copy()

    def entry(self, row: int, column: int) -> float:
        return float(self._variances[row]) if row == column else 0.0

    def set_entry(self, row: int, column: int, value: float) -> None:
        if row != column:
            raise DiagonalCovarianceOnlyError(
                f"Cannot set off-diagonal entry ({row}, {column}) of a diagonal covariance",
                param_name="covariance",
                param_value=value,
                constraint="row == column"
            )
        self._variances[row] = value

    def replace(self, values: MatrixLike) -> None:
        array = ensure_array(values, "covariance")
        if array.ndim != 1 or array.shape[0] != self._dimension:
            raise DiagonalCovarianceOnlyError(
                f"A diagonal covariance takes {self._dimension} variances, got shape {array.shape}",
                param_name="covariance",
                param_value=array.shape,
                constraint=f"shape == ({self._dimension},)"
            )
        self._variances = validate_variances(array.copy(), "covariance")

    def to_matrix(self) -> CovarianceMatrix:
        return np.diag(self._variances)

    def derive(self) -> DerivedState:
        sqrt_determinant = math.sqrt(float(np.prod(self._variances)))
        with np.errstate(divide="ignore"):
            log_sqrt_determinant = 0.5 * float(np.sum(np.log(self._variances)))
        normalizer, log_normalizer = _normalizers(
            self._dimension, sqrt_determinant, log_sqrt_determinant
        )
        inverse = 1.0 / self._variances
        return DerivedState(inverse, sqrt_determinant, normalizer, log_normalizer)

    def quadratic_forms(self, relative: Matrix, derived: DerivedState) -> Vector:
        return _diagonal_quadratic_forms(np.ascontiguousarray(relative), derived.inverse)

    def sampling_transform(self) -> VarianceVector:
        # Eigenvectors are the coordinate axes, eigenvalues are the variances
        return np.sqrt(self._variances)

    def apply_transform(self, standard: Matrix, transform: VarianceVector) -> Matrix:
        return standard * transform


class FullCovariance(CovarianceModel):
    """Covariance stored as a full symmetric matrix.

    Density evaluation factors the matrix with an upper Cholesky
    decomposition; sampling decomposes it with an SVD so that positive
    semi-definite matrices can still be sampled.
    """

    def __init__(self, matrix: CovarianceMatrix) -> None:
        super().__init__(matrix.shape[0])
        self._matrix = matrix

    @classmethod
    def identity(cls, dimension: int) -> "FullCovariance":
        return cls(np.eye(dimension))

    def entry(self, row: int, column: int) -> float:
        return float(self._matrix[row, column])

    def set_entry(self, row: int, column: int, value: float) -> None:
        self._matrix[row, column] = value
        self._matrix[column, row] = value

    def replace(self, values: MatrixLike) -> None:
        d = self._dimension
        array = ensure_array(values, "covariance")
        if array.ndim == 2 and array.shape == (d, d):
            matrix = array.copy()
        elif array.ndim == 1 and array.shape[0] == d * d:
            matrix = from_column_major(array, d)
        else:
            raise_dimension_error(
                f"A full covariance takes a ({d}, {d}) matrix or {d * d} values, got shape {array.shape}",
                array_name="covariance",
                expected_shape=f"({d}, {d}) or ({d * d},)",
                actual_shape=array.shape
            )

        tolerance = get_config("numerical", "symmetry_tolerance", 1e-8)
        symmetric = ensure_symmetric(matrix, tolerance)
        if symmetric is not matrix:
            warn_numeric(
                "Covariance matrix is not symmetric; using the average with its transpose",
                operation="set_covariance_matrix",
                issue="asymmetric input",
                value=float(np.max(np.abs(matrix - matrix.T)))
            )
        validate_variances(np.diag(symmetric).copy(), "covariance diagonal")
        self._matrix = np.ascontiguousarray(symmetric)

    def to_matrix(self) -> CovarianceMatrix:
        return self._matrix.copy()

    def derive(self) -> DerivedState:
        factor, info = cholesky_factor(self._matrix)
        if info != 0:
            raise InverseError(
                "Covariance matrix is not positive definite",
                operation="cholesky factorization",
                values=self._matrix,
                error_type="not positive definite",
                info=info
            )

        diagonal = np.diag(factor)
        sqrt_determinant = float(np.prod(diagonal))
        log_sqrt_determinant = float(np.sum(np.log(diagonal)))

        inverse, info = cholesky_inverse(factor)
        if info != 0:
            raise InverseError(
                "Covariance matrix could not be inverted",
                operation="cholesky inverse",
                values=self._matrix,
                error_type="singular factor",
                info=info
            )

        normalizer, log_normalizer = _normalizers(
            self._dimension, sqrt_determinant, log_sqrt_determinant
        )
        return DerivedState(np.ascontiguousarray(inverse), sqrt_determinant, normalizer, log_normalizer)

    def quadratic_forms(self, relative: Matrix, derived: DerivedState) -> Vector:
        return _full_quadratic_forms(np.ascontiguousarray(relative), derived.inverse)

    def sampling_transform(self) -> Matrix:
        """Rows are the eigenvectors scaled by the square roots of their eigenvalues.

        With ``T`` this matrix, ``T.T @ T`` reproduces the covariance, so a row
        vector ``z`` of standard normals maps to ``z @ T``.
        """
        driver = get_config("numerical", "svd_driver", "gesdd")
        u, singular_values, vt, info = singular_value_decomposition(self._matrix, driver)
        if info < 0:
            raise SVDParameterError(
                "Singular value decomposition rejected the covariance matrix",
                operation=f"svd ({driver})",
                values=self._matrix,
                error_type="invalid argument",
                info=info
            )
        if info > 0:
            raise SVDConvergenceError(
                "Singular value decomposition did not converge",
                operation=f"svd ({driver})",
                values=self._matrix,
                error_type="no convergence",
                info=info
            )

        # For a symmetric matrix, u[:, k] == -vt[k] marks a negative eigenvalue
        alignment = np.einsum("ik,ki->k", u, vt)
        scale = np.max(singular_values) if singular_values.size else 0.0
        flipped = (alignment < 0.0) & (singular_values > 1e-12 * scale)
        if np.any(flipped):
            warn_numeric(
                "Covariance matrix is not positive semi-definite; sampling uses the "
                "absolute values of its eigenvalues",
                operation="sampling transform",
                issue="negative eigenvalue",
                value=int(np.count_nonzero(flipped))
            )

        logger.debug(f"Built sampling transform from SVD (driver={driver}, dimension={self._dimension})")
        return np.sqrt(singular_values)[:, None] * vt

    def apply_transform(self, standard: Matrix, transform: Matrix) -> Matrix:
        return standard @ transform
