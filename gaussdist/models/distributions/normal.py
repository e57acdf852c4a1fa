# gaussdist/models/distributions/normal.py
"""
Normal distribution implementations for gaussdist.

This module provides the univariate Gaussian, with a scalar mean and
variance, and the multivariate Gaussian, with a mean vector and either a
diagonal or a full covariance.

The univariate model recomputes its normalizing constant whenever the
variance changes. The multivariate model instead derives its inverse
covariance and normalizer lazily: every covariance write discards the derived
state, and the next density query rebuilds it from a Cholesky factorization
(full covariance) or from the variances directly (diagonal covariance).
Sampling builds its own transform on each call from an SVD of the covariance,
independent of the density cache.

Key features:
- Scalar and batched density and log-density evaluation
- Numba-accelerated density kernels
- Sampling through a seedable, caller-owned StandardNormalSource
- Layout-agnostic ``(row, column)`` covariance access
"""

import logging
import math
import threading
from typing import Any, Optional, Tuple, Union

import numpy as np
from numba import jit
from scipy import special

from gaussdist.core.exceptions import ZeroInVarianceError
from gaussdist.core.types import MatrixLike, ScalarOrArray, SeedLike, VectorLike
from gaussdist.core.validation import (
    ensure_array, validate_axis_index, validate_count, validate_dimension,
    validate_points, validate_variance, validate_vector
)
from gaussdist.models.distributions.base import BaseDistribution
from gaussdist.models.distributions.covariance import (
    CovarianceModel, DerivedState, DiagonalCovariance, FullCovariance
)
from gaussdist.models.distributions.standard_normal import StandardNormalSource

# Set up module-level logger
logger = logging.getLogger("gaussdist.models.distributions.normal")


@jit(nopython=True, cache=True)
def _normal_pdf(x: np.ndarray, mean: float, variance: float, normalizer: float) -> np.ndarray:
    """Numba-accelerated PDF for the univariate normal distribution.

    Args:
        x: Values to compute the PDF for
        mean: Mean parameter
        variance: Variance parameter
        normalizer: ``1 / sqrt(2 * pi * variance)``

    Returns:
        np.ndarray: PDF values
    """
    result = np.empty(x.shape[0])
    for i in range(x.shape[0]):
        diff = x[i] - mean
        result[i] = normalizer * np.exp(diff * diff / (-2.0 * variance))
    return result


class UnivariateGaussian(BaseDistribution):
    """Normal distribution on the real line.

    Args:
        mean: Mean of the distribution
        variance: Variance of the distribution (must be non-negative)
        random_state: Seed, generator, or StandardNormalSource for sampling
        name: A descriptive name for the distribution

    Raises:
        BadVarianceValueError: If variance is negative

    Examples:
        >>> gaussian = UnivariateGaussian(mean=1.0, variance=4.0, random_state=0)
        >>> round(gaussian.density(1.0), 6)
        0.199471
    """

    def __init__(self,
                 mean: float = 0.0,
                 variance: float = 1.0,
                 random_state: Union[SeedLike, StandardNormalSource] = None,
                 name: str = "UnivariateGaussian"):
        super().__init__(name=name, random_state=random_state)
        self._mean = float(mean)
        self._variance = 0.0
        self._normalizer = math.inf
        self.set_variance(variance)

    @property
    def mean(self) -> float:
        return self._mean

    @mean.setter
    def mean(self, value: float) -> None:
        self.set_mean(value)

    @property
    def variance(self) -> float:
        return self._variance

    @variance.setter
    def variance(self, value: float) -> None:
        self.set_variance(value)

    @property
    def standard_deviation(self) -> float:
        return math.sqrt(self._variance)

    @property
    def normalizer(self) -> float:
        """``1 / sqrt(2 * pi * variance)``; infinite when the variance is zero."""
        return self._normalizer

    def set_mean(self, mean: float) -> None:
        self._mean = float(mean)

    def set_variance(self, variance: float) -> None:
        """Set the variance and recompute the normalizer.

        Raises:
            BadVarianceValueError: If variance is negative
        """
        variance = validate_variance(variance)
        self._variance = variance
        self._normalizer = 1.0 / math.sqrt(2.0 * math.pi * variance) if variance > 0.0 else math.inf

    def _require_spread(self, operation: str) -> None:
        if self._variance == 0.0:
            raise ZeroInVarianceError(
                f"Cannot compute the {operation} of a normal distribution with zero variance",
                operation=operation,
                values=self._variance,
                error_type="division by zero"
            )

    @staticmethod
    def _as_flat(x: Any) -> Tuple[np.ndarray, Tuple[int, ...]]:
        array = ensure_array(x, "x")
        return array.ravel(), array.shape

    @staticmethod
    def _restore(values: np.ndarray, shape: Tuple[int, ...]) -> ScalarOrArray:
        if shape == ():
            return float(values[0])
        return values.reshape(shape)

    def density(self, x: Any) -> ScalarOrArray:
        """Compute ``normalizer * exp(-(x - mean)**2 / (2 * variance))``.

        Args:
            x: A value or an array of values

        Returns:
            The density, as a float for a scalar input

        Raises:
            ZeroInVarianceError: If the variance is zero
        """
        self._require_spread("density")
        flat, shape = self._as_flat(x)
        values = _normal_pdf(flat, self._mean, self._variance, self._normalizer)
        return self._restore(values, shape)

    def log_density(self, x: Any) -> ScalarOrArray:
        self._require_spread("log density")
        flat, shape = self._as_flat(x)
        diff = flat - self._mean
        values = math.log(self._normalizer) - diff * diff / (2.0 * self._variance)
        return self._restore(values, shape)

    def cdf(self, x: Any) -> ScalarOrArray:
        """Compute the cumulative distribution function.

        Raises:
            ZeroInVarianceError: If the variance is zero
        """
        self._require_spread("cdf")
        flat, shape = self._as_flat(x)
        values = special.ndtr((flat - self._mean) / self.standard_deviation)
        return self._restore(values, shape)

    def ppf(self, q: Any) -> ScalarOrArray:
        """Compute the percent point function (inverse of CDF).

        Raises:
            ZeroInVarianceError: If the variance is zero
            ValueError: If q contains values outside [0, 1]
        """
        self._require_spread("ppf")
        flat, shape = self._as_flat(q)
        if np.any((flat < 0) | (flat > 1)) or np.isnan(flat).any():
            raise ValueError("Probabilities must be between 0 and 1")
        values = self._mean + self.standard_deviation * special.ndtri(flat)
        return self._restore(values, shape)

    def sample(self, size: Optional[Union[int, Tuple[int, ...]]] = None) -> ScalarOrArray:
        """Draw ``mean + z * sqrt(variance)`` for standard normal ``z``.

        Args:
            size: Output shape, or None for a single float

        Returns:
            A float, or an array of shape ``size``
        """
        if size is None:
            return self._mean + self._source.draw() * self.standard_deviation
        return self._mean + self._source.standard_normal(size) * self.standard_deviation

    def __repr__(self) -> str:
        return f"UnivariateGaussian(mean={self._mean}, variance={self._variance})"


class MultivariateGaussian(BaseDistribution):
    """Normal distribution on ``dimension``-dimensional vectors.

    A new instance has a zero mean and identity covariance. In diagonal mode
    the covariance is a vector of per-axis variances and off-diagonal entries
    cannot be set; in full mode it is a symmetric matrix.

    Args:
        dimension: Number of components (at least 2)
        diagonal: Whether to use a diagonal covariance
        random_state: Seed, generator, or StandardNormalSource for sampling
        name: A descriptive name for the distribution

    Raises:
        DimensionError: If dimension is less than 2

    Examples:
        >>> gaussian = MultivariateGaussian(2)
        >>> round(gaussian.density([0.0, 0.0]), 6)
        0.159155
    """

    def __init__(self,
                 dimension: int,
                 diagonal: bool = True,
                 random_state: Union[SeedLike, StandardNormalSource] = None,
                 name: str = "MultivariateGaussian"):
        dimension = validate_dimension(dimension)
        super().__init__(name=name, random_state=random_state)

        self._dimension = dimension
        self._mean = np.zeros(dimension)
        covariance_type = DiagonalCovariance if diagonal else FullCovariance
        self._covariance: CovarianceModel = covariance_type.identity(dimension)

        # Derived state is published and discarded under this lock
        self._derived: Optional[DerivedState] = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_diagonal(self) -> bool:
        return isinstance(self._covariance, DiagonalCovariance)

    @property
    def mean(self) -> np.ndarray:
        return self._mean.copy()

    @mean.setter
    def mean(self, value: VectorLike) -> None:
        self.set_mean(value)

    @property
    def covariance(self) -> np.ndarray:
        """Dense ``dimension`` x ``dimension`` copy of the covariance."""
        return self._covariance.to_matrix()

    @property
    def has_derived_state(self) -> bool:
        """True when the inverse covariance and normalizer are cached."""
        return self._derived is not None

    @property
    def normalizer(self) -> float:
        """``1 / ((2*pi)**(d/2) * sqrt(det(covariance)))``, deriving it if needed."""
        return self._derive_state().density_normalizer()

    @property
    def inverse_covariance(self) -> np.ndarray:
        """Dense copy of the inverse covariance, deriving it if needed."""
        inverse = self._derive_state().inverse
        return np.diag(inverse) if inverse.ndim == 1 else inverse.copy()

    def covariance_entry(self, row: int, column: int) -> float:
        """Covariance between axes ``row`` and ``column``.

        Raises:
            BadVarianceValueError: If either index is out of range
        """
        row = validate_axis_index(row, self._dimension, "row")
        column = validate_axis_index(column, self._dimension, "column")
        return self._covariance.entry(row, column)

    def set_mean(self, mean: VectorLike) -> None:
        """Replace the mean vector. Does not affect the derived state.

        Raises:
            DimensionError: If the length differs from the dimension
        """
        self._mean = validate_vector(mean, self._dimension, "mean")

    def set_covariance_entry(self, row: int, column: int, value: float) -> None:
        """Set the covariance at ``(row, column)`` and ``(column, row)``.

        Raises:
            BadVarianceValueError: If value is negative or an index is out of range
            DiagonalCovarianceOnlyError: If ``row != column`` on a diagonal covariance
        """
        value = validate_variance(value, "covariance")
        row = validate_axis_index(row, self._dimension, "row")
        column = validate_axis_index(column, self._dimension, "column")
        with self._lock:
            self._covariance.set_entry(row, column, value)
            self._invalidate()

    def set_covariance_matrix(self, values: MatrixLike) -> None:
        """Replace the whole covariance.

        A diagonal covariance takes ``dimension`` variances. A full covariance
        takes a ``(dimension, dimension)`` matrix, or ``dimension**2`` values in
        column-major order; an asymmetric matrix is averaged with its
        transpose and a NumericWarning is issued.

        Raises:
            DiagonalCovarianceOnlyError: If a diagonal covariance gets any
                other shape
            DimensionError: If a full covariance gets a wrongly sized input
            BadVarianceValueError: If a variance is negative
        """
        with self._lock:
            self._covariance.replace(values)
            self._invalidate()

    def _invalidate(self) -> None:
        if self._derived is not None:
            logger.debug(f"Discarding derived state of {self._name}")
        self._derived = None

    def _derive_state(self) -> DerivedState:
        derived = self._derived
        if derived is None:
            with self._lock:
                derived = self._derived
                if derived is None:
                    logger.debug(
                        f"Deriving {'diagonal' if self.is_diagonal else 'full'} covariance "
                        f"state for {self._name} (dimension={self._dimension})"
                    )
                    derived = self._covariance.derive()
                    self._derived = derived
        return derived

    def _quadratic_forms(self, x: Any) -> Tuple[np.ndarray, DerivedState, bool]:
        points, single = validate_points(x, self._dimension)
        derived = self._derive_state()
        relative = points - self._mean
        return self._covariance.quadratic_forms(relative, derived), derived, single

    def density(self, x: Any) -> ScalarOrArray:
        """Compute the probability density at one point or a batch of points.

        Args:
            x: A vector of length ``dimension`` or an array of shape
                ``(n, dimension)``

        Returns:
            The density as a float for one point, else an array of ``n`` values

        Raises:
            DimensionError: If x does not match the dimension
            InverseError: If a full covariance is not positive definite
            ZeroInVarianceError: If the covariance determinant is zero, or so
                small that the normalizing denominator underflows
        """
        quadratic, derived, single = self._quadratic_forms(x)
        values = np.exp(-0.5 * quadratic) * derived.density_normalizer()
        return float(values[0]) if single else values

    def log_density(self, x: Any) -> ScalarOrArray:
        """Compute the log density, staying finite where ``density`` underflows.

        Raises:
            ZeroInVarianceError: If a variance is exactly zero
        """
        quadratic, derived, single = self._quadratic_forms(x)
        values = derived.log_normalizer - 0.5 * quadratic
        return float(values[0]) if single else values

    def sampling_transform(self) -> np.ndarray:
        """Transform that maps standard normal vectors onto this covariance.

        Returns:
            The square roots of the variances (diagonal covariance), or a
            matrix whose rows are the covariance eigenvectors scaled by the
            square roots of their eigenvalues (full covariance)

        Raises:
            SVDParameterError: If the decomposition rejects the covariance
            SVDConvergenceError: If the decomposition does not converge
        """
        with self._lock:
            return self._covariance.sampling_transform()

    def sample(self, count: int) -> np.ndarray:
        """Draw ``count`` independent vectors from the distribution.

        Each vector is ``dimension`` standard normal draws passed through the
        sampling transform and shifted by the mean.

        Args:
            count: Number of vectors to draw

        Returns:
            np.ndarray: Array of shape ``(count, dimension)``

        Raises:
            ParameterError: If count is not a non-negative integer
            SVDParameterError: If the decomposition rejects the covariance
            SVDConvergenceError: If the decomposition does not converge
        """
        count = validate_count(count)
        transform = self.sampling_transform()
        standard = self._source.standard_normal((count, self._dimension))
        return self._covariance.apply_transform(standard, transform) + self._mean

    def __repr__(self) -> str:
        mode = "diagonal" if self.is_diagonal else "full"
        return f"MultivariateGaussian(dimension={self._dimension}, covariance={mode})"


def create_univariate_gaussian(mean: float = 0.0,
                               variance: float = 1.0,
                               random_state: Union[SeedLike, StandardNormalSource] = None
                               ) -> UnivariateGaussian:
    """Create a univariate Gaussian with the specified parameters.

    Raises:
        BadVarianceValueError: If variance is negative
    """
    return UnivariateGaussian(mean=mean, variance=variance, random_state=random_state)


def create_multivariate_gaussian(mean: VectorLike,
                                 covariance: MatrixLike,
                                 random_state: Union[SeedLike, StandardNormalSource] = None
                                 ) -> MultivariateGaussian:
    """Create a multivariate Gaussian from a mean and a covariance.

    A 1D covariance is taken as the variances of a diagonal covariance;
    anything else builds a full covariance.

    Raises:
        DimensionError: If the mean has fewer than 2 entries or the covariance
            does not match its length
    """
    mean = ensure_array(mean, "mean")
    covariance = ensure_array(covariance, "covariance")
    gaussian = MultivariateGaussian(
        dimension=mean.shape[0] if mean.ndim == 1 else mean.size,
        diagonal=covariance.ndim == 1,
        random_state=random_state
    )
    gaussian.set_mean(mean)
    gaussian.set_covariance_matrix(covariance)
    return gaussian
