# gaussdist/core/validation.py

"""
Validation utilities for gaussdist.

Functions here coerce caller input (lists, NumPy arrays, pandas objects) into
contiguous float64 arrays and enforce the dimensional and sign constraints the
distribution models rely on. Each failure raises the matching exception from
``gaussdist.core.exceptions`` with the offending name and shape in its context.
"""

from typing import Any, Tuple

import numpy as np
import pandas as pd

from gaussdist.core.exceptions import (
    ParameterError, raise_bad_variance, raise_dimension_error
)
from gaussdist.core.types import Matrix, Vector, VectorLike

# Smallest dimension a multivariate model supports
MIN_DIMENSION = 2


def ensure_array(data: Any, name: str = "array") -> np.ndarray:
    """Convert ``data`` to a contiguous float64 NumPy array.

    pandas Series and DataFrames are converted through their underlying
    values, so the index is dropped.

    Raises:
        TypeError: If the data cannot be interpreted as a numeric array
    """
    if isinstance(data, (pd.Series, pd.DataFrame)):
        data = data.to_numpy()
    try:
        return np.ascontiguousarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{name} must be numeric, got {type(data).__name__}") from e


def validate_dimension(dimension: Any) -> int:
    """Validate the dimension of a multivariate model.

    Raises:
        DimensionError: If dimension is not an integer of at least 2
    """
    if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)):
        raise_dimension_error(
            f"dimension must be an integer, got {type(dimension).__name__}",
            array_name="dimension",
            expected_shape=f">= {MIN_DIMENSION}"
        )
    if dimension < MIN_DIMENSION:
        raise_dimension_error(
            f"dimension must be at least {MIN_DIMENSION}, got {dimension}",
            array_name="dimension",
            expected_shape=f">= {MIN_DIMENSION}"
        )
    return int(dimension)


def validate_vector(values: VectorLike, expected_length: int, name: str = "vector") -> Vector:
    """Validate that ``values`` is a 1D array of ``expected_length``.

    Returns:
        np.ndarray: A float64 copy of the vector

    Raises:
        DimensionError: If the values are not 1D or have the wrong length
    """
    array = ensure_array(values, name)
    if array.ndim != 1 or array.shape[0] != expected_length:
        raise_dimension_error(
            f"{name} must have length {expected_length}, got shape {array.shape}",
            array_name=name,
            expected_shape=(expected_length,),
            actual_shape=array.shape
        )
    return array.copy()


def validate_points(values: Any, dimension: int, name: str = "x") -> Tuple[Matrix, bool]:
    """Validate one point of length ``dimension`` or a batch of shape ``(n, dimension)``.

    Returns:
        Tuple of the points as a 2D ``(n, dimension)`` array and a flag that
        is True when a single 1D point was supplied

    Raises:
        DimensionError: If the trailing axis does not match ``dimension``
    """
    array = ensure_array(values, name)
    if array.ndim == 1 and array.shape[0] == dimension:
        return array.reshape(1, dimension), True
    if array.ndim == 2 and array.shape[1] == dimension:
        return array, False
    raise_dimension_error(
        f"{name} must have length {dimension} or shape (n, {dimension}), got shape {array.shape}",
        array_name=name,
        expected_shape=f"({dimension},) or (n, {dimension})",
        actual_shape=array.shape
    )


def validate_variance(value: Any, name: str = "variance") -> float:
    """Validate a single variance.

    Raises:
        BadVarianceValueError: If the variance is negative or not a number
    """
    variance = float(value)
    if np.isnan(variance) or variance < 0.0:
        raise_bad_variance(
            f"{name} must be non-negative, got {variance}",
            param_name=name,
            param_value=variance,
            constraint=">= 0"
        )
    return variance


def validate_variances(values: np.ndarray, name: str = "variances") -> np.ndarray:
    """Validate that every entry of a variance array is non-negative.

    Raises:
        BadVarianceValueError: If any entry is negative or NaN
    """
    bad = np.isnan(values) | (values < 0.0)
    if np.any(bad):
        index = tuple(int(i) for i in np.argwhere(bad)[0])
        raise_bad_variance(
            f"{name} must be non-negative, got {values[index]} at index {index}",
            param_name=name,
            param_value=float(values[index]),
            constraint=">= 0",
            context={"Index": index}
        )
    return values


def validate_axis_index(index: Any, dimension: int, name: str = "index") -> int:
    """Validate a covariance axis index.

    Raises:
        BadVarianceValueError: If the index lies outside ``[0, dimension)``
    """
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)) \
            or not 0 <= index < dimension:
        raise_bad_variance(
            f"{name} must be an integer in [0, {dimension}), got {index}",
            param_name=name,
            param_value=index,
            constraint=f"0 <= {name} < {dimension}"
        )
    return int(index)


def validate_count(count: Any, name: str = "count") -> int:
    """Validate a sample count.

    Raises:
        ParameterError: If count is not a non-negative integer
    """
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count < 0:
        raise ParameterError(
            f"{name} must be a non-negative integer, got {count}",
            param_name=name,
            param_value=count,
            constraint=">= 0"
        )
    return int(count)
