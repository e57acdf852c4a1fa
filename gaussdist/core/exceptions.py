'''
Custom exception classes for gaussdist.

This module defines the hierarchy of exception classes raised by the Gaussian
distribution models. Each exception carries a primary message, optional
details, and a context dictionary describing the offending input, so that a
caller can see which argument, which shape, or which factorization step was
responsible for the failure.

The hierarchy has three branches below the common base class:

- DimensionError for vector and matrix length mismatches
- ParameterError for invalid variances and covariance writes that the
  current covariance mode does not allow
- NumericError for failures of the linear-algebra kernels (singular or
  non-positive-definite covariance, rejected or non-convergent SVD)
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np


class GaussianError(Exception):
    """Base exception class for all gaussdist errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the GaussianError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        # Walk back past the raise_* helpers so the location points at the caller
        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                while frame and (frame.f_code.co_name == "__init__"
                                 or frame.f_code.co_name.startswith("raise_")):
                    frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame

        super().__init__(full_message)


class DimensionError(GaussianError):
    """Exception raised when a vector or matrix does not match the model dimension.

    Also raised when a multivariate model is constructed with fewer than two
    dimensions.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class ParameterError(GaussianError):
    """Exception raised for distribution parameters that violate a constraint.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class BadVarianceValueError(ParameterError):
    """Negative variance, or a covariance axis index outside ``[0, dimension)``."""


class DiagonalCovarianceOnlyError(ParameterError):
    """Off-diagonal covariance write, or full-size matrix, on a diagonal model."""


class NumericError(GaussianError):
    """Exception raised when a numerical computation on the covariance fails.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error
        info: The status code reported by the linear-algebra routine, if any
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 info: Optional[int] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type
        self.info = info

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                # Truncate large arrays for readability
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type
        if info is not None:
            context_dict["Info"] = info

        super().__init__(message, details, context_dict)


class ZeroInVarianceError(NumericError):
    """The density normalizing denominator evaluated to exactly zero."""


class InverseError(NumericError):
    """The covariance matrix is not positive definite, or could not be inverted."""


class SVDParameterError(NumericError):
    """The singular value decomposition routine rejected its arguments."""


class SVDConvergenceError(NumericError):
    """The singular value decomposition routine failed to converge."""


class ConfigurationError(GaussianError):
    """Exception raised for invalid configuration settings.

    Attributes:
        setting: The configuration setting that caused the error
        value: The invalid value
        issue: Description of the issue with the configuration
    """

    def __init__(self,
                 message: str,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.setting = setting
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class GaussianWarning(UserWarning):
    """Base warning class for gaussdist.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class NumericWarning(GaussianWarning):
    """Warning for inputs that were numerically adjusted before use.

    Attributes:
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that triggered the adjustment
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_dimension_error(message: str,
                          array_name: Optional[str] = None,
                          expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                          actual_shape: Optional[Tuple[int, ...]] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionError with consistent formatting.

    Raises:
        DimensionError: The formatted dimension error
    """
    raise DimensionError(message, array_name, expected_shape, actual_shape, details, context)


def raise_bad_variance(message: str,
                       param_name: Optional[str] = None,
                       param_value: Optional[Any] = None,
                       constraint: Optional[str] = None,
                       details: Optional[str] = None,
                       context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a BadVarianceValueError with consistent formatting.

    Raises:
        BadVarianceValueError: The formatted variance error
    """
    raise BadVarianceValueError(message, param_name, param_value, constraint, details, context)


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting."""
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=3
    )
