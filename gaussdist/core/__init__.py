"""
gaussdist Core Module

Exception hierarchy, type aliases, input validation and configuration
management shared by the distribution models.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("gaussdist.core")

from .config import (
    ConfigManager,
    get_config,
    reset_config,
    save_config,
    set_config
)
from .exceptions import (
    BadVarianceValueError,
    ConfigurationError,
    DiagonalCovarianceOnlyError,
    DimensionError,
    GaussianError,
    GaussianWarning,
    InverseError,
    NumericError,
    NumericWarning,
    ParameterError,
    SVDConvergenceError,
    SVDParameterError,
    ZeroInVarianceError
)
from .validation import (
    MIN_DIMENSION,
    ensure_array,
    validate_dimension,
    validate_points,
    validate_variance,
    validate_vector
)

__all__ = [
    # Configuration
    'ConfigManager',
    'get_config',
    'set_config',
    'reset_config',
    'save_config',

    # Exceptions
    'GaussianError',
    'GaussianWarning',
    'DimensionError',
    'ParameterError',
    'BadVarianceValueError',
    'DiagonalCovarianceOnlyError',
    'NumericError',
    'NumericWarning',
    'ZeroInVarianceError',
    'InverseError',
    'SVDParameterError',
    'SVDConvergenceError',
    'ConfigurationError',

    # Validation
    'MIN_DIMENSION',
    'ensure_array',
    'validate_dimension',
    'validate_points',
    'validate_variance',
    'validate_vector',
]
