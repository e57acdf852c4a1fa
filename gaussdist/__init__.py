# gaussdist/__init__.py
"""
gaussdist - Gaussian distributions for Python

Density evaluation and random sampling for normal distributions:

- StandardNormalSource: seedable Marsaglia polar-method generator
- UnivariateGaussian: scalar mean and variance
- MultivariateGaussian: mean vector with a diagonal or full covariance

Logging goes through the ``gaussdist`` logger, which carries only a
NullHandler until logging is configured, either by the application or through
the ``logging`` configuration section.
"""

import logging
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("gaussdist")
logger.addHandler(logging.NullHandler())

from .version import __version__, get_version_info

from . import core
from . import models
from . import utils

from .core.exceptions import (
    BadVarianceValueError,
    ConfigurationError,
    DiagonalCovarianceOnlyError,
    DimensionError,
    GaussianError,
    InverseError,
    NumericError,
    NumericWarning,
    ParameterError,
    SVDConvergenceError,
    SVDParameterError,
    ZeroInVarianceError
)
from .models.distributions import (
    MultivariateGaussian,
    StandardNormalSource,
    UnivariateGaussian,
    create_multivariate_gaussian,
    create_univariate_gaussian
)


def get_version() -> str:
    """
    Return the version of gaussdist.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for gaussdist.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # Distributions
    'StandardNormalSource',
    'UnivariateGaussian',
    'MultivariateGaussian',
    'create_univariate_gaussian',
    'create_multivariate_gaussian',

    # Exceptions
    'GaussianError',
    'DimensionError',
    'ParameterError',
    'BadVarianceValueError',
    'DiagonalCovarianceOnlyError',
    'NumericError',
    'ZeroInVarianceError',
    'InverseError',
    'SVDParameterError',
    'SVDConvergenceError',
    'ConfigurationError',
    'NumericWarning',

    # Public functions
    'get_version',
    'get_version_info',
    'set_log_level',
    '__version__',
]
