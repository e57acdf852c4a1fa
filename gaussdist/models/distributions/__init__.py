# gaussdist/models/distributions/__init__.py
"""
gaussdist Distributions Module

Key components:
- StandardNormalSource, the polar-method generator behind all sampling
- UnivariateGaussian with scalar mean and variance
- MultivariateGaussian with a diagonal or full covariance
- DiagonalCovariance and FullCovariance, the covariance representations
  held by the multivariate model
"""

import logging

# Set up module-level logger
logger = logging.getLogger("gaussdist.models.distributions")

from .base import BaseDistribution
from .covariance import CovarianceModel, DerivedState, DiagonalCovariance, FullCovariance
from .normal import (
    MultivariateGaussian,
    UnivariateGaussian,
    create_multivariate_gaussian,
    create_univariate_gaussian
)
from .standard_normal import StandardNormalSource, resolve_source

__all__ = [
    'BaseDistribution',
    'CovarianceModel',
    'DerivedState',
    'DiagonalCovariance',
    'FullCovariance',
    'MultivariateGaussian',
    'UnivariateGaussian',
    'StandardNormalSource',
    'create_multivariate_gaussian',
    'create_univariate_gaussian',
    'resolve_source',
]
