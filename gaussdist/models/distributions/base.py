'''
Base class for the Gaussian distributions in gaussdist.

Defines the interface shared by the univariate and multivariate models:
density and log-density evaluation, log-likelihood of a data set, and random
sampling through a caller-owned StandardNormalSource.
'''

import abc
from typing import Any, Union

import numpy as np

from gaussdist.core.types import ScalarOrArray, SeedLike
from gaussdist.models.distributions.standard_normal import (
    StandardNormalSource, resolve_source
)


class BaseDistribution(abc.ABC):
    """Base class for all distributions in gaussdist.

    Attributes:
        name: A descriptive name for the distribution
        random_source: The StandardNormalSource used for sampling
    """

    def __init__(self,
                 name: str = "Distribution",
                 random_state: Union[SeedLike, StandardNormalSource] = None):
        """Initialize the distribution.

        Args:
            name: A descriptive name for the distribution
            random_state: Seed, ``numpy.random.Generator``, or an existing
                StandardNormalSource to draw samples from
        """
        self._name = name
        self._source = resolve_source(random_state)

    @property
    def name(self) -> str:
        return self._name

    @property
    def random_source(self) -> StandardNormalSource:
        return self._source

    @random_source.setter
    def random_source(self, value: Union[SeedLike, StandardNormalSource]) -> None:
        self._source = resolve_source(value)

    @abc.abstractmethod
    def density(self, x: Any) -> ScalarOrArray:
        """Compute the probability density function.

        Args:
            x: Point or points to evaluate

        Returns:
            The density, as a float for a single point
        """

    @abc.abstractmethod
    def log_density(self, x: Any) -> ScalarOrArray:
        """Compute the natural logarithm of the probability density function."""

    @abc.abstractmethod
    def sample(self, *args: Any, **kwargs: Any) -> ScalarOrArray:
        """Draw random samples from the distribution."""

    def pdf(self, x: Any) -> ScalarOrArray:
        """Alias of ``density``."""
        return self.density(x)

    def loglikelihood(self, data: Any) -> float:
        """Compute the log-likelihood of a data set.

        Args:
            data: Observations, one per element (univariate) or row
                (multivariate)

        Returns:
            float: Sum of the log-densities of the observations
        """
        return float(np.sum(self.log_density(data)))

    def __str__(self) -> str:
        return self._name
