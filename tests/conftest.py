'''
Pytest configuration and fixtures for the gaussdist test suite.

This module provides seeded random sources, reference covariance matrices and
Hypothesis strategies shared across the test modules, and restores the
package configuration after every test.
'''

import numpy as np
import pytest
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

from gaussdist.core.config import reset_config
from gaussdist.models.distributions import StandardNormalSource


# ---- Configuration Isolation ----

@pytest.fixture
def restore_config():
    """Reset runtime configuration changes made by the requesting test."""
    yield
    reset_config()


# ---- Random Sources ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def source() -> StandardNormalSource:
    """Provide a seeded standard normal source."""
    return StandardNormalSource(seed=42)


# ---- Covariance Fixtures ----

@pytest.fixture
def correlated_covariance() -> np.ndarray:
    """A 3x3 positive definite covariance with non-zero correlations."""
    return np.array([
        [2.0, 0.6, 0.3],
        [0.6, 1.0, 0.2],
        [0.3, 0.2, 0.5]
    ])


@pytest.fixture
def indefinite_covariance() -> np.ndarray:
    """A symmetric 2x2 matrix with eigenvalues 3 and -1."""
    return np.array([
        [1.0, 2.0],
        [2.0, 1.0]
    ])


# ---- Hypothesis Strategies ----

def spd_matrices(dimension: int) -> st.SearchStrategy:
    """Strategy producing well-conditioned symmetric positive definite matrices."""
    elements = st.floats(min_value=-2.0, max_value=2.0, allow_nan=False, allow_infinity=False)
    return arrays(np.float64, (dimension, dimension), elements=elements).map(
        lambda a: a @ a.T + dimension * np.eye(dimension)
    )


def variance_vectors(dimension: int) -> st.SearchStrategy:
    """Strategy producing strictly positive variance vectors."""
    elements = st.floats(min_value=0.1, max_value=10.0, allow_nan=False, allow_infinity=False)
    return arrays(np.float64, (dimension,), elements=elements)


def finite_vectors(dimension: int, bound: float = 5.0) -> st.SearchStrategy:
    """Strategy producing finite vectors with entries in ``[-bound, bound]``."""
    elements = st.floats(min_value=-bound, max_value=bound, allow_nan=False, allow_infinity=False)
    return arrays(np.float64, (dimension,), elements=elements)

