# tests/test_exceptions.py
"""
Tests for the exception hierarchy and its formatting helpers.
"""

import warnings

import numpy as np
import pytest

from gaussdist.core.exceptions import (
    BadVarianceValueError, ConfigurationError, DiagonalCovarianceOnlyError,
    DimensionError, GaussianError, GaussianWarning, InverseError, NumericError,
    NumericWarning, ParameterError, SVDConvergenceError, SVDParameterError,
    ZeroInVarianceError, raise_bad_variance, raise_dimension_error, warn_numeric
)


@pytest.mark.parametrize("error_class, parent", [
    (DimensionError, GaussianError),
    (ParameterError, GaussianError),
    (BadVarianceValueError, ParameterError),
    (DiagonalCovarianceOnlyError, ParameterError),
    (NumericError, GaussianError),
    (ZeroInVarianceError, NumericError),
    (InverseError, NumericError),
    (SVDParameterError, NumericError),
    (SVDConvergenceError, NumericError),
    (ConfigurationError, GaussianError),
])
def test_hierarchy(error_class, parent):
    assert issubclass(error_class, parent)
    assert issubclass(error_class, Exception)


def test_message_includes_details_and_context():
    error = GaussianError("Something failed", details="More detail", context={"Key": "value"})
    text = str(error)
    assert text.startswith("Something failed")
    assert "Details: More detail" in text
    assert "Key: value" in text
    assert error.message == "Something failed"


def test_location_points_at_raising_code():
    with pytest.raises(DimensionError) as excinfo:
        raise_dimension_error("bad shape", array_name="x", expected_shape=(2,), actual_shape=(3,))
    assert "Location: test_exceptions.py" in str(excinfo.value)


def test_dimension_error_attributes():
    error = DimensionError("bad shape", array_name="mean", expected_shape=(3,), actual_shape=(2,))
    assert error.array_name == "mean"
    assert error.expected_shape == (3,)
    assert error.actual_shape == (2,)
    assert "Array: mean" in str(error)


def test_raise_bad_variance():
    with pytest.raises(BadVarianceValueError) as excinfo:
        raise_bad_variance("negative", param_name="variance", param_value=-1.0, constraint=">= 0")
    assert excinfo.value.param_name == "variance"
    assert excinfo.value.param_value == -1.0
    assert excinfo.value.constraint == ">= 0"


def test_numeric_error_carries_info():
    error = InverseError("not positive definite", operation="cholesky factorization", info=2)
    assert error.info == 2
    assert "Info: 2" in str(error)


def test_numeric_error_truncates_large_arrays():
    error = NumericError("failed", values=np.zeros((5, 5)))
    assert "Array with shape (5, 5)" in str(error)


def test_warn_numeric():
    with pytest.warns(NumericWarning) as record:
        warn_numeric("adjusted", operation="symmetrize", issue="asymmetric input", value=0.1)
    warning = record[0].message
    assert isinstance(warning, GaussianWarning)
    assert warning.operation == "symmetrize"
    assert warning.value == 0.1


def test_numeric_warning_is_user_warning():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        warn_numeric("adjusted")
    assert issubclass(caught[0].category, UserWarning)
