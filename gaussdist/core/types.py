# gaussdist/core/types.py

"""
Core type annotations for gaussdist.

Type aliases used across the package to document the shape and meaning of
the arrays passed between the distribution models and the linear-algebra
helpers.
"""

from typing import Any, Dict, Literal, Sequence, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array

# Specialized array types
CovarianceMatrix = np.ndarray  # Symmetric positive (semi-)definite matrix
TriangularMatrix = np.ndarray  # Upper triangular Cholesky factor
VarianceVector = np.ndarray  # Per-axis variances of a diagonal covariance
ColumnMajorArray = np.ndarray  # Flat d*d array in Fortran order

# Anything that can be coerced into a float64 vector or matrix
VectorLike = Union[np.ndarray, pd.Series, Sequence[float]]
MatrixLike = Union[np.ndarray, pd.DataFrame, Sequence[Sequence[float]], Sequence[float]]
ScalarOrArray = Union[float, np.ndarray]

# Seed or generator accepted wherever randomness is consumed
SeedLike = Union[None, int, np.random.Generator]

# Configuration types
ConfigDict = Dict[str, Any]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
SVDDriver = Literal["gesdd", "gesvd"]
