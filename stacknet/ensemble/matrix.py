"""
Feature matrix helpers.

The ensemble accepts three storage layouts and treats them through one API:

- dense row-major numpy arrays
- row-oriented sparse matrices (any scipy.sparse format, converted to CSR)
- column-block frames (pandas DataFrame, converted to a dense array)

Meta-features produced by a layer are always dense; with restacking they are
appended to the layer input, which keeps the input's sparsity.
"""
from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd
import scipy.sparse as sp

from ..exceptions import ShapeMismatchError

FeatureMatrix = Any  # np.ndarray | sp.csr_matrix


def as_feature_matrix(X: Any, name: str = "X") -> FeatureMatrix:
    """
    Normalize an input matrix to a float64 ndarray or CSR matrix.

    Raises:
        ShapeMismatchError: If the input is not two-dimensional or is empty
    """
    if isinstance(X, pd.DataFrame):
        matrix = X.to_numpy(dtype=np.float64)
    elif sp.issparse(X):
        matrix = sp.csr_matrix(X, dtype=np.float64)
    else:
        matrix = np.asarray(X, dtype=np.float64)

    if matrix.ndim != 2:
        raise ShapeMismatchError(
            f"{name} must be 2D (n_samples, n_features), got shape {matrix.shape}"
        )
    if matrix.shape[0] == 0:
        raise ShapeMismatchError(f"{name} has no rows")
    return matrix


def as_row_matrix(row: Any) -> FeatureMatrix:
    """Turn a single feature vector (1D array, sparse row or Series) into a 1-row matrix."""
    if isinstance(row, pd.Series):
        row = row.to_numpy(dtype=np.float64)
    if sp.issparse(row):
        return as_feature_matrix(row.reshape(1, -1), name="row")
    arr = np.asarray(row, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.shape[0] != 1:
        raise ShapeMismatchError(f"Expected a single row, got shape {arr.shape}")
    return as_feature_matrix(arr, name="row")


def n_rows(X: FeatureMatrix) -> int:
    return int(X.shape[0])


def n_columns(X: FeatureMatrix) -> int:
    return int(X.shape[1])


def take_rows(X: FeatureMatrix, indices: Sequence[int]) -> FeatureMatrix:
    """Select rows by position, preserving the storage layout."""
    return X[np.asarray(indices)]


def append_columns(left: FeatureMatrix, right: FeatureMatrix) -> FeatureMatrix:
    """
    Horizontally concatenate two matrices with the same row count.

    Raises:
        ShapeMismatchError: If the row counts differ
    """
    if left.shape[0] != right.shape[0]:
        raise ShapeMismatchError(
            f"Cannot append columns: {left.shape[0]} rows vs {right.shape[0]} rows"
        )
    if sp.issparse(left) or sp.issparse(right):
        return sp.hstack([left, right], format="csr")
    return np.hstack([left, right])


__all__ = [
    "FeatureMatrix",
    "as_feature_matrix",
    "as_row_matrix",
    "n_rows",
    "n_columns",
    "take_rows",
    "append_columns",
]
