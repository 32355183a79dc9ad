"""
Fold partitioning for k-fold forward training.
"""
from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np
from sklearn.model_selection import KFold

from ..exceptions import ConfigurationError


def kfold_indices(
    n_samples: int,
    n_folds: int,
    seed: int,
) -> Iterator[Tuple[np.ndarray, np.ndarray]]:
    """
    Yield (train_indices, test_indices) for each of n_folds shuffled folds.

    The test sets are disjoint and together cover every row exactly once.
    The partition depends only on n_samples, n_folds and seed.

    Raises:
        ConfigurationError: If n_folds < 2 or exceeds n_samples
    """
    if n_folds < 2:
        raise ConfigurationError(f"folds must be >= 2, got {n_folds}")
    if n_folds > n_samples:
        raise ConfigurationError(
            f"Cannot split {n_samples} rows into {n_folds} folds"
        )
    splitter = KFold(n_splits=n_folds, shuffle=True, random_state=seed)
    yield from splitter.split(np.zeros((n_samples, 1)))


__all__ = ["kfold_indices"]
