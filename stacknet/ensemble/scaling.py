"""
ProbabilityScaler - turn summed terminal-layer scores into probabilities.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from ..exceptions import ShapeMismatchError

logger = logging.getLogger(__name__)


class ProbabilityScaler:
    """
    Row-wise probability scaling.

    scale() divides every row by its sum. A row summing to zero (every
    model scored every class at 0) becomes the uniform distribution and is
    reported with a warning. Rows with NaN or infinite scores, or a negative
    sum, cannot be a probability block and are rejected.
    """

    def scale(self, scores: np.ndarray) -> np.ndarray:
        """
        Normalize each row to sum to 1.

        Raises:
            ShapeMismatchError: If scores is not 2D
            ValueError: If a row is non-finite or sums to a negative value
        """
        scores = np.asarray(scores, dtype=np.float64)
        if scores.ndim != 2:
            raise ShapeMismatchError(f"scores must be 2D, got shape {scores.shape}")

        finite = np.isfinite(scores).all(axis=1)
        if not finite.all():
            bad = int(np.argmin(finite))
            raise ValueError(
                f"Row {bad} of the terminal scores has non-finite values; "
                f"cannot scale to probabilities"
            )

        sums = scores.sum(axis=1, keepdims=True)
        if np.any(sums < 0):
            bad = int(np.argmax(sums.ravel() < 0))
            raise ValueError(
                f"Row {bad} of the terminal scores sums to {sums[bad, 0]:.6g}; "
                f"cannot scale to probabilities"
            )

        zero = sums.ravel() == 0
        out = np.empty_like(scores)
        out[~zero] = scores[~zero] / sums[~zero]
        if zero.any():
            logger.warning(
                f"{int(zero.sum())} row(s) have all-zero terminal scores; "
                f"using a uniform distribution"
            )
            out[zero] = 1.0 / scores.shape[1]
        return out

    def softmax_row(self, row: np.ndarray) -> Tuple[np.ndarray, int]:
        """
        Numerically stable softmax of one score vector.

        Returns:
            (probabilities, index of the largest probability)
        """
        row = np.asarray(row, dtype=np.float64).ravel()
        exp = np.exp(row - row.max())
        probs = exp / exp.sum()
        return probs, int(np.argmax(probs))


__all__ = ["ProbabilityScaler"]
