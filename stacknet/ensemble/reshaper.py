"""
Build the input of the next layer from the current input and the meta-features.
"""
from __future__ import annotations

import numpy as np

from ..exceptions import ShapeMismatchError
from .matrix import FeatureMatrix, append_columns


def reshape(current: FeatureMatrix, meta: np.ndarray, restacking: bool) -> FeatureMatrix:
    """
    Next-layer input.

    With restacking the meta-features are appended to the right of the
    current input (which itself already carries every earlier layer's
    output); otherwise they replace it. Row order and count are preserved.

    Raises:
        ShapeMismatchError: If the row counts differ
    """
    if current.shape[0] != meta.shape[0]:
        raise ShapeMismatchError(
            f"Meta-features have {meta.shape[0]} rows but the layer input has "
            f"{current.shape[0]}"
        )
    if restacking:
        return append_columns(current, meta)
    return meta


__all__ = ["reshape"]
