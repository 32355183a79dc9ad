"""
Layer specifications, output widths and trained layers.

Width rules (per model, fixed by spec position):
- a regressor contributes 1 column
- a classifier contributes n_classes columns, except in a binary problem
  on a non-terminal layer where only the positive-class column is kept
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from ..exceptions import ConfigurationError, ShapeMismatchError, TerminalRegressorError
from ..models.base import BaseModel
from ..models.registry import ModelRegistry

LayerSpec = Tuple[str, ...]


def model_output_width(is_regressor: bool, n_classes: int, is_last_layer: bool) -> int:
    if is_regressor:
        return 1
    if n_classes == 2 and not is_last_layer:
        return 1
    return n_classes


def model_widths(layer_spec: Sequence[str], n_classes: int, is_last_layer: bool) -> List[int]:
    """
    Output width of each model of a layer, in spec order.

    Raises:
        ModelSpecError: If a spec names an unknown model
    """
    return [
        model_output_width(ModelRegistry.is_regressor(spec), n_classes, is_last_layer)
        for spec in layer_spec
    ]


def estimate_output_width(layer_spec: Sequence[str], n_classes: int, is_last_layer: bool) -> int:
    """Total number of columns a layer produces."""
    return sum(model_widths(layer_spec, n_classes, is_last_layer))


def column_offsets(widths: Sequence[int]) -> List[int]:
    """Starting column of each model's block."""
    offsets, total = [], 0
    for width in widths:
        offsets.append(total)
        total += int(width)
    return offsets


def finite_block(block: np.ndarray) -> np.ndarray:
    """
    Return a model's output as a float matrix.

    Raises:
        ValueError: If any entry is NaN or infinite
    """
    block = np.asarray(block, dtype=np.float64)
    if block.ndim == 1:
        block = block.reshape(-1, 1)
    bad_rows = ~np.isfinite(block).all(axis=1)
    if bad_rows.any():
        raise ValueError(
            f"Model output has non-finite values in {int(bad_rows.sum())} of "
            f"{block.shape[0]} row(s)"
        )
    return block


def score_block(model: BaseModel, X) -> np.ndarray:
    """predict_proba of a fitted model, rejecting non-finite output."""
    return finite_block(model.predict_proba(X))


def collapse_block(block: np.ndarray, n_classes: int, is_last_layer: bool) -> np.ndarray:
    """Keep only the positive-class column of a binary block on non-terminal layers."""
    if not is_last_layer and n_classes == 2 and block.shape[1] == 2:
        return block[:, 1:2]
    return block


def validate_layers(
    layers: Sequence[Sequence[str]],
    n_classes: int,
    metric: str,
) -> List[int]:
    """
    Check a full layer configuration against a target before any training.

    Returns:
        Output width of every layer

    Raises:
        ConfigurationError: If there are fewer than two layers or a layer is empty
        ModelSpecError: If a spec is malformed, names an unknown model or an
            unsupported parameter
        TerminalRegressorError: If the last layer holds a regressor outside
            the binary auc case
        ShapeMismatchError: If the last layer's width is not a multiple of n_classes
    """
    if len(layers) < 2:
        raise ConfigurationError(
            f"StackNet needs at least 2 layers, got {len(layers)}"
        )

    widths: List[int] = []
    for level, layer_spec in enumerate(layers, start=1):
        if not layer_spec:
            raise ConfigurationError(f"Layer {level} has no models")
        # Building each model surfaces unknown names and unsupported parameters
        for spec in layer_spec:
            ModelRegistry.create_from_spec(spec)
        widths.append(estimate_output_width(layer_spec, n_classes, level == len(layers)))

    last = len(layers)
    regressor_allowed = metric == "auc" and n_classes == 2
    for spec in layers[-1]:
        if ModelRegistry.is_regressor(spec) and not regressor_allowed:
            raise TerminalRegressorError(spec, last)

    if widths[-1] % n_classes != 0:
        raise ShapeMismatchError(
            f"Number of the last layer's output columns ({widths[-1]}) needs to be "
            f"a multiple of the number of classes ({n_classes})"
        )
    return widths


@dataclass(frozen=True)
class TrainedLayer:
    """
    Final-refit models of one layer, in spec order.

    Attributes:
        level: 1-based layer number
        specs: Model specification strings
        models: Trained models (same order as specs)
        widths: Output columns per model
    """
    level: int
    specs: LayerSpec
    models: Tuple[BaseModel, ...]
    widths: Tuple[int, ...]

    @property
    def output_width(self) -> int:
        return int(sum(self.widths))

    def __len__(self) -> int:
        return len(self.models)


__all__ = [
    "LayerSpec",
    "TrainedLayer",
    "model_output_width",
    "model_widths",
    "estimate_output_width",
    "column_offsets",
    "collapse_block",
    "finite_block",
    "score_block",
    "validate_layers",
]
