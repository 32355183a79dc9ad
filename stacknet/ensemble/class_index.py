"""
ClassIndex - bijection between target labels and dense class ids.
"""
from __future__ import annotations

import logging
from typing import Any, Tuple

import numpy as np

from ..exceptions import TargetError

logger = logging.getLogger(__name__)


def _parse_number(text: str) -> Any:
    value = float(text)
    return int(value) if value.is_integer() else value


def _numeric_order(labels: np.ndarray) -> np.ndarray:
    """Order text labels by value when every one of them parses as a number."""
    if labels.dtype.kind in "iufb":
        return labels
    try:
        values = [float(str(label)) for label in labels.tolist()]
    except ValueError:
        return labels
    order = sorted(range(len(labels)), key=lambda i: (values[i], str(labels[i])))
    return labels[order]


class ClassIndex:
    """
    Sorted distinct labels mapped to ids ``0..n_classes-1``.

    Numeric labels, and text labels that all parse as numbers, are sorted by
    value; other text labels are sorted as strings.

    Built once from the training target and never modified. decode() returns
    the original labels when they are numeric (or strings that parse as
    numbers); otherwise predictions are reported as class ids.

    Attributes:
        labels: Distinct labels in sorted order (index = class id)
        names: String form of every label
    """

    def __init__(self, labels: np.ndarray) -> None:
        self._labels = np.array(labels)
        self._labels.setflags(write=False)
        self._names: Tuple[str, ...] = tuple(str(label) for label in self._labels)
        self._lookup = {label: i for i, label in enumerate(self._labels.tolist())}
        self._decoded, self._numeric = self._decode_table()

    @classmethod
    def from_target(cls, y: Any) -> "ClassIndex":
        """
        Build the index from a training target.

        Raises:
            TargetError: If the target is empty, not 1D, or has fewer than 2 classes
        """
        arr = np.asarray(y)
        if arr.ndim == 2 and arr.shape[1] == 1:
            arr = arr.ravel()
        if arr.ndim != 1:
            raise TargetError(f"Target must be 1D, got shape {arr.shape}")
        if arr.size == 0:
            raise TargetError("There is nothing to train on: target is empty")
        if arr.dtype.kind == "f" and np.isnan(arr).any():
            raise TargetError("Target contains NaN values")

        labels = _numeric_order(np.unique(arr))
        if len(labels) < 2:
            raise TargetError(
                f"Target needs at least 2 distinct classes, found {len(labels)}: {labels.tolist()}"
            )
        return cls(labels)

    @property
    def labels(self) -> np.ndarray:
        return self._labels

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def n_classes(self) -> int:
        return len(self._labels)

    @property
    def numeric(self) -> bool:
        """Whether decode() returns labels rather than class ids."""
        return self._numeric

    def _decode_table(self) -> Tuple[np.ndarray, bool]:
        if self._labels.dtype.kind in "iufb":
            return self._labels, True
        try:
            return np.asarray([_parse_number(name) for name in self._names]), True
        except ValueError:
            logger.info(
                f"Class labels {list(self._names)} are not numeric; "
                f"predictions are reported as class ids"
            )
            return np.arange(self.n_classes, dtype=np.int64), False

    def encode(self, y: Any) -> np.ndarray:
        """
        Map labels to class ids.

        Raises:
            TargetError: If a label was not seen when the index was built
        """
        arr = np.asarray(y).ravel()
        try:
            ids = [self._lookup[value] for value in arr.tolist()]
        except KeyError as e:
            raise TargetError(f"Unknown class label {e.args[0]!r}") from e
        return np.asarray(ids, dtype=np.int64)

    def decode(self, ids: Any) -> np.ndarray:
        """Map class ids back to labels (or ids for non-numeric labels)."""
        return self._decoded[np.asarray(ids, dtype=np.int64)]

    def __len__(self) -> int:
        return self.n_classes

    def __repr__(self) -> str:
        return f"ClassIndex(labels={list(self._names)})"


__all__ = ["ClassIndex"]
