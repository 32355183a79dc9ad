"""
Diagnostic metrics for k-fold forward training.

Scores are reported for observability only; they never influence training.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np
from sklearn.metrics import accuracy_score, log_loss, mean_squared_error, roc_auc_score

# Probabilities are clipped before log loss so a hard 0 does not give inf
_EPS = 1e-15


def _as_class_proba(block: np.ndarray, n_classes: int) -> np.ndarray:
    if block.shape[1] == 1 and n_classes == 2:
        positive = np.clip(block[:, 0], 0.0, 1.0)
        return np.column_stack([1.0 - positive, positive])
    proba = np.clip(block, _EPS, None)
    return proba / proba.sum(axis=1, keepdims=True)


def logloss(y_true: np.ndarray, proba: np.ndarray, n_classes: int) -> float:
    proba = _as_class_proba(proba, n_classes)
    return float(log_loss(y_true, np.clip(proba, _EPS, 1.0), labels=np.arange(n_classes)))


def accuracy(y_true: np.ndarray, proba: np.ndarray, n_classes: int) -> float:
    proba = _as_class_proba(proba, n_classes)
    return float(accuracy_score(y_true, np.argmax(proba, axis=1)))


def auc(y_true: np.ndarray, scores: np.ndarray) -> float:
    """Binary ROC AUC of a positive-class score (NaN when y_true has a single class)."""
    if len(np.unique(y_true)) < 2:
        return float("nan")
    return float(roc_auc_score(y_true, scores))


def rmse(y_true: np.ndarray, predictions: np.ndarray) -> float:
    return float(np.sqrt(mean_squared_error(y_true, np.ravel(predictions))))


def fold_score(
    metric: str,
    y_true: np.ndarray,
    block: np.ndarray,
    n_classes: int,
    is_regressor: bool,
) -> Tuple[str, float]:
    """
    Score one model's fold predictions.

    Args:
        metric: Configured metric (logloss, accuracy or auc)
        y_true: Integer class ids of the fold rows
        block: The model's columns for the fold rows (1 column for regressors
            and collapsed binary classifiers, n_classes otherwise)
        n_classes: Number of classes
        is_regressor: Whether the block holds raw regression scores

    Returns:
        (metric name actually computed, value)
    """
    y_true = np.asarray(y_true).astype(np.int64)
    binary_auc = metric == "auc" and n_classes == 2

    if is_regressor:
        if binary_auc:
            return "auc", auc(y_true, block[:, 0])
        return "rmse", rmse(y_true, block)

    if binary_auc:
        positive = block[:, 0] if block.shape[1] == 1 else block[:, 1]
        return "auc", auc(y_true, positive)
    if metric == "accuracy":
        return "accuracy", accuracy(y_true, block, n_classes)
    return "logloss", logloss(y_true, block, n_classes)


__all__ = [
    "logloss",
    "accuracy",
    "auc",
    "rmse",
    "fold_score",
]
