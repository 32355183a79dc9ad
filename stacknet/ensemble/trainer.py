"""
StackNetTrainer - train a whole StackNet from a StackNetConfig.

Training flow:
1. Validate the target (ClassIndex), the weights and every layer spec
   before any model is trained
2. For each layer in order: k-fold forward training (non-terminal layers),
   final refit on all rows, then reshape the input of the next layer
3. Return an immutable TrainedEnsemble holding the final models

Example:
    >>> config = StackNetConfig(layers=[
    ...     ["RandomForestClassifier estimators:100", "LogisticRegression"],
    ...     ["LogisticRegression"],
    ... ])
    >>> ensemble = StackNetTrainer(config).fit(X, y)
    >>> proba = EnsemblePredictor(ensemble).predict_proba(X_new)
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..config import StackNetConfig
from ..exceptions import ShapeMismatchError, TargetError
from .class_index import ClassIndex
from .dumps import write_dump
from .layer_trainer import FoldScore, LayerTrainer
from .layers import TrainedLayer, validate_layers
from .matrix import FeatureMatrix, as_feature_matrix, n_columns, n_rows
from .reshaper import reshape

logger = logging.getLogger(__name__)


@dataclass
class TrainingReport:
    """
    Diagnostics collected while training.

    Attributes:
        fold_scores: Per-fold, per-model scores of every non-terminal layer (verbose runs only)
        layer_times: Seconds spent on each layer
        layer_input_widths: Columns of each layer's input
        training_time_seconds: Total wall time
    """
    fold_scores: List[FoldScore] = field(default_factory=list)
    layer_times: List[float] = field(default_factory=list)
    layer_input_widths: List[int] = field(default_factory=list)
    training_time_seconds: float = 0.0

    def mean_scores(self) -> Dict[Tuple[int, int], float]:
        """Mean fold score per (level, model_index)."""
        grouped: Dict[Tuple[int, int], List[float]] = {}
        for score in self.fold_scores:
            grouped.setdefault((score.level, score.model_index), []).append(score.value)
        return {key: float(np.mean(values)) for key, values in grouped.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fold_scores": [vars(score) for score in self.fold_scores],
            "layer_times": list(self.layer_times),
            "layer_input_widths": list(self.layer_input_widths),
            "training_time_seconds": self.training_time_seconds,
        }


@dataclass(frozen=True)
class TrainedEnsemble:
    """
    A trained StackNet.

    Attributes:
        config: Configuration the ensemble was trained with
        layers: Final-refit models per layer
        column_counts: Output columns of each layer
        n_features: Number of columns of the training matrix
        class_index: Label <-> class id mapping
        report: Training diagnostics
    """
    config: StackNetConfig
    layers: Tuple[TrainedLayer, ...]
    column_counts: Tuple[int, ...]
    n_features: int
    class_index: ClassIndex
    report: TrainingReport

    @property
    def restacking(self) -> bool:
        return self.config.restacking

    @property
    def n_classes(self) -> int:
        return self.class_index.n_classes


def normalize_weights(sample_weights: Any, rows: int) -> Optional[np.ndarray]:
    """
    Rescale weights so that they sum to the number of rows.

    Raises:
        ShapeMismatchError: If the length differs from the row count
        TargetError: If a weight is negative or not finite, or all are zero
    """
    if sample_weights is None:
        return None
    weights = np.asarray(sample_weights, dtype=np.float64).ravel()
    if len(weights) != rows:
        raise ShapeMismatchError(
            f"Sample weights length ({len(weights)}) is not the same as the number of rows ({rows})"
        )
    if not np.all(np.isfinite(weights)) or np.any(weights < 0):
        raise TargetError("Sample weights must be finite and non-negative")
    total = weights.sum()
    if total <= 0:
        raise TargetError("Sample weights sum to zero")
    return weights * (rows / total)


class StackNetTrainer:
    """
    Trains a StackNet layer by layer.

    Args:
        config: Ensemble configuration
    """

    def __init__(self, config: StackNetConfig) -> None:
        self.config = config

    def fit(
        self,
        X: Any,
        y: Any,
        sample_weights: Optional[Any] = None,
    ) -> TrainedEnsemble:
        """
        Train every layer.

        Args:
            X: Feature matrix (ndarray, scipy sparse or DataFrame)
            y: Target labels, shape (n_rows,)
            sample_weights: Optional per-row weights

        Returns:
            TrainedEnsemble

        Raises:
            ShapeMismatchError: If y or sample_weights disagree with X on rows
            TargetError: If the target has fewer than 2 classes
            ConfigurationError: If a layer spec is invalid (raised before training)
            TrainingAbortedError: If a model fails during training
        """
        start_time = time.time()
        config = self.config
        X = as_feature_matrix(X)
        rows = n_rows(X)

        class_index = ClassIndex.from_target(y)
        target = class_index.encode(y)
        if len(target) != rows:
            raise ShapeMismatchError(
                f"Target length ({len(target)}) is not the same as the number of rows ({rows})"
            )
        weights = normalize_weights(sample_weights, rows)
        n_classes = class_index.n_classes

        column_counts = validate_layers(config.layers, n_classes, config.metric)

        logger.info(
            f"Training StackNet: {config.n_layers} layers, {config.n_models} models, "
            f"{rows} rows x {n_columns(X)} columns, {n_classes} classes, "
            f"folds={config.folds}, restacking={config.restacking}"
        )

        layer_trainer = LayerTrainer(
            n_classes=n_classes,
            folds=config.folds,
            threads=config.threads,
            seed=config.seed,
            metric=config.metric,
            verbose=config.verbose,
        )
        report = TrainingReport()
        trained: List[TrainedLayer] = []
        current: FeatureMatrix = X

        for level, layer_spec in enumerate(config.layers, start=1):
            is_last = level == config.n_layers
            report.layer_input_widths.append(n_columns(current))
            logger.info(
                f"Layer {level}/{config.n_layers}: {len(layer_spec)} model(s), "
                f"input width {n_columns(current)}"
            )

            result = layer_trainer.train_layer(
                current, target, layer_spec, level, is_last, sample_weights=weights
            )
            trained.append(result.layer)
            report.fold_scores.extend(result.scores)
            report.layer_times.append(result.training_time_seconds)

            if not is_last:
                if config.dump:
                    write_dump(
                        result.meta_features, config.dump_prefix, level,
                        directory=config.dump_dir,
                    )
                current = reshape(current, result.meta_features, config.restacking)

        report.training_time_seconds = time.time() - start_time
        logger.info(f"StackNet training complete in {report.training_time_seconds:.1f}s")

        return TrainedEnsemble(
            config=config,
            layers=tuple(trained),
            column_counts=tuple(column_counts),
            n_features=n_columns(X),
            class_index=class_index,
            report=report,
        )


__all__ = [
    "StackNetTrainer",
    "TrainedEnsemble",
    "TrainingReport",
    "normalize_weights",
]
