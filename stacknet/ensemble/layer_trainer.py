"""
LayerTrainer - k-fold forward training and final refit of one layer.

For a non-terminal layer the rows are split into K folds. For every fold
each model is trained on the other K-1 folds and scores the held-out fold;
the scores are written at the fold's rows and at the model's column block.
Every row is therefore scored exactly once, by models that never saw it,
and the resulting meta-features are the next layer's training input.

Every layer, the terminal one included, is then refit on all its rows.
Those final models are the ones used at inference time.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import partial
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..exceptions import ConfigurationError, ShapeMismatchError
from ..models.base import BaseModel
from ..models.registry import ModelRegistry
from .folds import kfold_indices
from .layers import TrainedLayer, collapse_block, column_offsets, model_widths, score_block
from .matrix import FeatureMatrix, n_rows, take_rows
from .metrics import fold_score
from .scheduler import ModelTask, ParallelFitScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldScore:
    """Diagnostic score of one model on one held-out fold."""
    level: int
    fold: int
    model_index: int
    spec: str
    metric: str
    value: float


@dataclass
class LayerResult:
    """
    Output of LayerTrainer.train_layer().

    Attributes:
        layer: Final-refit models of the layer
        meta_features: Out-of-fold scores, shape (n_rows, layer width);
            None for the terminal layer
        scores: Per-fold, per-model diagnostic scores
        training_time_seconds: Wall time spent on the layer
    """
    layer: TrainedLayer
    meta_features: Optional[np.ndarray]
    scores: List[FoldScore] = field(default_factory=list)
    training_time_seconds: float = 0.0


class LayerTrainer:
    """
    Trains the models of one layer.

    Args:
        n_classes: Number of target classes
        folds: Number of folds for forward training
        threads: Thread count for the layer's models (<= 0 means CPU count)
        seed: Seed for the fold partition and the models
        metric: Diagnostic metric (logloss, accuracy or auc)
        verbose: Compute per-fold scores and log progress at INFO instead of DEBUG
    """

    def __init__(
        self,
        n_classes: int,
        folds: int = 5,
        threads: int = 1,
        seed: int = 1,
        metric: str = "logloss",
        verbose: bool = False,
    ) -> None:
        self.n_classes = n_classes
        self.folds = folds
        self.threads = threads
        self.seed = seed
        self.metric = metric
        self.verbose = verbose

    def _log(self, message: str) -> None:
        if self.verbose:
            logger.info(message)
        else:
            logger.debug(message)

    def build_model(self, spec: str) -> BaseModel:
        """Fresh, untrained model configured from a spec string."""
        return ModelRegistry.create_from_spec(spec, seed=self.seed, n_classes=self.n_classes)

    def _fit(
        self,
        spec: str,
        X: FeatureMatrix,
        y: np.ndarray,
        sample_weights: Optional[np.ndarray],
    ) -> BaseModel:
        model = self.build_model(spec)
        model.set_target(y)
        model.fit(X, sample_weights=sample_weights)
        return model

    def _fit_predict(
        self,
        spec: str,
        X_train: FeatureMatrix,
        y_train: np.ndarray,
        sample_weights: Optional[np.ndarray],
        X_test: FeatureMatrix,
    ) -> np.ndarray:
        return score_block(self._fit(spec, X_train, y_train, sample_weights), X_test)

    # =========================================================================
    # TRAINING
    # =========================================================================

    def train_layer(
        self,
        X: FeatureMatrix,
        y: np.ndarray,
        layer_spec: Sequence[str],
        level: int,
        is_last_layer: bool,
        sample_weights: Optional[np.ndarray] = None,
    ) -> LayerResult:
        """
        Train one layer.

        Args:
            X: Layer input, shape (n_rows, n_columns)
            y: Integer class ids, shape (n_rows,)
            layer_spec: Model specification strings
            level: 1-based layer number
            is_last_layer: Whether this is the terminal layer
            sample_weights: Optional per-row weights

        Returns:
            LayerResult with the final models and, for non-terminal layers,
            the out-of-fold meta-features

        Raises:
            ConfigurationError: If the layer has no models
            ShapeMismatchError: If y or sample_weights disagree with X on rows
            TrainingAbortedError: If any model fails to fit or score
        """
        start_time = time.time()
        specs = tuple(layer_spec)
        if not specs:
            raise ConfigurationError(f"Layer {level} has no models")
        rows = n_rows(X)
        y = np.asarray(y).ravel()
        if len(y) != rows:
            raise ShapeMismatchError(
                f"Target length ({len(y)}) is not the same as the number of rows ({rows})"
            )
        if sample_weights is not None and len(sample_weights) != rows:
            raise ShapeMismatchError(
                f"Sample weights length ({len(sample_weights)}) is not the same as "
                f"the number of rows ({rows})"
            )

        widths = model_widths(specs, self.n_classes, is_last_layer)
        meta_features = None
        scores: List[FoldScore] = []

        if not is_last_layer:
            meta_features, scores = self._forward_train(
                X, y, specs, widths, level, sample_weights
            )

        self._log(f"Layer {level}: final refit of {len(specs)} model(s) on {rows} rows")
        scheduler = ParallelFitScheduler(self.threads, level=level, stage="final refit")
        models = scheduler.run([
            ModelTask(i, spec, partial(self._fit, spec, X, y, sample_weights))
            for i, spec in enumerate(specs)
        ])

        layer = TrainedLayer(
            level=level,
            specs=specs,
            models=tuple(models),
            widths=tuple(widths),
        )
        return LayerResult(
            layer=layer,
            meta_features=meta_features,
            scores=scores,
            training_time_seconds=time.time() - start_time,
        )

    def _forward_train(
        self,
        X: FeatureMatrix,
        y: np.ndarray,
        specs: Sequence[str],
        widths: Sequence[int],
        level: int,
        sample_weights: Optional[np.ndarray],
    ) -> Tuple[np.ndarray, List[FoldScore]]:
        rows = n_rows(X)
        offsets = column_offsets(widths)
        meta_features = np.zeros((rows, int(sum(widths))), dtype=np.float64)
        scores: List[FoldScore] = []

        for fold, (train_idx, test_idx) in enumerate(
            kfold_indices(rows, self.folds, self.seed), start=1
        ):
            self._log(
                f"Layer {level}: fold {fold}/{self.folds} "
                f"(train={len(train_idx)}, held out={len(test_idx)})"
            )
            X_train = take_rows(X, train_idx)
            X_test = take_rows(X, test_idx)
            y_train = y[train_idx]
            w_train = None if sample_weights is None else sample_weights[train_idx]

            scheduler = ParallelFitScheduler(
                self.threads, level=level, stage=f"fold {fold}/{self.folds}"
            )
            blocks = scheduler.run([
                ModelTask(
                    i, spec,
                    partial(self._fit_predict, spec, X_train, y_train, w_train, X_test),
                )
                for i, spec in enumerate(specs)
            ])

            for i, (spec, block) in enumerate(zip(specs, blocks)):
                block = collapse_block(np.asarray(block), self.n_classes, False)
                if block.shape[1] != widths[i]:
                    raise ShapeMismatchError(
                        f"Model {i} '{spec}' in layer {level} produced {block.shape[1]} "
                        f"column(s), expected {widths[i]}"
                    )
                meta_features[test_idx, offsets[i]:offsets[i] + widths[i]] = block

                if not self.verbose:
                    continue
                name, value = fold_score(
                    self.metric, y[test_idx], block, self.n_classes,
                    ModelRegistry.is_regressor(spec),
                )
                scores.append(FoldScore(level, fold, i, spec, name, value))
                self._log(f"Layer {level} fold {fold} model {i} '{spec}': {name}={value:.6f}")

        return meta_features, scores


__all__ = [
    "FoldScore",
    "LayerResult",
    "LayerTrainer",
]
