"""
EnsemblePredictor - score new data with a TrainedEnsemble.

Inference replays training without folds: every layer's final models score
the layer input in parallel, binary blocks of non-terminal layers are
collapsed to the positive class, and the next input is built with the same
restacking rule. The terminal layer's blocks of n_classes columns are summed
element-wise and scaled to probabilities.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Any, Optional

import numpy as np

from ..exceptions import NotFittedError, ShapeMismatchError
from .dumps import write_dump
from .layers import collapse_block, score_block
from .matrix import FeatureMatrix, as_feature_matrix, as_row_matrix, n_columns, n_rows
from .reshaper import reshape
from .scaling import ProbabilityScaler
from .scheduler import ModelTask, ParallelFitScheduler
from .trainer import TrainedEnsemble

logger = logging.getLogger(__name__)


class EnsemblePredictor:
    """
    Scores feature matrices with the final models of a trained ensemble.

    Args:
        ensemble: Trained ensemble
        threads: Thread count per layer (defaults to the training setting)
    """

    def __init__(self, ensemble: Optional[TrainedEnsemble], threads: Optional[int] = None) -> None:
        self.ensemble = ensemble
        self.threads = threads
        self.scaler = ProbabilityScaler()

    def _require_ensemble(self) -> TrainedEnsemble:
        if self.ensemble is None or not self.ensemble.layers:
            raise NotFittedError(
                "The fit method needs to be run successfully before scoring a new set"
            )
        return self.ensemble

    # =========================================================================
    # SCORING
    # =========================================================================

    def terminal_scores(self, X: FeatureMatrix) -> np.ndarray:
        """
        Raw output of the terminal layer for a prepared matrix.

        Raises:
            NotFittedError: If there is no trained ensemble
            ShapeMismatchError: If the column count differs from training
            TrainingAbortedError: If a model fails while scoring
        """
        ensemble = self._require_ensemble()
        config = ensemble.config
        if n_columns(X) != ensemble.n_features:
            raise ShapeMismatchError(
                f"Number of predictors is not the same as the trained one: "
                f"{ensemble.n_features} <> {n_columns(X)}"
            )

        threads = config.threads if self.threads is None else self.threads
        n_classes = ensemble.n_classes
        current = X
        output = None

        for layer in ensemble.layers:
            is_last = layer.level == len(ensemble.layers)
            scheduler = ParallelFitScheduler(threads, level=layer.level, stage="scoring")
            blocks = scheduler.run([
                ModelTask(i, spec, partial(score_block, model, current))
                for i, (spec, model) in enumerate(zip(layer.specs, layer.models))
            ])
            output = np.hstack([
                collapse_block(np.asarray(block), n_classes, is_last) for block in blocks
            ])
            logger.debug(
                f"Layer {layer.level}: scored {n_rows(current)} rows -> {output.shape[1]} columns"
            )

            if config.dump:
                write_dump(
                    output, config.dump_prefix, layer.level,
                    test=True, directory=config.dump_dir,
                )
            if not is_last:
                current = reshape(current, output, config.restacking)

        return output

    def aggregate(self, terminal: np.ndarray) -> np.ndarray:
        """
        Sum the terminal layer's n_classes-wide blocks and scale rows to 1.

        Raises:
            ShapeMismatchError: If the width is not a multiple of n_classes
        """
        n_classes = self._require_ensemble().n_classes
        width = terminal.shape[1]
        if width % n_classes != 0:
            raise ShapeMismatchError(
                f"Number of the last layer's output columns ({width}) needs to be "
                f"a multiple of the number of classes ({n_classes})"
            )
        blocks = width // n_classes
        summed = terminal.reshape(terminal.shape[0], blocks, n_classes).sum(axis=1)
        return self.scaler.scale(summed)

    def predict_proba(self, X: Any) -> np.ndarray:
        """
        Class probabilities, shape (n_rows, n_classes), rows summing to 1.

        Raises:
            NotFittedError: If there is no trained ensemble
            ShapeMismatchError: If the column count differs from training
        """
        self._require_ensemble()
        return self.aggregate(self.terminal_scores(as_feature_matrix(X)))

    def predict(self, X: Any) -> np.ndarray:
        """Predicted labels (class ids for non-numeric labels)."""
        ensemble = self._require_ensemble()
        return ensemble.class_index.decode(np.argmax(self.predict_proba(X), axis=1))

    def predict_proba_row(self, row: Any) -> np.ndarray:
        """Class probabilities of a single feature vector, shape (n_classes,)."""
        self._require_ensemble()
        return self.aggregate(self.terminal_scores(as_row_matrix(row)))[0]

    def predict_row(self, row: Any) -> Any:
        """Predicted label of a single feature vector."""
        ensemble = self._require_ensemble()
        _, class_id = self.scaler.softmax_row(self.predict_proba_row(row))
        return ensemble.class_index.decode([class_id])[0]


__all__ = ["EnsemblePredictor"]
