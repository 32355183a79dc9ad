"""
StackNetClassifier - the top-level StackNet estimator.

A thin façade over StackNetConfig -> StackNetTrainer -> TrainedEnsemble ->
EnsemblePredictor with save/load support.

Example:
    >>> clf = StackNetClassifier(
    ...     layers=[
    ...         ["RandomForestClassifier estimators:100 max_depth:6", "LogisticRegression C:0.5"],
    ...         ["LogisticRegression"],
    ...     ],
    ...     folds=5,
    ...     threads=4,
    ... )
    >>> clf.fit(X_train, y_train)
    >>> proba = clf.predict_proba(X_test)
    >>> clf.save("stacknet.joblib")
    >>> clf = StackNetClassifier.load("stacknet.joblib")
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import joblib
import numpy as np

from .. import __version__
from ..config import StackNetConfig
from ..exceptions import ConfigError, NotFittedError
from .predictor import EnsemblePredictor
from .trainer import StackNetTrainer, TrainedEnsemble, TrainingReport

logger = logging.getLogger(__name__)


class StackNetClassifier:
    """
    Multi-layer stacked generalization classifier.

    Args:
        layers: Model specification strings per layer (ignored if config is given)
        folds: Folds for k-fold forward training
        threads: Thread count per layer (<= 0 means CPU count)
        metric: Diagnostic metric (logloss, accuracy, auc)
        restacking: Append meta-features to the previous input instead of replacing it
        verbose: Compute per-fold scores and log them at INFO level
        dump: Write per-layer outputs to CSV
        dump_prefix: File name prefix of the dumps
        dump_dir: Folder of the dumps
        seed: Random seed
        config: A ready StackNetConfig

    Raises:
        ConfigurationError: If the configuration is invalid
    """

    def __init__(
        self,
        layers: Optional[Sequence[Sequence[str]]] = None,
        folds: int = 5,
        threads: int = 1,
        metric: str = "logloss",
        restacking: bool = False,
        verbose: bool = False,
        dump: bool = False,
        dump_prefix: str = "stacknet",
        dump_dir: Optional[str] = None,
        seed: int = 1,
        config: Optional[StackNetConfig] = None,
    ) -> None:
        if config is None:
            config = StackNetConfig(
                layers=layers if layers is not None else (),
                folds=folds,
                threads=threads,
                metric=metric,
                restacking=restacking,
                verbose=verbose,
                dump=dump,
                dump_prefix=dump_prefix,
                dump_dir=dump_dir,
                seed=seed,
            )
        self._config = config
        self._ensemble: Optional[TrainedEnsemble] = None

    @property
    def config(self) -> StackNetConfig:
        return self._config

    @property
    def is_fitted(self) -> bool:
        return self._ensemble is not None

    @property
    def ensemble(self) -> TrainedEnsemble:
        return self._require_fitted()

    @property
    def report(self) -> TrainingReport:
        """Fold scores and timings of the last fit."""
        return self._require_fitted().report

    @property
    def n_classes(self) -> int:
        return self._require_fitted().n_classes

    @property
    def n_features(self) -> int:
        """Number of columns the ensemble was trained on."""
        return self._require_fitted().n_features

    def get_classes(self) -> list:
        """String form of the class labels, in class id order."""
        return list(self._require_fitted().class_index.names)

    def _require_fitted(self) -> TrainedEnsemble:
        if self._ensemble is None:
            raise NotFittedError(
                "No classes are found, the model needs to be fitted first"
            )
        return self._ensemble

    def _predictor(self) -> EnsemblePredictor:
        return EnsemblePredictor(self._require_fitted())

    # =========================================================================
    # TRAINING AND SCORING
    # =========================================================================

    def fit(
        self,
        X: Any,
        y: Any,
        sample_weights: Optional[Any] = None,
    ) -> "StackNetClassifier":
        """
        Train the ensemble.

        Args:
            X: Feature matrix (ndarray, scipy sparse or DataFrame)
            y: Target labels
            sample_weights: Optional per-row weights

        Returns:
            self
        """
        self._ensemble = StackNetTrainer(self._config).fit(X, y, sample_weights)
        return self

    def predict_proba(self, X: Any) -> np.ndarray:
        """Class probabilities, shape (n_rows, n_classes)."""
        return self._predictor().predict_proba(X)

    def predict(self, X: Any) -> np.ndarray:
        """Predicted labels."""
        return self._predictor().predict(X)

    def predict_proba_row(self, row: Any) -> np.ndarray:
        """Class probabilities of one feature vector, shape (n_classes,)."""
        return self._predictor().predict_proba_row(row)

    def predict_row(self, row: Any) -> Any:
        """Predicted label of one feature vector."""
        return self._predictor().predict_row(row)

    def reset(self) -> "StackNetClassifier":
        """Discard the trained state, keeping the configuration."""
        self._ensemble = None
        return self

    def describe(self) -> Dict[str, Any]:
        """Settings and (when fitted) trained-state summary."""
        config = self._config
        info: Dict[str, Any] = {
            "layers": [list(layer) for layer in config.layers],
            "folds": config.folds,
            "threads": config.threads,
            "metric": config.metric,
            "restacking": config.restacking,
            "seed": config.seed,
            "verbose": config.verbose,
            "dump": config.dump,
            "dump_prefix": config.dump_prefix,
            "dump_dir": config.dump_dir,
            "fitted": self.is_fitted,
        }
        if self._ensemble is not None:
            info.update({
                "classes": self.get_classes(),
                "n_classes": self._ensemble.n_classes,
                "n_features": self._ensemble.n_features,
                "column_counts": list(self._ensemble.column_counts),
            })
        return info

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def save(self, path: Union[str, Path]) -> Path:
        """
        Save the trained ensemble with joblib.

        Raises:
            NotFittedError: If the classifier is not fitted
        """
        ensemble = self._require_fitted()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(
            {
                "version": __version__,
                "config": self._config.to_dict(),
                "ensemble": ensemble,
            },
            path,
        )
        logger.info(f"Saved StackNetClassifier to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "StackNetClassifier":
        """
        Load a classifier written by save().

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file does not hold a saved StackNetClassifier
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Saved model not found: {path}")
        payload = joblib.load(path)
        if not isinstance(payload, dict) or not isinstance(payload.get("ensemble"), TrainedEnsemble):
            raise ConfigError(f"{path} does not contain a saved StackNetClassifier")

        ensemble: TrainedEnsemble = payload["ensemble"]
        clf = cls(config=ensemble.config)
        clf._ensemble = ensemble
        logger.info(
            f"Loaded StackNetClassifier from {path} "
            f"(saved with version {payload.get('version', 'unknown')})"
        )
        return clf

    def __repr__(self) -> str:
        return (
            f"StackNetClassifier(layers={self._config.n_layers}, "
            f"models={self._config.n_models}, fitted={self.is_fitted})"
        )


__all__ = ["StackNetClassifier"]
