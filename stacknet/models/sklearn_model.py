"""
SklearnModel - BaseModel adapter for scikit-learn compatible estimators.

Every concrete StackNet learner is a thin subclass that names the estimator
class (or overrides build_estimator()) and its defaults. The adapter takes
care of the parts the ensemble relies on:

- classifiers are trained on the classes present in the training rows and
  their probabilities are scattered back to the full n_classes width, so a
  fold that misses a class still yields a correctly shaped block
- a training fold containing a single class yields a constant predictor
- sample weights are forwarded only to estimators whose fit() accepts them
- the ensemble seed is injected as random_state unless the spec sets one
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set

import numpy as np
import scipy.sparse as sp
from sklearn.utils.validation import has_fit_parameter

from ..exceptions import ShapeMismatchError, TargetError
from .base import BaseModel

logger = logging.getLogger(__name__)


def scores_to_proba(scores: np.ndarray) -> np.ndarray:
    """
    Turn decision-function scores into probabilities.

    A 1D score vector (binary margin) goes through a logistic function and
    becomes two columns; a 2D score matrix goes through a stable softmax.
    """
    scores = np.asarray(scores, dtype=np.float64)
    if scores.ndim == 1:
        positive = 1.0 / (1.0 + np.exp(-scores))
        return np.column_stack([1.0 - positive, positive])
    shifted = scores - scores.max(axis=1, keepdims=True)
    exp = np.exp(shifted)
    return exp / exp.sum(axis=1, keepdims=True)


class SklearnModel(BaseModel):
    """
    Base adapter wrapping one scikit-learn style estimator.

    Class attributes:
        estimator_class: Estimator type built by the default build_estimator()
        family: Model family reported by model_family
        accepts_sparse: If False, sparse input is densified before fit/predict
    """

    estimator_class: Optional[type] = None
    family: str = "classical"
    accepts_sparse: bool = True

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(config)
        self._model: Any = None
        self._classes: Optional[np.ndarray] = None

    @property
    def model_family(self) -> str:
        return self.family

    @property
    def estimator(self) -> Any:
        """The underlying fitted estimator (None for a constant predictor)."""
        return self._model

    def get_default_config(self) -> Dict[str, Any]:
        return {}

    def accepted_params(self) -> Set[str]:
        accepted = set(self.get_default_config())
        if self.estimator_class is not None:
            accepted.update(self.estimator_class().get_params(deep=False))
        return accepted

    def build_estimator(self, params: Dict[str, Any]) -> Any:
        """Construct the underlying estimator from resolved parameters."""
        return self.estimator_class(**params)

    def _estimator_params(self) -> Dict[str, Any]:
        params = dict(self._config)
        if (
            self._seed is not None
            and params.get("random_state") is None
            and "random_state" in self.accepted_params()
        ):
            params["random_state"] = self._seed
        return params

    def _prepare_input(self, X: Any) -> Any:
        if sp.issparse(X):
            return X.tocsr() if self.accepts_sparse else X.toarray()
        return np.asarray(X, dtype=np.float64)

    # =========================================================================
    # TRAINING
    # =========================================================================

    def fit(
        self,
        X: Any,
        y: Optional[np.ndarray] = None,
        sample_weights: Optional[np.ndarray] = None,
    ) -> "SklearnModel":
        """Train the wrapped estimator."""
        y = self._resolve_target(y)
        X = self._prepare_input(X)
        self._validate_input_shape(X, "X")
        if X.shape[0] != len(y):
            raise ShapeMismatchError(
                f"{self.__class__.__name__}: X has {X.shape[0]} rows but target has {len(y)}"
            )

        self._model = self.build_estimator(self._estimator_params())
        fit_kwargs: Dict[str, Any] = {}
        if sample_weights is not None:
            if has_fit_parameter(self._model, "sample_weight"):
                fit_kwargs["sample_weight"] = np.asarray(sample_weights, dtype=np.float64)
            else:
                logger.debug(f"{self.__class__.__name__} ignores sample weights")

        if self.is_regressor:
            self._model.fit(X, y.astype(np.float64), **fit_kwargs)
        else:
            self._fit_classifier(X, y, fit_kwargs)

        self._is_fitted = True
        return self

    def _fit_classifier(self, X: Any, y: np.ndarray, fit_kwargs: Dict[str, Any]) -> None:
        try:
            y_ids = y.astype(np.int64)
        except (TypeError, ValueError) as e:
            raise TargetError(
                f"{self.__class__.__name__} expects integer class ids as target"
            ) from e
        if np.any(y_ids != y.astype(np.float64)) or np.any(y_ids < 0):
            raise TargetError(
                f"{self.__class__.__name__} expects non-negative integer class ids as target"
            )

        self._classes = np.unique(y_ids)
        n_seen = int(self._classes.max()) + 1
        if self._n_classes is None or self._n_classes < n_seen:
            self._n_classes = max(n_seen, 2)

        if len(self._classes) < 2:
            logger.warning(
                f"{self.__class__.__name__}: training rows contain a single class "
                f"({self._classes[0]}), using a constant predictor"
            )
            self._model = None
            return

        # Contiguous local ids keep estimators that require 0..k-1 labels happy
        local = np.searchsorted(self._classes, y_ids)
        self._model.fit(X, local, **fit_kwargs)

    # =========================================================================
    # SCORING
    # =========================================================================

    def predict_proba(self, X: Any) -> np.ndarray:
        """Return (n_samples, 1) for regressors, (n_samples, n_classes) for classifiers."""
        self._validate_fitted()
        X = self._prepare_input(X)
        self._validate_input_shape(X, "X")

        if self.is_regressor:
            return np.asarray(self._model.predict(X), dtype=np.float64).reshape(-1, 1)

        out = np.zeros((X.shape[0], self._n_classes), dtype=np.float64)
        if self._model is None:
            out[:, self._classes[0]] = 1.0
            return out
        out[:, self._classes] = self._local_proba(X)
        return out

    def _local_proba(self, X: Any) -> np.ndarray:
        """Probabilities over the classes seen in training, in local id order."""
        return np.asarray(self._model.predict_proba(X), dtype=np.float64)


__all__ = [
    "SklearnModel",
    "scores_to_proba",
]
