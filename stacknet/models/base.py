"""
BaseModel abstract interface for StackNet learners.

Every learner that can sit inside a StackNet layer implements this contract.
The ensemble only ever talks to learners through it:

- set_params(): configure from a "<ModelName> key:value ..." string or a dict
- set_target(): attach the (integer encoded) target used by fit()
- fit(): train on a feature matrix
- predict_proba(): score a feature matrix, shape (n_samples, output_width)
- is_regressor: whether the learner produces one raw score column

Output width is 1 for regressors and n_classes for classifiers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Set, Union

import numpy as np

from ..exceptions import ModelSpecError, NotFittedError, ShapeMismatchError, TargetError
from .spec import parse_model_spec

# StackNet parameter names accepted in specs, mapped to the learner's own names
COMMON_PARAM_ALIASES: Dict[str, str] = {
    "seed": "random_state",
    "threads": "n_jobs",
    "estimators": "n_estimators",
    "min_leaf": "min_samples_leaf",
    "min_split": "min_samples_split",
    "shrinkage": "learning_rate",
    "maxim_Iteration": "max_iter",
    "iterations": "max_iter",
}

# Parameters that are dropped when the learner has no counterpart
OPTIONAL_PARAMS: Set[str] = {"seed", "threads", "verbose"}


class BaseModel(ABC):
    """
    Abstract base class for all StackNet learners.

    Subclasses must implement:
        - model_family (property): Model family classification
        - get_default_config(): Default hyperparameters
        - fit(): Training logic
        - predict_proba(): Scoring logic

    Class attributes:
        estimator_type: "classifier" or "regressor"
        param_aliases: Extra spec-name -> parameter-name mappings
    """

    estimator_type: str = "classifier"
    param_aliases: Dict[str, str] = {}

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the model.

        Args:
            config: Model configuration dict. If None, uses defaults
                   from get_default_config().
        """
        self._config = self._merge_config(config)
        self._is_fitted = False
        self._target: Optional[np.ndarray] = None
        self._n_classes: Optional[int] = None
        self._seed: Optional[int] = None
        self._spec: str = ""

    def _merge_config(self, config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Merge provided config with defaults."""
        defaults = self.get_default_config()
        if config is None:
            return defaults
        merged = defaults.copy()
        merged.update(config)
        return merged

    @property
    def config(self) -> Dict[str, Any]:
        """Current model configuration."""
        return self._config

    @property
    def is_fitted(self) -> bool:
        """Whether the model has been trained."""
        return self._is_fitted

    @property
    def is_regressor(self) -> bool:
        """Whether the model outputs a single raw score column."""
        return self.estimator_type == "regressor"

    @property
    def is_classifier(self) -> bool:
        return self.estimator_type == "classifier"

    @property
    def spec(self) -> str:
        """Specification string this model was configured from."""
        return self._spec or self.__class__.__name__

    @property
    def n_classes(self) -> Optional[int]:
        return self._n_classes

    # =========================================================================
    # ABSTRACT INTERFACE
    # =========================================================================

    @property
    @abstractmethod
    def model_family(self) -> str:
        """
        Return model family classification.

        Returns:
            One of: 'tree', 'linear', 'neural', 'neighbors', 'bayes',
            'kernel', 'factorization', 'boosting'
        """
        pass

    @abstractmethod
    def get_default_config(self) -> Dict[str, Any]:
        """Return default hyperparameters for this model."""
        pass

    @abstractmethod
    def fit(
        self,
        X: Any,
        y: Optional[np.ndarray] = None,
        sample_weights: Optional[np.ndarray] = None,
    ) -> "BaseModel":
        """
        Train the model.

        Args:
            X: Feature matrix (dense array or CSR sparse), shape (n_samples, n_features)
            y: Integer class ids (classifiers) or numeric targets. If None,
               the target given to set_target() is used.
            sample_weights: Optional per-row weights, shape (n_samples,)

        Returns:
            self

        Raises:
            TargetError: If no target is available
            ShapeMismatchError: If X and y disagree on the row count
        """
        pass

    @abstractmethod
    def predict_proba(self, X: Any) -> np.ndarray:
        """
        Score a feature matrix.

        Returns:
            Array of shape (n_samples, output_width)

        Raises:
            NotFittedError: If model is not fitted
        """
        pass

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def accepted_params(self) -> Set[str]:
        """Names of parameters this model accepts in set_params()."""
        return set(self.get_default_config())

    def set_params(self, params: Union[str, Mapping[str, Any]]) -> "BaseModel":
        """
        Update configuration from a spec string or a mapping.

        Spec-string parameter names may use StackNet aliases (``estimators``,
        ``seed``, ``threads``, ...). ``seed``/``threads``/``verbose`` are
        dropped silently when the model has no such setting.

        Raises:
            ModelSpecError: If a parameter is not accepted by this model
        """
        if isinstance(params, str):
            parsed = parse_model_spec(params)
            self._spec = parsed.raw
            values = parsed.params
        else:
            values = dict(params)

        self._config.update(self._resolve_params(values))
        return self

    def _resolve_params(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        accepted = self.accepted_params()
        aliases = {**COMMON_PARAM_ALIASES, **self.param_aliases}
        resolved: Dict[str, Any] = {}

        for key, value in values.items():
            target = key if key in accepted else aliases.get(key, key)
            if target in accepted:
                resolved[target] = value
            elif key in OPTIONAL_PARAMS:
                continue
            else:
                raise ModelSpecError(
                    f"Parameter '{key}' is not supported by {self.__class__.__name__} "
                    f"(in '{self.spec}'). Accepted parameters: {sorted(accepted)}",
                    spec=self._spec or None,
                )
        return resolved

    def set_target(self, target: Any) -> "BaseModel":
        """Attach the target used by fit() when no y is passed."""
        arr = np.asarray(target).ravel()
        if arr.size == 0:
            raise TargetError("There is nothing to train on: target is empty")
        self._target = arr
        return self

    def set_seed(self, seed: Optional[int]) -> "BaseModel":
        self._seed = seed
        return self

    def set_n_classes(self, n_classes: int) -> "BaseModel":
        """Fix the classifier output width regardless of the classes seen in training."""
        if n_classes < 2:
            raise TargetError(f"n_classes must be >= 2, got {n_classes}")
        self._n_classes = int(n_classes)
        return self

    def output_width(self, n_classes: Optional[int] = None) -> int:
        """Number of columns predict_proba() returns."""
        if self.is_regressor:
            return 1
        width = n_classes if n_classes is not None else self._n_classes
        if width is None:
            raise NotFittedError(
                f"{self.__class__.__name__} output width is unknown before fit"
            )
        return width

    # =========================================================================
    # VALIDATION HELPERS
    # =========================================================================

    def _resolve_target(self, y: Optional[np.ndarray]) -> np.ndarray:
        if y is None:
            if self._target is None:
                raise TargetError(
                    f"{self.__class__.__name__} has no target: pass y or call set_target()"
                )
            return self._target
        return np.asarray(y).ravel()

    def _validate_input_shape(self, X: Any, context: str = "input") -> None:
        """
        Validate that the input is a 2D matrix.

        Raises:
            ShapeMismatchError: If the input is not 2D
        """
        ndim = getattr(X, "ndim", None)
        if ndim != 2:
            raise ShapeMismatchError(
                f"{context} must be 2D (n_samples, n_features), "
                f"got shape {getattr(X, 'shape', None)}"
            )

    def _validate_fitted(self) -> None:
        """
        Check if model is fitted.

        Raises:
            NotFittedError: If model is not fitted
        """
        if not self._is_fitted:
            raise NotFittedError(
                f"{self.__class__.__name__} is not fitted. Call fit() first."
            )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"family={self.model_family}, "
            f"type={self.estimator_type}, "
            f"fitted={self._is_fitted})"
        )


__all__ = [
    "BaseModel",
    "COMMON_PARAM_ALIASES",
    "OPTIONAL_PARAMS",
]
