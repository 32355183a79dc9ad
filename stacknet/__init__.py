"""
StackNet - stacked generalization in a feed-forward network of learners.

Layers of heterogeneous models (trees, linear models, neural nets, kernel
and factorization machines, k-NN, naive Bayes, gradient boosting) are
trained with k-fold forward training: each layer learns from out-of-fold
predictions of the layer before it, optionally restacked with every
earlier input. The last layer's class scores become the probabilities.

Quick Start:
-----------
    from stacknet import StackNetClassifier

    clf = StackNetClassifier(
        layers=[
            ["RandomForestClassifier estimators:100", "LogisticRegression C:0.5"],
            ["LogisticRegression"],
        ],
        folds=5,
        threads=4,
    )
    clf.fit(X, y)
    proba = clf.predict_proba(X_new)
"""
from __future__ import annotations

__version__ = "0.1.0"

from .config import StackNetConfig, load_config, load_layer_specs, load_yaml_config
from .ensemble import (
    ClassIndex,
    EnsemblePredictor,
    StackNetClassifier,
    StackNetTrainer,
    TrainedEnsemble,
)
from .exceptions import (
    ConfigError,
    ConfigurationError,
    ConfigValidationError,
    ModelSpecError,
    NotFittedError,
    ShapeMismatchError,
    StackNetError,
    TargetError,
    TerminalRegressorError,
    TrainingAbortedError,
)
from .models import BaseModel, ModelRegistry, register

__all__ = [
    "__version__",
    # Configuration
    "StackNetConfig",
    "load_config",
    "load_layer_specs",
    "load_yaml_config",
    # Ensemble
    "ClassIndex",
    "EnsemblePredictor",
    "StackNetClassifier",
    "StackNetTrainer",
    "TrainedEnsemble",
    # Models
    "BaseModel",
    "ModelRegistry",
    "register",
    # Errors
    "StackNetError",
    "ConfigurationError",
    "ConfigError",
    "ConfigValidationError",
    "ModelSpecError",
    "ShapeMismatchError",
    "TargetError",
    "TerminalRegressorError",
    "NotFittedError",
    "TrainingAbortedError",
]
