"""
StackNet learners - plugin-based model system.

Every learner that can sit in a StackNet layer is a BaseModel registered
under the name used in model specification strings.

Supported Model Families:
- Tree: DecisionTree, RandomForest, GradientBoostingForest, AdaboostForest
- Linear: LogisticRegression, LinearRegression, LSVC, LSVR
- Neural: Vanilla2hnn, multinn, softmaxnn
- Neighbors / Bayes / Kernel: knn, NaiveBayes, Kernelmodel
- Factorization: LibFm
- Boosting: Xgboost, Lightgbm

Quick Start:
-----------
    from stacknet.models import ModelRegistry

    model = ModelRegistry.create_from_spec(
        "RandomForestClassifier estimators:100 max_depth:6", seed=1, n_classes=3
    )
    model.fit(X, y)
    proba = model.predict_proba(X)

    # Register a new learner
    from stacknet.models import SklearnModel, register

    @register("MyClassifier", family="linear")
    class MyModel(SklearnModel):
        estimator_class = SomeEstimator
"""
from __future__ import annotations

from .base import BaseModel
from .registry import ModelRegistry, register
from .sklearn_model import SklearnModel, scores_to_proba
from .spec import ModelSpec, coerce_value, parse_model_spec

# Auto-import model implementations to trigger registration
from . import classical  # trees, linear, svm, neighbors, bayes, kernel
from . import neural  # perceptrons
from . import factorization  # LibFm
from . import boosting  # XGBoost, LightGBM

__all__ = [
    "BaseModel",
    "ModelRegistry",
    "register",
    "SklearnModel",
    "scores_to_proba",
    "ModelSpec",
    "coerce_value",
    "parse_model_spec",
]
