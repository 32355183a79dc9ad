"""
Linear support vector machines.

LinearSVC has no predict_proba; its decision function is turned into
probabilities (logistic for binary margins, softmax for one-vs-rest scores)
so it can contribute a normal class-score block to a layer.
"""
from __future__ import annotations

from typing import Any, Dict

import numpy as np
from sklearn.svm import LinearSVC, LinearSVR

from ..registry import register
from ..sklearn_model import SklearnModel, scores_to_proba


@register(
    name="LSVC",
    family="linear",
    description="Linear support vector classifier (scores mapped to probabilities)",
    aliases=["linear_svc"],
)
class LSVCModel(SklearnModel):
    family = "linear"
    estimator_class = LinearSVC

    def get_default_config(self) -> Dict[str, Any]:
        return {"C": 1.0, "max_iter": 2000, "dual": "auto"}

    def _local_proba(self, X: Any) -> np.ndarray:
        return scores_to_proba(self._model.decision_function(X))


@register(
    name="LSVR",
    family="linear",
    description="Linear support vector regressor",
    aliases=["linear_svr"],
)
class LSVRModel(SklearnModel):
    family = "linear"
    estimator_type = "regressor"
    estimator_class = LinearSVR

    def get_default_config(self) -> Dict[str, Any]:
        return {"C": 1.0, "epsilon": 0.0, "max_iter": 2000, "dual": "auto"}


__all__ = [
    "LSVCModel",
    "LSVRModel",
]
