"""
LibFm learners - factorization machines inside a StackNet layer.

Spec strings may use the LibFM style names (``lfeatures``, ``init_values``,
``learn_rate``, ``C``, ``C2``, ``batch``) which map onto the estimator's
parameters.
"""
from __future__ import annotations

from typing import Any, Dict

from ..registry import register
from ..sklearn_model import SklearnModel
from .fm import FactorizationMachineClassifier, FactorizationMachineRegressor


class LibFmModel(SklearnModel):
    family = "factorization"
    param_aliases = {
        "lfeatures": "n_factors",
        "init_values": "init_std",
        "learn_rate": "learning_rate",
        "C": "reg_linear",
        "C2": "reg_factors",
        "batch": "batch_size",
    }

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_factors": 4,
            "learning_rate": 0.05,
            "max_iter": 20,
        }


@register(
    name="LibFmClassifier",
    family="factorization",
    description="Factorization machine classifier (logistic, one-vs-rest)",
    aliases=["fm"],
)
class LibFmClassifierModel(LibFmModel):
    estimator_class = FactorizationMachineClassifier


@register(
    name="LibFmRegressor",
    family="factorization",
    description="Factorization machine regressor (squared loss)",
)
class LibFmRegressorModel(LibFmModel):
    estimator_type = "regressor"
    estimator_class = FactorizationMachineRegressor

    def get_default_config(self) -> Dict[str, Any]:
        config = super().get_default_config()
        config["learning_rate"] = 0.01
        return config


__all__ = [
    "LibFmClassifierModel",
    "LibFmRegressorModel",
]
