"""
Kernel models - a Nystroem kernel approximation followed by a linear model.

The approximation maps the input into ``n_components`` kernel features
(rbf, poly, sigmoid or linear); a logistic regression (classifier) or ridge
regression (regressor) is fitted on top.
"""
from __future__ import annotations

from typing import Any, Dict, Set

from sklearn.kernel_approximation import Nystroem
from sklearn.linear_model import LogisticRegression, Ridge
from sklearn.pipeline import Pipeline

from ..registry import register
from ..sklearn_model import SklearnModel

_KERNELS = {"rbf", "poly", "sigmoid", "linear"}


class KernelModel(SklearnModel):
    """
    Config keys:
        kernel: One of rbf, poly, sigmoid, linear
        gamma: Kernel coefficient (None uses 1 / n_features)
        degree: Polynomial degree (poly kernel)
        coef0: Independent term (poly and sigmoid kernels)
        n_components: Number of kernel features
        random_state: Seed for the landmark sample
    """

    family = "kernel"
    param_aliases = {"components": "n_components"}

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "kernel": "rbf",
            "gamma": None,
            "degree": 3,
            "coef0": 1.0,
            "n_components": 100,
            "random_state": None,
        }

    def accepted_params(self) -> Set[str]:
        return set(self.get_default_config())

    def _kernel_map(self, params: Dict[str, Any]) -> Nystroem:
        kernel = str(params["kernel"]).lower()
        if kernel not in _KERNELS:
            raise ValueError(
                f"{self.__class__.__name__}: unsupported kernel '{kernel}', "
                f"expected one of {sorted(_KERNELS)}"
            )
        return Nystroem(
            kernel=kernel,
            gamma=params["gamma"],
            degree=params["degree"],
            coef0=params["coef0"],
            n_components=params["n_components"],
            random_state=params["random_state"],
        )


@register(
    name="KernelmodelClassifier",
    family="kernel",
    description="Nystroem kernel features + logistic regression",
)
class KernelmodelClassifierModel(KernelModel):
    def get_default_config(self) -> Dict[str, Any]:
        config = super().get_default_config()
        config.update({"C": 1.0, "max_iter": 500})
        return config

    def build_estimator(self, params: Dict[str, Any]) -> Pipeline:
        return Pipeline([
            ("kernel", self._kernel_map(params)),
            ("linear", LogisticRegression(C=params["C"], max_iter=params["max_iter"])),
        ])


@register(
    name="KernelmodelRegressor",
    family="kernel",
    description="Nystroem kernel features + ridge regression",
)
class KernelmodelRegressorModel(KernelModel):
    estimator_type = "regressor"

    def get_default_config(self) -> Dict[str, Any]:
        config = super().get_default_config()
        config["alpha"] = 1.0
        return config

    def build_estimator(self, params: Dict[str, Any]) -> Pipeline:
        return Pipeline([
            ("kernel", self._kernel_map(params)),
            ("linear", Ridge(alpha=params["alpha"])),
        ])


__all__ = [
    "KernelmodelClassifierModel",
    "KernelmodelRegressorModel",
]
