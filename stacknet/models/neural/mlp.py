"""
Feed-forward neural networks (scikit-learn multi-layer perceptrons).

- Vanilla2hnnclassifier / Vanilla2hnnregressor: two hidden layers
- multinnregressor: two hidden layers, multi-output capable regressor
- softmaxnnclassifier: one hidden layer, softmax output

Hidden layer sizes are configured with ``h1`` and ``h2`` and translated
into ``hidden_layer_sizes`` when the estimator is built.
"""
from __future__ import annotations

from typing import Any, Dict, Set

from sklearn.neural_network import MLPClassifier, MLPRegressor

from ..registry import register
from ..sklearn_model import SklearnModel


class MLPModel(SklearnModel):
    """
    Shared MLP wrapper.

    Config keys:
        h1: Units in the first hidden layer
        h2: Units in the second hidden layer (0 or absent for one layer)
        activation: relu, tanh, logistic or identity
        alpha: L2 penalty
        learning_rate_init: Initial step size
        max_iter: Training epochs
        batch_size: Minibatch size ("auto" or int)
        random_state: Weight initialisation seed
    """

    family = "neural"
    n_hidden: int = 2
    param_aliases = {
        "epochs": "max_iter",
        "shrinkage": "learning_rate_init",
        "learn_rate": "learning_rate_init",
        "batch": "batch_size",
    }

    def get_default_config(self) -> Dict[str, Any]:
        config = {
            "h1": 50,
            "h2": 25,
            "activation": "relu",
            "alpha": 1e-4,
            "learning_rate_init": 1e-3,
            "max_iter": 200,
            "batch_size": "auto",
            "random_state": None,
        }
        if self.n_hidden == 1:
            del config["h2"]
        return config

    def accepted_params(self) -> Set[str]:
        return set(self.get_default_config())

    def hidden_layer_sizes(self, params: Dict[str, Any]) -> tuple:
        sizes = [int(params["h1"])]
        if self.n_hidden > 1 and params.get("h2"):
            sizes.append(int(params["h2"]))
        return tuple(sizes)

    def build_estimator(self, params: Dict[str, Any]) -> Any:
        kwargs = {k: v for k, v in params.items() if k not in ("h1", "h2")}
        return self.estimator_class(
            hidden_layer_sizes=self.hidden_layer_sizes(params),
            **kwargs,
        )


@register(
    name="Vanilla2hnnclassifier",
    family="neural",
    description="Two hidden layer perceptron classifier",
    aliases=["mlp"],
)
class Vanilla2hnnClassifierModel(MLPModel):
    estimator_class = MLPClassifier


@register(
    name="Vanilla2hnnregressor",
    family="neural",
    description="Two hidden layer perceptron regressor",
)
class Vanilla2hnnRegressorModel(MLPModel):
    estimator_type = "regressor"
    estimator_class = MLPRegressor


@register(
    name="multinnregressor",
    family="neural",
    description="Two hidden layer perceptron regressor (tanh units)",
)
class MultiNNRegressorModel(MLPModel):
    estimator_type = "regressor"
    estimator_class = MLPRegressor

    def get_default_config(self) -> Dict[str, Any]:
        config = super().get_default_config()
        config["activation"] = "tanh"
        return config


@register(
    name="softmaxnnclassifier",
    family="neural",
    description="One hidden layer perceptron with softmax output",
)
class SoftmaxNNClassifierModel(MLPModel):
    estimator_class = MLPClassifier
    n_hidden = 1


__all__ = [
    "Vanilla2hnnClassifierModel",
    "Vanilla2hnnRegressorModel",
    "MultiNNRegressorModel",
    "SoftmaxNNClassifierModel",
]
