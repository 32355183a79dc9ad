"""
Linear learners - logistic regression and ordinary least squares.

LogisticRegression is the usual choice for the last StackNet layer: its
probabilities are calibrated and it trains quickly on meta-features.
"""
from __future__ import annotations

from typing import Any, Dict

from sklearn.linear_model import LinearRegression, LogisticRegression

from ..registry import register
from ..sklearn_model import SklearnModel


@register(
    name="LogisticRegression",
    family="linear",
    description="L2 regularised logistic regression (multinomial)",
    aliases=["lr"],
)
class LogisticRegressionModel(SklearnModel):
    """
    Logistic Regression classifier with sample weight support.

    Uses scikit-learn's lbfgs solver. Requires scaled features for best
    results; meta-features from earlier layers already are probabilities.
    """

    family = "linear"
    estimator_class = LogisticRegression
    param_aliases = {"l2_C": "C", "tolerance": "tol"}

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "C": 1.0,
            "max_iter": 500,
            "tol": 1e-4,
        }


@register(
    name="LinearRegression",
    family="linear",
    description="Ordinary least squares regression",
)
class LinearRegressionModel(SklearnModel):
    family = "linear"
    estimator_type = "regressor"
    estimator_class = LinearRegression

    def get_default_config(self) -> Dict[str, Any]:
        return {"fit_intercept": True}


__all__ = [
    "LogisticRegressionModel",
    "LinearRegressionModel",
]
