"""
Gaussian naive Bayes classifier.
"""
from __future__ import annotations

from typing import Any, Dict

from sklearn.naive_bayes import GaussianNB

from ..registry import register
from ..sklearn_model import SklearnModel


@register(
    name="NaiveBayesClassifier",
    family="bayes",
    description="Gaussian naive Bayes",
    aliases=["nb"],
)
class NaiveBayesClassifierModel(SklearnModel):
    """Gaussian naive Bayes. Sparse input is densified (GaussianNB needs dense)."""

    family = "bayes"
    estimator_class = GaussianNB
    accepts_sparse = False
    param_aliases = {"Shrinkage": "var_smoothing"}

    def get_default_config(self) -> Dict[str, Any]:
        return {"var_smoothing": 1e-9}


__all__ = ["NaiveBayesClassifierModel"]
