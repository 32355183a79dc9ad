"""
k-nearest-neighbour learners.
"""
from __future__ import annotations

from typing import Any, Dict

from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor

from ..registry import register
from ..sklearn_model import SklearnModel


class NeighborsModel(SklearnModel):
    family = "neighbors"
    param_aliases = {"neighbours": "n_neighbors", "distance": "metric"}

    def get_default_config(self) -> Dict[str, Any]:
        return {"n_neighbors": 10, "weights": "distance", "n_jobs": 1}


@register(
    name="knnClassifier",
    family="neighbors",
    description="k-nearest-neighbour classifier",
    aliases=["knn"],
)
class KnnClassifierModel(NeighborsModel):
    estimator_class = KNeighborsClassifier


@register(
    name="knnRegressor",
    family="neighbors",
    description="k-nearest-neighbour regressor",
)
class KnnRegressorModel(NeighborsModel):
    estimator_type = "regressor"
    estimator_class = KNeighborsRegressor


__all__ = [
    "KnnClassifierModel",
    "KnnRegressorModel",
]
