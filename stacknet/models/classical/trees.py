"""
Tree learners - decision trees, random forests, gradient boosting and
AdaBoost over random forests.

CPU implementations from scikit-learn. Forests default to n_jobs=1 because
StackNet already runs the models of a layer in parallel.
"""
from __future__ import annotations

from typing import Any, Dict, Set

from sklearn.ensemble import (
    AdaBoostClassifier,
    AdaBoostRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from ..registry import register
from ..sklearn_model import SklearnModel


class TreeModel(SklearnModel):
    """Shared settings for tree learners."""

    family = "tree"
    param_aliases = {
        "bootsrap": "bootstrap",
        "max_tree_size": "max_leaf_nodes",
    }


@register(
    name="DecisionTreeClassifier",
    family="tree",
    description="Single CART decision tree classifier",
)
class DecisionTreeClassifierModel(TreeModel):
    estimator_class = DecisionTreeClassifier

    def get_default_config(self) -> Dict[str, Any]:
        return {"max_depth": 6, "min_samples_leaf": 2}


@register(
    name="DecisionTreeRegressor",
    family="tree",
    description="Single CART decision tree regressor",
)
class DecisionTreeRegressorModel(TreeModel):
    estimator_type = "regressor"
    estimator_class = DecisionTreeRegressor

    def get_default_config(self) -> Dict[str, Any]:
        return {"max_depth": 6, "min_samples_leaf": 2}


@register(
    name="RandomForestClassifier",
    family="tree",
    description="Random forest of classification trees",
    aliases=["rf"],
)
class RandomForestClassifierModel(TreeModel):
    """Random forest classifier (sample weights supported)."""

    estimator_class = RandomForestClassifier

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "max_features": "sqrt",
            "min_samples_leaf": 1,
            "n_jobs": 1,
        }


@register(
    name="RandomForestRegressor",
    family="tree",
    description="Random forest of regression trees",
)
class RandomForestRegressorModel(TreeModel):
    estimator_type = "regressor"
    estimator_class = RandomForestRegressor

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "max_features": 1.0,
            "min_samples_leaf": 1,
            "n_jobs": 1,
        }


@register(
    name="GradientBoostingForestClassifier",
    family="tree",
    description="Gradient boosted trees classifier",
    aliases=["gbc"],
)
class GradientBoostingForestClassifierModel(TreeModel):
    estimator_class = GradientBoostingClassifier

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "learning_rate": 0.1,
            "max_depth": 3,
            "subsample": 1.0,
        }


@register(
    name="GradientBoostingForestRegressor",
    family="tree",
    description="Gradient boosted trees regressor",
)
class GradientBoostingForestRegressorModel(TreeModel):
    estimator_type = "regressor"
    estimator_class = GradientBoostingRegressor

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "learning_rate": 0.1,
            "max_depth": 3,
            "subsample": 1.0,
        }


class AdaboostForestModel(TreeModel):
    """
    AdaBoost whose weak learner is a small random forest.

    Config keys:
        n_estimators: Boosting rounds
        learning_rate: Boosting shrinkage
        forest_estimators: Trees per forest
        max_depth, max_features, min_samples_leaf: Forest tree settings
        random_state: Seed for both boosting and the forests
    """

    booster_class: type = AdaBoostClassifier
    forest_class: type = RandomForestClassifier
    param_aliases = {**TreeModel.param_aliases, "trees": "forest_estimators"}

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 10,
            "learning_rate": 1.0,
            "forest_estimators": 10,
            "max_depth": 4,
            "max_features": "sqrt",
            "min_samples_leaf": 1,
            "random_state": None,
        }

    def accepted_params(self) -> Set[str]:
        return set(self.get_default_config())

    def build_estimator(self, params: Dict[str, Any]) -> Any:
        forest = self.forest_class(
            n_estimators=params["forest_estimators"],
            max_depth=params["max_depth"],
            max_features=params["max_features"],
            min_samples_leaf=params["min_samples_leaf"],
            random_state=params["random_state"],
            n_jobs=1,
        )
        return self.booster_class(
            estimator=forest,
            n_estimators=params["n_estimators"],
            learning_rate=params["learning_rate"],
            random_state=params["random_state"],
        )


@register(
    name="AdaboostRandomForestClassifier",
    family="tree",
    description="AdaBoost over random forest classifiers",
)
class AdaboostRandomForestClassifierModel(AdaboostForestModel):
    booster_class = AdaBoostClassifier
    forest_class = RandomForestClassifier


@register(
    name="AdaboostForestRegressor",
    family="tree",
    description="AdaBoost over random forest regressors",
)
class AdaboostForestRegressorModel(AdaboostForestModel):
    estimator_type = "regressor"
    booster_class = AdaBoostRegressor
    forest_class = RandomForestRegressor

    def get_default_config(self) -> Dict[str, Any]:
        config = super().get_default_config()
        config["max_features"] = 1.0
        return config


__all__ = [
    "DecisionTreeClassifierModel",
    "DecisionTreeRegressorModel",
    "RandomForestClassifierModel",
    "RandomForestRegressorModel",
    "GradientBoostingForestClassifierModel",
    "GradientBoostingForestRegressorModel",
    "AdaboostRandomForestClassifierModel",
    "AdaboostForestRegressorModel",
]
