"""
Gradient boosting learners from XGBoost and LightGBM.

Both libraries ship scikit-learn estimators, so the wrappers only set
defaults suited to running inside a StackNet layer: one thread per model
(the layer already trains its models in parallel) and silent training.
XGBoost requires contiguous 0..k-1 labels; the adapter's local class
encoding guarantees that even when a fold misses a class.
"""
from __future__ import annotations

from typing import Any, Dict

import lightgbm as lgb
import xgboost as xgb

from ..registry import register
from ..sklearn_model import SklearnModel


class BoostingModel(SklearnModel):
    family = "boosting"
    param_aliases = {
        "colsample": "colsample_bytree",
        "row_subsample": "subsample",
        "lambda": "reg_lambda",
        "alpha": "reg_alpha",
    }


# =============================================================================
# XGBOOST
# =============================================================================

class XgboostModel(BoostingModel):
    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "max_depth": 6,
            "learning_rate": 0.1,
            "subsample": 1.0,
            "colsample_bytree": 1.0,
            "min_child_weight": 1,
            "tree_method": "hist",
            "n_jobs": 1,
            "verbosity": 0,
        }


@register(
    name="XgboostClassifier",
    family="boosting",
    description="XGBoost gradient boosted trees classifier",
    aliases=["xgboost", "xgb"],
)
class XgboostClassifierModel(XgboostModel):
    estimator_class = xgb.XGBClassifier


@register(
    name="XgboostRegressor",
    family="boosting",
    description="XGBoost gradient boosted trees regressor",
)
class XgboostRegressorModel(XgboostModel):
    estimator_type = "regressor"
    estimator_class = xgb.XGBRegressor


# =============================================================================
# LIGHTGBM
# =============================================================================

class LightgbmModel(BoostingModel):
    param_aliases = {
        **BoostingModel.param_aliases,
        "leaves": "num_leaves",
        "min_leaf": "min_child_samples",
    }

    def get_default_config(self) -> Dict[str, Any]:
        return {
            "n_estimators": 100,
            "num_leaves": 31,
            "max_depth": -1,
            "learning_rate": 0.1,
            "subsample": 1.0,
            "colsample_bytree": 1.0,
            "min_child_samples": 20,
            "n_jobs": 1,
            "verbose": -1,
        }


@register(
    name="LightgbmClassifier",
    family="boosting",
    description="LightGBM leaf-wise gradient boosting classifier",
    aliases=["lightgbm", "lgbm"],
)
class LightgbmClassifierModel(LightgbmModel):
    estimator_class = lgb.LGBMClassifier


@register(
    name="LightgbmRegressor",
    family="boosting",
    description="LightGBM leaf-wise gradient boosting regressor",
)
class LightgbmRegressorModel(LightgbmModel):
    estimator_type = "regressor"
    estimator_class = lgb.LGBMRegressor


__all__ = [
    "XgboostClassifierModel",
    "XgboostRegressorModel",
    "LightgbmClassifierModel",
    "LightgbmRegressorModel",
]
