"""
Gradient boosting learners (XGBoost, LightGBM).

All models auto-register with ModelRegistry on import.

Example:
    from stacknet.models import ModelRegistry
    model = ModelRegistry.create_from_spec("XgboostClassifier max_depth:4 estimators:200")
"""
from .gradient_boosting import (
    LightgbmClassifierModel,
    LightgbmRegressorModel,
    XgboostClassifierModel,
    XgboostRegressorModel,
)

__all__ = [
    "XgboostClassifierModel",
    "XgboostRegressorModel",
    "LightgbmClassifierModel",
    "LightgbmRegressorModel",
]
