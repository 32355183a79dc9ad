"""
Classical learners built on scikit-learn.

Models:
- Trees: decision trees, random forests, gradient boosting, AdaBoost forests
- Linear: logistic regression, least squares, linear SVMs
- Neighbours: k-NN classifier/regressor
- Bayes: Gaussian naive Bayes
- Kernel: Nystroem kernel features + linear model

All models auto-register with ModelRegistry on import.

Example:
    from stacknet.models import ModelRegistry
    model = ModelRegistry.create_from_spec("RandomForestClassifier estimators:50")
"""

from .bayes import NaiveBayesClassifierModel
from .kernel import KernelmodelClassifierModel, KernelmodelRegressorModel
from .linear import LinearRegressionModel, LogisticRegressionModel
from .neighbors import KnnClassifierModel, KnnRegressorModel
from .svm import LSVCModel, LSVRModel
from .trees import (
    AdaboostForestRegressorModel,
    AdaboostRandomForestClassifierModel,
    DecisionTreeClassifierModel,
    DecisionTreeRegressorModel,
    GradientBoostingForestClassifierModel,
    GradientBoostingForestRegressorModel,
    RandomForestClassifierModel,
    RandomForestRegressorModel,
)

__all__ = [
    "AdaboostForestRegressorModel",
    "AdaboostRandomForestClassifierModel",
    "DecisionTreeClassifierModel",
    "DecisionTreeRegressorModel",
    "GradientBoostingForestClassifierModel",
    "GradientBoostingForestRegressorModel",
    "RandomForestClassifierModel",
    "RandomForestRegressorModel",
    "LogisticRegressionModel",
    "LinearRegressionModel",
    "LSVCModel",
    "LSVRModel",
    "KnnClassifierModel",
    "KnnRegressorModel",
    "NaiveBayesClassifierModel",
    "KernelmodelClassifierModel",
    "KernelmodelRegressorModel",
]
