"""
Neural network learners (scikit-learn perceptrons).

All models auto-register with ModelRegistry on import.
"""

from .mlp import (
    MultiNNRegressorModel,
    SoftmaxNNClassifierModel,
    Vanilla2hnnClassifierModel,
    Vanilla2hnnRegressorModel,
)

__all__ = [
    "Vanilla2hnnClassifierModel",
    "Vanilla2hnnRegressorModel",
    "MultiNNRegressorModel",
    "SoftmaxNNClassifierModel",
]
