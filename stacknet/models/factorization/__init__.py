"""
Factorization machine learners.

All models auto-register with ModelRegistry on import.
"""
from .fm import FactorizationMachineClassifier, FactorizationMachineRegressor
from .libfm import LibFmClassifierModel, LibFmRegressorModel

__all__ = [
    "FactorizationMachineClassifier",
    "FactorizationMachineRegressor",
    "LibFmClassifierModel",
    "LibFmRegressorModel",
]
