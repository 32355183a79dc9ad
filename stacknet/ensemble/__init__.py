"""
StackNet ensemble engine.

Components:
- LayerTrainer: k-fold forward training and final refit of one layer
- ParallelFitScheduler: batch thread pool shared by training and inference
- StackNetTrainer / TrainedEnsemble: whole-network training and its result
- EnsemblePredictor: inference replay and probability aggregation
- StackNetClassifier: top-level façade with save/load
"""
from __future__ import annotations

from .class_index import ClassIndex
from .classifier import StackNetClassifier
from .layer_trainer import FoldScore, LayerResult, LayerTrainer
from .layers import TrainedLayer, estimate_output_width, validate_layers
from .predictor import EnsemblePredictor
from .reshaper import reshape
from .scaling import ProbabilityScaler
from .scheduler import ModelTask, ParallelFitScheduler, resolve_threads
from .trainer import StackNetTrainer, TrainedEnsemble, TrainingReport

__all__ = [
    "ClassIndex",
    "StackNetClassifier",
    "FoldScore",
    "LayerResult",
    "LayerTrainer",
    "TrainedLayer",
    "estimate_output_width",
    "validate_layers",
    "EnsemblePredictor",
    "reshape",
    "ProbabilityScaler",
    "ModelTask",
    "ParallelFitScheduler",
    "resolve_threads",
    "StackNetTrainer",
    "TrainedEnsemble",
    "TrainingReport",
]
