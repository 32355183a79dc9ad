"""
Shared fixtures for StackNet tests.

Provides:
- Synthetic multi-class and binary classification data
- Fast layer specifications (small forests, linear models)
- A registry snapshot fixture for tests that register their own models
- A registered classifier whose scores are all NaN
"""
from typing import Dict, List

import numpy as np
import pytest

from stacknet.models import BaseModel, ModelRegistry, register


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture
def multiclass_data() -> Dict[str, np.ndarray]:
    """
    Generate synthetic 3-class tabular data with learnable structure.

    Returns dict with:
        - X_train: (200, 10) training features
        - y_train: (200,) training labels in {0, 1, 2}
        - X_test: (50, 10) test features
        - y_test: (50,) test labels
    """
    np.random.seed(42)
    n_train, n_test, n_features = 200, 50, 10

    X = np.random.randn(n_train + n_test, n_features)
    y = np.digitize(X[:, 0] + 0.5 * X[:, 1], [-0.5, 0.5])

    return {
        "X_train": X[:n_train],
        "y_train": y[:n_train],
        "X_test": X[n_train:],
        "y_test": y[n_train:],
    }


@pytest.fixture
def binary_data() -> Dict[str, np.ndarray]:
    """
    Generate synthetic binary data.

    Returns dict with:
        - X_train: (160, 6) training features
        - y_train: (160,) training labels in {0, 1}
        - X_test: (40, 6) test features
    """
    np.random.seed(42)
    n_train, n_test, n_features = 160, 40, 6

    X = np.random.randn(n_train + n_test, n_features)
    y = (X[:, 0] - X[:, 2] > 0).astype(int)

    return {
        "X_train": X[:n_train],
        "y_train": y[:n_train],
        "X_test": X[n_train:],
    }


# =============================================================================
# CONFIG FIXTURES
# =============================================================================

@pytest.fixture
def fast_layers() -> List[List[str]]:
    """Two-layer StackNet that trains in well under a second."""
    return [
        ["RandomForestClassifier estimators:10 max_depth:3", "LogisticRegression"],
        ["LogisticRegression"],
    ]


@pytest.fixture
def isolate_registry():
    """
    Store and restore registry state around a test.

    Use in tests that register throwaway models.
    """
    original_models = ModelRegistry._models.copy()
    original_families = {k: list(v) for k, v in ModelRegistry._families.items()}
    original_metadata = {k: v.copy() for k, v in ModelRegistry._metadata.items()}

    yield

    ModelRegistry._models = original_models
    ModelRegistry._families = {k: list(v) for k, v in original_families.items()}
    ModelRegistry._metadata = {k: v.copy() for k, v in original_metadata.items()}


@pytest.fixture
def nan_model(isolate_registry) -> str:
    """Register a classifier that fits normally but scores every row as NaN."""
    @register("NanScoreClassifier", family="test")
    class NanScoreModel(BaseModel):
        @property
        def model_family(self) -> str:
            return "test"

        def get_default_config(self):
            return {}

        def fit(self, X, y=None, sample_weights=None):
            self._resolve_target(y)
            self._is_fitted = True
            return self

        def predict_proba(self, X):
            self._validate_fitted()
            return np.full((X.shape[0], self.output_width()), np.nan)

    return "NanScoreClassifier"
