"""
Factorization machines trained with minibatch SGD.

A factorization machine scores a row as

    y(x) = w0 + <w, x> + sum_{i<j} <v_i, v_j> x_i x_j

where the pairwise term is computed in O(n_features * n_factors) as
0.5 * sum_f [(x V)_f^2 - (x^2 V^2)_f]. Dense and CSR sparse inputs are
both supported. Classification is binary logistic, or one-vs-rest over
one machine per class when there are more than two classes.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

import numpy as np
import scipy.sparse as sp
from scipy.special import expit
from sklearn.base import BaseEstimator, ClassifierMixin, RegressorMixin

logger = logging.getLogger(__name__)


def _square(X: Any) -> Any:
    return X.multiply(X).tocsr() if sp.issparse(X) else X * X


def fm_scores(X: Any, w0: float, w: np.ndarray, V: np.ndarray) -> np.ndarray:
    """Raw factorization machine output for every row of X."""
    XV = np.asarray(X @ V)
    X2V2 = np.asarray(_square(X) @ (V * V))
    pairwise = 0.5 * (XV ** 2 - X2V2).sum(axis=1)
    linear = np.asarray(X @ w).ravel()
    return w0 + linear + pairwise


class BaseFactorizationMachine(BaseEstimator):
    """
    Shared SGD training for factorization machines.

    Args:
        n_factors: Latent dimension of the pairwise interactions
        init_std: Standard deviation of the initial latent factors
        learning_rate: SGD step size
        reg_linear: L2 penalty on the linear weights
        reg_factors: L2 penalty on the latent factors
        max_iter: Passes over the training data
        batch_size: Rows per SGD step
        shuffle: Reshuffle rows every pass
        random_state: Seed for initialisation and shuffling
    """

    def __init__(
        self,
        n_factors: int = 4,
        init_std: float = 0.1,
        learning_rate: float = 0.05,
        reg_linear: float = 1e-4,
        reg_factors: float = 1e-4,
        max_iter: int = 20,
        batch_size: int = 32,
        shuffle: bool = True,
        random_state: Optional[int] = None,
    ) -> None:
        self.n_factors = n_factors
        self.init_std = init_std
        self.learning_rate = learning_rate
        self.reg_linear = reg_linear
        self.reg_factors = reg_factors
        self.max_iter = max_iter
        self.batch_size = batch_size
        self.shuffle = shuffle
        self.random_state = random_state

    def _check_input(self, X: Any) -> Any:
        if sp.issparse(X):
            return X.tocsr().astype(np.float64)
        return np.asarray(X, dtype=np.float64)

    def _sgd(
        self,
        X: Any,
        target: np.ndarray,
        sample_weight: np.ndarray,
        logistic: bool,
        rng: np.random.RandomState,
    ) -> Tuple[float, np.ndarray, np.ndarray]:
        n_rows, n_features = X.shape
        w0 = 0.0
        w = np.zeros(n_features)
        V = rng.normal(0.0, self.init_std, size=(n_features, self.n_factors))
        batch = max(1, int(self.batch_size))

        for epoch in range(1, int(self.max_iter) + 1):
            order = rng.permutation(n_rows) if self.shuffle else np.arange(n_rows)
            for start in range(0, n_rows, batch):
                idx = order[start:start + batch]
                Xb = X[idx]
                scores = fm_scores(Xb, w0, w, V)
                residual = (expit(scores) if logistic else scores) - target[idx]
                residual = residual * sample_weight[idx]
                size = len(idx)

                XV = np.asarray(Xb @ V)
                grad_w0 = residual.mean()
                grad_w = np.asarray(Xb.T @ residual).ravel() / size + self.reg_linear * w
                x2_residual = np.asarray(_square(Xb).T @ residual).ravel()
                grad_V = (
                    np.asarray(Xb.T @ (residual[:, None] * XV)) - V * x2_residual[:, None]
                ) / size + self.reg_factors * V

                w0 -= self.learning_rate * grad_w0
                w -= self.learning_rate * grad_w
                V -= self.learning_rate * grad_V

            if not (np.isfinite(w0) and np.all(np.isfinite(w)) and np.all(np.isfinite(V))):
                raise ValueError(
                    f"Factorization machine diverged at epoch {epoch}; "
                    f"lower learning_rate or raise regularisation"
                )

        logger.debug(f"Factorization machine trained: {self.max_iter} epoch(s), {n_rows} rows")
        return w0, w, V

    def _weights(self, n_rows: int, sample_weight: Optional[np.ndarray]) -> np.ndarray:
        if sample_weight is None:
            return np.ones(n_rows)
        return np.asarray(sample_weight, dtype=np.float64).ravel()


class FactorizationMachineClassifier(ClassifierMixin, BaseFactorizationMachine):
    """Logistic factorization machine (one-vs-rest for more than two classes)."""

    def fit(self, X: Any, y: np.ndarray, sample_weight: Optional[np.ndarray] = None):
        X = self._check_input(X)
        y = np.asarray(y).ravel()
        self.classes_ = np.unique(y)
        rng = np.random.RandomState(self.random_state)
        weights = self._weights(X.shape[0], sample_weight)

        # Binary problems need a single machine scoring the second class
        positives = self.classes_[1:] if len(self.classes_) == 2 else self.classes_
        self.machines_ = [
            self._sgd(X, (y == cls).astype(np.float64), weights, True, rng)
            for cls in positives
        ]
        return self

    def predict_proba(self, X: Any) -> np.ndarray:
        X = self._check_input(X)
        probs = np.column_stack([expit(fm_scores(X, *machine)) for machine in self.machines_])
        if len(self.classes_) == 2:
            return np.column_stack([1.0 - probs[:, 0], probs[:, 0]])
        return probs / probs.sum(axis=1, keepdims=True)

    def predict(self, X: Any) -> np.ndarray:
        return self.classes_[np.argmax(self.predict_proba(X), axis=1)]


class FactorizationMachineRegressor(RegressorMixin, BaseFactorizationMachine):
    """Squared-loss factorization machine."""

    def fit(self, X: Any, y: np.ndarray, sample_weight: Optional[np.ndarray] = None):
        X = self._check_input(X)
        y = np.asarray(y, dtype=np.float64).ravel()
        rng = np.random.RandomState(self.random_state)
        self.machine_ = self._sgd(X, y, self._weights(X.shape[0], sample_weight), False, rng)
        return self

    def predict(self, X: Any) -> np.ndarray:
        return fm_scores(self._check_input(X), *self.machine_)


__all__ = [
    "FactorizationMachineClassifier",
    "FactorizationMachineRegressor",
    "fm_scores",
]
