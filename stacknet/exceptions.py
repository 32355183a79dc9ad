"""
StackNet exceptions.

Every error raised by the package derives from StackNetError and also from
the builtin exception it refines, so callers can catch either.
"""
from __future__ import annotations

from typing import List, Optional


class StackNetError(Exception):
    """Base class for all StackNet errors."""
    pass


class ConfigurationError(StackNetError, ValueError):
    """Raised when the ensemble configuration is invalid."""
    pass


class ConfigError(ConfigurationError):
    """Raised when a configuration file cannot be loaded or parsed."""
    pass


class ConfigValidationError(ConfigurationError):
    """Raised when one or more configuration fields fail validation."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = errors
        super().__init__(f"Configuration validation failed: {errors}")


class ModelSpecError(ConfigurationError):
    """Raised when a model specification string cannot be resolved."""

    def __init__(self, message: str, spec: Optional[str] = None) -> None:
        self.spec = spec
        super().__init__(message)


class ShapeMismatchError(StackNetError, ValueError):
    """Raised when array dimensions disagree."""
    pass


class TargetError(StackNetError, ValueError):
    """Raised when the target variable cannot support classification."""
    pass


class TerminalRegressorError(StackNetError, ValueError):
    """Raised when a regressor is placed in the terminal layer."""

    def __init__(self, spec: str, level: int) -> None:
        self.spec = spec
        self.level = level
        super().__init__(
            f"The last layer of StackNet cannot have a regressor unless the "
            f"metric is auc and it is a binary problem: '{spec}' in layer {level}"
        )


class NotFittedError(StackNetError, RuntimeError):
    """Raised when scoring is attempted before a successful fit."""
    pass


class TrainingAbortedError(StackNetError, RuntimeError):
    """Raised when a worker task fails while fitting or scoring a layer."""

    def __init__(
        self,
        message: str,
        level: Optional[int] = None,
        model_index: Optional[int] = None,
        spec: Optional[str] = None,
    ) -> None:
        self.level = level
        self.model_index = model_index
        self.spec = spec
        super().__init__(message)


__all__ = [
    "StackNetError",
    "ConfigurationError",
    "ConfigError",
    "ConfigValidationError",
    "ModelSpecError",
    "ShapeMismatchError",
    "TargetError",
    "TerminalRegressorError",
    "NotFittedError",
    "TrainingAbortedError",
]
