"""
Model specification strings.

A layer is configured as a list of strings of the form

    "<ModelName> <key>:<value> <key>:<value> ..."

e.g. ``"RandomForestClassifier estimators:100 max_depth:6 seed:1"``.
The name selects a registered model; the key/value pairs become that
model's configuration.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from ..exceptions import ModelSpecError

logger = logging.getLogger(__name__)

_TRUE = {"true", "yes", "on"}
_FALSE = {"false", "no", "off"}
_NONE = {"none", "null"}


@dataclass(frozen=True)
class ModelSpec:
    """
    Parsed model specification.

    Attributes:
        name: Model name as written (registry lookup is case-insensitive)
        params: Parameter values, already coerced to Python types
        raw: The original specification string, used in error messages
    """
    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    raw: str = ""

    def __str__(self) -> str:
        return self.raw or self.name


def coerce_value(text: str) -> Any:
    """
    Convert a textual parameter value to bool, None, int, float or str.

    Example:
        >>> coerce_value("100"), coerce_value("0.4"), coerce_value("false")
        (100, 0.4, False)
    """
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    if lowered in _NONE:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text.strip()


def parse_model_spec(spec: str) -> ModelSpec:
    """
    Parse a model specification string.

    Args:
        spec: String such as ``"LogisticRegression C:0.5 maxim_Iteration:200"``

    Returns:
        ModelSpec with name and coerced parameters

    Raises:
        ModelSpecError: If the string is empty or a parameter token is not
            of the form ``key:value``
    """
    if not isinstance(spec, str) or not spec.strip():
        raise ModelSpecError(
            f"Model specification must be a non-empty string, got {spec!r}",
            spec=str(spec),
        )

    tokens = spec.split()
    name = tokens[0]
    params: Dict[str, Any] = {}

    for token in tokens[1:]:
        key, sep, value = token.partition(":")
        if not sep or not key:
            raise ModelSpecError(
                f"Parameter '{token}' inside the '{spec}' is not of the form key:value",
                spec=spec,
            )
        if key in params:
            logger.warning(f"Parameter '{key}' given twice in '{spec}', keeping the last value")
        params[key] = coerce_value(value)

    return ModelSpec(name=name, params=params, raw=spec.strip())


__all__ = [
    "ModelSpec",
    "coerce_value",
    "parse_model_spec",
]
