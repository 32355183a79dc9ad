"""
ModelRegistry - Plugin system for StackNet learners.

The registry replaces name-by-name dispatch with a single lookup table
populated once, at import time, by the @register decorator:

- Register learners using the @register decorator
- Create learners from "<ModelName> key:value ..." specification strings
- Ask whether a name is a regressor without building a learner
- List available learners by family

Example:
    >>> @register("MyTreeClassifier", family="tree")
    ... class MyTreeModel(SklearnModel):
    ...     estimator_class = DecisionTreeClassifier
    ...
    >>> model = ModelRegistry.create_from_spec("MyTreeClassifier max_depth:4")
    >>> ModelRegistry.list_models()
    {'tree': ['MyTreeClassifier']}
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..exceptions import ModelSpecError
from .base import BaseModel
from .spec import ModelSpec, parse_model_spec

logger = logging.getLogger(__name__)


def _key(name: str) -> str:
    return name.lower().strip()


class ModelRegistry:
    """
    Plugin registry for StackNet learners.

    Names are matched case-insensitively; metadata keeps the name as
    registered so listings show e.g. ``RandomForestClassifier``.

    Attributes:
        _models: Dict mapping lowercased names and aliases to model classes
        _families: Dict mapping family names to lists of model names
        _metadata: Dict mapping lowercased model names to metadata dicts
    """

    _models: dict[str, type[BaseModel]] = {}
    _families: dict[str, list[str]] = {}
    _metadata: dict[str, dict[str, Any]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        family: str,
        description: str = "",
        aliases: list[str] | None = None,
    ) -> Callable[[type[BaseModel]], type[BaseModel]]:
        """
        Decorator to register a model class.

        Args:
            name: Unique model identifier used in spec strings
            family: Model family (e.g., "tree", "linear", "neural")
            description: Human-readable description
            aliases: Alternative names for the model

        Raises:
            TypeError: If the class is not a BaseModel subclass
            ValueError: If model name is already registered
        """
        aliases = aliases or []

        def decorator(model_class: type[BaseModel]) -> type[BaseModel]:
            if not isinstance(model_class, type) or not issubclass(model_class, BaseModel):
                raise TypeError(
                    f"Model class must be a subclass of BaseModel, "
                    f"got {getattr(model_class, '__name__', model_class)}"
                )

            key = _key(name)
            if key in cls._models:
                raise ValueError(
                    f"Model '{name}' is already registered to "
                    f"{cls._models[key].__name__}"
                )

            cls._models[key] = model_class

            for alias in aliases:
                alias_key = _key(alias)
                if alias_key in cls._models:
                    logger.warning(f"Alias '{alias}' already registered, skipping")
                else:
                    cls._models[alias_key] = model_class

            cls._families.setdefault(family, []).append(name)

            cls._metadata[key] = {
                "name": name,
                "family": family,
                "description": description,
                "aliases": aliases,
                "class": model_class.__name__,
                "estimator_type": model_class.estimator_type,
            }

            logger.debug(
                f"Registered model '{name}' ({model_class.__name__}) "
                f"in family '{family}'"
            )
            return model_class

        return decorator

    @classmethod
    def get(cls, name: str) -> type[BaseModel]:
        """
        Get a model class by name.

        Raises:
            ModelSpecError: If model name is not registered
        """
        key = _key(name)
        if key not in cls._models:
            raise ModelSpecError(
                f"Unknown model '{name}'. Available models: {cls.list_all()}",
                spec=name,
            )
        return cls._models[key]

    @classmethod
    def resolve_spec(cls, spec: str | ModelSpec) -> tuple[ModelSpec, type[BaseModel]]:
        """
        Parse a specification string and look up its model class.

        Raises:
            ModelSpecError: If the spec is malformed or names an unknown model
        """
        parsed = spec if isinstance(spec, ModelSpec) else parse_model_spec(spec)
        key = _key(parsed.name)
        if key not in cls._models:
            raise ModelSpecError(
                f"The selected model '{parsed.name}' inside the '{parsed.raw}' "
                f"is not recognizable! Available models: {cls.list_all()}",
                spec=parsed.raw,
            )
        return parsed, cls._models[key]

    @classmethod
    def create_from_spec(
        cls,
        spec: str | ModelSpec,
        seed: int | None = None,
        n_classes: int | None = None,
    ) -> BaseModel:
        """
        Build a configured, untrained model from a specification string.

        Args:
            spec: "<ModelName> key:value ..." string
            seed: Random seed used when the spec does not set one
            n_classes: Classifier output width

        Returns:
            Fresh model instance

        Raises:
            ModelSpecError: If the name or any parameter is not recognised
        """
        parsed, model_class = cls.resolve_spec(spec)
        model = model_class()
        model.set_params(parsed.raw)
        if seed is not None:
            model.set_seed(seed)
        if n_classes is not None and model.is_classifier:
            model.set_n_classes(n_classes)
        return model

    @classmethod
    def is_regressor(cls, spec: str | ModelSpec) -> bool:
        """Whether the model named by a spec string outputs a single score column."""
        _, model_class = cls.resolve_spec(spec)
        return model_class.estimator_type == "regressor"

    @classmethod
    def list_models(cls) -> dict[str, list[str]]:
        """List all registered models by family."""
        return {family: list(models) for family, models in cls._families.items()}

    @classmethod
    def list_all(cls) -> list[str]:
        """Sorted list of all model names (excluding aliases)."""
        return sorted(meta["name"] for meta in cls._metadata.values())

    @classmethod
    def list_family(cls, family: str) -> list[str]:
        """
        List all models in a specific family.

        Raises:
            ValueError: If family is not found
        """
        family_key = family.lower().strip()
        if family_key not in cls._families:
            available = sorted(cls._families.keys())
            raise ValueError(
                f"Unknown family '{family}'. Available families: {available}"
            )
        return list(cls._families[family_key])

    @classmethod
    def get_metadata(cls, name: str) -> dict[str, Any]:
        """
        Get metadata for a registered model (name, family, description,
        aliases, class, estimator_type).

        Raises:
            ModelSpecError: If model name is not registered
        """
        model_class = cls.get(name)
        for meta in cls._metadata.values():
            if meta["class"] == model_class.__name__:
                return meta.copy()

        return {
            "name": name,
            "family": "unknown",
            "description": "",
            "aliases": [],
            "class": model_class.__name__,
            "estimator_type": model_class.estimator_type,
        }

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return _key(name) in cls._models

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered models.

        Primarily used for testing.
        """
        cls._models.clear()
        cls._families.clear()
        cls._metadata.clear()
        logger.debug("Cleared all registered models")

    @classmethod
    def families(cls) -> list[str]:
        return sorted(cls._families.keys())

    @classmethod
    def count(cls) -> int:
        """Number of registered models (excluding aliases)."""
        return len(cls._metadata)


# Convenience function for cleaner imports
def register(
    name: str,
    family: str,
    description: str = "",
    aliases: list[str] | None = None,
) -> Callable[[type[BaseModel]], type[BaseModel]]:
    """
    Convenience decorator for model registration.

    Equivalent to ModelRegistry.register().
    """
    return ModelRegistry.register(
        name=name,
        family=family,
        description=description,
        aliases=aliases,
    )


__all__ = [
    "ModelRegistry",
    "register",
]
