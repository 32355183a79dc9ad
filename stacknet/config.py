"""
StackNet configuration.

StackNetConfig is an immutable description of an ensemble: its layers (each
a list of model specification strings) and the training settings. It can be
built directly, from a dict, from a YAML file, or with the layers read from a
StackNet params file:

    # layer 1
    RandomForestClassifier estimators:100 max_depth:6
    LogisticRegression C:0.5

    # layer 2 (a blank line starts a new layer)
    LogisticRegression
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import yaml

from .exceptions import ConfigError, ConfigurationError, ConfigValidationError

logger = logging.getLogger(__name__)

Layers = Tuple[Tuple[str, ...], ...]

SUPPORTED_METRICS = ("logloss", "accuracy", "auc")


def _normalize_layers(layers: Any) -> Layers:
    if isinstance(layers, (str, bytes)) or not isinstance(layers, Sequence):
        raise ConfigurationError(
            f"layers must be a list of lists of model specification strings, "
            f"got {type(layers).__name__}"
        )
    normalized = []
    for level, layer in enumerate(layers, start=1):
        if isinstance(layer, str) or not isinstance(layer, Sequence):
            raise ConfigurationError(
                f"Layer {level} must be a list of model specification strings, got {layer!r}"
            )
        specs = []
        for spec in layer:
            if not isinstance(spec, str) or not spec.strip():
                raise ConfigurationError(
                    f"Layer {level} contains an empty or non-string model specification: {spec!r}"
                )
            specs.append(spec.strip())
        normalized.append(tuple(specs))
    return tuple(normalized)


@dataclass(frozen=True)
class StackNetConfig:
    """
    Configuration of a StackNet ensemble.

    Attributes:
        layers: Model specification strings per layer (at least 2 layers)
        folds: Folds used for k-fold forward training (>= 2)
        threads: Thread count per layer step (<= 0 means one per CPU)
        metric: Diagnostic metric: logloss, accuracy or auc
        restacking: Feed every layer with all earlier inputs plus its
            predecessor's meta-features instead of the meta-features alone
        verbose: Log per-fold scores and progress at INFO level
        dump: Write per-layer outputs to CSV files
        dump_prefix: File name prefix of the dumps
        dump_dir: Folder of the dumps (current directory when None)
        seed: Seed for fold partitioning and the models
    """
    layers: Layers
    folds: int = 5
    threads: int = 1
    metric: str = "logloss"
    restacking: bool = False
    verbose: bool = False
    dump: bool = False
    dump_prefix: str = "stacknet"
    dump_dir: Optional[str] = None
    seed: int = 1

    def __post_init__(self) -> None:
        """Normalize the layers and validate every setting."""
        object.__setattr__(self, "layers", _normalize_layers(self.layers))
        if self.dump_dir is not None:
            object.__setattr__(self, "dump_dir", str(self.dump_dir))

        errors: List[str] = []
        if len(self.layers) < 2:
            errors.append(f"StackNet needs at least 2 layers, got {len(self.layers)}")
        for level, layer in enumerate(self.layers, start=1):
            if not layer:
                errors.append(f"Layer {level} has no models")
        if isinstance(self.folds, bool) or not isinstance(self.folds, int) or self.folds < 2:
            errors.append(f"folds must be an integer >= 2, got {self.folds!r}")
        if isinstance(self.threads, bool) or not isinstance(self.threads, int):
            errors.append(f"threads must be an integer, got {self.threads!r}")
        if self.metric not in SUPPORTED_METRICS:
            errors.append(
                f"metric must be one of {list(SUPPORTED_METRICS)}, got {self.metric!r}"
            )
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            errors.append(f"seed must be an integer, got {self.seed!r}")
        if not isinstance(self.dump_prefix, str) or not self.dump_prefix.strip():
            errors.append("dump_prefix must be a non-empty string")
        elif "/" in self.dump_prefix or "\\" in self.dump_prefix:
            errors.append(
                f"dump_prefix '{self.dump_prefix}' must be a file name prefix; "
                f"use dump_dir for the folder"
            )

        if errors:
            raise ConfigValidationError(errors)

    @property
    def n_layers(self) -> int:
        return len(self.layers)

    @property
    def n_models(self) -> int:
        return sum(len(layer) for layer in self.layers)

    def replace(self, **changes: Any) -> "StackNetConfig":
        """Copy with some fields changed (validated again)."""
        data = self.to_dict()
        data.update(changes)
        return StackNetConfig.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "layers": [list(layer) for layer in self.layers],
            "folds": self.folds,
            "threads": self.threads,
            "metric": self.metric,
            "restacking": self.restacking,
            "verbose": self.verbose,
            "dump": self.dump,
            "dump_prefix": self.dump_prefix,
            "dump_dir": self.dump_dir,
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StackNetConfig":
        """
        Create StackNetConfig from dictionary.

        Raises:
            ConfigurationError: If a key is unknown or layers are missing
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {unknown}. Valid keys: {sorted(known)}"
            )
        if "layers" not in data:
            raise ConfigurationError("Configuration has no 'layers'")
        return cls(**data)


# =============================================================================
# LOADERS
# =============================================================================

def load_yaml_config(path: Union[str, Path], explicit: bool = True) -> Dict[str, Any]:
    """
    Load configuration values from a YAML file.

    Args:
        path: Path to the YAML file
        explicit: If True, raise ConfigError on any failure (user-requested
            config). If False, FileNotFoundError and yaml errors propagate.

    Raises:
        ConfigError: If explicit and the file is missing, unreadable or not a mapping
    """
    path = Path(path)
    if not path.exists():
        if explicit:
            raise ConfigError(
                f"Configuration file not found: {path.absolute()}\n"
                f"Suggestion: Check that the file exists and the path is correct."
            )
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        if explicit:
            raise ConfigError(
                f"Failed to parse YAML configuration from {path.absolute()}\n"
                f"Error: {e}"
            ) from e
        raise

    if config is None:
        logger.warning(f"Empty config file: {path}")
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping, got {type(config).__name__}")

    logger.debug(f"Loaded config from {path}: {len(config)} keys")
    return config


def load_layer_specs(path: Union[str, Path]) -> Layers:
    """
    Read layers from a StackNet params file.

    One model specification per line; blank lines separate layers; lines
    starting with ``#`` are comments.

    Raises:
        ConfigError: If the file is missing or contains no models
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Params file not found: {path.absolute()}")

    layers: List[List[str]] = []
    current: List[str] = []
    with open(path) as f:
        for line in f:
            text = line.strip()
            if text.startswith("#"):
                continue
            if not text:
                if current:
                    layers.append(current)
                    current = []
                continue
            current.append(text)
    if current:
        layers.append(current)

    if not layers:
        raise ConfigError(f"Params file {path} contains no model specifications")
    logger.debug(f"Read {len(layers)} layer(s) from {path}")
    return tuple(tuple(layer) for layer in layers)


def load_config(
    path: Union[str, Path],
    params_file: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> StackNetConfig:
    """
    Build a StackNetConfig from a YAML file.

    Precedence: overrides (non-None) > YAML values > defaults. The layers come
    from params_file when given, otherwise from the YAML ``layers`` key (which
    may also be a path to a params file, relative to the YAML file).
    """
    path = Path(path)
    data = load_yaml_config(path, explicit=True)
    if params_file is not None:
        data["layers"] = load_layer_specs(params_file)
    elif isinstance(data.get("layers"), str):
        data["layers"] = load_layer_specs(path.parent / data["layers"])
    data.update({k: v for k, v in overrides.items() if v is not None})
    return StackNetConfig.from_dict(data)


__all__ = [
    "Layers",
    "SUPPORTED_METRICS",
    "StackNetConfig",
    "load_yaml_config",
    "load_layer_specs",
    "load_config",
]
