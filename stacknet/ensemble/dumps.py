"""
Diagnostic dumps of per-layer outputs.

Training writes ``<prefix><level>.csv`` for each non-terminal layer's
meta-features; inference writes ``<prefix>_test<level>.csv`` for every layer.
Levels are 1-based, files are comma-delimited without header or index.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def dump_path(
    prefix: str,
    level: int,
    test: bool = False,
    directory: Optional[Union[str, Path]] = None,
) -> Path:
    """Path of the dump file for a 1-based layer level."""
    name = f"{prefix}_test{level}.csv" if test else f"{prefix}{level}.csv"
    return Path(directory or ".") / name


def write_dump(
    matrix: np.ndarray,
    prefix: str,
    level: int,
    test: bool = False,
    directory: Optional[Union[str, Path]] = None,
) -> Path:
    """Write one layer's output matrix and return the file path."""
    path = dump_path(prefix, level, test=test, directory=directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(np.asarray(matrix)).to_csv(path, header=False, index=False)
    logger.info(f"Wrote layer {level} {'test ' if test else ''}output to {path}")
    return path


__all__ = [
    "dump_path",
    "write_dump",
]
