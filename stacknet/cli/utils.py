"""
CLI Utilities - Shared functions for CLI commands.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Tuple

import numpy as np
import pandas as pd
from rich.console import Console

console = Console()

PACKAGE_LOGGER = "stacknet"


def show_error(message: str) -> None:
    """Display error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def show_success(message: str) -> None:
    """Display success message."""
    console.print(f"[bold green]✓[/bold green] {message}")


def show_info(message: str) -> None:
    """Display info message."""
    console.print(f"[bold blue]ℹ[/bold blue] {message}")


def show_warning(message: str) -> None:
    """Display warning message."""
    console.print(f"[bold yellow]⚠[/bold yellow] {message}")


@contextmanager
def logging_session(verbose: bool = False, log_file: Optional[Path] = None) -> Iterator[None]:
    """
    Attach console (and optional file) handlers to the ``stacknet`` logger for
    the duration of a command. Records from other libraries are not captured.
    """
    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    ))
    handlers.append(console_handler)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = package_logger.level
    package_logger.setLevel(logging.DEBUG)
    for handler in handlers:
        package_logger.addHandler(handler)
    try:
        yield
    finally:
        for handler in handlers:
            package_logger.removeHandler(handler)
            handler.close()
        package_logger.setLevel(previous_level)


def read_table(path: Path, header: bool) -> pd.DataFrame:
    """Read a comma-separated file (no header unless requested)."""
    if not Path(path).exists():
        raise FileNotFoundError(f"Data file not found: {path}")
    return pd.read_csv(path, header=0 if header else None)


def split_target(
    frame: pd.DataFrame,
    target_column: Optional[int],
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Separate the target column (by position) from the features.

    Returns:
        (features, target or None)

    Raises:
        IndexError: If the target position is outside the table
    """
    if target_column is None:
        return frame.to_numpy(dtype=np.float64), None
    if not -frame.shape[1] <= target_column < frame.shape[1]:
        raise IndexError(
            f"Target column {target_column} is outside a table of {frame.shape[1]} columns"
        )
    position = target_column % frame.shape[1]
    target = frame.iloc[:, position].to_numpy()
    features = frame.drop(columns=frame.columns[position]).to_numpy(dtype=np.float64)
    return features, target
