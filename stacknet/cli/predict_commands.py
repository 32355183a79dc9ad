"""
Prediction command - score a CSV file with a saved StackNet.
"""
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
import typer

from ..ensemble import EnsemblePredictor, StackNetClassifier
from ..exceptions import StackNetError
from .utils import logging_session, read_table, show_error, show_success, split_target


def predict_command(
    model: Path = typer.Argument(..., help="Model saved by 'stacknet train'"),
    data: Path = typer.Argument(..., help="CSV file to score"),
    output: Path = typer.Option(
        Path("predictions.csv"),
        "--output",
        "-o",
        help="Where to write the predictions",
    ),
    target_column: Optional[int] = typer.Option(
        None,
        "--target-column",
        help="Position of a target column to drop before scoring",
    ),
    header: bool = typer.Option(
        False,
        "--header/--no-header",
        help="Whether the CSV has a header row",
    ),
    labels: bool = typer.Option(
        False,
        "--labels/--proba",
        help="Write predicted labels instead of class probabilities",
    ),
    threads: Optional[int] = typer.Option(None, "--threads", help="Threads per layer"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """
    Score a CSV file: one row of class probabilities (or one label) per input row.
    """
    try:
        clf = StackNetClassifier.load(model)
        X, _ = split_target(read_table(data, header), target_column)
    except (StackNetError, FileNotFoundError, IndexError, ValueError) as e:
        show_error(str(e))
        raise typer.Exit(1)

    with logging_session(verbose=False, log_file=log_file):
        try:
            predictor = EnsemblePredictor(clf.ensemble, threads=threads)
            result = predictor.predict(X) if labels else predictor.predict_proba(X)
        except StackNetError as e:
            show_error(str(e))
            raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(np.asarray(result).reshape(len(result), -1)).to_csv(
        output, header=False, index=False
    )
    show_success(f"Wrote {len(result)} predictions to {output}")
