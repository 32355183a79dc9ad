"""
Training command - fit a StackNet from a CSV file and save it.

The layers come from a params file (one model spec per line, blank line
between layers) or from the ``layers`` key of a YAML config. Settings are
resolved as: command-line options > YAML config > defaults.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.table import Table

from ..config import StackNetConfig, load_config, load_layer_specs
from ..ensemble import StackNetClassifier
from ..exceptions import ConfigurationError, StackNetError
from .utils import (
    console,
    logging_session,
    read_table,
    show_error,
    show_info,
    show_success,
    split_target,
)


def _build_config(
    config_file: Optional[Path],
    params_file: Optional[Path],
    overrides: Dict[str, Any],
) -> StackNetConfig:
    if config_file is not None:
        return load_config(config_file, params_file=params_file, **overrides)
    if params_file is None:
        raise ConfigurationError(
            "No layers given: pass --params with a params file or --config with a 'layers' key"
        )
    data: Dict[str, Any] = {"layers": load_layer_specs(params_file)}
    data.update({k: v for k, v in overrides.items() if v is not None})
    return StackNetConfig.from_dict(data)


def _print_scores(clf: StackNetClassifier) -> None:
    scores = clf.report.mean_scores()
    if not scores:
        return
    metric_names = {(s.level, s.model_index): s.metric for s in clf.report.fold_scores}
    table = Table(show_header=True, title="Mean fold scores")
    table.add_column("Layer", style="cyan")
    table.add_column("Model", style="green")
    table.add_column("Metric", style="yellow")
    table.add_column("Score", justify="right")
    for (level, index), value in sorted(scores.items()):
        spec = clf.config.layers[level - 1][index]
        table.add_row(str(level), spec, metric_names[(level, index)], f"{value:.6f}")
    console.print(table)


def train_command(
    data: Path = typer.Argument(..., help="Training CSV file"),
    params: Optional[Path] = typer.Option(
        None,
        "--params",
        "-p",
        help="Params file: one model spec per line, blank line between layers",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML config file (layers and settings)",
    ),
    output: Path = typer.Option(
        Path("stacknet_model.joblib"),
        "--output",
        "-o",
        help="Where to save the trained model",
    ),
    target_column: int = typer.Option(
        0,
        "--target-column",
        help="Position of the target column in the CSV",
    ),
    header: bool = typer.Option(
        False,
        "--header/--no-header",
        help="Whether the CSV has a header row",
    ),
    folds: Optional[int] = typer.Option(None, "--folds", help="Folds for forward training"),
    threads: Optional[int] = typer.Option(
        None, "--threads", help="Threads per layer (<= 0 uses every CPU)"
    ),
    metric: Optional[str] = typer.Option(
        None, "--metric", help="Diagnostic metric: logloss, accuracy or auc"
    ),
    restacking: Optional[bool] = typer.Option(
        None, "--restacking/--no-restacking", help="Restack earlier inputs into every layer"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    dump: Optional[bool] = typer.Option(
        None, "--dump/--no-dump", help="Write each layer's output to CSV"
    ),
    dump_prefix: Optional[str] = typer.Option(None, "--dump-prefix", help="Dump file prefix"),
    verbose: Optional[bool] = typer.Option(
        None, "--verbose/--quiet", help="Report per-fold scores"
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """
    Train a StackNet classifier and save it.
    """
    try:
        config = _build_config(
            config_file,
            params,
            {
                "folds": folds,
                "threads": threads,
                "metric": metric,
                "restacking": restacking,
                "seed": seed,
                "dump": dump,
                "dump_prefix": dump_prefix,
                "verbose": verbose,
            },
        )
        frame = read_table(data, header)
        X, y = split_target(frame, target_column)
    except (StackNetError, FileNotFoundError, IndexError, ValueError) as e:
        show_error(str(e))
        raise typer.Exit(1)

    show_info(
        f"Training {config.n_layers} layers / {config.n_models} models on "
        f"{X.shape[0]} rows x {X.shape[1]} columns"
    )

    with logging_session(verbose=config.verbose, log_file=log_file):
        try:
            clf = StackNetClassifier(config=config).fit(X, y)
        except StackNetError as e:
            show_error(str(e))
            raise typer.Exit(1)

    _print_scores(clf)
    clf.save(output)
    show_success(f"Model saved to {output} (classes: {', '.join(clf.get_classes())})")
