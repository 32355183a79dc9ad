"""
Information commands - list the learners available to model specs.
"""
from typing import Optional

import typer
from rich.table import Table

from ..models import ModelRegistry
from .utils import console, show_error


def models_command(
    family: Optional[str] = typer.Option(
        None, "--family", "-f", help="Only list this model family"
    ),
) -> None:
    """
    List the model names usable in layer specifications.
    """
    if family is not None and family.lower() not in ModelRegistry.families():
        show_error(
            f"Unknown family '{family}'. Available families: {ModelRegistry.families()}"
        )
        raise typer.Exit(1)

    console.print("\n[bold cyan]Available StackNet Models[/bold cyan]\n")

    table = Table(show_header=True, title="Model Specifications")
    table.add_column("Model", style="cyan")
    table.add_column("Family", style="yellow")
    table.add_column("Type", style="magenta")
    table.add_column("Aliases", style="green")
    table.add_column("Description")

    for name in ModelRegistry.list_all():
        meta = ModelRegistry.get_metadata(name)
        if family is not None and meta["family"] != family.lower():
            continue
        table.add_row(
            meta["name"],
            meta["family"],
            meta["estimator_type"],
            ", ".join(meta["aliases"]) or "-",
            meta["description"],
        )

    console.print(table)
    console.print(
        "\n[dim]Use a model in a layer as '<Model> key:value ...', "
        "e.g. 'RandomForestClassifier estimators:100 max_depth:6'[/dim]\n"
    )
