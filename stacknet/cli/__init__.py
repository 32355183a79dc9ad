"""
CLI Module - Typer-based command-line interface for StackNet.

Commands:
- train: fit a StackNet from a CSV file and save it
- predict: score a CSV file with a saved StackNet
- models: list the learners usable in layer specifications
"""
import typer

from .info_commands import models_command
from .predict_commands import predict_command
from .train_commands import train_command
from .utils import console, show_error, show_info, show_success, show_warning

# Create main app
app = typer.Typer(
    name="stacknet",
    help="StackNet stacked generalization CLI",
    add_completion=False
)

# Register commands
app.command(name="train")(train_command)
app.command(name="predict")(predict_command)
app.command(name="models")(models_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


__all__ = [
    "app",
    "main",
    "console",
    "show_error",
    "show_success",
    "show_info",
    "show_warning",
]
