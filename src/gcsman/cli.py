#!/usr/bin/env python3
"""
gcsman - Cloud Storage bucket manager

A CLI tool for bulk object operations against the Cloud Storage JSON API.
"""
import typer
from rich.console import Console

from . import __version__
from .commands import bucket, config, objects
from .utils.config import Config
from .utils.logging_config import LoggingConfig, setup_logging

app = typer.Typer(
    help="Cloud Storage bucket manager - list, delete and change access to objects in bulk.",
    add_completion=True,
    no_args_is_help=True,
)
console = Console()

# Add subcommands
app.add_typer(objects.app, name="objects")
app.add_typer(bucket.app, name="bucket")
app.add_typer(config.app, name="config")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging before any command runs."""
    logging_config = LoggingConfig.from_dict(Config().get_logging_config())
    setup_logging(logging_config, verbose=verbose)


# Add version command
@app.command()
def version():
    """Show the application version and exit."""
    console.print(f"gcsman version: {__version__}")
    raise typer.Exit()


if __name__ == "__main__":
    app()
