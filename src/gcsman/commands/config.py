"""Configuration management commands for gcsman."""

import json
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from ..utils.config import Config

app = typer.Typer(help="Manage gcsman configuration settings (client, bulk, logging).")
console = Console()

SECRET_KEYS = {"access_token"}


@app.command("show")
def show_config(
    section: str = typer.Option(
        None, "--section", "-s", help="Show specific configuration section (client, bulk, logging)"
    ),
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, yaml, json"),
) -> None:
    """Show effective configuration (defaults, file and environment merged)."""
    config = Config()
    config_data = {
        "client": _mask_secrets(config.get_client_config()),
        "bulk": config.get_bulk_config(),
        "logging": config.get_logging_config(),
    }

    if section:
        if section not in config_data:
            console.print(f"[red]Configuration section '{section}' not found.[/red]")
            console.print(f"Available sections: {', '.join(config_data.keys())}")
            raise typer.Exit(1)
        config_data = {section: config_data[section]}

    if format == "yaml":
        yaml_output = yaml.dump(config_data, default_flow_style=False, indent=2, sort_keys=False)
        console.print(Syntax(yaml_output, "yaml", theme="monokai", line_numbers=True))
    elif format == "json":
        json_output = json.dumps(config_data, indent=2)
        console.print(Syntax(json_output, "json", theme="monokai", line_numbers=True))
    elif format == "table":
        _display_config_table(config_data)
    else:
        console.print(f"[red]Error: Unknown format '{format}'. Use table, yaml or json.[/red]")
        raise typer.Exit(1)


@app.command("path")
def show_config_path():
    """Show the path to the configuration file."""
    config = Config()
    config_path = config.get_config_file_path()

    console.print(f"[green]Configuration file:[/green] {config_path}")

    if config_path.exists():
        console.print("[green]File exists:[/green] Yes")
        console.print(f"[green]File size:[/green] {config_path.stat().st_size} bytes")
    else:
        console.print("[yellow]File exists:[/yellow] No")


@app.command("set")
def set_config(
    key_value: str = typer.Argument(
        ..., help="Configuration key=value pair (e.g., bulk.concurrency_limit=20)"
    ),
) -> None:
    """Set a configuration value using key=value format.

    Examples:
    - gcsman config set bulk.concurrency_limit=20
    - gcsman config set bulk.force=true
    - gcsman config set client.user_project=my-billing-project
    - gcsman config set logging.level=DEBUG
    """
    if "=" not in key_value:
        console.print(
            "[red]Error: Invalid format. Use 'key=value' (e.g., bulk.force=true)[/red]"
        )
        raise typer.Exit(1)

    key, value = key_value.split("=", 1)
    key = key.strip()
    value = value.strip()

    if not key or not value:
        console.print("[red]Error: Both key and value are required[/red]")
        raise typer.Exit(1)

    config = Config()
    parsed_value = _parse_config_value(value)

    if key.startswith("bulk."):
        errors = config.validate_bulk_config(
            dict(config.get_bulk_config(), **{key.split(".", 1)[1]: parsed_value})
        )
        if errors:
            for error in errors:
                console.print(f"[red]Error: {error}[/red]")
            raise typer.Exit(1)

    config.set(key, parsed_value)

    shown = "****" if key.split(".")[-1] in SECRET_KEYS else parsed_value
    console.print(f"[green]✓ Configuration '{key}' set to '{shown}'[/green]")


def _mask_secrets(section: dict) -> dict:
    return {
        key: ("****" if key in SECRET_KEYS and value else value) for key, value in section.items()
    }


def _display_config_table(config_data: dict) -> None:
    """Display configuration data in table format."""
    for section_name, section_data in config_data.items():
        console.print(f"\n[bold blue]{section_name.title()} Configuration[/bold blue]")

        table = Table()
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in section_data.items():
            table.add_row(key, "" if value is None else str(value))
        console.print(table)


def _parse_config_value(value: str) -> Any:
    """Parse configuration value string into appropriate Python type."""
    lowered = value.strip().lower()

    # Boolean values
    if lowered in ["true", "false", "yes", "no", "on", "off"]:
        return lowered in ["true", "yes", "on"]

    # Integer values
    try:
        return int(value)
    except ValueError:
        pass

    # Float values
    try:
        return float(value)
    except ValueError:
        pass

    # String values keep their case (tokens, project ids)
    return value
