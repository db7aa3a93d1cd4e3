"""Common command infrastructure for gcsman CLI commands.

This module provides shared functionality for all CLI commands including:
- Standard bulk operation options
- Storage handle construction from configuration
- Consistent error reporting
"""

import logging
from typing import Any, Dict, NoReturn, Optional

import typer
from rich.console import Console

from ..bulk.errors import BulkOperationError
from ..bulk.progress import ProgressTracker
from ..bulk.reporting import ReportGenerator
from ..client.errors import StorageApiError, StorageError
from ..client.manager import StorageClientManager
from ..resources.storage import Storage
from ..utils.config import Config

# Shared instances
console = Console()
logger = logging.getLogger(__name__)


def force_option() -> Any:
    """Create a standardized --force option for bulk commands."""
    return typer.Option(
        None,
        "--force/--fail-fast",
        help="Keep going after per-object failures and report them at the end",
    )


def concurrency_option() -> Any:
    """Create a standardized --concurrency option for bulk commands."""
    return typer.Option(
        None,
        "--concurrency",
        "-c",
        help="Maximum number of requests in flight (default from config, 10)",
    )


def prefix_option() -> Any:
    return typer.Option(None, "--prefix", help="Only objects whose name starts with this prefix")


def directory_option() -> Any:
    return typer.Option(None, "--directory", "-d", help="Only objects inside this directory")


def versions_option() -> Any:
    return typer.Option(False, "--versions", help="Include every generation of each object")


def build_query(
    prefix: Optional[str] = None,
    directory: Optional[str] = None,
    versions: bool = False,
    max_results: Optional[int] = None,
) -> Dict[str, Any]:
    """Build a listing query from command options, leaving out unset values."""
    query: Dict[str, Any] = {}
    if prefix:
        query["prefix"] = prefix
    if directory:
        query["directory"] = directory
    if versions:
        query["versions"] = True
    if max_results:
        query["maxResults"] = max_results
    return query


def resolve_bulk_settings(
    force: Optional[bool], concurrency: Optional[int], config: Optional[Config] = None
) -> Dict[str, Any]:
    """
    Merge command options over the ``bulk`` configuration section.

    Raises:
        typer.Exit: If the resulting settings are invalid
    """
    config = config or Config()
    settings = config.get_bulk_config()
    if force is not None:
        settings["force"] = force
    if concurrency is not None:
        settings["concurrency_limit"] = concurrency

    errors = config.validate_bulk_config(settings)
    if errors:
        for error in errors:
            console.print(f"[red]Error: {error}[/red]")
        raise typer.Exit(1)
    return settings


def get_storage(config: Optional[Config] = None) -> Storage:
    """Build a Storage handle from the ``client`` configuration section."""
    return StorageClientManager(config or Config()).get_storage()


def create_progress_tracker() -> ProgressTracker:
    return ProgressTracker(console)


def create_report_generator() -> ReportGenerator:
    return ReportGenerator(console)


def handle_storage_error(error: StorageError, action: str) -> NoReturn:
    """
    Print a storage error and exit with status 1.

    Args:
        error: The storage error raised by the client
        action: What the command was doing, e.g. "listing objects"

    Raises:
        typer.Exit: Always
    """
    logger.debug(f"Storage error while {action}", exc_info=error)
    if isinstance(error, StorageApiError):
        if error.status_code == 404:
            console.print(f"[red]Error while {action}: not found ({error.url})[/red]")
        elif error.status_code in (401, 403):
            console.print(
                f"[red]Error while {action}: access denied ({error.status_code}). "
                "Check client.access_token or GCSMAN_ACCESS_TOKEN.[/red]"
            )
        else:
            console.print(f"[red]Error while {action}: {error.message}[/red]")
    else:
        console.print(f"[red]Error while {action}: {error}[/red]")
    raise typer.Exit(1)


def handle_bulk_error(error: BulkOperationError, operation: str) -> NoReturn:
    """
    Report a bulk operation that could not run or stopped early, then exit 1.

    Raises:
        typer.Exit: Always
    """
    create_report_generator().report_aborted(error, operation)
    raise typer.Exit(1)
