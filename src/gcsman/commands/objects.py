"""Object commands for gcsman."""

from typing import Optional

import typer
from rich.table import Table

from ..bulk.errors import BulkOperationError
from ..client.errors import StorageError
from .common import (
    build_query,
    concurrency_option,
    console,
    create_progress_tracker,
    create_report_generator,
    directory_option,
    force_option,
    get_storage,
    handle_bulk_error,
    handle_storage_error,
    prefix_option,
    resolve_bulk_settings,
    versions_option,
)

app = typer.Typer(help="List and delete objects in a bucket.")


@app.command("list")
def list_objects(
    bucket: str = typer.Argument(..., help="Bucket name (with or without gs://)"),
    prefix: Optional[str] = prefix_option(),
    directory: Optional[str] = directory_option(),
    versions: bool = versions_option(),
    max_results: Optional[int] = typer.Option(
        None, "--max-results", "-n", help="Maximum number of objects to show"
    ),
):
    """List objects in a bucket.

    Follows page tokens until every matching object has been listed, or
    until --max-results objects have been shown.
    """
    query = build_query(prefix, directory, versions, max_results)
    bucket_handle = get_storage().bucket(bucket)
    files = bucket_handle.iter_files(query)

    table = Table(title=f"Objects in gs://{bucket_handle.name}")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Updated", style="dim")
    if versions:
        table.add_column("Generation", style="magenta")

    count = 0
    try:
        for file in files:
            row = [
                file.name,
                str(file.metadata.get("size", "")),
                str(file.metadata.get("updated", "")),
            ]
            if versions:
                row.append(str(file.generation or ""))
            table.add_row(*row)
            count += 1
    except StorageError as e:
        handle_storage_error(e, "listing objects")

    if count == 0:
        console.print("[yellow]No objects found.[/yellow]")
        return

    console.print(table)
    console.print(f"\n[dim]{count} object(s)[/dim]")


@app.command("delete")
def delete_objects(
    bucket: str = typer.Argument(..., help="Bucket name (with or without gs://)"),
    prefix: Optional[str] = prefix_option(),
    directory: Optional[str] = directory_option(),
    versions: bool = versions_option(),
    force: Optional[bool] = force_option(),
    concurrency: Optional[int] = concurrency_option(),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete every object in a bucket matching the filters.

    By default the first failed delete stops the operation. With --force every
    object is attempted and failures are reported at the end.
    """
    settings = resolve_bulk_settings(force, concurrency)
    query = build_query(prefix, directory, versions)

    if not yes:
        scope = f" under '{prefix or directory}'" if (prefix or directory) else ""
        typer.confirm(f"Delete all objects in gs://{bucket}{scope}?", abort=True)

    bucket_handle = get_storage().bucket(bucket)
    tracker = create_progress_tracker()
    tracker.start_progress("Deleting objects")
    try:
        outcome = bucket_handle.delete_files(
            query,
            force=settings["force"],
            concurrency_limit=settings["concurrency_limit"],
            progress_callback=tracker,
            prefetch=settings["prefetch"],
        )
    except BulkOperationError as e:
        handle_bulk_error(e, "delete objects")
    finally:
        tracker.finish_progress()

    reporter = create_report_generator()
    reporter.generate_summary_report(outcome, "delete")
    if not outcome.ok:
        reporter.generate_error_summary(outcome)
        raise typer.Exit(1)
