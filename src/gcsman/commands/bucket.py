"""Bucket access commands for gcsman."""

from typing import Optional

import typer

from ..bulk.errors import BulkOperationError
from ..bulk.models import BulkOutcome
from ..client.errors import StorageError
from .common import (
    concurrency_option,
    console,
    create_progress_tracker,
    create_report_generator,
    force_option,
    get_storage,
    handle_bulk_error,
    handle_storage_error,
    resolve_bulk_settings,
)

app = typer.Typer(help="Change who can read a bucket and its objects.")


def _report_files_outcome(outcome: Optional[BulkOutcome], operation: str) -> None:
    if outcome is None:
        return
    reporter = create_report_generator()
    reporter.generate_summary_report(outcome, operation)
    if not outcome.ok:
        reporter.generate_error_summary(outcome)
        raise typer.Exit(1)


@app.command("make-public")
def make_public(
    bucket: str = typer.Argument(..., help="Bucket name (with or without gs://)"),
    include_files: bool = typer.Option(
        False, "--include-files", help="Also make every existing object public"
    ),
    force: Optional[bool] = force_option(),
    concurrency: Optional[int] = concurrency_option(),
):
    """Make a bucket publicly readable.

    Grants allUsers READER on the bucket and on its default object ACL, so
    new objects are public too.
    """
    settings = resolve_bulk_settings(force, concurrency)
    bucket_handle = get_storage().bucket(bucket)

    tracker = create_progress_tracker()
    if include_files:
        tracker.start_progress("Making objects public")
    try:
        outcome = bucket_handle.make_public(
            include_files=include_files,
            force=settings["force"],
            concurrency_limit=settings["concurrency_limit"],
            progress_callback=tracker,
        )
    except StorageError as e:
        handle_storage_error(e, "updating the bucket ACL")
    except BulkOperationError as e:
        handle_bulk_error(e, "make objects public")
    finally:
        tracker.finish_progress()

    console.print(f"[green]✓ gs://{bucket_handle.name} is now publicly readable[/green]")
    _report_files_outcome(outcome, "make public")


@app.command("make-private")
def make_private(
    bucket: str = typer.Argument(..., help="Bucket name (with or without gs://)"),
    include_files: bool = typer.Option(
        False, "--include-files", help="Also make every existing object private"
    ),
    force: Optional[bool] = force_option(),
    strict: bool = typer.Option(
        False, "--strict", help="Objects keep only their owner (private instead of projectPrivate)"
    ),
    concurrency: Optional[int] = concurrency_option(),
):
    """Make a bucket private to its project.

    Applies the projectPrivate predefined ACL to the bucket and optionally to
    every existing object.
    """
    settings = resolve_bulk_settings(force, concurrency)
    bucket_handle = get_storage().bucket(bucket)

    tracker = create_progress_tracker()
    if include_files:
        tracker.start_progress("Making objects private")
    try:
        outcome = bucket_handle.make_private(
            include_files=include_files,
            force=settings["force"],
            strict=strict,
            concurrency_limit=settings["concurrency_limit"],
            progress_callback=tracker,
        )
    except StorageError as e:
        handle_storage_error(e, "updating the bucket ACL")
    except BulkOperationError as e:
        handle_bulk_error(e, "make objects private")
    finally:
        tracker.finish_progress()

    console.print(f"[green]✓ gs://{bucket_handle.name} is now private to its project[/green]")
    _report_files_outcome(outcome, "make private")
