"""Bulk operation engine for applying one action to many stored objects.

This package provides:
- Bounded-concurrency dispatch with fail-fast and force policies
- Result aggregation into BulkOutcome
- Progress display and reporting with Rich
"""

from .engine import BulkOperationEngine, run_bulk_operation
from .errors import (
    ActionFailedError,
    BulkOperationCancelledError,
    BulkOperationError,
    EnumerationFailedError,
    InvalidConfigurationError,
)
from .models import (
    DEFAULT_CONCURRENCY_LIMIT,
    ActionResult,
    BulkOperationConfig,
    BulkOutcome,
    ObjectDescriptor,
)
from .progress import ProgressTracker
from .reporting import ReportGenerator

__all__ = [
    "BulkOperationEngine",
    "run_bulk_operation",
    "ActionFailedError",
    "BulkOperationCancelledError",
    "BulkOperationError",
    "EnumerationFailedError",
    "InvalidConfigurationError",
    "DEFAULT_CONCURRENCY_LIMIT",
    "ActionResult",
    "BulkOperationConfig",
    "BulkOutcome",
    "ObjectDescriptor",
    "ProgressTracker",
    "ReportGenerator",
]
