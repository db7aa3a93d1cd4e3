"""Custom exception classes for bulk operations."""

from typing import Any, Dict, Optional


class BulkOperationError(Exception):
    """Base exception for bulk operations."""

    def __init__(
        self,
        message: str,
        operation_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Initialize bulk operation error.

        Args:
            message: Error message
            operation_id: Operation ID related to the error
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.operation_id = operation_id
        self.context = context or {}


class InvalidConfigurationError(BulkOperationError):
    """Exception raised when a bulk operation is configured with invalid values."""

    def __init__(self, field_name: str, value: Any, reason: str):
        """Initialize invalid configuration error.

        Args:
            field_name: Name of the offending configuration field
            value: The rejected value
            reason: Why the value was rejected
        """
        super().__init__(
            f"Invalid bulk operation configuration: {field_name}={value!r} ({reason})",
            context={"field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value


class EnumerationFailedError(BulkOperationError):
    """Exception raised when the object listing could not be produced."""

    def __init__(
        self,
        cause: BaseException,
        operation_id: Optional[str] = None,
        partial_outcome: Optional[Any] = None,
    ):
        """Initialize enumeration failed error.

        Args:
            cause: The error raised while listing objects
            operation_id: Operation ID related to the error
            partial_outcome: Outcome of items dispatched before the listing failed
                (only set when items are streamed rather than prefetched)
        """
        super().__init__(
            f"Failed to enumerate objects: {cause}",
            operation_id=operation_id,
            context={"cause_type": type(cause).__name__},
        )
        self.cause = cause
        self.partial_outcome = partial_outcome


class ActionFailedError(BulkOperationError):
    """Exception describing the failure of the action applied to one item."""

    def __init__(
        self,
        item: Any,
        cause: BaseException,
        operation_id: Optional[str] = None,
        partial_outcome: Optional[Any] = None,
    ):
        """Initialize action failed error.

        Args:
            item: The item whose action failed
            cause: The error raised by the action
            operation_id: Operation ID related to the error
            partial_outcome: Items that succeeded before processing stopped
        """
        super().__init__(
            f"Action failed for {item}: {cause}",
            operation_id=operation_id,
            context={"cause_type": type(cause).__name__},
        )
        self.item = item
        self.cause = cause
        self.partial_outcome = partial_outcome


class BulkOperationCancelledError(BulkOperationError):
    """Exception raised when a bulk operation is cancelled by the caller."""

    def __init__(self, operation_id: Optional[str] = None, partial_outcome: Optional[Any] = None):
        """Initialize cancelled error.

        Args:
            operation_id: Operation ID related to the error
            partial_outcome: Items that succeeded before processing stopped
        """
        super().__init__("Bulk operation was cancelled", operation_id=operation_id)
        self.partial_outcome = partial_outcome
