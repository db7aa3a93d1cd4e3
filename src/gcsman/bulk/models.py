"""Data models for bulk operations over stored objects."""

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .errors import ActionFailedError, InvalidConfigurationError

DEFAULT_CONCURRENCY_LIMIT = 10


@dataclass(frozen=True)
class ObjectDescriptor:
    """Identity of one remote object: bucket, name and optional generation."""

    bucket: str
    name: str
    generation: Optional[Union[int, str]] = None

    def __str__(self) -> str:
        if self.generation:
            return f"gs://{self.bucket}/{self.name}#{self.generation}"
        return f"gs://{self.bucket}/{self.name}"


@dataclass(frozen=True)
class BulkOperationConfig:
    """Caller-supplied configuration for one bulk operation."""

    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    force: bool = False
    prefetch: bool = True

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            InvalidConfigurationError: If the concurrency limit is not a positive integer
        """
        limit = self.concurrency_limit
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidConfigurationError("concurrency_limit", limit, "must be an integer")
        if limit <= 0:
            raise InvalidConfigurationError("concurrency_limit", limit, "must be positive")


@dataclass
class ActionResult:
    """Result of applying the action to a single item."""

    item: Any
    status: str  # 'success' or 'failed'
    error: Optional[ActionFailedError] = None
    processing_time: float = 0.0
    value: Any = None

    @classmethod
    def success(cls, item: Any, value: Any = None, processing_time: float = 0.0) -> "ActionResult":
        """Create a successful result."""
        return cls(item=item, status="success", value=value, processing_time=processing_time)

    @classmethod
    def failure(
        cls, item: Any, cause: BaseException, processing_time: float = 0.0
    ) -> "ActionResult":
        """Create a failed result wrapping the cause in an ActionFailedError."""
        if isinstance(cause, ActionFailedError):
            error = cause
        else:
            error = ActionFailedError(item, cause)
        return cls(item=item, status="failed", error=error, processing_time=processing_time)

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def cause(self) -> Optional[BaseException]:
        """The underlying exception raised by the action, if any."""
        return self.error.cause if self.error else None


@dataclass
class BulkOutcome:
    """Terminal value of one bulk operation."""

    succeeded: List[Any] = field(default_factory=list)
    failed: List[ActionResult] = field(default_factory=list)
    total_dispatched: int = 0
    concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT
    force: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    duration: float = 0.0

    @property
    def success_count(self) -> int:
        """Number of successful operations."""
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        """Number of failed operations."""
        return len(self.failed)

    @property
    def total_processed(self) -> int:
        return self.success_count + self.failure_count

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage."""
        if self.total_processed == 0:
            return 0.0
        return (self.success_count / self.total_processed) * 100

    @property
    def ok(self) -> bool:
        """True when no item failed."""
        return not self.failed

    @property
    def failed_items(self) -> List[Any]:
        return [result.item for result in self.failed]

    @property
    def errors(self) -> List[BaseException]:
        """Underlying causes of every failed item."""
        return [result.cause for result in self.failed if result.cause is not None]

    def add_result(self, result: ActionResult) -> None:
        """Add a result to the appropriate category."""
        if result.status == "success":
            self.succeeded.append(result.item)
        elif result.status == "failed":
            self.failed.append(result)
        else:
            raise ValueError(f"Invalid status: {result.status}")

    def finish(self) -> None:
        """Record the end time and duration."""
        self.end_time = time.time()
        if self.start_time is not None:
            self.duration = self.end_time - self.start_time
