"""Bounded-concurrency engine for bulk operations over stored objects.

This module applies one action to every item of a (possibly lazy) listing with at
most ``concurrency_limit`` actions in flight, and aggregates per-item results.

Classes:
    BulkOperationEngine: Dispatches actions with a sliding window over a thread pool

Two policies are supported:
    fail-fast (default): the first failure stops dispatching, in-flight actions are
        allowed to settle and their results are discarded, and the failure is raised
        as an ActionFailedError.
    force: every item is dispatched; failures are collected into BulkOutcome.failed.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from .errors import BulkOperationCancelledError, EnumerationFailedError
from .models import ActionResult, BulkOperationConfig, BulkOutcome

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, Optional[int]], None]


class BulkOperationEngine:
    """Applies an action to many items with a bounded number of concurrent invocations."""

    def __init__(self, config: Optional[BulkOperationConfig] = None):
        """Initialize the engine.

        Args:
            config: Default configuration used when ``run`` is not given one
        """
        self.config = config or BulkOperationConfig()

    def run(
        self,
        items: Iterable[Any],
        action: Callable[[Any], Any],
        config: Optional[BulkOperationConfig] = None,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkOutcome:
        """Apply ``action`` to every item.

        The action succeeds by returning (a plain value or a successful ActionResult)
        and fails by raising or by returning a failed ActionResult.

        Args:
            items: Items to process, consumed by forward iteration only
            action: Callable invoked once per item on a worker thread
            config: Configuration for this invocation (defaults to the engine's)
            progress_callback: Called as ``(completed, total)`` after each completion;
                ``total`` is None when items are streamed
            cancel_event: When set, no further items are dispatched

        Returns:
            BulkOutcome with succeeded and failed items

        Raises:
            InvalidConfigurationError: If the configuration is invalid (nothing is processed)
            EnumerationFailedError: If iterating ``items`` failed
            ActionFailedError: In fail-fast mode, the first failing item
            BulkOperationCancelledError: If ``cancel_event`` was set
        """
        config = config or self.config
        config.validate()

        operation_id = str(uuid.uuid4())[:8]
        outcome = BulkOutcome(
            concurrency_limit=config.concurrency_limit,
            force=config.force,
            start_time=time.time(),
        )

        total: Optional[int] = None
        if config.prefetch:
            pending = self._drain(items, operation_id)
            total = len(pending)
            iterator: Iterator[Any] = iter(pending)
        else:
            iterator = iter(items)

        logger.info(
            f"Starting bulk operation {operation_id}",
            extra={
                "operation_id": operation_id,
                "concurrency_limit": config.concurrency_limit,
                "force": config.force,
                "total_items": total,
            },
        )

        first_failure: Optional[ActionResult] = None
        enumeration_error: Optional[Exception] = None
        cancelled = False
        exhausted = False
        completed = 0
        in_flight: Dict[Future, Any] = {}

        with ThreadPoolExecutor(
            max_workers=config.concurrency_limit, thread_name_prefix="gcsman-bulk"
        ) as executor:
            while True:
                # Fill the window
                while not exhausted and len(in_flight) < config.concurrency_limit:
                    if first_failure is not None or enumeration_error is not None or cancelled:
                        break
                    if cancel_event is not None and cancel_event.is_set():
                        cancelled = True
                        break
                    try:
                        item = next(iterator)
                    except StopIteration:
                        exhausted = True
                        break
                    except Exception as e:
                        logger.error(f"Enumeration failed during bulk operation {operation_id}: {e}")
                        enumeration_error = e
                        break

                    future = executor.submit(self._invoke, action, item)
                    in_flight[future] = item
                    outcome.total_dispatched += 1

                if not in_flight:
                    break

                done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
                for future in done:
                    del in_flight[future]
                    result = future.result()
                    completed += 1

                    if first_failure is not None:
                        logger.debug(f"Discarding result for {result.item} after earlier failure")
                    elif result.is_success:
                        outcome.succeeded.append(result.item)
                    elif config.force:
                        logger.warning(f"Action failed for {result.item}: {result.cause}")
                        outcome.failed.append(result)
                    else:
                        logger.warning(
                            f"Action failed for {result.item}, stopping dispatch: {result.cause}"
                        )
                        first_failure = result

                    if progress_callback:
                        progress_callback(completed, total)

        outcome.finish()

        if enumeration_error is not None:
            raise EnumerationFailedError(
                enumeration_error, operation_id=operation_id, partial_outcome=outcome
            ) from enumeration_error

        if first_failure is not None and first_failure.error:
            error = first_failure.error
            error.operation_id = operation_id
            error.partial_outcome = outcome
            logger.error(
                f"Bulk operation {operation_id} stopped after first failure "
                f"({outcome.success_count} succeeded, {outcome.total_dispatched} dispatched)"
            )
            raise error from error.cause

        if cancelled:
            logger.warning(f"Bulk operation {operation_id} cancelled")
            raise BulkOperationCancelledError(operation_id=operation_id, partial_outcome=outcome)

        logger.info(
            f"Bulk operation {operation_id} completed: "
            f"{outcome.success_count} succeeded, {outcome.failure_count} failed "
            f"in {outcome.duration:.2f}s",
            extra={
                "operation_id": operation_id,
                "succeeded": outcome.success_count,
                "failed": outcome.failure_count,
                "duration": outcome.duration,
            },
        )
        return outcome

    def _drain(self, items: Iterable[Any], operation_id: str) -> List[Any]:
        """Materialize every item before dispatch so listing errors abort cleanly."""
        try:
            return list(items)
        except Exception as e:
            logger.error(f"Enumeration failed before bulk operation {operation_id}: {e}")
            raise EnumerationFailedError(e, operation_id=operation_id) from e

    @staticmethod
    def _invoke(action: Callable[[Any], Any], item: Any) -> ActionResult:
        """Run the action for one item, converting any exception into a failed result."""
        start_time = time.time()
        try:
            value = action(item)
        except Exception as e:
            return ActionResult.failure(item, e, processing_time=time.time() - start_time)

        processing_time = time.time() - start_time
        if isinstance(value, ActionResult):
            # Results are always recorded against the dispatched item
            processing_time = value.processing_time or processing_time
            if value.is_success:
                return ActionResult.success(item, value=value.value, processing_time=processing_time)
            cause = value.cause or RuntimeError("action reported failure")
            return ActionResult.failure(item, cause, processing_time=processing_time)
        return ActionResult.success(item, value=value, processing_time=processing_time)


def run_bulk_operation(
    items: Iterable[Any],
    action: Callable[[Any], Any],
    concurrency_limit: int = 10,
    force: bool = False,
    prefetch: bool = True,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BulkOutcome:
    """Convenience wrapper building a config and running a single bulk operation."""
    config = BulkOperationConfig(
        concurrency_limit=concurrency_limit, force=force, prefetch=prefetch
    )
    return BulkOperationEngine(config).run(
        items, action, progress_callback=progress_callback, cancel_event=cancel_event
    )
