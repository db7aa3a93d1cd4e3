"""Tests for the bounded-concurrency bulk operation engine."""

import threading
import time

import pytest

from gcsman.bulk.engine import BulkOperationEngine, run_bulk_operation
from gcsman.bulk.errors import (
    ActionFailedError,
    BulkOperationCancelledError,
    EnumerationFailedError,
    InvalidConfigurationError,
)
from gcsman.bulk.models import ActionResult, BulkOperationConfig


class InstrumentedAction:
    """Action that records invocations and the peak number running at once."""

    def __init__(self, fail_on=(), delay=0.0, fail_delay=None):
        self.fail_on = set(fail_on)
        self.delay = delay
        self.fail_delay = delay if fail_delay is None else fail_delay
        self.invoked = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def __call__(self, item):
        with self._lock:
            self.invoked.append(item)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if item in self.fail_on:
                if self.fail_delay:
                    time.sleep(self.fail_delay)
                raise RuntimeError(f"boom {item}")
            if self.delay:
                time.sleep(self.delay)
            return f"done {item}"
        finally:
            with self._lock:
                self.in_flight -= 1


def failing_listing(good_items, error):
    """Generator yielding ``good_items`` then raising ``error``."""
    yield from good_items
    raise error


class TestForceMode:
    """Test force mode aggregation."""

    def test_partition_with_failures(self):
        """25 items, limit 10, failures at 3, 17 and 22 are all reported."""
        action = InstrumentedAction(fail_on={3, 17, 22}, delay=0.001)
        config = BulkOperationConfig(concurrency_limit=10, force=True)

        outcome = BulkOperationEngine(config).run(range(25), action)

        assert outcome.success_count == 22
        assert outcome.failure_count == 3
        assert sorted(outcome.failed_items) == [3, 17, 22]
        assert sorted(outcome.succeeded) == [i for i in range(25) if i not in {3, 17, 22}]
        assert all(isinstance(error, RuntimeError) for error in outcome.errors)
        assert outcome.total_dispatched == 25
        assert not outcome.ok

    def test_every_item_in_exactly_one_list(self):
        """Each enumerated item lands in exactly one of succeeded and failed."""
        action = InstrumentedAction(fail_on=set(range(0, 40, 3)))

        outcome = run_bulk_operation(range(40), action, concurrency_limit=4, force=True)

        recorded = list(outcome.succeeded) + outcome.failed_items
        assert sorted(recorded) == list(range(40))
        assert len(recorded) == len(set(recorded))

    def test_failed_results_wrap_cause(self):
        """Failed results carry an ActionFailedError with item and cause."""
        action = InstrumentedAction(fail_on={"b"})

        outcome = run_bulk_operation(["a", "b"], action, force=True)

        (result,) = outcome.failed
        assert isinstance(result.error, ActionFailedError)
        assert result.error.item == "b"
        assert str(result.cause) == "boom b"
        assert result.processing_time >= 0

    def test_returned_failed_action_result_counts_as_failure(self):
        """An action may report failure by returning a failed ActionResult."""

        def action(item):
            if item == 2:
                return ActionResult.failure(item, ValueError("rejected"))
            return ActionResult.success(item)

        outcome = run_bulk_operation(range(4), action, force=True)

        assert outcome.failed_items == [2]
        assert isinstance(outcome.errors[0], ValueError)
        assert sorted(outcome.succeeded) == [0, 1, 3]

    def test_failed_action_result_without_error(self):
        """A failed ActionResult without an error is still a failure."""
        outcome = run_bulk_operation(
            [1], lambda item: ActionResult(item=item, status="failed"), force=True
        )

        assert outcome.failed_items == [1]
        assert isinstance(outcome.errors[0], RuntimeError)

    def test_action_result_for_other_item_is_recorded_against_dispatched_item(self):
        """Each input item lands in the outcome exactly once, whatever the action returns."""

        def action(item):
            if item % 2:
                return ActionResult.failure("someone-else", ValueError("rejected"))
            return ActionResult.success("someone-else", value=item * 10)

        outcome = run_bulk_operation(range(6), action, force=True)

        assert sorted(outcome.succeeded) == [0, 2, 4]
        assert sorted(outcome.failed_items) == [1, 3, 5]
        assert sorted(result.error.item for result in outcome.failed) == [1, 3, 5]

    def test_idempotent_over_same_items(self):
        """Running twice over the same items yields the same partition."""
        items = list(range(30))
        action = InstrumentedAction(fail_on={5, 6, 29})

        first = run_bulk_operation(items, action, concurrency_limit=7, force=True)
        second = run_bulk_operation(items, action, concurrency_limit=7, force=True)

        assert sorted(first.succeeded) == sorted(second.succeeded)
        assert sorted(first.failed_items) == sorted(second.failed_items)
        assert items == list(range(30))


class TestConcurrencyLimit:
    """Test the in-flight bound."""

    @pytest.mark.parametrize("limit", [1, 3, 10])
    def test_max_in_flight_never_exceeds_limit(self, limit):
        """At most concurrency_limit actions run at the same time."""
        action = InstrumentedAction(delay=0.005)

        outcome = run_bulk_operation(range(40), action, concurrency_limit=limit)

        assert outcome.success_count == 40
        assert 1 <= action.max_in_flight <= limit

    def test_limit_one_is_sequential(self):
        """A limit of one never overlaps invocations."""
        action = InstrumentedAction(delay=0.001)

        run_bulk_operation(range(10), action, concurrency_limit=1)

        assert action.max_in_flight == 1
        assert action.invoked == list(range(10))

    def test_default_limit_is_ten(self):
        """The engine defaults to ten concurrent actions."""
        engine = BulkOperationEngine()
        action = InstrumentedAction(delay=0.005)

        outcome = engine.run(range(25), action)

        assert engine.config.concurrency_limit == 10
        assert outcome.concurrency_limit == 10
        assert action.max_in_flight <= 10


class TestFailFast:
    """Test fail-fast mode."""

    def test_first_failure_is_raised(self):
        """The 25/10/{3,17,22} scenario raises one of the failing items."""
        action = InstrumentedAction(fail_on={3, 17, 22}, delay=0.001)

        with pytest.raises(ActionFailedError) as exc_info:
            run_bulk_operation(range(25), action, concurrency_limit=10)

        error = exc_info.value
        assert error.item in {3, 17, 22}
        assert isinstance(error.cause, RuntimeError)
        assert error.__cause__ is error.cause
        assert error.operation_id
        assert error.partial_outcome is not None
        assert error.item not in error.partial_outcome.succeeded

    def test_stops_dispatching_after_failure(self):
        """Dispatch overshoot after a failure is bounded by the window."""
        action = InstrumentedAction(fail_on={3}, delay=0.05, fail_delay=0.0)

        with pytest.raises(ActionFailedError) as exc_info:
            run_bulk_operation(range(100), action, concurrency_limit=10)

        assert exc_info.value.item == 3
        assert len(action.invoked) <= 3 + 10
        assert exc_info.value.partial_outcome.total_dispatched == len(action.invoked)

    def test_in_flight_results_are_discarded(self):
        """Results settling after the failure are not recorded."""
        release = threading.Event()

        def action(item):
            if item == 0:
                raise RuntimeError("first")
            release.wait(timeout=5)
            return item

        def progress(completed, total):
            release.set()

        with pytest.raises(ActionFailedError) as exc_info:
            run_bulk_operation(range(5), action, concurrency_limit=5, progress_callback=progress)

        partial = exc_info.value.partial_outcome
        assert partial.succeeded == []
        assert partial.failed == []
        assert partial.total_dispatched == 5

    def test_successes_before_failure_are_kept(self):
        """Successes recorded before the failure appear in the partial outcome."""
        action = InstrumentedAction(fail_on={2})

        with pytest.raises(ActionFailedError) as exc_info:
            run_bulk_operation(range(10), action, concurrency_limit=1)

        assert exc_info.value.partial_outcome.succeeded == [0, 1]
        assert action.invoked == [0, 1, 2]


class TestConfiguration:
    """Test configuration validation."""

    @pytest.mark.parametrize("limit", [0, -1, True, "10", 2.5, None])
    def test_invalid_limit_rejected_before_work(self, limit):
        """Invalid limits raise InvalidConfigurationError with zero invocations."""
        action = InstrumentedAction()

        with pytest.raises(InvalidConfigurationError) as exc_info:
            run_bulk_operation(range(5), action, concurrency_limit=limit)

        assert action.invoked == []
        assert exc_info.value.field_name == "concurrency_limit"

    def test_per_run_config_overrides_engine_config(self):
        """A config passed to run() replaces the engine default."""
        engine = BulkOperationEngine(BulkOperationConfig(concurrency_limit=0))

        outcome = engine.run([1, 2], lambda item: item, config=BulkOperationConfig(force=True))

        assert outcome.force is True
        assert outcome.success_count == 2


class TestEnumeration:
    """Test enumeration failures and streaming."""

    def test_enumeration_failure_runs_no_action(self):
        """Listing fails after three items: nothing is invoked."""
        action = InstrumentedAction()
        listing_error = ConnectionError("listing broke")

        with pytest.raises(EnumerationFailedError) as exc_info:
            run_bulk_operation(failing_listing([1, 2, 3], listing_error), action)

        assert action.invoked == []
        assert exc_info.value.cause is listing_error
        assert exc_info.value.partial_outcome is None

    def test_enumeration_failure_in_force_mode(self):
        """Force mode does not swallow listing failures."""
        action = InstrumentedAction()

        with pytest.raises(EnumerationFailedError):
            run_bulk_operation(failing_listing([1], OSError("x")), action, force=True)

        assert action.invoked == []

    def test_streaming_enumeration_failure_settles_in_flight(self):
        """Without prefetch, items already dispatched settle into the partial outcome."""
        action = InstrumentedAction()

        with pytest.raises(EnumerationFailedError) as exc_info:
            run_bulk_operation(
                failing_listing([1, 2, 3], RuntimeError("page 2 failed")),
                action,
                prefetch=False,
            )

        assert sorted(action.invoked) == [1, 2, 3]
        assert sorted(exc_info.value.partial_outcome.succeeded) == [1, 2, 3]

    def test_streaming_pulls_items_lazily(self):
        """Without prefetch the engine never pulls far ahead of the window."""
        pulled = []
        max_ahead = []

        def listing():
            for i in range(50):
                pulled.append(i)
                yield i

        def action(item):
            max_ahead.append(len(pulled) - item)
            return item

        outcome = run_bulk_operation(listing(), action, concurrency_limit=2, prefetch=False)

        assert outcome.success_count == 50
        assert max(max_ahead) <= 4

    def test_empty_items(self):
        """No items produce an empty, successful outcome."""
        outcome = run_bulk_operation([], InstrumentedAction())

        assert outcome.ok
        assert outcome.total_processed == 0
        assert outcome.success_rate == 0.0


class TestProgressAndCancellation:
    """Test progress reporting and cancellation."""

    def test_progress_callback_counts_completions(self):
        """Progress is reported once per completed item with the known total."""
        calls = []

        run_bulk_operation(
            range(12),
            lambda item: item,
            concurrency_limit=3,
            progress_callback=lambda done, total: calls.append((done, total)),
        )

        assert [done for done, _ in calls] == list(range(1, 13))
        assert {total for _, total in calls} == {12}

    def test_progress_total_unknown_when_streaming(self):
        """Streamed items report an unknown total."""
        calls = []

        run_bulk_operation(
            iter(range(3)),
            lambda item: item,
            prefetch=False,
            progress_callback=lambda done, total: calls.append(total),
        )

        assert calls == [None, None, None]

    def test_cancel_before_start(self):
        """A pre-set cancel event dispatches nothing."""
        cancel = threading.Event()
        cancel.set()
        action = InstrumentedAction()

        with pytest.raises(BulkOperationCancelledError) as exc_info:
            run_bulk_operation(range(5), action, cancel_event=cancel)

        assert action.invoked == []
        assert exc_info.value.partial_outcome.total_dispatched == 0

    def test_cancel_mid_run(self):
        """Setting the event stops further dispatch and keeps finished work."""
        cancel = threading.Event()

        def action(item):
            cancel.set()
            return item

        with pytest.raises(BulkOperationCancelledError) as exc_info:
            run_bulk_operation(range(10), action, concurrency_limit=1, cancel_event=cancel)

        assert exc_info.value.partial_outcome.succeeded == [0]
