"""Tests for bulk operation data models."""

import pytest

from gcsman.bulk.errors import ActionFailedError, BulkOperationError, InvalidConfigurationError
from gcsman.bulk.models import (
    DEFAULT_CONCURRENCY_LIMIT,
    ActionResult,
    BulkOperationConfig,
    BulkOutcome,
    ObjectDescriptor,
)


class TestObjectDescriptor:
    """Test ObjectDescriptor."""

    def test_str_without_generation(self):
        assert str(ObjectDescriptor("photos", "a/b.jpg")) == "gs://photos/a/b.jpg"

    def test_str_with_generation(self):
        assert str(ObjectDescriptor("photos", "a.jpg", "1700")) == "gs://photos/a.jpg#1700"

    def test_frozen_and_hashable(self):
        """Descriptors are immutable values usable as set members."""
        descriptor = ObjectDescriptor("photos", "a.jpg")

        with pytest.raises(AttributeError):
            descriptor.name = "b.jpg"
        assert {descriptor, ObjectDescriptor("photos", "a.jpg")} == {descriptor}


class TestBulkOperationConfig:
    """Test BulkOperationConfig."""

    def test_defaults(self):
        config = BulkOperationConfig()

        assert config.concurrency_limit == DEFAULT_CONCURRENCY_LIMIT == 10
        assert config.force is False
        assert config.prefetch is True
        config.validate()

    @pytest.mark.parametrize("limit", [0, -5, False, True, 1.0, "3"])
    def test_invalid_limits(self, limit):
        with pytest.raises(InvalidConfigurationError) as exc_info:
            BulkOperationConfig(concurrency_limit=limit).validate()

        assert isinstance(exc_info.value, BulkOperationError)
        assert exc_info.value.value == limit
        assert exc_info.value.context["field"] == "concurrency_limit"


class TestActionResult:
    """Test ActionResult constructors."""

    def test_success(self):
        result = ActionResult.success("a", value=42)

        assert result.is_success
        assert result.value == 42
        assert result.error is None
        assert result.cause is None

    def test_failure_wraps_cause(self):
        cause = ValueError("bad")
        result = ActionResult.failure("a", cause)

        assert not result.is_success
        assert isinstance(result.error, ActionFailedError)
        assert result.error.item == "a"
        assert result.cause is cause

    def test_failure_keeps_existing_action_failed_error(self):
        error = ActionFailedError("a", KeyError("k"))

        assert ActionResult.failure("a", error).error is error


class TestBulkOutcome:
    """Test BulkOutcome aggregation."""

    def test_counts_and_rate(self):
        outcome = BulkOutcome()
        outcome.add_result(ActionResult.success("a"))
        outcome.add_result(ActionResult.success("b"))
        outcome.add_result(ActionResult.success("c"))
        outcome.add_result(ActionResult.failure("d", OSError("x")))

        assert outcome.success_count == 3
        assert outcome.failure_count == 1
        assert outcome.total_processed == 4
        assert outcome.success_rate == 75.0
        assert outcome.failed_items == ["d"]
        assert [type(error) for error in outcome.errors] == [OSError]
        assert not outcome.ok

    def test_empty_outcome_is_ok(self):
        outcome = BulkOutcome()

        assert outcome.ok
        assert outcome.success_rate == 0.0

    def test_invalid_status_rejected(self):
        with pytest.raises(ValueError):
            BulkOutcome().add_result(ActionResult(item="a", status="skipped"))

    def test_finish_sets_duration(self):
        outcome = BulkOutcome(start_time=100.0)

        outcome.finish()

        assert outcome.end_time >= 100.0
        assert outcome.duration == outcome.end_time - 100.0
