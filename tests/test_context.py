"""Unit tests for ExecutionContext."""

import threading
import time

import pytest

from halfpipe.pipeline import Cancelled, DeadlineExceeded, ExecutionContext


class TestContextValues:
    """Tests for value propagation."""

    def test_with_value_does_not_mutate_parent(self, background):
        """Test that writing produces a new context and leaves the old one alone."""
        child = background.with_value("x", 1)

        assert child is not background
        assert child["x"] == 1
        assert "x" not in background
        assert background.value("x") is None

    def test_nearest_write_wins(self, background):
        """Test that later writes shadow earlier ones without erasing them."""
        first = background.with_value("x", 1)
        second = first.with_value("x", 2)

        assert second["x"] == 2
        assert first["x"] == 1
        assert second.to_dict() == {"x": 2}

    def test_with_values_and_to_dict(self, background):
        """Test chained writes and flattening."""
        ctx = background.with_values(a=1, b="two").with_value("c", [3])

        assert ctx.to_dict() == {"a": 1, "b": "two", "c": [3]}
        assert ctx.value("missing", "default") == "default"

    def test_getitem_raises_for_missing_key(self, background):
        with pytest.raises(KeyError):
            background["missing"]

    def test_none_value_is_still_present(self, background):
        """Test that a key explicitly set to None counts as present."""
        ctx = background.with_value("x", None)

        assert "x" in ctx
        assert ctx["x"] is None

    def test_invalid_keys(self, background):
        with pytest.raises(TypeError):
            background.with_value(None, 1)
        with pytest.raises(TypeError):
            background.with_value(["unhashable"], 1)

    def test_context_is_immutable(self, background):
        """Test that attributes cannot be assigned on a context."""
        with pytest.raises(AttributeError):
            background.x = 1


class TestContextCancellation:
    """Tests for cancellation and deadlines."""

    def test_background_is_never_cancelled(self, background):
        assert background.error() is None
        assert not background.cancelled
        assert background.deadline is None

    def test_cancel_marks_child_and_descendants(self, background):
        """Test that cancelling is visible from contexts derived afterwards and before."""
        ctx, cancel = background.with_cancel()
        before = ctx.with_value("x", 1)

        cancel()
        after = ctx.with_value("y", 2)

        for c in (ctx, before, after):
            assert isinstance(c.error(), Cancelled)
            assert str(c.error()) == "context canceled"
        assert not background.cancelled

    def test_cancel_reason_and_first_cancel_wins(self, background):
        ctx, cancel = background.with_cancel()

        cancel("shutting down")
        cancel("second call")

        assert ctx.error().reason == "shutting down"
        assert str(ctx.error()) == "context canceled: shutting down"

    def test_parent_cancel_propagates_to_child(self, background):
        parent, cancel_parent = background.with_cancel()
        child, _ = parent.with_cancel()

        cancel_parent()

        assert child.cancelled
        assert child.error() is parent.error()

    def test_child_cancel_does_not_reach_parent(self, background):
        parent, _ = background.with_cancel()
        child, cancel_child = parent.with_cancel()

        cancel_child()

        assert child.cancelled
        assert not parent.cancelled

    def test_cancel_from_another_thread(self, background):
        """Test that a cancel issued from another thread is observed."""
        ctx, cancel = background.with_cancel()

        worker = threading.Thread(target=cancel, args=("from thread",))
        worker.start()
        worker.join()

        assert ctx.error().reason == "from thread"

    def test_expired_deadline_reports_deadline_exceeded(self, background):
        ctx, _ = background.with_deadline(time.monotonic() - 1)

        error = ctx.error()
        assert isinstance(error, DeadlineExceeded)
        assert isinstance(error, Cancelled)
        assert str(error) == "context deadline exceeded"

    def test_future_deadline_is_live(self, background):
        ctx, cancel = background.with_timeout(3600)

        assert not ctx.cancelled
        assert ctx.deadline is not None

        cancel()
        assert type(ctx.error()) is Cancelled

    def test_earlier_inherited_deadline_wins(self, background):
        parent, _ = background.with_timeout(10)
        child, _ = parent.with_timeout(3600)

        assert child.deadline == parent.deadline
