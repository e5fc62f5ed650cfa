"""Execution context threaded through pipeline steps.

A context is an immutable chain of nodes. Writing a value creates a new node
that points at the old one, so a step can never observe writes made by a
later step. Every node also shares a cancellation signal with the context it
was derived from; ``with_cancel``/``with_timeout`` start a new signal that is
linked to its parent's.
"""

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

from .errors import Cancelled, DeadlineExceeded

CancelFunc = Callable[..., None]

_MISSING = object()


class _CancelSignal:
    """Thread-safe cancellation flag, linked to the signal it derives from."""

    def __init__(self, parent: "_CancelSignal | None" = None, deadline: float | None = None):
        self.parent = parent
        self.deadline = deadline
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._error: Cancelled | None = None

    def cancel(self, error: Cancelled) -> None:
        # First cancellation wins
        with self._lock:
            if self._error is None:
                self._error = error
                self._event.set()

    def error(self) -> Cancelled | None:
        signal: _CancelSignal | None = self
        while signal is not None:
            if signal._event.is_set():
                return signal._error
            if signal.deadline is not None and time.monotonic() >= signal.deadline:
                signal.cancel(DeadlineExceeded())
                return signal._error
            signal = signal.parent
        return None

    def effective_deadline(self) -> float | None:
        deadlines = []
        signal: _CancelSignal | None = self
        while signal is not None:
            if signal.deadline is not None:
                deadlines.append(signal.deadline)
            signal = signal.parent
        return min(deadlines) if deadlines else None


class ExecutionContext:
    """Immutable, append-only key/value carrier with a cancellation signal.

    Use ``ExecutionContext.background()`` to get an empty root, then derive
    new contexts with ``with_value``, ``with_cancel`` or ``with_timeout``.
    """

    __slots__ = ("_parent", "_key", "_value", "_signal")

    def __init__(
        self,
        parent: "ExecutionContext | None" = None,
        key: Any = _MISSING,
        value: Any = None,
        signal: _CancelSignal | None = None,
    ):
        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_key", key)
        object.__setattr__(self, "_value", value)
        object.__setattr__(self, "_signal", signal or _CancelSignal())

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ExecutionContext is immutable; use with_value()")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ExecutionContext is immutable")

    @classmethod
    def background(cls) -> "ExecutionContext":
        """Return an empty context that is never cancelled."""
        return cls()

    # Values

    def with_value(self, key: Hashable, value: Any) -> "ExecutionContext":
        """Return a new context carrying ``key=value``; ``self`` is unchanged."""
        if key is None:
            raise TypeError("context key must not be None")
        hash(key)
        return ExecutionContext(parent=self, key=key, value=value, signal=self._signal)

    def with_values(self, **values: Any) -> "ExecutionContext":
        ctx = self
        for key, value in values.items():
            ctx = ctx.with_value(key, value)
        return ctx

    def _lookup(self, key: Hashable) -> Any:
        node: ExecutionContext | None = self
        while node is not None:
            if node._key is not _MISSING and node._key == key:
                return node._value
            node = node._parent
        return _MISSING

    def value(self, key: Hashable, default: Any = None) -> Any:
        """Return the nearest value written for ``key``, or ``default``."""
        found = self._lookup(key)
        return default if found is _MISSING else found

    def __getitem__(self, key: Hashable) -> Any:
        found = self._lookup(key)
        if found is _MISSING:
            raise KeyError(key)
        return found

    def __contains__(self, key: object) -> bool:
        return self._lookup(key) is not _MISSING

    def to_dict(self) -> dict[Any, Any]:
        """Flatten the visible key/value pairs, nearest write winning."""
        nodes = []
        node: ExecutionContext | None = self
        while node is not None:
            if node._key is not _MISSING:
                nodes.append(node)
            node = node._parent
        return {n._key: n._value for n in reversed(nodes)}

    # Cancellation

    def _derive(self, deadline: float | None = None) -> tuple["ExecutionContext", CancelFunc]:
        signal = _CancelSignal(parent=self._signal, deadline=deadline)

        def cancel(reason: Any = None) -> None:
            signal.cancel(Cancelled(reason))

        return ExecutionContext(parent=self, signal=signal), cancel

    def with_cancel(self) -> tuple["ExecutionContext", CancelFunc]:
        """Return a cancellable child and the function that cancels it.

        Cancelling the child never affects ``self``; cancelling ``self`` (or
        any ancestor) is visible from the child.
        """
        return self._derive()

    def with_deadline(self, deadline: float) -> tuple["ExecutionContext", CancelFunc]:
        """Like ``with_cancel`` but also cancelled once ``time.monotonic()`` reaches ``deadline``."""
        return self._derive(deadline=deadline)

    def with_timeout(self, seconds: float) -> tuple["ExecutionContext", CancelFunc]:
        return self.with_deadline(time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        """Earliest monotonic deadline inherited by this context, if any."""
        return self._signal.effective_deadline()

    def error(self) -> Cancelled | None:
        """Return the cancellation error, or None while the context is live."""
        return self._signal.error()

    @property
    def cancelled(self) -> bool:
        return self.error() is not None

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "live"
        return f"ExecutionContext({self.to_dict()!r}, {state})"
