"""Binding cells held by a workspace.

A workspace does not store values directly but cells that produce a value
when the name is accessed:

- ``ValueBinding``: a value already in memory.
- ``MemoizedBinding``: reads on first access, then serves the memo.
- ``LiveBinding``: reads on every access.
"""

import threading
from collections.abc import Callable
from typing import Any

_UNSET = object()


class Binding:
    """Base class of workspace binding cells."""

    kind = "abstract"

    def resolve(self) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ValueBinding(Binding):
    kind = "value"

    def __init__(self, value: Any):
        self.value = value

    def resolve(self) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"ValueBinding({self.value!r})"


class MemoizedBinding(Binding):
    """Compute-once cell guarded by a one-shot latch.

    The first access runs ``loader`` while holding a lock; threads racing on
    the first access block until it finishes and then share its result, so
    ``loader`` runs exactly once. A failing first read is not memoized: the
    exception reaches the accessor and the next access tries again.
    """

    kind = "memoized"

    def __init__(self, loader: Callable[[], Any]):
        self._loader = loader
        self._value = _UNSET
        self._lock = threading.Lock()

    @property
    def resolved(self) -> bool:
        return self._value is not _UNSET

    def resolve(self) -> Any:
        if self._value is not _UNSET:
            return self._value
        with self._lock:
            if self._value is _UNSET:
                self._value = self._loader()
                # Drop the loader so it (and the store it closes over) can be freed.
                self._loader = None
        return self._value

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "pending"
        return f"MemoizedBinding({state})"


class LiveBinding(Binding):
    """Recompute-per-access cell. Nothing is memoized."""

    kind = "live"

    def __init__(self, loader: Callable[[], Any]):
        self._loader = loader

    def resolve(self) -> Any:
        return self._loader()
