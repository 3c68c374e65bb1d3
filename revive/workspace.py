"""Caller-owned workspace that cached targets are loaded into."""

from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import Any

from revive.bindings import Binding, LiveBinding, MemoizedBinding, ValueBinding
from revive.exceptions import BindingConflict


class Workspace(MutableMapping):
    """Mapping of names to binding cells.

    Reading ``ws[name]`` resolves the binding, so a memoized binding reads
    the cache on first access and a live binding reads it on every access.
    Assigning ``ws[name] = value`` installs a plain value.

    Plain and memoized bindings replace whatever was bound before. A live
    binding refuses to shadow an existing name: the caller has to remove the
    old binding first (``bind_live`` raises ``BindingConflict``).

    Writers are expected to partition names between threads; the workspace
    itself takes no locks.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None):
        self._bindings: dict[str, Binding] = {}
        if initial:
            for name, value in initial.items():
                self.bind_value(name, value)

    def __repr__(self) -> str:
        inner = ", ".join(f"{name}: {binding.kind}" for name, binding in sorted(self._bindings.items()))
        return f"Workspace({{{inner}}})"

    def __getitem__(self, name: str) -> Any:
        return self._bindings[name].resolve()

    def __setitem__(self, name: str, value: Any):
        self.bind_value(name, value)

    def __delitem__(self, name: str):
        del self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._bindings))

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def names(self) -> list[str]:
        return sorted(self._bindings)

    def binding(self, name: str) -> Binding:
        """Return the binding cell of a name without resolving it."""
        return self._bindings[name]

    def bind_value(self, name: str, value: Any):
        self._bindings[name] = ValueBinding(value)

    def bind_memoized(self, name: str, loader: Callable[[], Any]):
        self._bindings[name] = MemoizedBinding(loader)

    def bind_live(self, name: str, loader: Callable[[], Any]):
        if name in self._bindings:
            raise BindingConflict(name)
        self._bindings[name] = LiveBinding(loader)

    def remove(self, name: str) -> Binding:
        """Remove a name and return the binding it held."""
        return self._bindings.pop(name)

    def to_dict(self) -> dict[str, Any]:
        """Resolve every binding into a plain dict."""
        return {name: self[name] for name in self.names()}
