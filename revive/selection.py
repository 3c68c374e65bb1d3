"""Turning selection criteria into a concrete set of cache keys.

A ``Selection`` combines explicit names with predicates over keys:

    >>> sel = Selection(names=["small"], predicates=[starts_with("summ")])

Predicates compose with ``|``, ``&`` and ``~``:

    >>> reports = starts_with("report") & ~ends_with("_draft")
"""

import fnmatch
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from revive.exceptions import EmptySelection
from revive.keys import display_key, standardize_key
from revive.store import Store


class Predicate:
    """A named test on cache keys."""

    def __init__(self, fn: Callable[[str], bool], description: str):
        self._fn = fn
        self.description = description

    def __call__(self, key: str) -> bool:
        return bool(self._fn(key))

    def __repr__(self) -> str:
        return f"Predicate({self.description})"

    def __or__(self, other: "Predicate") -> "Predicate":
        return Predicate(lambda k: self(k) or other(k), f"{self.description} | {other.description}")

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(lambda k: self(k) and other(k), f"{self.description} & {other.description}")

    def __invert__(self) -> "Predicate":
        return Predicate(lambda k: not self(k), f"~{self.description}")


def starts_with(prefix: str) -> Predicate:
    return Predicate(lambda k: display_key(k).startswith(prefix), f"starts_with({prefix!r})")


def ends_with(suffix: str) -> Predicate:
    return Predicate(lambda k: display_key(k).endswith(suffix), f"ends_with({suffix!r})")


def contains(text: str) -> Predicate:
    return Predicate(lambda k: text in display_key(k), f"contains({text!r})")


def matches(pattern: str) -> Predicate:
    """Keys matching a regular expression anywhere in the name."""
    regex = re.compile(pattern)
    return Predicate(lambda k: regex.search(display_key(k)) is not None, f"matches({pattern!r})")


def glob(pattern: str) -> Predicate:
    """Keys matching a shell-style glob pattern."""
    return Predicate(lambda k: fnmatch.fnmatchcase(display_key(k), pattern), f"glob({pattern!r})")


def one_of(names: Iterable[str]) -> Predicate:
    wanted = {standardize_key(n) for n in names}
    return Predicate(lambda k: k in wanted, f"one_of({sorted(wanted)!r})")


def everything() -> Predicate:
    return Predicate(lambda k: True, "everything()")


@dataclass
class Selection:
    """Selection criteria.

    Attributes:
        names: Explicit target names, kept even if not cached
        predicates: Tests over the namespace's keys, joined by union
    """

    names: list[str] = field(default_factory=list)
    predicates: list[Predicate] = field(default_factory=list)

    @classmethod
    def of(cls, *items: str | Predicate) -> "Selection":
        """Split a mix of names and predicates into a Selection."""
        names = [item for item in items if not isinstance(item, Predicate)]
        predicates = [item for item in items if isinstance(item, Predicate)]
        return cls(names=list(names), predicates=predicates)

    @property
    def is_empty(self) -> bool:
        """An empty selection means every key in the namespace."""
        return not self.names and not self.predicates

    def __or__(self, other: "Selection") -> "Selection":
        return Selection(
            names=self.names + other.names,
            predicates=self.predicates + other.predicates,
        )


def resolve_selection(
    store: Store,
    selection: Selection | None = None,
    namespace: str | None = None,
) -> set[str]:
    """Resolve criteria into a deduplicated key set.

    Args:
        store: Cache to list keys from
        selection: Criteria; None or empty selects every key
        namespace: Namespace to list (default: the store's default)

    Returns:
        Set of normalized keys

    Raises:
        EmptySelection: If non-empty criteria matched nothing
    """
    namespace = namespace or store.default_namespace
    if selection is None or selection.is_empty:
        return set(store.list(namespace))

    keys = {standardize_key(name) for name in selection.names}
    if selection.predicates:
        for key in store.list(namespace):
            if any(predicate(key) for predicate in selection.predicates):
                keys.add(key)

    if not keys:
        raise EmptySelection(namespace)
    return keys
