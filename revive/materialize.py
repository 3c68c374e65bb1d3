"""Strategies for binding cached targets into a workspace.

- ``eager``: read now, bind the value.
- ``promise`` (deferred): bind a cell that reads once, on first access.
- ``bind`` (live): bind a cell that reads on every access.

``lazy=True`` means ``promise`` and ``lazy=False`` means ``eager``.
"""

from enum import Enum

from revive.exceptions import BindingConflict
from revive.log import logger
from revive.store import Store
from revive.workspace import Workspace

logger = logger.getChild(__name__)


class LazyMode(str, Enum):
    EAGER = "eager"
    DEFERRED = "promise"
    LIVE = "bind"


_ALIASES = {
    "deferred": LazyMode.DEFERRED,
    "live": LazyMode.LIVE,
}


def parse_lazy(lazy: bool | str | LazyMode) -> LazyMode:
    """Map a ``lazy`` argument onto a LazyMode.

    Raises:
        ValueError: If the value names no strategy
    """
    if lazy is True:
        return LazyMode.DEFERRED
    if lazy is False:
        return LazyMode.EAGER
    if isinstance(lazy, LazyMode):
        return lazy
    if isinstance(lazy, str):
        value = lazy.strip().lower()
        if value in _ALIASES:
            return _ALIASES[value]
        try:
            return LazyMode(value)
        except ValueError:
            pass
    choices = ", ".join([m.value for m in LazyMode] + list(_ALIASES))
    raise ValueError(f"invalid lazy mode {lazy!r}, expected True, False or one of: {choices}")


def eager_load_target(key: str, store: Store, namespace: str | None, workspace: Workspace):
    """Read a target and bind its value right away."""
    value = store.get(key, namespace=namespace)
    workspace.bind_value(key, value)


def deferred_load_target(key: str, store: Store, namespace: str | None, workspace: Workspace):
    """Bind a target that is read from the cache on first access only."""
    workspace.bind_memoized(key, lambda: store.get(key, namespace=namespace))


def live_load_target(key: str, store: Store, namespace: str | None, workspace: Workspace):
    """Bind a target that is re-read from the cache on every access.

    A name already present in the workspace is removed first, with a warning.
    """
    def loader():
        return store.get(key, namespace=namespace or store.default_namespace)

    try:
        workspace.bind_live(key, loader)
    except BindingConflict as e:
        logger.warning("%s; replacing it with a live binding", e)
        workspace.remove(key)
        workspace.bind_live(key, loader)


_STRATEGIES = {
    LazyMode.EAGER: eager_load_target,
    LazyMode.DEFERRED: deferred_load_target,
    LazyMode.LIVE: live_load_target,
}


def load_target(
    key: str,
    store: Store,
    namespace: str | None,
    workspace: Workspace,
    lazy: bool | str | LazyMode = LazyMode.EAGER,
):
    """Materialize one target with the selected strategy."""
    strategy = _STRATEGIES[parse_lazy(lazy)]
    strategy(key, store, namespace, workspace)
