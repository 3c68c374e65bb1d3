"""Provenance records and the filters built on them.

Each non-file target has a record in the ``meta`` namespace saying whether
it was imported (defined outside the workflow plan) and whether it is a
foreign import (its origin environment changed since the last build).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from revive.keys import is_file
from revive.log import logger
from revive.parallel import parallel_filter
from revive.store import META_NAMESPACE, Store

logger = logger.getChild(__name__)


@dataclass(frozen=True)
class TargetMeta:
    """Provenance flags of one cached target.

    ``None`` means the build engine did not record the flag.
    """

    imported: bool | None = None
    foreign: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_value(cls, value: Any) -> "TargetMeta":
        """Build a record from whatever the store holds.

        Accepts a ``TargetMeta`` or a mapping with ``imported``/``foreign``
        keys; other keys land in ``extra``.
        """
        if isinstance(value, TargetMeta):
            return value
        if isinstance(value, Mapping):
            extra = {k: v for k, v in value.items() if k not in ("imported", "foreign")}
            return cls(
                imported=value.get("imported"),
                foreign=value.get("foreign"),
                extra=extra,
            )
        raise TypeError(f"unsupported metadata record: {type(value).__name__}")

    def to_dict(self) -> dict[str, Any]:
        return {"imported": self.imported, "foreign": self.foreign, **self.extra}


def read_meta(key: str, store: Store) -> TargetMeta | None:
    """Return the metadata record of a key, or None if none was cached."""
    if not store.exists(key, namespace=META_NAMESPACE):
        return None
    return TargetMeta.from_value(store.get(key, namespace=META_NAMESPACE))


def is_not_foreign_import(key: str, store: Store) -> bool:
    """Decide whether a target is safe to load in bulk.

    File targets always pass. Anything else needs a metadata record that
    positively says it is not an import, or not foreign. A missing record
    or unset flags count as unsafe.
    """
    if is_file(key):
        return True
    meta = read_meta(key, store)
    if meta is None:
        return False
    return meta.imported is False or meta.foreign is False


def exclude_foreign_imports(keys: Iterable[str], store: Store, jobs: int | None = 1) -> list[str]:
    keys = list(keys)
    kept = parallel_filter(keys, lambda key: is_not_foreign_import(key, store), jobs=jobs)
    dropped = len(keys) - len(kept)
    if dropped:
        logger.debug("excluded %d foreign or unknown import(s)", dropped)
    return kept


def is_imported(key: str, store: Store) -> bool:
    """Check if a target's record marks it as an import."""
    meta = read_meta(key, store)
    return meta is not None and meta.imported is True


def imported_only(keys: Iterable[str], store: Store, jobs: int | None = 1) -> list[str]:
    return parallel_filter(keys, lambda key: is_imported(key, store), jobs=jobs)


def is_built(key: str, store: Store) -> bool:
    """Check if a target's record marks it as built by the workflow."""
    meta = read_meta(key, store)
    return meta is not None and meta.imported is False
