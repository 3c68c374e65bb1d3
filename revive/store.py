"""Key-value stores holding cached targets.

A store is partitioned into namespaces, each a mapping of unique keys to
opaque values. revive only reads from a store; the build engine that fills
it uses ``set`` and ``delete``.

Two stores are provided:

- ``MemoryStore`` keeps everything in process memory.
- ``DiskStore`` keeps a content-addressed layout under a ``.revive``
  directory::

      .revive/
        keys/<namespace>/<encoded key>    # holds the value's md5
        objects/md5/<2 hex>/<30 hex>      # pickled value

Identical values are written once regardless of how many keys refer to them.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
import pickle
import tempfile
import threading
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from revive.exceptions import NotPresent
from revive.log import logger

logger = logger.getChild(__name__)

DEFAULT_NAMESPACE = "objects"
META_NAMESPACE = "meta"
CONFIG_NAMESPACE = "config"

CACHE_DIR = ".revive"


@runtime_checkable
class Store(Protocol):
    """The narrow contract revive consumes from a cache."""

    default_namespace: str

    def get(self, key: str, namespace: str | None = None) -> Any: ...

    def exists(self, key: str, namespace: str | None = None) -> bool: ...

    def list(self, namespace: str | None = None) -> list[str]: ...


class MemoryStore:
    """In-process store.

    Thread-safe: every access goes through a single lock, so concurrent
    readers never observe a half-written namespace.
    """

    def __init__(self, default_namespace: str = DEFAULT_NAMESPACE):
        self.default_namespace = default_namespace
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"MemoryStore(namespaces={sorted(self._data)})"

    def get(self, key: str, namespace: str | None = None) -> Any:
        namespace = namespace or self.default_namespace
        with self._lock:
            try:
                return self._data[namespace][key]
            except KeyError:
                raise NotPresent(key, namespace) from None

    def exists(self, key: str, namespace: str | None = None) -> bool:
        namespace = namespace or self.default_namespace
        with self._lock:
            return key in self._data.get(namespace, {})

    def list(self, namespace: str | None = None) -> list[str]:
        namespace = namespace or self.default_namespace
        with self._lock:
            return sorted(self._data.get(namespace, {}))

    def set(self, key: str, value: Any, namespace: str | None = None):
        namespace = namespace or self.default_namespace
        with self._lock:
            self._data.setdefault(namespace, {})[key] = value

    def delete(self, key: str, namespace: str | None = None):
        namespace = namespace or self.default_namespace
        with self._lock:
            try:
                del self._data[namespace][key]
            except KeyError:
                raise NotPresent(key, namespace) from None

    def namespaces(self) -> list[str]:
        with self._lock:
            return sorted(self._data)


def _encode_key(key: str) -> str:
    """Encode a key into a file name (keys may contain quotes and slashes)."""
    return base64.urlsafe_b64encode(key.encode()).decode().rstrip("=")


def _decode_key(name: str) -> str:
    """Decode a key file name.

    Raises:
        binascii.Error: If the name is not urlsafe base64
        UnicodeDecodeError: If the decoded bytes are not UTF-8
    """
    padding = "=" * (-len(name) % 4)
    return base64.b64decode(name + padding, altchars=b"-_", validate=True).decode()


def _check_namespace(namespace: str) -> str:
    """Reject namespaces that would resolve outside the ``keys`` directory."""
    if namespace in (".", "..") or "/" in namespace or "\\" in namespace or os.sep in namespace:
        raise ValueError(f"invalid namespace {namespace!r}")
    return namespace


def _atomic_write(path: Path, data: bytes):
    """Write bytes to path via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=path.parent, delete=False, suffix=".tmp") as tmp:
        tmp_path = tmp.name
        try:
            tmp.write(data)
        except BaseException:
            tmp.close()
            os.unlink(tmp_path)
            raise
    try:
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


class DiskStore:
    """Content-addressed store rooted at a ``.revive`` directory.

    Reads take no locks: key files and objects are only ever replaced
    atomically, so a concurrent reader sees either the old or the new value.
    """

    def __init__(self, path: str | os.PathLike, default_namespace: str = DEFAULT_NAMESPACE):
        self.path = Path(path)
        self.default_namespace = default_namespace

    def __repr__(self) -> str:
        return f"DiskStore({str(self.path)!r})"

    @property
    def keys_dir(self) -> Path:
        return self.path / "keys"

    @property
    def objects_dir(self) -> Path:
        return self.path / "objects" / "md5"

    def _namespace_dir(self, namespace: str) -> Path:
        return self.keys_dir / _check_namespace(namespace)

    def _key_path(self, key: str, namespace: str) -> Path:
        return self._namespace_dir(namespace) / _encode_key(key)

    def _object_path(self, md5: str) -> Path:
        return self.objects_dir / md5[:2] / md5[2:]

    def get(self, key: str, namespace: str | None = None) -> Any:
        namespace = namespace or self.default_namespace
        key_path = self._key_path(key, namespace)
        try:
            md5 = key_path.read_text().strip()
        except FileNotFoundError:
            raise NotPresent(key, namespace) from None

        object_path = self._object_path(md5)
        try:
            with open(object_path, "rb") as f:
                return pickle.load(f)
        except FileNotFoundError:
            logger.debug("dangling key %s in %s: object %s missing", key, namespace, md5)
            raise NotPresent(key, namespace) from None

    def exists(self, key: str, namespace: str | None = None) -> bool:
        namespace = namespace or self.default_namespace
        return self._key_path(key, namespace).is_file()

    def list(self, namespace: str | None = None) -> list[str]:
        namespace = namespace or self.default_namespace
        ns_dir = self._namespace_dir(namespace)
        if not ns_dir.is_dir():
            return []
        keys = []
        for entry in ns_dir.iterdir():
            if not entry.is_file() or entry.name.startswith(".") or entry.name.endswith(".tmp"):
                continue
            try:
                keys.append(_decode_key(entry.name))
            except (binascii.Error, UnicodeDecodeError):
                logger.debug("skipping stray file %s in namespace %s", entry.name, namespace)
        return sorted(keys)

    def set(self, key: str, value: Any, namespace: str | None = None):
        namespace = namespace or self.default_namespace
        data = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        md5 = hashlib.md5(data).hexdigest()  # noqa: S324

        object_path = self._object_path(md5)
        if not object_path.exists():
            _atomic_write(object_path, data)
        _atomic_write(self._key_path(key, namespace), md5.encode())

    def delete(self, key: str, namespace: str | None = None):
        """Remove a key. The object it pointed to is left for garbage collection."""
        namespace = namespace or self.default_namespace
        try:
            self._key_path(key, namespace).unlink()
        except FileNotFoundError:
            raise NotPresent(key, namespace) from None

    def namespaces(self) -> list[str]:
        if not self.keys_dir.is_dir():
            return []
        return sorted(entry.name for entry in self.keys_dir.iterdir() if entry.is_dir())


def find_cache(path: str | os.PathLike = ".", search: bool = True) -> Path | None:
    """Find a ``.revive`` directory.

    Args:
        path: Directory to start from
        search: If True, also look in every parent of ``path``

    Returns:
        Path to the cache directory, or None if there is none
    """
    start = Path(path).resolve()
    candidates = [start, *start.parents] if search else [start]
    for parent in candidates:
        cache_dir = parent / CACHE_DIR
        if cache_dir.is_dir():
            return cache_dir
    return None


def get_cache(path: str | os.PathLike = ".", search: bool = True) -> DiskStore | None:
    """Open the cache at or above ``path``, or return None if none exists."""
    cache_dir = find_cache(path, search=search)
    if cache_dir is None:
        logger.debug("no %s directory found from %s", CACHE_DIR, path)
        return None
    return DiskStore(cache_dir)


def new_cache(path: str | os.PathLike = ".") -> DiskStore:
    """Create (or reuse) a cache directly under ``path``."""
    cache_dir = Path(path) / CACHE_DIR
    (cache_dir / "keys").mkdir(parents=True, exist_ok=True)
    (cache_dir / "objects" / "md5").mkdir(parents=True, exist_ok=True)
    return DiskStore(cache_dir)
