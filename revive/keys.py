"""Target key conventions.

Objects are stored under their plain name. File-backed targets are stored
under the file path wrapped in double quotes so that a file called ``data``
never collides with an object called ``data``:

    >>> file_store("report.md")
    '"report.md"'
    >>> is_file('"report.md"')
    True
"""

import posixpath


def file_store(path: str) -> str:
    """Return the cache key of a file-backed target."""
    return f'"{_normalize_path(path)}"'


def is_file(key: str) -> bool:
    """Check if a key names a file-backed target."""
    return len(key) >= 2 and key.startswith('"') and key.endswith('"')


def display_key(key: str) -> str:
    """Strip the file quoting from a key, if present."""
    return key[1:-1] if is_file(key) else key


def standardize_key(key: str) -> str:
    """Normalize a user-supplied target name into a cache key.

    Whitespace around the name is dropped. Single-quoted names are treated
    as file targets, and the path inside a file key is normalized.
    """
    key = str(key).strip()
    if len(key) >= 2 and key.startswith("'") and key.endswith("'"):
        key = f'"{key[1:-1]}"'
    if is_file(key):
        return file_store(key[1:-1])
    return key


def _normalize_path(path: str) -> str:
    path = str(path).replace("\\", "/")
    return posixpath.normpath(path)
