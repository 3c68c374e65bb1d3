"""Exceptions raised by revive."""


class ReviveException(Exception):
    """Base class for all revive exceptions."""

    def __init__(self, msg: str, *args):
        assert msg
        self.msg = msg
        super().__init__(msg, *args)

    def __str__(self) -> str:
        return self.msg


class CacheUnreachable(ReviveException):
    """No cache could be located."""

    def __init__(self, path: str | None = None):
        self.path = path
        where = f" at or above '{path}'" if path else ""
        super().__init__(f"cannot find revive cache{where}")


class EmptySelection(ReviveException):
    """Selection criteria matched no keys."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"selection matched no keys in namespace '{namespace}'")


class NoTargets(ReviveException):
    def __init__(self):
        super().__init__("no targets to load")


class NotPresent(ReviveException, KeyError):
    """A key is missing from a namespace."""

    def __init__(self, key: str, namespace: str):
        self.key = key
        self.namespace = namespace
        super().__init__(f"key '{key}' not found in namespace '{namespace}'")


class SeedNotFound(ReviveException):
    def __init__(self):
        super().__init__("pseudo-random seed not found in the cache")


class BindingConflict(ReviveException):
    """A live binding was requested for a name that is already bound."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"'{name}' is already bound in the workspace")


class LoadError(ReviveException):
    """One or more targets failed to load.

    Attributes:
        errors: Mapping of target key to the exception raised for it
    """

    def __init__(self, errors: dict[str, Exception]):
        self.errors = errors
        keys = ", ".join(sorted(errors))
        super().__init__(f"failed to load {len(errors)} target(s): {keys}")
