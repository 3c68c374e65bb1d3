"""
revive
------
Bring cached workflow targets back into a live workspace.

Usage:
    from revive import Workspace, loadd, readd

    ws = Workspace()
    loadd(workspace=ws)          # every safe target in the cache
    loadd("model", workspace=ws, lazy="bind")
    readd("model")
"""

import revive.logger
from revive.version import __version__, version_tuple  # noqa: F401

revive.logger.setup()

from revive.bindings import LiveBinding, MemoizedBinding, ValueBinding  # noqa: E402
from revive.config import BuildConfig, LoadOptions  # noqa: E402
from revive.exceptions import (  # noqa: E402
    BindingConflict,
    CacheUnreachable,
    EmptySelection,
    LoadError,
    NoTargets,
    NotPresent,
    ReviveException,
    SeedNotFound,
)
from revive.graph import DependencyGraph  # noqa: E402
from revive.keys import file_store, is_file  # noqa: E402
from revive.materialize import LazyMode  # noqa: E402
from revive.plan import Plan, PlanEntry  # noqa: E402
from revive.provenance import TargetMeta  # noqa: E402
from revive.read import (  # noqa: E402
    built,
    cached,
    imported,
    loadd,
    read_config,
    read_graph,
    read_plan,
    read_seed,
    readd,
)
from revive.selection import (  # noqa: E402
    Selection,
    contains,
    ends_with,
    everything,
    glob,
    matches,
    one_of,
    starts_with,
)
from revive.store import DiskStore, MemoryStore, get_cache, new_cache  # noqa: E402
from revive.workspace import Workspace  # noqa: E402

__all__ = [
    # Reading and loading
    "built",
    "cached",
    "imported",
    "loadd",
    "read_config",
    "read_graph",
    "read_plan",
    "read_seed",
    "readd",
    # Workspace
    "LiveBinding",
    "MemoizedBinding",
    "ValueBinding",
    "Workspace",
    # Selection
    "Selection",
    "contains",
    "ends_with",
    "everything",
    "glob",
    "matches",
    "one_of",
    "starts_with",
    # Stores and records
    "BuildConfig",
    "DependencyGraph",
    "DiskStore",
    "LazyMode",
    "LoadOptions",
    "MemoryStore",
    "Plan",
    "PlanEntry",
    "TargetMeta",
    "file_store",
    "get_cache",
    "is_file",
    "new_cache",
    # Errors
    "BindingConflict",
    "CacheUnreachable",
    "EmptySelection",
    "LoadError",
    "NoTargets",
    "NotPresent",
    "ReviveException",
    "SeedNotFound",
]
