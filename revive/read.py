"""Reading cached targets and loading them into a workspace.

Example:
    from revive import Workspace, loadd, readd, starts_with

    ws = Workspace()
    loadd("small", "large", workspace=ws, jobs=2)
    loadd(starts_with("summ"), workspace=ws, lazy=True)
    loadd("report", workspace=ws, deps=True)   # dependencies of 'report'
    readd("small")                             # value, no workspace effect
"""

import os
from typing import Any

from revive import provenance
from revive.config import BuildConfig, LoadOptions, as_graph, as_plan
from revive.exceptions import CacheUnreachable, LoadError, NoTargets, SeedNotFound
from revive.graph import DependencyGraph, existing_dependencies
from revive.keys import standardize_key
from revive.log import logger
from revive.materialize import LazyMode, load_target
from revive.parallel import lightly_parallelize, parallel_filter, run_batch
from revive.plan import Plan
from revive.selection import Predicate, Selection, resolve_selection
from revive.store import CONFIG_NAMESPACE, Store, get_cache
from revive.workspace import Workspace

logger = logger.getChild(__name__)


def _resolve_cache(
    cache: Store | None,
    path: str | os.PathLike = ".",
    search: bool = True,
) -> Store:
    if cache is None:
        cache = get_cache(path=path, search=search)
    if cache is None:
        raise CacheUnreachable(str(path))
    return cache


def readd(
    target: str,
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    namespace: str | None = None,
) -> Any:
    """Return a target's cached value without touching any workspace.

    Args:
        target: Target name (file targets quoted, see ``file_store``)
        cache: Store to read from; located from ``path`` if omitted
        path: Where to look for a cache when ``cache`` is omitted
        search: Also look in the parents of ``path``
        namespace: Namespace to read from (default: the store's default)

    Raises:
        CacheUnreachable: If no cache was given or found
        NotPresent: If the target is not in the namespace
    """
    cache = _resolve_cache(cache, path, search)
    namespace = namespace or cache.default_namespace
    return cache.get(standardize_key(target), namespace=namespace)


def loadd(
    *targets: str | Predicate,
    workspace: Workspace,
    selection: Selection | None = None,
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    namespace: str | None = None,
    imported_only: bool = False,
    deps: bool = False,
    graph: DependencyGraph | None = None,
    replace: bool = True,
    lazy: bool | str | LazyMode = LazyMode.EAGER,
    jobs: int = 1,
    strict: bool = False,
) -> None:
    """Load cached targets into a workspace.

    With no targets and no selection, every target in the namespace is
    loaded. Foreign imports (and anything without a provenance record) are
    never loaded; use ``readd`` to get them.

    Args:
        *targets: Target names and/or predicates such as ``starts_with("x")``
        workspace: Workspace to bind the targets into
        selection: Additional selection criteria
        cache: Store to read from; located from ``path`` if omitted
        path: Where to look for a cache when ``cache`` is omitted
        search: Also look in the parents of ``path``
        namespace: Namespace to load from
        imported_only: Only load targets marked as imports
        deps: Load the cached dependencies of the selected targets instead
            of the targets themselves
        graph: Graph to find dependencies in (default: the cached one)
        replace: If False, names already in the workspace are left alone
        lazy: ``"eager"``, ``"promise"``, ``"bind"``, True or False
        jobs: Number of parallel workers
        strict: Raise ``LoadError`` after the batch if any target failed

    Raises:
        CacheUnreachable: If no cache was given or found
        EmptySelection: If the given criteria matched nothing
        NoTargets: If nothing is left to load after the imported-only filter
        LoadError: With ``strict=True``, if any target failed to load
    """
    cache = _resolve_cache(cache, path, search)
    criteria = Selection.of(*targets)
    if selection is not None:
        criteria = criteria | selection
    options = LoadOptions(
        namespace=namespace,
        imported_only=imported_only,
        deps=deps,
        replace=replace,
        lazy=lazy,
        jobs=jobs,
        strict=strict,
    )
    load_into(workspace, criteria, cache, options, graph=graph)


def load_into(
    workspace: Workspace,
    selection: Selection,
    cache: Store,
    options: LoadOptions,
    graph: DependencyGraph | None = None,
) -> None:
    """Run the load pipeline against an already located cache."""
    namespace = options.namespace or cache.default_namespace
    jobs = options.jobs

    keys = resolve_selection(cache, selection, namespace=namespace)
    if options.imported_only:
        keys = set(provenance.imported_only(sorted(keys), cache, jobs=jobs))
    if not keys:
        raise NoTargets()

    if options.deps:
        if graph is None:
            graph = read_graph(cache=cache)
        keys = existing_dependencies(keys, graph, cache, namespace=namespace, jobs=jobs)

    if not options.replace:
        keys = {key for key in keys if key not in workspace}

    keys = provenance.exclude_foreign_imports(sorted(keys), cache, jobs=jobs)

    logger.debug(
        "loading %d target(s) from '%s' (lazy=%s, jobs=%d)",
        len(keys), namespace, options.lazy.value, jobs,
    )
    result = run_batch(
        keys,
        lambda key: load_target(key, cache, namespace, workspace, lazy=options.lazy),
        jobs=jobs,
    )

    if result.errors:
        for key, error in sorted(result.errors.items()):
            logger.debug("failed to load %s: %s", key, error)
        if options.strict:
            raise LoadError(result.errors)
        logger.warning(
            "failed to load %d of %d target(s): %s",
            len(result.errors), len(result), ", ".join(sorted(result.errors)),
        )


def read_config(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    jobs: int = 1,
    workspace: Workspace | None = None,
) -> BuildConfig:
    """Reassemble the configuration cached by the last build.

    Args:
        workspace: Workspace to record if the build did not cache one
            (default: a new empty workspace)
    """
    cache = _resolve_cache(cache, path, search)
    keys = cache.list(CONFIG_NAMESPACE)
    values = lightly_parallelize(
        keys,
        lambda key: cache.get(key, namespace=CONFIG_NAMESPACE),
        jobs=jobs,
    )
    if workspace is None:
        workspace = Workspace()
    return BuildConfig.from_mapping(dict(zip(keys, values)), cache=cache, workspace=workspace)


def read_graph(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
) -> DependencyGraph:
    """Return the cached dependency graph, or an empty one."""
    cache = _resolve_cache(cache, path, search)
    if cache.exists("graph", namespace=CONFIG_NAMESPACE):
        return as_graph(cache.get("graph", namespace=CONFIG_NAMESPACE))
    return DependencyGraph()


def read_plan(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
) -> Plan:
    """Return the cached workflow plan, or an empty one."""
    cache = _resolve_cache(cache, path, search)
    if cache.exists("plan", namespace=CONFIG_NAMESPACE):
        return as_plan(cache.get("plan", namespace=CONFIG_NAMESPACE))
    return Plan()


def read_seed(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
) -> int:
    """Return the project's pseudo-random seed.

    Raises:
        SeedNotFound: If no build has cached a seed
    """
    cache = _resolve_cache(cache, path, search)
    if not cache.exists("seed", namespace=CONFIG_NAMESPACE):
        raise SeedNotFound()
    return cache.get("seed", namespace=CONFIG_NAMESPACE)


def cached(
    *targets: str,
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    namespace: str | None = None,
) -> list[str] | dict[str, bool]:
    """List cached keys, or check which of ``targets`` are cached."""
    cache = _resolve_cache(cache, path, search)
    namespace = namespace or cache.default_namespace
    if targets:
        keys = [standardize_key(t) for t in targets]
        return {key: cache.exists(key, namespace=namespace) for key in keys}
    return cache.list(namespace)


def built(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    jobs: int = 1,
) -> list[str]:
    """List the cached targets the workflow built itself."""
    cache = _resolve_cache(cache, path, search)
    keys = cache.list(cache.default_namespace)
    return parallel_filter(keys, lambda key: provenance.is_built(key, cache), jobs=jobs)


def imported(
    cache: Store | None = None,
    path: str | os.PathLike = ".",
    search: bool = True,
    jobs: int = 1,
) -> list[str]:
    """List the cached imports (objects defined outside the workflow plan)."""
    cache = _resolve_cache(cache, path, search)
    keys = cache.list(cache.default_namespace)
    return parallel_filter(keys, lambda key: provenance.is_imported(key, cache), jobs=jobs)

