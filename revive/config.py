"""Per-call options and the cached build configuration record."""

from dataclasses import dataclass, field
from typing import Any

from revive.graph import DependencyGraph
from revive.materialize import LazyMode, parse_lazy
from revive.plan import Plan


@dataclass
class LoadOptions:
    """Options of one ``loadd`` call.

    Attributes:
        namespace: Namespace to load from (None: the store's default)
        imported_only: Keep only targets marked as imports
        deps: Load the cached dependencies of the selection instead
        replace: Overwrite names already bound in the workspace
        lazy: Materialization strategy (see ``parse_lazy``)
        jobs: Number of workers
        strict: Raise ``LoadError`` when any target fails
    """

    namespace: str | None = None
    imported_only: bool = False
    deps: bool = False
    replace: bool = True
    lazy: bool | str | LazyMode = LazyMode.EAGER
    jobs: int = 1
    strict: bool = False

    def __post_init__(self):
        self.lazy = parse_lazy(self.lazy)
        if self.jobs < 1:
            raise ValueError(f"jobs must be at least 1, got {self.jobs}")


def as_graph(value: Any) -> DependencyGraph:
    """Coerce a cached graph (object or dict form) into a DependencyGraph."""
    if value is None:
        return DependencyGraph()
    if isinstance(value, DependencyGraph):
        return value
    if isinstance(value, dict):
        return DependencyGraph.from_dict(value)
    raise TypeError(f"cached graph has unexpected type {type(value).__name__}")


def as_plan(value: Any) -> Plan:
    """Coerce a cached plan (object, records or mapping form) into a Plan."""
    if value is None:
        return Plan()
    if isinstance(value, Plan):
        return value
    return Plan.from_records(value)


@dataclass
class BuildConfig:
    """Configuration cached by the last build, reassembled from ``config``.

    ``cache`` always points at the store the record was read from, since the
    cache directory may have moved since it was written.
    """

    cache: Any
    workspace: Any
    graph: DependencyGraph | None = None
    plan: Plan | None = None
    seed: int | None = None
    settings: dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = ("graph", "plan", "seed", "workspace", "cache")

    @classmethod
    def from_mapping(cls, values: dict[str, Any], cache: Any, workspace: Any) -> "BuildConfig":
        graph = values.get("graph")
        plan = values.get("plan")
        return cls(
            cache=cache,
            workspace=values["workspace"] if values.get("workspace") is not None else workspace,
            graph=as_graph(graph) if graph is not None else None,
            plan=as_plan(plan) if plan is not None else None,
            seed=values.get("seed"),
            settings={k: v for k, v in values.items() if k not in cls.KNOWN_KEYS},
        )

    def __getitem__(self, key: str) -> Any:
        if key in self.KNOWN_KEYS:
            return getattr(self, key)
        return self.settings[key]

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default
