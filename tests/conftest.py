"""Shared fixtures: a small cached debug project and test scenarios."""

from collections import Counter

import pytest

from revive.graph import DependencyGraph
from revive.keys import file_store
from revive.plan import Plan
from revive.store import CONFIG_NAMESPACE, META_NAMESPACE, MemoryStore, new_cache
from revive.workspace import Workspace


class CountingStore(MemoryStore):
    """MemoryStore that counts reads per (key, namespace)."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reads: Counter = Counter()

    def get(self, key, namespace=None):
        namespace = namespace or self.default_namespace
        self.reads[(key, namespace)] += 1
        return super().get(key, namespace=namespace)

    def object_reads(self, key):
        return self.reads[(key, self.default_namespace)]


IMPORTS = {
    "a": 15,
    "b": 20,
    "c": 25,
    "f": "function(x) {g(x) + a}",
    "g": "function(y) {h(y) + b}",
    "h": "function(y) {i(y) + j(y)}",
    "i": "function(x) {x+1}",
    "j": "function(x) {x+2 + c}",
}

TARGETS = {
    "myinput": list(range(1, 11)),
    "yourinput": 80,
    "nextone": 157,
    "combined": 237,
    "final": 237,
}

FILES = {
    file_store("input.rds"): "c2a1f8e0a3b5d7a9c2a1f8e0a3b5d7a9",
    file_store("intermediatefile.rds"): "9f8e7d6c5b4a39281f8e7d6c5b4a3928",
}

EDGES = [
    ("a", "f"),
    ("g", "f"),
    ("b", "g"),
    ("h", "g"),
    ("i", "h"),
    ("j", "h"),
    ("c", "j"),
    ("f", "yourinput"),
    ("g", "nextone"),
    ("myinput", "nextone"),
    ("nextone", "combined"),
    ("yourinput", "combined"),
    (file_store("input.rds"), "myinput"),
    ("combined", file_store("intermediatefile.rds")),
    (file_store("intermediatefile.rds"), "final"),
]

PLAN = {
    "yourinput": "f(1 + 1)",
    "nextone": "myinput + g(7)",
    "combined": "nextone + yourinput",
    "myinput": 'readRDS(file_in("input.rds"))',
    "final": 'readRDS(file_in("intermediatefile.rds"))',
}


def populate_debug_project(store):
    """Fill a store the way a build of the debug project would."""
    for key, value in IMPORTS.items():
        store.set(key, value)
        store.set(key, {"imported": True, "foreign": False}, namespace=META_NAMESPACE)
    for key, value in TARGETS.items():
        store.set(key, value)
        store.set(key, {"imported": False, "foreign": False}, namespace=META_NAMESPACE)
    for key, value in FILES.items():
        store.set(key, value)

    store.set("graph", DependencyGraph(edges=EDGES), namespace=CONFIG_NAMESPACE)
    store.set("plan", Plan.from_records(PLAN), namespace=CONFIG_NAMESPACE)
    store.set("seed", 0, namespace=CONFIG_NAMESPACE)
    store.set("jobs", 1, namespace=CONFIG_NAMESPACE)
    return store


@pytest.fixture(params=[1, 2], ids=["jobs1", "jobs2"])
def jobs(request):
    """Run a test once serially and once with a worker pool."""
    return request.param


@pytest.fixture
def cache():
    return populate_debug_project(CountingStore())


@pytest.fixture
def empty_cache():
    return CountingStore()


@pytest.fixture
def disk_cache(tmp_path):
    return populate_debug_project(new_cache(tmp_path))


@pytest.fixture
def ws():
    return Workspace()
