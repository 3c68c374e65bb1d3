"""Tests for the memory and disk stores."""

import pytest

from revive.exceptions import NotPresent
from revive.store import (
    CACHE_DIR,
    DiskStore,
    MemoryStore,
    Store,
    find_cache,
    get_cache,
    new_cache,
)


@pytest.fixture(params=["memory", "disk"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    return new_cache(tmp_path)


def test_stores_satisfy_protocol(tmp_path):
    assert isinstance(MemoryStore(), Store)
    assert isinstance(new_cache(tmp_path), Store)


def test_get_set(store):
    store.set("x", {"value": [1, 2, 3]})
    assert store.get("x") == {"value": [1, 2, 3]}
    assert store.exists("x")


def test_get_missing_raises_not_present(store):
    with pytest.raises(NotPresent) as exc_info:
        store.get("missing")
    assert exc_info.value.key == "missing"
    assert exc_info.value.namespace == store.default_namespace


def test_not_present_is_a_key_error(store):
    with pytest.raises(KeyError):
        store.get("missing", namespace="meta")


def test_namespaces_are_isolated(store):
    store.set("x", 1)
    store.set("x", 2, namespace="meta")
    assert store.get("x") == 1
    assert store.get("x", namespace="meta") == 2
    assert not store.exists("y", namespace="meta")
    assert store.list("config") == []


def test_list_is_sorted(store):
    for key in ["b", "a", '"data/file.csv"']:
        store.set(key, key)
    assert store.list() == ['"data/file.csv"', "a", "b"]


def test_overwrite(store):
    store.set("x", 1)
    store.set("x", 2)
    assert store.get("x") == 2
    assert store.list() == ["x"]


def test_delete(store):
    store.set("x", 1)
    store.delete("x")
    assert not store.exists("x")
    with pytest.raises(NotPresent):
        store.delete("x")


class TestDiskStore:
    def test_layout(self, tmp_path):
        store = new_cache(tmp_path)
        store.set("x", "hello")
        assert store.path == tmp_path / CACHE_DIR
        objects = [p for p in store.objects_dir.rglob("*") if p.is_file()]
        assert len(objects) == 1
        # objects/md5/<2 hex>/<30 hex>
        assert len(objects[0].parent.name) == 2
        assert len(objects[0].name) == 30

    def test_identical_values_stored_once(self, tmp_path):
        store = new_cache(tmp_path)
        store.set("x", [1, 2, 3])
        store.set("y", [1, 2, 3])
        objects = [p for p in store.objects_dir.rglob("*") if p.is_file()]
        assert len(objects) == 1
        assert store.get("y") == [1, 2, 3]

    def test_keys_with_quotes_and_slashes(self, tmp_path):
        store = new_cache(tmp_path)
        key = '"reports/2024/summary.md"'
        store.set(key, "fingerprint")
        assert store.list() == [key]
        assert store.get(key) == "fingerprint"

    def test_dangling_key(self, tmp_path):
        store = new_cache(tmp_path)
        store.set("x", 1)
        for obj in store.objects_dir.rglob("*"):
            if obj.is_file():
                obj.unlink()
        with pytest.raises(NotPresent):
            store.get("x")

    @pytest.mark.parametrize("name", [".DS_Store", ".key.swp", "notes.txt", "a"])
    def test_list_skips_stray_files(self, tmp_path, name):
        store = new_cache(tmp_path)
        store.set("a", 1)
        (store.keys_dir / "objects" / name).write_bytes(b"\x8a\x00x")
        assert store.list() == ["a"]

    def test_loadd_ignores_stray_files(self, tmp_path):
        from revive import Workspace, loadd

        store = new_cache(tmp_path)
        store.set("a", 1)
        store.set("a", {"imported": False}, namespace="meta")
        (store.keys_dir / "objects" / ".DS_Store").write_bytes(b"\x8a")
        ws = Workspace()
        loadd(workspace=ws, cache=store)
        assert ws.to_dict() == {"a": 1}

    @pytest.mark.parametrize("namespace", ["..", "../objects", "a/b", "."])
    def test_namespace_cannot_leave_keys_dir(self, tmp_path, namespace):
        store = new_cache(tmp_path)
        with pytest.raises(ValueError, match="invalid namespace"):
            store.set("x", 1, namespace=namespace)
        with pytest.raises(ValueError, match="invalid namespace"):
            store.get("x", namespace=namespace)
        with pytest.raises(ValueError, match="invalid namespace"):
            store.list(namespace)

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        store = new_cache(tmp_path)

        def fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("revive.store.os.replace", fail)
        with pytest.raises(OSError, match="disk full"):
            store.set("x", 1)
        monkeypatch.undo()

        assert not list(store.path.rglob("*.tmp"))
        assert not store.exists("x")

    def test_reopen(self, tmp_path):
        new_cache(tmp_path).set("x", 42, namespace="config")
        reopened = DiskStore(tmp_path / CACHE_DIR)
        assert reopened.get("x", namespace="config") == 42
        assert reopened.namespaces() == ["config"]


class TestFindCache:
    def test_found_in_parent(self, tmp_path):
        new_cache(tmp_path)
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_cache(nested) == (tmp_path / CACHE_DIR).resolve()

    def test_no_search(self, tmp_path):
        new_cache(tmp_path)
        nested = tmp_path / "a"
        nested.mkdir()
        assert find_cache(nested, search=False) is None
        assert find_cache(tmp_path, search=False) is not None

    def test_get_cache(self, tmp_path):
        assert get_cache(tmp_path, search=False) is None
        new_cache(tmp_path).set("x", 1)
        cache = get_cache(tmp_path)
        assert isinstance(cache, DiskStore)
        assert cache.get("x") == 1
