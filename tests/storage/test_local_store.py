import json
import threading

from src.mediguard.mediguard.devices.identity import DeviceIdentity
from src.mediguard.mediguard.storage.collection import LocalCollection
from src.mediguard.mediguard.storage.kv import InMemoryStore, JsonFileStore


def test_in_memory_store_returns_copies():
    store = InMemoryStore()
    store.set("k", {"a": [1]})
    value = store.get("k")
    value["a"].append(2)
    assert store.get("k") == {"a": [1]}


def test_json_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "store.json"
    JsonFileStore(path).set("rows", [{"id": "1"}])

    reopened = JsonFileStore(path)
    assert reopened.get("rows") == [{"id": "1"}]
    assert json.loads(path.read_text(encoding="utf-8")) == {"rows": [{"id": "1"}]}


def test_json_file_store_recovers_from_garbage(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("rows", []) == []
    store.set("rows", [])
    assert json.loads(path.read_text(encoding="utf-8")) == {"rows": []}


def test_json_file_store_delete(tmp_path):
    store = JsonFileStore(tmp_path / "s.json")
    store.set("a", 1)
    store.delete("a")
    assert store.get("a") is None


def test_collection_upsert_replaces_by_id():
    rows = LocalCollection(InMemoryStore(), "things")
    assert rows.upsert({"id": "1", "v": 1}) is True
    assert rows.upsert({"id": "1", "v": 2}) is False
    assert rows.all() == [{"id": "1", "v": 2}]


def test_collection_delete_where_and_replace_all():
    rows = LocalCollection(InMemoryStore(), "things")
    for i in range(3):
        rows.upsert({"id": str(i), "even": i % 2 == 0})
    assert rows.delete_where(lambda r: r["even"]) == 2
    assert [r["id"] for r in rows.all()] == ["1"]

    rows.replace_all([{"id": "x"}])
    assert rows.get("x") == {"id": "x"}
    assert rows.get("1") is None


def test_concurrent_upserts_are_not_lost():
    store = InMemoryStore()
    a = LocalCollection(store, "a")
    b = LocalCollection(store, "a")

    def write(collection, prefix):
        for i in range(50):
            collection.upsert({"id": f"{prefix}-{i}"})

    threads = [threading.Thread(target=write, args=(a, "a")), threading.Thread(target=write, args=(b, "b"))]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(a.all()) == 100


def test_device_id_is_stable():
    store = InMemoryStore()
    first = DeviceIdentity(store).get_or_create_device_id()
    assert first
    assert DeviceIdentity(store).get_or_create_device_id() == first
