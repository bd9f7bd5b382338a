"""
Unit tests for the seen-set store and its storage backends.
"""
import json

import pytest

from moviedrop.feed.seen_set import SEEN_IDS_KEY, InMemoryStorage, JsonFileStorage, SeenSetStore


@pytest.fixture
def storage():
    return InMemoryStorage()


def test_add_persists_and_is_idempotent(storage):
    store = SeenSetStore(storage).load_on_startup()
    store.add(42)
    store.add(42)
    assert store.contains(42)
    assert len(store) == 1
    assert storage.data[SEEN_IDS_KEY] == [42]


def test_add_many_and_ids_snapshot(storage):
    store = SeenSetStore(storage).load_on_startup()
    store.add_many([3, 1, 2, 3])
    snapshot = store.ids()
    snapshot.add(99)
    assert store.ids() == {1, 2, 3}
    assert storage.data[SEEN_IDS_KEY] == [1, 2, 3]


def test_clear_empties_and_persists(storage):
    store = SeenSetStore(storage).load_on_startup()
    store.add_many([1, 2])
    store.clear()
    assert len(store) == 0
    assert not store.contains(1)
    assert storage.data[SEEN_IDS_KEY] == []


def test_load_hydrates_previous_session(storage):
    storage.save(SEEN_IDS_KEY, [7, 8])
    store = SeenSetStore(storage).load_on_startup()
    assert 7 in store and 8 in store


@pytest.mark.parametrize("corrupt", ["not a list", {"a": 1}, [1, "two", 3], [True], 12])
def test_corrupt_value_loads_empty(storage, corrupt):
    storage.save(SEEN_IDS_KEY, corrupt)
    store = SeenSetStore(storage).load_on_startup()
    assert len(store) == 0


class TestJsonFileStorage:

    def test_round_trip_across_instances(self, tmp_path):
        path = tmp_path / "client" / "state.json"
        first = SeenSetStore(JsonFileStorage(path)).load_on_startup()
        first.add(10)
        first.add(11)

        second = SeenSetStore(JsonFileStorage(path)).load_on_startup()
        assert second.ids() == {10, 11}

    def test_missing_file_is_empty_state(self, tmp_path):
        store = SeenSetStore(JsonFileStorage(tmp_path / "nope.json")).load_on_startup()
        assert len(store) == 0

    def test_corrupt_file_is_empty_state_and_recovers(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")

        store = SeenSetStore(JsonFileStorage(path)).load_on_startup()
        assert len(store) == 0

        store.add(5)
        assert json.loads(path.read_text(encoding="utf-8"))[SEEN_IDS_KEY] == [5]

    def test_other_keys_survive_saves(self, tmp_path):
        path = tmp_path / "state.json"
        storage = JsonFileStorage(path)
        storage.save("previous_first_id", 3)
        SeenSetStore(storage).load_on_startup().add(1)
        assert storage.load("previous_first_id") == 3
