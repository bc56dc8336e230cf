import json
from pathlib import Path

from storage import STORAGE_VERSION, ProgressStore


def test_save_and_load(tmp_path):
    store = ProgressStore(tmp_path / "save.json")

    assert store.save("game", {"current_level": 4, "score": 120})

    assert store.has("game")
    assert store.load("game") == {"current_level": 4, "score": 120}
    assert isinstance(store.get_timestamp("game"), int)


def test_missing_file_and_key(tmp_path):
    store = ProgressStore(tmp_path / "nothing.json")

    assert store.load("game") is None
    assert not store.has("game")
    assert store.get_timestamp("game") is None


def test_keys_are_kept_apart(tmp_path):
    store = ProgressStore(tmp_path / "save.json")
    store.save("game", {"current_level": 2})
    store.save("high", 900)

    assert store.load("game") == {"current_level": 2}
    assert store.load("high") == 900


def test_version_mismatch_is_ignored(tmp_path):
    path = tmp_path / "save.json"
    path.write_text(
        json.dumps(
            {"game": {"version": STORAGE_VERSION + 1, "timestamp": 0, "data": 1}}
        ),
        encoding="utf-8",
    )

    assert ProgressStore(path).load("game") is None


def test_corrupt_file_is_replaced_on_save(tmp_path):
    path = tmp_path / "save.json"
    path.write_text("{not json", encoding="utf-8")
    store = ProgressStore(path)

    assert store.load("game") is None
    assert store.save("game", {"current_level": 1})
    assert store.load("game") == {"current_level": 1}


def test_unserialisable_data_is_not_saved(tmp_path):
    store = ProgressStore(tmp_path / "save.json")
    store.save("game", {"current_level": 3})

    assert not store.save("game", {"bad": object()})
    assert store.load("game") == {"current_level": 3}


def test_remove_and_clear(tmp_path):
    path = tmp_path / "save.json"
    store = ProgressStore(path)
    store.save("game", 1)
    store.save("high", 2)

    assert store.remove("game")
    assert store.load("game") is None
    assert store.load("high") == 2

    assert store.clear()
    assert not path.exists()
    assert store.clear()


def test_failed_write_keeps_the_previous_save(tmp_path, monkeypatch):
    path = tmp_path / "save.json"
    store = ProgressStore(path)
    store.save("game", {"current_level": 5})

    def crash(self, target):
        raise OSError("disk full")

    monkeypatch.setattr(Path, "replace", crash)

    assert not store.save("game", {"current_level": 6})

    monkeypatch.undo()
    assert store.load("game") == {"current_level": 5}
    assert list(tmp_path.iterdir()) == [path]
