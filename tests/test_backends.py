# tests/test_backends.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dice_todo.storage.backends import (
    JsonFileBackend,
    MemoryBackend,
    PersistenceReadError,
    PersistenceWriteError,
    SqliteBackend,
    create_backend,
)


def test_memory_backend_get_set() -> None:
    b = MemoryBackend({"k": "v"})
    assert b.get("k") == "v"
    assert b.get("missing") is None
    b.set("k", "v2")
    assert b.get("k") == "v2"


def test_json_backend_missing_file_is_absent(tmp_path: Path) -> None:
    b = JsonFileBackend(tmp_path / "nested" / "tasks.json")
    assert b.get("k") is None


def test_json_backend_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    b = JsonFileBackend(path)

    b.set("a", "[1]")
    b.set("b", "[]")
    b.set("a", "[2]")

    assert b.get("a") == "[2]"
    assert b.get("b") == "[]"
    assert json.loads(path.read_text("utf-8")) == {"a": "[2]", "b": "[]"}
    assert not path.with_suffix(".json.tmp").exists()


def test_json_backend_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    JsonFileBackend(path).set("k", "value")
    assert JsonFileBackend(path).get("k") == "value"


@pytest.mark.parametrize("content", ["{broken", "[1, 2, 3]"])
def test_json_backend_corrupt_file_raises_read_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, "utf-8")

    with pytest.raises(PersistenceReadError):
        JsonFileBackend(path).get("k")


def test_json_backend_rewrites_corrupt_file_on_set(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{broken", "utf-8")
    b = JsonFileBackend(path)

    b.set("k", "[]")

    assert b.get("k") == "[]"


def test_json_backend_write_failure_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", "utf-8")
    b = JsonFileBackend(blocker / "tasks.json")

    with pytest.raises(PersistenceWriteError):
        b.set("k", "[]")


def test_sqlite_backend_upsert_and_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    b = SqliteBackend(db)

    assert b.get("k") is None
    b.set("k", "one")
    b.set("k", "two")
    assert b.get("k") == "two"

    assert SqliteBackend(db).get("k") == "two"


def test_sqlite_backend_unusable_path_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", "utf-8")
    b = SqliteBackend(blocker / "tasks.sqlite3")

    with pytest.raises(PersistenceReadError):
        b.get("k")
    with pytest.raises(PersistenceWriteError):
        b.set("k", "v")


def test_create_backend_by_kind(tmp_path: Path) -> None:
    assert isinstance(create_backend("memory"), MemoryBackend)
    assert isinstance(create_backend("sqlite", tmp_path / "t.sqlite3"), SqliteBackend)
    assert isinstance(create_backend("json", tmp_path / "t.json"), JsonFileBackend)
    with pytest.raises(ValueError):
        create_backend("json")
