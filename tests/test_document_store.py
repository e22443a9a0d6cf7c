from __future__ import annotations

import json

import pytest

import persistence.document_store as document_store
from json_store import backup_path_for
from persistence.document_store import JsonDocumentStore
from persistence.errors import StorageWriteFailed
from persistence.records import COLLECTIONS

EMPTY_DOC = {
    "users": [],
    "entries": [],
    "goals": [],
    "resetTokens": [],
    "invitations": [],
    "settings": {},
}


def _backups(db_file):
    return sorted(db_file.parent.glob("db.corrupt.*.json"))


def test_load_creates_empty_document_when_missing(store, db_file):
    assert not db_file.exists()

    doc = store.load()

    assert doc == EMPTY_DOC
    assert json.loads(db_file.read_text(encoding="utf-8")) == EMPTY_DOC


def test_invalid_json_is_backed_up_verbatim_and_replaced(store, db_file):
    db_file.parent.mkdir(parents=True, exist_ok=True)
    garbage = '{"users": [ {"id": "u1", '
    db_file.write_text(garbage, encoding="utf-8")

    doc = store.load()

    assert doc == EMPTY_DOC
    backups = _backups(db_file)
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == garbage
    # next load sees the fresh, valid document
    assert store.load() == EMPTY_DOC
    assert len(_backups(db_file)) == 1


@pytest.mark.parametrize("content", ["", "   \n", "[1, 2, 3]", "42"])
def test_empty_or_non_object_content_counts_as_corrupt(store, db_file, content):
    db_file.parent.mkdir(parents=True, exist_ok=True)
    db_file.write_text(content, encoding="utf-8")

    assert store.load() == EMPTY_DOC
    assert [b.read_text(encoding="utf-8") for b in _backups(db_file)] == [content]


def test_repeated_corruption_never_overwrites_earlier_backups(store, db_file):
    db_file.parent.mkdir(parents=True, exist_ok=True)
    for content in ("{bad one", "{bad two"):
        db_file.write_text(content, encoding="utf-8")
        store.load()

    assert sorted(b.read_text(encoding="utf-8") for b in _backups(db_file)) == ["{bad one", "{bad two"]


def test_backup_path_for_skips_existing_names(tmp_path):
    path = tmp_path / "db.json"
    first = backup_path_for(path, now_ms=123)
    assert first.name == "db.corrupt.123.json"
    first.write_text("x", encoding="utf-8")

    second = backup_path_for(path, now_ms=123)
    assert second != first
    assert not second.exists()


def test_wrong_shape_is_not_treated_as_corruption(store, db_file):
    db_file.parent.mkdir(parents=True, exist_ok=True)
    db_file.write_text(json.dumps({"users": [{"id": "u1"}]}), encoding="utf-8")

    doc = store.load()

    assert doc == {"users": [{"id": "u1"}]}
    assert _backups(db_file) == []


def test_save_replaces_whole_document(store, db_file):
    doc = store.load()
    doc["entries"].append({"id": "e1", "userId": "u1"})
    store.save(doc)

    assert json.loads(db_file.read_text(encoding="utf-8"))["entries"] == [{"id": "e1", "userId": "u1"}]
    assert not db_file.with_suffix(".json.tmp").exists()


def test_transaction_saves_on_success_only(store):
    with store.transaction() as doc:
        doc["invitations"].append({"id": "i1"})

    with pytest.raises(RuntimeError):
        with store.transaction() as doc:
            doc["invitations"].append({"id": "i2"})
            raise RuntimeError("boom")

    assert store.load()["invitations"] == [{"id": "i1"}]


def _failing_write(path, payload, **kwargs):
    raise OSError("disk full")


def test_strict_save_failure_raises_storage_write_failed(store, monkeypatch):
    store.load()
    monkeypatch.setattr(document_store, "atomic_write_json", _failing_write)

    with pytest.raises(StorageWriteFailed):
        store.save({"users": []})


def test_best_effort_save_failure_is_logged_and_swallowed(db_file, monkeypatch, caplog):
    lenient = JsonDocumentStore(db_file, strict_writes=False)
    lenient.load()
    monkeypatch.setattr(document_store, "atomic_write_json", _failing_write)

    with caplog.at_level("ERROR", logger="persistence.document_store"):
        lenient.save({"users": []})

    assert "failed to write" in caplog.text


def test_empty_document_has_every_collection():
    from persistence.records import empty_document

    doc = empty_document()
    assert all(doc[name] == [] for name in COLLECTIONS)
    assert doc["settings"] == {}


def _unmovable_corrupt_file(store, db_file, monkeypatch):
    db_file.parent.mkdir(parents=True, exist_ok=True)
    garbage = '{"users": [ {"id": "u1", '
    db_file.write_text(garbage, encoding="utf-8")
    monkeypatch.setattr(store, "_backup_corrupt", lambda: False)
    return garbage


def test_transaction_refuses_to_overwrite_file_it_could_not_back_up(store, db_file, monkeypatch):
    garbage = _unmovable_corrupt_file(store, db_file, monkeypatch)

    with pytest.raises(StorageWriteFailed):
        with store.transaction() as doc:
            doc["entries"].append({"id": "e1"})

    assert db_file.read_text(encoding="utf-8") == garbage


def test_lenient_transaction_also_leaves_unreadable_file_alone(db_file, monkeypatch, caplog):
    lenient = JsonDocumentStore(db_file, strict_writes=False)
    garbage = _unmovable_corrupt_file(lenient, db_file, monkeypatch)

    with caplog.at_level("ERROR", logger="persistence.document_store"):
        with lenient.transaction() as doc:
            doc["entries"].append({"id": "e1"})

    assert db_file.read_text(encoding="utf-8") == garbage
    assert "refusing to overwrite" in caplog.text
