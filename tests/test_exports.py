from __future__ import annotations

import json
from pathlib import Path


TASKS_DOC = {
    "tasks": [
        {
            "id": "t1",
            "title": "Read chapter 3",
            "completed": True,
            "createdAt": "2026-01-02T09:00:00",
        }
    ]
}
SESSIONS_DOC = {
    "sessions": [
        {
            "id": "s1",
            "startTime": "2026-01-02T09:00:00",
            "endTime": "2026-01-02T09:25:00",
            "subject": "Pomodoro Session",
            "sessionType": "WORK",
            "projectName": "Storage",
        }
    ]
}


def test_export_import_roundtrip_strips_metadata(store):
    documents = {"a": {"x": [1, 2, 3]}, "b": ["y", {"z": None}]}

    path = store.export_all(documents)
    assert path is not None

    imported = store.import_bundle(path)
    assert imported == documents
    assert "_metadata" not in imported


def test_export_bundle_shape_and_name(store, data_root):
    path = store.export_all({"tasks": TASKS_DOC, "theme": {"darkMode": False}})

    assert path is not None
    assert path.is_absolute()
    assert path.parent == (data_root / "exports").resolve()
    assert path.name == "export_20260102_030405.json"

    bundle = json.loads(path.read_text(encoding="utf-8"))
    assert bundle["tasks"] == TASKS_DOC
    assert bundle["theme"] == {"darkMode": False}
    assert bundle["_metadata"] == {"exportDate": "2026-01-02T03:04:05", "version": "1.0"}

    meta = store.read_bundle_metadata(path)
    assert meta is not None
    assert meta.version == "1.0"
    assert meta.exportDate == "2026-01-02T03:04:05"


def test_export_ignores_document_named_metadata(store):
    path = store.export_all({"_metadata": {"forged": True}, "theme": {"darkMode": True}})

    bundle = json.loads(path.read_text(encoding="utf-8"))
    assert bundle["_metadata"]["version"] == "1.0"
    assert "forged" not in bundle["_metadata"]


def test_import_tolerates_missing_metadata(store, tmp_path):
    bundle = tmp_path / "hand_made.json"
    bundle.write_text(json.dumps({"theme": {"darkMode": True}}), encoding="utf-8")

    assert store.import_bundle(bundle) == {"theme": {"darkMode": True}}
    assert store.read_bundle_metadata(bundle) is None


def test_import_failures_return_none(store, tmp_path):
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    array = tmp_path / "array.json"
    array.write_text("[1, 2]", encoding="utf-8")

    assert store.import_bundle(tmp_path / "missing.json") is None
    assert store.import_bundle(corrupt) is None
    assert store.import_bundle(array) is None
    assert store.import_bundle(tmp_path) is None


def test_export_failure_returns_none(make_store, data_root):
    data_root.mkdir(parents=True)
    # A plain file where the export area should be.
    (data_root / "exports").write_text("", encoding="utf-8")
    store = make_store()

    assert store.export_all({"theme": {"darkMode": True}}) is None


def test_list_exports_matches_naming_convention_newest_first(store, data_root):
    first = store.export_all({"a": 1})
    second = store.export_all({"b": 2})
    (data_root / "exports" / "notes.json").write_text("{}", encoding="utf-8")
    (data_root / "exports" / "export_latest.json").write_text("{}", encoding="utf-8")

    exports = store.list_exports()

    assert [e.name for e in exports] == [second.name, first.name]
    assert exports[0].path.resolve() == second
    assert exports[0].size_bytes > 0


def test_export_store_bundles_active_documents(store):
    store.write_document("tasks", TASKS_DOC)
    store.write_document("theme", {"darkMode": True})

    path = store.export_store()

    assert store.import_bundle(path) == {"tasks": TASKS_DOC, "theme": {"darkMode": True}}


def test_apply_bundle_reports_per_document_outcome(store):
    bundle = {
        "tasks": TASKS_DOC,
        "sessions": {"sessions": [{"subject": "no id or times"}]},
        "theme": {"darkMode": True},
    }

    results = store.apply_bundle(bundle)

    assert results == {"tasks": True, "sessions": False, "theme": True}
    assert store.read_collection("tasks")[0]["id"] == "t1"
    assert store.read_document("sessions") == {"sessions": []}
    assert store.read_document("theme") == {"darkMode": True}


def test_apply_bundle_keeps_collection_when_field_is_absent(store):
    store.write_document("tasks", TASKS_DOC)
    store.write_document("sessions", SESSIONS_DOC)

    results = store.apply_bundle({"tasks": {}, "sessions": {"other": 1}, "theme": {"darkMode": True}})

    assert results == {"tasks": False, "sessions": False, "theme": True}
    assert store.read_document("tasks") == TASKS_DOC
    assert store.read_document("sessions") == SESSIONS_DOC
    assert store.list_backups("tasks") == []


def test_apply_bundle_normalizes_known_documents(store):
    legacy_sessions = [dict(SESSIONS_DOC["sessions"][0], sessionType="BREAK", notes=None)]

    results = store.apply_bundle({"sessions": legacy_sessions, "custom": {"anything": [1]}})

    assert results == {"sessions": True, "custom": True}
    session = store.read_collection("sessions")[0]
    assert session["sessionType"] == "WORK"
    assert session["notes"] == ""
    assert store.read_document("custom") == {"anything": [1]}


def test_import_and_apply_replaces_documents_with_backups(store):
    store.write_document("theme", {"darkMode": False})
    path = store.export_all({"theme": {"darkMode": True}, "tasks": TASKS_DOC})

    assert store.import_and_apply(path) == {"theme": True, "tasks": True}
    assert store.read_document("theme") == {"darkMode": True}
    assert len(store.list_backups("theme")) == 1
    assert store.import_and_apply(Path("does/not/exist.json")) is None
