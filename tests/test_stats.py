from __future__ import annotations

import threading

from docstore.paths import StoreLayout
from docstore.stats import StatsService, StorageStats


def test_stats_for_missing_areas_are_zero(tmp_path):
    root = tmp_path / "nowhere"
    layout = StoreLayout(root=root, backup_dir=root / "backups", export_dir=root / "exports")

    stats = StatsService(layout, threading.RLock()).collect_stats()

    assert stats == StorageStats()
    assert stats.total_size_kb == "0.00"


def test_stats_count_each_area(store, data_root):
    store.write_document("tasks", {"tasks": []})
    store.write_document("tasks", {"tasks": [{"id": "1"}]})
    store.write_document("theme", {"darkMode": True})
    store.export_all({"theme": {"darkMode": True}})
    (data_root / "README.txt").write_text("not a document", encoding="utf-8")

    stats = store.collect_stats()

    expected_size = sum(p.stat().st_size for p in data_root.glob("*.json"))
    assert stats.document_count == 2
    assert stats.total_size_bytes == expected_size
    assert stats.backup_count == 1
    assert stats.export_count == 1
    assert stats.total_size_kb == f"{expected_size / 1024.0:.2f}"
    assert stats.model_dump()["total_size_kb"] == stats.total_size_kb


def test_stats_are_taken_at_call_time(store):
    assert store.collect_stats().document_count == 0
    store.write_document("theme", {"darkMode": False})
    assert store.collect_stats().document_count == 1
