from __future__ import annotations

import pytest

from json_store import JsonReadError, atomic_write_json, load_json, read_json


def test_read_json_is_tolerant(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")

    assert read_json(tmp_path / "missing.json") is None
    assert read_json(bad) is None


def test_load_json_distinguishes_missing_from_corrupt(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")

    assert load_json(tmp_path / "missing.json") is None
    with pytest.raises(JsonReadError) as exc:
        load_json(bad)
    assert exc.value.path == bad


def test_atomic_write_json_leaves_no_temp_file(tmp_path):
    target = tmp_path / "nested" / "doc.json"

    atomic_write_json(target, {"b": 1, "a": [True]})

    assert load_json(target) == {"b": 1, "a": [True]}
    assert list(target.parent.iterdir()) == [target]


def test_atomic_write_json_rejects_unserializable_payload(tmp_path):
    target = tmp_path / "doc.json"
    with pytest.raises(TypeError):
        atomic_write_json(target, {"when": object()})
    with pytest.raises(ValueError):
        atomic_write_json(target, {"nan": float("nan")})
    assert not target.parent.joinpath("doc.json.tmp").exists()
    assert not target.exists()
