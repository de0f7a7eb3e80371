from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class JsonReadError(ValueError):
    """Raised by load_json when a file exists but does not hold valid JSON."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def load_json(path: Path) -> Any | None:
    """
    Strict read.

    Returns None for missing or empty files. Raises JsonReadError for invalid
    JSON and OSError when the file exists but cannot be read.
    """
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise JsonReadError(path, str(e)) from e


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing files, empty files, unreadable files, or invalid JSON.
    """
    try:
        return load_json(path)
    except (OSError, JsonReadError):
        return None


def dump_json(payload: Any, *, indent: int = 2, sort_keys: bool = False) -> str:
    """Serialize to pretty-printed JSON. Raises TypeError/ValueError for unserializable payloads."""
    return json.dumps(payload, indent=indent, sort_keys=sort_keys, ensure_ascii=False, allow_nan=False)


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.

    Serialization happens before the temp file is opened, so unserializable
    payloads never leave a stray temp file behind.
    """
    atomic_write_text(path, dump_json(payload, indent=indent, sort_keys=sort_keys))


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, (text + "\n").encode("utf-8"))


def atomic_write_bytes(path: Path, payload: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp_path.open("wb") as f:
            f.write(payload)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
