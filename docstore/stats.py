from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

from pydantic import BaseModel, computed_field

from .paths import DOCUMENT_SUFFIX, StoreLayout

logger = logging.getLogger(__name__)


class StorageStats(BaseModel):
    document_count: int = 0
    total_size_bytes: int = 0
    backup_count: int = 0
    export_count: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_size_kb(self) -> str:
        return f"{self.total_size_bytes / 1024.0:.2f}"


class StatsService:
    def __init__(self, layout: StoreLayout, lock: AbstractContextManager[Any]):
        self._layout = layout
        self._lock = lock

    def collect_stats(self) -> StorageStats:
        with self._lock:
            count, size = _documents(self._layout.root)
            return StorageStats(
                document_count=count,
                total_size_bytes=size,
                backup_count=_count_files(self._layout.backup_dir),
                export_count=_count_files(self._layout.export_dir),
            )


def _documents(root: Path) -> tuple[int, int]:
    if not root.is_dir():
        return 0, 0
    count = 0
    size = 0
    for path in root.glob(f"*{DOCUMENT_SUFFIX}"):
        try:
            if not path.is_file():
                continue
            size += path.stat().st_size
        except OSError as e:
            logger.warning("STATS: cannot stat %s: %r", path, e)
            continue
        count += 1
    return count, size


def _count_files(directory: Path) -> int:
    if not directory.is_dir():
        return 0
    return sum(1 for p in directory.iterdir() if p.is_file())
