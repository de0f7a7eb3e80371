from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol

from .backups import BackupInfo
from .exports import ExportInfo
from .stats import StorageStats


class DocumentStore(Protocol):
    """
    What the application state manager depends on: named JSON documents plus
    backup, export/import, restore and stats operations. Storage failures come
    back as False/None/defaults, never as exceptions.
    """

    def read_document(self, name: str) -> Any:
        """Current content of `name`, or its default when missing/corrupt."""
        ...

    def write_document(self, name: str, content: Any) -> bool:
        """Snapshot the existing file, then persist `content`. False on failure."""
        ...

    def list_backups(self, name: str) -> list[BackupInfo]:
        ...

    def export_all(self, documents: Mapping[str, Any]) -> Path | None:
        ...

    def import_bundle(self, path: Path | str) -> dict[str, Any] | None:
        ...

    def list_exports(self) -> list[ExportInfo]:
        ...

    def restore(self, backup_filename: str, target_name: str) -> bool:
        ...

    def collect_stats(self) -> StorageStats:
        ...
