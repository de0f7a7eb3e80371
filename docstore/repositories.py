from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping

from .backups import BackupInfo
from .exports import ExportInfo
from .stats import StorageStats
from .store import LocalDocumentStore


class AsyncLocalDocumentStore:
    """
    Async wrapper around LocalDocumentStore.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O; the
    wrapped store's lock still serializes every call.
    """

    def __init__(self, store: LocalDocumentStore | None = None) -> None:
        self._store = store or LocalDocumentStore()

    @property
    def store(self) -> LocalDocumentStore:
        return self._store

    async def read_document(self, name: str) -> Any:
        return await asyncio.to_thread(self._store.read_document, name)

    async def read_collection(self, name: str) -> list[Any]:
        return await asyncio.to_thread(self._store.read_collection, name)

    async def write_document(self, name: str, content: Any) -> bool:
        return await asyncio.to_thread(self._store.write_document, name, content)

    async def list_backups(self, name: str) -> list[BackupInfo]:
        return await asyncio.to_thread(self._store.list_backups, name)

    async def export_all(self, documents: Mapping[str, Any]) -> Path | None:
        return await asyncio.to_thread(self._store.export_all, documents)

    async def import_bundle(self, path: Path | str) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._store.import_bundle, path)

    async def apply_bundle(self, documents: Mapping[str, Any]) -> dict[str, bool]:
        return await asyncio.to_thread(self._store.apply_bundle, documents)

    async def list_exports(self) -> list[ExportInfo]:
        return await asyncio.to_thread(self._store.list_exports)

    async def restore(self, backup_filename: str, target_name: str) -> bool:
        return await asyncio.to_thread(self._store.restore, backup_filename, target_name)

    async def collect_stats(self) -> StorageStats:
        return await asyncio.to_thread(self._store.collect_stats)
