from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from dotenv import load_dotenv
from pydantic import ValidationError

from settings import StoreSettings, get_settings

from .backups import BackupInfo, BackupManager
from .disk_store import DiskDocumentStore
from .documents import validate_document
from .exports import BundleMetadata, ExportInfo, ExportService
from .interfaces import DocumentStore
from .paths import StoreLayout, document_key
from .restore import RestoreService
from .stats import StatsService, StorageStats

logger = logging.getLogger(__name__)

_root_locks_guard = threading.Lock()
_root_locks: dict[str, Any] = {}


def lock_for_root(root: Path) -> Any:
    """The re-entrant lock shared by every store handle opened on `root`."""
    key = str(root.resolve())
    with _root_locks_guard:
        return _root_locks.setdefault(key, threading.RLock())


class LocalDocumentStore(DocumentStore):
    """
    One handle over the whole store. Every operation runs under a single
    re-entrant lock shared by all handles opened on the same root, so a UI
    thread and a timer thread can both call in safely.
    """

    def __init__(
        self,
        settings: StoreSettings | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._settings = settings or get_settings()
        self._layout = StoreLayout.from_settings(self._settings)
        self._lock = lock_for_root(self._layout.root)
        now = clock or datetime.now

        self._backups = BackupManager(
            self._layout,
            max_backups=self._settings.max_backups,
            clock=now,
            lock=self._lock,
        )
        self._documents = DiskDocumentStore(self._layout, self._backups, self._lock)
        self._exports = ExportService(self._layout, clock=now, lock=self._lock)
        self._restore = RestoreService(self._layout, self._backups, self._lock)
        self._stats = StatsService(self._layout, self._lock)

        self.ensure_directories()

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def layout(self) -> StoreLayout:
        return self._layout

    def ensure_directories(self) -> bool:
        with self._lock:
            try:
                self._layout.ensure()
            except OSError as e:
                logger.warning("STORE: cannot create storage areas under %s: %r", self._layout.root, e)
                return False
        return True

    # Documents

    def read_document(self, name: str) -> Any:
        return self._documents.read_document(name)

    def read_collection(self, name: str) -> list[Any]:
        return self._documents.read_collection(name)

    def write_document(self, name: str, content: Any) -> bool:
        return self._documents.write_document(name, content)

    def list_documents(self) -> list[str]:
        return self._documents.list_documents()

    def clear_all(self) -> int:
        return self._documents.clear_all()

    # Backups

    def snapshot_before_overwrite(self, name: str) -> Path | None:
        return self._backups.snapshot_before_overwrite(name)

    def prune_old_backups(self, name: str) -> list[Path]:
        return self._backups.prune_old_backups(name)

    def list_backups(self, name: str) -> list[BackupInfo]:
        return self._backups.list_backups(name)

    # Export / import

    def export_all(self, documents: Mapping[str, Any]) -> Path | None:
        return self._exports.export_all(documents)

    def export_store(self) -> Path | None:
        """Export every document currently in the active area."""
        with self._lock:
            documents = {name: self.read_document(name) for name in self.list_documents()}
            return self.export_all(documents)

    def import_bundle(self, path: Path | str) -> dict[str, Any] | None:
        return self._exports.import_bundle(path)

    def read_bundle_metadata(self, path: Path | str) -> BundleMetadata | None:
        return self._exports.read_bundle_metadata(path)

    def list_exports(self) -> list[ExportInfo]:
        return self._exports.list_exports()

    def apply_bundle(self, documents: Mapping[str, Any]) -> dict[str, bool]:
        """
        Write each imported document independently, validating known shapes
        first. Returns per-document success; nothing is rolled back.
        """
        results: dict[str, bool] = {}
        with self._lock:
            for name, content in documents.items():
                try:
                    key = document_key(name)
                    normalized = validate_document(key, content)
                except ValidationError as e:
                    logger.warning("IMPORT APPLY: %s rejected: %s", name, e)
                    results[name] = False
                    continue
                except ValueError as e:
                    logger.warning("IMPORT APPLY: %r rejected: %s", name, e)
                    results[name] = False
                    continue
                results[name] = self.write_document(key, normalized)
        return results

    def import_and_apply(self, path: Path | str) -> dict[str, bool] | None:
        documents = self.import_bundle(path)
        if documents is None:
            return None
        return self.apply_bundle(documents)

    # Restore / stats

    def restore(self, backup_filename: str, target_name: str) -> bool:
        return self._restore.restore(backup_filename, target_name)

    def collect_stats(self) -> StorageStats:
        return self._stats.collect_stats()


def open_store(env_file: str | None = "local.env", **kwargs: Any) -> LocalDocumentStore:
    """
    Build a store from the environment, loading `env_file` first when given.
    """
    if env_file:
        load_dotenv(env_file)
    return LocalDocumentStore(get_settings(), **kwargs)
