from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any

from json_store import JsonReadError, atomic_write_text, dump_json, load_json

from .backups import BackupManager
from .documents import default_document, extract_collection, from_disk_doc
from .paths import DOCUMENT_SUFFIX, StoreLayout, ensure_dir, try_document_key

logger = logging.getLogger(__name__)


class DiskDocumentStore:
    """
    Stores each named document as <root>/<name>.json.

    - Reads never fail: missing, empty or corrupt files yield the document's default.
    - Writes snapshot the previous file through the BackupManager, then replace atomically.
    """

    def __init__(self, layout: StoreLayout, backups: BackupManager, lock: AbstractContextManager[Any]):
        self._layout = layout
        self._backups = backups
        self._lock = lock

    def read_document(self, name: str) -> Any:
        key = try_document_key(name)
        if key is None:
            logger.warning("DOCUMENT READ: invalid document name %r, using empty document", name)
            return {}
        path = self._layout.document_path(key)
        with self._lock:
            try:
                raw = load_json(path)
            except JsonReadError as e:
                logger.warning("DOCUMENT READ: %s is not valid JSON, using default: %s", path, e.reason)
                return default_document(key)
            except OSError as e:
                logger.warning("DOCUMENT READ: failed to read %s, using default: %r", path, e)
                return default_document(key)
        if raw is None:
            logger.info("DOCUMENT READ: %s missing or empty, using default", path)
            return default_document(key)
        return from_disk_doc(key, raw)

    def read_collection(self, name: str) -> list[Any]:
        """
        The collection held by a document: the wrapped field ({"tasks": [...]})
        or the legacy bare array ([...]).
        """
        key = try_document_key(name)
        if key is None:
            logger.warning("DOCUMENT READ: invalid document name %r", name)
            return []
        return extract_collection(key, self.read_document(key))

    def write_document(self, name: str, content: Any) -> bool:
        key = try_document_key(name)
        if key is None:
            logger.warning("DOCUMENT WRITE: invalid document name %r", name)
            return False
        path = self._layout.document_path(key)
        try:
            text = dump_json(content)
        except (TypeError, ValueError) as e:
            logger.warning("DOCUMENT WRITE: %s content is not JSON-serializable: %r", key, e)
            return False

        with self._lock:
            try:
                ensure_dir(self._layout.root)
            except OSError as e:
                logger.warning("DOCUMENT WRITE: cannot create %s: %r", self._layout.root, e)
                return False
            if path.exists():
                # A failed snapshot is logged by the BackupManager; the write still goes ahead.
                self._backups.snapshot_before_overwrite(key)
            try:
                atomic_write_text(path, text)
            except OSError as e:
                logger.warning("DOCUMENT WRITE: failed to write %s: %r", path, e)
                return False
        return True

    def list_documents(self) -> list[str]:
        root = self._layout.root
        with self._lock:
            if not root.is_dir():
                return []
            return sorted(p.stem for p in root.glob(f"*{DOCUMENT_SUFFIX}") if p.is_file())

    def clear_all(self) -> int:
        """Delete every active document. Backups and exports are left alone."""
        root = self._layout.root
        deleted = 0
        with self._lock:
            if not root.is_dir():
                return 0
            for path in root.glob(f"*{DOCUMENT_SUFFIX}"):
                if not path.is_file():
                    continue
                try:
                    path.unlink()
                except OSError as e:
                    logger.warning("DOCUMENT CLEAR: failed to delete %s: %r", path, e)
                    continue
                deleted += 1
        if deleted:
            logger.info("DOCUMENT CLEAR: removed %d document(s) from %s", deleted, root)
        return deleted
