from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any

from json_store import atomic_write_bytes

from .backups import BackupManager
from .paths import StoreLayout, ensure_dir, try_document_key

logger = logging.getLogger(__name__)


class RestoreService:
    def __init__(self, layout: StoreLayout, backups: BackupManager, lock: AbstractContextManager[Any]):
        self._layout = layout
        self._backups = backups
        self._lock = lock

    def restore(self, backup_filename: str, target_name: str) -> bool:
        """
        Copy a backup over the active file for `target_name`.

        The current active file is snapshotted first, so the pre-restore state
        survives as a backup of its own. Callers reload their in-memory state
        afterwards.
        """
        key = try_document_key(target_name)
        if key is None:
            logger.warning("RESTORE: invalid target document name %r", target_name)
            return False
        source = self._layout.resolve_backup(backup_filename)
        if source is None:
            logger.warning("RESTORE: refusing backup name %r", backup_filename)
            return False
        target = self._layout.document_path(key)

        with self._lock:
            if not source.is_file():
                logger.warning("RESTORE: backup %s does not exist", source)
                return False
            try:
                # Read before snapshotting: the snapshot may prune or overwrite the source.
                payload = source.read_bytes()
            except OSError as e:
                logger.warning("RESTORE: failed to read %s: %r", source, e)
                return False

            if target.exists():
                self._backups.snapshot_before_overwrite(key)
            try:
                ensure_dir(target.parent)
                atomic_write_bytes(target, payload)
            except OSError as e:
                logger.warning("RESTORE: failed to write %s: %r", target, e)
                return False

        logger.info("RESTORE: %s restored from %s", target.name, source.name)
        return True
