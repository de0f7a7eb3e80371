from __future__ import annotations

import logging
import shutil
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from .paths import StoreLayout, backup_name_re, ensure_dir, parse_timestamp, try_document_key

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class BackupInfo:
    name: str
    document: str
    path: Path
    timestamp: datetime | None
    size_bytes: int
    modified_at: float


class BackupManager:
    """
    Owns <root>/backups.

    A snapshot is a byte copy of the active file taken right before it is
    overwritten, named <name>_<yyyyMMdd_HHmmss>.json. Snapshots taken within
    the same second overwrite each other. After every snapshot, backups for
    that name beyond `max_backups` are pruned oldest-first (by mtime).
    """

    def __init__(
        self,
        layout: StoreLayout,
        *,
        max_backups: int,
        clock: Clock,
        lock: AbstractContextManager[Any],
    ):
        if max_backups < 1:
            raise ValueError(f"max_backups must be positive, got {max_backups}")
        self._layout = layout
        self._max_backups = max_backups
        self._clock = clock
        self._lock = lock

    @property
    def max_backups(self) -> int:
        return self._max_backups

    def snapshot_before_overwrite(self, name: str) -> Path | None:
        key = try_document_key(name)
        if key is None:
            logger.warning("BACKUP: invalid document name %r", name)
            return None
        source = self._layout.document_path(key)
        with self._lock:
            if not source.exists():
                return None
            target = self._layout.backup_path(key, self._clock())
            try:
                ensure_dir(target.parent)
                # copyfile leaves metadata behind: the backup's mtime is the snapshot time.
                shutil.copyfile(source, target)
            except OSError as e:
                logger.warning("BACKUP: failed to snapshot %s to %s: %r", source, target, e)
                return None
            logger.info("BACKUP: snapshot %s -> %s", source.name, target.name)
            self.prune_old_backups(key)
            return target

    def prune_old_backups(self, name: str) -> list[Path]:
        key = try_document_key(name)
        if key is None:
            return []
        with self._lock:
            backups = self._matching(key)
            excess = len(backups) - self._max_backups
            if excess <= 0:
                return []
            backups.sort(key=_age_key)
            deleted: list[Path] = []
            for path in backups[:excess]:
                try:
                    path.unlink()
                except FileNotFoundError:
                    continue
                except OSError as e:
                    logger.warning("BACKUP PRUNE: failed to delete %s: %r", path, e)
                    continue
                deleted.append(path)
            if deleted:
                logger.info("BACKUP PRUNE: removed %d old backup(s) of %s", len(deleted), key)
            return deleted

    def list_backups(self, name: str) -> list[BackupInfo]:
        """All backups for `name`, newest first."""
        key = try_document_key(name)
        if key is None:
            return []
        pattern = backup_name_re(key)
        with self._lock:
            infos: list[BackupInfo] = []
            for path in self._matching(key):
                try:
                    st = path.stat()
                except OSError:
                    continue
                m = pattern.match(path.name)
                infos.append(
                    BackupInfo(
                        name=path.name,
                        document=key,
                        path=path,
                        timestamp=parse_timestamp(m.group(1)) if m else None,
                        size_bytes=st.st_size,
                        modified_at=st.st_mtime,
                    )
                )
        infos.sort(key=lambda i: (i.modified_at, i.name), reverse=True)
        return infos

    def _matching(self, key: str) -> list[Path]:
        backup_dir = self._layout.backup_dir
        if not backup_dir.is_dir():
            return []
        pattern = backup_name_re(key)
        return [p for p in backup_dir.iterdir() if p.is_file() and pattern.match(p.name)]


def _age_key(path: Path) -> tuple[int, str]:
    try:
        mtime = path.stat().st_mtime_ns
    except OSError:
        mtime = 0
    # Same-mtime ties fall back to the name, whose timestamp sorts chronologically.
    return (mtime, path.name)
