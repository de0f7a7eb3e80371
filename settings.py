from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "data"
DEFAULT_MAX_BACKUPS = 10


def _env_path(name: str, default: Path) -> Path:
    raw = (os.getenv(name) or "").strip()
    return Path(raw) if raw else default


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("%s=%r is not an integer; using %d", name, raw, default)
        return default
    if value < 1:
        logger.warning("%s=%r must be positive; using %d", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class StoreSettings:
    # Active documents live directly under root.
    root: Path
    backup_dir: Path
    export_dir: Path

    # Backups kept per document name.
    max_backups: int = DEFAULT_MAX_BACKUPS

    @classmethod
    def for_root(cls, root: Path | str, *, max_backups: int = DEFAULT_MAX_BACKUPS) -> "StoreSettings":
        base = Path(root)
        return cls(
            root=base,
            backup_dir=base / "backups",
            export_dir=base / "exports",
            max_backups=max_backups,
        )


def get_settings() -> StoreSettings:
    root = _env_path("DOCSTORE_ROOT", Path(DEFAULT_ROOT))
    backup_dir = _env_path("DOCSTORE_BACKUP_DIR", root / "backups")
    export_dir = _env_path("DOCSTORE_EXPORT_DIR", root / "exports")
    max_backups = _env_positive_int("DOCSTORE_MAX_BACKUPS", DEFAULT_MAX_BACKUPS)

    return StoreSettings(
        root=root,
        backup_dir=backup_dir,
        export_dir=export_dir,
        max_backups=max_backups,
    )
