from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from settings import StoreSettings

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DOCUMENT_SUFFIX = ".json"
EXPORT_PREFIX = "export_"

_TIMESTAMP_RE = r"\d{8}_\d{6}"
EXPORT_NAME_RE = re.compile(rf"^{EXPORT_PREFIX}({_TIMESTAMP_RE})\.json$")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def document_key(name: str) -> str:
    """
    Normalize a logical document name: "tasks", "tasks.json" -> "tasks".
    """
    key = name.strip()
    if key.endswith(DOCUMENT_SUFFIX):
        key = key[: -len(DOCUMENT_SUFFIX)]
    key = key.replace("/", "_").replace("\\", "_").strip()
    if not key or key in (".", ".."):
        raise ValueError(f"invalid document name: {name!r}")
    return key


def try_document_key(name: str) -> str | None:
    try:
        return document_key(name)
    except ValueError:
        return None


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(raw: str) -> datetime | None:
    try:
        return datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def backup_name_re(key: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(key)}_({_TIMESTAMP_RE})\.json$")


@dataclass(frozen=True)
class StoreLayout:
    """
    The three storage areas:

    - <root>/            active documents (<name>.json)
    - <root>/backups/    snapshots (<name>_<yyyyMMdd_HHmmss>.json)
    - <root>/exports/    bundles (export_<yyyyMMdd_HHmmss>.json)
    """

    root: Path
    backup_dir: Path
    export_dir: Path

    @classmethod
    def from_settings(cls, settings: StoreSettings) -> "StoreLayout":
        return cls(
            root=Path(settings.root),
            backup_dir=Path(settings.backup_dir),
            export_dir=Path(settings.export_dir),
        )

    def ensure(self) -> None:
        ensure_dir(self.root)
        ensure_dir(self.backup_dir)
        ensure_dir(self.export_dir)

    def document_path(self, name: str) -> Path:
        return self.root / f"{document_key(name)}{DOCUMENT_SUFFIX}"

    def backup_path(self, name: str, moment: datetime) -> Path:
        return self.backup_dir / f"{document_key(name)}_{format_timestamp(moment)}{DOCUMENT_SUFFIX}"

    def export_path(self, moment: datetime) -> Path:
        return self.export_dir / f"{EXPORT_PREFIX}{format_timestamp(moment)}{DOCUMENT_SUFFIX}"

    def resolve_backup(self, filename: str) -> Path | None:
        """
        Map a backup file name to its path, refusing anything outside the backup area.
        """
        candidate = Path(filename)
        if candidate.name != filename or filename in ("", ".", ".."):
            return None
        return self.backup_dir / filename
