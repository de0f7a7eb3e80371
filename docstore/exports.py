from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from json_store import JsonReadError, atomic_write_text, dump_json, load_json

from .paths import EXPORT_NAME_RE, StoreLayout, ensure_dir, parse_timestamp

logger = logging.getLogger(__name__)

METADATA_KEY = "_metadata"
FORMAT_VERSION = "1.0"


class BundleMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    exportDate: str | None = None
    version: str | None = None


@dataclass(frozen=True)
class ExportInfo:
    name: str
    path: Path
    timestamp: datetime | None
    size_bytes: int
    modified_at: float


class ExportService:
    """
    Owns <root>/exports.

    A bundle is one JSON object: each document under its name, plus
    "_metadata": {"exportDate": <ISO-8601>, "version": "1.0"}.
    Importing strips the metadata and hands the documents back; applying them
    is the caller's decision.
    """

    def __init__(self, layout: StoreLayout, *, clock: Callable[[], datetime], lock: AbstractContextManager[Any]):
        self._layout = layout
        self._clock = clock
        self._lock = lock

    def export_all(self, documents: Mapping[str, Any]) -> Path | None:
        moment = self._clock()
        bundle: dict[str, Any] = {}
        for name, content in documents.items():
            if name == METADATA_KEY:
                logger.warning("EXPORT: ignoring document named %s", METADATA_KEY)
                continue
            bundle[str(name)] = content
        bundle[METADATA_KEY] = {"exportDate": moment.isoformat(), "version": FORMAT_VERSION}

        try:
            text = dump_json(bundle)
        except (TypeError, ValueError) as e:
            logger.warning("EXPORT: bundle is not JSON-serializable: %r", e)
            return None

        path = self._layout.export_path(moment)
        with self._lock:
            try:
                ensure_dir(path.parent)
                atomic_write_text(path, text)
            except OSError as e:
                logger.warning("EXPORT: failed to write %s: %r", path, e)
                return None
        resolved = path.resolve()
        logger.info("EXPORT: wrote %d document(s) to %s", len(bundle) - 1, resolved)
        return resolved

    def import_bundle(self, path: Path | str) -> dict[str, Any] | None:
        raw = self._load_bundle(Path(path))
        if raw is None:
            return None
        if METADATA_KEY not in raw:
            logger.info("IMPORT: %s has no %s; importing documents only", path, METADATA_KEY)
        raw.pop(METADATA_KEY, None)
        return raw

    def read_bundle_metadata(self, path: Path | str) -> BundleMetadata | None:
        raw = self._load_bundle(Path(path))
        if raw is None:
            return None
        meta = raw.get(METADATA_KEY)
        if not isinstance(meta, dict):
            return None
        try:
            return BundleMetadata.model_validate(meta)
        except ValidationError as e:
            logger.warning("IMPORT: %s has unreadable %s: %s", path, METADATA_KEY, e)
            return None

    def list_exports(self) -> list[ExportInfo]:
        """Export bundles in the export area, newest first."""
        export_dir = self._layout.export_dir
        infos: list[ExportInfo] = []
        with self._lock:
            if not export_dir.is_dir():
                return []
            for path in export_dir.iterdir():
                m = EXPORT_NAME_RE.match(path.name)
                if m is None or not path.is_file():
                    continue
                try:
                    st = path.stat()
                except OSError:
                    continue
                infos.append(
                    ExportInfo(
                        name=path.name,
                        path=path,
                        timestamp=parse_timestamp(m.group(1)),
                        size_bytes=st.st_size,
                        modified_at=st.st_mtime,
                    )
                )
        infos.sort(key=lambda i: i.name, reverse=True)
        return infos

    def _load_bundle(self, path: Path) -> dict[str, Any] | None:
        with self._lock:
            try:
                raw = load_json(path)
            except JsonReadError as e:
                logger.warning("IMPORT: %s is not valid JSON: %s", path, e.reason)
                return None
            except OSError as e:
                logger.warning("IMPORT: failed to read %s: %r", path, e)
                return None
        if raw is None:
            logger.warning("IMPORT: %s is missing or empty", path)
            return None
        if not isinstance(raw, dict):
            logger.warning("IMPORT: %s does not hold a JSON object", path)
            return None
        return raw
