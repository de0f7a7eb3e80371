from __future__ import annotations

from .backups import BackupInfo, BackupManager
from .disk_store import DiskDocumentStore
from .exports import BundleMetadata, ExportInfo, ExportService
from .interfaces import DocumentStore
from .repositories import AsyncLocalDocumentStore
from .restore import RestoreService
from .stats import StatsService, StorageStats
from .store import LocalDocumentStore, open_store

__all__ = [
    "DocumentStore",
    "LocalDocumentStore",
    "AsyncLocalDocumentStore",
    "open_store",
    "DiskDocumentStore",
    "BackupManager",
    "BackupInfo",
    "ExportService",
    "ExportInfo",
    "BundleMetadata",
    "RestoreService",
    "StatsService",
    "StorageStats",
]
