from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import docstore...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class SteppingClock:
    """Returns a fixed start time, advancing one second per call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.current = start or datetime(2026, 1, 2, 3, 4, 5)
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + self.step
        self.calls += 1
        return now


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def make_store(data_root: Path, clock: SteppingClock):
    """
    Factory for stores rooted in a temp directory so tests never touch real ./data.
    """
    from docstore.store import LocalDocumentStore
    from settings import StoreSettings

    def _make(*, max_backups: int = 10, root: Path | None = None) -> LocalDocumentStore:
        settings = StoreSettings.for_root(root or data_root, max_backups=max_backups)
        return LocalDocumentStore(settings, clock=clock)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()
