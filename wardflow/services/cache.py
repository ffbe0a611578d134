"""
snapshot cache (best effort)

the in-memory snapshot is the source of truth while the process runs.
the cache only exists so a restart can come back to roughly where the ward was.

so every failure in here is logged and swallowed:
- missing / unreadable / corrupt cache reads as "nothing cached"
- a failed write just means the next restart starts from defaults
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)

CachedState = dict[str, Any]


class SnapshotCache(Protocol):
    def read(self) -> Optional[CachedState]: ...

    def write(self, state: CachedState) -> None: ...


def _parse(raw: str) -> Optional[CachedState]:
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring corrupt encounter cache")
        return None
    if not isinstance(parsed, dict):
        logger.warning("Ignoring encounter cache with unexpected shape: %s", type(parsed).__name__)
        return None
    return parsed


class NullCache:
    """Never remembers anything."""

    def read(self) -> Optional[CachedState]:
        return None

    def write(self, state: CachedState) -> None:
        return None


class MemoryCache:
    """
    Holds the last written snapshot as JSON text.

    Storing text (not the dict) means reads go through the same parsing as
    the file cache, and callers can't mutate what was cached.
    """

    def __init__(self, raw: str = ""):
        self.raw = raw
        self.writes = 0

    def read(self) -> Optional[CachedState]:
        return _parse(self.raw)

    def write(self, state: CachedState) -> None:
        try:
            self.raw = json.dumps(state)
        except (TypeError, ValueError):
            logger.warning("Could not serialize encounter snapshot", exc_info=True)
            return
        self.writes += 1


class JsonFileCache:
    """One JSON file on local disk. Writes replace the file atomically."""

    def __init__(self, path: os.PathLike | str):
        self.path = Path(path)

    def read(self) -> Optional[CachedState]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            logger.warning("Could not read encounter cache at %s", self.path, exc_info=True)
            return None
        return _parse(raw)

    def write(self, state: CachedState) -> None:
        try:
            payload = json.dumps(state, indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".encounters-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError):
            logger.warning("Could not write encounter cache at %s", self.path, exc_info=True)


def cache_from_path(path: Optional[os.PathLike | str]) -> SnapshotCache:
    if path is None:
        return MemoryCache()
    return JsonFileCache(path)
