"""
Extraction cache — per-file JSON entries, zlib-compressed, keyed by path.

Each source file gets its own entry addressed by the SHA-256 of its path, so
concurrent workers never write the same entry. An entry is reused only when
the stored fingerprint matches the file's current content hash. Any problem
reading or writing an entry downgrades to a cache miss.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
import threading
import zlib
from pathlib import Path
from typing import Any, Callable, Optional

from .models import ModuleFacts

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = ".pylineage-cache"
CACHE_VERSION = 1


def compute_fingerprint(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ExtractionCache:
    """Persisted store of ModuleFacts, one entry per source file.

    Lifecycle: open() -> get_or_extract() per file -> flush().
    """

    def __init__(self, cache_dir: Path | str, enabled: bool = True):
        self.cache_dir = Path(cache_dir)
        self.enabled = enabled
        self.hits = 0
        self.misses = 0
        self._lock = threading.Lock()

    @classmethod
    def open(cls, project_root: Path, cache_dir: Optional[str] = None,
             enabled: bool = True) -> "ExtractionCache":
        """Cache for a project; defaults to <root>/.pylineage-cache."""
        path = Path(cache_dir) if cache_dir else Path(CACHE_DIR_NAME)
        if not path.is_absolute():
            path = project_root / path
        return cls(path, enabled=enabled)

    def get_or_extract(
        self,
        file_path: str,
        fingerprint: str,
        extract: Callable[[], ModuleFacts],
        module_path: Optional[str] = None,
    ) -> ModuleFacts:
        """Return cached facts for file_path, or run extract() and store them."""
        if self.enabled:
            cached = self._load(file_path, fingerprint, module_path)
            if cached is not None:
                self._count(hit=True)
                return cached

        self._count(hit=False)
        facts = extract()
        # Failed files are re-parsed (and re-reported) on every run.
        if self.enabled and facts.ok:
            self._store(file_path, fingerprint, facts)
        return facts

    def flush(self):
        """Report statistics for this run. Entries are already on disk."""
        if self.hits or self.misses:
            logger.info("Cache: %d hits, %d misses", self.hits, self.misses)

    def clear(self):
        """Delete every stored entry."""
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)

    def entry_path(self, file_path: str) -> Path:
        digest = hashlib.sha256(file_path.encode("utf-8")).hexdigest()
        return self.cache_dir / digest[:2] / f"{digest}.json.z"

    def _count(self, hit: bool):
        with self._lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def _load(self, file_path: str, fingerprint: str,
              module_path: Optional[str]) -> Optional[ModuleFacts]:
        path = self.entry_path(file_path)
        if not path.exists():
            return None

        try:
            entry = json.loads(zlib.decompress(path.read_bytes()))
        except (OSError, zlib.error, ValueError) as e:
            logger.warning("Ignoring unreadable cache entry for %s: %s", file_path, e)
            return None

        if not _is_current(entry, file_path, fingerprint):
            logger.debug("Stale cache entry for %s", file_path)
            return None

        try:
            facts = ModuleFacts.from_dict(entry["facts"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring corrupt cache entry for %s: %s", file_path, e)
            return None

        if module_path is not None and facts.module_path != module_path:
            return None
        return facts

    def _store(self, file_path: str, fingerprint: str, facts: ModuleFacts):
        path = self.entry_path(file_path)
        entry = {
            "version": CACHE_VERSION,
            "file_path": file_path,
            "fingerprint": fingerprint,
            "facts": facts.to_dict(),
        }
        payload = zlib.compress(json.dumps(entry).encode("utf-8"))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.warning("Failed to write cache entry for %s: %s", file_path, e)


def _is_current(entry: Any, file_path: str, fingerprint: str) -> bool:
    return (
        isinstance(entry, dict)
        and entry.get("version") == CACHE_VERSION
        and entry.get("file_path") == file_path
        and entry.get("fingerprint") == fingerprint
    )
