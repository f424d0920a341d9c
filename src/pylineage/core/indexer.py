"""
Indexer — discover Python files and extract their facts in parallel.

Extraction is fanned out to a thread pool; each task reads, fingerprints
and (on cache miss) parses one file. Results are returned sorted by path so
the merge that follows is deterministic.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

import pathspec

from ..errors import ParseError, RootDirectoryError
from ..parsers.python import PythonParser
from ..store.cache import CACHE_DIR_NAME, ExtractionCache, compute_fingerprint
from ..store.models import ModuleFacts

logger = logging.getLogger(__name__)

# Default directories to always skip
ALWAYS_SKIP = {
    "__pycache__", ".git", ".hg", ".svn",
    "node_modules", ".venv", "venv", "env",
    "build", "dist", ".eggs", ".mypy_cache", ".pytest_cache",
    ".tox", ".nox", CACHE_DIR_NAME,
}


def module_path_for(rel_path: str) -> tuple[Optional[str], bool]:
    """Map a root-relative .py path to (dotted module path, is_package).

    pkg/__init__.py -> ("pkg", True); pkg/mod.py -> ("pkg.mod", False).
    A root-level __init__.py has no module path.
    """
    parts = list(Path(rel_path).with_suffix("").parts)
    is_package = bool(parts) and parts[-1] == "__init__"
    if is_package:
        parts = parts[:-1]
    if not parts:
        return None, is_package
    return ".".join(parts), is_package


class Indexer:
    """Discover and extract every Python file under a project root."""

    def __init__(
        self,
        project_root: Path,
        exclude: Iterable[str | Path] = (),
        ignore: Iterable[str] = (),
        cache: Optional[ExtractionCache] = None,
        workers: Optional[int] = None,
    ):
        self.project_root = Path(project_root).resolve()
        if not self.project_root.is_dir():
            raise RootDirectoryError(str(project_root), "not a directory")
        self.exclude = self._resolve_excludes(exclude)
        self.ignore = list(ignore)
        self.cache = cache or ExtractionCache(self.project_root / CACHE_DIR_NAME, enabled=False)
        self.workers = workers or None
        self.parser = PythonParser()
        self._ignore_spec = self._build_ignore_spec()

    def _resolve_excludes(self, exclude: Iterable[str | Path]) -> list[Path]:
        resolved = []
        for entry in exclude:
            path = Path(entry)
            if not path.is_absolute():
                path = self.project_root / path
            resolved.append(path.resolve())
        return resolved

    def _build_ignore_spec(self) -> Optional[pathspec.PathSpec]:
        """Build a pathspec from .gitignore + configured ignore patterns."""
        patterns = list(self.ignore)

        gitignore = self.project_root / ".gitignore"
        if gitignore.exists():
            try:
                patterns.extend(gitignore.read_text(errors="replace").splitlines())
            except OSError as e:
                logger.warning("Could not read %s: %s", gitignore, e)

        if patterns:
            return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
        return None

    def _is_excluded(self, path: Path) -> bool:
        return any(path == ex or ex in path.parents for ex in self.exclude)

    def discover_files(self) -> list[tuple[Path, str]]:
        """Walk the project, return (abs_path, rel_path) for parseable files."""
        results = []

        def on_error(err: OSError):
            if Path(err.filename or "") == self.project_root:
                raise RootDirectoryError(str(self.project_root), err.strerror or str(err))
            logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

        for dirpath, dirnames, filenames in os.walk(self.project_root, onerror=on_error):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in ALWAYS_SKIP
                and not d.endswith(".egg-info")
                and not self._is_excluded(current / d)
            )

            rel_dir = current.relative_to(self.project_root).as_posix()
            prefix = "" if rel_dir == "." else f"{rel_dir}/"

            if self._ignore_spec:
                dirnames[:] = [
                    d for d in dirnames
                    if not self._ignore_spec.match_file(f"{prefix}{d}/")
                ]

            for fname in filenames:
                if not self.parser.handles(fname):
                    continue
                abs_path = current / fname
                rel_path = abs_path.relative_to(self.project_root).as_posix()

                if self._is_excluded(abs_path):
                    continue
                if self._ignore_spec and self._ignore_spec.match_file(rel_path):
                    continue

                results.append((abs_path, rel_path))

        results.sort(key=lambda item: item[1])
        return results

    def extract_all(self) -> list[ModuleFacts]:
        """Extract facts for every discovered file, sorted by relative path."""
        files = self.discover_files()
        logger.info("Extracting %d files from %s", len(files), self.project_root)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            results = list(pool.map(lambda f: self.extract_file(*f), files))

        self.cache.flush()
        results.sort(key=lambda r: r.file_path)
        return _drop_shadowed_modules(results)

    def extract_file(self, abs_path: Path, rel_path: str) -> ModuleFacts:
        """Fingerprint, look up and (on miss) parse one file."""
        module_path, is_package = module_path_for(rel_path)
        if module_path is None:
            return ModuleFacts(
                file_path=rel_path,
                is_package=is_package,
                parse_error="cannot derive a module path for a root-level __init__.py",
            )

        try:
            source = abs_path.read_bytes()
        except OSError as e:
            return ModuleFacts(module_path=module_path, file_path=rel_path,
                               is_package=is_package, parse_error=str(e))

        def extract() -> ModuleFacts:
            logger.debug("Parsing %s", rel_path)
            return self.parser.extract(source, module_path, rel_path, is_package)

        return self.cache.get_or_extract(
            rel_path, compute_fingerprint(source), extract, module_path=module_path,
        )


def collect_parse_errors(results: Iterable[ModuleFacts]) -> list[ParseError]:
    """Turn failed extraction results into ParseError records, logging each."""
    errors = []
    for facts in results:
        if facts.ok:
            continue
        error = ParseError(facts.file_path, facts.parse_error or "unknown error")
        logger.warning("%s", error)
        errors.append(error)
    return errors


def _drop_shadowed_modules(results: list[ModuleFacts]) -> list[ModuleFacts]:
    """Ensure each module path is provided by one file.

    When pkg.py and pkg/__init__.py both exist, the package wins (as it does
    for the import system); the loser is turned into a per-file error.
    """
    owners: dict[str, ModuleFacts] = {}
    for facts in results:
        if not facts.module_path:
            continue
        current = owners.get(facts.module_path)
        if current is None or (facts.is_package and not current.is_package):
            owners[facts.module_path] = facts

    kept = []
    for facts in results:
        owner = owners.get(facts.module_path) if facts.module_path else None
        if owner is None or owner is facts:
            kept.append(facts)
        else:
            kept.append(ModuleFacts(
                module_path=facts.module_path,
                file_path=facts.file_path,
                is_package=facts.is_package,
                parse_error=f"module '{facts.module_path}' is already provided by {owner.file_path}",
            ))
    return kept
