"""
Query engine — answer subclass / superclass questions for a source tree.

SubclassFinder runs the whole pipeline once on construction (discover,
extract, merge, resolve) and then answers any number of queries.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..config import ProjectConfig
from ..errors import ParseError, RootDirectoryError
from ..store.cache import ExtractionCache
from ..store.models import ClassId, ClassReference, QueryResult
from .graph import InheritanceGraph
from .indexer import Indexer, collect_parse_errors
from .registry import ClassRegistry

logger = logging.getLogger(__name__)


class SubclassFinder:
    """Analyse a source tree and query its inheritance relation."""

    def __init__(
        self,
        root_directory: Path | str = ".",
        exclude: Optional[Iterable[str | Path]] = None,
        use_cache: bool = True,
        workers: Optional[int] = None,
        config: Optional[ProjectConfig] = None,
    ):
        self.root = Path(root_directory).resolve()
        if not self.root.is_dir():
            reason = "does not exist" if not self.root.exists() else "not a directory"
            raise RootDirectoryError(str(root_directory), reason)

        self.config = config or ProjectConfig.load(self.root)
        cache = ExtractionCache.open(
            self.root, self.config.cache_dir,
            enabled=use_cache and self.config.cache_enabled,
        )
        indexer = Indexer(
            self.root,
            exclude=[*self.config.exclude, *(exclude or ())],
            ignore=self.config.ignore,
            cache=cache,
            workers=workers or self.config.workers,
        )

        results = indexer.extract_all()
        self.cache = cache
        self.parse_errors: list[ParseError] = collect_parse_errors(results)
        self.registry = ClassRegistry.build(results)
        self.graph = InheritanceGraph.build(self.registry)
        logger.debug("Found %d classes in %s", self.class_count, self.root)

    @property
    def class_count(self) -> int:
        return len(self.registry)

    def resolve_class_reference(self, class_name: str,
                                module_path: Optional[str] = None) -> ClassReference:
        """The class a (name, module) pair selects, raising if none or many."""
        return self._reference(self.registry.lookup_root(class_name, module_path))

    def find_subclasses(self, class_name: str, module_path: Optional[str] = None,
                        mode: str = "all") -> list[ClassReference]:
        root = self.registry.lookup_root(class_name, module_path)
        return [self._reference(c) for c in self.graph.find_subclasses(root, mode)]

    def find_parent_classes(self, class_name: str, module_path: Optional[str] = None,
                            mode: str = "all") -> list[ClassReference]:
        """Superclasses found in the tree. External bases are not listed."""
        root = self.registry.lookup_root(class_name, module_path)
        return [self._reference(c) for c in self.graph.find_superclasses(root, mode)]

    def query(self, class_name: str, module_path: Optional[str] = None,
              mode: str = "all", parents: bool = False) -> QueryResult:
        if parents:
            found = self.find_parent_classes(class_name, module_path, mode)
        else:
            found = self.find_subclasses(class_name, module_path, mode)
        return QueryResult(class_name=class_name, module_path=module_path, subclasses=found)

    def edges_within(self, refs: Iterable[ClassReference]) -> list[tuple[ClassReference, ClassReference]]:
        """(parent, child) pairs among the given classes, for graph output."""
        ids = [ClassId(r.module_path, r.class_name) for r in refs]
        return [
            (self._reference(parent), self._reference(child))
            for parent, child in self.graph.edges_between(ids)
        ]

    def _reference(self, class_id: ClassId) -> ClassReference:
        definition = self.registry.by_id[class_id]
        return ClassReference(
            class_name=class_id.qualified_name,
            module_path=class_id.module_path,
            file_path=definition.file_path,
        )


def find_subclasses(
    class_name: str,
    module_path: Optional[str] = None,
    root_directory: Path | str = ".",
    mode: str = "all",
    exclude: Iterable[str | Path] = (),
    use_cache: bool = True,
) -> QueryResult:
    """One-shot query: analyse root_directory and list subclasses of a class."""
    finder = SubclassFinder(root_directory, exclude=exclude, use_cache=use_cache)
    return finder.query(class_name, module_path, mode)
