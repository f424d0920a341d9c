"""
Class registry — the merged view of every module's facts.

Built once, single-threaded, from extraction results sorted by file path.
Resolution only starts after the registry is complete.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..errors import AmbiguousClassNameError, ClassNotFoundError, DuplicateClassError
from ..store.models import ClassDefinition, ClassId, ImportBinding, ModuleFacts
from .resolver import ImportResolver

logger = logging.getLogger(__name__)


class ClassRegistry:
    """Indexes of class definitions, import bindings and known modules."""

    def __init__(self):
        self.by_id: dict[ClassId, ClassDefinition] = {}
        self.by_name: dict[str, set[ClassId]] = {}
        self.imports: dict[str, dict[str, ImportBinding]] = {}
        # "" is the analysed root itself
        self.modules: set[str] = {""}
        self.resolver = ImportResolver(self)

    @classmethod
    def build(cls, results: Iterable[ModuleFacts]) -> "ClassRegistry":
        registry = cls()
        for facts in sorted(results, key=lambda r: r.file_path):
            registry.add_module(facts)
        logger.info("Registered %d classes from %d modules",
                    len(registry.by_id), len(registry.imports))
        return registry

    def add_module(self, facts: ModuleFacts):
        if facts.module_path:
            # Failed modules still exist; references into them are not external.
            self._add_known_module(facts.module_path)
        if not facts.ok:
            return

        bindings = self.imports.setdefault(facts.module_path, {})
        for binding in facts.imports:
            bindings[binding.local_name] = binding

        for definition in facts.classes:
            self._add_class(definition)

    def _add_known_module(self, module_path: str):
        parts = module_path.split(".")
        for i in range(1, len(parts) + 1):
            self.modules.add(".".join(parts[:i]))

    def _add_class(self, definition: ClassDefinition):
        existing = self.by_id.get(definition.id)
        if existing is not None:
            raise DuplicateClassError(str(definition.id), existing.file_path, definition.file_path)
        self.by_id[definition.id] = definition
        self.by_name.setdefault(definition.id.qualified_name, set()).add(definition.id)

    # ── Lookups ──

    def __contains__(self, class_id: ClassId) -> bool:
        return class_id in self.by_id

    def __len__(self) -> int:
        return len(self.by_id)

    def find_by_name(self, name: str) -> list[ClassId]:
        return sorted(self.by_name.get(name, ()))

    def binding(self, module_path: str, local_name: str) -> Optional[ImportBinding]:
        return self.imports.get(module_path, {}).get(local_name)

    def is_known_module(self, module_path: str) -> bool:
        return module_path in self.modules

    def lookup_root(self, class_name: str, module_path: Optional[str] = None) -> ClassId:
        """Select the query root by name, optionally pinned to a module.

        With a module, a name re-exported by that module (e.g. a package
        __init__) also matches. Without one, the name must be unique.
        """
        if module_path is not None:
            class_id = ClassId(module_path, class_name)
            if class_id in self.by_id:
                return class_id
            found = self.resolver.resolve_symbol(module_path, class_name)
            if found is not None:
                logger.debug("%s.%s is a re-export of %s", module_path, class_name, found)
                return found
            raise ClassNotFoundError(class_name, module_path)

        matches = self.find_by_name(class_name)
        if not matches:
            raise ClassNotFoundError(class_name)
        if len(matches) > 1:
            raise AmbiguousClassNameError(class_name, [m.module_path for m in matches])
        return matches[0]
