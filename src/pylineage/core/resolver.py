"""
Import resolver — map a base-class expression to the class it names.

Resolution follows module-level import bindings, re-exports through package
``__init__`` modules and submodule attribute access. It never raises for an
unknown name: the outcome is one of resolved / external / unresolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..store.models import (
    ATTRIBUTE, EXTERNAL, MODULE, RESOLVED, SIMPLE, SYMBOL, UNRESOLVED,
    BaseRef, ClassId, ImportBinding, ResolvedBase,
)

if TYPE_CHECKING:
    from .registry import ClassRegistry

logger = logging.getLogger(__name__)

MAX_REEXPORT_HOPS = 16

# Intermediate targets while walking a dotted reference
_CLASS = "class"
_MODULE = "module"


def join_module(parent: str, name: str) -> str:
    """Join a module path and a child name; "" is the analysed root."""
    return f"{parent}.{name}" if parent else name


def _binds_itself(binding: ImportBinding, module_path: str, name: str) -> bool:
    return (
        binding.kind == SYMBOL
        and binding.module == module_path
        and (binding.name or binding.local_name) == name
    )


@dataclass(frozen=True)
class _Target:
    kind: str  # class | module | external | unresolved
    class_id: Optional[ClassId] = None
    module: Optional[str] = None


_EXTERNAL = _Target(EXTERNAL)
_UNRESOLVED = _Target(UNRESOLVED)


class ImportResolver:
    """Resolve BaseRefs against a fully populated ClassRegistry."""

    def __init__(self, registry: "ClassRegistry"):
        self.registry = registry

    def resolve_base(self, base: BaseRef, module_path: str, scope: str = "") -> ResolvedBase:
        """Resolve one base expression written in `module_path`.

        `scope` is the qualified name of the class whose body contains the
        class statement ("" at module level).
        """
        if base.kind == SIMPLE:
            target = self._resolve_simple(base.name, module_path, scope)
        elif base.kind == ATTRIBUTE:
            parts = (base.value or "").split(".") + [base.name]
            target = self._resolve_dotted(parts, module_path, scope)
        else:
            # keyword / unsupported never name a base class
            return ResolvedBase(UNRESOLVED)
        return self._finish(target)

    def resolve_symbol(self, module_path: str, name: str) -> Optional[ClassId]:
        """Class reachable as `module_path.name`, following re-exports."""
        head, *rest = name.split(".")
        target = self.resolve_member(module_path, head)
        for part in rest:
            target = self._member(target, part, 0)
        return target.class_id if target.kind == _CLASS else None

    def resolve_member(self, module_path: str, name: str, hops: int = 0) -> _Target:
        """Look up `name` as an attribute of module `module_path`.

        Tries, in order: a class defined there, the module's own binding for
        the name (a re-export), then a submodule.
        """
        if hops > MAX_REEXPORT_HOPS:
            logger.debug("Re-export chain too long at %s.%s", module_path, name)
            return _UNRESOLVED

        registry = self.registry
        class_id = ClassId(module_path, name)
        if class_id in registry:
            return _Target(_CLASS, class_id=class_id)

        binding = registry.binding(module_path, name)
        # `from . import sub` inside pkg binds sub to (pkg, sub): the submodule.
        if binding is not None and not _binds_itself(binding, module_path, name):
            return self.follow_binding(binding, hops + 1)

        submodule = join_module(module_path, name)
        if registry.is_known_module(submodule):
            return _Target(_MODULE, module=submodule)

        if not registry.is_known_module(module_path):
            return _EXTERNAL
        return _UNRESOLVED

    def follow_binding(self, binding: ImportBinding, hops: int = 0) -> _Target:
        if binding.module is None:
            return _UNRESOLVED
        if binding.kind == MODULE:
            return _Target(_MODULE, module=binding.module)
        return self.resolve_member(binding.module, binding.name or binding.local_name, hops)

    # ── Internals ──

    def _resolve_simple(self, name: str, module_path: str, scope: str) -> _Target:
        if scope:
            sibling = ClassId(module_path, f"{scope}.{name}")
            if sibling in self.registry:
                return _Target(_CLASS, class_id=sibling)

        binding = self.registry.binding(module_path, name)
        if binding is not None:
            return self.follow_binding(binding)

        local = ClassId(module_path, name)
        if local in self.registry:
            return _Target(_CLASS, class_id=local)
        return _UNRESOLVED

    def _resolve_dotted(self, parts: list[str], module_path: str, scope: str) -> _Target:
        head, *rest = parts
        target = self._resolve_head(head, module_path, scope)
        for part in rest:
            target = self._member(target, part, 0)
        return target

    def _resolve_head(self, name: str, module_path: str, scope: str) -> _Target:
        target = self._resolve_simple(name, module_path, scope)
        if target.kind != UNRESOLVED:
            return target
        # Fully qualified reference to a module in the tree
        if self.registry.is_known_module(name):
            return _Target(_MODULE, module=name)
        return _UNRESOLVED

    def _member(self, target: _Target, name: str, hops: int) -> _Target:
        if target.kind == _MODULE:
            return self.resolve_member(target.module, name, hops)
        if target.kind == _CLASS:
            nested = ClassId(target.class_id.module_path, f"{target.class_id.qualified_name}.{name}")
            if nested in self.registry:
                return _Target(_CLASS, class_id=nested)
            return _UNRESOLVED
        return target

    def _finish(self, target: _Target) -> ResolvedBase:
        if target.kind == _CLASS:
            return ResolvedBase(RESOLVED, target.class_id)
        if target.kind == _MODULE:
            # A module is not a class. Only report it as external when it is
            # not part of the tree.
            if self.registry.is_known_module(target.module):
                return ResolvedBase(UNRESOLVED)
            return ResolvedBase(EXTERNAL)
        return ResolvedBase(target.kind)
