"""
Python fact extractor using tree-sitter.

Extracts: class definitions (with nested scopes) and their raw base
expressions, and module-level import bindings. Nothing is resolved here.
"""

from __future__ import annotations

import logging
from typing import Optional

import tree_sitter_python as tspython
from tree_sitter import Language, Parser as TSParser

from .base import LanguageParser, ParseResult
from ..store.models import (
    MODULE, SYMBOL, BaseRef, ClassDefinition, ClassId, ImportBinding,
)

logger = logging.getLogger(__name__)

PY_LANGUAGE = Language(tspython.language())

_PUNCTUATION = {"(", ")", ",", "comment"}


class PythonParser(LanguageParser):
    """Python source parser backed by tree-sitter."""

    @property
    def language(self) -> str:
        return "python"

    @property
    def extensions(self) -> tuple[str, ...]:
        return (".py",)

    def parse(self, source: bytes, module_path: str, file_path: str,
              is_package: bool = False) -> ParseResult:
        # One parser per call: workers must not share parser state.
        parser = TSParser(PY_LANGUAGE)
        tree = parser.parse(source)

        if tree.root_node.has_error:
            return ParseResult(parse_error=_describe_error(tree.root_node))

        walker = _FactWalker(source, module_path, file_path, is_package)
        walker.walk_block(tree.root_node, scope="")
        return ParseResult(
            classes=list(walker.classes.values()),
            imports=walker.imports,
        )


def resolve_relative_module(module_path: str, level: int, is_package: bool) -> Optional[str]:
    """Return the absolute package a relative import of `level` dots starts from.

    One dot is the importing module's own package; each extra dot ascends one
    level. Returns "" for the analysed root and None when the import climbs
    above it.

    >>> resolve_relative_module("pkg.sub.child", 2, False)
    'pkg'
    >>> resolve_relative_module("pkg.sub", 1, True)
    'pkg.sub'
    """
    parts = module_path.split(".") if module_path else []
    package = parts if is_package else parts[:-1]
    ascend = level - 1
    if ascend > len(package):
        return None
    return ".".join(package[:len(package) - ascend])


class _FactWalker:
    def __init__(self, source: bytes, module_path: str, file_path: str, is_package: bool):
        self.source = source
        self.module_path = module_path
        self.file_path = file_path
        self.is_package = is_package
        # Keyed by qualified name: a redefinition replaces the earlier class.
        self.classes: dict[str, ClassDefinition] = {}
        self.imports: list[ImportBinding] = []

    def text(self, node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def walk_block(self, node, scope: str):
        for child in node.named_children:
            self.visit(child, scope)

    def visit(self, node, scope: str):
        kind = node.type
        if kind == "class_definition":
            self.visit_class(node, scope)
        elif kind == "decorated_definition":
            definition = node.child_by_field_name("definition")
            if definition is not None:
                self.visit(definition, scope)
        elif kind == "if_statement":
            # Only the first branch is canonical.
            consequence = node.child_by_field_name("consequence")
            if consequence is not None:
                self.walk_block(consequence, scope)
        elif kind == "try_statement":
            body = node.child_by_field_name("body")
            if body is not None:
                self.walk_block(body, scope)
        elif kind == "import_statement" and not scope:
            self.visit_import(node)
        elif kind == "import_from_statement" and not scope:
            self.visit_import_from(node)
        # Functions are skipped entirely: classes defined inside them have
        # no stable identity.

    def visit_class(self, node, scope: str):
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        name = self.text(name_node)
        qualified = f"{scope}.{name}" if scope else name

        bases: list[BaseRef] = []
        superclasses = node.child_by_field_name("superclasses")
        if superclasses is not None:
            for arg in superclasses.named_children:
                if arg.type in _PUNCTUATION:
                    continue
                bases.append(self.base_ref(arg))

        if qualified in self.classes:
            logger.debug("%s: class %s redefined, keeping the later one",
                         self.file_path, qualified)
            del self.classes[qualified]
        self.classes[qualified] = ClassDefinition(
            id=ClassId(self.module_path, qualified),
            file_path=self.file_path,
            raw_bases=tuple(bases),
            line_no=node.start_point[0] + 1,
        )

        body = node.child_by_field_name("body")
        if body is not None:
            self.walk_block(body, qualified)

    def base_ref(self, node) -> BaseRef:
        kind = node.type
        if kind == "identifier":
            return BaseRef.simple(self.text(node))
        if kind == "attribute":
            parts = self.dotted_parts(node)
            if parts:
                return BaseRef.attribute(".".join(parts[:-1]), parts[-1])
        elif kind == "subscript":
            # Generic[T] -> Generic
            value = node.child_by_field_name("value")
            if value is not None:
                head = self.base_ref(value)
                if head.is_inheritance:
                    return head
        elif kind == "keyword_argument":
            key = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            return BaseRef.keyword(
                self.text(key) if key is not None else "",
                self.text(value) if value is not None else "",
            )
        elif kind == "string":
            literal = self.string_literal(node)
            if literal:
                parts = literal.split(".")
                if all(p.isidentifier() for p in parts):
                    if len(parts) == 1:
                        return BaseRef.simple(literal)
                    return BaseRef.attribute(".".join(parts[:-1]), parts[-1])
        return BaseRef.unsupported(self.text(node))

    def dotted_parts(self, node) -> Optional[list[str]]:
        parts = []
        current = node
        while current is not None and current.type == "attribute":
            attr = current.child_by_field_name("attribute")
            if attr is None:
                return None
            parts.append(self.text(attr))
            current = current.child_by_field_name("object")
        if current is None or current.type != "identifier":
            return None
        parts.append(self.text(current))
        parts.reverse()
        return parts

    def string_literal(self, node) -> Optional[str]:
        content = [c for c in node.children if c.type == "string_content"]
        if len(content) != 1:
            return None
        return self.text(content[0]).strip()

    def visit_import(self, node):
        for item in node.children_by_field_name("name"):
            if item.type == "aliased_import":
                module_node = item.child_by_field_name("name")
                alias_node = item.child_by_field_name("alias")
                if module_node is None or alias_node is None:
                    continue
                self.imports.append(ImportBinding(
                    local_name=self.text(alias_node),
                    kind=MODULE,
                    module=self.text(module_node),
                ))
            elif item.type == "dotted_name":
                # `import a.b.c` binds `a`.
                head = self.text(item).split(".")[0]
                self.imports.append(ImportBinding(local_name=head, kind=MODULE, module=head))

    def visit_import_from(self, node):
        module_node = node.child_by_field_name("module_name")
        if module_node is None:
            return
        module = self.import_source(module_node)

        if any(c.type == "wildcard_import" for c in node.children):
            logger.debug("%s: star import from %s ignored", self.file_path, self.text(module_node))
            return

        for item in node.children_by_field_name("name"):
            if item.type == "aliased_import":
                name_node = item.child_by_field_name("name")
                alias_node = item.child_by_field_name("alias")
                if name_node is None:
                    continue
                name = self.text(name_node)
                local = self.text(alias_node) if alias_node is not None else name
            else:
                name = local = self.text(item)
            self.imports.append(ImportBinding(local_name=local, kind=SYMBOL, module=module, name=name))

    def import_source(self, node) -> Optional[str]:
        """Absolute module path named by a `from X import` clause."""
        if node.type != "relative_import":
            return self.text(node)

        level = 0
        submodule = ""
        for child in node.children:
            if child.type == "import_prefix":
                level = self.text(child).count(".")
            elif child.type == "dotted_name":
                submodule = self.text(child)

        base = resolve_relative_module(self.module_path, level, self.is_package)
        if base is None:
            logger.debug("%s: relative import %s climbs above the root",
                         self.file_path, self.text(node))
            return None
        if base and submodule:
            return f"{base}.{submodule}"
        return base or submodule


def _describe_error(root) -> str:
    node = _first_error(root)
    if node is None:
        return "syntax error"
    line = node.start_point[0] + 1
    if node.is_missing:
        return f"Line {line}: missing {node.type}"
    return f"Line {line}: invalid syntax"


def _first_error(node):
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None
