"""
Domain models for class lineage analysis.

Pure dataclasses — no external dependencies. Everything extracted from a file
round-trips through to_dict/from_dict so it can be cached as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# BaseRef kinds
SIMPLE = "simple"
ATTRIBUTE = "attribute"
KEYWORD = "keyword"
UNSUPPORTED = "unsupported"

# ImportBinding kinds
MODULE = "module"
SYMBOL = "symbol"

# ResolvedBase kinds
RESOLVED = "resolved"
EXTERNAL = "external"
UNRESOLVED = "unresolved"


@dataclass(frozen=True, order=True)
class ClassId:
    """Identity of a class: defining module plus scope-qualified name."""
    module_path: str
    qualified_name: str  # "Outer.Inner" for nested classes

    @property
    def name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    @property
    def scope(self) -> str:
        """Qualified name of the enclosing class, or "" at module level."""
        if "." not in self.qualified_name:
            return ""
        return self.qualified_name.rsplit(".", 1)[0]

    def __str__(self) -> str:
        if not self.module_path:
            return self.qualified_name
        return f"{self.module_path}.{self.qualified_name}"


@dataclass(frozen=True)
class BaseRef:
    """An unresolved base-class expression from a class statement.

    kind:
      simple      -> name
      attribute   -> value (dotted head) + name
      keyword     -> name (keyword) + value (expression text); never an edge
      unsupported -> text only; never an edge
    """
    kind: str
    name: str = ""
    value: Optional[str] = None
    text: str = ""

    @classmethod
    def simple(cls, name: str) -> "BaseRef":
        return cls(kind=SIMPLE, name=name, text=name)

    @classmethod
    def attribute(cls, value: str, name: str) -> "BaseRef":
        return cls(kind=ATTRIBUTE, name=name, value=value, text=f"{value}.{name}")

    @classmethod
    def keyword(cls, name: str, value: str) -> "BaseRef":
        return cls(kind=KEYWORD, name=name, value=value, text=f"{name}={value}")

    @classmethod
    def unsupported(cls, text: str) -> "BaseRef":
        return cls(kind=UNSUPPORTED, text=text)

    @property
    def is_inheritance(self) -> bool:
        return self.kind in (SIMPLE, ATTRIBUTE)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "value": self.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BaseRef":
        return cls(
            kind=data["kind"],
            name=data["name"],
            value=data["value"],
            text=data["text"],
        )


@dataclass(frozen=True)
class ImportBinding:
    """A module-level name made visible by an import statement.

    kind="module": local_name -> module (``import a.b as c``)
    kind="symbol": local_name -> name inside module (``from m import n as k``)

    module is None when a relative import climbs above the analysed root;
    such a binding can never be resolved.
    """
    local_name: str
    kind: str
    module: Optional[str]
    name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "local_name": self.local_name,
            "kind": self.kind,
            "module": self.module,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportBinding":
        return cls(
            local_name=data["local_name"],
            kind=data["kind"],
            module=data["module"],
            name=data["name"],
        )


@dataclass(frozen=True)
class ClassDefinition:
    """One class statement, with its bases still unresolved."""
    id: ClassId
    file_path: str
    raw_bases: tuple[BaseRef, ...] = ()
    line_no: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_path": self.id.module_path,
            "qualified_name": self.id.qualified_name,
            "file_path": self.file_path,
            "raw_bases": [b.to_dict() for b in self.raw_bases],
            "line_no": self.line_no,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClassDefinition":
        return cls(
            id=ClassId(data["module_path"], data["qualified_name"]),
            file_path=data["file_path"],
            raw_bases=tuple(BaseRef.from_dict(b) for b in data["raw_bases"]),
            line_no=data["line_no"],
        )


@dataclass
class ModuleFacts:
    """Everything extracted from one file. The unit stored in the cache."""
    module_path: str = ""
    file_path: str = ""
    is_package: bool = False
    classes: list[ClassDefinition] = field(default_factory=list)
    imports: list[ImportBinding] = field(default_factory=list)
    parse_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.parse_error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "module_path": self.module_path,
            "file_path": self.file_path,
            "is_package": self.is_package,
            "classes": [c.to_dict() for c in self.classes],
            "imports": [i.to_dict() for i in self.imports],
            "parse_error": self.parse_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModuleFacts":
        return cls(
            module_path=data["module_path"],
            file_path=data["file_path"],
            is_package=data["is_package"],
            classes=[ClassDefinition.from_dict(c) for c in data["classes"]],
            imports=[ImportBinding.from_dict(i) for i in data["imports"]],
            parse_error=data["parse_error"],
        )


@dataclass(frozen=True)
class ResolvedBase:
    """Outcome of resolving one BaseRef."""
    kind: str
    class_id: Optional[ClassId] = None

    @property
    def is_resolved(self) -> bool:
        return self.kind == RESOLVED


@dataclass
class ClassReference:
    """A class as reported to callers of a query."""
    class_name: str
    module_path: str
    file_path: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module_path}.{self.class_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "class_name": self.class_name,
            "module_path": self.module_path,
            "file_path": self.file_path,
        }


@dataclass
class QueryResult:
    """Answer to a subclass query."""
    class_name: str
    module_path: Optional[str] = None
    subclasses: list[ClassReference] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "class_name": self.class_name,
            "module_path": self.module_path,
            "subclasses": [c.to_dict() for c in self.subclasses],
        }
