"""pylineage — find every subclass of a Python class without running code."""

from .core.query import SubclassFinder, find_subclasses
from .errors import (
    AmbiguousClassNameError,
    ClassLookupError,
    ClassNotFoundError,
    DuplicateClassError,
    InternalError,
    LineageError,
    ParseError,
    RootDirectoryError,
)
from .store.models import ClassId, ClassReference, QueryResult

__version__ = "0.1.0"

__all__ = [
    "AmbiguousClassNameError",
    "ClassId",
    "ClassLookupError",
    "ClassNotFoundError",
    "ClassReference",
    "DuplicateClassError",
    "InternalError",
    "LineageError",
    "ParseError",
    "QueryResult",
    "RootDirectoryError",
    "SubclassFinder",
    "find_subclasses",
]
