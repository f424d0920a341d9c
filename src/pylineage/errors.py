"""
Exceptions raised by pylineage.

Lookup errors are user-facing and carry the detail needed to fix the query.
Internal errors indicate a defect in the tool itself and are kept apart from
user errors so the CLI can report them differently.
"""

from __future__ import annotations

from typing import Optional


class LineageError(Exception):
    """Base for all pylineage errors."""


class ClassLookupError(LineageError, LookupError):
    """The requested root class could not be selected."""


class AmbiguousClassNameError(ClassLookupError):
    """The class name is defined in more than one module.

    Attributes:
        name: The class name that was queried.
        candidates: Module paths defining that name, sorted.
    """

    def __init__(self, name: str, candidates: list[str]):
        self.name = name
        self.candidates = sorted(candidates)
        super().__init__(
            f"Class '{name}' found in multiple modules: {', '.join(self.candidates)}"
        )


class ClassNotFoundError(ClassLookupError):
    """No class with the given name (and module, if given) exists."""

    def __init__(self, name: str, module_path: Optional[str] = None):
        self.name = name
        self.module_path = module_path
        where = f" in module '{module_path}'" if module_path else ""
        super().__init__(f"Class '{name}' not found{where}")


class ParseError(LineageError):
    """A single file could not be read or parsed.

    Collected per file and reported; never aborts a run.
    """

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")


class RootDirectoryError(LineageError, OSError):
    """The root directory to analyse is missing or unreadable."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read directory {path}: {reason}")


class InternalError(LineageError, RuntimeError):
    """Internal consistency check failed. Always a bug in pylineage."""


class DuplicateClassError(InternalError):
    """The same class identity was produced twice while merging results."""

    def __init__(self, class_id: str, first_file: str, second_file: str):
        self.class_id = class_id
        self.first_file = first_file
        self.second_file = second_file
        super().__init__(
            f"Duplicate class {class_id} from {first_file} and {second_file}"
        )
