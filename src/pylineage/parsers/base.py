"""
Parser interface shared by the indexer and the Python fact extractor.

A parser turns one file's bytes into class and import facts. It never
resolves names and never raises on bad input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Optional

from ..store.models import ClassDefinition, ImportBinding, ModuleFacts


@dataclass
class ParseResult:
    classes: list[ClassDefinition] = field(default_factory=list)
    imports: list[ImportBinding] = field(default_factory=list)
    parse_error: Optional[str] = None  # set => classes and imports are empty


class LanguageParser(ABC):

    @property
    @abstractmethod
    def language(self) -> str:
        """Language identifier (e.g. 'python')."""

    @property
    @abstractmethod
    def extensions(self) -> tuple[str, ...]:
        """File suffixes this parser reads, lowercase with the dot."""

    @abstractmethod
    def parse(self, source: bytes, module_path: str, file_path: str,
              is_package: bool = False) -> ParseResult:
        """Extract facts from source. Malformed input sets parse_error."""

    def handles(self, path: str | PurePath) -> bool:
        return PurePath(path).suffix.lower() in self.extensions

    def extract(self, source: bytes, module_path: str, file_path: str,
                is_package: bool = False) -> ModuleFacts:
        """parse() packaged as the cacheable per-file record."""
        result = self.parse(source, module_path, file_path, is_package)
        return ModuleFacts(
            module_path=module_path,
            file_path=file_path,
            is_package=is_package,
            classes=result.classes,
            imports=result.imports,
            parse_error=result.parse_error,
        )
