"""
Output formatting for CLI: text, JSON and Graphviz dot.
"""

from __future__ import annotations

import json
import re

from ..errors import AmbiguousClassNameError
from ..store.models import ClassReference, QueryResult


def format_text(result: QueryResult, relation: str = "subclass") -> str:
    """Format a query result for display."""
    if not result.subclasses:
        plural = "superclasses" if relation == "superclass" else "subclasses"
        return f"No {plural} found for '{result.class_name}'"

    lines = [f"Found {len(result.subclasses)} {relation}(es) of '{result.class_name}':", ""]
    for ref in result.subclasses:
        lines.append(f"  {ref.class_name} ({ref.module_path})")
    return "\n".join(lines)


def format_json(result: QueryResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


def format_dot(root: ClassReference, result: QueryResult,
               edges: list[tuple[ClassReference, ClassReference]]) -> str:
    """Graphviz digraph of the root and its result set.

    Only edges with both ends in the result set (or the root) are drawn.
    """
    lines = [
        "digraph {",
        "  rankdir=TB;",
        "  node [shape=box, style=filled, fillcolor=lightblue];",
        "",
        f"  {_node_id(root)} [label=\"{_label(root)}\", fillcolor=lightgreen];",
    ]
    for ref in result.subclasses:
        lines.append(f"  {_node_id(ref)} [label=\"{_label(ref)}\"];")

    lines.append("")
    for parent, child in edges:
        lines.append(f"  {_node_id(parent)} -> {_node_id(child)};")
    lines.append("}")
    return "\n".join(lines)


def format_ambiguous(error: AmbiguousClassNameError) -> str:
    lines = [f"Class '{error.name}' found in multiple modules:"]
    lines.extend(f"  - {c}" for c in error.candidates)
    lines.append("")
    lines.append("Please specify --module to disambiguate.")
    return "\n".join(lines)


def _node_id(ref: ClassReference) -> str:
    return f"{_sanitize(ref.module_path)}_{_sanitize(ref.class_name)}"


def _label(ref: ClassReference) -> str:
    return f"{ref.class_name}\\n({ref.module_path})"


def _sanitize(text: str) -> str:
    return re.sub(r"\W", "_", text)
