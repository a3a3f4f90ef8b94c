"""
conventlint — Python declaration finder using tree-sitter.

Python has no cheap line-level signature for a top-level declaration
(decorators, multi-line signatures), so the module-level definitions are
read from the tree-sitter syntax tree instead of regular expressions.
"""

from __future__ import annotations

from typing import Sequence

import tree_sitter_python as tspython
from tree_sitter import Language, Node, Parser


PY_LANGUAGE = Language(tspython.language())

_DEFINITIONS = {"function_definition", "class_definition"}


def _node_text(node: Node, source: bytes) -> str:
    """Extract source text for a node."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


class PythonParser:
    """Thin wrapper around tree-sitter for Python source code."""

    def __init__(self) -> None:
        self._parser = Parser(PY_LANGUAGE)

    def parse(self, code: str) -> tuple:
        """Parse Python source and return (tree, source_bytes).

        tree-sitter recovers from syntax errors, so broken files still yield
        the declarations that parsed cleanly.
        """
        source_bytes = code.encode("utf-8")
        return self._parser.parse(source_bytes), source_bytes

    def top_level_declarations(self, code: str) -> dict[int, str]:
        """Map 0-based start line -> name for module-level def/class statements."""
        tree, source = self.parse(code)
        found: dict[int, str] = {}
        for child in tree.root_node.children:
            definition = child
            if child.type == "decorated_definition":
                definition = child.child_by_field_name("definition")
            if definition is None or definition.type not in _DEFINITIONS:
                continue
            name = definition.child_by_field_name("name")
            if name is None:
                continue
            # Decorators belong to the declaration, so the comment precedes them
            found[child.start_point[0]] = _node_text(name, source)
        return found


def python_declarations(lines: Sequence[str]) -> dict[int, str]:
    """Declaration finder for the python file type."""
    return PythonParser().top_level_declarations("\n".join(lines))
