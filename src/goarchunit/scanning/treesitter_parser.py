"""Tree-sitter parser wrapper for Go sources.

Usage:
    parser = TreeSitterParser()
    tree = parser.parse(code_bytes)
    for captures in parser.matches(tree.root_node, IMPORT_QUERY):
        path_node = captures["import.path"][0]
"""

from __future__ import annotations

import threading
from typing import Any

import tree_sitter
import tree_sitter_go

_GO_LANGUAGE = tree_sitter.Language(tree_sitter_go.language())


class TreeSitterParser:
    """Wrapper around tree-sitter for Go parsing.

    Parsers are not shared between threads: ``parse`` builds a parser per
    call. Compiled queries are immutable and cached.
    """

    def __init__(self) -> None:
        self._language = _GO_LANGUAGE
        self._queries: dict[str, Any] = {}
        self._lock = threading.Lock()

    def parse(self, code: bytes) -> Any:
        """Parse Go source and return the syntax tree."""
        parser = tree_sitter.Parser(self._language)
        return parser.parse(code)

    def _compiled(self, query_str: str) -> Any:
        with self._lock:
            query = self._queries.get(query_str)
            if query is None:
                query = tree_sitter.Query(self._language, query_str)
                self._queries[query_str] = query
            return query

    def matches(self, node: Any, query_str: str) -> list[dict[str, list[Any]]]:
        """Run a query and return one ``{capture_name: [nodes]}`` dict per match."""
        # tree-sitter 0.25+: use QueryCursor for execution
        cursor = tree_sitter.QueryCursor(self._compiled(query_str))
        return [captures for _pattern_id, captures in cursor.matches(node)]

