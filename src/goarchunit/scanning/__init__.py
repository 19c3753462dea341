"""Go syntax scanning with tree-sitter."""

from .go_ast import TypeResolver
from .treesitter_parser import TreeSitterParser

__all__ = ["TreeSitterParser", "TypeResolver"]
