"""In-memory program model: entities, structural types and the artifact."""

from .artifact import Artifact
from .entities import (
    CallSite,
    Constant,
    DeclarationIssue,
    Function,
    GoType,
    Layer,
    Package,
    Param,
    SourceFile,
    TestFileReference,
    UseSite,
    Variable,
)
from .types import TypeRef

__all__ = [
    "Artifact",
    "CallSite",
    "Constant",
    "DeclarationIssue",
    "Function",
    "GoType",
    "Layer",
    "Package",
    "Param",
    "SourceFile",
    "TestFileReference",
    "TypeRef",
    "UseSite",
    "Variable",
]
