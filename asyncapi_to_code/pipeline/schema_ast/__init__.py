"""
Schema AST module.

Contains the raw schema node definitions and the document parser.
"""

from __future__ import annotations

from .nodes import NAMED_KINDS, NodeKind, SchemaDocument, SchemaNode
from .parser import SchemaParser

__all__ = [
    "SchemaNode",
    "SchemaDocument",
    "NodeKind",
    "NAMED_KINDS",
    "SchemaParser",
]
