"""
Schema AST (Abstract Syntax Tree) module.

Contains the AST node definitions and parser for JSON Schema.
"""

from __future__ import annotations

from .nodes import (
    ArrayNode,
    CombinatorNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    PropertyDef,
    RefNode,
    SchemaNode,
    TypeUnionNode,
    UnknownNode,
)
from .parser import SchemaParser

__all__ = [
    "SchemaNode",
    "UnknownNode",
    "ConstNode",
    "EnumNode",
    "CombinatorNode",
    "RefNode",
    "PrimitiveNode",
    "TypeUnionNode",
    "ArrayNode",
    "PropertyDef",
    "ObjectNode",
    "SchemaParser",
]
