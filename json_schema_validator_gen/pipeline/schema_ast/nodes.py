"""
Schema node variants produced by SchemaParser.

These nodes are the normalized, read-only view of one schema location.
Every schema parses into exactly one variant; the compilers dispatch on
the variant and treat anything they do not recognize as an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SchemaNode:
    """Fields shared by every node variant."""

    # Pointer of the schema location this node was parsed from
    source_path: str = ""

    # The raw schema this node was parsed from
    raw: Any = None


@dataclass
class UnknownNode(SchemaNode):
    """A schema that places no recognized constraint (e.g. {} or true)."""


@dataclass
class ConstNode(SchemaNode):
    """Schema with a "const" keyword."""

    value: Any = None


@dataclass
class EnumNode(SchemaNode):
    """Schema with an "enum" list; values keep their declared order."""

    values: list[Any] = field(default_factory=list)


@dataclass
class CombinatorNode(SchemaNode):
    """A oneOf, anyOf or allOf list of branches."""

    kind: str = "oneOf"  # "oneOf", "anyOf" or "allOf"
    branches: list[SchemaNode] = field(default_factory=list)


@dataclass
class RefNode(SchemaNode):
    """Local $ref, left unresolved until compile time."""

    ref_path: str = ""  # e.g., "#/$defs/User"


@dataclass
class PrimitiveNode(SchemaNode):
    """string, integer, number, boolean or null, with its constraints."""

    type_name: str = ""

    # String constraints
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    # Numeric constraints; exclusive bounds are a number (draft 06+)
    # or a boolean paired with minimum/maximum (draft 04)
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: float | bool | None = None
    exclusive_maximum: float | bool | None = None


@dataclass
class TypeUnionNode(SchemaNode):
    """A "type" list with more than one entry."""

    types: list[str] = field(default_factory=list)


@dataclass
class ArrayNode(SchemaNode):
    """type: array."""

    items: SchemaNode | list[SchemaNode] | None = None  # Single type or legacy tuple types
    prefix_items: list[SchemaNode] | None = None  # Draft 2020-12 tuple types
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False


@dataclass
class PropertyDef(SchemaNode):
    """One entry of "properties"."""

    name: str = ""
    type_node: SchemaNode | None = None
    is_required: bool = False


@dataclass
class ObjectNode(SchemaNode):
    """type: object."""

    properties: list[PropertyDef] | None = None  # None when "properties" is absent
    required: list[str] = field(default_factory=list)
    additional_properties: bool | SchemaNode | None = None
    min_properties: int | None = None
    max_properties: int | None = None
