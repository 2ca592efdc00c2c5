"""
Tuple detection for array schemas.

Two draft-dependent encodings describe a fixed-position sequence:

- prefixItems (2020-12): per-position schemas plus an optional trailing
  "items" schema. Fixed length only when no trailing schema is present.
- items as a list (draft 04-2019-09): always fixed length.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..schema_ast.nodes import ArrayNode, SchemaNode

NOT_A_TUPLE = "none"
PREFIX_TUPLE = "prefix"
LEGACY_TUPLE = "legacy"


@dataclass
class TupleInfo:
    """Classification of an array schema."""

    kind: str = NOT_A_TUPLE
    item_nodes: list[SchemaNode] = field(default_factory=list)

    # Schema every element past the prefix must satisfy (open tuples only)
    trailing: SchemaNode | None = None

    is_fixed_length: bool = False

    @property
    def is_tuple(self) -> bool:
        return self.kind != NOT_A_TUPLE


def detect_tuple(node: ArrayNode) -> TupleInfo:
    """
    Classify an array node as a non-tuple, fixed tuple or open tuple.

    prefixItems takes precedence over a list-valued "items".

    Args:
        node: The array node to classify

    Returns:
        TupleInfo describing the positions and trailing schema
    """
    if node.prefix_items is not None:
        trailing = node.items if isinstance(node.items, SchemaNode) else None
        return TupleInfo(
            kind=PREFIX_TUPLE,
            item_nodes=list(node.prefix_items),
            trailing=trailing,
            is_fixed_length=trailing is None,
        )

    if isinstance(node.items, list):
        return TupleInfo(kind=LEGACY_TUPLE, item_nodes=list(node.items), is_fixed_length=True)

    return TupleInfo()
