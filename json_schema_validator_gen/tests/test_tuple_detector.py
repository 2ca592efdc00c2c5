"""
Tests for tuple detection across drafts.
"""

from __future__ import annotations

from json_schema_validator_gen.pipeline.analyzer.tuple_detector import (
    LEGACY_TUPLE,
    NOT_A_TUPLE,
    PREFIX_TUPLE,
    detect_tuple,
)
from json_schema_validator_gen.pipeline.schema_ast import ArrayNode, PrimitiveNode, SchemaParser


def parse_array(schema: dict) -> ArrayNode:
    node = SchemaParser(schema).parse(schema, "#")
    assert isinstance(node, ArrayNode)
    return node


class TestDetectTuple:
    def test_plain_array(self):
        info = detect_tuple(parse_array({"type": "array", "items": {"type": "string"}}))
        assert info.kind == NOT_A_TUPLE
        assert not info.is_tuple

    def test_prefix_items_fixed_length(self):
        info = detect_tuple(parse_array({"type": "array", "prefixItems": [{"type": "string"}, {"type": "number"}], "items": False}))
        assert info.kind == PREFIX_TUPLE
        assert info.is_fixed_length
        assert info.trailing is None
        assert [item.type_name for item in info.item_nodes] == ["string", "number"]

    def test_prefix_items_without_items_is_fixed(self):
        info = detect_tuple(parse_array({"type": "array", "prefixItems": [{"type": "string"}]}))
        assert info.is_fixed_length

    def test_prefix_items_with_trailing_schema_is_open(self):
        info = detect_tuple(parse_array({"type": "array", "prefixItems": [{"type": "string"}], "items": {"type": "integer"}}))
        assert info.kind == PREFIX_TUPLE
        assert not info.is_fixed_length
        assert isinstance(info.trailing, PrimitiveNode)
        assert info.trailing.type_name == "integer"

    def test_legacy_items_list(self):
        info = detect_tuple(parse_array({"type": "array", "items": [{"type": "string"}, {"type": "boolean"}]}))
        assert info.kind == LEGACY_TUPLE
        assert info.is_fixed_length
        assert len(info.item_nodes) == 2

    def test_prefix_items_take_precedence(self):
        schema = {"type": "array", "prefixItems": [{"type": "string"}], "items": [{"type": "boolean"}, {"type": "null"}]}
        info = detect_tuple(parse_array(schema))
        assert info.kind == PREFIX_TUPLE
        assert len(info.item_nodes) == 1
