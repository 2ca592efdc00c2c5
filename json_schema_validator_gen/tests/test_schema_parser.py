"""
Tests for the schema parser.
"""

from __future__ import annotations

import pytest

from json_schema_validator_gen.pipeline.errors import PointerError
from json_schema_validator_gen.pipeline.schema_ast import (
    ArrayNode,
    CombinatorNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaParser,
    TypeUnionNode,
    UnknownNode,
)


def parse(schema):
    return SchemaParser(schema).parse(schema, "#")


class TestSchemaParser:
    """Test cases for node selection and precedence"""

    def test_const_before_type(self):
        node = parse({"type": "string", "const": "a"})
        assert isinstance(node, ConstNode)
        assert node.value == "a"

    def test_enum(self):
        node = parse({"enum": ["a", "b", None]})
        assert isinstance(node, EnumNode)
        assert node.values == ["a", "b", None]

    def test_combinator_before_ref(self):
        node = parse({"anyOf": [{"type": "string"}, {"$ref": "#/definitions/A"}]})
        assert isinstance(node, CombinatorNode)
        assert node.kind == "anyOf"
        assert isinstance(node.branches[1], RefNode)
        assert node.branches[1].source_path == "#/anyOf/1"

    def test_ref(self):
        node = parse({"$ref": "#/definitions/A"})
        assert isinstance(node, RefNode)
        assert node.ref_path == "#/definitions/A"

    def test_type_union(self):
        node = parse({"type": ["string", "null"]})
        assert isinstance(node, TypeUnionNode)
        assert node.types == ["string", "null"]

    def test_single_element_type_list(self):
        node = parse({"type": ["integer"], "minimum": 0})
        assert isinstance(node, PrimitiveNode)
        assert node.type_name == "integer"
        assert node.minimum == 0

    def test_missing_type_and_boolean_schema(self):
        assert isinstance(parse({"description": "anything"}), UnknownNode)
        assert isinstance(parse(True), UnknownNode)

    def test_string_constraints(self):
        node = parse({"type": "string", "minLength": 1, "maxLength": 5, "pattern": "^a"})
        assert (node.min_length, node.max_length, node.pattern) == (1, 5, "^a")

    def test_draft4_exclusive_bounds(self):
        node = parse({"type": "number", "minimum": 0, "exclusiveMinimum": True})
        assert node.minimum == 0
        assert node.exclusive_minimum is True

    def test_array(self):
        node = parse({"type": "array", "items": {"type": "string"}, "minItems": 1, "uniqueItems": True})
        assert isinstance(node, ArrayNode)
        assert isinstance(node.items, PrimitiveNode)
        assert node.min_items == 1
        assert node.unique_items

    def test_items_false(self):
        node = parse({"type": "array", "prefixItems": [{"type": "string"}], "items": False})
        assert node.items is None
        assert len(node.prefix_items) == 1

    def test_object(self):
        node = parse(
            {
                "type": "object",
                "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
                "required": ["id"],
                "additionalProperties": False,
            }
        )
        assert isinstance(node, ObjectNode)
        assert [(p.name, p.is_required) for p in node.properties] == [("id", True), ("name", False)]
        assert node.properties[0].source_path == "#/properties/id"
        assert node.additional_properties is False

    def test_object_without_properties(self):
        node = parse({"type": "object", "additionalProperties": {"type": "integer"}})
        assert node.properties is None
        assert isinstance(node.additional_properties, PrimitiveNode)


class TestPointerQueries:
    SCHEMA = {
        "definitions": {"a/b": {"type": "string"}, "User": {"type": "object"}},
        "$defs": {"Group": {"type": "object"}},
    }

    def test_get_node_unescapes_segments(self):
        node = SchemaParser(self.SCHEMA).get_node("#/definitions/a~1b")
        assert isinstance(node, PrimitiveNode)
        assert node.source_path == "#/definitions/a~1b"

    def test_get_node_root(self):
        assert isinstance(SchemaParser({"type": "string"}).get_node("#"), PrimitiveNode)

    def test_get_node_missing(self):
        with pytest.raises(PointerError):
            SchemaParser(self.SCHEMA).get_node("#/definitions/Missing")

    def test_get_node_external(self):
        with pytest.raises(PointerError, match="non-local"):
            SchemaParser(self.SCHEMA).get_node("other.json#/User")

    def test_get_definition_checks_both_containers(self):
        parser = SchemaParser(self.SCHEMA)
        assert parser.get_definition("User").source_path == "#/definitions/User"
        assert parser.get_definition("Group").source_path == "#/$defs/Group"
        assert parser.get_definition("Missing") is None
