"""
Tests for generated type declarations.
"""

from __future__ import annotations

import logging

import pytest

from json_schema_validator_gen.pipeline import PipelineGenerator, SchemaGenerationError
from json_schema_validator_gen.pipeline.analyzer import Target


def declarations(schema, schema_path="user.json", targets=None):
    """Generate and return {type name: declaration source}."""
    generator = PipelineGenerator(schema, schema_path, [Target(path=t) for t in targets or ["#"]])
    return {entry.type_name: entry.type_declaration for entry in generator.generate_entries()}


def declaration(schema, schema_path="user.json"):
    return next(iter(declarations(schema, schema_path).values()))


class TestObjects:
    """Test cases for TypedDict generation"""

    def test_typed_dict_with_optional_fields(self):
        schema = {
            "type": "object",
            "properties": {
                "id": {"type": "integer"},
                "name": {"type": "string"},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["id"],
        }
        assert declaration(schema) == (
            "class User(TypedDict):\n" "    id: float\n" "    name: NotRequired[str]\n" "    tags: NotRequired[list[str]]"
        )

    def test_non_identifier_keys_use_functional_form(self):
        schema = {"type": "object", "properties": {"first-name": {"type": "string"}}, "required": ["first-name"]}
        assert declaration(schema) == "User = TypedDict('User', {'first-name': 'str'})"

    def test_keyword_keys_use_functional_form(self):
        schema = {"type": "object", "properties": {"class": {"type": "string"}}}
        assert declaration(schema) == "User = TypedDict('User', {'class': 'NotRequired[str]'})"

    def test_open_object(self):
        assert declaration({"type": "object"}) == "type User = dict[str, Any]"

    def test_additional_properties_schema(self):
        schema = {"type": "object", "additionalProperties": {"type": "integer"}}
        assert declaration(schema) == "type User = dict[str, float]"

    def test_nested_object_is_hoisted(self):
        schema = {
            "type": "object",
            "properties": {"meta": {"type": "object", "properties": {"source": {"type": "string"}}}},
        }
        assert declaration(schema) == (
            "class UserMeta(TypedDict):\n"
            "    source: NotRequired[str]\n"
            "\n\n"
            "class User(TypedDict):\n"
            "    meta: NotRequired[UserMeta]"
        )


class TestScalars:
    def test_primitives(self):
        assert declaration({"type": "string"}) == "type User = str"
        assert declaration({"type": "integer"}) == "type User = float"
        assert declaration({"type": "null"}) == "type User = None"

    def test_type_list(self):
        assert declaration({"type": ["string", "null"]}) == "type User = str | None"

    def test_const(self):
        assert declaration({"const": "admin"}) == "type User = Literal['admin']"
        assert declaration({"const": {"a": 1}}) == "type User = Any"

    def test_enum(self):
        assert declaration({"enum": ["a", "b", None]}, "color.json") == "type Color = Literal['a', 'b'] | None"

    def test_unknown(self):
        assert declaration({}) == "type User = Any"
        assert declaration({"type": "date"}) == "type User = Any"


class TestArrays:
    def test_array_without_items(self):
        assert declaration({"type": "array"}) == "type User = list[Any]"

    def test_fixed_tuple(self):
        schema = {"type": "array", "prefixItems": [{"type": "string"}, {"type": "number"}], "items": False}
        assert declaration(schema, "pair.json") == "type Pair = tuple[str, float]"

    def test_legacy_tuple(self):
        schema = {"type": "array", "items": [{"type": "string"}, {"type": "boolean"}]}
        assert declaration(schema, "pair.json") == "type Pair = tuple[str, bool]"

    def test_open_tuple(self):
        schema = {"type": "array", "prefixItems": [{"type": "string"}], "items": {"type": "number"}}
        assert declaration(schema, "row.json") == "type Row = tuple[str, *tuple[float, ...]]"


class TestCombinatorsAndRefs:
    def test_one_of_union(self):
        schema = {"oneOf": [{"type": "string"}, {"type": "integer"}, {"type": "number"}]}
        assert declaration(schema, "value.json") == "type Value = str | float"

    def test_any_absorbs_union(self):
        assert declaration({"anyOf": [{"type": "string"}, {}]}, "value.json") == "type Value = Any"

    def test_registered_ref_is_referenced_by_name(self):
        schema = {
            "type": "object",
            "properties": {"address": {"$ref": "#/definitions/Address"}},
            "required": ["address"],
            "definitions": {"Address": {"type": "object", "properties": {"street": {"type": "string"}}}},
        }
        types = declarations(schema, "customer.json")
        assert list(types) == ["Customer", "Address"]
        assert types["Customer"] == "class Customer(TypedDict):\n    address: Address"

    def test_recursive_ref(self):
        schema = {
            "definitions": {
                "Node": {
                    "type": "object",
                    "properties": {"children": {"type": "array", "items": {"$ref": "#/definitions/Node"}}},
                }
            }
        }
        types = declarations(schema, targets=["#/definitions/Node"])
        assert types == {"Node": "class Node(TypedDict):\n    children: NotRequired[list[Node]]"}

    def test_all_of_merges_object_branches(self):
        schema = {
            "allOf": [
                {"$ref": "#/definitions/Base"},
                {"type": "object", "properties": {"extra": {"type": "string"}}, "required": ["extra"]},
            ],
            "definitions": {"Base": {"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]}},
        }
        types = declarations(schema)
        assert types["User"] == "class User(TypedDict):\n    id: float\n    extra: str"

    def test_unregistered_ref_is_inlined_with_warning(self, caplog):
        # "~1" escapes are resolved by the parser but not by the collector
        schema = {
            "type": "object",
            "properties": {"code": {"$ref": "#/definitions/a~1b"}},
            "definitions": {"a/b": {"type": "string"}},
        }
        with caplog.at_level(logging.WARNING):
            types = declarations(schema)
        assert types["User"] == "class User(TypedDict):\n    code: NotRequired[str]"
        assert "has no generated type" in caplog.text

    def test_cyclic_unregistered_ref_is_rejected(self):
        schema = {
            "$ref": "#/definitions/a~1b",
            "definitions": {"a/b": {"type": "object", "properties": {"next": {"$ref": "#/definitions/a~1b"}}}},
        }
        with pytest.raises(SchemaGenerationError, match="Cyclic reference"):
            declarations(schema)
