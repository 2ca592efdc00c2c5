"""
JSON Schema parser that builds an AST.

Normalizes drafts 04, 06, 07, 2019-09 and 2020-12 into a single set of
node variants. References are not followed here: a $ref becomes a RefNode
and the compilers decide whether to call or inline it.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from ..analyzer.reference_resolver import POINTER_PREFIX, ROOT_POINTER
from ..errors import PointerError
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

# Keywords holding reusable definitions, legacy first
DEFINITION_KEYWORDS = ("definitions", "$defs")


class SchemaParser:
    """Parses JSON Schema into an AST."""

    PRIMITIVE_TYPES = {"string", "integer", "number", "boolean", "null"}

    def __init__(self, root_schema: Any):
        """
        Initialize the parser.

        Args:
            root_schema: The raw schema document that pointers resolve against
        """
        self.root_schema = root_schema

    def get_node(self, ref: str) -> SchemaNode:
        """
        Resolve a pointer and parse the schema found there.

        Segments are unescaped as JSON Pointer tokens ("~1" -> "/",
        "~0" -> "~") after percent-decoding.

        Raises:
            PointerError: If the pointer is not local or does not resolve
        """
        if ref == ROOT_POINTER:
            return self.parse(self.root_schema, ROOT_POINTER)
        if not ref.startswith(POINTER_PREFIX):
            raise PointerError(f'Cannot resolve non-local reference: "{ref}"')

        current = self.root_schema
        for raw_segment in ref[len(POINTER_PREFIX) :].split("/"):
            segment = unquote(raw_segment).replace("~1", "/").replace("~0", "~")
            if isinstance(current, dict) and segment in current:
                current = current[segment]
            elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
                current = current[int(segment)]
            else:
                raise PointerError(f'Schema not found at path: "{ref}". Missing key "{segment}"')

        return self.parse(current, ref)

    def get_definition(self, name: str) -> SchemaNode | None:
        """Look up a definition by name under "definitions" or "$defs"."""
        if not isinstance(self.root_schema, dict):
            return None
        for container in DEFINITION_KEYWORDS:
            definitions = self.root_schema.get(container)
            if isinstance(definitions, dict) and name in definitions:
                return self.parse(definitions[name], f"#/{container}/{name}")
        return None

    def parse(self, schema: Any, path: str) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The raw schema (a dict, or a boolean schema)
            path: Current path in schema (for error messages)

        Returns:
            Appropriate SchemaNode subclass
        """
        if not isinstance(schema, dict):
            # Boolean schemas and malformed values place no constraint we model
            return UnknownNode(source_path=path, raw=schema)

        if "const" in schema:
            return ConstNode(value=schema["const"], source_path=path, raw=schema)

        if isinstance(schema.get("enum"), list):
            return EnumNode(values=list(schema["enum"]), source_path=path, raw=schema)

        for kind in ("oneOf", "anyOf", "allOf"):
            if isinstance(schema.get(kind), list):
                return self._parse_combinator(schema, kind, path)

        if isinstance(schema.get("$ref"), str):
            return RefNode(ref_path=schema["$ref"], source_path=path, raw=schema)

        if "type" in schema:
            return self._parse_type_node(schema, path)

        return UnknownNode(source_path=path, raw=schema)

    def _parse_combinator(self, schema: dict[str, Any], kind: str, path: str) -> CombinatorNode:
        """Parse a oneOf, anyOf or allOf node."""
        branches = [self.parse(branch, f"{path}/{kind}/{i}") for i, branch in enumerate(schema[kind])]
        return CombinatorNode(kind=kind, branches=branches, source_path=path, raw=schema)

    def _parse_type_node(self, schema: dict[str, Any], path: str) -> SchemaNode:
        """Parse a type-based node."""
        type_value = schema["type"]

        if isinstance(type_value, list):
            # Single-element type array is not a union
            if len(type_value) == 1:
                type_value = type_value[0]
            else:
                return TypeUnionNode(types=[t for t in type_value if isinstance(t, str)], source_path=path, raw=schema)

        if type_value == "array":
            return self._parse_array_node(schema, path)

        if type_value == "object":
            return self._parse_object_node(schema, path)

        if type_value in self.PRIMITIVE_TYPES:
            return self._parse_primitive_node(schema, type_value, path)

        return UnknownNode(source_path=path, raw=schema)

    def _parse_array_node(self, schema: dict[str, Any], path: str) -> ArrayNode:
        """Parse an array type node."""
        items_schema = schema.get("items")
        items: SchemaNode | list[SchemaNode] | None = None

        if isinstance(items_schema, list):
            # Legacy tuple type
            items = [self.parse(item, f"{path}/items/{i}") for i, item in enumerate(items_schema)]
        elif items_schema is not None and items_schema is not False:
            items = self.parse(items_schema, f"{path}/items")

        prefix_items = None
        if isinstance(schema.get("prefixItems"), list):
            prefix_items = [self.parse(item, f"{path}/prefixItems/{i}") for i, item in enumerate(schema["prefixItems"])]

        return ArrayNode(
            items=items,
            prefix_items=prefix_items,
            min_items=schema.get("minItems"),
            max_items=schema.get("maxItems"),
            unique_items=schema.get("uniqueItems") is True,
            source_path=path,
            raw=schema,
        )

    def _parse_object_node(self, schema: dict[str, Any], path: str) -> ObjectNode:
        """Parse an object type node."""
        raw_required = schema.get("required")
        required = [name for name in raw_required if isinstance(name, str)] if isinstance(raw_required, list) else []

        properties = None
        if isinstance(schema.get("properties"), dict):
            properties = []
            for prop_name, prop_schema in schema["properties"].items():
                prop_path = f"{path}/properties/{prop_name}"
                properties.append(
                    PropertyDef(
                        name=prop_name,
                        type_node=self.parse(prop_schema, prop_path),
                        is_required=prop_name in required,
                        source_path=prop_path,
                        raw=prop_schema,
                    )
                )

        additional = schema.get("additionalProperties")
        if isinstance(additional, dict):
            additional = self.parse(additional, f"{path}/additionalProperties")

        return ObjectNode(
            properties=properties,
            required=required,
            additional_properties=additional,
            min_properties=schema.get("minProperties"),
            max_properties=schema.get("maxProperties"),
            source_path=path,
            raw=schema,
        )

    def _parse_primitive_node(self, schema: dict[str, Any], type_name: str, path: str) -> PrimitiveNode:
        """Parse a primitive type node."""
        node = PrimitiveNode(type_name=type_name, source_path=path, raw=schema)

        if type_name == "string":
            node.min_length = schema.get("minLength")
            node.max_length = schema.get("maxLength")
            node.pattern = schema.get("pattern")

        if type_name in ("integer", "number"):
            node.minimum = schema.get("minimum")
            node.maximum = schema.get("maximum")
            node.exclusive_minimum = schema.get("exclusiveMinimum")
            node.exclusive_maximum = schema.get("exclusiveMaximum")

        return node
