"""
Type declaration backend.

Compiles schema nodes into Python type declarations:

- Objects with declared properties become TypedDict classes (the
  functional TypedDict form when a key is not a plain identifier)
- Everything else becomes a PEP 695 "type" alias

Registered $ref targets are referenced by name and never inlined.
Nested inline objects are hoisted into their own TypedDict.
"""

from __future__ import annotations

import ast
import keyword
import logging

from ...utils import to_identifier, to_pascal_case
from ..analyzer.name_resolver import NameRegistry
from ..analyzer.reference_resolver import is_local_ref, last_segment
from ..analyzer.tuple_detector import detect_tuple
from ..errors import PointerError, SchemaGenerationError
from ..schema_ast.nodes import (
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
from ..schema_ast.parser import SchemaParser
from . import code_builder as cb

logger = logging.getLogger(__name__)


class TypeBackend:
    """Generates type declarations as Python AST."""

    TYPE_MAP = {
        "string": "str",
        "integer": "float",
        "number": "float",
        "boolean": "bool",
        "null": "None",
        "array": "list[Any]",
        "object": "dict[str, Any]",
    }

    def __init__(self, parser: SchemaParser, registry: NameRegistry):
        self.parser = parser
        self.registry = registry
        self._pointer = ""
        self._hoisted: list[ast.stmt] = []
        self._stack: list[str] = []

    def generate(self, node: SchemaNode, type_name: str, pointer: str) -> list[ast.stmt]:
        """
        Generate the declaration for one collected pointer.

        Args:
            node: The parsed schema at the pointer
            type_name: Name assigned by the registry
            pointer: The pointer being generated (owner of hoisted names)

        Returns:
            Hoisted declarations followed by the main declaration
        """
        self._pointer = pointer
        self._hoisted = []
        self._stack = []

        declaration = self._declare(node, type_name)
        return [*self._hoisted, declaration]

    def _declare(self, node: SchemaNode, type_name: str) -> ast.stmt:
        """Build the statement declaring type_name as node's type."""
        if isinstance(node, ObjectNode) and node.properties is not None:
            return self._typed_dict(type_name, node.properties)

        if isinstance(node, CombinatorNode) and node.kind == "allOf":
            properties = self._merge_all_of(node)
            if properties is not None:
                return self._typed_dict(type_name, properties)
            return cb.type_alias(type_name, self._all_of_fallback(node, type_name))

        return cb.type_alias(type_name, self._type_expr(node, type_name))

    def _hoist(self, properties: list[PropertyDef], base_name: str) -> ast.expr:
        """Declare an inline object under a fresh name and reference it."""
        hoisted_name = self.registry.unique_name(base_name, self._pointer)
        self._hoisted.append(self._typed_dict(hoisted_name, properties))
        return cb.name(hoisted_name)

    def _type_expr(self, node: SchemaNode, context_name: str) -> ast.expr:
        """
        Translate a schema node into a type expression.

        Args:
            node: Schema node to translate
            context_name: Base name for any declaration hoisted from this node

        Returns:
            Type expression
        """
        if isinstance(node, ConstNode):
            return self._const_type(node.value)

        if isinstance(node, EnumNode):
            return self._enum_type(node.values)

        if isinstance(node, CombinatorNode):
            return self._combinator_type(node, context_name)

        if isinstance(node, RefNode):
            return self._ref_type(node, context_name)

        if isinstance(node, PrimitiveNode):
            return cb.parse_expr(self.TYPE_MAP[node.type_name])

        if isinstance(node, TypeUnionNode):
            types = [cb.parse_expr(self.TYPE_MAP[t]) for t in node.types if t in self.TYPE_MAP]
            return self._union(types)

        if isinstance(node, ArrayNode):
            return self._array_type(node, context_name)

        if isinstance(node, ObjectNode):
            if node.properties is not None:
                return self._hoist(node.properties, context_name)
            if isinstance(node.additional_properties, SchemaNode):
                value_type = self._type_expr(node.additional_properties, f"{context_name}Value")
                return cb.subscript(cb.name("dict"), cb.tuple_([cb.name("str"), value_type]))
            return cb.parse_expr("dict[str, Any]")

        if isinstance(node, UnknownNode):
            return cb.name("Any")

        raise SchemaGenerationError(f"Unsupported schema node {type(node).__name__} at {node.source_path}")

    def _const_type(self, value) -> ast.expr:
        if value is None:
            return cb.const(None)
        if isinstance(value, (str, int)):
            return cb.subscript(cb.name("Literal"), cb.const(value))
        # Literal cannot hold floats
        if isinstance(value, float):
            return cb.name("float")
        return cb.name("Any")

    def _enum_type(self, values: list) -> ast.expr:
        literals = [v for v in values if isinstance(v, (str, int))]
        if any(not isinstance(v, (str, int, float)) and v is not None for v in values):
            return cb.name("Any")

        types: list[ast.expr] = []
        if literals:
            literal_slice = cb.const(literals[0]) if len(literals) == 1 else cb.tuple_([cb.const(v) for v in literals])
            types.append(cb.subscript(cb.name("Literal"), literal_slice))
        if any(isinstance(v, float) for v in values):
            types.append(cb.name("float"))
        if None in values:
            types.append(cb.const(None))
        return self._union(types)

    def _combinator_type(self, node: CombinatorNode, context_name: str) -> ast.expr:
        if node.kind == "allOf":
            properties = self._merge_all_of(node)
            if properties is not None:
                return self._hoist(properties, context_name)
            return self._all_of_fallback(node, context_name)

        branch_types = [self._type_expr(branch, f"{context_name}Option{i + 1}") for i, branch in enumerate(node.branches)]
        return self._union(branch_types)

    def _ref_type(self, node: RefNode, context_name: str) -> ast.expr:
        type_name = self.registry.type_name(node.ref_path)
        if type_name is not None:
            return cb.name(type_name)

        resolved = self._resolve_unregistered(node)
        if resolved is None:
            return cb.name("Any")

        self._stack.append(node.ref_path)
        try:
            return self._type_expr(resolved, context_name)
        finally:
            self._stack.pop()

    def _resolve_unregistered(self, node: RefNode) -> SchemaNode | None:
        """
        Resolve a $ref that has no generated type, for inline expansion.

        Tries the parser's pointer resolution, then a lookup by name under
        "definitions"/"$defs". Every fallback is logged.

        Raises:
            SchemaGenerationError: If the reference is already being expanded
        """
        ref = node.ref_path
        if ref in self._stack:
            raise SchemaGenerationError(f'Cyclic reference "{ref}" at {node.source_path} cannot be inlined; add it as a --target so it gets its own type')

        logger.warning('Reference "%s" at %s has no generated type, inlining it', ref, node.source_path)
        if not is_local_ref(ref):
            logger.warning('Reference "%s" is not local, using Any', ref)
            return None

        try:
            return self.parser.get_node(ref)
        except PointerError as e:
            logger.warning("Pointer resolution failed: %s", e)

        try:
            resolved = self.parser.get_definition(last_segment(ref))
        except PointerError:
            resolved = None
        if resolved is None:
            logger.warning('Could not resolve reference "%s", using Any', ref)
        return resolved

    def _array_type(self, node: ArrayNode, context_name: str) -> ast.expr:
        """
        Type an array schema.

        Tuples are typed as tuple[...] although validators return the input
        list unchanged; the annotation describes positions, not the container.
        """
        tuple_info = detect_tuple(node)
        if tuple_info.is_tuple:
            elements = [self._type_expr(item, f"{context_name}Item{i + 1}") for i, item in enumerate(tuple_info.item_nodes)]
            if tuple_info.trailing is not None:
                trailing = self._type_expr(tuple_info.trailing, f"{context_name}Item")
                if not elements:
                    return cb.subscript(cb.name("list"), trailing)
                tail = cb.subscript(cb.name("tuple"), cb.tuple_([trailing, cb.const(...)]))
                elements.append(ast.Starred(value=tail, ctx=ast.Load()))
            if not elements:
                return cb.subscript(cb.name("tuple"), cb.tuple_([]))
            return cb.subscript(cb.name("tuple"), cb.tuple_(elements))

        if node.items is None:
            return cb.parse_expr("list[Any]")
        return cb.subscript(cb.name("list"), self._type_expr(node.items, f"{context_name}Item"))

    def _object_properties(self, node: SchemaNode) -> list[PropertyDef] | None:
        """Get the properties a node declares as an object, or None if it is not one."""
        if isinstance(node, ObjectNode):
            return node.properties if node.properties is not None else []
        if isinstance(node, CombinatorNode) and node.kind == "allOf":
            return self._merge_all_of(node)
        if isinstance(node, RefNode):
            return self._ref_object_properties(node)
        return None

    def _ref_object_properties(self, node: RefNode) -> list[PropertyDef] | None:
        ref = node.ref_path
        if ref in self._stack:
            raise SchemaGenerationError(f'Cyclic allOf reference "{ref}" at {node.source_path}')
        try:
            resolved = self.parser.get_node(ref)
        except PointerError:
            return None

        self._stack.append(ref)
        try:
            return self._object_properties(resolved)
        finally:
            self._stack.pop()

    def _merge_all_of(self, node: CombinatorNode) -> list[PropertyDef] | None:
        """
        Merge the object branches of an allOf into one property list.

        A property is required when any branch requires it; later branches
        override the type of earlier ones.

        Returns:
            Merged properties, or None when no branch is an object
        """
        merged: dict[str, PropertyDef] = {}
        found_object = False
        for branch in node.branches:
            properties = self._object_properties(branch)
            if properties is None:
                if not isinstance(branch, UnknownNode):
                    logger.warning("Ignoring non-object allOf branch at %s", branch.source_path)
                continue
            found_object = True
            for prop in properties:
                previous = merged.get(prop.name)
                is_required = prop.is_required or (previous is not None and previous.is_required)
                merged[prop.name] = PropertyDef(
                    name=prop.name,
                    type_node=prop.type_node,
                    is_required=is_required,
                    source_path=prop.source_path,
                    raw=prop.raw,
                )
            if isinstance(branch, ObjectNode):
                for required_name in branch.required:
                    if required_name in merged:
                        merged[required_name].is_required = True

        if not found_object:
            return None
        return list(merged.values())

    def _all_of_fallback(self, node: CombinatorNode, context_name: str) -> ast.expr:
        """Type an allOf without object branches: its single concrete branch type, else Any."""
        branch_types: dict[str, ast.expr] = {}
        for i, branch in enumerate(node.branches):
            if isinstance(branch, UnknownNode):
                continue
            branch_type = self._type_expr(branch, f"{context_name}Part{i + 1}")
            branch_types.setdefault(ast.dump(branch_type), branch_type)

        if len(branch_types) == 1:
            return next(iter(branch_types.values()))
        if branch_types:
            logger.warning("Cannot express intersection of allOf at %s, using Any", node.source_path)
        return cb.name("Any")

    def _typed_dict(self, type_name: str, properties: list[PropertyDef]) -> ast.stmt:
        """Build a TypedDict declaration, in class form when every key allows it."""
        fields: list[tuple[str, ast.expr]] = []
        for prop in properties:
            field_type = self._type_expr(prop.type_node or UnknownNode(), f"{type_name}{to_identifier(to_pascal_case(prop.name))}")
            if not prop.is_required:
                field_type = cb.subscript(cb.name("NotRequired"), field_type)
            fields.append((prop.name, field_type))

        if all(self._is_class_field(key) for key, _ in fields):
            body = [ast.AnnAssign(target=cb.store(key), annotation=field_type, value=None, simple=1) for key, field_type in fields]
            return cb.class_def(type_name, [cb.name("TypedDict")], body)

        # Functional form: values are strings so later declarations can be referenced
        fields_dict = ast.Dict(
            keys=[cb.const(key) for key, _ in fields],
            values=[cb.const(ast.unparse(ast.fix_missing_locations(field_type))) for _, field_type in fields],
        )
        return cb.assign(type_name, cb.call("TypedDict", cb.const(type_name), fields_dict))

    @staticmethod
    def _is_class_field(key: str) -> bool:
        return key.isidentifier() and not keyword.iskeyword(key) and not key.startswith("__")

    @staticmethod
    def _union(types: list[ast.expr]) -> ast.expr:
        """Union of type expressions, without duplicates."""
        unique: dict[str, ast.expr] = {}
        for type_expr in types:
            unique.setdefault(ast.dump(type_expr), type_expr)
        if not unique or any(isinstance(t, ast.Name) and t.id == "Any" for t in unique.values()):
            return cb.name("Any")
        return cb.union(list(unique.values()))
