"""
Validator backend.

Compiles schema nodes into validator functions that collect
path-addressed ValidationIssue records. Every emitted issue is followed
by an abort-early return, so the same code serves both modes:

    def validateUser(value: Any, options: ValidationOptions | None = None) -> ValidationResult[User]:
        issues: list[ValidationIssue] = []
        abort_early = options is not None and options.abort_early
        if not isinstance(value, dict):
            add_issue(issues, "invalid_type", [], "object", get_type(value))
            if abort_early:
                return ValidationFailure(issues)
        ...
        if issues:
            return ValidationFailure(issues)
        return ValidationSuccess(cast(User, value))

oneOf/anyOf branches are compiled into nested functions with a local
issue list, so a failing branch never reports into its parent.
"""

from __future__ import annotations

import ast
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from ..analyzer.name_resolver import NameRegistry, generate_parse_name
from ..analyzer.reference_resolver import is_local_ref, last_segment
from ..analyzer.tuple_detector import TupleInfo, detect_tuple
from ..errors import PointerError, SchemaGenerationError
from ..schema_ast.nodes import (
    ArrayNode,
    CombinatorNode,
    ConstNode,
    EnumNode,
    ObjectNode,
    PrimitiveNode,
    RefNode,
    SchemaNode,
    TypeUnionNode,
    UnknownNode,
)
from ..schema_ast.parser import SchemaParser
from . import code_builder as cb

logger = logging.getLogger(__name__)


@dataclass
class _Scope:
    """Where the checks being compiled apply."""

    # Expression evaluating to the value under test
    value: ast.expr

    # Path tokens of that value, as expressions
    path: list[ast.expr] = field(default_factory=list)

    # Inside a oneOf/anyOf branch function the first issue ends the branch
    in_branch: bool = False

    def child(self, value: ast.expr, segment: ast.expr) -> _Scope:
        return _Scope(value=value, path=[*self.path, segment], in_branch=self.in_branch)

    def path_expr(self) -> ast.expr:
        return cb.list_(list(self.path))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_number(value: int | float) -> str:
    return json.dumps(value)


class ValidatorBackend:
    """Generates validator functions as Python AST."""

    def __init__(self, parser: SchemaParser, registry: NameRegistry):
        self.parser = parser
        self.registry = registry
        self.needs_re = False
        self._counter = 0
        self._stack: list[str] = []

    def generate(self, node: SchemaNode, validator_name: str, type_name: str, is_exported: bool) -> list[ast.stmt]:
        """
        Generate the validator (and, for exported types, the parse function).

        Args:
            node: The parsed schema at the pointer
            validator_name: Name of the validator function
            type_name: Name of the type the validator narrows to
            is_exported: Whether to emit the throwing parse companion

        Returns:
            Function definitions
        """
        self._counter = 0
        self._stack = []

        body: list[ast.stmt] = [
            cb.assign("issues", cb.list_([]), annotation=cb.parse_expr("list[ValidationIssue]")),
            cb.assign("abort_early", cb.parse_expr("options is not None and options.abort_early")),
        ]
        body.extend(self._compile(node, _Scope(value=cb.name("value"))))
        body.append(cb.if_(cb.name("issues"), [cb.return_(cb.call("ValidationFailure", cb.name("issues")))]))
        body.append(cb.return_(cb.call("ValidationSuccess", cb.call("cast", cb.name(type_name), cb.name("value")))))

        validator = cb.func_def(
            validator_name,
            [
                ("value", cb.name("Any"), None),
                ("options", cb.parse_expr("ValidationOptions | None"), cb.const(None)),
            ],
            body,
            returns=cb.subscript(cb.name("ValidationResult"), cb.name(type_name)),
            docstring=f"Validate a value against the {type_name} schema.",
        )
        if not is_exported:
            return [validator]
        return [validator, self._parse_function(validator_name, type_name)]

    def _parse_function(self, validator_name: str, type_name: str) -> ast.FunctionDef:
        body: list[ast.stmt] = [
            cb.assign("result", cb.call(validator_name, cb.name("value"))),
            cb.if_(
                cb.call("isinstance", cb.name("result"), cb.name("ValidationFailure")),
                [ast.Raise(exc=cb.call("ValidationError", cb.const(type_name), cb.attr(cb.name("result"), "issues")), cause=None)],
            ),
            cb.return_(cb.attr(cb.name("result"), "data")),
        ]
        return cb.func_def(
            generate_parse_name(type_name),
            [("value", cb.name("Any"), None)],
            body,
            returns=cb.name(type_name),
            docstring=f"Validate a value as {type_name}, raising ValidationError on failure.",
        )

    def _local(self, prefix: str) -> str:
        """Get a fresh local variable name."""
        self._counter += 1
        return f"_{prefix}{self._counter}"

    def _abort(self, scope: _Scope) -> ast.stmt:
        if scope.in_branch:
            return cb.return_(cb.const(False))
        return cb.if_(cb.name("abort_early"), [cb.return_(cb.call("ValidationFailure", cb.name("issues")))])

    def _issue(
        self,
        scope: _Scope,
        code: str,
        expected: str | ast.expr,
        received: ast.expr,
        path: ast.expr | None = None,
    ) -> list[ast.stmt]:
        """Statements recording one issue, followed by the abort-early return."""
        if isinstance(expected, str):
            expected = cb.const(expected)
        add_issue = cb.call("add_issue", cb.name("issues"), cb.const(code), path or scope.path_expr(), expected, received)
        return [cb.expr_stmt(add_issue), self._abort(scope)]

    def _issue_if(self, test: ast.expr, scope: _Scope, code: str, expected: str | ast.expr, received: ast.expr) -> ast.stmt:
        return cb.if_(test, self._issue(scope, code, expected, received))

    def _compile(self, node: SchemaNode, scope: _Scope) -> list[ast.stmt]:
        """
        Compile the checks for one schema node.

        Args:
            node: Schema node to compile
            scope: Value expression and path the checks apply to

        Returns:
            Statements performing the checks (may be empty)
        """
        if isinstance(node, ConstNode):
            test = cb.not_(cb.call("json_equals", scope.value, cb.literal(node.value)))
            return [self._issue_if(test, scope, "invalid_value", json.dumps(node.value), cb.call("stringify", scope.value))]

        if isinstance(node, EnumNode):
            expected = " | ".join(json.dumps(v) for v in node.values)
            test = cb.not_(cb.call("is_one_of", scope.value, cb.literal(node.values)))
            return [self._issue_if(test, scope, "invalid_value", expected, cb.call("stringify", scope.value))]

        if isinstance(node, CombinatorNode):
            return self._compile_combinator(node, scope)

        if isinstance(node, RefNode):
            return self._compile_ref(node, scope)

        if isinstance(node, PrimitiveNode):
            return self._compile_primitive(node, scope)

        if isinstance(node, TypeUnionNode):
            return self._compile_type_union(node, scope)

        if isinstance(node, ArrayNode):
            return self._compile_array(node, scope)

        if isinstance(node, ObjectNode):
            return self._compile_object(node, scope)

        if isinstance(node, UnknownNode):
            return []

        raise SchemaGenerationError(f"Unsupported schema node {type(node).__name__} at {node.source_path}")

    # References

    def _compile_ref(self, node: RefNode, scope: _Scope) -> list[ast.stmt]:
        validator_name = self.registry.validator_name(node.ref_path)
        if validator_name is not None:
            return self._call_validator(validator_name, scope)

        resolved = self._resolve_unregistered(node)
        if resolved is None:
            return []

        self._stack.append(node.ref_path)
        try:
            return self._compile(resolved, scope)
        finally:
            self._stack.pop()

    def _call_validator(self, validator_name: str, scope: _Scope) -> list[ast.stmt]:
        """Call a sibling validator and merge its issues under the current path."""
        result = self._local("ref")
        failed_issues = cb.attr(cb.name(result), "issues")
        if scope.path:
            prefixed = ast.GeneratorExp(
                elt=cb.call(cb.attr(cb.name("issue"), "with_prefix"), scope.path_expr()),
                generators=[ast.comprehension(target=cb.store("issue"), iter=failed_issues, ifs=[], is_async=0)],
            )
        else:
            prefixed = failed_issues
        return [
            cb.assign(result, cb.call(validator_name, scope.value, cb.name("options"))),
            cb.if_(
                cb.call("isinstance", cb.name(result), cb.name("ValidationFailure")),
                [cb.expr_stmt(cb.call(cb.attr(cb.name("issues"), "extend"), prefixed)), self._abort(scope)],
            ),
        ]

    def _resolve_unregistered(self, node: RefNode) -> SchemaNode | None:
        """
        Resolve a $ref that has no generated validator, for inline expansion.

        The guard only covers the references being expanded by the current
        generate() call.

        Raises:
            SchemaGenerationError: If the reference is already being expanded
        """
        ref = node.ref_path
        if ref in self._stack:
            raise SchemaGenerationError(f'Cyclic reference "{ref}" at {node.source_path} cannot be inlined; add it as a --target so it gets its own validator')

        logger.warning('Reference "%s" at %s has no generated validator, inlining its checks', ref, node.source_path)
        if not is_local_ref(ref):
            logger.warning('Reference "%s" is not local, skipping its checks', ref)
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
            logger.warning('Could not resolve reference "%s", skipping its checks', ref)
        return resolved

    # Combinators

    def _compile_combinator(self, node: CombinatorNode, scope: _Scope) -> list[ast.stmt]:
        if node.kind == "allOf":
            logger.warning("allOf at %s is not checked by the generated validator", node.source_path)
            return []

        if not node.branches:
            logger.warning("Empty %s at %s, skipping", node.kind, node.source_path)
            return []

        statements: list[ast.stmt] = []
        calls: list[ast.expr] = []
        for branch in node.branches:
            branch_name = self._local("branch")
            branch_scope = _Scope(value=scope.value, path=scope.path, in_branch=True)
            branch_body = [
                cb.assign("issues", cb.list_([]), annotation=cb.parse_expr("list[ValidationIssue]")),
                *self._compile(branch, branch_scope),
                cb.return_(cb.const(True)),
            ]
            statements.append(cb.func_def(branch_name, [], branch_body, returns=cb.name("bool")))
            calls.append(cb.call(branch_name))

        if node.kind == "oneOf":
            matches = self._local("matches")
            statements.append(cb.assign(matches, cb.call(cb.attr(cb.list_(calls), "count"), cb.const(True))))
            statements.append(
                self._issue_if(
                    cb.compare(cb.name(matches), ast.NotEq(), cb.const(1)),
                    scope,
                    "invalid_type",
                    "value matching exactly one schema",
                    cb.format_str("value matching {} schemas", cb.name(matches)),
                )
            )
        else:
            statements.append(
                self._issue_if(
                    cb.not_(cb.or_(*calls)),
                    scope,
                    "invalid_type",
                    "value matching at least one schema",
                    cb.const("value matching no schemas"),
                )
            )
        return statements

    # Primitives

    @staticmethod
    def _type_test(type_name: str, value: ast.expr) -> ast.expr | None:
        """Expression testing that value is of a JSON type."""
        if type_name == "string":
            return cb.call("isinstance", value, cb.name("str"))
        if type_name == "number":
            return cb.call("is_number", value)
        if type_name == "integer":
            return cb.call("is_integer", value)
        if type_name == "boolean":
            return cb.call("isinstance", value, cb.name("bool"))
        if type_name == "null":
            return cb.compare(value, ast.Is(), cb.const(None))
        if type_name == "array":
            return cb.call("isinstance", value, cb.tuple_([cb.name("list"), cb.name("tuple")]))
        if type_name == "object":
            return cb.call("isinstance", value, cb.name("dict"))
        return None

    def _type_check(self, type_name: str, scope: _Scope, constraints: list[ast.stmt]) -> list[ast.stmt]:
        """Base type check; constraints only run when it passes."""
        base_type = "number" if type_name == "integer" else type_name
        test = self._type_test(base_type, scope.value)
        failure = self._issue(scope, "invalid_type", type_name, cb.call("get_type", scope.value))
        return [cb.if_(cb.negate(test), failure, constraints)]

    def _compile_primitive(self, node: PrimitiveNode, scope: _Scope) -> list[ast.stmt]:
        if node.type_name == "string":
            return self._type_check("string", scope, self._string_constraints(node, scope))

        if node.type_name in ("number", "integer"):
            constraints: list[ast.stmt] = []
            if node.type_name == "integer":
                constraints.append(
                    self._issue_if(cb.not_(cb.call("is_integer", scope.value)), scope, "not_integer", "integer", cb.call("stringify", scope.value))
                )
            constraints.extend(self._number_constraints(node, scope))
            return self._type_check(node.type_name, scope, constraints)

        return self._type_check(node.type_name, scope, [])

    def _string_constraints(self, node: PrimitiveNode, scope: _Scope) -> list[ast.stmt]:
        constraints: list[ast.stmt] = []
        received_length = cb.format_str("string with length {}", cb.length(scope.value))

        if isinstance(node.min_length, int):
            constraints.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Lt(), cb.const(node.min_length)),
                    scope,
                    "too_small",
                    f"string with length >= {node.min_length}",
                    received_length,
                )
            )

        if isinstance(node.max_length, int):
            constraints.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Gt(), cb.const(node.max_length)),
                    scope,
                    "too_big",
                    f"string with length <= {node.max_length}",
                    received_length,
                )
            )

        if node.pattern is not None:
            try:
                re.compile(node.pattern)
            except (re.error, TypeError):
                logger.warning("Invalid regex pattern %r at %s, skipping it", node.pattern, node.source_path)
            else:
                self.needs_re = True
                search = cb.call(cb.attr(cb.name("re"), "search"), cb.const(node.pattern), scope.value)
                constraints.append(
                    self._issue_if(
                        cb.compare(search, ast.Is(), cb.const(None)),
                        scope,
                        "invalid_string",
                        f"string matching pattern /{node.pattern}/",
                        scope.value,
                    )
                )

        return constraints

    def _number_constraints(self, node: PrimitiveNode, scope: _Scope) -> list[ast.stmt]:
        """Range checks for inclusive bounds and both forms of exclusive bounds."""
        constraints: list[ast.stmt] = []
        received = cb.call("stringify", scope.value)

        # Draft 04: exclusiveMinimum: true turns minimum into an exclusive bound
        lower_exclusive = node.exclusive_minimum is True and _is_number(node.minimum)
        if _is_number(node.minimum):
            op, expected = (ast.LtE(), ">") if lower_exclusive else (ast.Lt(), ">=")
            constraints.append(
                self._issue_if(
                    cb.compare(scope.value, op, cb.const(node.minimum)),
                    scope,
                    "too_small",
                    f"number {expected} {_format_number(node.minimum)}",
                    received,
                )
            )
        if _is_number(node.exclusive_minimum):
            constraints.append(
                self._issue_if(
                    cb.compare(scope.value, ast.LtE(), cb.const(node.exclusive_minimum)),
                    scope,
                    "too_small",
                    f"number > {_format_number(node.exclusive_minimum)}",
                    received,
                )
            )

        upper_exclusive = node.exclusive_maximum is True and _is_number(node.maximum)
        if _is_number(node.maximum):
            op, expected = (ast.GtE(), "<") if upper_exclusive else (ast.Gt(), "<=")
            constraints.append(
                self._issue_if(
                    cb.compare(scope.value, op, cb.const(node.maximum)),
                    scope,
                    "too_big",
                    f"number {expected} {_format_number(node.maximum)}",
                    received,
                )
            )
        if _is_number(node.exclusive_maximum):
            constraints.append(
                self._issue_if(
                    cb.compare(scope.value, ast.GtE(), cb.const(node.exclusive_maximum)),
                    scope,
                    "too_big",
                    f"number < {_format_number(node.exclusive_maximum)}",
                    received,
                )
            )

        return constraints

    def _compile_type_union(self, node: TypeUnionNode, scope: _Scope) -> list[ast.stmt]:
        tests = [test for test in (self._type_test(t, scope.value) for t in node.types) if test is not None]
        if not tests:
            return []
        return [
            self._issue_if(
                cb.not_(cb.or_(*tests)),
                scope,
                "invalid_type",
                " | ".join(node.types),
                cb.call("get_type", scope.value),
            )
        ]

    # Arrays

    def _compile_array(self, node: ArrayNode, scope: _Scope) -> list[ast.stmt]:
        tuple_info = detect_tuple(node)
        if tuple_info.is_tuple:
            checks = self._tuple_checks(tuple_info, scope)
        else:
            checks = self._items_loop(node.items, scope, cb.call("enumerate", scope.value)) if isinstance(node.items, SchemaNode) else []

        received_count = cb.format_str("array with {} items", cb.length(scope.value))
        if isinstance(node.min_items, int):
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Lt(), cb.const(node.min_items)),
                    scope,
                    "too_small",
                    f"array with at least {node.min_items} items",
                    received_count,
                )
            )
        if isinstance(node.max_items, int):
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Gt(), cb.const(node.max_items)),
                    scope,
                    "too_big",
                    f"array with at most {node.max_items} items",
                    received_count,
                )
            )
        if node.unique_items:
            checks.append(
                self._issue_if(
                    cb.compare(cb.call("count_unique", scope.value), ast.NotEq(), cb.length(scope.value)),
                    scope,
                    "not_unique",
                    "array with unique items",
                    cb.const("array with duplicate items"),
                )
            )

        return self._type_check("array", scope, checks)

    def _tuple_checks(self, tuple_info: TupleInfo, scope: _Scope) -> list[ast.stmt]:
        """Length check, one guarded check per position, then the trailing loop."""
        checks: list[ast.stmt] = []
        count = len(tuple_info.item_nodes)

        if tuple_info.is_fixed_length:
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.NotEq(), cb.const(count)),
                    scope,
                    "invalid_type",
                    f"tuple with {count} elements",
                    cb.format_str("array with {} elements", cb.length(scope.value)),
                )
            )
        elif count:
            # Every prefix position is typed, so an open tuple still needs all of them
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Lt(), cb.const(count)),
                    scope,
                    "too_small",
                    f"tuple with at least {count} elements",
                    cb.format_str("array with {} elements", cb.length(scope.value)),
                )
            )

        for index, item_node in enumerate(tuple_info.item_nodes):
            item_scope = scope.child(cb.subscript(scope.value, cb.const(index)), cb.const(index))
            item_checks = self._compile(item_node, item_scope)
            if item_checks:
                # Shorter inputs are reported by the length checks
                checks.append(cb.if_(cb.compare(cb.length(scope.value), ast.Gt(), cb.const(index)), item_checks))

        if tuple_info.trailing is not None:
            rest = cb.subscript(scope.value, ast.Slice(lower=cb.const(count), upper=None, step=None))
            iterable = cb.call("enumerate", rest, start=cb.const(count))
            checks.extend(self._items_loop(tuple_info.trailing, scope, iterable))

        return checks

    def _items_loop(self, item_node: SchemaNode, scope: _Scope, iterable: ast.expr) -> list[ast.stmt]:
        index = self._local("i")
        item = self._local("item")
        item_checks = self._compile(item_node, scope.child(cb.name(item), cb.name(index)))
        if not item_checks:
            return []
        return [cb.for_(cb.tuple_([cb.store(index), cb.store(item)]), iterable, item_checks)]

    # Objects

    def _compile_object(self, node: ObjectNode, scope: _Scope) -> list[ast.stmt]:
        checks: list[ast.stmt] = []

        received_count = cb.format_str("object with {} properties", cb.length(scope.value))
        if isinstance(node.min_properties, int):
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Lt(), cb.const(node.min_properties)),
                    scope,
                    "too_small",
                    f"object with at least {node.min_properties} properties",
                    received_count,
                )
            )
        if isinstance(node.max_properties, int):
            checks.append(
                self._issue_if(
                    cb.compare(cb.length(scope.value), ast.Gt(), cb.const(node.max_properties)),
                    scope,
                    "too_big",
                    f"object with at most {node.max_properties} properties",
                    received_count,
                )
            )

        for key in node.required:
            checks.append(
                self._issue_if(
                    cb.compare(cb.const(key), ast.NotIn(), scope.value),
                    scope,
                    "missing_key",
                    f'object with required property "{key}"',
                    cb.const(f'object without property "{key}"'),
                )
            )

        for prop in node.properties or []:
            if prop.type_node is None:
                continue
            prop_scope = scope.child(cb.subscript(scope.value, cb.const(prop.name)), cb.const(prop.name))
            prop_checks = self._compile(prop.type_node, prop_scope)
            if prop_checks:
                checks.append(cb.if_(cb.compare(cb.const(prop.name), ast.In(), scope.value), prop_checks))

        checks.extend(self._additional_properties_checks(node, scope))

        return self._type_check("object", scope, checks)

    def _additional_properties_checks(self, node: ObjectNode, scope: _Scope) -> list[ast.stmt]:
        """Checks for keys outside "properties"."""
        additional = node.additional_properties
        if additional is False and node.properties is None:
            return []
        if additional is not False and not isinstance(additional, SchemaNode):
            return []

        known = [prop.name for prop in node.properties or []]
        key = self._local("key")
        key_scope = scope.child(cb.subscript(scope.value, cb.name(key)), cb.name(key))
        is_unknown = cb.compare(cb.name(key), ast.NotIn(), cb.tuple_([cb.const(k) for k in known]))

        if additional is False:
            unknown_checks = self._issue(
                scope,
                "unrecognized_key",
                f"one of known properties ({', '.join(known)})",
                cb.call("str", cb.name(key)),
                path=key_scope.path_expr(),
            )
        else:
            unknown_checks = self._compile(additional, key_scope)
            if not unknown_checks:
                return []

        body: list[ast.stmt] = [cb.if_(is_unknown, unknown_checks)] if known else unknown_checks
        return [cb.for_(cb.store(key), scope.value, body)]
