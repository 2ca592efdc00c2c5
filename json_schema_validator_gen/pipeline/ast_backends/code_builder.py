"""
Small builder over the stdlib ast module.

The compilers assemble statements and expressions with these helpers
and print them with ast.unparse, so their logic never depends on how
the final text is laid out.
"""

from __future__ import annotations

import ast
from typing import Any

# Names the generated module imports from typing
TYPING_IMPORTS = ("Any", "Literal", "NotRequired", "TypedDict", "cast")

# Names the generated module imports from the runtime module
RUNTIME_IMPORTS = (
    "ValidationError",
    "ValidationFailure",
    "ValidationIssue",
    "ValidationOptions",
    "ValidationResult",
    "ValidationSuccess",
    "add_issue",
    "count_unique",
    "get_type",
    "is_integer",
    "is_number",
    "is_one_of",
    "json_equals",
    "stringify",
)

# Locals every validator and parse function binds
FUNCTION_LOCALS = ("value", "options", "issues", "abort_early", "result")


def name(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Load())


def store(identifier: str) -> ast.Name:
    return ast.Name(id=identifier, ctx=ast.Store())


def const(value: Any) -> ast.Constant:
    return ast.Constant(value=value)


def literal(value: Any) -> ast.expr:
    """Build the expression for a JSON value (dicts and lists included)."""
    if isinstance(value, dict):
        return ast.Dict(keys=[const(k) for k in value], values=[literal(v) for v in value.values()])
    if isinstance(value, list):
        return ast.List(elts=[literal(v) for v in value], ctx=ast.Load())
    return const(value)


def call(func: str | ast.expr, *args: ast.expr, **kwargs: ast.expr) -> ast.Call:
    if isinstance(func, str):
        func = name(func)
    return ast.Call(
        func=func,
        args=list(args),
        keywords=[ast.keyword(arg=k, value=v) for k, v in kwargs.items()],
    )


def attr(value: ast.expr, attribute: str) -> ast.Attribute:
    return ast.Attribute(value=value, attr=attribute, ctx=ast.Load())


def subscript(value: ast.expr, index: ast.expr) -> ast.Subscript:
    return ast.Subscript(value=value, slice=index, ctx=ast.Load())


def list_(elts: list[ast.expr]) -> ast.List:
    return ast.List(elts=elts, ctx=ast.Load())


def tuple_(elts: list[ast.expr]) -> ast.Tuple:
    return ast.Tuple(elts=elts, ctx=ast.Load())


def not_(operand: ast.expr) -> ast.UnaryOp:
    return ast.UnaryOp(op=ast.Not(), operand=operand)


def compare(left: ast.expr, op: ast.cmpop, right: ast.expr) -> ast.Compare:
    return ast.Compare(left=left, ops=[op], comparators=[right])


def negate(test: ast.expr) -> ast.expr:
    """Negate a test, flipping "is"/"in" comparisons instead of prefixing "not"."""
    if isinstance(test, ast.Compare) and len(test.ops) == 1:
        flipped = {ast.Is: ast.IsNot, ast.In: ast.NotIn}.get(type(test.ops[0]))
        if flipped is not None:
            return compare(test.left, flipped(), test.comparators[0])
    return not_(test)


def or_(*values: ast.expr) -> ast.expr:
    if len(values) == 1:
        return values[0]
    return ast.BoolOp(op=ast.Or(), values=list(values))


def length(value: ast.expr) -> ast.Call:
    return call("len", value)


def format_str(template: str, *args: ast.expr) -> ast.Call:
    """Build a template.format(*args) call."""
    return call(attr(const(template), "format"), *args)


def union(types: list[ast.expr]) -> ast.expr:
    """Join type expressions with "|"."""
    result = types[0]
    for right in types[1:]:
        result = ast.BinOp(left=result, op=ast.BitOr(), right=right)
    return result


def assign(target: str, value: ast.expr, annotation: ast.expr | None = None) -> ast.stmt:
    if annotation is not None:
        return ast.AnnAssign(target=store(target), annotation=annotation, value=value, simple=1)
    return ast.Assign(targets=[store(target)], value=value)


def expr_stmt(value: ast.expr) -> ast.Expr:
    return ast.Expr(value=value)


def return_(value: ast.expr | None) -> ast.Return:
    return ast.Return(value=value)


def if_(test: ast.expr, body: list[ast.stmt], orelse: list[ast.stmt] | None = None) -> ast.If:
    return ast.If(test=test, body=body, orelse=orelse or [])


def for_(target: ast.expr, iterable: ast.expr, body: list[ast.stmt]) -> ast.For:
    return ast.For(target=target, iter=iterable, body=body, orelse=[])


def func_def(
    func_name: str,
    params: list[tuple[str, ast.expr | None, ast.expr | None]],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    docstring: str | None = None,
) -> ast.FunctionDef:
    """
    Build a function definition.

    Args:
        func_name: Name of the function
        params: (name, annotation, default) per positional parameter.
            Parameters with a default must come last.
        body: Function body
        returns: Return annotation
        docstring: Optional docstring placed first in the body
    """
    if docstring:
        body = [expr_stmt(const(docstring)), *body]
    defaults = [default for _, _, default in params if default is not None]
    return ast.FunctionDef(
        name=func_name,
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=param, annotation=annotation) for param, annotation, _ in params],
            vararg=None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults,
        ),
        body=body or [ast.Pass()],
        decorator_list=[],
        returns=returns,
        type_params=[],
    )


def class_def(class_name: str, bases: list[ast.expr], body: list[ast.stmt]) -> ast.ClassDef:
    return ast.ClassDef(
        name=class_name,
        bases=bases,
        keywords=[],
        body=body or [ast.Pass()],
        decorator_list=[],
        type_params=[],
    )


def type_alias(alias_name: str, value: ast.expr) -> ast.TypeAlias:
    return ast.TypeAlias(name=store(alias_name), type_params=[], value=value)


def parse_expr(source: str) -> ast.expr:
    """Parse an expression string into an AST expression."""
    return ast.parse(source, mode="eval").body


def to_source(statements: list[ast.stmt]) -> str:
    """Print statements as source, separating top-level definitions by two blank lines."""
    chunks = []
    for statement in statements:
        module = ast.Module(body=[statement], type_ignores=[])
        ast.fix_missing_locations(module)
        chunks.append(ast.unparse(module))
    return "\n\n\n".join(chunks)
