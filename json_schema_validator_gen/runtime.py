"""
Runtime contract for generated validators.

Every generated module imports its result types and helpers from here
instead of redefining them, so results from different generated files
are interchangeable.

Usage:
    from generated.user import validateUser
    from json_schema_validator_gen.runtime import ValidationOptions, format_issues

    result = validateUser(payload, ValidationOptions(abort_early=True))
    if not result.success:
        print(format_issues(result.issues))
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")

ValidationIssueCode = Literal[
    "invalid_type",
    "invalid_value",
    "too_small",
    "too_big",
    "invalid_string",
    "not_integer",
    "not_unique",
    "unrecognized_key",
    "missing_key",
]

# A path is a sequence of property names and array indices
PathToken = str | int


@dataclass
class ValidationIssue:
    """A single validation failure."""

    code: ValidationIssueCode
    path: list[PathToken]
    message: str
    expected: str
    received: str

    def with_prefix(self, prefix: Sequence[PathToken]) -> ValidationIssue:
        """Copy of this issue located under prefix."""
        return ValidationIssue(
            code=self.code,
            path=[*prefix, *self.path],
            message=self.message,
            expected=self.expected,
            received=self.received,
        )


@dataclass
class ValidationSuccess(Generic[T]):
    data: T
    success: Literal[True] = True


@dataclass
class ValidationFailure:
    issues: list[ValidationIssue] = field(default_factory=list)
    success: Literal[False] = False


type ValidationResult[T] = ValidationSuccess[T] | ValidationFailure


@dataclass(frozen=True)
class ValidationOptions:
    """Options accepted by every generated validator."""

    # Return at the first issue instead of collecting all of them
    abort_early: bool = False


class ValidationError(ValueError):
    """Raised by the generated parse functions when validation fails."""

    def __init__(self, type_name: str, issues: list[ValidationIssue]):
        self.type_name = type_name
        self.issues = list(issues)
        super().__init__(f"Validation failed for {type_name}: {', '.join(issue.message for issue in self.issues)}")


def add_issue(
    issues: list[ValidationIssue],
    code: ValidationIssueCode,
    path: list[PathToken],
    expected: str,
    received: str,
) -> None:
    """Append an issue with the standard "Expected ..., received ..." message."""
    issues.append(
        ValidationIssue(
            code=code,
            path=path,
            message=f"Expected {expected}, received {received}",
            expected=expected,
            received=received,
        )
    )


def get_type(value: Any) -> str:
    """Get the JSON type name of a value (e.g., "null", "array", "object")."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def is_number(value: Any) -> bool:
    """Check if a value is a JSON number. Booleans are not numbers."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_integer(value: Any) -> bool:
    """Check if a value is a JSON number without a fractional part (1.0 counts)."""
    if not is_number(value):
        return False
    return isinstance(value, int) or value.is_integer()


def json_equals(left: Any, right: Any) -> bool:
    """
    Compare two values with JSON semantics.

    Unlike ==, booleans never equal numbers, and tuples compare equal to
    lists with the same items.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equals(a, b) for a, b in zip(left, right))
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equals(v, right[k]) for k, v in left.items())
    if isinstance(left, (list, tuple, dict)) or isinstance(right, (list, tuple, dict)):
        return False
    return left == right


def is_one_of(value: Any, allowed: Iterable[Any]) -> bool:
    """Check if a value equals any allowed value, with JSON semantics."""
    return any(json_equals(value, candidate) for candidate in allowed)


def stringify(value: Any) -> str:
    """Render a value for an issue description, as JSON when possible."""
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


def _freeze(value: Any) -> Any:
    """Hashable key such that equal keys mean JSON-equal values."""
    if isinstance(value, bool):
        return ("boolean", value)
    if is_number(value):
        return ("number", value)
    if isinstance(value, (list, tuple)):
        return ("array", tuple(_freeze(item) for item in value))
    if isinstance(value, dict):
        return ("object", frozenset((key, _freeze(item)) for key, item in value.items()))
    if value is None or isinstance(value, str):
        return (get_type(value), value)
    return ("other", repr(value))


def count_unique(values: Sequence[Any]) -> int:
    """Count distinct items with JSON semantics. Works with unhashable items."""
    return len({_freeze(value) for value in values})


def issue_path(issue: ValidationIssue) -> str:
    """
    Render an issue path as a string.

    Examples:
        ["users", 0, "name"] -> "users[0].name"
        [] -> ""
    """
    result = ""
    for index, part in enumerate(issue.path):
        if isinstance(part, int):
            result += f"[{part}]"
        elif index == 0:
            result = part
        else:
            result += f".{part}"
    return result


def flatten_issues(issues: list[ValidationIssue]) -> dict[str, Any]:
    """
    Group issue messages for form-style display.

    Returns:
        {"form_errors": [...], "field_errors": {path: [...]}} where form
        errors are the issues located at the root
    """
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for issue in issues:
        if not issue.path:
            form_errors.append(issue.message)
        else:
            field_errors.setdefault(issue_path(issue), []).append(issue.message)
    return {"form_errors": form_errors, "field_errors": field_errors}


def format_issues(issues: list[ValidationIssue]) -> str:
    """Format issues as one "[path] message" line each."""
    if not issues:
        return "No validation errors"

    lines = []
    for issue in issues:
        path = issue_path(issue)
        location = f"[{path}] " if path else ""
        lines.append(f"{location}{issue.message}")
    return "\n".join(lines)
