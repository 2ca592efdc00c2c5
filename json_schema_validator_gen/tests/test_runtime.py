"""
Tests for the runtime contract shared by generated modules.
"""

from __future__ import annotations

import pytest

from json_schema_validator_gen.runtime import (
    ValidationError,
    ValidationFailure,
    ValidationIssue,
    ValidationOptions,
    ValidationSuccess,
    add_issue,
    count_unique,
    flatten_issues,
    format_issues,
    get_type,
    is_integer,
    is_number,
    is_one_of,
    issue_path,
    json_equals,
    stringify,
)


def make_issue(path, message="Expected string, received number"):
    return ValidationIssue(code="invalid_type", path=path, message=message, expected="string", received="number")


class TestTypeHelpers:
    def test_get_type(self):
        assert get_type(None) == "null"
        assert get_type(True) == "boolean"
        assert get_type(1.5) == "number"
        assert get_type("a") == "string"
        assert get_type([]) == "array"
        assert get_type({}) == "object"

    def test_booleans_are_not_numbers(self):
        assert is_number(3)
        assert not is_number(True)
        assert not is_integer(False)

    def test_is_integer(self):
        assert is_integer(2)
        assert is_integer(2.0)
        assert not is_integer(2.5)
        assert not is_integer("2")


class TestEquality:
    def test_json_equals(self):
        assert json_equals({"a": [1, 2]}, {"a": (1, 2)})
        assert not json_equals(1, True)
        assert not json_equals(0, False)
        assert not json_equals([1], {"0": 1})
        assert json_equals(1, 1.0)

    def test_is_one_of(self):
        assert is_one_of("b", ["a", "b"])
        assert not is_one_of(True, [1, "true"])

    def test_count_unique(self):
        assert count_unique(["a", "b", "a"]) == 2
        assert count_unique([{"a": 1}, {"a": 1}, [1], [1]]) == 2
        assert count_unique([1, True, 1.0]) == 2

    def test_stringify(self):
        assert stringify("é") == '"é"'
        assert stringify(None) == "null"
        assert stringify({1, 2}).startswith("{")


class TestIssues:
    def test_add_issue_message(self):
        issues = []
        add_issue(issues, "too_small", ["age"], "number >= 0", "-1")
        assert issues == [
            ValidationIssue(
                code="too_small",
                path=["age"],
                message="Expected number >= 0, received -1",
                expected="number >= 0",
                received="-1",
            )
        ]

    def test_with_prefix(self):
        issue = make_issue(["name"]).with_prefix(["users", 0])
        assert issue.path == ["users", 0, "name"]

    def test_issue_path(self):
        assert issue_path(make_issue(["users", 0, "name"])) == "users[0].name"
        assert issue_path(make_issue([0, "id"])) == "[0].id"
        assert issue_path(make_issue([])) == ""

    def test_flatten_issues(self):
        issues = [make_issue([], "root problem"), make_issue(["a"], "first"), make_issue(["a"], "second")]
        assert flatten_issues(issues) == {"form_errors": ["root problem"], "field_errors": {"a": ["first", "second"]}}

    def test_format_issues(self):
        assert format_issues([]) == "No validation errors"
        text = format_issues([make_issue(["users", 1]), make_issue([], "bad root")])
        assert text == "[users[1]] Expected string, received number\nbad root"


class TestResults:
    def test_result_variants(self):
        assert ValidationSuccess({"a": 1}).success is True
        assert ValidationFailure([]).success is False

    def test_default_options(self):
        assert ValidationOptions().abort_early is False

    def test_validation_error(self):
        error = ValidationError("User", [make_issue(["name"])])
        assert isinstance(error, ValueError)
        assert error.type_name == "User"
        assert str(error) == "Validation failed for User: Expected string, received number"
        with pytest.raises(ValidationError):
            raise error
