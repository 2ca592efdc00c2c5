"""
Tests for $ref dependency collection.
"""

from __future__ import annotations

import logging

from json_schema_validator_gen.pipeline.analyzer.dependency_collector import collect_dependencies, extract_refs

SCHEMA = {
    "type": "object",
    "properties": {"owner": {"$ref": "#/definitions/User"}},
    "definitions": {
        "User": {
            "type": "object",
            "properties": {
                "groups": {"type": "array", "items": {"$ref": "#/definitions/Group"}},
            },
        },
        "Group": {
            "type": "object",
            "properties": {
                "members": {"type": "array", "items": {"$ref": "#/definitions/User"}},
                "parent": {"oneOf": [{"type": "null"}, {"$ref": "#/definitions/Group"}]},
            },
        },
        "Unused": {"type": "string"},
    },
}


class TestExtractRefs:
    def test_walks_nested_objects_and_lists(self):
        refs = extract_refs(SCHEMA["definitions"]["Group"])
        assert refs == ["#/definitions/User", "#/definitions/Group"]

    def test_external_refs_are_skipped_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            refs = extract_refs({"properties": {"a": {"$ref": "common.json#/definitions/A"}}})
        assert refs == []
        assert "External reference not supported" in caplog.text


class TestCollectDependencies:
    def test_transitive_closure_in_traversal_order(self):
        pointers = collect_dependencies(SCHEMA, ["#/definitions/User"])
        assert pointers == ["#/definitions/User", "#/definitions/Group"]

    def test_cycles_terminate(self):
        pointers = collect_dependencies(SCHEMA, ["#/definitions/Group", "#/definitions/User"])
        assert pointers == ["#/definitions/Group", "#/definitions/User"]

    def test_root_target(self):
        pointers = collect_dependencies(SCHEMA, ["#"])
        assert pointers[0] == "#"
        assert set(pointers) == {"#", "#/definitions/User", "#/definitions/Group"}

    def test_unresolvable_reference_abandons_branch(self, caplog):
        schema = {
            "definitions": {
                "A": {
                    "properties": {
                        "b": {"$ref": "#/definitions/Missing"},
                        "c": {"$ref": "#/definitions/C"},
                    }
                },
                "C": {"type": "string"},
            }
        }
        with caplog.at_level(logging.WARNING):
            pointers = collect_dependencies(schema, ["#/definitions/A"])

        assert pointers == ["#/definitions/A", "#/definitions/C"]
        assert "#/definitions/Missing" in caplog.text

    def test_unresolvable_target_is_kept(self):
        # The target itself stays in the set so generation reports it
        pointers = collect_dependencies(SCHEMA, ["#/definitions/Missing"])
        assert pointers == ["#/definitions/Missing"]
