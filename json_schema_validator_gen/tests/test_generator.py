"""
Tests for the pipeline orchestrator and the assembled module.
"""

from __future__ import annotations

import ast
import json

import pytest

from json_schema_validator_gen import __version__
from json_schema_validator_gen.pipeline import (
    GeneratorConfig,
    GeneratorError,
    NameCollisionError,
    PipelineGenerator,
    PointerError,
    TargetParseError,
    generate,
)
from json_schema_validator_gen.pipeline.analyzer import Target

SCHEMA = {
    "type": "object",
    "properties": {"user": {"$ref": "#/definitions/User"}, "email": {"type": "string", "pattern": "@"}},
    "definitions": {
        "User": {"type": "object", "properties": {"name": {"type": "string"}}},
        "user": {"type": "string"},
        "Group": {"type": "object", "properties": {"owner": {"$ref": "#/definitions/User"}}},
    },
}


def write_schema(tmp_path, schema=SCHEMA, name="account.json"):
    path = tmp_path / name
    path.write_text(json.dumps(schema), encoding="utf-8")
    return path


class TestPipelineGenerator:
    """Test cases for module assembly"""

    def test_entries_follow_traversal_order(self):
        generator = PipelineGenerator(SCHEMA, "account.json", [Target(path="#/definitions/Group")])
        entries = generator.generate_entries()
        assert [(e.pointer, e.type_name, e.is_exported) for e in entries] == [
            ("#/definitions/Group", "Group", True),
            ("#/definitions/User", "User", False),
        ]
        assert entries[1].validator_name == "validateUser"

    def test_module_layout(self):
        code = PipelineGenerator(SCHEMA, "account.json", [Target(path="#/definitions/Group")]).generate(command_line="test")
        lines = code.splitlines()

        assert lines[0] == f"# Generated by json_schema_validator_gen v{__version__} : test"
        assert "from __future__ import annotations" in lines
        assert "from json_schema_validator_gen.runtime import (" in lines
        # Declarations come before every validator
        assert code.index("class User(TypedDict)") < code.index("def validateGroup(")
        assert code.index("def validateGroup(") < code.index("def validateUser(")
        assert code.endswith("\n")
        ast.parse(code)

    def test_all_lists_exported_names(self):
        code = PipelineGenerator(SCHEMA, "account.json", [Target(path="#/definitions/Group")]).generate(command_line="test")
        module = ast.parse(code)
        [all_assign] = [node for node in module.body if isinstance(node, ast.Assign) and node.targets[0].id == "__all__"]
        assert ast.literal_eval(all_assign.value) == ["Group", "validateGroup", "parseGroup"]

    def test_re_imported_only_when_needed(self):
        with_pattern = PipelineGenerator(SCHEMA, "account.json").generate(command_line="test")
        without_pattern = PipelineGenerator({"type": "string"}, "token.json").generate(command_line="test")
        assert "\nimport re\n" in with_pattern
        assert "import re" not in without_pattern

    def test_generation_comment_can_be_disabled(self):
        config = GeneratorConfig(add_generation_comment=False)
        code = PipelineGenerator({"type": "string"}, "token.json", config=config).generate()
        assert code.startswith("from __future__ import annotations\n")

    def test_custom_runtime_module(self):
        config = GeneratorConfig(runtime_module="app.validation")
        code = PipelineGenerator({"type": "string"}, "token.json", config=config).generate(command_line="test")
        assert "from app.validation import (" in code

    def test_command_line_defaults_to_program_name(self):
        code = PipelineGenerator({"type": "string"}, "token.json").generate()
        assert code.splitlines()[0].endswith(" : json_schema_validator_gen")


class TestGenerate:
    def test_writes_module(self, tmp_path):
        output = tmp_path / "account_validators.py"
        entries = generate(write_schema(tmp_path), output, command_line="test")
        assert [entry.type_name for entry in entries] == ["Account", "User"]
        assert "def validateAccount(" in output.read_text()

    def test_collision_writes_nothing(self, tmp_path):
        output = tmp_path / "out.py"
        with pytest.raises(NameCollisionError, match="collision"):
            generate(write_schema(tmp_path), output, ["#/definitions/User", "#/definitions/user"])
        assert not output.exists()

    def test_unresolvable_target_writes_nothing(self, tmp_path):
        output = tmp_path / "out.py"
        with pytest.raises(PointerError, match="#/definitions/Missing"):
            generate(write_schema(tmp_path), output, ["#/definitions/Missing"])
        assert not output.exists()

    def test_targets_are_parsed_before_the_schema_is_read(self, tmp_path):
        with pytest.raises(TargetParseError):
            generate(tmp_path / "does-not-exist.json", tmp_path / "out.py", ["name=Orphan"])

    def test_unreadable_schema(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        with pytest.raises(GeneratorError, match="Could not load schema"):
            generate(broken, tmp_path / "out.py")

    def test_existing_output_is_replaced(self, tmp_path):
        output = tmp_path / "out.py"
        output.write_text("stale = True\n")
        generate(write_schema(tmp_path, {"type": "string"}, "token.json"), output, command_line="test")
        assert "stale" not in output.read_text()
        assert "def validateToken(" in output.read_text()

    def test_plain_write(self, tmp_path):
        config = GeneratorConfig.from_dict({"output": {"atomic_write": False}})
        output = tmp_path / "out.py"
        generate(write_schema(tmp_path, {"type": "string"}, "token.json"), output, config=config, command_line="test")
        assert "def parseToken(" in output.read_text()
