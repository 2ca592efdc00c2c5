"""
Pipeline orchestrator.

Runs the generation phases in order:

1. Dependency collection: expand the targets over their $ref graph
2. Name resolution: assign every name and reject collisions
3. Emission: one type declaration and one validator per pointer
4. Assembly: header, then all declarations, then all validators

Names are resolved for the whole run before anything is emitted, and
the output file is only written once assembly succeeded.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2

from .analyzer.dependency_collector import collect_dependencies
from .analyzer.name_resolver import NameRegistry, generate_parse_name, resolve_names
from .analyzer.reference_resolver import ROOT_POINTER, get_schema_at_path
from .analyzer.target_parser import Target, parse_targets
from .ast_backends import code_builder as cb
from .ast_backends.type_backend import TypeBackend
from .ast_backends.validator_backend import ValidatorBackend
from .atomic_writer import AtomicWriter, write_plain
from .config import GeneratorConfig
from .errors import GeneratorError, SchemaGenerationError
from .formatters import BlackFormatter
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent.resolve() / "templates"


@dataclass
class GeneratedEntry:
    """Generated code for one collected pointer."""

    pointer: str
    type_name: str
    validator_name: str
    is_exported: bool
    type_declaration: str
    validator_code: str


class PipelineGenerator:
    """Generates a validator module from a JSON Schema document."""

    def __init__(
        self,
        schema: Any,
        schema_path: str,
        targets: list[Target] | None = None,
        config: GeneratorConfig | None = None,
    ):
        """
        Initialize the generator.

        Args:
            schema: The raw JSON Schema document
            schema_path: Path of the schema file (names the root pointer)
            targets: Requested targets; defaults to the root pointer
            config: Generation options
        """
        self.schema = schema
        self.schema_path = schema_path
        self.targets = targets or [Target(path=ROOT_POINTER)]
        self.config = config or GeneratorConfig()
        self.registry: NameRegistry | None = None
        self.entries: list[GeneratedEntry] = []
        self.needs_re = False

        self.jinja_env = jinja2.Environment(lstrip_blocks=True, trim_blocks=True)
        self.prefix = self.jinja_env.from_string((TEMPLATES_DIR / "prefix.py.jinja2").read_text(encoding="utf-8"))

    def generate_entries(self) -> list[GeneratedEntry]:
        """
        Generate the code for every collected pointer.

        Returns:
            One entry per pointer, in dependency traversal order

        Raises:
            NameCollisionError: If two pointers would share a name
            PointerError: If a target does not resolve
            SchemaGenerationError: If code cannot be emitted for a pointer
        """
        pointers = collect_dependencies(self.schema, [target.path for target in self.targets])
        self.registry = resolve_names(pointers, self.targets, self.schema_path)

        parser = SchemaParser(self.schema)
        type_backend = TypeBackend(parser, self.registry)
        validator_backend = ValidatorBackend(parser, self.registry)

        entries = []
        for pointer in pointers:
            type_name = self.registry.type_name(pointer)
            validator_name = self.registry.validator_name(pointer)
            if type_name is None or validator_name is None:
                raise SchemaGenerationError(f'Internal error: no name registered for "{pointer}"')

            node = parser.parse(get_schema_at_path(self.schema, pointer), pointer)
            is_exported = self.registry.is_exported(pointer)
            logger.debug("Generating %s for %s", type_name, pointer)

            entries.append(
                GeneratedEntry(
                    pointer=pointer,
                    type_name=type_name,
                    validator_name=validator_name,
                    is_exported=is_exported,
                    type_declaration=cb.to_source(type_backend.generate(node, type_name, pointer)),
                    validator_code=cb.to_source(validator_backend.generate(node, validator_name, type_name, is_exported)),
                )
            )

        self.needs_re = validator_backend.needs_re
        self.entries = entries
        return entries

    def generate(self, command_line: str | None = None) -> str:
        """
        Generate the complete module source.

        Args:
            command_line: Command line recorded in the header comment;
                reconstructed from the active click context when omitted

        Returns:
            Python source of the generated module
        """
        entries = self.generate_entries()

        exported_names = []
        for entry in entries:
            if entry.is_exported:
                exported_names.extend([entry.type_name, entry.validator_name, generate_parse_name(entry.type_name)])

        prefix = self.prefix.render(
            generation_comment=self._generation_comment(command_line),
            needs_re=self.needs_re,
            typing_imports=cb.TYPING_IMPORTS,
            runtime_module=self.config.runtime_module,
            runtime_imports=cb.RUNTIME_IMPORTS,
            exported_names=exported_names,
        )

        sections = [
            prefix,
            "\n\n\n".join(entry.type_declaration for entry in entries),
            "\n\n\n".join(entry.validator_code for entry in entries),
        ]
        return "\n\n\n".join(section for section in sections if section) + "\n"

    def _generation_comment(self, command_line: str | None) -> str:
        """Header comment naming the tool and the command that produced the file."""
        if not self.config.add_generation_comment:
            return ""

        from .. import __version__
        from ..cli_utils import reconstruct_command_line
        from ..json_schema_validator_gen import json_schema_validator_gen as click_command

        if command_line is None:
            command_line = reconstruct_command_line(click_command)
        return f"# Generated by json_schema_validator_gen v{__version__} : {command_line}"


def load_schema(schema_path: str | Path) -> Any:
    """
    Read a JSON Schema document.

    Raises:
        GeneratorError: If the file cannot be read or is not valid JSON
    """
    try:
        with open(schema_path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise GeneratorError(f"Could not load schema {schema_path}: {e}") from e


def generate(
    schema_path: str | Path,
    output_path: str | Path,
    targets: list[str] | None = None,
    config: GeneratorConfig | None = None,
    command_line: str | None = None,
) -> list[GeneratedEntry]:
    """
    Generate a validator module from a schema file and write it.

    Targets are parsed before the schema is read, and nothing is written
    unless generation succeeds for every pointer.

    Args:
        schema_path: Path to the JSON Schema file
        output_path: Path of the module to write
        targets: Target specifiers (bare pointers or "path=...,name=...");
            defaults to the root pointer
        config: Generation options
        command_line: Command line recorded in the header comment

    Returns:
        The generated entries

    Raises:
        GeneratorError: If any phase fails
    """
    config = config or GeneratorConfig()
    parsed_targets = parse_targets(targets or [ROOT_POINTER])
    schema = load_schema(schema_path)

    generator = PipelineGenerator(schema, str(schema_path), parsed_targets, config)
    code = generator.generate(command_line)

    if config.formatter.enabled:
        code = BlackFormatter().format(code, config.formatter)

    output = Path(output_path)
    if config.output.atomic_write:
        AtomicWriter().write(output, code, validate=config.output.validate_before_write)
    else:
        write_plain(output, code)

    logger.info("Generated %d type(s) into %s", len(generator.entries), output)
    return generator.entries
