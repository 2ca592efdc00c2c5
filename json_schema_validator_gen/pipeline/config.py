"""
Configuration for the validator generator pipeline.

Loaded from the optional JSON file given with --config. Unknown keys are
ignored so a config can be shared with newer versions.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields

DEFAULT_RUNTIME_MODULE = "json_schema_validator_gen.runtime"


@dataclass
class OutputConfig:
    """How the generated module reaches the disk.

    Attributes:
        validate_before_write: Refuse to write source that does not parse
        atomic_write: Stage the module and rename it over the destination
    """

    validate_before_write: bool = True
    atomic_write: bool = True


@dataclass
class FormatterConfig:
    """Options passed to black when formatting is on."""

    enabled: bool = False
    line_length: int = 100

    # black target version name, e.g. "py312"
    target_version: str = "py312"

    string_normalization: bool = True
    magic_trailing_comma: bool = True


@dataclass
class GeneratorConfig:
    """Configuration options for validator generation."""

    # Header comment with the tool version and command line
    add_generation_comment: bool = True

    # Module the generated code imports the runtime contract from
    runtime_module: str = DEFAULT_RUNTIME_MODULE

    formatter: FormatterConfig = field(default_factory=FormatterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """
        Build a config from parsed JSON.

        Raises:
            TypeError: If a nested section has an unknown key
        """
        nested = {"formatter": FormatterConfig, "output": OutputConfig}
        known = {f.name for f in fields(GeneratorConfig)}

        values = {}
        for key, value in d.items():
            if key not in known:
                continue
            if key in nested:
                if isinstance(value, dict):
                    values[key] = nested[key](**value)
            else:
                values[key] = value
        return GeneratorConfig(**values)

    def to_dict(self) -> dict:
        """Plain-dict form, suitable for writing a config file."""
        return asdict(self)
