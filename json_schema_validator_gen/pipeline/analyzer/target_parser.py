"""
Parser for --target specifiers.

Two formats are accepted:

1. A bare pointer: "#/$defs/User"
2. Key-value pairs: "path=#/$defs/User,name=Account"
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass

from ..errors import TargetParseError

KNOWN_PARAMS = ("path", "name")


@dataclass
class Target:
    """A user-requested generation unit."""

    path: str = ""
    name: str | None = None  # Explicit type name, overrides the derived one


def parse_target(target: str) -> Target:
    """
    Parse a target string into a Target.

    Args:
        target: Target string to parse

    Returns:
        Parsed Target

    Raises:
        TargetParseError: If the key-value form is malformed, misses "path",
            uses unknown keys or gives an invalid name
    """
    if "=" not in target:
        return Target(path=target)

    params: dict[str, str] = {}
    for pair in target.split(","):
        if "=" not in pair:
            raise TargetParseError(f'Invalid target format: "{pair}". Expected "key=value" format.')

        key, value = pair.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key or not value:
            raise TargetParseError(f'Invalid target format: "{pair}". Key and value cannot be empty.')

        params[key] = value

    unknown = [key for key in params if key not in KNOWN_PARAMS]
    if unknown:
        raise TargetParseError(f"Unknown target parameters: {', '.join(unknown)}. Valid parameters are: {', '.join(KNOWN_PARAMS)}")

    if "path" not in params:
        raise TargetParseError(f'Invalid target format: "path" parameter is required. Got: "{target}"')

    name = params.get("name")
    if name is not None and (not name.isidentifier() or keyword.iskeyword(name)):
        raise TargetParseError(f'Invalid target name: "{name}" is not a valid Python identifier')

    return Target(path=params["path"], name=name)


def parse_targets(targets: list[str]) -> list[Target]:
    """Parse multiple target strings."""
    return [parse_target(target) for target in targets]
