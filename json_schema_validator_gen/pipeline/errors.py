"""
Exceptions raised by the generator pipeline.

Every fatal condition aborts the run before any output is written.
Non-fatal conditions are logged as warnings instead.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all generation failures."""


class PointerError(GeneratorError):
    """Raised when a pointer is malformed or does not resolve in the schema."""


class TargetParseError(GeneratorError):
    """Raised when a --target specifier cannot be parsed."""


class NameCollisionError(GeneratorError):
    """Raised when two pointers would be generated under the same name.

    This can happen when:
    - Two pointers derive the same type name (e.g. "User" and "user")
    - Two type names derive the same validator name
    - A derived name would shadow a name imported by the generated module
    """


class SchemaGenerationError(GeneratorError):
    """Raised when code cannot be emitted for a collected pointer."""
