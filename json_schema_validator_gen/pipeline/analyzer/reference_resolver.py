"""
Pointer parsing and resolution.

Pointers are root-relative reference strings of the form "#/a/b/c".
They are resolved against the raw schema document, segment by segment.
"""

from __future__ import annotations

from typing import Any

from ..errors import PointerError

ROOT_POINTER = "#"
POINTER_PREFIX = "#/"


def is_local_ref(ref: str) -> bool:
    """Check if a $ref value points inside the current document."""
    return ref == ROOT_POINTER or ref.startswith(POINTER_PREFIX)


def parse_ref(ref: str) -> list[str]:
    """
    Parse a pointer string into path segments.

    Args:
        ref: A pointer string (e.g., "#/$defs/User")

    Returns:
        List of path segments (e.g., ["$defs", "User"])

    Raises:
        PointerError: If the pointer does not start with "#/" or has an empty path
    """
    if not ref.startswith(POINTER_PREFIX):
        raise PointerError(f'Invalid reference format: "{ref}". Must start with "{POINTER_PREFIX}"')

    path = ref[len(POINTER_PREFIX) :]
    if not path:
        raise PointerError(f'Invalid reference format: "{ref}". Path cannot be empty')

    return path.split("/")


def get_schema_at_path(root_schema: Any, ref: str) -> Any:
    """
    Resolve a pointer against the raw schema document.

    The bare root pointer "#" resolves to the document itself.

    Args:
        root_schema: The raw JSON Schema document
        ref: A pointer string (e.g., "#/$defs/User")

    Returns:
        The raw value found at the pointer

    Raises:
        PointerError: If the pointer is malformed or a segment cannot be traversed
    """
    if ref == ROOT_POINTER:
        return root_schema

    current = root_schema
    for segment in parse_ref(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise PointerError(f'Schema not found at path: "{ref}". Missing key "{segment}"')
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit() or int(segment) >= len(current):
                raise PointerError(f'Schema not found at path: "{ref}". Invalid index "{segment}"')
            current = current[int(segment)]
        else:
            raise PointerError(f'Schema not found at path: "{ref}". Cannot traverse through non-object at segment "{segment}"')

    return current


def last_segment(ref: str) -> str:
    """Get the final path segment of a pointer (e.g., "User" for "#/$defs/User")."""
    segments = parse_ref(ref)
    if not segments[-1]:
        raise PointerError(f'Cannot derive a name from empty path segment: "{ref}"')
    return segments[-1]
