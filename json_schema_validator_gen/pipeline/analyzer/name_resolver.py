"""
Name resolution for collected pointers.

Assigns a type name, a validator name and (for exported pointers) a
parse function name to every collected pointer, and rejects any run in
which two of those module-level names would clash. The registry is built
completely before any code is emitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ...utils import to_identifier, to_pascal_case
from ..ast_backends.code_builder import FUNCTION_LOCALS, RUNTIME_IMPORTS, TYPING_IMPORTS
from ..errors import NameCollisionError
from .reference_resolver import ROOT_POINTER, last_segment
from .target_parser import Target

# Module-level names the generated module binds through its imports
RESERVED_NAMES = frozenset((*TYPING_IMPORTS, *RUNTIME_IMPORTS, *FUNCTION_LOCALS, "re", "annotations"))

COLLISION_HINT = 'Please specify unique names using --target format "path=<pointer>,name=<Name>".'


def generate_validator_name(type_name: str) -> str:
    """Get the validator function name for a type (e.g., "User" -> "validateUser")."""
    return f"validate{type_name[:1].upper()}{type_name[1:]}"


def generate_parse_name(type_name: str) -> str:
    """Get the throwing companion name for a type (e.g., "User" -> "parseUser")."""
    return f"parse{type_name[:1].upper()}{type_name[1:]}"


def derive_root_name(schema_path: str) -> str:
    """Derive a type name from the schema file name (e.g., "user-profile.json" -> "UserProfile")."""
    return to_identifier(to_pascal_case(Path(schema_path).stem))


def derive_type_name(pointer: str) -> str:
    """Derive a type name from the last pointer segment (e.g., "#/$defs/blog-post" -> "BlogPost")."""
    return to_identifier(to_pascal_case(last_segment(pointer)))


@dataclass
class NameRegistry:
    """Names assigned to every collected pointer."""

    # Pointer -> type name
    types: dict[str, str] = field(default_factory=dict)

    # Type name -> pointer (injective, used for collision detection)
    names: dict[str, str] = field(default_factory=dict)

    # Pointer -> validator name
    validators: dict[str, str] = field(default_factory=dict)

    # Pointers requested as targets
    exported: set[str] = field(default_factory=set)

    # Every module-level name claimed so far, mapped to what owns it
    used_names: dict[str, str] = field(default_factory=dict)

    def type_name(self, pointer: str) -> str | None:
        return self.types.get(pointer)

    def validator_name(self, pointer: str) -> str | None:
        return self.validators.get(pointer)

    def is_exported(self, pointer: str) -> bool:
        return pointer in self.exported

    def claim(self, module_name: str, owner: str) -> None:
        """
        Claim a module-level name for an owner.

        Raises:
            NameCollisionError: If the name is reserved or already claimed
        """
        if module_name in RESERVED_NAMES or module_name.startswith("_"):
            raise NameCollisionError(
                f'Name "{module_name}" derived for "{owner}" is reserved by the generated module. {COLLISION_HINT}'
            )
        existing = self.used_names.get(module_name)
        if existing is not None and existing != owner:
            raise NameCollisionError(f'Name collision: "{module_name}" is used by both "{existing}" and "{owner}". {COLLISION_HINT}')
        self.used_names[module_name] = owner

    def unique_name(self, base_name: str, owner: str) -> str:
        """Claim the first free name among base_name, base_name2, base_name3, ..."""
        candidate = base_name
        counter = 2
        while candidate in self.used_names or candidate in RESERVED_NAMES:
            candidate = f"{base_name}{counter}"
            counter += 1
        self.used_names[candidate] = owner
        return candidate


def resolve_names(pointers: list[str], targets: list[Target], schema_path: str) -> NameRegistry:
    """
    Assign names to every collected pointer.

    Args:
        pointers: Collected pointers, in traversal order
        targets: The requested targets (explicit names and export flags)
        schema_path: Path of the schema file, used to name the root pointer

    Returns:
        The completed NameRegistry

    Raises:
        NameCollisionError: If two pointers share a type name, two type names
            share a validator name, or a name is reserved
    """
    registry = NameRegistry()
    explicit_names = {target.path: target.name for target in targets if target.name}
    registry.exported = {target.path for target in targets}

    for pointer in pointers:
        if pointer in explicit_names:
            type_name = explicit_names[pointer]
        elif pointer == ROOT_POINTER:
            type_name = derive_root_name(schema_path)
        else:
            type_name = derive_type_name(pointer)

        existing = registry.names.get(type_name)
        if existing is not None and existing != pointer:
            raise NameCollisionError(f'Type name collision: "{type_name}" is used by both "{existing}" and "{pointer}". {COLLISION_HINT}')

        registry.claim(type_name, pointer)
        registry.names[type_name] = pointer
        registry.types[pointer] = type_name

    # Function names are claimed once every type name is known
    for pointer, type_name in registry.types.items():
        validator_name = generate_validator_name(type_name)
        registry.claim(validator_name, pointer)
        registry.validators[pointer] = validator_name
        if registry.is_exported(pointer):
            registry.claim(generate_parse_name(type_name), pointer)

    return registry
