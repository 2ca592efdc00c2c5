"""
Utility functions for the JSON Schema validator generator.
"""

import keyword
import re

# Separators between words in file names and pointer segments
_SEPARATOR_PATTERN = re.compile(r"[-_.]+")

# Characters that cannot appear in a Python identifier
_INVALID_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")


def _split_into_words(text: str) -> list[str]:
    """Split text on separators, dropping the empty parts runs of separators leave."""
    return [part for part in _SEPARATOR_PATTERN.split(text) if part]


def _capitalize_first(word: str) -> str:
    """Uppercase the first character only, keeping the rest untouched."""
    return word[:1].upper() + word[1:]


def to_pascal_case(text: str) -> str:
    """Convert kebab-case, snake_case or dotted text to PascalCase.

    Only the first letter of each word changes, so camelCase input keeps
    its inner capitals.

    Examples:
        "blog-post" -> "BlogPost"
        "user_profile" -> "UserProfile"
        "user--profile" -> "UserProfile"
        "user.schema" -> "UserSchema"
        "userProfile" -> "UserProfile"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    return "".join(_capitalize_first(word) for word in _split_into_words(text))


def to_identifier(name: str) -> str:
    """Make a derived name usable as a Python identifier.

    Examples:
        "User$Info" -> "UserInfo"
        "3dPoint" -> "Schema3dPoint"
        "None" -> "NoneType"
        "" -> "Schema"
    """
    name = _INVALID_IDENTIFIER_CHARS.sub("", name)
    if not name:
        return "Schema"
    if name[0].isdigit():
        name = f"Schema{name}"
    if keyword.iskeyword(name):
        name = f"{name}Type"
    return name
