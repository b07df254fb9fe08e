"""
Utility functions for AsyncAPI to Code generator.
"""

import keyword
import re
from collections.abc import Sequence

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

_SCHEMAS_POINTER_PREFIX = "#/components/schemas/"


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens, dots) to spaces."""
    return text.replace("_", " ").replace("-", " ").replace(".", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "userId" -> "UserId"
        "first 3 rows" -> "First3Rows"
        "ABC" -> "Abc"

    Args:
        text: The text to convert (snake_case, camelCase, UPPER_SNAKE_CASE, or space-separated)

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def pascal_to_snake_case(text: str) -> str:
    """Convert PascalCase or camelCase text to snake_case.

    Examples:
        "RequestBase" -> "request_base"
        "userId" -> "user_id"
        "module_version_id" -> "module_version_id"
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return "_".join(word.lower() for word in words if word)


def to_python_identifier(text: str) -> str:
    """Convert a JSON property name to a valid snake_case Python identifier."""
    name = pascal_to_snake_case(text) or "field"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def to_class_name(text: str) -> str:
    """Convert a type name to a valid Python class name.

    Valid identifiers are kept as they are; anything else is PascalCased.

    Examples:
        "GetUser" -> "GetUser"
        "user-signedup" -> "UserSignedup"
        "User Info" -> "UserInfo"
    """
    name = text
    if not name.isidentifier():
        name = snake_to_pascal_case(text) or "Model"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def to_constant_name(value: str) -> str:
    """Convert an enum literal to an UPPER_SNAKE_CASE member name."""
    name = pascal_to_snake_case(value).upper() or "EMPTY"
    if name[0].isdigit():
        name = f"_{name}"
    return name


def escape_pointer_token(token: str) -> str:
    """Escape a single JSON pointer reference token (RFC 6901)."""
    return token.replace("~", "~0").replace("/", "~1")


def unescape_pointer_token(token: str) -> str:
    """Unescape a single JSON pointer reference token (RFC 6901)."""
    return token.replace("~1", "/").replace("~0", "~")


def format_pointer(path: Sequence[str | int]) -> str:
    """Render a schema path as a local JSON pointer.

    Examples:
        () -> "#"
        ("components", "schemas", "GetUser", "allOf", 1) -> "#/components/schemas/GetUser/allOf/1"
    """
    if not path:
        return "#"
    return "#/" + "/".join(escape_pointer_token(str(step)) for step in path)


def schema_pointer(name: str) -> str:
    """Build the `$ref` pointer for a top-level `components/schemas` entry."""
    return _SCHEMAS_POINTER_PREFIX + escape_pointer_token(name)
