"""
Constraint validator for the supported schema subset.

Runs after reference resolution and before composition. This is a pure
predicate pass: it never modifies the document and stops at the first
violation so each diagnostic points at exactly one problem.
"""

from __future__ import annotations

import logging

from ..errors import (
    ConstWithoutTypeError,
    DiscriminatorWithoutUnionError,
    DuplicateEnumValueError,
    EmptyEnumError,
    RequiredPropertyMissingError,
    UnsupportedEnumValueTypeError,
    UnsupportedTopLevelArrayError,
    UnsupportedTopLevelKindError,
)
from ..schema_ast.nodes import NodeKind, SchemaDocument, SchemaNode

logger = logging.getLogger(__name__)

TOP_LEVEL_KINDS = frozenset({NodeKind.ALL_OF, NodeKind.ONE_OF, NodeKind.ANY_OF, NodeKind.OBJECT, NodeKind.MAP})


class ConstraintValidator:
    """Enforces the supported-subset rules on a resolved document."""

    def __init__(self, document: SchemaDocument):
        self.document = document

    def validate(self) -> None:
        """
        Validate the whole document.

        Raises:
            ConstraintError: On the first rule violation found
            StructuralError: If a top-level schema has an unsupported kind
        """
        for name, node in self.document.schemas.items():
            self._validate_top_level(name, node)

        for node in self.document.walk():
            self._validate_node(node)

        logger.debug("Validated %d top-level schemas", len(self.document.schemas))

    def _validate_top_level(self, name: str, node: SchemaNode) -> None:
        """Check that a top-level schema is an object or a composition."""
        if node.has_const and node.type is None:
            raise ConstWithoutTypeError(node.const, node.path)

        kind = node.kind
        if kind in TOP_LEVEL_KINDS:
            return
        if node.type == "array":
            raise UnsupportedTopLevelArrayError(name, node.path)
        found = f"'type: {node.type}'" if node.type else kind.value
        raise UnsupportedTopLevelKindError(name, found, node.path)

    def _validate_node(self, node: SchemaNode) -> None:
        """Apply every node-level rule."""
        if node.has_const and node.type is None:
            raise ConstWithoutTypeError(node.const, node.path)

        if node.kind is NodeKind.REF:
            # Checked where the target is defined
            return

        if node.enum is not None and not node.has_const:
            self._validate_enum(node)

        self._validate_required(node)

        if node.discriminator is not None and node.one_of is None and node.any_of is None:
            raise DiscriminatorWithoutUnionError(node.discriminator, node.path + ("discriminator",))

        if node.format is not None:
            # Formats are carried as metadata only
            logger.debug("Ignoring format '%s' at %s", node.format, node.path)

    def _validate_enum(self, node: SchemaNode) -> None:
        """Only non-empty string enums with distinct literals are supported."""
        if node.type is not None and node.type != "string":
            raise UnsupportedEnumValueTypeError(None, node.path + ("type",), schema_type=node.type)
        if not node.enum:
            raise EmptyEnumError(node.path + ("enum",))

        seen: set[str] = set()
        for i, value in enumerate(node.enum):
            if not isinstance(value, str):
                raise UnsupportedEnumValueTypeError(value, node.path + ("enum", i))
            if value in seen:
                raise DuplicateEnumValueError(value, node.path + ("enum", i))
            seen.add(value)

    def _validate_required(self, node: SchemaNode) -> None:
        """Every `required` entry must be declared in `properties`."""
        declared = node.properties or {}
        for i, name in enumerate(node.required):
            if name not in declared:
                raise RequiredPropertyMissingError(name, node.path + ("required", i))
