"""
Node definitions for the raw schema document.

These nodes represent the parsed structure of `components/schemas` before
any reference resolution, validation or naming. They are purely structural:
`$ref` pointers are kept as-is and nodes carry no business logic beyond
classifying their own shape.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SCHEMA_TYPES = ("object", "array", "string", "integer", "number", "boolean", "null")

PRIMITIVE_TYPES = ("string", "integer", "number", "boolean", "null")


class NodeKind(Enum):
    """Shape of a schema node."""

    REF = "ref"  # {"$ref": ...}
    CONST = "const"  # typed const literal
    ENUM = "enum"  # enum of literals
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"
    OBJECT = "object"  # object with declared properties
    MAP = "map"  # object without properties: string-keyed map
    TUPLE = "tuple"  # array with prefixItems
    ARRAY = "array"
    PRIMITIVE = "primitive"  # string, integer, number, boolean, null
    ANY = "any"  # no type information at all


# Kinds that become a named type in the type model
NAMED_KINDS = frozenset({NodeKind.ENUM, NodeKind.ALL_OF, NodeKind.ONE_OF, NodeKind.ANY_OF, NodeKind.OBJECT})

# Kinds whose fields can be flattened into an entity
OBJECT_KINDS = frozenset({NodeKind.OBJECT, NodeKind.ALL_OF})


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """One parsed JSON-Schema object.

    Nodes compare and hash by identity: two structurally identical schemas at
    different positions are still distinct nodes.
    """

    # Steps from the document root (for error messages)
    path: tuple[str | int, ...] = ()

    title: str | None = None
    description: str | None = None
    type: str | None = None
    format: str | None = None

    # `null` is a legal const, so presence is tracked separately
    const: Any = None
    has_const: bool = False

    enum: tuple[Any, ...] | None = None

    properties: Mapping[str, SchemaNode] | None = None
    required: tuple[str, ...] = ()
    # None when absent, otherwise a bool or a schema for the values
    additional_properties: bool | SchemaNode | None = None

    items: bool | SchemaNode | None = None
    prefix_items: tuple[SchemaNode, ...] | None = None

    all_of: tuple[SchemaNode, ...] | None = None
    one_of: tuple[SchemaNode, ...] | None = None
    any_of: tuple[SchemaNode, ...] | None = None
    discriminator: str | None = None

    ref: str | None = None

    # Raw schema mapping for reference
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def kind(self) -> NodeKind:
        """Classify the node by shape."""
        if self.ref is not None:
            return NodeKind.REF
        if self.all_of is not None:
            return NodeKind.ALL_OF
        if self.one_of is not None:
            return NodeKind.ONE_OF
        if self.any_of is not None:
            return NodeKind.ANY_OF
        if self.has_const:
            return NodeKind.CONST
        if self.enum is not None:
            return NodeKind.ENUM
        if self.type == "object" or (self.type is None and self.properties is not None):
            return NodeKind.OBJECT if self.properties is not None else NodeKind.MAP
        if self.type == "array":
            return NodeKind.TUPLE if self.prefix_items is not None else NodeKind.ARRAY
        if self.type in PRIMITIVE_TYPES:
            return NodeKind.PRIMITIVE
        return NodeKind.ANY

    @property
    def is_named(self) -> bool:
        """Whether the node becomes an Entity, EnumType or UnionType."""
        return self.kind in NAMED_KINDS

    @property
    def composition(self) -> tuple[SchemaNode, ...]:
        """Members of the allOf/oneOf/anyOf composition, empty otherwise."""
        return self.all_of or self.one_of or self.any_of or ()

    def children(self) -> Iterator[SchemaNode]:
        """Yield every directly nested schema node in document order."""
        if self.properties:
            yield from self.properties.values()
        if isinstance(self.additional_properties, SchemaNode):
            yield self.additional_properties
        if isinstance(self.items, SchemaNode):
            yield self.items
        if self.prefix_items:
            yield from self.prefix_items
        yield from self.composition


@dataclass(frozen=True)
class SchemaDocument:
    """Root of the parsed document: the `components/schemas` section."""

    schemas: Mapping[str, SchemaNode] = field(default_factory=dict)

    # Path of the schemas section from the document root
    schemas_path: tuple[str, ...] = ("components", "schemas")

    def walk(self) -> Iterator[SchemaNode]:
        """Yield every node once, depth first, top-level schemas in document order."""
        seen: set[int] = set()
        stack = list(reversed(list(self.schemas.values())))
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            stack.extend(reversed(list(node.children())))
