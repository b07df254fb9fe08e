"""
Type model definitions.

The type model is the resolved, named graph of entities, enums and unions
derived from a schema document. It is the only artifact handed to code
backends: all references are resolved to names, every composition is
classified, and nothing is mutated after assembly.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union


def _frozen_mapping() -> Mapping:
    return MappingProxyType({})


class FieldType:
    """Base class for the type of a field, array item or map value."""

    def to_dict(self) -> dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class NamedType(FieldType):
    """A relation to a named Entity, EnumType or UnionType."""

    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "named", "name": self.name}


@dataclass(frozen=True)
class PrimitiveType(FieldType):
    """string, integer, number, boolean or null."""

    type: str = "string"
    format: str | None = None  # Carried as metadata, never validated

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": "primitive", "type": self.type}
        if self.format is not None:
            d["format"] = self.format
        return d


@dataclass(frozen=True)
class ConstType(FieldType):
    """A typed literal value."""

    type: str = "string"
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "const", "type": self.type, "value": self.value}


@dataclass(frozen=True)
class ArrayType(FieldType):
    """A homogeneous list; items is None when unconstrained."""

    items: FieldType | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "array", "items": self.items.to_dict() if self.items else None}


@dataclass(frozen=True)
class TupleType(FieldType):
    """A fixed-length positional list (prefixItems)."""

    items: tuple[FieldType, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "tuple", "items": [item.to_dict() for item in self.items]}


@dataclass(frozen=True)
class MapType(FieldType):
    """A string-keyed map; values is None when unconstrained."""

    values: FieldType | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "map", "values": self.values.to_dict() if self.values else None}


@dataclass(frozen=True)
class AnyType(FieldType):
    """No type information."""

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "any"}


@dataclass(frozen=True)
class FieldGroup:
    """One allOf member flattened into a composite entity."""

    field_name: str = ""  # Name of the embedded sub-structure (snake_case)
    type_name: str = ""  # Name of the member type

    def to_dict(self) -> dict[str, Any]:
        return {"field_name": self.field_name, "type_name": self.type_name}


@dataclass(frozen=True)
class Field:
    """A field of an entity."""

    name: str = ""  # Original property name
    field_type: FieldType = field(default_factory=AnyType)
    required: bool = False
    group: str | None = None  # Member type name the field was flattened from
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "type": self.field_type.to_dict(), "required": self.required}
        if self.group is not None:
            d["group"] = self.group
        return d


@dataclass(frozen=True)
class Entity:
    """A named product type, from an object schema or an allOf composition."""

    name: str = ""
    fields: tuple[Field, ...] = ()
    catch_all: FieldType | None = None  # Value type of additionalProperties
    groups: tuple[FieldGroup, ...] = ()  # Non-empty for allOf composites
    description: str | None = None
    path: tuple[str | int, ...] = ()

    @property
    def is_composite(self) -> bool:
        return bool(self.groups)

    @property
    def required_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.required)

    def get_field(self, name: str) -> Field | None:
        """Look up a field by its property name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"kind": "entity", "fields": [f.to_dict() for f in self.fields]}
        if self.catch_all is not None:
            d["catch_all"] = self.catch_all.to_dict()
        if self.groups:
            d["groups"] = [g.to_dict() for g in self.groups]
        return d


@dataclass(frozen=True)
class EnumType:
    """A named set of distinct string literals."""

    name: str = ""
    values: tuple[str, ...] = ()
    description: str | None = None
    path: tuple[str | int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"kind": "enum", "values": list(self.values)}


class TaggingMode(Enum):
    """How a union's variants are told apart."""

    DISCRIMINATED = "discriminated"  # By the value of the discriminator field
    UNTAGGED = "untagged"  # By ordered structural matching


@dataclass(frozen=True)
class UnionType:
    """A named sum type from oneOf/anyOf."""

    name: str = ""
    variants: tuple[str, ...] = ()
    tagging: TaggingMode = TaggingMode.UNTAGGED
    discriminator: str | None = None

    # variant name -> tag (discriminated only)
    tags: Mapping[str, str] = field(default_factory=_frozen_mapping)

    # variant name -> {field name: const literal}
    guards: Mapping[str, Mapping[str, Any]] = field(default_factory=_frozen_mapping)

    # False for anyOf: a value may match more than one variant
    exclusive: bool = True

    fallback_reason: str | None = None
    description: str | None = None
    path: tuple[str | int, ...] = ()

    @property
    def is_discriminated(self) -> bool:
        return self.tagging is TaggingMode.DISCRIMINATED

    def variant_for_tag(self, tag: str) -> str | None:
        """Return the variant carrying a tag, if any."""
        for variant, variant_tag in self.tags.items():
            if variant_tag == tag:
                return variant
        return None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": "union",
            "variants": list(self.variants),
            "tagging": self.tagging.value,
            "exclusive": self.exclusive,
        }
        if self.discriminator is not None:
            d["discriminator"] = self.discriminator
        if self.tags:
            d["tags"] = dict(self.tags)
        if any(self.guards.values()):
            d["guards"] = {name: dict(guard) for name, guard in self.guards.items() if guard}
        if self.fallback_reason is not None:
            d["fallback_reason"] = self.fallback_reason
        return d


NamedDefinition = Union[Entity, EnumType, UnionType]


@dataclass(frozen=True)
class TypeModel:
    """
    Read-only mapping from unique type name to definition.

    Definitions are stored in emission order: every nested type comes
    before the type that contains it.
    """

    types: Mapping[str, NamedDefinition] = field(default_factory=_frozen_mapping)
    schema_names: tuple[str, ...] = ()  # Top-level names in document order

    def __getitem__(self, name: str) -> NamedDefinition:
        return self.types[name]

    def __contains__(self, name: object) -> bool:
        return name in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def get(self, name: str) -> NamedDefinition | None:
        return self.types.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self.types)

    def entities(self) -> list[Entity]:
        return [t for t in self.types.values() if isinstance(t, Entity)]

    def enums(self) -> list[EnumType]:
        return [t for t in self.types.values() if isinstance(t, EnumType)]

    def unions(self) -> list[UnionType]:
        return [t for t in self.types.values() if isinstance(t, UnionType)]

    def to_dict(self) -> dict[str, Any]:
        """Deterministic, JSON-ready dump of the model."""
        return {
            "schema_names": list(self.schema_names),
            "types": {name: definition.to_dict() for name, definition in self.types.items()},
        }
