"""
Variant matcher for decoded union values.

Applies a union's recorded tagging mode to a decoded JSON value:
discriminated unions select the variant by tag, untagged unions try the
variants in declared order against their structure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import AmbiguousVariantError, NoMatchingVariantError, VariantMatchError
from .type_model import (
    AnyType,
    ArrayType,
    ConstType,
    Entity,
    EnumType,
    FieldType,
    MapType,
    NamedType,
    PrimitiveType,
    TupleType,
    TypeModel,
    UnionType,
)

logger = logging.getLogger(__name__)


def matches_primitive(type_name: str, value: Any) -> bool:
    """Check a decoded JSON value against a primitive schema type."""
    if type_name == "string":
        return isinstance(value, str)
    if type_name == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if type_name == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if type_name == "boolean":
        return isinstance(value, bool)
    if type_name == "null":
        return value is None
    return False


class VariantMatcher:
    """Selects the union variant a decoded value belongs to."""

    def __init__(self, model: TypeModel):
        self.model = model

    def match(self, union: UnionType | str, value: Any) -> str:
        """
        Find the variant of a union that a value belongs to.

        Args:
            union: The union, or its name in the model
            value: A decoded JSON value

        Returns:
            Name of the matching variant

        Raises:
            NoMatchingVariantError: If no variant accepts the value
            AmbiguousVariantError: If several variants of a oneOf accept the value
        """
        if isinstance(union, str):
            union = self.model[union]

        if union.is_discriminated:
            return self._match_tag(union, value)

        matches = []
        for variant in union.variants:
            if not self.accepts(variant, value):
                continue
            if not union.exclusive:
                # anyOf: first match wins
                return variant
            matches.append(variant)

        if not matches:
            raise NoMatchingVariantError(f"No variant of '{union.name}' accepts the value")
        if len(matches) > 1:
            raise AmbiguousVariantError(f"Value matches several variants of '{union.name}': {', '.join(matches)}")
        return matches[0]

    def _match_tag(self, union: UnionType, value: Any) -> str:
        if not isinstance(value, Mapping) or union.discriminator not in value:
            raise NoMatchingVariantError(f"Value has no '{union.discriminator}' field to select a '{union.name}' variant")
        tag = value[union.discriminator]
        variant = union.variant_for_tag(tag) if isinstance(tag, str) else None
        if variant is None:
            raise NoMatchingVariantError(f"Unknown '{union.discriminator}' tag {tag!r} for '{union.name}'")
        logger.debug("Selected variant '%s' of '%s' by tag %r", variant, union.name, tag)
        return variant

    def accepts(self, type_name: str, value: Any) -> bool:
        """Whether a value structurally matches the named type."""
        definition = self.model[type_name]

        if isinstance(definition, EnumType):
            return isinstance(value, str) and value in definition.values

        if isinstance(definition, UnionType):
            try:
                self.match(definition, value)
            except VariantMatchError:
                return False
            return True

        return self._accepts_entity(definition, value)

    def _accepts_entity(self, entity: Entity, value: Any) -> bool:
        if not isinstance(value, Mapping):
            return False

        declared = set()
        for f in entity.fields:
            declared.add(f.name)
            if f.name not in value:
                if f.required:
                    return False
                continue
            field_value = value[f.name]
            if field_value is None and not f.required:
                continue
            if not self._check_type(f.field_type, field_value):
                return False

        for key, extra in value.items():
            if key in declared:
                continue
            if entity.catch_all is None or not self._check_type(entity.catch_all, extra):
                return False
        return True

    def _check_type(self, field_type: FieldType, value: Any) -> bool:
        if isinstance(field_type, NamedType):
            return self.accepts(field_type.name, value)

        if isinstance(field_type, PrimitiveType):
            return matches_primitive(field_type.type, value)

        if isinstance(field_type, ConstType):
            return matches_primitive(field_type.type, value) and value == field_type.value

        if isinstance(field_type, ArrayType):
            if not isinstance(value, list):
                return False
            return field_type.items is None or all(self._check_type(field_type.items, item) for item in value)

        if isinstance(field_type, TupleType):
            if not isinstance(value, list) or len(value) != len(field_type.items):
                return False
            return all(self._check_type(t, item) for t, item in zip(field_type.items, value))

        if isinstance(field_type, MapType):
            if not isinstance(value, Mapping):
                return False
            return field_type.values is None or all(self._check_type(field_type.values, v) for v in value.values())

        return isinstance(field_type, AnyType)
