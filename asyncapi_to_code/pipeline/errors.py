"""
Diagnostics raised by the resolution pipeline.

Every failure is deterministic and non-retryable. Each error carries the
path (property names and array indices from the document root) of the
schema node that caused it, so callers can point users at the exact spot.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..utils import format_pointer


class SchemaError(Exception):
    """Base class for all resolution diagnostics.

    Attributes:
        message: Human readable description of the problem
        path: Steps from the document root to the offending node
    """

    def __init__(self, message: str, path: Sequence[str | int] = ()):
        self.message = message
        self.path = tuple(path)
        super().__init__(f"{message} (at {self.pointer})")

    @property
    def pointer(self) -> str:
        """The offending path rendered as a local JSON pointer."""
        return format_pointer(self.path)

    @property
    def kind(self) -> str:
        """The error kind, used for reporting."""
        return type(self).__name__


# Structural errors


class StructuralError(SchemaError):
    """The document shape is outside the supported subset."""


class MalformedSchemaError(StructuralError):
    """A schema keyword has a value of the wrong shape (e.g. `properties` is not a mapping)."""


class UnresolvedReferenceError(StructuralError):
    """A `$ref` does not point at an existing `components/schemas` entry."""

    def __init__(self, ref: str, path: Sequence[str | int] = (), reason: str = "no such schema"):
        self.ref = ref
        super().__init__(f"Cannot resolve reference '{ref}': {reason}", path)


class InvalidTopLevelAliasError(StructuralError):
    """A top-level schema is a bare `$ref` instead of a schema body."""

    def __init__(self, name: str, ref: str, path: Sequence[str | int] = ()):
        self.name = name
        self.ref = ref
        super().__init__(f"Top-level schema '{name}' is only an alias of '{ref}'", path)


class UnsupportedTopLevelArrayError(StructuralError):
    """A top-level schema has `type: array`."""

    def __init__(self, name: str, path: Sequence[str | int] = ()):
        self.name = name
        super().__init__(f"Top-level schema '{name}' is an array; wrap it in an object property", path)


class UnsupportedTopLevelKindError(StructuralError):
    """A top-level schema is neither an object nor an allOf/oneOf/anyOf composition."""

    def __init__(self, name: str, found: str, path: Sequence[str | int] = ()):
        self.name = name
        self.found = found
        super().__init__(
            f"Top-level schema '{name}' must be 'type: object', allOf, oneOf or anyOf, found {found}",
            path,
        )


# Constraint errors


class ConstraintError(SchemaError):
    """A schema node violates one of the supported-subset rules."""


class ConstWithoutTypeError(ConstraintError):
    """`const` is used without a sibling `type`."""

    def __init__(self, value: object, path: Sequence[str | int] = ()):
        self.value = value
        super().__init__(f"'const: {value!r}' requires a sibling 'type'", path)


class UnsupportedEnumValueTypeError(ConstraintError):
    """An `enum` has non-string members or a non-string `type`."""

    def __init__(self, value: object, path: Sequence[str | int] = (), schema_type: str | None = None):
        self.value = value
        self.schema_type = schema_type
        if schema_type is not None:
            message = f"Only string enums are supported, found 'type: {schema_type}'"
        else:
            message = f"Only string enums are supported, found member {value!r}"
        super().__init__(message, path)


class DuplicateEnumValueError(ConstraintError):
    """An `enum` lists the same literal twice."""

    def __init__(self, value: str, path: Sequence[str | int] = ()):
        self.value = value
        super().__init__(f"Enum literal {value!r} is listed more than once", path)


class EmptyEnumError(ConstraintError):
    """An `enum` has no members."""

    def __init__(self, path: Sequence[str | int] = ()):
        super().__init__("Enum must list at least one literal", path)


class RequiredPropertyMissingError(ConstraintError):
    """A `required` entry is not declared in `properties`."""

    def __init__(self, property_name: str, path: Sequence[str | int] = ()):
        self.property_name = property_name
        super().__init__(f"Required property '{property_name}' is not declared in 'properties'", path)


class DiscriminatorWithoutUnionError(ConstraintError):
    """A `discriminator` is declared on a node that has no oneOf/anyOf."""

    def __init__(self, discriminator: str, path: Sequence[str | int] = ()):
        self.discriminator = discriminator
        super().__init__(f"Discriminator '{discriminator}' requires a sibling oneOf or anyOf", path)


# Composition errors


class CompositionError(SchemaError):
    """An allOf/oneOf/anyOf composition cannot be resolved."""


class FieldNameCollisionWarning(CompositionError):
    """Two allOf members declare the same field name.

    Flattening colliding names corrupts round-trip decoding, so this blocks
    resolution even though it is reported as a warning-class diagnostic.
    """

    def __init__(self, field_name: str, members: Sequence[str], path: Sequence[str | int] = ()):
        self.field_name = field_name
        self.members = tuple(members)
        super().__init__(
            f"Field '{field_name}' is declared by more than one allOf member ({', '.join(self.members)})",
            path,
        )


class InvalidCompositionMemberError(CompositionError):
    """A composition member is of a kind the composition cannot use."""


class CyclicCompositionError(CompositionError):
    """allOf members reference each other in a cycle."""

    def __init__(self, cycle: Sequence[str], path: Sequence[str | int] = ()):
        self.cycle = tuple(cycle)
        super().__init__(f"allOf composition cycle: {' -> '.join(self.cycle)}", path)


class AmbiguousDiscriminatorError(CompositionError):
    """A discriminator tag cannot be derived (strict mode only)."""

    def __init__(self, discriminator: str, reason: str, path: Sequence[str | int] = ()):
        self.discriminator = discriminator
        self.reason = reason
        super().__init__(f"Cannot tag union by '{discriminator}': {reason}", path)


# Naming errors


class NamingError(SchemaError):
    """Type names cannot be assigned deterministically."""


class NameCollisionError(NamingError):
    """Two distinct schema nodes resolve to the same type name."""

    def __init__(self, name: str, first_path: Sequence[str | int], path: Sequence[str | int] = ()):
        self.name = name
        self.first_path = tuple(first_path)
        super().__init__(
            f"Type name '{name}' is already used by the schema at {format_pointer(self.first_path)}",
            path,
        )


# Errors outside the schema taxonomy


class VariantMatchError(ValueError):
    """A value cannot be assigned to exactly one union variant."""


class NoMatchingVariantError(VariantMatchError):
    """No variant of the union accepts the value."""


class AmbiguousVariantError(VariantMatchError):
    """More than one variant of an exclusive (oneOf) union accepts the value."""
