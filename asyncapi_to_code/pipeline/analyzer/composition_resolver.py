"""
Composition resolver for allOf, oneOf and anyOf.

allOf compositions are flattened: every member stays a distinct field group
and the composite's field list is the concatenation of the members' fields.
oneOf/anyOf compositions become unions, tagged by a discriminator field when
every variant's tag can be derived deterministically, and untagged
(structurally matched) otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ...utils import pascal_to_snake_case
from ..config import CodeGeneratorConfig
from ..errors import (
    AmbiguousDiscriminatorError,
    CyclicCompositionError,
    FieldNameCollisionWarning,
    InvalidCompositionMemberError,
)
from ..schema_ast.nodes import OBJECT_KINDS, NodeKind, SchemaDocument, SchemaNode
from .name_resolver import NameTable
from .reference_resolver import ReferenceTable
from .type_model import FieldGroup, TaggingMode

logger = logging.getLogger(__name__)

# Kinds an anonymous union variant may have
VARIANT_KINDS = frozenset({NodeKind.OBJECT, NodeKind.ALL_OF, NodeKind.ONE_OF, NodeKind.ANY_OF, NodeKind.ENUM})


@dataclass(frozen=True)
class FlattenedProperty:
    """A property contributed to a composite by one of its members."""

    name: str
    node: SchemaNode
    required: bool
    group: str  # Name of the member that declared it


@dataclass(frozen=True)
class AllOfComposition:
    """A resolved allOf: field groups plus the flattened field partition."""

    node: SchemaNode
    members: tuple[SchemaNode, ...]  # Member schemas, references followed
    groups: tuple[FieldGroup, ...]
    properties: tuple[FlattenedProperty, ...]
    catch_all: bool | SchemaNode | None = None


@dataclass(frozen=True)
class UnionComposition:
    """A resolved oneOf/anyOf with exactly one tagging mode."""

    node: SchemaNode
    variants: tuple[SchemaNode, ...]  # Variant schemas, references followed
    variant_names: tuple[str, ...]
    tagging: TaggingMode
    discriminator: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
    guards: dict[str, dict[str, Any]] = field(default_factory=dict)
    exclusive: bool = True
    fallback_reason: str | None = None


@dataclass
class CompositionTable:
    """Resolved compositions keyed by node identity."""

    all_of: dict[SchemaNode, AllOfComposition] = field(default_factory=dict)
    unions: dict[SchemaNode, UnionComposition] = field(default_factory=dict)


class CompositionResolver:
    """Resolves every composition of a validated, named document."""

    def __init__(
        self,
        document: SchemaDocument,
        references: ReferenceTable,
        names: NameTable,
        config: CodeGeneratorConfig | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            document: The parsed schema document
            references: Resolved references
            names: Resolved type names
            config: Configuration (strict discriminator handling)
        """
        self.document = document
        self.references = references
        self.names = names
        self.config = config or CodeGeneratorConfig()
        self._table = CompositionTable()

        # allOf nodes currently being flattened, for cycle detection
        self._stack: list[SchemaNode] = []

    def resolve_all(self) -> CompositionTable:
        """
        Resolve every allOf/oneOf/anyOf node in document order.

        Returns:
            CompositionTable with one entry per composition node

        Raises:
            CompositionError: On the first composition that cannot be resolved
        """
        for node in self.document.walk():
            if node not in self.names:
                # Under an untyped container: never becomes a type
                continue
            kind = node.kind
            if kind is NodeKind.ALL_OF:
                self.resolve_all_of(node)
            elif kind in (NodeKind.ONE_OF, NodeKind.ANY_OF):
                self.resolve_union(node)

        logger.debug(
            "Resolved %d allOf and %d union compositions", len(self._table.all_of), len(self._table.unions)
        )
        return self._table

    # allOf

    def resolve_all_of(self, node: SchemaNode) -> AllOfComposition:
        """
        Flatten an allOf composition.

        Args:
            node: An ALL_OF node

        Returns:
            AllOfComposition with one group per member

        Raises:
            InvalidCompositionMemberError: If a member is not object-like
            FieldNameCollisionWarning: If members overlap
            CyclicCompositionError: If the composition contains itself
        """
        if node in self._table.all_of:
            return self._table.all_of[node]

        if node in self._stack:
            cycle = [self.names[n] for n in self._stack[self._stack.index(node) :]] + [self.names[node]]
            raise CyclicCompositionError(cycle, node.path)

        self._stack.append(node)
        try:
            composition = self._flatten(node)
        finally:
            self._stack.pop()

        self._table.all_of[node] = composition
        return composition

    def _flatten(self, node: SchemaNode) -> AllOfComposition:
        members: list[SchemaNode] = []
        groups: list[FieldGroup] = []
        properties: list[FlattenedProperty] = []
        declared_by: dict[str, str] = {}
        catch_all: bool | SchemaNode | None = None
        catch_all_owner: str | None = None

        for i, member in enumerate(node.all_of):
            member_path = node.path + ("allOf", i)
            target = self.references.target(member)
            if target.kind not in OBJECT_KINDS:
                raise InvalidCompositionMemberError(
                    f"allOf member must be an object or an allOf composition, found {target.kind.value}",
                    member_path,
                )

            member_name = self.names[target]
            group = FieldGroup(field_name=pascal_to_snake_case(member_name), type_name=member_name)
            if group in groups:
                raise FieldNameCollisionWarning(group.field_name, [member_name, member_name], member_path)

            for prop in self._member_properties(target, member_name):
                if prop.name in declared_by:
                    raise FieldNameCollisionWarning(prop.name, [declared_by[prop.name], member_name], member_path)
                declared_by[prop.name] = member_name
                properties.append(prop)

            member_catch_all = self._member_catch_all(target)
            if member_catch_all not in (None, False):
                if catch_all_owner is not None:
                    raise FieldNameCollisionWarning(
                        self.config.catch_all_field_name, [catch_all_owner, member_name], member_path
                    )
                catch_all = member_catch_all
                catch_all_owner = member_name

            members.append(target)
            groups.append(group)

        return AllOfComposition(
            node=node,
            members=tuple(members),
            groups=tuple(groups),
            properties=tuple(properties),
            catch_all=catch_all,
        )

    def _member_properties(self, target: SchemaNode, member_name: str) -> list[FlattenedProperty]:
        """Properties a member contributes, all attributed to that member's group."""
        if target.kind is NodeKind.ALL_OF:
            nested = self.resolve_all_of(target)
            return [
                FlattenedProperty(name=p.name, node=p.node, required=p.required, group=member_name)
                for p in nested.properties
            ]
        return [
            FlattenedProperty(name=name, node=prop, required=name in target.required, group=member_name)
            for name, prop in (target.properties or {}).items()
        ]

    def _member_catch_all(self, target: SchemaNode) -> bool | SchemaNode | None:
        if target.kind is NodeKind.ALL_OF:
            return self.resolve_all_of(target).catch_all
        return target.additional_properties

    # oneOf / anyOf

    def resolve_union(self, node: SchemaNode) -> UnionComposition:
        """
        Resolve a oneOf/anyOf composition into a union.

        Args:
            node: A ONE_OF or ANY_OF node

        Returns:
            UnionComposition with its tagging mode decided

        Raises:
            InvalidCompositionMemberError: If an anonymous variant cannot be named
            AmbiguousDiscriminatorError: If tags are ambiguous and strict mode is on
        """
        if node in self._table.unions:
            return self._table.unions[node]

        variants: list[SchemaNode] = []
        for i, member in enumerate(node.composition):
            target = self.references.target(member)
            if member.kind is not NodeKind.REF and target.kind not in VARIANT_KINDS:
                raise InvalidCompositionMemberError(
                    f"Union variant must be an object, a composition or a string enum, found {target.kind.value}",
                    node.path + (node.kind.value, i),
                )
            variants.append(target)

        variant_names = tuple(self.names[v] for v in variants)
        guards = {name: self._const_guards(v) for name, v in zip(variant_names, variants)}

        tagging = TaggingMode.UNTAGGED
        tags: dict[str, str] = {}
        reason = None
        if node.discriminator is not None:
            tags, reason = self._derive_tags(node.discriminator, variants, variant_names)
            if reason is None:
                tagging = TaggingMode.DISCRIMINATED
            elif self.config.strict_discriminator:
                raise AmbiguousDiscriminatorError(node.discriminator, reason, node.path + ("discriminator",))
            else:
                logger.warning("Union '%s' falls back to untagged matching: %s", self.names[node], reason)
                tags = {}

        composition = UnionComposition(
            node=node,
            variants=tuple(variants),
            variant_names=variant_names,
            tagging=tagging,
            discriminator=node.discriminator,
            tags=tags,
            guards=guards,
            exclusive=node.kind is NodeKind.ONE_OF,
            fallback_reason=reason,
        )
        self._table.unions[node] = composition
        return composition

    def _derive_tags(
        self, discriminator: str, variants: list[SchemaNode], variant_names: tuple[str, ...]
    ) -> tuple[dict[str, str], str | None]:
        """
        Compute one tag per variant.

        Returns:
            (tags, None) on success, or ({}, reason) when a tag cannot be derived
        """
        tags: dict[str, str] = {}
        tagged_by: dict[str, str] = {}
        for variant, name in zip(variants, variant_names):
            if variant.kind not in OBJECT_KINDS:
                return {}, f"variant '{name}' is not an object"

            prop = self._variant_property(variant, discriminator)
            if prop is None:
                tag = name
            else:
                prop = self.references.target(prop)
                if prop.kind is NodeKind.CONST and prop.type == "string" and isinstance(prop.const, str):
                    tag = prop.const
                elif prop.kind is NodeKind.PRIMITIVE and prop.type == "string":
                    tag = name
                else:
                    return {}, (
                        f"property '{discriminator}' of variant '{name}' is neither a string nor a string const"
                    )

            if tag in tagged_by:
                return {}, f"variants '{tagged_by[tag]}' and '{name}' share the tag '{tag}'"
            tagged_by[tag] = name
            tags[name] = tag

        return tags, None

    def _variant_property(self, variant: SchemaNode, name: str) -> SchemaNode | None:
        for prop in self._object_properties(variant):
            if prop.name == name:
                return prop.node
        return None

    def _object_properties(self, variant: SchemaNode) -> list[FlattenedProperty]:
        if variant.kind is NodeKind.ALL_OF:
            return list(self.resolve_all_of(variant).properties)
        if variant.kind is NodeKind.OBJECT:
            return self._member_properties(variant, self.names[variant])
        return []

    def _const_guards(self, variant: SchemaNode) -> dict[str, Any]:
        """Fields of a variant fixed to a literal value."""
        guards = {}
        for prop in self._object_properties(variant):
            if prop.node.kind is NodeKind.CONST:
                guards[prop.name] = prop.node.const
        return guards
