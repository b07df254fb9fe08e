"""
Schema analyzer that assembles the type model.

Last phase of the resolution pipeline: walks the validated, named and
composed document once and interns every named schema node into exactly
one Entity, EnumType or UnionType.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from ..config import CodeGeneratorConfig
from ..schema_ast.nodes import NodeKind, SchemaDocument, SchemaNode
from .composition_resolver import CompositionTable
from .name_resolver import NameTable
from .reference_resolver import ReferenceTable
from .type_model import (
    AnyType,
    ArrayType,
    ConstType,
    Entity,
    EnumType,
    Field,
    FieldType,
    MapType,
    NamedDefinition,
    NamedType,
    PrimitiveType,
    TupleType,
    TypeModel,
    UnionType,
)

logger = logging.getLogger(__name__)


class SchemaAnalyzer:
    """Builds the TypeModel from the outputs of the earlier stages."""

    def __init__(self, config: CodeGeneratorConfig | None = None):
        self.config = config or CodeGeneratorConfig()

        # Will be set during analysis
        self.references: ReferenceTable | None = None
        self.names: NameTable | None = None
        self.compositions: CompositionTable | None = None

        # Interned definitions, in emission order
        self.types: dict[str, NamedDefinition] = {}
        self._done: set[SchemaNode] = set()
        self._in_progress: set[SchemaNode] = set()

    def analyze(
        self,
        document: SchemaDocument,
        references: ReferenceTable,
        names: NameTable,
        compositions: CompositionTable,
    ) -> TypeModel:
        """
        Assemble the type model.

        Args:
            document: The parsed schema document
            references: Resolved references
            names: Resolved type names
            compositions: Resolved allOf/oneOf/anyOf compositions

        Returns:
            The frozen TypeModel
        """
        self.references = references
        self.names = names
        self.compositions = compositions
        self.types = {}
        self._done = set()
        self._in_progress = set()

        for node in document.schemas.values():
            self._intern(node)

        logger.debug("Assembled type model with %d types", len(self.types))
        return TypeModel(types=MappingProxyType(dict(self.types)), schema_names=tuple(document.schemas))

    def _intern(self, node: SchemaNode) -> str:
        """
        Intern a named node, emitting the types it contains first.

        Returns:
            The node's type name
        """
        name = self.names[node]
        if node in self._done or node in self._in_progress:
            # Reached again through a reference cycle: keep the named relation
            return name

        self._in_progress.add(node)
        kind = node.kind
        if kind is NodeKind.ENUM:
            definition = EnumType(name=name, values=tuple(node.enum), description=node.description, path=node.path)
        elif kind is NodeKind.ALL_OF:
            definition = self._analyze_all_of(node, name)
        elif kind in (NodeKind.ONE_OF, NodeKind.ANY_OF):
            definition = self._analyze_union(node, name)
        else:
            definition = self._analyze_object(node, name)
        self._in_progress.discard(node)

        self.types[name] = definition
        self._done.add(node)
        return name

    def _analyze_object(self, node: SchemaNode, name: str) -> Entity:
        fields = tuple(
            Field(
                name=prop_name,
                field_type=self._analyze_type(prop),
                required=prop_name in node.required,
                description=prop.description,
            )
            for prop_name, prop in (node.properties or {}).items()
        )
        return Entity(
            name=name,
            fields=fields,
            catch_all=self._analyze_catch_all(node.additional_properties),
            description=node.description,
            path=node.path,
        )

    def _analyze_all_of(self, node: SchemaNode, name: str) -> Entity:
        composition = self.compositions.all_of[node]

        # Members are emitted before the composite
        for member in composition.members:
            self._intern(member)

        fields = tuple(
            Field(
                name=prop.name,
                field_type=self._analyze_type(prop.node),
                required=prop.required,
                group=prop.group,
                description=prop.node.description,
            )
            for prop in composition.properties
        )
        return Entity(
            name=name,
            fields=fields,
            catch_all=self._analyze_catch_all(composition.catch_all),
            groups=composition.groups,
            description=node.description,
            path=node.path,
        )

    def _analyze_union(self, node: SchemaNode, name: str) -> UnionType:
        composition = self.compositions.unions[node]

        for variant in composition.variants:
            self._intern(variant)

        return UnionType(
            name=name,
            variants=composition.variant_names,
            tagging=composition.tagging,
            discriminator=composition.discriminator,
            tags=MappingProxyType(dict(composition.tags)),
            guards=MappingProxyType(
                {variant: MappingProxyType(dict(guard)) for variant, guard in composition.guards.items()}
            ),
            exclusive=composition.exclusive,
            fallback_reason=composition.fallback_reason,
            description=node.description,
            path=node.path,
        )

    def _analyze_catch_all(self, additional: bool | SchemaNode | None) -> FieldType | None:
        """Value type of an additionalProperties catch-all, None when closed."""
        if additional is None or additional is False:
            return None
        if additional is True:
            return AnyType()
        return self._analyze_type(additional)

    def _analyze_type(self, node: SchemaNode) -> FieldType:
        """Analyze the type of a field, array item or map value."""
        kind = node.kind

        if kind is NodeKind.REF:
            return NamedType(name=self.references[node].target_name)

        if node.is_named:
            return NamedType(name=self._intern(node))

        if kind is NodeKind.CONST:
            return ConstType(type=node.type, value=node.const)

        if kind is NodeKind.PRIMITIVE:
            return PrimitiveType(type=node.type, format=node.format)

        if kind is NodeKind.ARRAY:
            if isinstance(node.items, SchemaNode):
                return ArrayType(items=self._analyze_type(node.items))
            return ArrayType()

        if kind is NodeKind.TUPLE:
            return TupleType(items=tuple(self._analyze_type(item) for item in node.prefix_items))

        if kind is NodeKind.MAP:
            additional = node.additional_properties
            if isinstance(additional, SchemaNode):
                return MapType(values=self._analyze_type(additional))
            return MapType()

        return AnyType()
