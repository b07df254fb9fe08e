"""
Name resolver for entity, enum and union type names.

Assigns a unique, deterministic name to every schema node that becomes a
named type. Names are a pure function of the document and the node's
position: top-level schemas keep their `components/schemas` key, nested
schemas use their `title`, and anything else gets a name synthesized from
the enclosing type name and the field it sits under.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from ...utils import snake_to_pascal_case
from ..config import CodeGeneratorConfig
from ..errors import NameCollisionError
from ..schema_ast.nodes import NodeKind, SchemaDocument, SchemaNode

logger = logging.getLogger(__name__)


@dataclass
class NameTable:
    """Result of name resolution: node identity -> type name."""

    names: dict[SchemaNode, str] = field(default_factory=dict)

    # type name -> path of the node that owns it
    owners: dict[str, tuple[str | int, ...]] = field(default_factory=dict)

    def __getitem__(self, node: SchemaNode) -> str:
        return self.names[node]

    def __contains__(self, node: object) -> bool:
        return node in self.names

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.owners)


class NameResolver:
    """Resolves type names and rejects collisions."""

    def __init__(self, config: CodeGeneratorConfig | None = None):
        """
        Initialize the resolver.

        Args:
            config: Configuration holding the synthesized-name suffixes
        """
        self.config = config or CodeGeneratorConfig()

    def resolve_names(self, document: SchemaDocument) -> NameTable:
        """
        Resolve all type names in the document.

        Args:
            document: The parsed schema document

        Returns:
            NameTable with one name per named node

        Raises:
            NameCollisionError: If two distinct nodes end up with the same name
        """
        table = NameTable()

        # First pass: top-level names take precedence over anything nested
        for name, node in document.schemas.items():
            self._assign(table, node, name)

        # Second pass: nested and anonymous schemas, in document order
        for name, node in document.schemas.items():
            self._collect_nested(table, node, table[node])

        logger.debug("Resolved %d type names", len(table))
        return table

    def _assign(self, table: NameTable, node: SchemaNode, name: str) -> str:
        """Record a name for a node, failing on collisions."""
        if node in table:
            # Same node reached twice (YAML alias): keep the first name
            return table[node]
        if name in table.owners:
            raise NameCollisionError(name, table.owners[name], node.path)
        table.names[node] = name
        table.owners[name] = node.path
        return name

    def _collect_nested(self, table: NameTable, node: SchemaNode, owner: str) -> None:
        """Name the schemas nested directly under a named node."""
        kind = node.kind

        if kind in (NodeKind.OBJECT, NodeKind.MAP):
            for prop_name, prop_node in (node.properties or {}).items():
                self._visit(table, prop_node, owner + snake_to_pascal_case(prop_name))
            if isinstance(node.additional_properties, SchemaNode):
                self._visit(table, node.additional_properties, owner + self.config.additional_properties_suffix)

        elif kind in (NodeKind.ALL_OF, NodeKind.ONE_OF, NodeKind.ANY_OF):
            suffix = self.config.inner_suffix if kind is NodeKind.ALL_OF else self.config.variant_suffix
            anonymous = [member for member in node.composition if member.kind is not NodeKind.REF]
            for position, member in enumerate(anonymous, start=1):
                number = "" if len(anonymous) == 1 else str(position)
                self._visit(table, member, f"{owner}{suffix}{number}")

    def _visit(self, table: NameTable, node: SchemaNode, candidate: str) -> None:
        """
        Name a nested node, or descend through it if it is not a named type.

        Args:
            table: Names assigned so far
            node: The nested node
            candidate: Synthesized name for this position
        """
        kind = node.kind
        if kind is NodeKind.REF:
            return

        if node.is_named:
            name = self._assign(table, node, node.title or candidate)
            self._collect_nested(table, node, name)
            return

        # Containers pass a derived candidate down to their element schemas
        if kind is NodeKind.ARRAY and isinstance(node.items, SchemaNode):
            self._visit(table, node.items, candidate + self.config.item_suffix)
        elif kind is NodeKind.TUPLE:
            for i, item in enumerate(node.prefix_items):
                self._visit(table, item, f"{candidate}{self.config.item_suffix}{i}")
        elif kind is NodeKind.MAP and isinstance(node.additional_properties, SchemaNode):
            self._visit(table, node.additional_properties, candidate + self.config.value_suffix)
