"""
Reference resolver for $ref resolution.

Resolves `#/components/schemas/<Name>` pointers to their target schema
nodes. Targets are related to, never copied into, the referencing site,
since one schema can be referenced from many places.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from ...utils import unescape_pointer_token
from ..errors import InvalidTopLevelAliasError, UnresolvedReferenceError
from ..schema_ast.nodes import NodeKind, SchemaDocument, SchemaNode

logger = logging.getLogger(__name__)

SCHEMAS_PREFIX = "#/components/schemas/"


@dataclass(frozen=True)
class ResolvedRef:
    """A resolved $ref."""

    target_name: str = ""  # Top-level schema name
    target_node: SchemaNode | None = None  # Resolved schema body


@dataclass
class ReferenceTable:
    """Resolved references keyed by the referencing node (by identity)."""

    resolved: dict[SchemaNode, ResolvedRef] = field(default_factory=dict)

    def __getitem__(self, node: SchemaNode) -> ResolvedRef:
        return self.resolved[node]

    def __contains__(self, node: object) -> bool:
        return node in self.resolved

    def __len__(self) -> int:
        return len(self.resolved)

    def target(self, node: SchemaNode) -> SchemaNode:
        """Follow a reference node to its target; other nodes are returned unchanged."""
        if node.kind is NodeKind.REF:
            return self.resolved[node].target_node
        return node


class ReferenceResolver:
    """Resolves $ref to actual definitions."""

    def __init__(self, document: SchemaDocument):
        """
        Initialize the resolver.

        Args:
            document: The parsed schema document
        """
        self.document = document

    def resolve(self, ref: str, path: Sequence[str | int] = ()) -> ResolvedRef:
        """
        Resolve a `$ref` string to its target.

        Args:
            ref: The pointer, e.g. "#/components/schemas/RequestBase"
            path: Location of the reference (for error messages)

        Returns:
            ResolvedRef with target information

        Raises:
            UnresolvedReferenceError: If the pointer is unsupported or dangling
        """
        if not ref.startswith("#"):
            raise UnresolvedReferenceError(ref, path, "cross-document references are not supported")
        if not ref.startswith(SCHEMAS_PREFIX):
            raise UnresolvedReferenceError(ref, path, "only '#/components/schemas/<Name>' pointers are supported")

        token = ref[len(SCHEMAS_PREFIX) :]
        if not token or "/" in token:
            raise UnresolvedReferenceError(ref, path, "pointer must name an entry directly under components/schemas")

        name = unescape_pointer_token(token)
        target = self.document.schemas.get(name)
        if target is None:
            raise UnresolvedReferenceError(ref, path)

        return ResolvedRef(target_name=name, target_node=target)

    def resolve_all(self) -> ReferenceTable:
        """
        Resolve every reference in the document.

        Top-level schemas are checked in document order; the first failure
        stops resolution.

        Returns:
            ReferenceTable relating each reference node to its target

        Raises:
            InvalidTopLevelAliasError: If a top-level schema is a bare $ref
            UnresolvedReferenceError: If any reference cannot be resolved
        """
        table = ReferenceTable()

        for name, node in self.document.schemas.items():
            if node.kind is NodeKind.REF:
                raise InvalidTopLevelAliasError(name, node.ref, node.path)

        for node in self._references():
            table.resolved[node] = self.resolve(node.ref, node.path + ("$ref",))

        logger.debug("Resolved %d references", len(table))
        return table

    def _references(self) -> Iterator[SchemaNode]:
        """Yield every reference node in document order."""
        for node in self.document.walk():
            if node.kind is NodeKind.REF:
                yield node

