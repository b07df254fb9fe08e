"""
Schema parser that builds the raw schema document.

Phase 1 of the pipeline: turn the deserialized document mapping into
SchemaNode trees without resolving references or applying any of the
supported-subset rules. Only malformed keyword shapes are rejected here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from ..errors import MalformedSchemaError
from .nodes import SCHEMA_TYPES, SchemaDocument, SchemaNode

logger = logging.getLogger(__name__)

Path = tuple[str | int, ...]


class SchemaParser:
    """Parses the `components/schemas` section of a document into SchemaNodes."""

    COMPOSITION_KEYWORDS = ("allOf", "oneOf", "anyOf")

    def __init__(self) -> None:
        # id(raw mapping) -> node, so YAML anchors/aliases keep a single identity
        self._nodes: dict[int, SchemaNode] = {}
        self._in_progress: set[int] = set()

    def parse(self, document: Mapping[str, Any]) -> SchemaDocument:
        """
        Parse a deserialized AsyncAPI/OpenAPI-style document.

        Args:
            document: The document mapping, exposing `components.schemas`

        Returns:
            SchemaDocument with one SchemaNode per top-level schema

        Raises:
            MalformedSchemaError: If the section or a keyword has the wrong shape
        """
        self._nodes = {}
        self._in_progress = set()

        if not isinstance(document, Mapping):
            raise MalformedSchemaError("Document root must be a mapping")
        components = document.get("components")
        if not isinstance(components, Mapping):
            raise MalformedSchemaError("Document has no 'components' mapping", ("components",))
        schemas = components.get("schemas")
        if not isinstance(schemas, Mapping):
            raise MalformedSchemaError("Document has no 'components/schemas' mapping", ("components", "schemas"))

        parsed: dict[str, SchemaNode] = {}
        for name, raw in schemas.items():
            path: Path = ("components", "schemas", name)
            if not isinstance(name, str) or not name:
                raise MalformedSchemaError(f"Schema name {name!r} must be a non-empty string", path)
            parsed[name] = self._parse_schema_node(raw, path)

        logger.debug("Parsed %d top-level schemas", len(parsed))
        return SchemaDocument(schemas=MappingProxyType(parsed))

    def _parse_schema_node(self, schema: Any, path: Path) -> SchemaNode:
        """
        Parse a schema node recursively.

        Args:
            schema: The raw schema mapping
            path: Current path in the document (for error messages)

        Returns:
            The SchemaNode for this mapping
        """
        if not isinstance(schema, Mapping):
            raise MalformedSchemaError(f"Schema must be a mapping, found {type(schema).__name__}", path)

        key = id(schema)
        if key in self._nodes:
            return self._nodes[key]
        if key in self._in_progress:
            raise MalformedSchemaError("Schema contains itself; use a $ref for recursive types", path)

        self._in_progress.add(key)
        try:
            node = self._build_node(schema, path)
        finally:
            self._in_progress.discard(key)
        self._nodes[key] = node
        return node

    def _build_node(self, schema: Mapping[str, Any], path: Path) -> SchemaNode:
        """Build a SchemaNode from a raw mapping, parsing children first."""
        compositions = [k for k in self.COMPOSITION_KEYWORDS if k in schema]
        if len(compositions) > 1:
            raise MalformedSchemaError(f"At most one of allOf/oneOf/anyOf is supported, found {', '.join(compositions)}", path)

        return SchemaNode(
            path=path,
            title=self._optional_str(schema, "title", path),
            description=self._optional_str(schema, "description", path),
            type=self._parse_type(schema, path),
            format=self._optional_str(schema, "format", path),
            const=schema.get("const"),
            has_const="const" in schema,
            enum=self._parse_enum(schema, path),
            properties=self._parse_properties(schema, path),
            required=self._parse_required(schema, path),
            additional_properties=self._parse_bool_or_schema(schema, "additionalProperties", path),
            items=self._parse_bool_or_schema(schema, "items", path),
            prefix_items=self._parse_schema_list(schema, "prefixItems", path, allow_empty=True),
            all_of=self._parse_schema_list(schema, "allOf", path),
            one_of=self._parse_schema_list(schema, "oneOf", path),
            any_of=self._parse_schema_list(schema, "anyOf", path),
            discriminator=self._parse_discriminator(schema, path),
            ref=self._optional_str(schema, "$ref", path),
            raw=schema,
        )

    def _optional_str(self, schema: Mapping[str, Any], key: str, path: Path) -> str | None:
        """Read an optional string keyword."""
        value = schema.get(key)
        if value is not None and not isinstance(value, str):
            raise MalformedSchemaError(f"'{key}' must be a string", path + (key,))
        return value

    def _parse_type(self, schema: Mapping[str, Any], path: Path) -> str | None:
        """Parse the `type` keyword (a single type name)."""
        type_value = schema.get("type")
        if type_value is None:
            return None
        if isinstance(type_value, list):
            raise MalformedSchemaError("Type arrays are not supported; use oneOf instead", path + ("type",))
        if type_value not in SCHEMA_TYPES:
            raise MalformedSchemaError(f"Unknown type {type_value!r}", path + ("type",))
        return type_value

    def _parse_enum(self, schema: Mapping[str, Any], path: Path) -> tuple[Any, ...] | None:
        """Parse the `enum` keyword, keeping members in input order."""
        if "enum" not in schema:
            return None
        values = schema["enum"]
        if not isinstance(values, list):
            raise MalformedSchemaError("'enum' must be a list", path + ("enum",))
        return tuple(values)

    def _parse_properties(self, schema: Mapping[str, Any], path: Path) -> Mapping[str, SchemaNode] | None:
        """Parse the `properties` keyword, keeping declaration order."""
        if "properties" not in schema:
            return None
        properties = schema["properties"]
        if properties is None:
            properties = {}
        if not isinstance(properties, Mapping):
            raise MalformedSchemaError("'properties' must be a mapping", path + ("properties",))

        parsed = {}
        for prop_name, prop_schema in properties.items():
            prop_path = path + ("properties", prop_name)
            if not isinstance(prop_name, str):
                raise MalformedSchemaError(f"Property name {prop_name!r} must be a string", prop_path)
            parsed[prop_name] = self._parse_schema_node(prop_schema, prop_path)
        return MappingProxyType(parsed)

    def _parse_required(self, schema: Mapping[str, Any], path: Path) -> tuple[str, ...]:
        """Parse the `required` keyword."""
        required = schema.get("required") or []
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise MalformedSchemaError("'required' must be a list of property names", path + ("required",))
        return tuple(required)

    def _parse_bool_or_schema(self, schema: Mapping[str, Any], key: str, path: Path) -> bool | SchemaNode | None:
        """Parse a keyword that is either a boolean or a nested schema."""
        if key not in schema:
            return None
        value = schema[key]
        if isinstance(value, bool):
            return value
        if isinstance(value, Mapping):
            return self._parse_schema_node(value, path + (key,))
        raise MalformedSchemaError(f"'{key}' must be a boolean or a schema", path + (key,))

    def _parse_schema_list(
        self,
        schema: Mapping[str, Any],
        key: str,
        path: Path,
        allow_empty: bool = False,
    ) -> tuple[SchemaNode, ...] | None:
        """Parse a keyword holding an ordered list of schemas."""
        if key not in schema:
            return None
        values = schema[key]
        if not isinstance(values, list) or (not values and not allow_empty):
            raise MalformedSchemaError(f"'{key}' must be a non-empty list of schemas", path + (key,))
        return tuple(self._parse_schema_node(value, path + (key, i)) for i, value in enumerate(values))

    def _parse_discriminator(self, schema: Mapping[str, Any], path: Path) -> str | None:
        """Parse the `discriminator` keyword.

        AsyncAPI uses a plain property name, OpenAPI an object with
        `propertyName`; both are accepted.
        """
        value = schema.get("discriminator")
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get("propertyName")
        if not isinstance(value, str) or not value:
            raise MalformedSchemaError("'discriminator' must be a property name", path + ("discriminator",))
        return value
