from __future__ import annotations

import pytest

from asyncapi_to_code.pipeline.analyzer import ReferenceResolver
from asyncapi_to_code.pipeline.errors import InvalidTopLevelAliasError, UnresolvedReferenceError
from asyncapi_to_code.pipeline.schema_ast import SchemaParser


def parse(schemas):
    return SchemaParser().parse({"components": {"schemas": schemas}})


class TestReferenceResolver:
    """$ref resolution within components/schemas"""

    def test_resolve_relates_without_copying(self):
        doc = parse(
            {
                "Base": {"type": "object", "properties": {"id": {"type": "string"}}},
                "User": {"type": "object", "properties": {"base": {"$ref": "#/components/schemas/Base"}}},
                "Other": {"type": "object", "properties": {"base": {"$ref": "#/components/schemas/Base"}}},
            }
        )
        table = ReferenceResolver(doc).resolve_all()

        user_ref = doc.schemas["User"].properties["base"]
        other_ref = doc.schemas["Other"].properties["base"]
        assert len(table) == 2
        assert table[user_ref].target_name == "Base"
        assert table[user_ref].target_node is doc.schemas["Base"]
        assert table.target(other_ref) is doc.schemas["Base"]

    def test_target_passes_through_non_references(self):
        doc = parse({"A": {"type": "object", "properties": {}}})
        table = ReferenceResolver(doc).resolve_all()
        assert table.target(doc.schemas["A"]) is doc.schemas["A"]

    def test_self_reference_is_resolved(self):
        doc = parse({"Node": {"type": "object", "properties": {"next": {"$ref": "#/components/schemas/Node"}}}})
        table = ReferenceResolver(doc).resolve_all()
        assert table.target(doc.schemas["Node"].properties["next"]) is doc.schemas["Node"]

    def test_escaped_pointer_token(self):
        doc = parse({"a/b": {"type": "object", "properties": {}}, "User": {"allOf": [{"$ref": "#/components/schemas/a~1b"}]}})
        resolved = ReferenceResolver(doc).resolve("#/components/schemas/a~1b")
        assert resolved.target_name == "a/b"

    def test_missing_target(self):
        doc = parse({"User": {"type": "object", "properties": {"x": {"$ref": "#/components/schemas/Missing"}}}})
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            ReferenceResolver(doc).resolve_all()
        assert exc_info.value.ref == "#/components/schemas/Missing"
        assert exc_info.value.pointer == "#/components/schemas/User/properties/x/$ref"

    @pytest.mark.parametrize(
        "ref",
        [
            "other.yaml#/components/schemas/User",
            "#/definitions/User",
            "#/components/schemas/User/properties/x",
            "#/components/schemas/",
        ],
    )
    def test_unsupported_pointers(self, ref):
        doc = parse({"User": {"type": "object", "properties": {"x": {"type": "string"}}}})
        with pytest.raises(UnresolvedReferenceError):
            ReferenceResolver(doc).resolve(ref)

    def test_top_level_alias_rejected(self):
        doc = parse(
            {
                "User": {"type": "object", "properties": {}},
                "Alias": {"$ref": "#/components/schemas/User"},
            }
        )
        with pytest.raises(InvalidTopLevelAliasError) as exc_info:
            ReferenceResolver(doc).resolve_all()
        assert exc_info.value.name == "Alias"
        assert exc_info.value.path == ("components", "schemas", "Alias")
