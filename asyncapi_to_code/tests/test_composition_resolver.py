from __future__ import annotations

import logging

import pytest

from asyncapi_to_code.pipeline.analyzer import (
    CompositionResolver,
    NameResolver,
    ReferenceResolver,
    TaggingMode,
)
from asyncapi_to_code.pipeline.config import CodeGeneratorConfig
from asyncapi_to_code.pipeline.errors import (
    AmbiguousDiscriminatorError,
    CyclicCompositionError,
    FieldNameCollisionWarning,
    InvalidCompositionMemberError,
)
from asyncapi_to_code.pipeline.schema_ast import SchemaParser


def ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


def obj(*names, required=(), **extra):
    schema = {"type": "object", "properties": {n: {"type": "string"} for n in names}, **extra}
    if required:
        schema["required"] = list(required)
    return schema


def compose(schemas, config=None):
    doc = SchemaParser().parse({"components": {"schemas": schemas}})
    references = ReferenceResolver(doc).resolve_all()
    names = NameResolver(config).resolve_names(doc)
    resolver = CompositionResolver(doc, references, names, config)
    return doc, resolver.resolve_all()


class TestAllOf:
    """allOf flattening into field groups"""

    def test_arity_is_sum_of_member_fields(self):
        doc, table = compose(
            {
                "Base": obj("id", "kind", required=["id"]),
                "Extra": obj("a", "b", "c"),
                "Full": {"allOf": [ref("Base"), ref("Extra"), obj("x", required=["x"])]},
            }
        )
        composition = table.all_of[doc.schemas["Full"]]
        assert len(composition.properties) == 2 + 3 + 1
        assert [p.name for p in composition.properties] == ["id", "kind", "a", "b", "c", "x"]
        assert [p.required for p in composition.properties] == [True, False, False, False, False, True]
        assert [p.group for p in composition.properties] == ["Base", "Base", "Extra", "Extra", "Extra", "FullInner"]

    def test_groups_keep_members_distinct(self):
        doc, table = compose({"Base": obj("id"), "Full": {"allOf": [ref("Base"), obj("x")]}})
        groups = table.all_of[doc.schemas["Full"]].groups
        assert [(g.field_name, g.type_name) for g in groups] == [("base", "Base"), ("full_inner", "FullInner")]

    def test_nested_all_of_member(self):
        doc, table = compose(
            {
                "A": obj("a"),
                "B": {"allOf": [ref("A"), obj("b")]},
                "C": {"allOf": [ref("B"), obj("c")]},
            }
        )
        composition = table.all_of[doc.schemas["C"]]
        assert [p.name for p in composition.properties] == ["a", "b", "c"]
        assert [p.group for p in composition.properties] == ["B", "B", "CInner"]

    def test_overlapping_field_names(self):
        with pytest.raises(FieldNameCollisionWarning) as exc_info:
            compose({"A": obj("id", "x"), "B": obj("x"), "AB": {"allOf": [ref("A"), ref("B")]}})
        assert exc_info.value.field_name == "x"
        assert exc_info.value.members == ("A", "B")
        assert exc_info.value.pointer == "#/components/schemas/AB/allOf/1"

    def test_same_member_twice(self):
        with pytest.raises(FieldNameCollisionWarning):
            compose({"A": obj("id"), "AA": {"allOf": [ref("A"), ref("A")]}})

    def test_two_catch_alls(self):
        with pytest.raises(FieldNameCollisionWarning) as exc_info:
            compose(
                {
                    "A": obj("a", additionalProperties=True),
                    "B": obj("b", additionalProperties={"type": "integer"}),
                    "AB": {"allOf": [ref("A"), ref("B")]},
                }
            )
        assert exc_info.value.field_name == "additional_properties"

    def test_single_catch_all_is_kept(self):
        doc, table = compose({"A": obj("a", additionalProperties={"type": "integer"}), "AB": {"allOf": [ref("A"), obj("b")]}})
        catch_all = table.all_of[doc.schemas["AB"]].catch_all
        assert catch_all is doc.schemas["A"].additional_properties

    def test_non_object_member(self):
        with pytest.raises(InvalidCompositionMemberError) as exc_info:
            compose({"A": {"allOf": [obj("a"), {"type": "string"}]}})
        assert exc_info.value.pointer == "#/components/schemas/A/allOf/1"

    def test_union_member(self):
        with pytest.raises(InvalidCompositionMemberError):
            compose({"U": {"oneOf": [obj("a")]}, "A": {"allOf": [ref("U")]}})

    def test_cycle(self):
        with pytest.raises(CyclicCompositionError) as exc_info:
            compose({"A": {"allOf": [ref("B"), obj("a")]}, "B": {"allOf": [ref("A"), obj("b")]}})
        assert exc_info.value.cycle == ("A", "B", "A")


class TestUnions:
    """oneOf/anyOf tagging"""

    def test_tags_default_to_variant_names(self):
        doc, table = compose(
            {
                "GetUser": obj("event", "data"),
                "DeleteUser": obj("event", "data"),
                "Payload": {"oneOf": [ref("GetUser"), ref("DeleteUser")], "discriminator": "event"},
            }
        )
        union = table.unions[doc.schemas["Payload"]]
        assert union.tagging is TaggingMode.DISCRIMINATED
        assert union.tags == {"GetUser": "GetUser", "DeleteUser": "DeleteUser"}
        assert union.exclusive

    def test_const_literal_is_the_tag(self):
        doc, table = compose(
            {
                "GetUser": {"type": "object", "properties": {"event": {"type": "string", "const": "deezNuts"}}},
                "DeleteUser": obj("event"),
                "Payload": {"oneOf": [ref("GetUser"), ref("DeleteUser")], "discriminator": "event"},
            }
        )
        union = table.unions[doc.schemas["Payload"]]
        assert union.tags == {"GetUser": "deezNuts", "DeleteUser": "DeleteUser"}
        assert union.guards == {"GetUser": {"event": "deezNuts"}, "DeleteUser": {}}

    def test_tag_from_flattened_all_of(self):
        doc, table = compose(
            {
                "Base": obj("id"),
                "Ping": {"allOf": [ref("Base"), {"type": "object", "properties": {"op": {"type": "string", "const": "ping"}}}]},
                "Pong": {"allOf": [ref("Base"), {"type": "object", "properties": {"op": {"type": "string", "const": "pong"}}}]},
                "Message": {"oneOf": [ref("Ping"), ref("Pong")], "discriminator": "op"},
            }
        )
        assert table.unions[doc.schemas["Message"]].tags == {"Ping": "ping", "Pong": "pong"}

    def test_no_discriminator_is_untagged(self):
        doc, table = compose({"A": obj("a"), "B": obj("b"), "U": {"oneOf": [ref("A"), ref("B")]}})
        union = table.unions[doc.schemas["U"]]
        assert union.tagging is TaggingMode.UNTAGGED
        assert union.tags == {}
        assert union.fallback_reason is None

    def test_any_of_is_not_exclusive(self):
        doc, table = compose({"A": obj("a"), "U": {"anyOf": [ref("A"), obj("b")]}})
        union = table.unions[doc.schemas["U"]]
        assert not union.exclusive
        assert union.variant_names == ("A", "UVariant")

    @pytest.mark.parametrize(
        "variants",
        [
            # discriminator property is an integer
            {"A": {"type": "object", "properties": {"event": {"type": "integer"}}}, "B": obj("event")},
            # integer const
            {"A": {"type": "object", "properties": {"event": {"type": "integer", "const": 1}}}, "B": obj("event")},
            # duplicate tags
            {
                "A": {"type": "object", "properties": {"event": {"type": "string", "const": "B"}}},
                "B": obj("event"),
            },
        ],
    )
    def test_ambiguous_tags_fall_back(self, variants, caplog):
        schemas = {**variants, "U": {"oneOf": [ref("A"), ref("B")], "discriminator": "event"}}
        with caplog.at_level(logging.WARNING):
            doc, table = compose(schemas)
        union = table.unions[doc.schemas["U"]]
        assert union.tagging is TaggingMode.UNTAGGED
        assert union.discriminator == "event"
        assert union.fallback_reason
        assert "falls back to untagged" in caplog.text

    def test_non_object_variant_falls_back(self):
        doc, table = compose({"A": obj("event"), "U": {"oneOf": [ref("A"), {"type": "string", "enum": ["x"]}], "discriminator": "event"}})
        union = table.unions[doc.schemas["U"]]
        assert union.tagging is TaggingMode.UNTAGGED
        assert "UVariant" in union.fallback_reason

    def test_strict_discriminator_raises(self):
        config = CodeGeneratorConfig(strict_discriminator=True)
        with pytest.raises(AmbiguousDiscriminatorError) as exc_info:
            compose(
                {
                    "A": {"type": "object", "properties": {"event": {"type": "string", "const": "same"}}},
                    "B": {"type": "object", "properties": {"event": {"type": "string", "const": "same"}}},
                    "U": {"oneOf": [ref("A"), ref("B")], "discriminator": "event"},
                },
                config,
            )
        assert exc_info.value.pointer == "#/components/schemas/U/discriminator"

    def test_primitive_anonymous_variant_rejected(self):
        with pytest.raises(InvalidCompositionMemberError) as exc_info:
            compose({"U": {"oneOf": [obj("a"), {"type": "string"}]}})
        assert exc_info.value.pointer == "#/components/schemas/U/oneOf/1"
