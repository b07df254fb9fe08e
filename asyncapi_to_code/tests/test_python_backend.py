"""
Tests for the Python code generation backend.
"""

from __future__ import annotations

import ast
import sys
import types
from pathlib import Path

import pytest

from asyncapi_to_code.loader import load_document
from asyncapi_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator

SAMPLE = Path(__file__).parent / "test_data" / "asyncapi.yaml"


def generate(document, **config_values):
    config = CodeGeneratorConfig.from_dict({"add_generation_comment": False, **config_values})
    return PipelineGenerator(document, config).generate()


def generate_schemas(schemas, **config_values):
    return generate({"components": {"schemas": schemas}}, **config_values)


def load_module(code: str, monkeypatch) -> types.ModuleType:
    """Execute generated code as a real module."""
    module = types.ModuleType("generated_models")
    monkeypatch.setitem(sys.modules, module.__name__, module)
    exec(compile(code, "generated_models.py", "exec"), module.__dict__)
    return module


@pytest.fixture
def sample_code():
    return generate(load_document(SAMPLE))


class TestSampleCode:
    def test_is_valid_python(self, sample_code):
        tree = ast.parse(sample_code)
        classes = [node.name for node in tree.body if isinstance(node, ast.ClassDef)]
        assert classes == [
            "RequestBase",
            "GetUserData",
            "GetUserInner",
            "GetUser",
            "DeleteUserData",
            "DeleteUserInner",
            "DeleteUser",
        ]

    def test_header(self, sample_code):
        assert sample_code.startswith(
            "from __future__ import annotations\n\n"
            "from dataclasses import dataclass, field\n"
            "from dataclasses_json import config, dataclass_json\n"
            "from typing import Literal\n\n\n"
        )

    def test_entity(self, sample_code):
        expected = (
            "@dataclass_json\n"
            "@dataclass\n"
            "class RequestBase:\n"
            "    id: str\n"
            '    kind: Literal["request"] = "request"\n'
            '    my_date: str | None = field(default=None, metadata=config(field_name="myDate"))\n'
        )
        assert expected in sample_code

    def test_composite_entity(self, sample_code):
        expected = (
            "@dataclass_json\n"
            "@dataclass\n"
            "class GetUser:\n"
            '    """\n'
            "    Fetch a user by id\n"
            "\n"
            "    Composed of: RequestBase (request_base), GetUserInner (get_user_inner).\n"
            '    """\n'
            "\n"
            "    id: str\n"
            "    data: GetUserData\n"
            '    kind: Literal["request"] = "request"\n'
            '    my_date: str | None = field(default=None, metadata=config(field_name="myDate"))\n'
            '    event: Literal["getUser"] = "getUser"\n'
        )
        assert expected in sample_code

    def test_discriminated_union(self, sample_code):
        expected = (
            "# Discriminated by 'event'\n"
            "SampleRequestPayload = GetUser | DeleteUser\n"
            "\n"
            "SAMPLE_REQUEST_PAYLOAD_TAGS: dict[str, type] = {\n"
            '    "getUser": GetUser,\n'
            '    "DeleteUser": DeleteUser,\n'
            "}\n"
            "\n"
            "\n"
            "def sample_request_payload_from_dict(data: dict) -> SampleRequestPayload:\n"
            '    """Decode a SampleRequestPayload by its "event" tag."""\n'
            '    return SAMPLE_REQUEST_PAYLOAD_TAGS[data["event"]].from_dict(data)\n'
        )
        assert sample_code.endswith(expected)

    def test_generated_module_runs(self, sample_code, monkeypatch):
        module = load_module(sample_code, monkeypatch)
        request = module.GetUser(id="1", data=module.GetUserData(user_id="42"))
        assert request.kind == "request"
        assert request.event == "getUser"
        assert module.SAMPLE_REQUEST_PAYLOAD_TAGS["DeleteUser"] is module.DeleteUser
        assert isinstance(request, module.SampleRequestPayload)


class TestRendering:
    def test_generation_comment(self):
        code = PipelineGenerator(load_document(SAMPLE)).generate("Generated by test")
        assert code.startswith("# Generated by test\n\nfrom __future__ import annotations\n")

    def test_enum(self, monkeypatch):
        code = generate_schemas(
            {"Task": {"type": "object", "properties": {"state": {"type": "string", "enum": ["in-progress", "done", "Done"]}}}}
        )
        assert "class TaskState(str, Enum):\n" in code
        assert '    IN_PROGRESS = "in-progress"\n    DONE = "done"\n    DONE_2 = "Done"\n' in code
        assert "from enum import Enum\n" in code
        module = load_module(code, monkeypatch)
        assert module.TaskState("done") is module.TaskState.DONE

    def test_catch_all(self):
        code = generate_schemas(
            {"Bag": {"type": "object", "properties": {"id": {"type": "string"}}, "additionalProperties": {"type": "integer"}}}
        )
        assert "from dataclasses import dataclass, field\n" in code
        assert "from dataclasses_json import CatchAll, Undefined, dataclass_json\n" in code
        assert "@dataclass_json(undefined=Undefined.INCLUDE)\n@dataclass\nclass Bag:\n" in code
        assert "    additional_properties: CatchAll = field(default_factory=dict)  # values: int\n" in code

    def test_container_types(self):
        code = generate_schemas(
            {
                "Shape": {
                    "type": "object",
                    "properties": {
                        "points": {"type": "array", "items": {"type": "array", "prefixItems": [{"type": "number"}, {"type": "number"}]}},
                        "meta": {"type": "object"},
                        "anything": {},
                        "scale": {"type": "number"},
                        "hidden": {"type": "boolean"},
                    },
                    "required": ["points", "meta", "anything"],
                }
            }
        )
        assert "    points: list[tuple[float, float]]\n" in code
        assert "    meta: dict[str, Any]\n" in code
        assert "    anything: Any\n" in code
        assert "    scale: float | None = None\n" in code
        assert "from typing import Any\n" in code

    def test_keyword_property(self):
        code = generate_schemas({"Flow": {"type": "object", "properties": {"from": {"type": "string"}}, "required": ["from"]}})
        assert '    from_: str = field(metadata=config(field_name="from"))\n' in code

    def test_untagged_union(self):
        code = generate_schemas(
            {
                "A": {"type": "object", "properties": {"a": {"type": "string"}}},
                "B": {"type": "object", "properties": {"b": {"type": "string"}}},
                "U": {"anyOf": [{"$ref": "#/components/schemas/A"}, {"$ref": "#/components/schemas/B"}]},
            }
        )
        assert "# Untagged: first match in order A, B\nU = A | B\n" in code
        assert "_TAGS" not in code

    def test_empty_entity(self):
        code = generate_schemas({"Empty": {"type": "object", "properties": {}}})
        assert "@dataclass_json\n@dataclass\nclass Empty:\n    pass\n" in code

    def test_eager_annotations_are_quoted(self, monkeypatch):
        code = generate(load_document(SAMPLE), use_future_annotations=False)
        assert "from __future__" not in code
        assert '    data: "GetUserData"\n' in code
        module = load_module(code, monkeypatch)
        assert module.GetUserInner(data=module.GetUserData(user_id="1")).event == "getUser"

    def test_type_names_become_identifiers(self):
        code = generate_schemas(
            {
                "user-signedup": {
                    "type": "object",
                    "properties": {"user": {"title": "User Info", "type": "object", "properties": {"name": {"type": "string"}}}},
                },
                "UserSignedup": {"type": "object", "properties": {"id": {"type": "string"}}},
                "signup-event": {"oneOf": [{"$ref": "#/components/schemas/user-signedup"}, {"$ref": "#/components/schemas/UserSignedup"}]},
            }
        )
        tree = ast.parse(code)
        classes = [node.name for node in tree.body if isinstance(node, ast.ClassDef)]
        assert classes == ["UserInfo", "UserSignedup_2", "UserSignedup"]
        assert "    user: UserInfo | None = None\n" in code
        assert "SignupEvent = UserSignedup_2 | UserSignedup\n" in code

    def test_union_reference_cycle(self, monkeypatch):
        code = generate_schemas(
            {
                "A": {"type": "object", "properties": {"a": {"type": "string"}}},
                "U1": {"anyOf": [{"$ref": "#/components/schemas/U2"}, {"$ref": "#/components/schemas/A"}]},
                "U2": {"anyOf": [{"$ref": "#/components/schemas/U1"}, {"$ref": "#/components/schemas/A"}]},
            }
        )
        assert 'U2: TypeAlias = "U1 | A"\n' in code
        assert 'U1: TypeAlias = "U2 | A"\n' in code
        assert "from typing import TypeAlias\n" in code
        module = load_module(code, monkeypatch)
        assert module.U1 == "U2 | A"


class TestDecoding:
    """Generated classes decode and encode JSON payloads"""

    def test_discriminated_payloads(self, sample_code, monkeypatch):
        module = load_module(sample_code, monkeypatch)
        payload = {
            "id": "1",
            "kind": "request",
            "myDate": "2024-05-01T10:00:00Z",
            "event": "getUser",
            "data": {"userId": "42"},
        }
        request = module.sample_request_payload_from_dict(payload)
        assert isinstance(request, module.GetUser)
        assert request.data.user_id == "42"
        assert request.my_date == "2024-05-01T10:00:00Z"
        assert request.to_dict() == payload

        delete = module.sample_request_payload_from_dict(
            {"id": "2", "kind": "request", "event": "DeleteUser", "data": {"userId": "42", "hard": True}}
        )
        assert isinstance(delete, module.DeleteUser)
        assert delete.data.hard is True

    def test_unknown_tag(self, sample_code, monkeypatch):
        module = load_module(sample_code, monkeypatch)
        with pytest.raises(KeyError):
            module.sample_request_payload_from_dict({"event": "renameUser"})

    def test_catch_all_round_trip(self, monkeypatch):
        code = generate_schemas(
            {
                "Bag": {
                    "type": "object",
                    "properties": {"bagId": {"type": "string"}},
                    "required": ["bagId"],
                    "additionalProperties": {"type": "integer"},
                }
            }
        )
        module = load_module(code, monkeypatch)
        bag = module.Bag.from_dict({"bagId": "b1", "apples": 3})
        assert bag.bag_id == "b1"
        assert bag.additional_properties == {"apples": 3}
        assert bag.to_dict() == {"bagId": "b1", "apples": 3}
