import pytest

from asyncapi_to_code.utils import (
    format_pointer,
    pascal_to_snake_case,
    schema_pointer,
    snake_to_pascal_case,
    to_class_name,
    to_constant_name,
    to_python_identifier,
    unescape_pointer_token,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("first_name", "FirstName"),
        ("userId", "UserId"),
        ("shipping-address", "ShippingAddress"),
        ("first 3 rows", "First3Rows"),
        ("", ""),
    ],
)
def test_snake_to_pascal_case(text, expected):
    assert snake_to_pascal_case(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("RequestBase", "request_base"),
        ("GetUserInner", "get_user_inner"),
        ("userId", "user_id"),
        ("module_version_id", "module_version_id"),
    ],
)
def test_pascal_to_snake_case(text, expected):
    assert pascal_to_snake_case(text) == expected


def test_python_identifiers():
    assert to_python_identifier("myDate") == "my_date"
    assert to_python_identifier("class") == "class_"
    assert to_python_identifier("3d") == "_3_d"
    assert to_python_identifier("$$") == "field"


def test_constant_names():
    assert to_constant_name("in-progress") == "IN_PROGRESS"
    assert to_constant_name("SampleRequestPayload") == "SAMPLE_REQUEST_PAYLOAD"
    assert to_constant_name("2fa") == "_2_FA"
    assert to_constant_name("") == "EMPTY"


def test_pointers():
    assert format_pointer(()) == "#"
    assert format_pointer(("components", "schemas", "GetUser", "allOf", 1)) == "#/components/schemas/GetUser/allOf/1"
    assert format_pointer(("components", "schemas", "a/b~c")) == "#/components/schemas/a~1b~0c"
    assert schema_pointer("a/b") == "#/components/schemas/a~1b"
    assert unescape_pointer_token("a~1b~0c") == "a/b~c"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("GetUser", "GetUser"),
        ("user-signedup", "UserSignedup"),
        ("User Info", "UserInfo"),
        ("3d-point", "_3DPoint"),
        ("None", "None_"),
        ("", "Model"),
    ],
)
def test_class_names(text, expected):
    assert to_class_name(text) == expected
