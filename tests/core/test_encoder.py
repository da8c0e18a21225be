"""Result Encoder — tests for the indented JSON writer.

Tests cover:
    - Escaping of quote, backslash, forward slash and control characters
    - Number/boolean/null canonical forms (bool before int)
    - Exact layout of nested, empty and non-empty containers
    - Non-string map keys and unknown value types raise EncodingError
    - Resources released exactly once on success and failure paths
"""

import io
import json
from decimal import Decimal

import pytest

from httprpc.core.encoder import ResultEncoder, escape_string, format_number
from httprpc.core.errors import EncodingError
from httprpc.core.values import Resource


@pytest.fixture
def encoder():
    return ResultEncoder()


def test_escapes_quote_backslash_and_slash(encoder):
    assert encoder.encode('a"b\\c/d') == '"a\\"b\\\\c\\/d"'


def test_escapes_control_characters():
    assert escape_string("\b\f\n\r\t") == '"\\b\\f\\n\\r\\t"'


def test_other_characters_pass_through_verbatim():
    assert escape_string("é ☃ \x01") == '"é ☃ \x01"'


def test_scalars(encoder):
    assert encoder.encode(None) == "null"
    assert encoder.encode(True) == "true"
    assert encoder.encode(False) == "false"
    assert encoder.encode(5) == "5"
    assert encoder.encode(2.5) == "2.5"
    assert encoder.encode(Decimal("1.10")) == "1.10"


def test_non_finite_floats():
    assert format_number(float("nan")) == "NaN"
    assert format_number(float("inf")) == "Infinity"
    assert format_number(float("-inf")) == "-Infinity"


@pytest.mark.parametrize("value, text", [
    (0.0, "0.0"),
    (-0.0, "-0.0"),
    (0.001, "0.001"),
    (1234567.0, "1234567.0"),
    (9999999.5, "9999999.5"),
    (1e7, "1.0E7"),
    (12345678.0, "1.2345678E7"),
    (-2.5e10, "-2.5E10"),
    (1e-5, "1.0E-5"),
    (0.000123, "1.23E-4"),
    (1e300, "1.0E300"),
])
def test_float_notation_switches_outside_positional_range(value, text):
    assert format_number(value) == text


def test_list_layout(encoder):
    assert encoder.encode([1, 2, 3]) == "[\n  1,\n  2,\n  3\n]"


def test_map_layout(encoder):
    assert encoder.encode({"a": 1, "b": "x"}) == '{\n  "a": 1,\n  "b": "x"\n}'


def test_empty_containers_keep_newline_before_closing(encoder):
    assert encoder.encode([]) == "[\n]"
    assert encoder.encode({}) == "{\n}"


def test_nested_empty_container_indents_at_outer_depth(encoder):
    assert encoder.encode({"items": []}) == '{\n  "items": [\n  ]\n}'


def test_nested_layout(encoder):
    value = {"name": "add", "parameters": [{"name": "a", "type": "number"}]}
    expected = (
        "{\n"
        '  "name": "add",\n'
        '  "parameters": [\n'
        "    {\n"
        '      "name": "a",\n'
        '      "type": "number"\n'
        "    }\n"
        "  ]\n"
        "}"
    )
    assert encoder.encode(value) == expected


def test_output_is_valid_json_for_plain_graphs(encoder):
    value = {"a": [1, 2.5, None, True, {"b": "c/d"}], "e": {}}
    assert json.loads(encoder.encode(value)) == value


def test_tuples_and_iterators_encode_as_lists(encoder):
    assert encoder.encode((1, 2)) == "[\n  1,\n  2\n]"
    assert encoder.encode(iter(["x"])) == '[\n  "x"\n]'


def test_map_keys_written_verbatim(encoder):
    assert encoder.encode({"a/b": 1}) == '{\n  "a/b": 1\n}'


@pytest.mark.parametrize("key", [1, 2.0, None, ("t",)])
def test_non_string_key_raises(encoder, key):
    with pytest.raises(EncodingError, match="Invalid key type"):
        encoder.encode({key: "v"})


@pytest.mark.parametrize("value", [{1, 2}, b"bytes", object(), 1j])
def test_unknown_value_type_raises(encoder, value):
    with pytest.raises(EncodingError, match="Invalid value type"):
        encoder.encode(value)


def test_partial_output_remains_on_fault(encoder):
    buffer = io.StringIO()
    with pytest.raises(EncodingError):
        encoder.write([1, object()], buffer)
    assert buffer.getvalue() == "[\n  1,\n  "


def test_resource_released_after_success(encoder):
    released = []
    resource = Resource(iter([{"id": 1}]), lambda: released.append(True))
    assert encoder.encode(resource) == '[\n  {\n    "id": 1\n  }\n]'
    assert released == [True]
    assert resource.closed


def test_resource_released_when_encoding_fails(encoder):
    released = []
    resource = Resource([object()], lambda: released.append(True))
    with pytest.raises(EncodingError, match="Invalid value type"):
        encoder.encode(resource)
    assert released == [True]


def test_release_failure_is_encoding_error(encoder):
    def release():
        raise OSError("handle lost")

    with pytest.raises(EncodingError, match="Resource release failed") as exc_info:
        encoder.encode(Resource([1], release))
    assert isinstance(exc_info.value.__cause__, OSError)


def test_nested_resources_each_released_once(encoder):
    calls = []
    inner = Resource([1], lambda: calls.append("inner"))
    outer = Resource({"rows": inner}, lambda: calls.append("outer"))
    encoder.encode(outer)
    encoder.encode(outer)
    assert calls == ["inner", "outer"]
