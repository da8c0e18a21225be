"""Result Encoder — depth-first, streaming writer from a value graph to indented JSON text.

Invariants:
    - Escapes exactly: " \\ / \\b \\f \\n \\r \\t; every other character passes through
    - Containers always emit newline + indent before the closing bracket, even when
      empty ("[\\n]" at depth 0), matching the established wire format
    - Map keys must be str; anything else raises EncodingError
    - A Resource is released exactly once after its value is encoded, on every
      exit path; a failed release raises EncodingError even if encoding succeeded
    - Output already written stays written when a fault occurs mid-graph

Design Decisions:
    - Writes to any object with write(str) (io.StringIO, text file, response buffer)
    - Indentation is two spaces per depth level; depth increases inside brackets
"""

import io
import math
from collections.abc import Iterator, Mapping
from decimal import Decimal
from typing import Any, Protocol

from httprpc.core.domain_types import JSON_MIME_TYPE
from httprpc.core.errors import EncodingError
from httprpc.core.values import Resource

_INDENT = "  "

_POSITIONAL_MIN = 1e-3
_POSITIONAL_MAX = 1e7

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "/": "\\/",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_ESCAPE_TABLE = str.maketrans(_ESCAPES)


class TextWriter(Protocol):
    def write(self, text: str) -> Any: ...


class ValueEncoder(Protocol):
    """Anything that renders an operation result as text of one content type."""
    content_type: str

    def write(self, value: Any, writer: TextWriter) -> None: ...


def escape_characters(value: str) -> str:
    """Apply the wire escapes without surrounding quotes."""
    return value.translate(_ESCAPE_TABLE)


def escape_string(value: str) -> str:
    """Quote and escape a string for the wire."""
    return '"' + escape_characters(value) + '"'


def format_number(value: int | float | Decimal) -> str:
    """Canonical textual form of a numeric value.

    Floats in [1e-3, 1e7) are positional ("0.001", "1234567.0"); outside that
    range they use a shortest-digit mantissa and an "E" exponent with no
    plus sign ("1.0E7", "1.5E-5").
    """
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return _format_double(value)
    return str(value)


def _format_double(value: float) -> str:
    magnitude = abs(value)
    if magnitude == 0.0 or _POSITIONAL_MIN <= magnitude < _POSITIONAL_MAX:
        return repr(value)
    shortest = Decimal(repr(magnitude))
    digits = "".join(map(str, shortest.as_tuple().digits)).rstrip("0") or "0"
    sign = "-" if value < 0 else ""
    return f"{sign}{digits[0]}.{digits[1:] or '0'}E{shortest.adjusted()}"


class ResultEncoder:
    """Serializes value graphs produced by operations."""

    content_type = JSON_MIME_TYPE

    def write(self, value: Any, writer: TextWriter) -> None:
        self._write_value(writer, value, 0)

    def encode(self, value: Any) -> str:
        """Convenience wrapper returning the encoded text."""
        buffer = io.StringIO()
        self.write(value, buffer)
        return buffer.getvalue()

    def _write_value(self, writer: TextWriter, value: Any, depth: int) -> None:
        if isinstance(value, Resource):
            self._write_resource(writer, value, depth)
        elif value is None:
            writer.write("null")
        elif isinstance(value, str):
            writer.write(escape_string(value))
        elif isinstance(value, bool):
            writer.write("true" if value else "false")
        elif isinstance(value, (int, float, Decimal)):
            writer.write(format_number(value))
        elif isinstance(value, Mapping):
            self._write_map(writer, value, depth)
        elif isinstance(value, (list, tuple, Iterator)):
            self._write_list(writer, value, depth)
        else:
            raise EncodingError("Invalid value type.")

    def _write_resource(self, writer: TextWriter, resource: Resource, depth: int) -> None:
        try:
            self._write_value(writer, resource.value, depth)
        finally:
            try:
                resource.close()
            except Exception as e:
                raise EncodingError("Resource release failed.") from e

    def _write_list(self, writer: TextWriter, values: Any, depth: int) -> None:
        writer.write("[")
        inner = depth + 1
        for i, element in enumerate(values):
            if i > 0:
                writer.write(",")
            writer.write("\n")
            writer.write(_INDENT * inner)
            self._write_value(writer, element, inner)
        writer.write("\n")
        writer.write(_INDENT * depth)
        writer.write("]")

    def _write_map(self, writer: TextWriter, values: Mapping, depth: int) -> None:
        writer.write("{")
        inner = depth + 1
        for i, (key, element) in enumerate(values.items()):
            if i > 0:
                writer.write(",")
            writer.write("\n")
            if not isinstance(key, str):
                raise EncodingError("Invalid key type.")
            writer.write(_INDENT * inner)
            writer.write(f'"{key}": ')
            self._write_value(writer, element, inner)
        writer.write("\n")
        writer.write(_INDENT * depth)
        writer.write("}")
