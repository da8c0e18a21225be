"""Template Encoder — renders a value graph through a mustache-style text template.

Markers:
    {{name}}  {{a.b}}  {{.}}        value of a key, a dotted path, or the current value
    {{name:format=%.2f:^html}}      value passed through modifiers, left to right
    {{#name}} ... {{/name}}         section: once per list element, once for a
                                    mapping or any other non-empty value
    {{^name}} ... {{/name}}         inverted section: only when the value is
                                    missing, false or empty
    {{>other.txt}}                  include another template against the current value
    {{@key}}                        text from the encoder's resource bundle
    {{$name}}                       encoder context property
    {{!...}}                        comment

Invariants:
    - Missing keys and null values render as empty text; a null root renders nothing
    - Names resolve against the current value only, never a parent section's value
    - Unknown modifier names are skipped
    - {{@key}} without a bundle, or with a key the bundle lacks, raises MissingResourceError
    - Each template is parsed once per encoder and cached by name, so a template
      may include itself
    - A Resource at the root or as a section value is released after rendering

Design Decisions:
    - Modifiers live in a module-level registry so applications can add their own
      (@register_modifier); escape modifiers are named with a leading "^"
    - Template text comes from a TemplateLoader; core/ never touches the filesystem
"""

import datetime
import io
import logging
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol
from urllib.parse import quote_plus

from httprpc.core.domain_types import TEXT_MIME_TYPE
from httprpc.core.encoder import TextWriter, escape_characters, format_number
from httprpc.core.errors import EncodingError, MissingResourceError, TemplateError
from httprpc.core.localization import TextBundle
from httprpc.core.values import Resource

logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
# ":" starts a modifier only when a modifier name follows, so "%H:%M" stays intact
_MODIFIER_SPLIT_RE = re.compile(r":(?=\^?[A-Za-z_]\w*(?:=|:|$))")


# ─── Parsed form ─────────────────────────────────────────────────

class MarkerKind(str, Enum):
    VALUE = "value"
    RESOURCE = "resource"
    CONTEXT = "context"
    INCLUDE = "include"


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Marker:
    kind: MarkerKind
    name: str
    modifiers: tuple[tuple[str, str | None], ...] = ()


@dataclass(frozen=True)
class Section:
    name: str
    body: tuple["Node", ...]
    inverted: bool = False


Node = Text | Marker | Section


def _marker(kind: MarkerKind, spec: str) -> Marker:
    name, *parts = _MODIFIER_SPLIT_RE.split(spec)
    modifiers = []
    for part in parts:
        modifier, has_argument, argument = part.partition("=")
        modifiers.append((modifier.strip(), argument if has_argument else None))
    return Marker(kind, name.strip(), tuple(modifiers))


def parse_template(text: str, name: str = "<template>") -> tuple[Node, ...]:
    """Parse template text into a node tree. Raises TemplateError on bad nesting."""
    root: list[Node] = []
    body = root
    open_sections: list[tuple[str, bool, list[Node]]] = []
    position = 0

    for match in _MARKER_RE.finditer(text):
        if match.start() > position:
            body.append(Text(text[position:match.start()]))
        position = match.end()

        tag = match.group(1).strip()
        if not tag:
            raise TemplateError(f"Empty marker in template '{name}'.", name)
        sigil, rest = tag[0], tag[1:].strip()

        if sigil == "!":
            continue
        if sigil in "#^":
            if not rest:
                raise TemplateError(f"Unnamed section in template '{name}'.", name)
            open_sections.append((rest, sigil == "^", body))
            body = []
        elif sigil == "/":
            if not open_sections or open_sections[-1][0] != rest:
                raise TemplateError(
                    f"Unexpected end of section '{rest}' in template '{name}'.", name,
                )
            section_name, inverted, parent = open_sections.pop()
            parent.append(Section(section_name, tuple(body), inverted))
            body = parent
        elif sigil == ">":
            body.append(Marker(MarkerKind.INCLUDE, rest))
        elif sigil == "@":
            body.append(_marker(MarkerKind.RESOURCE, rest))
        elif sigil == "$":
            body.append(_marker(MarkerKind.CONTEXT, rest))
        else:
            body.append(_marker(MarkerKind.VALUE, tag))

    if open_sections:
        raise TemplateError(
            f"Unterminated section '{open_sections[-1][0]}' in template '{name}'.", name,
        )
    if position < len(text):
        body.append(Text(text[position:]))
    return tuple(root)


# ─── Modifiers ───────────────────────────────────────────────────

Modifier = Callable[[Any, str | None, str], Any]

modifiers: dict[str, Modifier] = {}


def register_modifier(name: str) -> Callable[[Modifier], Modifier]:
    """Register `fn(value, argument, locale) -> value` under a marker modifier name."""
    def decorator(fn: Modifier) -> Modifier:
        modifiers[name] = fn
        return fn
    return decorator


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return format_number(value)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


DATE_STYLES = {
    "shortDate": "%m/%d/%y",
    "mediumDate": "%b %d, %Y",
    "longDate": "%B %d, %Y",
    "fullDate": "%A, %B %d, %Y",
    "shortTime": "%H:%M",
    "mediumTime": "%H:%M:%S",
    "shortDateTime": "%m/%d/%y %H:%M",
    "mediumDateTime": "%b %d, %Y %H:%M:%S",
}


@register_modifier("format")
def format_value(value: Any, argument: str | None, locale: str) -> Any:
    """printf-style for numbers; a DATE_STYLES name, "iso" or strftime for dates."""
    if value is None or not argument:
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        if argument == "iso":
            return value.isoformat()
        return value.strftime(DATE_STYLES.get(argument, argument))
    try:
        return argument % value
    except (TypeError, ValueError) as e:
        raise TemplateError(f"Invalid format '{argument}'.") from e


_MARKUP_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
})


@register_modifier("^url")
def escape_url(value: Any, argument: str | None, locale: str) -> str:
    return quote_plus(to_text(value))


@register_modifier("^html")
@register_modifier("^xml")
def escape_markup(value: Any, argument: str | None, locale: str) -> str:
    return to_text(value).translate(_MARKUP_ESCAPES)


@register_modifier("^json")
def escape_json(value: Any, argument: str | None, locale: str) -> str:
    return escape_characters(to_text(value))


@register_modifier("^csv")
def escape_csv(value: Any, argument: str | None, locale: str) -> str:
    return to_text(value).replace('"', '""')


# ─── Rendering ───────────────────────────────────────────────────

class TemplateLoader(Protocol):
    def load(self, name: str) -> str: ...


class MappingTemplateLoader:
    """Templates held in memory, keyed by name."""

    def __init__(self, templates: Mapping[str, str]):
        self._templates = dict(templates)

    def load(self, name: str) -> str:
        try:
            return self._templates[name]
        except KeyError:
            raise TemplateError(f"Template '{name}' not found.", name) from None


def lookup(value: Any, path: str) -> Any:
    """Resolve "." or a dotted key path against one value; misses are None."""
    if path == ".":
        return value
    for key in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def _section_items(value: Any) -> Iterable[Any]:
    if value is None or value is False:
        return ()
    if isinstance(value, (list, tuple, Iterator)):
        return value
    if isinstance(value, (Mapping, str)) and not value:
        return ()
    return (value,)


class TemplateEncoder:
    """Renders operation results through a named template."""

    def __init__(
        self,
        name: str,
        loader: TemplateLoader,
        content_type: str = TEXT_MIME_TYPE,
        bundle: TextBundle | None = None,
        locale: str = "en",
    ):
        self.name = name
        self.content_type = content_type
        self.bundle = bundle
        self.locale = locale
        self.context: dict[str, Any] = {}
        self._loader = loader
        self._templates: dict[str, tuple[Node, ...]] = {}

    @classmethod
    def from_string(cls, text: str, **kwargs: Any) -> "TemplateEncoder":
        name = "<string>"
        return cls(name, MappingTemplateLoader({name: text}), **kwargs)

    def write(self, value: Any, writer: TextWriter, locale: str | None = None) -> None:
        locale = locale or self.locale
        nodes = self._template(self.name)
        if isinstance(value, Resource):
            self._released(value, lambda inner: self._write_root(nodes, inner, writer, locale))
        else:
            self._write_root(nodes, value, writer, locale)

    def encode(self, value: Any, locale: str | None = None) -> str:
        buffer = io.StringIO()
        self.write(value, buffer, locale)
        return buffer.getvalue()

    def _template(self, name: str) -> tuple[Node, ...]:
        nodes = self._templates.get(name)
        if nodes is None:
            nodes = parse_template(self._loader.load(name), name)
            self._templates[name] = nodes
        return nodes

    def _write_root(
        self, nodes: tuple[Node, ...], value: Any, writer: TextWriter, locale: str,
    ) -> None:
        if value is not None:
            self._render(nodes, value, writer, locale)

    def _render(
        self, nodes: tuple[Node, ...], value: Any, writer: TextWriter, locale: str,
    ) -> None:
        for node in nodes:
            if isinstance(node, Text):
                writer.write(node.text)
            elif isinstance(node, Section):
                self._render_section(node, value, writer, locale)
            elif node.kind is MarkerKind.INCLUDE:
                self._render(self._template(node.name), value, writer, locale)
            else:
                writer.write(to_text(self._apply(node, self._resolve(node, value), locale)))

    def _render_section(
        self, section: Section, value: Any, writer: TextWriter, locale: str,
    ) -> None:
        target = lookup(value, section.name)

        def render(items_value: Any) -> None:
            items = _section_items(items_value)
            if section.inverted:
                if not list(items):
                    self._render(section.body, value, writer, locale)
                return
            for item in items:
                self._render(section.body, item, writer, locale)

        if isinstance(target, Resource):
            self._released(target, render)
        else:
            render(target)

    def _resolve(self, marker: Marker, value: Any) -> Any:
        if marker.kind is MarkerKind.RESOURCE:
            text = self.bundle.get(marker.name) if self.bundle is not None else None
            if text is None:
                raise MissingResourceError(marker.name)
            return text
        if marker.kind is MarkerKind.CONTEXT:
            return self.context.get(marker.name)
        return lookup(value, marker.name)

    @staticmethod
    def _apply(marker: Marker, value: Any, locale: str) -> Any:
        for name, argument in marker.modifiers:
            modifier = modifiers.get(name)
            if modifier is None:
                logger.debug(f"Skipping unknown modifier '{name}'")
                continue
            value = modifier(value, argument, locale)
        return value

    @staticmethod
    def _released(resource: Resource, render: Callable[[Any], None]) -> None:
        try:
            render(resource.value)
        finally:
            try:
                resource.close()
            except Exception as e:
                raise EncodingError("Resource release failed.") from e
