"""Cypher reader for ``CREATE`` statements.

Only ``CREATE`` clauses are read; any other clause is skipped. A node with a
label or a property map defines an entity whose id is its variable name;
a bare ``(var)`` refers to an entity defined elsewhere in the script.
Relationship types map onto canonical link types by keyword; anything
unmatched becomes ``associates`` and keeps its name as ``relationship``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from linkchart.domain.errors import FormatError
from linkchart.domain.model import EntityType, LinkType, RawEntity, RawGraph, RawLink, as_text
from linkchart.domain.profiles import ENTITY_TYPE_ALIASES, link_type_for_keyword

from .base import read_text, synthesized_id, synthesized_link_id

if TYPE_CHECKING:
    from linkchart.domain.ports import ReadRequest

log = getLogger(__name__)

FORMAT_NAME = "cypher"
QUOTES: Final = "'\"`"
OPENERS: Final = {"(": ")", "[": "]", "{": "}"}
CLOSERS: Final = frozenset(OPENERS.values())
CLAUSE = re.compile(
    r"\b(CREATE|MATCH|MERGE|RETURN|WITH|SET|DELETE|DETACH|REMOVE|WHERE|UNWIND|CALL|"
    r"OPTIONAL|FOREACH)\b|;",
    re.IGNORECASE,
)
NAME = r"[A-Za-z_][A-Za-z0-9_]*|`[^`]+`"
PATTERN_HEAD = re.compile(
    rf"^\s*(?P<var>{NAME})?\s*(?P<labels>(?::\s*(?:{NAME})\s*)*)", re.DOTALL
)
LABEL = re.compile(rf":\s*({NAME})")
NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
ESCAPES: Final = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}
LABEL_PROPERTIES: Final = ("name", "title")


def _fail(message: str) -> FormatError:
    return FormatError(message, format_name=FORMAT_NAME)


def _scan_string(text: str, start: int) -> int:
    """Index just past the quoted string opening at ``start``."""

    quote = text[start]
    index = start + 1
    while index < len(text):
        char = text[index]
        if char == "\\" and quote != "`":
            index += 2
            continue
        if char == quote:
            return index + 1
        index += 1
    raise _fail(f"Unterminated string starting at offset {start}")


def strip_comments(text: str) -> str:
    out: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char in QUOTES:
            end = _scan_string(text, index)
            out.append(text[index:end])
            index = end
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = len(text) if newline < 0 else newline
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            if end < 0:
                raise _fail("Unterminated block comment")
            out.append(" ")
            index = end + 2
        else:
            out.append(char)
            index += 1
    return "".join(out)


def _mask_strings(text: str) -> str:
    """Same-length copy of ``text`` with string contents blanked out."""

    out: list[str] = []
    index = 0
    while index < len(text):
        if text[index] in QUOTES:
            end = _scan_string(text, index)
            out.append(text[index] + "_" * (end - index - 2) + text[end - 1])
            index = end
        else:
            out.append(text[index])
            index += 1
    return "".join(out)


def create_segments(text: str) -> list[str]:
    """Pattern text following each ``CREATE`` keyword."""

    masked = _mask_strings(text)
    boundaries = list(CLAUSE.finditer(masked))
    segments: list[str] = []
    for position, match in enumerate(boundaries):
        if (match.group(1) or "").upper() != "CREATE":
            continue
        end = boundaries[position + 1].start() if position + 1 < len(boundaries) else len(text)
        segments.append(text[match.end() : end])
    return segments


def _split_top_level(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = index = 0
    while index < len(text):
        char = text[index]
        if char in QUOTES:
            index = _scan_string(text, index)
            continue
        if char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth -= 1
        elif char == separator and depth == 0:
            parts.append(text[start:index])
            start = index + 1
        index += 1
    parts.append(text[start:])
    return parts


def _unquote(text: str) -> str:
    body = text[1:-1]
    if text[0] == "`":
        return body
    out: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            out.append(ESCAPES.get(body[index + 1], body[index + 1]))
            index += 2
        else:
            out.append(char)
            index += 1
    return "".join(out)


def parse_value(text: str) -> object:
    """Literal value: string, number, boolean, null or list; other text is kept verbatim."""

    raw = text.strip()
    if not raw:
        return None
    if raw[0] in QUOTES and raw[-1] == raw[0] and len(raw) > 1:
        return _unquote(raw)
    if NUMBER.match(raw):
        return float(raw) if any(char in raw for char in ".eE") else int(raw)
    lowered = raw.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    if lowered == "null":
        return None
    if raw.startswith("[") and raw.endswith("]"):
        inner = raw[1:-1]
        if not inner.strip():
            return []
        return [parse_value(item) for item in _split_top_level(inner, ",")]
    return raw


def parse_map(text: str) -> dict[str, object]:
    body = text.strip()
    if not (body.startswith("{") and body.endswith("}")):
        raise _fail(f"Expected a property map, got {body[:40]!r}")
    values: dict[str, object] = {}
    inner = body[1:-1]
    if not inner.strip():
        return values
    for entry in _split_top_level(inner, ","):
        key, sep, value = entry.partition(":")
        key = key.strip()
        if not sep or not key:
            raise _fail(f"Malformed property entry {entry.strip()!r}")
        if key[0] in QUOTES:
            key = _unquote(key)
        values[key] = parse_value(value)
    return values


@dataclass(slots=True)
class _Element:
    variable: str | None
    labels: list[str]
    properties: dict[str, object] | None


def _parse_element(content: str) -> _Element:
    head = PATTERN_HEAD.match(content)
    if head is None:
        raise _fail(f"Malformed pattern {content.strip()!r}")
    rest = content[head.end() :].strip()
    properties = parse_map(rest) if rest else None
    variable = head.group("var")
    if variable and variable.startswith("`"):
        variable = variable[1:-1]
    labels = [label.strip("`") for label in LABEL.findall(head.group("labels"))]
    return _Element(variable=variable, labels=labels, properties=properties)


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.index = 0

    def skip_space(self) -> None:
        while self.index < len(self.text) and self.text[self.index].isspace():
            self.index += 1

    def peek(self) -> str:
        self.skip_space()
        return self.text[self.index] if self.index < len(self.text) else ""

    def take(self, char: str) -> bool:
        if self.peek() == char:
            self.index += 1
            return True
        return False

    def expect(self, char: str) -> None:
        if not self.take(char):
            found = self.text[self.index : self.index + 20]
            raise _fail(f"Expected {char!r} at {found!r}")

    def group(self, opener: str) -> str:
        """Body of the bracketed group opening at the cursor."""

        self.expect(opener)
        start = self.index
        depth = 1
        while self.index < len(self.text):
            char = self.text[self.index]
            if char in QUOTES:
                self.index = _scan_string(self.text, self.index)
                continue
            if char in OPENERS:
                depth += 1
            elif char in CLOSERS:
                depth -= 1
                if depth == 0:
                    self.index += 1
                    return self.text[start : self.index - 1]
            self.index += 1
        raise _fail(f"Unbalanced {opener!r}")


@dataclass(slots=True)
class _GraphBuilder:
    source_id: str
    graph: RawGraph = field(default_factory=RawGraph)

    def node(self, element: _Element) -> str:
        entity_id = element.variable or synthesized_id(
            FORMAT_NAME, self.source_id, len(self.graph.entities)
        )
        if not element.labels and element.properties is None and element.variable is not None:
            return entity_id

        properties = dict(element.properties or {})
        existing = self.graph.entities.get(entity_id)
        if existing is not None:
            for name, value in properties.items():
                existing.properties.setdefault(name, value)
            return entity_id

        entity_type = EntityType.PERSON.value
        if element.labels:
            declared = element.labels[0]
            resolved = _entity_type(declared)
            if resolved is None:
                properties.setdefault("source_type", declared)
            else:
                entity_type = resolved
            if len(element.labels) > 1:
                properties.setdefault("labels", element.labels)
        label = next(
            (properties[key] for key in LABEL_PROPERTIES if as_text(properties.get(key))), None
        )
        self.graph.entities[entity_id] = RawEntity(
            id=entity_id, type=entity_type, label=label, properties=properties
        )
        return entity_id

    def link(self, source: str, target: str, element: _Element) -> None:
        link_id = synthesized_link_id(FORMAT_NAME, self.source_id, len(self.graph.links))
        properties = dict(element.properties or {})
        link_type = None
        if element.labels:
            declared = element.labels[0]
            link_type = link_type_for_keyword(declared) or LinkType.ASSOCIATES.value
            if link_type != declared.lower():
                properties.setdefault("relationship", declared)
        self.graph.links[link_id] = RawLink(
            id=link_id,
            source=source,
            target=target,
            type=link_type,
            label=properties.pop("label", None),
            properties=properties,
        )


def _entity_type(label: str) -> str | None:
    lowered = label.lower()
    if lowered in set(EntityType):
        return lowered
    return ENTITY_TYPE_ALIASES.get(lowered)


def _parse_segment(segment: str, builder: _GraphBuilder) -> None:
    scanner = _Scanner(segment)
    while scanner.peek():
        current = builder.node(_parse_element(scanner.group("(")))
        while scanner.peek() in {"-", "<"}:
            incoming = scanner.take("<")
            scanner.expect("-")
            relationship = scanner.group("[") if scanner.peek() == "[" else ""
            scanner.expect("-")
            scanner.take(">")
            element = _parse_element(relationship)
            following = builder.node(_parse_element(scanner.group("(")))
            if incoming:
                builder.link(following, current, element)
            else:
                builder.link(current, following, element)
            current = following
        if scanner.peek():
            scanner.expect(",")


class CypherReader:
    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        text = read_text(request.path, format_name=FORMAT_NAME, encoding=request.encoding)
        return self.parse(text, source_id=request.source_id)

    def parse(self, text: str, *, source_id: str) -> RawGraph:
        builder = _GraphBuilder(source_id=source_id)
        segments = create_segments(strip_comments(text))
        for segment in segments:
            _parse_segment(segment, builder)
        log.debug(
            "Cypher script: %d CREATE clauses, %d entities, %d links",
            len(segments),
            len(builder.graph.entities),
            len(builder.graph.links),
        )
        return builder.graph
