"""Namespace-agnostic ElementTree helpers for the XML graph formats."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from linkchart.domain.errors import FormatError
from linkchart.domain.recognizers import parse_number

if TYPE_CHECKING:
    from collections.abc import Iterator

TRUE_VALUES = frozenset({"true", "1", "yes"})


def local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_document(payload: bytes | str, *, root: str, format_name: str) -> ET.Element:
    try:
        element = ET.fromstring(payload)  # noqa: S314
    except ET.ParseError as exc:
        raise FormatError(f"Malformed XML: {exc}", format_name=format_name) from exc
    if local_name(element.tag) != root:
        msg = f"Expected <{root}> root element, found <{local_name(element.tag)}>"
        raise FormatError(msg, format_name=format_name)
    return element


def children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element if local_name(child.tag) == name)


def descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    return (child for child in element.iter() if local_name(child.tag) == name)


def element_text(element: ET.Element) -> str:
    return "".join(element.itertext()).strip()


def typed_value(text: str, declared: str | None) -> object:
    """Convert attribute text according to the declared GraphML/GEXF type."""

    kind = (declared or "string").lower()
    if kind == "boolean":
        return text.strip().lower() in TRUE_VALUES
    if kind in {"int", "integer", "long", "short", "byte"}:
        number = parse_number(text)
        return int(number) if number is not None else text
    if kind in {"float", "double"}:
        number = parse_number(text)
        return float(number) if number is not None else text
    if kind.startswith("list"):
        stripped = text.strip().strip("[]")
        return [item.strip() for item in stripped.replace("|", ",").split(",") if item.strip()]
    return text
