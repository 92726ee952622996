"""GraphML reader.

``<data>`` values are named through the ``attr.name`` of their ``<key>``
declaration and converted according to ``attr.type``. A ``type`` attribute
becomes the record type and a ``label`` (or ``name``) attribute its label.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from linkchart.domain.model import RawEntity, RawGraph, RawLink, as_identifier, as_text

from .base import read_bytes, synthesized_id, synthesized_link_id
from .xml_support import children, descendants, element_text, parse_document, typed_value

if TYPE_CHECKING:
    import xml.etree.ElementTree as ET

    from linkchart.domain.ports import ReadRequest

FORMAT_NAME = "graphml"


@dataclass(frozen=True, slots=True)
class KeySpec:
    name: str
    type: str | None
    domain: str
    default: str | None = None

    def applies_to(self, domain: str) -> bool:
        return self.domain in {domain, "all"}


def _keys(root: ET.Element) -> dict[str, KeySpec]:
    keys: dict[str, KeySpec] = {}
    for key in children(root, "key"):
        key_id = key.get("id")
        if key_id is None:
            continue
        default = next(children(key, "default"), None)
        keys[key_id] = KeySpec(
            name=key.get("attr.name") or key_id,
            type=key.get("attr.type"),
            domain=key.get("for") or "all",
            default=element_text(default) if default is not None else None,
        )
    return keys


def _values(element: ET.Element, keys: dict[str, KeySpec], domain: str) -> dict[str, object]:
    values: dict[str, object] = {
        declared.name: typed_value(declared.default, declared.type)
        for declared in keys.values()
        if declared.default is not None and declared.applies_to(domain)
    }
    for data in children(element, "data"):
        key_id = data.get("key") or ""
        declared = keys.get(key_id)
        text = element_text(data)
        if declared is None:
            values[key_id] = text
        else:
            values[declared.name] = typed_value(text, declared.type)
    return values


def _pop_label(values: dict[str, object], *names: str) -> object:
    for name in names:
        if as_text(values.get(name)) is not None:
            return values.pop(name)
    return None


class GraphMLReader:
    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        return self.parse(
            read_bytes(request.path, format_name=FORMAT_NAME), source_id=request.source_id
        )

    def parse(self, payload: bytes | str, *, source_id: str) -> RawGraph:
        root = parse_document(payload, root="graphml", format_name=FORMAT_NAME)
        keys = _keys(root)
        graph = RawGraph()

        for index, node in enumerate(descendants(root, "node")):
            fallback = synthesized_id(FORMAT_NAME, source_id, index)
            node_id = as_identifier(node.get("id")) or fallback
            values = _values(node, keys, "node")
            graph.entities[node_id] = RawEntity(
                id=node_id,
                type=as_text(values.pop("type", None)),
                label=_pop_label(values, "label", "name"),
                properties=values,
            )

        for index, edge in enumerate(descendants(root, "edge")):
            fallback = synthesized_link_id(FORMAT_NAME, source_id, index)
            edge_id = as_identifier(edge.get("id")) or fallback
            values = _values(edge, keys, "edge")
            graph.links[edge_id] = RawLink(
                id=edge_id,
                source=as_identifier(edge.get("source")),
                target=as_identifier(edge.get("target")),
                type=as_text(values.pop("type", None)),
                label=_pop_label(values, "label"),
                properties=values,
            )
        return graph
