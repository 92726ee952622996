"""GEXF reader: node/edge attributes resolve through ``<attributes>`` declarations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from linkchart.domain.model import RawEntity, RawGraph, RawLink, as_identifier, as_text
from linkchart.domain.recognizers import parse_number

from .base import read_bytes, synthesized_id, synthesized_link_id
from .xml_support import children, descendants, element_text, parse_document, typed_value

if TYPE_CHECKING:
    import xml.etree.ElementTree as ET

    from linkchart.domain.ports import ReadRequest

FORMAT_NAME = "gexf"

type AttributeSpecs = dict[str, tuple[str, str | None, str | None]]


def _attribute_specs(graph: ET.Element, kind: str) -> AttributeSpecs:
    specs: AttributeSpecs = {}
    for block in children(graph, "attributes"):
        if (block.get("class") or "node") != kind:
            continue
        for attribute in children(block, "attribute"):
            attribute_id = attribute.get("id")
            if attribute_id is None:
                continue
            default = next(children(attribute, "default"), None)
            specs[attribute_id] = (
                attribute.get("title") or attribute_id,
                attribute.get("type"),
                element_text(default) if default is not None else None,
            )
    return specs


def _values(element: ET.Element, specs: AttributeSpecs) -> dict[str, object]:
    values: dict[str, object] = {
        title: typed_value(default, declared)
        for title, declared, default in specs.values()
        if default is not None
    }
    for block in children(element, "attvalues"):
        for attvalue in children(block, "attvalue"):
            key = attvalue.get("for") or attvalue.get("id") or ""
            text = attvalue.get("value") or ""
            if key in specs:
                title, declared, _ = specs[key]
                values[title] = typed_value(text, declared)
            else:
                values[key] = text
    return values


class GexfReader:
    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        return self.parse(
            read_bytes(request.path, format_name=FORMAT_NAME), source_id=request.source_id
        )

    def parse(self, payload: bytes | str, *, source_id: str) -> RawGraph:
        root = parse_document(payload, root="gexf", format_name=FORMAT_NAME)
        graph = RawGraph()
        for graph_element in children(root, "graph"):
            self._read_graph(graph_element, graph, source_id=source_id)
        return graph

    def _read_graph(self, element: ET.Element, graph: RawGraph, *, source_id: str) -> None:
        node_specs = _attribute_specs(element, "node")
        edge_specs = _attribute_specs(element, "edge")

        for node in descendants(element, "node"):
            index = len(graph.entities)
            fallback = synthesized_id(FORMAT_NAME, source_id, index)
            node_id = as_identifier(node.get("id")) or fallback
            values = _values(node, node_specs)
            graph.entities[node_id] = RawEntity(
                id=node_id,
                type=as_text(values.pop("type", None)),
                label=node.get("label") or values.pop("label", None),
                properties=values,
            )

        for edge in descendants(element, "edge"):
            index = len(graph.links)
            fallback = synthesized_link_id(FORMAT_NAME, source_id, index)
            edge_id = as_identifier(edge.get("id")) or fallback
            values = _values(edge, edge_specs)
            weight = edge.get("weight")
            if weight is not None:
                number = parse_number(weight)
                values.setdefault("weight", float(number) if number is not None else weight)
            graph.links[edge_id] = RawLink(
                id=edge_id,
                source=as_identifier(edge.get("source")),
                target=as_identifier(edge.get("target")),
                type=as_text(values.pop("type", None)) or as_text(edge.get("kind")),
                label=edge.get("label") or values.pop("label", None),
                properties=values,
            )
