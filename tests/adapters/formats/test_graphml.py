from __future__ import annotations

import pytest

from linkchart.adapters.formats import GraphMLReader
from linkchart.domain.errors import FormatError

DOCUMENT = b"""<?xml version="1.0" encoding="UTF-8"?>
<graphml xmlns="http://graphml.graphdrawing.org/xmlns">
  <key id="d0" for="node" attr.name="label" attr.type="string"/>
  <key id="d1" for="node" attr.name="type" attr.type="string"/>
  <key id="d2" for="node" attr.name="coordinates" attr.type="string"/>
  <key id="d3" for="node" attr.name="visits" attr.type="int"><default>0</default></key>
  <key id="d4" for="edge" attr.name="weight" attr.type="double"/>
  <key id="d5" for="edge" attr.name="type" attr.type="string"/>
  <key id="d6" for="all" attr.name="verified" attr.type="boolean"/>
  <graph id="G" edgedefault="directed">
    <node id="n1">
      <data key="d0">Eiffel Tower</data>
      <data key="d2">48.8584, 2.2945</data>
      <data key="d3">12</data>
    </node>
    <node id="n2">
      <data key="d0">Ada</data>
      <data key="d1">person</data>
      <data key="d6">true</data>
      <data key="unknown">raw text</data>
    </node>
    <node>
      <data key="d0">Anonymous</data>
    </node>
    <edge source="n2" target="n1">
      <data key="d4">0.75</data>
      <data key="d5">VISITED</data>
    </edge>
  </graph>
</graphml>
"""


def test_nodes_resolve_keys_types_and_defaults() -> None:
    graph = GraphMLReader().parse(DOCUMENT, source_id="src")

    tower = graph.entities["n1"]
    assert tower.label == "Eiffel Tower"
    assert tower.type is None
    assert tower.properties == {"coordinates": "48.8584, 2.2945", "visits": 12}

    ada = graph.entities["n2"]
    assert ada.type == "person"
    assert ada.properties == {"visits": 0, "verified": True, "unknown": "raw text"}


def test_nodes_without_ids_get_synthesized_ones() -> None:
    graph = GraphMLReader().parse(DOCUMENT, source_id="src")

    assert graph.entities["graphml_src_2"].label == "Anonymous"


def test_edges_carry_typed_values() -> None:
    graph = GraphMLReader().parse(DOCUMENT, source_id="src")

    edge = graph.links["graphml_src_link_0"]
    assert (edge.source, edge.target, edge.type) == ("n2", "n1", "VISITED")
    assert edge.properties == {"weight": 0.75}


def test_wrong_root_is_a_format_error() -> None:
    with pytest.raises(FormatError, match="Expected <graphml>"):
        GraphMLReader().parse(b"<gexf/>", source_id="src")


def test_malformed_xml_is_a_format_error() -> None:
    with pytest.raises(FormatError, match="Malformed XML"):
        GraphMLReader().parse(b"<graphml><node></graphml>", source_id="src")
