from __future__ import annotations

import json
from typing import TYPE_CHECKING

from linkchart.app import import_file

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    WriteFile = Callable[[str, str | bytes], Path]


def test_json_array_person(write_file: WriteFile) -> None:
    path = write_file(
        "people.json",
        json.dumps([{"id": "a", "name": "Ada", "first_name": "Ada", "last_name": "Lovelace"}]),
    )

    outcome = import_file(path)

    assert outcome.graph is not None
    ada = outcome.graph.entities["a"]
    assert ada.type == "person"
    assert ada.label == "Ada"
    assert ada.properties["first_name"] == "Ada"
    assert ada.properties["last_name"] == "Lovelace"
    assert ada.properties["name"] == "Ada Lovelace"


def test_csv_pair_prunes_orphan_links(write_file: WriteFile) -> None:
    entities = write_file("entities.csv", "id,name,type\n1,Acme,Company\n")
    links = write_file("links.csv", "from,to,relationship\n1,2,owns\n")

    outcome = import_file(entities, links_path=links)

    assert outcome.graph is not None
    assert outcome.report is not None
    assert list(outcome.graph.entities) == ["1"]
    acme = outcome.graph.entities["1"]
    assert acme.type == "organization"
    assert acme.label == "Acme"
    assert outcome.graph.links == {}
    assert [getattr(error, "missing", None) for error in outcome.report.errors] == ["2"]


def test_cypher_script(write_file: WriteFile) -> None:
    path = write_file(
        "graph.cypher",
        'CREATE (a:Person {name:"Bob"}) CREATE (b:Organization {name:"Acme"}) '
        "CREATE (a)-[:OWNS]->(b)",
    )

    outcome = import_file(path)

    assert outcome.graph is not None
    graph = outcome.graph
    assert {entity.id: entity.type for entity in graph.entities.values()} == {
        "a": "person",
        "b": "organization",
    }
    assert graph.entities["a"].label == "Bob"
    [link] = graph.links.values()
    assert (link.source, link.target, link.type) == ("a", "b", "owns")


def test_graphml_typed_coordinates(write_file: WriteFile) -> None:
    path = write_file(
        "places.graphml",
        """<?xml version="1.0" encoding="UTF-8"?>
<graphml xmlns="http://graphml.graphdrawing.org/xmlns">
  <key id="latitude" for="node" attr.name="latitude" attr.type="double"/>
  <key id="longitude" for="node" attr.name="longitude" attr.type="double"/>
  <graph id="G" edgedefault="directed">
    <node id="nyc">
      <data key="latitude">40.7</data>
      <data key="longitude">-74.0</data>
    </node>
  </graph>
</graphml>
""",
    )

    outcome = import_file(path)

    assert outcome.graph is not None
    place = outcome.graph.entities["nyc"]
    assert place.type == "location"
    assert place.properties["latitude"] == 40.7
    assert place.properties["longitude"] == -74.0
    assert isinstance(place.properties["latitude"], float)


def test_type_inferred_from_label(write_file: WriteFile) -> None:
    path = write_file("orgs.json", json.dumps({"entities": [{"id": "x", "label": "ABC Corp"}]}))

    outcome = import_file(path)

    assert outcome.graph is not None
    entity = outcome.graph.entities["x"]
    assert entity.type == "organization"
    assert entity.type_was_changed


def test_zip_code_stays_a_string(write_file: WriteFile) -> None:
    path = write_file("addresses.csv", "id,name,zip_code\np1,Ada Lovelace,07302\n")

    outcome = import_file(path)

    assert outcome.graph is not None
    assert outcome.graph.entities["p1"].properties["zip_code"] == "07302"


def test_canonical_output_reimports_unchanged(write_file: WriteFile, tmp_path: Path) -> None:
    entities = write_file(
        "entities.csv", "id,name,type\np1,Ada Lovelace,person\no1,Acme,Company\n"
    )
    links = write_file("links.csv", "from,to,relationship\np1,o1,works for\n")
    output = tmp_path / "canonical.json"

    first = import_file(entities, links_path=links, output=output)
    second = import_file(output)

    assert first.graph is not None
    assert second.graph is not None
    assert second.graph.entities.keys() == first.graph.entities.keys()
    assert second.graph.links.keys() == first.graph.links.keys()
    for entity_id, entity in first.graph.entities.items():
        again = second.graph.entities[entity_id]
        assert (again.type, again.label, again.properties) == (
            entity.type,
            entity.label,
            entity.properties,
        )


def test_blank_cells_and_id_only_rows(write_file: WriteFile) -> None:
    path = write_file("people.csv", "id,name,age\n1,Ada,36\n2,Bob,\n3,,\n")

    outcome = import_file(path)

    assert outcome.graph is not None
    assert outcome.report is not None
    assert set(outcome.graph.entities) == {"1", "2", "3"}
    assert outcome.graph.entities["3"].label == "3"
    assert outcome.report.incoming is not None
    assert all(count <= 3 for _, count in outcome.report.incoming.top_properties)


def test_messy_rows_reimport_unchanged(write_file: WriteFile, tmp_path: Path) -> None:
    entities = write_file(
        "entities.csv",
        "id,type,first_name,last_name,street,city,country\n"
        "p1,person,ada,lovelace,,,\n"
        "l1,location,,,12 high st,london,\n"
        "l2,location,,,,paris,france\n",
    )
    links = write_file("links.csv", "from,to,relationship\np1,l1,lives at\n")
    output = tmp_path / "canonical.json"

    first = import_file(entities, links_path=links, output=output)
    second = import_file(output)

    assert first.graph is not None
    assert second.graph is not None
    assert first.graph.entities["p1"].properties["name"] == "Ada Lovelace"
    assert first.graph.entities["l1"].properties["address"] == "12 High Street, London"
    assert first.graph.entities["l2"].label == "Paris, France"
    for entity_id, entity in first.graph.entities.items():
        again = second.graph.entities[entity_id]
        assert (again.type, again.label, again.properties) == (
            entity.type,
            entity.label,
            entity.properties,
        )
