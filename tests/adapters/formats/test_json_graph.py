from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from linkchart.adapters.formats import JsonGraphReader, dumps_graph, write_graph
from linkchart.domain.errors import FormatError, SchemaError
from linkchart.domain.model import Entity, Link
from linkchart.domain.ports import ReadRequest
from tests.helpers.graphs import canonical_graph

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _parse(payload: object) -> object:
    return JsonGraphReader().parse(payload, source_id="src")


def test_flat_records_take_their_label_from_name() -> None:
    graph = JsonGraphReader().parse(
        [
            {"id": 1, "type": "person", "name": "Ada Lovelace", "email": "ada@example.com"},
            {"name": "Bob"},
        ],
        source_id="src",
    )

    ada = graph.entities["1"]
    assert ada.label == "Ada Lovelace"
    assert ada.type == "person"
    assert ada.properties == {"email": "ada@example.com"}
    assert graph.entities["json_src_1"].label == "Bob"


def test_collections_keyed_by_id_and_link_aliases() -> None:
    graph = JsonGraphReader().parse(
        {
            "entities": {"a": {"label": "A", "properties": {"x": 1}}},
            "links": [{"from": "a", "to": 2, "type": "knows", "weight": 0.5}],
        },
        source_id="src",
    )

    assert graph.entities["a"].properties == {"x": 1}
    link = graph.links["json_src_link_0"]
    assert (link.source, link.target, link.type) == ("a", "2", "knows")
    assert link.properties == {"weight": 0.5}


def test_nested_properties_are_flattened_and_extras_merged() -> None:
    graph = JsonGraphReader().parse(
        {"nodes": [{"id": "n", "properties": {"address": {"city": "Paris"}, "x": 1}, "x": 2, "name": "N"}]},
        source_id="src",
    )

    entity = graph.entities["n"]
    assert entity.label is None
    assert entity.properties == {"address.city": "Paris", "x": 1, "name": "N"}


def test_single_record_object() -> None:
    graph = JsonGraphReader().parse({"id": "x", "label": "X"}, source_id="src")

    assert list(graph.entities) == ["x"]


def test_invalid_records_are_reported_and_skipped() -> None:
    graph = JsonGraphReader().parse(
        {"entities": ["oops", {"id": "b", "_typeWasChanged": "maybe"}, {"id": "c"}]},
        source_id="src",
    )

    assert list(graph.entities) == ["c"]
    assert [type(issue) for issue in graph.issues] == [SchemaError, SchemaError]
    assert graph.issues[0].record_id == "json_src_0"


@pytest.mark.parametrize("payload", [42, "text", {"entities": "nope"}])
def test_unusable_shapes_are_format_errors(payload: object) -> None:
    with pytest.raises(FormatError):
        _parse(payload)


def test_read_rejects_invalid_json(write_file: Callable[[str, str | bytes], Path]) -> None:
    path = write_file("broken.json", '{"entities": [')

    with pytest.raises(FormatError, match="Invalid JSON"):
        JsonGraphReader().read(ReadRequest(path=path, source_id="src"))


def test_read_appends_links_from_companion_file(
    write_file: Callable[[str, str | bytes], Path],
) -> None:
    people = write_file("people.json", json.dumps({"entities": [{"id": "a"}], "links": []}))
    links = write_file("links.json", json.dumps({"links": [{"source": "a", "target": "b"}]}))

    graph = JsonGraphReader().read(ReadRequest(path=people, source_id="src", links_path=links))

    assert graph.links["json_src_link_0"].target == "b"


def test_written_graph_reads_back_with_flags(tmp_path: Path) -> None:
    entity = Entity(
        id="a",
        type="person",
        label="Zoë",
        properties={"age": 36},
        source_id="s1",
        source_name="people.csv",
        source_color="#3498db",
        type_was_changed=True,
    )
    other = Entity(id="b", type="person", label="B", label_was_generated=True)
    link = Link(id="k", source="a", target="b", type="family", label="Family")
    graph = canonical_graph([entity, other], [link])
    path = tmp_path / "out.json"

    write_graph(graph, path)
    payload = json.loads(path.read_text(encoding="utf-8"))
    raw = JsonGraphReader().parse(payload, source_id="src")

    assert "Zoë" in dumps_graph(graph)
    assert payload["entities"]["a"]["_typeWasChanged"] is True
    assert "_labelWasGenerated" not in payload["entities"]["a"]
    assert "sourceId" not in payload["entities"]["b"]
    assert raw.entities["a"].source_name == "people.csv"
    assert raw.entities["a"].type_was_changed
    assert raw.entities["b"].label_was_generated
    assert raw.entities["a"].properties == {"age": 36}
    assert raw.links["k"].type == "family"
