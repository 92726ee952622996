from __future__ import annotations

import pytest

from linkchart.adapters.formats import CypherReader
from linkchart.adapters.formats.cypher import create_segments, parse_value, strip_comments
from linkchart.domain.errors import FormatError

SCRIPT = """
// people and companies
CREATE (ada:Person {name: 'Ada Lovelace', born: 1815}),
       (bob:Person:Suspect {name: "Bob \\"The Builder\\""}),
       (acme:Company {name: 'Acme Ltd', tags: ['retail', 'logistics']}),
       (:Location {name: 'Paris'})
/* relationships */
CREATE (ada)-[:KNOWS {since: 1833}]->(bob),
       (acme)<-[:OWNS]-(ada),
       (bob)-[:MARRIED_TO]->(ada);
MATCH (n) RETURN n;
"""


def test_nodes_become_entities_keyed_by_variable() -> None:
    graph = CypherReader().parse(SCRIPT, source_id="src")

    assert set(graph.entities) == {"ada", "bob", "acme", "cypher_src_3"}
    ada = graph.entities["ada"]
    assert ada.type == "person"
    assert ada.label == "Ada Lovelace"
    assert ada.properties == {"name": "Ada Lovelace", "born": 1815}


def test_labels_resolve_to_entity_types() -> None:
    graph = CypherReader().parse(SCRIPT, source_id="src")

    assert graph.entities["acme"].type == "organization"
    assert graph.entities["acme"].properties["tags"] == ["retail", "logistics"]
    assert graph.entities["cypher_src_3"].type == "location"
    bob = graph.entities["bob"]
    assert bob.label == 'Bob "The Builder"'
    assert bob.properties["labels"] == ["Person", "Suspect"]


def test_relationships_map_to_link_types() -> None:
    graph = CypherReader().parse(SCRIPT, source_id="src")

    knows, owns, married = (graph.links[f"cypher_src_link_{index}"] for index in range(3))
    assert (knows.source, knows.target, knows.type) == ("ada", "bob", "associates")
    assert knows.properties == {"since": 1833, "relationship": "KNOWS"}
    assert (owns.source, owns.target, owns.type) == ("ada", "acme", "owns")
    assert "relationship" not in owns.properties
    assert married.type == "family"
    assert married.properties["relationship"] == "MARRIED_TO"


def test_unknown_labels_are_kept_as_source_type() -> None:
    graph = CypherReader().parse("CREATE (e:Starship {name: 'Enterprise'})", source_id="src")

    entity = graph.entities["e"]
    assert entity.type == "person"
    assert entity.properties == {"name": "Enterprise", "source_type": "Starship"}


def test_keywords_inside_strings_and_comments_are_ignored() -> None:
    script = "CREATE (n:Person {name: 'MATCH // CREATE (x)'}) // CREATE (y:Person)"

    graph = CypherReader().parse(script, source_id="src")

    assert list(graph.entities) == ["n"]
    assert graph.entities["n"].label == "MATCH // CREATE (x)"


def test_strip_comments_and_segments() -> None:
    text = strip_comments("CREATE (a) /* x */ MERGE (b) // y\nCREATE (c)")

    assert [segment.strip() for segment in create_segments(text)] == ["(a)", "(c)"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("'it\\'s'", "it's"),
        ("-1.5e2", -150.0),
        ("42", 42),
        ("TRUE", True),
        ("null", None),
        ("[1, 'a', [2]]", [1, "a", [2]]),
        ("[]", []),
        ("datetime()", "datetime()"),
    ],
)
def test_parse_value(raw: str, expected: object) -> None:
    assert parse_value(raw) == expected


@pytest.mark.parametrize(
    "script",
    [
        "CREATE (a:Person {name: 'Ada'}",
        "CREATE (a:Person {name: 'Ada})",
        "CREATE (a:Person {name})",
        "CREATE (a:Person) /* open",
    ],
)
def test_malformed_scripts_are_format_errors(script: str) -> None:
    with pytest.raises(FormatError):
        CypherReader().parse(script, source_id="src")
