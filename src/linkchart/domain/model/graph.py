"""Raw and canonical graph records.

Raw records are what readers and the field mapper produce: every canonical
field is optional and property values may still be untrimmed strings.
Canonical records are what the pipeline emits; ``id``, ``type`` and ``label``
are always present and ``CanonicalGraph`` keeps its links closed over its
entities.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linkchart.domain.errors import IngestError

    from .source import DataSource
    from .values import Properties


@dataclass(slots=True, kw_only=True)
class RawEntity:
    id: str | None = None
    type: str | None = None
    label: object = None
    properties: dict[str, object] = field(default_factory=dict)
    source_id: str | None = None
    source_name: str | None = None
    source_color: str | None = None
    type_was_changed: bool = False
    label_was_generated: bool = False


@dataclass(slots=True, kw_only=True)
class RawLink:
    id: str | None = None
    source: str | None = None
    target: str | None = None
    type: str | None = None
    label: object = None
    properties: dict[str, object] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class Entity:
    id: str
    type: str
    label: str
    properties: Properties = field(default_factory=dict)
    source_id: str | None = None
    source_name: str | None = None
    source_color: str | None = None
    type_was_changed: bool = False
    label_was_generated: bool = False


@dataclass(slots=True, kw_only=True)
class Link:
    id: str
    source: str
    target: str
    type: str
    label: str
    properties: Properties = field(default_factory=dict)


@dataclass(slots=True)
class RawGraph:
    """Reader output keyed by native or synthesized record ids."""

    entities: dict[str, RawEntity] = field(default_factory=dict)
    links: dict[str, RawLink] = field(default_factory=dict)
    source: DataSource | None = None
    needs_field_mapping: bool = False
    issues: list[IngestError] = field(default_factory=list)

    @classmethod
    def from_canonical(cls, graph: CanonicalGraph) -> RawGraph:
        entities = {
            entity_id: RawEntity(
                id=entity.id,
                type=entity.type,
                label=entity.label,
                properties=dict(entity.properties),
                source_id=entity.source_id,
                source_name=entity.source_name,
                source_color=entity.source_color,
                type_was_changed=entity.type_was_changed,
                label_was_generated=entity.label_was_generated,
            )
            for entity_id, entity in graph.entities.items()
        }
        links = {
            link_id: RawLink(
                id=link.id,
                source=link.source,
                target=link.target,
                type=link.type,
                label=link.label,
                properties=dict(link.properties),
            )
            for link_id, link in graph.links.items()
        }
        return cls(entities=entities, links=links)

    def assign_source(self, source: DataSource) -> None:
        """Stamp provenance on entities that do not carry any yet."""

        self.source = source
        for entity in self.entities.values():
            if entity.source_id is not None:
                continue
            entity.source_id = source.id
            entity.source_name = source.name
            entity.source_color = source.color


@dataclass(slots=True)
class CanonicalGraph:
    entities: dict[str, Entity] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)

    def dangling_links(self) -> list[Link]:
        return [
            link
            for link in self.links.values()
            if link.source not in self.entities or link.target not in self.entities
        ]

    @property
    def is_closed(self) -> bool:
        return not self.dangling_links()

    def type_counts(self) -> Counter[str]:
        return Counter(entity.type for entity in self.entities.values())

    def merged_with(self, other: CanonicalGraph) -> CanonicalGraph:
        """Union of both graphs; records from ``other`` win on id collisions."""

        entities = {**self.entities, **other.entities}
        links = {
            link_id: link
            for link_id, link in {**self.links, **other.links}.items()
            if link.source in entities and link.target in entities
        }
        return CanonicalGraph(entities=entities, links=links)
