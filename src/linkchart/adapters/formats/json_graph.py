"""JSON graph reader and writer.

Accepted shapes: an array of entity records, an object holding
``nodes``/``entities`` and ``edges``/``links`` (each an array or an object
keyed by id), or a single entity record. Records may be flat, in which case
every key other than the reserved ones becomes a property, or carry an
explicit ``properties`` object.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from linkchart.domain.errors import FormatError, SchemaError
from linkchart.domain.model import RawEntity, RawGraph, RawLink, as_text, flatten_properties

from .base import read_text, synthesized_id, synthesized_link_id
from .schema import EntityRecord, LinkRecord

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from linkchart.domain.model import CanonicalGraph, Entity, Link
    from linkchart.domain.ports import ReadRequest

log = getLogger(__name__)

FORMAT_NAME = "json"
ENTITY_KEYS = ("nodes", "entities")
LINK_KEYS = ("edges", "links")
LABEL_KEYS = ("name", "title")


def _collection(payload: dict[str, Any], keys: tuple[str, ...]) -> object:
    return next((payload[key] for key in keys if key in payload), None)


def _iter_items(collection: object, *, what: str) -> Iterator[tuple[str | None, object]]:
    if collection is None:
        return
    if isinstance(collection, list):
        for item in collection:
            yield None, item
    elif isinstance(collection, dict):
        for key, item in collection.items():
            yield str(key), item
    else:
        raise FormatError(f"{what} must be an array or an object", format_name=FORMAT_NAME)


def _properties(record: EntityRecord | LinkRecord) -> dict[str, object]:
    extras = record.extras
    if record.properties is None:
        return flatten_properties(extras)
    properties = flatten_properties(record.properties)
    for name, value in flatten_properties(extras).items():
        properties.setdefault(name, value)
    return properties


class JsonGraphReader:
    format_name: str = FORMAT_NAME

    def read(self, request: ReadRequest) -> RawGraph:
        text = read_text(request.path, format_name=FORMAT_NAME, encoding=request.encoding)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Invalid JSON: {exc}", format_name=FORMAT_NAME) from exc
        graph = self.parse(payload, source_id=request.source_id)

        if request.links_path is not None:
            links_text = read_text(
                request.links_path, format_name=FORMAT_NAME, encoding=request.encoding
            )
            try:
                links_payload = json.loads(links_text)
            except json.JSONDecodeError as exc:
                raise FormatError(f"Invalid JSON: {exc}", format_name=FORMAT_NAME) from exc
            if isinstance(links_payload, dict):
                links_payload = _collection(links_payload, LINK_KEYS)
            self._parse_links(graph, links_payload, source_id=request.source_id)
        return graph

    def parse(self, payload: object, *, source_id: str) -> RawGraph:
        graph = RawGraph()
        if isinstance(payload, list):
            entity_items: object = payload
            link_items: object = None
        elif isinstance(payload, dict):
            if any(key in payload for key in ENTITY_KEYS + LINK_KEYS):
                entity_items = _collection(payload, ENTITY_KEYS)
                link_items = _collection(payload, LINK_KEYS)
            else:
                entity_items, link_items = [payload], None
        else:
            raise FormatError("Top level must be an array or an object", format_name=FORMAT_NAME)

        for index, (key, item) in enumerate(_iter_items(entity_items, what="Entities")):
            fallback = key or synthesized_id(FORMAT_NAME, source_id, index)
            entity = self._entity(item, fallback=fallback, issues=graph.issues)
            if entity is not None:
                graph.entities[entity.id or fallback] = entity
        self._parse_links(graph, link_items, source_id=source_id)
        log.debug(
            "JSON payload: %d entities, %d links", len(graph.entities), len(graph.links)
        )
        return graph

    def _parse_links(self, graph: RawGraph, items: object, *, source_id: str) -> None:
        offset = len(graph.links)
        for index, (key, item) in enumerate(_iter_items(items, what="Links"), start=offset):
            fallback = key or synthesized_link_id(FORMAT_NAME, source_id, index)
            link = self._link(item, fallback=fallback, issues=graph.issues)
            if link is not None:
                graph.links[link.id or fallback] = link

    @staticmethod
    def _entity(item: object, *, fallback: str, issues: list) -> RawEntity | None:
        if not isinstance(item, dict):
            issues.append(SchemaError(f"Entity {fallback} is not an object", record_id=fallback))
            return None
        try:
            record = EntityRecord.model_validate(item)
        except ValidationError as exc:
            issues.append(SchemaError(f"Entity {fallback}: {exc}", record_id=fallback))
            return None

        properties = _properties(record)
        label = record.label
        if label is None and record.properties is None:
            for key in LABEL_KEYS:
                if as_text(properties.get(key)) is not None:
                    label = properties.pop(key)
                    break
        return RawEntity(
            id=record.id or fallback,
            type=record.type,
            label=label,
            properties=properties,
            source_id=record.source_id,
            source_name=record.source_name,
            source_color=record.source_color,
            type_was_changed=record.type_was_changed,
            label_was_generated=record.label_was_generated,
        )

    @staticmethod
    def _link(item: object, *, fallback: str, issues: list) -> RawLink | None:
        if not isinstance(item, dict):
            issues.append(SchemaError(f"Link {fallback} is not an object", record_id=fallback))
            return None
        try:
            record = LinkRecord.model_validate(item)
        except ValidationError as exc:
            issues.append(SchemaError(f"Link {fallback}: {exc}", record_id=fallback))
            return None
        return RawLink(
            id=record.id or fallback,
            source=record.source,
            target=record.target,
            type=record.type,
            label=record.label,
            properties=_properties(record),
        )


def entity_payload(entity: Entity) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": entity.id,
        "type": entity.type,
        "label": entity.label,
        "properties": entity.properties,
    }
    for key, value in (
        ("sourceId", entity.source_id),
        ("sourceName", entity.source_name),
        ("sourceColor", entity.source_color),
    ):
        if value is not None:
            payload[key] = value
    if entity.type_was_changed:
        payload["_typeWasChanged"] = True
    if entity.label_was_generated:
        payload["_labelWasGenerated"] = True
    return payload


def link_payload(link: Link) -> dict[str, object]:
    return {
        "id": link.id,
        "source": link.source,
        "target": link.target,
        "type": link.type,
        "label": link.label,
        "properties": link.properties,
    }


def graph_to_payload(graph: CanonicalGraph) -> dict[str, object]:
    return {
        "entities": {entity_id: entity_payload(e) for entity_id, e in graph.entities.items()},
        "links": {link_id: link_payload(link) for link_id, link in graph.links.items()},
    }


def dumps_graph(graph: CanonicalGraph, *, indent: int | None = 2) -> str:
    return json.dumps(graph_to_payload(graph), indent=indent, ensure_ascii=False)


def write_graph(graph: CanonicalGraph, path: Path) -> None:
    path.write_text(dumps_graph(graph) + "\n", encoding="utf-8")
    log.info("Wrote %d entities and %d links to %s", len(graph.entities), len(graph.links), path)
