"""Assign tabular columns to canonical record roles.

Delimited and workbook readers emit records whose canonical fields are all
empty; every column sits in ``properties``. The mapper moves the columns that
play the ``id``/``label``/``type`` (entities) or ``id``/``source``/``target``/
``type`` (links) roles into the canonical fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from linkchart.domain.errors import SchemaError
from linkchart.domain.model import RawEntity, RawGraph, RawLink, as_identifier, as_text
from linkchart.domain.recognizers import field_tokens

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = getLogger(__name__)

ENTITY_ROLES: Final[dict[str, tuple[str, ...]]] = {
    "id": ("id",),
    "label": ("label", "name", "title"),
    "type": ("type", "entity_type"),
}
LINK_ROLES: Final[dict[str, tuple[str, ...]]] = {
    "id": ("id",),
    "source": ("source", "from"),
    "target": ("target", "to"),
    "type": ("type", "relationship"),
}


@dataclass(frozen=True, slots=True)
class FieldMapping:
    """Explicit role assignments; roles left out are guessed."""

    entity: Mapping[str, str] = field(default_factory=dict)
    link: Mapping[str, str] = field(default_factory=dict)


def guess_column(
    columns: Sequence[str],
    candidates: Sequence[str],
    *,
    taken: frozenset[str] = frozenset(),
) -> str | None:
    """Case-insensitive exact match over ``candidates``, then a word-contains match."""

    available = [column for column in columns if column not in taken]
    for candidate in candidates:
        for column in available:
            if column.strip().lower() == candidate:
                return column
    for candidate in candidates:
        for column in available:
            if candidate in field_tokens(column):
                return column
    return None


def resolve_roles(
    columns: Sequence[str],
    roles: Mapping[str, tuple[str, ...]],
    explicit: Mapping[str, str],
    *,
    first_column_fallback: str | None = None,
) -> dict[str, str]:
    unknown = sorted(set(explicit) - set(roles))
    if unknown:
        raise ValueError(f"Unknown role(s): {', '.join(unknown)}")

    assigned: dict[str, str] = {}
    for role, column in explicit.items():
        if column not in columns:
            log.warning("Mapped column %r for role %s is not present", column, role)
            continue
        assigned[role] = column
    for role, candidates in roles.items():
        if role in assigned or role in explicit:
            continue
        guessed = guess_column(columns, candidates, taken=frozenset(assigned.values()))
        if guessed is not None:
            assigned[role] = guessed
    if first_column_fallback and first_column_fallback not in assigned and columns:
        assigned[first_column_fallback] = columns[0]
    return assigned


def _columns(records: Sequence[Mapping[str, object]]) -> list[str]:
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


class FieldMapper:
    def map_graph(self, graph: RawGraph, mapping: FieldMapping | None = None) -> RawGraph:
        """Return a new graph with canonical fields populated from the role columns."""

        mapping = mapping or FieldMapping()
        mapped = RawGraph(source=graph.source, issues=list(graph.issues))
        self._map_entities(graph, mapping, mapped)
        self._map_links(graph, mapping, mapped)
        return mapped

    def _map_entities(self, graph: RawGraph, mapping: FieldMapping, out: RawGraph) -> None:
        rows = [entity.properties for entity in graph.entities.values()]
        roles = resolve_roles(
            _columns(rows), ENTITY_ROLES, mapping.entity, first_column_fallback="id"
        )
        log.debug("Entity roles: %s", roles)
        role_columns = set(roles.values())

        for key, raw in graph.entities.items():
            row = raw.properties
            entity_id = as_identifier(row.get(roles["id"])) if "id" in roles else None
            if entity_id is None or entity_id in out.entities:
                if entity_id is not None:
                    log.warning("Duplicate entity id %r; keeping row under %s", entity_id, key)
                entity_id = key
            properties = {name: value for name, value in row.items() if name not in role_columns}
            out.entities[entity_id] = RawEntity(
                id=entity_id,
                type=as_text(row.get(roles["type"])) if "type" in roles else None,
                label=row.get(roles["label"]) if "label" in roles else None,
                properties=properties,
                source_id=raw.source_id,
                source_name=raw.source_name,
                source_color=raw.source_color,
            )

    def _map_links(self, graph: RawGraph, mapping: FieldMapping, out: RawGraph) -> None:
        rows = [link.properties for link in graph.links.values()]
        if not rows:
            return
        roles = resolve_roles(_columns(rows), LINK_ROLES, mapping.link)
        log.debug("Link roles: %s", roles)
        role_columns = set(roles.values())

        for key, raw in graph.links.items():
            row = raw.properties
            source = as_identifier(row.get(roles["source"])) if "source" in roles else None
            target = as_identifier(row.get(roles["target"])) if "target" in roles else None
            if source is None or target is None:
                error = SchemaError(
                    f"Link row {key} has no resolvable source/target", record_id=key
                )
                log.warning("%s", error.message)
                out.issues.append(error)
                continue
            link_id = as_identifier(row.get(roles["id"])) if "id" in roles else None
            if link_id is None or link_id in out.links:
                link_id = key
            out.links[link_id] = RawLink(
                id=link_id,
                source=source,
                target=target,
                type=as_text(row.get(roles["type"])) if "type" in roles else None,
                properties={name: value for name, value in row.items() if name not in role_columns},
            )
