"""Single-link normalization: endpoint check, type inference, cleaning."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from linkchart.domain.errors import LinkReferenceError, SchemaError
from linkchart.domain.model import (
    UNKNOWN_TYPE,
    EntityType,
    Link,
    LinkType,
    as_identifier,
    as_text,
    flatten_properties,
)
from linkchart.domain.profiles import link_type_for_keyword
from linkchart.domain.recognizers import field_tokens

if TYPE_CHECKING:
    from collections.abc import Mapping

    from linkchart.domain.errors import IngestError
    from linkchart.domain.model import Entity, Properties, PropertyValue, RawLink
    from linkchart.domain.profiles import LinkTypeProfile

log = getLogger(__name__)

FAMILY_HINTS: Final = (
    "family", "relative", "parent", "child", "sibling", "spouse", "husband", "wife",
    "mother", "father", "son", "daughter", "brother", "sister",
)
COMMUNICATION_HINTS: Final = (
    "communication", "contacted", "call", "email", "message", "conversation",
)
RELATIONSHIP_KEYS: Final = ("relationship", "relation", "relationship_type")


@dataclass(frozen=True, slots=True)
class LinkRejection:
    """Skipped marker returned for links that cannot be kept."""

    error: IngestError


def _has_hint(words: list[str], hints: tuple[str, ...]) -> bool:
    return any(word.startswith(hint) for word in words for hint in hints)


def infer_link_type(
    source: Entity, target: Entity, properties: Mapping[str, PropertyValue]
) -> str:
    """Guess a link type from endpoint types and relationship hints."""

    if source.type == EntityType.PERSON:
        if target.type == EntityType.PERSON:
            relation = " ".join(str(properties.get(key) or "") for key in RELATIONSHIP_KEYS)
            if _has_hint(field_tokens(relation), FAMILY_HINTS):
                return LinkType.FAMILY
            return LinkType.ASSOCIATES
        if target.type == EntityType.ORGANIZATION:
            return LinkType.OWNS
        if target.type == EntityType.LOCATION:
            return LinkType.TRAVELS

    hinted = [word for name, value in properties.items() if value for word in field_tokens(name)]
    if _has_hint(hinted, COMMUNICATION_HINTS):
        return LinkType.COMMUNICATES
    return LinkType.ASSOCIATES


def clean_link_properties(properties: Properties) -> Properties:
    cleaned: Properties = {}
    for name, value in properties.items():
        if isinstance(value, str):
            value = value.strip()
        elif isinstance(value, list):
            value = [item.strip() if isinstance(item, str) else item for item in value]
        if value is None or value == "":
            continue
        cleaned[name] = value
    return cleaned


class LinkProcessor:
    def __init__(self, link_types: Mapping[str, LinkTypeProfile]) -> None:
        self._link_types = link_types

    def process(
        self, raw: RawLink, *, key: str, entities: Mapping[str, Entity]
    ) -> Link | LinkRejection:
        link_id = as_identifier(raw.id) or key
        properties = flatten_properties(raw.properties)
        source_id, target_id = as_identifier(raw.source), as_identifier(raw.target)

        if source_id is None or target_id is None:
            return LinkRejection(
                SchemaError(f"Link {link_id} has no source or target", record_id=link_id)
            )
        missing = next((ref for ref in (source_id, target_id) if ref not in entities), None)
        if missing is not None:
            return LinkRejection(
                LinkReferenceError(
                    f"Link {link_id} references missing entity {missing}",
                    record_id=link_id,
                    missing=missing,
                )
            )

        link_type = self._resolve_type(raw.type, properties)
        if link_type is None:
            link_type = infer_link_type(entities[source_id], entities[target_id], properties)
            log.debug("Link %s: inferred type %s", link_id, link_type)

        properties = clean_link_properties(properties)
        label = as_text(raw.label)
        if label is None:
            profile = self._link_types.get(link_type)
            label = profile.label if profile is not None else link_type.capitalize()

        return Link(
            id=link_id,
            source=source_id,
            target=target_id,
            type=link_type,
            label=label,
            properties=properties,
        )

    def _resolve_type(self, declared: object, properties: Properties) -> str | None:
        text = as_text(declared)
        if text is None or text.lower() == UNKNOWN_TYPE:
            return None
        if text.lower() in self._link_types:
            return text.lower()
        properties.setdefault("relationship", text)
        return link_type_for_keyword(text)
