"""Single-entity normalization: type, cleaning, structure, label, filter."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from linkchart.domain.model import (
    UNKNOWN_TYPE,
    Entity,
    EntityType,
    as_identifier,
    as_text,
    flatten_properties,
)
from linkchart.domain.recognizers import parse_coordinates, parse_date, parse_number

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import date

    from linkchart.domain.model import Properties, PropertyValue, RawEntity

    from .context import PipelineContext

log = getLogger(__name__)

MIN_ADDRESS_PARTS = 2


def _text(properties: Mapping[str, PropertyValue], name: str) -> str | None:
    value = properties.get(name)
    return as_text(value) if isinstance(value, (str, int, float)) else None


def synthesize_label(
    entity_id: str, entity_type: str, properties: Mapping[str, PropertyValue]
) -> str:
    """Pick a display label from well-known properties, falling back to the id."""

    for name in ("name", "title", "label", "id"):
        if text := _text(properties, name):
            return text

    if entity_type == EntityType.PERSON:
        parts = [_text(properties, "first_name"), _text(properties, "last_name")]
        if full := " ".join(part for part in parts if part):
            return full
        for name in ("username", "email"):
            if text := _text(properties, name):
                return text
    elif entity_type == EntityType.ORGANIZATION:
        for name in ("company_name", "org_name"):
            if text := _text(properties, name):
                return text
    elif entity_type == EntityType.LOCATION:
        if text := _text(properties, "address"):
            return text
        place = [_text(properties, "city"), _text(properties, "country")]
        if joined := ", ".join(part for part in place if part):
            return joined

    return entity_id or f"New {entity_type}"


def age_on(birthdate: date, today: date) -> int:
    years = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        years -= 1
    return years


def _as_coordinate(value: PropertyValue) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        number = parse_number(value)
        return None if number is None else float(number)
    return None


class EntityProcessor:
    """Turn one raw entity into a canonical entity.

    Steps run in a fixed order: clone, detect the type when it is missing,
    rename and clean properties, derive structural fields, synthesize the
    label, then decide whether the entity is kept.
    """

    def __init__(self, context: PipelineContext) -> None:
        self._context = context

    def process(self, raw: RawEntity, *, key: str) -> Entity | None:
        context = self._context
        entity_id = as_identifier(raw.id) or key
        properties = flatten_properties(raw.properties)
        label = as_text(raw.label)

        entity_type = context.type_detector.resolve_declared(raw.type)
        type_was_changed = raw.type_was_changed
        if entity_type is None:
            declared = as_text(raw.type)
            if declared and declared.lower() != UNKNOWN_TYPE:
                properties.setdefault("source_type", declared)
            entity_type = context.type_detector.detect(label, properties)
            type_was_changed = True
            log.debug("Entity %s: detected type %s", entity_id, entity_type)

        properties = context.rules.rename_properties(entity_type, properties)
        properties = {name: self._clean(name, value) for name, value in properties.items()}
        self._extract_structure(entity_type, properties)

        label_was_generated = raw.label_was_generated
        if label is None:
            label = synthesize_label(entity_id, entity_type, properties)
            label_was_generated = True
            log.debug("Entity %s: generated label %r", entity_id, label)

        # a property counts even when its value is null
        if entity_type not in context.type_detector.canonical_types or not (label or properties):
            log.debug("Entity %s filtered (type=%s, no label or properties)", entity_id, entity_type)
            return None

        return Entity(
            id=entity_id,
            type=entity_type,
            label=label,
            properties=properties,
            source_id=raw.source_id,
            source_name=raw.source_name,
            source_color=raw.source_color,
            type_was_changed=type_was_changed,
            label_was_generated=label_was_generated,
        )

    def admit_unprocessed(self, raw: RawEntity, *, key: str) -> Entity:
        """Keep an entity as-is apart from the minimum canonical fields."""

        detector = self._context.type_detector
        entity_id = as_identifier(raw.id) or key
        entity_type = detector.resolve_declared(raw.type)
        label = as_text(raw.label)
        return Entity(
            id=entity_id,
            type=entity_type or detector.fallback,
            label=label or entity_id,
            properties=flatten_properties(raw.properties),
            source_id=raw.source_id,
            source_name=raw.source_name,
            source_color=raw.source_color,
            type_was_changed=raw.type_was_changed or entity_type is None,
            label_was_generated=raw.label_was_generated or label is None,
        )

    def _clean(self, name: str, value: PropertyValue) -> PropertyValue:
        if isinstance(value, list):
            return [self._clean(name, item) for item in value]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        context = self._context
        value = context.recognizers.normalize_value(name, value, on_error=context.report.record)
        return context.rules.apply_text_rules(name, value)

    def _derive(self, properties: Properties, name: str, value: PropertyValue) -> None:
        # derived values are cleaned exactly like values read from the source
        properties[name] = self._clean(name, value)

    def _extract_structure(self, entity_type: str, properties: Properties) -> None:
        if entity_type == EntityType.LOCATION:
            self._extract_location(properties)
        elif entity_type == EntityType.PERSON:
            self._extract_person(properties)

    def _extract_location(self, properties: Properties) -> None:
        coordinates = properties.get("coordinates")
        if isinstance(coordinates, str) and (parsed := parse_coordinates(coordinates)):
            if "latitude" not in properties:
                self._derive(properties, "latitude", parsed.latitude)
            if "longitude" not in properties:
                self._derive(properties, "longitude", parsed.longitude)

        for alias, target in (("lat", "latitude"), ("lng", "longitude"), ("lon", "longitude")):
            if alias in properties and properties.get(target) is None:
                number = _as_coordinate(properties[alias])
                if number is not None:
                    self._derive(properties, target, number)

        if properties.get("address") is None:
            parts = [
                _text(properties, "street"),
                _text(properties, "city"),
                _text(properties, "state"),
                _text(properties, "postal_code") or _text(properties, "zip"),
                _text(properties, "country"),
            ]
            present = [part for part in parts if part]
            if len(present) >= MIN_ADDRESS_PARTS:
                self._derive(properties, "address", ", ".join(present))

    def _extract_person(self, properties: Properties) -> None:
        name = _text(properties, "name")
        first, last = _text(properties, "first_name"), _text(properties, "last_name")
        if name and "first_name" not in properties and "last_name" not in properties:
            tokens = name.split()
            if len(tokens) > 1:
                self._derive(properties, "first_name", tokens[0])
                self._derive(properties, "last_name", " ".join(tokens[1:]))
        elif first and last and "name" not in properties:
            self._derive(properties, "name", f"{first} {last}")

        if "age" not in properties:
            for field_name in ("birthdate", "dob"):
                value = properties.get(field_name)
                born = parse_date(value) if isinstance(value, str) else None
                today = self._context.today()
                if born is not None and born <= today:
                    self._derive(properties, "age", age_on(born, today))
                    break
