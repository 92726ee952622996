"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Built-in canonical entity types, in type-detection declaration order."""

    PERSON = "person"
    ORGANIZATION = "organization"
    LOCATION = "location"
    EVENT = "event"
    DOCUMENT = "document"
    VEHICLE = "vehicle"
    PHONE = "phone"
    EMAIL = "email"


class LinkType(StrEnum):
    ASSOCIATES = "associates"
    FAMILY = "family"
    OWNS = "owns"
    TRAVELS = "travels"
    COMMUNICATES = "communicates"


class SourceKind(StrEnum):
    FILE = "file"
    API = "api"
    STORAGE = "storage"
    DATABASE = "database"
    IMPORTED = "imported"


UNKNOWN_TYPE = "unknown"
