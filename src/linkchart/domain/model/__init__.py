"""Public domain model surface."""

from __future__ import annotations

from linkchart.domain.model.enums import UNKNOWN_TYPE, EntityType, LinkType, SourceKind
from linkchart.domain.model.geo import Coordinates
from linkchart.domain.model.graph import (
    CanonicalGraph,
    Entity,
    Link,
    RawEntity,
    RawGraph,
    RawLink,
)
from linkchart.domain.model.source import DataSource, SourceMetadata
from linkchart.domain.model.values import (
    Properties,
    PropertyValue,
    Scalar,
    as_identifier,
    as_text,
    flatten_properties,
    is_property_value,
    to_property_value,
)

__all__ = [
    "UNKNOWN_TYPE",
    "CanonicalGraph",
    "Coordinates",
    "DataSource",
    "Entity",
    "EntityType",
    "Link",
    "LinkType",
    "Properties",
    "PropertyValue",
    "RawEntity",
    "RawGraph",
    "RawLink",
    "Scalar",
    "SourceKind",
    "SourceMetadata",
    "as_identifier",
    "as_text",
    "flatten_properties",
    "is_property_value",
    "to_property_value",
]
