"""Type-detection profiles and the entity/link type registries.

Profiles are plain data: label keywords, property names and field patterns
per canonical entity type, plus the icon and color a viewer uses for it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Final

from linkchart.domain.model import EntityType, LinkType
from linkchart.domain.recognizers import field_tokens


@dataclass(frozen=True, slots=True)
class FieldPattern:
    """A field-name rule with an optional regex or allowed-values constraint."""

    fields: tuple[str, ...]
    regex: str | None = None
    values: tuple[str, ...] = ()

    def matches_name(self, field_name: str) -> bool:
        lowered = field_name.lower()
        return any(candidate == lowered or candidate in lowered for candidate in self.fields)

    def accepts(self, value: object) -> bool:
        if self.regex is None and not self.values:
            return True
        if value is None:
            return False
        text = str(value).strip()
        if self.regex is not None and re.search(self.regex, text, re.IGNORECASE):
            return True
        return text.lower() in self.values


@dataclass(frozen=True, slots=True)
class TypeProfile:
    name: str
    icon: str
    color: str
    keywords: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    field_patterns: tuple[FieldPattern, ...] = ()

    def with_keywords(self, keywords: tuple[str, ...]) -> TypeProfile:
        merged = self.keywords + tuple(k.lower() for k in keywords if k.lower() not in self.keywords)
        return replace(self, keywords=merged)


@dataclass(frozen=True, slots=True)
class LinkTypeProfile:
    name: str
    label: str
    color: str
    icon: str


DEFAULT_TYPE_PROFILES: Final[tuple[TypeProfile, ...]] = (
    TypeProfile(
        name=EntityType.PERSON,
        icon="fa-user",
        color="#e74c3c",
        keywords=(
            "person", "individual", "contact", "suspect", "witness", "victim",
            "mr", "mrs", "ms", "dr", "jr", "sr",
        ),
        properties=(
            "first_name", "last_name", "middle_name", "full_name", "gender", "age", "dob",
            "birthdate", "ssn", "nationality", "occupation", "username", "email", "phone",
            "alias",
        ),
        field_patterns=(
            FieldPattern(fields=("gender", "sex"), values=("m", "f", "male", "female", "other")),
            FieldPattern(fields=("ssn",), regex=r"^\d{3}-?\d{2}-?\d{4}$"),
        ),
    ),
    TypeProfile(
        name=EntityType.ORGANIZATION,
        icon="fa-building",
        color="#2ecc71",
        keywords=(
            "inc", "corp", "corporation", "company", "co", "llc", "ltd", "limited", "gmbh",
            "plc", "group", "holdings", "bank", "foundation", "association", "agency",
            "organization", "org", "business", "enterprise", "partners", "university",
        ),
        properties=(
            "industry", "employees", "founded", "revenue", "website", "company_type",
            "registration_number", "sector", "ceo", "headquarters", "tax_id", "org_name",
            "company_name",
        ),
        field_patterns=(
            FieldPattern(fields=("website", "url", "domain"), regex=r"^(https?://)?(www\.)?[\w-]+(\.[\w-]+)+"),
            FieldPattern(fields=("employees", "staff"), regex=r"^\d+$"),
        ),
    ),
    TypeProfile(
        name=EntityType.LOCATION,
        icon="fa-map-marker-alt",
        color="#3498db",
        keywords=(
            "street", "avenue", "road", "city", "town", "village", "airport", "station",
            "park", "building", "square", "county", "country", "port", "harbor", "hotel",
            "location", "address",
        ),
        properties=(
            "latitude", "longitude", "lat", "lng", "lon", "coordinates", "address", "street",
            "city", "state", "country", "postal_code", "zip", "region", "province", "venue",
        ),
        field_patterns=(
            FieldPattern(fields=("zip", "postal_code", "postcode"), regex=r"^[A-Z0-9][A-Z0-9 \-]{2,9}$"),
            FieldPattern(fields=("country", "country_code"), regex=r"^[A-Za-z .'-]{2,}$"),
        ),
    ),
    TypeProfile(
        name=EntityType.EVENT,
        icon="fa-calendar-alt",
        color="#9b59b6",
        keywords=(
            "meeting", "event", "conference", "incident", "call", "transaction", "attack",
            "party", "wedding", "trip", "flight", "visit", "summit",
        ),
        properties=(
            "date", "start_date", "end_date", "time", "timestamp", "duration", "attendees",
            "event_type", "occurred_at",
        ),
        field_patterns=(
            FieldPattern(fields=("date", "start", "end", "occurred"), regex=r"^\d{4}-\d{2}-\d{2}"),
        ),
    ),
    TypeProfile(
        name=EntityType.DOCUMENT,
        icon="fa-file-alt",
        color="#f1c40f",
        keywords=(
            "report", "document", "memo", "letter", "file", "contract", "invoice",
            "receipt", "statement", "pdf",
        ),
        properties=(
            "title", "author", "pages", "filename", "file_type", "document_type", "published",
            "isbn", "content",
        ),
        field_patterns=(
            FieldPattern(fields=("filename", "file"), regex=r"\.\w{2,4}$"),
            FieldPattern(fields=("isbn",), regex=r"^[\d\-X]{10,17}$"),
        ),
    ),
    TypeProfile(
        name=EntityType.VEHICLE,
        icon="fa-car",
        color="#e67e22",
        keywords=(
            "car", "truck", "van", "vehicle", "bike", "motorcycle", "boat", "ford",
            "toyota", "honda", "bmw",
        ),
        properties=("make", "model", "plate", "license_plate", "vin", "registration", "engine"),
        field_patterns=(
            FieldPattern(fields=("vin",), regex=r"^[A-HJ-NPR-Z0-9]{17}$"),
        ),
    ),
    TypeProfile(
        name=EntityType.PHONE,
        icon="fa-phone",
        color="#1abc9c",
        keywords=("phone", "mobile", "cell", "telephone"),
        properties=("carrier", "imei", "imsi", "msisdn", "phone_number"),
        field_patterns=(
            FieldPattern(fields=("number", "phone_number", "msisdn"), regex=r"^\+?[\d\s().\-]{7,}$"),
        ),
    ),
    TypeProfile(
        name=EntityType.EMAIL,
        icon="fa-envelope",
        color="#34495e",
        keywords=("email", "mailbox", "inbox"),
        properties=("provider", "email_address", "mailbox"),
        field_patterns=(
            FieldPattern(fields=("address", "email_address"), regex=r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
        ),
    ),
)

DEFAULT_LINK_TYPES: Final[tuple[LinkTypeProfile, ...]] = (
    LinkTypeProfile(LinkType.ASSOCIATES, "Associates", "#7f8c8d", "fa-handshake"),
    LinkTypeProfile(LinkType.OWNS, "Owns", "#16a085", "fa-key"),
    LinkTypeProfile(LinkType.TRAVELS, "Travels", "#3498db", "fa-plane"),
    LinkTypeProfile(LinkType.COMMUNICATES, "Communicates", "#9b59b6", "fa-comments"),
    LinkTypeProfile(LinkType.FAMILY, "Family", "#e74c3c", "fa-users"),
)

ENTITY_TYPE_ALIASES: Final[dict[str, str]] = {
    "people": EntityType.PERSON,
    "individual": EntityType.PERSON,
    "human": EntityType.PERSON,
    "contact": EntityType.PERSON,
    "user": EntityType.PERSON,
    "suspect": EntityType.PERSON,
    "org": EntityType.ORGANIZATION,
    "company": EntityType.ORGANIZATION,
    "business": EntityType.ORGANIZATION,
    "corporation": EntityType.ORGANIZATION,
    "corp": EntityType.ORGANIZATION,
    "institution": EntityType.ORGANIZATION,
    "agency": EntityType.ORGANIZATION,
    "place": EntityType.LOCATION,
    "venue": EntityType.LOCATION,
    "city": EntityType.LOCATION,
    "address": EntityType.LOCATION,
    "country": EntityType.LOCATION,
    "meeting": EntityType.EVENT,
    "incident": EntityType.EVENT,
    "file": EntityType.DOCUMENT,
    "report": EntityType.DOCUMENT,
    "car": EntityType.VEHICLE,
    "telephone": EntityType.PHONE,
    "mobile": EntityType.PHONE,
    "mail": EntityType.EMAIL,
}

# Matched against the words of a relationship name, in this order.
LINK_KEYWORDS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    (LinkType.OWNS, ("own", "possess", "holds")),
    (
        LinkType.COMMUNICATES,
        ("communicat", "call", "email", "message", "contact", "text", "phoned", "talk"),
    ),
    (
        LinkType.FAMILY,
        (
            "family", "relative", "parent", "child", "sibling", "spouse", "married",
            "husband", "wife", "mother", "father", "son", "daughter", "brother", "sister",
        ),
    ),
    (LinkType.TRAVELS, ("travel", "visit", "flew", "flight", "trip", "went")),
)


def link_type_for_keyword(relationship: str) -> str | None:
    """Map a free-form relationship name to a canonical link type."""

    words = field_tokens(relationship)
    for link_type, keywords in LINK_KEYWORDS:
        if any(word.startswith(keyword) for word in words for keyword in keywords):
            return link_type
    return None
