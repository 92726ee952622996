"""Data-driven processing rules applied by the entity processor."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Final

from linkchart.domain.model import EntityType
from linkchart.domain.recognizers import DEFAULT_DATE_FIELDS

if TYPE_CHECKING:
    from collections.abc import Mapping

    from linkchart.domain.model import PropertyValue

DEFAULT_RENAMES: Final[dict[str, dict[str, str]]] = {
    EntityType.PERSON: {
        "full_name": "name",
        "person_id": "id",
        "notes": "description",
        "telephone": "phone",
        "phoneNumber": "phone",
    },
    EntityType.ORGANIZATION: {
        "org_name": "name",
        "organization_id": "id",
        "sector": "industry",
        "category": "type",
        "notes": "description",
    },
    EntityType.LOCATION: {
        "lat": "latitude",
        "lng": "longitude",
        "location_id": "id",
        "place_name": "name",
        "notes": "description",
    },
}

DEFAULT_UPPERCASE: Final = frozenset({"country_code"})
DEFAULT_LOWERCASE: Final = frozenset({"email", "username"})
DEFAULT_TITLE_CASE: Final = frozenset({"name", "city", "state"})

DEFAULT_VALUE_REPLACEMENTS: Final[dict[str, dict[str, str]]] = {
    "gender": {"m": "Male", "male": "Male", "f": "Female", "female": "Female"},
}


def capitalize_words(text: str) -> str:
    """Capitalize words that start lowercase; mixed-case words are left alone."""

    return " ".join(
        word[0].upper() + word[1:] if word[:1].islower() else word for word in text.split(" ")
    )


@dataclass(frozen=True, slots=True)
class ProcessingRules:
    renames: Mapping[str, Mapping[str, str]] = field(default_factory=lambda: DEFAULT_RENAMES)
    date_fields: tuple[str, ...] = DEFAULT_DATE_FIELDS
    uppercase: frozenset[str] = DEFAULT_UPPERCASE
    lowercase: frozenset[str] = DEFAULT_LOWERCASE
    title_case: frozenset[str] = DEFAULT_TITLE_CASE
    value_replacements: Mapping[str, Mapping[str, str]] = field(
        default_factory=lambda: DEFAULT_VALUE_REPLACEMENTS
    )

    def updated(
        self,
        *,
        renames: Mapping[str, Mapping[str, str]] | None = None,
        date_fields: tuple[str, ...] | None = None,
        text_cases: Mapping[str, list[str]] | None = None,
        value_replacements: Mapping[str, Mapping[str, str]] | None = None,
    ) -> ProcessingRules:
        """Return a copy with configured overrides merged in."""

        merged_renames = {key: dict(value) for key, value in self.renames.items()}
        for entity_type, mapping in (renames or {}).items():
            merged_renames.setdefault(entity_type, {}).update(mapping)

        merged_replacements = {key: dict(value) for key, value in self.value_replacements.items()}
        for field_name, mapping in (value_replacements or {}).items():
            merged_replacements.setdefault(field_name, {}).update(
                {source.lower(): target for source, target in mapping.items()}
            )

        cases = text_cases or {}
        return replace(
            self,
            renames=merged_renames,
            date_fields=date_fields if date_fields is not None else self.date_fields,
            uppercase=frozenset(cases.get("uppercase", self.uppercase)),
            lowercase=frozenset(cases.get("lowercase", self.lowercase)),
            title_case=frozenset(cases.get("titleCase", cases.get("title_case", self.title_case))),
            value_replacements=merged_replacements,
        )

    def rename_properties(
        self, entity_type: str, properties: Mapping[str, PropertyValue]
    ) -> dict[str, PropertyValue]:
        """Apply the per-type renames without overwriting existing properties."""

        renames = self.renames.get(entity_type, {})
        renamed: dict[str, PropertyValue] = {}
        for name, value in properties.items():
            target = renames.get(name)
            if target is None or target in properties or target in renamed:
                renamed.setdefault(name, value)
            else:
                renamed[target] = value
        return renamed

    def apply_text_rules(self, name: str, value: PropertyValue) -> PropertyValue:
        if not isinstance(value, str):
            return value
        replacements = self.value_replacements.get(name)
        if replacements is not None:
            value = replacements.get(value.lower(), value)
        if name in self.uppercase:
            return value.upper()
        if name in self.lowercase:
            return value.lower()
        if name in self.title_case:
            return capitalize_words(value)
        return value
