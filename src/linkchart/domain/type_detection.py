"""Weighted scoring of canonical entity types."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, Final

from linkchart.domain.model import UNKNOWN_TYPE, EntityType
from linkchart.domain.profiles import DEFAULT_TYPE_PROFILES, ENTITY_TYPE_ALIASES
from linkchart.domain.recognizers import coordinates_from_properties

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from linkchart.domain.profiles import TypeProfile

log = getLogger(__name__)

KEYWORD_SCORE: Final = 2.0
PROPERTY_SCORE: Final = 1.0
FIELD_PATTERN_SCORE: Final = 1.5
COORDINATES_BONUS: Final = 3.0
PERSON_BONUS: Final = 2.0
ORGANIZATION_BONUS: Final = 2.0

PERSON_FIELDS: Final = frozenset(
    {"first_name", "last_name", "gender", "dob", "birthdate", "age", "ssn", "email"}
)
ORGANIZATION_FIELDS: Final = frozenset(
    {
        "industry",
        "employees",
        "founded",
        "revenue",
        "website",
        "company_type",
        "registration_number",
    }
)


class TypeDetector:
    """Scores every profile and picks the best canonical type.

    Profiles are scored in declaration order and a later profile only wins
    with a strictly higher score, so ties favour the earlier type.
    """

    def __init__(
        self,
        profiles: Sequence[TypeProfile] = DEFAULT_TYPE_PROFILES,
        *,
        fallback: str = EntityType.PERSON,
    ) -> None:
        self._profiles: dict[str, TypeProfile] = {profile.name: profile for profile in profiles}
        self._keyword_patterns: dict[str, re.Pattern[str]] = {}
        self.fallback = fallback
        for profile in profiles:
            self._compile(profile)

    @property
    def profiles(self) -> tuple[TypeProfile, ...]:
        return tuple(self._profiles.values())

    @property
    def canonical_types(self) -> frozenset[str]:
        return frozenset(self._profiles)

    def profile(self, type_name: str) -> TypeProfile | None:
        return self._profiles.get(type_name)

    def register(self, profile: TypeProfile) -> None:
        """Add a custom type, or replace the profile of an existing one."""

        self._profiles[profile.name] = profile
        self._compile(profile)

    def extend_keywords(self, type_name: str, keywords: Iterable[str]) -> None:
        profile = self._profiles.get(type_name)
        if profile is None:
            log.warning("Ignoring keywords for unknown entity type %r", type_name)
            return
        self.register(profile.with_keywords(tuple(keywords)))

    def resolve_declared(self, declared: object) -> str | None:
        """Map a declared type onto a canonical one, or ``None`` if it does not resolve."""

        if not isinstance(declared, str):
            return None
        lowered = declared.strip().lower()
        if not lowered or lowered == UNKNOWN_TYPE:
            return None
        if lowered in self._profiles:
            return lowered
        alias = ENTITY_TYPE_ALIASES.get(lowered)
        if alias in self._profiles:
            return alias
        return None

    def score(self, profile: TypeProfile, label: str | None, properties: Mapping[str, object]) -> float:
        score = 0.0
        if label and self._keyword_patterns[profile.name].search(label):
            score += KEYWORD_SCORE

        names = [name.lower() for name in properties]
        for name in names:
            if any(prop == name or prop in name for prop in profile.properties):
                score += PROPERTY_SCORE

        for pattern in profile.field_patterns:
            for name, value in properties.items():
                if pattern.matches_name(name) and pattern.accepts(value):
                    score += FIELD_PATTERN_SCORE

        if profile.name == EntityType.LOCATION and coordinates_from_properties(properties):
            score += COORDINATES_BONUS
        if profile.name == EntityType.PERSON and PERSON_FIELDS.intersection(names):
            score += PERSON_BONUS
        if profile.name == EntityType.ORGANIZATION and ORGANIZATION_FIELDS.intersection(names):
            score += ORGANIZATION_BONUS
        return score

    def scores(self, label: str | None, properties: Mapping[str, object]) -> dict[str, float]:
        return {
            name: self.score(profile, label, properties) for name, profile in self._profiles.items()
        }

    def detect(self, label: str | None, properties: Mapping[str, object]) -> str:
        best_type: str | None = None
        best_score = 0.0
        for type_name, score in self.scores(label, properties).items():
            if best_type is None or score > best_score:
                best_type, best_score = type_name, score
        if best_type is None or best_type not in self._profiles:
            return self.fallback
        log.debug("Detected type %s (score %.1f) for %r", best_type, best_score, label)
        return best_type

    def _compile(self, profile: TypeProfile) -> None:
        if not profile.keywords:
            self._keyword_patterns[profile.name] = re.compile(r"(?!x)x")
            return
        alternatives = "|".join(re.escape(keyword) for keyword in profile.keywords)
        self._keyword_patterns[profile.name] = re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)
