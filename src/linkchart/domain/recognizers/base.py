"""Recognizer contract and the helpers shared by every recognizer kind."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

STRING_NUMBER_FIELDS: Final[tuple[str, ...]] = (
    "zip",
    "postal",
    "phone",
    "id",
    "year",
    "ssn",
    "isbn",
    "account",
    "number",
    "social",
    "security",
)

NAME_AND_PATTERN: Final = 1.0
NAME_ONLY: Final = 0.7
PATTERN_ONLY: Final = 0.5

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_SPLIT_RE = re.compile(r"[\s_\-.]+")


@runtime_checkable
class Recognizer(Protocol):
    """Detects and normalizes one semantic kind of field value."""

    kind: str

    def is_likely_type(self, field_name: str, value: object) -> bool: ...

    def get_confidence(self, field_name: str, value: object) -> float: ...

    def normalize(self, value: object) -> object: ...


def field_tokens(field_name: str) -> list[str]:
    """Split ``fieldName``/``field_name``/``field-name`` into lowercase words."""

    spaced = _CAMEL_RE.sub(" ", field_name)
    return [token for token in _SPLIT_RE.split(spaced.lower()) if token]


def normalize_field_name(field_name: str) -> str:
    return "".join(field_tokens(field_name))


def matches_field_name(field_name: str, known: Iterable[str]) -> bool:
    """True when ``field_name`` equals a known name or contains it as a word.

    Known names of five letters or more also match as plain substrings so
    ``homeaddress`` still hits ``address``.
    """

    tokens = field_tokens(field_name)
    if not tokens:
        return False
    joined = "".join(tokens)
    for candidate in known:
        normalized = normalize_field_name(candidate)
        if not normalized:
            continue
        if normalized == joined or normalized in tokens:
            return True
        if len(normalized) >= 5 and normalized in joined:
            return True
    return False


def confidence_for(*, name_match: bool, pattern_match: bool) -> float:
    if name_match and pattern_match:
        return NAME_AND_PATTERN
    if name_match:
        return NAME_ONLY
    if pattern_match:
        return PATTERN_ONLY
    return 0.0


def is_string_number_field(
    field_name: str, guarded: Iterable[str] = STRING_NUMBER_FIELDS
) -> bool:
    lowered = field_name.lower()
    return any(marker in lowered for marker in guarded)


def looks_numeric(text: str) -> bool:
    return bool(_NUMBER_RE.match(text.strip()))


def parse_number(text: str) -> int | float | None:
    """Parse a strictly numeric string; ``nan``/``inf`` and blanks are rejected."""

    stripped = text.strip()
    if not _NUMBER_RE.match(stripped):
        return None
    if _INTEGER_RE.match(stripped):
        return int(stripped)
    return float(stripped)


def coerce_cell(column: str, value: object, guarded: Iterable[str] = STRING_NUMBER_FIELDS) -> object:
    """Tabular cell conversion: blanks become ``None``, numeric text becomes a number.

    Columns named like an identifier or code keep their text untouched.
    """

    if not isinstance(value, str):
        return value
    if not value.strip():
        return None
    if is_string_number_field(column, guarded):
        return value
    number = parse_number(value)
    return value if number is None else number
