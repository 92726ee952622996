from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .base import confidence_for, matches_field_name

ABBREVIATIONS: Final[dict[str, str]] = {
    "st": "Street",
    "rd": "Road",
    "ave": "Avenue",
    "av": "Avenue",
    "blvd": "Boulevard",
    "dr": "Drive",
    "ln": "Lane",
    "ct": "Court",
    "pl": "Place",
    "pkwy": "Parkway",
    "sq": "Square",
    "hwy": "Highway",
    "apt": "Apartment",
    "ste": "Suite",
    "n": "North",
    "s": "South",
    "e": "East",
    "w": "West",
    "ne": "Northeast",
    "nw": "Northwest",
    "se": "Southeast",
    "sw": "Southwest",
}

STREET_SUFFIXES: Final[tuple[str, ...]] = (
    "street",
    "st",
    "road",
    "rd",
    "avenue",
    "ave",
    "boulevard",
    "blvd",
    "drive",
    "dr",
    "lane",
    "ln",
    "court",
    "ct",
    "place",
    "pl",
    "parkway",
    "pkwy",
    "square",
    "sq",
    "highway",
    "hwy",
    "way",
    "terrace",
)

US_STATES: Final[frozenset[str]] = frozenset(
    "AL AK AZ AR CA CO CT DE FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO MT NE "
    "NV NH NJ NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY DC".split()
)

_SUFFIX_RE = re.compile(rf"\b(?:{'|'.join(STREET_SUFFIXES)})\b\.?", re.IGNORECASE)
_NUMBER_PREFIX_RE = re.compile(r"^\d+[A-Za-z]?\s+[A-Za-z]")
_ZIP_RE = re.compile(r"\b\d{5}(?:-\d{4})?\b")
_STATE_RE = re.compile(r"\b([A-Z]{2})\b")
_TOKEN_RE = re.compile(r"^(?P<word>[A-Za-z]+)(?P<dot>\.?)(?P<tail>[,;]?)$")


@dataclass(frozen=True, slots=True)
class AddressSignals:
    suffix: bool
    number_prefix: bool
    postal_code: bool
    state: bool

    @property
    def any(self) -> bool:
        return self.suffix or self.number_prefix or self.postal_code or self.state

    @property
    def combined(self) -> bool:
        return (
            (self.number_prefix and self.suffix)
            or (self.suffix and (self.postal_code or self.state))
            or (self.postal_code and self.state)
        )


def address_signals(text: str) -> AddressSignals:
    return AddressSignals(
        suffix=bool(_SUFFIX_RE.search(text)),
        number_prefix=bool(_NUMBER_PREFIX_RE.match(text.strip())),
        postal_code=bool(_ZIP_RE.search(text)),
        state=any(state in US_STATES for state in _STATE_RE.findall(text)),
    )


def _normalize_token(token: str) -> str:
    match = _TOKEN_RE.match(token)
    if match is None:
        return token
    word, tail = match.group("word"), match.group("tail")
    expanded = ABBREVIATIONS.get(word.lower())
    if expanded is not None and not (word.isupper() and len(word) == 2 and word in US_STATES):  # noqa: PLR2004
        return expanded + tail
    if word[0].islower():
        return word[0].upper() + word[1:] + match.group("dot") + tail
    return token


@dataclass(slots=True)
class AddressRecognizer:
    kind: str = "address"
    field_names: tuple[str, ...] = ("address", "street", "addr", "residence", "mailing_address")

    def is_likely_type(self, field_name: str, value: object) -> bool:
        if matches_field_name(field_name, self.field_names):
            return True
        return isinstance(value, str) and address_signals(value).any

    def get_confidence(self, field_name: str, value: object) -> float:
        pattern = isinstance(value, str) and address_signals(value).combined
        return confidence_for(
            name_match=matches_field_name(field_name, self.field_names),
            pattern_match=pattern,
        )

    def normalize(self, value: object) -> object:
        """Expand street abbreviations and capitalize lowercase words."""

        if not isinstance(value, str):
            return value
        return " ".join(_normalize_token(token) for token in value.split())
