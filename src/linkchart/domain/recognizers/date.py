from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Final

from .base import confidence_for, matches_field_name

DEFAULT_DATE_FIELDS: Final[tuple[str, ...]] = (
    "date",
    "birthdate",
    "dob",
    "start_date",
    "end_date",
    "created_at",
    "updated_at",
)

MONTHS_IN_YEAR = 12

_ISO_RE = re.compile(
    r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ]\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)
_YMD_SLASH_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_US_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_EU_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_TEXT_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y", "%B %d %Y", "%b %d %Y")


def _safe_date(year: str, month: str, day: str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_date(text: str) -> date | None:
    """Parse ISO, US (``MM/DD/YYYY``), EU (``DD.MM.YYYY``) and month-name dates.

    Slash dates are read as US unless the first part cannot be a month.
    """

    value = text.strip()
    if match := _ISO_RE.match(value):
        return _safe_date(*match.groups())
    if match := _YMD_SLASH_RE.match(value):
        return _safe_date(*match.groups())
    if match := _US_RE.match(value):
        first, second, year = match.groups()
        if int(first) > MONTHS_IN_YEAR:
            return _safe_date(year, second, first)
        return _safe_date(year, first, second)
    if match := _EU_RE.match(value):
        day, month, year = match.groups()
        return _safe_date(year, month, day)
    for fmt in _TEXT_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None


@dataclass(slots=True)
class DateRecognizer:
    kind: str = "date"
    field_names: tuple[str, ...] = DEFAULT_DATE_FIELDS

    def _pattern(self, value: object) -> bool:
        return isinstance(value, str) and parse_date(value) is not None

    def is_likely_type(self, field_name: str, value: object) -> bool:
        return self._pattern(value) or matches_field_name(field_name, self.field_names)

    def get_confidence(self, field_name: str, value: object) -> float:
        return confidence_for(
            name_match=matches_field_name(field_name, self.field_names),
            pattern_match=self._pattern(value),
        )

    def normalize(self, value: object) -> object:
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, str):
            parsed = parse_date(value)
            return value if parsed is None else parsed.isoformat()
        return value
