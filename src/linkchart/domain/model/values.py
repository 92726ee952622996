"""Property value shapes shared by raw and canonical records."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import date, datetime

type Scalar = str | int | float | bool | None
type PropertyValue = Scalar | list[PropertyValue]
type Properties = dict[str, PropertyValue]


def is_property_value(value: object) -> bool:
    if value is None or isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, list):
        return all(is_property_value(item) for item in value)
    return False


def to_property_value(value: object) -> PropertyValue:
    """Coerce arbitrary reader output into the property value shape."""

    if is_property_value(value):
        return value  # type: ignore[return-value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_property_value(item) for item in value]
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return None
    if isinstance(value, Mapping):
        return json.dumps(value, default=str, sort_keys=True)
    return str(value)


def flatten_properties(values: Mapping[str, object], *, prefix: str = "") -> Properties:
    """Flatten nested mappings into dotted property names."""

    flat: Properties = {}
    for key, value in values.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_properties(value, prefix=f"{name}."))
        else:
            flat[name] = to_property_value(value)
    return flat


def as_identifier(value: object) -> str | None:
    """Return ``value`` as an opaque string id, or ``None`` when blank."""

    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def as_text(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None
