"""Display formatting for loosely typed question attributes.

Each formatter turns a ``FieldValue`` (or a raw JSON value) into the single
string written to a sheet cell. Formatters never raise; absent values
format to an empty string.
"""

import json
from typing import Any

from ..models.enums import ValueShape
from ..models.intake import FieldValue


def stringify(value: Any) -> str:
    """
    Render a scalar the way the intake JSON would show it.

    Booleans are lowercase, integral floats drop the fraction, nested lists
    are comma-joined and nested objects become compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def format_validation(value: Any) -> str:
    """
    Format validation rules.

    A string passes through, a number becomes ``max_length: N`` and an
    object becomes ``key: value`` pairs joined by ``", "``.
    """
    tagged = FieldValue.of(value)

    if tagged.shape is ValueShape.SCALAR:
        raw = tagged.value
        if isinstance(raw, str):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return f"max_length: {stringify(raw)}"
        return ""

    if tagged.shape is ValueShape.MAPPING:
        return ", ".join(f"{key}: {stringify(item)}" for key, item in tagged.value.items())

    if tagged.shape is ValueShape.SEQUENCE:
        # Lists are walked as index/value pairs
        return ", ".join(f"{index}: {stringify(item)}" for index, item in enumerate(tagged.value))

    return ""


def format_maps_to(value: Any) -> str:
    """Format mapping targets as a comma-separated string."""
    tagged = FieldValue.of(value)

    if tagged.shape is ValueShape.SEQUENCE:
        return ", ".join(stringify(item) for item in tagged.value)
    if tagged.is_absent:
        return ""
    return stringify(tagged.value)


def format_examples(value: Any) -> str:
    """Format examples as a pipe-separated string."""
    tagged = FieldValue.of(value)

    if tagged.shape is ValueShape.SEQUENCE:
        return " | ".join(stringify(item) for item in tagged.value)
    if tagged.is_absent:
        return ""
    return stringify(tagged.value)


def format_options(value: Any) -> str:
    """
    Format select options as a pipe-separated string.

    Accepts a list of strings or a list of ``{value, label}`` objects, where
    ``value`` wins over ``label``. The first item decides which form applies.
    Any other shape formats to an empty string.
    """
    tagged = FieldValue.of(value)

    if tagged.shape is not ValueShape.SEQUENCE or not tagged.value:
        return ""

    items = tagged.value
    if isinstance(items[0], str):
        return " | ".join(stringify(item) for item in items)
    if isinstance(items[0], dict):
        return " | ".join(
            stringify(item.get("value") or item.get("label")) if isinstance(item, dict) else ""
            for item in items
        )
    return ""
