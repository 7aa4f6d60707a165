"""
Field Normalizer Module

Maps client-supplied form keys onto canonical snake_case report keys.
"""

import re
from collections.abc import Mapping

KEY_SEPARATOR_PATTERN = re.compile(r"[\s\-]+")

# Legacy and third-party form names for the passenger name
FIELD_ALIASES: dict[str, str] = {
    "fullname": "full_name",
    "name": "full_name",
    "passenger_name": "full_name",
}


def normalize_key(key: object) -> str:
    """
    Canonicalize a form key.

    Lower-cases, trims, collapses whitespace/hyphen runs to "_" and applies
    the alias table. Idempotent: normalize_key(normalize_key(k)) == normalize_key(k).

    Examples:
        "Full Name" -> "full_name"
        "full-name" -> "full_name"
        "fullname"  -> "full_name"
    """
    canonical = KEY_SEPARATOR_PATTERN.sub("_", str(key if key is not None else "").strip().lower())
    return FIELD_ALIASES.get(canonical, canonical)


def stringify_value(value: object) -> str:
    """Coerce a raw field value to a string; lists join with ","."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_value(item) for item in value)
    return str(value)


def normalize_fields(raw_fields: Mapping[str, object]) -> dict[str, str]:
    """
    Normalize keys and trim values.

    When several raw keys map to one canonical key, the last one in
    iteration order wins.
    """
    return {
        normalize_key(key): stringify_value(value).strip()
        for key, value in raw_fields.items()
    }
