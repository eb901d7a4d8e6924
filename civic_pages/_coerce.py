"""Coercion helpers for loosely typed JSON and YAML payloads."""

from __future__ import annotations

import datetime as dt


def optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def optional_int(value: object) -> int | None:
    """Return ``value`` as an int, or None when absent or not numeric."""
    match value:
        case bool():
            return int(value)
        case int():
            return value
        case float():
            return int(value)
        case str() as text if text.strip().lstrip("-").isdigit():
            return int(text.strip())
        case _:
            return None


def coerce_int(value: object, default: int = 0) -> int:
    """Return ``value`` as an int, or ``default`` when it cannot be converted."""
    result = optional_int(value)
    return default if result is None else result


def coerce_bool(value: object, *, default: bool = False) -> bool:
    """Interpret booleans sent as JSON booleans, numbers, or strings."""
    match value:
        case None:
            return default
        case bool():
            return value
        case int():
            return value != 0
        case str() as text:
            return text.strip().lower() in {"1", "true", "yes", "on"}
        case _:
            return default


def parse_timestamp(value: dt.datetime | str | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


__all__ = [
    "coerce_bool",
    "coerce_int",
    "optional_int",
    "optional_str",
    "parse_timestamp",
]
