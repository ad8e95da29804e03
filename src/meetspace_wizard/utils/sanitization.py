"""Input sanitization helpers for wizard text fields."""

import re
from typing import Any
from urllib.parse import urlparse

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_SLUG_UNSAFE = re.compile(r"[^a-zA-Z0-9-]")


def sanitize_input(text: Any, max_len: int | None = None) -> str:
    """Strip control characters from user text, keeping newlines and tabs.

    Args:
        text: Raw input (None becomes an empty string)
        max_len: Optional hard length cap

    Returns:
        Cleaned string
    """
    if text is None:
        return ""
    cleaned = _CONTROL_CHARS.sub("", str(text))
    if max_len is not None:
        cleaned = cleaned[:max_len]
    return cleaned


def is_absolute_url(value: Any) -> bool:
    """Check whether a value parses as an absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def slugify(value: str) -> str:
    """Replace every character outside [a-zA-Z0-9-] with a dash."""
    return _SLUG_UNSAFE.sub("-", value)


def clean_list(values: Any) -> list[str]:
    """Normalize a tag-like list: strings only, trimmed, no blanks, no duplicates."""
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(",")
    seen: list[str] = []
    for item in values:
        text = sanitize_input(item).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


def parse_flag(value: Any) -> bool:
    """Read a checkbox value; only the string ``"true"`` counts as set for text input."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)
