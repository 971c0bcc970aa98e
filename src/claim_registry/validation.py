"""Shared validation functions for all entry points.

Pure functions with no FastAPI, Click, or httpx dependencies.
"""

from __future__ import annotations

import unicodedata
from typing import Any


def sanitize_field(value: Any, field: str) -> tuple[str, str | None]:
    """Validate and clean one claim identity field.

    Returns (cleaned, None) on success or ("", error_message) on failure.
    Non-string and missing values clean to "" without error; emptiness is
    the caller's decision.
    """
    if value is None or not isinstance(value, str):
        return ("", None)
    for ch in value:
        cat = unicodedata.category(ch)
        if cat.startswith("C"):  # Cc (control) and Cf (format)
            return ("", f"{field} must not contain control characters (found U+{ord(ch):04X})")
    return (value.strip(), None)


def parse_repository(value: str) -> tuple[str, str, str | None]:
    """Split an ``owner/repo`` slug.

    Returns (owner, repo, None) on success or ("", "", error_message) when
    the slug is not exactly two non-empty segments.
    """
    parts = value.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return ("", "", f'Invalid repository format: "{value}". Expected "owner/repo".')
    return (parts[0], parts[1], None)
