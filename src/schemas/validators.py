"""
Shared validation functions for Pydantic schemas and services.

Tag names are trimmed but otherwise kept as typed: the registry is case-sensitive.
"""
import re
from collections.abc import Iterable
from datetime import UTC, datetime

from models.tag import TAG_NAME_MAX_LENGTH

# Characters kept in uploaded filenames; everything else becomes "_"
UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def normalize_tag_name(tag: str) -> str:
    """
    Trim and validate a single tag name.

    Raises:
        ValueError: If the name is empty after trimming or too long.
    """
    normalized = tag.strip()
    if not normalized:
        raise ValueError("Tag name cannot be empty")
    if len(normalized) > TAG_NAME_MAX_LENGTH:
        raise ValueError(
            f"Tag name exceeds {TAG_NAME_MAX_LENGTH} characters: '{normalized[:20]}...'",
        )
    return normalized


def normalize_tag_names(tags: Iterable[str]) -> list[str]:
    """
    Normalize a list of tags into an ordered set.

    Empty entries are skipped silently and duplicates removed, preserving
    first occurrence order.
    """
    normalized: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        if not tag.strip():
            continue
        name = normalize_tag_name(tag)
        if name not in seen:
            seen.add(name)
            normalized.append(name)
    return normalized


def coerce_tag_input(value: object) -> list[str]:
    """
    Accept tags as a list of strings or a comma-joined string.

    Older clients send tags as "a,b,c"; the comma form is converted here so the
    rest of the code only sees lists.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list | tuple):
        raise ValueError("Tags must be a list of strings or a comma-separated string")
    if not all(isinstance(tag, str) for tag in value):
        raise ValueError("Each tag must be a string")
    return normalize_tag_names(value)


def sanitize_filename(name: str) -> str:
    """Replace characters outside [A-Za-z0-9.-] with underscores."""
    return UNSAFE_FILENAME_CHARS.sub("_", name)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite drops the offset of timezone-aware columns; all stored times are UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
