"""Shared utility functions for service layer."""


def escape_ilike(value: str) -> str:
    r"""
    Escape special LIKE characters for safe use in LIKE/ILIKE patterns.

    These characters are treated specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is the escape character

    This function escapes them so they match literally. Patterns built from
    the result must be compared with escape="\\".
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
