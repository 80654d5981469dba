"""Detection of the definition marker."""

from __future__ import annotations

from .constants import MARKER, MARKER_PATTERN


def is_marker_line(text: str) -> bool:
    """Return True when `text` starts with the definition marker.

    Examples:
        is_marker_line(":   the frozen part")  # True
        is_marker_line(":  two spaces")  # False
    """
    return text.startswith(MARKER)


def contains_marker(content: str) -> bool:
    return MARKER_PATTERN.search(content) is not None
