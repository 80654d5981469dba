"""Line roles inside definition-list blocks and the decorations they produce."""

from __future__ import annotations

from .constants import MARKER_LEN, MAX_TERM_LEN
from .document import Line, TextDocument
from .markers import is_marker_line
from .models import Block, Decoration, LineRole, ScanResult, StyleTag
from .scanner import block_extent


def classify_line(block: Block, line: Line) -> LineRole | None:
    """Determine the role of `line` inside the definition-list `block`.

    A marker line is definition text; a line the oracle reported as a list
    item is a definition list item; any other non-empty line is a term when
    it is at most `MAX_TERM_LEN` characters long and plain text otherwise.

    Args:
        block: Definition-list block containing the line.
        line: Line to classify.

    Returns:
        LineRole | None: The line's role, or None for an empty line.

    Examples:
        classify_line(Block(1, marker_lines={2}), Line(1, 0, "cryosphere"))  # LineRole.TERM
    """
    if not line.length:
        return None
    if is_marker_line(line.text):
        return LineRole.DEFINITION_TEXT
    if line.number in block.list_lines:
        return LineRole.DEFINITION_LIST_ITEM
    if line.length <= MAX_TERM_LEN:
        return LineRole.TERM
    return LineRole.PLAIN


def decorations_for_role(line: Line, role: LineRole | None) -> list[Decoration]:
    """Return the decorations styling a line with the given role."""
    if role is LineRole.DEFINITION_TEXT:
        return [
            Decoration(line.start, line.start, StyleTag.DEFINITION),
            Decoration(line.start, line.start + MARKER_LEN, StyleTag.MARKER),
        ]
    if role is LineRole.DEFINITION_LIST_ITEM:
        return [Decoration(line.start, line.start, StyleTag.DEFINITION_LIST_ITEM)]
    if role is LineRole.TERM:
        return [Decoration(line.start, line.start, StyleTag.TERM)]
    # empty and over-long lines stay unstyled
    return []


def iter_line_roles(document: TextDocument, scan: ScanResult):
    """Yield ``(line, role)`` for every scanned line of every definition-list block."""
    if not scan.scanned_lines:
        return
    scanned = set(scan.scanned_lines)
    last_line = scan.scanned_lines[-1]
    for index, block in enumerate(scan.blocks):
        if not block.is_definition_list:
            continue
        for number in block_extent(scan.blocks, index, last_line):
            if number not in scanned:
                continue
            line = document.line(number)
            yield line, classify_line(block, line)


def build_decorations(document: TextDocument, scan: ScanResult) -> tuple[Decoration, ...]:
    """Build the sorted decoration set for a scanned document."""
    decorations: list[Decoration] = []
    for line, role in iter_line_roles(document, scan):
        decorations.extend(decorations_for_role(line, role))
    return tuple(sorted(decorations))
