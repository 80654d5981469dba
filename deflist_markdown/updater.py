"""Incremental re-classification after a document edit.

`plan_update` looks at one coalesced change set and decides how much work
the edit needs: nothing beyond shifting the existing decorations (`NoOp`),
a replacement of the decorations of a few lines (`LocalPatch`), or a
complete rescan of the visible lines (`FullRescan`). Decorations are always
remapped through the change set first (`map_decorations`), so patches are
expressed in post-edit offsets.
"""

from __future__ import annotations

from collections.abc import Iterable, MutableMapping, Sequence
from dataclasses import dataclass

from .classifier import classify_line, decorations_for_role
from .constants import MARKER_LEN, MAX_TERM_LEN
from .document import ChangeSet, Line, TextDocument
from .markers import is_marker_line
from .models import Block, Decoration, LineKind
from .oracle import LineKindOracle, resolve_line_kind
from .scanner import block_index_for_line


@dataclass(frozen=True)
class NoOp:
    """The remapped decorations are already correct."""


@dataclass(frozen=True)
class PatchEdit:
    """Replace every decoration anchored on ``[line_start, line_end]``.

    Attributes:
        line_start: Offset of the patched line's first character.
        line_end: Offset just past the patched line's last character.
        decorations: Decorations the line carries after the patch.
    """

    line_start: int
    line_end: int
    decorations: tuple[Decoration, ...]


@dataclass(frozen=True)
class LocalPatch:
    """Line-local decoration replacements."""

    edits: tuple[PatchEdit, ...]


@dataclass(frozen=True)
class FullRescan:
    """Block structure may have changed; rescan the visible lines.

    Attributes:
        reason: Short description of the rule that fired.
    """

    reason: str


UpdateOutcome = NoOp | LocalPatch | FullRescan

# Kinds the scanner treats as prose; a line may move between them without a rescan
_PROSE_KINDS = frozenset({LineKind.NORMAL, LineKind.LIST_ITEM})
_DELIMITER_KINDS = frozenset({LineKind.BLOCK_START, LineKind.BLOCK_END})


def map_decorations(decorations: Iterable[Decoration], changes: ChangeSet) -> tuple[Decoration, ...]:
    """Shift decorations to match the document after `changes`.

    Line decorations stay at the start of their line. Marker ranges shrink
    with deletions inside them and are dropped once empty.
    """
    mapped: list[Decoration] = []
    for decoration in decorations:
        if decoration.is_line:
            position = changes.map_pos(decoration.start, assoc=-1)
            mapped.append(Decoration(position, position, decoration.tag))
            continue
        start = changes.map_pos(decoration.start, assoc=1)
        end = changes.map_pos(decoration.end, assoc=-1)
        if end > start:
            mapped.append(Decoration(start, end, decoration.tag))
    return tuple(sorted(mapped))


def apply_patch(decorations: Iterable[Decoration], patch: LocalPatch) -> tuple[Decoration, ...]:
    """Apply the line replacements of `patch` to a remapped decoration set."""
    result = list(decorations)
    for edit in patch.edits:
        result = [
            decoration
            for decoration in result
            if not edit.line_start <= decoration.start <= edit.line_end
        ]
        result.extend(edit.decorations)
    return tuple(sorted(result))


def _touched_lines(document: TextDocument, from_b: int, to_b: int) -> Iterable[Line]:
    first = document.line_at(from_b).number
    last = document.line_at(to_b).number
    return document.iter_lines(first, last)


def _pre_edit_length(line: Line, changes: ChangeSet) -> int | None:
    """Length `line` had before `changes`, or None when a change crosses its edges."""
    length = line.length
    for from_a, to_a, from_b, to_b in changes.iter_changed_ranges():
        if to_b < line.start or from_b > line.end:
            continue
        if from_b < line.start or to_b > line.end:
            return None
        length -= (to_b - from_b) - (to_a - from_a)
    return length


def _crosses_term_threshold(line: Line, changes: ChangeSet) -> bool:
    old_length = _pre_edit_length(line, changes)
    if old_length is None:
        return True
    return (old_length <= MAX_TERM_LEN) != (line.length <= MAX_TERM_LEN)


def _plan_line(
    block: Block,
    line: Line,
    scanned_kind: LineKind,
    kind: LineKind,
    from_b: int,
    to_b: int,
    changes: ChangeSet,
) -> FullRescan | PatchEdit | None:
    """Apply the per-line rules to one edited line."""
    if kind is not scanned_kind and not {kind, scanned_kind} <= _PROSE_KINDS:
        return FullRescan(f"line {line.number} changed from {scanned_kind.name} to {kind.name}")
    if kind in _DELIMITER_KINDS:
        # fence length and formula endings decide where the region closes
        return FullRescan(f"delimiter on line {line.number} edited")
    if kind not in _PROSE_KINDS:
        return None

    needs_patch = False
    marker_now = is_marker_line(line.text)

    if from_b < line.start + MARKER_LEN:
        if from_b <= line.start and to_b >= line.end:
            return FullRescan(f"line {line.number} emptied or filled")

        if marker_now != (line.number in block.marker_lines):
            if marker_now:
                block.marker_lines.add(line.number)
                if len(block.marker_lines) == 1:
                    return FullRescan(f"first marker added on line {line.number}")
            else:
                block.marker_lines.discard(line.number)
                if not block.marker_lines:
                    return FullRescan(f"last marker removed from line {line.number}")
            needs_patch = True
        elif marker_now:
            # the remapped marker range may have been stretched or shifted
            needs_patch = True

    list_now = kind is LineKind.LIST_ITEM and not marker_now
    if list_now != (line.number in block.list_lines):
        if list_now:
            block.list_lines.add(line.number)
        else:
            block.list_lines.discard(line.number)
        needs_patch = True

    if not needs_patch and block.is_definition_list and not marker_now and not list_now:
        needs_patch = _crosses_term_threshold(line, changes)

    if not needs_patch or not block.is_definition_list:
        return None
    return PatchEdit(
        line_start=line.start,
        line_end=line.end,
        decorations=tuple(decorations_for_role(line, classify_line(block, line))),
    )


def plan_update(
    blocks: Sequence[Block],
    line_count: int,
    document: TextDocument,
    changes: ChangeSet,
    line_kinds: MutableMapping[int, LineKind],
    oracle: LineKindOracle | None,
) -> UpdateOutcome:
    """Decide how to bring block and decoration state up to date after an edit.

    Every touched line is classified again through `oracle` and compared
    with the kind it had at the last scan. Marker, list-item and line-kind
    bookkeeping in `blocks` and `line_kinds` is updated in place for edits
    that are handled locally.

    Args:
        blocks: Blocks from the last scan.
        line_count: Number of lines the document had at the last scan.
        document: Document after the edit.
        changes: Change set that produced `document`.
        line_kinds: Kind of each line covered by the last scan.
        oracle: Oracle the last scan consulted.

    Returns:
        UpdateOutcome: ``NoOp``, ``LocalPatch`` with the line replacements to
            apply to the remapped decorations, or ``FullRescan``.

    Examples:
        outcome = plan_update(scan.blocks, 4, new_doc, ChangeSet.insertion(12, "x"), scan.line_kinds, oracle)
    """
    if document.lines != line_count:
        return FullRescan("line count changed")

    edits: dict[int, PatchEdit] = {}
    for _, _, from_b, to_b in changes.iter_changed_ranges():
        for line in _touched_lines(document, from_b, to_b):
            scanned_kind = line_kinds.get(line.number)
            if scanned_kind is None:
                return FullRescan(f"line {line.number} was not scanned")
            index = block_index_for_line(blocks, line.number)
            if index is None:
                return FullRescan(f"line {line.number} precedes the scanned blocks")

            kind = resolve_line_kind(oracle, document, line)
            outcome = _plan_line(blocks[index], line, scanned_kind, kind, from_b, to_b, changes)
            if isinstance(outcome, FullRescan):
                return outcome
            line_kinds[line.number] = kind
            if outcome is not None:
                edits[line.number] = outcome

    if not edits:
        return NoOp()
    return LocalPatch(edits=tuple(edits.values()))
