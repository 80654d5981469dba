"""Block-boundary scanning over the visible lines of a document."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence

from loguru import logger

from .document import Line, TextDocument
from .markers import is_marker_line
from .models import Block, LineKind, ScanContext, ScanResult
from .oracle import LineKindOracle, resolve_line_kind

VisibleRange = tuple[int, int]


def _start_block(ctx: ScanContext, blocks: list[Block], first_line: int, special: bool) -> Block:
    block = Block(first_line=first_line, is_special=special)
    blocks.append(block)
    ctx.current_block = block
    return block


def _open_special_block(ctx: ScanContext, blocks: list[Block], line_number: int) -> None:
    """Start a special block at `line_number`, or mark the current one special
    when it already starts there."""
    if ctx.current_block.first_line != line_number:
        _start_block(ctx, blocks, line_number, special=True)
    else:
        ctx.current_block.is_special = True


def _on_block_start(ctx: ScanContext, blocks: list[Block], line: Line) -> None:
    _open_special_block(ctx, blocks, line.number)
    ctx.in_contiguous_block = False


def _on_block_inner(ctx: ScanContext) -> None:
    ctx.current_block.is_special = True


def _on_block_end(ctx: ScanContext, blocks: list[Block], line: Line) -> None:
    ctx.current_block.is_special = True
    _start_block(ctx, blocks, line.number + 1, special=False)


def _on_contiguous_block(ctx: ScanContext, blocks: list[Block], line: Line) -> None:
    if ctx.in_contiguous_block:
        return
    ctx.in_contiguous_block = True
    _open_special_block(ctx, blocks, line.number)


def _on_prose_line(ctx: ScanContext, blocks: list[Block], line: Line, kind: LineKind) -> None:
    # Leaving a header/quote/table run, or a blank line in prose, opens a new block
    if ctx.in_contiguous_block or (not ctx.current_block.is_special and not line.length):
        if ctx.current_block.first_line != line.number:
            _start_block(ctx, blocks, line.number, special=False)
        ctx.in_contiguous_block = False

    if is_marker_line(line.text):
        ctx.current_block.marker_lines.add(line.number)
    elif kind is LineKind.LIST_ITEM:
        ctx.current_block.list_lines.add(line.number)


def scan_line(ctx: ScanContext, blocks: list[Block], line: Line, kind: LineKind) -> None:
    """Feed one classified line to the scanner.

    Args:
        ctx: Scanner state; ``ctx.current_block`` must be set.
        blocks: Blocks found so far; new blocks are appended.
        line: Line being scanned.
        kind: Oracle classification of the line.
    """
    logger.trace("line {}: {}", line.number, kind.name)
    if kind is LineKind.BLOCK_START:
        _on_block_start(ctx, blocks, line)
    elif kind is LineKind.BLOCK_INNER:
        _on_block_inner(ctx)
    elif kind is LineKind.BLOCK_END:
        _on_block_end(ctx, blocks, line)
    elif kind is LineKind.CONTIGUOUS_BLOCK:
        _on_contiguous_block(ctx, blocks, line)
    else:
        _on_prose_line(ctx, blocks, line, kind)


def scan_blocks(
    document: TextDocument,
    visible_ranges: Iterable[VisibleRange] | None = None,
    oracle: LineKindOracle | None = None,
) -> ScanResult:
    """Split the visible lines of a document into blocks.

    Ranges are processed in document order and the scanner state is carried
    from one range into the next, so a range boundary falling inside a code
    block or table does not split it. A line shared by two ranges is scanned
    once.

    Args:
        document: Document to scan.
        visible_ranges: ``(from, to)`` offset pairs; defaults to the whole document.
        oracle: Line-kind oracle; without one every line is ``NORMAL``.

    Returns:
        ScanResult: Blocks ordered by first line, the scanned line numbers and
            the kind each scanned line was given.

    Examples:
        doc = TextDocument.from_lines(["term", ":   definition"])
        scan_blocks(doc).blocks  # [Block(first_line=1, marker_lines={2}, ...)]
    """
    if visible_ranges is None:
        visible_ranges = [(0, document.length)]

    blocks: list[Block] = []
    scanned_lines: list[int] = []
    line_kinds: dict[int, LineKind] = {}
    ctx = ScanContext()
    last_scanned = 0

    for range_from, range_to in sorted(visible_ranges):
        first = max(document.line_at(range_from).number, last_scanned + 1)
        last = document.line_at(range_to).number
        if first > last:
            continue
        if ctx.current_block is None:
            _start_block(ctx, blocks, first, special=False)

        for line in document.iter_lines(first, last):
            kind = resolve_line_kind(oracle, document, line)
            scan_line(ctx, blocks, line, kind)
            scanned_lines.append(line.number)
            line_kinds[line.number] = kind
        last_scanned = last

    # A closing delimiter on the last scanned line leaves an empty block behind
    if len(blocks) > 1 and blocks[-1].first_line > last_scanned:
        blocks.pop()

    return ScanResult(blocks=blocks, scanned_lines=scanned_lines, line_kinds=line_kinds)


def block_index_for_line(blocks: Sequence[Block], line_number: int) -> int | None:
    """Return the index of the block owning `line_number`, or None before the first block."""
    index = bisect_right([block.first_line for block in blocks], line_number) - 1
    return index if index >= 0 else None


def block_extent(blocks: Sequence[Block], index: int, last_line: int) -> range:
    """Return the line numbers spanned by ``blocks[index]``.

    The last block extends to `last_line` inclusive.
    """
    if index + 1 < len(blocks):
        stop = blocks[index + 1].first_line
    else:
        stop = last_line + 1
    return range(blocks[index].first_line, stop)
