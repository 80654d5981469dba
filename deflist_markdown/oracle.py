"""Line-kind oracles consulted by the block scanner."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from itertools import islice
from typing import Protocol

from loguru import logger

from .constants import (
    BULLET_ITEM_PATTERN,
    CLOSING_FENCE_MAX_INDENT,
    CODE_FENCE_PATTERN,
    HEADER_PATTERN,
    HORIZONTAL_RULE_PATTERN,
    IMAGE_PATTERN,
    MATH_FENCE,
    QUOTE_PATTERN,
    TABLE_ROW_PATTERN,
    TASK_ITEM_PATTERN,
)
from .document import Line, TextDocument
from .exceptions import OracleError
from .models import FenceContext, FenceState, LineKind


class LineKindOracle(Protocol):
    """Anything able to classify the line at a document offset."""

    def kind_at(self, document: TextDocument, offset: int) -> LineKind | None:
        """Return the kind of the line containing `offset`, or None when unknown.

        Implementations may raise `OracleError` when classification fails.
        """


def resolve_line_kind(oracle: LineKindOracle | None, document: TextDocument, line: Line) -> LineKind:
    """Ask `oracle` for the kind of `line`, degrading misses to ``NORMAL``.

    Args:
        oracle: Oracle to consult; None behaves like an oracle that never answers.
        document: Document containing the line.
        line: Line to classify.

    Returns:
        LineKind: The oracle's answer, or ``LineKind.NORMAL`` when it has none
            or fails.
    """
    if oracle is None:
        return LineKind.NORMAL
    try:
        kind = oracle.kind_at(document, line.start)
    except OracleError as error:
        logger.debug("Oracle failed on line {}: {}", line.number, error)
        return LineKind.NORMAL
    if kind is None:
        return LineKind.NORMAL
    return kind


# Parser node names, normalised by `normalize_node_name`
BLOCK_START_NAMES = (
    "HyperMD-codeblock_HyperMD-codeblock-begin_HyperMD-codeblock-begin-bg_HyperMD-codeblock-bg",
    "formatting_formatting-math_formatting-math-begin_keyword_math_math-block",
)
BLOCK_INNER_NAMES = ("hmd-codeblock_variable", "hmd-codeblock_keyword", "math_variable-")
BLOCK_END_NAMES = (
    "HyperMD-codeblock_HyperMD-codeblock-bg_HyperMD-codeblock-end_HyperMD-codeblock-end-bg",
    "formatting_formatting-math_formatting-math-end_keyword_math_math-",
)
CONTIGUOUS_BLOCK_NAMES = (
    "HyperMD-header_HyperMD-header-",
    "HyperMD-quote_HyperMD-quote-",
    "HyperMD-table-_HyperMD-table-row_HyperMD-table-row-",
    "formatting_formatting-image_image_image-marker",
    "HyperMD-list-line_HyperMD-list-line-_HyperMD-task-line",
    "hr",
)
LIST_ITEM_NAMES = ("HyperMD-list-line_HyperMD-list-line-",)

_NAME_TABLES = (
    (BLOCK_START_NAMES, LineKind.BLOCK_START),
    (BLOCK_INNER_NAMES, LineKind.BLOCK_INNER),
    (BLOCK_END_NAMES, LineKind.BLOCK_END),
    (CONTIGUOUS_BLOCK_NAMES, LineKind.CONTIGUOUS_BLOCK),
    (LIST_ITEM_NAMES, LineKind.LIST_ITEM),
)

_DIGITS = re.compile(r"\d")


def normalize_node_name(name: str) -> str:
    """Strip the volatile numeric parts of a parser node name.

    Examples:
        normalize_node_name("HyperMD-header_HyperMD-header-2")  # "HyperMD-header_HyperMD-header-"
    """
    return _DIGITS.sub("", name)


class NodeNameOracle:
    """Oracle backed by a parser that reports node names at a position.

    Args:
        resolve_names: Callable returning the names of the syntax nodes
            covering an offset, innermost first.

    Examples:
        oracle = NodeNameOracle(lambda document, offset: tree.names_at(offset))
    """

    def __init__(self, resolve_names: Callable[[TextDocument, int], Iterable[str]]):
        self._resolve_names = resolve_names

    def kind_at(self, document: TextDocument, offset: int) -> LineKind | None:
        for name in self._resolve_names(document, offset):
            kind = kind_for_node_name(name)
            if kind is not None:
                return kind
        return None


def kind_for_node_name(name: str) -> LineKind | None:
    """Map one parser node name to a line kind, or None when it carries no kind."""
    normalized = normalize_node_name(name)
    for names, kind in _NAME_TABLES:
        if normalized in names:
            return kind
    return None


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def _try_open_fence(ctx: FenceContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Args:
        ctx: Context to update when a fence opens.
        line: Current line being scanned.

    Returns:
        bool: True when the line begins a fence and the context is updated.

    Examples:
        _try_open_fence(FenceContext(), "```python")  # True
    """
    if ctx.state is not FenceState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = _leading_whitespace_columns(fence_match.group("indent") or "")
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    # Backtick fences may not carry backticks in their info string
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        return False

    ctx.state = FenceState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def _try_close_fence(ctx: FenceContext, line: str) -> bool:
    """Attempt to close the active fenced code block.

    Returns:
        bool: True when the line closes the fence; otherwise False.
    """
    if ctx.state is not FenceState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    indent_columns = _leading_whitespace_columns(line)
    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False

    if stripped_line[fence_run_length:].strip():
        return False

    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = FenceState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def _try_open_math(ctx: FenceContext, line: str) -> bool:
    """Detect a line opening a ``$$`` formula block.

    A line that also closes the formula (``$$x$$``) does not open a block.
    """
    if ctx.state is not FenceState.NORMAL:
        return False

    stripped_line = line.strip()
    if not stripped_line.startswith(MATH_FENCE):
        return False
    if len(stripped_line) > len(MATH_FENCE) and stripped_line.endswith(MATH_FENCE):
        return False

    ctx.state = FenceState.IN_MATH
    return True


def _try_close_math(ctx: FenceContext, line: str) -> bool:
    if ctx.state is not FenceState.IN_MATH:
        return False

    if not line.rstrip().endswith(MATH_FENCE):
        return False

    ctx.state = FenceState.NORMAL
    return True


def _classify_undelimited_line(line: str) -> LineKind:
    if (
        HEADER_PATTERN.match(line)
        or QUOTE_PATTERN.match(line)
        or TABLE_ROW_PATTERN.match(line)
        or IMAGE_PATTERN.match(line)
        or HORIZONTAL_RULE_PATTERN.match(line)
        or TASK_ITEM_PATTERN.match(line)
    ):
        return LineKind.CONTIGUOUS_BLOCK
    stripped_line = line.strip()
    if stripped_line.startswith(MATH_FENCE) and len(stripped_line) > len(MATH_FENCE):
        # one-line display formula
        return LineKind.CONTIGUOUS_BLOCK
    if BULLET_ITEM_PATTERN.match(line):
        return LineKind.LIST_ITEM
    return LineKind.NORMAL


def iter_markdown_line_kinds(lines: Iterable[str]) -> Iterator[LineKind]:
    """Classify Markdown source lines one at a time, without a full Markdown parser.

    Code fences and ``$$`` formulas report start, inner and end lines; an
    unterminated region runs to the end of the input. Headers, quotes, table
    rows, standalone images, horizontal rules and task items are contiguous
    block lines; other bullet or ordered items are list items.

    Args:
        lines: Source lines without line breaks.

    Yields:
        LineKind: The kind of each input line, in order.
    """
    ctx = FenceContext()

    for line in lines:
        if ctx.state is FenceState.IN_FENCED_CODE:
            yield LineKind.BLOCK_END if _try_close_fence(ctx, line) else LineKind.BLOCK_INNER
            continue

        if ctx.state is FenceState.IN_MATH:
            yield LineKind.BLOCK_END if _try_close_math(ctx, line) else LineKind.BLOCK_INNER
            continue

        if _try_open_fence(ctx, line) or _try_open_math(ctx, line):
            yield LineKind.BLOCK_START
            continue

        yield _classify_undelimited_line(line)


def classify_markdown_lines(lines: Iterable[str]) -> list[LineKind]:
    """Return one kind per Markdown source line.

    Examples:
        classify_markdown_lines(["```", "code", "```"])
        # [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_END]
    """
    return list(iter_markdown_line_kinds(lines))


class MarkdownOracle:
    """Built-in oracle that classifies raw Markdown text.

    Lines are classified lazily from the top of the document, only as far as
    the last line asked about, and cached until a different document is
    queried. A rescan of the visible lines therefore never classifies the
    part of the document below them; the lines above still have to be walked
    because a fence opened there changes every later line.

    Examples:
        oracle = MarkdownOracle()
        oracle.kind_at(TextDocument("# Title"), 0)  # LineKind.CONTIGUOUS_BLOCK
    """

    def __init__(self):
        self._document: TextDocument | None = None
        self._kinds: list[LineKind] = []
        self._pending: Iterator[LineKind] = iter(())

    def _classify_through(self, document: TextDocument, last_line: int) -> None:
        if document is not self._document:
            self._document = document
            self._kinds = []
            self._pending = iter_markdown_line_kinds(line.text for line in document.iter_lines())

        if last_line > len(self._kinds):
            self._kinds.extend(islice(self._pending, last_line - len(self._kinds)))

    def line_kinds(self, document: TextDocument, last_line: int | None = None) -> list[LineKind]:
        """Return the kinds of lines ``1..last_line`` (every line by default)."""
        wanted = document.lines if last_line is None else min(last_line, document.lines)
        self._classify_through(document, wanted)
        return self._kinds[:wanted]

    @property
    def classified_lines(self) -> int:
        """Number of lines of the current document classified so far."""
        return len(self._kinds)

    def kind_at(self, document: TextDocument, offset: int) -> LineKind | None:
        try:
            line = document.line_at(offset)
        except IndexError as error:
            raise OracleError(str(error)) from error
        self._classify_through(document, line.number)
        return self._kinds[line.number - 1]
