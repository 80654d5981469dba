"""Data models for deflist-markdown."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class LineKind(Enum):
    """Line kinds reported by a syntax oracle.

    Attributes:
        BLOCK_START: First line of a region with explicit delimiters (code fence, formula).
        BLOCK_END: Closing delimiter line of such a region.
        BLOCK_INNER: Interior line of such a region.
        CONTIGUOUS_BLOCK: Self-describing structural line (header, quote, table row,
            image, horizontal rule, task item).
        LIST_ITEM: Ordinary bullet or ordered list line.
        NORMAL: Prose, or anything the oracle could not classify.
    """

    BLOCK_START = auto()
    BLOCK_END = auto()
    BLOCK_INNER = auto()
    CONTIGUOUS_BLOCK = auto()
    LIST_ITEM = auto()
    NORMAL = auto()


class LineRole(Enum):
    """Role of a line inside a definition-list block.

    Attributes:
        TERM: Short label line.
        DEFINITION_TEXT: Marker-prefixed line.
        DEFINITION_LIST_ITEM: List line belonging to a definition.
        PLAIN: Over-length line left unstyled.
    """

    TERM = auto()
    DEFINITION_TEXT = auto()
    DEFINITION_LIST_ITEM = auto()
    PLAIN = auto()


class StyleTag(str, Enum):
    """Style tags carried by decorations."""

    TERM = "term"
    DEFINITION = "definition"
    DEFINITION_LIST_ITEM = "definition-list-item"
    MARKER = "marker"


@dataclass
class Block:
    """Contiguous run of lines between structural discontinuities.

    Attributes:
        first_line: One-based number of the block's first line.
        is_special: Whether the block is code, formula, header, quote, table,
            image or rule rather than prose.
        marker_lines: Line numbers inside the block that start with the marker.
        list_lines: Line numbers inside the block reported as list items.
    """

    first_line: int
    is_special: bool = False
    marker_lines: set[int] = field(default_factory=set)
    list_lines: set[int] = field(default_factory=set)

    @property
    def has_marker(self) -> bool:
        return bool(self.marker_lines)

    @property
    def is_definition_list(self) -> bool:
        return not self.is_special and self.has_marker


@dataclass(frozen=True, order=True)
class Decoration:
    """Styling annotation over a document range.

    Line decorations are points anchored at the start of their line
    (``start == end``); marker decorations cover the marker characters.

    Attributes:
        start: Offset where the decoration begins.
        end: Offset where the decoration ends (exclusive).
        tag: Style applied to the range.
    """

    start: int
    end: int
    tag: StyleTag

    @property
    def is_line(self) -> bool:
        return self.start == self.end


@dataclass
class ScanContext:
    """Scanner state carried from line to line and across visible ranges.

    Attributes:
        current_block: Block that receives the line being scanned.
        in_contiguous_block: Whether the previous line belonged to a run of
            self-describing structural lines.
    """

    current_block: Block | None = None
    in_contiguous_block: bool = False


@dataclass
class ScanResult:
    """Blocks and scanned line numbers produced by a scan.

    Attributes:
        blocks: Blocks ordered by strictly increasing ``first_line``.
        scanned_lines: Line numbers that were visited, in increasing order.
        line_kinds: Oracle classification of each visited line, by line number.
    """

    blocks: list[Block]
    scanned_lines: list[int]
    line_kinds: dict[int, LineKind] = field(default_factory=dict)


class FenceState(Enum):
    """States of the built-in oracle while walking Markdown lines.

    Attributes:
        NORMAL: Outside any delimited region.
        IN_FENCED_CODE: Inside a backtick or tilde code fence.
        IN_MATH: Inside a ``$$`` formula block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()
    IN_MATH = auto()


@dataclass
class FenceContext:
    """Encapsulate delimited-region state while walking Markdown text.

    Attributes:
        state: Current state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
    """

    state: FenceState = FenceState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0
