"""Line and offset model for plain-text documents."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .exceptions import InvalidChangeError


@dataclass(frozen=True)
class Line:
    """One line of a document.

    Attributes:
        number: One-based line number.
        start: Offset of the line's first character.
        text: Line content without the line break.
    """

    number: int
    start: int
    text: str

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end(self) -> int:
        return self.start + len(self.text)


class TextDocument:
    """Immutable text addressed by one-based lines and zero-based offsets.

    A document with ``n`` newline characters has ``n + 1`` lines; the empty
    document has one empty line.

    Examples:
        doc = TextDocument.from_text("term\\n:   definition")
        doc.line(2).text  # ":   definition"
        doc.line_at(5).number  # 2
    """

    def __init__(self, text: str = ""):
        self._text = text
        starts = [0]
        for index, character in enumerate(text):
            if character == "\n":
                starts.append(index + 1)
        self._starts = starts

    @classmethod
    def from_text(cls, text: str) -> TextDocument:
        return cls(text)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> TextDocument:
        return cls("\n".join(lines))

    @property
    def text(self) -> str:
        return self._text

    @property
    def lines(self) -> int:
        """Number of lines in the document."""
        return len(self._starts)

    @property
    def length(self) -> int:
        return len(self._text)

    def line(self, number: int) -> Line:
        """Return the line with the given one-based number.

        Raises:
            IndexError: If `number` is outside ``1..lines``.
        """
        if number < 1 or number > len(self._starts):
            raise IndexError(f"Line {number} out of range 1..{len(self._starts)}")
        start = self._starts[number - 1]
        if number < len(self._starts):
            end = self._starts[number] - 1
        else:
            end = len(self._text)
        return Line(number=number, start=start, text=self._text[start:end])

    def line_at(self, offset: int) -> Line:
        """Return the line containing `offset`.

        Raises:
            IndexError: If `offset` lies outside ``0..length``.
        """
        if offset < 0 or offset > len(self._text):
            raise IndexError(f"Offset {offset} out of range 0..{len(self._text)}")
        return self.line(bisect_right(self._starts, offset))

    def iter_lines(self, first: int = 1, last: int | None = None) -> Iterator[Line]:
        last = self.lines if last is None else min(last, self.lines)
        for number in range(max(first, 1), last + 1):
            yield self.line(number)

    def apply(self, changes: ChangeSet) -> TextDocument:
        """Return a new document with `changes` applied.

        Raises:
            InvalidChangeError: If a change reaches past the end of the document.
        """
        parts = []
        position = 0
        for change in changes:
            if change.end > len(self._text):
                raise InvalidChangeError(change.start, change.end, len(self._text))
            parts.append(self._text[position : change.start])
            parts.append(change.insert)
            position = change.end
        parts.append(self._text[position:])
        return TextDocument("".join(parts))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TextDocument):
            return NotImplemented
        return self._text == other._text

    def __hash__(self) -> int:
        return hash(self._text)

    def __repr__(self) -> str:
        return f"TextDocument(lines={self.lines}, length={self.length})"


@dataclass(frozen=True)
class Change:
    """Replacement of ``[start, end)`` in the pre-edit document by `insert`."""

    start: int
    end: int
    insert: str = ""

    @property
    def delta(self) -> int:
        return len(self.insert) - (self.end - self.start)


class ChangeSet:
    """Ordered, non-overlapping changes expressed in pre-edit coordinates.

    Raises:
        InvalidChangeError: If a change has a negative or inverted range, or
            overlaps the previous change.

    Examples:
        changes = ChangeSet([Change(4, 4, "s")])
        changes.map_pos(10)  # 11
    """

    def __init__(self, changes: Iterable[Change] = ()):
        ordered = sorted(changes, key=lambda change: (change.start, change.end))
        previous_end = 0
        for change in ordered:
            if change.start < 0 or change.end < change.start or change.start < previous_end:
                raise InvalidChangeError(change.start, change.end, previous_end)
            previous_end = change.end
        self._changes = tuple(ordered)

    @classmethod
    def insertion(cls, offset: int, text: str) -> ChangeSet:
        return cls([Change(offset, offset, text)])

    @classmethod
    def deletion(cls, start: int, end: int) -> ChangeSet:
        return cls([Change(start, end)])

    def __iter__(self) -> Iterator[Change]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    @property
    def empty(self) -> bool:
        return all(not change.insert and change.start == change.end for change in self._changes)

    def iter_changed_ranges(self) -> Iterator[tuple[int, int, int, int]]:
        """Yield ``(from_a, to_a, from_b, to_b)`` for each change.

        ``a`` coordinates refer to the document before the edit, ``b``
        coordinates to the document after it.
        """
        delta = 0
        for change in self._changes:
            from_b = change.start + delta
            yield change.start, change.end, from_b, from_b + len(change.insert)
            delta += change.delta

    def map_pos(self, pos: int, assoc: int = -1) -> int:
        """Map a pre-edit offset to the post-edit document.

        Args:
            pos: Offset in the pre-edit document.
            assoc: Side a position touching an insertion sticks to; negative
                keeps it before inserted text, positive moves it after.

        Returns:
            int: Offset in the post-edit document.
        """
        delta = 0
        for change in self._changes:
            if pos < change.start:
                break
            from_b = change.start + delta
            if pos > change.end:
                delta += change.delta
                continue
            if change.start == change.end or pos < change.end:
                return from_b + (len(change.insert) if assoc > 0 else 0)
            return from_b + len(change.insert)
        return pos + delta
