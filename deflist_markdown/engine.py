"""Live decoration engine for documents open in an editing surface."""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from dataclasses import dataclass, field

from loguru import logger

from .classifier import build_decorations, iter_line_roles
from .document import ChangeSet, Line, TextDocument
from .exceptions import DocumentAlreadyOpenError, UnknownDocumentError
from .models import Block, Decoration, LineRole, ScanResult
from .oracle import LineKindOracle, MarkdownOracle
from .scanner import VisibleRange, scan_blocks
from .updater import FullRescan, LocalPatch, UpdateOutcome, apply_patch, map_decorations, plan_update


@dataclass(frozen=True)
class ViewUpdate:
    """What happened in the editing surface since the previous update.

    Attributes:
        document: Document content after the update.
        changes: Coalesced edits relative to the previous document.
        visible_ranges: Visible ``(from, to)`` offset ranges in document
            order, or None for the whole document.
        viewport_changed: Anything affecting the visible ranges happened,
            edits included.
        viewport_moved: The view scrolled far enough to expose new lines.
        doc_changed: `changes` holds at least one edit.
        visible: Whether the editing surface is currently shown.
    """

    document: TextDocument
    changes: ChangeSet = field(default_factory=ChangeSet)
    visible_ranges: tuple[VisibleRange, ...] | None = None
    viewport_changed: bool = False
    viewport_moved: bool = False
    doc_changed: bool = False
    visible: bool = True

    @classmethod
    def scroll(
        cls, document: TextDocument, visible_ranges: tuple[VisibleRange, ...] | None = None
    ) -> ViewUpdate:
        return cls(
            document=document,
            visible_ranges=visible_ranges,
            viewport_changed=True,
            viewport_moved=True,
        )

    @classmethod
    def edit(
        cls,
        previous: TextDocument,
        changes: ChangeSet,
        visible_ranges: tuple[VisibleRange, ...] | None = None,
    ) -> ViewUpdate:
        """Build the update describing `changes` applied to `previous`."""
        return cls(
            document=previous.apply(changes),
            changes=changes,
            visible_ranges=visible_ranges,
            viewport_changed=True,
            doc_changed=True,
        )


class DocumentDecorationEngine:
    """Keeps the definition-list decorations of one open document current.

    The engine is driven synchronously by `update`; after each call the
    editing surface reads `decorations`.

    Args:
        document: Document content when the engine is created.
        oracle: Line-kind oracle; defaults to a private `MarkdownOracle`.

    Examples:
        engine = DocumentDecorationEngine(doc)
        engine.update(ViewUpdate.scroll(doc))
        engine.decorations
    """

    def __init__(self, document: TextDocument | None = None, oracle: LineKindOracle | None = None):
        self._oracle = oracle if oracle is not None else MarkdownOracle()
        self._document = document if document is not None else TextDocument()
        self._visible_ranges: tuple[VisibleRange, ...] | None = None
        self._scan = ScanResult(blocks=[], scanned_lines=[])
        self._decorations: tuple[Decoration, ...] = ()
        self._line_count = self._document.lines
        self._never_updated = True
        logger.debug("Decoration engine started for {!r}", self._document)

    @property
    def document(self) -> TextDocument:
        return self._document

    @property
    def decorations(self) -> tuple[Decoration, ...]:
        return self._decorations

    @property
    def blocks(self) -> list[Block]:
        return self._scan.blocks

    @property
    def scanned_lines(self) -> list[int]:
        return self._scan.scanned_lines

    def roles(self) -> list[tuple[Line, LineRole | None]]:
        """Return the role of every scanned line in a definition-list block."""
        return list(iter_line_roles(self._document, self._scan))

    def update(self, update: ViewUpdate) -> UpdateOutcome | None:
        """Process one update from the editing surface.

        Args:
            update: Description of the edit or viewport change.

        Returns:
            UpdateOutcome | None: How the decorations were brought up to date,
                or None when the update was ignored.
        """
        if not (update.viewport_changed or update.doc_changed) and not self._never_updated:
            return None

        if update.visible_ranges is not None:
            self._visible_ranges = update.visible_ranges

        if update.viewport_moved or (self._never_updated and update.visible):
            return self.rescan(update.document)
        if update.doc_changed:
            return self._adjust_after_edit(update)

        self._document = update.document
        return None

    def rescan(self, document: TextDocument | None = None) -> FullRescan:
        """Rebuild blocks and decorations for the visible lines from scratch."""
        if document is not None:
            self._document = document
        self._scan = scan_blocks(self._document, self._clamped_ranges(), self._oracle)
        self._decorations = build_decorations(self._document, self._scan)
        self._line_count = self._document.lines
        self._never_updated = False
        logger.debug(
            "Rescanned {} lines into {} blocks, {} decorations",
            len(self._scan.scanned_lines),
            len(self._scan.blocks),
            len(self._decorations),
        )
        return FullRescan("rescan")

    def _adjust_after_edit(self, update: ViewUpdate) -> UpdateOutcome:
        # Shift existing decorations first so patches compose with the remap
        self._decorations = map_decorations(self._decorations, update.changes)
        self._document = update.document

        outcome = plan_update(
            self._scan.blocks,
            self._line_count,
            update.document,
            update.changes,
            self._scan.line_kinds,
            self._oracle,
        )
        if isinstance(outcome, FullRescan):
            logger.debug("Full rescan: {}", outcome.reason)
            self.rescan()
        elif isinstance(outcome, LocalPatch):
            logger.trace("Patching {} line(s)", len(outcome.edits))
            self._decorations = apply_patch(self._decorations, outcome)
        return outcome

    def _clamped_ranges(self) -> list[VisibleRange] | None:
        if self._visible_ranges is None:
            return None
        length = self._document.length
        ranges = [
            (min(range_from, length), min(range_to, length))
            for range_from, range_to in self._visible_ranges
        ]
        return ranges or None


class EngineRegistry:
    """One decoration engine per open document.

    Engines share no state; closing a document discards its engine.

    Examples:
        registry = EngineRegistry()
        engine = registry.open("notes.md", doc)
        registry.close("notes.md")
    """

    def __init__(self):
        self._engines: dict[Hashable, DocumentDecorationEngine] = {}

    def open(
        self,
        handle: Hashable,
        document: TextDocument,
        oracle: LineKindOracle | None = None,
    ) -> DocumentDecorationEngine:
        """Create the engine for a newly opened document.

        Raises:
            DocumentAlreadyOpenError: If `handle` already has an engine.
        """
        if handle in self._engines:
            raise DocumentAlreadyOpenError(handle)
        engine = DocumentDecorationEngine(document, oracle)
        self._engines[handle] = engine
        return engine

    def get(self, handle: Hashable) -> DocumentDecorationEngine:
        try:
            return self._engines[handle]
        except KeyError as error:
            raise UnknownDocumentError(handle) from error

    def close(self, handle: Hashable) -> None:
        """Discard the engine of a closed document.

        Raises:
            UnknownDocumentError: If `handle` is not open.
        """
        if self._engines.pop(handle, None) is None:
            raise UnknownDocumentError(handle)
        logger.debug("Decoration engine for {!r} discarded", handle)

    def __contains__(self, handle: object) -> bool:
        return handle in self._engines

    def __len__(self) -> int:
        return len(self._engines)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._engines)
