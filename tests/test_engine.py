from __future__ import annotations

import pytest

from deflist_markdown.classifier import build_decorations
from deflist_markdown.document import ChangeSet, TextDocument
from deflist_markdown.engine import DocumentDecorationEngine, EngineRegistry, ViewUpdate
from deflist_markdown.exceptions import DocumentAlreadyOpenError, UnknownDocumentError
from deflist_markdown.models import Decoration, LineKind, LineRole, StyleTag
from deflist_markdown.oracle import MarkdownOracle
from deflist_markdown.scanner import scan_blocks
from deflist_markdown.updater import FullRescan, LocalPatch, NoOp

CRYOSPHERE = [
    "cryosphere",
    ":   the frozen part of the Earth's surface",
    "ice shelf",
    ":   ice that has slid off the land onto the sea",
]


def _started_engine(lines: list[str]) -> DocumentDecorationEngine:
    document = TextDocument.from_lines(lines)
    engine = DocumentDecorationEngine(document)
    engine.update(ViewUpdate.scroll(document))
    return engine


def _edit(engine: DocumentDecorationEngine, changes: ChangeSet):
    return engine.update(ViewUpdate.edit(engine.document, changes))


def _rescanned(document: TextDocument):
    return build_decorations(document, scan_blocks(document, oracle=MarkdownOracle()))


def test_first_update_scans_the_document():
    engine = _started_engine(CRYOSPHERE)

    assert engine.decorations == _rescanned(engine.document)
    assert engine.scanned_lines == [1, 2, 3, 4]
    assert len(engine.blocks) == 1


def test_first_update_rescans_even_without_viewport_flags():
    document = TextDocument.from_lines(CRYOSPHERE)
    engine = DocumentDecorationEngine(document)

    outcome = engine.update(ViewUpdate(document=document))

    assert isinstance(outcome, FullRescan)
    assert engine.decorations


def test_update_without_changes_is_ignored():
    engine = _started_engine(CRYOSPHERE)

    assert engine.update(ViewUpdate(document=engine.document)) is None


def test_hidden_engine_waits_for_the_first_visible_update():
    document = TextDocument.from_lines(CRYOSPHERE)
    engine = DocumentDecorationEngine(document)

    assert engine.update(ViewUpdate(document=document, visible=False)) is None
    assert engine.decorations == ()


def test_rescan_is_idempotent():
    engine = _started_engine(CRYOSPHERE)
    decorations = engine.decorations
    blocks = [(block.first_line, set(block.marker_lines)) for block in engine.blocks]

    engine.rescan()

    assert engine.decorations == decorations
    assert [(block.first_line, block.marker_lines) for block in engine.blocks] == blocks


def test_typing_in_a_definition_only_shifts_decorations():
    engine = _started_engine(CRYOSPHERE)
    before = engine.decorations
    end_of_definition = engine.document.line(2).end

    outcome = _edit(engine, ChangeSet.insertion(end_of_definition, "!"))

    assert outcome == NoOp()
    assert [decoration for decoration in engine.decorations if decoration.start < end_of_definition] == [
        decoration for decoration in before if decoration.start < end_of_definition
    ]
    assert engine.decorations == _rescanned(engine.document)


def test_typing_a_marker_character_by_character():
    engine = _started_engine(["alpha", "beta"])
    assert engine.decorations == ()

    outcomes = []
    for offset, character in enumerate(":   ", start=6):
        outcomes.append(_edit(engine, ChangeSet.insertion(offset, character)))

    assert outcomes[:3] == [NoOp(), NoOp(), NoOp()]
    assert isinstance(outcomes[3], FullRescan)
    assert engine.document.text == "alpha\n:   beta"
    assert engine.decorations == (
        Decoration(0, 0, StyleTag.TERM),
        Decoration(6, 6, StyleTag.DEFINITION),
        Decoration(6, 10, StyleTag.MARKER),
    )


def test_completing_a_fence_clears_the_lines_it_swallows():
    engine = _started_engine(["term", ":   def", "~~", "other", ":   more"])

    outcome = _edit(engine, ChangeSet.insertion(engine.document.line(3).start + 2, "~"))

    assert isinstance(outcome, FullRescan)
    assert engine.decorations == _rescanned(engine.document)
    assert all(decoration.start < engine.document.line(3).start for decoration in engine.decorations)


class PlusListOracle:
    """Reports lines starting with "+" as list items and nothing else."""

    def kind_at(self, document, offset):
        return LineKind.LIST_ITEM if document.line_at(offset).text.startswith("+") else None


def test_list_toggles_follow_the_engine_oracle():
    document = TextDocument.from_lines(["term", ":   def", "note"])
    oracle = PlusListOracle()
    engine = DocumentDecorationEngine(document, oracle)
    engine.update(ViewUpdate.scroll(document))
    third = document.line(3).start

    outcome = _edit(engine, ChangeSet.insertion(third, "+"))

    assert isinstance(outcome, LocalPatch)
    assert Decoration(third, third, StyleTag.DEFINITION_LIST_ITEM) in engine.decorations
    assert engine.decorations == build_decorations(engine.document, scan_blocks(engine.document, oracle=oracle))


def test_new_line_triggers_full_rescan():
    engine = _started_engine(CRYOSPHERE)

    outcome = _edit(engine, ChangeSet.insertion(engine.document.length, "\nglacier\n:   a river of ice"))

    assert isinstance(outcome, FullRescan)
    assert engine.decorations == _rescanned(engine.document)
    assert engine.blocks[0].marker_lines == {2, 4, 6}


def test_term_growing_past_the_threshold_is_patched():
    engine = _started_engine(["term", ":   definition"])

    outcome = _edit(engine, ChangeSet.insertion(4, "x" * 97))

    assert isinstance(outcome, LocalPatch)
    second = engine.document.line(2).start
    assert engine.decorations == (
        Decoration(second, second, StyleTag.DEFINITION),
        Decoration(second, second + 4, StyleTag.MARKER),
    )


def test_visible_ranges_limit_decorations():
    document = TextDocument.from_lines(CRYOSPHERE)
    engine = DocumentDecorationEngine(document)

    engine.update(ViewUpdate.scroll(document, ((0, document.line(2).end),)))

    assert engine.scanned_lines == [1, 2]
    assert {decoration.start for decoration in engine.decorations} == {0, document.line(2).start}


def test_edit_outside_visible_lines_forces_rescan():
    document = TextDocument.from_lines(CRYOSPHERE)
    engine = DocumentDecorationEngine(document)
    engine.update(ViewUpdate.scroll(document, ((0, document.line(2).end),)))

    outcome = _edit(engine, ChangeSet.insertion(document.line(4).end, "!"))

    assert isinstance(outcome, FullRescan)


def test_roles_report_every_definition_list_line():
    engine = _started_engine(CRYOSPHERE)

    assert [(line.number, role) for line, role in engine.roles()] == [
        (1, LineRole.TERM),
        (2, LineRole.DEFINITION_TEXT),
        (3, LineRole.TERM),
        (4, LineRole.DEFINITION_TEXT),
    ]


def test_registry_keeps_one_engine_per_document():
    registry = EngineRegistry()
    first = registry.open("a.md", TextDocument.from_lines(CRYOSPHERE))
    second = registry.open("b.md", TextDocument("prose"))

    assert registry.get("a.md") is first
    assert registry.get("b.md") is second
    assert first is not second
    assert len(registry) == 2
    assert set(registry) == {"a.md", "b.md"}


def test_registry_rejects_opening_twice():
    registry = EngineRegistry()
    registry.open("a.md", TextDocument())

    with pytest.raises(DocumentAlreadyOpenError):
        registry.open("a.md", TextDocument())


def test_registry_close_discards_the_engine():
    registry = EngineRegistry()
    registry.open("a.md", TextDocument())

    registry.close("a.md")

    assert "a.md" not in registry
    with pytest.raises(UnknownDocumentError):
        registry.get("a.md")
    with pytest.raises(UnknownDocumentError):
        registry.close("a.md")
