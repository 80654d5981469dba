from __future__ import annotations

import pytest

from deflist_markdown.document import TextDocument
from deflist_markdown.exceptions import OracleError
from deflist_markdown.models import LineKind
from deflist_markdown.oracle import (
    MarkdownOracle,
    NodeNameOracle,
    classify_markdown_lines,
    kind_for_node_name,
    normalize_node_name,
    resolve_line_kind,
)


def test_code_fence_lines():
    kinds = classify_markdown_lines(["```python", "print('x')", "```"])

    assert kinds == [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_END]


def test_tilde_fence_requires_matching_character():
    kinds = classify_markdown_lines(["~~~", "```", "~~~"])

    assert kinds == [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_END]


def test_math_block_lines():
    kinds = classify_markdown_lines(["$$", "C(t)=C_0/2^{t/T}", "$$"])

    assert kinds == [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_END]


def test_unterminated_fence_runs_to_the_end():
    kinds = classify_markdown_lines(["```", "a", ":   not a definition"])

    assert kinds == [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_INNER]


def test_deeply_indented_fence_is_not_a_fence():
    assert classify_markdown_lines(["    ```"]) == [LineKind.NORMAL]


def test_one_line_formula_is_contiguous():
    assert classify_markdown_lines(["$$x^2$$"]) == [LineKind.CONTIGUOUS_BLOCK]


@pytest.mark.parametrize(
    "line, expected",
    [
        ("# Title", LineKind.CONTIGUOUS_BLOCK),
        ("> quoted", LineKind.CONTIGUOUS_BLOCK),
        ("| a | b |", LineKind.CONTIGUOUS_BLOCK),
        ("![diagram](diagram.png)", LineKind.CONTIGUOUS_BLOCK),
        ("---", LineKind.CONTIGUOUS_BLOCK),
        ("- [ ] task", LineKind.CONTIGUOUS_BLOCK),
        ("- item", LineKind.LIST_ITEM),
        ("1. item", LineKind.LIST_ITEM),
        ("#hashtag", LineKind.NORMAL),
        ("plain prose", LineKind.NORMAL),
        (":   a definition", LineKind.NORMAL),
        ("", LineKind.NORMAL),
    ],
)
def test_undelimited_lines(line: str, expected: LineKind):
    assert classify_markdown_lines([line]) == [expected]


def test_normalize_node_name_strips_digits():
    assert normalize_node_name("HyperMD-header_HyperMD-header-2") == "HyperMD-header_HyperMD-header-"


@pytest.mark.parametrize(
    "name, expected",
    [
        (
            "HyperMD-codeblock_HyperMD-codeblock-begin_HyperMD-codeblock-begin-bg_HyperMD-codeblock-bg",
            LineKind.BLOCK_START,
        ),
        ("math_variable-2", LineKind.BLOCK_INNER),
        (
            "formatting_formatting-math_formatting-math-end_keyword_math_math-1",
            LineKind.BLOCK_END,
        ),
        ("HyperMD-quote_HyperMD-quote-1", LineKind.CONTIGUOUS_BLOCK),
        ("hr", LineKind.CONTIGUOUS_BLOCK),
        ("HyperMD-list-line_HyperMD-list-line-1", LineKind.LIST_ITEM),
        ("em", None),
    ],
)
def test_kind_for_node_name(name: str, expected: LineKind | None):
    assert kind_for_node_name(name) is expected


def test_node_name_oracle_uses_first_known_name():
    oracle = NodeNameOracle(lambda document, offset: ["em", "HyperMD-list-line_HyperMD-list-line-1"])

    assert oracle.kind_at(TextDocument("- item"), 0) is LineKind.LIST_ITEM


def test_node_name_oracle_without_known_names_degrades_to_normal():
    document = TextDocument("text")
    oracle = NodeNameOracle(lambda document, offset: [])

    assert oracle.kind_at(document, 0) is None
    assert resolve_line_kind(oracle, document, document.line(1)) is LineKind.NORMAL


def test_failing_oracle_degrades_to_normal():
    class BrokenOracle:
        def kind_at(self, document, offset):
            raise OracleError("parser not ready")

    document = TextDocument("# Title")

    assert resolve_line_kind(BrokenOracle(), document, document.line(1)) is LineKind.NORMAL


def test_missing_oracle_reports_normal():
    document = TextDocument("# Title")

    assert resolve_line_kind(None, document, document.line(1)) is LineKind.NORMAL


def test_markdown_oracle_classifies_by_offset():
    document = TextDocument.from_lines(["```", "code", "```", "# Title"])
    oracle = MarkdownOracle()

    assert oracle.kind_at(document, 0) is LineKind.BLOCK_START
    assert oracle.kind_at(document, document.line(2).start + 2) is LineKind.BLOCK_INNER
    assert oracle.kind_at(document, document.line(4).start) is LineKind.CONTIGUOUS_BLOCK


def test_markdown_oracle_caches_per_document():
    document = TextDocument.from_lines(["# Title", "text"])
    oracle = MarkdownOracle()

    first = oracle.line_kinds(document)

    assert oracle.line_kinds(document) == first == [LineKind.CONTIGUOUS_BLOCK, LineKind.NORMAL]
    assert oracle.line_kinds(TextDocument("text")) == [LineKind.NORMAL]


def test_markdown_oracle_classifies_only_as_far_as_asked():
    document = TextDocument.from_lines(["```", "code", "```", "term", ":   def", "tail"])
    oracle = MarkdownOracle()

    assert oracle.kind_at(document, document.line(2).start) is LineKind.BLOCK_INNER
    assert oracle.classified_lines == 2
    assert oracle.kind_at(document, document.line(5).start) is LineKind.NORMAL
    assert oracle.classified_lines == 5
    assert oracle.line_kinds(document, 3) == [LineKind.BLOCK_START, LineKind.BLOCK_INNER, LineKind.BLOCK_END]


def test_markdown_oracle_rejects_offsets_outside_the_document():
    with pytest.raises(OracleError):
        MarkdownOracle().kind_at(TextDocument("abc"), 10)
