from __future__ import annotations

import pytest

from deflist_markdown.document import Change, ChangeSet, TextDocument
from deflist_markdown.exceptions import InvalidChangeError


def test_lines_are_one_based_and_exclude_line_breaks():
    document = TextDocument("a\nbc\n")

    assert document.lines == 3
    assert document.line(1).text == "a"
    second = document.line(2)
    assert (second.number, second.start, second.end, second.text) == (2, 2, 4, "bc")
    assert document.line(3).text == ""
    assert document.line(3).length == 0


def test_empty_document_has_one_empty_line():
    document = TextDocument()

    assert document.lines == 1
    assert document.line(1).text == ""


def test_line_at_maps_offsets_to_lines():
    document = TextDocument("a\nbc\n")

    assert document.line_at(0).number == 1
    assert document.line_at(1).number == 1  # the line break belongs to its line
    assert document.line_at(2).number == 2
    assert document.line_at(5).number == 3


@pytest.mark.parametrize("number", [0, 4])
def test_line_rejects_out_of_range_numbers(number: int):
    with pytest.raises(IndexError):
        TextDocument("a\nbc\n").line(number)


def test_line_at_rejects_offsets_past_the_end():
    with pytest.raises(IndexError):
        TextDocument("abc").line_at(4)


def test_from_lines_joins_with_newlines():
    document = TextDocument.from_lines(["term", ":   definition"])

    assert document.text == "term\n:   definition"
    assert document.line(2).start == 5


def test_apply_returns_new_document():
    document = TextDocument("term\n:   def")

    edited = document.apply(ChangeSet.insertion(4, "s"))

    assert edited.text == "terms\n:   def"
    assert document.text == "term\n:   def"


def test_apply_multiple_changes_uses_pre_edit_offsets():
    document = TextDocument("abcdef")

    edited = document.apply(ChangeSet([Change(4, 5, "XY"), Change(0, 1)]))

    assert edited.text == "bcdXYf"


def test_apply_rejects_changes_past_the_end():
    with pytest.raises(InvalidChangeError):
        TextDocument("abc").apply(ChangeSet.deletion(2, 9))


def test_change_set_rejects_overlapping_changes():
    with pytest.raises(InvalidChangeError):
        ChangeSet([Change(0, 3), Change(2, 4)])


def test_change_set_rejects_inverted_ranges():
    with pytest.raises(InvalidChangeError):
        ChangeSet([Change(5, 2)])


def test_iter_changed_ranges_reports_both_coordinate_systems():
    changes = ChangeSet([Change(0, 2, "abc"), Change(5, 5, "x")])

    assert list(changes.iter_changed_ranges()) == [(0, 2, 0, 3), (5, 5, 6, 7)]


def test_map_pos_around_an_insertion():
    changes = ChangeSet.insertion(4, "s")

    assert changes.map_pos(3) == 3
    assert changes.map_pos(4) == 4
    assert changes.map_pos(4, assoc=1) == 5
    assert changes.map_pos(10) == 11


def test_map_pos_around_a_deletion():
    changes = ChangeSet.deletion(2, 5)

    assert changes.map_pos(1) == 1
    assert changes.map_pos(3) == 2
    assert changes.map_pos(5) == 2
    assert changes.map_pos(7) == 4


def test_empty_change_set():
    assert ChangeSet().empty is True
    assert ChangeSet.insertion(0, "x").empty is False
    assert len(ChangeSet([Change(1, 1), Change(3, 4)])) == 2
