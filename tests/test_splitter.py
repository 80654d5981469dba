from __future__ import annotations

from bs4 import BeautifulSoup

from deflist_markdown.soup_builder import SoupBuilder
from deflist_markdown.splitter import (
    content_has_marker,
    extract_from_list_item,
    logical_lines,
    split_paragraph,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _items(definition_list) -> list[tuple[str, str]]:
    return [(child.name, child.get_text(strip=True)) for child in definition_list.find_all(recursive=False)]


def test_logical_lines_split_on_breaks():
    soup = _soup("<p>one<br/>two <em>three</em><br/>four</p>")
    builder = SoupBuilder(soup)

    lines = logical_lines(builder.children(soup.p), builder)

    assert [[builder.text_of(node) for node in line] for line in lines] == [
        ["one"],
        ["two ", "three"],
        ["four"],
    ]


def test_content_has_marker():
    builder = SoupBuilder()

    assert content_has_marker(_soup("<p>term<br/>\n:   def</p>").p, builder) is True
    assert content_has_marker(_soup("<p>term<br/>:   def</p>").p, builder) is True
    assert content_has_marker(_soup("<p>a ratio 1:   2</p>").p, builder) is False


def test_split_paragraph_into_terms_and_definitions():
    soup = _soup(
        "<div><p>cryosphere<br/>\n:   the frozen part<br/>\n"
        "ice shelf<br/>\n:   ice that has slid</p></div>"
    )

    definition_list = split_paragraph(soup.p, SoupBuilder(soup))

    assert soup.p is None
    assert definition_list.parent is soup.div
    assert _items(definition_list) == [
        ("dt", "cryosphere"),
        ("dd", "the frozen part"),
        ("dt", "ice shelf"),
        ("dd", "ice that has slid"),
    ]


def test_split_paragraph_keeps_inline_formatting():
    soup = _soup("<p><em>term</em><br/>\n:   a <strong>bold</strong> definition</p>")

    definition_list = split_paragraph(soup.p, SoupBuilder(soup))

    term, definition = definition_list.find_all(recursive=False)
    assert term.em is not None
    assert definition.strong.get_text() == "bold"
    assert definition.get_text() == "a bold definition"


def test_consecutive_terms_stay_separate():
    soup = _soup("<p>alpha<br/>\nbeta<br/>\n:   shared definition</p>")

    definition_list = split_paragraph(soup.p, SoupBuilder(soup))

    assert [name for name, _ in _items(definition_list)] == ["dt", "dt", "dd"]


def test_over_long_line_becomes_a_paragraph():
    long_line = "x" * 120
    soup = _soup(f"<p>term<br/>\n:   definition<br/>\n{long_line}</p>")

    definition_list = split_paragraph(soup.p, SoupBuilder(soup))

    assert _items(definition_list) == [("dt", "term"), ("dd", "definition"), ("p", long_line)]


def test_list_item_gives_up_absorbed_definition():
    soup = _soup(
        "<div><ul><li>one</li><li>fixed list items before<br/>\n:   defined term tail</li>"
        "<li>three</li><li>four</li></ul></div>"
    )
    item = soup.find_all("li")[1]

    definition_list = extract_from_list_item(item, SoupBuilder(soup))

    children = soup.div.find_all(recursive=False)
    assert [child.name for child in children] == ["ul", "dl", "ul"]
    assert [li.get_text() for li in children[0].find_all("li")] == ["one", "fixed list items before"]
    assert definition_list is children[1]
    assert _items(definition_list) == [("dd", "defined term tail")]
    assert [li.get_text() for li in children[2].find_all("li")] == ["three", "four"]


def test_list_item_without_break_node():
    soup = _soup("<div><ul><li>fixed list items before\n:   defined term tail</li></ul></div>")

    extract_from_list_item(soup.li, SoupBuilder(soup))

    children = soup.div.find_all(recursive=False)
    assert [child.name for child in children] == ["ul", "dl"]
    assert soup.li.get_text() == "fixed list items before"
    assert _items(children[1]) == [("dd", "defined term tail")]


def test_ordered_list_continues_as_ordered_list():
    soup = _soup('<div><ol class="tight"><li>a<br/>\n:   b</li><li>c</li></ol></div>')

    extract_from_list_item(soup.li, SoupBuilder(soup))

    children = soup.div.find_all(recursive=False)
    assert [child.name for child in children] == ["ol", "dl", "ol"]
    assert children[2].get("class") == ["tight"]
    assert children[2].li.get_text() == "c"


def test_item_starting_with_marker_is_emptied():
    soup = _soup("<div><ul><li>:   only a definition</li></ul></div>")

    extract_from_list_item(soup.li, SoupBuilder(soup))

    assert soup.li.get_text() == ""
    assert _items(soup.dl) == [("dd", "only a definition")]


def test_item_without_marker_is_left_untouched():
    html = "<div><ul><li>plain item</li><li>ratio 1:   2</li></ul></div>"
    soup = _soup(html)

    for item in soup.find_all("li"):
        assert extract_from_list_item(item, SoupBuilder(soup)) is None

    assert str(soup) == html
