"""`NodeBuilder` implementation over BeautifulSoup trees."""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, Tag


class SoupBuilder:
    """Tree operations for the splitter on BeautifulSoup documents.

    Args:
        soup: Document used as the factory for new tags; a blank one is
            created when omitted.

    Examples:
        soup = BeautifulSoup("<p>term<br/>:   definition</p>", "html.parser")
        split_paragraph(soup.p, SoupBuilder(soup))
    """

    def __init__(self, soup: BeautifulSoup | None = None):
        self._soup = soup if soup is not None else BeautifulSoup("", "html.parser")

    def children(self, node: Tag) -> list[PageElement]:
        return list(node.children)

    def is_break(self, node: PageElement) -> bool:
        return isinstance(node, Tag) and node.name == "br"

    def is_text(self, node: PageElement) -> bool:
        return isinstance(node, NavigableString)

    def text_of(self, node: PageElement) -> str:
        if isinstance(node, Tag):
            return node.get_text()
        return str(node)

    def clone(self, node: PageElement) -> PageElement:
        return copy.copy(node)

    def with_text(self, node: PageElement, text: str) -> PageElement:
        if isinstance(node, Tag):
            node.string = text
            return node
        return NavigableString(text)

    def create_container(self, tag: str) -> Tag:
        return self._soup.new_tag(tag)

    def create_text(self, text: str) -> NavigableString:
        return NavigableString(text)

    def shallow_clone(self, node: Tag) -> Tag:
        attrs = {
            key: list(value) if isinstance(value, list) else value
            for key, value in node.attrs.items()
        }
        return self._soup.new_tag(node.name, attrs=attrs)

    def append_child(self, parent: Tag, child: PageElement) -> None:
        parent.append(child)

    def replace_node(self, old: PageElement, new: PageElement) -> None:
        old.replace_with(new)

    def insert_after(self, anchor: PageElement, new: PageElement) -> None:
        anchor.insert_after(new)

    def detach(self, node: PageElement) -> PageElement:
        return node.extract()

    def parent(self, node: PageElement) -> Tag | None:
        return node.parent

    def following_siblings(self, node: PageElement) -> list[Tag]:
        return [sibling for sibling in node.next_siblings if isinstance(sibling, Tag)]
