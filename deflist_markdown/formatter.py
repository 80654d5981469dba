"""Static formatting of rendered reading-view fragments."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from bs4 import BeautifulSoup
from bs4.element import Tag
from loguru import logger
from markdown_it import MarkdownIt

from .constants import LIST_WRAPPER_CLASSES, PAGE_ROOT_CLASS, PARAGRAPH_WRAPPER_CLASS
from .soup_builder import SoupBuilder
from .splitter import NodeBuilder, content_has_marker, extract_from_list_item, split_paragraph


def _classes(element: Tag) -> list[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        # set programmatically rather than parsed
        return classes.split()
    return list(classes)


def _collect_targets(element: Tag, builder: NodeBuilder) -> tuple[list[Tag], list[Tag]] | None:
    """Find the paragraphs and list items of `element` that carry a marker.

    Returns:
        tuple[list[Tag], list[Tag]] | None: Paragraphs and list items to
            rewrite, or None when the element is not a fragment this
            formatter handles or carries no marker.
    """
    classes = _classes(element)

    if PARAGRAPH_WRAPPER_CLASS in classes:
        paragraph = element.find("p", recursive=False)
        if paragraph is None or not content_has_marker(paragraph, builder):
            return None
        return [paragraph], []

    if any(wrapper in classes for wrapper in LIST_WRAPPER_CLASSES):
        items = [item for item in element.select("ul > li, ol > li") if content_has_marker(item, builder)]
        if not items:
            return None
        return [], items

    if PAGE_ROOT_CLASS in classes:
        paragraphs = [
            paragraph
            for paragraph in element.select(":scope > div > p")
            if content_has_marker(paragraph, builder)
        ]
        items = [
            item
            for item in element.select(":scope > div > ul > li, :scope > div > ol > li")
            if content_has_marker(item, builder)
        ]
        if not paragraphs and not items:
            return None
        return paragraphs, items

    return None


async def format_fragment(element: Tag, builder: NodeBuilder | None = None) -> bool:
    """Rewrite the definition lists inside one rendered fragment.

    Accepts a reading-view paragraph wrapper, a list wrapper, or a whole
    rendered page. Marker-bearing paragraphs are replaced by definition
    lists; marker-bearing list items have their definition lists pulled
    out after the list. The coroutine completes once the tree is settled.

    Args:
        element: Fragment root.
        builder: Tree operations; defaults to a `SoupBuilder`.

    Returns:
        bool: True when the fragment was rewritten, False when it was left
            alone.

    Examples:
        changed = await format_fragment(soup.div)
    """
    builder = builder if builder is not None else SoupBuilder()
    targets = _collect_targets(element, builder)
    if targets is None:
        return False

    paragraphs, items = targets
    for paragraph in paragraphs:
        split_paragraph(paragraph, builder)
    for item in items:
        if extract_from_list_item(item, builder) is None:
            logger.debug("List item lost its marker on re-inspection; left unmodified")

    logger.debug("Formatted {} paragraph(s) and {} list item(s)", len(paragraphs), len(items))
    return True


async def format_fragments(elements: Iterable[Tag], builder: NodeBuilder | None = None) -> int:
    """Format several fragments one after the other.

    Returns:
        int: Number of fragments that were rewritten.
    """
    changed = 0
    for element in elements:
        if await format_fragment(element, builder):
            changed += 1
    return changed


def render_markdown(text: str) -> str:
    """Render Markdown to reading-view HTML.

    Line breaks inside paragraphs become ``<br>`` and every top-level
    block is wrapped in its own ``div`` under a ``markdown-rendered`` root.
    """
    markdown = MarkdownIt("commonmark", {"breaks": True}).enable("table")
    soup = BeautifulSoup(markdown.render(text), "html.parser")
    root = soup.new_tag("div", attrs={"class": PAGE_ROOT_CLASS})
    for block in [child for child in soup.children if isinstance(child, Tag)]:
        wrapper = soup.new_tag("div")
        wrapper.append(block.extract())
        root.append(wrapper)
    return str(root)


def format_html(html: str) -> str:
    """Parse `html`, format its root fragment, and serialise the result."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.find(True)
    if root is None:
        return html
    asyncio.run(format_fragment(root, SoupBuilder(soup)))
    return str(soup)


def format_markdown(text: str) -> str:
    """Render Markdown and format its definition lists."""
    return format_html(render_markdown(text))
