"""Splitting rendered fragments into definition-list structures.

The splitter works on inline content where line breaks are break nodes
inside one run rather than separate lines. It manipulates the tree only
through a `NodeBuilder`, so any document-tree library can be plugged in.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from .constants import MARKER_LEN, MARKER_PATTERN, MAX_TERM_LEN
from .markers import contains_marker, is_marker_line

Node = Any

TERM_TAG = "dt"
DEFINITION_TAG = "dd"
PARAGRAPH_TAG = "p"
DEFINITION_LIST_TAG = "dl"


class NodeBuilder(Protocol):
    """Tree operations the splitter needs from a document-tree library."""

    def children(self, node: Node) -> list[Node]: ...

    def is_break(self, node: Node) -> bool: ...

    def is_text(self, node: Node) -> bool: ...

    def text_of(self, node: Node) -> str: ...

    def clone(self, node: Node) -> Node: ...

    def with_text(self, node: Node, text: str) -> Node:
        """Return `node`, or a replacement for it, holding only `text`."""

    def create_container(self, tag: str) -> Node: ...

    def create_text(self, text: str) -> Node: ...

    def shallow_clone(self, node: Node) -> Node:
        """Copy `node` with its attributes but without children."""

    def append_child(self, parent: Node, child: Node) -> None:
        """Append `child` to `parent`, detaching it from its old parent first."""

    def replace_node(self, old: Node, new: Node) -> None: ...

    def insert_after(self, anchor: Node, new: Node) -> None: ...

    def detach(self, node: Node) -> Node: ...

    def parent(self, node: Node) -> Node | None: ...

    def following_siblings(self, node: Node) -> list[Node]:
        """Element siblings after `node`, in document order."""


def logical_lines(nodes: Iterable[Node], builder: NodeBuilder) -> list[list[Node]]:
    """Group inline nodes into logical lines separated by break nodes."""
    lines: list[list[Node]] = [[]]
    for node in nodes:
        if builder.is_break(node):
            lines.append([])
        else:
            lines[-1].append(node)
    return lines


def _line_text(line: Sequence[Node], builder: NodeBuilder) -> str:
    # The source newline that follows a break belongs to the break
    return "".join(builder.text_of(node) for node in line).lstrip("\n")


def content_has_marker(node: Node, builder: NodeBuilder) -> bool:
    """Return True when a logical line inside `node` starts with the marker."""
    text = "".join(
        "\n" if builder.is_break(child) else builder.text_of(child)
        for child in builder.children(node)
    )
    return contains_marker(text)


def _container_tag(text: str) -> str:
    if is_marker_line(text):
        return DEFINITION_TAG
    if len(text) <= MAX_TERM_LEN:
        return TERM_TAG
    # too long for a term; keep it as an ordinary paragraph
    return PARAGRAPH_TAG


def _strip_leading_marker(line: Sequence[Node], builder: NodeBuilder) -> list[Node]:
    """Clone a definition line's nodes with the marker removed from the first text."""
    clones = [builder.clone(node) for node in line]
    for index, node in enumerate(line):
        text = builder.text_of(node)
        if not text.strip("\n"):
            continue
        clones[index] = builder.with_text(clones[index], text.lstrip("\n")[MARKER_LEN:])
        break
    return clones


def split_logical_lines(nodes: Iterable[Node], builder: NodeBuilder, container: Node) -> list[Node]:
    """Fill `container` with one term, definition or paragraph per logical line.

    Marker lines become definitions with the marker stripped, short lines
    terms, longer lines ungrouped paragraphs. Lines without any text are
    skipped. The input nodes are cloned, not moved.

    Args:
        nodes: Inline content nodes, with break nodes between logical lines.
        builder: Tree operations.
        container: Definition-list node receiving the items.

    Returns:
        list[Node]: The created item nodes, in document order.
    """
    items: list[Node] = []
    for line in logical_lines(nodes, builder):
        text = _line_text(line, builder)
        if not text.strip():
            continue
        tag = _container_tag(text)
        item = builder.create_container(tag)
        if tag == DEFINITION_TAG:
            clones = _strip_leading_marker(line, builder)
        else:
            clones = [builder.clone(node) for node in line]
        for clone in clones:
            builder.append_child(item, clone)
        builder.append_child(container, item)
        items.append(item)
    return items


def split_paragraph(paragraph: Node, builder: NodeBuilder) -> Node:
    """Replace a marker-bearing paragraph by a definition list.

    Returns:
        Node: The definition list now standing where the paragraph was.
    """
    definition_list = builder.create_container(DEFINITION_LIST_TAG)
    split_logical_lines(builder.children(paragraph), builder, definition_list)
    builder.replace_node(paragraph, definition_list)
    return definition_list


def _find_split_point(item: Node, builder: NodeBuilder) -> tuple[int, int] | None:
    """Locate the first marker that starts a logical line inside a list item.

    Returns:
        tuple[int, int] | None: Index of the text child holding the marker and
            the marker's offset inside that text, or None when there is none.
    """
    at_line_start = True
    for index, child in enumerate(builder.children(item)):
        if builder.is_break(child):
            at_line_start = True
            continue
        if builder.is_text(child):
            text = builder.text_of(child)
            for match in MARKER_PATTERN.finditer(text):
                offset = match.end() - MARKER_LEN
                if offset > 0 or at_line_start:
                    return index, offset
            if text.strip("\n"):
                at_line_start = text.endswith("\n")
            continue
        at_line_start = False
    return None


def _trim_trailing_breaks(item: Node, builder: NodeBuilder) -> None:
    for child in reversed(builder.children(item)):
        if builder.is_break(child) or (builder.is_text(child) and not builder.text_of(child).strip()):
            builder.detach(child)
            continue
        break


def extract_from_list_item(item: Node, builder: NodeBuilder) -> Node | None:
    """Pull the definition list absorbed by a list item out of its list.

    The item keeps the content before its first marker line. A definition
    list built from the rest is inserted right after the list, and the
    items following `item` move into a new list of the same kind placed
    after the definition list.

    Args:
        item: List item whose content contains a marker line.
        builder: Tree operations.

    Returns:
        Node | None: The inserted definition list, or None when no marker line
            is found, in which case the item is left untouched.
    """
    split_point = _find_split_point(item, builder)
    list_node = builder.parent(item)
    if split_point is None or list_node is None:
        return None

    index, offset = split_point
    children = builder.children(item)
    marker_node = children[index]
    text = builder.text_of(marker_node)

    tail_nodes = [builder.create_text(text[offset:])]
    tail_nodes.extend(builder.detach(child) for child in children[index + 1 :])

    head_text = text[:offset].rstrip("\n")
    if head_text:
        builder.replace_node(marker_node, builder.create_text(head_text))
    else:
        builder.detach(marker_node)
    _trim_trailing_breaks(item, builder)

    definition_list = builder.create_container(DEFINITION_LIST_TAG)
    builder.insert_after(list_node, definition_list)
    split_logical_lines(tail_nodes, builder, definition_list)

    following = builder.following_siblings(item)
    if following:
        continuation = builder.shallow_clone(list_node)
        builder.insert_after(definition_list, continuation)
        for sibling in following:
            builder.append_child(continuation, sibling)

    return definition_list
