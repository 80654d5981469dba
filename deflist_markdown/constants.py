"""Constants used across the deflist-markdown package."""

from __future__ import annotations

import re

from .models import StyleTag

# Definition marker: a colon followed by exactly three spaces at the start of a line
MARKER = ":   "
MARKER_LEN = len(MARKER)
# Inside inline content the marker may also follow a line break
MARKER_PATTERN = re.compile(r"(?:^|\n): {3}")

# Longest line that still reads as a term
MAX_TERM_LEN = 100

# Markdown patterns used by the built-in oracle
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_MAX_INDENT = 3
MATH_FENCE = "$$"
HEADER_PATTERN = re.compile(r"^ {0,3}#{1,6}(?:[ \t]|$)")
QUOTE_PATTERN = re.compile(r"^ {0,3}>")
TABLE_ROW_PATTERN = re.compile(r"^ {0,3}\|")
IMAGE_PATTERN = re.compile(r"^ {0,3}!\[[^\]]*\]\([^)]*\)\s*$|^ {0,3}!\[\[[^\]]*\]\]\s*$")
HORIZONTAL_RULE_PATTERN = re.compile(r"^ {0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$")
TASK_ITEM_PATTERN = re.compile(r"^\s*(?:[*+-]|\d+[.)]) \[[ xX]\](?:\s|$)")
BULLET_ITEM_PATTERN = re.compile(r"^\s*(?:[*+-]|\d+[.)]) ")

# CSS classes attached to each style tag by the editing surface
STYLE_CLASSES = {
    StyleTag.TERM: "view-dt",
    StyleTag.DEFINITION: "view-dd",
    StyleTag.DEFINITION_LIST_ITEM: "view-dd-li",
    StyleTag.MARKER: "view-dd-marker",
}

# Class names of reading-view wrappers handed to the static formatter
PARAGRAPH_WRAPPER_CLASS = "el-p"
LIST_WRAPPER_CLASSES = ("el-ul", "el-ol")
PAGE_ROOT_CLASS = "markdown-rendered"

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn", ".mdwn")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
