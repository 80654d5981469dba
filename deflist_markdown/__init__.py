"""
deflist-markdown: definition lists for Markdown documents.

A definition list is a block of short term lines followed by definition
lines starting with a colon and three spaces::

    cryosphere
    :   the frozen part of the Earth's surface

This package can be used both as a CLI tool and as a library.

CLI Usage:
    deflist-markdown glossary.md

Library Usage:
    from deflist_markdown import DocumentDecorationEngine, TextDocument, ViewUpdate

    document = TextDocument.from_text(Path("glossary.md").read_text())
    engine = DocumentDecorationEngine(document)
    engine.update(ViewUpdate.scroll(document))
    engine.decorations
"""

from loguru import logger

from .classifier import build_decorations, classify_line
from .config import ConfigError, DeflistConfig
from .document import Change, ChangeSet, Line, TextDocument
from .engine import DocumentDecorationEngine, EngineRegistry, ViewUpdate
from .exceptions import (
    DeflistError,
    DocumentAlreadyOpenError,
    InvalidChangeError,
    OracleError,
    UnknownDocumentError,
)
from .formatter import format_fragment, format_html, format_markdown
from .markers import is_marker_line
from .models import Block, Decoration, LineKind, LineRole, StyleTag
from .oracle import MarkdownOracle, NodeNameOracle
from .scanner import scan_blocks
from .splitter import extract_from_list_item, split_paragraph
from .stylesheet import render_stylesheet
from .updater import FullRescan, LocalPatch, NoOp, plan_update

__version__ = "0.1.0"

logger.disable(__name__)

__all__ = [
    # Live engine
    "DocumentDecorationEngine",
    "EngineRegistry",
    "ViewUpdate",
    "scan_blocks",
    "classify_line",
    "build_decorations",
    "plan_update",
    "is_marker_line",
    # Static formatter
    "format_fragment",
    "format_html",
    "format_markdown",
    "split_paragraph",
    "extract_from_list_item",
    "render_stylesheet",
    # Oracles
    "MarkdownOracle",
    "NodeNameOracle",
    # Data models
    "Block",
    "Change",
    "ChangeSet",
    "Decoration",
    "DeflistConfig",
    "FullRescan",
    "Line",
    "LineKind",
    "LineRole",
    "LocalPatch",
    "NoOp",
    "StyleTag",
    "TextDocument",
    # Exceptions
    "ConfigError",
    "DeflistError",
    "DocumentAlreadyOpenError",
    "InvalidChangeError",
    "OracleError",
    "UnknownDocumentError",
    # Version
    "__version__",
]
