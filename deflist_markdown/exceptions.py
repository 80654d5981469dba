"""Package-specific exception types."""

from __future__ import annotations


class DeflistError(ValueError):
    """Base class for deflist-markdown errors."""


class InvalidChangeError(DeflistError):
    """Raised when a change does not fit the document it is applied to.

    Args:
        start: Offset where the change begins.
        end: Offset where the change ends.
        length: Length of the document the change was applied to.
    """

    def __init__(self, start: int, end: int, length: int):
        self.start = start
        self.end = end
        self.length = length
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return (
            f"Change [{self.start}, {self.end}) does not fit a document "
            f"of {self.length} characters"
        )


class OracleError(DeflistError):
    """Raised by an oracle that cannot classify a position."""


class DocumentAlreadyOpenError(DeflistError):
    """Raised when an engine is requested twice for the same document handle.

    Args:
        handle: Document handle already bound to an engine.
    """

    def __init__(self, handle: object):
        self.handle = handle
        super().__init__(f"Document {handle!r} is already open")


class UnknownDocumentError(DeflistError, LookupError):
    """Raised when no engine is bound to a document handle.

    Args:
        handle: Document handle that was looked up.
    """

    def __init__(self, handle: object):
        self.handle = handle
        super().__init__(f"Document {handle!r} is not open")
