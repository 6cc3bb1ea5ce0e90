"""
Custom exception classes for python_hyperdoc package.

Offsets and bases are contract-checked: an out-of-range offset or a mix of
addresses from different document versions is a caller bug and is raised.
NoSelectionError and UnsupportedTargetError are raised by the low-level
primitives but caught by the Document edit operations, which hand back the
unchanged document instead.
"""

from typing import Any


class HyperdocError(Exception):
    """Base exception for all python_hyperdoc errors."""

    pass


class OffsetOutOfRangeError(HyperdocError):
    """Raised when an offset or range falls outside a document's text.

    Attributes:
        start: Start offset that was requested
        end: End offset that was requested
        length: Length of the text being addressed (None if unknown)
    """

    def __init__(self, start: int, end: int, length: int | None = None) -> None:
        self.start = start
        self.end = end
        self.length = length
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message describing the bad range."""
        msg = f"Invalid range [{self.start}, {self.end})"
        if self.length is not None:
            msg += f" for text of length {self.length}"
        return msg


class CrossBasisAddressError(HyperdocError):
    """Raised when two addresses from different document versions are combined.

    Attributes:
        left: The first address
        right: The address whose basis did not match
        reason: Explanation used instead of the basis mismatch, if given
    """

    def __init__(self, left: Any, right: Any, reason: str | None = None) -> None:
        self.left = left
        self.right = right
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message naming both bases."""
        if self.reason:
            return f"Cannot combine {self.left} with {self.right}: {self.reason}"
        return (
            f"Cannot combine {self.left} with {self.right}: "
            f"basis '{self.left.basis}' differs from '{self.right.basis}'"
        )


class NoSelectionError(HyperdocError):
    """Raised when an operation gets a caret where it needs a range, or vice versa.

    Attributes:
        operation: Name of the edit operation
        expected: The kind of selection that was required ("caret" or "range")
    """

    def __init__(self, operation: str, expected: str) -> None:
        self.operation = operation
        self.expected = expected
        super().__init__(f"{operation} requires a {expected} selection")


class UnsupportedTargetError(HyperdocError):
    """Raised when an edit would touch a block type it cannot handle.

    Attributes:
        operation: Name of the block operation
        block: The block that could not be edited
    """

    def __init__(self, operation: str, block: Any) -> None:
        self.operation = operation
        self.block = block
        super().__init__(f"{operation} cannot edit a {type(block).__name__}")


class InvalidReferenceError(HyperdocError):
    """Raised when a cross-document reference token cannot be parsed.

    Attributes:
        token: The token that was rejected
        reason: Explanation of why parsing failed
    """

    def __init__(self, token: str, reason: str | None = None) -> None:
        self.token = token
        self.reason = reason
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the expected token shape."""
        msg = f"Invalid reference token {self.token!r}"
        if self.reason:
            msg += f": {self.reason}"
        msg += "\n\nExpected format: '{documentId}:{start}-{end}'"
        return msg


class DocumentNotFoundError(HyperdocError):
    """Raised when a document id is not present in a workspace.

    Attributes:
        document_id: The id that was looked up
        available_ids: Ids currently held by the workspace
    """

    def __init__(self, document_id: str, available_ids: list[str] | None = None) -> None:
        self.document_id = document_id
        self.available_ids = available_ids or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format an error message with the available ids."""
        msg = f"Document '{self.document_id}' not found"
        if self.available_ids:
            msg += f"\n\nAvailable documents: {', '.join(self.available_ids)}"
        else:
            msg += "\n\nThe workspace is empty"
        return msg


class VersionChainError(HyperdocError):
    """Raised when a list of documents is not a contiguous version chain.

    Attributes:
        newer: Id of the later version
        older: Id of the version that was expected to be its basis
    """

    def __init__(self, newer: str, older: str) -> None:
        self.newer = newer
        self.older = older
        super().__init__(f"Document '{older}' is not the basis of '{newer}'")
