"""
The version lookup table of one editing session.

A Workspace stores every committed Document by id, tracks the version being
edited, and resolves reference tokens when text copied from one document is
pasted into another.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .constants import (
    DEFAULT_DISPLAY_MODE,
    DEFAULT_ID_PREFIX,
    DISPLAY_MODES,
    PARAGRAPH_SEPARATOR,
    RESERVED_ID_CHARACTERS,
)
from .document import Document, IdAllocator
from .errors import DocumentNotFoundError
from .history import VersionHistory
from .reference import ReferenceToken
from .selection import Selection

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceConfig:
    """Settings for a Workspace.

    Attributes:
        paragraph_separator: Delimiter used to split loaded text into blocks
        id_prefix: Prefix of allocated document ids
        display_mode: Display mode for quotes made through the workspace
    """

    paragraph_separator: str = PARAGRAPH_SEPARATOR
    id_prefix: str = DEFAULT_ID_PREFIX
    display_mode: str = DEFAULT_DISPLAY_MODE

    def __post_init__(self) -> None:
        """Validate separator, prefix and display mode."""
        if not self.paragraph_separator:
            raise ValueError("paragraph_separator cannot be empty")
        if not self.id_prefix or RESERVED_ID_CHARACTERS & set(self.id_prefix):
            raise ValueError(f"id_prefix cannot be empty or contain ':' or '-', got '{self.id_prefix}'")
        if self.display_mode not in DISPLAY_MODES:
            raise ValueError(f"display_mode must be one of {DISPLAY_MODES}, got '{self.display_mode}'")


class Workspace:
    """Committed document versions of one session.

    Edits made through the workspace apply to the current version and commit
    the result, which becomes the new current version. An edit that leaves
    the document unchanged commits nothing.

    Example:
        >>> ws = Workspace()
        >>> doc = ws.load("Hello world")
        >>> token = ws.copy(doc, 0, 5)
        >>> token
        'page_1:0-5'
        >>> ws.paste(token, Selection.caret(11)).text
        'Hello worldHello'
    """

    def __init__(self, config: WorkspaceConfig | None = None) -> None:
        self.config = config or WorkspaceConfig()
        self.ids = IdAllocator(self.config.id_prefix)
        self._documents: dict[str, Document] = {}
        self._current: Document | None = None

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._documents.values())

    @property
    def current(self) -> Document | None:
        """The version being edited (None until something is loaded)."""
        return self._current

    def load(self, text: str) -> Document:
        """Load raw text as a new root document and make it current."""
        doc = Document.from_text(text, ids=self.ids, separator=self.config.paragraph_separator)
        logger.debug("Loaded %s with %d block(s)", doc.id, len(doc.blocks))
        return self.commit(doc)

    def commit(self, doc: Document) -> Document:
        """Store a version and make it current.

        Raises:
            ValueError: If a different document with the same id is stored
        """
        existing = self._documents.get(doc.id)
        if existing is not None and existing is not doc:
            raise ValueError(f"A different document with id '{doc.id}' is already committed")
        self._documents[doc.id] = doc
        self._current = doc
        return doc

    def get(self, document_id: str) -> Document:
        """Look up a committed version by id.

        Raises:
            DocumentNotFoundError: If no version has this id
        """
        try:
            return self._documents[document_id]
        except KeyError:
            raise DocumentNotFoundError(document_id, list(self._documents)) from None

    def _require_current(self) -> Document:
        if self._current is None:
            raise DocumentNotFoundError("<current>", [])
        return self._current

    def _apply(self, doc: Document, result: Document) -> Document:
        if result is doc:
            return doc
        return self.commit(result)

    # -------------------------------------------------------------------------
    # Copy and paste
    # -------------------------------------------------------------------------

    def copy(self, doc: Document, start: int, end: int) -> str:
        """Return a reference token for doc[start:end).

        Raises:
            DocumentNotFoundError: If doc has not been committed
            OffsetOutOfRangeError: If the range does not fit doc
        """
        self.get(doc.id)
        return str(ReferenceToken.from_address(doc.address(start, end)))

    def paste(self, token: str, selection: Selection, target: Document | None = None) -> Document:
        """Insert the text a token refers to, linked back to its source.

        Args:
            token: A token produced by copy()
            selection: Caret in the target document
            target: Document to paste into (the current version by default)

        Returns:
            The resulting version (committed if anything changed)

        Raises:
            InvalidReferenceError: If the token is malformed
            DocumentNotFoundError: If the token's document is not committed
        """
        reference = ReferenceToken.parse(token)
        source = self.get(reference.document_id)
        target = target or self._require_current()
        result = target.insert_reference(source, reference.start, reference.end, selection)
        logger.debug("Pasted %s into %s", reference, target.id)
        return self._apply(target, result)

    # -------------------------------------------------------------------------
    # Edits on the current version
    # -------------------------------------------------------------------------

    def insert_char(self, selection: Selection, char: str) -> Document:
        doc = self._require_current()
        return self._apply(doc, doc.insert_char(selection, char))

    def backspace(self, selection: Selection) -> Document:
        doc = self._require_current()
        return self._apply(doc, doc.backspace(selection))

    def delete_selection(self, selection: Selection) -> Document:
        doc = self._require_current()
        return self._apply(doc, doc.delete_selection(selection))

    def quote(self, spans: Sequence[tuple[int, int]], display_mode: str | None = None) -> Document:
        """Quote spans of the current version using the configured display mode."""
        doc = self._require_current()
        return self._apply(doc, doc.quote(spans, display_mode or self.config.display_mode))

    def history(self) -> VersionHistory:
        """History of the current version."""
        return VersionHistory(self._require_current())
