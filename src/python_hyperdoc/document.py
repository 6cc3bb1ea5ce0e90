"""
Versioned documents and the edit operations that derive new versions.

A Document pairs a BlockSequence with its provenance: a LinkSet mapping
spans of the document to the spans of the version it was derived from (its
basis) and of any document it transcludes. Documents are never mutated; an
edit returns a new Document whose provenance describes exactly which old
text survived and where it moved.

When an edit cannot apply (a caret where a range is required, or a target
block the operation cannot handle) the edit returns the same Document
unchanged instead of raising.

Example:
    >>> doc = Document.from_text("Hello world", ids=IdAllocator())
    >>> edited = doc.backspace(Selection.caret(5))
    >>> edited.text
    'Hell world'
    >>> print(edited.provenance)
    {page_2[0:4) -> page_1[0:4), page_2[4:10) -> page_1[5:11)}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from itertools import count

from .address import Address
from .blocks import Block, BlockSequence, BranchBlock, ReferenceBlock
from .constants import (
    DEFAULT_DISPLAY_MODE,
    DEFAULT_ID_PREFIX,
    PARAGRAPH_SEPARATOR,
    RESERVED_ID_CHARACTERS,
)
from .errors import (
    CrossBasisAddressError,
    NoSelectionError,
    OffsetOutOfRangeError,
    UnsupportedTargetError,
)
from .link import Link
from .linkset import LinkSet
from .selection import Bias, Selection

logger = logging.getLogger(__name__)


def _check_id(value: str, what: str) -> None:
    if not value or RESERVED_ID_CHARACTERS & set(value) or any(c.isspace() for c in value):
        raise ValueError(f"{what} must be non-empty without ':', '-' or whitespace, got {value!r}")


class IdAllocator:
    """Hands out sequential document ids.

    Passed explicitly into document construction so that separate sessions
    (and tests) get independent, predictable ids. Documents created
    without one draw from a single shared allocator.

    Example:
        >>> ids = IdAllocator(prefix="doc")
        >>> ids.next_id(), ids.next_id()
        ('doc1', 'doc2')
    """

    def __init__(self, prefix: str = DEFAULT_ID_PREFIX, start: int = 1) -> None:
        _check_id(prefix, "Id prefix")
        self.prefix = prefix
        self._counter = count(start)

    def next_id(self) -> str:
        """Return a fresh id."""
        return f"{self.prefix}{next(self._counter)}"


# Allocator for documents created without one
_default_ids = IdAllocator()


@dataclass(frozen=True, eq=False)
class Document:
    """One immutable version of a document.

    Documents compare by identity. The basis back-pointer always refers to an
    older version, so the version chain never forms a cycle and no document
    keeps its descendants alive.

    Attributes:
        id: Opaque version id
        blocks: The content
        provenance: Links from this version to the text it came from
        basis: The version this one was derived from (None for a root)
        ids: Allocator used for the ids of derived versions
    """

    id: str
    blocks: BlockSequence
    provenance: LinkSet = field(default_factory=LinkSet)
    basis: Document | None = field(default=None, repr=False)
    ids: IdAllocator = field(default_factory=lambda: _default_ids, repr=False)

    def __post_init__(self) -> None:
        """Check that provenance starts from this version's offsets."""
        _check_id(self.id, "Document id")
        for link in self.provenance.links:
            if link.origin.basis != self.id:
                raise CrossBasisAddressError(link.origin, self.full_address())
            if link.origin.end > self.length:
                raise OffsetOutOfRangeError(link.origin.start, link.origin.end, self.length)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_text(
        cls,
        text: str,
        ids: IdAllocator | None = None,
        separator: str = PARAGRAPH_SEPARATOR,
    ) -> Document:
        """Load raw text as a root document, one block per paragraph.

        Args:
            text: Raw text
            ids: Id allocator for this document and its descendants (the shared
                default allocator if omitted)
            separator: Paragraph delimiter (blank line by default)

        Returns:
            A root Document with empty provenance
        """
        return cls.from_blocks(text.split(separator), ids=ids)

    @classmethod
    def from_blocks(cls, blocks: Iterable[str | Block], ids: IdAllocator | None = None) -> Document:
        """Create a root document from strings and blocks."""
        ids = ids or _default_ids
        return cls(ids.next_id(), BlockSequence.build(blocks), ids=ids)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @property
    def length(self) -> int:
        """Number of offsets in the flattened content."""
        return self.blocks.length

    @property
    def is_root(self) -> bool:
        return self.basis is None

    @property
    def text(self) -> str:
        """Rendered content with paragraphs joined by blank lines."""
        return PARAGRAPH_SEPARATOR.join(self.flatten())

    def address(self, start: int, end: int) -> Address:
        """Return a validated Address of [start, end) in this document.

        Raises:
            OffsetOutOfRangeError: If the range does not fit the content
        """
        if not 0 <= start <= end <= self.length:
            raise OffsetOutOfRangeError(start, end, self.length)
        return Address(self.id, start, end)

    def full_address(self) -> Address:
        return Address(self.id, 0, self.length)

    def read_range(self, start: int, end: int) -> str:
        """Return the literal text of [start, end)."""
        return self.blocks.read_range(start, end)

    def flatten(self) -> list[str]:
        """Rendered text of every block, for display."""
        return self.blocks.render()

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def _derive(self, new_id: str, blocks: BlockSequence, links: Iterable[Link | None]) -> Document:
        return Document(new_id, blocks, LinkSet.compact(links), basis=self, ids=self.ids)

    def _unchanged(self, operation: str, error: Exception) -> Document:
        logger.debug("%s on %s left unchanged: %s", operation, self.id, error)
        return self

    def _insert(self, position: int, bias: Bias, text: str, source: Address | None = None) -> Document:
        blocks = self.blocks.insert_text(position, text, bias)
        if bias is Bias.NEITHER and self.blocks:
            # the new block lands after the located one, not inside it
            position = self.blocks.get_pair(position, bias).end
        new_id = self.ids.next_id()
        old = self.length
        size = len(text)
        links = [
            Link(Address(new_id, 0, position), Address(self.id, 0, position)) if position else None,
            Link(Address(new_id, position, position + size), source) if source else None,
            Link(
                Address(new_id, position + size, old + size),
                Address(self.id, position, old),
            )
            if position != old
            else None,
        ]
        return self._derive(new_id, blocks, links)

    def insert_char(self, selection: Selection, char: str) -> Document:
        """Insert text at a caret.

        Args:
            selection: A caret; ranges leave the document unchanged
            char: Character (or text) to insert

        Returns:
            The new version, or self if the edit does not apply
        """
        try:
            position = selection.require_caret("insert_char")
            result = self._insert(position, selection.bias, char)
        except (NoSelectionError, UnsupportedTargetError) as e:
            return self._unchanged("insert_char", e)
        logger.debug("Inserted %r at %d: %s -> %s", char, position, self.id, result.id)
        return result

    def backspace(self, selection: Selection) -> Document:
        """Delete backwards from a caret.

        With LEFT bias the character before the caret is removed. With RIGHT
        or NEITHER bias and the caret at the start of a block, the block is
        merged into the previous one; total length is unchanged so the whole
        content keeps one link. If either block is not text the blocks stay
        apart but a new version with that link is still made. Elsewhere
        RIGHT/NEITHER behave like LEFT.

        Returns:
            The new version, or self at offset 0 or if the edit does not apply
        """
        try:
            position = selection.require_caret("backspace")
            if position == 0:
                return self
            if selection.bias is not Bias.LEFT:
                latter = self.blocks.get_pair(position, Bias.RIGHT)
                if latter.offset == position:
                    return self._merge_blocks(latter.index)
            blocks = self.blocks.backspace(position)
        except (NoSelectionError, UnsupportedTargetError) as e:
            return self._unchanged("backspace", e)

        new_id = self.ids.next_id()
        old = self.length
        links = [
            Link(Address(new_id, 0, position - 1), Address(self.id, 0, position - 1))
            if position - 1
            else None,
            Link(Address(new_id, position - 1, old - 1), Address(self.id, position, old))
            if position != old
            else None,
        ]
        logger.debug("Backspace at %d: %s -> %s", position, self.id, new_id)
        return self._derive(new_id, blocks, links)

    def _merge_blocks(self, index: int) -> Document:
        if index == 0:
            return self
        try:
            blocks = self.blocks.merge_with_previous(index)
        except UnsupportedTargetError as e:
            # quoted blocks stay separate, but the edit still makes a version
            logger.debug("Kept blocks %d and %d apart: %s", index - 1, index, e)
            blocks = self.blocks
        new_id = self.ids.next_id()
        old = self.length
        links = [Link(Address(new_id, 0, old), Address(self.id, 0, old)) if old else None]
        return self._derive(new_id, blocks, links)

    def delete_selection(self, selection: Selection) -> Document:
        """Delete a selected range; a caret falls back to backspace().

        Returns:
            The new version, or self if the edit does not apply
        """
        if selection.is_caret:
            return self.backspace(selection)
        start, end = selection.start, selection.end
        try:
            self.address(start, end)
            blocks = self.blocks.delete_range(start, end)
        except UnsupportedTargetError as e:
            return self._unchanged("delete_selection", e)

        new_id = self.ids.next_id()
        old = self.length
        removed = end - start
        links = [
            Link(Address(new_id, 0, start), Address(self.id, 0, start)) if start else None,
            Link(Address(new_id, start, old - removed), Address(self.id, end, old))
            if end != old
            else None,
        ]
        logger.debug("Deleted [%d, %d): %s -> %s", start, end, self.id, new_id)
        return self._derive(new_id, blocks, links)

    def quote(self, spans: Sequence[tuple[int, int]], display_mode: str = DEFAULT_DISPLAY_MODE) -> Document:
        """Replace the selected spans with a live quote of this version.

        A single span becomes a ReferenceBlock; several spans (typically one
        per paragraph) become a BranchBlock. The quoted content gets no link:
        it is addressed live against this version rather than copied.

        Args:
            spans: (start, end) pairs in this document
            display_mode: "quote", "bud" or "card"

        Returns:
            The new version, or self if no span is selected
        """
        selected = [self.address(start, end) for start, end in spans if start != end]
        if not selected:
            return self._unchanged("quote", NoSelectionError("quote", "range"))

        if len(selected) == 1:
            block: Block = ReferenceBlock(self, selected[0], display_mode)
        else:
            block = BranchBlock(
                tuple(ReferenceBlock(self, addr) for addr in selected),
                display_mode=display_mode,
            )
        start = min(addr.start for addr in selected)
        end = max(addr.end for addr in selected)
        try:
            for addr in selected:
                self.read_range(addr.start, addr.end)
            blocks = self.blocks.replace(start, end, block)
        except UnsupportedTargetError as e:
            return self._unchanged("quote", e)

        new_id = self.ids.next_id()
        old = self.length
        width = block.length
        links = [
            Link(Address(new_id, 0, start), Address(self.id, 0, start)) if start else None,
            Link(
                Address(new_id, start + width, old - (end - start) + width),
                Address(self.id, end, old),
            )
            if end != old
            else None,
        ]
        logger.debug("Quoted %d span(s) of %s -> %s", len(selected), self.id, new_id)
        return self._derive(new_id, blocks, links)

    def insert_reference(self, source: Document, start: int, end: int, selection: Selection) -> Document:
        """Insert the text of source[start:end) at a caret, recording where it came from.

        Besides the usual prefix and suffix links back to this version, the
        inserted text gets a link to the quoted span of source.

        Args:
            source: Document being transcluded (may be this document)
            start: Start of the span in source
            end: End of the span in source
            selection: A caret in this document

        Returns:
            The new version, or self if the edit does not apply

        Raises:
            CrossBasisAddressError: If source is a different document with this
                document's id
        """
        if source.id == self.id and source is not self:
            raise CrossBasisAddressError(
                Address(source.id, start, end),
                self.full_address(),
                reason=f"'{source.id}' names two different documents",
            )
        try:
            position = selection.require_caret("insert_reference")
            quoted = source.address(start, end)
            if quoted.is_empty:
                raise NoSelectionError("insert_reference", "range")
            text = source.read_range(start, end)
            result = self._insert(position, selection.bias, text, source=quoted)
        except (NoSelectionError, UnsupportedTargetError) as e:
            return self._unchanged("insert_reference", e)
        logger.debug("Inserted reference %s at %d: %s -> %s", quoted, position, self.id, result.id)
        return result


# =============================================================================
# Functional entry points
# =============================================================================


def insert_char(doc: Document, pos: int, bias: Bias | str, char: str) -> Document:
    """Insert a character at a caret position."""
    return doc.insert_char(Selection.caret(pos, bias), char)


def backspace(doc: Document, pos: int, bias: Bias | str) -> Document:
    """Delete backwards from a caret position."""
    return doc.backspace(Selection.caret(pos, bias))


def delete_range(doc: Document, start: int, end: int) -> Document:
    """Delete [start, end)."""
    return doc.delete_selection(Selection(start, end))


def quote(doc: Document, spans: Sequence[tuple[int, int]], display_mode: str = DEFAULT_DISPLAY_MODE) -> Document:
    """Replace spans with a live quote."""
    return doc.quote(spans, display_mode)


def insert_reference(
    doc: Document, source: Document, start: int, end: int, pos: int, bias: Bias | str
) -> Document:
    """Transclude source[start:end) at a caret position."""
    return doc.insert_reference(source, start, end, Selection.caret(pos, bias))


def read_range(doc: Document, start: int, end: int) -> str:
    """Return the literal text of [start, end)."""
    return doc.read_range(start, end)


def flatten(doc: Document) -> list[str]:
    """Rendered text of every block."""
    return doc.flatten()
