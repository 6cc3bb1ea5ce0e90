"""
Block storage for document text.

A document's content is an ordered sequence of blocks, one per paragraph.
Offsets run over the concatenation of all blocks with no separator counted:
paragraph boundaries are structural, not characters. Three kinds of block
exist:

- TextBlock: literal text, one offset per character
- ReferenceBlock: a live quote of a span of some document, one offset wide
- BranchBlock: several quoted spans, one offset wide when collapsed and one
  offset per source when expanded

Every BlockSequence operation returns a new sequence. All offset lookups go
through BlockSequence.get_pair(), whose bias decides which block owns an
offset sitting exactly on a boundary.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .address import Address
from .constants import DEFAULT_DISPLAY_MODE, DISPLAY_BUD, DISPLAY_MODES, DISPLAY_QUOTE
from .errors import CrossBasisAddressError, OffsetOutOfRangeError, UnsupportedTargetError
from .selection import Bias

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)


def _check_display_mode(display_mode: str) -> None:
    if display_mode not in DISPLAY_MODES:
        raise ValueError(f"display_mode must be one of {DISPLAY_MODES}, got '{display_mode}'")


@dataclass(frozen=True)
class TextBlock:
    """A paragraph of literal text."""

    text: str

    @property
    def length(self) -> int:
        return len(self.text)

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class ReferenceBlock:
    """A live quote of a span of another (or the same) document.

    The quoted text is never copied: it is read from the source document
    whenever the block is rendered.

    Attributes:
        document: The document being quoted
        source: Span of the quoted document
        display_mode: "quote" (text preview), "bud" (source id only)
            or "card" (titled preview)
    """

    document: Document
    source: Address
    display_mode: str = DEFAULT_DISPLAY_MODE

    def __post_init__(self) -> None:
        """Validate that source addresses the quoted document."""
        if self.source.basis != self.document.id:
            raise CrossBasisAddressError(self.source, self.document.full_address())
        _check_display_mode(self.display_mode)

    @property
    def length(self) -> int:
        return 1

    @property
    def text(self) -> str:
        """The quoted text, read live from the source."""
        return self.document.read_range(self.source.start, self.source.end)

    def render(self) -> str:
        if self.display_mode == DISPLAY_BUD:
            return self.document.id
        if self.display_mode == DISPLAY_QUOTE:
            return self.text
        return f"{self.document.id}\n{self.text}"


@dataclass(frozen=True)
class BranchBlock:
    """Several quoted spans shown together.

    Collapsed ("quote" mode) the branch is one offset wide and shows the
    active tab. Expanded ("bud" or "card" mode) it is one offset per source.

    Attributes:
        sources: The quoted spans, in selection order
        display_mode: How the branch is shown
        active_tab: Index of the source shown when collapsed
    """

    sources: tuple[ReferenceBlock, ...]
    display_mode: str = DEFAULT_DISPLAY_MODE
    active_tab: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", tuple(self.sources))
        if not self.sources:
            raise ValueError("BranchBlock needs at least one source")
        if not 0 <= self.active_tab < len(self.sources):
            raise ValueError(f"active_tab {self.active_tab} out of range")
        _check_display_mode(self.display_mode)

    @property
    def length(self) -> int:
        if self.display_mode == DISPLAY_QUOTE:
            return 1
        return len(self.sources)

    def with_active_tab(self, index: int) -> BranchBlock:
        """Return the same branch showing another source."""
        return replace(self, active_tab=index)

    def render(self) -> str:
        if self.display_mode == DISPLAY_QUOTE:
            return self.sources[self.active_tab].render()
        return "\n".join(
            replace(source, display_mode=self.display_mode).render() for source in self.sources
        )


Block = TextBlock | ReferenceBlock | BranchBlock


@dataclass(frozen=True)
class BlockPosition:
    """A block located by get_pair().

    Attributes:
        index: Position of the block in the sequence
        offset: Flattened offset at which the block starts
        block: The block itself
    """

    index: int
    offset: int
    block: Block

    @property
    def end(self) -> int:
        """Flattened offset just past the block."""
        return self.offset + self.block.length

    def text_block(self, operation: str) -> TextBlock:
        """Return the block if it holds text, else raise UnsupportedTargetError."""
        if not isinstance(self.block, TextBlock):
            raise UnsupportedTargetError(operation, self.block)
        return self.block


@dataclass(frozen=True)
class BlockSequence:
    """An immutable, ordered list of blocks.

    Attributes:
        blocks: The blocks in document order
        length: Total number of offsets (derived)

    Example:
        >>> seq = BlockSequence.build(["AB", "CD"])
        >>> seq.length
        4
        >>> seq.read_range(1, 3)
        'BC'
    """

    blocks: tuple[Block, ...] = ()
    length: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocks", tuple(self.blocks))
        object.__setattr__(self, "length", sum(block.length for block in self.blocks))

    @classmethod
    def build(cls, items: Iterable[str | Block]) -> BlockSequence:
        """Build a sequence from strings and blocks.

        Empty strings are dropped, so a paragraph emptied by an edit
        disappears. Explicit TextBlock("") objects are kept.
        """
        blocks = []
        for item in items:
            if isinstance(item, str):
                if item:
                    blocks.append(TextBlock(item))
            else:
                blocks.append(item)
        return cls(tuple(blocks))

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __getitem__(self, index: int) -> Block:
        return self.blocks[index]

    def offsets(self) -> list[int]:
        """Flattened start offset of every block."""
        offsets = []
        total = 0
        for block in self.blocks:
            offsets.append(total)
            total += block.length
        return offsets

    def _check_offset(self, offset: int) -> None:
        if not 0 <= offset <= self.length:
            raise OffsetOutOfRangeError(offset, offset, self.length)

    def _check_range(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= self.length:
            raise OffsetOutOfRangeError(start, end, self.length)

    def get_pair(self, offset: int, bias: Bias = Bias.LEFT) -> BlockPosition | None:
        """Locate the block an offset belongs to.

        LEFT and NEITHER pick the last block starting strictly before the
        offset; RIGHT picks the last block starting at or before it. When no
        block qualifies (offset 0 with LEFT bias) the first block is used.

        Args:
            offset: Flattened offset in [0, length]
            bias: Boundary disambiguator

        Returns:
            The located block, or None if the sequence has no blocks

        Raises:
            OffsetOutOfRangeError: If offset is outside [0, length]
        """
        self._check_offset(offset)
        if not self.blocks:
            return None

        found = BlockPosition(0, 0, self.blocks[0])
        for index, (start, block) in enumerate(zip(self.offsets(), self.blocks)):
            if start < offset or (bias is Bias.RIGHT and start == offset):
                found = BlockPosition(index, start, block)
            else:
                break
        return found

    def _splice(self, start_index: int, end_index: int, items: Iterable[str | Block]) -> BlockSequence:
        return BlockSequence.build(
            [*self.blocks[:start_index], *items, *self.blocks[end_index:]]
        )

    def insert_text(self, offset: int, text: str, bias: Bias = Bias.LEFT) -> BlockSequence:
        """Insert text at an offset.

        With NEITHER bias the caret sits in a freshly created empty block, so
        the text becomes a new block right after the located one.

        Raises:
            UnsupportedTargetError: If the offset resolves to a non-text block
        """
        position = self.get_pair(offset, bias)
        if position is None:
            return BlockSequence.build([text])
        target = position.text_block("insert_text")

        if bias is Bias.NEITHER:
            return self._splice(position.index + 1, position.index + 1, [text])

        local = offset - position.offset
        content = target.text[:local] + text + target.text[local:]
        return self._splice(position.index, position.index + 1, [content])

    def backspace(self, offset: int) -> BlockSequence:
        """Remove the single character just before offset.

        Raises:
            OffsetOutOfRangeError: If offset is 0
            UnsupportedTargetError: If the character belongs to a non-text block
        """
        if offset == 0:
            raise OffsetOutOfRangeError(offset - 1, offset, self.length)
        position = self.get_pair(offset, Bias.LEFT)
        target = position.text_block("backspace")

        local = offset - position.offset
        content = target.text[: local - 1] + target.text[local:]
        return self._splice(position.index, position.index + 1, [content])

    def _locate_range(self, start: int, end: int, operation: str) -> tuple[BlockPosition, BlockPosition]:
        self._check_range(start, end)
        first = self.get_pair(start, Bias.RIGHT)
        last = self.get_pair(end, Bias.LEFT)
        first.text_block(operation)
        last.text_block(operation)
        return first, last

    def delete_range(self, start: int, end: int) -> BlockSequence:
        """Remove [start, end).

        Within one block the text is spliced. Across blocks the kept prefix
        of the first block and the kept suffix of the last block are joined
        into one block and every block in between is dropped.

        Raises:
            UnsupportedTargetError: If either end lies in a non-text block
        """
        if start == end:
            return self
        first, last = self._locate_range(start, end, "delete_range")
        head = first.block.text[: start - first.offset]
        tail = last.block.text[end - last.offset :]
        return self._splice(first.index, last.index + 1, [head + tail])

    def read_range(self, start: int, end: int) -> str:
        """Return the literal text of [start, end).

        Spans covering any number of blocks are read in full: interior text
        blocks contribute all of their text.

        Raises:
            UnsupportedTargetError: If the span touches a non-text block
        """
        if start == end:
            return ""
        first, last = self._locate_range(start, end, "read_range")
        if first.index == last.index:
            return first.block.text[start - first.offset : end - first.offset]

        parts = [first.block.text[start - first.offset :]]
        for block in self.blocks[first.index + 1 : last.index]:
            if not isinstance(block, TextBlock):
                raise UnsupportedTargetError("read_range", block)
            parts.append(block.text)
        parts.append(last.block.text[: end - last.offset])
        return "".join(parts)

    def replace(self, start: int, end: int, new_block: Block) -> BlockSequence:
        """Substitute the blocks spanning [start, end) with new_block.

        Text of the first block before start and of the last block after end
        stays in place as separate text blocks around new_block.

        Raises:
            UnsupportedTargetError: If start or end would cut a non-text block
        """
        self._check_range(start, end)
        first = self.get_pair(start, Bias.RIGHT)
        last = self.get_pair(end, Bias.LEFT)
        if first is None:
            return BlockSequence.build([new_block])

        items: list[str | Block] = []
        if start > first.offset:
            items.append(first.text_block("replace").text[: start - first.offset])
        items.append(new_block)
        if end < last.end:
            items.append(last.text_block("replace").text[end - last.offset :])
        return self._splice(first.index, last.index + 1, items)

    def merge_with_previous(self, index: int) -> BlockSequence:
        """Join block index onto the end of the block before it.

        Raises:
            IndexError: If there is no previous block
            UnsupportedTargetError: If either block is not text
        """
        if not 0 < index < len(self.blocks):
            raise IndexError(f"No block before index {index}")
        former, latter = self.blocks[index - 1], self.blocks[index]
        for block in (former, latter):
            if not isinstance(block, TextBlock):
                raise UnsupportedTargetError("merge", block)
        logger.debug("Merging block %d into block %d", index, index - 1)
        return self._splice(index - 1, index + 1, [TextBlock(former.text + latter.text)])

    def render(self) -> list[str]:
        """Rendered text of every block, in order."""
        return [block.render() for block in self.blocks]
