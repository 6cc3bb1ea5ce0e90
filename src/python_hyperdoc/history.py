"""
Version chains and cross-version correspondence queries.

Each Document's provenance only relates it to the version immediately
before it (plus any transcluded sources). Composing provenance along the
chain of basis back-pointers relates the newest version to any ancestor.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from functools import reduce

from .address import Address
from .document import Document
from .errors import VersionChainError
from .linkset import LinkSet

logger = logging.getLogger(__name__)


def history(doc: Document) -> list[Document]:
    """Return doc followed by every version it was derived from, newest first."""
    chain = []
    current: Document | None = doc
    while current is not None:
        chain.append(current)
        current = current.basis
    return chain


def compose_chain(docs: Sequence[Document]) -> LinkSet:
    """Compose provenance along a version chain.

    Args:
        docs: Versions newest first, each the basis of the one before it

    Returns:
        LinkSet from the first version to the last (and to any transcluded
        sources along the way). A single version maps onto itself.

    Raises:
        ValueError: If docs is empty
        VersionChainError: If two adjacent entries are not basis-linked
    """
    if not docs:
        raise ValueError("compose_chain needs at least one document")
    for newer, older in zip(docs, docs[1:]):
        if newer.basis is not older:
            raise VersionChainError(newer.id, older.id)
    if len(docs) == 1:
        return LinkSet.identity(docs[0].full_address())

    steps = [doc.provenance for doc in docs[:-1]]
    logger.debug("Composing %d provenance steps from %s to %s", len(steps), docs[0].id, docs[-1].id)
    return reduce(LinkSet.compose, steps)


class VersionHistory:
    """The chain of versions behind a document, with correspondence queries.

    Example:
        >>> root = Document.from_text("Hello world", ids=IdAllocator())
        >>> latest = root.backspace(Selection.caret(5))
        >>> hist = VersionHistory(latest)
        >>> hist.survivors(root)
        (Address(basis='page_1', start=0, end=4), Address(basis='page_1', start=5, end=11))
    """

    def __init__(self, doc: Document) -> None:
        self.latest = doc
        self.versions = history(doc)

    @property
    def root(self) -> Document:
        """The oldest version in the chain."""
        return self.versions[-1]

    def __iter__(self) -> Iterator[Document]:
        return iter(self.versions)

    def __len__(self) -> int:
        return len(self.versions)

    def _index(self, ancestor: Document) -> int:
        for index, doc in enumerate(self.versions):
            if doc is ancestor:
                return index
        raise VersionChainError(self.latest.id, ancestor.id)

    def trace(self, ancestor: Document) -> LinkSet:
        """Links from the latest version back to ancestor.

        Raises:
            VersionChainError: If ancestor is not in this history
        """
        return compose_chain(self.versions[: self._index(ancestor) + 1])

    def survivors(self, ancestor: Document) -> tuple[Address, ...]:
        """Spans of ancestor whose text is still present in the latest version."""
        return self.trace(ancestor).targeting(ancestor.id).range()

    def inherited(self, ancestor: Document) -> tuple[Address, ...]:
        """Spans of the latest version whose text comes from ancestor."""
        return self.trace(ancestor).targeting(ancestor.id).domain()

    def origin_of(self, addr: Address, steps: int = 1) -> tuple[Address, ...]:
        """Where a span of the latest version came from, steps edits back.

        The result may include spans of transcluded documents as well as
        spans of the ancestor version.

        Raises:
            ValueError: If steps is negative or reaches past the root
        """
        if not 0 <= steps < len(self.versions):
            raise ValueError(f"steps must be in [0, {len(self.versions) - 1}], got {steps}")
        return self.trace(self.versions[steps]).image([addr])
