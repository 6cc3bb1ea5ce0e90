"""
python_hyperdoc - Versioned hypertext documents with span-level provenance.

This package models a document as an immutable sequence of text and
reference blocks. Every edit produces a new version together with links
recording which span of the new text came from which span of the old text
(or of another document it quotes). Composing those links along the version
chain answers "where did this text come from N edits ago?".

Example:
    >>> from python_hyperdoc import Document, IdAllocator, Selection, VersionHistory
    >>> root = Document.from_text("Hello world", ids=IdAllocator())
    >>> doc = root.backspace(Selection.caret(5))
    >>> doc.text
    'Hell world'
    >>> VersionHistory(doc).survivors(root)
    (Address(basis='page_1', start=0, end=4), Address(basis='page_1', start=5, end=11))
"""

__version__ = "0.1.0"
__author__ = "Parker Hancock"
__all__ = [
    "Address",
    "Link",
    "LinkSet",
    "Bias",
    "Selection",
    "TextBlock",
    "ReferenceBlock",
    "BranchBlock",
    "BlockPosition",
    "BlockSequence",
    "Document",
    "IdAllocator",
    "VersionHistory",
    "ReferenceToken",
    "Workspace",
    "WorkspaceConfig",
    # Functional entry points
    "insert_char",
    "backspace",
    "delete_range",
    "quote",
    "insert_reference",
    "read_range",
    "flatten",
    "history",
    "compose_chain",
    # Errors
    "HyperdocError",
    "OffsetOutOfRangeError",
    "CrossBasisAddressError",
    "NoSelectionError",
    "UnsupportedTargetError",
    "InvalidReferenceError",
    "DocumentNotFoundError",
    "VersionChainError",
]

# Import address and link algebra
from .address import Address

# Import block storage
from .blocks import BlockPosition, BlockSequence, BranchBlock, ReferenceBlock, TextBlock

# Import document class and functional entry points
from .document import (
    Document,
    IdAllocator,
    backspace,
    delete_range,
    flatten,
    insert_char,
    insert_reference,
    quote,
    read_range,
)
from .errors import (
    CrossBasisAddressError,
    DocumentNotFoundError,
    HyperdocError,
    InvalidReferenceError,
    NoSelectionError,
    OffsetOutOfRangeError,
    UnsupportedTargetError,
    VersionChainError,
)

# Import version history
from .history import VersionHistory, compose_chain, history
from .link import Link
from .linkset import LinkSet

# Import reference tokens and the workspace
from .reference import ReferenceToken
from .selection import Bias, Selection
from .workspace import Workspace, WorkspaceConfig
