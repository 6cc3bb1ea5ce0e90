"""
Cross-document reference tokens.

Copying a span produces a token of the form "{documentId}:{start}-{end}"
that a paste into another document resolves back to the source span.
"""

from __future__ import annotations

from dataclasses import dataclass

from .address import Address
from .constants import REFERENCE_TOKEN_PATTERN
from .errors import InvalidReferenceError


@dataclass(frozen=True)
class ReferenceToken:
    """A parsed "{documentId}:{start}-{end}" reference.

    Attributes:
        document_id: Id of the source document version
        start: Start offset of the span
        end: End offset of the span

    Examples:
        >>> token = ReferenceToken.parse("page_3:4-9")
        >>> token.document_id, token.start, token.end
        ('page_3', 4, 9)
        >>> str(token)
        'page_3:4-9'
    """

    document_id: str
    start: int
    end: int

    @classmethod
    def parse(cls, token: str) -> ReferenceToken:
        """Parse a token string.

        Args:
            token: The token (e.g., "page_3:4-9")

        Returns:
            Parsed ReferenceToken

        Raises:
            InvalidReferenceError: If the token is malformed or its range is inverted
        """
        if not token or not token.strip():
            raise InvalidReferenceError(token, "token cannot be empty")

        match = REFERENCE_TOKEN_PATTERN.fullmatch(token)
        if not match:
            raise InvalidReferenceError(token)

        document_id, start, end = match.group(1), int(match.group(2)), int(match.group(3))
        if start > end:
            raise InvalidReferenceError(token, f"start {start} is after end {end}")
        return cls(document_id, start, end)

    @classmethod
    def from_address(cls, addr: Address) -> ReferenceToken:
        return cls(addr.basis, addr.start, addr.end)

    def to_address(self) -> Address:
        return Address(self.document_id, self.start, self.end)

    def __str__(self) -> str:
        return f"{self.document_id}:{self.start}-{self.end}"
