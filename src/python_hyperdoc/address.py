"""
Address algebra for offset ranges within a document version.

An Address is a half-open range [start, end) of character offsets into the
flattened text of one document version, its basis. Addresses sharing a basis
can be intersected, subtracted and merged. Addresses with different bases
live in different offset spaces and are never merged.

Overlap rule used throughout:
    Two ranges of positive length that merely touch (a.end == b.start) do not
    overlap. A zero-length address at p overlaps a range when
    start <= p < end, and two equal points overlap each other, so
    single-point anchors survive intersection.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from itertools import groupby

from .errors import CrossBasisAddressError, OffsetOutOfRangeError


@dataclass(frozen=True)
class Address:
    """A half-open offset range within one document version.

    Attributes:
        basis: Id of the document version the offsets refer to
        start: First offset in the range
        end: Offset just past the range (start for an empty range)

    Example:
        >>> addr = Address("page_1", 4, 9)
        >>> addr.length
        5
        >>> str(addr)
        'page_1[4:9)'
    """

    basis: str
    start: int
    end: int

    def __post_init__(self) -> None:
        """Reject negative and inverted ranges."""
        if not 0 <= self.start <= self.end:
            raise OffsetOutOfRangeError(self.start, self.end)

    @property
    def length(self) -> int:
        """Number of offsets covered."""
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        """True for a zero-length (single point) address."""
        return self.start == self.end

    def contains(self, offset: int) -> bool:
        """Check if an offset falls inside the range."""
        return self.start <= offset < self.end

    def shift(self, delta: int) -> Address:
        """Return the same range moved by delta offsets."""
        return Address(self.basis, self.start + delta, self.end + delta)

    def __and__(self, other: Address) -> Address | None:
        return intersect(self, other)

    def __sub__(self, other: Address) -> list[Address]:
        return diff(self, other)

    def __str__(self) -> str:
        return f"{self.basis}[{self.start}:{self.end})"


def _sort_key(addr: Address) -> tuple[str, int, int]:
    return (addr.basis, addr.start, addr.end)


def clip(bounds: Address, start: int, end: int) -> Address | None:
    """Intersect a raw [start, end) range with bounds.

    The raw range may lie partly or wholly outside the document (for example
    after an affine shift), so it is given as plain integers.

    Args:
        bounds: Address whose basis and extent limit the result
        start: Raw start offset (may be negative)
        end: Raw end offset

    Returns:
        The overlapping Address, or None if the ranges do not overlap
    """
    lo = max(start, bounds.start)
    hi = min(end, bounds.end)
    if lo > hi:
        return None
    if lo == hi:
        point_query = start == end
        point_bounds = bounds.is_empty
        if not point_query and not point_bounds:
            return None
        # a point on the exclusive end of a range is outside it
        if point_query and not point_bounds and lo == bounds.end:
            return None
        if point_bounds and not point_query and lo == end:
            return None
    return Address(bounds.basis, lo, hi)


def intersect(a: Address, b: Address) -> Address | None:
    """Return the overlap of two addresses.

    Returns:
        The clamped overlap, or None if the bases differ or the ranges
        do not overlap
    """
    if a.basis != b.basis:
        return None
    return clip(b, a.start, a.end)


def touching(a: Address, b: Address) -> bool:
    """Check if two addresses overlap or are exactly adjacent."""
    if a.basis != b.basis:
        return False
    return max(a.start, b.start) <= min(a.end, b.end)


def diff(a: Address, b: Address) -> list[Address]:
    """Subtract b from a.

    Args:
        a: Address to subtract from
        b: Address to remove

    Returns:
        Zero, one or two addresses; a hole punched in the middle of a
        yields two

    Raises:
        CrossBasisAddressError: If a and b belong to different versions
    """
    if a.basis != b.basis:
        raise CrossBasisAddressError(a, b)
    overlap = intersect(a, b)
    if overlap is None:
        return [a]
    if a.is_empty:
        return []
    if overlap.is_empty:
        return [a]

    pieces = []
    if a.start < overlap.start:
        pieces.append(Address(a.basis, a.start, overlap.start))
    if overlap.end < a.end:
        pieces.append(Address(a.basis, overlap.end, a.end))
    return pieces


def normalize(addrs: Iterable[Address]) -> tuple[Address, ...]:
    """Merge touching and overlapping addresses into minimal ranges.

    Addresses are grouped by basis and sorted by start; the result is sorted
    the same way. normalize(normalize(x)) == normalize(x).
    """
    result: list[Address] = []
    for basis, group in groupby(sorted(addrs, key=_sort_key), key=lambda a: a.basis):
        current: Address | None = None
        for addr in group:
            if current is not None and touching(current, addr):
                current = Address(basis, current.start, max(current.end, addr.end))
                continue
            if current is not None:
                result.append(current)
            current = addr
        if current is not None:
            result.append(current)
    return tuple(result)


def intersect_all(addrs: Iterable[Address], others: Iterable[Address]) -> tuple[Address, ...]:
    """Return the normalized pairwise intersection of two address sets."""
    others = list(others)
    overlaps = []
    for addr in addrs:
        for other in others:
            overlap = intersect(addr, other)
            if overlap is not None:
                overlaps.append(overlap)
    return normalize(overlaps)


def subtract(addrs: Iterable[Address], holes: Iterable[Address]) -> tuple[Address, ...]:
    """Remove every hole from every address, per basis.

    Holes from a basis an address does not share are ignored.
    """
    holes = list(holes)
    remaining = list(normalize(addrs))
    for hole in holes:
        pieces = []
        for addr in remaining:
            if addr.basis != hole.basis:
                pieces.append(addr)
            else:
                pieces.extend(diff(addr, hole))
        remaining = pieces
    return normalize(remaining)
