"""
Directed span-to-span correspondences between document versions.
"""

from __future__ import annotations

from dataclasses import dataclass

from .address import Address, clip, intersect
from .errors import CrossBasisAddressError


@dataclass(frozen=True)
class Link:
    """A correspondence stating that origin was produced from dest.

    Edits link the newer document (origin) to the text it came from (dest):
    the document it was derived from, or a transclusion source. Links made
    by an edit are balanced, but restriction can leave origin and dest of
    different lengths.

    Attributes:
        origin: Span in the newer document
        dest: Span it corresponds to

    Example:
        >>> link = Link(Address("page_2", 4, 10), Address("page_1", 5, 11))
        >>> link.translate(6)
        7
    """

    origin: Address
    dest: Address

    @property
    def offset(self) -> int:
        """Shift applied when translating from origin to dest."""
        return self.dest.start - self.origin.start

    @property
    def is_balanced(self) -> bool:
        """True if origin and dest cover the same number of offsets."""
        return self.origin.length == self.dest.length

    def invert(self) -> Link:
        """Swap origin and dest."""
        return Link(self.dest, self.origin)

    def translate(self, point: int) -> int:
        """Shift a single origin offset into dest coordinates.

        The result is not checked against the dest bounds.
        """
        return point - self.origin.start + self.dest.start

    def translate_interval(self, addr: Address) -> Address | None:
        """Map an origin-side address into dest.

        The affine image is intersected with dest, so parts falling outside
        the destination are dropped rather than clamped.

        Args:
            addr: Address in the origin's basis

        Returns:
            The image in dest, or None if nothing of it lands in dest

        Raises:
            CrossBasisAddressError: If addr is not in the origin's basis
        """
        if addr.basis != self.origin.basis:
            raise CrossBasisAddressError(addr, self.origin)
        return clip(self.dest, self.translate(addr.start), self.translate(addr.end))

    def partial(self, addr: Address) -> Link | None:
        """Restrict the link to the part of its origin that overlaps addr.

        Returns:
            The restricted link, or None if addr is in another basis or
            does not overlap the origin
        """
        overlap = intersect(self.origin, addr)
        if overlap is None:
            return None
        dest = self.translate_interval(overlap)
        if dest is None:
            return None
        return Link(overlap, dest)

    def __str__(self) -> str:
        return f"{self.origin} -> {self.dest}"
