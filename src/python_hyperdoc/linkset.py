"""
Sets of links treated as relations between document versions.

A LinkSet relates the offsets of one version (the domain, on the origin
side) to the offsets of older versions or transclusion sources (the range,
on the dest side). Before normalization the relation may be partial and
many-to-many.

The central operation is compose(): given A->B and B->C it builds A->C
while keeping every part of A's correspondence, including spans of B that
have no continuation in C. Those dead ends stay as direct A->B links so
that "where did this text come from" queries terminate instead of losing
information.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import groupby

from .address import Address, intersect, intersect_all, normalize, subtract, touching
from .link import Link

logger = logging.getLogger(__name__)


def _merge_key(link: Link) -> tuple[str, str, int]:
    return (link.origin.basis, link.dest.basis, link.offset)


@dataclass(frozen=True)
class LinkSet:
    """An immutable collection of links.

    Attributes:
        links: The links in the set (any iterable is accepted)

    Example:
        >>> old = Address("page_1", 0, 11)
        >>> links = LinkSet.identity(old)
        >>> links.range()
        (Address(basis='page_1', start=0, end=11),)
    """

    links: frozenset[Link] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "links", frozenset(self.links))

    @classmethod
    def compact(cls, links: Iterable[Link | None]) -> LinkSet:
        """Build a LinkSet, skipping links that were omitted (None)."""
        return cls(link for link in links if link is not None)

    @classmethod
    def identity(cls, addr: Address) -> LinkSet:
        """Map addr onto itself."""
        return cls([Link(addr, addr)])

    def __iter__(self) -> Iterator[Link]:
        return iter(sorted(self.links, key=lambda link: (_merge_key(link), link.origin.start)))

    def __len__(self) -> int:
        return len(self.links)

    def __bool__(self) -> bool:
        return bool(self.links)

    def __contains__(self, link: object) -> bool:
        return link in self.links

    def __or__(self, other: LinkSet) -> LinkSet:
        return self.union(other)

    def union(self, other: LinkSet) -> LinkSet:
        """Return all links of both sets."""
        return LinkSet(self.links | other.links)

    def domain(self) -> tuple[Address, ...]:
        """Normalized union of all origins."""
        return normalize(link.origin for link in self.links)

    def range(self) -> tuple[Address, ...]:
        """Normalized union of all dests."""
        return normalize(link.dest for link in self.links)

    def invert(self) -> LinkSet:
        """Swap origin and dest of every link."""
        return LinkSet(link.invert() for link in self.links)

    def targeting(self, basis: str) -> LinkSet:
        """Keep only links whose dest lies in the given basis."""
        return LinkSet(link for link in self.links if link.dest.basis == basis)

    def image(self, addrs: Iterable[Address]) -> tuple[Address, ...]:
        """Map origin-side addresses through every link.

        Addresses in a basis no link starts from contribute nothing.

        Returns:
            Normalized dest-side addresses
        """
        addrs = list(addrs)
        images = []
        for link in self.links:
            for addr in addrs:
                if addr.basis != link.origin.basis:
                    continue
                image = link.translate_interval(addr)
                if image is not None:
                    images.append(image)
        return normalize(images)

    def preimage(self, addrs: Iterable[Address]) -> tuple[Address, ...]:
        """Map dest-side addresses back to the origin side."""
        return self.invert().image(addrs)

    def partial(self, addr: Address) -> LinkSet:
        """Restrict the relation to origins overlapping addr."""
        restricted = (link.partial(addr) for link in self.links)
        return LinkSet.compact(restricted)

    def prism(self, other: LinkSet, addr: Address) -> LinkSet:
        """Materialize transitive links for one sub-range of the domain.

        Given self (A->B) and other (C->B), every B-span reachable from addr
        through self is matched with every C-span that other maps onto the
        same B-span, and a direct A->C link is emitted for each combination.
        Only addr is visited; no global relation is built.

        Args:
            other: Links into the same intermediate version B
            addr: Sub-range of A to materialize

        Returns:
            Direct A->C links covering the part of addr that reaches C
        """
        result = []
        for first in self.partial(addr).links:
            for second in other.links:
                shared = intersect(first.dest, second.dest)
                if shared is None:
                    continue
                origin = first.invert().translate_interval(shared)
                dest = second.invert().translate_interval(shared)
                if origin is None or dest is None:
                    continue
                result.append(Link(origin, dest))
        return LinkSet(result)

    def compose(self, other: LinkSet) -> LinkSet:
        """Compose self (A->B) with other (B->C) into A->C.

        Steps:
        1. Image in C of the part of B that self reaches.
        2. Pull that image back through other and restrict it to self's
           range: the B-spans that continue into C ("prelongs").
        3. The rest of self's range dead-ends in B ("shorts").
        4. Dead-end spans keep their direct A->B links.
        5. Continuing spans are materialized as A->C links with prism().

        Args:
            other: Relation from self's range onward

        Returns:
            LinkSet covering every part of self's domain
        """
        reached = self.range()
        continued = other.image(reached)
        prelongs = intersect_all(other.preimage(continued), reached)
        dead_ends = subtract(reached, prelongs)

        inverse = self.invert()
        shorts = [link.invert() for span in dead_ends for link in inverse.partial(span).links]

        backward = other.invert()
        longs: list[Link] = []
        for span in self.preimage(prelongs):
            longs.extend(self.prism(backward, span).links)

        logger.debug(
            "Composed %d x %d links: %d continuing, %d dead-end",
            len(self),
            len(other),
            len(longs),
            len(shorts),
        )
        return LinkSet(shorts + longs)

    def normalize(self) -> LinkSet:
        """Merge balanced links that are contiguous on both sides.

        Links sharing bases and shift whose origins touch become one link.
        Unbalanced links are kept as they are.
        """
        balanced = sorted(
            (link for link in self.links if link.is_balanced),
            key=lambda link: (_merge_key(link), link.origin.start, link.origin.end),
        )
        merged = [link for link in self.links if not link.is_balanced]
        for (origin_basis, dest_basis, offset), group in groupby(balanced, key=_merge_key):
            current: Link | None = None
            for link in group:
                if current is not None and touching(current.origin, link.origin):
                    end = max(current.origin.end, link.origin.end)
                    current = Link(
                        Address(origin_basis, current.origin.start, end),
                        Address(dest_basis, current.dest.start, end + offset),
                    )
                    continue
                if current is not None:
                    merged.append(current)
                current = link
            if current is not None:
                merged.append(current)
        return LinkSet(merged)

    def equivalent(self, other: LinkSet) -> bool:
        """Compare two relations after normalization."""
        return self.normalize() == other.normalize()

    def __str__(self) -> str:
        return "{" + ", ".join(str(link) for link in self) + "}"
