"""
Tests for LinkSet relations.

These tests verify:
- image / preimage / partial
- prism and compose, including dead-end spans
- normalize, invert and the algebraic properties of compose
"""

import pytest

from python_hyperdoc.address import Address
from python_hyperdoc.link import Link
from python_hyperdoc.linkset import LinkSet


def addr(basis: str, start: int, end: int) -> Address:
    return Address(basis, start, end)


def link(origin: tuple[str, int, int], dest: tuple[str, int, int]) -> Link:
    return Link(addr(*origin), addr(*dest))


@pytest.fixture
def backspaced() -> LinkSet:
    """Provenance of a backspace at offset 5 in an 11 character text."""
    return LinkSet(
        [
            link(("page_2", 0, 4), ("page_1", 0, 4)),
            link(("page_2", 4, 10), ("page_1", 5, 11)),
        ]
    )


class TestConstruction:
    """Tests for building link sets."""

    def test_compact_skips_omitted_links(self) -> None:
        """Test that None entries are dropped."""
        links = LinkSet.compact([None, link(("B", 0, 1), ("A", 0, 1)), None])

        assert len(links) == 1

    def test_identity(self) -> None:
        """Test the identity relation."""
        identity = LinkSet.identity(addr("A", 0, 5))

        assert identity.domain() == identity.range() == (addr("A", 0, 5),)

    def test_empty(self) -> None:
        """Test that an empty set is falsy."""
        assert not LinkSet()
        assert LinkSet().domain() == ()

    def test_union(self, backspaced: LinkSet) -> None:
        """Test combining two sets."""
        extra = LinkSet([link(("page_2", 10, 12), ("page_9", 0, 2))])

        assert len(backspaced | extra) == 3

    def test_str(self, backspaced: LinkSet) -> None:
        """Test the sorted display form."""
        assert str(backspaced) == "{page_2[0:4) -> page_1[0:4), page_2[4:10) -> page_1[5:11)}"


class TestQueries:
    """Tests for domain, range, image and preimage."""

    def test_domain_and_range(self, backspaced: LinkSet) -> None:
        """Test that touching origins merge in the domain."""
        assert backspaced.domain() == (addr("page_2", 0, 10),)
        assert backspaced.range() == (addr("page_1", 0, 4), addr("page_1", 5, 11))

    def test_image(self, backspaced: LinkSet) -> None:
        """Test mapping a span that crosses the deletion point."""
        assert backspaced.image([addr("page_2", 2, 6)]) == (
            addr("page_1", 2, 4),
            addr("page_1", 5, 7),
        )

    def test_image_ignores_other_bases(self, backspaced: LinkSet) -> None:
        """Test that addresses no link starts from contribute nothing."""
        assert backspaced.image([addr("page_7", 0, 3)]) == ()

    def test_preimage(self, backspaced: LinkSet) -> None:
        """Test mapping back from the dest side."""
        assert backspaced.preimage([addr("page_1", 3, 6)]) == (addr("page_2", 3, 5),)

    def test_preimage_of_deleted_text(self, backspaced: LinkSet) -> None:
        """Test that a deleted character has no preimage."""
        assert backspaced.preimage([addr("page_1", 4, 5)]) == ()

    def test_partial(self, backspaced: LinkSet) -> None:
        """Test restricting to part of the domain."""
        assert backspaced.partial(addr("page_2", 3, 5)) == LinkSet(
            [
                link(("page_2", 3, 4), ("page_1", 3, 4)),
                link(("page_2", 4, 5), ("page_1", 5, 6)),
            ]
        )

    def test_targeting(self) -> None:
        """Test filtering by dest basis."""
        links = LinkSet(
            [
                link(("B", 0, 2), ("A", 0, 2)),
                link(("B", 2, 4), ("S", 5, 7)),
            ]
        )

        assert links.targeting("S") == LinkSet([link(("B", 2, 4), ("S", 5, 7))])


class TestCompose:
    """Tests for prism() and compose()."""

    @pytest.fixture
    def a_to_b(self) -> LinkSet:
        return LinkSet([link(("A", 0, 5), ("B", 0, 5))])

    @pytest.fixture
    def b_to_c(self) -> LinkSet:
        """B[2:3) has no continuation in C."""
        return LinkSet(
            [
                link(("B", 0, 2), ("C", 0, 2)),
                link(("B", 3, 5), ("C", 4, 6)),
            ]
        )

    def test_prism(self, a_to_b: LinkSet, b_to_c: LinkSet) -> None:
        """Test materializing links for one sub-range."""
        assert a_to_b.prism(b_to_c.invert(), addr("A", 3, 5)) == LinkSet(
            [link(("A", 3, 5), ("C", 4, 6))]
        )

    def test_compose_keeps_dead_ends(self, a_to_b: LinkSet, b_to_c: LinkSet) -> None:
        """Test that spans ending in B keep their direct A->B link."""
        assert a_to_b.compose(b_to_c) == LinkSet(
            [
                link(("A", 0, 2), ("C", 0, 2)),
                link(("A", 2, 3), ("B", 2, 3)),
                link(("A", 3, 5), ("C", 4, 6)),
            ]
        )

    def test_compose_covers_domain(self, a_to_b: LinkSet, b_to_c: LinkSet) -> None:
        """Test that composition loses no part of the domain."""
        assert a_to_b.compose(b_to_c).domain() == a_to_b.domain()

    def test_right_identity(self, backspaced: LinkSet) -> None:
        """Test L.compose(identity(range)) is equivalent to L."""
        identity = LinkSet.identity(addr("page_1", 0, 11))

        assert backspaced.compose(identity).equivalent(backspaced)

    def test_compose_with_empty(self, backspaced: LinkSet) -> None:
        """Test that composing with nothing keeps every link as a dead end."""
        assert backspaced.compose(LinkSet()) == backspaced

    def test_associative(self) -> None:
        """Test (p4.p3).p2 is equivalent to p4.(p3.p2) over three edits."""
        p2 = LinkSet(
            [
                link(("page_2", 0, 4), ("page_1", 0, 4)),
                link(("page_2", 4, 10), ("page_1", 5, 11)),
            ]
        )
        p3 = LinkSet([link(("page_3", 1, 11), ("page_2", 0, 10))])
        p4 = LinkSet(
            [
                link(("page_4", 0, 3), ("page_3", 0, 3)),
                link(("page_4", 3, 8), ("page_3", 6, 11)),
            ]
        )

        left = p4.compose(p3).compose(p2)
        right = p4.compose(p3.compose(p2))

        assert left.equivalent(right)
        assert left == LinkSet(
            [
                link(("page_4", 0, 1), ("page_3", 0, 1)),
                link(("page_4", 1, 3), ("page_1", 0, 2)),
                link(("page_4", 3, 8), ("page_1", 6, 11)),
            ]
        )


class TestNormalize:
    """Tests for normalize(), equivalent() and invert()."""

    def test_merges_contiguous_links(self) -> None:
        """Test merging links contiguous on both sides."""
        links = LinkSet(
            [
                link(("B", 0, 4), ("A", 0, 4)),
                link(("B", 4, 6), ("A", 4, 6)),
            ]
        )

        assert links.normalize() == LinkSet([link(("B", 0, 6), ("A", 0, 6))])

    def test_different_shift_not_merged(self, backspaced: LinkSet) -> None:
        """Test that links with different shifts stay apart."""
        assert backspaced.normalize() == backspaced

    def test_unbalanced_kept(self) -> None:
        """Test that unbalanced links pass through unchanged."""
        links = LinkSet([link(("B", 0, 4), ("A", 0, 2)), link(("B", 4, 6), ("A", 2, 4))])

        assert links.normalize() == links

    @pytest.mark.parametrize(
        "links",
        [
            LinkSet(),
            LinkSet([link(("B", 0, 2), ("A", 0, 2)), link(("B", 2, 3), ("A", 2, 3))]),
            LinkSet([link(("B", 0, 2), ("A", 5, 7)), link(("B", 2, 3), ("S", 2, 3))]),
        ],
    )
    def test_idempotent(self, links: LinkSet) -> None:
        """Test normalize(normalize(x)) == normalize(x)."""
        assert links.normalize().normalize() == links.normalize()

    def test_equivalent(self) -> None:
        """Test equality after normalization."""
        split = LinkSet([link(("B", 0, 2), ("A", 0, 2)), link(("B", 2, 3), ("A", 2, 3))])
        whole = LinkSet([link(("B", 0, 3), ("A", 0, 3))])

        assert split != whole
        assert split.equivalent(whole)

    def test_invert_involution(self, backspaced: LinkSet) -> None:
        """Test that inverting twice gives back the set."""
        assert backspaced.invert().invert() == backspaced
