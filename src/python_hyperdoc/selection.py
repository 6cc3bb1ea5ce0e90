"""
Caret and selection descriptors supplied by an editing surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import NoSelectionError, OffsetOutOfRangeError


class Bias(Enum):
    """Which side of a block boundary a caret belongs to.

    Attributes:
        LEFT: Caret belongs to the block ending at the offset
        RIGHT: Caret belongs to the block starting at the offset
        NEITHER: Caret sits in a freshly created, empty block
    """

    LEFT = "left"
    RIGHT = "right"
    NEITHER = "neither"


@dataclass(frozen=True)
class Selection:
    """A caret (start == end) or a range [start, end) with a bias.

    Attributes:
        start: Start offset in the flattened document text
        end: End offset (equal to start for a caret)
        bias: Block boundary disambiguator, given as a Bias or its string value

    Example:
        >>> Selection.caret(5, "right")
        Selection(start=5, end=5, bias=<Bias.RIGHT: 'right'>)
    """

    start: int
    end: int
    bias: Bias = Bias.LEFT

    def __post_init__(self) -> None:
        """Coerce the bias and validate the offsets."""
        object.__setattr__(self, "bias", Bias(self.bias))
        if not 0 <= self.start <= self.end:
            raise OffsetOutOfRangeError(self.start, self.end)

    @classmethod
    def caret(cls, position: int, bias: Bias | str = Bias.LEFT) -> Selection:
        """Create an empty selection at a single position."""
        return cls(position, position, Bias(bias))

    @property
    def is_caret(self) -> bool:
        """True if the selection is empty."""
        return self.start == self.end

    def require_caret(self, operation: str) -> int:
        """Return the caret position, or raise if the selection is a range."""
        if not self.is_caret:
            raise NoSelectionError(operation, "caret")
        return self.start

    def require_range(self, operation: str) -> tuple[int, int]:
        """Return (start, end), or raise if the selection is empty."""
        if self.is_caret:
            raise NoSelectionError(operation, "range")
        return self.start, self.end
