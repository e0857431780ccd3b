"""
Turn candidate start offsets into candidate payload byte ranges.

The data section is assumed to be tightly packed, so each payload is taken
to run from one referenced offset up to the next one.
"""

from dataclasses import dataclass
from typing import Iterable

# Anything shorter cannot plausibly hold a useful deflate stream.
MIN_SEGMENT_SIZE = 32


@dataclass(frozen=True)
class Segment:
    """Half-open byte range [start, end) over section data."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def slice(self, data: bytes) -> bytes:
        """Return the bytes this segment covers."""
        return data[self.start : self.end]


def segment_offsets(
    offsets: Iterable[int],
    sentinel: int,
    min_size: int = MIN_SEGMENT_SIZE,
) -> list[Segment]:
    """Partition [0, sentinel) at the given offsets.

    The offsets are sorted together with the sentinel, and every pair of
    neighbours (with an implicit 0 before the first) becomes a candidate.
    Candidates shorter than `min_size` are dropped, which also removes the
    empty ranges produced by duplicate offsets. Candidates that do not lie
    within [0, sentinel] are dropped as well.

    Args:
        offsets: Candidate start offsets, in any order
        sentinel: Total length of the section
        min_size: Minimum segment length in bytes

    Returns:
        Segments in ascending order
    """
    bounds = sorted([*offsets, sentinel])

    segments = []
    prev = 0
    for off in bounds:
        start, prev = prev, off
        if off - start < min_size:
            continue
        if start < 0 or off > sentinel:
            continue
        segments.append(Segment(start, off))
    return segments
