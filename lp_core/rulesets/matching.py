# lp_core/rulesets/matching.py
from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

Range = Tuple[int, int]


def matches(value: int, range_: Range) -> bool:
    """
    Closed range check shared by every resolver: min <= value <= max.
    Admin-authored ranges ("TOP 1-3", "5-6 correct") are inclusive on both ends.
    """
    lo, hi = range_
    return lo <= value <= hi


def first_match(items: Iterable[T], value: int, range_of: Callable[[T], Range]) -> Optional[T]:
    """
    First item (declaration order) whose range contains value.
    Overlapping ranges are legal; the earlier item wins.
    """
    for item in items:
        if matches(value, range_of(item)):
            return item
    return None


def ranges_overlap(a: Range, b: Range) -> bool:
    return a[0] <= b[1] and b[0] <= a[1]


def find_overlaps(ranges: Sequence[Range]) -> list[tuple[int, int]]:
    """
    Index pairs (i, j), i < j, of overlapping ranges.
    """
    out: list[tuple[int, int]] = []
    for i in range(len(ranges)):
        for j in range(i + 1, len(ranges)):
            if ranges_overlap(ranges[i], ranges[j]):
                out.append((i, j))
    return out
