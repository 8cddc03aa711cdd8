"""Representative-path selection shared by both simulators.

Given ``n`` outcomes already sorted by a simulator-specific key, the
representative for percentile ``p`` sits at ``floor(n * p / 100)``,
clamped to ``[0, n - 1]``.  Accumulation sorts by months to success
(ascending, fewer is better); decumulation sorts by final balance
(descending, more is better).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

T = TypeVar("T")

BEST = 10
LUCKY = 30
MEDIAN = 50
UNLUCKY = 70
WORST = 90


def percentile_index(count: int, percent: int) -> int:
    """Index of the ``percent`` representative in a sorted list of ``count`` items.

    Integer arithmetic keeps ``floor`` exact.  Returns 0 for an empty list;
    callers must check emptiness before indexing.
    """
    if count <= 0:
        return 0
    return max(0, min(count * percent // 100, count - 1))


def pick(sorted_items: Sequence[T], percent: int) -> Optional[T]:
    if not sorted_items:
        return None
    return sorted_items[percentile_index(len(sorted_items), percent)]


@dataclass(frozen=True)
class RepresentativePaths(Generic[T]):
    """Optimistic, median and pessimistic trials for charting."""

    best: T
    median: T
    worst: T

    def as_dict(self):
        return {"best": self.best, "median": self.median, "worst": self.worst}
