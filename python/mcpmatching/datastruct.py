"""
Data structures for the matching algorithm.
"""

from __future__ import annotations

import heapq


class PriorityQueue:
    """Min-priority queue of integer items ordered by numeric key.

    Items with equal keys are removed in order of increasing item value.
    """

    def __init__(self) -> None:
        """Initialize an empty queue."""
        self.heap: list[tuple[float, int]] = []

    def __len__(self) -> int:
        return len(self.heap)

    def insert(self, key: float, item: int) -> None:
        """Insert "item" with priority "key".

        This function takes time O(log(n)).
        """
        heapq.heappush(self.heap, (key, item))

    def delete_min(self) -> int:
        """Remove and return the item with minimum key.

        This function takes time O(log(n)).

        Raises:
            IndexError: If the queue is empty.
        """
        (_key, item) = heapq.heappop(self.heap)
        return item
