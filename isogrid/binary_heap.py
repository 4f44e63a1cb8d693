"""
Binary min-heap keyed by a caller-supplied score function.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List


class BinaryHeap:
    """
    Min-heap used as the open set of the A* search.

    Elements are ordered by score_function(element). The heap keeps the
    index of every queued element so an element whose score changed can be
    re-sifted in O(log n) with rescore_element().
    """

    def __init__(self, score_function: Callable[[Any], float]) -> None:
        self.content: List[Any] = []
        self.score_function = score_function
        self._index: Dict[int, int] = {}

    def push(self, element: Any) -> None:
        """Add an element and let it bubble up to its place."""
        self.content.append(element)
        self._index[id(element)] = len(self.content) - 1
        self._sink_down(len(self.content) - 1)

    def pop(self) -> Any:
        """Remove and return the element with the lowest score."""
        result = self.content[0]
        del self._index[id(result)]
        end = self.content.pop()
        # If there are any elements left, put the end element at the
        # start and let it sift up.
        if self.content:
            self.content[0] = end
            self._index[id(end)] = 0
            self._bubble_up(0)
        return result

    def size(self) -> int:
        return len(self.content)

    def __len__(self) -> int:
        return len(self.content)

    def rescore_element(self, element: Any) -> None:
        """Re-sift an element whose score decreased after it was queued."""
        self._sink_down(self._index[id(element)])

    def _swap(self, i: int, j: int) -> None:
        content = self.content
        content[i], content[j] = content[j], content[i]
        self._index[id(content[i])] = i
        self._index[id(content[j])] = j

    def _sink_down(self, n: int) -> None:
        # Move the element at n toward the root while its parent scores higher
        element = self.content[n]
        score = self.score_function(element)
        while n > 0:
            parent_n = ((n + 1) >> 1) - 1
            parent = self.content[parent_n]
            if score < self.score_function(parent):
                self._swap(n, parent_n)
                n = parent_n
            else:
                break

    def _bubble_up(self, n: int) -> None:
        # Move the element at n toward the leaves while a child scores lower
        length = len(self.content)
        element = self.content[n]
        elem_score = self.score_function(element)
        while True:
            child2_n = (n + 1) << 1
            child1_n = child2_n - 1
            swap = None
            child1_score = None
            if child1_n < length:
                child1_score = self.score_function(self.content[child1_n])
                if child1_score < elem_score:
                    swap = child1_n
            if child2_n < length:
                child2_score = self.score_function(self.content[child2_n])
                if child2_score < (elem_score if swap is None else child1_score):
                    swap = child2_n
            if swap is None:
                break
            self._swap(n, swap)
            n = swap
