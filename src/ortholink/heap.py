"""
Binary min-heap keyed by a score function.

Unlike :mod:`heapq`, this heap keeps track of where every element sits so an
element whose score has dropped can be moved up in place (decrease-key).
Elements must therefore be hashable and unique within the heap.
"""

from typing import Callable, Dict, Generic, Hashable, List, TypeVar

T = TypeVar("T", bound=Hashable)


class BinaryHeap(Generic[T]):
    """
    Min-heap ordered by ``score_function(element)``.

    The score of an element is read every time it is compared, so callers
    that lower an element's score must call :meth:`bubble_up_element`
    afterwards to restore the heap order.

    Example:
        >>> scores = {"a": 3, "b": 1}
        >>> heap = BinaryHeap(lambda e: scores[e])
        >>> heap.push("a")
        >>> heap.push("b")
        >>> heap.pop()
        'b'
    """

    def __init__(self, score_function: Callable[[T], float]):
        self._score = score_function
        self._content: List[T] = []
        self._positions: Dict[T, int] = {}

    def __len__(self) -> int:
        return len(self._content)

    def __contains__(self, element: object) -> bool:
        return element in self._positions

    def size(self) -> int:
        return len(self._content)

    def push(self, element: T) -> None:
        """Add an element and restore heap order."""
        if element in self._positions:
            raise ValueError(f"Element {element!r} is already in the heap")
        self._content.append(element)
        self._positions[element] = len(self._content) - 1
        self._sift_up(len(self._content) - 1)

    def peek(self) -> T:
        """Return the lowest scoring element without removing it."""
        if not self._content:
            raise IndexError("peek from an empty heap")
        return self._content[0]

    def pop(self) -> T:
        """Remove and return the lowest scoring element."""
        if not self._content:
            raise IndexError("pop from an empty heap")
        result = self._content[0]
        end = self._content.pop()
        del self._positions[result]
        if self._content:
            # Put the last element at the root and let it sift down
            self._content[0] = end
            self._positions[end] = 0
            self._sift_down(0)
        return result

    def bubble_up_element(self, element: T) -> None:
        """Move ``element`` towards the root after its score decreased."""
        try:
            index = self._positions[element]
        except KeyError:
            raise ValueError(f"Element {element!r} is not in the heap") from None
        self._sift_up(index)

    def _swap(self, i: int, j: int) -> None:
        content = self._content
        content[i], content[j] = content[j], content[i]
        self._positions[content[i]] = i
        self._positions[content[j]] = j

    def _sift_up(self, n: int) -> None:
        # Move the element at n towards the root while it beats its parent
        score = self._score(self._content[n])
        while n > 0:
            parent = (n - 1) >> 1
            if score < self._score(self._content[parent]):
                self._swap(n, parent)
                n = parent
            else:
                break

    def _sift_down(self, n: int) -> None:
        # Move the element at n towards the leaves while a child beats it
        length = len(self._content)
        score = self._score(self._content[n])
        while True:
            left = 2 * n + 1
            right = left + 1
            smallest = n
            smallest_score = score
            if left < length:
                left_score = self._score(self._content[left])
                if left_score < smallest_score:
                    smallest, smallest_score = left, left_score
            if right < length:
                if self._score(self._content[right]) < smallest_score:
                    smallest = right
            if smallest == n:
                break
            self._swap(n, smallest)
            n = smallest
