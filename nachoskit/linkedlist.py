"""A singly linked list of integers that grows and shrinks at its front."""

from __future__ import annotations

from collections.abc import Iterator


class _Node:
    __slots__ = ("item", "next")

    def __init__(self, item: int, next_node: _Node | None = None) -> None:
        self.item = item
        self.next = next_node


class IntList:
    """Singly linked list of integers with insertion and removal at the head."""

    def __init__(self) -> None:
        self._first: _Node | None = None
        self._last: _Node | None = None
        self._length = 0

    def prepend(self, value: int) -> None:
        """Put ``value`` at the front of the list."""
        node = _Node(value, self._first)
        if self._first is None:
            self._last = node
        self._first = node
        self._length += 1

    def remove(self) -> int:
        """Take the first value off the list and return it.

        Raises IndexError if the list is empty.
        """
        if self._first is None:
            raise IndexError("remove from empty list")
        node = self._first
        if node is self._last:
            self._first = None
            self._last = None
        else:
            self._first = node.next
        self._length -= 1
        return node.item

    def is_empty(self) -> bool:
        """Return True if the list holds no values."""
        return self._first is None

    def __iter__(self) -> Iterator[int]:
        node = self._first
        while node is not None:
            yield node.item
            node = node.next

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"IntList({list(self)!r})"