"""A doubly linked list of items ordered by integer keys."""

from __future__ import annotations

import argparse
import random
from collections.abc import Iterator, Sequence
from typing import Any

_FIRST_KEY = 10


class _Element:
    __slots__ = ("key", "item", "prev", "next")

    def __init__(self, item: Any, key: int) -> None:
        self.key = key
        self.item = item
        self.prev: _Element | None = None
        self.next: _Element | None = None


class DLList:
    """Doubly linked list whose elements carry an integer sort key."""

    def __init__(self) -> None:
        self._first: _Element | None = None
        self._last: _Element | None = None
        self._length = 0

    def _link_first(self, element: _Element) -> None:
        element.next = self._first
        if self._first is None:
            self._last = element
        else:
            self._first.prev = element
        self._first = element
        self._length += 1

    def _link_last(self, element: _Element) -> None:
        element.prev = self._last
        if self._last is None:
            self._first = element
        else:
            self._last.next = element
        self._last = element
        self._length += 1

    def _unlink(self, element: _Element) -> None:
        if element.prev is None:
            self._first = element.next
        else:
            element.prev.next = element.next
        if element.next is None:
            self._last = element.prev
        else:
            element.next.prev = element.prev
        element.prev = element.next = None
        self._length -= 1

    def prepend(self, item: Any) -> None:
        """Add ``item`` at the head with key one less than the smallest key."""
        key = _FIRST_KEY if self._first is None else self._first.key - 1
        self._link_first(_Element(item, key))

    def append(self, item: Any) -> None:
        """Add ``item`` at the tail with key one more than the largest key."""
        key = _FIRST_KEY if self._last is None else self._last.key + 1
        self._link_last(_Element(item, key))

    def remove(self) -> tuple[int, Any]:
        """Remove the head element and return its ``(key, item)``.

        Raises IndexError if the list is empty.
        """
        if self._first is None:
            raise IndexError("remove from empty list")
        element = self._first
        self._unlink(element)
        return element.key, element.item

    def is_empty(self) -> bool:
        """Return True if the list has no elements."""
        return self._first is None

    def sorted_insert(self, item: Any, sort_key: int) -> None:
        """Insert ``item`` before the first element whose key is not smaller."""
        element = _Element(item, sort_key)
        cursor = self._first
        while cursor is not None and cursor.key < sort_key:
            cursor = cursor.next
        if cursor is None:
            self._link_last(element)
        elif cursor.prev is None:
            self._link_first(element)
        else:
            element.prev = cursor.prev
            element.next = cursor
            cursor.prev.next = element
            cursor.prev = element
            self._length += 1

    def sorted_remove(self, sort_key: int) -> Any:
        """Remove the first element with key ``sort_key`` and return its item.

        Returns None if no element has that key.
        """
        cursor = self._first
        while cursor is not None and cursor.key != sort_key:
            cursor = cursor.next
        if cursor is None:
            return None
        self._unlink(cursor)
        return cursor.item

    def keys(self) -> list[int]:
        """Return the keys from head to tail."""
        return [key for key, _ in self]

    def show(self) -> None:
        """Print the keys of the list from head to tail."""
        body = "".join(f"{key} " for key in self.keys())
        print(f"\n***show list***\n{body}\n\n", end="")

    def __iter__(self) -> Iterator[tuple[int, Any]]:
        element = self._first
        while element is not None:
            yield element.key, element.item
            element = element.next

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"DLList({list(self)!r})"


def insert_random(dllist: DLList, count: int, rng: random.Random) -> list[int]:
    """Insert ``count`` random keys below ``10 * count``, printing each one.

    Returns the keys in the order they were generated.
    """
    generated = []
    for _ in range(count):
        key = rng.randrange(10 * count)
        print(key)
        dllist.sorted_insert(None, key)
        generated.append(key)
    return generated


def remove_first(dllist: DLList, count: int) -> list[int]:
    """Remove up to ``count`` elements from the head, printing their keys.

    Returns the removed keys.
    """
    print(f"Remove the first {count} elems in the list:")
    removed = []
    while not dllist.is_empty() and len(removed) < count:
        key, _ = dllist.remove()
        print(f"{key} ", end="")
        removed.append(key)
    print()
    return removed


def main(argv: Sequence[str] | None = None) -> int:
    """Exercise a DLList with random keys and print the results."""
    parser = argparse.ArgumentParser(description="Sorted doubly linked list demo.")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args(argv)

    print("test iostream")
    print("this is the main test!")
    dllist = DLList()
    print("empty list" if dllist.is_empty() else "not empty")
    insert_random(dllist, 10, random.Random(args.seed))
    dllist.show()
    remove_first(dllist, 5)
    dllist.show()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())