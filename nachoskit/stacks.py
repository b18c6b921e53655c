"""Last-in-first-out stacks: a bounded array stack and an unbounded list stack."""

from __future__ import annotations

import argparse
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from nachoskit.linkedlist import IntList

_DEFAULT_START = 17
_DEMO_SIZE = 10


class StackFullError(OverflowError):
    """Raised when pushing onto a stack that has no more room."""


class StackEmptyError(IndexError):
    """Raised when popping from a stack that holds nothing."""


def successor(value: Any) -> Any:
    """Return the value that follows ``value``.

    A one-character string is followed by the next character; anything
    else is followed by ``value + 1``.
    """
    if isinstance(value, str):
        if len(value) != 1:
            raise TypeError("successor of a string needs a single character")
        return chr(ord(value) + 1)
    return value + 1


class Stack(ABC):
    """Abstract LIFO stack shared by the concrete implementations."""

    @abstractmethod
    def push(self, value: Any) -> None:
        """Put ``value`` on top of the stack."""

    @abstractmethod
    def pop(self) -> Any:
        """Remove the top value and return it."""

    @abstractmethod
    def is_full(self) -> bool:
        """Return True if the stack has no more room."""

    @abstractmethod
    def is_empty(self) -> bool:
        """Return True if the stack holds nothing."""

    def self_test(self, num_to_push: int | None = None, start: Any = _DEFAULT_START) -> list[Any]:
        """Push successive values from ``start``, then pop them all, printing each step.

        With ``num_to_push`` given, exactly that many values are pushed and
        a full stack raises StackFullError; otherwise values are pushed
        until the stack is full.  Returns the popped values in order.
        """
        if num_to_push is None and not self.is_full() and isinstance(self, ListStack):
            raise ValueError("an unbounded stack needs num_to_push")
        count = start
        if num_to_push is None:
            while not self.is_full():
                print(f"pushing {count}")
                self.push(count)
                count = successor(count)
        else:
            for _ in range(num_to_push):
                if self.is_full():
                    raise StackFullError("stack is full")
                print(f"pushing {count}")
                self.push(count)
                count = successor(count)

        popped = []
        while not self.is_empty():
            value = self.pop()
            print(f"popping {value}")
            popped.append(value)
        return popped


class ArrayStack(Stack):
    """Stack with a fixed maximum capacity."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("stack size must be at least 1")
        self._size = size
        self._items: list[Any] = []

    @property
    def size(self) -> int:
        """The maximum number of values the stack can hold."""
        return self._size

    def push(self, value: Any) -> None:
        """Put ``value`` on top; raise StackFullError on overflow."""
        if self.is_full():
            raise StackFullError("stack is full")
        self._items.append(value)

    def pop(self) -> Any:
        """Remove and return the top value; raise StackEmptyError if empty."""
        if self.is_empty():
            raise StackEmptyError("pop from empty stack")
        return self._items.pop()

    def is_full(self) -> bool:
        return len(self._items) == self._size

    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ArrayStack(size={self._size}, items={self._items!r})"


class ListStack(Stack):
    """Stack of integers backed by a linked list; it never fills up."""

    def __init__(self) -> None:
        self._list = IntList()

    def push(self, value: int) -> None:
        """Put ``value`` on top of the stack."""
        self._list.prepend(value)

    def pop(self) -> int:
        """Remove and return the top value; raise StackEmptyError if empty."""
        if self.is_empty():
            raise StackEmptyError("pop from empty stack")
        return self._list.remove()

    def is_full(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return self._list.is_empty()

    def __len__(self) -> int:
        return len(self._list)

    def __repr__(self) -> str:
        return f"ListStack({list(self._list)!r})"


def _run_basic() -> None:
    ArrayStack(_DEMO_SIZE).self_test()


def _run_inherit() -> None:
    print("Testing ArrayStack")
    ArrayStack(_DEMO_SIZE).self_test(_DEMO_SIZE)
    print("Testing ListStack")
    ListStack().self_test(_DEMO_SIZE)


def _run_template() -> None:
    print("Testing Stack<int>")
    ArrayStack(_DEMO_SIZE).self_test(start=_DEFAULT_START)
    print("Testing Stack<char>")
    ArrayStack(_DEMO_SIZE).self_test(start="a")


_DEMOS = {
    "basic": _run_basic,
    "inherit": _run_inherit,
    "template": _run_template,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the stack self tests and print what they push and pop."""
    parser = argparse.ArgumentParser(description="Stack self tests.")
    parser.add_argument(
        "demo",
        nargs="?",
        choices=[*_DEMOS, "all"],
        default="all",
        help="which self test to run",
    )
    args = parser.parse_args(argv)
    selected = list(_DEMOS) if args.demo == "all" else [args.demo]
    for name in selected:
        _DEMOS[name]()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())