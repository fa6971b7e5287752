"""
ethrecords Fixed Collections

Read-only, fixed-size views over records owned by a Block, a Receipt or
an inbound message batch. Indexing is bounds checked in both directions:
negative indexes are rejected rather than counted from the end.
"""

from __future__ import annotations
from typing import Generic, Iterable, Iterator, Tuple, TypeVar

from ethrecords.errors import IndexOutOfBoundsError

T = TypeVar("T")


class FixedCollection(Generic[T]):
    """Immutable sequence with checked access."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()):
        self._items: Tuple[T, ...] = tuple(items)

    def size(self) -> int:
        return len(self._items)

    def get(self, index: int) -> T:
        """
        Return the element at index.

        Raises:
            IndexOutOfBoundsError: index < 0 or index >= size()
        """
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"index must be int, got {type(index).__name__}")
        if index < 0 or index >= len(self._items):
            raise IndexOutOfBoundsError(index, len(self._items))
        return self._items[index]

    def __getitem__(self, index: int) -> T:
        return self.get(index)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedCollection):
            return NotImplemented
        return type(self) is type(other) and self._items == other._items

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._items))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self._items)})"

    def to_tuple(self) -> Tuple[T, ...]:
        return self._items


class Headers(FixedCollection):
    """Uncle headers of a block."""
    __slots__ = ()


class Transactions(FixedCollection):
    """Transactions of a block."""
    __slots__ = ()


class Logs(FixedCollection):
    """Logs of a receipt."""
    __slots__ = ()


class Messages(FixedCollection):
    """Inbound whisper messages."""
    __slots__ = ()
