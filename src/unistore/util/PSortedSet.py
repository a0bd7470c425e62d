"""Persistent sorted set.

pyrsistent ships maps, vectors, sets and lists but no ordered unique
collection, so this fills the gap on top of a PVector holding the members in
ascending order. Updates return new instances; when an update changes nothing
the same instance comes back.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, overload

from pyrsistent import PVector, pvector


class PSortedSet(Sequence[Any]):
    """Immutable, hashable set whose members are kept in ascending order.

    Members must be mutually comparable. Indexing and slicing follow the
    sorted order, which is what makes the collection traversable by index.
    """

    __slots__ = ("_items", "_hash")

    _items: PVector[Any]
    _hash: int | None

    def __init__(self, iterable: Iterable[Any] = ()) -> None:
        self._items = pvector(sorted(set(iterable)))
        self._hash = None

    @classmethod
    def _from_sorted(cls, items: PVector[Any]) -> PSortedSet:
        instance = cls.__new__(cls)
        instance._items = items
        instance._hash = None
        return instance

    def _position(self, item: Any) -> tuple[int, bool]:
        index = bisect_left(self._items, item)
        found = index < len(self._items) and self._items[index] == item
        return index, found

    @overload
    def __getitem__(self, index: int) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> PSortedSet: ...

    def __getitem__(self, index: int | slice) -> Any:
        if isinstance(index, slice):
            return self._from_sorted(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __contains__(self, item: object) -> bool:
        try:
            return self._position(item)[1]
        except TypeError:
            # Not comparable with the members, so it can't be one of them.
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PSortedSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(("PSortedSet", tuple(self._items)))
        return self._hash

    def __repr__(self) -> str:
        return f"psortedset({list(self._items)!r})"

    def add(self, item: Any) -> PSortedSet:
        """Return a sorted set that also contains ``item``."""
        index, found = self._position(item)
        if found:
            return self
        head = self._items[:index].append(item)
        return self._from_sorted(head.extend(self._items[index:]))

    def discard(self, item: Any) -> PSortedSet:
        """Return a sorted set without ``item``; unchanged if it was absent."""
        index, found = self._position(item)
        if not found:
            return self
        return self._from_sorted(self._items.delete(index))

    def remove(self, item: Any) -> PSortedSet:
        """Return a sorted set without ``item``.

        Raises:
            KeyError: If ``item`` is not a member.
        """
        result = self.discard(item)
        if result is self:
            raise KeyError(item)
        return result

    def update(self, iterable: Iterable[Any]) -> PSortedSet:
        """Return a sorted set that also contains every item of ``iterable``."""
        result = self
        for item in iterable:
            result = result.add(item)
        return result


def psortedset(*items: Any) -> PSortedSet:
    """Build a PSortedSet from positional members."""
    return PSortedSet(items)
