"""Conversion between plain Python collections and persistent ones.

Plain values are built from ``dict``, ``list``/``tuple``, ``set``/``frozenset``
and scalars. Their immutable counterparts are pyrsistent's ``PMap``,
``PVector`` and ``PSet``, plus ``PSortedSet`` for ordered unique collections.
``PList`` is accepted anywhere an ordered sequence is.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Hashable, Mapping
from enum import Enum
from typing import Any, TypeAlias

from glom import Path
from pyrsistent import PList, PMap, PSet, PVector, plist, pmap, pset, pvector

from unistore.store.errors import ConversionError, NotImmutableError, TraversalError
from unistore.util.PSortedSet import PSortedSet


Scalar: TypeAlias = None | bool | int | float | complex | str | bytes | Enum
"""Values that are already immutable and pass through conversion untouched."""

ImmutableCollection: TypeAlias = PMap | PVector | PList | PSet | PSortedSet

ImmutableValue: TypeAlias = Scalar | ImmutableCollection

PlainValue: TypeAlias = Scalar | dict[Hashable, "PlainValue"] | list["PlainValue"] | set[Any]

_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes, Enum)

# An empty plist is a distinct class that doesn't inherit from PList.
_LIST_TYPES = (PList, type(plist()))

_INDEXED_TYPES = (PVector, PSortedSet, *_LIST_TYPES)

_IMMUTABLE_TYPES = (PMap, PSet, *_INDEXED_TYPES)


def _is_immutable(value: Any) -> bool:
    return isinstance(value, _IMMUTABLE_TYPES)


def _canonical_key(key: Any) -> Hashable:
    """Normalize a mapping key: text is interned, enum members are kept."""
    if isinstance(key, Enum):
        return key
    if isinstance(key, str):
        return sys.intern(str(key))
    raise ConversionError(
        f"{type(key).__name__} keys cannot be converted to a canonical key"
    )


def _convert_items(items: Any, strict: bool) -> tuple[list[Any], bool]:
    """Convert each item, reporting whether any of them changed identity."""
    converted = [_from_plain(item, strict) for item in items]
    changed = any(new is not old for new, old in zip(converted, items))
    return converted, changed


def _refreeze(value: Any, strict: bool) -> Any:
    """Deep-freeze the members of an already persistent collection.

    The collection is only rebuilt when one of its members had to be
    converted; otherwise the same instance is returned.
    """
    if isinstance(value, PMap):
        evolver = value.evolver()
        for key, item in value.items():
            converted = _from_plain(item, strict)
            if converted is not item:
                evolver[key] = converted
        return evolver.persistent()

    items = list(value)
    converted, changed = _convert_items(items, strict)
    if not changed:
        return value
    if isinstance(value, PVector):
        return pvector(converted)
    if isinstance(value, _LIST_TYPES):
        return plist(converted)
    if isinstance(value, PSortedSet):
        return PSortedSet(converted)
    return pset(converted)


def _from_plain(value: Any, strict: bool) -> Any:
    if isinstance(value, _SCALAR_TYPES):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if _is_immutable(value):
        return _refreeze(value, strict)
    if isinstance(value, Mapping):
        return pmap(
            {
                _canonical_key(key): _from_plain(item, strict)
                for key, item in value.items()
            }
        )
    if isinstance(value, (list, tuple)):
        return pvector(_from_plain(item, strict) for item in value)
    if isinstance(value, (set, frozenset)):
        return pset(_from_plain(item, strict) for item in value)
    if strict:
        raise ConversionError(f"{type(value).__name__} is not a recognized plain type")
    return value


def _to_hashable_plain(value: Any) -> Any:
    """Plain form for members of a set, which must stay hashable."""
    if isinstance(value, PMap):
        return value
    if isinstance(value, PSet):
        return frozenset(_to_hashable_plain(item) for item in value)
    if isinstance(value, _INDEXED_TYPES):
        return tuple(_to_hashable_plain(item) for item in value)
    return value


def _to_plain(value: Any) -> Any:
    if isinstance(value, PMap):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, PSet):
        return {_to_hashable_plain(item) for item in value}
    if isinstance(value, _INDEXED_TYPES):
        return [_to_plain(item) for item in value]
    return value


_INDEX_TEXT = re.compile(r"-?[0-9]+")


def _index_segment(segment: Any) -> Any:
    """Turn a numeric text segment into an index; leave anything else alone."""
    if isinstance(segment, str) and _INDEX_TEXT.fullmatch(segment):
        return int(segment)
    return segment


def _lookup_keyed(mapping: PMap, key: Any) -> Any:
    try:
        return mapping.get(key)
    except TypeError:
        # Unhashable keys can never be present.
        return None


def _lookup_indexed(sequence: Any, index: Any) -> Any:
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    if isinstance(sequence, _LIST_TYPES):
        # plists are linked lists and don't support indexing.
        sequence = pvector(sequence)
    try:
        return sequence[index]
    except IndexError:
        return None


def _dig_object(
    obj: Any, keys: tuple[Any, ...], coerce: Callable[[Any], Any] | None = None
) -> Any:
    key, rest = keys[0], keys[1:]

    if isinstance(obj, PMap):
        found = _lookup_keyed(obj, key)
    elif isinstance(obj, _INDEXED_TYPES):
        found = _lookup_indexed(obj, coerce(key) if coerce else key)
    else:
        raise TraversalError(f"{type(obj).__name__} does not have a path-traversal operation")

    if not rest or found is None:
        return found
    return _dig_object(found, rest, coerce)


def _check_root(immutable: Any) -> None:
    if not _is_immutable(immutable):
        raise NotImmutableError("argument must be an immutable data structure")


class Immutable:
    """Typed helpers for moving between plain and persistent data."""

    ImmutableValue = ImmutableValue
    PlainValue = PlainValue

    @staticmethod
    def from_plain(value: Any, strict: bool = False) -> Any:
        """Recursively convert a plain value to its immutable form.

        Mappings become PMaps with text keys interned, lists and tuples become
        PVectors, sets become PSets and bytearrays become bytes. Values that
        are already persistent collections come back as-is unless one of their
        members still needs converting.

        Args:
            value: The value to convert
            strict: Reject values that are neither scalars nor collections
                instead of passing them through

        Returns:
            The immutable representation of ``value``

        Raises:
            ConversionError: If a mapping key isn't text or an enum member, or
                if ``strict`` is set and an unrecognized type is found
        """
        return _from_plain(value, strict)

    @staticmethod
    def to_plain(value: Any) -> Any:
        """Recursively convert an immutable value back to plain collections.

        PMaps become dicts, PVectors, PLists and PSortedSets become lists and
        PSets become sets. Members of a set keep a hashable form: nested
        sequences become tuples, nested sets become frozensets and nested maps
        stay PMaps.

        Args:
            value: The immutable value to convert

        Returns:
            The plain representation of ``value``
        """
        return _to_plain(value)

    @staticmethod
    def is_immutable(value: Any) -> bool:
        """Check if a value is one of the persistent collection kinds."""
        return _is_immutable(value)

    @staticmethod
    def dig(immutable: Any, *path: Any) -> Any:
        """Look up a value nested inside an immutable collection.

        Each path segment is a key for maps and an index for sequences and
        sorted sets. A missing key or out-of-range index anywhere along the
        path returns None instead of raising.

        Args:
            immutable: The persistent collection to start from
            *path: Keys and indices to follow

        Returns:
            The value at the end of the path, or None if any step is missing

        Raises:
            NotImmutableError: If ``immutable`` isn't a persistent collection
            TraversalError: If the path continues through a scalar or a set
        """
        _check_root(immutable)
        if not path:
            return immutable
        return _dig_object(immutable, path)

    @staticmethod
    def select(immutable: Any, text_path: str) -> Any:
        """Like ``dig``, with the path given as dotted text.

        Example:
            Immutable.select(state, "weapons.polearms.1")

        Numeric segments are used as indices when the value being traversed
        is a sequence or sorted set, and as text keys when it is a map.
        """
        _check_root(immutable)
        if not text_path:
            return immutable
        segments = tuple(str(segment) for segment in Path.from_text(text_path).values())
        return _dig_object(immutable, segments, _index_segment)


from_plain = Immutable.from_plain
to_plain = Immutable.to_plain
is_immutable = Immutable.is_immutable
dig = Immutable.dig
select = Immutable.select
