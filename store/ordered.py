"""Insertion-ordered key-value store with identity-addressed object keys.

``OrderedStore`` behaves like a ``dict`` with two differences in key
handling (see :mod:`store.slots`): container and object keys are matched by
identity, and ``True``/``1`` are different keys.  Iteration order is first
insertion; overwriting a key keeps its place, deleting and re-adding moves
it to the end.

The store is not thread-safe.  Callers that share one across threads must
serialise access themselves.
"""

from __future__ import annotations

import logging
import reprlib
import weakref
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any, Callable, Hashable, Iterator

from store.slots import slot_token
from store.views import (
    Cursor,
    StoreEntriesView,
    StoreKeysView,
    StoreValuesView,
    iter_entries,
)

logger = logging.getLogger(__name__)

# Compact the order list once it holds more tombstones than this and they
# outnumber the live entries.
_COMPACT_MIN_TOMBSTONES = 16


class _Missing:
    """Type of the :data:`MISSING` sentinel."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"


#: Returned by :meth:`OrderedStore.get` for absent keys.  Never equal to a
#: stored value, ``None`` included.
MISSING: Any = _Missing()


class _Entry:
    __slots__ = ("token", "key", "value")

    def __init__(self, token: Hashable, key: Any, value: Any):
        self.token = token
        self.key = key
        self.value = value


class OrderedStore(MutableMapping):
    """Ordered key-value store.

    Usage
    -----
    >>> s = OrderedStore()
    >>> s.set("a", 1).set("b", 2).set("a", 3)
    OrderedStore([('a', 3), ('b', 2)])
    >>> s.size
    2
    >>> s.get("zzz") is MISSING
    True
    >>> k = [1, 2]
    >>> _ = s.set(k, "list key")
    >>> s.has(k), s.has([1, 2])
    (True, False)

    Parameters
    ----------
    entries:
        Optional initial contents: a mapping, or an iterable of
        ``(key, value)`` pairs.  Later duplicates overwrite earlier values
        without moving them.
    """

    def __init__(self, entries: Mapping[Any, Any] | Iterable[Any] | None = None):
        self._index: dict[Hashable, int] = {}
        self._order: list[_Entry | None] = []
        self._tombstones = 0
        self._cursors: weakref.WeakSet[Cursor] = weakref.WeakSet()
        if entries is not None:
            self._load(entries)

    def _load(self, entries: Mapping[Any, Any] | Iterable[Any]) -> None:
        if isinstance(entries, Mapping):
            entries = entries.items()
        for pos, pair in enumerate(entries):
            try:
                key, value = pair
            except TypeError:
                raise TypeError(
                    f"store entry #{pos} ({pair!r}) is not a key/value pair"
                ) from None
            except ValueError:
                raise ValueError(
                    f"store entry #{pos} ({pair!r}) must have exactly 2 items"
                ) from None
            self.set(key, value)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> OrderedStore:
        """Build a store from an ordered-record (see :mod:`records`)."""
        # deferred: records imports store
        from records.convert import from_record

        return from_record(record, store_cls=cls)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def set(self, key: Any, value: Any) -> OrderedStore:
        """Store *value* under *key* and return the store.

        A new key goes to the end of the order; an existing key keeps its
        position and only its value changes.
        """
        token = slot_token(key)
        pos = self._index.get(token)
        if pos is not None:
            self._order[pos].value = value
        else:
            self._index[token] = len(self._order)
            self._order.append(_Entry(token, key, value))
        return self

    def _lookup(self, key: Any) -> _Entry | None:
        pos = self._index.get(slot_token(key))
        return None if pos is None else self._order[pos]

    def get(self, key: Any, default: Any = MISSING) -> Any:
        """Return the value under *key*, or *default* (``MISSING``) if absent."""
        entry = self._lookup(key)
        return default if entry is None else entry.value

    def has(self, key: Any) -> bool:
        """True when *key* has an entry."""
        return slot_token(key) in self._index

    def delete(self, key: Any) -> bool:
        """Remove *key*'s entry.  Returns whether anything was removed."""
        pos = self._index.pop(slot_token(key), None)
        if pos is None:
            return False
        self._order[pos] = None
        self._tombstones += 1
        if (
            self._tombstones > _COMPACT_MIN_TOMBSTONES
            and self._tombstones * 2 > len(self._order)
        ):
            self._compact()
        return True

    def clear(self) -> None:
        """Remove every entry.  Open cursors continue with later additions."""
        logger.debug("Clearing store of %d entries", len(self._index))
        self._index.clear()
        self._order = []
        self._tombstones = 0
        for cursor in list(self._cursors):
            cursor.rebase(0)

    @property
    def size(self) -> int:
        """Number of entries currently held."""
        return len(self._index)

    def keys(self) -> StoreKeysView:
        """Live view of keys in insertion order."""
        return StoreKeysView(self)

    def values(self) -> StoreValuesView:
        """Live view of values in insertion order."""
        return StoreValuesView(self)

    def entries(self) -> StoreEntriesView:
        """Live view of ``(key, value)`` pairs in insertion order."""
        return StoreEntriesView(self)

    items = entries

    def for_each(self, visitor: Callable[[Any, Any], Any]) -> None:
        """Call ``visitor(value, key)`` for every entry, oldest first.

        Entries the visitor adds are visited too; entries it deletes before
        they are reached are not.
        """
        for entry in iter_entries(self):
            visitor(entry.value, entry.key)

    # ------------------------------------------------------------------
    # Order-list maintenance
    # ------------------------------------------------------------------

    def _compact(self) -> None:
        """Drop tombstones from the order list and re-base live cursors."""
        old = self._order
        live_before: list[int] = []
        new: list[_Entry | None] = []
        for entry in old:
            live_before.append(len(new))
            if entry is not None:
                self._index[entry.token] = len(new)
                new.append(entry)
        live_before.append(len(new))

        for cursor in list(self._cursors):
            cursor.rebase(live_before[min(cursor._pos, len(old))])

        logger.debug(
            "Compacted order list: %d slots -> %d entries", len(old), len(new)
        )
        self._order = new
        self._tombstones = 0

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: Any) -> Any:
        entry = self._lookup(key)
        if entry is None:
            raise KeyError(key)
        return entry.value

    def __setitem__(self, key: Any, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: Any) -> None:
        if not self.delete(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __reversed__(self) -> Iterator[Any]:
        return reversed([entry.key for entry in self._order if entry is not None])

    def __len__(self) -> int:
        return len(self._index)

    def popitem(self) -> tuple[Any, Any]:
        """Remove and return the newest ``(key, value)`` pair."""
        for entry in reversed(self._order):
            if entry is not None:
                self.delete(entry.key)
                return entry.key, entry.value
        raise KeyError("popitem(): store is empty")

    def copy(self) -> OrderedStore:
        """Shallow copy.  Object keys are shared, so they stay the same keys."""
        return type(self)(self.entries())

    def __reduce__(self) -> tuple[Any, ...]:
        # Slot tokens hold ids, so copies and pickles rebuild them from pairs.
        return type(self), (list(self.entries()),)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        if len(other) != len(self):
            return False
        for key, value in other.items():
            mine = self._lookup(key)
            if mine is None or not (mine.value is value or mine.value == value):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    @reprlib.recursive_repr()
    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.entries())!r})"
