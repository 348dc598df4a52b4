"""Live views over an :class:`~store.ordered.OrderedStore`.

Views are lazy and restartable: each ``iter(view)`` opens a fresh cursor at
the oldest entry.  A cursor walks the store's order list as it is *now*, so
mutation during a traversal is well defined:

* entries deleted before the cursor reaches them are skipped;
* entries appended before the cursor runs out are visited;
* an entry updated in place is seen with its value at the time it is reached;
* after ``clear()`` the cursor carries on with whatever is added next;
* an exhausted cursor stays exhausted.
"""

from __future__ import annotations

from collections.abc import ItemsView, KeysView, ValuesView
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from store.ordered import OrderedStore, _Entry


class Cursor:
    """Position of one traversal in a store's order list.

    The store re-bases every live cursor when it compacts its order list, so
    ``_pos`` always indexes the list the store currently holds.
    """

    __slots__ = ("_store", "_pos", "_done", "__weakref__")

    def __init__(self, store: OrderedStore):
        self._store = store
        self._pos = 0
        self._done = False
        store._cursors.add(self)

    def advance(self) -> _Entry | None:
        """Return the next live entry, or ``None`` once the walk is over."""
        if self._done:
            return None
        order = self._store._order
        while self._pos < len(order):
            entry = order[self._pos]
            self._pos += 1
            if entry is not None:
                return entry
        self._done = True
        self._store._cursors.discard(self)
        return None

    def rebase(self, pos: int) -> None:
        self._pos = pos


def iter_entries(store: OrderedStore) -> Iterator[_Entry]:
    """Yield the store's live entry records in insertion order."""
    cursor = Cursor(store)
    while True:
        entry = cursor.advance()
        if entry is None:
            return
        yield entry


class StoreKeysView(KeysView):
    """Keys in insertion order.  Membership follows the store's slot rules."""

    _mapping: OrderedStore

    def __iter__(self) -> Iterator[Any]:
        for entry in iter_entries(self._mapping):
            yield entry.key


class StoreValuesView(ValuesView):
    _mapping: OrderedStore

    def __iter__(self) -> Iterator[Any]:
        for entry in iter_entries(self._mapping):
            yield entry.value


class StoreEntriesView(ItemsView):
    """``(key, value)`` pairs in insertion order."""

    _mapping: OrderedStore

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        for entry in iter_entries(self._mapping):
            yield (entry.key, entry.value)
