from store.ordered import MISSING, OrderedStore
from store.slots import is_identity_key, slot_token
from store.views import StoreEntriesView, StoreKeysView, StoreValuesView

__all__ = [
    "MISSING",
    "OrderedStore",
    "StoreEntriesView",
    "StoreKeysView",
    "StoreValuesView",
    "is_identity_key",
    "slot_token",
]
