"""Conversion between an :class:`OrderedStore` and an ordered-record.

An *ordered-record* is a plain ``dict`` whose field names are strings and
whose field order is significant.  Its JSON text form is a JSON object
written and read in field order.

Store keys that are not strings need a policy (:class:`KeyPolicy`):

* ``COERCE`` – use ``str(key)`` as the field name.  When two keys coerce to
  the same name the later value wins and the field keeps its first position.
* ``SKIP``   – leave the entry out.
* ``REJECT`` – raise :class:`RecordKeyError`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from records.errors import RecordFormatError, RecordKeyError
from store.ordered import OrderedStore

logger = logging.getLogger(__name__)


class KeyPolicy(str, Enum):
    COERCE = "coerce"
    SKIP = "skip"
    REJECT = "reject"


def to_record(
    store: OrderedStore,
    key_policy: KeyPolicy | str = KeyPolicy.COERCE,
) -> dict[str, Any]:
    """Return *store* as an ordered-record, applying *key_policy* to non-str keys."""
    policy = KeyPolicy(key_policy)
    record: dict[str, Any] = {}
    for key, value in store.entries():
        if isinstance(key, str):
            field = key
        elif policy is KeyPolicy.REJECT:
            raise RecordKeyError(key)
        elif policy is KeyPolicy.SKIP:
            logger.debug("Skipping non-string key %r", key)
            continue
        else:
            field = str(key)
        # Only possible when a coerced key is involved; str keys are unique.
        if field in record:
            logger.warning(
                "Key %r maps to existing field %r; keeping the later value",
                key,
                field,
            )
        record[field] = value
    return record


def from_record(
    record: Mapping[str, Any],
    store_cls: type[OrderedStore] = OrderedStore,
) -> OrderedStore:
    """Build a store whose entries are *record*'s fields, in field order."""
    if not isinstance(record, Mapping):
        raise RecordFormatError(
            f"expected a mapping, got {type(record).__name__}"
        )
    return store_cls(record.items())


def dumps_record(
    store: OrderedStore,
    key_policy: KeyPolicy | str = KeyPolicy.COERCE,
    indent: int | None = None,
) -> str:
    """Serialise *store* as JSON object text, preserving entry order."""
    record = to_record(store, key_policy)
    try:
        return json.dumps(record, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise RecordFormatError(f"store is not JSON-serialisable: {exc}") from exc


def loads_record(text: str) -> OrderedStore:
    """Parse JSON object text into a store.

    Duplicate field names keep the position of their first occurrence and
    the value of their last.
    """
    try:
        record = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordFormatError(f"invalid JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise RecordFormatError(
            f"expected a JSON object, got {type(record).__name__}"
        )
    return from_record(record)
