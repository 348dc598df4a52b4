"""Key normalisation for the ordered store.

Every key is reduced to a *slot token* before it touches the hash index.
Plain scalar keys (``None``, ``bool``, numbers, ``str``, ``bytes``) are
value-addressed: equal values share a slot.  Everything else is
identity-addressed: the token wraps ``id(key)``, so two distinct lists with
the same contents are two different keys, and keys need not be hashable.

The store keeps a strong reference to each key it holds, which is what keeps
an ``id()`` from being recycled while its slot is occupied.
"""

from __future__ import annotations

from typing import Any, Hashable

# ``bool`` is checked before the numeric types because it subclasses ``int``.
_NUMERIC_TYPES = (int, float, complex)

_NONE_TOKEN = ("none",)
_NAN_TOKEN = ("num", "nan")


def slot_token(key: Any) -> Hashable:
    """Return the hashable token that addresses *key*'s slot.

    >>> slot_token("a") == slot_token("a")
    True
    >>> slot_token(True) == slot_token(1)
    False
    >>> slot_token([1]) == slot_token([1])
    False
    """
    if key is None:
        return _NONE_TOKEN
    if isinstance(key, bool):
        return ("bool", key)
    if isinstance(key, _NUMERIC_TYPES):
        # NaN never equals itself; give every NaN one shared slot.
        if key != key:
            return _NAN_TOKEN
        return ("num", key)
    if isinstance(key, str):
        return ("str", key)
    if isinstance(key, bytes):
        return ("bytes", key)
    return ("ref", id(key))


def is_identity_key(key: Any) -> bool:
    """True when *key* is addressed by identity rather than by value."""
    return slot_token(key)[0] == "ref"
