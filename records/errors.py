"""Errors raised while converting between stores and ordered-records."""

from __future__ import annotations


class RecordError(Exception):
    """Base class for every conversion failure in :mod:`records`."""


class RecordKeyError(RecordError, TypeError):
    """A store key cannot become a record field under the chosen policy."""

    def __init__(self, key: object):
        super().__init__(f"key {key!r} ({type(key).__name__}) is not a string field name")
        self.key = key


class RecordFormatError(RecordError, ValueError):
    """Input is not an ordered-record, or a value cannot be written as JSON."""
