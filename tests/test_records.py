"""Tests for store <-> ordered-record conversion."""

from __future__ import annotations

import json
import unittest

from records import (
    KeyPolicy,
    RecordError,
    RecordFormatError,
    RecordKeyError,
    dumps_record,
    from_record,
    loads_record,
    to_record,
)
from store import OrderedStore


# ---------------------------------------------------------------------------
# to_record / from_record
# ---------------------------------------------------------------------------

class TestToRecord(unittest.TestCase):
    def test_string_keys_keep_order(self):
        s = OrderedStore([("b", 2), ("a", 1), ("c", [3])])
        record = to_record(s)
        self.assertIsInstance(record, dict)
        self.assertEqual(list(record.items()), [("b", 2), ("a", 1), ("c", [3])])

    def test_coerce_is_default(self):
        s = OrderedStore([(1, "one"), (None, "none")])
        self.assertEqual(to_record(s), {"1": "one", "None": "none"})

    def test_coerce_collision_keeps_first_position_last_value(self):
        s = OrderedStore([(1, "int"), ("x", 0), ("1", "str")])
        with self.assertLogs("records.convert", level="WARNING") as logs:
            record = to_record(s, KeyPolicy.COERCE)
        self.assertEqual(list(record.items()), [("1", "str"), ("x", 0)])
        self.assertIn("maps to existing field", logs.output[0])

    def test_skip_drops_non_string_keys(self):
        s = OrderedStore([("a", 1), (2, "two"), (object(), "obj"), ("b", 3)])
        self.assertEqual(list(to_record(s, KeyPolicy.SKIP)), ["a", "b"])

    def test_reject_raises(self):
        key = ["not", "a", "name"]
        s = OrderedStore([("a", 1), (key, 2)])
        with self.assertRaises(RecordKeyError) as ctx:
            to_record(s, "reject")
        self.assertIs(ctx.exception.key, key)
        self.assertIsInstance(ctx.exception, TypeError)
        self.assertIsInstance(ctx.exception, RecordError)

    def test_reject_accepts_all_string_store(self):
        s = OrderedStore([("a", 1)])
        self.assertEqual(to_record(s, KeyPolicy.REJECT), {"a": 1})

    def test_unknown_policy_name(self):
        with self.assertRaises(ValueError):
            to_record(OrderedStore(), "ignore")


class TestFromRecord(unittest.TestCase):
    def test_field_order_becomes_entry_order(self):
        s = from_record({"z": 1, "y": 2})
        self.assertEqual(list(s.entries()), [("z", 1), ("y", 2)])

    def test_non_mapping_rejected(self):
        with self.assertRaises(RecordFormatError):
            from_record([("a", 1)])

    def test_classmethod_uses_subclass(self):
        class Tagged(OrderedStore):
            pass

        s = Tagged.from_record({"a": 1})
        self.assertIsInstance(s, Tagged)
        self.assertEqual(s.get("a"), 1)

    def test_round_trip_preserves_order_and_pairs(self):
        original = OrderedStore()
        original.set("a", 1).set("b", {"nested": True}).set("a", 3).set("c", None)
        original.delete("b")
        original.set("b", 2)
        restored = from_record(to_record(original))
        self.assertEqual(list(restored.entries()), list(original.entries()))
        self.assertEqual(restored, original)


# ---------------------------------------------------------------------------
# JSON text
# ---------------------------------------------------------------------------

class TestJsonRecord(unittest.TestCase):
    def test_dumps_preserves_order(self):
        s = OrderedStore([("b", 2), ("a", 1)])
        self.assertEqual(dumps_record(s), '{"b": 2, "a": 1}')

    def test_dumps_indent_and_unicode(self):
        s = OrderedStore([("clé", "été")])
        text = dumps_record(s, indent=2)
        self.assertIn("\n  ", text)
        self.assertIn("été", text)

    def test_dumps_non_serialisable_value(self):
        s = OrderedStore([("a", object())])
        with self.assertRaises(RecordFormatError):
            dumps_record(s)

    def test_dumps_applies_key_policy(self):
        s = OrderedStore([("a", 1), (2, "two")])
        self.assertEqual(json.loads(dumps_record(s, "skip")), {"a": 1})
        with self.assertRaises(RecordKeyError):
            dumps_record(s, KeyPolicy.REJECT)

    def test_loads_builds_ordered_store(self):
        s = loads_record('{"second": 2, "first": [1]}')
        self.assertIsInstance(s, OrderedStore)
        self.assertEqual(list(s.keys()), ["second", "first"])
        self.assertEqual(s.get("first"), [1])

    def test_loads_duplicate_fields(self):
        s = loads_record('{"a": 1, "b": 2, "a": 3}')
        self.assertEqual(list(s.entries()), [("a", 3), ("b", 2)])

    def test_loads_rejects_non_object(self):
        with self.assertRaises(RecordFormatError):
            loads_record("[1, 2]")

    def test_loads_rejects_invalid_json(self):
        with self.assertRaises(RecordFormatError) as ctx:
            loads_record("{not json")
        self.assertIsInstance(ctx.exception, ValueError)

    def test_text_round_trip(self):
        text = '{"x": 1, "y": {"z": [true, null]}}'
        self.assertEqual(dumps_record(loads_record(text)), text)


if __name__ == "__main__":
    unittest.main(verbosity=2)
