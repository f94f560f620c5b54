#!/usr/bin/env python3
"""
Unit tests for node snapshots
"""

import unittest
from datetime import datetime, timezone

from label_preserver.errors import MissingIdentity
from label_preserver.models import NodeRecord, parse_timestamp


class TestNodeRecordFromBody(unittest.TestCase):
    """Test cases for NodeRecord.from_body"""

    def test_full_node(self):
        body = {
            "metadata": {
                "name": "n1",
                "labels": {"a": "1"},
                "annotations": {"b": "2"},
                "finalizers": ["f1", "f2"],
                "deletionTimestamp": "2026-01-01T00:00:00Z",
                "resourceVersion": "42",
                "uid": "u-1",
            }
        }
        record = NodeRecord.from_body(body)

        self.assertEqual(record.identity, "n1")
        self.assertEqual(record.labels, {"a": "1"})
        self.assertEqual(record.annotations, {"b": "2"})
        self.assertEqual(record.finalizers, ("f1", "f2"))
        self.assertEqual(record.deletion_requested_at, datetime(2026, 1, 1, tzinfo=timezone.utc))
        self.assertTrue(record.deletion_requested)
        self.assertEqual(record.resource_version, "42")
        self.assertEqual(record.uid, "u-1")

    def test_bare_node(self):
        """Missing optional fields become empty values"""
        record = NodeRecord.from_body({"metadata": {"name": "n1"}})
        self.assertEqual(record.labels, {})
        self.assertEqual(record.annotations, {})
        self.assertEqual(record.finalizers, ())
        self.assertFalse(record.deletion_requested)
        self.assertIsNone(record.uid)

    def test_null_fields(self):
        """Explicit nulls are treated like missing fields"""
        body = {"metadata": {"name": "n1", "labels": None, "finalizers": None}}
        record = NodeRecord.from_body(body)
        self.assertEqual(record.labels, {})
        self.assertEqual(record.finalizers, ())

    def test_snapshot_is_a_copy(self):
        """Later changes to the body do not leak into the snapshot"""
        labels = {"a": "1"}
        record = NodeRecord.from_body({"metadata": {"name": "n1", "labels": labels}})
        labels["b"] = "2"
        self.assertEqual(record.labels, {"a": "1"})

    def test_missing_name(self):
        with self.assertRaises(MissingIdentity):
            NodeRecord.from_body({"metadata": {}})
        with self.assertRaises(MissingIdentity):
            NodeRecord.from_body({})


class TestParseTimestamp(unittest.TestCase):
    """Test cases for parse_timestamp"""

    def test_zulu(self):
        self.assertEqual(
            parse_timestamp("2026-03-04T05:06:07Z"),
            datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc),
        )

    def test_naive_is_utc(self):
        self.assertEqual(parse_timestamp("2026-01-01T00:00:00").tzinfo, timezone.utc)

    def test_empty(self):
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(""))


if __name__ == '__main__':
    unittest.main()
