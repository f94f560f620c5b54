#!/usr/bin/env python3
"""
Unit tests for label backup on node deletion
"""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from label_preserver.backup import cleanup_node, deletion_overdue
from label_preserver.context import Context
from label_preserver.errors import StoreError
from label_preserver.keys import backup_key
from label_preserver.models import AwaitNextChange, NodeRecord
from label_preserver.store import BackupRecord

FINALIZER = "test.example.com/finalizer"
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def deleting_node(labels=None, pending=timedelta(seconds=30), finalizers=(FINALIZER,)):
    return NodeRecord(
        "n1",
        labels=labels or {},
        finalizers=finalizers,
        deletion_requested_at=NOW - pending,
    )


class TestCleanupNode(unittest.TestCase):
    """Test cases for cleanup_node"""

    def setUp(self):
        """Set up test fixtures"""
        self.store = Mock()
        self.ctx = Context(
            core_v1=Mock(),
            store=self.store,
            finalizer_name=FINALIZER,
            field_manager="tester",
            max_retry_seconds=3600,
            clock=lambda: NOW,
        )

    def test_backs_up_labels(self):
        """Labels are written under the node's backup key"""
        result = cleanup_node(deleting_node({"team": "infra"}), self.ctx)

        self.assertIsInstance(result, AwaitNextChange)
        self.store.force_replace.assert_called_once_with(
            backup_key("n1"), BackupRecord(stored_labels={"team": "infra"}), "tester"
        )

    def test_empty_labels_still_written(self):
        """CRITICAL: an empty backup replaces any record from a previous incarnation"""
        cleanup_node(deleting_node({}), self.ctx)
        self.store.force_replace.assert_called_once_with(
            backup_key("n1"), BackupRecord(), "tester"
        )

    def test_idempotent(self):
        """Two cleanups with the same labels write identical records"""
        cleanup_node(deleting_node({"a": "1", "b": "2"}), self.ctx)
        cleanup_node(deleting_node({"b": "2", "a": "1"}), self.ctx)

        first, second = self.store.force_replace.call_args_list
        self.assertEqual(first, second)
        self.assertEqual(first[0][1].to_data(), second[0][1].to_data())

    def test_safety_valve(self):
        """CRITICAL: deletion pending too long - succeed without writing"""
        node = deleting_node({"a": "1"}, pending=timedelta(hours=1, seconds=1))
        self.store.force_replace.side_effect = StoreError("down")

        result = cleanup_node(node, self.ctx)

        self.assertIsInstance(result, AwaitNextChange)
        self.store.force_replace.assert_not_called()

    def test_safety_valve_boundary(self):
        """Exactly the limit is not yet overdue"""
        node = deleting_node({"a": "1"}, pending=timedelta(hours=1))
        self.assertFalse(deletion_overdue(node, self.ctx))
        cleanup_node(node, self.ctx)
        self.store.force_replace.assert_called_once()

    def test_store_failure_propagates(self):
        """Write failure surfaces so the finalizer stays in place"""
        self.store.force_replace.side_effect = StoreError("down")
        with self.assertRaises(StoreError):
            cleanup_node(deleting_node({"a": "1"}), self.ctx)

    def test_without_finalizer(self):
        """No finalizer - nothing to do"""
        cleanup_node(deleting_node({"a": "1"}, finalizers=()), self.ctx)
        self.store.force_replace.assert_not_called()

    def test_not_deleting_is_never_overdue(self):
        """A node without a deletion request is never overdue"""
        self.assertFalse(deletion_overdue(NodeRecord("n1"), self.ctx))


if __name__ == '__main__':
    unittest.main()
