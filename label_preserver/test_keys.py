#!/usr/bin/env python3
"""
Unit tests for backup key derivation
"""

import re
import unittest

from label_preserver.keys import BACKUP_KEY_PREFIX, backup_key

DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class TestBackupKey(unittest.TestCase):
    """Test cases for backup_key"""

    def test_known_value(self):
        """SHA-256 of the node name, hex encoded, behind the prefix"""
        self.assertEqual(
            backup_key("n1"),
            "node-labels-676b8bb84ce7267dd520deca4811c8f10a53e636352f06987f42fe425acedd80",
        )

    def test_deterministic(self):
        """Same name always maps to the same key"""
        self.assertEqual(backup_key("worker-1.example.com"), backup_key("worker-1.example.com"))

    def test_distinct_names_distinct_keys(self):
        """Names that a character substitution would collapse stay distinct"""
        self.assertNotEqual(backup_key("a.b"), backup_key("a-b"))

    def test_fixed_length(self):
        """Every key is 76 characters regardless of name length"""
        for name in ["a", "node-1", "x" * 253]:
            self.assertEqual(len(backup_key(name)), 76)

    def test_charset_safe(self):
        """Keys are valid object names even for dotted, maximum-length names"""
        name = ".".join(["abcdefghij"] * 23)
        key = backup_key(name)
        self.assertTrue(key.startswith(BACKUP_KEY_PREFIX))
        self.assertRegex(key, DNS_SUBDOMAIN)


if __name__ == '__main__':
    unittest.main()
