"""Backup record key derivation."""

import hashlib

BACKUP_KEY_PREFIX = "node-labels-"


def backup_key(identity: str) -> str:
    """
    Map a node name to the name of its backup record.

    Node names can be up to 253 characters, which together with a prefix
    overflows the store's name limit, so the name is hashed. The result is
    always 76 characters of ``[a-z0-9-]``.
    """
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()
    return f"{BACKUP_KEY_PREFIX}{digest}"
