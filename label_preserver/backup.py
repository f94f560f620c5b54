"""
Back up the labels of a node that is being deleted.
"""

import logging

from . import metrics
from .context import Context
from .keys import backup_key
from .models import AWAIT_NEXT_CHANGE, Action, NodeRecord
from .store import BackupRecord

logger = logging.getLogger(__name__)


def deletion_overdue(node: NodeRecord, ctx: Context) -> bool:
    """True once deletion has been pending longer than the retry limit."""
    if node.deletion_requested_at is None:
        return False
    pending = (ctx.clock() - node.deletion_requested_at).total_seconds()
    return pending > ctx.max_retry_seconds


def cleanup_node(node: NodeRecord, ctx: Context) -> Action:
    """
    Handle a node whose deletion is pending.

    The backup is written even when the node has no labels, so a record
    from an earlier incarnation never outlives this one. If deletion has
    been pending for too long the backup is skipped and cleanup reports
    success, so a broken store cannot hold the node forever.
    """
    node_name = node.identity
    if ctx.finalizer_name not in node.finalizers:
        return AWAIT_NEXT_CHANGE

    if deletion_overdue(node, ctx):
        logger.warning(
            f"Deletion of {node_name} pending for more than {ctx.max_retry_seconds}s; "
            f"releasing it without a backup"
        )
        metrics.safety_valve_triggered.inc()
        return AWAIT_NEXT_CHANGE

    logger.info(f"Cleaning up node {node_name} (Cleanup)")
    logger.debug(f"Labels to preserve for {node_name}: {node.labels}")

    record = BackupRecord(stored_labels=dict(node.labels) or None)
    ctx.store.force_replace(backup_key(node_name), record, ctx.field_manager)
    metrics.backups_written.inc()
    logger.info(f"Backed up {len(node.labels)} labels for {node_name}")
    return AWAIT_NEXT_CHANGE
