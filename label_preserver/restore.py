"""
Restore labels onto a node that (re)joined the cluster.

Restoration runs once per node incarnation. The node is marked with an
annotation in the same patch that restores the labels; the annotation
disappears with the node object, so only a delete-and-recreate cycle can
trigger another restore. Labels already on the node always win over the
backup.
"""

import logging
from typing import Dict

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from . import metrics
from .context import Context
from .errors import ClusterError
from .keys import backup_key
from .models import AWAIT_NEXT_CHANGE, Action, NodeRecord

logger = logging.getLogger(__name__)

RESTORED_VALUE = "1"
APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"


def is_restored(node: NodeRecord, annotation: str) -> bool:
    return node.annotations.get(annotation) == RESTORED_VALUE


def missing_labels(current: Dict[str, str], backup: Dict[str, str]) -> Dict[str, str]:
    """Return the backed-up labels whose keys are not on the node."""
    return {k: v for k, v in backup.items() if k not in current}


def patch_restored_labels(ctx: Context, node_name: str, labels: Dict[str, str]):
    """
    Apply ``labels`` and the restored marker to the node in one forced patch.
    """
    body = {
        "apiVersion": "v1",
        "kind": "Node",
        "metadata": {
            "name": node_name,
            "labels": labels,
            "annotations": {ctx.restored_annotation: RESTORED_VALUE},
        },
    }
    try:
        ctx.core_v1.patch_node(
            name=node_name,
            body=body,
            field_manager=ctx.field_manager,
            force=True,
            _content_type=APPLY_PATCH_CONTENT_TYPE,
        )
    except (ApiException, HTTPError) as e:
        logger.error(f"Error patching node {node_name}: {e}")
        raise ClusterError(f"Failed to patch node {node_name}: {e}") from e


def apply_node(node: NodeRecord, ctx: Context) -> Action:
    """
    Handle a node that exists and is not being deleted.

    Algorithm:
    1. If the node already carries the restored marker, or this process
       already restored this incarnation, stop
    2. Load the backup for the node name (missing backup = nothing to restore)
    3. Pick the backed-up labels whose keys the node does not have
    4. Patch those labels and the restored marker onto the node
    """
    node_name = node.identity
    if is_restored(node, ctx.restored_annotation):
        logger.debug(f"Labels already restored for {node_name}")
        return AWAIT_NEXT_CHANGE
    if ctx.was_restored(node.uid):
        # Snapshot predates our own restore patch
        logger.debug(f"Skipping stale snapshot of {node_name}")
        return AWAIT_NEXT_CHANGE

    logger.info(f"Reconciling node {node_name} (Apply)")
    record = ctx.store.get(backup_key(node_name))
    backup = record.stored_labels if record is not None and record.stored_labels else {}

    to_restore = missing_labels(node.labels, backup)
    skipped = sorted(k for k in backup if k not in to_restore)
    if skipped:
        logger.info(f"Keeping existing values on {node_name} for: {skipped}")

    patch_restored_labels(ctx, node_name, to_restore)
    ctx.mark_restored(node.uid)
    if to_restore:
        metrics.labels_restored.inc(len(to_restore))
        logger.info(f"Restored labels for {node_name}: {to_restore}")
    else:
        logger.debug(f"Nothing to restore for {node_name}")
    return AWAIT_NEXT_CHANGE
