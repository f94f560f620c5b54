"""
Finalizer lifecycle.

Every node gets our finalizer so the cluster cannot finish deleting it
before its labels are backed up:

    UNREGISTERED --add finalizer--> ACTIVE --deletion requested--> PENDING_CLEANUP
    PENDING_CLEANUP --cleanup succeeded, finalizer removed--> REMOVED

The operator framework adds the finalizer before the first Apply handler
runs and removes it only once the Cleanup handler has succeeded. This
module decides which of the two a snapshot calls for.
"""

import enum
import logging
from typing import Optional

from .models import Apply, Cleanup, Event, NodeRecord

logger = logging.getLogger(__name__)


class FinalizerState(enum.Enum):
    UNREGISTERED = "Unregistered"
    ACTIVE = "Active"
    PENDING_CLEANUP = "PendingCleanup"
    REMOVED = "Removed"


def lifecycle_state(node: NodeRecord, finalizer_name: str) -> FinalizerState:
    has_token = finalizer_name in node.finalizers
    if node.deletion_requested:
        return FinalizerState.PENDING_CLEANUP if has_token else FinalizerState.REMOVED
    return FinalizerState.ACTIVE if has_token else FinalizerState.UNREGISTERED


def event_for(node: NodeRecord, finalizer_name: str) -> Optional[Event]:
    """
    Map a snapshot onto the event it calls for.

    Returns:
        Apply for live nodes, Cleanup for nodes being deleted that still
        carry our finalizer, None for nodes being deleted without it
    """
    state = lifecycle_state(node, finalizer_name)
    if state is FinalizerState.REMOVED:
        logger.debug(f"Node {node.identity} is being deleted without our finalizer")
        return None
    if state is FinalizerState.PENDING_CLEANUP:
        return Cleanup(node)
    return Apply(node)
