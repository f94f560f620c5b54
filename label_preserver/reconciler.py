"""
Reconcile a single node and decide what to do when that fails.
"""

import logging

from . import metrics
from .backup import cleanup_node
from .context import Context
from .errors import MissingIdentity
from .finalizer import event_for
from .models import AWAIT_NEXT_CHANGE, Action, Apply, Cleanup, Event, NodeRecord, RequeueAfter
from .restore import apply_node

logger = logging.getLogger(__name__)


def handle_event(event: Event, ctx: Context) -> Action:
    if isinstance(event, Apply):
        metrics.reconciliations.labels(event="apply").inc()
        return apply_node(event.node, ctx)
    if isinstance(event, Cleanup):
        metrics.reconciliations.labels(event="cleanup").inc()
        return cleanup_node(event.node, ctx)
    raise TypeError(f"Unknown finalizer event: {event!r}")


def reconcile(node: NodeRecord, ctx: Context) -> Action:
    """
    Reconcile one node snapshot.

    Raises:
        ReconcileError: on a known failure; pass it to ``error_policy``
    """
    with metrics.reconciliation_duration.time():
        event = event_for(node, ctx.finalizer_name)
        if event is None:
            return AWAIT_NEXT_CHANGE
        return handle_event(event, ctx)


def error_policy(node_name: str, error: Exception, ctx: Context) -> Action:
    """
    Decide when to retry after ``reconcile`` failed.

    Nameless objects are dropped. Everything else, including failures
    nothing in the controller anticipated, is retried with exponential
    backoff; no node is ever given up on.
    """
    metrics.reconciliation_errors.labels(kind=type(error).__name__).inc()
    if isinstance(error, MissingIdentity):
        logger.warning(f"Dropping event: {error}")
        return AWAIT_NEXT_CHANGE

    delay = ctx.backoff.next_delay(node_name)
    logger.error(f"Reconciliation of {node_name} failed, retrying in {delay:.0f}s: {error}")
    return RequeueAfter(delay)
