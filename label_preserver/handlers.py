"""
Kopf handlers for Node objects.

Live nodes go through Apply on create, update and resume; nodes being
deleted go through Cleanup. The framework holds our finalizer on every
node and releases it only after the delete handler succeeds. Handler
bodies are synchronous and run on the framework's thread pool, at most
one at a time per node.
"""

import logging
from typing import Any, Dict, Optional

import kopf

from . import config
from .context import Context
from .errors import MissingIdentity
from .models import NodeRecord, RequeueAfter
from .reconciler import error_policy, reconcile

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any):
    settings.persistence.finalizer = config.FINALIZER_NAME
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
        prefix=config.STORAGE_PREFIX
    )
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
        prefix=config.STORAGE_PREFIX, key="last-handled-configuration"
    )
    settings.execution.max_workers = config.WORKERS
    settings.watching.server_timeout = config.WATCH_TIMEOUT_SECONDS
    # Node events are noisy; only post problems
    settings.posting.level = logging.WARNING
    logger.info(
        f"Operator configured (finalizer={config.FINALIZER_NAME}, workers={config.WORKERS})"
    )


def _reconcile_body(body: Dict[str, Any], name: Optional[str], ctx: Context) -> NodeRecord:
    """
    Reconcile one delivered body, turning every failure into a kopf error.

    Raises:
        kopf.PermanentError: for bodies that can never be reconciled
        kopf.TemporaryError: for everything else, delayed by the node's backoff
    """
    try:
        node = NodeRecord.from_body(body)
    except MissingIdentity as e:
        error_policy(name or "", e, ctx)
        raise kopf.PermanentError(str(e)) from e

    try:
        reconcile(node, ctx)
    except Exception as e:
        action = error_policy(node.identity, e, ctx)
        if isinstance(action, RequeueAfter):
            raise kopf.TemporaryError(str(e), delay=action.seconds) from e
        raise kopf.PermanentError(str(e)) from e

    ctx.backoff.forget(node.identity)
    return node


@kopf.on.resume("nodes")
@kopf.on.create("nodes")
@kopf.on.update("nodes")
def on_node_apply(body: Dict[str, Any], name: Optional[str], memo: kopf.Memo, **_: Any):
    """Restore backed-up labels onto a live node."""
    _reconcile_body(body, name, memo.ctx)


@kopf.on.delete("nodes")
def on_node_cleanup(body: Dict[str, Any], name: Optional[str], memo: kopf.Memo, **_: Any):
    """Back up the labels of a node being deleted."""
    ctx: Context = memo.ctx
    node = _reconcile_body(body, name, ctx)
    ctx.forget(node.identity, node.uid)


@kopf.on.event("nodes")
def on_node_event(event: Dict[str, Any], name: Optional[str], memo: kopf.Memo, **_: Any):
    """
    Track which nodes exist.

    Runs after any handler already in flight for the same node, so a retry
    scheduled by a handler that failed against a node that has since gone
    is dropped here.
    """
    ctx: Context = memo.ctx
    if not name:
        return
    if event.get("type") == "DELETED":
        uid = ((event.get("object") or {}).get("metadata") or {}).get("uid")
        ctx.forget(name, uid)
        logger.debug(f"Node {name} removed from the cluster")
    else:
        ctx.track(name)
