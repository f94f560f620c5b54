"""State shared by every reconciliation."""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from kubernetes import client

from . import config, metrics
from .backoff import Backoff
from .store import BackupStore


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Context:
    """Passed to the reconciler."""

    core_v1: client.CoreV1Api
    store: BackupStore
    finalizer_name: str = config.FINALIZER_NAME
    restored_annotation: str = config.RESTORED_ANNOTATION
    field_manager: str = config.FIELD_MANAGER
    max_retry_seconds: float = config.MAX_RETRY_SECONDS
    backoff: Backoff = field(
        default_factory=lambda: Backoff(config.BACKOFF_BASE_SECONDS, config.MAX_RETRY_SECONDS)
    )
    clock: Callable[[], datetime] = utcnow
    # UIDs of node incarnations restored by this process. Covers the window
    # before the marker written by our own patch shows up in a snapshot.
    restored_uids: Set[str] = field(default_factory=set)
    nodes: Set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def mark_restored(self, uid: Optional[str]):
        if uid:
            with self._lock:
                self.restored_uids.add(uid)

    def was_restored(self, uid: Optional[str]) -> bool:
        if not uid:
            return False
        with self._lock:
            return uid in self.restored_uids

    def track(self, node_name: str):
        with self._lock:
            self.nodes.add(node_name)
            metrics.nodes_monitored.set(len(self.nodes))

    def forget(self, node_name: str, uid: Optional[str] = None):
        """Drop everything held for a node incarnation that no longer exists."""
        self.backoff.forget(node_name)
        with self._lock:
            if uid:
                self.restored_uids.discard(uid)
            self.nodes.discard(node_name)
            metrics.nodes_monitored.set(len(self.nodes))
