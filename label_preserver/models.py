"""
Working copies of cluster objects and the values passed between the
finalizer state machine and the label policies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import MissingIdentity


@dataclass(frozen=True)
class NodeRecord:
    """Snapshot of the parts of a Node the controller reads."""

    identity: str
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    finalizers: Tuple[str, ...] = ()
    deletion_requested_at: Optional[datetime] = None
    resource_version: Optional[str] = None
    uid: Optional[str] = None

    @property
    def deletion_requested(self) -> bool:
        return self.deletion_requested_at is not None

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> "NodeRecord":
        """
        Build a snapshot from a Node body as delivered by a watch.

        Raises:
            MissingIdentity: if the node has no name
        """
        meta = body.get("metadata") or {}
        name = meta.get("name")
        if not name:
            raise MissingIdentity(f"Node without a name: {dict(body)}")

        return cls(
            identity=name,
            labels=dict(meta.get("labels") or {}),
            annotations=dict(meta.get("annotations") or {}),
            finalizers=tuple(meta.get("finalizers") or ()),
            deletion_requested_at=parse_timestamp(meta.get("deletionTimestamp")),
            resource_version=meta.get("resourceVersion"),
            uid=meta.get("uid"),
        )


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp from an object body; naive values are UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Apply:
    """The node exists and is not being deleted."""

    node: NodeRecord


@dataclass(frozen=True)
class Cleanup:
    """The node is being deleted and still carries our finalizer."""

    node: NodeRecord


Event = Union[Apply, Cleanup]


@dataclass(frozen=True)
class RequeueAfter:
    """Reconcile the node again after ``seconds``."""

    seconds: float


@dataclass(frozen=True)
class AwaitNextChange:
    """Do nothing until the node changes again."""


Action = Union[RequeueAfter, AwaitNextChange]

AWAIT_NEXT_CHANGE = AwaitNextChange()
