"""Errors raised while reconciling a node."""


class ReconcileError(Exception):
    """Base class for every failure the error policy knows how to handle."""


class MissingIdentity(ReconcileError):
    """The notification carried an object without a name. Never retried."""


class StoreError(ReconcileError):
    """The backup store could not be read or written."""


class ClusterError(ReconcileError):
    """A node read or patch against the cluster API failed."""


class DecodeFailure(ReconcileError):
    """A stored backup record could not be decoded."""

