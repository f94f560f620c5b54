"""
Node Label Preserver

Backs up a node's labels when it leaves the cluster and restores them when
a node with the same name comes back.
"""

__version__ = "0.1.0"
