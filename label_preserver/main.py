#!/usr/bin/env python3
"""
Node Label Preserver Controller

Keeps a finalizer on every node. When a node is deleted its labels are
saved to a ConfigMap before the finalizer is released; when a node with
the same name joins again, the saved labels it does not already carry are
restored once.
"""

import logging
import sys

import kopf
from kubernetes import client, config as kube_config
from prometheus_client import start_http_server

from . import config
from . import handlers  # noqa: F401  registers the kopf handlers
from .backoff import Backoff
from .context import Context
from .store import ConfigMapBackupStore

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # The client logs every request body at debug level
    logging.getLogger("kubernetes").setLevel(logging.WARNING)


def load_kube_config():
    """Load in-cluster config, falling back to kubeconfig."""
    try:
        kube_config.load_incluster_config()
        logger.info("Loaded in-cluster config")
    except kube_config.ConfigException:
        try:
            kube_config.load_kube_config()
            logger.info("Loaded kubeconfig")
        except kube_config.ConfigException:
            logger.error("Could not load Kubernetes config")
            sys.exit(1)


def build_context(core_v1: client.CoreV1Api) -> Context:
    return Context(
        core_v1=core_v1,
        store=ConfigMapBackupStore(core_v1, config.BACKUP_NAMESPACE),
        finalizer_name=config.FINALIZER_NAME,
        restored_annotation=config.RESTORED_ANNOTATION,
        field_manager=config.FIELD_MANAGER,
        max_retry_seconds=config.MAX_RETRY_SECONDS,
        backoff=Backoff(config.BACKOFF_BASE_SECONDS, config.MAX_RETRY_SECONDS),
    )


def main():
    """
    Initialize and run the controller.
    """
    configure_logging()
    load_kube_config()

    core_v1 = client.CoreV1Api()
    ctx = build_context(core_v1)

    start_http_server(config.METRICS_PORT)
    logger.info(f"Metrics server started on port {config.METRICS_PORT}")

    logger.info("Starting node-label-preserver")
    logger.info(f"  Finalizer: {config.FINALIZER_NAME}")
    logger.info(f"  Restored marker: {config.RESTORED_ANNOTATION}")
    logger.info(f"  Backup namespace: {config.BACKUP_NAMESPACE}")
    logger.info(f"  Workers: {config.WORKERS}")

    kopf.run(clusterwide=True, standalone=True, memo=kopf.Memo(ctx=ctx))


if __name__ == "__main__":
    main()
