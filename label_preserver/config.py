"""Configuration from environment."""

import os

FINALIZER_NAME = os.getenv("FINALIZER_NAME", "nodelabelpreserver.example.com/finalizer")
RESTORED_ANNOTATION = os.getenv(
    "RESTORED_ANNOTATION", "nodelabelpreserver.example.com/labels-restored"
)
BACKUP_NAMESPACE = os.getenv("BACKUP_NAMESPACE", "default")
FIELD_MANAGER = os.getenv("FIELD_MANAGER", "node-label-preserver")

BACKOFF_BASE_SECONDS = float(os.getenv("BACKOFF_BASE_SECONDS", "5"))
MAX_RETRY_SECONDS = float(os.getenv("MAX_RETRY_SECONDS", "3600"))

# Annotation prefix for the framework's own handler progress and diff base
STORAGE_PREFIX = os.getenv("STORAGE_PREFIX", "nodelabelpreserver.example.com")

WORKERS = int(os.getenv("WORKERS", "4"))
WATCH_TIMEOUT_SECONDS = int(os.getenv("WATCH_TIMEOUT_SECONDS", "300"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))
