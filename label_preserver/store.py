"""
Backup store.

Backups live in ConfigMaps, one per node name, named by ``backup_key``.
Writes replace the whole ConfigMap unconditionally, so every write
replaces the full record no matter who wrote it before and concurrent
writers converge.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from .errors import DecodeFailure, StoreError

logger = logging.getLogger(__name__)

LABELS_FIELD = "preserved_labels_json"
# Written by the flag-based record scheme; read but never honoured.
LEGACY_FLAG_FIELD = "labels_applied_flag"

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


@dataclass(frozen=True)
class BackupRecord:
    """Labels saved from a departed node. ``None`` means nothing to restore."""

    stored_labels: Optional[Dict[str, str]] = None

    @property
    def is_empty(self) -> bool:
        return not self.stored_labels

    def to_data(self) -> Dict[str, str]:
        """Encode as ConfigMap data. The labels field is omitted when empty."""
        if self.is_empty:
            return {}
        # Sorted and compact so the same labels always produce the same bytes
        encoded = json.dumps(self.stored_labels, sort_keys=True, separators=(",", ":"))
        return {LABELS_FIELD: encoded}

    @classmethod
    def from_data(cls, key: str, data: Optional[Dict[str, str]]) -> "BackupRecord":
        """
        Decode ConfigMap data.

        Raises:
            DecodeFailure: if the labels field is not a JSON object of strings
        """
        data = data or {}
        if LEGACY_FLAG_FIELD in data:
            logger.warning(
                f"Backup {key} carries legacy field {LEGACY_FLAG_FIELD}; ignoring it"
            )

        raw = data.get(LABELS_FIELD)
        if not raw:
            return cls()

        try:
            labels = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DecodeFailure(f"Invalid JSON in backup {key}: {e}") from e

        if not isinstance(labels, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in labels.items()
        ):
            raise DecodeFailure(f"Backup {key} is not a mapping of strings to strings")

        return cls(stored_labels=labels or None)


class BackupStore(ABC):
    """Durable key/value storage for backup records."""

    @abstractmethod
    def get(self, key: str) -> Optional[BackupRecord]:
        """
        Load the record at ``key``.

        Returns:
            BackupRecord, or None if no record exists

        Raises:
            StoreError: on any failure other than not-found
            DecodeFailure: if the record cannot be decoded
        """

    @abstractmethod
    def force_replace(self, key: str, record: BackupRecord, owner: str) -> BackupRecord:
        """
        Create or fully replace the record at ``key``, claiming it for ``owner``.

        Raises:
            StoreError: if the write fails
        """


class ConfigMapBackupStore(BackupStore):
    """Backup records stored as ConfigMaps in a single namespace."""

    def __init__(self, core_v1: client.CoreV1Api, namespace: str):
        self.core_v1 = core_v1
        self.namespace = namespace

    def get(self, key: str) -> Optional[BackupRecord]:
        try:
            cm = self.core_v1.read_namespaced_config_map(name=key, namespace=self.namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            logger.error(f"Error reading backup {key}: {e}")
            raise StoreError(f"Failed to read backup {key}: {e}") from e
        except HTTPError as e:
            logger.error(f"Error reading backup {key}: {e}")
            raise StoreError(f"Failed to read backup {key}: {e}") from e
        return BackupRecord.from_data(key, cm.data)

    def force_replace(self, key: str, record: BackupRecord, owner: str) -> BackupRecord:
        """
        Create the ConfigMap, or replace it whole if it exists.

        A replace without a resourceVersion overwrites every field,
        whoever wrote it last. Handles the ConfigMap being deleted between
        the 409 and the replace.
        """
        cm = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(
                name=key,
                namespace=self.namespace,
                labels={MANAGED_BY_LABEL: owner},
            ),
            data=record.to_data(),
        )
        try:
            try:
                written = self._create(cm, owner)
                logger.info(f"Created backup {key}")
            except ApiException as e:
                if e.status != 409:
                    raise
                try:
                    written = self.core_v1.replace_namespaced_config_map(
                        name=key, namespace=self.namespace, body=cm, field_manager=owner
                    )
                    logger.debug(f"Replaced backup {key}")
                except ApiException as replace_err:
                    if replace_err.status != 404:
                        raise
                    logger.warning(f"Backup {key} deleted during replace, recreating")
                    written = self._create(cm, owner)
        except (ApiException, HTTPError) as e:
            logger.error(f"Error writing backup {key}: {e}")
            raise StoreError(f"Failed to write backup {key}: {e}") from e
        return BackupRecord.from_data(key, written.data)

    def _create(self, cm: client.V1ConfigMap, owner: str) -> client.V1ConfigMap:
        return self.core_v1.create_namespaced_config_map(
            namespace=self.namespace, body=cm, field_manager=owner
        )
