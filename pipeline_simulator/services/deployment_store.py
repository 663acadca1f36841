"""
Deployment record storage
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol
from uuid import uuid4

from ..config import settings
from ..models.deployment import (
    DeploymentDescriptor,
    DeploymentRecord,
    DeploymentStatus,
)
from ..models.simulation import utc_now

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "end_time", "duration")


class DeploymentNotFoundError(KeyError):
    """No deployment record exists under the requested id"""

    def __init__(self, deployment_id: str):
        super().__init__(deployment_id)
        self.deployment_id = deployment_id

    def __str__(self) -> str:
        return f"Deployment not found: {self.deployment_id}"


class DeploymentRecordSink(Protocol):
    """What the simulation engine needs from record storage"""

    def create(self, descriptor: DeploymentDescriptor) -> DeploymentRecord:
        ...

    def update(self, deployment_id: str, **fields) -> DeploymentRecord:
        ...


class DeploymentStore:
    """Keeps deployment records in memory, optionally mirrored to a JSON file"""

    def __init__(self, storage_path: Optional[Path] = None):
        self.storage_path = Path(storage_path) if storage_path else None
        self._lock = threading.Lock()
        self._records: Dict[str, DeploymentRecord] = {}
        if self.storage_path:
            self._load_records()

    def _load_records(self):
        """Load records from storage"""
        if not self.storage_path.exists():
            return
        try:
            content = json.loads(self.storage_path.read_text())
            for item in content:
                record = DeploymentRecord.model_validate(item)
                self._records[record.id] = record
            logger.info(f"Loaded {len(self._records)} deployment records from {self.storage_path}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load deployment records: {e}")
            return

        # No simulation survives a restart, so nothing will finish these
        orphaned = [r for r in self._records.values() if r.status == DeploymentStatus.IN_PROGRESS]
        if orphaned:
            now = utc_now()
            for record in orphaned:
                self._records[record.id] = record.model_copy(
                    update={"status": DeploymentStatus.CANCELLED, "end_time": now}
                )
            logger.warning(f"Marked {len(orphaned)} interrupted deployment(s) as cancelled")
            self._save_records()

    def _save_records(self):
        """Save records to storage; caller holds the lock"""
        if not self.storage_path:
            return
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            content = json.dumps(
                [r.model_dump(mode="json") for r in self._records.values()],
                indent=2,
            )
            self.storage_path.write_text(content)
        except OSError as e:
            logger.error(f"Failed to save deployment records: {e}")

    def create(self, descriptor: DeploymentDescriptor) -> DeploymentRecord:
        """Create a record in the in-progress state"""
        record = DeploymentRecord(
            id=str(uuid4()),
            service_name=descriptor.service_name,
            version=descriptor.version,
            environment=descriptor.environment,
            deployed_by=descriptor.deployed_by,
            status=DeploymentStatus.IN_PROGRESS,
        )
        with self._lock:
            self._records[record.id] = record
            self._save_records()
        logger.info(
            f"Created deployment {record.id}: {record.service_name} {record.version} -> {record.environment}"
        )
        return record

    def update(self, deployment_id: str, **fields) -> DeploymentRecord:
        """Apply status/end_time/duration changes to a record"""
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")

        with self._lock:
            record = self._records.get(deployment_id)
            if record is None:
                raise DeploymentNotFoundError(deployment_id)
            updated = record.model_copy(update=fields)
            self._records[deployment_id] = updated
            self._save_records()
        return updated

    def get(self, deployment_id: str) -> DeploymentRecord:
        with self._lock:
            record = self._records.get(deployment_id)
        if record is None:
            raise DeploymentNotFoundError(deployment_id)
        return record

    def list(
        self,
        limit: int = 20,
        status: Optional[DeploymentStatus] = None,
    ) -> List[DeploymentRecord]:
        """List records, newest first, optionally filtered by status"""
        with self._lock:
            records = list(self._records.values())

        if status is not None:
            records = [r for r in records if r.status == status]

        records.sort(key=lambda r: r.start_time, reverse=True)
        return records[:limit]


# Global instance
_deployment_store: Optional[DeploymentStore] = None


def get_deployment_store() -> DeploymentStore:
    global _deployment_store
    if _deployment_store is None:
        _deployment_store = DeploymentStore(settings.deployments_file)
    return _deployment_store
