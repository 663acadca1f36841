"""
Unit tests for the deployment record store
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from pipeline_simulator.models.deployment import DeploymentDescriptor, DeploymentStatus
from pipeline_simulator.services.deployment_store import (
    DeploymentNotFoundError,
    DeploymentStore,
)


def _descriptor(service: str = "User Service") -> DeploymentDescriptor:
    return DeploymentDescriptor(service_name=service, version="1.0.0", environment="Development")


class TestDeploymentStore:
    def test_create_starts_in_progress(self, store):
        record = store.create(_descriptor())

        assert record.id
        assert record.status == DeploymentStatus.IN_PROGRESS
        assert record.service_name == "User Service"
        assert record.deployed_by == "simulator"
        assert record.start_time is not None
        assert record.end_time is None
        assert store.get(record.id) == record

    def test_ids_are_unique(self, store):
        ids = {store.create(_descriptor()).id for _ in range(10)}
        assert len(ids) == 10

    def test_update_terminal_fields(self, store):
        record = store.create(_descriptor())
        end = datetime.now(timezone.utc)

        updated = store.update(record.id, status=DeploymentStatus.SUCCESS, end_time=end, duration=39)

        assert updated.status == DeploymentStatus.SUCCESS
        assert updated.end_time == end
        assert updated.duration == 39
        # Untouched fields survive
        assert updated.service_name == record.service_name
        assert updated.start_time == record.start_time
        assert store.get(record.id) == updated

    def test_update_unknown_id(self, store):
        with pytest.raises(DeploymentNotFoundError, match="missing"):
            store.update("missing", status=DeploymentStatus.FAILED)

    def test_update_rejects_other_fields(self, store):
        record = store.create(_descriptor())
        with pytest.raises(ValueError, match="cannot be updated"):
            store.update(record.id, service_name="Other")

    def test_get_unknown_id(self, store):
        with pytest.raises(DeploymentNotFoundError):
            store.get("missing")

    def test_list_newest_first_with_limit(self, store):
        records = [store.create(_descriptor(f"svc-{i}")) for i in range(3)]
        # Spread start times so ordering does not depend on clock resolution
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for offset, record in enumerate(records):
            store._records[record.id] = record.model_copy(
                update={"start_time": base + timedelta(minutes=offset)}
            )

        listed = store.list(limit=2)
        assert [r.service_name for r in listed] == ["svc-2", "svc-1"]

    def test_list_filters_by_status(self, store):
        a = store.create(_descriptor("a"))
        store.create(_descriptor("b"))
        store.update(a.id, status=DeploymentStatus.CANCELLED)

        cancelled = store.list(status=DeploymentStatus.CANCELLED)
        assert [r.id for r in cancelled] == [a.id]


class TestPersistence:
    def test_records_survive_reload(self, tmp_path):
        path = tmp_path / "data" / "deployments.json"
        store = DeploymentStore(storage_path=path)
        record = store.create(_descriptor())
        store.update(record.id, status=DeploymentStatus.FAILED, duration=3)

        saved = json.loads(path.read_text())
        assert saved[0]["status"] == "failed"

        reloaded = DeploymentStore(storage_path=path)
        again = reloaded.get(record.id)
        assert again.status == DeploymentStatus.FAILED
        assert again.duration == 3

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "deployments.json"
        path.write_text("not json")

        store = DeploymentStore(storage_path=path)
        assert store.list() == []

    def test_interrupted_records_cancelled_on_reload(self, tmp_path):
        path = tmp_path / "deployments.json"
        store = DeploymentStore(storage_path=path)
        interrupted = store.create(_descriptor())
        finished = store.create(_descriptor("Payment Service"))
        store.update(finished.id, status=DeploymentStatus.SUCCESS, duration=5)

        reloaded = DeploymentStore(storage_path=path)

        record = reloaded.get(interrupted.id)
        assert record.status == DeploymentStatus.CANCELLED
        assert record.end_time is not None
        assert reloaded.get(finished.id).status == DeploymentStatus.SUCCESS

        saved = {item["id"]: item["status"] for item in json.loads(path.read_text())}
        assert saved[interrupted.id] == "cancelled"
