# tests/services/test_version_tracker.py
import pytest

from src.domain.constants import ProcessState
from src.domain.models import ProcessSnapshot
from src.services.version_tracker import VERSIONED_FIELDS, bump_if_needed, changed_fields

@pytest.fixture
def process() -> ProcessSnapshot:
    return ProcessSnapshot(guid="process-1", type="web", memory=64, instances=2, version="original-version")

class TestBumpIfNeeded:
    def test_new_process_gets_a_version(self, process):
        version = bump_if_needed(None, process.with_changes(version=None))
        assert version
        assert version != "original-version"

    def test_new_process_keeps_given_version(self, process):
        assert bump_if_needed(None, process) == "original-version"

    def test_memory_change_bumps_version(self, process):
        # Act
        version = bump_if_needed(process, process.with_changes(memory=65))

        # Assert
        assert version != "original-version"

    @pytest.mark.parametrize("changes", [
        {"disk_quota": 2048},
        {"health_check_type": "process"},
        {"health_check_type": "http", "health_check_http_endpoint": "/healthz"},
        {"readiness_health_check_type": "port"},
        {"readiness_health_check_type": "http", "readiness_health_check_http_endpoint": "/ready"},
        {"ports": (8081,)},
        {"state": ProcessState.STARTED},
    ])
    def test_tracked_fields_bump_version(self, process, changes):
        assert bump_if_needed(process, process.with_changes(**changes)) != "original-version"

    def test_instance_change_keeps_version(self, process):
        """스케일 변경만으로는 재배포하지 않습니다."""
        assert bump_if_needed(process, process.with_changes(instances=5)) == "original-version"

    @pytest.mark.parametrize("changes", [{"command": "bin/run"}, {"user": "vcap"}, {"log_rate_limit": 10}])
    def test_untracked_fields_keep_version(self, process, changes):
        assert bump_if_needed(process, process.with_changes(**changes)) == "original-version"

    def test_skip_keeps_version(self, process):
        assert bump_if_needed(process, process.with_changes(memory=65), skip=True) == "original-version"

    def test_each_bump_is_unique(self, process):
        first = bump_if_needed(process, process.with_changes(memory=65))
        second = bump_if_needed(process, process.with_changes(memory=66))
        assert first != second

    def test_missing_old_version_is_filled(self, process):
        old = process.with_changes(version=None)
        assert bump_if_needed(old, old.with_changes(instances=3))

class TestChangedFields:
    def test_lists_changed_tracked_fields_in_order(self, process):
        new = process.with_changes(state=ProcessState.STARTED, memory=128, instances=9)
        assert changed_fields(process, new) == ("memory", "state")

    def test_instances_not_tracked(self):
        assert "instances" not in VERSIONED_FIELDS
