# tests/services/test_quota_validator.py
import pytest

from src.config import PlatformConfig
from src.domain.constants import ProcessState, QuotaScope
from src.domain.models import (
    BuildpackLifecycle, ImageLifecycle, ImageReference, PackageSnapshot, ProcessSnapshot, QuotaDefinitionSnapshot,
    SidecarSnapshot,
)
from src.services.quota_validator import validate

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def config() -> PlatformConfig:
    """테스트에 사용될 플랫폼 설정. 추가 허용 사용자 두 명을 포함합니다."""
    return PlatformConfig(
        maximum_app_disk_in_mb=2048,
        additional_allowed_process_users=["some_user", "some_other_user"],
    )

def org_quota(**overrides) -> QuotaDefinitionSnapshot:
    values = dict(name="org-quota", scope=QuotaScope.ORGANIZATION, scope_name="my-org", memory_limit=128, log_rate_limit=1024)
    values.update(overrides)
    return QuotaDefinitionSnapshot(**values)

def space_quota(**overrides) -> QuotaDefinitionSnapshot:
    values = dict(name="space-quota", scope=QuotaScope.SPACE, scope_name="hi", memory_limit=128, log_rate_limit=1024)
    values.update(overrides)
    return QuotaDefinitionSnapshot(**values)

@pytest.fixture
def stopped_process() -> ProcessSnapshot:
    """현재 저장된 상태: 중지됨, 64MB x 2 인스턴스, 로그 512."""
    return ProcessSnapshot(guid="process-1", type="web", memory=64, log_rate_limit=512, instances=2, state=ProcessState.STOPPED)

def kinds(violations):
    return [v.kind for v in violations]

def messages(violations, field):
    return [v.message for v in violations if v.field == field]

# ===================================================================
#  항상 적용되는 정책 테스트
# ===================================================================
class TestStructuralPolicies:
    def test_valid_default_process(self, config):
        assert validate(ProcessSnapshot(guid="p", type="web"), None, None, config) == []

    def test_negative_instances(self, config):
        violations = validate(ProcessSnapshot(guid="p", type="web", instances=-1), None, None, config)
        assert [v.field for v in violations] == ["instances"]

    def test_disk_quota_below_maximum_is_allowed(self, config):
        assert validate(ProcessSnapshot(guid="p", type="web", disk_quota=1000), None, None, config) == []

    @pytest.mark.parametrize("disk", [3000, 4096])
    def test_disk_quota_above_maximum(self, config, disk):
        violations = validate(ProcessSnapshot(guid="p", type="web", disk_quota=disk), None, None, config)
        assert kinds(violations) == ["too_much_disk"]

    def test_disk_quota_must_be_positive(self, config):
        violations = validate(ProcessSnapshot(guid="p", type="web", disk_quota=0), None, None, config)
        assert kinds(violations) == ["zero_or_less"]

    def test_log_rate_limit_below_minimum(self, config):
        violations = validate(ProcessSnapshot(guid="p", type="web", log_rate_limit=-2), None, None, config)
        assert [v.field for v in violations] == ["log_rate_limit"]

    def test_memory_below_minimum(self, config):
        violations = validate(ProcessSnapshot(guid="p", type="web", memory=0), None, None, config)
        assert [v.field for v in violations] == ["memory"]

    @pytest.mark.parametrize("user", [None, "vcap", "VCAP", "some_user", "some_other_user"])
    def test_permitted_users(self, config, user):
        assert validate(ProcessSnapshot(guid="p", type="web", user=user), None, None, config) == []

    def test_user_not_permitted(self, config):
        violations = validate(ProcessSnapshot(guid="p", type="web", user="some-random-user"), None, None, config)
        assert [(v.field, v.message) for v in violations] == [("user", "invalid")]

    def test_vcap_is_permitted_without_allow_list(self):
        config = PlatformConfig(additional_allowed_process_users=[])
        assert validate(ProcessSnapshot(guid="p", type="web", user="vcap"), None, None, config) == []

    def test_errors_accumulate(self, config):
        """정책은 중단 없이 모두 실행되어 위반이 누적됩니다."""
        process = ProcessSnapshot(guid="p", type="web", instances=-1, disk_quota=4096, user="nobody")
        violations = validate(process, None, None, config)
        assert {v.field for v in violations} == {"instances", "disk_quota", "user"}

class TestPortsPolicy:
    def test_valid_ports(self, config):
        assert validate(ProcessSnapshot(guid="p", type="web", ports=(1111, 2222)), None, None, config) == []

    def test_empty_ports(self, config):
        assert kinds(validate(ProcessSnapshot(guid="p", type="web", ports=()), None, None, config)) == ["empty"]

    def test_duplicate_ports(self, config):
        assert kinds(validate(ProcessSnapshot(guid="p", type="web", ports=(8080, 8080)), None, None, config)) == ["duplicate"]

    def test_out_of_range_ports(self, config):
        assert kinds(validate(ProcessSnapshot(guid="p", type="web", ports=(0, 70000)), None, None, config)) == ["out_of_range"]

    def test_too_many_ports(self, config):
        process = ProcessSnapshot(guid="p", type="web", ports=tuple(range(8000, 8011)))
        assert kinds(validate(process, None, None, config)) == ["too_many"]

class TestHealthCheckPolicies:
    def test_http_health_check_requires_endpoint(self, config):
        process = ProcessSnapshot(guid="p", type="web", health_check_type="http")
        violations = validate(process, None, None, config)
        assert [v.field for v in violations] == ["health_check_http_endpoint"]

    def test_http_health_check_with_endpoint(self, config):
        process = ProcessSnapshot(guid="p", type="web", health_check_type="http", health_check_http_endpoint="/health")
        assert validate(process, None, None, config) == []

    def test_endpoint_requires_http_type(self, config):
        process = ProcessSnapshot(guid="p", type="web", health_check_type="port", health_check_http_endpoint="/health")
        assert kinds(validate(process, None, None, config)) == ["endpoint_not_allowed"]

    def test_unknown_health_check_type(self, config):
        process = ProcessSnapshot(guid="p", type="web", health_check_type="carrier-pigeon")
        assert kinds(validate(process, None, None, config)) == ["invalid"]

    def test_health_check_timeout_above_maximum(self, config):
        process = ProcessSnapshot(guid="p", type="web", health_check_timeout=181)
        assert kinds(validate(process, None, None, config)) == ["maximum_exceeded"]

    def test_readiness_http_check_requires_endpoint(self, config):
        process = ProcessSnapshot(guid="p", type="web", readiness_health_check_type="http")
        violations = validate(process, None, None, config)
        assert [v.field for v in violations] == ["readiness_health_check_http_endpoint"]

    def test_invocation_timeout_must_be_positive(self, config):
        process = ProcessSnapshot(guid="p", type="web", readiness_health_check_invocation_timeout=0)
        assert [v.field for v in validate(process, None, None, config)] == ["readiness_health_check_invocation_timeout"]

class TestSidecarMemoryPolicy:
    def sidecars(self, *memories):
        return tuple(SidecarSnapshot(name=f"sidecar-{i}", memory=m) for i, m in enumerate(memories))

    def test_process_with_less_memory_than_sidecars(self, config):
        process = ProcessSnapshot(guid="p", type="web", memory=300, sidecars=self.sidecars(400, None))
        violations = validate(process, None, None, config)
        assert [(v.field, v.kind) for v in violations] == [("memory", "insufficient_for_sidecars")]

    def test_process_memory_equal_to_sidecar_total(self, config):
        """사이드카 합계와 같으면 본 프로세스 몫이 남지 않으므로 거부됩니다."""
        process = ProcessSnapshot(guid="p", type="web", memory=500, sidecars=self.sidecars(200, 300))
        assert kinds(validate(process, None, None, config)) == ["insufficient_for_sidecars"]

    def test_process_with_more_memory_than_sidecars(self, config):
        process = ProcessSnapshot(guid="p", type="web", memory=500, sidecars=self.sidecars(400))
        assert validate(process, None, None, config) == []

    def test_sidecars_without_memory_are_ignored(self, config):
        process = ProcessSnapshot(guid="p", type="web", memory=64, sidecars=self.sidecars(None, None))
        assert process.sidecar_memory == 0
        assert validate(process, None, None, config) == []

    def test_applies_to_stopped_processes(self, config):
        process = ProcessSnapshot(guid="p", type="web", memory=300, state=ProcessState.STOPPED,
                                  sidecars=self.sidecars(400))
        assert kinds(validate(process, None, None, config)) == ["insufficient_for_sidecars"]

class TestLifecyclePolicy:
    def test_image_package_for_buildpack_app(self, config):
        package = PackageSnapshot(guid="pkg", image=ImageReference(image="someimage"))
        violations = validate(ProcessSnapshot(guid="p", type="web"), None, None, config,
                              lifecycle=BuildpackLifecycle(), package=package)
        assert "incompatible with buildpack" in violations[0].message

    def test_bits_package_for_image_app(self, config):
        package = PackageSnapshot(guid="pkg", checksum="abc")
        violations = validate(ProcessSnapshot(guid="p", type="web"), None, None, config,
                              lifecycle=ImageLifecycle(), package=package)
        assert kinds(violations) == ["incompatible_package"]

    def test_matching_package(self, config):
        package = PackageSnapshot(guid="pkg", image=ImageReference(image="someimage"))
        assert validate(ProcessSnapshot(guid="p", type="web"), None, None, config,
                        lifecycle=ImageLifecycle(), package=package) == []

    def test_image_lifecycle_disabled(self):
        config = PlatformConfig(image_lifecycle_enabled=False)
        process = ProcessSnapshot(guid="p", type="web", state=ProcessState.STARTED)
        violations = validate(process, None, None, config, lifecycle=ImageLifecycle())
        assert kinds(violations) == ["image_lifecycle_disabled"]

# ===================================================================
#  조직/스페이스 쿼터 테스트
# ===================================================================
class TestScopeQuotas:
    def test_raises_when_memory_quota_exceeded(self, config, stopped_process):
        """시작하면서 메모리가 쿼터를 1MB라도 넘으면 실패합니다."""
        new = stopped_process.with_changes(memory=65, state=ProcessState.STARTED)
        violations = validate(new, org_quota(), space_quota(), config, previous=stopped_process)
        assert kinds(violations) == ["quota_exceeded", "space_quota_exceeded"]

    def test_memory_at_ceiling_is_allowed(self, config, stopped_process):
        new = stopped_process.with_changes(state=ProcessState.STARTED)
        assert validate(new, org_quota(), space_quota(), config, previous=stopped_process) == []

    def test_stopped_process_may_exceed_quota(self, config, stopped_process):
        """중지된 프로세스는 어떤 쿼터 상한도 넘을 수 있습니다."""
        new = stopped_process.with_changes(memory=4096, instances=50, log_rate_limit=-1)
        quotas = dict(app_instance_limit=4, instance_memory_limit=64)
        assert validate(new, org_quota(**quotas), space_quota(**quotas), config, previous=stopped_process) == []

    def test_raises_when_log_quota_exceeded(self, config, stopped_process):
        new = stopped_process.with_changes(log_rate_limit=513, state=ProcessState.STARTED)
        violations = validate(new, org_quota(log_rate_limit=4096), space_quota(), config, previous=stopped_process)
        assert messages(violations, "log_rate_limit") == ["exceeds space log rate quota"]

    def test_raises_when_only_org_log_quota_exceeded(self, config, stopped_process):
        new = stopped_process.with_changes(log_rate_limit=10, state=ProcessState.STARTED)
        violations = validate(new, org_quota(log_rate_limit=5), space_quota(), config, previous=stopped_process)
        assert messages(violations, "log_rate_limit") == ["exceeds organization log rate quota"]

    def test_log_quota_not_exceeded(self, config, stopped_process):
        new = stopped_process.with_changes(log_rate_limit=512, state=ProcessState.STARTED)
        assert validate(new, org_quota(), space_quota(), config, previous=stopped_process) == []

    def test_unlimited_log_rate_with_limited_quotas(self, config, stopped_process):
        """무제한 로그 전송률은 두 범위 모두 무제한을 허용해야 하며, 범위마다 위반이 보고됩니다."""
        new = stopped_process.with_changes(log_rate_limit=-1, state=ProcessState.STARTED)
        violations = validate(new, org_quota(), space_quota(), config, previous=stopped_process)
        assert messages(violations, "log_rate_limit") == [
            "cannot be unlimited in organization 'my-org'.",
            "cannot be unlimited in space 'hi'.",
        ]

    def test_unlimited_log_rate_with_unlimited_quotas(self, config, stopped_process):
        new = stopped_process.with_changes(log_rate_limit=-1, state=ProcessState.STARTED)
        assert validate(new, org_quota(log_rate_limit=-1), space_quota(log_rate_limit=-1), config,
                        previous=stopped_process) == []

    def test_raises_when_org_instance_quota_exceeded(self, config, stopped_process):
        new = stopped_process.with_changes(instances=5, state=ProcessState.STARTED)
        violations = validate(new, org_quota(app_instance_limit=4, memory_limit=512, log_rate_limit=-1), None,
                              config, previous=stopped_process)
        assert kinds(violations) == ["app_instance_limit_exceeded"]

    def test_raises_when_space_instance_quota_exceeded(self, config, stopped_process):
        new = stopped_process.with_changes(instances=5, state=ProcessState.STARTED)
        violations = validate(
            new, org_quota(memory_limit=512, log_rate_limit=-1),
            space_quota(app_instance_limit=4, memory_limit=512, log_rate_limit=-1),
            config, previous=stopped_process,
        )
        assert kinds(violations) == ["space_app_instance_limit_exceeded"]

    def test_both_instance_ceilings_reported_separately(self, config, stopped_process):
        new = stopped_process.with_changes(instances=5, state=ProcessState.STARTED)
        quotas = dict(app_instance_limit=4, memory_limit=512, log_rate_limit=-1)
        violations = validate(new, org_quota(**quotas), space_quota(**quotas), config, previous=stopped_process)
        assert kinds(violations) == ["app_instance_limit_exceeded", "space_app_instance_limit_exceeded"]

    def test_instance_memory_limit(self, config, stopped_process):
        new = stopped_process.with_changes(state=ProcessState.STARTED)
        violations = validate(new, org_quota(instance_memory_limit=32), None, config, previous=stopped_process)
        assert kinds(violations) == ["instance_memory_limit_exceeded"]

    def test_usage_of_other_processes_counts_against_quota(self, config, stopped_process):
        new = stopped_process.with_changes(state=ProcessState.STARTED)
        violations = validate(new, org_quota(memory_in_use=1), None, config, previous=stopped_process)
        assert kinds(violations) == ["quota_exceeded"]

class TestScaleDownFromOverQuota:
    @pytest.fixture
    def started_process(self, stopped_process) -> ProcessSnapshot:
        return stopped_process.with_changes(state=ProcessState.STARTED)

    def test_allows_scaling_down_instances_below_quota(self, config, started_process):
        """쿼터를 넘은 상태에서 쿼터 이하로 인스턴스를 줄이는 것은 허용됩니다."""
        quota = org_quota(memory_limit=72)
        assert kinds(validate(started_process, quota, None, config)) == ["quota_exceeded"]

        new = started_process.with_changes(instances=1)
        assert validate(new, quota, None, config, previous=started_process) == []

    def test_raises_when_scaling_down_but_remaining_above_quota(self, config, started_process):
        new = started_process.with_changes(instances=1)
        violations = validate(new, org_quota(memory_limit=32), None, config, previous=started_process)
        assert kinds(violations) == ["quota_exceeded"]

    def test_allows_stopping_a_process_above_quota(self, config, started_process):
        new = started_process.with_changes(state=ProcessState.STOPPED)
        assert validate(new, org_quota(memory_limit=72), None, config, previous=started_process) == []

    def test_allows_reducing_memory_to_ceiling(self, config, stopped_process):
        quota = org_quota(memory_limit=64)

        too_much = stopped_process.with_changes(memory=40, state=ProcessState.STARTED)
        assert kinds(validate(too_much, quota, None, config, previous=stopped_process)) == ["quota_exceeded"]

        enough = stopped_process.with_changes(memory=32, state=ProcessState.STARTED)
        assert validate(enough, quota, None, config, previous=stopped_process) == []

    def test_unrelated_change_on_over_quota_process_is_allowed(self, config, started_process):
        """메모리/인스턴스/상태가 바뀌지 않은 변경은 쿼터 검사 대상이 아닙니다."""
        new = started_process.with_changes(command="bin/start")
        assert validate(new, org_quota(memory_limit=72), None, config, previous=started_process) == []
