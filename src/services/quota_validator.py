"""
프로세스 저장 전에 실행되는 검증 정책 모음.

각 정책은 독립적으로 실행되며, 위반 사항은 중단 없이 모두 누적됩니다.
조직/스페이스 쿼터 상한은 프로세스가 STARTED 상태일 때만 검사하므로,
중지된 프로세스는 쿼터를 넘는 값을 가진 채로 남아 있을 수 있습니다.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from src.config import PlatformConfig
from src.domain.constants import (
    UNLIMITED, MIN_PORT, MAX_PORT, QuotaScope, HealthCheckType, ReadinessCheckType,
)
from src.domain.models import (
    FieldViolation, ImageLifecycle, Lifecycle, PackageSnapshot, ProcessSnapshot, QuotaDefinitionSnapshot,
)


@dataclass(frozen=True)
class ValidationInput:
    process: ProcessSnapshot
    organization_quota: Optional[QuotaDefinitionSnapshot]
    space_quota: Optional[QuotaDefinitionSnapshot]
    config: PlatformConfig
    previous: Optional[ProcessSnapshot] = None
    lifecycle: Optional[Lifecycle] = None
    package: Optional[PackageSnapshot] = None

    def changed(self, *fields: str) -> bool:
        """신규 프로세스이거나 주어진 필드 중 하나라도 바뀌었으면 True."""
        if self.previous is None:
            return True
        return any(getattr(self.previous, f) != getattr(self.process, f) for f in fields)

    def scoped_quotas(self) -> List[QuotaDefinitionSnapshot]:
        return [q for q in (self.organization_quota, self.space_quota) if q is not None]


Policy = Callable[[ValidationInput], List[FieldViolation]]


def validate(
    process: ProcessSnapshot,
    organization_quota: Optional[QuotaDefinitionSnapshot],
    space_quota: Optional[QuotaDefinitionSnapshot],
    config: PlatformConfig,
    previous: Optional[ProcessSnapshot] = None,
    lifecycle: Optional[Lifecycle] = None,
    package: Optional[PackageSnapshot] = None,
) -> List[FieldViolation]:
    """
    프로세스 스냅샷을 모든 정책에 대해 검증합니다.

    Args:
        process: 저장하려는 (변경 후) 프로세스 스냅샷.
        organization_quota: 조직 쿼터. 없으면 조직 범위 검사를 건너뜁니다.
        space_quota: 스페이스 쿼터. 없으면 스페이스 범위 검사를 건너뜁니다.
        config: 플랫폼 설정 (디스크 상한, 허용 사용자 목록 등).
        previous: 현재 저장되어 있는 스냅샷. 신규 생성이면 None.
        lifecycle: 애플리케이션의 라이프사이클 변형.
        package: 애플리케이션의 최신 패키지.

    Returns:
        FieldViolation 목록. 비어 있으면 유효합니다.
    """
    data = ValidationInput(
        process=process,
        organization_quota=organization_quota,
        space_quota=space_quota,
        config=config,
        previous=previous,
        lifecycle=lifecycle,
        package=package,
    )
    violations: List[FieldViolation] = []
    for policy in POLICIES:
        violations.extend(policy(data))
    return violations


# --------------------------------------------------------------------------
## 항상 적용되는 정책
# --------------------------------------------------------------------------

def instances_policy(data: ValidationInput) -> List[FieldViolation]:
    if data.process.instances < 0:
        return [FieldViolation("instances", "less_than_zero", "must be greater than or equal to 0")]
    return []


def min_memory_policy(data: ValidationInput) -> List[FieldViolation]:
    minimum = data.config.minimum_app_memory
    if data.process.memory < minimum:
        return [FieldViolation("memory", "zero_or_less", f"must be greater than or equal to {minimum}")]
    return []


def sidecar_memory_policy(data: ValidationInput) -> List[FieldViolation]:
    # 사이드카는 프로세스의 메모리 할당을 나누어 쓰므로 본 프로세스 몫이 남아야 합니다.
    total = data.process.sidecar_memory
    if total and total >= data.process.memory:
        return [FieldViolation(
            "memory", "insufficient_for_sidecars",
            f"is not large enough to run all sidecar processes (sidecars use {total} MB)",
        )]
    return []


def disk_quota_policy(data: ValidationInput) -> List[FieldViolation]:
    disk = data.process.disk_quota
    maximum = data.config.maximum_app_disk_in_mb
    if disk < 1:
        return [FieldViolation("disk_quota", "zero_or_less", "too little disk requested (must be greater than zero)")]
    if disk > maximum:
        return [FieldViolation(
            "disk_quota", "too_much_disk",
            f"too much disk requested (requested {disk} MB - must be less than {maximum} MB)",
        )]
    return []


def min_log_rate_limit_policy(data: ValidationInput) -> List[FieldViolation]:
    if data.process.log_rate_limit < UNLIMITED:
        return [FieldViolation("log_rate_limit", "below_minimum", f"must be greater than or equal to {UNLIMITED}")]
    return []


def process_user_policy(data: ValidationInput) -> List[FieldViolation]:
    user = data.process.user
    if user is None:
        return []
    allowed = {data.config.default_process_user.lower()}
    allowed.update(u.lower() for u in data.config.additional_allowed_process_users)
    if user.lower() not in allowed:
        return [FieldViolation("user", "invalid", "invalid")]
    return []


def ports_policy(data: ValidationInput) -> List[FieldViolation]:
    ports = data.process.ports
    if ports is None:
        return []
    if len(ports) == 0:
        return [FieldViolation("ports", "empty", "must contain at least one port")]

    violations = []
    if len(ports) > data.config.max_app_ports:
        violations.append(FieldViolation(
            "ports", "too_many", f"may have at most {data.config.max_app_ports} exposed ports",
        ))
    if len(set(ports)) != len(ports):
        violations.append(FieldViolation("ports", "duplicate", "must not contain duplicate ports"))
    if any(isinstance(p, bool) or not isinstance(p, int) or not MIN_PORT <= p <= MAX_PORT for p in ports):
        violations.append(FieldViolation("ports", "out_of_range", f"must be integers between {MIN_PORT} and {MAX_PORT}"))
    return violations


def health_check_policy(data: ValidationInput) -> List[FieldViolation]:
    p = data.process
    violations = _check_consistency(
        "health_check", p.health_check_type, p.health_check_http_endpoint,
        p.health_check_invocation_timeout, HealthCheckType.ALL, HealthCheckType.HTTP,
    )
    maximum = data.config.maximum_health_check_timeout
    if p.health_check_timeout is not None:
        if p.health_check_timeout < 1:
            violations.append(FieldViolation("health_check_timeout", "zero_or_less", "must be greater than or equal to 1"))
        elif p.health_check_timeout > maximum:
            violations.append(FieldViolation("health_check_timeout", "maximum_exceeded", f"Maximum exceeded: max {maximum}s"))
    return violations


def readiness_health_check_policy(data: ValidationInput) -> List[FieldViolation]:
    p = data.process
    return _check_consistency(
        "readiness_health_check", p.readiness_health_check_type, p.readiness_health_check_http_endpoint,
        p.readiness_health_check_invocation_timeout, ReadinessCheckType.ALL, ReadinessCheckType.HTTP,
    )


def _check_consistency(prefix, check_type, endpoint, invocation_timeout, valid_types, http_type) -> List[FieldViolation]:
    violations = []
    if check_type not in valid_types:
        violations.append(FieldViolation(f"{prefix}_type", "invalid", f"must be one of {', '.join(valid_types)}"))
    elif check_type == http_type and not endpoint:
        violations.append(FieldViolation(f"{prefix}_http_endpoint", "required", f'is required when {prefix}_type is "http"'))
    elif check_type != http_type and endpoint:
        violations.append(FieldViolation(f"{prefix}_type", "endpoint_not_allowed", 'must be "http" to set an HTTP endpoint'))
    if invocation_timeout is not None and invocation_timeout < 1:
        violations.append(FieldViolation(f"{prefix}_invocation_timeout", "zero_or_less", "must be greater than or equal to 1"))
    return violations


def lifecycle_policy(data: ValidationInput) -> List[FieldViolation]:
    lifecycle, package = data.lifecycle, data.package
    if lifecycle is None:
        return []

    image_lifecycle = isinstance(lifecycle, ImageLifecycle)
    violations = []
    if package is not None and package.is_image and not image_lifecycle:
        violations.append(FieldViolation(
            "lifecycle_type", "incompatible_package", "image package is incompatible with buildpack lifecycle",
        ))
    if package is not None and not package.is_image and image_lifecycle:
        violations.append(FieldViolation(
            "lifecycle_type", "incompatible_package", "bits package is incompatible with image lifecycle",
        ))
    if image_lifecycle and data.process.started and not data.config.image_lifecycle_enabled:
        violations.append(FieldViolation(
            "lifecycle_type", "image_lifecycle_disabled", "image support has not been enabled",
        ))
    return violations


# --------------------------------------------------------------------------
## 조직/스페이스 쿼터 정책 (STARTED 상태에서만 적용)
# --------------------------------------------------------------------------

def _error_name(quota: QuotaDefinitionSnapshot, name: str) -> str:
    return f"space_{name}" if quota.scope == QuotaScope.SPACE else name


def max_memory_policy(data: ValidationInput) -> List[FieldViolation]:
    # 변경 후 총량으로 판단하므로, 쿼터 이하로 줄이는 변경은 통과하고
    # 줄였어도 여전히 상한을 넘으면 실패합니다.
    if not data.process.started or not data.changed("memory", "instances", "state"):
        return []
    requested = data.process.memory * data.process.instances
    violations = []
    for quota in data.scoped_quotas():
        if quota.memory_limit == UNLIMITED:
            continue
        if requested + quota.memory_in_use > quota.memory_limit:
            name = _error_name(quota, "quota_exceeded")
            violations.append(FieldViolation("memory", name, name))
    return violations


def max_instance_memory_policy(data: ValidationInput) -> List[FieldViolation]:
    if not data.process.started or not data.changed("memory", "state"):
        return []
    violations = []
    for quota in data.scoped_quotas():
        if quota.instance_memory_limit == UNLIMITED:
            continue
        if data.process.memory > quota.instance_memory_limit:
            name = _error_name(quota, "instance_memory_limit_exceeded")
            violations.append(FieldViolation("memory", name, name))
    return violations


def max_app_instances_policy(data: ValidationInput) -> List[FieldViolation]:
    if not data.process.started or not data.changed("instances", "state"):
        return []
    violations = []
    for quota in data.scoped_quotas():
        if quota.app_instance_limit == UNLIMITED:
            continue
        if data.process.instances + quota.instances_in_use > quota.app_instance_limit:
            name = _error_name(quota, "app_instance_limit_exceeded")
            violations.append(FieldViolation("instances", name, name))
    return violations


def max_log_rate_limit_policy(data: ValidationInput) -> List[FieldViolation]:
    if not data.process.started or not data.changed("log_rate_limit", "instances", "state"):
        return []
    p = data.process
    violations = []
    for quota in data.scoped_quotas():
        if quota.log_rate_limit == UNLIMITED:
            continue
        if p.log_rate_limit == UNLIMITED:
            violations.append(FieldViolation(
                "log_rate_limit", "unlimited_not_allowed",
                f"cannot be unlimited in {quota.scope} '{quota.scope_name}'.",
            ))
        elif p.log_rate_limit * p.instances + quota.log_rate_in_use > quota.log_rate_limit:
            violations.append(FieldViolation(
                "log_rate_limit", _error_name(quota, "log_rate_quota_exceeded"),
                f"exceeds {quota.scope} log rate quota",
            ))
    return violations


POLICIES: Tuple[Policy, ...] = (
    instances_policy,
    min_memory_policy,
    sidecar_memory_policy,
    disk_quota_policy,
    min_log_rate_limit_policy,
    process_user_policy,
    ports_policy,
    health_check_policy,
    readiness_health_check_policy,
    lifecycle_policy,
    max_memory_policy,
    max_instance_memory_policy,
    max_app_instances_policy,
    max_log_rate_limit_policy,
)
