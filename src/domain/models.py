"""
리졸버가 다루는 불변 값 타입 모음.

데이터베이스 레코드(src.database.models)를 그대로 넘기지 않고, 한 시점의 상태를
스냅샷으로 고정해 순수 함수(분류기, 포트 리졸버, 쿼터 검증기, 어댑터)에 전달합니다.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

from src.domain.constants import (
    WEB_PROCESS_TYPE, ProcessState, HealthCheckType, ReadinessCheckType, WorkloadKind,
)


# --------------------------------------------------------------------------
## 라이프사이클 (buildpack / image)
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildpackLifecycle:
    """소스 코드를 buildpack으로 컴파일해 실행하는 라이프사이클."""
    buildpacks: Tuple[str, ...] = ()
    stack: Optional[str] = None

    @property
    def custom_buildpack_url(self) -> Optional[str]:
        for buildpack in self.buildpacks:
            if "://" in buildpack or buildpack.startswith("git@"):
                return buildpack
        return None


@dataclass(frozen=True)
class ImageLifecycle:
    """미리 빌드된 컨테이너 이미지를 그대로 실행하는 라이프사이클."""


Lifecycle = Union[BuildpackLifecycle, ImageLifecycle]


@dataclass(frozen=True)
class ImageReference:
    image: str
    username: Optional[str] = None
    password: Optional[str] = None


# --------------------------------------------------------------------------
## 빌드 산출물
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class PackageSnapshot:
    """
    업로드된 소스 또는 이미지 참조.

    소스 패키지는 업로드가 끝나기 전까지 checksum이 비어 있습니다.
    """
    guid: str
    checksum: Optional[str] = None
    image: Optional[ImageReference] = None
    created_at: Optional[datetime] = None

    @property
    def is_image(self) -> bool:
        return self.image is not None

    @property
    def is_blank(self) -> bool:
        if self.is_image:
            return False
        return not (self.checksum and self.checksum.strip())


@dataclass(frozen=True)
class BuildSnapshot:
    guid: str
    state: str
    package_guid: Optional[str] = None
    error_id: Optional[str] = None
    error_description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DropletSnapshot:
    """
    스테이징이 끝난 실행 산출물.

    execution_metadata는 외부 빌드 파이프라인이 만든 원본 문자열이며 신뢰하지 않습니다.
    """
    guid: str
    state: str
    execution_metadata: Optional[str] = None
    process_types: Dict[str, str] = field(default_factory=dict)
    image_receipt: Optional[str] = None
    buildpack_receipt_name: Optional[str] = None
    buildpack_receipt_guid: Optional[str] = None
    error_id: Optional[str] = None
    error_description: Optional[str] = None


@dataclass(frozen=True)
class RevisionSnapshot:
    guid: str
    droplet: Optional[DropletSnapshot] = None
    environment_variables: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RouteMappingSnapshot:
    process_type: str
    app_port: int


@dataclass(frozen=True)
class SidecarSnapshot:
    """프로세스 컨테이너에 함께 붙는 보조 프로세스. memory가 None이면 별도 할당이 없습니다."""
    name: str
    memory: Optional[int] = None


# --------------------------------------------------------------------------
## 애플리케이션 / 프로세스
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class AppSnapshot:
    guid: str
    name: str
    lifecycle: Lifecycle = field(default_factory=BuildpackLifecycle)
    environment_variables: Dict[str, str] = field(default_factory=dict)
    revisions_enabled: bool = True
    droplet: Optional[DropletSnapshot] = None

    @property
    def is_image(self) -> bool:
        return isinstance(self.lifecycle, ImageLifecycle)


@dataclass(frozen=True)
class ProcessSnapshot:
    """
    하나의 프로세스(web, worker 등)의 한 시점 상태.

    ports가 None이면 "사용자가 지정하지 않음"을 뜻하며, 라이프사이클 기본값을 따릅니다.
    """
    guid: str
    type: str
    instances: int = 1
    memory: int = 1024
    disk_quota: int = 1024
    log_rate_limit: int = 1_048_576
    state: str = ProcessState.STOPPED
    ports: Optional[Tuple[int, ...]] = None
    health_check_type: str = HealthCheckType.PORT
    health_check_http_endpoint: Optional[str] = None
    health_check_timeout: Optional[int] = None
    health_check_invocation_timeout: Optional[int] = None
    readiness_health_check_type: str = ReadinessCheckType.PROCESS
    readiness_health_check_http_endpoint: Optional[str] = None
    readiness_health_check_invocation_timeout: Optional[int] = None
    user: Optional[str] = None
    command: Optional[str] = None
    version: Optional[str] = None
    file_descriptors: int = 16_384
    metadata: Dict[str, Any] = field(default_factory=dict)
    revision: Optional[RevisionSnapshot] = None
    sidecars: Tuple[SidecarSnapshot, ...] = ()

    def __post_init__(self):
        if self.ports is not None and not isinstance(self.ports, tuple):
            object.__setattr__(self, "ports", tuple(self.ports))
        if not isinstance(self.sidecars, tuple):
            object.__setattr__(self, "sidecars", tuple(self.sidecars))

    @property
    def started(self) -> bool:
        return self.state == ProcessState.STARTED

    @property
    def stopped(self) -> bool:
        return self.state == ProcessState.STOPPED

    @property
    def is_web(self) -> bool:
        return self.type == WEB_PROCESS_TYPE

    @property
    def sidecar_memory(self) -> int:
        """이 프로세스 타입에 붙은 사이드카들의 메모리 합계(MB)."""
        return sum(s.memory or 0 for s in self.sidecars)

    @property
    def desired_instances(self) -> int:
        return self.instances if self.started else 0

    @property
    def console(self) -> bool:
        return self.metadata.get("console") is True

    @property
    def debug(self) -> Optional[str]:
        return self.metadata.get("debug")

    def with_changes(self, **changes) -> "ProcessSnapshot":
        return replace(self, **changes)


@dataclass(frozen=True)
class TaskSnapshot:
    guid: str
    name: str
    command: str
    memory: int = 1024
    disk_quota: int = 1024
    log_rate_limit: int = 1_048_576
    user: Optional[str] = None


# --------------------------------------------------------------------------
## 쿼터 / 검증 결과
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class QuotaDefinitionSnapshot:
    """
    조직(organization) 또는 스페이스(space) 범위의 쿼터 정의.

    *_in_use 필드는 같은 범위 안의 "다른" 프로세스들이 이미 사용 중인 양입니다.
    값이 UNLIMITED(-1)인 상한은 검사하지 않습니다 (memory_limit 제외).
    """
    name: str
    scope: str
    scope_name: str
    memory_limit: int
    instance_memory_limit: int = -1
    app_instance_limit: int = -1
    log_rate_limit: int = -1
    memory_in_use: int = 0
    instances_in_use: int = 0
    log_rate_in_use: int = 0


@dataclass(frozen=True)
class FieldViolation:
    field: str
    kind: str
    message: str


# --------------------------------------------------------------------------
## 오케스트레이터 입력
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class DesiredStateDescriptor:
    """스케줄러에 전달되는 desired LRP / task 명세."""
    kind: str
    guid: str
    ports: Tuple[int, ...]
    run_as_user: str
    start_command: str
    image_ref: Optional[str] = None
    image_username: Optional[str] = None
    image_password: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)
    instances: int = 0
    memory: int = 0
    disk_quota: int = 0
    log_rate_limit: int = 0
    file_descriptors: int = 0
    health_check_type: Optional[str] = None
    health_check_http_endpoint: Optional[str] = None
    readiness_health_check_type: Optional[str] = None
    readiness_health_check_http_endpoint: Optional[str] = None
    version: Optional[str] = None

    @property
    def is_task(self) -> bool:
        return self.kind == WorkloadKind.TASK
