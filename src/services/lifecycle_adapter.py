from typing import Dict, Iterable, Optional, Sequence

from src.config import PlatformConfig
from src.domain.constants import WorkloadKind
from src.domain.models import (
    AppSnapshot, BuildpackLifecycle, DesiredStateDescriptor, DropletSnapshot, ImageLifecycle,
    PackageSnapshot, ProcessSnapshot, RouteMappingSnapshot, TaskSnapshot,
)
from src.services.port_resolver import open_ports
from src.utils.execution_metadata import parse_execution_metadata


def actual_droplet(process: ProcessSnapshot, app: AppSnapshot) -> Optional[DropletSnapshot]:
    """
    실행 중인 인스턴스가 사용해야 하는 droplet.

    revision이 활성화되어 있고 프로세스가 revision을 가지고 있으면 revision의 droplet,
    그 외에는 애플리케이션의 현재 droplet입니다.
    """
    if app.revisions_enabled and process.revision is not None and process.revision.droplet is not None:
        return process.revision.droplet
    return app.droplet


def environment_for(process: Optional[ProcessSnapshot], app: AppSnapshot) -> Dict[str, str]:
    if process is not None and app.revisions_enabled and process.revision is not None:
        return dict(process.revision.environment_variables)
    return dict(app.environment_variables)


def run_action_user(user: Optional[str], app: AppSnapshot, droplet: Optional[DropletSnapshot], config: PlatformConfig) -> str:
    """
    컨테이너 안에서 프로세스를 실행할 사용자.

    image 라이프사이클: 명시된 사용자 → droplet 메타데이터의 user → 기본 이미지 사용자.
    buildpack 라이프사이클: 명시된 사용자 → 기본 프로세스 사용자.
    메타데이터가 없거나 깨져 있어도 예외 없이 기본값으로 돌아갑니다.
    """
    if user:
        return user
    if app.is_image:
        metadata = parse_execution_metadata(droplet.execution_metadata if droplet else None)
        return metadata.user or config.default_image_user
    return config.default_process_user


def detected_start_command(process_type: str, droplet: Optional[DropletSnapshot]) -> str:
    if droplet is None:
        return ""
    command = droplet.process_types.get(process_type)
    if command:
        return command
    return parse_execution_metadata(droplet.execution_metadata).process_types.get(process_type, "")


def specified_or_detected_command(process: ProcessSnapshot, droplet: Optional[DropletSnapshot]) -> str:
    if process.command:
        return process.command
    return detected_start_command(process.type, droplet)


def build_desired_state(
    process: Optional[ProcessSnapshot],
    app: AppSnapshot,
    droplet: Optional[DropletSnapshot],
    package: Optional[PackageSnapshot],
    config: PlatformConfig,
    route_mappings: Iterable[RouteMappingSnapshot] = (),
    image_ports: Optional[Sequence[int]] = None,
    task: Optional[TaskSnapshot] = None,
) -> DesiredStateDescriptor:
    """
    해석된 프로세스 상태를 스케줄러가 받는 desired-state 명세로 변환합니다.

    task가 주어지면 TASK 명세를, 아니면 프로세스의 LRP 명세를 만듭니다.

    Args:
        process: 대상 프로세스 스냅샷 (TASK일 때는 None 가능).
        app: 소유 애플리케이션 스냅샷.
        droplet: 실행할 droplet (보통 actual_droplet 결과). 없으면 None.
        package: 애플리케이션의 최신 패키지 (image 참조와 레지스트리 자격 증명).
        config: 플랫폼 설정.
        route_mappings: 컨테이너 측 포트 계산에 사용할 라우트 매핑.
        image_ports: 이미지가 노출한 TCP 포트.
        task: 일회성 작업 스냅샷.

    Returns:
        DesiredStateDescriptor.

    Raises:
        TypeError: 알 수 없는 라이프사이클 변형일 때.
    """
    if task is not None:
        return _task_descriptor(task, app, droplet, package, config)
    if process is None:
        raise ValueError("Either a process or a task is required to build a desired state.")

    lifecycle = app.lifecycle
    image_ref = image_username = image_password = None
    if isinstance(lifecycle, ImageLifecycle):
        if package is not None and package.image is not None:
            image_ref = package.image.image
            image_username = package.image.username
            image_password = package.image.password
        elif droplet is not None:
            image_ref = droplet.image_receipt
    elif not isinstance(lifecycle, BuildpackLifecycle):
        raise TypeError(f"Unsupported lifecycle: {lifecycle!r}")

    return DesiredStateDescriptor(
        kind=WorkloadKind.LRP,
        guid=process.guid,
        ports=open_ports(process, lifecycle, image_ports, route_mappings),
        run_as_user=run_action_user(process.user, app, droplet, config),
        start_command=specified_or_detected_command(process, droplet),
        image_ref=image_ref,
        image_username=image_username,
        image_password=image_password,
        environment=environment_for(process, app),
        instances=process.desired_instances,
        memory=process.memory,
        disk_quota=process.disk_quota,
        log_rate_limit=process.log_rate_limit,
        file_descriptors=process.file_descriptors,
        health_check_type=process.health_check_type,
        health_check_http_endpoint=process.health_check_http_endpoint,
        readiness_health_check_type=process.readiness_health_check_type,
        readiness_health_check_http_endpoint=process.readiness_health_check_http_endpoint,
        version=process.version,
    )


def _task_descriptor(task, app, droplet, package, config) -> DesiredStateDescriptor:
    lifecycle = app.lifecycle
    image_ref = image_username = image_password = None
    if isinstance(lifecycle, ImageLifecycle):
        # task는 스테이징 시점에 기록된 이미지 receipt로 실행합니다.
        image_ref = droplet.image_receipt if droplet is not None else None
        if package is not None and package.image is not None:
            image_ref = image_ref or package.image.image
            image_username = package.image.username
            image_password = package.image.password
    elif not isinstance(lifecycle, BuildpackLifecycle):
        raise TypeError(f"Unsupported lifecycle: {lifecycle!r}")

    return DesiredStateDescriptor(
        kind=WorkloadKind.TASK,
        guid=task.guid,
        ports=(),
        run_as_user=run_action_user(task.user, app, droplet, config),
        start_command=task.command,
        image_ref=image_ref,
        image_username=image_username,
        image_password=image_password,
        environment=environment_for(None, app),
        instances=1,
        memory=task.memory,
        disk_quota=task.disk_quota,
        log_rate_limit=task.log_rate_limit,
        file_descriptors=config.instance_file_descriptor_limit,
    )
