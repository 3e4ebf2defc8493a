"""데이터베이스 모델을 리졸버가 사용하는 불변 스냅샷으로 변환합니다."""
from typing import Dict, Iterable, Optional, Tuple

from src.database import models
from src.domain.models import (
    AppSnapshot, BuildSnapshot, BuildpackLifecycle, DropletSnapshot, ImageLifecycle, ImageReference,
    PackageSnapshot, ProcessSnapshot, QuotaDefinitionSnapshot, RevisionSnapshot, RouteMappingSnapshot, SidecarSnapshot,
    TaskSnapshot,
)

IMAGE_LIFECYCLE_TYPE = "image"


def droplet_snapshot(droplet: Optional[models.Droplet]) -> Optional[DropletSnapshot]:
    if droplet is None:
        return None
    return DropletSnapshot(
        guid=droplet.guid,
        state=droplet.state,
        execution_metadata=droplet.execution_metadata,
        process_types=dict(droplet.process_types or {}),
        image_receipt=droplet.image_receipt,
        buildpack_receipt_name=droplet.buildpack_receipt_name,
        buildpack_receipt_guid=droplet.buildpack_receipt_guid,
        error_id=droplet.error_id,
        error_description=droplet.error_description,
    )


def app_snapshot(app: models.App, droplet: Optional[models.Droplet]) -> AppSnapshot:
    if app.lifecycle_type == IMAGE_LIFECYCLE_TYPE:
        lifecycle = ImageLifecycle()
    else:
        lifecycle = BuildpackLifecycle(buildpacks=tuple(app.buildpacks or ()), stack=app.stack)
    return AppSnapshot(
        guid=app.guid,
        name=app.name,
        lifecycle=lifecycle,
        environment_variables=dict(app.environment_variables or {}),
        revisions_enabled=bool(app.revisions_enabled),
        droplet=droplet_snapshot(droplet),
    )


def revision_snapshot(revision: Optional[models.Revision], droplet: Optional[models.Droplet]) -> Optional[RevisionSnapshot]:
    if revision is None:
        return None
    return RevisionSnapshot(
        guid=revision.guid,
        droplet=droplet_snapshot(droplet),
        environment_variables=dict(revision.environment_variables or {}),
    )


def process_snapshot(
    process: models.Process,
    revision: Optional[RevisionSnapshot] = None,
    sidecars: Iterable[models.Sidecar] = (),
) -> ProcessSnapshot:
    return ProcessSnapshot(
        guid=process.guid,
        type=process.type,
        instances=process.instances,
        memory=process.memory,
        disk_quota=process.disk_quota,
        log_rate_limit=process.log_rate_limit,
        state=process.state,
        ports=tuple(process.ports) if process.ports is not None else None,
        health_check_type=process.health_check_type,
        health_check_http_endpoint=process.health_check_http_endpoint,
        health_check_timeout=process.health_check_timeout,
        health_check_invocation_timeout=process.health_check_invocation_timeout,
        readiness_health_check_type=process.readiness_health_check_type,
        readiness_health_check_http_endpoint=process.readiness_health_check_http_endpoint,
        readiness_health_check_invocation_timeout=process.readiness_health_check_invocation_timeout,
        user=process.user,
        command=process.command,
        version=process.version,
        file_descriptors=process.file_descriptors,
        metadata=dict(process.process_metadata or {}),
        revision=revision,
        sidecars=sidecar_snapshots(sidecars),
    )


def package_snapshot(package: Optional[models.Package]) -> Optional[PackageSnapshot]:
    if package is None:
        return None
    image = None
    if package.image:
        image = ImageReference(image=package.image, username=package.image_username, password=package.image_password)
    return PackageSnapshot(guid=package.guid, checksum=package.checksum, image=image, created_at=package.created_at)


def build_snapshot(build: Optional[models.Build]) -> Optional[BuildSnapshot]:
    if build is None:
        return None
    return BuildSnapshot(
        guid=build.guid,
        state=build.state,
        package_guid=build.package_guid,
        error_id=build.error_id,
        error_description=build.error_description,
        created_at=build.created_at,
    )


def route_mapping_snapshot(mapping: models.RouteMapping) -> RouteMappingSnapshot:
    return RouteMappingSnapshot(process_type=mapping.process_type, app_port=mapping.app_port)


def task_snapshot(task: models.Task) -> TaskSnapshot:
    return TaskSnapshot(
        guid=task.guid,
        name=task.name,
        command=task.command,
        memory=task.memory,
        disk_quota=task.disk_quota,
        log_rate_limit=task.log_rate_limit,
        user=task.user,
    )


def quota_snapshot(
    quota: Optional[models.QuotaDefinition], scope: str, scope_name: str, usage: Dict[str, int]
) -> Optional[QuotaDefinitionSnapshot]:
    if quota is None:
        return None
    return QuotaDefinitionSnapshot(
        name=quota.name,
        scope=scope,
        scope_name=scope_name,
        memory_limit=quota.memory_limit,
        instance_memory_limit=quota.instance_memory_limit,
        app_instance_limit=quota.app_instance_limit,
        log_rate_limit=quota.log_rate_limit,
        memory_in_use=usage.get("memory", 0),
        instances_in_use=usage.get("instances", 0),
        log_rate_in_use=usage.get("log_rate", 0),
    )


def sidecar_snapshots(sidecars: Iterable[models.Sidecar]) -> Tuple[SidecarSnapshot, ...]:
    return tuple(SidecarSnapshot(name=s.name, memory=s.memory) for s in sidecars)
