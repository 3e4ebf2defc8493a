import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from src.config import PlatformConfig
from src.database import models
from src.domain.constants import ProcessState, QuotaScope
from src.domain.models import (
    AppSnapshot, BuildpackLifecycle, DesiredStateDescriptor, FieldViolation, ProcessSnapshot, QuotaDefinitionSnapshot,
)
from src.repositories.interfaces import (
    IAppRepository, IProcessRepository, IQuotaRepository, IUsageEventRepository,
)
from src.services import lifecycle_adapter, port_resolver, quota_validator, state_classifier, version_tracker
from src.services import snapshot_mapper as mapper
from src.services.exceptions import (
    AppNotFoundError, ProcessNotFoundError, ProcessTypeAlreadyExistsError, ProcessValidationError,
)

logger = logging.getLogger(__name__)

# update_process로 변경할 수 있는 프로세스 필드
UPDATABLE_FIELDS: Tuple[str, ...] = (
    "instances",
    "memory",
    "disk_quota",
    "log_rate_limit",
    "state",
    "ports",
    "health_check_type",
    "health_check_http_endpoint",
    "health_check_timeout",
    "health_check_invocation_timeout",
    "readiness_health_check_type",
    "readiness_health_check_http_endpoint",
    "readiness_health_check_invocation_timeout",
    "user",
    "command",
)
METADATA_FIELDS: Tuple[str, ...] = ("console", "debug")


class ProcessService:
    """
    프로세스의 생성, 변경, 삭제와 desired-state 명세 생성을 조율하는 서비스입니다.

    레코드를 스냅샷으로 바꾼 뒤 분류기, 포트 리졸버, 쿼터 검증기, 버전 추적기,
    라이프사이클 어댑터를 순서대로 적용하고, 검증을 통과한 상태만 저장합니다.
    """

    def __init__(
        self,
        process_repo: IProcessRepository,
        app_repo: IAppRepository,
        quota_repo: IQuotaRepository,
        usage_event_repo: IUsageEventRepository,
        config: PlatformConfig,
    ):
        """
        ProcessService를 초기화합니다.

        Args:
            process_repo: 프로세스 데이터에 접근하기 위한 리포지토리.
            app_repo: 애플리케이션, 패키지, 빌드, droplet 데이터에 접근하기 위한 리포지토리.
            quota_repo: 조직/스페이스 쿼터와 사용량을 조회하기 위한 리포지토리.
            usage_event_repo: 사용량 이벤트를 기록하기 위한 리포지토리.
            config: 플랫폼 기본값과 상한을 담은 설정.
        """
        self.process_repo = process_repo
        self.app_repo = app_repo
        self.quota_repo = quota_repo
        self.usage_event_repo = usage_event_repo
        self.config = config

    # ----------------------------------------------------------------------
    ## 생성 / 변경 / 삭제
    # ----------------------------------------------------------------------

    def create_process(self, app_guid: str, process_type: str, **attributes) -> Dict[str, Any]:
        """
        애플리케이션에 새 프로세스 타입을 추가합니다.

        메모리, 디스크, 로그 전송률, 파일 디스크립터 제한은 값이 주어지지 않으면
        플랫폼 설정의 기본값을 사용하며, 생성 시점에 버전 토큰이 발급됩니다.

        Args:
            app_guid: 프로세스를 소유할 애플리케이션의 guid.
            process_type: 프로세스 타입 이름 (예: 'web').
            **attributes: UPDATABLE_FIELDS 및 console/debug 중 초기값으로 지정할 필드.

        Returns:
            생성된 프로세스의 정보를 담은 딕셔너리.

        Raises:
            AppNotFoundError: 애플리케이션을 찾을 수 없을 때.
            ProcessTypeAlreadyExistsError: 같은 타입의 프로세스가 이미 있을 때.
            ProcessValidationError: 초기값이 검증 정책을 위반할 때.
            ValueError: 알 수 없는 필드가 주어졌을 때.
        """
        app = self.app_repo.find_by_guid(app_guid)
        if not app:
            raise AppNotFoundError(f"App with guid '{app_guid}' not found.")
        if self.process_repo.find_by_app_and_type(app.id, process_type):
            raise ProcessTypeAlreadyExistsError(f"Process type '{process_type}' already exists for app '{app_guid}'.")

        fields, metadata = self._split_changes(attributes)
        defaults = {
            "memory": self.config.default_app_memory,
            "disk_quota": self.config.default_app_disk_in_mb,
            "log_rate_limit": self.config.default_app_log_rate_limit_in_bytes_per_second,
        }
        snapshot = ProcessSnapshot(
            guid=str(uuid.uuid4()),
            type=process_type,
            file_descriptors=self.config.instance_file_descriptor_limit,
            metadata=metadata,
            sidecars=mapper.sidecar_snapshots(self.app_repo.list_sidecars(app.id, process_type)),
            **{**defaults, **fields},
        )

        self._raise_on_violations(self._validate(snapshot, None, app, process_id=None))
        snapshot = snapshot.with_changes(version=version_tracker.bump_if_needed(None, snapshot))

        record = models.Process(app_id=app.id)
        self._apply(record, snapshot)
        created = self.process_repo.create(record)
        logger.info("Process %s (%s) created for app '%s'.", created.guid, process_type, app.name)
        return self._to_dict(created)

    def update_process(self, process_guid: str, skip_version_update: bool = False, **changes) -> Dict[str, Any]:
        """
        프로세스의 필드를 변경합니다.

        변경 후 상태 전체를 검증하고, 위반이 하나라도 있으면 아무것도 저장하지 않습니다.
        재배포가 필요한 필드가 바뀌면 버전 토큰을 새로 발급합니다.

        Args:
            process_guid: 변경할 프로세스의 guid.
            skip_version_update: 관리 작업에서 버전 갱신을 생략할 때 True.
            **changes: 변경할 필드와 값.

        Returns:
            변경된 프로세스의 정보를 담은 딕셔너리.

        Raises:
            ProcessNotFoundError: 프로세스를 찾을 수 없을 때.
            ProcessValidationError: 변경 후 상태가 검증 정책을 위반할 때.
            ValueError: 알 수 없는 필드가 주어졌을 때.
        """
        record = self.process_repo.find_by_guid(process_guid)
        if not record:
            raise ProcessNotFoundError(f"Process with guid '{process_guid}' not found.")

        fields, metadata = self._split_changes(changes)
        old = self._process_snapshot(record)
        new = old.with_changes(**fields, metadata={**old.metadata, **metadata})

        self._raise_on_violations(self._validate(new, old, record.app, process_id=record.id))
        new = new.with_changes(version=version_tracker.bump_if_needed(old, new, skip=skip_version_update))

        event = self._usage_event_for_update(old, new, record.app)
        if event is not None:
            self.usage_event_repo.add(event)

        self._apply(record, new)
        saved = self.process_repo.save(record)
        logger.info("Process %s updated: %s", saved.guid, ", ".join(sorted(changes)) or "no changes")
        return self._to_dict(saved)

    def destroy_process(self, process_guid: str) -> bool:
        """
        프로세스를 삭제합니다.

        사용량 집계와 동시 변경이 경쟁하지 않도록 레코드를 잠근 뒤 삭제하며,
        쿼터를 초과한 상태의 프로세스도 검증 없이 삭제할 수 있습니다.

        Raises:
            ProcessNotFoundError: 프로세스를 찾을 수 없을 때.
        """
        record = self.process_repo.find_by_guid_for_update(process_guid)
        if not record:
            raise ProcessNotFoundError(f"Process with guid '{process_guid}' not found.")

        if record.state == ProcessState.STARTED:
            snapshot = self._process_snapshot(record)
            self.usage_event_repo.add(self._usage_event(
                snapshot.with_changes(state=ProcessState.STOPPED), snapshot, record.app,
            ))

        self.process_repo.delete(record)
        logger.info("Process %s deleted.", process_guid)
        return True

    def validate_process(self, process_guid: str) -> List[FieldViolation]:
        """저장된 프로세스를 현재 쿼터 기준으로 다시 검증합니다. 신규 생성처럼 모든 정책을 적용합니다."""
        record = self.process_repo.find_by_guid(process_guid)
        if not record:
            raise ProcessNotFoundError(f"Process with guid '{process_guid}' not found.")
        return self._validate(self._process_snapshot(record), None, record.app, process_id=record.id)

    # ----------------------------------------------------------------------
    ## 조회 (스테이징 상태, desired-state 명세)
    # ----------------------------------------------------------------------

    def get_package_state(self, process_guid: str) -> str:
        record = self._get(process_guid)
        package, build = self._latest_package_and_build(record.app)
        return state_classifier.classify(package, build)

    def needs_staging(self, process_guid: str) -> bool:
        record = self._get(process_guid)
        package, build = self._latest_package_and_build(record.app)
        return state_classifier.needs_staging(self._process_snapshot(record), package, build)

    def staging_failure(self, process_guid: str) -> Optional[Dict[str, Optional[str]]]:
        """스테이징 실패 사유와 스테이징 작업 ID를 조회합니다. 빌드도 droplet도 없으면 None."""
        record = self._get(process_guid)
        build = mapper.build_snapshot(self.app_repo.latest_build(record.app.id))
        droplet = mapper.droplet_snapshot(self.app_repo.latest_droplet(record.app.id))
        failure = state_classifier.staging_failure(build, droplet)
        if failure is None:
            return None
        error_id, error_description = failure
        return {
            "error_id": error_id,
            "error_description": error_description,
            "staging_task_id": state_classifier.staging_task_id(build, droplet),
        }

    def desired_lrp(self, process_guid: str) -> DesiredStateDescriptor:
        """
        프로세스의 desired LRP 명세를 만듭니다.

        Raises:
            ProcessNotFoundError: 프로세스를 찾을 수 없을 때.
        """
        record = self._get(process_guid)
        process = self._process_snapshot(record)
        app = self._app_snapshot(record.app)
        package, build = self._latest_package_and_build(record.app)
        droplet = lifecycle_adapter.actual_droplet(process, app)
        mappings = [mapper.route_mapping_snapshot(m) for m in self.app_repo.list_route_mappings(record.app.id, process.type)]
        image_ports = port_resolver.image_exposed_ports(app, droplet, state_classifier.classify(package, build))

        return lifecycle_adapter.build_desired_state(
            process, app, droplet, package, self.config, route_mappings=mappings, image_ports=image_ports,
        )

    def desired_task(self, task_guid: str) -> DesiredStateDescriptor:
        """
        task의 desired-state 명세를 만듭니다.

        Raises:
            ProcessNotFoundError: task를 찾을 수 없을 때.
        """
        task = self.app_repo.find_task(task_guid)
        if not task:
            raise ProcessNotFoundError(f"Task with guid '{task_guid}' not found.")
        app = self._app_snapshot(task.app)
        package = mapper.package_snapshot(self.app_repo.latest_package(task.app.id))
        return lifecycle_adapter.build_desired_state(
            None, app, app.droplet, package, self.config, task=mapper.task_snapshot(task),
        )

    # ----------------------------------------------------------------------
    ## 내부 헬퍼
    # ----------------------------------------------------------------------

    def _get(self, process_guid: str) -> models.Process:
        record = self.process_repo.find_by_guid(process_guid)
        if not record:
            raise ProcessNotFoundError(f"Process with guid '{process_guid}' not found.")
        return record

    def _split_changes(self, changes: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        unknown = set(changes) - set(UPDATABLE_FIELDS) - set(METADATA_FIELDS)
        if unknown:
            raise ValueError(f"Unknown process fields: {', '.join(sorted(unknown))}.")
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if fields.get("ports") is not None:
            fields["ports"] = tuple(fields["ports"])
        metadata = {k: v for k, v in changes.items() if k in METADATA_FIELDS}
        return fields, metadata

    def _process_snapshot(self, record: models.Process) -> ProcessSnapshot:
        revision = None
        if record.revision_guid:
            revision_record = self.app_repo.find_revision(record.revision_guid)
            if revision_record is not None:
                droplet = self.app_repo.find_droplet(revision_record.droplet_guid)
                revision = mapper.revision_snapshot(revision_record, droplet)
        sidecars = self.app_repo.list_sidecars(record.app.id, record.type)
        return mapper.process_snapshot(record, revision, sidecars)

    def _app_snapshot(self, app: models.App) -> AppSnapshot:
        return mapper.app_snapshot(app, self.app_repo.find_droplet(app.droplet_guid))

    def _latest_package_and_build(self, app: models.App):
        package = mapper.package_snapshot(self.app_repo.latest_package(app.id))
        build = mapper.build_snapshot(self.app_repo.latest_build(app.id))
        return package, build

    def _scope_quotas(
        self, app: models.App, process_id: Optional[int]
    ) -> Tuple[Optional[QuotaDefinitionSnapshot], Optional[QuotaDefinitionSnapshot]]:
        # 쿼터 정의는 잠그지 않고 읽습니다. 동시에 바뀐 쿼터는 다음 저장 때 다시 검증됩니다.
        space = self.quota_repo.find_space(app.space_id)
        if space is None:
            return None, None

        organization = space.organization
        org_quota = None
        if organization is not None and organization.quota_definition is not None:
            org_quota = mapper.quota_snapshot(
                organization.quota_definition, QuotaScope.ORGANIZATION, organization.name,
                self.quota_repo.usage_by_organization(organization.id, exclude_process_id=process_id),
            )
        space_quota = None
        if space.space_quota_definition is not None:
            space_quota = mapper.quota_snapshot(
                space.space_quota_definition, QuotaScope.SPACE, space.name,
                self.quota_repo.usage_by_space(space.id, exclude_process_id=process_id),
            )
        return org_quota, space_quota

    def _validate(
        self, snapshot: ProcessSnapshot, previous: Optional[ProcessSnapshot], app: models.App, process_id: Optional[int]
    ) -> List[FieldViolation]:
        org_quota, space_quota = self._scope_quotas(app, process_id)
        package = mapper.package_snapshot(self.app_repo.latest_package(app.id))
        lifecycle = self._app_snapshot(app).lifecycle
        return quota_validator.validate(
            snapshot, org_quota, space_quota, self.config,
            previous=previous, lifecycle=lifecycle, package=package,
        )

    def _raise_on_violations(self, violations: List[FieldViolation]):
        if violations:
            error = ProcessValidationError(violations)
            logger.warning("%s", error)
            raise error

    def _usage_event_for_update(self, old: ProcessSnapshot, new: ProcessSnapshot, app: models.App) -> Optional[models.UsageEvent]:
        if old.state != new.state:
            return self._usage_event(new, old, app)
        if new.started and (old.instances != new.instances or old.memory != new.memory):
            return self._usage_event(new, old, app)
        return None

    def _usage_event(self, new: ProcessSnapshot, old: ProcessSnapshot, app: models.App) -> models.UsageEvent:
        app_snapshot = self._app_snapshot(app)
        droplet = lifecycle_adapter.actual_droplet(new, app_snapshot)
        buildpack_name = buildpack_guid = None
        if isinstance(app_snapshot.lifecycle, BuildpackLifecycle):
            buildpack_name = app_snapshot.lifecycle.custom_buildpack_url
            if droplet is not None:
                buildpack_name = buildpack_name or droplet.buildpack_receipt_name
                buildpack_guid = droplet.buildpack_receipt_guid
        return models.UsageEvent(
            process_guid=new.guid,
            process_type=new.type,
            app_guid=app.guid,
            app_name=app.name,
            state=new.state,
            previous_state=old.state,
            instances=new.instances,
            previous_instances=old.instances,
            memory=new.memory,
            previous_memory=old.memory,
            buildpack_name=buildpack_name,
            buildpack_guid=buildpack_guid,
        )

    def _apply(self, record: models.Process, snapshot: ProcessSnapshot):
        record.guid = snapshot.guid
        record.type = snapshot.type
        for field in UPDATABLE_FIELDS:
            setattr(record, field, getattr(snapshot, field))
        record.ports = list(snapshot.ports) if snapshot.ports is not None else None
        record.file_descriptors = snapshot.file_descriptors
        record.version = snapshot.version
        record.process_metadata = dict(snapshot.metadata)

    def _to_dict(self, record: models.Process) -> Dict[str, Any]:
        return {
            "guid": record.guid,
            "type": record.type,
            "instances": record.instances,
            "memory": record.memory,
            "disk_quota": record.disk_quota,
            "log_rate_limit": record.log_rate_limit,
            "state": record.state,
            "ports": list(record.ports) if record.ports is not None else None,
            "health_check_type": record.health_check_type,
            "health_check_http_endpoint": record.health_check_http_endpoint,
            "readiness_health_check_type": record.readiness_health_check_type,
            "readiness_health_check_http_endpoint": record.readiness_health_check_http_endpoint,
            "user": record.user,
            "command": record.command,
            "version": record.version,
        }
