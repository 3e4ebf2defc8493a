import logging
import uuid
from typing import Optional, Tuple

from src.domain.models import ProcessSnapshot

logger = logging.getLogger(__name__)

# 이 필드들이 바뀌면 실행 중인 인스턴스를 재배포해야 합니다.
# instances는 포함하지 않습니다 (스케일 변경은 재배포 없이 처리).
VERSIONED_FIELDS: Tuple[str, ...] = (
    "memory",
    "disk_quota",
    "health_check_type",
    "health_check_http_endpoint",
    "readiness_health_check_type",
    "readiness_health_check_http_endpoint",
    "ports",
    "state",
)


def new_version() -> str:
    return str(uuid.uuid4())


def changed_fields(old: ProcessSnapshot, new: ProcessSnapshot) -> Tuple[str, ...]:
    return tuple(f for f in VERSIONED_FIELDS if getattr(old, f) != getattr(new, f))


def bump_if_needed(old: Optional[ProcessSnapshot], new: ProcessSnapshot, skip: bool = False) -> str:
    """
    재배포가 필요한 변경이 있으면 새 버전 토큰을, 아니면 기존 토큰을 반환합니다.

    Args:
        old: 현재 저장된 스냅샷. 신규 생성이면 None (항상 새 토큰 발급).
        new: 저장하려는 스냅샷.
        skip: 관리 작업 등에서 추적 필드가 바뀌어도 토큰을 유지하고 싶을 때 True.

    Returns:
        저장할 버전 토큰.
    """
    if old is None:
        return new.version or new_version()

    changes = changed_fields(old, new)
    if not changes or skip:
        return old.version or new_version()

    version = new_version()
    logger.info("Process %s version bumped (%s): %s -> %s", new.guid, ", ".join(changes), old.version, version)
    return version
