from typing import Optional, Tuple

from src.domain.constants import BuildState, PackageState
from src.domain.models import BuildSnapshot, DropletSnapshot, PackageSnapshot, ProcessSnapshot


def classify(package: Optional[PackageSnapshot], build: Optional[BuildSnapshot]) -> str:
    """
    최신 패키지와 최신 빌드로부터 프로세스의 패키지 상태를 계산합니다.

    Args:
        package: 애플리케이션의 가장 최근 패키지. 없으면 None.
        build: 애플리케이션의 가장 최근 빌드. 없으면 None.

    Returns:
        PENDING, STAGING, STAGED, FAILED 중 하나.
        - 빌드가 없거나, 패키지 업로드가 끝나지 않았거나(checksum 없음),
          최신 빌드가 이전 패키지로 만든 것이면 PENDING.
        - 그 외에는 최신 빌드의 상태를 따릅니다.
    """
    if build is None or package is None or package.is_blank:
        return PackageState.PENDING

    # 새 패키지가 올라왔지만 아직 그 패키지로 빌드하지 않은 경우
    if build.package_guid is not None and build.package_guid != package.guid:
        return PackageState.PENDING

    if build.state == BuildState.FAILED:
        return PackageState.FAILED
    if build.state == BuildState.STAGING:
        return PackageState.STAGING
    if build.state == BuildState.STAGED:
        return PackageState.STAGED
    return PackageState.PENDING


def needs_staging(process: ProcessSnapshot, package: Optional[PackageSnapshot], build: Optional[BuildSnapshot]) -> bool:
    """
    프로세스를 실행하기 위해 새 스테이징이 필요한지 판단합니다.

    중지된 프로세스, 인스턴스가 0개인 프로세스, 업로드가 끝나지 않은 패키지는
    분류 결과와 상관없이 스테이징이 필요하지 않습니다.
    """
    if not process.started or process.instances < 1:
        return False
    if package is None or package.is_blank:
        return False
    return classify(package, build) == PackageState.PENDING


def staging_failure(
    build: Optional[BuildSnapshot], legacy_droplet: Optional[DropletSnapshot]
) -> Optional[Tuple[Optional[str], Optional[str]]]:
    """
    스테이징 실패 사유(error_id, error_description)를 반환합니다.

    빌드가 있으면 빌드의 사유를 우선하고, 빌드 없이 droplet만 있는 레거시 경우에만
    droplet의 사유를 사용합니다. 둘 다 없으면 None.
    """
    if build is not None:
        return build.error_id, build.error_description
    if legacy_droplet is not None:
        return legacy_droplet.error_id, legacy_droplet.error_description
    return None


def staging_task_id(build: Optional[BuildSnapshot], legacy_droplet: Optional[DropletSnapshot]) -> Optional[str]:
    """스테이징 작업 ID. 빌드 guid, 빌드가 없으면 droplet guid."""
    if build is not None:
        return build.guid
    if legacy_droplet is not None:
        return legacy_droplet.guid
    return None
