from typing import Iterable, List, Optional, Sequence, Tuple

from src.domain.constants import DEFAULT_HTTP_PORT, NO_APP_PORT_SPECIFIED, PackageState
from src.domain.models import AppSnapshot, DropletSnapshot, ImageLifecycle, Lifecycle, ProcessSnapshot, RouteMappingSnapshot
from src.utils.execution_metadata import parse_execution_metadata, tcp_ports


def image_exposed_ports(app: AppSnapshot, droplet: Optional[DropletSnapshot], package_state: str) -> List[int]:
    """
    컨테이너 이미지가 노출하는 TCP 포트 목록을 droplet 메타데이터에서 읽습니다.

    buildpack 앱이거나, 아직 STAGED 상태가 아니거나, droplet이 없으면 빈 목록입니다.
    """
    if not app.is_image or droplet is None or package_state != PackageState.STAGED:
        return []
    return tcp_ports(parse_execution_metadata(droplet.execution_metadata))


def resolve_ports(
    process: ProcessSnapshot,
    lifecycle: Lifecycle,
    image_ports: Optional[Sequence[int]] = None,
    route_mappings: Iterable[RouteMappingSnapshot] = (),
    open_ports: bool = False,
) -> Optional[Tuple[int, ...]]:
    """
    프로세스가 노출해야 하는 포트를 계산합니다.

    open_ports=False(기본값)이면 저장되는 ports 속성을 계산합니다. 사용자가 지정한
    값이 있으면 그대로 반환하고, 없으면 None("라이프사이클 기본값을 따름")을 반환합니다.
    이미지 라이프사이클이라도 이미지 노출 포트나 8080을 ports에 채워 넣지 않습니다.

    open_ports=True이면 컨테이너에서 실제로 열어야 하는 포트 집합을 계산합니다.
    - buildpack: 지정 포트, 없으면 web 프로세스만 8080.
    - image: 지정 포트에, 포트 없는 라우트 매핑이 있거나 web 프로세스인데 포트가
      지정되지 않은 경우 이미지 노출 포트(없으면 8080)를 합칩니다.

    Args:
        process: 대상 프로세스 스냅샷.
        lifecycle: 애플리케이션의 라이프사이클 변형.
        image_ports: 이미지가 노출한 TCP 포트 (image_exposed_ports 결과).
        route_mappings: 애플리케이션의 라우트 매핑. 프로세스 타입이 다른 것은 무시합니다.
        open_ports: 컨테이너 측 포트 집합을 계산할지 여부.

    Returns:
        중복이 제거된 포트 튜플, 또는 None.
    """
    if not open_ports:
        return process.ports

    explicit = list(process.ports or ())

    if isinstance(lifecycle, ImageLifecycle):
        mappings = [m for m in route_mappings if m.process_type == process.type]
        has_mapping_without_port = any(m.app_port == NO_APP_PORT_SPECIFIED for m in mappings)
        needs_default_port = has_mapping_without_port or (process.ports is None and process.is_web)
        if needs_default_port:
            explicit += list(image_ports or [DEFAULT_HTTP_PORT])
        return _unique(explicit)

    if process.ports is not None:
        return _unique(explicit)
    return (DEFAULT_HTTP_PORT,) if process.is_web else ()


def open_ports(
    process: ProcessSnapshot,
    lifecycle: Lifecycle,
    image_ports: Optional[Sequence[int]] = None,
    route_mappings: Iterable[RouteMappingSnapshot] = (),
) -> Tuple[int, ...]:
    """컨테이너에서 열어야 하는 포트 집합. resolve_ports(open_ports=True)의 축약형."""
    return resolve_ports(process, lifecycle, image_ports, route_mappings, open_ports=True)


def _unique(ports: Iterable[int]) -> Tuple[int, ...]:
    seen = []
    for port in ports:
        if port not in seen:
            seen.append(port)
    return tuple(seen)
