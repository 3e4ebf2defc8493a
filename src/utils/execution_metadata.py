# src/utils/execution_metadata.py
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

TCP_PROTOCOL = "tcp"


@dataclass(frozen=True)
class ExposedPort:
    port: int
    protocol: str


@dataclass(frozen=True)
class ExecutionMetadata:
    """droplet의 execution metadata를 파싱한 결과. 모든 필드는 비어 있을 수 있습니다."""
    entrypoint: Tuple[str, ...] = ()
    cmd: Tuple[str, ...] = ()
    user: Optional[str] = None
    ports: Tuple[ExposedPort, ...] = ()
    process_types: Dict[str, str] = field(default_factory=dict)


EMPTY_METADATA = ExecutionMetadata()


def parse_execution_metadata(raw: Union[str, Dict[str, Any], None]) -> ExecutionMetadata:
    """
    빌드 파이프라인이 남긴 execution metadata 문서를 파싱합니다.

    문서는 신뢰할 수 없는 입력으로 취급합니다. 비어 있거나, JSON이 아니거나,
    필드 타입이 예상과 다르면 예외를 던지지 않고 해당 필드를 비워 둔 채 반환합니다.

    Args:
        raw: JSON 문자열, 이미 디코딩된 dict, 또는 None.

    Returns:
        파싱된 ExecutionMetadata. 해석할 수 없는 입력이면 EMPTY_METADATA.
    """
    document = _decode(raw)
    if document is None:
        return EMPTY_METADATA

    return ExecutionMetadata(
        entrypoint=_string_list(_lookup(document, "entrypoint")),
        cmd=_string_list(_lookup(document, "cmd")),
        user=_string_or_none(_lookup(document, "user")),
        ports=_exposed_ports(_lookup(document, "ports")),
        process_types=_process_types(_lookup(document, "process_types")),
    )


def tcp_ports(metadata: ExecutionMetadata) -> List[int]:
    """TCP 프로토콜 포트만 오름차순으로 반환합니다. 중복은 그대로 둡니다."""
    return sorted(p.port for p in metadata.ports if p.protocol.lower() == TCP_PROTOCOL)


def _decode(raw) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        document = json.loads(raw)
    # 깊게 중첩된 문서는 디코더에서 RecursionError를 냅니다.
    except (ValueError, RecursionError):
        logger.debug("Ignoring malformed execution metadata: %.64r", raw)
        return None
    return document if isinstance(document, dict) else None


def _lookup(document: Dict[str, Any], key: str):
    # 이미지 메타데이터는 "Port", "Protocol"처럼 대문자로 시작하는 키를 쓰기도 합니다.
    if key in document:
        return document[key]
    return document.get(key.capitalize())


def _string_list(value) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str))


def _string_or_none(value) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _exposed_ports(value) -> Tuple[ExposedPort, ...]:
    if not isinstance(value, list):
        return ()
    ports = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        port = _lookup(entry, "port")
        protocol = _lookup(entry, "protocol")
        # bool은 int의 하위 타입이므로 명시적으로 제외
        if isinstance(port, bool) or not isinstance(port, int) or not isinstance(protocol, str):
            continue
        ports.append(ExposedPort(port=port, protocol=protocol))
    return tuple(ports)


def _process_types(value) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}
