"""프로세스/빌드/라우트 매핑에서 공유하는 상수 정의."""

WEB_PROCESS_TYPE = "web"
DEFAULT_HTTP_PORT = 8080

# 라우트 매핑에 대상 포트가 지정되지 않았음을 나타내는 예약 값
NO_APP_PORT_SPECIFIED = -1

# 쿼터 정의에서 "무제한"을 의미하는 값 (log rate, instance 등)
UNLIMITED = -1

MIN_PORT = 1
MAX_PORT = 65535


class ProcessState:
    STARTED = "STARTED"
    STOPPED = "STOPPED"


class BuildState:
    STAGING = "STAGING"
    STAGED = "STAGED"
    FAILED = "FAILED"


class PackageState:
    PENDING = "PENDING"
    STAGING = "STAGING"
    STAGED = "STAGED"
    FAILED = "FAILED"


class HealthCheckType:
    PORT = "port"
    PROCESS = "process"
    HTTP = "http"
    NONE = "none"  # 레거시 값, process와 동일하게 취급

    ALL = (PORT, PROCESS, HTTP, NONE)


class ReadinessCheckType:
    PORT = "port"
    PROCESS = "process"
    HTTP = "http"

    ALL = (PORT, PROCESS, HTTP)


class WorkloadKind:
    LRP = "LRP"
    TASK = "TASK"


class QuotaScope:
    ORGANIZATION = "organization"
    SPACE = "space"
