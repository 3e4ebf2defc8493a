from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatformConfig(BaseSettings):
    """
    플랫폼 전역 기본값과 상한값을 담는 불변 설정 객체입니다.

    환경 변수(PLATFORM_ 접두사) 또는 .env 파일에서 값을 읽으며,
    리졸버/검증기 함수에는 항상 명시적인 인자로 전달됩니다.
    """
    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_", env_file=".env", env_file_encoding="utf-8", frozen=True
    )

    database_url: str = "sqlite:///paas_metadata.db"
    log_level: str = "INFO"

    # 프로세스 생성 시 값이 주어지지 않으면 사용하는 기본값
    default_app_memory: int = 1024
    default_app_disk_in_mb: int = 1024
    default_app_log_rate_limit_in_bytes_per_second: int = 1_048_576
    instance_file_descriptor_limit: int = 16_384

    # 검증 상한/하한
    minimum_app_memory: int = 1
    maximum_app_disk_in_mb: int = 2048
    maximum_health_check_timeout: int = 180
    max_app_ports: int = 10

    default_process_user: str = "vcap"
    default_image_user: str = "root"
    additional_allowed_process_users: List[str] = []

    image_lifecycle_enabled: bool = True


@lru_cache
def get_config() -> PlatformConfig:
    """조립 지점(세션 팩토리, db_init)에서만 사용합니다."""
    return PlatformConfig()
