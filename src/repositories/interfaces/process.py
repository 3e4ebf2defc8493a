from abc import ABC, abstractmethod
from typing import Optional
from src.database import models

class IProcessRepository(ABC):
    @abstractmethod
    def create(self, process_model: models.Process) -> models.Process:
        """새로운 프로세스를 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_guid(self, guid: str) -> Optional[models.Process]:
        """guid로 특정 프로세스를 조회합니다."""
        pass

    @abstractmethod
    def find_by_guid_for_update(self, guid: str) -> Optional[models.Process]:
        """
        guid로 프로세스를 조회하면서 행을 배타적으로 잠급니다 (SELECT ... FOR UPDATE).

        잠금은 다음 commit 또는 rollback까지 유지됩니다.
        """
        pass

    @abstractmethod
    def find_by_app_and_type(self, app_id: int, process_type: str) -> Optional[models.Process]:
        """애플리케이션 안에서 타입으로 특정 프로세스를 조회합니다."""
        pass

    @abstractmethod
    def save(self, process: models.Process) -> models.Process:
        """변경된 프로세스를 저장하고, 세션에 추가된 다른 객체도 함께 커밋합니다."""
        pass

    @abstractmethod
    def delete(self, process: models.Process) -> bool:
        """특정 프로세스를 데이터베이스에서 삭제합니다."""
        pass
