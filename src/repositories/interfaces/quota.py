from abc import ABC, abstractmethod
from typing import Dict, Optional
from src.database import models

class IQuotaRepository(ABC):
    @abstractmethod
    def find_space(self, space_id: int) -> Optional[models.Space]:
        """스페이스를 조직 및 쿼터 정의와 함께 조회합니다."""
        pass

    @abstractmethod
    def usage_by_organization(self, organization_id: int, exclude_process_id: Optional[int] = None) -> Dict[str, int]:
        """
        조직 안에서 실행 중(STARTED)인 프로세스들의 사용량을 합산합니다.

        Args:
            organization_id: 합산할 조직의 ID.
            exclude_process_id: 합산에서 제외할 프로세스 ID (검증 대상 자신).

        Returns:
            {'memory': 총 메모리(MB), 'instances': 총 인스턴스 수, 'log_rate': 총 로그 전송률}
        """
        pass

    @abstractmethod
    def usage_by_space(self, space_id: int, exclude_process_id: Optional[int] = None) -> Dict[str, int]:
        """스페이스 안에서 실행 중인 프로세스들의 사용량을 합산합니다. 반환 형식은 usage_by_organization과 같습니다."""
        pass
