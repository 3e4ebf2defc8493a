from abc import ABC, abstractmethod
from src.database import models

class IUsageEventRepository(ABC):
    @abstractmethod
    def add(self, event: models.UsageEvent) -> None:
        """
        사용량 이벤트를 세션에 추가합니다.

        커밋하지 않으므로, 함께 변경되는 프로세스의 저장/삭제와 같은 트랜잭션에 기록됩니다.
        """
        pass
