from abc import ABC, abstractmethod
from typing import List, Optional
from src.database import models

class IAppRepository(ABC):
    @abstractmethod
    def find_by_guid(self, guid: str) -> Optional[models.App]:
        """guid로 특정 애플리케이션을 조회합니다."""
        pass

    @abstractmethod
    def find_droplet(self, guid: str) -> Optional[models.Droplet]:
        """guid로 droplet을 조회합니다."""
        pass

    @abstractmethod
    def find_revision(self, guid: str) -> Optional[models.Revision]:
        """guid로 revision을 조회합니다."""
        pass

    @abstractmethod
    def find_task(self, guid: str) -> Optional[models.Task]:
        """guid로 task를 조회합니다."""
        pass

    @abstractmethod
    def latest_package(self, app_id: int) -> Optional[models.Package]:
        """애플리케이션의 가장 최근에 생성된 패키지를 조회합니다."""
        pass

    @abstractmethod
    def latest_build(self, app_id: int) -> Optional[models.Build]:
        """애플리케이션의 가장 최근에 생성된 빌드를 조회합니다."""
        pass

    @abstractmethod
    def latest_droplet(self, app_id: int) -> Optional[models.Droplet]:
        """애플리케이션의 가장 최근에 생성된 droplet을 조회합니다 (빌드 없는 레거시 경우용)."""
        pass

    @abstractmethod
    def list_route_mappings(self, app_id: int, process_type: str) -> List[models.RouteMapping]:
        """특정 프로세스 타입에 연결된 라우트 매핑 목록을 조회합니다."""
        pass

    @abstractmethod
    def list_sidecars(self, app_id: int, process_type: str) -> List[models.Sidecar]:
        """특정 프로세스 타입에 붙은 사이드카 목록을 조회합니다."""
        pass
