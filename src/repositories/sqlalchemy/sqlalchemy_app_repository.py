from typing import List, Optional
from sqlalchemy.orm import Session
from src.database import models
from src.repositories.interfaces import IAppRepository

class SqlalchemyAppRepository(IAppRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def find_by_guid(self, guid: str) -> Optional[models.App]:
        return self.db.query(models.App).filter(models.App.guid == guid).first()

    def find_droplet(self, guid: str) -> Optional[models.Droplet]:
        if not guid:
            return None
        return self.db.query(models.Droplet).filter(models.Droplet.guid == guid).first()

    def find_revision(self, guid: str) -> Optional[models.Revision]:
        if not guid:
            return None
        return self.db.query(models.Revision).filter(models.Revision.guid == guid).first()

    def find_task(self, guid: str) -> Optional[models.Task]:
        return self.db.query(models.Task).filter(models.Task.guid == guid).first()

    def latest_package(self, app_id: int) -> Optional[models.Package]:
        return self.db.query(models.Package).filter(models.Package.app_id == app_id).order_by(
            models.Package.created_at.desc(), models.Package.id.desc()
        ).first()

    def latest_build(self, app_id: int) -> Optional[models.Build]:
        return self.db.query(models.Build).filter(models.Build.app_id == app_id).order_by(
            models.Build.created_at.desc(), models.Build.id.desc()
        ).first()

    def latest_droplet(self, app_id: int) -> Optional[models.Droplet]:
        return self.db.query(models.Droplet).filter(models.Droplet.app_id == app_id).order_by(
            models.Droplet.created_at.desc(), models.Droplet.id.desc()
        ).first()

    def list_route_mappings(self, app_id: int, process_type: str) -> List[models.RouteMapping]:
        return self.db.query(models.RouteMapping).filter(
            models.RouteMapping.app_id == app_id,
            models.RouteMapping.process_type == process_type
        ).all()

    def list_sidecars(self, app_id: int, process_type: str) -> List[models.Sidecar]:
        # process_types는 JSON 목록이므로 타입 필터링은 파이썬에서 합니다.
        sidecars = self.db.query(models.Sidecar).filter(models.Sidecar.app_id == app_id).order_by(models.Sidecar.id.asc()).all()
        return [s for s in sidecars if process_type in (s.process_types or [])]
