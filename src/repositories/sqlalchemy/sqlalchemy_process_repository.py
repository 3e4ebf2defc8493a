from typing import Optional
from sqlalchemy.orm import Session
from src.database import models
from src.repositories.interfaces import IProcessRepository

class SqlalchemyProcessRepository(IProcessRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, process_model: models.Process) -> models.Process:
        self.db.add(process_model)
        self.db.commit()
        self.db.refresh(process_model)
        return process_model

    def find_by_guid(self, guid: str) -> Optional[models.Process]:
        return self.db.query(models.Process).filter(models.Process.guid == guid).first()

    def find_by_guid_for_update(self, guid: str) -> Optional[models.Process]:
        return self.db.query(models.Process).filter(models.Process.guid == guid).with_for_update().first()

    def find_by_app_and_type(self, app_id: int, process_type: str) -> Optional[models.Process]:
        return self.db.query(models.Process).filter(
            models.Process.app_id == app_id,
            models.Process.type == process_type
        ).first()

    def save(self, process: models.Process) -> models.Process:
        try:
            self.db.add(process)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(process)
        return process

    def delete(self, process: models.Process) -> bool:
        if process:
            try:
                self.db.delete(process)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            return True
        return False
