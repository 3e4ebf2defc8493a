from sqlalchemy.orm import Session
from src.database import models
from src.repositories.interfaces import IUsageEventRepository

class SqlalchemyUsageEventRepository(IUsageEventRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def add(self, event: models.UsageEvent) -> None:
        self.db.add(event)
