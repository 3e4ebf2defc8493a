from typing import Dict, Optional
from sqlalchemy.orm import Session, joinedload
from src.database import models
from src.repositories.interfaces import IQuotaRepository

class SqlalchemyQuotaRepository(IQuotaRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def find_space(self, space_id: int) -> Optional[models.Space]:
        return self.db.query(models.Space).options(
            joinedload(models.Space.organization).joinedload(models.Organization.quota_definition),
            joinedload(models.Space.space_quota_definition)
        ).filter(models.Space.id == space_id).first()

    def usage_by_organization(self, organization_id: int, exclude_process_id: Optional[int] = None) -> Dict[str, int]:
        query = self.db.query(models.Process).join(models.App).join(models.Space).filter(
            models.Space.organization_id == organization_id
        )
        return self._sum_usage(query, exclude_process_id)

    def usage_by_space(self, space_id: int, exclude_process_id: Optional[int] = None) -> Dict[str, int]:
        query = self.db.query(models.Process).join(models.App).filter(models.App.space_id == space_id)
        return self._sum_usage(query, exclude_process_id)

    def _sum_usage(self, query, exclude_process_id: Optional[int]) -> Dict[str, int]:
        query = query.filter(models.Process.state == "STARTED")
        if exclude_process_id is not None:
            query = query.filter(models.Process.id != exclude_process_id)

        usage = {"memory": 0, "instances": 0, "log_rate": 0}
        for process in query.all():
            usage["memory"] += process.memory * process.instances
            usage["instances"] += process.instances
            # 무제한(-1) 로그 전송률은 합산하지 않습니다.
            if process.log_rate_limit > 0:
                usage["log_rate"] += process.log_rate_limit * process.instances
        return usage
